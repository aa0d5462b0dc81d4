from fastapi import APIRouter

from app.core.config import settings
from app.services.rubric import RUBRIC_VERSION

router = APIRouter()


@router.get("/", summary="Health check")
async def health_root():
    return {"status": "ok", "model": settings.OPENAI_MODEL, "rubric_version": RUBRIC_VERSION}
