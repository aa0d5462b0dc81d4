# app/api/v1/endpoints/analyze.py
from typing import Any, Dict

from fastapi import APIRouter, Depends, Request
from loguru import logger

from app.core.deps import client_ip, get_evaluator
from app.core.errors import GatewayError, InternalError, RateLimited
from app.schemas.analysis import AnalysisRequest, ErrorOut, EvaluationResult
from app.services.evaluator import PhotoEvaluator
from app.services.rate_limit import check_limit_and_hit

router = APIRouter()

_ERRORS = {
    400: {"model": ErrorOut, "description": "Missing, malformed or oversized imageBase64"},
    413: {"model": ErrorOut, "description": "Request body too large"},
    429: {"model": ErrorOut, "description": "Rate limited"},
    500: {"model": ErrorOut, "description": "Model or internal failure"},
}


@router.post(
    "/analyze",
    summary="Evaluate a photograph",
    responses={200: {"model": EvaluationResult}, **_ERRORS},
)
async def analyze(
    payload: AnalysisRequest,
    request: Request,
    evaluator: PhotoEvaluator = Depends(get_evaluator),
) -> Dict[str, Any]:
    """
    Send the image and the fixed rubric to the model, return its JSON verbatim.
    """
    try:
        allowed, retry_after = await check_limit_and_hit(client_ip(request))
        if not allowed:
            raise RateLimited(retry_after)

        return await evaluator.evaluate(payload.imageBase64)
    except GatewayError:
        raise
    except Exception:
        logger.exception("Error in /analyze")
        raise InternalError()
