# app/api/v1/router.py
from fastapi import APIRouter

from .endpoints import health

# === API v1 router (ops) ===
api_router = APIRouter()

# system health check (model + rubric version)
api_router.include_router(health.router, prefix="/health", tags=["health"])
