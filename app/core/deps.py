# app/core/deps.py
from fastapi import Request
from loguru import logger

from app.core.errors import InternalError
from app.services.evaluator import PhotoEvaluator


def get_evaluator(request: Request) -> PhotoEvaluator:
    """
    The evaluator is built once in the lifespan and shared by every request.
    Tests swap it through ``app.dependency_overrides``.
    """
    evaluator = getattr(request.app.state, "evaluator", None)
    if evaluator is None:
        logger.error("PhotoEvaluator is not configured (lifespan did not run?)")
        raise InternalError()
    return evaluator


def client_ip(request: Request) -> str:
    # first hop of X-Forwarded-For when running behind a proxy
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"
