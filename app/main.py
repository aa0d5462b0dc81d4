# app/main.py
from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from openai import OpenAIError

from app.core.config import settings
from app.core.logging import setup_logging
from app.core.errors import register_error_handlers
from app.api.v1.router import api_router
from app.api.v1.endpoints.analyze import router as analyze_router
from app.services.evaluator import PhotoEvaluator
from app.services.rate_limit import close_redis

# Monitoring
import sentry_sdk
from prometheus_fastapi_instrumentator import Instrumentator

logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """
    Build the single PhotoEvaluator (and its AsyncOpenAI client) at startup,
    close it on shutdown.
    """
    evaluator: Optional[PhotoEvaluator] = None
    try:
        evaluator = PhotoEvaluator.from_settings(settings)
    except OpenAIError as e:
        # stay up: /readyz reports false and /analyze answers 500
        logger.error("PhotoEvaluator not configured: {}", e)
    else:
        logger.info("PhotoEvaluator ready (model={}, validate_result={})",
                    evaluator.model, evaluator.validate_result)
    app.state.evaluator = evaluator
    try:
        yield
    finally:
        app.state.evaluator = None
        if evaluator is not None:
            await evaluator.client.close()
            logger.info("PhotoEvaluator closed")
        await close_redis()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        lifespan=lifespan,
    )
    app.state.evaluator = None

    # CORS (cookies are never used, so no credentials)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---- Sentry (skipped when SENTRY_DSN is unset) ----
    if settings.SENTRY_DSN:
        sentry_sdk.init(
            dsn=settings.SENTRY_DSN,
            traces_sample_rate=settings.SENTRY_TRACES_SAMPLE_RATE,
            environment=settings.SENTRY_ENV,
        )

    # ---- Prometheus /metrics ----
    Instrumentator().instrument(app).expose(app, endpoint="/metrics", include_in_schema=False)

    # uniform {"error": ...} bodies, body size limit, security headers
    register_error_handlers(app)

    # === Routes ===
    # 1) POST /analyze at the root
    app.include_router(analyze_router, tags=["analyze"])
    # 2) v1 ops routes
    app.include_router(api_router, prefix=settings.API_V1_PREFIX)

    @app.get("/", summary="Root")
    async def root():
        return {"app": settings.APP_NAME, "env": settings.ENV}

    @app.get("/healthz", tags=["ops"])
    async def healthz():
        return {"ok": True}

    @app.get("/readyz", tags=["ops"])
    async def readyz():
        return {"ready": app.state.evaluator is not None}

    logger.info("Application initialized (env={})", settings.ENV)
    return app


# Uvicorn entry point
app = create_app()
