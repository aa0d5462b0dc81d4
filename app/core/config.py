# app/core/config.py
from __future__ import annotations

import os
from functools import lru_cache
from typing import Annotated, Any, List, Literal, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    # === App Info ===
    APP_NAME: str = "Photo Critic API"
    API_V1_PREFIX: str = "/api/v1"
    ENV: str = os.getenv("ENV", "dev")
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # === Server ===
    HOST: str = "0.0.0.0"
    PORT: int = 4000

    # === CORS ===
    # open by default: the browser client may be served from anywhere
    CORS_ORIGINS: Annotated[List[str], NoDecode] = ["*"]

    @field_validator("CORS_ORIGINS", mode="before")
    @classmethod
    def _parse_cors(cls, v: Any) -> List[str]:
        if isinstance(v, str):
            s = v.strip()
            if s.startswith("["):
                import json
                return [x.strip() for x in json.loads(s)]
            return [x.strip() for x in s.split(",") if x.strip()]
        return v

    # === Request limits ===
    MAX_IMAGE_CHARS: int = 4_000_000
    MAX_BODY_BYTES: int = 4 * 1024 * 1024

    # === OpenAI ===
    OPENAI_API_KEY: Optional[str] = None
    OPENAI_MODEL: str = "gpt-4.1-mini"
    OPENAI_IMAGE_DETAIL: Literal["auto", "low", "high"] = "auto"

    # Local structural check of the model output before it is returned.
    VALIDATE_RESULT: bool = False

    # === Rate limit / Redis ===
    REDIS_URL: str = "redis://localhost:6379/0"
    RATE_LIMIT_WINDOW_SEC: int = 600
    RATE_LIMIT_MAX_PER_IP: int = 30
    RATE_LIMIT_ENABLED: bool = False

    # === Observability (Sentry) ===
    SENTRY_DSN: Optional[str] = None
    SENTRY_ENV: str = os.getenv("SENTRY_ENV", "dev")
    SENTRY_TRACES_SAMPLE_RATE: float = 0.1

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache
def get_settings() -> Settings:
    """Under pytest the rate limit is always off so Redis is never touched."""
    s = Settings()
    if s.ENV == "test" or os.getenv("PYTEST_CURRENT_TEST"):
        s.RATE_LIMIT_ENABLED = False
    return s


settings = get_settings()
