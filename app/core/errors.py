# app/core/errors.py
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from loguru import logger
from starlette.datastructures import Headers
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.core.config import settings


class GatewayError(Exception):
    """Base for every failure reported to the caller as ``{"error": message}``."""

    status_code: int = 500
    message: str = "Internal error while analyzing the image."

    def __init__(self, message: Optional[str] = None, headers: Optional[Dict[str, str]] = None):
        if message is not None:
            self.message = message
        self.headers = headers
        super().__init__(self.message)


class InvalidRequest(GatewayError):
    status_code = 400
    message = "Missing imageBase64 (base64 data URL of the image)."


class PayloadTooLarge(GatewayError):
    status_code = 400
    message = "The image is too large."


class RateLimited(GatewayError):
    status_code = 429
    message = "Too many analysis requests, please try again later."

    def __init__(self, retry_after: int):
        super().__init__(headers={"Retry-After": str(retry_after)})
        self.retry_after = retry_after


class UpstreamFormatError(GatewayError):
    message = "Unexpected response format from the model."


class UpstreamParseError(GatewayError):
    message = "Could not interpret the AI response."


class UpstreamSchemaError(GatewayError):
    message = "The AI response does not match the evaluation schema."


class InternalError(GatewayError):
    pass


def error_response(status_code: int, message: str, headers: Optional[Dict[str, str]] = None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message}, headers=headers)


BODY_TOO_LARGE = "Request body too large."


class BodySizeLimitMiddleware:
    """
    Rejects request bodies over ``max_bytes`` with 413.

    A declared Content-Length is checked up front; chunked bodies are counted
    as they are received and the read fails once the total passes the limit.
    """

    def __init__(self, app: ASGIApp, max_bytes: int) -> None:
        self.app = app
        self.max_bytes = max_bytes

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        length = Headers(scope=scope).get("content-length")
        if length is not None and length.isdigit() and int(length) > self.max_bytes:
            logger.warning("Rejected body of {} bytes on {}", length, scope["path"])
            await error_response(413, BODY_TOO_LARGE)(scope, receive, send)
            return

        received = 0

        async def limited_receive() -> Message:
            nonlocal received
            message = await receive()
            if message["type"] == "http.request":
                received += len(message.get("body", b""))
                if received > self.max_bytes:
                    logger.warning("Rejected streamed body over {} bytes on {}", self.max_bytes, scope["path"])
                    # fastapi.HTTPException passes through the body reader unchanged
                    raise HTTPException(status_code=413, detail=BODY_TOO_LARGE)
            return message

        await self.app(scope, limited_receive, send)


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(GatewayError)
    async def gateway_exc_handler(request: Request, exc: GatewayError):
        return error_response(exc.status_code, exc.message, exc.headers)

    @app.exception_handler(StarletteHTTPException)
    async def http_exc_handler(request: Request, exc: StarletteHTTPException):
        # same body shape as the gateway errors
        return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exc_handler(request: Request, exc: RequestValidationError):
        # details stay in the log
        logger.info("Rejected request body on {}: {}", request.url.path, exc.errors())
        return error_response(InvalidRequest.status_code, InvalidRequest.message)

    app.add_middleware(BodySizeLimitMiddleware, max_bytes=settings.MAX_BODY_BYTES)

    @app.middleware("http")
    async def add_security_headers(request: Request, call_next):
        resp = await call_next(request)
        resp.headers["X-Content-Type-Options"] = "nosniff"
        resp.headers["X-Frame-Options"] = "DENY"
        return resp
