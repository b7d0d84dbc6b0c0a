"""API middleware: CORS, request logging, and error handling.

Starlette runs middleware last-added-first, so with the order used in
``main.create_app``:

    Client -> RequestLogging -> ErrorHandling -> route handler

RequestLoggingMiddleware therefore sees the final status code, including
the ones ErrorHandlingMiddleware produced.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from ragchat.api.schemas import ErrorResponse
from ragchat.utils.errors import RagChatError, ValidationError
from ragchat.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware; all origins are allowed unless a list is given."""
    origins = allowed_origins or ["*"]
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = response.status_code if response else 500
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=status_code,
                duration_ms=duration_ms,
            )


def error_status(exc: RagChatError) -> int:
    """HTTP status for an application error: 400 for bad input, else 500."""
    return 400 if isinstance(exc, ValidationError) else 500


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Turn ``RagChatError`` subclasses into ``{success: false, error}`` JSON.

    Stack traces stay in the server log; the client only sees the message.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except RagChatError as exc:
            status_code = error_status(exc)
            log = _logger.warning if status_code < 500 else _logger.error
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
                status=status_code,
            )
            body = ErrorResponse(error=exc.message)
            return JSONResponse(status_code=status_code, content=body.model_dump())


async def _request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        messages.append(f"{location}: {error.get('msg')}" if location else str(error.get("msg")))
    message = "; ".join(messages) or "Invalid request"
    _logger.warning("request_validation_error", path=str(request.url.path), message=message)
    return JSONResponse(status_code=400, content=ErrorResponse(error=message).model_dump())


def register_exception_handlers(app: FastAPI) -> None:
    """Report malformed request bodies in the same ``{success, error}`` shape, as 400."""
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
