"""ragChat API layer: routes, schemas, and middleware."""

from ragchat.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    register_exception_handlers,
)
from ragchat.api.routes import router
from ragchat.api.schemas import (
    ChatRequest,
    DbCreateRequest,
    ErrorResponse,
    HealthResponse,
    ProcessUrlRequest,
    ProcessUrlResponse,
    UploadResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "register_exception_handlers",
    "router",
    "ChatRequest",
    "DbCreateRequest",
    "ErrorResponse",
    "HealthResponse",
    "ProcessUrlRequest",
    "ProcessUrlResponse",
    "UploadResponse",
]
