"""FastAPI routes for ragChat.

Service dependencies are resolved from ``app.state`` via FastAPI's
``Depends`` using the ``Annotated`` pattern.

# ─── API ROUTE MAP ─────────────────────────────────────────────────────
#
# Endpoint        Method  Description
# ─────────────────────────────────────────────────────────────────────
# /chat           POST    Streamed tool-using chat (text/plain)
# /db             GET     ?action=init | documents | delete&id=
# /db             POST    Insert a document row directly
# /upload         POST    Multipart file -> extract, record, vectorise
# /process-url    POST    Fetch a URL -> extract, record, vectorise
# /health         GET     Liveness plus configured providers
# ──────────────────────────────────────────────────────────────────────

Application errors raised here (``ValidationError`` and friends) are
turned into ``{success: false, error}`` bodies by
:class:`~ragchat.api.middleware.ErrorHandlingMiddleware`.
"""

from __future__ import annotations

from typing import Annotated, Any

import structlog
from fastapi import APIRouter, Depends, File, Query, Request, UploadFile
from fastapi.responses import JSONResponse, StreamingResponse

from ragchat import __version__
from ragchat.api.schemas import (
    ChatRequest,
    DbCreateRequest,
    DeleteResponse,
    DocumentListResponse,
    DocumentResponse,
    ErrorResponse,
    HealthResponse,
    InitResponse,
    ProcessUrlRequest,
    ProcessUrlResponse,
    UploadResponse,
)
from ragchat.models.document import DocumentCreate
from ragchat.utils.errors import ConfigurationError, ValidationError
from ragchat.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter()

_UPLOAD_CHUNK_SIZE = 64 * 1024
_DEFAULT_MAX_UPLOAD_MB = 20

UPLOAD_OK_MESSAGE = "File fully processed"
UPLOAD_DEGRADED_MESSAGE = "File saved but not vectorized for search"
URL_OK_MESSAGE = "URL processed successfully"
URL_DEGRADED_MESSAGE = "URL content saved but not vectorized for search"


# ---------------------------------------------------------------------------
# Dependency helpers
# ---------------------------------------------------------------------------


def _require(request: Request, name: str) -> Any:
    service = getattr(request.app.state, name, None)
    if service is None:
        raise ConfigurationError(message=f"{name} is not configured")
    return service


def _get_chat_service(request: Request) -> Any:
    return _require(request, "chat_service")


def _get_document_store(request: Request) -> Any:
    return _require(request, "document_store")


def _get_ingestion_service(request: Request) -> Any:
    return _require(request, "ingestion_service")


def _get_settings(request: Request) -> Any:
    return getattr(request.app.state, "settings", None)


ChatServiceDep = Annotated[Any, Depends(_get_chat_service)]
DocumentStoreDep = Annotated[Any, Depends(_get_document_store)]
IngestionServiceDep = Annotated[Any, Depends(_get_ingestion_service)]
SettingsDep = Annotated[Any, Depends(_get_settings)]


# ---------------------------------------------------------------------------
# /chat
# ---------------------------------------------------------------------------


@router.post(
    "/chat",
    response_class=StreamingResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Chat with the knowledge base",
)
async def chat(body: ChatRequest, chat_service: ChatServiceDep) -> StreamingResponse:
    """Stream the assistant's reply as plain text."""
    return StreamingResponse(
        chat_service.stream_reply(body.messages),
        media_type="text/plain; charset=utf-8",
    )


# ---------------------------------------------------------------------------
# /db
# ---------------------------------------------------------------------------


@router.get(
    "/db",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Initialise the store, list documents, or delete one",
)
async def db_get(
    document_store: DocumentStoreDep,
    action: Annotated[str, Query()] = "init",
    id: Annotated[str | None, Query()] = None,  # noqa: A002
) -> JSONResponse:
    if action == "init":
        result = await document_store.initialize()
        return JSONResponse(InitResponse(success=result.success, message=result.message).model_dump())

    if action == "documents":
        documents = await document_store.list_documents()
        return JSONResponse(DocumentListResponse(data=documents).model_dump(mode="json"))

    if action == "delete":
        if not id:
            raise ValidationError("Missing document id parameter")
        result = await document_store.delete_document(id)
        body = DeleteResponse(success=result.success, deleted=result.deleted, error=result.error)
        return JSONResponse(body.model_dump(exclude_none=True))

    raise ValidationError(f"Unknown action: {action}")


@router.post(
    "/db",
    response_model=DocumentResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Add a document row",
)
async def db_post(body: DbCreateRequest, document_store: DocumentStoreDep) -> DocumentResponse:
    if not body.filename.strip() or not body.type.strip():
        raise ValidationError("Missing required parameters (filename, type)")
    document = await document_store.create_document(
        DocumentCreate(filename=body.filename, type=body.type, content=body.content, url=body.url)
    )
    return DocumentResponse(data=document)


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


@router.post(
    "/upload",
    response_model=UploadResponse,
    responses={
        400: {"model": ErrorResponse},
        413: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
    },
    summary="Upload a document",
)
async def upload(
    ingestion_service: IngestionServiceDep,
    settings: SettingsDep,
    file: Annotated[UploadFile | None, File()] = None,
) -> UploadResponse | JSONResponse:
    """Extract, record and vectorise an uploaded file."""
    if file is None or not file.filename:
        raise ValidationError("No file selected")

    max_mb = getattr(settings, "max_upload_mb", _DEFAULT_MAX_UPLOAD_MB) or _DEFAULT_MAX_UPLOAD_MB
    max_bytes = max_mb * 1024 * 1024

    # Read in 64 KB pieces so an oversized upload is rejected early.
    parts: list[bytes] = []
    total_size = 0
    while True:
        piece = await file.read(_UPLOAD_CHUNK_SIZE)
        if not piece:
            break
        total_size += len(piece)
        if total_size > max_bytes:
            _logger.warning("upload_too_large", file_name=file.filename, limit_mb=max_mb)
            return JSONResponse(
                status_code=413,
                content=ErrorResponse(error=f"File too large: maximum is {max_mb} MB").model_dump(),
            )
        parts.append(piece)
    data = b"".join(parts)

    await ingestion_service.ensure_vector_index()
    result = await ingestion_service.ingest_upload(file.filename, file.content_type, data)
    return UploadResponse(
        fileName=result.document.filename,
        documentId=result.document.id,
        vectorized=result.vectorized,
        message=UPLOAD_OK_MESSAGE if result.vectorized else UPLOAD_DEGRADED_MESSAGE,
        warning=result.warning,
    )


@router.post(
    "/process-url",
    response_model=ProcessUrlResponse,
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    summary="Ingest a document from a URL",
)
async def process_url(body: ProcessUrlRequest, ingestion_service: IngestionServiceDep) -> ProcessUrlResponse:
    if not body.url.strip():
        raise ValidationError("No URL provided")
    if not body.fileName.strip():
        raise ValidationError("No file name provided")

    await ingestion_service.ensure_vector_index()
    result = await ingestion_service.ingest_url(body.url, body.fileName)
    return ProcessUrlResponse(
        fileName=body.fileName,
        url=body.url,
        documentId=result.document.id,
        vectorized=result.vectorized,
        message=URL_OK_MESSAGE if result.vectorized else URL_DEGRADED_MESSAGE,
        warning=result.warning,
    )


# ---------------------------------------------------------------------------
# /health
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Health check")
async def health(request: Request) -> HealthResponse:
    providers: dict[str, Any] = {}
    for name in ("embedding_provider", "vector_store", "chat_provider"):
        provider = getattr(request.app.state, name, None)
        if provider is not None:
            providers[name] = {
                "name": provider.get_provider_name(),
                "available": provider.is_available(),
            }
    resolver = getattr(request.app.state, "connection_resolver", None)
    if resolver is not None:
        providers["metadata_store"] = {
            "state": resolver.state.value,
            "available": resolver.is_configured(),
        }
    return HealthResponse(version=__version__, providers=providers)
