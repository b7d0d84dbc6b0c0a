"""Pydantic request/response schemas for the ragChat API.

Every JSON body carries a ``success`` flag; failures add an ``error``
string.  Document rows are serialised with the column names of the
``documents`` table (``created_at``, ``updated_at``).
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from ragchat.models.chat import ChatMessage
from ragchat.models.document import Document


class ErrorResponse(BaseModel):
    """Body of every non-2xx JSON response."""

    success: bool = False
    error: str


# ---------------------------------------------------------------------------
# /chat
# ---------------------------------------------------------------------------


class ChatRequest(BaseModel):
    messages: list[ChatMessage] = Field(min_length=1, description="Conversation so far, oldest first.")


# ---------------------------------------------------------------------------
# /db
# ---------------------------------------------------------------------------


class DbCreateRequest(BaseModel):
    """Body of ``POST /db``; blank ``filename`` or ``type`` is rejected with 400."""

    filename: str = ""
    type: str = ""
    content: str | None = None
    url: str | None = None


class InitResponse(BaseModel):
    success: bool
    message: str


class DocumentListResponse(BaseModel):
    success: bool = True
    data: list[Document] = Field(default_factory=list)


class DocumentResponse(BaseModel):
    success: bool = True
    data: Document


class DeleteResponse(BaseModel):
    success: bool
    deleted: int = 0
    error: str | None = None


# ---------------------------------------------------------------------------
# Ingestion
# ---------------------------------------------------------------------------


class UploadResponse(BaseModel):
    """Result of ``POST /upload``.

    ``vectorized`` is ``False`` when the file was saved but could not be
    made searchable; ``warning`` then says why.
    """

    success: bool = True
    fileName: str  # noqa: N815
    documentId: str  # noqa: N815
    vectorized: bool
    message: str
    warning: str | None = None


class ProcessUrlRequest(BaseModel):
    url: str = ""
    fileName: str = ""  # noqa: N815


class ProcessUrlResponse(BaseModel):
    success: bool = True
    fileName: str  # noqa: N815
    url: str
    documentId: str  # noqa: N815
    vectorized: bool
    message: str
    warning: str | None = None


# ---------------------------------------------------------------------------
# Health
# ---------------------------------------------------------------------------


class HealthResponse(BaseModel):
    status: str = "ok"
    version: str
    providers: dict[str, Any] = Field(default_factory=dict)
