"""Document metadata models.

One :class:`Document` row exists per ingested file, URL, or chat-added
resource.  The row holds a short preview of the content; the full text
only ever lives in the vector index as chunks.
"""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ragchat.utils.errors import ValidationError


class SourceFormat(str, Enum):  # noqa: UP042
    """Closed set of formats the extractor understands.

    Values double as the ``type`` tag stored on each document row.
    """

    PDF = "pdf"
    DOCX = "docx"
    TEXT = "text"
    HTML = "html"
    JSON = "json"

    @classmethod
    def from_content_type(cls, content_type: str | None) -> SourceFormat:
        """Map a MIME type (parameters allowed) to a format, defaulting to TEXT."""
        mime = (content_type or "").split(";", 1)[0].strip().lower()
        return _CONTENT_TYPE_FORMATS.get(mime, cls.TEXT)


_CONTENT_TYPE_FORMATS: dict[str, SourceFormat] = {
    "application/pdf": SourceFormat.PDF,
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document": SourceFormat.DOCX,
    "text/plain": SourceFormat.TEXT,
    "text/html": SourceFormat.HTML,
    "application/json": SourceFormat.JSON,
}


class Document(BaseModel):
    """A persisted document row from the ``documents`` table."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Unique identifier assigned by the store.")
    filename: str = Field(description="Display name of the document.")
    type: str = Field(default=SourceFormat.TEXT.value, description="Source format tag.")
    content: str | None = Field(default=None, description="Content preview, not the full text.")
    url: str | None = Field(default=None, description="Origin URL for web ingestion.")
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @field_validator("id", mode="before")
    @classmethod
    def _stringify_id(cls, value: Any) -> str:
        # asyncpg returns uuid.UUID for UUID columns.
        return str(value)

    @classmethod
    def from_row(cls, row: Any) -> Document:
        """Build a Document from an asyncpg Record or a Supabase row dict."""
        return cls.model_validate(dict(row))


class DocumentCreate(BaseModel):
    """Validated input for creating a document row."""

    model_config = ConfigDict(frozen=True)

    filename: str
    type: str = SourceFormat.TEXT.value
    content: str | None = None
    url: str | None = None

    def model_post_init(self, __context: Any) -> None:
        if not self.filename or not self.filename.strip():
            raise ValidationError("Missing required parameter: filename")
        if not self.type or not self.type.strip():
            raise ValidationError("Missing required parameter: type")


class DeleteResult(BaseModel):
    """Outcome of a delete-by-id call.

    Deleting an id that does not exist is a success with ``deleted == 0``.
    """

    model_config = ConfigDict(frozen=True)

    success: bool
    deleted: int = 0
    error: str | None = None


class InitResult(BaseModel):
    """Outcome of initialising the metadata store."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: str
