"""RAG pipeline data models.

Defines Pydantic v2 models for document chunks, retrieval results, and the
two-phase ingestion outcome.  All models use frozen config.

Ingestion runs in two phases:

    1. PRIMARY: the document row is written to the metadata store.  Any
       failure here aborts the call.
    2. SECONDARY: the text is chunked, embedded and upserted into the vector
       index.  A failure here is recorded as ``VectorizationDegraded`` and the
       primary result is still returned.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from ragchat.models.document import Document


# ---------------------------------------------------------------------------
# DocumentChunk: one embeddable span of a document.
# ---------------------------------------------------------------------------
class DocumentChunk(BaseModel):
    """A contiguous span of normalised document text plus positional metadata.

    Chunks only exist for the duration of an ingestion call; the vector
    index keeps the text and metadata, the relational store never sees them.
    """

    model_config = ConfigDict(frozen=True)

    chunk_id: str = Field(description="Unique identifier (UUID) for this chunk.")
    text: str = Field(description="The chunk's textual content.")
    file_name: str = Field(description="Filename of the parent document.")
    chunk_index: int = Field(ge=0, description="Position of this chunk in the document.")
    total_chunks: int = Field(ge=1, description="Number of chunks the document produced.")

    def to_vector_metadata(self) -> dict[str, Any]:
        """Return the metadata dict stored alongside the vector."""
        return {
            "text": self.text,
            "fileName": self.file_name,
            "chunkIndex": self.chunk_index,
            "totalChunks": self.total_chunks,
        }

    @classmethod
    def from_vector_metadata(cls, chunk_id: str, metadata: dict[str, Any]) -> DocumentChunk:
        """Rebuild a chunk from metadata written by :meth:`to_vector_metadata`."""
        total = int(metadata.get("totalChunks", 1) or 1)
        return cls(
            chunk_id=chunk_id,
            text=str(metadata.get("text", "")),
            file_name=str(metadata.get("fileName", "")),
            chunk_index=int(metadata.get("chunkIndex", 0) or 0),
            total_chunks=max(total, 1),
        )


# ---------------------------------------------------------------------------
# RetrievedChunk: a search result from the vector store.
# ---------------------------------------------------------------------------
class RetrievedChunk(BaseModel):
    """A chunk returned from a vector-store query with the store's own score."""

    model_config = ConfigDict(frozen=True)

    chunk: DocumentChunk
    similarity_score: float = Field(
        default=0.0,
        ge=0.0,
        le=1.0,
        description="Similarity between the query and this chunk as reported by the store.",
    )


class RelevantContent(BaseModel):
    """One entry of a ``getInformation`` tool result.

    ``relevance`` is a display-only value derived from rank position
    (``1.0 - 0.1 * rank``).  ``similarity`` carries the store's real score.
    """

    model_config = ConfigDict(frozen=True)

    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    relevance: float
    similarity: float = 0.0


# ---------------------------------------------------------------------------
# Two-phase ingestion outcome
# ---------------------------------------------------------------------------
class VectorizationOk(BaseModel):
    """The secondary phase stored every chunk."""

    model_config = ConfigDict(frozen=True)

    status: Literal["ok"] = "ok"
    chunks_stored: int = Field(default=0, ge=0)


class VectorizationDegraded(BaseModel):
    """The secondary phase failed; the document is saved but not searchable."""

    model_config = ConfigDict(frozen=True)

    status: Literal["degraded"] = "degraded"
    reason: str


class IngestionResult(BaseModel):
    """Outcome of ingesting one file, URL, or resource."""

    model_config = ConfigDict(frozen=True)

    document: Document
    secondary: VectorizationOk | VectorizationDegraded = Field(discriminator="status")
    ingestion_time: float = Field(default=0.0, ge=0.0)

    @property
    def vectorized(self) -> bool:
        return isinstance(self.secondary, VectorizationOk)

    @property
    def warning(self) -> str | None:
        if isinstance(self.secondary, VectorizationDegraded):
            return f"Document saved but not vectorized: {self.secondary.reason}"
        return None
