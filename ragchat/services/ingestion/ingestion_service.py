"""Orchestrator for document ingestion.

Pipeline stages: **read -> extract -> record -> chunk -> embed -> store**.

Each public ``ingest_*`` method runs two phases:

    1. PRIMARY -- read and extract the source, then write a Document row
       holding a short preview.  Any failure here propagates.
    2. SECONDARY -- chunk the full text, embed every chunk and upsert the
       vectors.  A failure here is caught and reported as
       :class:`VectorizationDegraded`; the saved row is kept.

All collaborators are injected, so providers can be swapped (Pinecone ->
ChromaDB) without touching this class.
"""

from __future__ import annotations

import asyncio
import time
from typing import TYPE_CHECKING

import structlog

from ragchat.models.document import DocumentCreate
from ragchat.models.rag import IngestionResult, VectorizationDegraded, VectorizationOk
from ragchat.utils.errors import ExtractionError, RagChatError

if TYPE_CHECKING:
    from ragchat.interfaces.document_store import IDocumentStore
    from ragchat.interfaces.embedding_provider import IEmbeddingProvider
    from ragchat.interfaces.vector_store_provider import IVectorStoreProvider
    from ragchat.models.document import Document
    from ragchat.services.ingestion.chunker import TieredChunker
    from ragchat.services.ingestion.extractor import FormatExtractor
    from ragchat.services.ingestion.source_reader import SourceReader

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_PREVIEW_LENGTH = 500


def make_preview(text: str, limit: int = _DEFAULT_PREVIEW_LENGTH, always_ellipsis: bool = False) -> str:
    """Return the first *limit* characters, with ``...`` when truncated."""
    if always_ellipsis or len(text) > limit:
        return text[:limit] + "..."
    return text


class IngestionService:
    """Coordinates reading, extraction, metadata writes and vectorisation.

    Parameters
    ----------
    source_reader:
        Builds payloads from uploads and URLs.
    extractor:
        Turns payloads into plain text.
    chunker:
        Splits text into embeddable chunks.
    embedding_provider:
        Generates one vector per chunk.
    vector_store:
        Stores chunk vectors for retrieval.
    document_store:
        Persists one Document row per ingested source.
    preview_length:
        Characters of text kept in the Document row.
    """

    def __init__(
        self,
        source_reader: SourceReader,
        extractor: FormatExtractor,
        chunker: TieredChunker,
        embedding_provider: IEmbeddingProvider,
        vector_store: IVectorStoreProvider,
        document_store: IDocumentStore,
        preview_length: int = _DEFAULT_PREVIEW_LENGTH,
    ) -> None:
        self._source_reader = source_reader
        self._extractor = extractor
        self._chunker = chunker
        self._embedding_provider = embedding_provider
        self._vector_store = vector_store
        self._document_store = document_store
        self._preview_length = preview_length

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def ensure_vector_index(self) -> bool:
        """Make sure the vector index exists; failures are logged, not raised."""
        try:
            return await self._vector_store.ensure_index()
        except RagChatError as exc:
            logger.warning(
                "vector_index_check_failed",
                provider=self._vector_store.get_provider_name(),
                error=str(exc),
            )
            return False

    async def ingest_upload(self, file_name: str, content_type: str | None, data: bytes) -> IngestionResult:
        """Ingest an uploaded file.

        Raises
        ------
        ExtractionError
            If the file is empty or yields no text.  No row is written.
        MetadataStoreError, ConnectionError
            If the Document row cannot be written.
        """
        start = time.monotonic()
        payload = self._source_reader.from_upload(file_name, content_type, data)
        text = await asyncio.to_thread(self._extractor.extract, payload)

        document = await self._document_store.create_document(
            DocumentCreate(
                filename=file_name,
                type=payload.format.value,
                content=make_preview(text, self._preview_length),
            )
        )
        secondary = await self.vectorize(text, file_name)
        return self._finish(document, secondary, start)

    async def ingest_url(self, url: str, file_name: str) -> IngestionResult:
        """Ingest the document behind *url*.

        Raises
        ------
        ValidationError
            If *url* is not http(s).
        ExtractionError
            If the fetch fails or yields no text.
        MetadataStoreError, ConnectionError
            If the Document row cannot be written.
        """
        start = time.monotonic()
        payload = await self._source_reader.from_url(url, file_name)
        text = await asyncio.to_thread(self._extractor.extract, payload)

        document = await self._document_store.create_document(
            DocumentCreate(
                filename=file_name,
                type=payload.format.value,
                content=make_preview(text, self._preview_length, always_ellipsis=True),
                url=payload.url,
            )
        )
        secondary = await self.vectorize(text, file_name)
        return self._finish(document, secondary, start)

    async def vectorize(self, text: str, file_name: str) -> VectorizationOk | VectorizationDegraded:
        """Chunk, embed and store *text*; never raises."""
        try:
            chunks = self._chunker.chunk(text, file_name)
            if not chunks:
                raise ExtractionError("Failed to extract valid content from the document: no valid chunks")
            embeddings = await self._embedding_provider.embed([c.text for c in chunks])
            stored = await self._vector_store.add_chunks(chunks, embeddings)
        except RagChatError as exc:
            logger.warning("vectorization_failed", file_name=file_name, error=str(exc))
            return VectorizationDegraded(reason=str(exc))

        logger.info(
            "vectorization_complete",
            file_name=file_name,
            chunks=stored,
            provider=self._vector_store.get_provider_name(),
        )
        return VectorizationOk(chunks_stored=stored)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _finish(
        document: Document,
        secondary: VectorizationOk | VectorizationDegraded,
        start: float,
    ) -> IngestionResult:
        result = IngestionResult(
            document=document,
            secondary=secondary,
            ingestion_time=round(time.monotonic() - start, 3),
        )
        logger.info(
            "ingestion_complete",
            document_id=document.id,
            file_name=document.filename,
            vectorized=result.vectorized,
            ingestion_time=result.ingestion_time,
        )
        return result
