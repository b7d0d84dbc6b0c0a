"""ChromaDB vector store provider adapter.

Wraps ``chromadb.PersistentClient`` to implement :class:`IVectorStoreProvider`
for local development without a Pinecone account.  Uses cosine distance,
so ``similarity = 1 - distance``.
"""

from __future__ import annotations

import asyncio
import os
from typing import Any

# ChromaDB's bundled PostHog telemetry must be off before chromadb is imported.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb
import structlog

from ragchat.interfaces.vector_store_provider import IVectorStoreProvider
from ragchat.models.rag import DocumentChunk, RetrievedChunk
from ragchat.utils.errors import VectorStoreError

logger = structlog.get_logger(logger_name=__name__)


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """Stops ChromaDB from loading its default ONNX model.

    Every write and query passes pre-computed embeddings, so this is never
    invoked.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError(
            "ragChat uses pre-computed embeddings; "
            "ChromaDB's built-in embedding should never be called."
        )

    def name(self) -> str:
        return "noop_precomputed"


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store provider backed by ChromaDB with local persistence.

    The collection is opened lazily by :meth:`ensure_index` (or the first
    write/query), so constructing the provider does no disk I/O.
    """

    def __init__(
        self,
        persist_directory: str = "./data/chromadb",
        collection_name: str = "ragchat_documents",
        upsert_batch_size: int = 32,
        client: Any = None,
    ) -> None:
        self._persist_directory = persist_directory
        self._collection_name = collection_name
        self._batch_size = max(1, upsert_batch_size)
        self._client = client
        self._collection: Any = None

    def _get_collection(self) -> Any:
        if self._collection is not None:
            return self._collection
        try:
            if self._client is None:
                self._client = chromadb.PersistentClient(
                    path=self._persist_directory,
                    settings=chromadb.config.Settings(anonymized_telemetry=False),
                )
            # A collection persisted with a different embedding function
            # rejects the no-op one; reopen it without specifying any.
            try:
                self._collection = self._client.get_or_create_collection(
                    name=self._collection_name,
                    metadata={"hnsw:space": "cosine"},
                    embedding_function=_NoopEmbeddingFunction(),
                )
            except ValueError:
                self._collection = self._client.get_or_create_collection(
                    name=self._collection_name,
                    metadata={"hnsw:space": "cosine"},
                )
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB collection open failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        return self._collection

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def ensure_index(self) -> bool:
        collection = await asyncio.to_thread(self._get_collection)
        logger.info("chromadb_collection_ready", collection=self._collection_name)
        return collection is not None

    async def add_chunks(
        self,
        chunks: list[DocumentChunk],
        embeddings: list[list[float]],
    ) -> int:
        """Upsert pre-embedded chunks in batches of ``upsert_batch_size``."""
        if len(chunks) != len(embeddings):
            raise VectorStoreError(
                message=(
                    f"chunks and embeddings length mismatch: {len(chunks)} != {len(embeddings)}"
                ),
                provider_name=self.get_provider_name(),
            )
        if not chunks:
            return 0

        collection = self._get_collection()
        try:
            total_stored = 0
            for start in range(0, len(chunks), self._batch_size):
                end = min(start + self._batch_size, len(chunks))
                batch_chunks = chunks[start:end]
                await asyncio.to_thread(
                    collection.upsert,
                    ids=[c.chunk_id for c in batch_chunks],
                    embeddings=embeddings[start:end],
                    documents=[c.text for c in batch_chunks],
                    metadatas=[self._chunk_to_metadata(c) for c in batch_chunks],
                )
                total_stored += len(batch_chunks)

            logger.info(
                "chromadb_add_chunks",
                count=total_stored,
                batches=(len(chunks) + self._batch_size - 1) // self._batch_size,
            )
            return total_stored
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB add_chunks failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def query(self, query_embedding: list[float], top_k: int = 5) -> list[RetrievedChunk]:
        collection = self._get_collection()
        try:
            results = await asyncio.to_thread(
                collection.query,
                query_embeddings=[query_embedding],
                n_results=top_k,
            )
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not results.get("documents") or not results["documents"][0]:
            return []

        ids = results["ids"][0]
        documents = results["documents"][0]
        metadatas = results["metadatas"][0] if results.get("metadatas") else [{}] * len(documents)
        distances = results["distances"][0] if results.get("distances") else [0.0] * len(documents)

        retrieved: list[RetrievedChunk] = []
        for chunk_id, doc_text, meta, distance in zip(
            ids, documents, metadatas, distances, strict=True
        ):
            similarity = max(0.0, min(1.0, 1.0 - distance))
            chunk = DocumentChunk.from_vector_metadata(chunk_id, {**(meta or {}), "text": doc_text})
            retrieved.append(RetrievedChunk(chunk=chunk, similarity_score=similarity))

        retrieved.sort(key=lambda rc: rc.similarity_score, reverse=True)
        logger.info(
            "chromadb_query",
            results_count=len(retrieved),
            top_score=retrieved[0].similarity_score if retrieved else 0.0,
        )
        return retrieved

    def get_provider_name(self) -> str:
        return "chromadb"

    def is_available(self) -> bool:
        return True

    # ------------------------------------------------------------------
    # Metadata helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _chunk_to_metadata(chunk: DocumentChunk) -> dict[str, str | int]:
        """ChromaDB stores the text as the document, so it is left out here."""
        meta = chunk.to_vector_metadata()
        meta.pop("text", None)
        return meta
