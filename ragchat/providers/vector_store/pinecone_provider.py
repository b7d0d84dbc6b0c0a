"""Pinecone vector store provider adapter.

Wraps the ``pinecone`` SDK to implement :class:`IVectorStoreProvider`.
All vectors live in a single namespace (``"default"`` unless configured).
The SDK is synchronous, so every call is pushed onto a worker thread with
:func:`asyncio.to_thread` to keep the event loop free.
"""

from __future__ import annotations

import asyncio
from typing import Any

import structlog
from pinecone import Pinecone, ServerlessSpec

from ragchat.config.settings import Settings
from ragchat.interfaces.vector_store_provider import IVectorStoreProvider
from ragchat.models.rag import DocumentChunk, RetrievedChunk
from ragchat.utils.errors import VectorStoreError

logger = structlog.get_logger(logger_name=__name__)


class PineconeProvider(IVectorStoreProvider):
    """Vector store provider backed by a Pinecone serverless index.

    The client is created lazily on first use, so constructing the provider
    never touches the network.  A pre-built ``client`` may be injected for
    testing.
    """

    def __init__(
        self,
        settings: Settings,
        namespace: str = "default",
        dimension: int = 1536,
        metric: str = "cosine",
        upsert_batch_size: int = 32,
        ready_poll_attempts: int = 10,
        ready_poll_interval: float = 5.0,
        client: Any = None,
    ) -> None:
        self._api_key = settings.pinecone_api_key
        self._host = settings.pinecone_host
        self._environment = settings.pinecone_environment
        self._index_name = settings.pinecone_index
        self._cloud = settings.pinecone_cloud
        self._region = settings.pinecone_region
        self._namespace = namespace
        self._dimension = dimension
        self._metric = metric
        self._batch_size = max(1, upsert_batch_size)
        self._poll_attempts = ready_poll_attempts
        self._poll_interval = ready_poll_interval
        self._client = client
        self._index: Any = None

    # ------------------------------------------------------------------
    # Client access
    # ------------------------------------------------------------------

    def _get_client(self) -> Any:
        if self._client is None:
            if not self.is_available():
                raise VectorStoreError(
                    message=(
                        "Pinecone configuration is incomplete: set PINECONE_API_KEY, "
                        "PINECONE_INDEX and PINECONE_ENVIRONMENT or PINECONE_HOST"
                    ),
                    provider_name=self.get_provider_name(),
                )
            kwargs: dict[str, Any] = {"api_key": self._api_key}
            if self._host:
                kwargs["host"] = self._host
            try:
                self._client = Pinecone(**kwargs)
            except Exception as exc:
                raise VectorStoreError(
                    message=f"Pinecone client initialization failed: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc
        return self._client

    def _get_index(self) -> Any:
        if self._index is None:
            try:
                self._index = self._get_client().Index(self._index_name)
            except VectorStoreError:
                raise
            except Exception as exc:
                raise VectorStoreError(
                    message=f"Pinecone index access failed: {exc}",
                    provider_name=self.get_provider_name(),
                ) from exc
        return self._index

    @staticmethod
    def _is_ready(description: Any) -> bool:
        status = getattr(description, "status", None)
        if status is None and isinstance(description, dict):
            status = description.get("status")
        if isinstance(status, dict):
            return bool(status.get("ready"))
        return bool(getattr(status, "ready", False))

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def ensure_index(self) -> bool:
        """Create the index when missing, then poll until it reports ready.

        Polls up to ``ready_poll_attempts`` times, sleeping
        ``ready_poll_interval`` seconds between attempts.  A failed
        ``describe_index`` call counts as "not ready yet".
        """
        client = self._get_client()
        try:
            names = await asyncio.to_thread(lambda: list(client.list_indexes().names()))
        except Exception as exc:
            raise VectorStoreError(
                message=f"Failed to list Pinecone indexes: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if self._index_name in names:
            logger.info("pinecone_index_exists", index=self._index_name)
            return True

        logger.info(
            "pinecone_index_creating",
            index=self._index_name,
            dimension=self._dimension,
            metric=self._metric,
        )
        try:
            await asyncio.to_thread(
                client.create_index,
                name=self._index_name,
                dimension=self._dimension,
                metric=self._metric,
                spec=ServerlessSpec(cloud=self._cloud, region=self._region),
            )
        except Exception as exc:
            raise VectorStoreError(
                message=f"Failed to create Pinecone index: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        for attempt in range(1, self._poll_attempts + 1):
            try:
                description = await asyncio.to_thread(client.describe_index, self._index_name)
                if self._is_ready(description):
                    logger.info("pinecone_index_ready", index=self._index_name, attempt=attempt)
                    return True
            except Exception as exc:
                logger.warning(
                    "pinecone_index_describe_failed",
                    index=self._index_name,
                    attempt=attempt,
                    error=str(exc),
                )
            if attempt < self._poll_attempts:
                await asyncio.sleep(self._poll_interval)

        logger.warning(
            "pinecone_index_not_ready",
            index=self._index_name,
            attempts=self._poll_attempts,
            msg="Index did not become ready in time, proceeding anyway.",
        )
        return False

    async def add_chunks(
        self,
        chunks: list[DocumentChunk],
        embeddings: list[list[float]],
    ) -> int:
        """Upsert chunks into the namespace in batches of ``upsert_batch_size``."""
        if len(chunks) != len(embeddings):
            raise VectorStoreError(
                message=(
                    f"chunks and embeddings length mismatch: {len(chunks)} != {len(embeddings)}"
                ),
                provider_name=self.get_provider_name(),
            )
        if not chunks:
            return 0

        index = self._get_index()
        try:
            total_stored = 0
            for start in range(0, len(chunks), self._batch_size):
                end = min(start + self._batch_size, len(chunks))
                vectors = [
                    {
                        "id": chunk.chunk_id,
                        "values": embedding,
                        "metadata": chunk.to_vector_metadata(),
                    }
                    for chunk, embedding in zip(chunks[start:end], embeddings[start:end], strict=True)
                ]
                await asyncio.to_thread(index.upsert, vectors=vectors, namespace=self._namespace)
                total_stored += len(vectors)

            logger.info(
                "pinecone_add_chunks",
                index=self._index_name,
                namespace=self._namespace,
                count=total_stored,
                batches=(len(chunks) + self._batch_size - 1) // self._batch_size,
            )
            return total_stored
        except Exception as exc:
            raise VectorStoreError(
                message=f"Unable to store vectors in Pinecone: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def query(self, query_embedding: list[float], top_k: int = 5) -> list[RetrievedChunk]:
        index = self._get_index()
        try:
            response = await asyncio.to_thread(
                index.query,
                vector=query_embedding,
                top_k=top_k,
                namespace=self._namespace,
                include_metadata=True,
            )
        except Exception as exc:
            raise VectorStoreError(
                message=f"Pinecone query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        matches = getattr(response, "matches", None)
        if matches is None and isinstance(response, dict):
            matches = response.get("matches")

        retrieved: list[RetrievedChunk] = []
        for match in matches or []:
            if isinstance(match, dict):
                match_id, score, metadata = match.get("id"), match.get("score"), match.get("metadata")
            else:
                match_id, score, metadata = match.id, match.score, match.metadata
            chunk = DocumentChunk.from_vector_metadata(str(match_id), dict(metadata or {}))
            similarity = max(0.0, min(1.0, float(score or 0.0)))
            retrieved.append(RetrievedChunk(chunk=chunk, similarity_score=similarity))

        logger.info(
            "pinecone_query",
            index=self._index_name,
            top_k=top_k,
            results_count=len(retrieved),
            top_score=retrieved[0].similarity_score if retrieved else 0.0,
        )
        return retrieved

    def get_provider_name(self) -> str:
        return "pinecone"

    def is_available(self) -> bool:
        """Return ``True`` if key, index name and environment or host are set."""
        return bool(self._api_key and self._index_name and (self._environment or self._host))
