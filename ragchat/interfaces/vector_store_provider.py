"""Abstract base class for vector-store providers.

Defines the contract for storing chunk embeddings and querying them by
similarity.  Implementations wrap a hosted index (Pinecone) or a local
persistent store (ChromaDB).
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ragchat.models.rag import DocumentChunk, RetrievedChunk


# Concrete implementations: PineconeProvider, ChromaDBProvider
# Located in: ragchat/providers/vector_store/
class IVectorStoreProvider(ABC):
    """Contract for vector storage and similarity search."""

    @abstractmethod
    async def ensure_index(self) -> bool:
        """Make sure the target index exists and is usable.

        Creates the index when it is missing and waits (bounded) for it to
        become ready.  Never-ready is logged and tolerated.

        Returns
        -------
        bool
            ``True`` when the index was confirmed ready, ``False`` when the
            readiness wait ran out.

        Raises
        ------
        ragchat.utils.errors.VectorStoreError
            If listing or creating the index fails.
        """

    @abstractmethod
    async def add_chunks(
        self,
        chunks: list[DocumentChunk],
        embeddings: list[list[float]],
    ) -> int:
        """Upsert chunks with their pre-computed embeddings.

        Parameters
        ----------
        chunks:
            Chunks to store; ``chunk_id`` is used as the vector id.
        embeddings:
            One vector per chunk, positionally aligned with *chunks*.

        Returns
        -------
        int
            Number of vectors written.

        Raises
        ------
        ragchat.utils.errors.VectorStoreError
            If the lengths differ or the upsert fails.
        """

    @abstractmethod
    async def query(self, query_embedding: list[float], top_k: int = 5) -> list[RetrievedChunk]:
        """Return up to *top_k* chunks ordered by descending similarity.

        Raises
        ------
        ragchat.utils.errors.VectorStoreError
            If the query fails.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this vector store."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the store is configured."""
