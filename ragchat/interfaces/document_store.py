"""Abstract base classes for the relational document-metadata store.

Two layers:

``IDocumentBackend``
    One concrete way of talking to the ``documents`` table (direct
    PostgreSQL or the Supabase REST client).

``IDocumentStore``
    The facade the rest of the application uses.  It resolves a backend
    lazily and translates low-level failures into friendly messages.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from ragchat.models.document import DeleteResult, Document, DocumentCreate, InitResult


# Concrete implementations: PostgresDocumentBackend, SupabaseDocumentBackend
# Located in: ragchat/providers/metadata/
class IDocumentBackend(ABC):
    """Contract for a single connection flavour to the ``documents`` table."""

    @abstractmethod
    async def table_exists(self) -> bool:
        """Return ``True`` if the ``documents`` table is present."""

    @abstractmethod
    async def create_table(self) -> None:
        """Create the ``documents`` table if it is missing (idempotent)."""

    @abstractmethod
    async def list_documents(self) -> list[Document]:
        """Return every row ordered by ``created_at`` descending."""

    @abstractmethod
    async def insert_document(self, doc: DocumentCreate) -> Document:
        """Insert one row and return it as stored."""

    @abstractmethod
    async def delete_document(self, document_id: str) -> int:
        """Delete by id and return the number of rows removed."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this backend."""


# Concrete implementation: DocumentStore
# Located in: ragchat/providers/metadata/document_store.py
class IDocumentStore(ABC):
    """Contract for document-metadata persistence used by services and routes."""

    @abstractmethod
    async def initialize(self) -> InitResult:
        """Create the ``documents`` table if needed.

        Never raises; failures are reported in the returned result.
        """

    @abstractmethod
    async def table_exists(self) -> bool:
        """Return ``True`` if the ``documents`` table is present.

        Raises
        ------
        ragchat.utils.errors.ConnectionError
            If no backend could be resolved.
        """

    @abstractmethod
    async def list_documents(self) -> list[Document]:
        """Return all documents, newest first.

        Raises
        ------
        ragchat.utils.errors.MetadataStoreError
            If the table is missing or the query fails, with a user-facing
            message.
        """

    @abstractmethod
    async def create_document(self, doc: DocumentCreate) -> Document:
        """Insert *doc* and return the stored row.

        Raises
        ------
        ragchat.utils.errors.MetadataStoreError
            If the insert fails, with a user-facing message.
        """

    @abstractmethod
    async def delete_document(self, document_id: str) -> DeleteResult:
        """Delete by id.  A missing id is a success with ``deleted == 0``."""

    @abstractmethod
    async def close(self) -> None:
        """Release any pooled connections."""
