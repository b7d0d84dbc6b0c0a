"""Document metadata store facade.

Resolves a backend through :class:`ConnectionResolver` on every call and
turns raw driver errors into messages a user can act on.  A failure that
looks like a dropped connection resets the resolver so the next call
resolves again.
"""

from __future__ import annotations

import asyncio

import structlog

from ragchat.interfaces.document_store import IDocumentStore
from ragchat.models.document import DeleteResult, Document, DocumentCreate, InitResult
from ragchat.providers.metadata.connection_resolver import ConnectionResolver
from ragchat.providers.metadata.postgres_backend import CREATE_TABLE_SQL
from ragchat.utils.errors import ConnectionError as DBConnectionError
from ragchat.utils.errors import MetadataStoreError

logger = structlog.get_logger(logger_name=__name__)


def friendly_db_error(exc: BaseException) -> str:
    """Translate a driver exception into a short user-facing message."""
    if isinstance(exc, asyncio.TimeoutError):
        return "Connection timeout: The database server took too long to respond."

    text = str(exc)
    lowered = text.lower()
    if "connection refused" in lowered:
        return "Database connection refused: The database server is not accepting connections."
    if "password authentication failed" in lowered:
        return "Authentication failed: Invalid database username or password."
    if "database" in lowered and "does not exist" in lowered:
        return "Database does not exist: The specified database could not be found."
    if "timeout" in lowered or "timed out" in lowered:
        return "Connection timeout: The database server took too long to respond."
    return text or exc.__class__.__name__


def _looks_like_connection_loss(exc: BaseException) -> bool:
    return isinstance(exc, (OSError, asyncio.TimeoutError)) or "connection" in str(exc).lower()


class DocumentStore(IDocumentStore):
    """The application's single entry point to document metadata."""

    def __init__(self, resolver: ConnectionResolver) -> None:
        self._resolver = resolver

    async def _handle_failure(self, operation: str, exc: Exception) -> str:
        message = friendly_db_error(exc)
        logger.error("metadata_store_error", operation=operation, error=message)
        if _looks_like_connection_loss(exc):
            await self._resolver.reset()
        return message

    async def initialize(self) -> InitResult:
        try:
            backend = await self._resolver.resolve()
        except DBConnectionError as exc:
            return InitResult(success=False, message=f"Failed to initialize database connection: {exc.message}")

        try:
            if await backend.table_exists():
                logger.info("documents_table_ready", backend=backend.get_provider_name())
                return InitResult(success=True, message="Database is initialized and ready to use.")
        except Exception as exc:
            message = await self._handle_failure("initialize", exc)
            return InitResult(success=False, message=f"Database connection error: {message}")

        try:
            await backend.create_table()
        except Exception as exc:
            message = await self._handle_failure("create_table", exc)
            logger.warning(
                "documents_table_manual_creation_required",
                sql=CREATE_TABLE_SQL,
                error=message,
            )
            return InitResult(
                success=False,
                message="Unable to create the documents table. Create it manually or check database permissions.",
            )
        return InitResult(success=True, message="Database table created successfully.")

    async def table_exists(self) -> bool:
        backend = await self._resolver.resolve()
        try:
            return await backend.table_exists()
        except Exception as exc:
            message = await self._handle_failure("table_exists", exc)
            raise MetadataStoreError(message=message, provider_name=backend.get_provider_name()) from exc

    async def list_documents(self) -> list[Document]:
        backend = await self._resolver.resolve()
        try:
            if not await backend.table_exists():
                raise MetadataStoreError(
                    message="The documents table does not exist. Initialize the database first.",
                    provider_name=backend.get_provider_name(),
                )
            documents = await backend.list_documents()
        except MetadataStoreError:
            raise
        except Exception as exc:
            message = await self._handle_failure("list_documents", exc)
            raise MetadataStoreError(
                message=f"Failed to fetch documents: {message}",
                provider_name=backend.get_provider_name(),
            ) from exc

        logger.info("documents_listed", count=len(documents), backend=backend.get_provider_name())
        return documents

    async def create_document(self, doc: DocumentCreate) -> Document:
        backend = await self._resolver.resolve()
        try:
            document = await backend.insert_document(doc)
        except Exception as exc:
            message = await self._handle_failure("create_document", exc)
            raise MetadataStoreError(
                message=f"Failed to add document: {message}",
                provider_name=backend.get_provider_name(),
            ) from exc

        logger.info("document_created", document_id=document.id, filename=document.filename)
        return document

    async def delete_document(self, document_id: str) -> DeleteResult:
        try:
            backend = await self._resolver.resolve()
        except DBConnectionError as exc:
            return DeleteResult(success=False, error=exc.message)

        try:
            deleted = await backend.delete_document(document_id)
        except Exception as exc:
            message = await self._handle_failure("delete_document", exc)
            return DeleteResult(success=False, error=f"Delete failed: {message}")

        logger.info("document_deleted", document_id=document_id, deleted=deleted)
        return DeleteResult(success=True, deleted=deleted)

    async def close(self) -> None:
        await self._resolver.close()
