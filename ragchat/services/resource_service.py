"""Chat-driven additions to the knowledge base (the ``addResource`` tool)."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from typing import TYPE_CHECKING, Any

import structlog

from ragchat.models.document import DocumentCreate, SourceFormat
from ragchat.utils.errors import RagChatError

if TYPE_CHECKING:
    from ragchat.interfaces.document_store import IDocumentStore
    from ragchat.services.ingestion.ingestion_service import IngestionService

logger = structlog.get_logger(logger_name=__name__)


def resource_filename(today: date) -> str:
    return f"user-added-content-{today.isoformat()}"


class ResourceService:
    """Stores free-form text supplied during a chat as a document.

    The full content is kept in the row (not a preview) and is also
    vectorised so ``getInformation`` can find it later.
    """

    def __init__(
        self,
        document_store: IDocumentStore,
        ingestion_service: IngestionService | None = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self._document_store = document_store
        self._ingestion_service = ingestion_service
        self._today = today

    async def create_resource(self, content: str) -> dict[str, Any]:
        """Return ``{success, resourceId[, warning]}`` or ``{success: False, error}``."""
        logger.info("resource_adding", preview=content[:50])
        try:
            document = await self._document_store.create_document(
                DocumentCreate(
                    filename=resource_filename(self._today()),
                    type=SourceFormat.TEXT.value,
                    content=content,
                )
            )
        except RagChatError as exc:
            logger.error("resource_add_failed", error=str(exc))
            return {"success": False, "error": exc.message}

        result: dict[str, Any] = {"success": True, "resourceId": document.id}
        if self._ingestion_service is not None:
            secondary = await self._ingestion_service.vectorize(content, document.filename)
            if secondary.status == "degraded":
                result["warning"] = f"Resource saved but not vectorized: {secondary.reason}"

        logger.info("resource_added", resource_id=document.id)
        return result
