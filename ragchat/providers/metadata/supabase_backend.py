"""Supabase (PostgREST) backend for the ``documents`` table.

Used when a direct PostgreSQL connection is unavailable.  PostgREST
cannot run DDL, so table creation goes through one of two RPC functions
that must exist in the project: ``create_documents_table`` or the
generic ``exec_sql``.
"""

from __future__ import annotations

from typing import Any

import structlog
from supabase import PostgrestAPIError

from ragchat.interfaces.document_store import IDocumentBackend
from ragchat.models.document import Document, DocumentCreate
from ragchat.providers.metadata.postgres_backend import CREATE_TABLE_SQL

logger = structlog.get_logger(logger_name=__name__)

# PostgreSQL "undefined_table".
_UNDEFINED_TABLE = "42P01"
_INVALID_TEXT_REPRESENTATION = "22P02"
_TABLE = "documents"


class SupabaseDocumentBackend(IDocumentBackend):
    """``documents`` table access through the Supabase async client."""

    def __init__(self, client: Any) -> None:
        self._client = client

    async def table_exists(self) -> bool:
        try:
            await self._client.table(_TABLE).select("id").limit(1).execute()
        except PostgrestAPIError as exc:
            if exc.code == _UNDEFINED_TABLE:
                return False
            raise
        return True

    async def create_table(self) -> None:
        try:
            await self._client.rpc("create_documents_table", {}).execute()
        except PostgrestAPIError as exc:
            logger.info("create_documents_table_rpc_failed", error=exc.message)
            await self._client.rpc("exec_sql", {"sql": CREATE_TABLE_SQL}).execute()
        logger.info("documents_table_created", backend=self.get_provider_name())

    async def list_documents(self) -> list[Document]:
        response = (
            await self._client.table(_TABLE).select("*").order("created_at", desc=True).execute()
        )
        return [Document.from_row(row) for row in response.data or []]

    async def insert_document(self, doc: DocumentCreate) -> Document:
        response = (
            await self._client.table(_TABLE)
            .insert(
                {
                    "filename": doc.filename,
                    "type": doc.type,
                    "content": doc.content,
                    "url": doc.url,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Insert succeeded but returned no data")
        return Document.from_row(response.data[0])

    async def delete_document(self, document_id: str) -> int:
        try:
            response = await self._client.table(_TABLE).delete().eq("id", document_id).execute()
        except PostgrestAPIError as exc:
            # Malformed ids match no uuid row.
            if exc.code == _INVALID_TEXT_REPRESENTATION:
                logger.info("supabase_delete_malformed_id", document_id=document_id)
                return 0
            raise
        return len(response.data or [])

    def get_provider_name(self) -> str:
        return "supabase"
