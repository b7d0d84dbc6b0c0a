"""Direct PostgreSQL backend for the ``documents`` table.

Uses an ``asyncpg`` pool owned by the
:class:`~ragchat.providers.metadata.connection_resolver.ConnectionResolver`.
"""

from __future__ import annotations

from typing import Any

import structlog

from ragchat.interfaces.document_store import IDocumentBackend
from ragchat.models.document import Document, DocumentCreate

logger = structlog.get_logger(logger_name=__name__)

_CREATE_EXTENSION_SQL = 'CREATE EXTENSION IF NOT EXISTS "uuid-ossp";'

CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS documents (
    id          UUID PRIMARY KEY DEFAULT uuid_generate_v4(),
    filename    TEXT NOT NULL,
    type        TEXT,
    content     TEXT,
    url         TEXT,
    created_at  TIMESTAMP WITH TIME ZONE DEFAULT NOW(),
    updated_at  TIMESTAMP WITH TIME ZONE DEFAULT NOW()
);
"""

_TABLE_EXISTS_SQL = """\
SELECT EXISTS (
    SELECT FROM information_schema.tables
    WHERE table_schema = 'public'
    AND table_name = $1
);
"""

_SELECT_ALL_SQL = "SELECT * FROM documents ORDER BY created_at DESC;"

_INSERT_SQL = """\
INSERT INTO documents (filename, type, content, url, created_at, updated_at)
VALUES ($1, $2, $3, $4, now(), now())
RETURNING *;
"""

# Compared as text so a malformed id deletes nothing instead of failing the cast.
_DELETE_SQL = "DELETE FROM documents WHERE id::text = $1;"


class PostgresDocumentBackend(IDocumentBackend):
    """``documents`` table access over a direct asyncpg connection pool."""

    def __init__(self, pool: Any) -> None:
        self._pool = pool

    async def table_exists(self) -> bool:
        return bool(await self._pool.fetchval(_TABLE_EXISTS_SQL, "documents"))

    async def create_table(self) -> None:
        async with self._pool.acquire() as conn:
            await conn.execute(_CREATE_EXTENSION_SQL)
            await conn.execute(CREATE_TABLE_SQL)
        logger.info("documents_table_created", backend=self.get_provider_name())

    async def list_documents(self) -> list[Document]:
        rows = await self._pool.fetch(_SELECT_ALL_SQL)
        return [Document.from_row(row) for row in rows]

    async def insert_document(self, doc: DocumentCreate) -> Document:
        row = await self._pool.fetchrow(_INSERT_SQL, doc.filename, doc.type, doc.content, doc.url)
        if row is None:
            raise RuntimeError("Insert returned no row")
        return Document.from_row(row)

    async def delete_document(self, document_id: str) -> int:
        status = await self._pool.execute(_DELETE_SQL, document_id)
        # asyncpg returns the command tag, e.g. "DELETE 1".
        try:
            return int(str(status).rsplit(" ", 1)[-1])
        except ValueError:
            return 0

    def get_provider_name(self) -> str:
        return "postgres"
