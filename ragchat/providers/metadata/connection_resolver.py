"""Lazy, memoised resolution of the metadata-store connection.

Two ways to reach the ``documents`` table are tried in order:

    1. DIRECT: an ``asyncpg`` pool against PostgreSQL, validated with
       ``SELECT 1``.  Skipped when ``DISABLE_DIRECT_PG_CONNECTION`` is set
       or no DSN can be built.
    2. HOSTED: the Supabase async client, built from ``SUPABASE_URL`` and
       ``SUPABASE_KEY``.

The first success is memoised.  When both fail the resolver moves to
``FAILED``, clears the memo, and raises; the next call starts over.
"""

from __future__ import annotations

import asyncio
from enum import Enum
from typing import Any

import asyncpg
import structlog
from supabase import acreate_client

from ragchat.config.settings import Settings
from ragchat.interfaces.document_store import IDocumentBackend
from ragchat.providers.metadata.postgres_backend import PostgresDocumentBackend
from ragchat.providers.metadata.supabase_backend import SupabaseDocumentBackend
from ragchat.utils.errors import ConnectionError as DBConnectionError

logger = structlog.get_logger(logger_name=__name__)

_POOL_MAX_SIZE = 5
_CONNECT_TIMEOUT = 30.0
_IDLE_LIFETIME = 30.0
_COMMAND_TIMEOUT = 30.0
_TEST_QUERY_TIMEOUT = 5.0


class ConnectionState(str, Enum):  # noqa: UP042
    """Lifecycle of a :class:`ConnectionResolver`."""

    UNRESOLVED = "unresolved"
    DIRECT = "direct"
    HOSTED = "hosted"
    FAILED = "failed"


class ConnectionResolver:
    """Resolves and memoises one :class:`IDocumentBackend`.

    Concurrent callers share a lock so only one resolution runs at a time.
    ``pool_factory`` and ``hosted_factory`` exist for tests; they default
    to ``asyncpg.create_pool`` and ``supabase.acreate_client``.
    """

    def __init__(
        self,
        settings: Settings,
        pool_factory: Any = None,
        hosted_factory: Any = None,
    ) -> None:
        self._dsn = settings.postgres_dsn()
        self._direct_disabled = settings.disable_direct_pg_connection
        self._supabase_url = settings.supabase_url
        self._supabase_key = settings.supabase_key
        self._pool_factory = pool_factory or asyncpg.create_pool
        self._hosted_factory = hosted_factory or acreate_client
        self._state = ConnectionState.UNRESOLVED
        self._backend: IDocumentBackend | None = None
        self._pool: Any = None
        self._lock = asyncio.Lock()

    @property
    def state(self) -> ConnectionState:
        return self._state

    def is_configured(self) -> bool:
        """Return ``True`` if at least one connection path has configuration."""
        direct = bool(self._dsn) and not self._direct_disabled
        hosted = bool(self._supabase_url and self._supabase_key)
        return direct or hosted

    async def resolve(self) -> IDocumentBackend:
        """Return the memoised backend, resolving it on first use.

        Raises
        ------
        ragchat.utils.errors.ConnectionError
            If neither the direct nor the hosted path is usable.
        """
        if self._backend is not None:
            return self._backend

        async with self._lock:
            if self._backend is not None:
                return self._backend

            backend = await self._try_direct()
            if backend is not None:
                self._state = ConnectionState.DIRECT
            else:
                backend = await self._try_hosted()
                if backend is not None:
                    self._state = ConnectionState.HOSTED

            if backend is None:
                self._state = ConnectionState.FAILED
                self._backend = None
                logger.error("metadata_connection_failed")
                raise DBConnectionError(
                    message=(
                        "Unable to connect to the database. Check the PostgreSQL "
                        "connection settings or SUPABASE_URL / SUPABASE_KEY."
                    ),
                    provider_name="metadata_store",
                )

            self._backend = backend
            logger.info("metadata_connection_resolved", state=self._state.value)
            return backend

    async def reset(self) -> None:
        """Drop the memo and close any direct pool."""
        async with self._lock:
            await self._close_pool()
            self._backend = None
            self._state = ConnectionState.UNRESOLVED

    async def close(self) -> None:
        await self._close_pool()

    # ------------------------------------------------------------------
    # Resolution paths
    # ------------------------------------------------------------------

    async def _try_direct(self) -> IDocumentBackend | None:
        if self._direct_disabled:
            logger.info("direct_pg_disabled")
            return None
        if not self._dsn:
            logger.info("direct_pg_not_configured")
            return None

        try:
            pool = await self._pool_factory(
                dsn=self._dsn,
                min_size=1,
                max_size=_POOL_MAX_SIZE,
                timeout=_CONNECT_TIMEOUT,
                command_timeout=_COMMAND_TIMEOUT,
                max_inactive_connection_lifetime=_IDLE_LIFETIME,
            )
        except Exception as exc:
            logger.warning("direct_pg_connect_failed", error_type=type(exc).__name__, error=str(exc))
            return None

        try:
            result = await asyncio.wait_for(pool.fetchval("SELECT 1"), timeout=_TEST_QUERY_TIMEOUT)
        except Exception as exc:
            logger.warning("direct_pg_test_failed", error_type=type(exc).__name__, error=str(exc))
            await pool.close()
            return None

        if result != 1:
            logger.warning("direct_pg_test_unexpected", result=result)
            await pool.close()
            return None

        self._pool = pool
        return PostgresDocumentBackend(pool)

    async def _try_hosted(self) -> IDocumentBackend | None:
        if not (self._supabase_url and self._supabase_key):
            logger.info("supabase_not_configured")
            return None
        try:
            client = await self._hosted_factory(self._supabase_url, self._supabase_key)
        except Exception as exc:
            logger.warning("supabase_client_failed", error=str(exc))
            return None
        return SupabaseDocumentBackend(client)

    async def _close_pool(self) -> None:
        if self._pool is not None:
            pool, self._pool = self._pool, None
            await pool.close()
