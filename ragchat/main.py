"""ragChat FastAPI application entry point.

Wires together all providers, services, and routes via dependency
injection.  Loads configuration from ``.env`` and ``config/config.yaml``
and configures structured logging.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import httpx
import structlog
import uvicorn
from fastapi import FastAPI

from ragchat import __version__
from ragchat.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
    register_exception_handlers,
)
from ragchat.api.routes import router as api_router
from ragchat.config.loader import load_config
from ragchat.config.settings import Settings
from ragchat.interfaces.embedding_provider import IEmbeddingProvider
from ragchat.interfaces.llm_provider import IChatModelProvider
from ragchat.interfaces.vector_store_provider import IVectorStoreProvider
from ragchat.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from ragchat.providers.llm.openai_compatible_chat_provider import OpenAICompatibleChatProvider
from ragchat.providers.metadata.connection_resolver import ConnectionResolver
from ragchat.providers.metadata.document_store import DocumentStore
from ragchat.providers.source.http_source_fetcher import HttpSourceFetcher
from ragchat.providers.vector_store.pinecone_provider import PineconeProvider
from ragchat.services.chat_service import ChatService
from ragchat.services.ingestion.chunker import TieredChunker
from ragchat.services.ingestion.extractor import FormatExtractor
from ragchat.services.ingestion.ingestion_service import IngestionService
from ragchat.services.ingestion.source_reader import SourceReader
from ragchat.services.resource_service import ResourceService
from ragchat.services.retrieval_service import RetrievalService
from ragchat.utils.errors import ConfigurationError
from ragchat.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = Settings()
config = load_config(settings=settings)

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Provider selection
# ---------------------------------------------------------------------------


def _build_embedding_provider(app_settings: Settings) -> IEmbeddingProvider:
    """OpenAI embeddings; a missing key surfaces per call as EmbeddingError."""
    provider = OpenAIEmbeddingProvider(settings=app_settings)
    if not provider.is_available():
        _logger.warning(
            "embedding_provider_unconfigured",
            msg="OPENAI_API_KEY missing or malformed; uploads will be saved but not vectorized.",
        )
    return provider


def _build_vector_store(app_settings: Settings, app_config: dict[str, Any]) -> IVectorStoreProvider:
    """Pick the vector store from ``VECTOR_STORE_BACKEND``.

    ``auto`` uses Pinecone when it is fully configured and ChromaDB
    otherwise.
    """
    vs_config = app_config.get("vector_store", {})
    backend = (app_settings.vector_store_backend or "auto").lower()

    if backend == "auto":
        backend = "pinecone" if app_settings.pinecone_configured() else "chromadb"

    if backend == "pinecone":
        return PineconeProvider(
            settings=app_settings,
            namespace=vs_config.get("namespace", "default"),
            dimension=int(vs_config.get("dimension", 1536)),
            metric=vs_config.get("metric", "cosine"),
            upsert_batch_size=int(vs_config.get("upsert_batch_size", 32)),
            ready_poll_attempts=int(vs_config.get("ready_poll_attempts", 10)),
            ready_poll_interval=float(vs_config.get("ready_poll_interval", 5.0)),
        )

    if backend == "chromadb":
        # Imported lazily: chromadb is heavy and unused when Pinecone is configured.
        from ragchat.providers.vector_store.chromadb_provider import ChromaDBProvider

        return ChromaDBProvider(
            persist_directory=app_settings.chromadb_persist_dir,
            collection_name=app_settings.chromadb_collection,
            upsert_batch_size=int(vs_config.get("upsert_batch_size", 32)),
        )

    raise ConfigurationError(
        message=f"Unknown VECTOR_STORE_BACKEND: {app_settings.vector_store_backend}",
    )


def _build_chat_provider(app_settings: Settings) -> IChatModelProvider:
    """DeepSeek when its key is set, otherwise OpenAI."""
    return OpenAICompatibleChatProvider(settings=app_settings)


# ---------------------------------------------------------------------------
# Full DI assembly for the FastAPI application
# ---------------------------------------------------------------------------


def _build_all(app_settings: Settings, app_config: dict[str, Any]) -> dict[str, Any]:
    """Construct every provider and service instance for the application.

    Returns a flat dict of named components to be stored on ``app.state``.
    """
    ingestion_config = app_config.get("ingestion", {})

    # -- Shared resources --
    http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(float(app_config.get("source", {}).get("fetch_timeout", 30.0))),
        follow_redirects=True,
    )

    # -- Providers --
    embedding_provider = _build_embedding_provider(app_settings)
    vector_store = _build_vector_store(app_settings, app_config)
    chat_provider = _build_chat_provider(app_settings)
    connection_resolver = ConnectionResolver(app_settings)
    document_store = DocumentStore(connection_resolver)

    # -- Services --
    ingestion_service = IngestionService(
        source_reader=SourceReader(HttpSourceFetcher(http_client=http_client)),
        extractor=FormatExtractor(),
        chunker=TieredChunker.from_config(ingestion_config),
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        document_store=document_store,
        preview_length=int(ingestion_config.get("preview_length", 500)),
    )
    retrieval_service = RetrievalService(
        embedding_provider=embedding_provider,
        vector_store=vector_store,
        top_k=int(app_config.get("retrieval", {}).get("top_k", 5)),
    )
    resource_service = ResourceService(
        document_store=document_store,
        ingestion_service=ingestion_service,
    )
    chat_config = app_config.get("chat", {})
    chat_service = ChatService(
        chat_provider=chat_provider,
        retrieval_service=retrieval_service,
        resource_service=resource_service,
        max_steps=int(chat_config.get("max_steps", 3)),
        temperature=float(chat_config.get("temperature", 0.3)),
    )

    return {
        "settings": app_settings,
        "config": app_config,
        "http_client": http_client,
        "embedding_provider": embedding_provider,
        "vector_store": vector_store,
        "chat_provider": chat_provider,
        "connection_resolver": connection_resolver,
        "document_store": document_store,
        "ingestion_service": ingestion_service,
        "retrieval_service": retrieval_service,
        "resource_service": resource_service,
        "chat_service": chat_service,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Initialise all providers and services on startup, clean up on shutdown."""
    components = _build_all(settings, config)

    for key, value in components.items():
        setattr(application.state, key, value)

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        vector_store=components["vector_store"].get_provider_name(),
        chat_model=components["chat_provider"].get_provider_name(),
        metadata_store_configured=components["connection_resolver"].is_configured(),
    )

    yield

    # -- Shutdown: close the shared httpx client and any database pool --
    http_client: httpx.AsyncClient = components["http_client"]
    await http_client.aclose()
    await components["document_store"].close()
    _logger.info("app_shutdown", message="HTTP client and database pool closed")


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="ragChat API",
        version=__version__,
        description=(
            "Upload documents or URLs into a vector index and chat with a model "
            "that answers from that knowledge base."
        ),
        lifespan=_lifespan,
    )

    # -- Middleware (order matters: last added = first executed) --
    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)
    register_exception_handlers(application)

    # -- API routes --
    application.include_router(api_router)

    return application


app = create_app()

# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------

if __name__ == "__main__":
    uvicorn.run(
        "ragchat.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
