"""Shared pytest fixtures for the ragChat test suite."""

from __future__ import annotations

import hashlib
import struct
import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import pytest

from ragchat.config.settings import Settings
from ragchat.interfaces.document_store import IDocumentStore
from ragchat.interfaces.embedding_provider import IEmbeddingProvider
from ragchat.interfaces.llm_provider import IChatModelProvider
from ragchat.interfaces.vector_store_provider import IVectorStoreProvider
from ragchat.models.document import DeleteResult, Document, DocumentCreate, InitResult
from ragchat.models.rag import DocumentChunk, RetrievedChunk


def make_settings(**overrides) -> Settings:
    """Settings isolated from the developer's ``.env`` file."""
    defaults = {
        "openai_api_key": "sk-test",
        "openai_base_url": "",
        "openai_embedding_model": "",
        "deepseek_api_key": "",
        "pinecone_api_key": "",
        "pinecone_environment": "",
        "pinecone_host": "",
        "postgres_host": "",
        "postgres_password": "",
        "postgres_connection_string": "",
        "supabase_url": "",
        "supabase_key": "",
    }
    defaults.update(overrides)
    return Settings(_env_file=None, **defaults)


@pytest.fixture
def settings() -> Settings:
    return make_settings()


# ---------------------------------------------------------------------------
# RAG fixtures
# ---------------------------------------------------------------------------

_EMBEDDING_DIM = 128


def _hash_to_vector(text: str, dim: int = _EMBEDDING_DIM) -> list[float]:
    """Deterministic unit-length vector derived from a SHA-256 of *text*."""
    digest = hashlib.sha256(text.encode("utf-8")).digest()
    raw = digest
    while len(raw) < dim * 4:
        raw += hashlib.sha256(raw).digest()
    raw = raw[: dim * 4]
    # Map each 4-byte word into [-1, 1) so NaN/inf bit patterns never appear.
    values = [(w / 2**31) - 1.0 for w in struct.unpack(f"<{dim}I", raw)]
    magnitude = max(sum(v * v for v in values) ** 0.5, 1e-10)
    return [v / magnitude for v in values]


class MockEmbeddingProvider(IEmbeddingProvider):
    """In-memory deterministic embedding provider for tests."""

    def __init__(self) -> None:
        self.calls: list[list[str]] = []

    async def embed(self, texts: list[str]) -> list[list[float]]:
        self.calls.append(list(texts))
        return [_hash_to_vector(t) for t in texts]

    async def embed_single(self, text: str) -> list[float]:
        return _hash_to_vector(text)

    def get_dimension(self) -> int:
        return _EMBEDDING_DIM

    def get_provider_name(self) -> str:
        return "mock-embedding"

    def is_available(self) -> bool:
        return True


class MockVectorStore(IVectorStoreProvider):
    """In-memory vector store backed by a dict, ranked by dot product."""

    def __init__(self) -> None:
        self._chunks: dict[str, tuple[DocumentChunk, list[float]]] = {}
        self.ensure_calls = 0

    async def ensure_index(self) -> bool:
        self.ensure_calls += 1
        return True

    async def add_chunks(self, chunks: list[DocumentChunk], embeddings: list[list[float]]) -> int:
        for chunk, emb in zip(chunks, embeddings, strict=True):
            self._chunks[chunk.chunk_id] = (chunk, emb)
        return len(chunks)

    async def query(self, query_embedding: list[float], top_k: int = 5) -> list[RetrievedChunk]:
        scored = []
        for chunk, emb in self._chunks.values():
            score = sum(a * b for a, b in zip(query_embedding, emb, strict=False))
            scored.append(RetrievedChunk(chunk=chunk, similarity_score=max(0.0, min(1.0, score))))
        scored.sort(key=lambda rc: rc.similarity_score, reverse=True)
        return scored[:top_k]

    def get_provider_name(self) -> str:
        return "mock-vector-store"

    def is_available(self) -> bool:
        return True

    @property
    def chunks(self) -> list[DocumentChunk]:
        return [c for c, _ in self._chunks.values()]


class MockDocumentStore(IDocumentStore):
    """In-memory ``documents`` table."""

    def __init__(self) -> None:
        self.rows: dict[str, Document] = {}

    async def initialize(self) -> InitResult:
        return InitResult(success=True, message="Database is initialized and ready to use.")

    async def table_exists(self) -> bool:
        return True

    async def list_documents(self) -> list[Document]:
        return sorted(self.rows.values(), key=lambda d: d.created_at, reverse=True)

    async def create_document(self, doc: DocumentCreate) -> Document:
        now = datetime.now(timezone.utc)
        document = Document(
            id=str(uuid.uuid4()),
            filename=doc.filename,
            type=doc.type,
            content=doc.content,
            url=doc.url,
            created_at=now,
            updated_at=now,
        )
        self.rows[document.id] = document
        return document

    async def delete_document(self, document_id: str) -> DeleteResult:
        removed = self.rows.pop(document_id, None)
        return DeleteResult(success=True, deleted=1 if removed else 0)

    async def close(self) -> None:
        return None


@pytest.fixture
def mock_embedding_provider() -> MockEmbeddingProvider:
    return MockEmbeddingProvider()


@pytest.fixture
def mock_vector_store() -> MockVectorStore:
    return MockVectorStore()


@pytest.fixture
def mock_document_store() -> MockDocumentStore:
    return MockDocumentStore()


@pytest.fixture
def mock_chat_provider() -> IChatModelProvider:
    """MagicMock chat provider; set ``stream_chat.side_effect`` per test."""
    mock = MagicMock(spec=IChatModelProvider)
    mock.get_provider_name.return_value = "mock-chat"
    mock.is_available.return_value = True
    return mock


@pytest.fixture
def failing_embedding_provider() -> IEmbeddingProvider:
    """Embedding provider whose every call raises EmbeddingError."""
    from ragchat.utils.errors import EmbeddingError

    mock = MagicMock(spec=IEmbeddingProvider)
    mock.get_provider_name.return_value = "broken-embedding"
    mock.is_available.return_value = False
    mock.embed = AsyncMock(side_effect=EmbeddingError("OpenAI API key is missing or invalid"))
    mock.embed_single = AsyncMock(side_effect=EmbeddingError("OpenAI API key is missing or invalid"))
    return mock
