"""Public interface definitions for every external service ragChat talks to.

Services and routes depend on these abstract base classes only.  Concrete
adapters live in ``ragchat/providers/`` and are wired up in
``ragchat/main.py`` at startup, so a test can swap any of them for a fake.

CONCRETE PROVIDER MAP:
    Interface             →  Concrete implementations (in ragchat/providers/)
    ─────────────────────────────────────────────────────────────────────
    IEmbeddingProvider    →  OpenAIEmbeddingProvider
    IVectorStoreProvider  →  PineconeProvider, ChromaDBProvider
    IDocumentBackend      →  PostgresDocumentBackend, SupabaseDocumentBackend
    IDocumentStore        →  DocumentStore
    IChatModelProvider    →  OpenAICompatibleChatProvider
    ISourceFetcher        →  HttpSourceFetcher
"""

from ragchat.interfaces.document_store import IDocumentBackend, IDocumentStore
from ragchat.interfaces.embedding_provider import IEmbeddingProvider
from ragchat.interfaces.llm_provider import IChatModelProvider
from ragchat.interfaces.source_fetcher import FetchedSource, ISourceFetcher
from ragchat.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "FetchedSource",
    "IChatModelProvider",
    "IDocumentBackend",
    "IDocumentStore",
    "IEmbeddingProvider",
    "ISourceFetcher",
    "IVectorStoreProvider",
]
