"""Vector store provider implementations.

PineconeProvider is used in production.  ChromaDBProvider persists to
CHROMADB_PERSIST_DIR and serves local development when Pinecone is not
configured.  ChromaDB is imported on demand by main.py, so it is not
re-exported here.
"""

from ragchat.providers.vector_store.pinecone_provider import PineconeProvider

__all__ = ["PineconeProvider"]
