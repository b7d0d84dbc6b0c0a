"""Embedding provider implementations.

Embeddings turn chunk text and search questions into vectors for the
vector store.

    OpenAIEmbeddingProvider -- text-embedding-3-small (1536 dims) or any
    OpenAI-compatible endpoint via OPENAI_BASE_URL.
"""

from ragchat.providers.embedding.openai_embedding_provider import (
    OpenAIEmbeddingProvider,
    validate_openai_api_key,
)

__all__ = ["OpenAIEmbeddingProvider", "validate_openai_api_key"]
