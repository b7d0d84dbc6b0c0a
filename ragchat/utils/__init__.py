"""Utility modules for ragChat.

- **errors** -- Domain exception hierarchy rooted at RagChatError; each
  pipeline stage raises its own subclass so callers can handle failures
  without broad ``except Exception`` blocks.
- **logging** -- structlog setup with console output in development and
  structured JSON in production.
"""

from ragchat.utils.errors import (
    ConfigurationError,
    ConnectionError,
    EmbeddingError,
    ExtractionError,
    IngestionError,
    LLMError,
    MetadataStoreError,
    RagChatError,
    ValidationError,
    VectorStoreError,
)
from ragchat.utils.logging import configure_logging, get_logger

__all__ = [
    "ConfigurationError",
    "ConnectionError",
    "EmbeddingError",
    "ExtractionError",
    "IngestionError",
    "LLMError",
    "MetadataStoreError",
    "RagChatError",
    "ValidationError",
    "VectorStoreError",
    "configure_logging",
    "get_logger",
]
