"""Custom exception hierarchy for ragChat.

All application exceptions inherit from :class:`RagChatError`, which carries
an optional ``provider_name`` so error handlers can identify which external
service (e.g. "openai", "pinecone", "postgres") caused the failure.

The hierarchy follows the ingestion and chat flow:

    RagChatError  (base -- catch-all for any ragChat error)
    +-- ExtractionError     (empty or unparseable source)
    +-- EmbeddingError      (credential or remote embedding failure)
    +-- VectorStoreError    (index creation / upsert / query failure)
    +-- ConnectionError     (no metadata-store backend reachable)
    +-- MetadataStoreError  (query failure on a resolved backend)
    +-- ValidationError     (bad request input)
    +-- IngestionError      (primary ingestion phase failed)
    +-- LLMError            (chat model call failure)
    +-- ConfigurationError  (startup / missing config)

``ConnectionError`` shadows the builtin of the same name.  Modules that
also handle ``OSError``-style connection failures should import this one
under an alias (``from ragchat.utils.errors import ConnectionError as
DBConnectionError``).
"""


class RagChatError(Exception):
    """Base exception for all ragChat errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name``.  ``__str__`` prefixes the provider name in brackets,
    e.g. ``[pinecone] Index creation failed``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Ingestion errors
# ---------------------------------------------------------------------------

class ExtractionError(RagChatError):
    """Raised when a source yields no usable text (empty file, parser failure)."""

    def __init__(
        self,
        message: str = "Text extraction failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingError(RagChatError):
    """Raised when embeddings cannot be generated.

    Covers both a missing/malformed API credential (detected before any
    network call) and errors returned by the embedding endpoint.
    """

    def __init__(
        self,
        message: str = "Embedding generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class VectorStoreError(RagChatError):
    """Raised when a vector index cannot be created, written, or queried."""

    def __init__(
        self,
        message: str = "Vector store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class IngestionError(RagChatError):
    """Raised when the primary ingestion phase (extract + metadata write) fails."""

    def __init__(
        self,
        message: str = "Document ingestion failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Metadata store errors
# ---------------------------------------------------------------------------

class ConnectionError(RagChatError):  # noqa: A001
    """Raised when neither the direct database nor the hosted client is usable."""

    def __init__(
        self,
        message: str = "Unable to connect to the database",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class MetadataStoreError(RagChatError):
    """Raised when a query against a resolved metadata backend fails."""

    def __init__(
        self,
        message: str = "Metadata store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Request / configuration errors
# ---------------------------------------------------------------------------

class ValidationError(RagChatError):
    """Raised for missing required fields, bad URLs, or oversized uploads."""

    def __init__(
        self,
        message: str = "Invalid request",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class LLMError(RagChatError):
    """Raised when a chat model call fails or returns an unusable response."""

    def __init__(
        self,
        message: str = "LLM API call failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(RagChatError):
    """Raised when configuration is invalid or missing at startup."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
