"""Abstract base class for remote-source fetchers.

Defines the contract for downloading the raw bytes behind a URL together
with the server-declared content type, so the extractor can pick a
format.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class FetchedSource:
    """Raw response body from a URL fetch.

    Attributes
    ----------
    url:
        The URL that was requested.
    data:
        Response body bytes.
    content_type:
        The ``Content-Type`` header value, parameters included.
    """

    url: str
    data: bytes
    content_type: str = ""


# Concrete implementation: HttpSourceFetcher
# Located in: ragchat/providers/source/
class ISourceFetcher(ABC):
    """Contract for fetching remote documents."""

    @abstractmethod
    async def fetch(self, url: str) -> FetchedSource:
        """Download *url*.

        Raises
        ------
        ragchat.utils.errors.ExtractionError
            On timeout, non-2xx status, transport error, or an empty body.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a human-readable identifier for this fetcher."""

    @abstractmethod
    def is_available(self) -> bool:
        """Return ``True`` if the fetcher can make requests."""
