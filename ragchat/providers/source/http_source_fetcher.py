"""HTTP source fetcher using httpx.

Downloads the raw body behind a URL with a desktop-browser User-Agent
(some sites refuse unknown agents) and reports the server's content type
so the extractor can choose a format.
"""

from __future__ import annotations

import httpx
import structlog

from ragchat.interfaces.source_fetcher import FetchedSource, ISourceFetcher
from ragchat.utils.errors import ExtractionError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_TIMEOUT = 30.0
_DEFAULT_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
    ),
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
}


class HttpSourceFetcher(ISourceFetcher):
    """Remote document fetcher backed by ``httpx.AsyncClient``."""

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        timeout: float = _DEFAULT_TIMEOUT,
    ) -> None:
        self._owns_client = http_client is None
        self._client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(timeout),
            follow_redirects=True,
        )

    async def fetch(self, url: str) -> FetchedSource:
        try:
            response = await self._client.get(url, headers=_DEFAULT_HEADERS)
            response.raise_for_status()
        except httpx.TimeoutException as exc:
            raise ExtractionError(
                message=f"Timeout fetching {url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPStatusError as exc:
            raise ExtractionError(
                message=f"Failed to fetch URL: {exc.response.status_code} {exc.response.reason_phrase}",
                provider_name=self.get_provider_name(),
            ) from exc
        except httpx.HTTPError as exc:
            raise ExtractionError(
                message=f"HTTP error fetching {url}: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        data = response.content
        if not data:
            raise ExtractionError(
                message=f"URL returned an empty body: {url}",
                provider_name=self.get_provider_name(),
            )

        content_type = response.headers.get("content-type", "")
        logger.info(
            "source_fetched",
            url=url,
            content_type=content_type,
            size_bytes=len(data),
        )
        return FetchedSource(url=url, data=data, content_type=content_type)

    async def aclose(self) -> None:
        """Close the underlying client if this fetcher created it."""
        if self._owns_client:
            await self._client.aclose()

    def is_available(self) -> bool:
        """Always available; no credentials required."""
        return True

    def get_provider_name(self) -> str:
        return "http_source"
