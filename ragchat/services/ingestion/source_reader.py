"""Source reader: turns an upload or a URL into a :class:`SourcePayload`.

The payload is the raw bytes plus the format tag the extractor dispatches
on.  No parsing happens here.
"""

from __future__ import annotations

from dataclasses import dataclass

import structlog

from ragchat.interfaces.source_fetcher import ISourceFetcher
from ragchat.models.document import SourceFormat
from ragchat.utils.errors import ExtractionError, ValidationError

logger = structlog.get_logger(logger_name=__name__)


@dataclass(frozen=True)
class SourcePayload:
    """Raw content of one source awaiting extraction.

    Attributes
    ----------
    file_name:
        Display name used for the document row and chunk metadata.
    format:
        Format tag chosen from the declared content type.
    data:
        Raw bytes.
    url:
        Origin URL for web sources, ``None`` for uploads.
    """

    file_name: str
    format: SourceFormat
    data: bytes
    url: str | None = None


def validate_url(url: str) -> str:
    """Return *url* stripped, or raise if it is not an http(s) URL."""
    cleaned = (url or "").strip()
    if not (cleaned.startswith("http://") or cleaned.startswith("https://")):
        raise ValidationError("Invalid URL: must start with http:// or https://")
    return cleaned


class SourceReader:
    """Builds :class:`SourcePayload` objects from uploads and URLs."""

    def __init__(self, fetcher: ISourceFetcher) -> None:
        self._fetcher = fetcher

    def from_upload(self, file_name: str, content_type: str | None, data: bytes) -> SourcePayload:
        if not data:
            raise ExtractionError("File content is empty")
        fmt = SourceFormat.from_content_type(content_type)
        logger.info(
            "upload_read",
            file_name=file_name,
            content_type=content_type,
            format=fmt.value,
            size_kb=round(len(data) / 1024),
        )
        return SourcePayload(file_name=file_name, format=fmt, data=data)

    async def from_url(self, url: str, file_name: str) -> SourcePayload:
        url = validate_url(url)
        fetched = await self._fetcher.fetch(url)
        if not fetched.data:
            raise ExtractionError("URL content is empty")
        fmt = SourceFormat.from_content_type(fetched.content_type)
        return SourcePayload(file_name=file_name, format=fmt, data=fetched.data, url=url)
