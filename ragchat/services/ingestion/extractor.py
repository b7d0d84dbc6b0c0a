"""Format-specific text extraction.

One routine per :class:`~ragchat.models.document.SourceFormat` variant:

    PDF   -- PyMuPDF (fitz) page text
    DOCX  -- python-docx paragraphs and tables
    HTML  -- trafilatura main content, BeautifulSoup as a fallback
    JSON  -- pretty-printed; invalid JSON is kept as text
    TEXT  -- UTF-8 decode

Every routine rejects an empty result with :class:`ExtractionError`.
"""

from __future__ import annotations

import io
import json

import fitz  # PyMuPDF -- the "fitz" import name is a PyMuPDF convention
import structlog
import trafilatura
from bs4 import BeautifulSoup
from docx import Document as DocxDocument

from ragchat.models.document import SourceFormat
from ragchat.services.ingestion.source_reader import SourcePayload
from ragchat.utils.errors import ExtractionError

logger = structlog.get_logger(logger_name=__name__)


class FormatExtractor:
    """Dispatches a :class:`SourcePayload` to the matching extraction routine."""

    def extract(self, payload: SourcePayload) -> str:
        handlers = {
            SourceFormat.PDF: self._extract_pdf,
            SourceFormat.DOCX: self._extract_docx,
            SourceFormat.HTML: self._extract_html,
            SourceFormat.JSON: self._extract_json,
            SourceFormat.TEXT: self._extract_text,
        }
        handler = handlers.get(payload.format, self._extract_text)
        try:
            text = handler(payload.data)
        except ExtractionError:
            raise
        except Exception as exc:
            raise ExtractionError(
                message=f"Failed to parse {payload.format.value} content: {exc}",
                provider_name=payload.format.value,
            ) from exc

        if not text or not text.strip():
            raise ExtractionError(
                message=f"No text could be extracted from {payload.format.value} content",
                provider_name=payload.format.value,
            )

        logger.info(
            "text_extracted",
            file_name=payload.file_name,
            format=payload.format.value,
            text_length=len(text),
        )
        return text

    # ------------------------------------------------------------------
    # Per-format routines
    # ------------------------------------------------------------------

    @staticmethod
    def _extract_pdf(data: bytes) -> str:
        pages: list[str] = []
        with fitz.open(stream=data, filetype="pdf") as doc:
            for page in doc:
                text = page.get_text("text").strip()
                if text:
                    pages.append(text)
        return "\n\n".join(pages)

    @staticmethod
    def _extract_docx(data: bytes) -> str:
        doc = DocxDocument(io.BytesIO(data))
        parts = [p.text.strip() for p in doc.paragraphs if p.text.strip()]

        for table in doc.tables:
            rows: list[str] = []
            for row in table.rows:
                cells = [cell.text.strip() for cell in row.cells]
                if any(cells):
                    rows.append(" | ".join(cells))
            if rows:
                parts.append("\n".join(rows))

        return "\n\n".join(parts)

    @staticmethod
    def _extract_html(data: bytes) -> str:
        html = data.decode("utf-8", errors="replace")
        text = trafilatura.extract(html, include_comments=False, include_tables=True)
        if text:
            return text

        logger.debug("trafilatura_extraction_empty", msg="Falling back to BeautifulSoup.")
        soup = BeautifulSoup(html, "html.parser")
        for tag in soup(["script", "style", "noscript"]):
            tag.decompose()
        return soup.get_text(separator="\n", strip=True)

    @staticmethod
    def _extract_json(data: bytes) -> str:
        raw = data.decode("utf-8", errors="replace")
        try:
            return json.dumps(json.loads(raw), indent=2, ensure_ascii=False)
        except json.JSONDecodeError:
            return raw

    @staticmethod
    def _extract_text(data: bytes) -> str:
        return data.decode("utf-8", errors="replace")
