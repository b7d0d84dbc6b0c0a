"""Tiered text chunking.

Longer documents get larger windows so the chunk count (and embedding
cost) grows sub-linearly with document size:

    length > 100 000 chars  ->  1000 / 100  (size / overlap)
    length >  10 000 chars  ->   750 / 75
    otherwise               ->   500 / 50

Text is normalised first, then split with LangChain's
``RecursiveCharacterTextSplitter``.  Chunks of 20 characters or fewer
(after trimming) are dropped.
"""

from __future__ import annotations

import re
import uuid
from dataclasses import dataclass

import structlog
from langchain_text_splitters import RecursiveCharacterTextSplitter

from ragchat.models.rag import DocumentChunk

logger = structlog.get_logger(logger_name=__name__)

_CRLF = re.compile(r"\r\n")
_MANY_NEWLINES = re.compile(r"\n{3,}")
_MANY_SPACES = re.compile(r"\s{3,}")


@dataclass(frozen=True)
class ChunkTier:
    """Splitter settings applied when text length exceeds ``min_length``."""

    min_length: int
    chunk_size: int
    chunk_overlap: int


DEFAULT_TIERS: tuple[ChunkTier, ...] = (
    ChunkTier(min_length=100_000, chunk_size=1000, chunk_overlap=100),
    ChunkTier(min_length=10_000, chunk_size=750, chunk_overlap=75),
    ChunkTier(min_length=0, chunk_size=500, chunk_overlap=50),
)


def clean_text(text: str) -> str:
    """Normalise line endings and collapse runs of blank lines and whitespace."""
    text = _CRLF.sub("\n", text)
    text = _MANY_NEWLINES.sub("\n\n", text)
    text = _MANY_SPACES.sub(" ", text)
    return text.strip()


class TieredChunker:
    """Splits document text into :class:`DocumentChunk` objects.

    Parameters
    ----------
    tiers:
        Candidate settings; the first tier whose ``min_length`` is strictly
        less than the cleaned text length wins.  A tier with
        ``min_length=0`` should be present as the default.
    min_chunk_length:
        Chunks whose trimmed length is at most this value are discarded.
    """

    def __init__(
        self,
        tiers: tuple[ChunkTier, ...] | list[ChunkTier] = DEFAULT_TIERS,
        min_chunk_length: int = 20,
    ) -> None:
        self._tiers = sorted(tiers, key=lambda t: t.min_length, reverse=True)
        self._min_chunk_length = min_chunk_length

    @classmethod
    def from_config(cls, ingestion_config: dict) -> TieredChunker:
        raw_tiers = ingestion_config.get("chunk_tiers") or []
        tiers = [
            ChunkTier(
                min_length=int(t["min_length"]),
                chunk_size=int(t["chunk_size"]),
                chunk_overlap=int(t["chunk_overlap"]),
            )
            for t in raw_tiers
        ] or list(DEFAULT_TIERS)
        return cls(tiers=tiers, min_chunk_length=int(ingestion_config.get("min_chunk_length", 20)))

    def select_tier(self, length: int) -> ChunkTier:
        for tier in self._tiers:
            if length > tier.min_length:
                return tier
        return self._tiers[-1]

    def chunk(self, text: str, file_name: str) -> list[DocumentChunk]:
        """Clean, split and filter *text*.

        Returns an empty list when nothing longer than the minimum chunk
        length survives cleaning.
        """
        cleaned = clean_text(text or "")
        if not cleaned:
            return []

        tier = self.select_tier(len(cleaned))
        splitter = RecursiveCharacterTextSplitter(
            chunk_size=tier.chunk_size,
            chunk_overlap=tier.chunk_overlap,
            length_function=len,
            separators=["\n\n", "\n", " ", ""],
        )
        pieces = [p for p in splitter.split_text(cleaned) if len(p.strip()) > self._min_chunk_length]
        if not pieces:
            logger.debug("chunking_no_valid_chunks", file_name=file_name, text_length=len(cleaned))
            return []

        total = len(pieces)
        chunks = [
            DocumentChunk(
                chunk_id=str(uuid.uuid4()),
                text=piece,
                file_name=file_name,
                chunk_index=index,
                total_chunks=total,
            )
            for index, piece in enumerate(pieces)
        ]

        logger.debug(
            "chunking_complete",
            file_name=file_name,
            text_length=len(cleaned),
            chunk_size=tier.chunk_size,
            chunk_overlap=tier.chunk_overlap,
            num_chunks=total,
        )
        return chunks
