"""Unit tests for TieredChunker and clean_text."""

from __future__ import annotations

from ragchat.services.ingestion.chunker import ChunkTier, TieredChunker, clean_text


def _paragraphs(total_chars: int) -> str:
    sentence = "The quick brown fox jumps over the lazy dog near the river bank. "
    text = sentence * (total_chars // len(sentence) + 1)
    return text[:total_chars]


class TestCleanText:
    def test_crlf_normalised(self) -> None:
        assert clean_text("a\r\nb") == "a\nb"

    def test_collapses_blank_line_runs(self) -> None:
        assert clean_text("a\n\n\n\n\nb") == "a\n\nb"

    def test_collapses_whitespace_runs(self) -> None:
        assert clean_text("a     b\t\t\tc") == "a b c"

    def test_two_spaces_kept(self) -> None:
        assert clean_text("a  b") == "a  b"

    def test_trims(self) -> None:
        assert clean_text("   hello   ") == "hello"


class TestTierSelection:
    def test_default_tier(self) -> None:
        tier = TieredChunker().select_tier(5_000)
        assert (tier.chunk_size, tier.chunk_overlap) == (500, 50)

    def test_boundary_is_strictly_greater(self) -> None:
        chunker = TieredChunker()
        assert chunker.select_tier(10_000).chunk_size == 500
        assert chunker.select_tier(10_001).chunk_size == 750
        assert chunker.select_tier(100_000).chunk_size == 750
        assert chunker.select_tier(100_001).chunk_size == 1000

    def test_from_config(self) -> None:
        chunker = TieredChunker.from_config(
            {
                "min_chunk_length": 5,
                "chunk_tiers": [
                    {"min_length": 0, "chunk_size": 100, "chunk_overlap": 10},
                    {"min_length": 50, "chunk_size": 200, "chunk_overlap": 20},
                ],
            }
        )
        assert chunker.select_tier(10).chunk_size == 100
        assert chunker.select_tier(51).chunk_size == 200

    def test_from_config_empty_uses_defaults(self) -> None:
        chunker = TieredChunker.from_config({})
        assert chunker.select_tier(200_000).chunk_size == 1000


class TestChunk:
    def test_empty_text_gives_no_chunks(self) -> None:
        assert TieredChunker().chunk("   \n\n  ", "a.txt") == []

    def test_short_text_gives_no_chunks(self) -> None:
        assert TieredChunker().chunk("too short", "a.txt") == []

    def test_exactly_min_length_dropped(self) -> None:
        assert TieredChunker().chunk("x" * 20, "a.txt") == []

    def test_just_over_min_length_kept(self) -> None:
        chunks = TieredChunker().chunk("x" * 21, "a.txt")
        assert len(chunks) == 1

    def test_metadata_attached(self) -> None:
        chunks = TieredChunker().chunk(_paragraphs(3_000), "notes.txt")
        assert len(chunks) > 1
        total = len(chunks)
        for index, chunk in enumerate(chunks):
            assert chunk.file_name == "notes.txt"
            assert chunk.chunk_index == index
            assert chunk.total_chunks == total
            assert len(chunk.text.strip()) > 20

    def test_chunk_ids_unique(self) -> None:
        chunks = TieredChunker().chunk(_paragraphs(3_000), "notes.txt")
        assert len({c.chunk_id for c in chunks}) == len(chunks)

    def test_chunks_respect_tier_size(self) -> None:
        chunks = TieredChunker().chunk(_paragraphs(3_000), "notes.txt")
        assert all(len(c.text) <= 500 for c in chunks)

    def test_large_text_uses_larger_windows(self) -> None:
        chunks = TieredChunker().chunk(_paragraphs(20_000), "big.txt")
        assert max(len(c.text) for c in chunks) > 500
        assert all(len(c.text) <= 750 for c in chunks)

    def test_custom_tiers(self) -> None:
        chunker = TieredChunker(tiers=[ChunkTier(0, 100, 0)], min_chunk_length=0)
        chunks = chunker.chunk(_paragraphs(1_000), "x.txt")
        assert all(len(c.text) <= 100 for c in chunks)

    def test_deterministic_text(self) -> None:
        text = _paragraphs(5_000)
        first = [c.text for c in TieredChunker().chunk(text, "a")]
        second = [c.text for c in TieredChunker().chunk(text, "a")]
        assert first == second


class TestCoverage:
    @staticmethod
    def _numbered_text() -> str:
        paragraphs = [" ".join(f"w{i:05d}" for i in range(start, start + 60)) for start in range(0, 1200, 60)]
        return "\r\n\r\n\r\n".join(paragraphs)

    def test_chunks_cover_cleaned_text_in_order(self) -> None:
        text = self._numbered_text()
        cleaned = clean_text(text)
        chunks = TieredChunker().chunk(text, "numbers.txt")
        assert len(chunks) > 1

        covered_end = 0
        previous_start = -1
        for chunk in chunks:
            start = cleaned.find(chunk.text, previous_start + 1)
            assert start > previous_start
            # Anything skipped between chunks is whitespace the splitter trimmed.
            assert cleaned[covered_end:start].strip() == ""
            covered_end = max(covered_end, start + len(chunk.text))
            previous_start = start
        assert cleaned[covered_end:].strip() == ""
