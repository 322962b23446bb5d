"""Unit tests for the TextChunker: tiling, overlap, classification and scoring."""

from __future__ import annotations

import pytest

from docrag.models.document import Chunk, ChunkOptions, StructuralType
from docrag.services.chunker import TextChunker, classify_chunk, score_chunk, validate_options
from docrag.utils.errors import ConfigurationError

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _rebuild(chunks: list[Chunk]) -> str:
    """Concatenate chunks after dropping each chunk's overlap prefix."""
    if not chunks:
        return ""
    return chunks[0].content + "".join(c.content[c.overlap_length :] for c in chunks[1:])


def _chunker(max_size: int = 200, min_size: int = 40, overlap: int = 30) -> TextChunker:
    return TextChunker(ChunkOptions(max_size=max_size, min_size=min_size, overlap=overlap))


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestCoverageAndBounds:
    def test_rebuilds_stripped_source(self, sample_text: str) -> None:
        chunks = _chunker().chunk(sample_text)

        assert len(chunks) > 1
        assert _rebuild(chunks) == sample_text.strip()

    def test_size_and_overlap_bounds(self, sample_text: str) -> None:
        opts = ChunkOptions(max_size=120, min_size=20, overlap=25)
        chunks = TextChunker(opts).chunk(sample_text)

        for chunk in chunks:
            assert len(chunk.content) <= opts.max_size
            assert chunk.overlap_length <= opts.overlap
        assert chunks[0].overlap_length == 0

    def test_chunks_are_exact_slices(self, sample_text: str) -> None:
        padded = "\n\n  " + sample_text + "  \n"
        chunks = _chunker().chunk(padded)

        for i, chunk in enumerate(chunks):
            assert chunk.index == i
            assert padded[chunk.start_offset : chunk.end_offset] == chunk.content
        for prev, nxt in zip(chunks, chunks[1:]):
            assert nxt.start_offset == prev.end_offset - nxt.overlap_length

    def test_unbroken_text_is_hard_cut(self) -> None:
        text = "x" * 250
        chunks = _chunker(max_size=100, min_size=10, overlap=20).chunk(text)

        assert all(len(c.content) <= 100 for c in chunks)
        assert _rebuild(chunks) == text

    def test_long_sentence_falls_back_to_word_cuts(self) -> None:
        text = " ".join(["word"] * 120)
        chunks = _chunker(max_size=80, min_size=10, overlap=15).chunk(text)

        assert all(len(c.content) <= 80 for c in chunks)
        assert _rebuild(chunks) == text

    @pytest.mark.parametrize("text", ["", "   ", "\n\n\t"])
    def test_blank_text_yields_no_chunks(self, text: str) -> None:
        assert _chunker().chunk(text) == []

    def test_short_text_is_single_chunk(self) -> None:
        chunks = _chunker().chunk("  A short note.  ")

        assert len(chunks) == 1
        assert chunks[0].content == "A short note."
        assert chunks[0].start_offset == 2


class TestOverlap:
    def test_two_paragraph_example(self) -> None:
        text = "Intro paragraph.\n\nSecond paragraph with more detail."
        chunks = _chunker(max_size=40, min_size=10, overlap=5).chunk(text)

        assert len(chunks) == 2
        assert chunks[0].content == "Intro paragraph."
        assert chunks[1].overlap_length > 0
        assert chunks[1].content.startswith(chunks[0].content[-chunks[1].overlap_length :])
        assert chunks[1].content.endswith("Second paragraph with more detail.")
        assert len(chunks[1].content) <= 40

    def test_overlap_prefers_whole_sentences(self) -> None:
        text = (
            "First sentence is here. Tail one.\n\n"
            "Another paragraph follows with enough words to force a split."
        )
        chunks = _chunker(max_size=80, min_size=10, overlap=12).chunk(text)

        assert len(chunks) == 2
        carried = chunks[1].content[: chunks[1].overlap_length]
        assert carried == "Tail one."

    def test_zero_overlap(self, sample_text: str) -> None:
        chunks = _chunker(overlap=0).chunk(sample_text)

        assert all(c.overlap_length == 0 for c in chunks)
        assert "".join(c.content for c in chunks) == sample_text.strip()

    def test_per_call_options_override(self, sample_text: str) -> None:
        chunker = _chunker(max_size=1000)
        assert len(chunker.chunk(sample_text)) == 1
        assert len(chunker.chunk(sample_text, ChunkOptions(max_size=100, min_size=10, overlap=10))) > 1


class TestValidation:
    @pytest.mark.parametrize(
        ("max_size", "min_size", "overlap"),
        [(0, 1, 0), (100, 0, 10), (100, 200, 10), (100, 50, 100), (100, 50, -1)],
    )
    def test_invalid_options_rejected(self, max_size: int, min_size: int, overlap: int) -> None:
        with pytest.raises(ConfigurationError):
            validate_options(ChunkOptions(max_size=max_size, min_size=min_size, overlap=overlap))

    def test_constructor_validates(self) -> None:
        with pytest.raises(ConfigurationError):
            TextChunker(ChunkOptions(max_size=10, min_size=20, overlap=0))


class TestClassification:
    @pytest.mark.parametrize(
        ("content", "expected"),
        [
            ("Introduction", StructuralType.HEADING),
            ("- apples\n- pears\n- plums", StructuralType.LIST),
            ("1. first\n2. second", StructuralType.LIST),
            ("• solar\n• wind", StructuralType.LIST),
            ("name\tvalue\nalpha\t1", StructuralType.TABLE),
            ("| a | b |\n| 1 | 2 |", StructuralType.TABLE),
            (
                "This paragraph is long enough to count as prose and ends properly.",
                StructuralType.PARAGRAPH,
            ),
            ("lowercase fragment", StructuralType.OTHER),
        ],
    )
    def test_classify(self, content: str, expected: StructuralType) -> None:
        assert classify_chunk(content) == expected

    def test_chunks_carry_structural_type(self) -> None:
        chunker = _chunker(max_size=40, min_size=5, overlap=0)

        assert chunker.chunk("Overview")[0].structural_type == StructuralType.HEADING
        assert chunker.chunk("- one item\n- two item")[0].structural_type == StructuralType.LIST


class TestScoring:
    def test_baseline_score(self) -> None:
        assert score_chunk("short") == 50.0

    def test_rich_content_scores_high(self) -> None:
        content = "A sentence with capital letters and more than ten words in it. " * 3
        assert score_chunk(content) == 100.0

    def test_short_own_length_is_penalised(self) -> None:
        assert score_chunk("short", own_length=5, min_size=10) == 30.0

    def test_score_is_clamped(self) -> None:
        assert 0.0 <= score_chunk("", own_length=0, min_size=10) <= 100.0
