"""Paragraph-aware text chunking with sentence-level overlap.

Splits extracted text into :class:`~docrag.models.document.Chunk` objects
sized for embedding.  Every chunk is an exact slice of the source text
(``content == text[start_offset:end_offset]``), and consecutive chunks are
contiguous apart from a deliberate overlap: chunk *i+1* starts exactly
``overlap_length`` characters before chunk *i* ends.  Dropping each
chunk's overlap prefix and concatenating therefore rebuilds the stripped
source.

Algorithm:

1. The stripped text is tiled into *units*: one per paragraph (blank-line
   boundaries), each unit carrying the whitespace gap that precedes it.
   Units longer than ``max_size`` are split at sentence ends, then at word
   ends, then hard-cut, so every unit fits.
2. Units are packed greedily.  When the next unit would push the buffer
   past ``max_size`` the buffer is emitted and the next buffer is seeded
   with an overlap taken from the tail of the emitted chunk: whole trailing
   sentences if they fit the budget, otherwise trailing words, otherwise
   trailing characters.
3. Each chunk is classified (heading/list/table/paragraph/other) and given
   a heuristic confidence score.
"""

from __future__ import annotations

import re

import structlog

from docrag.models.document import Chunk, ChunkOptions, StructuralType
from docrag.utils.confidence import clamp_confidence
from docrag.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)

# Abbreviations whose trailing period does not end a sentence.
_ABBREVIATION_RE = re.compile(
    r"\b(Dr|Mr|Mrs|Ms|Prof|Jr|Sr|St|Ave|Blvd|Vol|No|vs|etc|approx|dept|est|govt|inc|ltd|co|ft|e\.g|i\.e)\."
)
_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")
_SENTENCE_END_RE = re.compile(r"[.!?]+[\"')\]]*(?=\s|$)")
_WORD_RE = re.compile(r"\S+")

_HEADING_RE = re.compile(r"^[A-Z][^.!?\n]*$")
_LIST_MARKER_RE = re.compile(r"^\s*(?:[-*+•◦▪‣]|\d+[.)])\s", re.MULTILINE)
_TYPOGRAPHIC_BULLETS = ("•", "◦", "▪", "‣")


class TextChunker:
    """Splits text into overlapping, structurally typed chunks.

    Parameters
    ----------
    options:
        Default sizing (``max_size``, ``min_size``, ``overlap`` in
        characters); may be overridden per call.

    Raises
    ------
    ConfigurationError
        If the options are inconsistent.
    """

    def __init__(self, options: ChunkOptions | None = None) -> None:
        self._options = options or ChunkOptions()
        validate_options(self._options)

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def chunk(self, text: str, options: ChunkOptions | None = None) -> list[Chunk]:
        """Split *text* into chunks.

        Parameters
        ----------
        text:
            Source text.  Leading and trailing whitespace is excluded from
            the chunks but offsets refer to the unmodified string.
        options:
            Per-call override of the constructor options.

        Returns
        -------
        list[Chunk]
            Chunks ordered by ``index``.  Whitespace-only input yields ``[]``.
        """
        opts = options or self._options
        if options is not None:
            validate_options(opts)

        match = re.search(r"\S", text or "")
        if match is None:
            return []
        start = match.start()
        end = len(text.rstrip())

        units = self._build_units(text, start, end, opts.max_size)
        spans = self._accumulate(text, units, opts)

        chunks = [
            self._make_chunk(text, index, span_start, span_end, overlap, opts)
            for index, (span_start, span_end, overlap) in enumerate(spans)
        ]
        logger.debug(
            "chunking_complete",
            num_chunks=len(chunks),
            text_length=end - start,
            max_size=opts.max_size,
        )
        return chunks

    # ------------------------------------------------------------------
    # Unit construction
    # ------------------------------------------------------------------

    def _build_units(self, text: str, start: int, end: int, max_size: int) -> list[tuple[int, int]]:
        """Tile ``text[start:end]`` into paragraph units no longer than *max_size*."""
        units: list[tuple[int, int]] = []
        cursor = start
        for brk in _PARAGRAPH_BREAK_RE.finditer(text, start, end):
            # The paragraph ends where its break begins; the break joins the next unit.
            units.extend(self._fit_span(text, cursor, brk.start(), max_size, level=0))
            cursor = brk.start()
        units.extend(self._fit_span(text, cursor, end, max_size, level=0))
        return [u for u in units if u[1] > u[0]]

    def _fit_span(
        self,
        text: str,
        start: int,
        end: int,
        max_size: int,
        level: int,
    ) -> list[tuple[int, int]]:
        """Split ``[start, end)`` at sentence (0), word (1) or character (2) cuts."""
        if end - start <= max_size:
            return [(start, end)]

        if level >= 2:
            return [(pos, min(pos + max_size, end)) for pos in range(start, end, max_size)]

        cuts = self._sentence_ends(text, start, end) if level == 0 else self._word_ends(text, start, end)
        pieces: list[tuple[int, int]] = []
        piece_start = start
        for cut in cuts:
            if start < cut < end:
                pieces.append((piece_start, cut))
                piece_start = cut
        pieces.append((piece_start, end))

        fitted: list[tuple[int, int]] = []
        for piece_start, piece_end in pieces:
            fitted.extend(self._fit_span(text, piece_start, piece_end, max_size, level + 1))
        return fitted

    @staticmethod
    def _sentence_ends(text: str, start: int, end: int) -> list[int]:
        """Absolute offsets just past each sentence-ending punctuation run."""
        segment = _ABBREVIATION_RE.sub(lambda m: m.group(0)[:-1] + "\x00", text[start:end])
        return [start + m.end() for m in _SENTENCE_END_RE.finditer(segment)]

    @staticmethod
    def _word_ends(text: str, start: int, end: int) -> list[int]:
        return [start + m.end() for m in _WORD_RE.finditer(text[start:end])]

    # ------------------------------------------------------------------
    # Accumulation and overlap
    # ------------------------------------------------------------------

    def _accumulate(
        self,
        text: str,
        units: list[tuple[int, int]],
        opts: ChunkOptions,
    ) -> list[tuple[int, int, int]]:
        """Greedily pack units into ``(start, end, overlap_length)`` spans."""
        spans: list[tuple[int, int, int]] = []
        buf_start: int | None = None
        buf_end = 0
        buf_overlap = 0

        for unit_start, unit_end in units:
            if buf_start is None:
                buf_start, buf_end, buf_overlap = unit_start, unit_end, 0
                continue

            if unit_end - buf_start > opts.max_size:
                spans.append((buf_start, buf_end, buf_overlap))
                budget = min(
                    opts.overlap,
                    (buf_end - buf_start) // 2,
                    opts.max_size - (unit_end - unit_start),
                )
                carried = self._overlap_length(text[buf_start:buf_end], budget)
                buf_start, buf_overlap = buf_end - carried, carried
            buf_end = unit_end

        if buf_start is not None:
            spans.append((buf_start, buf_end, buf_overlap))
        return spans

    def _overlap_length(self, chunk_text: str, budget: int) -> int:
        """Length of the tail of *chunk_text* carried into the next chunk.

        Walks back over whole trailing sentences while they fit *budget*;
        falls back to trailing words, then to trailing characters.
        """
        if budget <= 0:
            return 0
        length = len(chunk_text)

        boundaries = self._sentence_ends(chunk_text, 0, length)
        boundaries += [m.end() for m in _PARAGRAPH_BREAK_RE.finditer(chunk_text)]
        sentence_starts = [
            pos for pos in (self._next_non_space(chunk_text, b) for b in boundaries) if pos < length
        ]
        fitting = [pos for pos in sentence_starts if length - pos <= budget]
        if fitting:
            return length - min(fitting)

        word_starts = [m.start() for m in _WORD_RE.finditer(chunk_text)]
        fitting = [pos for pos in word_starts if length - pos <= budget]
        if fitting:
            return length - min(fitting)

        return min(budget, length)

    @staticmethod
    def _next_non_space(text: str, pos: int) -> int:
        while pos < len(text) and text[pos].isspace():
            pos += 1
        return pos

    # ------------------------------------------------------------------
    # Classification and scoring
    # ------------------------------------------------------------------

    def _make_chunk(
        self,
        text: str,
        index: int,
        start: int,
        end: int,
        overlap: int,
        opts: ChunkOptions,
    ) -> Chunk:
        content = text[start:end]
        return Chunk(
            content=content,
            index=index,
            start_offset=start,
            end_offset=end,
            word_count=len(content.split()),
            structural_type=classify_chunk(content),
            confidence=score_chunk(content, own_length=len(content) - overlap, min_size=opts.min_size),
            overlap_length=overlap,
        )


def validate_options(options: ChunkOptions) -> None:
    """Raise ConfigurationError unless ``0 < min_size <= max_size`` and ``0 <= overlap < max_size``."""
    if options.max_size <= 0 or options.min_size <= 0:
        raise ConfigurationError(message="Chunk sizes must be positive")
    if options.min_size > options.max_size:
        raise ConfigurationError(
            message=f"min_size ({options.min_size}) exceeds max_size ({options.max_size})"
        )
    if options.overlap < 0 or options.overlap >= options.max_size:
        raise ConfigurationError(
            message=f"overlap ({options.overlap}) must be in [0, max_size)"
        )


def classify_chunk(content: str) -> StructuralType:
    """Classify chunk text by simple structural heuristics."""
    body = content.strip()
    if len(body) < 50 and _HEADING_RE.match(body):
        return StructuralType.HEADING
    if _LIST_MARKER_RE.search(body) or any(b in body for b in _TYPOGRAPHIC_BULLETS):
        return StructuralType.LIST
    if "\t" in body or "|" in body:
        return StructuralType.TABLE
    if len(body) > 50 and re.search(r"[.!?]", body):
        return StructuralType.PARAGRAPH
    return StructuralType.OTHER


def score_chunk(content: str, own_length: int | None = None, min_size: int = 0) -> float:
    """Heuristic 0-100 quality score from length, punctuation, case and word count."""
    score = 50.0
    if len(content) > 100:
        score += 20
    if "." in content:
        score += 10
    if any(c.isupper() for c in content):
        score += 10
    if len(content.split()) > 10:
        score += 10
    if own_length is not None and own_length < min_size:
        score -= 20
    return clamp_confidence(score)
