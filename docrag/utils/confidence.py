"""Confidence scoring helpers shared by the chunker and the extractor.

Both components rate their output on a 0--100 scale built from additive
heuristic signals.  This module keeps the arithmetic in one place:

1. **clamp_confidence** -- bound a raw additive score to ``[0, 100]``.
2. **average_confidence** -- mean of per-page or per-chunk scores.
3. **grade_extraction** -- map page success ratio, character density and
   average confidence onto the ``high`` / ``medium`` / ``low`` grade
   reported in extraction metadata.
"""

from enum import Enum


class ExtractionQuality(str, Enum):
    """Extraction quality grade reported in document metadata."""

    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


def clamp_confidence(score: float, low: float = 0.0, high: float = 100.0) -> float:
    """Clamp *score* into ``[low, high]``."""
    return max(low, min(high, score))


def average_confidence(scores: list[float]) -> float:
    """Return the arithmetic mean of *scores*, or 0.0 for an empty list."""
    if not scores:
        return 0.0
    return sum(scores) / len(scores)


def grade_extraction(
    successful_pages: int,
    total_pages: int,
    total_characters: int,
    avg_confidence: float,
) -> ExtractionQuality:
    """Derive the extraction quality grade.

    Args:
        successful_pages: Pages that produced text.
        total_pages: Pages in the document (at least 1 is assumed).
        total_characters: Length of the extracted text.
        avg_confidence: Mean per-page confidence on the 0--100 scale.

    Returns:
        ``HIGH`` when the success ratio is at least 0.9, density exceeds 800
        characters per page and confidence exceeds 80; ``MEDIUM`` at 0.7 /
        400 / 60; ``LOW`` otherwise.
    """
    pages = max(total_pages, 1)
    success_ratio = successful_pages / pages
    density = total_characters / pages

    if success_ratio >= 0.9 and density > 800 and avg_confidence > 80:
        return ExtractionQuality.HIGH
    if success_ratio >= 0.7 and density > 400 and avg_confidence > 60:
        return ExtractionQuality.MEDIUM
    return ExtractionQuality.LOW
