"""Heuristics for judging extracted text: page confidence and language."""

from __future__ import annotations

import re

from docrag.utils.confidence import clamp_confidence

_STOP_WORDS: dict[str, tuple[str, ...]] = {
    "english": ("the", "and", "or", "but", "in", "on", "at", "to", "for", "of", "with", "by", "is", "are"),
    "spanish": ("el", "la", "de", "que", "y", "en", "un", "es", "se", "no"),
    "french": ("le", "de", "et", "à", "un", "il", "être", "en", "avoir", "que"),
    "german": ("der", "die", "und", "in", "den", "von", "zu", "das", "mit", "sich"),
}

_LANGUAGE_SAMPLE_CHARS = 2000
_MIN_LANGUAGE_SCORE = 5


def page_confidence(text: str) -> float:
    """Score one page of extracted text on the 0--100 scale."""
    if not text:
        return 0.0

    score = 50.0
    if len(text) > 100:
        score += 20
    if len(text) > 500:
        score += 10

    word_count = len(text.split())
    if word_count > 20:
        score += 10
    if word_count > 100:
        score += 5

    if "\n\n" in text:
        score += 5
    if re.search(r"[.!?]", text):
        score += 5
    if re.search(r"[A-Z][a-z]", text):
        score += 5

    if len(text) < 50:
        score -= 20
    if not re.search(r"[a-zA-Z]", text):
        score -= 30

    return clamp_confidence(score)


def detect_language(text: str) -> str:
    """Guess the language from stop-word counts in the first 2000 characters.

    Returns ``"english"``, ``"spanish"``, ``"french"``, ``"german"`` or
    ``"unknown"`` when no language scores above 5.
    """
    sample = text[:_LANGUAGE_SAMPLE_CHARS].lower()
    best_language = "unknown"
    best_score = 0

    for language, words in _STOP_WORDS.items():
        score = sum(len(re.findall(rf"\b{re.escape(word)}\b", sample)) for word in words)
        if score > best_score:
            best_language, best_score = language, score

    return best_language if best_score > _MIN_LANGUAGE_SCORE else "unknown"
