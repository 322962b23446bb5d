"""Vector and token similarity primitives used by the vector stores.

All functions return plain Python floats and never NaN: zero-magnitude or
mismatched vectors score 0.0, and an empty query scores 0.0 on keyword
overlap.
"""

from __future__ import annotations

import math
from collections.abc import Sequence

import numpy as np


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; 0.0 for mismatched or zero vectors."""
    if len(a) != len(b) or len(a) == 0:
        return 0.0

    va = np.asarray(a, dtype=np.float64)
    vb = np.asarray(b, dtype=np.float64)
    norm_a = float(np.linalg.norm(va))
    norm_b = float(np.linalg.norm(vb))
    if norm_a == 0.0 or norm_b == 0.0:
        return 0.0

    score = float(np.dot(va, vb) / (norm_a * norm_b))
    if math.isnan(score):
        return 0.0
    return score


def l2_normalize(vector: Sequence[float]) -> list[float]:
    """Return *vector* scaled to unit length; an all-zero vector is returned as is."""
    magnitude = math.sqrt(sum(v * v for v in vector))
    if magnitude == 0.0:
        return [0.0 for _ in vector]
    return [v / magnitude for v in vector]


def tokenize(text: str) -> list[str]:
    """Lower-case whitespace tokenisation shared by keyword scoring and hashing."""
    return [word for word in text.lower().split() if word]


def keyword_overlap(query: str, content: str) -> float:
    """Fraction of query tokens present in the content's token set."""
    query_words = tokenize(query)
    if not query_words:
        return 0.0
    content_words = set(tokenize(content))
    matches = sum(1 for word in query_words if word in content_words)
    return matches / len(query_words)


def hybrid_score(semantic: float, keyword: float) -> float:
    """Arithmetic mean of semantic and keyword scores."""
    return (semantic + keyword) / 2.0
