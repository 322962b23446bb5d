"""Deterministic local hash embedding.

The embedding of last resort: it needs no network, never fails and is
bit-for-bit reproducible, so the pipeline keeps working (with degraded
retrieval quality) when every remote backend is down.

Algorithm: lower-case the text, split on whitespace, hash each word with
the 32-bit polynomial string hash (``h = 31*h + code_unit`` in signed
32-bit arithmetic over UTF-16 code units, absolute value), add
``1 / (position + 1)`` to bucket ``hash % 384`` and L2-normalise.  Text
with no words yields the all-zero vector.
"""

from __future__ import annotations

import structlog

from docrag.interfaces.embedding_provider import IEmbeddingProvider
from docrag.utils.similarity import l2_normalize, tokenize

logger = structlog.get_logger(logger_name=__name__)

FALLBACK_DIMENSION = 384


def string_hash(word: str) -> int:
    """Return the absolute value of the signed 32-bit polynomial hash of *word*."""
    h = 0
    encoded = word.encode("utf-16-le")
    for i in range(0, len(encoded), 2):
        code_unit = encoded[i] | (encoded[i + 1] << 8)
        h = (h * 31 + code_unit) & 0xFFFFFFFF
    if h >= 0x80000000:
        h -= 0x100000000
    return abs(h)


def hash_embedding(text: str, dimension: int = FALLBACK_DIMENSION) -> list[float]:
    """Compute the deterministic bag-of-words hash embedding of *text*."""
    vector = [0.0] * dimension
    for position, word in enumerate(tokenize(text)):
        vector[string_hash(word) % dimension] += 1.0 / (position + 1)
    return l2_normalize(vector)


class HashEmbeddingProvider(IEmbeddingProvider):
    """Embedding backend that always answers with :func:`hash_embedding`."""

    async def embed(self, text: str) -> list[float]:
        return hash_embedding(text)

    def get_dimension(self) -> int:
        return FALLBACK_DIMENSION

    def get_provider_name(self) -> str:
        return "hash-fallback"

    def get_model_name(self) -> str:
        return f"hash-{FALLBACK_DIMENSION}"

    async def test_connection(self) -> bool:
        return True
