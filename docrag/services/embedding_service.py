"""Embedding service with a deterministic local fallback.

Wraps one :class:`IEmbeddingProvider` backend and guarantees that every
call returns a usable vector: any backend failure (network error,
malformed response, non-finite values) is logged and answered with the
local hash embedding instead.  Once the backend dimension is known the
fallback is built at that dimension, so fallback vectors stay compatible
with the vectors already stored.  Batch calls are sequential, paced by a
configurable delay, and isolate failures per item.

Remote vectors are memoised in an injected :class:`ICacheProvider`, keyed
by provider, model and a SHA-256 of the text.  Fallback vectors are cheap
to recompute and are never cached.
"""

from __future__ import annotations

import asyncio
import hashlib

import structlog

from docrag.interfaces.cache_provider import ICacheProvider
from docrag.interfaces.embedding_provider import IEmbeddingProvider
from docrag.models.rag import EmbeddingResult
from docrag.providers.embedding.hash_embedding_provider import (
    FALLBACK_DIMENSION,
    HashEmbeddingProvider,
    hash_embedding,
)

logger = structlog.get_logger(logger_name=__name__)


class EmbeddingService:
    """Turns text into vectors through the configured backend or the fallback.

    Parameters
    ----------
    backend:
        The embedding backend selected by the provider registry.  ``None``
        (or a :class:`HashEmbeddingProvider`) means fallback-only operation.
    cache:
        Optional memo for remote vectors; owned by this service.
    batch_delay:
        Seconds to wait between remote calls in :meth:`embed_batch`.
    """

    def __init__(
        self,
        backend: IEmbeddingProvider | None = None,
        cache: ICacheProvider | None = None,
        batch_delay: float = 0.1,
    ) -> None:
        self._backend = backend if backend is not None else HashEmbeddingProvider()
        self._cache = cache
        self._batch_delay = batch_delay
        self._fallback_name = HashEmbeddingProvider().get_provider_name()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> list[float]:
        """Return the embedding of *text*; never raises."""
        result = await self.embed_with_info(text)
        return result.vector

    async def embed_with_info(self, text: str) -> EmbeddingResult:
        """Embed *text*; ``is_fallback`` is True whenever the hash embedding produced the vector."""
        if not isinstance(text, str) or not text.strip():
            return self._fallback("")
        if self.is_fallback_only():
            return self._fallback(text)

        cache_key = self._cache_key(text)
        if self._cache is not None:
            cached = await self._cache.get(cache_key)
            if cached is not None:
                return EmbeddingResult(vector=list(cached), provider=self.get_provider_name())

        try:
            vector = await self._backend.embed(text)
        except Exception as exc:
            logger.warning(
                "embedding_fallback_used",
                provider=self._backend.get_provider_name(),
                error=str(exc),
                text_length=len(text),
            )
            return self._fallback(text)

        if self._cache is not None:
            await self._cache.set(cache_key, tuple(vector))
        return EmbeddingResult(vector=vector, provider=self.get_provider_name())

    async def embed_batch(self, texts: list[str]) -> list[EmbeddingResult]:
        """Embed *texts* in order; each item falls back independently.

        Invalid items (non-strings, blank strings) get the degenerate
        all-zero fallback vector without contacting the backend.
        """
        results: list[EmbeddingResult] = []
        fallback_count = 0
        for i, text in enumerate(texts):
            if not isinstance(text, str) or not text.strip():
                logger.warning("embedding_invalid_input", index=i)
                results.append(self._fallback(""))
                fallback_count += 1
                continue

            result = await self.embed_with_info(text)
            results.append(result)
            fallback_count += int(result.is_fallback)

            if not self.is_fallback_only() and self._batch_delay > 0 and i < len(texts) - 1:
                await asyncio.sleep(self._batch_delay)

        logger.info(
            "embedding_batch_complete",
            provider=self.get_provider_name(),
            count=len(texts),
            fallback_count=fallback_count,
        )
        return results

    async def embed_many(self, texts: list[str]) -> list[list[float]]:
        """Vectors only, aligned with *texts*."""
        return [r.vector for r in await self.embed_batch(texts)]

    async def test_connection(self) -> bool:
        try:
            return await self._backend.test_connection()
        except Exception as exc:
            logger.warning("embedding_connection_test_failed", error=str(exc))
            return False

    # ------------------------------------------------------------------
    # Introspection
    # ------------------------------------------------------------------

    def is_fallback_only(self) -> bool:
        return isinstance(self._backend, HashEmbeddingProvider)

    def get_dimension(self) -> int:
        """Backend dimension once known, otherwise the fallback's 384."""
        return self._backend.get_dimension() or FALLBACK_DIMENSION

    def get_provider_name(self) -> str:
        return self._backend.get_provider_name()

    def get_model_name(self) -> str:
        return self._backend.get_model_name()

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _fallback(self, text: str) -> EmbeddingResult:
        return EmbeddingResult(
            vector=hash_embedding(text, self.get_dimension()),
            provider=self._fallback_name,
            is_fallback=True,
        )

    def _cache_key(self, text: str) -> str:
        digest = hashlib.sha256(text.encode("utf-8")).hexdigest()
        return f"emb:{self._backend.get_provider_name()}:{self._backend.get_model_name()}:{digest}"
