"""Abstract base class for text-embedding backends.

Each backend wraps one vendor (OpenAI-compatible or Ollama)
or the local hash embedding.  Backends may raise; the
:class:`~docrag.services.embedding_service.EmbeddingService` catches every
backend failure and substitutes the local fallback vector.
"""

from __future__ import annotations

from abc import ABC, abstractmethod


# Concrete implementations:
#   OpenAIEmbeddingProvider       -- openai SDK, any OpenAI-compatible base_url
#   NomicEmbeddingProvider        -- nomic-embed-text via Ollama
#   HashEmbeddingProvider         -- deterministic local fallback (384 dims)
# Located in: docrag/providers/embedding/
class IEmbeddingProvider(ABC):
    """Contract for a single embedding backend."""

    @abstractmethod
    async def embed(self, text: str) -> list[float]:
        """Generate an embedding vector for *text*.

        Parameters
        ----------
        text:
            Non-empty text to embed.

        Returns
        -------
        list[float]
            The embedding vector.

        Raises
        ------
        docrag.utils.errors.EmbeddingError
            If the backend call fails or returns an unusable vector.
        """

    @abstractmethod
    def get_dimension(self) -> int | None:
        """Return the vector length, or ``None`` until the first vector is produced.

        Remote models report their dimension only through their responses;
        the local fallback always returns 384.
        """

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return an identifier such as ``"openai"`` or ``"hash-fallback"``."""

    @abstractmethod
    def get_model_name(self) -> str:
        """Return the embedding model identifier in use."""

    @abstractmethod
    async def test_connection(self) -> bool:
        """Return ``True`` if the backend is reachable with the given credentials."""
