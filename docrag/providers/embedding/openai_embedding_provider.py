"""OpenAI-compatible embedding backend.

Wraps the ``openai`` async client.  Besides OpenAI itself, any vendor
exposing ``/embeddings`` in the OpenAI shape (TogetherAI, Fireworks,
DeepInfra) works through ``base_url``.  Every failure is raised as
:class:`EmbeddingError`; the embedding service turns it into a fallback.
"""

from __future__ import annotations

import math

import openai
import structlog

from docrag.interfaces.embedding_provider import IEmbeddingProvider
from docrag.utils.errors import EmbeddingError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "text-embedding-3-small"

# Known embedding model dimensions, used before the first response arrives.
_MODEL_DIMENSIONS: dict[str, int] = {
    "text-embedding-3-small": 1536,
    "text-embedding-3-large": 3072,
    "text-embedding-ada-002": 1536,
    "BAAI/bge-base-en-v1.5": 768,
    "BAAI/bge-large-en-v1.5": 1024,
    "nomic-ai/nomic-embed-text-v1.5": 768,
}


def validate_vector(vector: list[float] | None, provider_name: str) -> list[float]:
    """Reject empty vectors and vectors containing NaN or infinity."""
    if not vector:
        raise EmbeddingError(message="Empty embedding returned", provider_name=provider_name)
    if any(not math.isfinite(v) for v in vector):
        raise EmbeddingError(message="Embedding contains non-finite values", provider_name=provider_name)
    return [float(v) for v in vector]


class OpenAIEmbeddingProvider(IEmbeddingProvider):
    """Embedding backend backed by an OpenAI-compatible embeddings API."""

    def __init__(
        self,
        api_key: str,
        model: str = "",
        base_url: str = "",
        provider_label: str = "openai",
        timeout: float = 30.0,
    ) -> None:
        self._api_key = api_key
        client_kwargs: dict = {
            "api_key": api_key,
            "timeout": openai.Timeout(timeout, connect=5.0),
        }
        if base_url:
            client_kwargs["base_url"] = base_url

        self._client = openai.AsyncOpenAI(**client_kwargs)
        self._model = model or _DEFAULT_MODEL
        self._dimension: int | None = _MODEL_DIMENSIONS.get(self._model)
        self._provider_label = provider_label

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> list[float]:
        try:
            response = await self._client.embeddings.create(input=[text], model=self._model)
        except openai.APIError as exc:
            raise EmbeddingError(
                message=f"{self._provider_label} embedding API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not response.data:
            raise EmbeddingError(
                message="Embedding response contained no data",
                provider_name=self.get_provider_name(),
            )
        vector = validate_vector(response.data[0].embedding, self.get_provider_name())
        self._dimension = len(vector)
        logger.debug(
            "openai_embedding",
            model=self._model,
            provider=self._provider_label,
            dimension=self._dimension,
        )
        return vector

    def get_dimension(self) -> int | None:
        return self._dimension

    def get_provider_name(self) -> str:
        return self._provider_label

    def get_model_name(self) -> str:
        return self._model

    async def test_connection(self) -> bool:
        if not self._api_key:
            return False
        try:
            await self.embed("test connection")
            return True
        except EmbeddingError as exc:
            logger.warning("embedding_connection_failed", provider=self._provider_label, error=str(exc))
            return False
