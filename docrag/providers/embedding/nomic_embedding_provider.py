"""Nomic embedding backend served by a local Ollama server.

Uses Ollama's OpenAI-compatible ``/v1`` endpoint with the
``nomic-embed-text`` model (768 dimensions).  No API key is needed.
"""

from __future__ import annotations

import httpx
import openai
import structlog

from docrag.interfaces.embedding_provider import IEmbeddingProvider
from docrag.providers.embedding.openai_embedding_provider import validate_vector
from docrag.utils.errors import EmbeddingError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "nomic-embed-text"


class NomicEmbeddingProvider(IEmbeddingProvider):
    """Embedding backend backed by ``nomic-embed-text`` via Ollama."""

    def __init__(self, base_url: str, model: str = "", timeout: float = 30.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = openai.AsyncOpenAI(
            base_url=f"{self._base_url}/v1",
            api_key="ollama",
            timeout=openai.Timeout(timeout, connect=5.0),
        )
        self._model = model or _DEFAULT_MODEL
        self._dimension: int | None = 768 if self._model == _DEFAULT_MODEL else None

    # ------------------------------------------------------------------
    # IEmbeddingProvider implementation
    # ------------------------------------------------------------------

    async def embed(self, text: str) -> list[float]:
        try:
            response = await self._client.embeddings.create(input=[text], model=self._model)
        except openai.APIError as exc:
            raise EmbeddingError(
                message=f"Nomic/Ollama embedding API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        if not response.data:
            raise EmbeddingError(
                message="Ollama returned no embedding data",
                provider_name=self.get_provider_name(),
            )
        vector = validate_vector(response.data[0].embedding, self.get_provider_name())
        self._dimension = len(vector)
        return vector

    def get_dimension(self) -> int | None:
        return self._dimension

    def get_provider_name(self) -> str:
        return "ollama"

    def get_model_name(self) -> str:
        return self._model

    async def test_connection(self) -> bool:
        """Return ``True`` if the Ollama server answers on ``/api/tags``."""
        try:
            async with httpx.AsyncClient(timeout=3.0) as client:
                response = await client.get(f"{self._base_url}/api/tags")
                return response.status_code == 200
        except httpx.HTTPError:
            return False
