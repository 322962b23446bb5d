"""Ollama text-generation provider.

Talks to a local Ollama server through its OpenAI-compatible ``/v1``
endpoint using the ``openai`` client.  Reachability is checked against
Ollama's native ``/api/tags`` endpoint with httpx.
"""

from __future__ import annotations

import httpx
import openai
import structlog

from docrag.interfaces.llm_provider import ITextGenerationProvider
from docrag.models.provider import ChatMessage, GenerationParams
from docrag.utils.errors import GenerationError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "llama3.1"


class OllamaLLMProvider(ITextGenerationProvider):
    """Text generation backed by a local Ollama server."""

    def __init__(self, base_url: str, model: str = "", timeout: float = 120.0) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = openai.AsyncOpenAI(
            base_url=f"{self._base_url}/v1",
            # The SDK requires a non-empty key; Ollama ignores it.
            api_key="ollama",
            timeout=openai.Timeout(timeout, connect=5.0),
        )
        self._model = model or _DEFAULT_MODEL

    # ------------------------------------------------------------------
    # ITextGenerationProvider implementation
    # ------------------------------------------------------------------

    async def generate(
        self,
        messages: list[ChatMessage],
        params: GenerationParams | None = None,
    ) -> str:
        params = params or GenerationParams()
        try:
            response = await self._client.chat.completions.create(
                model=self._model,
                messages=[{"role": m.role.value, "content": m.content} for m in messages],
                temperature=params.temperature,
                max_tokens=params.max_tokens,
            )
        except openai.APIError as exc:
            raise GenerationError(
                message=f"Ollama API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise GenerationError(
                message="Ollama returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info("ollama_generation", model=self._model)
        return content

    async def test_connection(self) -> bool:
        """Check that the Ollama server answers on ``/api/tags``."""
        if not self._base_url:
            return False
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                response = await client.get(f"{self._base_url}/api/tags")
                return response.status_code == 200
        except httpx.HTTPError as exc:
            logger.warning("ollama_connection_failed", base_url=self._base_url, error=str(exc))
            return False

    def get_provider_name(self) -> str:
        return "ollama"

    def get_model_name(self) -> str:
        return self._model
