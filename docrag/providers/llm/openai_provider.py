"""OpenAI-compatible text-generation provider.

Wraps the ``openai`` async client to implement
:class:`ITextGenerationProvider`.  When ``base_url`` is set the same
adapter talks to any OpenAI-compatible vendor (TogetherAI, Fireworks,
DeepInfra, Groq); the provider registry supplies those URLs.
"""

from __future__ import annotations

import openai
import structlog

from docrag.interfaces.llm_provider import ITextGenerationProvider
from docrag.models.provider import ChatMessage, GenerationParams
from docrag.utils.errors import GenerationError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "gpt-4o-mini"


class OpenAILLMProvider(ITextGenerationProvider):
    """Text generation through an OpenAI-compatible chat completions API.

    Parameters
    ----------
    api_key:
        Vendor API key.
    model:
        Chat model; ``gpt-4o-mini`` when empty.
    base_url:
        Custom endpoint for OpenAI-compatible vendors; empty for OpenAI.
    provider_label:
        Name reported in logs and errors (``"openai"``, ``"together"``...).
    timeout:
        Request timeout in seconds.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "",
        base_url: str = "",
        provider_label: str = "openai",
        timeout: float = 60.0,
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
        self._provider_label = provider_label

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
        except openai.APITimeoutError as exc:
            raise GenerationError(
                message=f"{self._provider_label} request timed out",
                provider_name=self.get_provider_name(),
            ) from exc
        except openai.APIError as exc:
            raise GenerationError(
                message=f"{self._provider_label} API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise GenerationError(
                message=f"{self._provider_label} returned empty response",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "openai_generation",
            model=self._model,
            provider=self._provider_label,
            tokens=response.usage.total_tokens if response.usage else None,
        )
        return content

    async def test_connection(self) -> bool:
        """List models to confirm the key is accepted without paying for inference."""
        if not self._api_key:
            return False
        try:
            await self._client.models.list()
            return True
        except openai.APIError as exc:
            logger.warning("openai_connection_failed", provider=self._provider_label, error=str(exc))
            return False

    def get_provider_name(self) -> str:
        return self._provider_label

    def get_model_name(self) -> str:
        return self._model
