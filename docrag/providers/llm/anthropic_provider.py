"""Anthropic text-generation provider.

Wraps the ``anthropic`` async client.  Unlike the chat completions API,
the Messages API takes the system prompt as a top-level parameter and
returns a list of content blocks, of which only ``text`` blocks are kept.
Anthropic offers no embedding endpoint, so the provider registry pairs
this adapter with the local hash embedding.
"""

from __future__ import annotations

import anthropic
import structlog

from docrag.interfaces.llm_provider import ITextGenerationProvider
from docrag.models.provider import ChatMessage, ChatRole, GenerationParams
from docrag.utils.errors import GenerationError

logger = structlog.get_logger(logger_name=__name__)

_DEFAULT_MODEL = "claude-sonnet-4-20250514"


class AnthropicLLMProvider(ITextGenerationProvider):
    """Text generation through the Anthropic Messages API."""

    def __init__(self, api_key: str, model: str = "", timeout: float = 60.0) -> None:
        self._api_key = api_key
        self._client = anthropic.AsyncAnthropic(api_key=api_key, timeout=timeout)
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
        system_prompt = "\n\n".join(m.content for m in messages if m.role == ChatRole.SYSTEM)
        turns = [
            {"role": m.role.value, "content": m.content}
            for m in messages
            if m.role != ChatRole.SYSTEM
        ]

        request: dict = {
            "model": self._model,
            "max_tokens": params.max_tokens,
            "messages": turns,
            # Anthropic caps temperature at 1.0.
            "temperature": min(params.temperature, 1.0),
        }
        if system_prompt:
            request["system"] = system_prompt

        try:
            response = await self._client.messages.create(**request)
        except anthropic.APIError as exc:
            raise GenerationError(
                message=f"Anthropic API error: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        text_blocks = [block.text for block in response.content if block.type == "text"]
        if not text_blocks:
            raise GenerationError(
                message="Anthropic returned no text content",
                provider_name=self.get_provider_name(),
            )
        logger.info(
            "anthropic_generation",
            model=self._model,
            input_tokens=response.usage.input_tokens,
            output_tokens=response.usage.output_tokens,
        )
        return "\n".join(text_blocks)

    async def test_connection(self) -> bool:
        """Send a minimal message to verify the API key works."""
        if not self._api_key:
            return False
        try:
            await self._client.messages.create(
                model=self._model,
                max_tokens=10,
                messages=[{"role": "user", "content": "hi"}],
            )
            return True
        except anthropic.APIError as exc:
            logger.warning("anthropic_connection_failed", error=str(exc))
            return False

    def get_provider_name(self) -> str:
        return "anthropic"

    def get_model_name(self) -> str:
        return self._model
