"""Abstract base class for text-generation providers.

Implementations wrap OpenAI (and OpenAI-compatible endpoints), Anthropic
Claude, or a local Ollama server.  The orchestrator only ever sees this
contract, selected through the provider registry.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from docrag.models.provider import ChatMessage, GenerationParams


# Concrete implementations:
#   OpenAILLMProvider    -- openai SDK (also TogetherAI / Groq style base_url)
#   AnthropicLLMProvider -- anthropic SDK
#   OllamaLLMProvider    -- openai SDK against a local Ollama server
# Located in: docrag/providers/llm/
class ITextGenerationProvider(ABC):
    """Contract for chat-style text generation."""

    @abstractmethod
    async def generate(
        self,
        messages: list[ChatMessage],
        params: GenerationParams | None = None,
    ) -> str:
        """Generate a reply to *messages*.

        Parameters
        ----------
        messages:
            Ordered chat turns; a leading ``system`` turn sets behaviour.
        params:
            Sampling temperature and token cap; provider defaults when ``None``.

        Returns
        -------
        str
            The generated text.

        Raises
        ------
        docrag.utils.errors.GenerationError
            If the vendor call fails or returns no content.
        """

    @abstractmethod
    async def test_connection(self) -> bool:
        """Return ``True`` if the provider accepts the configured credentials."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return an identifier such as ``"openai"`` or ``"anthropic"``."""

    @abstractmethod
    def get_model_name(self) -> str:
        """Return the generation model in use."""
