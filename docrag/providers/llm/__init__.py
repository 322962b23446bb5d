"""Text-generation provider adapters.

Three implementations of ITextGenerationProvider:
    - OpenAILLMProvider    -- OpenAI and OpenAI-compatible vendors
    - AnthropicLLMProvider -- Claude via the Messages API
    - OllamaLLMProvider    -- local models via Ollama

The provider registry (docrag/services/provider_registry.py) picks one
from the configured provider name.
"""

from docrag.providers.llm.anthropic_provider import AnthropicLLMProvider
from docrag.providers.llm.ollama_provider import OllamaLLMProvider
from docrag.providers.llm.openai_provider import OpenAILLMProvider

__all__ = ["AnthropicLLMProvider", "OllamaLLMProvider", "OpenAILLMProvider"]
