"""Provider registry: capability checks and adapter factories keyed by name.

Each known provider name maps to a :class:`VendorProfile` describing what
it can do and which adapter family serves it.  The orchestrator validates
a :class:`ProviderConfig` here before anything is dispatched, so a
provider that cannot generate text fails at ``configure()`` with a
ConfigurationError instead of at query time.  Providers without an
embedding endpoint are paired with the local hash embedding.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from urllib.parse import urlparse

import structlog

from docrag.config.settings import Settings
from docrag.interfaces.embedding_provider import IEmbeddingProvider
from docrag.interfaces.llm_provider import ITextGenerationProvider
from docrag.interfaces.vector_store_provider import IVectorStoreProvider
from docrag.models.provider import ProviderCapabilities, ProviderConfig, VectorStoreConfig
from docrag.providers.embedding.hash_embedding_provider import HashEmbeddingProvider
from docrag.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider
from docrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from docrag.providers.llm.anthropic_provider import AnthropicLLMProvider
from docrag.providers.llm.ollama_provider import OllamaLLMProvider
from docrag.providers.llm.openai_provider import OpenAILLMProvider
from docrag.utils.errors import ConfigurationError

logger = structlog.get_logger(logger_name=__name__)


@dataclass(frozen=True)
class VendorProfile:
    """Static description of one provider name."""

    family: str  # "openai", "anthropic" or "ollama"
    capabilities: ProviderCapabilities
    base_url: str = ""
    requires_api_key: bool = True
    requires_base_url: bool = False
    embedding_model: str = ""


_BOTH = ProviderCapabilities(supports_embedding=True, supports_generation=True)
_GENERATION_ONLY = ProviderCapabilities(supports_embedding=False, supports_generation=True)

DEFAULT_PROFILES: dict[str, VendorProfile] = {
    "openai": VendorProfile(family="openai", capabilities=_BOTH),
    "openai-compatible": VendorProfile(family="openai", capabilities=_BOTH, requires_base_url=True),
    "together": VendorProfile(
        family="openai",
        capabilities=_BOTH,
        base_url="https://api.together.xyz/v1",
        embedding_model="BAAI/bge-base-en-v1.5",
    ),
    "fireworks": VendorProfile(
        family="openai",
        capabilities=_BOTH,
        base_url="https://api.fireworks.ai/inference/v1",
        embedding_model="nomic-ai/nomic-embed-text-v1.5",
    ),
    "deepinfra": VendorProfile(
        family="openai",
        capabilities=_BOTH,
        base_url="https://api.deepinfra.com/v1/openai",
        embedding_model="BAAI/bge-base-en-v1.5",
    ),
    "groq": VendorProfile(
        family="openai",
        capabilities=_GENERATION_ONLY,
        base_url="https://api.groq.com/openai/v1",
    ),
    "anthropic": VendorProfile(family="anthropic", capabilities=_GENERATION_ONLY),
    "ollama": VendorProfile(family="ollama", capabilities=_BOTH, requires_api_key=False),
}


class ProviderRegistry:
    """Validates provider configs and builds the matching adapters."""

    def __init__(self, settings: Settings | None = None) -> None:
        self._settings = settings or Settings()
        self._profiles: dict[str, VendorProfile] = dict(DEFAULT_PROFILES)
        self._generation_factories: dict[str, Callable[[ProviderConfig, VendorProfile], ITextGenerationProvider]] = {
            "openai": self._openai_generation,
            "anthropic": self._anthropic_generation,
            "ollama": self._ollama_generation,
        }
        self._embedding_factories: dict[str, Callable[[ProviderConfig, VendorProfile], IEmbeddingProvider]] = {
            "openai": self._openai_embedding,
            "ollama": self._ollama_embedding,
        }

    # ------------------------------------------------------------------
    # Profiles
    # ------------------------------------------------------------------

    def register(self, name: str, profile: VendorProfile) -> None:
        """Add or replace the profile for provider *name*."""
        self._profiles[name.lower()] = profile

    def available_providers(self) -> list[str]:
        return sorted(self._profiles)

    def get_profile(self, provider: str) -> VendorProfile:
        profile = self._profiles.get(provider.lower())
        if profile is None:
            raise ConfigurationError(
                message=f"Unknown provider '{provider}'. Known: {', '.join(self.available_providers())}",
                provider_name=provider,
            )
        return profile

    def capabilities(self, provider: str) -> ProviderCapabilities:
        return self.get_profile(provider).capabilities

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------

    def validate(self, config: ProviderConfig) -> VendorProfile:
        """Check *config* against its provider profile.

        Raises
        ------
        ConfigurationError
            For unknown providers, providers that cannot generate text,
            missing credentials, or a missing/invalid base URL.
        """
        profile = self.get_profile(config.provider)
        if not profile.capabilities.supports_generation:
            raise ConfigurationError(
                message="Provider does not support text generation",
                provider_name=config.provider,
            )
        if profile.requires_api_key and not config.api_key.strip():
            raise ConfigurationError(message="API key is required", provider_name=config.provider)
        if profile.requires_base_url and not config.base_url:
            raise ConfigurationError(message="base_url is required", provider_name=config.provider)
        if config.base_url and not _is_http_url(config.base_url):
            raise ConfigurationError(
                message=f"Invalid base_url '{config.base_url}'",
                provider_name=config.provider,
            )
        return profile

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    def build_generation_provider(self, config: ProviderConfig) -> ITextGenerationProvider:
        profile = self.validate(config)
        provider = self._generation_factories[profile.family](config, profile)
        logger.info("generation_provider_built", provider=config.provider, model=provider.get_model_name())
        return provider

    def build_embedding_provider(self, config: ProviderConfig) -> IEmbeddingProvider:
        """Build the embedding backend, or the hash backend when the vendor has none."""
        profile = self.get_profile(config.provider)
        factory = self._embedding_factories.get(profile.family)
        if not profile.capabilities.supports_embedding or factory is None:
            logger.info("embedding_provider_hash_only", provider=config.provider)
            return HashEmbeddingProvider()
        return factory(config, profile)

    def _openai_generation(self, config: ProviderConfig, profile: VendorProfile) -> ITextGenerationProvider:
        return OpenAILLMProvider(
            api_key=config.api_key,
            model=config.model,
            base_url=config.base_url or profile.base_url,
            provider_label=config.provider.lower(),
        )

    def _anthropic_generation(self, config: ProviderConfig, profile: VendorProfile) -> ITextGenerationProvider:
        return AnthropicLLMProvider(api_key=config.api_key, model=config.model)

    def _ollama_generation(self, config: ProviderConfig, profile: VendorProfile) -> ITextGenerationProvider:
        return OllamaLLMProvider(
            base_url=config.base_url or self._settings.ollama_base_url,
            model=config.model,
        )

    def _openai_embedding(self, config: ProviderConfig, profile: VendorProfile) -> IEmbeddingProvider:
        return OpenAIEmbeddingProvider(
            api_key=config.api_key,
            model=config.embedding_model or profile.embedding_model,
            base_url=config.base_url or profile.base_url,
            provider_label=config.provider.lower(),
        )

    def _ollama_embedding(self, config: ProviderConfig, profile: VendorProfile) -> IEmbeddingProvider:
        return NomicEmbeddingProvider(
            base_url=config.base_url or self._settings.ollama_base_url,
            model=config.embedding_model,
        )


def create_vector_store(config: VectorStoreConfig) -> IVectorStoreProvider:
    """Select a vector-store engine by ``config.provider``.

    Raises
    ------
    ConfigurationError
        For unknown engine names or an invalid server URL.
    """
    name = (config.provider or "local").lower()
    if name in ("local", "memory"):
        from docrag.providers.vector_store.memory_provider import InMemoryVectorStore

        return InMemoryVectorStore(dimension=config.dimension)
    if name in ("chroma", "chromadb"):
        if config.url and not _is_http_url(config.url):
            raise ConfigurationError(message=f"Invalid vector store url '{config.url}'", provider_name=name)
        from docrag.providers.vector_store.chromadb_provider import ChromaDBProvider

        return ChromaDBProvider(config)
    raise ConfigurationError(message=f"Unknown vector store provider '{config.provider}'", provider_name=name)


def _is_http_url(value: str) -> bool:
    parsed = urlparse(value)
    return parsed.scheme in ("http", "https") and bool(parsed.netloc)
