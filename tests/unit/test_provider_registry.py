"""Unit tests for provider validation, adapter selection and vector-store factory."""

from __future__ import annotations

import pytest

from docrag.config.settings import Settings
from docrag.models.provider import ProviderCapabilities, ProviderConfig, VectorStoreConfig
from docrag.providers.embedding.hash_embedding_provider import HashEmbeddingProvider
from docrag.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider
from docrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider
from docrag.providers.llm.anthropic_provider import AnthropicLLMProvider
from docrag.providers.llm.ollama_provider import OllamaLLMProvider
from docrag.providers.llm.openai_provider import OpenAILLMProvider
from docrag.providers.vector_store.chromadb_provider import ChromaDBProvider
from docrag.providers.vector_store.memory_provider import InMemoryVectorStore
from docrag.services.provider_registry import ProviderRegistry, VendorProfile, create_vector_store
from docrag.utils.errors import ConfigurationError


@pytest.fixture
def registry() -> ProviderRegistry:
    return ProviderRegistry(settings=Settings(ollama_base_url="http://ollama.local:11434"))


class TestValidation:
    def test_unknown_provider(self, registry: ProviderRegistry) -> None:
        with pytest.raises(ConfigurationError, match="Unknown provider"):
            registry.validate(ProviderConfig(provider="skynet", api_key="k"))

    def test_missing_api_key(self, registry: ProviderRegistry) -> None:
        with pytest.raises(ConfigurationError, match="API key is required"):
            registry.validate(ProviderConfig(provider="openai", api_key="   "))

    def test_ollama_needs_no_key(self, registry: ProviderRegistry) -> None:
        assert registry.validate(ProviderConfig(provider="ollama")).family == "ollama"

    def test_compatible_requires_base_url(self, registry: ProviderRegistry) -> None:
        with pytest.raises(ConfigurationError, match="base_url is required"):
            registry.validate(ProviderConfig(provider="openai-compatible", api_key="k"))

    def test_invalid_base_url(self, registry: ProviderRegistry) -> None:
        with pytest.raises(ConfigurationError, match="Invalid base_url"):
            registry.validate(ProviderConfig(provider="openai", api_key="k", base_url="not a url"))

    def test_generation_capability_checked(self, registry: ProviderRegistry) -> None:
        registry.register(
            "embed-only",
            VendorProfile(family="openai", capabilities=ProviderCapabilities(supports_embedding=True)),
        )
        with pytest.raises(ConfigurationError, match="does not support text generation"):
            registry.validate(ProviderConfig(provider="embed-only", api_key="k"))

    def test_provider_name_case_insensitive(self, registry: ProviderRegistry) -> None:
        assert registry.validate(ProviderConfig(provider="OpenAI", api_key="k")).family == "openai"

    def test_available_providers_sorted(self, registry: ProviderRegistry) -> None:
        names = registry.available_providers()
        assert names == sorted(names)
        assert {"openai", "anthropic", "ollama", "groq"} <= set(names)


class TestAdapters:
    def test_openai(self, registry: ProviderRegistry) -> None:
        config = ProviderConfig(provider="openai", api_key="k")

        assert isinstance(registry.build_generation_provider(config), OpenAILLMProvider)
        assert isinstance(registry.build_embedding_provider(config), OpenAIEmbeddingProvider)

    def test_together_uses_profile_defaults(self, registry: ProviderRegistry) -> None:
        config = ProviderConfig(provider="together", api_key="k", model="meta-llama/x")

        generator = registry.build_generation_provider(config)
        embedder = registry.build_embedding_provider(config)

        assert generator.get_provider_name() == "together"
        assert embedder.get_model_name() == "BAAI/bge-base-en-v1.5"

    @pytest.mark.parametrize("provider", ["anthropic", "groq"])
    def test_generation_only_vendors_get_hash_embedding(self, registry: ProviderRegistry, provider: str) -> None:
        embedder = registry.build_embedding_provider(ProviderConfig(provider=provider, api_key="k"))
        assert isinstance(embedder, HashEmbeddingProvider)

    def test_anthropic_generator(self, registry: ProviderRegistry) -> None:
        generator = registry.build_generation_provider(ProviderConfig(provider="anthropic", api_key="k"))
        assert isinstance(generator, AnthropicLLMProvider)

    def test_ollama_uses_settings_url(self, registry: ProviderRegistry) -> None:
        config = ProviderConfig(provider="ollama")

        generator = registry.build_generation_provider(config)
        embedder = registry.build_embedding_provider(config)

        assert isinstance(generator, OllamaLLMProvider)
        assert isinstance(embedder, NomicEmbeddingProvider)
        assert generator._base_url == "http://ollama.local:11434"

    def test_capabilities_lookup(self, registry: ProviderRegistry) -> None:
        caps = registry.capabilities("anthropic")
        assert caps.supports_generation is True
        assert caps.supports_embedding is False


class TestCreateVectorStore:
    @pytest.mark.parametrize("name", ["local", "memory", "LOCAL", ""])
    def test_local(self, name: str) -> None:
        assert isinstance(create_vector_store(VectorStoreConfig(provider=name)), InMemoryVectorStore)

    def test_chromadb(self) -> None:
        store = create_vector_store(VectorStoreConfig(provider="chromadb", url="http://chroma:8000"))
        assert isinstance(store, ChromaDBProvider)

    def test_invalid_url(self) -> None:
        with pytest.raises(ConfigurationError, match="Invalid vector store url"):
            create_vector_store(VectorStoreConfig(provider="chroma", url="chroma:8000"))

    def test_unknown_engine(self) -> None:
        with pytest.raises(ConfigurationError, match="Unknown vector store provider"):
            create_vector_store(VectorStoreConfig(provider="pinecone"))
