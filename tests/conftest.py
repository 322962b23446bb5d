"""Shared pytest fixtures for the docrag test suite."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from docrag.config.settings import Settings
from docrag.interfaces.embedding_provider import IEmbeddingProvider
from docrag.interfaces.llm_provider import ITextGenerationProvider
from docrag.models.provider import ChatMessage, GenerationParams, ProviderConfig
from docrag.models.rag import VectorMetadata, VectorRecord
from docrag.providers.embedding.hash_embedding_provider import hash_embedding
from docrag.providers.vector_store.memory_provider import InMemoryVectorStore
from docrag.services.chunker import TextChunker
from docrag.services.document_extractor import DocumentExtractor
from docrag.services.provider_registry import ProviderRegistry
from docrag.services.rag_orchestrator import RAGOrchestrator
from docrag.utils.errors import EmbeddingError, GenerationError

# ---------------------------------------------------------------------------
# Fake providers
# ---------------------------------------------------------------------------


class FakeGenerator(ITextGenerationProvider):
    """Records every prompt and answers with a fixed reply."""

    def __init__(self, reply: str = "Generated answer.", fail: bool = False, reachable: bool = True) -> None:
        self.reply = reply
        self.fail = fail
        self.reachable = reachable
        self.calls: list[list[ChatMessage]] = []

    async def generate(self, messages: list[ChatMessage], params: GenerationParams | None = None) -> str:
        self.calls.append(messages)
        if self.fail:
            raise GenerationError(message="upstream returned 500", provider_name="fake")
        return self.reply

    async def test_connection(self) -> bool:
        return self.reachable

    def get_provider_name(self) -> str:
        return "fake"

    def get_model_name(self) -> str:
        return "fake-model"


class FakeEmbedder(IEmbeddingProvider):
    """Embedding backend that delegates to the hash embedding, or fails on demand."""

    def __init__(self, fail: bool = False, name: str = "fake-embed", dimension: int = 384) -> None:
        self.fail = fail
        self.name = name
        self.dimension = dimension
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if self.fail:
            raise EmbeddingError(message="connection refused", provider_name=self.name)
        return hash_embedding(text, self.dimension)

    def get_dimension(self) -> int | None:
        return self.dimension

    def get_provider_name(self) -> str:
        return self.name

    def get_model_name(self) -> str:
        return "fake-embed-model"

    async def test_connection(self) -> bool:
        return not self.fail


class FakeRegistry(ProviderRegistry):
    """Registry that validates normally but builds the injected fakes."""

    def __init__(self, generator: FakeGenerator, embedder: IEmbeddingProvider | None = None) -> None:
        super().__init__(settings=Settings())
        self.generator = generator
        self.embedder = embedder or FakeEmbedder()

    def build_generation_provider(self, config: ProviderConfig) -> ITextGenerationProvider:
        self.validate(config)
        return self.generator

    def build_embedding_provider(self, config: ProviderConfig) -> IEmbeddingProvider:
        return self.embedder


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def project_root() -> Path:
    return Path(__file__).parent.parent


@pytest.fixture
def test_settings() -> Settings:
    """Settings with no pacing delay and a small chunk size."""
    return Settings(
        embedding_batch_delay=0.0,
        chunk_max_size=200,
        chunk_min_size=40,
        chunk_overlap=30,
        search_limit=5,
        search_threshold=0.0,
    )


@pytest.fixture
def fake_generator() -> FakeGenerator:
    return FakeGenerator()


@pytest.fixture
def openai_config() -> ProviderConfig:
    return ProviderConfig(provider="openai", api_key="sk-test")


@pytest.fixture
def orchestrator(test_settings: Settings, fake_generator: FakeGenerator) -> RAGOrchestrator:
    """An unconfigured orchestrator wired to fakes and the in-memory store."""
    return RAGOrchestrator(
        registry=FakeRegistry(fake_generator),
        vector_store=InMemoryVectorStore(),
        extractor=DocumentExtractor(),
        chunker=TextChunker(),
        settings=test_settings,
    )


@pytest.fixture
def sample_text() -> str:
    """Multi-paragraph prose used across chunker and pipeline tests."""
    return (
        "Solar Energy Basics\n\n"
        "Solar panels convert sunlight into electricity using photovoltaic cells. "
        "Each cell is made of silicon layers that release electrons when struck by light. "
        "The direct current they produce is converted by an inverter.\n\n"
        "Wind turbines capture kinetic energy from moving air. A typical modern turbine "
        "has three blades mounted on a tall tower. Larger rotors sweep more area and "
        "generate more power at the same wind speed.\n\n"
        "Battery storage smooths out the supply from both sources. Lithium-ion packs "
        "charge when production exceeds demand and discharge in the evening peak."
    )


def make_record(
    record_id: str,
    text: str,
    doc_id: str = "doc-1",
    name: str = "notes.txt",
    chunk_index: int = 0,
    vector: list[float] | None = None,
    **extra: Any,
) -> VectorRecord:
    """Build a VectorRecord whose vector defaults to the hash embedding of *text*."""
    return VectorRecord(
        id=record_id,
        vector=vector if vector is not None else hash_embedding(text),
        text=text,
        metadata=VectorMetadata(
            source_doc_id=doc_id,
            chunk_index=chunk_index,
            source_name=name,
            extra=extra,
        ),
    )
