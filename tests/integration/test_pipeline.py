"""Integration tests for the full ingest -> retrieve -> answer pipeline.

Real extraction (PyMuPDF), chunking, hash embeddings and the in-memory
vector store; only the text-generation provider is faked.
"""

from __future__ import annotations

import fitz
import pytest

from docrag.config.settings import Settings
from docrag.models.provider import OrchestratorState, ProviderConfig
from docrag.providers.vector_store.memory_provider import InMemoryVectorStore
from docrag.services.rag_orchestrator import RAGOrchestrator
from tests.conftest import FakeGenerator, FakeRegistry

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

_PAGES = [
    "Heat pumps move thermal energy from outside air into a building.",
    "Ground source heat pumps use pipes buried below the frost line.",
    "Insulation reduces the heating load before any pump is installed.",
]


def _make_pdf(pages: list[str]) -> bytes:
    doc = fitz.open()
    for text in pages:
        doc.new_page().insert_text((72, 72), text)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def generator() -> FakeGenerator:
    return FakeGenerator(reply="Heat pumps move heat rather than generate it.")


@pytest.fixture
def pipeline(generator: FakeGenerator) -> RAGOrchestrator:
    """Orchestrator built from settings so the chunker uses the configured sizes."""
    settings = Settings(
        embedding_batch_delay=0.0,
        chunk_max_size=120,
        chunk_min_size=30,
        chunk_overlap=20,
        search_limit=3,
        search_threshold=0.05,
    )
    return RAGOrchestrator(
        registry=FakeRegistry(generator),
        vector_store=InMemoryVectorStore(),
        settings=settings,
    )


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


@pytest.mark.asyncio
async def test_pdf_ingest_and_answer(pipeline: RAGOrchestrator, generator: FakeGenerator) -> None:
    await pipeline.configure(ProviderConfig(provider="anthropic", api_key="test-key"))
    progress: list[str] = []

    record = await pipeline.ingest(
        _make_pdf(_PAGES),
        mime_type="application/pdf",
        name="heat-pumps.pdf",
        on_progress=lambda event: progress.append(event.stage),
    )

    assert record.metadata.processing_method == "pymupdf"
    assert record.metadata.pages == 3
    assert len(record.chunks) > 1
    assert all(len(c.content) <= 120 for c in record.chunks)
    assert all(record.raw_text[c.start_offset : c.end_offset] == c.content for c in record.chunks)
    assert progress[0] == "validating"
    assert progress[-1] == "complete"

    answer = await pipeline.query("How do ground source heat pumps work?")

    assert answer.answer == "Heat pumps move heat rather than generate it."
    assert answer.sources == ["heat-pumps.pdf"]
    assert 1 <= answer.retrieved_chunk_count <= 3
    prompt = generator.calls[0][1].content
    assert "[Source: heat-pumps.pdf]" in prompt
    assert "Question: How do ground source heat pumps work?" in prompt


@pytest.mark.asyncio
async def test_multiple_documents_and_removal(pipeline: RAGOrchestrator) -> None:
    await pipeline.configure(ProviderConfig(provider="openai", api_key="sk-test"))
    pumps = await pipeline.ingest(_make_pdf(_PAGES), name="heat-pumps.pdf")
    await pipeline.ingest(
        b"Solar thermal collectors heat water directly with sunlight on the roof.",
        mime_type="text/plain",
        name="solar.txt",
    )

    before = await pipeline.query("heat pumps frost line pipes")
    assert "heat-pumps.pdf" in before.sources

    assert await pipeline.remove_document(pumps.id) is True
    after = await pipeline.query("heat pumps frost line pipes")

    assert "heat-pumps.pdf" not in after.sources
    assert all(c.metadata.source_doc_id != pumps.id for c in after.retrieved_chunks)
    assert pipeline.get_status().document_count == 1


@pytest.mark.asyncio
async def test_corrupt_file_is_queryable_placeholder(pipeline: RAGOrchestrator) -> None:
    await pipeline.configure(ProviderConfig(provider="ollama"))

    record = await pipeline.ingest(b"%PDF-1.4 truncated", name="broken.pdf")
    answer = await pipeline.query("Document Processing Report broken.pdf")

    assert record.metadata.processing_method == "placeholder"
    assert record.metadata.extraction_quality.value == "low"
    assert answer.sources == ["broken.pdf"]


@pytest.mark.asyncio
async def test_documents_survive_reconfiguration(pipeline: RAGOrchestrator) -> None:
    await pipeline.ingest(b"Wind farms need steady coastal winds.", mime_type="text/plain", name="wind.txt")
    assert pipeline.state == OrchestratorState.UNCONFIGURED

    await pipeline.configure(ProviderConfig(provider="groq", api_key="gsk-test"))
    answer = await pipeline.query("coastal winds")

    assert answer.sources == ["wind.txt"]
