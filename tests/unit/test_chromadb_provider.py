"""Unit tests for the ChromaDB vector store adapter (client mocked)."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest
import pytest_asyncio

from docrag.models.provider import VectorStoreConfig
from docrag.models.rag import SearchMode, SearchOptions, VectorMetadata
from docrag.providers.vector_store.chromadb_provider import ChromaDBProvider
from docrag.utils.errors import VectorStoreError
from tests.conftest import make_record


def _meta(doc_id: str, index: int, name: str = "doc.txt") -> dict:
    return {
        "source_doc_id": doc_id,
        "chunk_index": index,
        "source_name": name,
        "timestamp": "2024-01-01T00:00:00+00:00",
        "extra_json": '{"structural_type": "paragraph"}',
    }


@pytest.fixture
def collection() -> MagicMock:
    mock = MagicMock()
    mock.count.return_value = 3
    mock.query.return_value = {
        "ids": [["d1:0", "d1:1", "d2:0"]],
        "documents": [["solar panels", "wind turbines", "solar batteries"]],
        "metadatas": [[_meta("d1", 0), _meta("d1", 1), _meta("d2", 0, "other.txt")]],
        "distances": [[0.1, 0.5, 0.3]],
    }
    return mock


@pytest_asyncio.fixture
async def provider(collection: MagicMock) -> ChromaDBProvider:
    p = ChromaDBProvider(VectorStoreConfig(provider="chromadb", collection_name="test_docs"))
    client = MagicMock()
    client.get_or_create_collection.return_value = collection
    p._client = client
    await p.initialize()
    return p


class TestChromaDBProvider:
    def test_get_provider_name(self) -> None:
        assert ChromaDBProvider(VectorStoreConfig()).get_provider_name() == "chromadb"

    @pytest.mark.asyncio
    async def test_use_before_initialize_raises(self) -> None:
        with pytest.raises(VectorStoreError):
            await ChromaDBProvider(VectorStoreConfig()).count()

    @pytest.mark.asyncio
    async def test_initialize_opens_cosine_collection(self, provider: ChromaDBProvider) -> None:
        kwargs = provider._client.get_or_create_collection.call_args.kwargs
        assert kwargs["name"] == "test_docs"
        assert kwargs["metadata"] == {"hnsw:space": "cosine"}

    @pytest.mark.asyncio
    async def test_add_documents_upserts_in_batches(self, provider: ChromaDBProvider, collection: MagicMock) -> None:
        records = [make_record(f"d:{i}", f"chunk {i}", doc_id="d", chunk_index=i) for i in range(5)]

        added = await provider.add_documents(records, batch_size=2)

        assert added == 5
        assert collection.upsert.call_count == 3
        first = collection.upsert.call_args_list[0].kwargs
        assert first["ids"] == ["d:0", "d:1"]
        assert first["metadatas"][0]["source_doc_id"] == "d"

    @pytest.mark.asyncio
    async def test_add_documents_wraps_errors(self, provider: ChromaDBProvider, collection: MagicMock) -> None:
        collection.upsert.side_effect = RuntimeError("disk full")
        with pytest.raises(VectorStoreError, match="disk full"):
            await provider.add_documents([make_record("x", "text")])

    @pytest.mark.asyncio
    async def test_semantic_search_converts_distance(self, provider: ChromaDBProvider) -> None:
        results = await provider.search("solar", [1.0, 0.0], SearchOptions(limit=3, threshold=0.6))

        assert [r.id for r in results] == ["d1:0", "d2:0"]
        assert results[0].score == pytest.approx(0.9)
        assert results[1].score == pytest.approx(0.7)
        assert results[0].metadata.extra == {"structural_type": "paragraph"}

    @pytest.mark.asyncio
    async def test_hybrid_widens_pool_and_rescoring(self, provider: ChromaDBProvider, collection: MagicMock) -> None:
        results = await provider.search(
            "solar", [1.0, 0.0], SearchOptions(mode=SearchMode.HYBRID, limit=1, threshold=0.0)
        )

        assert collection.query.call_args.kwargs["n_results"] == 3  # min(1 * 4, count)
        assert results[0].id == "d1:0"
        assert results[0].score == pytest.approx((0.9 + 1.0) / 2)

    @pytest.mark.asyncio
    async def test_keyword_search_fetches_all(self, provider: ChromaDBProvider, collection: MagicMock) -> None:
        collection.get.return_value = {
            "ids": ["d1:0", "d1:1"],
            "documents": ["solar panels", "wind turbines"],
            "metadatas": [_meta("d1", 0), _meta("d1", 1)],
        }

        results = await provider.search("wind", [], SearchOptions(mode=SearchMode.KEYWORD, threshold=0.5))

        collection.query.assert_not_called()
        assert [r.id for r in results] == ["d1:1"]

    @pytest.mark.asyncio
    async def test_filters_translated_to_where(self, provider: ChromaDBProvider, collection: MagicMock) -> None:
        await provider.search("solar", [1.0], SearchOptions(filters={"source_doc_id": "d1"}, threshold=0.0))

        assert collection.query.call_args.kwargs["where"] == {"source_doc_id": {"$eq": "d1"}}

    @pytest.mark.asyncio
    async def test_empty_collection(self, provider: ChromaDBProvider, collection: MagicMock) -> None:
        collection.count.return_value = 0
        assert await provider.search("q", [1.0], SearchOptions()) == []

    @pytest.mark.asyncio
    async def test_delete_document(self, provider: ChromaDBProvider, collection: MagicMock) -> None:
        collection.get.return_value = {"ids": ["d1:0", "d1:1"]}

        deleted = await provider.delete_document("d1")

        assert deleted == 2
        collection.delete.assert_called_once_with(where={"source_doc_id": "d1"})

    @pytest.mark.asyncio
    async def test_clear_recreates_collection(self, provider: ChromaDBProvider) -> None:
        await provider.clear()

        provider._client.delete_collection.assert_called_once_with("test_docs")
        assert provider._client.get_or_create_collection.call_count == 2

    @pytest.mark.asyncio
    async def test_connection_failure_returns_false(self, provider: ChromaDBProvider) -> None:
        provider._client.heartbeat.side_effect = ConnectionError("refused")
        assert await provider.test_connection() is False


class TestMetadataHelpers:
    def test_round_trip_preserves_extra(self) -> None:
        meta = VectorMetadata(source_doc_id="d", chunk_index=2, source_name="n", extra={"start_offset": 10})

        flat = ChromaDBProvider._to_chroma_metadata(meta)
        restored = ChromaDBProvider._from_chroma_metadata(flat)

        assert all(isinstance(v, (str, int, float, bool)) for v in flat.values())
        assert restored.extra == {"start_offset": 10}
        assert restored.chunk_index == 2

    def test_translate_filters(self) -> None:
        where = ChromaDBProvider._translate_filters({"source_name": ["a", "b"], "chunk_index": 0, "other": 1})

        assert where == {"$and": [{"source_name": {"$in": ["a", "b"]}}, {"chunk_index": {"$eq": 0}}]}

    def test_translate_filters_extra_only(self) -> None:
        assert ChromaDBProvider._translate_filters({"structural_type": "list"}) is None
