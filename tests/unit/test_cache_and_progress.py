"""Unit tests for MemoryCacheProvider and extraction progress reporting."""

from __future__ import annotations

import pytest

from docrag.interfaces.extraction_tier import ExtractionRequest
from docrag.models.document import ExtractionProgress
from docrag.providers.cache.memory_cache import MemoryCacheProvider

# ======================================================================
# MemoryCacheProvider
# ======================================================================


class TestMemoryCacheProvider:
    @pytest.fixture()
    def cache(self) -> MemoryCacheProvider:
        return MemoryCacheProvider(max_size=100, ttl=3600)

    @pytest.mark.asyncio
    async def test_get_missing_key_returns_none(self, cache: MemoryCacheProvider) -> None:
        assert await cache.get("nonexistent") is None

    @pytest.mark.asyncio
    async def test_set_and_get(self, cache: MemoryCacheProvider) -> None:
        await cache.set("key1", [0.1, 0.2])
        assert await cache.get("key1") == [0.1, 0.2]

    @pytest.mark.asyncio
    async def test_set_overwrites_existing(self, cache: MemoryCacheProvider) -> None:
        await cache.set("key1", "old")
        await cache.set("key1", "new")
        assert await cache.get("key1") == "new"

    @pytest.mark.asyncio
    async def test_delete_removes_key(self, cache: MemoryCacheProvider) -> None:
        await cache.set("key1", "value1")
        await cache.delete("key1")
        assert await cache.get("key1") is None

    @pytest.mark.asyncio
    async def test_delete_nonexistent_is_noop(self, cache: MemoryCacheProvider) -> None:
        await cache.delete("nonexistent")

    @pytest.mark.asyncio
    async def test_clear(self, cache: MemoryCacheProvider) -> None:
        await cache.set("a", 1)
        await cache.set("b", 2)
        await cache.clear()
        assert cache.size() == 0

    @pytest.mark.asyncio
    async def test_max_size_evicts(self) -> None:
        cache = MemoryCacheProvider(max_size=2, ttl=3600)
        for key in ("a", "b", "c"):
            await cache.set(key, key)
        assert cache.size() == 2


# ======================================================================
# Progress reporting
# ======================================================================


class TestProgressReporting:
    def test_no_callback_is_noop(self) -> None:
        ExtractionRequest(data=b"", mime_type="text/plain").report("opening", 10)

    def test_progress_clamped_and_details_forwarded(self) -> None:
        events: list[ExtractionProgress] = []
        request = ExtractionRequest(data=b"", mime_type="text/plain", on_progress=events.append)

        request.report("extracting", 140, method="pymupdf", current_page=3, total_pages=4)
        request.report("validating", -5)

        assert events[0].progress == 100.0
        assert events[0].method == "pymupdf"
        assert events[0].current_page == 3
        assert events[0].total_pages == 4
        assert events[1].progress == 0.0

    def test_callback_exception_swallowed(self) -> None:
        def broken(event: ExtractionProgress) -> None:
            raise ValueError("closed")

        ExtractionRequest(data=b"", mime_type="text/plain", on_progress=broken).report("opening", 10)
