"""In-process vector store.

Holds records in an insertion-ordered dict keyed by record id and scores
every record on each search.  This is the default engine: it needs no
external service and lives exactly as long as the process.

Scoring modes:

* ``semantic`` -- cosine similarity between query and record vectors.
* ``keyword``  -- fraction of query tokens found in the record's tokens.
* ``hybrid``   -- arithmetic mean of the two.

The ranking helpers below are shared with the ChromaDB engine so both
backends filter, sort and truncate identically.
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import structlog

from docrag.interfaces.vector_store_provider import IVectorStoreProvider
from docrag.models.rag import SearchMode, SearchOptions, SearchResult, VectorMetadata, VectorRecord
from docrag.utils.errors import VectorStoreError
from docrag.utils.similarity import cosine_similarity, hybrid_score, keyword_overlap

logger = structlog.get_logger(logger_name=__name__)


# ---------------------------------------------------------------------------
# Shared scoring / ranking helpers
# ---------------------------------------------------------------------------

def score_record(
    mode: SearchMode,
    query_text: str,
    query_vector: list[float],
    text: str,
    vector: list[float] | None = None,
    semantic: float | None = None,
) -> float:
    """Score one record; *semantic* may be supplied when the backend computed it."""
    if mode == SearchMode.KEYWORD:
        return keyword_overlap(query_text, text)

    if semantic is None:
        semantic = cosine_similarity(query_vector, vector or [])
    if mode == SearchMode.SEMANTIC:
        return semantic
    return hybrid_score(semantic, keyword_overlap(query_text, text))


def matches_filters(metadata: VectorMetadata, filters: dict[str, Any] | None) -> bool:
    """Equality match on metadata fields; a list value means membership."""
    if not filters:
        return True
    for key, expected in filters.items():
        actual = metadata.field_value(key)
        if isinstance(expected, (list, tuple, set)):
            if actual not in expected:
                return False
        elif actual != expected:
            return False
    return True


def rank_results(results: Iterable[SearchResult], options: SearchOptions) -> list[SearchResult]:
    """Drop results under the threshold, stable-sort by score descending, truncate."""
    kept = [r for r in results if r.score >= options.threshold]
    kept.sort(key=lambda r: r.score, reverse=True)
    return kept[: options.limit]


def check_dimension(records: list[VectorRecord], dimension: int, provider_name: str) -> None:
    """Raise VectorStoreError when a record's vector length differs from *dimension*."""
    if dimension <= 0:
        return
    for record in records:
        if len(record.vector) != dimension:
            raise VectorStoreError(
                message=(
                    f"Vector for record '{record.id}' has {len(record.vector)} dimensions, "
                    f"store expects {dimension}"
                ),
                provider_name=provider_name,
            )


# ---------------------------------------------------------------------------
# InMemoryVectorStore
# ---------------------------------------------------------------------------

class InMemoryVectorStore(IVectorStoreProvider):
    """Vector store kept entirely in process memory.

    Parameters
    ----------
    dimension:
        Expected vector length; ``0`` disables the check.
    """

    def __init__(self, dimension: int = 0) -> None:
        self._dimension = dimension
        self._records: dict[str, VectorRecord] = {}

    async def initialize(self) -> None:
        logger.info("memory_store_initialized", records=len(self._records))

    async def add_documents(self, records: list[VectorRecord]) -> int:
        check_dimension(records, self._dimension, self.get_provider_name())
        for record in records:
            # Re-adding an id replaces the record but keeps its original position.
            self._records[record.id] = record
        logger.info("memory_store_add", count=len(records), total=len(self._records))
        return len(records)

    async def search(
        self,
        query_text: str,
        query_vector: list[float],
        options: SearchOptions | None = None,
    ) -> list[SearchResult]:
        options = options or SearchOptions()
        scored = [
            SearchResult(
                id=record.id,
                content=record.text,
                score=score_record(options.mode, query_text, query_vector, record.text, record.vector),
                metadata=record.metadata,
            )
            for record in self._records.values()
            if matches_filters(record.metadata, options.filters)
        ]
        results = rank_results(scored, options)
        logger.debug(
            "memory_store_search",
            mode=options.mode.value,
            candidates=len(scored),
            results=len(results),
        )
        return results

    async def delete_document(self, document_id: str) -> int:
        doomed = [rid for rid, r in self._records.items() if r.metadata.source_doc_id == document_id]
        for rid in doomed:
            del self._records[rid]
        logger.info("memory_store_delete_document", document_id=document_id, deleted=len(doomed))
        return len(doomed)

    async def clear(self) -> None:
        self._records.clear()
        logger.info("memory_store_cleared")

    async def count(self) -> int:
        return len(self._records)

    async def test_connection(self) -> bool:
        return True

    def get_provider_name(self) -> str:
        return "local"
