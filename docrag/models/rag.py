"""Retrieval-side data models: vector records, search options and answers.

A VectorRecord is one embedded chunk stored in a vector backend.  Search
returns SearchResult objects ordered by score; the orchestrator turns the
top results into a context block and wraps the generated text in a
RAGAnswer.
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class SearchMode(str, Enum):  # noqa: UP042
    """Scoring mode for vector search."""

    SEMANTIC = "semantic"
    KEYWORD = "keyword"
    HYBRID = "hybrid"


class VectorMetadata(BaseModel):
    """Provenance attached to every stored vector."""

    model_config = ConfigDict(frozen=True)

    source_doc_id: str = Field(description="Id of the DocumentRecord that owns the chunk.")
    chunk_index: int = Field(ge=0)
    source_name: str = ""
    timestamp: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))
    extra: dict[str, Any] = Field(default_factory=dict)

    def field_value(self, key: str) -> Any:
        """Return a top-level field or an ``extra`` entry by name, or None."""
        if key in ("source_doc_id", "chunk_index", "source_name", "timestamp"):
            return getattr(self, key)
        return self.extra.get(key)


class VectorRecord(BaseModel):
    """One embedded chunk as stored in a vector backend."""

    model_config = ConfigDict(frozen=True)

    id: str
    vector: list[float]
    text: str
    metadata: VectorMetadata


class SearchOptions(BaseModel):
    """Parameters of a vector search."""

    model_config = ConfigDict(frozen=True)

    mode: SearchMode = SearchMode.SEMANTIC
    filters: dict[str, Any] | None = None
    limit: int = Field(default=10, ge=1)
    threshold: float = 0.1


class SearchResult(BaseModel):
    """A scored search hit."""

    model_config = ConfigDict(frozen=True)

    id: str
    content: str
    score: float
    metadata: VectorMetadata


class EmbeddingResult(BaseModel):
    """An embedding vector plus whether the local fallback produced it."""

    model_config = ConfigDict(frozen=True)

    vector: list[float]
    provider: str
    is_fallback: bool = False


class RAGAnswer(BaseModel):
    """The answer to a question together with its retrieval provenance."""

    model_config = ConfigDict(frozen=True)

    answer: str
    sources: list[str] = Field(default_factory=list, description="Distinct source names, most relevant first.")
    relevance_score: float = Field(default=0.0, description="Mean score of the chunks used as context.")
    retrieved_chunk_count: int = Field(default=0, ge=0)
    retrieved_chunks: list[SearchResult] = Field(default_factory=list)
