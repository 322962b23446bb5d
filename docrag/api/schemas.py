"""Pydantic request/response schemas for the docrag HTTP API.

Request schemas end with ``Request``, response schemas with ``Response``.
Domain models (``OrchestratorStatus``, ``ExtractionMetadata``) are reused
directly where the API exposes them unchanged.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, Field

from docrag.models.document import ExtractionMetadata
from docrag.models.provider import OrchestratorStatus, ProviderConfig


class HealthResponse(BaseModel):
    """Liveness plus whether the engine can answer queries."""

    status: str
    version: str
    ready: bool


class ConfigureRequest(BaseModel):
    """Provider selection submitted to ``POST /configure``."""

    provider: str = Field(..., min_length=1)
    api_key: str = ""
    model: str = ""
    base_url: str = ""
    embedding_model: str = ""

    def to_config(self) -> ProviderConfig:
        return ProviderConfig(**self.model_dump())


class StatusResponse(BaseModel):
    status: OrchestratorStatus


class DocumentSummary(BaseModel):
    """A registered document without its text and vectors."""

    id: str
    name: str
    chunk_count: int
    uploaded_at: datetime
    metadata: ExtractionMetadata


class DocumentListResponse(BaseModel):
    documents: list[DocumentSummary] = Field(default_factory=list)
    total: int = 0


class DeleteResponse(BaseModel):
    deleted: bool
    document_id: str | None = None


class QueryRequest(BaseModel):
    question: str = Field(..., max_length=4000)


class SourceChunk(BaseModel):
    """One chunk used as generation context."""

    source_name: str
    document_id: str
    chunk_index: int
    score: float
    content: str


class QueryResponse(BaseModel):
    answer: str
    sources: list[str] = Field(default_factory=list)
    relevance_score: float = 0.0
    retrieved_chunk_count: int = 0
    chunks: list[SourceChunk] = Field(default_factory=list)


class ErrorResponse(BaseModel):
    """Standard error body returned for domain errors."""

    error: str
    detail: str | None = None
    provider: str | None = None
