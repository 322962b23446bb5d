"""Pydantic v2 data models for documents, retrieval and provider configuration."""

from docrag.models.document import (
    Chunk,
    ChunkOptions,
    DocumentRecord,
    ExtractionMetadata,
    ExtractionProgress,
    ExtractionResult,
    StructuralType,
)
from docrag.models.provider import (
    ChatMessage,
    ChatRole,
    GenerationParams,
    OrchestratorState,
    OrchestratorStatus,
    ProviderCapabilities,
    ProviderConfig,
    VectorStoreConfig,
)
from docrag.models.rag import (
    EmbeddingResult,
    RAGAnswer,
    SearchMode,
    SearchOptions,
    SearchResult,
    VectorMetadata,
    VectorRecord,
)

__all__ = [
    "ChatMessage",
    "ChatRole",
    "Chunk",
    "ChunkOptions",
    "DocumentRecord",
    "EmbeddingResult",
    "ExtractionMetadata",
    "ExtractionProgress",
    "ExtractionResult",
    "GenerationParams",
    "OrchestratorState",
    "OrchestratorStatus",
    "ProviderCapabilities",
    "ProviderConfig",
    "RAGAnswer",
    "SearchMode",
    "SearchOptions",
    "SearchResult",
    "StructuralType",
    "VectorMetadata",
    "VectorRecord",
    "VectorStoreConfig",
]
