"""Provider configuration, chat message and orchestrator state models."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ProviderCapabilities(BaseModel):
    """What a provider can do; checked before any call is dispatched."""

    model_config = ConfigDict(frozen=True)

    supports_embedding: bool = False
    supports_generation: bool = False


class ProviderConfig(BaseModel):
    """Configuration for an AI provider (generation plus embedding)."""

    model_config = ConfigDict(frozen=True)

    provider: str = Field(description='Provider name, e.g. "openai", "anthropic", "ollama".')
    api_key: str = ""
    model: str = ""
    base_url: str = ""
    embedding_model: str = ""


class VectorStoreConfig(BaseModel):
    """Vector-store backend selection."""

    model_config = ConfigDict(frozen=True)

    provider: str = "local"
    api_key: str = ""
    url: str = ""
    collection_name: str = "docrag_documents"
    dimension: int = Field(default=0, ge=0, description="Expected vector length; 0 = not enforced.")
    persist_dir: str = "./data/chromadb"


class ChatRole(str, Enum):  # noqa: UP042
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """A single chat turn sent to a text-generation provider."""

    model_config = ConfigDict(frozen=True)

    role: ChatRole
    content: str


class GenerationParams(BaseModel):
    model_config = ConfigDict(frozen=True)

    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1000, ge=1)


class OrchestratorState(str, Enum):  # noqa: UP042
    """Lifecycle of the RAG orchestrator.

    UNCONFIGURED -> INITIALIZING -> READY, with ERROR reachable from
    INITIALIZING.  ``configure()`` may be called again from READY or ERROR.
    """

    UNCONFIGURED = "unconfigured"
    INITIALIZING = "initializing"
    READY = "ready"
    ERROR = "error"


class OrchestratorStatus(BaseModel):
    """Snapshot reported by ``RAGOrchestrator.get_status()``."""

    model_config = ConfigDict(frozen=True)

    state: OrchestratorState
    initialized: bool
    document_count: int = 0
    total_chunks: int = 0
    healthy: bool = False
    current_provider: str | None = None
    current_model: str | None = None
    embedding_provider: str | None = None
    vector_store: str = "local"
    last_error: str | None = None
