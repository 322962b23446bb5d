"""Document-side data models: chunks, extraction results and document records.

All value models are frozen pydantic v2 models.  Records that gain data
later in the pipeline (e.g. a DocumentRecord receiving its embeddings) are
updated with ``model_copy(update={...})``.

Flow::

    bytes --DocumentExtractor--> ExtractionResult
          --TextChunker-->       list[Chunk]
          --EmbeddingService-->  DocumentRecord(chunks, embeddings)
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from docrag.utils.confidence import ExtractionQuality


class StructuralType(str, Enum):  # noqa: UP042
    """Coarse structural classification of a chunk."""

    PARAGRAPH = "paragraph"
    HEADING = "heading"
    LIST = "list"
    TABLE = "table"
    OTHER = "other"


# ---------------------------------------------------------------------------
# Chunk
# ---------------------------------------------------------------------------
class Chunk(BaseModel):
    """A contiguous slice of a document's text.

    ``content`` is exactly ``source[start_offset:end_offset]``.  The first
    ``overlap_length`` characters repeat the tail of the previous chunk.
    """

    model_config = ConfigDict(frozen=True)

    content: str = Field(description="The chunk text, an exact slice of the source.")
    index: int = Field(ge=0, description="Position of the chunk within its document.")
    start_offset: int = Field(ge=0, description="Inclusive start offset in the source text.")
    end_offset: int = Field(ge=0, description="Exclusive end offset in the source text.")
    word_count: int = Field(default=0, ge=0)
    structural_type: StructuralType = StructuralType.OTHER
    confidence: float = Field(default=50.0, ge=0.0, le=100.0)
    overlap_length: int = Field(
        default=0,
        ge=0,
        description="Leading characters carried over from the previous chunk.",
    )


class ChunkOptions(BaseModel):
    """Chunk sizing parameters, in characters."""

    model_config = ConfigDict(frozen=True)

    max_size: int = 1000
    min_size: int = 200
    overlap: int = 150


# ---------------------------------------------------------------------------
# Extraction
# ---------------------------------------------------------------------------
class ExtractionMetadata(BaseModel):
    """Metadata describing how a document's text was obtained."""

    model_config = ConfigDict(frozen=True)

    pages: int = Field(default=1, ge=0)
    processing_method: str = "unknown"
    extraction_quality: ExtractionQuality = ExtractionQuality.LOW
    successful_pages: int = Field(default=0, ge=0)
    failed_pages: int = Field(default=0, ge=0)
    warnings: list[str] = Field(default_factory=list)
    language: str = "unknown"
    confidence: float = Field(default=0.0, ge=0.0, le=100.0)
    file_name: str = ""
    file_size: int = Field(default=0, ge=0)
    processing_time: float = Field(default=0.0, ge=0.0, description="Seconds spent extracting.")
    partial: bool = Field(default=False, description="True when extraction was aborted early.")
    title: str | None = None
    author: str | None = None


class ExtractionResult(BaseModel):
    """Extracted text plus its metadata."""

    model_config = ConfigDict(frozen=True)

    text: str
    metadata: ExtractionMetadata


class ExtractionProgress(BaseModel):
    """Progress notification emitted while a document is extracted."""

    model_config = ConfigDict(frozen=True)

    stage: str
    progress: float = Field(ge=0.0, le=100.0)
    method: str = ""
    current_page: int | None = None
    total_pages: int | None = None
    details: str = ""


# ---------------------------------------------------------------------------
# DocumentRecord
# ---------------------------------------------------------------------------
class DocumentRecord(BaseModel):
    """A processed document: its text, chunks and per-chunk embeddings."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    raw_text: str
    chunks: list[Chunk] = Field(default_factory=list)
    embeddings: list[list[float]] = Field(
        default_factory=list,
        description="One vector per chunk, aligned by index.",
    )
    uploaded_at: datetime = Field(default_factory=lambda: datetime.now(tz=timezone.utc))
    metadata: ExtractionMetadata = Field(default_factory=ExtractionMetadata)
