"""Utility modules for docrag.

- **confidence** -- clamping, averaging and extraction-quality grading on
  the 0--100 confidence scale.
- **errors** -- domain exception hierarchy rooted at DocRAGError.
- **logging** -- structlog setup with console/JSON dual rendering.
- **similarity** -- cosine, keyword-overlap and hybrid scoring primitives.
"""

# -- Confidence scoring utilities ------------------------------------------
from docrag.utils.confidence import (
    ExtractionQuality,
    average_confidence,
    clamp_confidence,
    grade_extraction,
)

# -- Domain exception hierarchy --------------------------------------------
from docrag.utils.errors import (
    ConfigurationError,
    DocRAGError,
    EmbeddingError,
    ExtractionTierFailure,
    GenerationError,
    InvalidDocumentError,
    InvalidQueryError,
    NoDocumentsError,
    NotReadyError,
    VectorStoreError,
)

# -- Structured logging setup ----------------------------------------------
from docrag.utils.logging import configure_logging, get_logger

# -- Similarity primitives -------------------------------------------------
from docrag.utils.similarity import cosine_similarity, hybrid_score, keyword_overlap

__all__ = [
    "ConfigurationError",
    "DocRAGError",
    "EmbeddingError",
    "ExtractionQuality",
    "ExtractionTierFailure",
    "GenerationError",
    "InvalidDocumentError",
    "InvalidQueryError",
    "NoDocumentsError",
    "NotReadyError",
    "VectorStoreError",
    "average_confidence",
    "clamp_confidence",
    "configure_logging",
    "cosine_similarity",
    "get_logger",
    "grade_extraction",
    "hybrid_score",
    "keyword_overlap",
]
