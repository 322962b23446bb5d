"""Custom exception hierarchy for docrag.

All application exceptions inherit from :class:`DocRAGError`, which
carries an optional ``provider_name`` so error handlers can identify which
external service (e.g. "openai", "chromadb", "pymupdf") caused the failure.

The hierarchy is organized by pipeline stage:

    DocRAGError  (base -- catch-all for any docrag error)
    +-- ExtractionTierFailure   (one extraction tier failed; absorbed by the extractor)
    +-- EmbeddingError          (embedding backend failure; absorbed into the fallback)
    +-- GenerationError         (text-generation call failed; surfaced)
    +-- VectorStoreError        (vector backend failure; surfaced)
    +-- ConfigurationError      (invalid provider config or options; surfaced)
    +-- NotReadyError           (query before the orchestrator is READY)
    +-- NoDocumentsError        (query with an empty document registry)
    +-- InvalidQueryError       (blank question)
    +-- InvalidDocumentError    (document record without chunks)

Internal errors degrade quality and are recorded in metadata; everything
that makes an answer unreliable propagates to the caller.
"""

from __future__ import annotations


class DocRAGError(Exception):
    """Base exception for all docrag errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which external service triggered the
    error.  ``__str__`` prefixes the provider name in brackets, e.g.
    ``[openai] Rate limit exceeded``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


# ---------------------------------------------------------------------------
# Internal errors (absorbed, recorded in metadata)
# ---------------------------------------------------------------------------

class ExtractionTierFailure(DocRAGError):
    """Raised by a single extraction tier; the extractor moves to the next tier."""

    def __init__(
        self,
        message: str = "Extraction tier failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class EmbeddingError(DocRAGError):
    """Raised when an embedding backend fails or returns an unusable vector."""

    def __init__(
        self,
        message: str = "Embedding request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Surfaced errors
# ---------------------------------------------------------------------------

class GenerationError(DocRAGError):
    """Raised when a text-generation call fails; carries the vendor message."""

    def __init__(
        self,
        message: str = "Text generation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class VectorStoreError(DocRAGError):
    """Raised when the vector-store backend rejects or fails an operation."""

    def __init__(
        self,
        message: str = "Vector store operation failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class ConfigurationError(DocRAGError):
    """Raised when provider configuration or options are invalid."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Orchestrator state errors
# ---------------------------------------------------------------------------

class NotReadyError(DocRAGError):
    """Raised when a query arrives before the orchestrator reached READY."""

    def __init__(
        self,
        message: str = "RAG engine is not configured",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class NoDocumentsError(DocRAGError):
    """Raised when a query arrives while no documents are registered."""

    def __init__(
        self,
        message: str = "No documents have been added",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class InvalidQueryError(DocRAGError, ValueError):
    """Raised for an empty or whitespace-only question."""

    def __init__(
        self,
        message: str = "Question must not be empty",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class InvalidDocumentError(DocRAGError, ValueError):
    """Raised when a DocumentRecord without chunks is added."""

    def __init__(
        self,
        message: str = "Document has no chunks",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)
