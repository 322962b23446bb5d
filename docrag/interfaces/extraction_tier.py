"""Abstract base class for one tier of the document-extraction cascade.

The :class:`~docrag.services.document_extractor.DocumentExtractor` tries
its tiers in order.  A tier either returns an ExtractionResult or raises;
the extractor records the failure reason in the metadata warnings and
moves on.  The last tier (the placeholder) never raises.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass, field

import structlog

from docrag.models.document import ExtractionProgress, ExtractionResult

logger = structlog.get_logger(logger_name=__name__)


@dataclass
class ExtractionRequest:
    """Input handed to every tier of a single ``extract()`` call."""

    data: bytes
    mime_type: str
    file_name: str = "document"
    on_progress: Callable[[ExtractionProgress], None] | None = None
    is_aborted: Callable[[], bool] = lambda: False
    # Failure reasons of earlier tiers, read by the placeholder report.
    failures: list[str] = field(default_factory=list)

    def report(self, stage: str, progress: float, method: str = "", **details: object) -> None:
        """Send a progress notification; callback errors are logged and ignored."""
        if self.on_progress is None:
            return
        try:
            self.on_progress(
                ExtractionProgress(
                    stage=stage,
                    progress=max(0.0, min(100.0, progress)),
                    method=method,
                    current_page=details.get("current_page"),  # type: ignore[arg-type]
                    total_pages=details.get("total_pages"),  # type: ignore[arg-type]
                    details=str(details.get("details", "")),
                )
            )
        except Exception as exc:
            logger.warning("extraction_progress_callback_failed", stage=stage, error=str(exc))


class IExtractionTier(ABC):
    """Contract for a single extraction strategy."""

    @abstractmethod
    async def attempt(self, request: ExtractionRequest) -> ExtractionResult:
        """Extract text from ``request.data``.

        Returns
        -------
        ExtractionResult
            Text plus tier-level metadata (pages, page counts, confidence,
            warnings).  The extractor fills in method, quality, language,
            timing and file details.

        Raises
        ------
        docrag.utils.errors.ExtractionTierFailure
            If this tier cannot handle the input or produces no text.
        """

    @abstractmethod
    def get_tier_name(self) -> str:
        """Return the processing-method label recorded in metadata."""
