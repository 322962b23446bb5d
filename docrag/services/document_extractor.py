"""Document extraction through an ordered cascade of tiers.

``extract()`` never raises.  Each tier is tried in turn; a failing tier's
reason is appended to the metadata warnings and the next tier runs.  The
deterministic placeholder report always terminates the cascade, so the
caller receives text and metadata for any input, including empty or
corrupt files.

After a tier succeeds the extractor derives the fields every result
shares: processing method, quality grade, language, timing and file
details.
"""

from __future__ import annotations

import asyncio
import time
from collections.abc import Callable

import structlog

from docrag.config.settings import Settings
from docrag.interfaces.extraction_tier import ExtractionRequest, IExtractionTier
from docrag.models.document import ExtractionProgress, ExtractionResult
from docrag.providers.extraction.placeholder_tier import PlaceholderTier
from docrag.providers.extraction.plain_text_tier import PlainTextTier
from docrag.providers.extraction.pymupdf_tier import PyMuPDFTier
from docrag.providers.extraction.raw_stream_tier import RawStreamTier
from docrag.providers.extraction.remote_service_tier import RemoteServiceTier
from docrag.utils.confidence import grade_extraction
from docrag.utils.errors import DocRAGError
from docrag.utils.text_quality import detect_language

logger = structlog.get_logger(logger_name=__name__)

DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024


class DocumentExtractor:
    """Runs extraction tiers in order until one produces text.

    Parameters
    ----------
    tiers:
        Cascade tiers, tried in order.  The placeholder tier is always
        appended and must not be included here.
    max_file_size:
        Inputs larger than this many bytes skip straight to the placeholder.
    """

    def __init__(
        self,
        tiers: list[IExtractionTier] | None = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
    ) -> None:
        self._tiers: list[IExtractionTier] = (
            tiers if tiers is not None else [PlainTextTier(), PyMuPDFTier(), RawStreamTier(), RemoteServiceTier()]
        )
        self._placeholder = PlaceholderTier()
        self._max_file_size = max_file_size

    @classmethod
    def from_settings(cls, settings: Settings) -> DocumentExtractor:
        """Build the standard cascade from application settings."""
        return cls(
            tiers=[
                PlainTextTier(),
                PyMuPDFTier(open_timeout=settings.extraction_open_timeout),
                RawStreamTier(),
                RemoteServiceTier(
                    endpoint=settings.remote_extraction_url,
                    timeout=settings.remote_extraction_timeout,
                ),
            ],
            max_file_size=settings.extraction_max_file_size,
        )

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    async def extract(
        self,
        data: bytes,
        mime_type: str = "application/pdf",
        on_progress: Callable[[ExtractionProgress], None] | None = None,
        file_name: str = "document",
        cancel_event: asyncio.Event | None = None,
    ) -> ExtractionResult:
        """Extract text and metadata from *data*.

        Parameters
        ----------
        data:
            Raw file bytes.
        mime_type:
            Declared MIME type; used by the tiers to decide whether to try.
        on_progress:
            Optional callback receiving :class:`ExtractionProgress` updates.
        file_name:
            Name recorded in metadata and the failure report.
        cancel_event:
            Per-call cancellation signal, polled once per page.  Once set,
            extraction stops after the current page and the result is
            marked ``partial``.

        Returns
        -------
        ExtractionResult
            Never raises; unreadable input yields the placeholder report
            with ``extraction_quality == "low"``.
        """
        started = time.perf_counter()
        request = ExtractionRequest(
            data=data or b"",
            mime_type=mime_type,
            file_name=file_name,
            on_progress=on_progress,
            is_aborted=cancel_event.is_set if cancel_event is not None else (lambda: False),
        )
        request.report("validating", 0)

        result: ExtractionResult | None = None
        method = self._placeholder.get_tier_name()
        invalid_reason = self._validate(request.data)
        if invalid_reason is not None:
            request.failures.append(f"validation: {invalid_reason}")
            logger.warning("extraction_input_invalid", file_name=file_name, reason=invalid_reason)
        else:
            for tier in self._tiers:
                try:
                    result = await tier.attempt(request)
                    method = tier.get_tier_name()
                    break
                except Exception as exc:
                    reason = exc.message if isinstance(exc, DocRAGError) else str(exc) or type(exc).__name__
                    request.failures.append(f"{tier.get_tier_name()}: {reason}")
                    logger.info("extraction_tier_failed", tier=tier.get_tier_name(), reason=reason)

        if result is None:
            result = await self._placeholder.attempt(request)

        final = self._finalize(result, request, method, time.perf_counter() - started)
        request.report("complete", 100, method=method)
        logger.info(
            "extraction_complete",
            file_name=file_name,
            method=method,
            quality=final.metadata.extraction_quality.value,
            pages=final.metadata.pages,
            chars=len(final.text),
        )
        return final

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _validate(self, data: bytes) -> str | None:
        if not data:
            return "File is empty"
        if len(data) > self._max_file_size:
            return (
                f"File size {len(data)} bytes exceeds the maximum of {self._max_file_size} bytes"
            )
        return None

    @staticmethod
    def _finalize(
        result: ExtractionResult,
        request: ExtractionRequest,
        method: str,
        elapsed: float,
    ) -> ExtractionResult:
        meta = result.metadata
        pages = max(meta.pages, 1)
        language = detect_language(result.text) if meta.successful_pages > 0 else "unknown"
        quality = grade_extraction(meta.successful_pages, pages, len(result.text), meta.confidence)

        return ExtractionResult(
            text=result.text,
            metadata=meta.model_copy(
                update={
                    "pages": pages,
                    "processing_method": method,
                    "extraction_quality": quality,
                    "warnings": [*request.failures, *meta.warnings],
                    "language": language,
                    "file_name": request.file_name,
                    "file_size": len(request.data),
                    "processing_time": elapsed,
                }
            ),
        )
