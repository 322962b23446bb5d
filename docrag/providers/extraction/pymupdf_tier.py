"""Structured document parsing with PyMuPDF.

Opens the byte stream in a worker thread under a hard timeout, then walks
the pages one by one.  Failures are isolated per page: a page that raises
contributes an error marker, an empty page is counted as failed, and the
rest of the document is still extracted.  The tier yields to the event
loop every few pages and polls the abort flag before each page.
"""

from __future__ import annotations

import asyncio

import fitz  # PyMuPDF
import structlog

from docrag.interfaces.extraction_tier import ExtractionRequest, IExtractionTier
from docrag.models.document import ExtractionMetadata, ExtractionResult
from docrag.utils.confidence import average_confidence
from docrag.utils.errors import ExtractionTierFailure
from docrag.utils.text_quality import page_confidence

logger = structlog.get_logger(logger_name=__name__)

PAGE_ERROR_MARKER = "[page processing error]"

# Document types PyMuPDF parses besides PDF.
_FITZ_MIME_TYPES: dict[str, str] = {
    "application/pdf": "pdf",
    "application/epub+zip": "epub",
    "application/vnd.ms-xpsdocument": "xps",
    "application/oxps": "xps",
    "application/x-fictionbook+xml": "fb2",
    "application/vnd.comicbook+zip": "cbz",
}

_YIELD_EVERY_PAGES = 3


class PyMuPDFTier(IExtractionTier):
    """Page-by-page text extraction through PyMuPDF.

    Parameters
    ----------
    open_timeout:
        Seconds allowed for opening/parsing the document structure.
    """

    def __init__(self, open_timeout: float = 30.0) -> None:
        self._open_timeout = open_timeout

    async def attempt(self, request: ExtractionRequest) -> ExtractionResult:
        filetype = self._detect_filetype(request)
        request.report("opening", 10, method=self.get_tier_name())

        try:
            doc = await asyncio.wait_for(
                asyncio.to_thread(fitz.open, stream=request.data, filetype=filetype),
                timeout=self._open_timeout,
            )
        except asyncio.TimeoutError as exc:
            raise ExtractionTierFailure(
                message=f"Opening the document timed out after {self._open_timeout:g}s",
                provider_name=self.get_tier_name(),
            ) from exc
        except Exception as exc:
            raise ExtractionTierFailure(
                message=f"Could not parse document structure: {exc}",
                provider_name=self.get_tier_name(),
            ) from exc

        try:
            if doc.needs_pass:
                raise ExtractionTierFailure(
                    message="Document is password protected",
                    provider_name=self.get_tier_name(),
                )
            return await self._extract_pages(doc, request)
        finally:
            doc.close()

    def get_tier_name(self) -> str:
        return "pymupdf"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    @staticmethod
    def _detect_filetype(request: ExtractionRequest) -> str:
        if request.data[:5] == b"%PDF-":
            return "pdf"
        mime = (request.mime_type or "").split(";")[0].strip().lower()
        filetype = _FITZ_MIME_TYPES.get(mime)
        if filetype is None:
            raise ExtractionTierFailure(
                message=f"MIME type '{mime or 'unknown'}' is not a parseable document",
                provider_name="pymupdf",
            )
        return filetype

    async def _extract_pages(self, doc: fitz.Document, request: ExtractionRequest) -> ExtractionResult:
        total_pages = doc.page_count
        if total_pages == 0:
            raise ExtractionTierFailure(message="Document has no pages", provider_name=self.get_tier_name())

        parts: list[str] = []
        warnings: list[str] = []
        confidences: list[float] = []
        successful = 0
        failed = 0
        partial = False

        for page_index in range(total_pages):
            page_number = page_index + 1
            if request.is_aborted():
                partial = True
                warnings.append(f"Extraction aborted after {page_index} of {total_pages} pages")
                logger.info("extraction_aborted", page=page_index, total_pages=total_pages)
                break

            try:
                page_text = doc.load_page(page_index).get_text("text").strip()
            except Exception as exc:
                parts.append(f"=== Page {page_number} ===\n{PAGE_ERROR_MARKER}")
                failed += 1
                warnings.append(f"Page {page_number}: processing failed ({exc})")
                logger.warning("page_extraction_failed", page=page_number, error=str(exc))
            else:
                if page_text:
                    parts.append(f"=== Page {page_number} ===\n{page_text}")
                    confidences.append(page_confidence(page_text))
                    successful += 1
                else:
                    failed += 1
                    warnings.append(f"Page {page_number}: no extractable text")

            request.report(
                "extracting",
                10 + 80 * page_number / total_pages,
                method=self.get_tier_name(),
                current_page=page_number,
                total_pages=total_pages,
            )
            if page_number % _YIELD_EVERY_PAGES == 0:
                await asyncio.sleep(0)

        if successful == 0 and not partial:
            raise ExtractionTierFailure(
                message=f"No extractable text on any of {total_pages} pages",
                provider_name=self.get_tier_name(),
            )

        meta = doc.metadata or {}
        logger.info(
            "pymupdf_extracted",
            pages=total_pages,
            successful=successful,
            failed=failed,
            partial=partial,
        )
        return ExtractionResult(
            text="\n\n".join(parts),
            metadata=ExtractionMetadata(
                pages=total_pages,
                successful_pages=successful,
                failed_pages=failed,
                warnings=warnings,
                confidence=average_confidence(confidences),
                partial=partial,
                title=meta.get("title") or None,
                author=meta.get("author") or None,
            ),
        )
