"""Plain-text extraction tier for ``text/*`` uploads.

Decodes the bytes as UTF-8 (undecodable bytes become U+FFFD).  HTML is
reduced to its visible text with BeautifulSoup.  Any other MIME type is
declined so the cascade moves on to the document parsers.
"""

from __future__ import annotations

import structlog
from bs4 import BeautifulSoup

from docrag.interfaces.extraction_tier import ExtractionRequest, IExtractionTier
from docrag.models.document import ExtractionMetadata, ExtractionResult
from docrag.utils.errors import ExtractionTierFailure
from docrag.utils.text_quality import page_confidence

logger = structlog.get_logger(logger_name=__name__)

_TEXT_LIKE_TYPES = frozenset({"application/json", "application/xml", "application/x-ndjson"})


class PlainTextTier(IExtractionTier):
    """Decode text documents directly."""

    async def attempt(self, request: ExtractionRequest) -> ExtractionResult:
        mime = (request.mime_type or "").split(";")[0].strip().lower()
        if not (mime.startswith("text/") or mime in _TEXT_LIKE_TYPES):
            raise ExtractionTierFailure(
                message=f"MIME type '{mime or 'unknown'}' is not plain text",
                provider_name=self.get_tier_name(),
            )

        text = request.data.decode("utf-8", errors="replace")
        if mime == "text/html":
            soup = BeautifulSoup(text, "html.parser")
            for tag in soup(["script", "style", "noscript"]):
                tag.decompose()
            text = soup.get_text("\n")
        text = text.replace("\r\n", "\n").strip()
        request.report("decoding", 90, method=self.get_tier_name())

        if not text:
            raise ExtractionTierFailure(message="Text document is empty", provider_name=self.get_tier_name())

        logger.info("plain_text_extracted", chars=len(text), mime=mime)
        return ExtractionResult(
            text=text,
            metadata=ExtractionMetadata(
                pages=1,
                successful_pages=1,
                failed_pages=0,
                confidence=page_confidence(text),
            ),
        )

    def get_tier_name(self) -> str:
        return "plain-text"
