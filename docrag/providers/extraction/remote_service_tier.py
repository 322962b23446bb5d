"""Remote extraction service tier.

POSTs the raw document as multipart form field ``pdf`` to an external
extraction endpoint and expects ``{"success": true, "text": ...,
"metadata": {...}}`` back.  Non-2xx responses, malformed JSON,
``success: false`` and empty text all count as tier failures.  The tier
declines immediately when no endpoint is configured.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog

from docrag.interfaces.extraction_tier import ExtractionRequest, IExtractionTier
from docrag.models.document import ExtractionMetadata, ExtractionResult
from docrag.utils.errors import ExtractionTierFailure
from docrag.utils.text_quality import page_confidence

logger = structlog.get_logger(logger_name=__name__)


class RemoteServiceTier(IExtractionTier):
    """Delegate extraction to an HTTP service.

    Parameters
    ----------
    endpoint:
        Full URL of the extraction endpoint; empty disables the tier.
    timeout:
        Total request timeout in seconds.
    client:
        Optional shared ``httpx.AsyncClient`` (tests inject a mock transport).
    """

    def __init__(
        self,
        endpoint: str = "",
        timeout: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self._endpoint = endpoint
        self._timeout = timeout
        self._client = client

    async def attempt(self, request: ExtractionRequest) -> ExtractionResult:
        if not self._endpoint:
            raise ExtractionTierFailure(
                message="No remote extraction endpoint configured",
                provider_name=self.get_tier_name(),
            )

        request.report("uploading", 40, method=self.get_tier_name())
        files = {"pdf": (request.file_name, request.data, request.mime_type or "application/octet-stream")}
        try:
            if self._client is not None:
                response = await self._client.post(self._endpoint, files=files, timeout=self._timeout)
            else:
                async with httpx.AsyncClient(timeout=self._timeout) as client:
                    response = await client.post(self._endpoint, files=files)
            response.raise_for_status()
            payload = response.json()
        except httpx.HTTPError as exc:
            raise ExtractionTierFailure(
                message=f"Remote extraction request failed: {exc}",
                provider_name=self.get_tier_name(),
            ) from exc
        except ValueError as exc:
            raise ExtractionTierFailure(
                message="Remote extraction returned malformed JSON",
                provider_name=self.get_tier_name(),
            ) from exc

        return self._parse_payload(payload)

    def get_tier_name(self) -> str:
        return "remote-service"

    def _parse_payload(self, payload: Any) -> ExtractionResult:
        if not isinstance(payload, dict):
            raise ExtractionTierFailure(message="Unexpected response shape", provider_name=self.get_tier_name())
        if not payload.get("success"):
            raise ExtractionTierFailure(
                message=f"Remote extraction error: {payload.get('error') or 'unknown error'}",
                provider_name=self.get_tier_name(),
            )

        text = str(payload.get("text") or "").strip()
        if not text:
            raise ExtractionTierFailure(message="Remote extraction returned no text", provider_name=self.get_tier_name())

        meta = payload.get("metadata") if isinstance(payload.get("metadata"), dict) else {}
        pages = _as_int(meta.get("pages"), 1)
        successful = _as_int(meta.get("successfulPages", meta.get("successful_pages")), pages)
        failed = _as_int(meta.get("failedPages", meta.get("failed_pages")), max(pages - successful, 0))

        logger.info("remote_extraction_complete", chars=len(text), pages=pages)
        return ExtractionResult(
            text=text,
            metadata=ExtractionMetadata(
                pages=max(pages, 1),
                successful_pages=successful,
                failed_pages=failed,
                confidence=page_confidence(text),
                title=meta.get("title") or None,
                author=meta.get("author") or None,
            ),
        )


def _as_int(value: Any, default: int) -> int:
    try:
        return max(int(value), 0)
    except (TypeError, ValueError):
        return default
