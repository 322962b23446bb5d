"""Terminal extraction tier: a deterministic Markdown failure report.

Always succeeds.  The report names the file, its size and the reasons the
earlier tiers gave, followed by common causes and remediation steps, so a
user who queries the document learns why it has no real content.  It
contains no timestamps, so identical input yields identical output.
"""

from __future__ import annotations

from docrag.interfaces.extraction_tier import ExtractionRequest, IExtractionTier
from docrag.models.document import ExtractionMetadata, ExtractionResult


def render_failure_report(file_name: str, file_size: int, reasons: list[str]) -> str:
    """Build the Markdown report for a document no tier could read."""
    primary = reasons[-1] if reasons else "Unknown error"
    lines = [
        f"# Document Processing Report: {file_name}",
        "",
        "## Processing Status: FAILED",
        "",
        f"**Error**: {primary}",
        f"**File Size**: {file_size / 1024 / 1024:.2f} MB ({file_size} bytes)",
        "",
        "## What Happened?",
        "No text could be extracted from this document.",
    ]
    if reasons:
        lines += ["", "### Attempted Methods:"]
        lines += [f"- {reason}" for reason in reasons]
    lines += [
        "",
        "### Common Causes:",
        "1. **Scanned Documents**: the file contains images of text rather than text",
        "2. **Password Protection**: the document is encrypted",
        "3. **Corrupted File**: the file structure is damaged or truncated",
        "4. **Unsupported Format**: the file is not a readable document type",
        "",
        "### Recommended Solutions:",
        "1. **Try a Different File**: test with a simpler, text-based document",
        "2. **Convert the Document**: export it to plain text or a text-based PDF",
        "3. **Use OCR Software**: run scanned documents through an OCR tool first",
        "4. **Remove Protection**: save an unprotected copy before uploading",
    ]
    return "\n".join(lines)


class PlaceholderTier(IExtractionTier):
    """Emit the failure report as the document text."""

    async def attempt(self, request: ExtractionRequest) -> ExtractionResult:
        request.report("fallback", 95, method=self.get_tier_name())
        text = render_failure_report(request.file_name, len(request.data), request.failures)
        return ExtractionResult(
            text=text,
            metadata=ExtractionMetadata(
                pages=1,
                successful_pages=0,
                failed_pages=1,
                confidence=0.0,
            ),
        )

    def get_tier_name(self) -> str:
        return "placeholder"
