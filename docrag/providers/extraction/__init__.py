"""Extraction tiers, in cascade order.

    1. PlainTextTier     -- text/* uploads
    2. PyMuPDFTier       -- structured PDF/EPUB/XPS parsing
    3. RawStreamTier     -- heuristic recovery from raw PDF bytes
    4. RemoteServiceTier -- external extraction endpoint
    5. PlaceholderTier   -- deterministic failure report (never fails)
"""

from docrag.providers.extraction.placeholder_tier import PlaceholderTier, render_failure_report
from docrag.providers.extraction.plain_text_tier import PlainTextTier
from docrag.providers.extraction.pymupdf_tier import PyMuPDFTier
from docrag.providers.extraction.raw_stream_tier import RawStreamTier
from docrag.providers.extraction.remote_service_tier import RemoteServiceTier

__all__ = [
    "PlaceholderTier",
    "PlainTextTier",
    "PyMuPDFTier",
    "RawStreamTier",
    "RemoteServiceTier",
    "render_failure_report",
]
