"""API middleware: CORS, request logging and domain-error mapping.

Starlette middleware runs last-added-first.  ``main.create_app`` adds
ErrorHandlingMiddleware before RequestLoggingMiddleware, so the logger
sees the final status code after a domain error has been converted.
"""

from __future__ import annotations

import time

import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint

from docrag.api.schemas import ErrorResponse
from docrag.utils.errors import (
    ConfigurationError,
    DocRAGError,
    GenerationError,
    InvalidDocumentError,
    InvalidQueryError,
    NoDocumentsError,
    NotReadyError,
    VectorStoreError,
)
from docrag.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

# First match wins; unlisted DocRAGError subclasses map to 500.
_STATUS_CODES: tuple[tuple[type[DocRAGError], int], ...] = (
    (NotReadyError, 409),
    (NoDocumentsError, 409),
    (ConfigurationError, 400),
    (InvalidQueryError, 422),
    (InvalidDocumentError, 422),
    (GenerationError, 502),
    (VectorStoreError, 503),
)


def status_code_for(exc: DocRAGError) -> int:
    for error_type, code in _STATUS_CODES:
        if isinstance(exc, error_type):
            return code
    return 500


# ---------------------------------------------------------------------------
# CORS
# ---------------------------------------------------------------------------


def configure_cors(app: FastAPI, *, allowed_origins: list[str] | None = None) -> None:
    """Add CORS middleware; defaults to all origins."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )


# ---------------------------------------------------------------------------
# Request Logging
# ---------------------------------------------------------------------------


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Log every HTTP request with method, path, status code, and duration."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        start = time.perf_counter()
        response: Response | None = None

        try:
            response = await call_next(request)
            return response
        finally:
            duration_ms = round((time.perf_counter() - start) * 1000, 2)
            _logger.info(
                "http_request",
                method=request.method,
                path=str(request.url.path),
                status=response.status_code if response else 500,
                duration_ms=duration_ms,
            )


# ---------------------------------------------------------------------------
# Error Handling
# ---------------------------------------------------------------------------


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Convert ``DocRAGError`` subclasses into JSON :class:`ErrorResponse` bodies.

    The client sees the error type, message and provider only; other
    exceptions fall through to FastAPI's default 500 handler.
    """

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        try:
            return await call_next(request)
        except DocRAGError as exc:
            status_code = status_code_for(exc)
            log = _logger.error if status_code >= 500 else _logger.warning
            log(
                "application_error",
                error_type=type(exc).__name__,
                message=exc.message,
                provider=exc.provider_name,
                path=str(request.url.path),
                status=status_code,
            )
            body = ErrorResponse(
                error=type(exc).__name__,
                detail=exc.message,
                provider=exc.provider_name,
            )
            return JSONResponse(status_code=status_code, content=body.model_dump())
