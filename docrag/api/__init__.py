"""docrag API layer: routes, schemas and middleware."""

from docrag.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from docrag.api.routes import router
from docrag.api.schemas import (
    ConfigureRequest,
    DocumentListResponse,
    DocumentSummary,
    ErrorResponse,
    HealthResponse,
    QueryRequest,
    QueryResponse,
    StatusResponse,
)

__all__ = [
    "ErrorHandlingMiddleware",
    "RequestLoggingMiddleware",
    "configure_cors",
    "router",
    "ConfigureRequest",
    "DocumentListResponse",
    "DocumentSummary",
    "ErrorResponse",
    "HealthResponse",
    "QueryRequest",
    "QueryResponse",
    "StatusResponse",
]
