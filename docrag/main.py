"""docrag FastAPI application entry point.

Wires the provider registry, vector store, extraction cascade, chunker and
orchestrator together.  Loads configuration from ``.env`` and
``config/config.yaml`` and configures structured logging.  When
``AI_PROVIDER`` is set the orchestrator is configured during startup;
otherwise clients call ``POST /api/v1/configure`` first.

``build_orchestrator`` is shared with the CLI.
"""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import Any

import structlog
import uvicorn
from fastapi import FastAPI

from docrag import __version__
from docrag.api.middleware import (
    ErrorHandlingMiddleware,
    RequestLoggingMiddleware,
    configure_cors,
)
from docrag.api.routes import router as api_router
from docrag.config.loader import load_config, resolve_settings
from docrag.config.settings import Settings
from docrag.models.provider import ProviderConfig, VectorStoreConfig
from docrag.services.document_extractor import DocumentExtractor
from docrag.services.provider_registry import ProviderRegistry, create_vector_store
from docrag.services.rag_orchestrator import RAGOrchestrator
from docrag.utils.errors import ConfigurationError
from docrag.utils.logging import configure_logging, get_logger

# ---------------------------------------------------------------------------
# Module-level settings & logging
# ---------------------------------------------------------------------------

settings = resolve_settings(load_config(), Settings())

configure_logging(
    log_level=settings.log_level,
    json_output=(settings.app_env == "production"),
)
_logger: structlog.BoundLogger = get_logger(__name__)


# ---------------------------------------------------------------------------
# Assembly
# ---------------------------------------------------------------------------


def vector_store_config(app_settings: Settings) -> VectorStoreConfig:
    return VectorStoreConfig(
        provider=app_settings.vector_store_provider,
        api_key=app_settings.vector_store_api_key,
        url=app_settings.vector_store_url,
        collection_name=app_settings.vector_store_collection,
        dimension=app_settings.vector_store_dimension,
        persist_dir=app_settings.chromadb_persist_dir,
    )


def default_provider_config(app_settings: Settings) -> ProviderConfig | None:
    """Provider config from ``AI_*`` settings, or None when no provider is set."""
    if not app_settings.has_default_provider():
        return None
    return ProviderConfig(
        provider=app_settings.ai_provider,
        api_key=app_settings.ai_api_key,
        model=app_settings.ai_model,
        base_url=app_settings.ai_base_url,
        embedding_model=app_settings.embedding_model,
    )


def build_orchestrator(app_settings: Settings) -> RAGOrchestrator:
    """Construct an unconfigured orchestrator and its collaborators."""
    registry = ProviderRegistry(settings=app_settings)
    vector_store = create_vector_store(vector_store_config(app_settings))
    return RAGOrchestrator(
        registry=registry,
        vector_store=vector_store,
        extractor=DocumentExtractor.from_settings(app_settings),
        settings=app_settings,
    )


def _build_all(app_settings: Settings) -> dict[str, Any]:
    """Construct every component stored on ``app.state``."""
    orchestrator = build_orchestrator(app_settings)
    return {
        "orchestrator": orchestrator,
        "max_upload_size": app_settings.extraction_max_file_size,
    }


# ---------------------------------------------------------------------------
# Application lifespan (startup / shutdown)
# ---------------------------------------------------------------------------


@asynccontextmanager
async def _lifespan(application: FastAPI):  # noqa: ANN201
    """Build components on startup and configure the default provider if set."""
    components = _build_all(settings)
    for key, value in components.items():
        setattr(application.state, key, value)

    orchestrator: RAGOrchestrator = components["orchestrator"]
    config = default_provider_config(settings)
    if config is not None:
        try:
            await orchestrator.configure(config)
        except ConfigurationError as exc:
            # The app stays up; /configure can retry with other settings.
            _logger.warning("startup_configure_failed", provider=config.provider, error=str(exc))

    _logger.info(
        "app_startup",
        version=__version__,
        environment=settings.app_env,
        state=orchestrator.state.value,
        vector_store=settings.vector_store_provider,
    )

    yield

    _logger.info("app_shutdown", documents=len(orchestrator.get_documents()))


# ---------------------------------------------------------------------------
# FastAPI application factory
# ---------------------------------------------------------------------------


def create_app() -> FastAPI:
    """Build and configure the FastAPI application."""
    application = FastAPI(
        title="docrag API",
        version=__version__,
        description=(
            "Upload documents, extract and chunk their text, embed the chunks, "
            "and answer questions with retrieval-augmented generation."
        ),
        lifespan=_lifespan,
    )

    application.add_middleware(ErrorHandlingMiddleware)
    application.add_middleware(RequestLoggingMiddleware)
    configure_cors(application)

    application.include_router(api_router)
    return application


app = create_app()


if __name__ == "__main__":
    uvicorn.run(
        "docrag.main:app",
        host=settings.app_host,
        port=settings.app_port,
        reload=(settings.app_env == "development"),
    )
