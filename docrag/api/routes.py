"""FastAPI routes for the docrag engine.

Endpoint                      Method  Description
----------------------------  ------  ------------------------------------
/api/v1/health                GET     Liveness and readiness
/api/v1/status                GET     Orchestrator status snapshot
/api/v1/configure             POST    Select and verify an AI provider
/api/v1/documents             POST    Upload a file: extract, chunk, embed, index
/api/v1/documents             GET     List registered documents
/api/v1/documents/{id}        DELETE  Remove one document and its vectors
/api/v1/documents             DELETE  Remove every document
/api/v1/query                 POST    Ask a question over the documents

The orchestrator is resolved from ``app.state`` (populated at startup in
``main._build_all``).  Domain errors propagate to
:class:`~docrag.api.middleware.ErrorHandlingMiddleware`.
"""

from __future__ import annotations

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, HTTPException, Request, UploadFile

from docrag import __version__
from docrag.api.schemas import (
    ConfigureRequest,
    DeleteResponse,
    DocumentListResponse,
    DocumentSummary,
    ErrorResponse,
    HealthResponse,
    QueryRequest,
    QueryResponse,
    SourceChunk,
    StatusResponse,
)
from docrag.models.document import DocumentRecord
from docrag.services.rag_orchestrator import RAGOrchestrator
from docrag.utils.logging import get_logger

_logger: structlog.BoundLogger = get_logger(__name__)

router = APIRouter(prefix="/api/v1")

_UPLOAD_CHUNK_SIZE = 64 * 1024


def _get_orchestrator(request: Request) -> RAGOrchestrator:
    return request.app.state.orchestrator


def _get_max_upload_size(request: Request) -> int:
    return request.app.state.max_upload_size


OrchestratorDep = Annotated[RAGOrchestrator, Depends(_get_orchestrator)]
MaxUploadDep = Annotated[int, Depends(_get_max_upload_size)]


def _summarize(record: DocumentRecord) -> DocumentSummary:
    return DocumentSummary(
        id=record.id,
        name=record.name,
        chunk_count=len(record.chunks),
        uploaded_at=record.uploaded_at,
        metadata=record.metadata,
    )


# ---------------------------------------------------------------------------
# Health / status / configuration
# ---------------------------------------------------------------------------


@router.get("/health", response_model=HealthResponse, summary="Liveness and readiness")
async def health(orchestrator: OrchestratorDep) -> HealthResponse:
    return HealthResponse(status="ok", version=__version__, ready=orchestrator.is_healthy())


@router.get("/status", response_model=StatusResponse)
async def status(orchestrator: OrchestratorDep) -> StatusResponse:
    return StatusResponse(status=orchestrator.get_status())


@router.post(
    "/configure",
    response_model=StatusResponse,
    responses={400: {"model": ErrorResponse}},
    summary="Select and verify an AI provider",
)
async def configure(body: ConfigureRequest, orchestrator: OrchestratorDep) -> StatusResponse:
    return StatusResponse(status=await orchestrator.configure(body.to_config()))


# ---------------------------------------------------------------------------
# Documents
# ---------------------------------------------------------------------------


@router.post(
    "/documents",
    response_model=DocumentSummary,
    status_code=201,
    responses={413: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
    summary="Upload a document for extraction and indexing",
)
async def upload_document(
    file: UploadFile,
    orchestrator: OrchestratorDep,
    max_size: MaxUploadDep,
) -> DocumentSummary:
    """Read the upload in 64 KB pieces, rejecting oversized files early."""
    parts: list[bytes] = []
    total = 0
    while True:
        part = await file.read(_UPLOAD_CHUNK_SIZE)
        if not part:
            break
        total += len(part)
        if total > max_size:
            raise HTTPException(
                status_code=413,
                detail=f"File too large: maximum is {max_size} bytes",
            )
        parts.append(part)

    record = await orchestrator.ingest(
        b"".join(parts),
        mime_type=file.content_type or "application/octet-stream",
        name=file.filename or "document",
    )
    _logger.info("document_uploaded", document_id=record.id, name=record.name, size=total)
    return _summarize(record)


@router.get("/documents", response_model=DocumentListResponse)
async def list_documents(orchestrator: OrchestratorDep) -> DocumentListResponse:
    documents = [_summarize(d) for d in orchestrator.get_documents()]
    return DocumentListResponse(documents=documents, total=len(documents))


@router.delete(
    "/documents/{document_id}",
    response_model=DeleteResponse,
    responses={404: {"model": ErrorResponse}},
)
async def delete_document(document_id: str, orchestrator: OrchestratorDep) -> DeleteResponse:
    if not await orchestrator.remove_document(document_id):
        raise HTTPException(status_code=404, detail=f"Unknown document: {document_id}")
    return DeleteResponse(deleted=True, document_id=document_id)


@router.delete("/documents", response_model=DeleteResponse)
async def delete_all_documents(orchestrator: OrchestratorDep) -> DeleteResponse:
    await orchestrator.clear_documents()
    return DeleteResponse(deleted=True)


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


@router.post(
    "/query",
    response_model=QueryResponse,
    responses={
        409: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        502: {"model": ErrorResponse},
    },
    summary="Answer a question from the uploaded documents",
)
async def query(body: QueryRequest, orchestrator: OrchestratorDep) -> QueryResponse:
    answer = await orchestrator.query(body.question)
    return QueryResponse(
        answer=answer.answer,
        sources=answer.sources,
        relevance_score=answer.relevance_score,
        retrieved_chunk_count=answer.retrieved_chunk_count,
        chunks=[
            SourceChunk(
                source_name=r.metadata.source_name,
                document_id=r.metadata.source_doc_id,
                chunk_index=r.metadata.chunk_index,
                score=r.score,
                content=r.content,
            )
            for r in answer.retrieved_chunks
        ],
    )
