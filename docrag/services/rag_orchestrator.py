"""RAG orchestrator: document registry, provider lifecycle and question answering.

The orchestrator owns the only mutable state in docrag: the registry of
ingested documents, the configured generation provider and the embedding
service.  Everything else (extractor, chunker, vector store) is injected.

Lifecycle
---------
::

    UNCONFIGURED --configure()--> INITIALIZING --ok--> READY
                                       |
                                       +--failure--> ERROR

``configure()`` may be called again from READY or ERROR.  Queries require
READY; ingestion works in any state and embeds with the local hash
fallback until a provider is configured.

Registry and vector-store mutations and the retrieval half of ``query()``
are serialised behind a single :class:`asyncio.Lock`.  The question
embedding and the generation call run outside the lock so a slow vendor
does not block ingestion.  The vector store is initialised on first use,
so it also works before ``configure()``.
"""

from __future__ import annotations

import asyncio
from collections.abc import Callable

import structlog

from docrag.config.settings import Settings
from docrag.interfaces.llm_provider import ITextGenerationProvider
from docrag.interfaces.vector_store_provider import IVectorStoreProvider
from docrag.models.document import ChunkOptions, DocumentRecord, ExtractionProgress
from docrag.models.provider import (
    ChatMessage,
    ChatRole,
    GenerationParams,
    OrchestratorState,
    OrchestratorStatus,
    ProviderConfig,
)
from docrag.models.rag import (
    RAGAnswer,
    SearchMode,
    SearchOptions,
    SearchResult,
    VectorMetadata,
    VectorRecord,
)
from docrag.providers.cache.memory_cache import MemoryCacheProvider
from docrag.services.chunker import TextChunker
from docrag.services.document_extractor import DocumentExtractor
from docrag.services.embedding_service import EmbeddingService
from docrag.services.provider_registry import ProviderRegistry
from docrag.utils.errors import (
    ConfigurationError,
    DocRAGError,
    InvalidDocumentError,
    InvalidQueryError,
    NoDocumentsError,
    NotReadyError,
)

logger = structlog.get_logger(logger_name=__name__)

SYSTEM_PROMPT = (
    "You are a helpful assistant that answers questions based on the provided "
    "context. If the context doesn't contain relevant information, say so clearly."
)
NO_CONTEXT_MARKER = "[No relevant context was found in the uploaded documents.]"


class RAGOrchestrator:
    """Coordinates extraction, chunking, embedding, retrieval and generation.

    Parameters
    ----------
    registry:
        Provider registry used to validate configs and build adapters.
    vector_store:
        The vector store holding one record per chunk.
    extractor:
        Document extraction cascade.
    chunker:
        Text chunker; its options come from settings when not injected.
    settings:
        Retrieval, generation and embedding tuning values.
    """

    def __init__(
        self,
        registry: ProviderRegistry,
        vector_store: IVectorStoreProvider,
        extractor: DocumentExtractor | None = None,
        chunker: TextChunker | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or Settings()
        self._registry = registry
        self._vector_store = vector_store
        self._extractor = extractor or DocumentExtractor.from_settings(self._settings)
        self._chunker = chunker or TextChunker(
            ChunkOptions(
                max_size=self._settings.chunk_max_size,
                min_size=self._settings.chunk_min_size,
                overlap=self._settings.chunk_overlap,
            )
        )
        self._lock = asyncio.Lock()
        self._store_initialized = False
        self._documents: dict[str, DocumentRecord] = {}
        self._state = OrchestratorState.UNCONFIGURED
        self._last_error: str | None = None
        self._config: ProviderConfig | None = None
        self._generator: ITextGenerationProvider | None = None
        self._embedder = EmbeddingService(batch_delay=0)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    async def configure(self, config: ProviderConfig) -> OrchestratorStatus:
        """Validate *config*, build the providers and move to READY.

        Raises
        ------
        ConfigurationError
            When validation, the reachability check or vector-store
            initialisation fails.  The orchestrator is left in ERROR.
        """
        self._state = OrchestratorState.INITIALIZING
        logger.info("orchestrator_configuring", provider=config.provider, model=config.model or None)
        try:
            generator = self._registry.build_generation_provider(config)
            embedder = EmbeddingService(
                backend=self._registry.build_embedding_provider(config),
                cache=MemoryCacheProvider(
                    max_size=self._settings.embedding_cache_size,
                    ttl=self._settings.embedding_cache_ttl,
                ),
                batch_delay=self._settings.embedding_batch_delay,
            )
            if not await generator.test_connection():
                raise ConfigurationError(
                    message="Text-generation provider is unreachable",
                    provider_name=config.provider,
                )
            probe = await embedder.embed_with_info("connection test")
            if probe.is_fallback and not embedder.is_fallback_only():
                logger.warning(
                    "embedding_provider_unreachable",
                    provider=embedder.get_provider_name(),
                    fallback=probe.provider,
                )
            await self._vector_store.initialize()
            self._store_initialized = True
        except DocRAGError as exc:
            self._fail(exc)
            if isinstance(exc, ConfigurationError):
                raise
            raise ConfigurationError(message=exc.message, provider_name=exc.provider_name) from exc
        except Exception as exc:
            self._fail(exc)
            raise ConfigurationError(message=str(exc), provider_name=config.provider) from exc

        previous = self._embedder
        self._generator = generator
        self._embedder = embedder
        self._config = config

        if self._documents and (
            previous.get_provider_name() != embedder.get_provider_name()
            or previous.get_model_name() != embedder.get_model_name()
        ):
            await self._reembed_all()

        self._state = OrchestratorState.READY
        self._last_error = None
        logger.info(
            "orchestrator_ready",
            provider=generator.get_provider_name(),
            model=generator.get_model_name(),
            embedding_provider=embedder.get_provider_name(),
        )
        return self.get_status()

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    async def process_document(
        self,
        data: bytes,
        mime_type: str = "application/pdf",
        name: str = "document",
        on_progress: Callable[[ExtractionProgress], None] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> DocumentRecord:
        """Extract, chunk and embed a file; the record is not registered yet.

        Setting *cancel_event* stops extraction after the current page; the
        partial text is still chunked and embedded.
        """
        extraction = await self._extractor.extract(
            data,
            mime_type=mime_type,
            on_progress=on_progress,
            file_name=name,
            cancel_event=cancel_event,
        )
        chunks = self._chunker.chunk(extraction.text)
        embeddings = await self._embedder.embed_many([c.content for c in chunks])
        logger.info(
            "document_processed",
            name=name,
            chunks=len(chunks),
            method=extraction.metadata.processing_method,
            quality=extraction.metadata.extraction_quality.value,
        )
        return DocumentRecord(
            name=name,
            raw_text=extraction.text,
            chunks=chunks,
            embeddings=embeddings,
            metadata=extraction.metadata,
        )

    async def add_document(self, record: DocumentRecord) -> DocumentRecord:
        """Register *record* and index one vector per chunk.

        Chunks whose embeddings are missing or do not match the active
        dimension are embedded again.  Re-adding an existing id replaces
        the previous vectors.

        Raises
        ------
        InvalidDocumentError
            If the record has no chunks.
        """
        if not record.chunks:
            raise InvalidDocumentError(message=f"Document '{record.name}' has no chunks")

        async with self._lock:
            await self._ensure_store()
            record = await self._ensure_embeddings(record)
            if record.id in self._documents:
                await self._vector_store.delete_document(record.id)
            await self._vector_store.add_documents(self._vector_records(record))
            self._documents[record.id] = record

        logger.info("document_added", document_id=record.id, name=record.name, chunks=len(record.chunks))
        return record

    async def ingest(
        self,
        data: bytes,
        mime_type: str = "application/pdf",
        name: str = "document",
        on_progress: Callable[[ExtractionProgress], None] | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> DocumentRecord:
        """Process a file and register it in one step."""
        record = await self.process_document(
            data, mime_type=mime_type, name=name, on_progress=on_progress, cancel_event=cancel_event
        )
        return await self.add_document(record)

    async def remove_document(self, document_id: str) -> bool:
        """Drop a document and its vectors; return False for unknown ids."""
        async with self._lock:
            if document_id not in self._documents:
                return False
            await self._ensure_store()
            deleted = await self._vector_store.delete_document(document_id)
            del self._documents[document_id]
        logger.info("document_removed", document_id=document_id, vectors=deleted)
        return True

    async def clear_documents(self) -> None:
        async with self._lock:
            await self._ensure_store()
            await self._vector_store.clear()
            self._documents.clear()
        logger.info("documents_cleared")

    def get_documents(self) -> list[DocumentRecord]:
        return list(self._documents.values())

    def get_document(self, document_id: str) -> DocumentRecord | None:
        return self._documents.get(document_id)

    # ------------------------------------------------------------------
    # Query
    # ------------------------------------------------------------------

    async def query(self, question: str) -> RAGAnswer:
        """Answer *question* from the registered documents.

        Raises
        ------
        NotReadyError
            Unless the orchestrator is READY.
        InvalidQueryError
            For a blank question.
        NoDocumentsError
            When no documents are registered.
        GenerationError
            When the generation provider fails.
        """
        if self._state is not OrchestratorState.READY or self._generator is None:
            raise NotReadyError()
        if not isinstance(question, str) or not question.strip():
            raise InvalidQueryError()

        if not self._documents:
            raise NoDocumentsError()
        query_vector = await self._embedder.embed(question)

        async with self._lock:
            if not self._documents:
                raise NoDocumentsError()
            await self._ensure_store()
            results = await self._vector_store.search(
                question,
                query_vector,
                SearchOptions(
                    mode=SearchMode.HYBRID,
                    limit=self._settings.search_limit,
                    threshold=self._settings.search_threshold,
                ),
            )

        used = self._select_context(results)
        context = "\n\n".join(self._format_chunk(r) for r in used) if used else NO_CONTEXT_MARKER
        messages = [
            ChatMessage(role=ChatRole.SYSTEM, content=SYSTEM_PROMPT),
            ChatMessage(role=ChatRole.USER, content=f"Context:\n{context}\n\nQuestion: {question}\n\nAnswer:"),
        ]
        answer = await self._generator.generate(
            messages,
            GenerationParams(
                temperature=self._settings.generation_temperature,
                max_tokens=self._settings.generation_max_tokens,
            ),
        )

        sources: list[str] = []
        for r in used:
            name = r.metadata.source_name
            if name and name not in sources:
                sources.append(name)
        relevance = sum(r.score for r in used) / len(used) if used else 0.0

        logger.info(
            "rag_query_complete",
            retrieved=len(results),
            used=len(used),
            relevance=round(relevance, 4),
            sources=len(sources),
        )
        return RAGAnswer(
            answer=answer,
            sources=sources,
            relevance_score=relevance,
            retrieved_chunk_count=len(used),
            retrieved_chunks=used,
        )

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    @property
    def state(self) -> OrchestratorState:
        return self._state

    def get_status(self) -> OrchestratorStatus:
        return OrchestratorStatus(
            state=self._state,
            initialized=self._state is OrchestratorState.READY,
            document_count=len(self._documents),
            total_chunks=sum(len(d.chunks) for d in self._documents.values()),
            healthy=self.is_healthy(),
            current_provider=self._generator.get_provider_name() if self._generator else None,
            current_model=self._generator.get_model_name() if self._generator else None,
            embedding_provider=self._embedder.get_provider_name(),
            vector_store=self._vector_store.get_provider_name(),
            last_error=self._last_error,
        )

    def is_healthy(self) -> bool:
        return self._state is OrchestratorState.READY and self._generator is not None

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _fail(self, exc: Exception) -> None:
        self._state = OrchestratorState.ERROR
        self._last_error = str(exc)
        logger.error("orchestrator_configure_failed", error=str(exc))

    async def _ensure_store(self) -> None:
        if not self._store_initialized:
            await self._vector_store.initialize()
            self._store_initialized = True

    async def _ensure_embeddings(self, record: DocumentRecord) -> DocumentRecord:
        dimension = self._embedder.get_dimension()
        embeddings = list(record.embeddings)
        stale = [
            i
            for i in range(len(record.chunks))
            if i >= len(embeddings) or len(embeddings[i]) != dimension
        ]
        if not stale:
            return record
        fresh = await self._embedder.embed_many([record.chunks[i].content for i in stale])
        embeddings.extend([] for _ in range(len(record.chunks) - len(embeddings)))
        for i, vector in zip(stale, fresh):
            embeddings[i] = vector
        return record.model_copy(update={"embeddings": embeddings[: len(record.chunks)]})

    async def _reembed_all(self) -> None:
        async with self._lock:
            logger.info("reembedding_documents", count=len(self._documents))
            await self._vector_store.clear()
            for doc_id, record in list(self._documents.items()):
                vectors = await self._embedder.embed_many([c.content for c in record.chunks])
                updated = record.model_copy(update={"embeddings": vectors})
                await self._vector_store.add_documents(self._vector_records(updated))
                self._documents[doc_id] = updated

    @staticmethod
    def _vector_records(record: DocumentRecord) -> list[VectorRecord]:
        return [
            VectorRecord(
                id=f"{record.id}:{chunk.index}",
                vector=vector,
                text=chunk.content,
                metadata=VectorMetadata(
                    source_doc_id=record.id,
                    chunk_index=chunk.index,
                    source_name=record.name,
                    extra={
                        "structural_type": chunk.structural_type.value,
                        "start_offset": chunk.start_offset,
                        "end_offset": chunk.end_offset,
                    },
                ),
            )
            for chunk, vector in zip(record.chunks, record.embeddings)
        ]

    def _select_context(self, results: list[SearchResult]) -> list[SearchResult]:
        """Most relevant results that fit the context budget.

        A top result that alone exceeds the budget is truncated to fit
        rather than dropped.
        """
        budget = self._settings.context_max_chars
        used: list[SearchResult] = []
        total = 0
        for result in results:
            size = len(self._format_chunk(result)) + (2 if used else 0)
            if total + size > budget:
                if not used:
                    room = budget - (size - len(result.content))
                    if room > 0:
                        used.append(result.model_copy(update={"content": result.content[:room]}))
                break
            used.append(result)
            total += size
        return used

    @staticmethod
    def _format_chunk(result: SearchResult) -> str:
        return f"[Source: {result.metadata.source_name}]\n{result.content}"
