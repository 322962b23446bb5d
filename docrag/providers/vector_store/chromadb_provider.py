"""ChromaDB vector store provider adapter.

Wraps a ChromaDB client (``PersistentClient`` for a local directory,
``HttpClient`` when a server URL is configured) to implement
:class:`IVectorStoreProvider`.  The collection uses cosine space; Chroma
returns distances which are converted to similarity as ``1 - distance``.

Keyword and hybrid scoring are applied client-side with the same helpers
as the in-memory engine, so results follow one contract regardless of
backend:

* ``semantic`` -- Chroma nearest-neighbour query.
* ``keyword``  -- every record matching the filters is fetched and scored
  on token overlap.
* ``hybrid``   -- a widened nearest-neighbour candidate pool is re-scored as
  the mean of similarity and token overlap.
"""

from __future__ import annotations

import json
import os
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

# Disable ChromaDB telemetry before importing chromadb; the bundled PostHog
# client breaks against newer posthog releases.
os.environ["ANONYMIZED_TELEMETRY"] = "False"

import posthog

posthog.disabled = True

import chromadb
import structlog

from docrag.interfaces.vector_store_provider import IVectorStoreProvider
from docrag.models.provider import VectorStoreConfig
from docrag.models.rag import SearchMode, SearchOptions, SearchResult, VectorMetadata, VectorRecord
from docrag.providers.vector_store.memory_provider import (
    check_dimension,
    matches_filters,
    rank_results,
    score_record,
)
from docrag.utils.errors import VectorStoreError

logger = structlog.get_logger(logger_name=__name__)

# Metadata keys Chroma can filter on server-side.
_NATIVE_FILTER_KEYS = ("source_doc_id", "source_name", "chunk_index")

# Candidate pool multiplier for hybrid re-scoring.
_HYBRID_POOL_FACTOR = 4


class _NoopEmbeddingFunction(chromadb.EmbeddingFunction[list[str]]):
    """Embedding function that is never called.

    docrag always passes pre-computed vectors, so Chroma must not download
    its default ONNX model on collection creation.
    """

    def __call__(self, input: list[str]) -> list[list[float]]:
        raise NotImplementedError("docrag supplies pre-computed embeddings")

    def name(self) -> str:
        return "noop_precomputed"


class ChromaDBProvider(IVectorStoreProvider):
    """Vector store backed by ChromaDB.

    Parameters
    ----------
    config:
        Store configuration.  ``url`` selects a remote Chroma server (the
        ``api_key`` is sent as a bearer token); otherwise ``persist_dir`` is
        used for a local persistent client.
    """

    def __init__(self, config: VectorStoreConfig) -> None:
        self._config = config
        self._client: Any = None
        self._collection: Any = None

    # ------------------------------------------------------------------
    # Client / collection management
    # ------------------------------------------------------------------

    def _build_client(self) -> Any:
        settings = chromadb.config.Settings(anonymized_telemetry=False)
        if self._config.url:
            parsed = urlparse(self._config.url)
            headers = {"Authorization": f"Bearer {self._config.api_key}"} if self._config.api_key else None
            return chromadb.HttpClient(
                host=parsed.hostname or "localhost",
                port=parsed.port or (443 if parsed.scheme == "https" else 8000),
                ssl=parsed.scheme == "https",
                headers=headers,
                settings=settings,
            )
        return chromadb.PersistentClient(path=self._config.persist_dir, settings=settings)

    def _open_collection(self) -> Any:
        try:
            return self._client.get_or_create_collection(
                name=self._config.collection_name,
                metadata={"hnsw:space": "cosine"},
                embedding_function=_NoopEmbeddingFunction(),
            )
        except ValueError:
            # Collections persisted with another embedding function reject ours.
            return self._client.get_or_create_collection(
                name=self._config.collection_name,
                metadata={"hnsw:space": "cosine"},
            )

    def _require_collection(self) -> Any:
        if self._collection is None:
            raise VectorStoreError(
                message="ChromaDB store used before initialize()",
                provider_name=self.get_provider_name(),
            )
        return self._collection

    # ------------------------------------------------------------------
    # IVectorStoreProvider implementation
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        try:
            if self._client is None:
                self._client = self._build_client()
            self._collection = self._open_collection()
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB initialization failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info(
            "chromadb_initialized",
            collection=self._config.collection_name,
            remote=bool(self._config.url),
        )

    async def add_documents(self, records: list[VectorRecord], batch_size: int = 500) -> int:
        if not records:
            return 0
        check_dimension(records, self._config.dimension, self.get_provider_name())
        collection = self._require_collection()

        try:
            for start in range(0, len(records), batch_size):
                batch = records[start : start + batch_size]
                collection.upsert(
                    ids=[r.id for r in batch],
                    embeddings=[r.vector for r in batch],
                    documents=[r.text for r in batch],
                    metadatas=[self._to_chroma_metadata(r.metadata) for r in batch],
                )
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB upsert failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("chromadb_add_documents", count=len(records))
        return len(records)

    async def search(
        self,
        query_text: str,
        query_vector: list[float],
        options: SearchOptions | None = None,
    ) -> list[SearchResult]:
        options = options or SearchOptions()
        collection = self._require_collection()
        where = self._translate_filters(options.filters)

        try:
            if options.mode == SearchMode.KEYWORD:
                candidates = self._fetch_all(collection, where)
            else:
                pool = options.limit
                if options.mode == SearchMode.HYBRID:
                    pool *= _HYBRID_POOL_FACTOR
                candidates = self._nearest(collection, query_vector, pool, where)
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB query failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        scored: list[SearchResult] = []
        for record_id, text, metadata, similarity in candidates:
            if not matches_filters(metadata, options.filters):
                continue
            scored.append(
                SearchResult(
                    id=record_id,
                    content=text,
                    score=score_record(options.mode, query_text, query_vector, text, semantic=similarity),
                    metadata=metadata,
                )
            )

        results = rank_results(scored, options)
        logger.info(
            "chromadb_search",
            mode=options.mode.value,
            candidates=len(candidates),
            results=len(results),
        )
        return results

    async def delete_document(self, document_id: str) -> int:
        collection = self._require_collection()
        try:
            existing = collection.get(where={"source_doc_id": document_id})
            count = len(existing["ids"]) if existing["ids"] else 0
            if count > 0:
                collection.delete(where={"source_doc_id": document_id})
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB delete failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

        logger.info("chromadb_delete_document", document_id=document_id, deleted=count)
        return count

    async def clear(self) -> None:
        self._require_collection()
        try:
            self._client.delete_collection(self._config.collection_name)
            self._collection = self._open_collection()
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB clear failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc
        logger.info("chromadb_cleared", collection=self._config.collection_name)

    async def count(self) -> int:
        collection = self._require_collection()
        try:
            return int(collection.count())
        except Exception as exc:
            raise VectorStoreError(
                message=f"ChromaDB count failed: {exc}",
                provider_name=self.get_provider_name(),
            ) from exc

    async def test_connection(self) -> bool:
        try:
            if self._client is None:
                self._client = self._build_client()
            self._client.heartbeat()
            return True
        except Exception as exc:
            logger.warning("chromadb_connection_failed", error=str(exc))
            return False

    def get_provider_name(self) -> str:
        return "chromadb"

    # ------------------------------------------------------------------
    # Query helpers
    # ------------------------------------------------------------------

    def _nearest(
        self,
        collection: Any,
        query_vector: list[float],
        n_results: int,
        where: dict[str, Any] | None,
    ) -> list[tuple[str, str, VectorMetadata, float]]:
        total = collection.count()
        if total == 0 or not query_vector:
            return []

        kwargs: dict[str, Any] = {
            "query_embeddings": [query_vector],
            "n_results": min(n_results, total),
            "include": ["documents", "metadatas", "distances"],
        }
        if where:
            kwargs["where"] = where
        raw = collection.query(**kwargs)

        if not raw["ids"] or not raw["ids"][0]:
            return []
        ids = raw["ids"][0]
        documents = raw["documents"][0] if raw["documents"] else [""] * len(ids)
        metadatas = raw["metadatas"][0] if raw["metadatas"] else [{}] * len(ids)
        distances = raw["distances"][0] if raw["distances"] else [1.0] * len(ids)

        return [
            (rid, doc or "", self._from_chroma_metadata(meta or {}), 1.0 - float(distance))
            for rid, doc, meta, distance in zip(ids, documents, metadatas, distances, strict=True)
        ]

    def _fetch_all(
        self,
        collection: Any,
        where: dict[str, Any] | None,
    ) -> list[tuple[str, str, VectorMetadata, float]]:
        kwargs: dict[str, Any] = {"include": ["documents", "metadatas"]}
        if where:
            kwargs["where"] = where
        raw = collection.get(**kwargs)

        ids = raw["ids"] or []
        documents = raw["documents"] or [""] * len(ids)
        metadatas = raw["metadatas"] or [{}] * len(ids)
        return [
            (rid, doc or "", self._from_chroma_metadata(meta or {}), 0.0)
            for rid, doc, meta in zip(ids, documents, metadatas, strict=True)
        ]

    # ------------------------------------------------------------------
    # Metadata conversion
    # ------------------------------------------------------------------

    @staticmethod
    def _to_chroma_metadata(metadata: VectorMetadata) -> dict[str, str | int | float | bool]:
        """Flatten VectorMetadata into Chroma's scalar-only metadata dict."""
        return {
            "source_doc_id": metadata.source_doc_id,
            "chunk_index": metadata.chunk_index,
            "source_name": metadata.source_name,
            "timestamp": metadata.timestamp.isoformat(),
            "extra_json": json.dumps(metadata.extra, default=str),
        }

    @staticmethod
    def _from_chroma_metadata(meta: dict[str, Any]) -> VectorMetadata:
        timestamp_raw = meta.get("timestamp")
        try:
            timestamp = datetime.fromisoformat(str(timestamp_raw))
        except (TypeError, ValueError):
            timestamp = datetime.now(tz=timezone.utc)

        try:
            extra = json.loads(meta.get("extra_json") or "{}")
        except json.JSONDecodeError:
            extra = {}

        return VectorMetadata(
            source_doc_id=str(meta.get("source_doc_id", "")),
            chunk_index=int(meta.get("chunk_index", 0)),
            source_name=str(meta.get("source_name", "")),
            timestamp=timestamp,
            extra=extra if isinstance(extra, dict) else {},
        )

    @staticmethod
    def _translate_filters(filters: dict[str, Any] | None) -> dict[str, Any] | None:
        """Translate equality filters on native keys to a Chroma ``where`` clause.

        Keys stored in ``extra`` are matched client-side by ``matches_filters``.
        """
        if not filters:
            return None

        clauses: list[dict[str, Any]] = []
        for key in _NATIVE_FILTER_KEYS:
            if key not in filters:
                continue
            value = filters[key]
            if isinstance(value, (list, tuple, set)):
                clauses.append({key: {"$in": list(value)}})
            else:
                clauses.append({key: {"$eq": value}})

        if not clauses:
            return None
        if len(clauses) == 1:
            return clauses[0]
        return {"$and": clauses}
