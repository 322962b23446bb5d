"""Abstract base class for vector-store backends.

Two engines satisfy this contract: the in-process
:class:`~docrag.providers.vector_store.memory_provider.InMemoryVectorStore`
and the ChromaDB-backed store.  Both honour the same search semantics:
scores below the threshold are dropped, results are sorted by score
descending (ties keep insertion order) and truncated to the limit.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from docrag.models.rag import SearchOptions, SearchResult, VectorRecord


class IVectorStoreProvider(ABC):
    """Contract for vector storage and similarity search."""

    @abstractmethod
    async def initialize(self) -> None:
        """Prepare the backend (create collections, open clients).

        Raises
        ------
        docrag.utils.errors.VectorStoreError
            If the backend cannot be prepared.
        """

    @abstractmethod
    async def add_documents(self, records: list[VectorRecord]) -> int:
        """Insert *records*; a record whose id already exists replaces it.

        Returns
        -------
        int
            Number of records written.
        """

    @abstractmethod
    async def search(
        self,
        query_text: str,
        query_vector: list[float],
        options: SearchOptions | None = None,
    ) -> list[SearchResult]:
        """Score stored records against the query.

        Parameters
        ----------
        query_text:
            Raw question text, used by keyword and hybrid scoring.
        query_vector:
            Embedding of the question, used by semantic and hybrid scoring.
        options:
            Mode, metadata filters, limit and threshold.

        Returns
        -------
        list[SearchResult]
            At most ``options.limit`` results with ``score >= threshold``,
            in non-increasing score order.
        """

    @abstractmethod
    async def delete_document(self, document_id: str) -> int:
        """Delete every record whose ``metadata.source_doc_id`` equals *document_id*.

        Returns
        -------
        int
            Number of records removed.
        """

    @abstractmethod
    async def clear(self) -> None:
        """Remove every record."""

    @abstractmethod
    async def count(self) -> int:
        """Return the number of stored records."""

    @abstractmethod
    async def test_connection(self) -> bool:
        """Return ``True`` if the backend is reachable."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return an identifier such as ``"local"`` or ``"chromadb"``."""
