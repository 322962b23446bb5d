"""Vector store adapters.

    - InMemoryVectorStore -- default in-process engine ("local")
    - ChromaDBProvider    -- ChromaDB, local persistent or remote server
"""

from docrag.providers.vector_store.chromadb_provider import ChromaDBProvider
from docrag.providers.vector_store.memory_provider import InMemoryVectorStore

__all__ = ["ChromaDBProvider", "InMemoryVectorStore"]
