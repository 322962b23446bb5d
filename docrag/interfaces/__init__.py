"""Abstract provider contracts (adapter pattern).

Business logic depends only on these ABCs; concrete adapters live under
``docrag/providers/`` and are wired together in ``docrag/main.py`` and the
provider registry.
"""

from docrag.interfaces.cache_provider import ICacheProvider
from docrag.interfaces.embedding_provider import IEmbeddingProvider
from docrag.interfaces.extraction_tier import ExtractionRequest, IExtractionTier
from docrag.interfaces.llm_provider import ITextGenerationProvider
from docrag.interfaces.vector_store_provider import IVectorStoreProvider

__all__ = [
    "ExtractionRequest",
    "ICacheProvider",
    "IEmbeddingProvider",
    "IExtractionTier",
    "ITextGenerationProvider",
    "IVectorStoreProvider",
]
