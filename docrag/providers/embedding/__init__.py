"""Embedding backend adapters.

    - OpenAIEmbeddingProvider -- OpenAI and OpenAI-compatible vendors
    - NomicEmbeddingProvider  -- nomic-embed-text via Ollama
    - HashEmbeddingProvider   -- deterministic local fallback
"""

from docrag.providers.embedding.hash_embedding_provider import (
    FALLBACK_DIMENSION,
    HashEmbeddingProvider,
    hash_embedding,
)
from docrag.providers.embedding.nomic_embedding_provider import NomicEmbeddingProvider
from docrag.providers.embedding.openai_embedding_provider import OpenAIEmbeddingProvider

__all__ = [
    "FALLBACK_DIMENSION",
    "HashEmbeddingProvider",
    "NomicEmbeddingProvider",
    "OpenAIEmbeddingProvider",
    "hash_embedding",
]
