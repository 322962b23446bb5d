"""Core services: extraction cascade, chunking, embedding, provider registry and orchestration."""

from docrag.services.chunker import TextChunker
from docrag.services.document_extractor import DocumentExtractor
from docrag.services.embedding_service import EmbeddingService
from docrag.services.provider_registry import ProviderRegistry, VendorProfile, create_vector_store
from docrag.services.rag_orchestrator import RAGOrchestrator

__all__ = [
    "DocumentExtractor",
    "EmbeddingService",
    "ProviderRegistry",
    "RAGOrchestrator",
    "TextChunker",
    "VendorProfile",
    "create_vector_store",
]
