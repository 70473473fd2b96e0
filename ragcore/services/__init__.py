"""Service layer: RAG query path."""
from ragcore.services.rag_service import EmbeddingTestResult, RAGService

__all__ = ["RAGService", "EmbeddingTestResult"]
