"""FastAPI dependency providers. Everything is read from ``app.state``, wired by create_app."""
from __future__ import annotations

from fastapi import Request

from ragcore.clients.embedding import EmbeddingConfig
from ragcore.core.exceptions import ConfigurationError
from ragcore.infra.chunk_store.base import DocumentStore
from ragcore.rag.orchestrator import EmbeddingOrchestrator
from ragcore.services.rag_service import RAGService


def _state(request: Request, name: str):
    value = getattr(request.app.state, name, None)
    if value is None:
        raise ConfigurationError(f"{name} is not configured on this application")
    return value


def get_rag_service(request: Request) -> RAGService:
    return _state(request, "rag_service")


def get_orchestrator(request: Request) -> EmbeddingOrchestrator:
    return _state(request, "orchestrator")


def get_document_store(request: Request) -> DocumentStore:
    return _state(request, "document_store")


def get_embedding_config(request: Request) -> EmbeddingConfig:
    return _state(request, "embedding_config")
