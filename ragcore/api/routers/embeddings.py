"""Embedding management API: (re)embed or drop a document or a whole knowledge base, stats, connection test."""
from __future__ import annotations

import dataclasses
import logging

from fastapi import APIRouter, Depends

from ragcore.api.dependencies import get_document_store, get_embedding_config, get_orchestrator, get_rag_service
from ragcore.api.schemas.embeddings import (
    DocumentEmbeddingResponse,
    EmbeddingsDeletedResponse,
    EmbeddingStatsResponse,
    EmbeddingTestResponse,
    EmbeddingTestResultSchema,
    EmbeddingTestSchema,
    KnowledgeBaseEmbeddingResponse,
)
from ragcore.clients.embedding import load_embedding_config
from ragcore.core.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["embeddings"])


@router.post("/documents/{document_id}/embeddings", response_model=DocumentEmbeddingResponse)
async def embed_document(
    document_id: str,
    orchestrator=Depends(get_orchestrator),
    documents=Depends(get_document_store),
    config=Depends(get_embedding_config),
):
    """Chunk and embed one document, replacing any chunks it already has."""
    document = await documents.get_document(document_id)
    if document is None:
        raise NotFoundError("Document not found", details={"document_id": document_id})
    result = await orchestrator.embed_document(document.id, document.content, config, kb_id=document.kb_id)
    return DocumentEmbeddingResponse(
        document_id=result.document_id,
        chunk_count=result.chunk_count,
        status=result.status.value,
    )


@router.delete("/documents/{document_id}/embeddings", response_model=EmbeddingsDeletedResponse)
async def delete_document_embeddings(document_id: str, orchestrator=Depends(get_orchestrator)):
    removed = await orchestrator.delete_document_embeddings(document_id)
    return EmbeddingsDeletedResponse(deleted_chunks=removed)


@router.post("/knowledge-bases/{kb_id}/embeddings", response_model=KnowledgeBaseEmbeddingResponse)
async def embed_knowledge_base(
    kb_id: str,
    orchestrator=Depends(get_orchestrator),
    config=Depends(get_embedding_config),
):
    """Embed every pending, outdated or failed document of the knowledge base. Partial failure is not an error."""
    result = await orchestrator.embed_knowledge_base(kb_id, config)
    return KnowledgeBaseEmbeddingResponse(
        success=result.success,
        kb_id=result.kb_id,
        total=result.total,
        processed=result.processed,
        failed=result.failed,
        errors=result.errors,
    )


@router.delete("/knowledge-bases/{kb_id}/embeddings", response_model=EmbeddingsDeletedResponse)
async def delete_knowledge_base_embeddings(kb_id: str, orchestrator=Depends(get_orchestrator)):
    removed = await orchestrator.delete_knowledge_base_embeddings(kb_id)
    return EmbeddingsDeletedResponse(deleted_chunks=removed)


@router.get("/knowledge-bases/{kb_id}/embeddings/stats", response_model=EmbeddingStatsResponse)
async def knowledge_base_embedding_stats(kb_id: str, orchestrator=Depends(get_orchestrator)):
    stats = await orchestrator.embedding_stats(kb_id)
    return EmbeddingStatsResponse(**dataclasses.asdict(stats))


@router.post("/embeddings/test", response_model=EmbeddingTestResponse)
async def test_embedding(
    body: EmbeddingTestSchema,
    rag=Depends(get_rag_service),
    saved=Depends(get_embedding_config),
):
    """
    Embed ``text`` with the submitted settings layered over the saved ones.

    A masked or empty api key in the submitted settings keeps the saved key.
    """
    config = load_embedding_config(body.config, environ={}, defaults=saved)
    if not config.has_credential:
        raise ValidationError("Embedding API key is required", details={"provider": config.provider.value})
    result = await rag.test_embedding(body.text, config)
    logger.info("Embedding test: %s returned %d dimensions in %d ms", result.model, result.dimensions, result.response_time_ms)
    return EmbeddingTestResponse(
        result=EmbeddingTestResultSchema(
            model=result.model,
            dimensions=result.dimensions,
            response_time_ms=result.response_time_ms,
            vector_preview=result.vector_preview,
        )
    )
