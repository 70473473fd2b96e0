"""Search API: knowledge-base search grouped by document, and single-document search with debug info."""
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends

from ragcore.api.dependencies import get_document_store, get_rag_service
from ragcore.api.schemas.search import (
    ChunkResultSchema,
    DocumentGroupSchema,
    DocumentSearchResponse,
    DocumentSearchSchema,
    KnowledgeBaseSearchResponse,
    KnowledgeBaseSearchSchema,
    SearchDebugSchema,
)
from ragcore.core.exceptions import NotFoundError, ValidationError
from ragcore.rag.hybrid_search import group_by_document
from ragcore.rag.types import EmbeddingStatus, SearchOptions, SearchType

logger = logging.getLogger(__name__)

router = APIRouter(tags=["search"])

# Upper bound on results per request through the HTTP surface
MAX_RESULTS = 20


@router.post("/search", response_model=KnowledgeBaseSearchResponse)
async def search_knowledge_base(body: KnowledgeBaseSearchSchema, rag=Depends(get_rag_service)):
    """Hybrid search over one knowledge base; results are grouped per document, best document first."""
    options = SearchOptions.clamped(
        match_count=body.limit,
        match_threshold=body.threshold,
        max_match_count=MAX_RESULTS,
    )
    ranked = await rag.search_knowledge_base(body.kb_id, body.query, options)
    groups = group_by_document(ranked)
    return KnowledgeBaseSearchResponse(
        query=body.query,
        results=[DocumentGroupSchema.from_group(g) for g in groups],
        total_chunks=len(ranked),
    )


@router.post("/documents/{document_id}/search", response_model=DocumentSearchResponse)
async def search_document(
    document_id: str,
    body: DocumentSearchSchema,
    rag=Depends(get_rag_service),
    documents=Depends(get_document_store),
):
    """Search inside one embedded document. Used to check what a document actually answers."""
    document = await documents.get_document(document_id)
    if document is None:
        raise NotFoundError("Document not found", details={"document_id": document_id})
    if document.embedding_status is not EmbeddingStatus.COMPLETED:
        raise ValidationError(
            "Document is not embedded yet",
            details={"document_id": document_id, "embedding_status": document.embedding_status.value},
        )

    options = SearchOptions.clamped(
        match_count=body.limit,
        match_threshold=body.threshold,
        vector_weight=0.5,
        max_match_count=MAX_RESULTS,
    )
    ranked = await rag.search_document(document_id, body.query, options)

    result_types = {t.value: 0 for t in SearchType}
    for chunk in ranked:
        result_types[chunk.search_type.value] += 1
    return DocumentSearchResponse(
        document_id=document_id,
        query=body.query,
        chunks=[ChunkResultSchema.from_ranked(c) for c in ranked],
        debug=SearchDebugSchema(
            total_results=len(ranked),
            threshold=options.match_threshold,
            vector_weight=options.vector_weight,
            result_types=result_types,
        ),
    )
