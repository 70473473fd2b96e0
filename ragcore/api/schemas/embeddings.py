"""Pydantic schemas for embedding management and the embedding connection test."""
from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field


class DocumentEmbeddingResponse(BaseModel):
    success: bool = True
    document_id: str
    chunk_count: int
    status: str


class EmbeddingsDeletedResponse(BaseModel):
    success: bool = True
    deleted_chunks: int


class KnowledgeBaseEmbeddingResponse(BaseModel):
    success: bool
    kb_id: str
    total: int
    processed: int
    failed: int
    errors: Dict[str, str] = Field(default_factory=dict)


class EmbeddingStatsResponse(BaseModel):
    total_documents: int
    embedded_documents: int
    pending_documents: int
    processing_documents: int
    failed_documents: int
    outdated_documents: int
    total_chunks: int


class EmbeddingTestSchema(BaseModel):
    """Probe an embedding configuration. ``config`` uses the persisted settings keys; a masked key means "keep the saved one"."""
    text: str = Field(..., min_length=1)
    config: Dict[str, Any] = Field(default_factory=dict)


class EmbeddingTestResultSchema(BaseModel):
    model: str
    dimensions: int
    response_time_ms: int
    vector_preview: List[float]


class EmbeddingTestResponse(BaseModel):
    success: bool = True
    result: EmbeddingTestResultSchema
