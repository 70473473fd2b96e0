"""Pydantic schemas for the search API."""
from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from ragcore.rag.types import DocumentGroup, RankedChunk


class KnowledgeBaseSearchSchema(BaseModel):
    kb_id: str = Field(..., min_length=1)
    query: str = Field(..., min_length=1)
    # Out-of-range values are clamped by the router, not rejected
    limit: int = 5
    threshold: float = 0.7


class DocumentSearchSchema(BaseModel):
    query: str = Field(..., min_length=1)
    limit: int = 5
    threshold: float = 0.5


class ChunkResultSchema(BaseModel):
    chunk_id: str
    document_id: str
    chunk_index: int
    content: str
    similarity: float
    combined_score: float
    search_type: str
    token_count: int = 0
    vector_rank: Optional[int] = None
    lexical_rank: Optional[int] = None

    @classmethod
    def from_ranked(cls, chunk: RankedChunk) -> "ChunkResultSchema":
        return cls(
            chunk_id=chunk.chunk_id,
            document_id=chunk.document_id,
            chunk_index=chunk.chunk_index,
            content=chunk.content,
            similarity=chunk.similarity,
            combined_score=chunk.combined_score,
            search_type=chunk.search_type.value,
            token_count=chunk.token_count,
            vector_rank=chunk.vector_rank,
            lexical_rank=chunk.lexical_rank,
        )


class DocumentGroupSchema(BaseModel):
    document_id: str
    title: Optional[str] = None
    source_url: Optional[str] = None
    max_similarity: float
    chunks: List[ChunkResultSchema] = Field(default_factory=list)

    @classmethod
    def from_group(cls, group: DocumentGroup) -> "DocumentGroupSchema":
        return cls(
            document_id=group.document_id,
            title=group.document_title,
            source_url=group.source_url,
            max_similarity=group.max_similarity,
            chunks=[ChunkResultSchema.from_ranked(c) for c in group.chunks],
        )


class KnowledgeBaseSearchResponse(BaseModel):
    success: bool = True
    query: str
    results: List[DocumentGroupSchema]
    total_chunks: int


class SearchDebugSchema(BaseModel):
    total_results: int
    threshold: float
    vector_weight: float
    result_types: Dict[str, int]


class DocumentSearchResponse(BaseModel):
    success: bool = True
    document_id: str
    query: str
    chunks: List[ChunkResultSchema]
    debug: SearchDebugSchema
