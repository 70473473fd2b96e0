"""
RAG core: chunking, embedding, hybrid search, reranking and embedding orchestration.

Usage::

    from ragcore.rag import EmbeddingOrchestrator, HybridSearcher, SearchScope
    orchestrator = EmbeddingOrchestrator(chunk_store, document_store)
    await orchestrator.embed_knowledge_base(kb_id, config)

    # Query path via RAGService (ragcore.services.rag_service)
    from ragcore.services import RAGService
"""
from ragcore.rag.context import format_chunk_context
from ragcore.rag.embedder import Embedder, embed, embed_one
from ragcore.rag.fusion import reciprocal_rank_fusion, rrf_score
from ragcore.rag.hybrid_search import HybridSearcher, group_by_document
from ragcore.rag.lexical import BM25Scorer, tokenize
from ragcore.rag.orchestrator import EmbeddingOrchestrator
from ragcore.rag.reranker import Reranker, RerankOptions, rerank_ranked_chunks
from ragcore.rag.splitters import SeparatorSplitter, chunk_document, content_hash, estimate_tokens
from ragcore.rag.types import (
    BatchEmbedResult,
    ChunkPiece,
    ChunkRecord,
    Document,
    DocumentGroup,
    EmbedDocumentResult,
    EmbeddingStats,
    EmbeddingStatus,
    RankedChunk,
    RerankResult,
    ScopeKind,
    ScoredChunk,
    SearchOptions,
    SearchScope,
    SearchType,
)

__all__ = [
    "format_chunk_context",
    "Embedder",
    "embed",
    "embed_one",
    "reciprocal_rank_fusion",
    "rrf_score",
    "HybridSearcher",
    "group_by_document",
    "BM25Scorer",
    "tokenize",
    "EmbeddingOrchestrator",
    "Reranker",
    "RerankOptions",
    "rerank_ranked_chunks",
    "SeparatorSplitter",
    "chunk_document",
    "content_hash",
    "estimate_tokens",
    "BatchEmbedResult",
    "ChunkPiece",
    "ChunkRecord",
    "Document",
    "DocumentGroup",
    "EmbedDocumentResult",
    "EmbeddingStats",
    "EmbeddingStatus",
    "RankedChunk",
    "RerankResult",
    "ScopeKind",
    "ScoredChunk",
    "SearchOptions",
    "SearchScope",
    "SearchType",
]
