"""RAGService: query path over a chunk store (embed query -> hybrid search -> optional rerank).

Configuration is passed in resolved form; nothing here reads the environment.

Usage::

    svc = RAGService(chunk_store, embedding_config=cfg, reranker_config=rcfg)
    ranked = await svc.search_knowledge_base(kb_id, "What were Q4 revenues?")
    context = format_chunk_context(ranked)
"""
from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, List, Optional, Sequence

from ragcore.clients.embedding.registry import EmbeddingRegistry, default_registry
from ragcore.core.exceptions import ConfigurationError, ProviderError, ValidationError
from ragcore.rag.context import format_chunk_context
from ragcore.rag.embedder import embed_one
from ragcore.rag.hybrid_search import HybridSearcher, group_by_document
from ragcore.rag.reranker import Reranker, rerank_ranked_chunks
from ragcore.rag.types import DocumentGroup, RankedChunk, SearchOptions, SearchScope

if TYPE_CHECKING:
    from ragcore.clients.embedding import EmbeddingConfig
    from ragcore.clients.reranker import RerankerConfig
    from ragcore.infra.chunk_store.base import ChunkStore

logger = logging.getLogger(__name__)


@dataclass
class EmbeddingTestResult:
    model: str
    dimensions: int
    response_time_ms: int
    vector_preview: List[float] = field(default_factory=list)


class RAGService:
    """Retrieval entry point used by the HTTP layer and by chat callers."""

    def __init__(
        self,
        chunk_store: "ChunkStore",
        *,
        embedding_config: "EmbeddingConfig",
        reranker_config: Optional["RerankerConfig"] = None,
        registry: EmbeddingRegistry = default_registry,
        reranker: Optional[Reranker] = None,
    ) -> None:
        self._searcher = HybridSearcher(chunk_store)
        self._embedding_config = embedding_config
        self._reranker_config = reranker_config
        self._registry = registry
        self._reranker = reranker or Reranker()

    @property
    def embedding_config(self) -> "EmbeddingConfig":
        return self._embedding_config

    async def search(
        self,
        query: str,
        scope: SearchScope,
        options: Optional[SearchOptions] = None,
        *,
        rerank: bool = False,
    ) -> List[RankedChunk]:
        """Hybrid search; with ``rerank`` the fused list is reordered by the configured reranker."""
        if not query or not query.strip():
            raise ValidationError("Search query must not be empty")
        options = options or SearchOptions()
        vector = await embed_one(query, self._embedding_config, registry=self._registry)
        results = await self._searcher.search(query, vector, scope, options)
        if rerank and results:
            results = await rerank_ranked_chunks(
                query,
                results,
                self._reranker_config,
                top_k=options.match_count,
                reranker=self._reranker,
            )
        logger.info("Search %s: %d results", scope.kind.value, len(results))
        return results

    async def search_knowledge_base(
        self, kb_id: str, query: str, options: Optional[SearchOptions] = None, *, rerank: bool = False
    ) -> List[RankedChunk]:
        return await self.search(query, SearchScope.knowledge_base(kb_id), options, rerank=rerank)

    async def search_document(
        self, document_id: str, query: str, options: Optional[SearchOptions] = None
    ) -> List[RankedChunk]:
        return await self.search(query, SearchScope.document(document_id), options)

    async def search_knowledge_bases(
        self, kb_ids: Sequence[str], query: str, options: Optional[SearchOptions] = None, *, rerank: bool = False
    ) -> List[RankedChunk]:
        return await self.search(query, SearchScope.knowledge_bases(list(kb_ids)), options, rerank=rerank)

    async def search_knowledge_base_grouped(
        self, kb_id: str, query: str, options: Optional[SearchOptions] = None
    ) -> List[DocumentGroup]:
        return group_by_document(await self.search_knowledge_base(kb_id, query, options))

    async def build_context(
        self, query: str, scope: SearchScope, options: Optional[SearchOptions] = None, *, rerank: bool = False
    ) -> str:
        """Evidence block for a language model prompt; empty string when nothing matched."""
        return format_chunk_context(await self.search(query, scope, options, rerank=rerank))

    async def test_embedding(self, text: str, config: Optional["EmbeddingConfig"] = None) -> EmbeddingTestResult:
        """
        Embed one text with the given (or current) config and report what came back.

        Goes straight to the provider client, so a model whose output size
        differs from ``config.dimensions`` is reported rather than rejected.
        """
        config = config or self._embedding_config
        if not config.has_credential:
            raise ConfigurationError("Embedding API key is not configured", details={"provider": config.provider.value})
        client = self._registry.build(config)
        started = time.monotonic()
        try:
            vectors = await client.embed([text])
        finally:
            await client.aclose()
        if not vectors:
            raise ProviderError("Embedding provider returned no vector", provider=client.provider)
        return EmbeddingTestResult(
            model=client.model_name,
            dimensions=len(vectors[0]),
            response_time_ms=int((time.monotonic() - started) * 1000),
            vector_preview=list(vectors[0][:10]),
        )
