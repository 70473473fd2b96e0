"""Reranker: optional second pass reordering fused candidates with a relevance API."""
from __future__ import annotations

import dataclasses
import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence

from ragcore.clients.reranker import RerankerConfig, RerankerProvider, RerankerRegistry, RerankHit, default_registry
from ragcore.core.exceptions import ProviderError, ValidationError
from ragcore.rag.types import RankedChunk, RerankResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RerankOptions:
    top_k: int = 20
    # Keep candidate order, only filter and score
    return_original_order: bool = False

    def __post_init__(self) -> None:
        if self.top_k < 1:
            raise ValidationError("top_k must be >= 1", details={"top_k": self.top_k})


def _identity(candidates: Sequence[RankedChunk]) -> List[RerankResult]:
    return [
        RerankResult(chunk=c, relevance_score=c.combined_score, original_rank=i, new_rank=i)
        for i, c in enumerate(candidates)
    ]


class Reranker:
    """Dispatch to the configured rerank backend, or reuse fused scores when there is none."""

    def __init__(self, registry: RerankerRegistry = default_registry) -> None:
        self._registry = registry

    async def rerank(
        self,
        query: str,
        candidates: Sequence[RankedChunk],
        config: Optional[RerankerConfig],
        options: Optional[RerankOptions] = None,
    ) -> List[RerankResult]:
        """
        Rerank candidates; ranks in the results are 0-based positions.

        Without a credential, up to ``top_k`` candidates pass through untouched.
        ``local-bge`` or a missing credential above ``top_k`` truncates with the
        fused score as relevance. Backend failures propagate as ProviderError.
        """
        options = options or RerankOptions()
        if not candidates:
            return []

        has_credential = config is not None and config.has_credential
        if len(candidates) <= options.top_k and not has_credential:
            return _identity(candidates)

        client = None
        if has_credential and config.provider is not RerankerProvider.LOCAL_BGE:
            client = self._registry.build(config)

        if client is None:
            results = _identity(candidates[: options.top_k])
        else:
            try:
                hits = await client.rerank(
                    query,
                    [c.content for c in candidates],
                    top_n=min(options.top_k, len(candidates)),
                )
            finally:
                await client.aclose()
            results = self._to_results(candidates, hits[: options.top_k], client.provider)
            logger.info(
                "Reranked %d candidates with %s -> %d results", len(candidates), client.provider, len(results)
            )

        if options.return_original_order:
            results.sort(key=lambda r: r.original_rank)
        return results

    @staticmethod
    def _to_results(candidates: Sequence[RankedChunk], hits: Sequence[RerankHit], provider: str) -> List[RerankResult]:
        seen = set()
        results: List[RerankResult] = []
        for new_rank, hit in enumerate(hits):
            if not 0 <= hit.index < len(candidates) or hit.index in seen:
                raise ProviderError(
                    f"{provider} rerank returned an invalid document index {hit.index}",
                    provider=provider,
                    details={"candidates": len(candidates)},
                )
            seen.add(hit.index)
            results.append(
                RerankResult(
                    chunk=candidates[hit.index],
                    relevance_score=hit.relevance_score,
                    original_rank=hit.index,
                    new_rank=new_rank,
                )
            )
        return results


async def rerank_ranked_chunks(
    query: str,
    chunks: Sequence[RankedChunk],
    config: Optional[RerankerConfig],
    *,
    top_k: int = 20,
    reranker: Optional[Reranker] = None,
) -> List[RankedChunk]:
    """Rerank and return chunks with the relevance score in ``combined_score``; first top_k unchanged without a key."""
    if config is None or not config.has_credential:
        return list(chunks[:top_k])
    reranked = await (reranker or Reranker()).rerank(query, chunks, config, RerankOptions(top_k=top_k))
    return [dataclasses.replace(r.chunk, combined_score=r.relevance_score) for r in reranked]
