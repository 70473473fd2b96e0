"""Reciprocal Rank Fusion of a vector-similarity leg and a lexical leg."""
from __future__ import annotations

from typing import Dict, List, Optional, Sequence

from ragcore.rag.types import RankedChunk, ScoredChunk, SearchType


def rrf_score(
    vector_rank: Optional[int],
    lexical_rank: Optional[int],
    *,
    vector_weight: float,
    rrf_k: int,
) -> float:
    """w / (k + vector_rank) + (1 - w) / (k + lexical_rank); an absent rank contributes 0."""
    score = 0.0
    if vector_rank is not None:
        score += vector_weight / (rrf_k + vector_rank)
    if lexical_rank is not None:
        score += (1.0 - vector_weight) / (rrf_k + lexical_rank)
    return score


def reciprocal_rank_fusion(
    vector_hits: Sequence[ScoredChunk],
    lexical_hits: Sequence[ScoredChunk],
    *,
    vector_weight: float = 0.5,
    rrf_k: int = 60,
) -> List[RankedChunk]:
    """
    Fuse two ranked hit lists into one list ordered by RRF score.

    Both inputs must already be ordered best first; ranks are 1-based list
    positions. A chunk found by both legs is tagged ``hybrid``, otherwise
    ``vector`` or ``lexical``. ``similarity`` is the vector score, or 0.0 for
    lexical-only chunks. Equal scores are ordered by best rank, then chunk id.
    """
    vector_rank: Dict[str, int] = {}
    lexical_rank: Dict[str, int] = {}
    hits: Dict[str, ScoredChunk] = {}

    for rank, hit in enumerate(vector_hits, start=1):
        if hit.chunk_id not in vector_rank:
            vector_rank[hit.chunk_id] = rank
            hits[hit.chunk_id] = hit
    for rank, hit in enumerate(lexical_hits, start=1):
        if hit.chunk_id not in lexical_rank:
            lexical_rank[hit.chunk_id] = rank
            hits.setdefault(hit.chunk_id, hit)

    fused: List[RankedChunk] = []
    for chunk_id, hit in hits.items():
        v_rank = vector_rank.get(chunk_id)
        l_rank = lexical_rank.get(chunk_id)
        if v_rank is not None and l_rank is not None:
            search_type = SearchType.HYBRID
        elif v_rank is not None:
            search_type = SearchType.VECTOR
        else:
            search_type = SearchType.LEXICAL
        fused.append(
            RankedChunk(
                chunk_id=chunk_id,
                document_id=hit.document_id,
                chunk_index=hit.chunk_index,
                content=hit.content,
                similarity=hit.score if v_rank is not None else 0.0,
                combined_score=rrf_score(v_rank, l_rank, vector_weight=vector_weight, rrf_k=rrf_k),
                search_type=search_type,
                token_count=hit.token_count,
                vector_rank=v_rank,
                lexical_rank=l_rank,
                document_title=hit.document_title,
                source_url=hit.source_url,
                kb_id=hit.kb_id,
            )
        )

    def _key(item: RankedChunk):
        best = min(r for r in (item.vector_rank, item.lexical_rank) if r is not None)
        return (-item.combined_score, best, item.chunk_id)

    fused.sort(key=_key)
    return fused
