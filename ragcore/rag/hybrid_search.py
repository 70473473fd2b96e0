"""HybridSearcher: vector + lexical legs over a chunk store, fused via Reciprocal Rank Fusion."""
from __future__ import annotations

import asyncio
import dataclasses
import logging
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence

from ragcore.core.exceptions import ValidationError
from ragcore.rag.fusion import reciprocal_rank_fusion
from ragcore.rag.types import DocumentGroup, RankedChunk, ScopeKind, SearchOptions, SearchScope

if TYPE_CHECKING:
    from ragcore.infra.chunk_store.base import ChunkStore

logger = logging.getLogger(__name__)


class HybridSearcher:
    """Run both retrieval legs concurrently against one ChunkStore and fuse the rankings."""

    def __init__(self, store: "ChunkStore") -> None:
        self._store = store

    async def search(
        self,
        query_text: str,
        query_vector: Sequence[float],
        scope: SearchScope,
        options: Optional[SearchOptions] = None,
    ) -> List[RankedChunk]:
        """
        Hybrid search over a knowledge base, a document, or several knowledge bases.

        The similarity threshold applies to the vector leg only. Each leg
        returns up to ``candidate_count`` hits; the fused list is cut to
        ``match_count``. No candidates from either leg gives an empty list.
        """
        options = options or SearchOptions()
        if not isinstance(options, SearchOptions):
            raise ValidationError("options must be a SearchOptions instance")
        if not query_text or not query_text.strip():
            raise ValidationError("Search query must not be empty")
        if not query_vector:
            raise ValidationError("Query vector must not be empty")
        if not isinstance(scope, SearchScope):
            raise ValidationError("scope must be a SearchScope instance")

        vector_hits, lexical_hits = await asyncio.gather(
            self._store.vector_search(
                scope,
                list(query_vector),
                threshold=options.match_threshold,
                limit=options.candidate_count,
            ),
            self._store.lexical_search(scope, query_text, limit=options.candidate_count),
        )
        # Stores are expected to filter already; the threshold is a hard guarantee here.
        vector_hits = [h for h in vector_hits if h.score >= options.match_threshold][: options.candidate_count]
        lexical_hits = list(lexical_hits)[: options.candidate_count]

        fused = reciprocal_rank_fusion(
            vector_hits,
            lexical_hits,
            vector_weight=options.vector_weight,
            rrf_k=options.rrf_k,
        )[: options.match_count]

        if scope.kind is ScopeKind.DOCUMENT:
            fused = [dataclasses.replace(r, document_title=None, source_url=None, kb_id=None) for r in fused]
        elif scope.kind is ScopeKind.KNOWLEDGE_BASE:
            fused = [dataclasses.replace(r, kb_id=None) for r in fused]

        logger.debug(
            "Hybrid search %s=%s: %d vector, %d lexical -> %d results",
            scope.kind.value,
            ",".join(scope.ids),
            len(vector_hits),
            len(lexical_hits),
            len(fused),
        )
        return fused


def group_by_document(results: Sequence[RankedChunk]) -> List[DocumentGroup]:
    """Cluster ranked chunks per document, best document (max similarity) first."""
    groups: Dict[str, DocumentGroup] = {}
    for r in results:
        group = groups.get(r.document_id)
        if group is None:
            group = groups[r.document_id] = DocumentGroup(
                document_id=r.document_id,
                document_title=r.document_title,
                source_url=r.source_url,
                max_similarity=r.similarity,
            )
        group.chunks.append(r)
        group.max_similarity = max(group.max_similarity, r.similarity)
    return sorted(groups.values(), key=lambda g: g.max_similarity, reverse=True)
