"""
QdrantChunkStore: chunk vectors and payloads in one Qdrant collection.

Scopes become payload filters on ``kb_id`` / ``document_id``. The lexical leg
prefilters on the ``lexical_tokens`` keyword index (any query term), then
scores the scanned chunks with BM25. Document count and term frequencies are
exact counts over the whole scope; average length is taken from the scanned
chunks.
"""
from __future__ import annotations

import asyncio
import logging
from typing import Dict, List, Optional, Sequence

from qdrant_client.models import FieldCondition, Filter, MatchAny, MatchValue, PointStruct

from ragcore.infra.vectorstore.client import QdrantManager
from ragcore.infra.vectorstore.collections import PayloadField, build_chunk_payload
from ragcore.rag.lexical import BM25Scorer, tokenize, unique_terms
from ragcore.rag.types import ChunkRecord, ScopeKind, ScoredChunk, SearchScope

from .base import ChunkStore, DocumentStore

logger = logging.getLogger(__name__)


def scope_condition(scope: SearchScope) -> FieldCondition:
    if scope.kind is ScopeKind.DOCUMENT:
        return FieldCondition(key=PayloadField.DOCUMENT_ID, match=MatchValue(value=scope.id))
    if scope.kind is ScopeKind.KNOWLEDGE_BASE:
        return FieldCondition(key=PayloadField.KB_ID, match=MatchValue(value=scope.id))
    return FieldCondition(key=PayloadField.KB_ID, match=MatchAny(any=list(scope.ids)))


class QdrantChunkStore(ChunkStore):
    def __init__(
        self,
        manager: QdrantManager,
        *,
        documents: Optional[DocumentStore] = None,
        collection: Optional[str] = None,
        scorer: BM25Scorer = BM25Scorer(),
    ) -> None:
        self._qdrant = manager
        self._collection = collection or manager.config.collection_name
        self._scan_limit = manager.config.lexical_scan_limit
        self._documents = documents
        self._scorer = scorer

    @staticmethod
    def _document_filter(document_ids: Sequence[str]) -> Filter:
        if len(document_ids) == 1:
            match = MatchValue(value=document_ids[0])
        else:
            match = MatchAny(any=list(document_ids))
        return Filter(must=[FieldCondition(key=PayloadField.DOCUMENT_ID, match=match)])

    async def delete_by_document(self, document_id: str) -> int:
        return await self.delete_by_documents([document_id])

    async def delete_by_documents(self, document_ids: Sequence[str]) -> int:
        if not document_ids:
            return 0
        points_filter = self._document_filter(document_ids)
        existing = await self._qdrant.count_points(self._collection, points_filter)
        if existing:
            await self._qdrant.delete_by_filter(self._collection, points_filter)
        logger.debug("Deleted %d chunks for %d documents", existing, len(document_ids))
        return existing

    async def insert_chunks(self, records: Sequence[ChunkRecord]) -> None:
        points = [
            PointStruct(id=record.id, vector=list(record.embedding), payload=build_chunk_payload(record))
            for record in records
        ]
        await self._qdrant.upsert_points(self._collection, points)

    async def _to_scored(self, payloads: List[Dict], scores: List[float]) -> List[ScoredChunk]:
        titles: Dict[str, tuple] = {}
        if self._documents is not None:
            for document_id in dict.fromkeys(str(p.get(PayloadField.DOCUMENT_ID, "")) for p in payloads):
                document = await self._documents.get_document(document_id)
                if document is not None:
                    titles[document_id] = (document.title, document.source_url)
        results = []
        for payload, score in zip(payloads, scores):
            document_id = str(payload.get(PayloadField.DOCUMENT_ID, ""))
            title, url = titles.get(document_id, (None, None))
            results.append(
                ScoredChunk(
                    chunk_id=str(payload.get(PayloadField.CHUNK_ID, "")),
                    document_id=document_id,
                    kb_id=str(payload.get(PayloadField.KB_ID, "")),
                    chunk_index=int(payload.get(PayloadField.CHUNK_INDEX, 0)),
                    content=str(payload.get(PayloadField.CONTENT, "")),
                    score=score,
                    token_count=int(payload.get(PayloadField.TOKEN_COUNT, 0)),
                    document_title=title,
                    source_url=url,
                )
            )
        return results

    async def vector_search(
        self,
        scope: SearchScope,
        vector: Sequence[float],
        *,
        threshold: float,
        limit: int,
    ) -> List[ScoredChunk]:
        hits = await self._qdrant.search(
            self._collection,
            list(vector),
            query_filter=Filter(must=[scope_condition(scope)]),
            limit=limit,
            score_threshold=threshold,
        )
        return await self._to_scored([h.payload or {} for h in hits], [h.score for h in hits])

    async def lexical_search(self, scope: SearchScope, query_text: str, *, limit: int) -> List[ScoredChunk]:
        terms = unique_terms(tokenize(query_text))
        if not terms:
            return []
        in_scope = scope_condition(scope)
        candidates = await self._qdrant.scroll(
            self._collection,
            scroll_filter=Filter(
                must=[in_scope, FieldCondition(key=PayloadField.LEXICAL_TOKENS, match=MatchAny(any=terms))]
            ),
            limit=self._scan_limit,
        )
        if not candidates:
            return []

        term_filters = [
            Filter(must=[in_scope, FieldCondition(key=PayloadField.LEXICAL_TOKENS, match=MatchValue(value=term))])
            for term in terms
        ]
        total, *term_counts = await asyncio.gather(
            self._qdrant.count_points(self._collection, Filter(must=[in_scope])),
            *(self._qdrant.count_points(self._collection, f) for f in term_filters),
        )
        frequencies: Dict[str, int] = dict(zip(terms, term_counts))

        payloads = [p.payload or {} for p in candidates]
        # N and df span the whole scope; average length comes from the scanned candidates
        ranked = self._scorer.score_corpus(
            terms,
            [list(p.get(PayloadField.LEXICAL_TOKENS) or []) for p in payloads],
            total_documents=max(total, len(payloads)),
            document_frequencies=frequencies,
        )[:limit]
        return await self._to_scored([payloads[i] for i, _ in ranked], [s for _, s in ranked])

    async def count_chunks(self, scope: SearchScope) -> int:
        return await self._qdrant.count_points(self._collection, Filter(must=[scope_condition(scope)]))
