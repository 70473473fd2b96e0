"""In-process stores: cosine similarity over stored vectors, BM25 over stored lexical tokens."""
from __future__ import annotations

import asyncio
import dataclasses
import logging
import math
from typing import Dict, Iterable, List, Optional, Sequence

from ragcore.core.exceptions import NotFoundError
from ragcore.rag.lexical import BM25Scorer, tokenize
from ragcore.rag.types import (
    ChunkRecord,
    Document,
    EmbeddingStatus,
    ScopeKind,
    ScoredChunk,
    SearchScope,
)

from .base import ChunkStore, DocumentStore

logger = logging.getLogger(__name__)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    dot = sum(x * y for x, y in zip(a, b))
    norm = math.sqrt(sum(x * x for x in a)) * math.sqrt(sum(y * y for y in b))
    return dot / norm if norm else 0.0


class InMemoryDocumentStore(DocumentStore):
    def __init__(self, documents: Iterable[Document] = ()) -> None:
        self._documents: Dict[str, Document] = {}
        for document in documents:
            self.add(document)

    def add(self, document: Document) -> None:
        self._documents[document.id] = document

    def peek(self, document_id: str) -> Optional[Document]:
        return self._documents.get(document_id)

    async def get_document(self, document_id: str) -> Optional[Document]:
        return self.peek(document_id)

    async def list_documents(
        self,
        kb_id: str,
        statuses: Optional[Sequence[EmbeddingStatus]] = None,
    ) -> List[Document]:
        wanted = set(statuses) if statuses is not None else None
        return [
            d
            for d in self._documents.values()
            if d.kb_id == kb_id and (wanted is None or d.embedding_status in wanted)
        ]

    async def update_status(self, document_ids: Sequence[str], status: EmbeddingStatus) -> None:
        for document_id in document_ids:
            document = self._documents.get(document_id)
            if document is None:
                raise NotFoundError(f"Document {document_id} not found", details={"document_id": document_id})
            document.embedding_status = status


class InMemoryChunkStore(ChunkStore):
    """
    Reference ChunkStore kept in a dict.

    Title and source URL come from an optional document store, the same join
    a relational backend would do at query time.
    """

    def __init__(
        self,
        documents: Optional[InMemoryDocumentStore] = None,
        *,
        scorer: BM25Scorer = BM25Scorer(),
    ) -> None:
        self._chunks: Dict[str, ChunkRecord] = {}
        self._documents = documents
        self._scorer = scorer
        self._lock = asyncio.Lock()

    def all_chunks(self) -> List[ChunkRecord]:
        return sorted(self._chunks.values(), key=lambda c: (c.document_id, c.chunk_index))

    async def delete_by_document(self, document_id: str) -> int:
        async with self._lock:
            doomed = [cid for cid, c in self._chunks.items() if c.document_id == document_id]
            for cid in doomed:
                del self._chunks[cid]
        return len(doomed)

    async def insert_chunks(self, records: Sequence[ChunkRecord]) -> None:
        async with self._lock:
            for record in records:
                self._chunks[record.id] = dataclasses.replace(
                    record,
                    embedding=list(record.embedding),
                    lexical_tokens=list(record.lexical_tokens) or tokenize(record.content),
                )

    def _in_scope(self, scope: SearchScope) -> List[ChunkRecord]:
        if scope.kind is ScopeKind.DOCUMENT:
            keep = lambda c: c.document_id == scope.id  # noqa: E731
        else:
            ids = set(scope.ids)
            keep = lambda c: c.kb_id in ids  # noqa: E731
        return [c for c in self.all_chunks() if keep(c)]

    def _scored(self, record: ChunkRecord, score: float) -> ScoredChunk:
        title = url = None
        if self._documents is not None:
            document = self._documents.peek(record.document_id)
            if document is not None:
                title, url = document.title, document.source_url
        return ScoredChunk(
            chunk_id=record.id,
            document_id=record.document_id,
            kb_id=record.kb_id,
            chunk_index=record.chunk_index,
            content=record.content,
            score=score,
            token_count=record.token_count,
            document_title=title,
            source_url=url,
        )

    async def vector_search(
        self,
        scope: SearchScope,
        vector: Sequence[float],
        *,
        threshold: float,
        limit: int,
    ) -> List[ScoredChunk]:
        scored = []
        for record in self._in_scope(scope):
            similarity = cosine_similarity(vector, record.embedding)
            if similarity >= threshold:
                scored.append((similarity, record))
        scored.sort(key=lambda item: (-item[0], item[1].id))
        return [self._scored(record, similarity) for similarity, record in scored[:limit]]

    async def lexical_search(self, scope: SearchScope, query_text: str, *, limit: int) -> List[ScoredChunk]:
        records = self._in_scope(scope)
        ranked = self._scorer.score_corpus(tokenize(query_text), [r.lexical_tokens for r in records])
        return [self._scored(records[pos], score) for pos, score in ranked[:limit]]

    async def count_chunks(self, scope: SearchScope) -> int:
        return len(self._in_scope(scope))
