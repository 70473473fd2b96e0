"""Storage contracts the RAG core consumes: chunks with vectors, and document status."""
from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ragcore.rag.types import ChunkRecord, Document, EmbeddingStatus, ScoredChunk, SearchScope


class ChunkStore(ABC):
    """Persists chunk records and answers both retrieval legs for a scope."""

    @abstractmethod
    async def delete_by_document(self, document_id: str) -> int:
        """Remove every chunk of a document. Returns the number removed; 0 is fine."""
        ...

    async def delete_by_documents(self, document_ids: Sequence[str]) -> int:
        removed = 0
        for document_id in document_ids:
            removed += await self.delete_by_document(document_id)
        return removed

    @abstractmethod
    async def insert_chunks(self, records: Sequence[ChunkRecord]) -> None:
        """Bulk insert. All-or-nothing per call as far as the backend allows."""
        ...

    @abstractmethod
    async def vector_search(
        self,
        scope: SearchScope,
        vector: Sequence[float],
        *,
        threshold: float,
        limit: int,
    ) -> List[ScoredChunk]:
        """Chunks with cosine similarity >= threshold, best first, at most limit."""
        ...

    @abstractmethod
    async def lexical_search(self, scope: SearchScope, query_text: str, *, limit: int) -> List[ScoredChunk]:
        """Chunks with a positive lexical score, best first, at most limit."""
        ...

    @abstractmethod
    async def count_chunks(self, scope: SearchScope) -> int:
        ...


class DocumentStore(ABC):
    """Document lookup and the embedding-status update used by the orchestrator."""

    @abstractmethod
    async def get_document(self, document_id: str) -> Optional[Document]:
        ...

    @abstractmethod
    async def list_documents(
        self,
        kb_id: str,
        statuses: Optional[Sequence[EmbeddingStatus]] = None,
    ) -> List[Document]:
        """Documents of a knowledge base, optionally filtered by status, in a stable order."""
        ...

    @abstractmethod
    async def update_status(self, document_ids: Sequence[str], status: EmbeddingStatus) -> None:
        ...
