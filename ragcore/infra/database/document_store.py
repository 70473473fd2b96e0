"""SqlDocumentStore: DocumentStore over the knowledge_documents table."""
from __future__ import annotations

import logging
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional, Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ragcore.core.exceptions import NotFoundError, PersistenceError
from ragcore.infra.chunk_store.base import DocumentStore
from ragcore.infra.database.models.knowledge import KnowledgeDocument
from ragcore.infra.database.repositories.knowledge import KnowledgeDocumentRepository
from ragcore.rag.types import Document, EmbeddingStatus

logger = logging.getLogger(__name__)


def _parse_id(document_id: str) -> Optional[uuid.UUID]:
    try:
        return uuid.UUID(str(document_id))
    except ValueError:
        return None


def to_document(row: KnowledgeDocument) -> Document:
    return Document(
        id=str(row.id),
        kb_id=row.kb_id,
        title=row.title,
        content=row.content,
        content_hash=row.content_hash,
        embedding_status=EmbeddingStatus(row.embedding_status),
        source_url=row.source_url,
    )


class SqlDocumentStore(DocumentStore):
    """One short transaction per call; SQLAlchemy failures surface as PersistenceError."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def _repository(self) -> AsyncIterator[KnowledgeDocumentRepository]:
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    yield KnowledgeDocumentRepository(session)
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Document store operation failed: {exc}", cause=exc) from exc

    async def get_document(self, document_id: str) -> Optional[Document]:
        pk = _parse_id(document_id)
        if pk is None:
            return None
        async with self._repository() as repo:
            row = await repo.get_by_id(pk)
            return to_document(row) if row is not None else None

    async def list_documents(
        self,
        kb_id: str,
        statuses: Optional[Sequence[EmbeddingStatus]] = None,
    ) -> List[Document]:
        wanted = [EmbeddingStatus(s).value for s in statuses] if statuses is not None else None
        async with self._repository() as repo:
            rows = await repo.list_by_kb(kb_id, wanted)
            return [to_document(r) for r in rows]

    async def update_status(self, document_ids: Sequence[str], status: EmbeddingStatus) -> None:
        pks = [_parse_id(i) for i in document_ids]
        missing = [i for i, pk in zip(document_ids, pks) if pk is None]
        if missing:
            raise NotFoundError("Unknown document ids", details={"document_ids": missing})
        async with self._repository() as repo:
            updated = await repo.set_status(pks, EmbeddingStatus(status).value)
        if updated != len(set(pks)):
            raise NotFoundError(
                f"Only {updated} of {len(set(pks))} documents found",
                details={"document_ids": list(document_ids)},
            )
        logger.debug("Set %d documents to %s", updated, EmbeddingStatus(status).value)
