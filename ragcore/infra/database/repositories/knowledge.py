"""Repository for KnowledgeDocument."""
from __future__ import annotations

from typing import ClassVar, List, Optional, Sequence
from uuid import UUID

from sqlalchemy import select, update

from ragcore.infra.database.models.knowledge import KnowledgeDocument
from ragcore.infra.database.repositories.base import BaseRepository


class KnowledgeDocumentRepository(BaseRepository[KnowledgeDocument]):
    model: ClassVar[type] = KnowledgeDocument

    async def list_by_kb(
        self,
        kb_id: str,
        statuses: Optional[Sequence[str]] = None,
    ) -> List[KnowledgeDocument]:
        stmt = select(KnowledgeDocument).where(KnowledgeDocument.kb_id == kb_id)
        if statuses is not None:
            stmt = stmt.where(KnowledgeDocument.embedding_status.in_(list(statuses)))
        stmt = stmt.order_by(KnowledgeDocument.created_at, KnowledgeDocument.id)
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def set_status(self, doc_ids: Sequence[UUID], status: str) -> int:
        if not doc_ids:
            return 0
        stmt = (
            update(KnowledgeDocument)
            .where(KnowledgeDocument.id.in_(list(doc_ids)))
            .values(embedding_status=status)
        )
        result = await self.session.execute(stmt)
        return result.rowcount or 0
