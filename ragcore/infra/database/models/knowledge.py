"""
KnowledgeDocument: source text of one document in a knowledge base plus its embedding status.

Chunks and vectors live in the chunk store, keyed by the document id.
"""
from __future__ import annotations

import uuid
from typing import Optional

from sqlalchemy import Index, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from ragcore.infra.database.models.base import Base, TimestampMixin, _uuid_pk
from ragcore.rag.types import EmbeddingStatus


class KnowledgeDocument(Base, TimestampMixin):
    __tablename__ = "knowledge_documents"
    __table_args__ = (
        Index("ix_knowledge_documents_kb_id", "kb_id"),
        Index("ix_knowledge_documents_kb_status", "kb_id", "embedding_status"),
    )

    id: Mapped[uuid.UUID] = _uuid_pk()
    kb_id: Mapped[str] = mapped_column(String(64), nullable=False)
    title: Mapped[str] = mapped_column(String(512), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False, default="")
    content_hash: Mapped[str] = mapped_column(String(16), nullable=False, default="")
    embedding_status: Mapped[str] = mapped_column(
        String(16),
        nullable=False,
        default=EmbeddingStatus.PENDING.value,
        server_default=EmbeddingStatus.PENDING.value,
    )
    source_url: Mapped[Optional[str]] = mapped_column(String(2048), nullable=True)

    def __repr__(self) -> str:
        return f"KnowledgeDocument(id={self.id!r}, kb_id={self.kb_id!r}, status={self.embedding_status!r})"
