"""Async repositories over the ORM models."""
from ragcore.infra.database.repositories.base import BaseRepository
from ragcore.infra.database.repositories.knowledge import KnowledgeDocumentRepository

__all__ = ["BaseRepository", "KnowledgeDocumentRepository"]
