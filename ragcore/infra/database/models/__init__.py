"""
ragcore.infra.database.models – SQLAlchemy 2.0 ORM models.
"""
from ragcore.infra.database.models.base import Base, TimestampMixin, _uuid_pk
from ragcore.infra.database.models.knowledge import KnowledgeDocument

__all__ = [
    "Base",
    "TimestampMixin",
    "_uuid_pk",
    "KnowledgeDocument",
]
