"""
ragcore.infra.database – PostgreSQL async engine, session, models, repositories and SqlDocumentStore.
"""
from ragcore.infra.database.document_store import SqlDocumentStore
from ragcore.infra.database.engine import build_engine, build_session_factory, close_engine, init_db
from ragcore.infra.database.models import Base, KnowledgeDocument
from ragcore.infra.database.repositories import BaseRepository, KnowledgeDocumentRepository

__all__ = [
    "SqlDocumentStore",
    "build_engine",
    "build_session_factory",
    "close_engine",
    "init_db",
    "Base",
    "KnowledgeDocument",
    "BaseRepository",
    "KnowledgeDocumentRepository",
]
