"""Qdrant vector store for chunk vectors and payloads."""
from ragcore.infra.vectorstore.client import QdrantManager, close_qdrant_manager, get_qdrant_manager
from ragcore.infra.vectorstore.collections import (
    CHUNK_PAYLOAD_SCHEMA,
    PayloadField,
    build_chunk_payload,
    ensure_collection_exists,
)

__all__ = [
    "QdrantManager",
    "get_qdrant_manager",
    "close_qdrant_manager",
    "CHUNK_PAYLOAD_SCHEMA",
    "PayloadField",
    "build_chunk_payload",
    "ensure_collection_exists",
]
