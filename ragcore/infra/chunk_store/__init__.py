"""Chunk and document store contracts plus in-memory and Qdrant implementations."""
from ragcore.infra.chunk_store.base import ChunkStore, DocumentStore
from ragcore.infra.chunk_store.memory import InMemoryChunkStore, InMemoryDocumentStore, cosine_similarity
from ragcore.infra.chunk_store.qdrant import QdrantChunkStore, scope_condition

__all__ = [
    "ChunkStore",
    "DocumentStore",
    "InMemoryChunkStore",
    "InMemoryDocumentStore",
    "cosine_similarity",
    "QdrantChunkStore",
    "scope_condition",
]
