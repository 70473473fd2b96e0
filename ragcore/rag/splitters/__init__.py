"""Splitters: text -> list of ChunkPiece. Base helpers + separator-aware implementation."""
from ragcore.rag.splitters.base import BaseSplitter, content_hash, estimate_tokens
from ragcore.rag.splitters.separator import DEFAULT_SEPARATORS, SeparatorSplitter, chunk_document

__all__ = [
    "BaseSplitter",
    "content_hash",
    "estimate_tokens",
    "DEFAULT_SEPARATORS",
    "SeparatorSplitter",
    "chunk_document",
]
