"""
Embedding clients: base, config, registry.

Provider registration: default_registry.register(provider, builder).
Callers go through ragcore.rag.embedder.Embedder, which owns batching and checks.
"""
from .base import BaseEmbeddingClient
from .config import (
    DEFAULT_EMBEDDING_CONFIG,
    EmbeddingConfig,
    EmbeddingProvider,
    load_embedding_config,
)
from .registry import EmbeddingRegistry, default_registry

__all__ = [
    "BaseEmbeddingClient",
    "DEFAULT_EMBEDDING_CONFIG",
    "EmbeddingConfig",
    "EmbeddingProvider",
    "load_embedding_config",
    "EmbeddingRegistry",
    "default_registry",
]
