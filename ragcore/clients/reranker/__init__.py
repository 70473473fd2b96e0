"""Rerank clients: base, config, registry. Used through ragcore.rag.reranker.Reranker."""
from .base import BaseRerankClient, HttpRerankClient, RerankHit
from .config import RerankerConfig, RerankerProvider, load_reranker_config
from .registry import RerankerRegistry, default_registry

__all__ = [
    "BaseRerankClient",
    "HttpRerankClient",
    "RerankHit",
    "RerankerConfig",
    "RerankerProvider",
    "load_reranker_config",
    "RerankerRegistry",
    "default_registry",
]
