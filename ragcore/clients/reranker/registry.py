"""
Rerank provider registry: map RerankerProvider -> build client from RerankerConfig.

``local-bge`` has no builder; Reranker treats a missing builder as the no-op backend.
"""
from __future__ import annotations

from typing import Callable, Dict

from .base import BaseRerankClient
from .config import RerankerConfig, RerankerProvider

RerankBuilder = Callable[[RerankerConfig], BaseRerankClient]


class RerankerRegistry:
    def __init__(self) -> None:
        self._builders: Dict[RerankerProvider, RerankBuilder] = {}

    def register(self, provider: RerankerProvider | str, builder: RerankBuilder) -> None:
        self._builders[RerankerProvider(provider)] = builder

    def get(self, provider: RerankerProvider | str) -> RerankBuilder | None:
        return self._builders.get(RerankerProvider(provider))

    def build(self, config: RerankerConfig) -> BaseRerankClient | None:
        """Build the remote client for config.provider, or None when it has no remote backend."""
        builder = self._builders.get(config.provider)
        return builder(config) if builder is not None else None


default_registry = RerankerRegistry()

from ragcore.clients.reranker.providers.cohere import cohere_builder  # noqa: E402
from ragcore.clients.reranker.providers.jina import jina_builder  # noqa: E402
from ragcore.clients.reranker.providers.voyage import voyage_builder  # noqa: E402

default_registry.register(RerankerProvider.COHERE, cohere_builder)
default_registry.register(RerankerProvider.JINA, jina_builder)
default_registry.register(RerankerProvider.VOYAGE, voyage_builder)
