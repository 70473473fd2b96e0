"""
Embedding provider registry: map EmbeddingProvider -> build client from EmbeddingConfig.
"""
from __future__ import annotations

from typing import Callable, Dict, List

from ragcore.core.exceptions import ConfigurationError

from .base import BaseEmbeddingClient
from .config import EmbeddingConfig, EmbeddingProvider

EmbeddingBuilder = Callable[[EmbeddingConfig], BaseEmbeddingClient]


class EmbeddingRegistry:
    """Maps provider id to a builder that takes the resolved config and returns a client."""

    def __init__(self) -> None:
        self._builders: Dict[EmbeddingProvider, EmbeddingBuilder] = {}

    def register(self, provider: EmbeddingProvider | str, builder: EmbeddingBuilder) -> None:
        """Register (or replace) the builder for this provider."""
        self._builders[EmbeddingProvider(provider)] = builder

    def get(self, provider: EmbeddingProvider | str) -> EmbeddingBuilder | None:
        try:
            return self._builders.get(EmbeddingProvider(provider))
        except ValueError:
            return None

    def providers(self) -> List[str]:
        return [p.value for p in self._builders]

    def build(self, config: EmbeddingConfig) -> BaseEmbeddingClient:
        """Build a client for config.provider. Raises ConfigurationError if no builder is registered."""
        builder = self._builders.get(config.provider)
        if builder is None:
            raise ConfigurationError(
                f"Unknown embedding provider: {config.provider.value!r}",
                details={"registered": self.providers()},
            )
        return builder(config)


default_registry = EmbeddingRegistry()

from ragcore.clients.embedding.providers.aliyun import aliyun_builder  # noqa: E402
from ragcore.clients.embedding.providers.gemini import gemini_builder  # noqa: E402
from ragcore.clients.embedding.providers.openai import openai_builder  # noqa: E402

default_registry.register(EmbeddingProvider.OPENAI, openai_builder)
default_registry.register(EmbeddingProvider.AZURE, openai_builder)
default_registry.register(EmbeddingProvider.LOCAL, openai_builder)
default_registry.register(EmbeddingProvider.ALIYUN, aliyun_builder)
default_registry.register(EmbeddingProvider.GEMINI, gemini_builder)
