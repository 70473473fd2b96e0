"""Embedder: wraps BaseEmbeddingClient with credential checks, batching, L2 normalisation and shape checks."""
from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING, List, Optional, Sequence

from ragcore.clients.embedding.registry import EmbeddingRegistry, default_registry
from ragcore.core.exceptions import ConfigurationError, ProviderError

if TYPE_CHECKING:
    from ragcore.clients.embedding import BaseEmbeddingClient, EmbeddingConfig

logger = logging.getLogger(__name__)


class Embedder:
    """Batch embed texts for one resolved EmbeddingConfig.

    The credential is checked on construction, before any client exists, so a
    missing key never reaches the network. Output order always matches input
    order, and every vector must have ``config.dimensions`` components.
    """

    def __init__(
        self,
        config: "EmbeddingConfig",
        *,
        registry: EmbeddingRegistry = default_registry,
        client: Optional["BaseEmbeddingClient"] = None,
        normalize: bool = True,
    ) -> None:
        if not config.has_credential:
            raise ConfigurationError(
                "Embedding API key is not configured",
                details={"provider": config.provider.value},
            )
        self._config = config
        self._normalize = normalize
        self._client = client or registry.build(config)

    @property
    def config(self) -> "EmbeddingConfig":
        return self._config

    @property
    def model_name(self) -> str:
        return self._client.model_name

    @property
    def dimension(self) -> int:
        return self._config.dimensions

    async def embed_texts(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        batch_size = self._config.batch_size
        vectors: List[List[float]] = []
        for start in range(0, len(texts), batch_size):
            batch = list(texts[start : start + batch_size])
            batch_vecs = await self._client.embed(batch)
            if len(batch_vecs) != len(batch):
                raise ProviderError(
                    f"Embedding provider returned {len(batch_vecs)} vectors for {len(batch)} inputs",
                    provider=self._client.provider,
                )
            for vec in batch_vecs:
                if len(vec) != self._config.dimensions:
                    raise ConfigurationError(
                        f"Embedding model '{self._client.model_name}' produced {len(vec)}-d vectors "
                        f"but the configuration expects {self._config.dimensions}-d",
                        details={"model": self._client.model_name, "dimensions": self._config.dimensions},
                    )
            if self._normalize:
                batch_vecs = [_l2_normalize(v) for v in batch_vecs]
            vectors.extend(batch_vecs)
        logger.debug("Embedded %d texts with %s/%s", len(texts), self._client.provider, self._client.model_name)
        return vectors

    async def embed_query(self, text: str) -> List[float]:
        vecs = await self.embed_texts([text])
        return vecs[0]

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "Embedder":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


async def embed(
    texts: Sequence[str],
    config: "EmbeddingConfig",
    *,
    registry: EmbeddingRegistry = default_registry,
) -> List[List[float]]:
    """One-shot form of Embedder(config).embed_texts(texts); the client is closed afterwards."""
    async with Embedder(config, registry=registry) as embedder:
        return await embedder.embed_texts(texts)


async def embed_one(
    text: str,
    config: "EmbeddingConfig",
    *,
    registry: EmbeddingRegistry = default_registry,
) -> List[float]:
    vectors = await embed([text], config, registry=registry)
    return vectors[0]


def _l2_normalize(vec: Sequence[float]) -> List[float]:
    norm = math.sqrt(sum(x * x for x in vec))
    if norm < 1e-12:
        return list(vec)
    return [x / norm for x in vec]
