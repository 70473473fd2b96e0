"""OpenAI-compatible embedding provider (openai, azure, local, aliyun compatible-mode)."""
from __future__ import annotations

import logging
from typing import List, Optional, Sequence

import openai
from openai import AsyncOpenAI

from ragcore.clients.embedding.base import BaseEmbeddingClient
from ragcore.clients.embedding.config import EmbeddingConfig
from ragcore.core.exceptions import ProviderError

logger = logging.getLogger(__name__)


class OpenAIEmbeddingClient(BaseEmbeddingClient):
    """Embeddings API client; any server speaking the OpenAI embeddings protocol works."""

    def __init__(
        self,
        model: str = "text-embedding-3-small",
        *,
        api_key: str,
        base_url: Optional[str] = None,
        timeout: float = 60.0,
        provider: str = "openai",
        client: Optional[AsyncOpenAI] = None,
    ) -> None:
        self._model = model
        self._provider = provider
        # No SDK-level retries; retry policy belongs to the caller.
        self._client = client or AsyncOpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
        )

    @property
    def provider(self) -> str:
        return self._provider

    @property
    def model_name(self) -> str:
        return self._model

    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        try:
            response = await self._client.embeddings.create(
                model=self._model,
                input=list(texts),
                encoding_format="float",
            )
        except openai.APIStatusError as exc:
            raise ProviderError(
                f"{self._provider} embeddings request rejected: {exc.message}",
                provider=self._provider,
                status_code=exc.status_code,
                cause=exc,
            ) from exc
        except openai.APIError as exc:
            raise ProviderError(
                f"{self._provider} embeddings request failed: {exc}",
                provider=self._provider,
                cause=exc,
            ) from exc
        # Servers may return items out of order; index is authoritative.
        items = sorted(response.data, key=lambda item: item.index)
        return [list(item.embedding) for item in items]

    async def aclose(self) -> None:
        await self._client.close()


def openai_builder(config: EmbeddingConfig) -> OpenAIEmbeddingClient:
    return OpenAIEmbeddingClient(
        model=config.model,
        api_key=config.resolved_api_key,
        base_url=config.base_url or None,
        timeout=config.timeout,
        provider=config.provider.value,
    )
