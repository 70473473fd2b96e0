"""
Aliyun DashScope embedding provider.

The native endpoint takes ``{"model", "input": {"texts": [...]}}`` and answers
``{"output": {"embeddings": [{"text_index", "embedding"}]}}``. When the
configured base URL points at DashScope's compatible-mode gateway the
OpenAI-compatible client is used instead.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ragcore.clients.embedding.base import BaseEmbeddingClient
from ragcore.clients.embedding.config import EmbeddingConfig
from ragcore.clients.embedding.providers.openai import OpenAIEmbeddingClient, openai_builder
from ragcore.core.exceptions import ProviderError

logger = logging.getLogger(__name__)

DASHSCOPE_EMBEDDING_URL = (
    "https://dashscope.aliyuncs.com/api/v1/services/embeddings/text-embedding/text-embedding"
)


class AliyunEmbeddingClient(BaseEmbeddingClient):
    """DashScope native text-embedding API over httpx."""

    def __init__(
        self,
        model: str,
        *,
        api_key: str,
        url: str = DASHSCOPE_EMBEDDING_URL,
        timeout: float = 60.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._model = model
        self._api_key = api_key
        self._url = url
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    @property
    def provider(self) -> str:
        return "aliyun"

    @property
    def model_name(self) -> str:
        return self._model

    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        try:
            response = await self._client.post(
                self._url,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json={"model": self._model, "input": {"texts": list(texts)}},
            )
        except httpx.HTTPError as exc:
            raise ProviderError(f"Aliyun embeddings request failed: {exc}", provider="aliyun", cause=exc) from exc

        if response.status_code >= 400:
            raise ProviderError(
                f"Aliyun API error ({response.status_code}): {response.text[:500]}",
                provider="aliyun",
                status_code=response.status_code,
            )
        try:
            payload: Dict[str, Any] = response.json()
            embeddings = payload["output"]["embeddings"]
            ordered = sorted(embeddings, key=lambda e: e["text_index"])
            return [list(e["embedding"]) for e in ordered]
        except (ValueError, KeyError, TypeError) as exc:
            raise ProviderError(
                "Invalid response from Aliyun API",
                provider="aliyun",
                status_code=response.status_code,
                cause=exc,
            ) from exc

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()


def uses_compatible_mode(config: EmbeddingConfig) -> bool:
    return "compatible-mode" in (config.base_url or "")


def aliyun_builder(config: EmbeddingConfig) -> BaseEmbeddingClient:
    if uses_compatible_mode(config):
        logger.debug("Aliyun base URL is compatible-mode, using OpenAI-compatible client")
        client: OpenAIEmbeddingClient = openai_builder(config)
        return client
    return AliyunEmbeddingClient(
        model=config.model,
        api_key=config.resolved_api_key,
        timeout=config.timeout,
    )
