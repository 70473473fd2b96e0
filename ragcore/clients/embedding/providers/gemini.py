"""Google Gemini embedding provider: BaseEmbeddingClient implementation + registry builder."""
from __future__ import annotations

from typing import Any, List, Optional, Sequence

from google import genai
from google.genai import errors as genai_errors
from google.genai import types as genai_types

from ragcore.clients.embedding.base import BaseEmbeddingClient
from ragcore.clients.embedding.config import EmbeddingConfig
from ragcore.core.exceptions import ProviderError


class GeminiEmbeddingClient(BaseEmbeddingClient):
    """Google Gemini embedding client (text-embedding-004, gemini-embedding-001, ...)."""

    def __init__(
        self,
        model: str = "text-embedding-004",
        *,
        api_key: str,
        dimensions: Optional[int] = None,
        client: Optional[Any] = None,
    ) -> None:
        self._model = model
        self._dimensions = dimensions
        self._client = client or genai.Client(api_key=api_key)

    @property
    def provider(self) -> str:
        return "gemini"

    @property
    def model_name(self) -> str:
        return self._model

    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        if not texts:
            return []
        config = (
            genai_types.EmbedContentConfig(output_dimensionality=self._dimensions)
            if self._dimensions
            else None
        )
        try:
            response = await self._client.aio.models.embed_content(
                model=self._model,
                contents=list(texts),
                config=config,
            )
        except genai_errors.APIError as exc:
            raise ProviderError(
                f"Gemini embeddings request rejected: {exc.message}",
                provider="gemini",
                status_code=exc.code,
                cause=exc,
            ) from exc
        return [list(e.values or []) for e in (response.embeddings or [])]


def gemini_builder(config: EmbeddingConfig) -> GeminiEmbeddingClient:
    return GeminiEmbeddingClient(
        model=config.model,
        api_key=config.resolved_api_key,
        dimensions=config.dimensions,
    )
