"""Rerank client interface: (query, document texts) -> scored input positions."""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

import httpx

from ragcore.core.exceptions import ProviderError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RerankHit:
    """One backend verdict: position in the submitted documents and its relevance."""

    index: int
    relevance_score: float


class BaseRerankClient(ABC):
    @property
    @abstractmethod
    def provider(self) -> str:
        ...

    @abstractmethod
    async def rerank(self, query: str, documents: Sequence[str], *, top_n: int) -> List[RerankHit]:
        """Score documents against query. Returns at most top_n hits, most relevant first."""
        ...

    async def aclose(self) -> None:
        return None


class HttpRerankClient(BaseRerankClient):
    """
    Shared JSON-over-HTTP rerank call.

    Subclasses set the endpoint, default model, the request field carrying the
    result count, and the response field holding ``{index, relevance_score}`` items.
    """

    provider_name: str = ""
    default_url: str = ""
    default_model: str = ""
    top_field: str = "top_n"
    results_field: str = "results"

    def __init__(
        self,
        *,
        api_key: str,
        model: Optional[str] = None,
        base_url: Optional[str] = None,
        timeout: float = 30.0,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self._api_key = api_key
        self._model = model or self.default_model
        self._url = base_url or self.default_url
        self._client = http_client or httpx.AsyncClient(timeout=timeout)
        self._owns_client = http_client is None

    @property
    def provider(self) -> str:
        return self.provider_name

    @property
    def model_name(self) -> str:
        return self._model

    def build_payload(self, query: str, documents: Sequence[str], top_n: int) -> Dict[str, Any]:
        return {
            "model": self._model,
            "query": query,
            "documents": list(documents),
            self.top_field: top_n,
        }

    async def rerank(self, query: str, documents: Sequence[str], *, top_n: int) -> List[RerankHit]:
        if not documents:
            return []
        try:
            response = await self._client.post(
                self._url,
                headers={"Authorization": f"Bearer {self._api_key}"},
                json=self.build_payload(query, documents, top_n),
            )
        except httpx.HTTPError as exc:
            raise ProviderError(
                f"{self.provider_name} rerank request failed: {exc}", provider=self.provider_name, cause=exc
            ) from exc
        if response.status_code >= 400:
            raise ProviderError(
                f"{self.provider_name} rerank failed ({response.status_code}): {response.text[:500]}",
                provider=self.provider_name,
                status_code=response.status_code,
            )
        try:
            items = response.json()[self.results_field]
            hits = [RerankHit(index=int(i["index"]), relevance_score=float(i["relevance_score"])) for i in items]
        except (ValueError, KeyError, TypeError) as exc:
            raise ProviderError(
                f"Invalid response from {self.provider_name} rerank API",
                provider=self.provider_name,
                status_code=response.status_code,
                cause=exc,
            ) from exc
        logger.debug("%s reranked %d documents -> %d hits", self.provider_name, len(documents), len(hits))
        return hits

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()
