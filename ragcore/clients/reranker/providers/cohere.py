"""Cohere rerank API (/v1/rerank)."""
from __future__ import annotations

from typing import Any, Dict, Sequence

from ragcore.clients.reranker.base import HttpRerankClient
from ragcore.clients.reranker.config import RerankerConfig


class CohereRerankClient(HttpRerankClient):
    provider_name = "cohere"
    default_url = "https://api.cohere.ai/v1/rerank"
    default_model = "rerank-english-v3.0"

    def build_payload(self, query: str, documents: Sequence[str], top_n: int) -> Dict[str, Any]:
        payload = super().build_payload(query, documents, top_n)
        payload["return_documents"] = False
        return payload


def cohere_builder(config: RerankerConfig) -> CohereRerankClient:
    return CohereRerankClient(
        api_key=config.api_key,
        model=config.model,
        base_url=config.base_url,
        timeout=config.timeout,
    )
