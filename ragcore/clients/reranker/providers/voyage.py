"""Voyage AI rerank API; counts via ``top_k`` and answers under ``data``."""
from __future__ import annotations

from ragcore.clients.reranker.base import HttpRerankClient
from ragcore.clients.reranker.config import RerankerConfig


class VoyageRerankClient(HttpRerankClient):
    provider_name = "voyage"
    default_url = "https://api.voyageai.com/v1/rerank"
    default_model = "rerank-2"
    top_field = "top_k"
    results_field = "data"


def voyage_builder(config: RerankerConfig) -> VoyageRerankClient:
    return VoyageRerankClient(
        api_key=config.api_key,
        model=config.model,
        base_url=config.base_url,
        timeout=config.timeout,
    )
