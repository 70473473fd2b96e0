"""Jina AI rerank API."""
from __future__ import annotations

from ragcore.clients.reranker.base import HttpRerankClient
from ragcore.clients.reranker.config import RerankerConfig


class JinaRerankClient(HttpRerankClient):
    provider_name = "jina"
    default_url = "https://api.jina.ai/v1/rerank"
    default_model = "jina-reranker-v2-base-multilingual"


def jina_builder(config: RerankerConfig) -> JinaRerankClient:
    return JinaRerankClient(
        api_key=config.api_key,
        model=config.model,
        base_url=config.base_url,
        timeout=config.timeout,
    )
