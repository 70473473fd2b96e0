"""Rerank provider implementations. Registered on default_registry by ragcore.clients.reranker.registry."""
from ragcore.clients.reranker.providers.cohere import CohereRerankClient, cohere_builder
from ragcore.clients.reranker.providers.jina import JinaRerankClient, jina_builder
from ragcore.clients.reranker.providers.voyage import VoyageRerankClient, voyage_builder

__all__ = [
    "CohereRerankClient",
    "cohere_builder",
    "JinaRerankClient",
    "jina_builder",
    "VoyageRerankClient",
    "voyage_builder",
]
