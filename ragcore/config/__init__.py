"""
Infrastructure config loaded from env: load_postgres_config(), load_qdrant_config().

Embedding and reranker settings live next to their clients
(ragcore.clients.embedding.config, ragcore.clients.reranker.config).
"""
from ragcore.config.postgres import PostgresConfig, load_postgres_config
from ragcore.config.qdrant import QdrantConfig, load_qdrant_config
from ragcore.config.secrets import MASKED_API_KEY, is_credential, mask_api_key

__all__ = [
    "PostgresConfig",
    "load_postgres_config",
    "QdrantConfig",
    "load_qdrant_config",
    "MASKED_API_KEY",
    "is_credential",
    "mask_api_key",
]
