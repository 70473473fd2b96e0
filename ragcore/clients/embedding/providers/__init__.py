"""Embedding provider implementations. Registered on default_registry by ragcore.clients.embedding.registry."""
from ragcore.clients.embedding.providers.aliyun import AliyunEmbeddingClient, aliyun_builder
from ragcore.clients.embedding.providers.gemini import GeminiEmbeddingClient, gemini_builder
from ragcore.clients.embedding.providers.openai import OpenAIEmbeddingClient, openai_builder

__all__ = [
    "AliyunEmbeddingClient",
    "aliyun_builder",
    "GeminiEmbeddingClient",
    "gemini_builder",
    "OpenAIEmbeddingClient",
    "openai_builder",
]
