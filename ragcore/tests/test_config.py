"""Unit tests for configuration loading and validation."""
from __future__ import annotations

import unittest

from ragcore.clients.embedding import DEFAULT_EMBEDDING_CONFIG, EmbeddingConfig, EmbeddingProvider, load_embedding_config
from ragcore.clients.reranker import RerankerConfig, RerankerProvider, load_reranker_config
from ragcore.config import MASKED_API_KEY, PostgresConfig, QdrantConfig, is_credential, mask_api_key
from ragcore.core.exceptions import ConfigurationError


class TestSecrets(unittest.TestCase):
    def test_is_credential(self) -> None:
        self.assertTrue(is_credential("sk-abc"))
        self.assertFalse(is_credential(""))
        self.assertFalse(is_credential("   "))
        self.assertFalse(is_credential(None))
        self.assertFalse(is_credential(MASKED_API_KEY))
        self.assertFalse(is_credential(mask_api_key("sk-1234567890abcd")))

    def test_mask_api_key(self) -> None:
        self.assertEqual(mask_api_key("sk-1234567890abcd"), "********abcd")
        self.assertEqual(mask_api_key("short"), MASKED_API_KEY)
        self.assertEqual(mask_api_key(""), "")


class TestEmbeddingConfig(unittest.TestCase):
    def test_defaults(self) -> None:
        config = DEFAULT_EMBEDDING_CONFIG
        self.assertEqual(config.provider, EmbeddingProvider.OPENAI)
        self.assertEqual(config.base_url, "https://api.openai.com/v1")
        self.assertEqual(config.model, "text-embedding-3-small")
        self.assertEqual((config.dimensions, config.batch_size), (1536, 100))
        self.assertEqual((config.chunk_size, config.chunk_overlap), (512, 100))
        self.assertFalse(config.has_credential)

    def test_provider_string_is_coerced(self) -> None:
        self.assertIs(EmbeddingConfig(provider="aliyun").provider, EmbeddingProvider.ALIYUN)

    def test_invalid_values(self) -> None:
        with self.assertRaises(ConfigurationError):
            EmbeddingConfig(provider="nope")
        with self.assertRaises(ConfigurationError):
            EmbeddingConfig(chunk_size=100, chunk_overlap=100)
        with self.assertRaises(ConfigurationError):
            EmbeddingConfig(batch_size=0)
        with self.assertRaises(ConfigurationError):
            EmbeddingConfig(model=" ")

    def test_resolved_api_key(self) -> None:
        self.assertEqual(EmbeddingConfig(api_key=" sk-x ").resolved_api_key, "sk-x")
        self.assertEqual(EmbeddingConfig(provider="local", api_key="").resolved_api_key, "local")
        with self.assertRaises(ConfigurationError):
            EmbeddingConfig(api_key="").resolved_api_key

    def test_to_dict_masks_key(self) -> None:
        data = EmbeddingConfig(api_key="sk-1234567890abcd").to_dict()
        self.assertEqual(data["api_key"], "********abcd")
        self.assertEqual(data["provider"], "openai")
        self.assertEqual(EmbeddingConfig(api_key="sk-1234567890abcd").to_dict(mask=False)["api_key"], "sk-1234567890abcd")


class TestLoadEmbeddingConfig(unittest.TestCase):
    def test_environment(self) -> None:
        config = load_embedding_config(
            environ={
                "EMBEDDING_PROVIDER": "aliyun",
                "EMBEDDING_API_KEY": "ak-env",
                "EMBEDDING_MODEL": "text-embedding-v3",
                "EMBEDDING_DIMENSIONS": "1024",
                "EMBEDDING_BATCH_SIZE": "10",
            }
        )
        self.assertEqual(config.provider, EmbeddingProvider.ALIYUN)
        self.assertEqual(config.api_key, "ak-env")
        self.assertEqual(config.model, "text-embedding-v3")
        self.assertEqual((config.dimensions, config.batch_size), (1024, 10))

    def test_openai_key_fallback(self) -> None:
        self.assertEqual(load_embedding_config(environ={"OPENAI_API_KEY": "sk-openai"}).api_key, "sk-openai")

    def test_persisted_overrides_win_and_accept_camel_case(self) -> None:
        config = load_embedding_config(
            {"apiKey": "sk-saved", "chunkSize": "256", "chunkOverlap": 32, "baseUrl": "http://localhost:8080/v1"},
            environ={"EMBEDDING_API_KEY": "sk-env", "EMBEDDING_CHUNK_SIZE": "1024"},
        )
        self.assertEqual(config.api_key, "sk-saved")
        self.assertEqual((config.chunk_size, config.chunk_overlap), (256, 32))
        self.assertEqual(config.base_url, "http://localhost:8080/v1")

    def test_masked_key_never_replaces_real_key(self) -> None:
        config = load_embedding_config({"api_key": MASKED_API_KEY, "model": "m"}, environ={"EMBEDDING_API_KEY": "sk-env"})
        self.assertEqual(config.api_key, "sk-env")
        self.assertEqual(config.model, "m")

    def test_defaults_parameter(self) -> None:
        saved = EmbeddingConfig(api_key="sk-saved", model="saved-model")
        config = load_embedding_config({"apiKey": "", "dimensions": 256}, environ={}, defaults=saved)
        self.assertEqual(config.api_key, "sk-saved")
        self.assertEqual(config.model, "saved-model")
        self.assertEqual(config.dimensions, 256)

    def test_bad_number(self) -> None:
        with self.assertRaises(ConfigurationError):
            load_embedding_config({"dimensions": "many"}, environ={})

    def test_unknown_keys_are_ignored(self) -> None:
        config = load_embedding_config({"somethingElse": 1}, environ={})
        self.assertEqual(config, DEFAULT_EMBEDDING_CONFIG)


class TestRerankerConfig(unittest.TestCase):
    def test_defaults_to_local_bge(self) -> None:
        config = load_reranker_config(environ={})
        self.assertEqual(config.provider, RerankerProvider.LOCAL_BGE)
        self.assertFalse(config.has_credential)

    def test_environment_and_overrides(self) -> None:
        config = load_reranker_config(
            {"apiKey": MASKED_API_KEY, "model": "rerank-v3.5"},
            environ={"RERANKER_PROVIDER": "cohere", "RERANKER_API_KEY": "co-key", "RERANKER_TIMEOUT": "5"},
        )
        self.assertEqual(config.provider, RerankerProvider.COHERE)
        self.assertEqual(config.api_key, "co-key")
        self.assertEqual(config.model, "rerank-v3.5")
        self.assertEqual(config.timeout, 5.0)

    def test_invalid_provider(self) -> None:
        with self.assertRaises(ConfigurationError):
            RerankerConfig(provider="bge-large")


class TestStoreConfigs(unittest.TestCase):
    def test_qdrant_from_env(self) -> None:
        config = QdrantConfig.from_env(environ={"QDRANT_URL": "http://qdrant:6333/", "QDRANT_VECTOR_SIZE": "768"})
        self.assertEqual(config.url, "http://qdrant:6333")
        self.assertEqual(config.vector_size, 768)
        self.assertEqual(config.collection_name, "document_chunks")
        self.assertIsNone(config.api_key)

    def test_qdrant_validation(self) -> None:
        with self.assertRaises(ConfigurationError):
            QdrantConfig(url="qdrant:6333")
        with self.assertRaises(ConfigurationError):
            QdrantConfig(url="http://q", distance="Manhattan")

    def test_postgres_from_env(self) -> None:
        config = PostgresConfig.from_env(environ={"DATABASE_URL": "postgres://u:p@db/rag", "DB_ECHO": "true"})
        self.assertEqual(config.url, "postgres://u:p@db/rag")
        self.assertTrue(config.echo)
        self.assertEqual(config.pool_size, 10)

    def test_postgres_validation(self) -> None:
        with self.assertRaises(ConfigurationError):
            PostgresConfig(url="mysql://db")
        with self.assertRaises(ConfigurationError):
            PostgresConfig(url="postgresql://db", pool_size=0)


if __name__ == "__main__":
    unittest.main()
