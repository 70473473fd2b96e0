"""HTTP tests for the search and embedding routers (FastAPI TestClient, no lifespan wiring)."""
from __future__ import annotations

import unittest
from typing import List, Sequence
from unittest.mock import AsyncMock, MagicMock

from fastapi.testclient import TestClient

from ragcore.api.main import create_app
from ragcore.clients.embedding import BaseEmbeddingClient, EmbeddingConfig, EmbeddingProvider, EmbeddingRegistry
from ragcore.core.exceptions import ProviderError
from ragcore.infra.chunk_store import InMemoryChunkStore, InMemoryDocumentStore
from ragcore.rag.embedder import Embedder
from ragcore.rag.orchestrator import EmbeddingOrchestrator
from ragcore.rag.types import (
    BatchEmbedResult,
    Document,
    EmbedDocumentResult,
    EmbeddingStats,
    EmbeddingStatus,
    RankedChunk,
    SearchType,
)
from ragcore.services.rag_service import EmbeddingTestResult, RAGService

KEYWORDS = ("hybrid", "vector", "lexical")


class KeywordClient(BaseEmbeddingClient):
    """One dimension per keyword plus a constant, so similarity follows shared keywords."""

    def __init__(self, config: EmbeddingConfig) -> None:
        self.config = config

    @property
    def provider(self) -> str:
        return "keyword"

    @property
    def model_name(self) -> str:
        return self.config.model

    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        return [[float(t.lower().count(k)) for k in KEYWORDS] + [0.1] for t in texts]


def _keyword_registry(built: list) -> EmbeddingRegistry:
    registry = EmbeddingRegistry()

    def build(config: EmbeddingConfig) -> KeywordClient:
        built.append(config)
        return KeywordClient(config)

    registry.register(EmbeddingProvider.OPENAI, build)
    return registry


def _ranked(chunk_id: str, document_id: str, similarity: float, search_type: SearchType, **extra) -> RankedChunk:
    return RankedChunk(
        chunk_id=chunk_id,
        document_id=document_id,
        chunk_index=0,
        content=f"content of {chunk_id}",
        similarity=similarity,
        combined_score=0.01,
        search_type=search_type,
        **extra,
    )


CONFIG = EmbeddingConfig(api_key="sk-saved-key-1234", dimensions=4, chunk_size=64, chunk_overlap=8)


class TestApiWithMockedServices(unittest.TestCase):
    def setUp(self) -> None:
        self.rag = MagicMock()
        self.orchestrator = MagicMock()
        self.documents = InMemoryDocumentStore(
            [
                Document(
                    id="d1",
                    kb_id="kb1",
                    title="Guide",
                    content="Hybrid retrieval.",
                    embedding_status=EmbeddingStatus.COMPLETED,
                ),
                Document(id="d2", kb_id="kb1", title="Draft", content="Not yet."),
            ]
        )
        app = create_app(
            rag_service=self.rag,
            orchestrator=self.orchestrator,
            document_store=self.documents,
            embedding_config=CONFIG,
        )
        self.client = TestClient(app)

    def test_health(self) -> None:
        response = self.client.get("/health")
        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json(), {"status": "ok"})

    def test_search_groups_by_document(self) -> None:
        self.rag.search_knowledge_base = AsyncMock(
            return_value=[
                _ranked("c1", "d1", 0.82, SearchType.HYBRID, document_title="Guide"),
                _ranked("c2", "d2", 0.91, SearchType.VECTOR, document_title="Draft"),
                _ranked("c3", "d1", 0.0, SearchType.LEXICAL, document_title="Guide"),
            ]
        )

        response = self.client.post("/api/v1/search", json={"kb_id": "kb1", "query": "hybrid"})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertTrue(body["success"])
        self.assertEqual(body["total_chunks"], 3)
        self.assertEqual([g["document_id"] for g in body["results"]], ["d2", "d1"])
        self.assertEqual(body["results"][1]["title"], "Guide")
        self.assertEqual([c["chunk_id"] for c in body["results"][1]["chunks"]], ["c1", "c3"])
        self.assertEqual(body["results"][1]["max_similarity"], 0.82)

    def test_search_clamps_limit_and_threshold(self) -> None:
        self.rag.search_knowledge_base = AsyncMock(return_value=[])

        response = self.client.post(
            "/api/v1/search", json={"kb_id": "kb1", "query": "hybrid", "limit": 500, "threshold": 3.0}
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["results"], [])
        kb_id, query, options = self.rag.search_knowledge_base.await_args.args
        self.assertEqual((kb_id, query), ("kb1", "hybrid"))
        self.assertEqual(options.match_count, 20)
        self.assertEqual(options.match_threshold, 1.0)
        self.assertGreaterEqual(options.candidate_count, 20)

    def test_search_rejects_empty_query(self) -> None:
        response = self.client.post("/api/v1/search", json={"kb_id": "kb1", "query": ""})
        self.assertEqual(response.status_code, 422)

    def test_document_search_unknown_document(self) -> None:
        response = self.client.post("/api/v1/documents/missing/search", json={"query": "hybrid"})
        self.assertEqual(response.status_code, 404)
        body = response.json()
        self.assertEqual(body["http_status"], 404)
        self.assertEqual(body["details"], {"document_id": "missing"})
        self.assertIn("error", body)
        self.assertIn("code", body)

    def test_document_search_requires_embedded_document(self) -> None:
        response = self.client.post("/api/v1/documents/d2/search", json={"query": "hybrid"})
        self.assertEqual(response.status_code, 400)
        self.assertEqual(response.json()["details"]["embedding_status"], "pending")

    def test_document_search_reports_debug_counts(self) -> None:
        self.rag.search_document = AsyncMock(
            return_value=[
                _ranked("c1", "d1", 0.8, SearchType.HYBRID),
                _ranked("c2", "d1", 0.0, SearchType.LEXICAL),
            ]
        )

        response = self.client.post("/api/v1/documents/d1/search", json={"query": "hybrid", "limit": 3})

        self.assertEqual(response.status_code, 200)
        body = response.json()
        self.assertEqual(body["document_id"], "d1")
        self.assertEqual([c["search_type"] for c in body["chunks"]], ["hybrid", "lexical"])
        self.assertEqual(
            body["debug"],
            {
                "total_results": 2,
                "threshold": 0.5,
                "vector_weight": 0.5,
                "result_types": {"vector": 0, "lexical": 1, "hybrid": 1},
            },
        )
        self.assertEqual(self.rag.search_document.await_args.args[2].match_count, 3)

    def test_provider_error_is_json(self) -> None:
        self.rag.search_knowledge_base = AsyncMock(side_effect=ProviderError("upstream down", provider="openai"))

        response = self.client.post("/api/v1/search", json={"kb_id": "kb1", "query": "hybrid"})

        self.assertEqual(response.status_code, 502)
        body = response.json()
        self.assertEqual(body["error"], "upstream down")
        self.assertEqual(body["http_status"], 502)

    def test_embed_document(self) -> None:
        self.orchestrator.embed_document = AsyncMock(return_value=EmbedDocumentResult(document_id="d1", chunk_count=4))

        response = self.client.post("/api/v1/documents/d1/embeddings")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(), {"success": True, "document_id": "d1", "chunk_count": 4, "status": "completed"}
        )
        self.orchestrator.embed_document.assert_awaited_once_with("d1", "Hybrid retrieval.", CONFIG, kb_id="kb1")

    def test_embed_unknown_document(self) -> None:
        self.orchestrator.embed_document = AsyncMock()
        response = self.client.post("/api/v1/documents/missing/embeddings")
        self.assertEqual(response.status_code, 404)
        self.orchestrator.embed_document.assert_not_awaited()

    def test_delete_document_embeddings(self) -> None:
        self.orchestrator.delete_document_embeddings = AsyncMock(return_value=6)
        response = self.client.delete("/api/v1/documents/d1/embeddings")
        self.assertEqual(response.json(), {"success": True, "deleted_chunks": 6})

    def test_embed_knowledge_base_partial_failure(self) -> None:
        self.orchestrator.embed_knowledge_base = AsyncMock(
            return_value=BatchEmbedResult(kb_id="kb1", total=3, processed=2, failed=1, errors={"d9": "boom"})
        )

        response = self.client.post("/api/v1/knowledge-bases/kb1/embeddings")

        self.assertEqual(response.status_code, 200)
        self.assertEqual(
            response.json(),
            {"success": False, "kb_id": "kb1", "total": 3, "processed": 2, "failed": 1, "errors": {"d9": "boom"}},
        )

    def test_delete_knowledge_base_embeddings(self) -> None:
        self.orchestrator.delete_knowledge_base_embeddings = AsyncMock(return_value=11)
        response = self.client.delete("/api/v1/knowledge-bases/kb1/embeddings")
        self.assertEqual(response.json()["deleted_chunks"], 11)

    def test_embedding_stats(self) -> None:
        self.orchestrator.embedding_stats = AsyncMock(
            return_value=EmbeddingStats(total_documents=3, embedded_documents=1, pending_documents=2, total_chunks=9)
        )

        response = self.client.get("/api/v1/knowledge-bases/kb1/embeddings/stats")

        self.assertEqual(
            response.json(),
            {
                "total_documents": 3,
                "embedded_documents": 1,
                "pending_documents": 2,
                "processing_documents": 0,
                "failed_documents": 0,
                "outdated_documents": 0,
                "total_chunks": 9,
            },
        )

    def test_embedding_test_keeps_saved_key_for_masked_input(self) -> None:
        self.rag.test_embedding = AsyncMock(
            return_value=EmbeddingTestResult(
                model="text-embedding-3-large", dimensions=3072, response_time_ms=12, vector_preview=[0.1, 0.2]
            )
        )

        response = self.client.post(
            "/api/v1/embeddings/test",
            json={"text": "hello", "config": {"apiKey": "********1234", "model": "text-embedding-3-large"}},
        )

        self.assertEqual(response.status_code, 200)
        self.assertEqual(response.json()["result"]["dimensions"], 3072)
        text, config = self.rag.test_embedding.await_args.args
        self.assertEqual(text, "hello")
        self.assertEqual(config.api_key, "sk-saved-key-1234")
        self.assertEqual(config.model, "text-embedding-3-large")

    def test_embedding_test_without_key(self) -> None:
        app = create_app(
            rag_service=self.rag,
            orchestrator=self.orchestrator,
            document_store=self.documents,
            embedding_config=EmbeddingConfig(api_key=""),
        )
        self.rag.test_embedding = AsyncMock()

        response = TestClient(app).post("/api/v1/embeddings/test", json={"text": "hello"})

        self.assertEqual(response.status_code, 400)
        self.rag.test_embedding.assert_not_awaited()


class TestApiEndToEnd(unittest.TestCase):
    """Real orchestrator and RAGService over the in-memory stores with a keyword embedding client."""

    def setUp(self) -> None:
        self.built: list = []
        registry = _keyword_registry(self.built)
        self.documents = InMemoryDocumentStore(
            [
                Document(
                    id="d1",
                    kb_id="kb1",
                    title="Hybrid guide",
                    content="Hybrid retrieval mixes vector and lexical ranking.",
                    source_url="https://example.com/hybrid",
                ),
                Document(id="d2", kb_id="kb1", title="Pasta", content="Cooking pasta needs salted water."),
                Document(id="d3", kb_id="kb2", title="Other", content="Vector databases elsewhere."),
            ]
        )
        chunks = InMemoryChunkStore(self.documents)
        orchestrator = EmbeddingOrchestrator(
            chunks,
            self.documents,
            embedder_factory=lambda config: Embedder(config, registry=registry),
        )
        rag = RAGService(chunks, embedding_config=CONFIG, registry=registry)
        self.client = TestClient(
            create_app(rag_service=rag, orchestrator=orchestrator, document_store=self.documents)
        )

    def test_embed_then_search(self) -> None:
        response = self.client.post("/api/v1/knowledge-bases/kb1/embeddings")
        self.assertEqual(response.json()["processed"], 2)
        self.assertEqual(self.documents.peek("d1").embedding_status, EmbeddingStatus.COMPLETED)
        self.assertEqual(self.documents.peek("d3").embedding_status, EmbeddingStatus.PENDING)

        stats = self.client.get("/api/v1/knowledge-bases/kb1/embeddings/stats").json()
        self.assertEqual(stats["embedded_documents"], 2)
        self.assertEqual(stats["total_chunks"], 2)

        response = self.client.post("/api/v1/search", json={"kb_id": "kb1", "query": "hybrid retrieval"})
        body = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual([g["document_id"] for g in body["results"]], ["d1"])
        self.assertEqual(body["results"][0]["title"], "Hybrid guide")
        self.assertEqual(body["results"][0]["source_url"], "https://example.com/hybrid")

    def test_document_search_after_embedding(self) -> None:
        self.assertEqual(self.client.post("/api/v1/documents/d1/embeddings").json()["chunk_count"], 1)

        response = self.client.post("/api/v1/documents/d1/search", json={"query": "vector ranking"})

        body = response.json()
        self.assertEqual(response.status_code, 200)
        self.assertEqual(len(body["chunks"]), 1)
        self.assertEqual(body["chunks"][0]["document_id"], "d1")
        self.assertEqual(body["debug"]["total_results"], 1)

    def test_delete_resets_to_pending(self) -> None:
        self.client.post("/api/v1/documents/d1/embeddings")

        response = self.client.delete("/api/v1/documents/d1/embeddings")

        self.assertEqual(response.json()["deleted_chunks"], 1)
        self.assertEqual(self.documents.peek("d1").embedding_status, EmbeddingStatus.PENDING)
        self.assertEqual(self.client.post("/api/v1/documents/d1/search", json={"query": "hybrid"}).status_code, 400)

    def test_embedding_test_reports_provider_output(self) -> None:
        response = self.client.post("/api/v1/embeddings/test", json={"text": "hybrid", "config": {"model": "kw-1"}})

        self.assertEqual(response.status_code, 200)
        result = response.json()["result"]
        self.assertEqual(result["model"], "kw-1")
        self.assertEqual(result["dimensions"], 4)
        self.assertEqual(result["vector_preview"], [1.0, 0.0, 0.0, 0.1])
        self.assertEqual(self.built[-1].api_key, "sk-saved-key-1234")


if __name__ == "__main__":
    unittest.main()
