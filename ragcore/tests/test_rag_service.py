"""Unit tests for RAGService and the context formatter."""
from __future__ import annotations

import asyncio
import unittest
from typing import List, Sequence
from unittest.mock import AsyncMock, MagicMock

from ragcore.clients.embedding import BaseEmbeddingClient, EmbeddingConfig, EmbeddingProvider, EmbeddingRegistry
from ragcore.clients.reranker import RerankerConfig, RerankerProvider
from ragcore.core.exceptions import ConfigurationError, ProviderError, ValidationError
from ragcore.infra.chunk_store import InMemoryChunkStore, InMemoryDocumentStore
from ragcore.rag.context import format_chunk_context
from ragcore.rag.types import ChunkRecord, Document, RankedChunk, RerankResult, SearchOptions, SearchScope, SearchType
from ragcore.services.rag_service import RAGService


def _run(coro):
    return asyncio.run(coro)


class AxisClient(BaseEmbeddingClient):
    """'alpha' texts point along x, everything else along y."""

    def __init__(self, empty: bool = False) -> None:
        self.calls: List[List[str]] = []
        self.closed = False
        self._empty = empty

    @property
    def provider(self) -> str:
        return "axis"

    @property
    def model_name(self) -> str:
        return "axis-2"

    async def embed(self, texts: Sequence[str]) -> List[List[float]]:
        self.calls.append(list(texts))
        if self._empty:
            return []
        return [[1.0, 0.0] if "alpha" in t else [0.0, 1.0] for t in texts]

    async def aclose(self) -> None:
        self.closed = True


CONFIG = EmbeddingConfig(api_key="sk-test", dimensions=2)


def _registry(client: AxisClient) -> EmbeddingRegistry:
    registry = EmbeddingRegistry()
    registry.register(EmbeddingProvider.OPENAI, lambda config: client)
    return registry


def _chunk(chunk_id: str, document_id: str, kb_id: str, content: str, vector) -> ChunkRecord:
    return ChunkRecord(
        id=chunk_id,
        document_id=document_id,
        kb_id=kb_id,
        chunk_index=0,
        content=content,
        content_hash="",
        token_count=3,
        embedding=vector,
    )


class TestRAGService(unittest.TestCase):
    def setUp(self) -> None:
        documents = InMemoryDocumentStore(
            [
                Document(id="d1", kb_id="kb1", title="Alpha notes", content=""),
                Document(id="d2", kb_id="kb1", title="Beta notes", content=""),
                Document(id="d3", kb_id="kb2", title="More alpha", content=""),
            ]
        )
        self.store = InMemoryChunkStore(documents)
        _run(
            self.store.insert_chunks(
                [
                    _chunk("c1", "d1", "kb1", "alpha release notes", [1.0, 0.0]),
                    _chunk("c2", "d2", "kb1", "beta release notes", [0.0, 1.0]),
                    _chunk("c3", "d3", "kb2", "alpha migration guide", [1.0, 0.0]),
                ]
            )
        )
        self.client = AxisClient()
        self.service = RAGService(self.store, embedding_config=CONFIG, registry=_registry(self.client))

    def test_empty_query_rejected_before_embedding(self) -> None:
        with self.assertRaises(ValidationError):
            _run(self.service.search_knowledge_base("kb1", "   "))
        self.assertEqual(self.client.calls, [])

    def test_search_knowledge_base(self) -> None:
        results = _run(self.service.search_knowledge_base("kb1", "alpha"))
        self.assertEqual(results[0].chunk_id, "c1")
        self.assertEqual(results[0].search_type, SearchType.HYBRID)
        self.assertEqual(results[0].document_title, "Alpha notes")
        self.assertNotIn("c3", [r.chunk_id for r in results])
        self.assertEqual(self.client.calls, [["alpha"]])
        self.assertTrue(self.client.closed)

    def test_search_knowledge_bases_keeps_kb_ids(self) -> None:
        results = _run(self.service.search_knowledge_bases(["kb1", "kb2"], "alpha"))
        by_id = {r.chunk_id: r.kb_id for r in results}
        self.assertEqual(by_id["c1"], "kb1")
        self.assertEqual(by_id["c3"], "kb2")

    def test_search_document(self) -> None:
        results = _run(self.service.search_document("d3", "alpha"))
        self.assertEqual([r.chunk_id for r in results], ["c3"])
        self.assertIsNone(results[0].document_title)

    def test_grouped(self) -> None:
        groups = _run(self.service.search_knowledge_base_grouped("kb1", "alpha"))
        self.assertEqual(groups[0].document_id, "d1")

    def test_build_context(self) -> None:
        context = _run(
            self.service.build_context("alpha", SearchScope.knowledge_base("kb1"), SearchOptions(match_count=1))
        )
        self.assertEqual(context, "[Fragment 1] (Similarity: 100.0%)\nalpha release notes")

    def test_rerank_skipped_without_key(self) -> None:
        reranker = MagicMock()
        reranker.rerank = AsyncMock()
        service = RAGService(
            self.store,
            embedding_config=CONFIG,
            reranker_config=RerankerConfig(provider=RerankerProvider.COHERE),
            registry=_registry(self.client),
            reranker=reranker,
        )
        results = _run(service.search_knowledge_base("kb1", "alpha", rerank=True))
        self.assertEqual(results[0].chunk_id, "c1")
        reranker.rerank.assert_not_awaited()

    def test_rerank_reorders(self) -> None:
        reranker = MagicMock()

        async def reverse(query, candidates, config, options):
            ordered = list(reversed(candidates))
            return [
                RerankResult(chunk=c, relevance_score=0.9 - i * 0.1, original_rank=len(ordered) - 1 - i, new_rank=i)
                for i, c in enumerate(ordered)
            ]

        reranker.rerank = AsyncMock(side_effect=reverse)
        service = RAGService(
            self.store,
            embedding_config=CONFIG,
            reranker_config=RerankerConfig(provider=RerankerProvider.COHERE, api_key="co-key"),
            registry=_registry(self.client),
            reranker=reranker,
        )

        plain = _run(service.search_knowledge_base("kb1", "alpha beta"))
        reranked = _run(service.search_knowledge_base("kb1", "alpha beta", rerank=True))

        self.assertEqual([r.chunk_id for r in plain], ["c1", "c2"])
        self.assertEqual([r.chunk_id for r in reranked], [r.chunk_id for r in reversed(plain)])
        self.assertAlmostEqual(reranked[0].combined_score, 0.9)

    def test_test_embedding_reports_vector(self) -> None:
        result = _run(self.service.test_embedding("alpha"))
        self.assertEqual(result.model, "axis-2")
        self.assertEqual(result.dimensions, 2)
        self.assertEqual(result.vector_preview, [1.0, 0.0])
        self.assertGreaterEqual(result.response_time_ms, 0)
        self.assertTrue(self.client.closed)

    def test_test_embedding_without_key(self) -> None:
        with self.assertRaises(ConfigurationError):
            _run(self.service.test_embedding("alpha", EmbeddingConfig(api_key="")))

    def test_test_embedding_empty_response(self) -> None:
        client = AxisClient(empty=True)
        service = RAGService(self.store, embedding_config=CONFIG, registry=_registry(client))
        with self.assertRaises(ProviderError):
            _run(service.test_embedding("alpha"))
        self.assertTrue(client.closed)


class TestFormatChunkContext(unittest.TestCase):
    def _ranked(self, content: str, similarity: float) -> RankedChunk:
        return RankedChunk(
            chunk_id="c",
            document_id="d",
            chunk_index=0,
            content=content,
            similarity=similarity,
            combined_score=0.0,
            search_type=SearchType.VECTOR,
        )

    def test_empty(self) -> None:
        self.assertEqual(format_chunk_context([]), "")

    def test_numbered_blocks(self) -> None:
        text = format_chunk_context([self._ranked("first", 0.875), self._ranked("second", 0.5)])
        self.assertEqual(
            text,
            "[Fragment 1] (Similarity: 87.5%)\nfirst\n\n---\n\n[Fragment 2] (Similarity: 50.0%)\nsecond",
        )

    def test_custom_label(self) -> None:
        self.assertTrue(format_chunk_context([self._ranked("x", 1.0)], label="Source").startswith("[Source 1]"))


if __name__ == "__main__":
    unittest.main()
