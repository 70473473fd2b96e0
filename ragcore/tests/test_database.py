"""Unit tests for the SQL document store (repository and session mocked)."""
from __future__ import annotations

import asyncio
import unittest
import uuid
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

from sqlalchemy.exc import OperationalError

from ragcore.core.exceptions import NotFoundError, PersistenceError
from ragcore.infra.database.document_store import SqlDocumentStore, to_document
from ragcore.infra.database.engine import _make_async_url
from ragcore.rag.types import EmbeddingStatus

DOC_ID = uuid.UUID("0b1f3c52-6d7e-4a8b-9c0d-1e2f3a4b5c6d")


def _run(coro):
    return asyncio.run(coro)


class FakeSession:
    """Stands in for both the session and its transaction context."""

    def __init__(self) -> None:
        self.entered = 0

    async def __aenter__(self) -> "FakeSession":
        self.entered += 1
        return self

    async def __aexit__(self, *exc_info) -> bool:
        return False

    def begin(self) -> "FakeSession":
        return self


def _row(**overrides) -> SimpleNamespace:
    values = dict(
        id=DOC_ID,
        kb_id="kb1",
        title="Guide",
        content="Body",
        content_hash="0000abcd",
        embedding_status="completed",
        source_url=None,
    )
    values.update(overrides)
    return SimpleNamespace(**values)


class TestHelpers(unittest.TestCase):
    def test_make_async_url(self) -> None:
        self.assertEqual(_make_async_url("postgresql://u:p@h/db"), "postgresql+asyncpg://u:p@h/db")
        self.assertEqual(_make_async_url("postgres://u:p@h/db"), "postgresql+asyncpg://u:p@h/db")
        self.assertEqual(_make_async_url("postgresql+asyncpg://h/db"), "postgresql+asyncpg://h/db")

    def test_to_document(self) -> None:
        document = to_document(_row(source_url="https://example.com"))
        self.assertEqual(document.id, str(DOC_ID))
        self.assertEqual(document.embedding_status, EmbeddingStatus.COMPLETED)
        self.assertEqual(document.source_url, "https://example.com")


class TestSqlDocumentStore(unittest.TestCase):
    def setUp(self) -> None:
        self.session = FakeSession()
        self.repo = MagicMock()
        self.repo.get_by_id = AsyncMock()
        self.repo.list_by_kb = AsyncMock(return_value=[])
        self.repo.set_status = AsyncMock(return_value=1)
        patcher = patch(
            "ragcore.infra.database.document_store.KnowledgeDocumentRepository",
            return_value=self.repo,
        )
        patcher.start()
        self.addCleanup(patcher.stop)
        self.store = SqlDocumentStore(lambda: self.session)

    def test_get_document(self) -> None:
        self.repo.get_by_id.return_value = _row()
        document = _run(self.store.get_document(str(DOC_ID)))
        self.assertEqual(document.title, "Guide")
        self.repo.get_by_id.assert_awaited_once_with(DOC_ID)

    def test_get_document_missing(self) -> None:
        self.repo.get_by_id.return_value = None
        self.assertIsNone(_run(self.store.get_document(str(DOC_ID))))

    def test_get_document_malformed_id(self) -> None:
        self.assertIsNone(_run(self.store.get_document("not-a-uuid")))
        self.assertEqual(self.session.entered, 0)

    def test_list_documents_passes_status_values(self) -> None:
        self.repo.list_by_kb.return_value = [_row(embedding_status="pending")]

        documents = _run(
            self.store.list_documents("kb1", [EmbeddingStatus.PENDING, EmbeddingStatus.FAILED])
        )

        self.assertEqual([d.embedding_status for d in documents], [EmbeddingStatus.PENDING])
        self.repo.list_by_kb.assert_awaited_once_with("kb1", ["pending", "failed"])

    def test_list_documents_all_statuses(self) -> None:
        _run(self.store.list_documents("kb1"))
        self.repo.list_by_kb.assert_awaited_once_with("kb1", None)

    def test_update_status(self) -> None:
        _run(self.store.update_status([str(DOC_ID)], EmbeddingStatus.PROCESSING))
        self.repo.set_status.assert_awaited_once_with([DOC_ID], "processing")

    def test_update_status_malformed_id(self) -> None:
        with self.assertRaises(NotFoundError):
            _run(self.store.update_status(["nope"], EmbeddingStatus.PENDING))
        self.repo.set_status.assert_not_awaited()

    def test_update_status_missing_rows(self) -> None:
        self.repo.set_status.return_value = 0
        with self.assertRaises(NotFoundError):
            _run(self.store.update_status([str(DOC_ID)], EmbeddingStatus.PENDING))

    def test_sqlalchemy_errors_become_persistence_errors(self) -> None:
        self.repo.get_by_id.side_effect = OperationalError("SELECT 1", {}, Exception("connection lost"))
        with self.assertRaises(PersistenceError):
            _run(self.store.get_document(str(DOC_ID)))


if __name__ == "__main__":
    unittest.main()
