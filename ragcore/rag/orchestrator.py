"""
EmbeddingOrchestrator: chunk -> embed -> store for documents and knowledge bases.

Owns the per-document status machine::

    pending -> processing -> completed
                    \\-> failed
    completed|failed -> pending   (content changed or embeddings deleted)

Re-embedding always deletes the document's chunk set and recreates it.
"""
from __future__ import annotations

import asyncio
import inspect
import logging
import uuid
import weakref
from typing import TYPE_CHECKING, Awaitable, Callable, List, Optional, Union

from ragcore.core.exceptions import ConfigurationError, NotFoundError
from ragcore.rag.embedder import Embedder
from ragcore.rag.lexical import tokenize
from ragcore.rag.splitters import chunk_document
from ragcore.rag.types import (
    RESUMABLE_STATUSES,
    BatchEmbedResult,
    ChunkRecord,
    EmbedDocumentResult,
    EmbeddingStats,
    EmbeddingStatus,
    SearchScope,
)

if TYPE_CHECKING:
    from ragcore.clients.embedding import EmbeddingConfig
    from ragcore.infra.chunk_store.base import ChunkStore, DocumentStore

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], Union[None, Awaitable[None]]]
EmbedderFactory = Callable[["EmbeddingConfig"], Embedder]


class EmbeddingOrchestrator:
    """Coordinates the embedding pipeline over a ChunkStore and a DocumentStore."""

    def __init__(
        self,
        chunk_store: "ChunkStore",
        document_store: "DocumentStore",
        *,
        embedder_factory: EmbedderFactory = Embedder,
    ) -> None:
        self._chunks = chunk_store
        self._documents = document_store
        self._embedder_factory = embedder_factory
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

    def _lock_for(self, document_id: str) -> asyncio.Lock:
        lock = self._locks.get(document_id)
        if lock is None:
            lock = asyncio.Lock()
            self._locks[document_id] = lock
        return lock

    async def embed_document(
        self,
        document_id: str,
        content: str,
        config: "EmbeddingConfig",
        *,
        kb_id: Optional[str] = None,
    ) -> EmbedDocumentResult:
        """
        Replace a document's chunks with freshly embedded ones.

        Empty content completes with zero chunks. A missing credential raises
        ConfigurationError before the document or its chunks are touched. On any
        later failure the document is marked ``failed`` (best effort) and the
        original error is re-raised. Calls for the same document are serialized
        within this process.
        """
        if not config.has_credential:
            raise ConfigurationError(
                "Embedding API key is not configured",
                details={"provider": config.provider.value, "document_id": document_id},
            )
        if kb_id is None:
            document = await self._documents.get_document(document_id)
            if document is None:
                raise NotFoundError(f"Document {document_id} not found", details={"document_id": document_id})
            kb_id = document.kb_id

        async with self._lock_for(document_id):
            try:
                await self._documents.update_status([document_id], EmbeddingStatus.PROCESSING)
                await self._chunks.delete_by_document(document_id)

                pieces = chunk_document(content, config.chunk_size, config.chunk_overlap)
                if not pieces:
                    await self._documents.update_status([document_id], EmbeddingStatus.COMPLETED)
                    logger.info("Document has no content, completed with 0 chunks", extra={"document_id": document_id})
                    return EmbedDocumentResult(document_id=document_id, chunk_count=0)

                embedder = self._embedder_factory(config)
                try:
                    vectors = await embedder.embed_texts([p.content for p in pieces])
                finally:
                    await embedder.aclose()

                records = [
                    ChunkRecord(
                        id=str(uuid.uuid4()),
                        document_id=document_id,
                        kb_id=kb_id,
                        chunk_index=index,
                        content=piece.content,
                        content_hash=piece.content_hash,
                        token_count=piece.token_count,
                        embedding=vector,
                        lexical_tokens=tokenize(piece.content),
                    )
                    for index, (piece, vector) in enumerate(zip(pieces, vectors))
                ]
                await self._chunks.insert_chunks(records)
                await self._documents.update_status([document_id], EmbeddingStatus.COMPLETED)
            except Exception:
                await self._mark_failed(document_id)
                raise

        logger.info(
            "Embedded document into %d chunks",
            len(records),
            extra={"document_id": document_id, "kb_id": kb_id},
        )
        return EmbedDocumentResult(document_id=document_id, chunk_count=len(records))

    async def _mark_failed(self, document_id: str) -> None:
        try:
            await self._documents.update_status([document_id], EmbeddingStatus.FAILED)
        except Exception as exc:
            # The caller still gets the error that caused the failure
            logger.warning(
                "Could not mark document as failed: %s",
                exc,
                extra={"document_id": document_id},
            )

    async def embed_knowledge_base(
        self,
        kb_id: str,
        config: "EmbeddingConfig",
        on_progress: Optional[ProgressCallback] = None,
    ) -> BatchEmbedResult:
        """
        Embed every pending, outdated or failed document of a knowledge base, one at a time.

        A failing document is counted and logged; the batch carries on.
        ``on_progress(done, total)`` runs after each document and may be async.
        """
        documents = await self._documents.list_documents(kb_id, RESUMABLE_STATUSES)
        result = BatchEmbedResult(kb_id=kb_id, total=len(documents))
        logger.info("Embedding %d documents", result.total, extra={"kb_id": kb_id})

        for done, document in enumerate(documents, start=1):
            try:
                await self.embed_document(document.id, document.content, config, kb_id=document.kb_id)
                result.processed += 1
            except Exception as exc:
                result.failed += 1
                result.errors[document.id] = str(exc)
                logger.error(
                    "Document embedding failed: %s",
                    exc,
                    extra={"document_id": document.id, "kb_id": kb_id},
                    exc_info=True,
                )
            if on_progress is not None:
                outcome = on_progress(done, result.total)
                if inspect.isawaitable(outcome):
                    await outcome

        logger.info(
            "Knowledge base embedding finished: %d processed, %d failed",
            result.processed,
            result.failed,
            extra={"kb_id": kb_id},
        )
        return result

    async def delete_document_embeddings(self, document_id: str) -> int:
        """Drop a document's chunks and reset it to pending. Returns chunks removed."""
        removed = await self._chunks.delete_by_document(document_id)
        await self._documents.update_status([document_id], EmbeddingStatus.PENDING)
        return removed

    async def delete_knowledge_base_embeddings(self, kb_id: str) -> int:
        documents = await self._documents.list_documents(kb_id)
        ids = [d.id for d in documents]
        if not ids:
            return 0
        removed = await self._chunks.delete_by_documents(ids)
        await self._documents.update_status(ids, EmbeddingStatus.PENDING)
        logger.info("Deleted %d chunks across %d documents", removed, len(ids), extra={"kb_id": kb_id})
        return removed

    async def invalidate_document(self, document_id: str) -> None:
        """Content changed: back to pending so the next batch run re-embeds it."""
        await self._documents.update_status([document_id], EmbeddingStatus.PENDING)

    async def embedding_stats(self, kb_id: str) -> EmbeddingStats:
        documents = await self._documents.list_documents(kb_id)
        by_status: List[EmbeddingStatus] = [d.embedding_status for d in documents]
        return EmbeddingStats(
            total_documents=len(documents),
            embedded_documents=by_status.count(EmbeddingStatus.COMPLETED),
            pending_documents=by_status.count(EmbeddingStatus.PENDING),
            processing_documents=by_status.count(EmbeddingStatus.PROCESSING),
            failed_documents=by_status.count(EmbeddingStatus.FAILED),
            outdated_documents=by_status.count(EmbeddingStatus.OUTDATED),
            total_chunks=await self._chunks.count_chunks(SearchScope.knowledge_base(kb_id)),
        )
