"""ragcore FastAPI application – entry point.

Start with:
    uvicorn ragcore.api.main:app --reload --host 0.0.0.0 --port 8000

At startup the app connects to PostgreSQL (documents) and Qdrant (chunks),
resolves the embedding and reranker configs from the environment, and wires
the orchestrator and RAGService onto ``app.state``. Collaborators passed to
``create_app`` are used as-is and skip that wiring (tests, embedding in
another service).
"""
from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ragcore.clients.embedding import EmbeddingConfig, load_embedding_config
from ragcore.clients.reranker import RerankerConfig, load_reranker_config
from ragcore.core.exceptions import ProjectError
from ragcore.core.logger import configure
from ragcore.infra.chunk_store.base import DocumentStore
from ragcore.rag.orchestrator import EmbeddingOrchestrator
from ragcore.services.rag_service import RAGService

logger = logging.getLogger(__name__)


async def _wire_services(app: FastAPI) -> None:
    """Connect the bundled stores and build the services from environment config."""
    from ragcore.config import load_qdrant_config
    from ragcore.infra.chunk_store.qdrant import QdrantChunkStore
    from ragcore.infra.database import SqlDocumentStore, build_engine, build_session_factory, init_db
    from ragcore.infra.vectorstore import ensure_collection_exists, get_qdrant_manager

    engine = build_engine()
    session_factory = build_session_factory(engine)
    await init_db()

    manager = get_qdrant_manager(load_qdrant_config())
    await ensure_collection_exists(manager)

    embedding_config = load_embedding_config()
    reranker_config = load_reranker_config()
    document_store = SqlDocumentStore(session_factory)
    chunk_store = QdrantChunkStore(manager, documents=document_store)

    app.state.session_factory = session_factory
    app.state.document_store = document_store
    app.state.embedding_config = embedding_config
    app.state.reranker_config = reranker_config
    app.state.orchestrator = EmbeddingOrchestrator(chunk_store, document_store)
    app.state.rag_service = RAGService(
        chunk_store,
        embedding_config=embedding_config,
        reranker_config=reranker_config,
    )
    if not embedding_config.has_credential:
        logger.warning(
            "API: no embedding key configured (%s); embedding and search calls will fail until one is set",
            embedding_config.provider.value,
        )
    logger.info(
        "API: services ready (embedding=%s/%s, reranker=%s)",
        embedding_config.provider.value,
        embedding_config.model,
        reranker_config.provider.value,
    )


async def _release_services() -> None:
    from ragcore.infra.database import close_engine
    from ragcore.infra.vectorstore import close_qdrant_manager

    await close_qdrant_manager()
    await close_engine()
    logger.info("API: engine and Qdrant client closed")


@asynccontextmanager
async def lifespan(app: FastAPI):
    # ── Startup ──────────────────────────────────────────────────
    configure()
    owns_services = getattr(app.state, "rag_service", None) is None
    if owns_services:
        await _wire_services(app)

    yield

    # ── Shutdown ─────────────────────────────────────────────────
    if owns_services:
        await _release_services()


async def project_error_handler(request: Request, exc: ProjectError) -> JSONResponse:
    if exc.http_status >= 500:
        logger.error("%s %s failed: %r", request.method, request.url.path, exc)
    else:
        logger.info("%s %s rejected: %r", request.method, request.url.path, exc)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


def create_app(
    *,
    rag_service: Optional[RAGService] = None,
    orchestrator: Optional[EmbeddingOrchestrator] = None,
    document_store: Optional[DocumentStore] = None,
    embedding_config: Optional[EmbeddingConfig] = None,
    reranker_config: Optional[RerankerConfig] = None,
) -> FastAPI:
    app = FastAPI(
        title="ragcore API",
        version="1.0.0",
        description="Document embedding and hybrid retrieval over knowledge bases.",
        lifespan=lifespan,
    )

    if rag_service is not None:
        app.state.rag_service = rag_service
        app.state.orchestrator = orchestrator
        app.state.document_store = document_store
        app.state.embedding_config = embedding_config or rag_service.embedding_config
        app.state.reranker_config = reranker_config

    app.add_exception_handler(ProjectError, project_error_handler)

    # CORS: allow the admin UI dev server and any configured origin
    allowed_origins = os.environ.get(
        "CORS_ORIGINS", "http://localhost:3000,http://127.0.0.1:3000"
    ).split(",")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    from ragcore.api.routers import embeddings, search

    app.include_router(search.router, prefix="/api/v1")
    app.include_router(embeddings.router, prefix="/api/v1")

    @app.get("/health", tags=["health"])
    async def health():
        return {"status": "ok"}

    return app


app = create_app()
