"""
ragcore.infra.database.engine – async SQLAlchemy 2.0 engine and session factory.

Accepts PostgresConfig; if not provided, loads from env via load_postgres_config().
"""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Optional

from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

# Registers every ORM model on Base.metadata before create_all()
import ragcore.infra.database.models  # noqa: F401
from ragcore.infra.database.models.base import Base

if TYPE_CHECKING:
    from ragcore.config import PostgresConfig

logger = logging.getLogger(__name__)

_engine: Optional[AsyncEngine] = None
_session_factory: Optional[async_sessionmaker[AsyncSession]] = None


def _make_async_url(url: str) -> str:
    """Convert postgresql:// or postgres:// to postgresql+asyncpg://."""
    for prefix in ("postgresql://", "postgres://"):
        if url.startswith(prefix):
            return url.replace(prefix, "postgresql+asyncpg://", 1)
    return url


def build_engine(
    config: Optional["PostgresConfig"] = None,
    *,
    use_null_pool: bool = False,
) -> AsyncEngine:
    """Create and cache the async engine. ``use_null_pool`` disables pooling (scripts, tests)."""
    global _engine
    if _engine is not None:
        return _engine

    if config is None:
        from ragcore.config import load_postgres_config

        config = load_postgres_config()

    url = _make_async_url(config.url)
    connect_args: dict = {"server_settings": {"application_name": config.application_name}}

    if use_null_pool:
        _engine = create_async_engine(url, echo=config.echo, poolclass=NullPool, connect_args=connect_args)
        logger.info("AsyncEngine created with NullPool")
    else:
        _engine = create_async_engine(
            url,
            echo=config.echo,
            pool_size=config.pool_size,
            max_overflow=config.max_overflow,
            pool_timeout=config.pool_timeout,
            pool_recycle=config.pool_recycle,
            pool_pre_ping=True,
            connect_args=connect_args,
        )
        logger.info("AsyncEngine created: pool_size=%d max_overflow=%d", config.pool_size, config.max_overflow)
    return _engine


def build_session_factory(engine: Optional[AsyncEngine] = None) -> async_sessionmaker[AsyncSession]:
    global _session_factory
    if _session_factory is not None:
        return _session_factory
    _session_factory = async_sessionmaker(
        engine or build_engine(),
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )
    return _session_factory


async def init_db(config: Optional["PostgresConfig"] = None, *, drop_all: bool = False) -> None:
    """Create all ORM tables. For dev/test; use migrations in production."""
    engine = build_engine(config)
    async with engine.begin() as conn:
        if drop_all:
            logger.warning("Dropping all ORM tables (drop_all=True)")
            await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database initialised")


async def close_engine() -> None:
    """Dispose the connection pool. Call on app shutdown."""
    global _engine, _session_factory
    if _engine is not None:
        await _engine.dispose()
        logger.info("AsyncEngine disposed")
        _engine = None
        _session_factory = None
