"""Async Qdrant client with retry."""
from __future__ import annotations

import asyncio
import functools
import logging
from typing import TYPE_CHECKING, Any, Callable, List, Optional, TypeVar, cast

from qdrant_client import AsyncQdrantClient
from qdrant_client.http.exceptions import ResponseHandlingException, UnexpectedResponse
from qdrant_client.models import (
    Distance,
    Filter,
    FilterSelector,
    PayloadSchemaType,
    PointStruct,
    Record,
    ScoredPoint,
    UpdateResult,
    VectorParams,
)

from ragcore.core.exceptions import PersistenceError

if TYPE_CHECKING:
    from ragcore.config import QdrantConfig

logger = logging.getLogger(__name__)

_F = TypeVar("_F", bound=Callable[..., Any])
_RETRYABLE = (ResponseHandlingException, asyncio.TimeoutError)
_MAX_RETRIES = 3
_BASE_BACKOFF = 0.5


def _retry(func: _F) -> _F:
    """Retry transient faults (timeouts, 5xx) with exponential backoff; 4xx fails at once."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        last_exc: Exception = RuntimeError("unreachable")
        for attempt in range(1, _MAX_RETRIES + 2):
            try:
                return await func(*args, **kwargs)
            except UnexpectedResponse as exc:
                if exc.status_code is not None and exc.status_code < 500:
                    raise PersistenceError(f"Qdrant '{func.__name__}' rejected: {exc}", cause=exc) from exc
                last_exc = exc
            except _RETRYABLE as exc:
                last_exc = exc
            if attempt <= _MAX_RETRIES:
                delay = min(_BASE_BACKOFF * (2 ** (attempt - 1)), 4.0)
                logger.warning(
                    "Qdrant %s attempt %d/%d failed (%s), retry in %.1fs",
                    func.__name__, attempt, _MAX_RETRIES, last_exc, delay,
                )
                await asyncio.sleep(delay)
        raise PersistenceError(
            f"Qdrant '{func.__name__}' failed after {_MAX_RETRIES} retries: {last_exc}", cause=last_exc
        )

    return cast(_F, wrapper)


_manager: Optional["QdrantManager"] = None


def get_qdrant_manager(config: Optional["QdrantConfig"] = None) -> "QdrantManager":
    global _manager
    if _manager is None:
        if config is None:
            from ragcore.config import load_qdrant_config

            config = load_qdrant_config()
        _manager = QdrantManager(config)
    return _manager


async def close_qdrant_manager() -> None:
    global _manager
    if _manager is not None:
        await _manager.close()
        _manager = None
        logger.info("QdrantManager closed.")


class QdrantManager:
    """Async Qdrant wrapper. All methods raise PersistenceError on failure."""

    def __init__(self, config: "QdrantConfig", *, client: Optional[AsyncQdrantClient] = None) -> None:
        self._config = config
        self._client = client or AsyncQdrantClient(url=config.url, api_key=config.api_key, timeout=config.timeout)
        logger.info("QdrantManager initialised url=%s", config.url)

    @property
    def config(self) -> "QdrantConfig":
        return self._config

    async def collection_exists(self, name: str) -> bool:
        try:
            return await self._client.collection_exists(name)
        except (UnexpectedResponse, ResponseHandlingException) as exc:
            raise PersistenceError(f"Failed to check collection '{name}': {exc}", cause=exc) from exc

    @_retry
    async def create_collection(self, name: str, vector_size: int, distance: str = "Cosine") -> bool:
        try:
            await self._client.create_collection(
                collection_name=name,
                vectors_config=VectorParams(size=vector_size, distance=Distance[distance.upper()]),
            )
        except UnexpectedResponse as exc:
            if exc.status_code == 409:
                logger.debug("Collection '%s' already exists.", name)
                return False
            raise
        logger.info("Created collection name=%s vector_size=%d", name, vector_size)
        return True

    async def create_payload_index(self, name: str, field_name: str, schema: PayloadSchemaType) -> None:
        try:
            await self._client.create_payload_index(collection_name=name, field_name=field_name, field_schema=schema)
        except (UnexpectedResponse, ResponseHandlingException) as exc:
            raise PersistenceError(f"Failed to index '{field_name}' on '{name}': {exc}", cause=exc) from exc

    @_retry
    async def upsert_points(self, collection: str, points: List[PointStruct], wait: bool = True) -> Optional[UpdateResult]:
        if not points:
            return None
        result = await self._client.upsert(collection_name=collection, points=points, wait=wait)
        logger.debug("upsert_points collection=%s count=%d", collection, len(points))
        return result

    async def search(
        self,
        collection: str,
        query_vector: List[float],
        query_filter: Optional[Filter] = None,
        limit: int = 10,
        score_threshold: Optional[float] = None,
    ) -> List[ScoredPoint]:
        try:
            response = await self._client.query_points(
                collection_name=collection,
                query=query_vector,
                query_filter=query_filter,
                limit=limit,
                score_threshold=score_threshold,
                with_payload=True,
                with_vectors=False,
            )
        except UnexpectedResponse as exc:
            if exc.status_code == 404:
                raise PersistenceError(f"Collection '{collection}' does not exist.", cause=exc) from exc
            raise PersistenceError(f"Search failed in '{collection}': {exc}", cause=exc) from exc
        except (ResponseHandlingException, asyncio.TimeoutError) as exc:
            raise PersistenceError(f"Search timeout/error in '{collection}': {exc}", cause=exc) from exc
        return list(response.points or [])

    async def scroll(self, collection: str, scroll_filter: Optional[Filter] = None, limit: int = 100) -> List[Record]:
        try:
            points, _next = await self._client.scroll(
                collection_name=collection,
                scroll_filter=scroll_filter,
                limit=limit,
                with_payload=True,
                with_vectors=False,
            )
        except (UnexpectedResponse, ResponseHandlingException) as exc:
            raise PersistenceError(f"Scroll failed in '{collection}': {exc}", cause=exc) from exc
        return list(points)

    @_retry
    async def delete_by_filter(self, collection: str, points_filter: Filter, wait: bool = True) -> UpdateResult:
        return await self._client.delete(
            collection_name=collection,
            points_selector=FilterSelector(filter=points_filter),
            wait=wait,
        )

    @_retry
    async def count_points(self, collection: str, count_filter: Optional[Filter] = None) -> int:
        result = await self._client.count(collection_name=collection, count_filter=count_filter, exact=True)
        return result.count

    async def close(self) -> None:
        await self._client.close()
        logger.debug("QdrantManager: client closed.")
