"""Generic async repository for SQLAlchemy 2.0."""
from __future__ import annotations

from typing import ClassVar, Generic, Optional, TypeVar
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

ModelT = TypeVar("ModelT")


class BaseRepository(Generic[ModelT]):
    model: ClassVar[type]

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def get_by_id(self, id: UUID) -> Optional[ModelT]:
        return await self.session.get(self.model, id)  # type: ignore[return-value]
