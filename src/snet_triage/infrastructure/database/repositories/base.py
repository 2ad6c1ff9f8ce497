"""
Base Repository Pattern

Generic async CRUD operations shared by all repositories, keeping
domain logic apart from data access.
"""

from typing import Generic, Optional, Type, TypeVar
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from snet_triage.infrastructure.database.connection import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):
    """
    Generic base repository bound to one session.

    Usage:
        class ChatRoomRepository(BaseRepository[ChatRoomModel]):
            pass

        repo = ChatRoomRepository(session)
        room = await repo.get_by_id(room_id)
    """

    def __init__(self, model: Type[ModelT], session: AsyncSession) -> None:
        self._model = model
        self._session = session

    async def get_by_id(self, id: UUID) -> Optional[ModelT]:
        result = await self._session.execute(
            select(self._model).where(self._model.id == id)
        )
        return result.scalar_one_or_none()

    async def create(self, entity: ModelT) -> ModelT:
        """Add entity and flush so defaults are populated."""
        self._session.add(entity)
        await self._session.flush()
        await self._session.refresh(entity)
        return entity
