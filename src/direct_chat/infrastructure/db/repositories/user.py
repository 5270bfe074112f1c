from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import update
from sqlalchemy.ext.asyncio import AsyncSession

from direct_chat.domain.entities.user import User
from direct_chat.infrastructure.db.mappers import user as mapper
from direct_chat.infrastructure.db.models.user import UserModel


class UserReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_id(self, user_id: UUID) -> User | None:
        model = await self._session.get(UserModel, user_id)
        return mapper.model_to_entity(model) if model else None


class UserWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, user: User) -> None:
        self._session.add(mapper.entity_to_model(user))
        await self._session.flush()

    async def set_status(self, user_id: UUID, is_online: bool, at: datetime) -> bool:
        stmt = (
            update(UserModel)
            .where(UserModel.user_id == user_id)
            .values(is_online=is_online, last_seen=at)
        )
        result = await self._session.execute(stmt)
        return bool(result.rowcount)
