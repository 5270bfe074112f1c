from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from direct_chat.domain.entities.message import Message
from direct_chat.infrastructure.db.mappers import message as mapper
from direct_chat.infrastructure.db.models.message import MessageModel


class MessageReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        stmt = (
            select(MessageModel)
            .where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.deleted_at.is_(None),
            )
            .order_by(MessageModel.sent_at.asc(), MessageModel.message_id.asc())
        )
        result = await self._session.execute(stmt)
        return [mapper.model_to_entity(m) for m in result.scalars().all()]

    async def get_by_id(self, message_id: UUID) -> Message | None:
        model = await self._session.get(MessageModel, message_id)
        return mapper.model_to_entity(model) if model else None


class MessageWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        """Insert message idempotently. Returns (message, created_flag)."""
        stmt = (
            pg_insert(MessageModel)
            .values(**mapper.entity_to_values(message))
            .on_conflict_do_nothing(index_elements=["message_id"])
            .returning(MessageModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()

        if row is not None:
            return mapper.model_to_entity(row), True

        # conflict: id already stored
        existing = await MessageReaderRepo(self._session).get_by_id(message.id)
        assert existing is not None
        return existing, False

    async def soft_delete_conversation(
        self,
        conversation_id: UUID,
        actor: UUID,
        at: datetime,
    ) -> int:
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.conversation_id == conversation_id,
                MessageModel.deleted_at.is_(None),
            )
            .values(deleted_at=at, deleted_by=actor)
        )
        result = await self._session.execute(stmt)
        return result.rowcount or 0

    async def advance_status(
        self,
        message_id: UUID,
        from_status: str,
        to_status: str,
    ) -> bool:
        stmt = (
            update(MessageModel)
            .where(
                MessageModel.message_id == message_id,
                MessageModel.delivery_status == from_status,
            )
            .values(delivery_status=to_status)
        )
        result = await self._session.execute(stmt)
        return bool(result.rowcount)
