from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from direct_chat.domain.entities.conversation import Conversation, canonical_pair
from direct_chat.domain.value_objects.enums import ConversationType
from direct_chat.infrastructure.db.mappers import conversation as mapper
from direct_chat.infrastructure.db.models.conversation import ConversationModel


class ConversationReaderRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def find_direct(self, a: UUID, b: UUID) -> Conversation | None:
        low, high = canonical_pair(a, b)
        stmt = select(ConversationModel).where(
            ConversationModel.conversation_type == ConversationType.DIRECT,
            ConversationModel.user_low == low,
            ConversationModel.user_high == high,
        )
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()
        return mapper.model_to_entity(model) if model else None


class ConversationWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_or_create_direct(
        self,
        a: UUID,
        b: UUID,
        now: datetime,
    ) -> tuple[Conversation, bool]:
        """Upsert guarded by uq_conversation_direct_pair.

        A concurrent creator for the same pair blocks on the unique index
        until the first transaction commits, then falls through to the
        select below and sees the winner's row.
        """
        low, high = canonical_pair(a, b)
        stmt = (
            pg_insert(ConversationModel)
            .values(
                conversation_type=ConversationType.DIRECT.value,
                user_low=low,
                user_high=high,
                created_at=now,
            )
            .on_conflict_do_nothing(
                index_elements=["conversation_type", "user_low", "user_high"],
            )
            .returning(ConversationModel)
        )
        result = await self._session.execute(stmt)
        row = result.scalar_one_or_none()
        if row is not None:
            return mapper.model_to_entity(row), True

        existing = await ConversationReaderRepo(self._session).find_direct(low, high)
        assert existing is not None
        return existing, False
