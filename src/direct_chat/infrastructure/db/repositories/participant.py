from __future__ import annotations

from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from direct_chat.domain.entities.participant import Participant
from direct_chat.infrastructure.db.models.participant import ParticipantModel


class ParticipantWriterRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def add(self, participant: Participant) -> None:
        stmt = (
            pg_insert(ParticipantModel)
            .values(
                conversation_id=participant.conversation_id,
                user_id=participant.identity,
                joined_at=participant.joined_at,
            )
            .on_conflict_do_nothing(index_elements=["conversation_id", "user_id"])
        )
        await self._session.execute(stmt)
