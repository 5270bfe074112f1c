from __future__ import annotations

from typing import Protocol

from direct_chat.domain.entities.participant import Participant


class ParticipantWriter(Protocol):
    async def add(self, participant: Participant) -> None:
        """Insert a participant row; a repeated row is a no-op."""
        ...
