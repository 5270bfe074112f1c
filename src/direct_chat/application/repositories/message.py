from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from direct_chat.domain.entities.message import Message


class MessageReader(Protocol):
    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        """Non-deleted messages, ascending by sent_at."""
        ...

    async def get_by_id(self, message_id: UUID) -> Message | None: ...


class MessageWriter(Protocol):
    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        """Insert message. Return (message, created). If the id exists → return existing."""
        ...

    async def soft_delete_conversation(
        self, conversation_id: UUID, actor: UUID, at: datetime,
    ) -> int: ...

    async def advance_status(
        self, message_id: UUID, from_status: str, to_status: str,
    ) -> bool: ...
