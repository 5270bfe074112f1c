from __future__ import annotations

from typing import Protocol

from direct_chat.application.repositories.conversation import (
    ConversationReader,
    ConversationWriter,
)
from direct_chat.application.repositories.message import MessageReader, MessageWriter
from direct_chat.application.repositories.participant import ParticipantWriter
from direct_chat.application.repositories.user import UserReader, UserWriter


class UnitOfWork(Protocol):
    conversations: ConversationReader
    conversations_w: ConversationWriter
    participants_w: ParticipantWriter
    messages: MessageReader
    messages_w: MessageWriter
    users: UserReader
    users_w: UserWriter

    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
    async def flush(self) -> None: ...
