from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID

from direct_chat.domain.entities.message import Message


@dataclass(frozen=True, slots=True)
class SendMessageDTO:
    message_id: UUID
    sender_id: UUID
    recipient_id: UUID
    text: str
    sent_at: datetime | None = None


@dataclass(frozen=True, slots=True)
class MessageRecordDTO:
    """A stored message as seen from one side of a pair."""

    message: Message
    recipient_id: UUID


@dataclass(frozen=True, slots=True)
class SendResultDTO:
    record: MessageRecordDTO
    created: bool
    delivery: str | None = None
