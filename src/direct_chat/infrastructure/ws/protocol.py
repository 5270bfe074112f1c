"""Realtime channel envelope models."""
from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from direct_chat.application.dto.message import MessageRecordDTO


class WsInbound(BaseModel):
    """Client → Server."""

    type: str  # join | private_message | ping
    data: dict[str, Any] = {}


class WsOutbound(BaseModel):
    """Server → Client."""

    type: str  # joined | private_message | message.ack | error | pong
    data: dict[str, Any] = {}


class JoinData(BaseModel):
    identity: UUID


class PrivateMessageEnvelope(BaseModel):
    """``{id, from, to, message, timestamp}``, shared by push and sync paths."""

    model_config = ConfigDict(populate_by_name=True)

    id: UUID | None = None
    from_: UUID = Field(alias="from")
    to: UUID
    message: str = Field(min_length=1, max_length=10_000)
    timestamp: datetime | None = None

    @classmethod
    def from_record(cls, record: MessageRecordDTO) -> PrivateMessageEnvelope:
        msg = record.message
        return cls(
            id=msg.id,
            from_=msg.sender_id,
            to=record.recipient_id,
            message=msg.text,
            timestamp=msg.sent_at,
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)
