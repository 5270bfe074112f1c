from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from direct_chat.application.dto.message import MessageRecordDTO, SendMessageDTO
from direct_chat.domain.value_objects.enums import DeliveryStatus, parse_delivery_status


class SendMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    from_: UUID = Field(alias="from")
    to: UUID
    message: str = Field(min_length=1, max_length=10_000)
    timestamp: datetime | None = None
    # sent by the web client; profile data is owned elsewhere
    sender_info: dict[str, Any] | None = Field(default=None, alias="senderInfo")
    receiver_info: dict[str, Any] | None = Field(default=None, alias="receiverInfo")

    def to_dto(self) -> SendMessageDTO:
        return SendMessageDTO(
            message_id=self.id,
            sender_id=self.from_,
            recipient_id=self.to,
            text=self.message,
            sent_at=self.timestamp,
        )


class IncomingMessageRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID | None = None
    from_: UUID = Field(alias="from")
    to: UUID
    message: str
    timestamp: datetime | None = None
    status: str | None = None


class MessageResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: UUID
    from_: UUID = Field(alias="from")
    to: UUID
    message: str
    timestamp: datetime
    status: DeliveryStatus

    @classmethod
    def from_record(cls, record: MessageRecordDTO) -> MessageResponse:
        msg = record.message
        return cls(
            id=msg.id,
            from_=msg.sender_id,
            to=record.recipient_id,
            message=msg.text,
            timestamp=msg.sent_at,
            status=parse_delivery_status(msg.delivery_status),
        )
