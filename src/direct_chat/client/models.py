from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from direct_chat.domain.value_objects.enums import ClientStatus, to_client_status


class LocalMessage(BaseModel):
    """Client cache record: a server message plus client-only statuses.

    Serialises to the wire shape ``{id, from, to, message, timestamp, status}``.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: UUID
    sender: UUID = Field(alias="from")
    recipient: UUID = Field(alias="to")
    text: str = Field(alias="message")
    timestamp: datetime
    status: ClientStatus = ClientStatus.SENT

    @field_validator("status", mode="before")
    @classmethod
    def _known_status(cls, value: Any) -> Any:
        if isinstance(value, str) and value not in ClientStatus.__members__.values():
            return to_client_status(value)
        return value

    def with_status(self, status: ClientStatus) -> LocalMessage:
        return self.model_copy(update={"status": status})

    def to_wire(self) -> dict[str, Any]:
        return self.model_dump(mode="json", by_alias=True)

    @classmethod
    def from_wire(cls, data: dict[str, Any]) -> LocalMessage:
        return cls.model_validate(data)
