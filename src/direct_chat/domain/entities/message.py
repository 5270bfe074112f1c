from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Message:
    id: UUID
    conversation_id: UUID
    sender_id: UUID
    text: str
    sent_at: datetime
    delivery_status: str
    deleted_at: datetime | None = None
    deleted_by: UUID | None = None

    def same_payload(self, other: Message) -> bool:
        """True if ``other`` is a retry of this message rather than a clash."""
        return (
            self.conversation_id == other.conversation_id
            and self.sender_id == other.sender_id
            and self.text == other.text
        )
