from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Participant:
    conversation_id: UUID
    identity: UUID
    joined_at: datetime
