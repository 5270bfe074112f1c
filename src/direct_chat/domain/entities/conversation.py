from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class Conversation:
    id: UUID
    type: str
    created_at: datetime


def canonical_pair(a: UUID, b: UUID) -> tuple[UUID, UUID]:
    """Order two identities so (a, b) and (b, a) share one key."""
    return (a, b) if a.int <= b.int else (b, a)
