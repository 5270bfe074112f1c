from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class User:
    id: UUID
    display_name: str
    email: str | None
    faculty: str | None
    year_of_enrollment: int | None
    is_online: bool
    last_seen: datetime | None
