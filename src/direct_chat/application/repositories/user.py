from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from direct_chat.domain.entities.user import User


class UserReader(Protocol):
    async def get_by_id(self, user_id: UUID) -> User | None: ...


class UserWriter(Protocol):
    async def add(self, user: User) -> None: ...

    async def set_status(self, user_id: UUID, is_online: bool, at: datetime) -> bool: ...
