from __future__ import annotations

import uuid

from direct_chat.application.exceptions import NotFoundError
from direct_chat.application.ports.clock import Clock, system_clock
from direct_chat.application.uow import UnitOfWork
from direct_chat.domain.entities.user import User
from direct_chat.services._guard import persistence_guard


async def get_user(user_id: uuid.UUID, uow: UnitOfWork) -> User:
    async with persistence_guard(uow, "get user", user_id=user_id):
        user = await uow.users.get_by_id(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def set_online_status(
    user_id: uuid.UUID,
    is_online: bool,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> None:
    """Set the online flag and stamp last_seen. Unknown users are ignored."""
    async with persistence_guard(uow, "update status", user_id=user_id):
        await uow.users_w.set_status(user_id, is_online, clock.now())
        await uow.commit()
