from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from direct_chat.api.deps import UoWDep
from direct_chat.api.v1.schemas.common import SuccessResponse
from direct_chat.api.v1.schemas.user import UserResponse, UserStatusRequest
from direct_chat.services import user_service

router = APIRouter(prefix="/api/users", tags=["users"])


@router.get("/{user_id}", response_model=UserResponse)
async def get_user(user_id: UUID, uow: UoWDep) -> UserResponse:
    user = await user_service.get_user(user_id, uow)
    return UserResponse.from_entity(user)


@router.post("/{user_id}/status", response_model=SuccessResponse)
async def update_status(
    user_id: UUID,
    body: UserStatusRequest,
    uow: UoWDep,
) -> SuccessResponse:
    await user_service.set_online_status(user_id, body.is_online, uow)
    return SuccessResponse()
