from __future__ import annotations

from uuid import UUID

from fastapi import APIRouter

from direct_chat.api.deps import UoWDep
from direct_chat.api.v1.schemas.common import SuccessResponse
from direct_chat.api.v1.schemas.message import MessageResponse
from direct_chat.services import message_service

router = APIRouter(prefix="/api/conversations", tags=["conversations"])


@router.get("/{user_id1}/{user_id2}", response_model=list[MessageResponse])
async def get_conversation(
    user_id1: UUID,
    user_id2: UUID,
    uow: UoWDep,
) -> list[MessageResponse]:
    records = await message_service.get_history(user_id1, user_id2, uow)
    return [MessageResponse.from_record(r) for r in records]


@router.delete("/{user_id1}/{user_id2}", response_model=SuccessResponse)
async def clear_conversation(
    user_id1: UUID,
    user_id2: UUID,
    uow: UoWDep,
) -> SuccessResponse:
    await message_service.clear_conversation(user_id1, user_id2, uow)
    return SuccessResponse()
