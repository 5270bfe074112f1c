from __future__ import annotations

from fastapi import APIRouter

from direct_chat.api.deps import RouterDep, UoWDep
from direct_chat.api.v1.schemas.common import SuccessResponse
from direct_chat.api.v1.schemas.message import (
    IncomingMessageRequest,
    MessageResponse,
    SendMessageRequest,
)
from direct_chat.services import message_service

router = APIRouter(prefix="/api/messages", tags=["messages"])


@router.post("", response_model=MessageResponse)
async def send_message(
    body: SendMessageRequest,
    uow: UoWDep,
    realtime: RouterDep,
) -> MessageResponse:
    result = await message_service.send_message(body.to_dto(), uow, realtime)
    return MessageResponse.from_record(result.record)


@router.post("/incoming", response_model=SuccessResponse)
async def save_incoming_message(
    body: IncomingMessageRequest,
    uow: UoWDep,
) -> SuccessResponse:
    await message_service.acknowledge_incoming(body.id, uow)
    return SuccessResponse()
