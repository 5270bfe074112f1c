from __future__ import annotations

import asyncio
import logging
import uuid
from typing import Any
from uuid import UUID

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError as PydanticValidationError

from direct_chat.api.deps import PresenceDep, RouterDep, UoWFactory, UoWFactoryDep
from direct_chat.api.v1.schemas.message import MessageResponse
from direct_chat.application.dto.message import SendMessageDTO
from direct_chat.application.exceptions import AppError
from direct_chat.application.ports.presence import PresenceRegistry
from direct_chat.config import settings
from direct_chat.infrastructure.ws.connection import WebSocketConnection
from direct_chat.infrastructure.ws.protocol import (
    JoinData,
    PrivateMessageEnvelope,
    WsInbound,
)
from direct_chat.services import message_service
from direct_chat.services.routing_service import RealtimeRouter

logger = logging.getLogger(__name__)
router = APIRouter(tags=["realtime"])


class _Session:
    """State of one socket: its handle and the identity it joined as."""

    def __init__(self, connection: WebSocketConnection) -> None:
        self.connection = connection
        self.identity: UUID | None = None

    async def error(self, code: str, **extra: Any) -> None:
        await self.connection.send_event("error", {"code": code, **extra})


@router.websocket("/ws")
async def ws_realtime(
    websocket: WebSocket,
    presence: PresenceDep,
    realtime: RouterDep,
    uow_factory: UoWFactoryDep,
) -> None:
    await websocket.accept()
    session = _Session(WebSocketConnection(websocket))
    logger.info("Socket connected: %r", session.connection)

    heartbeat_task = asyncio.create_task(
        _heartbeat(session.connection), name="ws-heartbeat",
    )
    try:
        await _read_loop(websocket, session, presence, realtime, uow_factory)
    except WebSocketDisconnect:
        pass
    except Exception:
        logger.exception("WS error for %s", session.identity)
    finally:
        heartbeat_task.cancel()
        identity = presence.unregister(session.connection)
        logger.info("Socket disconnected: %r (identity=%s)", session.connection, identity)


async def _heartbeat(connection: WebSocketConnection) -> None:
    interval = settings.WS_HEARTBEAT_SECONDS
    try:
        while True:
            await asyncio.sleep(interval)
            await connection.send_event("pong", {})
    except asyncio.CancelledError:
        pass
    except Exception:
        logger.debug("Heartbeat stopped for %r", connection, exc_info=True)


async def _read_loop(
    ws: WebSocket,
    session: _Session,
    presence: PresenceRegistry,
    realtime: RealtimeRouter,
    uow_factory: UoWFactory,
) -> None:
    while True:
        raw = await ws.receive_text()
        try:
            msg = WsInbound.model_validate_json(raw)
        except PydanticValidationError:
            await session.error("invalid_payload")
            continue

        if msg.type == "ping":
            await session.connection.send_event("pong", {})

        elif msg.type == "join":
            await _handle_join(session, presence, msg.data)

        elif msg.type == "private_message":
            await _handle_private_message(session, realtime, uow_factory, msg.data)

        else:
            await session.error("unknown_type", type=msg.type)


async def _handle_join(
    session: _Session,
    presence: PresenceRegistry,
    data: dict[str, Any],
) -> None:
    try:
        join = JoinData.model_validate(data)
    except PydanticValidationError as exc:
        await session.error("invalid_data", detail=str(exc))
        return

    presence.register(join.identity, session.connection)
    session.identity = join.identity
    logger.info("User %s joined with %r", join.identity, session.connection)
    await session.connection.send_event("joined", {"identity": str(join.identity)})


async def _handle_private_message(
    session: _Session,
    realtime: RealtimeRouter,
    uow_factory: UoWFactory,
    data: dict[str, Any],
) -> None:
    if session.identity is None:
        await session.error("not_joined")
        return

    try:
        envelope = PrivateMessageEnvelope.model_validate(data)
    except PydanticValidationError as exc:
        await session.error("invalid_data", detail=str(exc))
        return

    if envelope.from_ != session.identity:
        await session.error("identity_mismatch")
        return

    cmd = SendMessageDTO(
        message_id=envelope.id or uuid.uuid4(),
        sender_id=envelope.from_,
        recipient_id=envelope.to,
        text=envelope.message,
        sent_at=envelope.timestamp,
    )
    async with uow_factory() as uow:
        try:
            result = await message_service.send_message(cmd, uow, realtime)
        except AppError as exc:
            await session.error("send_failed", id=str(cmd.message_id), detail=exc.detail)
            return

    ack = MessageResponse.from_record(result.record).model_dump(mode="json", by_alias=True)
    await session.connection.send_event("message.ack", ack)
