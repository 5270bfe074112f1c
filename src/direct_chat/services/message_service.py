from __future__ import annotations

import logging
import uuid

from direct_chat.application.dto.message import (
    MessageRecordDTO,
    SendMessageDTO,
    SendResultDTO,
)
from direct_chat.application.exceptions import ConflictError, ValidationError
from direct_chat.application.policies.pairs import assert_direct_pair, counterpart
from direct_chat.application.ports.clock import Clock, system_clock
from direct_chat.application.uow import UnitOfWork
from direct_chat.domain.entities.message import Message
from direct_chat.domain.value_objects.enums import DeliveryStatus
from direct_chat.services._guard import persistence_guard
from direct_chat.services.conversation_service import find_conversation, resolve_conversation
from direct_chat.services.routing_service import RealtimeRouter

logger = logging.getLogger(__name__)


async def persist_message(
    cmd: SendMessageDTO,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> tuple[MessageRecordDTO, bool]:
    """Resolve the pair's conversation and append the message idempotently.

    Returns (record, created). Re-sending an id that is already stored with
    the same payload returns the stored record with created=False.
    """
    assert_direct_pair(cmd.sender_id, cmd.recipient_id)
    if not cmd.text.strip():
        raise ValidationError("Message text must not be empty")

    async with persistence_guard(
        uow,
        "send message",
        message_id=cmd.message_id,
        sender=cmd.sender_id,
        recipient=cmd.recipient_id,
    ):
        conversation = await resolve_conversation(
            cmd.sender_id, cmd.recipient_id, uow, clock=clock,
        )
        candidate = Message(
            id=cmd.message_id,
            conversation_id=conversation.id,
            sender_id=cmd.sender_id,
            text=cmd.text,
            sent_at=cmd.sent_at or clock.now(),
            delivery_status=DeliveryStatus.SENT.value,
        )
        msg, created = await uow.messages_w.create_if_not_exists(candidate)
        if not created and not msg.same_payload(candidate):
            raise ConflictError("Message id already used for a different message")
        if created:
            await uow.commit()

    return MessageRecordDTO(message=msg, recipient_id=cmd.recipient_id), created


async def send_message(
    cmd: SendMessageDTO,
    uow: UnitOfWork,
    router: RealtimeRouter,
    *,
    clock: Clock = system_clock,
) -> SendResultDTO:
    """Persist, then notify.

    Notification runs only after the message is durable and only for the
    first successful append, so retries never cause a second live push.
    A failed push never fails the send.
    """
    record, created = await persist_message(cmd, uow, clock=clock)
    if not created:
        logger.info("Duplicate send for message %s, returning stored record", record.message.id)
        return SendResultDTO(record=record, created=False)

    delivery = await router.route(cmd.recipient_id, record)
    return SendResultDTO(record=record, created=True, delivery=delivery)


async def get_history(
    a: uuid.UUID,
    b: uuid.UUID,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> list[MessageRecordDTO]:
    """Resolve-or-create the pair's conversation and return its visible messages."""
    async with persistence_guard(uow, "get conversation", a=a, b=b):
        conversation = await resolve_conversation(a, b, uow, clock=clock)
        messages = await uow.messages.list_messages(conversation.id)

    return [
        MessageRecordDTO(message=m, recipient_id=counterpart(m.sender_id, a, b))
        for m in messages
    ]


async def clear_conversation(
    a: uuid.UUID,
    b: uuid.UUID,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> int:
    """Soft-delete every message of the pair's conversation, attributed to ``a``.

    Clearing is conversation-wide: the other participant loses the history
    too. A pair that never talked is a no-op.
    """
    async with persistence_guard(uow, "clear conversation", actor=a, other=b):
        conversation = await find_conversation(a, b, uow)
        if conversation is None:
            return 0
        count = await uow.messages_w.soft_delete_conversation(
            conversation.id, a, clock.now(),
        )
        await uow.commit()

    logger.info("Cleared %d messages in conversation %s (by %s)", count, conversation.id, a)
    return count


async def acknowledge_incoming(
    message_id: uuid.UUID | None,
    uow: UnitOfWork,
) -> bool:
    """Record that a live-pushed message reached the recipient.

    Never creates rows: the sender path has already persisted the message.
    Advances ``sent`` → ``delivered`` when the message is known; returns
    whether anything changed.
    """
    if message_id is None:
        return False

    async with persistence_guard(uow, "save incoming message", message_id=message_id):
        advanced = await uow.messages_w.advance_status(
            message_id, DeliveryStatus.SENT.value, DeliveryStatus.DELIVERED.value,
        )
        if advanced:
            await uow.commit()

    if not advanced:
        logger.debug("Incoming ack for %s changed nothing", message_id)
    return advanced
