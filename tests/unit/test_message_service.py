from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone

import pytest

from direct_chat.application.dto.message import SendMessageDTO
from direct_chat.application.exceptions import (
    ConflictError,
    PersistenceError,
    ValidationError,
)
from direct_chat.config import settings
from direct_chat.domain.value_objects.enums import DeliveryResult, DeliveryStatus
from direct_chat.infrastructure.ws.presence import InMemoryPresenceRegistry
from direct_chat.services import message_service
from direct_chat.services.routing_service import RealtimeRouter
from tests.conftest import ALICE, BOB, CAROL, FakeConnection

T0 = datetime(2024, 9, 1, 9, 0, tzinfo=timezone.utc)


def _cmd(text: str = "hello", *, sender=ALICE, recipient=BOB, sent_at=None, message_id=None):
    return SendMessageDTO(
        message_id=message_id or uuid.uuid4(),
        sender_id=sender,
        recipient_id=recipient,
        text=text,
        sent_at=sent_at,
    )


@pytest.fixture
def presence() -> InMemoryPresenceRegistry:
    return InMemoryPresenceRegistry()


@pytest.fixture
def router(presence) -> RealtimeRouter:
    return RealtimeRouter(presence, push_timeout=0.5)


@pytest.mark.asyncio
async def test_persist_creates_message(uow, clock):
    cmd = _cmd(sent_at=T0)

    record, created = await message_service.persist_message(cmd, uow, clock=clock)

    assert created is True
    assert record.message.id == cmd.message_id
    assert record.message.text == "hello"
    assert record.message.sent_at == T0
    assert record.message.delivery_status == DeliveryStatus.SENT
    assert record.recipient_id == BOB
    assert uow._committed is True


@pytest.mark.asyncio
async def test_persist_defaults_sent_at_to_server_time(uow, clock):
    record, _ = await message_service.persist_message(_cmd(), uow, clock=clock)

    assert record.message.sent_at.tzinfo is not None
    assert record.message.sent_at.year == 2024


@pytest.mark.asyncio
async def test_persist_is_idempotent_on_message_id(uow, clock):
    cmd = _cmd(sent_at=T0)

    first, created1 = await message_service.persist_message(cmd, uow, clock=clock)
    commits = uow.commits
    second, created2 = await message_service.persist_message(cmd, uow, clock=clock)

    assert created1 is True
    assert created2 is False
    assert first.message == second.message
    assert len(uow.store.messages) == 1
    assert uow.commits == commits


@pytest.mark.asyncio
async def test_retry_returns_original_record_even_with_new_timestamp(uow, clock):
    message_id = uuid.uuid4()
    await message_service.persist_message(_cmd(message_id=message_id, sent_at=T0), uow, clock=clock)

    record, created = await message_service.persist_message(
        _cmd(message_id=message_id, sent_at=T0 + timedelta(minutes=5)), uow, clock=clock,
    )

    assert created is False
    assert record.message.sent_at == T0


@pytest.mark.asyncio
async def test_reused_id_with_different_text_conflicts(uow, clock):
    message_id = uuid.uuid4()
    await message_service.persist_message(_cmd("hello", message_id=message_id), uow, clock=clock)

    with pytest.raises(ConflictError):
        await message_service.persist_message(_cmd("bye", message_id=message_id), uow, clock=clock)

    assert uow.store.messages[message_id].text == "hello"
    assert uow.rollbacks == 1


@pytest.mark.asyncio
async def test_reused_id_in_another_conversation_conflicts(uow, clock):
    message_id = uuid.uuid4()
    await message_service.persist_message(_cmd(message_id=message_id), uow, clock=clock)

    with pytest.raises(ConflictError):
        await message_service.persist_message(
            _cmd(message_id=message_id, recipient=CAROL), uow, clock=clock,
        )


@pytest.mark.asyncio
async def test_blank_text_rejected(uow, clock):
    with pytest.raises(ValidationError):
        await message_service.persist_message(_cmd("   "), uow, clock=clock)
    assert uow.store.messages == {}


@pytest.mark.asyncio
async def test_message_to_self_rejected(uow, clock):
    with pytest.raises(ValidationError):
        await message_service.persist_message(_cmd(recipient=ALICE), uow, clock=clock)


@pytest.mark.asyncio
async def test_store_failure_becomes_persistence_error(uow, clock):
    uow.messages_w.fail_with = OSError("connection refused by 10.0.0.5")

    with pytest.raises(PersistenceError) as exc_info:
        await message_service.persist_message(_cmd(), uow, clock=clock)

    assert exc_info.value.detail == "Failed to send message"
    assert "10.0.0.5" not in str(exc_info.value)
    assert uow.rollbacks == 1


@pytest.mark.asyncio
async def test_store_timeout_becomes_persistence_error(uow, clock, monkeypatch):
    monkeypatch.setattr(settings, "STORE_TIMEOUT_SECONDS", 0.01)
    uow.messages_w.delay = 1.0

    with pytest.raises(PersistenceError):
        await message_service.persist_message(_cmd(), uow, clock=clock)


@pytest.mark.asyncio
async def test_history_is_ascending_and_symmetric(uow, clock):
    late = _cmd("second", sent_at=T0 + timedelta(seconds=30))
    early = _cmd("first", sender=BOB, recipient=ALICE, sent_at=T0)
    await message_service.persist_message(late, uow, clock=clock)
    await message_service.persist_message(early, uow, clock=clock)

    from_alice = await message_service.get_history(ALICE, BOB, uow, clock=clock)
    from_bob = await message_service.get_history(BOB, ALICE, uow, clock=clock)

    assert [r.message.text for r in from_alice] == ["first", "second"]
    assert [r.message.id for r in from_bob] == [r.message.id for r in from_alice]
    assert [r.recipient_id for r in from_alice] == [ALICE, BOB]


@pytest.mark.asyncio
async def test_history_of_new_pair_is_empty_and_creates_conversation(uow, clock):
    records = await message_service.get_history(ALICE, CAROL, uow, clock=clock)

    assert records == []
    assert len(uow.store.conversations) == 1


@pytest.mark.asyncio
async def test_clear_soft_deletes_for_both_participants(uow, clock):
    await message_service.persist_message(_cmd("one"), uow, clock=clock)
    await message_service.persist_message(_cmd("two", sender=BOB, recipient=ALICE), uow, clock=clock)

    count = await message_service.clear_conversation(ALICE, BOB, uow, clock=clock)

    assert count == 2
    assert await message_service.get_history(BOB, ALICE, uow, clock=clock) == []
    rows = list(uow.store.messages.values())
    assert len(rows) == 2
    assert all(m.deleted_at is not None and m.deleted_by == ALICE for m in rows)


@pytest.mark.asyncio
async def test_clear_keeps_later_messages_visible(uow, clock):
    await message_service.persist_message(_cmd("old"), uow, clock=clock)
    await message_service.clear_conversation(ALICE, BOB, uow, clock=clock)
    await message_service.persist_message(_cmd("new"), uow, clock=clock)

    records = await message_service.get_history(ALICE, BOB, uow, clock=clock)

    assert [r.message.text for r in records] == ["new"]


@pytest.mark.asyncio
async def test_clear_unknown_pair_is_noop(uow, clock):
    count = await message_service.clear_conversation(ALICE, BOB, uow, clock=clock)

    assert count == 0
    assert uow.store.conversations == {}
    assert uow.commits == 0


@pytest.mark.asyncio
async def test_send_pushes_to_present_recipient(uow, clock, presence, router):
    conn = FakeConnection("bob")
    presence.register(BOB, conn)
    cmd = _cmd("hi bob", sent_at=T0)

    result = await message_service.send_message(cmd, uow, router, clock=clock)

    assert result.created is True
    assert result.delivery == DeliveryResult.DELIVERED_LIVE
    assert conn.events == [
        (
            "private_message",
            {
                "id": str(cmd.message_id),
                "from": str(ALICE),
                "to": str(BOB),
                "message": "hi bob",
                "timestamp": "2024-09-01T09:00:00Z",
            },
        )
    ]


@pytest.mark.asyncio
async def test_send_to_absent_recipient_still_succeeds(uow, clock, router):
    result = await message_service.send_message(_cmd(), uow, router, clock=clock)

    assert result.created is True
    assert result.delivery == DeliveryResult.NOT_PRESENT
    assert len(uow.store.messages) == 1


@pytest.mark.asyncio
async def test_send_survives_failed_push(uow, clock, presence, router):
    presence.register(BOB, FakeConnection("bob", fail=True))

    result = await message_service.send_message(_cmd(), uow, router, clock=clock)

    assert result.delivery == DeliveryResult.PUSH_FAILED
    assert len(uow.store.messages) == 1
    assert presence.lookup(BOB) is None


@pytest.mark.asyncio
async def test_retried_send_is_not_pushed_twice(uow, clock, presence, router):
    conn = FakeConnection("bob")
    presence.register(BOB, conn)
    cmd = _cmd()

    await message_service.send_message(cmd, uow, router, clock=clock)
    retry = await message_service.send_message(cmd, uow, router, clock=clock)

    assert retry.created is False
    assert retry.delivery is None
    assert len(conn.events) == 1


@pytest.mark.asyncio
async def test_failed_persist_is_never_pushed(uow, clock, presence, router):
    conn = FakeConnection("bob")
    presence.register(BOB, conn)
    uow.messages_w.fail_with = RuntimeError("disk full")

    with pytest.raises(PersistenceError):
        await message_service.send_message(_cmd(), uow, router, clock=clock)

    assert conn.events == []


@pytest.mark.asyncio
async def test_acknowledge_incoming_advances_to_delivered(uow, clock):
    cmd = _cmd()
    await message_service.persist_message(cmd, uow, clock=clock)

    assert await message_service.acknowledge_incoming(cmd.message_id, uow) is True
    assert uow.store.messages[cmd.message_id].delivery_status == DeliveryStatus.DELIVERED

    assert await message_service.acknowledge_incoming(cmd.message_id, uow) is False
    assert uow.store.messages[cmd.message_id].delivery_status == DeliveryStatus.DELIVERED


@pytest.mark.asyncio
async def test_acknowledge_unknown_message_creates_nothing(uow):
    assert await message_service.acknowledge_incoming(uuid.uuid4(), uow) is False
    assert await message_service.acknowledge_incoming(None, uow) is False
    assert uow.store.messages == {}
