"""Shared test fixtures."""
from __future__ import annotations

import asyncio
import dataclasses
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from typing import Any
from uuid import UUID

import pytest

from direct_chat.domain.entities.conversation import Conversation, canonical_pair
from direct_chat.domain.entities.message import Message
from direct_chat.domain.entities.participant import Participant
from direct_chat.domain.entities.user import User
from direct_chat.domain.value_objects.enums import DeliveryStatus

ALICE = UUID("550e8400-e29b-41d4-a716-446655440001")
BOB = UUID("550e8400-e29b-41d4-a716-446655440002")
CAROL = UUID("550e8400-e29b-41d4-a716-446655440003")


@pytest.fixture
def alice() -> UUID:
    return ALICE


@pytest.fixture
def bob() -> UUID:
    return BOB


class FixedClock:
    """Clock that advances one second per reading."""

    def __init__(self, start: datetime | None = None) -> None:
        self._now = start or datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)

    def now(self) -> datetime:
        current = self._now
        self._now += timedelta(seconds=1)
        return current


def make_user(user_id: UUID, name: str = "Alice") -> User:
    return User(
        id=user_id,
        display_name=name,
        email=f"{name.lower()}@student.example.edu",
        faculty="SOE",
        year_of_enrollment=2023,
        is_online=False,
        last_seen=None,
    )


@dataclass
class FakeStore:
    """Shared tables; several FakeUoWs over one store model concurrent requests."""

    conversations: dict[tuple[UUID, UUID], Conversation] = field(default_factory=dict)
    participants: list[Participant] = field(default_factory=list)
    messages: dict[UUID, Message] = field(default_factory=dict)
    users: dict[UUID, User] = field(default_factory=dict)

    def participants_of(self, conversation_id: UUID) -> set[UUID]:
        return {p.identity for p in self.participants if p.conversation_id == conversation_id}


@dataclass
class FakeConversationReader:
    _store: FakeStore

    async def find_direct(self, a: UUID, b: UUID) -> Conversation | None:
        await asyncio.sleep(0)  # query round-trip: lets concurrent callers interleave
        return self._store.conversations.get(canonical_pair(a, b))


@dataclass
class FakeConversationWriter:
    _store: FakeStore

    async def get_or_create_direct(self, a: UUID, b: UUID, now: datetime) -> tuple[Conversation, bool]:
        await asyncio.sleep(0)
        key = canonical_pair(a, b)
        # check and insert happen without a suspension point, like the unique index
        existing = self._store.conversations.get(key)
        if existing is not None:
            return existing, False
        conversation = Conversation(id=uuid.uuid4(), type="direct", created_at=now)
        self._store.conversations[key] = conversation
        return conversation, True


@dataclass
class FakeParticipantWriter:
    _store: FakeStore

    async def add(self, participant: Participant) -> None:
        if participant.identity not in self._store.participants_of(participant.conversation_id):
            self._store.participants.append(participant)


@dataclass
class FakeMessageReader:
    _store: FakeStore

    async def list_messages(self, conversation_id: UUID) -> list[Message]:
        rows = [
            m for m in self._store.messages.values()
            if m.conversation_id == conversation_id and m.deleted_at is None
        ]
        return sorted(rows, key=lambda m: (m.sent_at, m.id))

    async def get_by_id(self, message_id: UUID) -> Message | None:
        return self._store.messages.get(message_id)


@dataclass
class FakeMessageWriter:
    _store: FakeStore
    fail_with: Exception | None = None
    delay: float = 0.0

    async def create_if_not_exists(self, message: Message) -> tuple[Message, bool]:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail_with is not None:
            raise self.fail_with
        existing = self._store.messages.get(message.id)
        if existing is not None:
            return existing, False
        self._store.messages[message.id] = message
        return message, True

    async def soft_delete_conversation(self, conversation_id: UUID, actor: UUID, at: datetime) -> int:
        count = 0
        for mid, m in list(self._store.messages.items()):
            if m.conversation_id == conversation_id and m.deleted_at is None:
                self._store.messages[mid] = dataclasses.replace(m, deleted_at=at, deleted_by=actor)
                count += 1
        return count

    async def advance_status(self, message_id: UUID, from_status: str, to_status: str) -> bool:
        m = self._store.messages.get(message_id)
        if m is None or m.delivery_status != from_status:
            return False
        self._store.messages[message_id] = dataclasses.replace(m, delivery_status=to_status)
        return True


@dataclass
class FakeUserReader:
    _store: FakeStore

    async def get_by_id(self, user_id: UUID) -> User | None:
        return self._store.users.get(user_id)


@dataclass
class FakeUserWriter:
    _store: FakeStore

    async def add(self, user: User) -> None:
        self._store.users[user.id] = user

    async def set_status(self, user_id: UUID, is_online: bool, at: datetime) -> bool:
        user = self._store.users.get(user_id)
        if user is None:
            return False
        self._store.users[user_id] = dataclasses.replace(user, is_online=is_online, last_seen=at)
        return True


@dataclass
class FakeUoW:
    """In-memory UoW for unit tests."""
    store: FakeStore = field(default_factory=FakeStore)
    commits: int = 0
    rollbacks: int = 0

    def __post_init__(self) -> None:
        self.conversations = FakeConversationReader(self.store)
        self.conversations_w = FakeConversationWriter(self.store)
        self.participants_w = FakeParticipantWriter(self.store)
        self.messages = FakeMessageReader(self.store)
        self.messages_w = FakeMessageWriter(self.store)
        self.users = FakeUserReader(self.store)
        self.users_w = FakeUserWriter(self.store)

    @property
    def _committed(self) -> bool:
        return self.commits > 0

    async def flush(self) -> None:
        pass

    async def commit(self) -> None:
        self.commits += 1

    async def rollback(self) -> None:
        self.rollbacks += 1


class FakeConnection:
    """Presence connection that records pushed events."""

    def __init__(self, name: str = "conn", *, fail: bool = False, delay: float = 0.0) -> None:
        self.name = name
        self.fail = fail
        self.delay = delay
        self.events: list[tuple[str, dict[str, Any]]] = []

    def __repr__(self) -> str:
        return f"FakeConnection({self.name})"

    async def send_event(self, event_type: str, data: dict[str, Any]) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.fail:
            raise ConnectionResetError("socket closed")
        self.events.append((event_type, data))


@pytest.fixture
def uow() -> FakeUoW:
    return FakeUoW()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


def stored_message(
    *,
    conversation_id: UUID,
    sender_id: UUID = ALICE,
    text: str = "hello",
    sent_at: datetime | None = None,
    status: str = DeliveryStatus.SENT,
) -> Message:
    return Message(
        id=uuid.uuid4(),
        conversation_id=conversation_id,
        sender_id=sender_id,
        text=text,
        sent_at=sent_at or datetime.now(timezone.utc),
        delivery_status=status,
    )
