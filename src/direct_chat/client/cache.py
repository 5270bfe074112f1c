"""Local message caches keyed by the unordered pair of users."""
from __future__ import annotations

import json
import logging
from typing import Protocol
from uuid import UUID

import redis.asyncio as aioredis
from pydantic import ValidationError as PydanticValidationError

from direct_chat.client.models import LocalMessage
from direct_chat.domain.entities.conversation import canonical_pair

logger = logging.getLogger(__name__)


class MessageCache(Protocol):
    async def get_conversation(self, me: UUID, peer: UUID) -> list[LocalMessage]: ...

    async def save_conversation(
        self, me: UUID, peer: UUID, messages: list[LocalMessage],
    ) -> None: ...

    async def add_message(self, me: UUID, peer: UUID, message: LocalMessage) -> None: ...

    async def update_message(self, me: UUID, peer: UUID, message: LocalMessage) -> None:
        """Replace the entry with ``message.id``; unknown ids are ignored."""
        ...

    async def clear_conversation(self, me: UUID, peer: UUID) -> None: ...


def conversation_key(prefix: str, a: UUID, b: UUID) -> str:
    low, high = canonical_pair(a, b)
    return f"{prefix}:{low}:{high}"


class MemoryMessageCache:
    def __init__(self, prefix: str = "chat:conversation") -> None:
        self._prefix = prefix
        self._data: dict[str, list[LocalMessage]] = {}

    async def get_conversation(self, me: UUID, peer: UUID) -> list[LocalMessage]:
        return list(self._data.get(self._key(me, peer), []))

    async def save_conversation(
        self, me: UUID, peer: UUID, messages: list[LocalMessage],
    ) -> None:
        self._data[self._key(me, peer)] = list(messages)

    async def add_message(self, me: UUID, peer: UUID, message: LocalMessage) -> None:
        self._data.setdefault(self._key(me, peer), []).append(message)

    async def update_message(self, me: UUID, peer: UUID, message: LocalMessage) -> None:
        entries = self._data.get(self._key(me, peer), [])
        for i, entry in enumerate(entries):
            if entry.id == message.id:
                entries[i] = message
                return

    async def clear_conversation(self, me: UUID, peer: UUID) -> None:
        self._data.pop(self._key(me, peer), None)

    def _key(self, me: UUID, peer: UUID) -> str:
        return conversation_key(self._prefix, me, peer)


class RedisMessageCache:
    """One Redis list per pair, each element a JSON-encoded wire record."""

    def __init__(self, redis: aioredis.Redis, prefix: str = "chat:conversation") -> None:
        self._redis = redis
        self._prefix = prefix

    @classmethod
    def from_url(cls, url: str, prefix: str = "chat:conversation") -> RedisMessageCache:
        return cls(aioredis.from_url(url, decode_responses=True), prefix)

    async def aclose(self) -> None:
        await self._redis.aclose()

    async def get_conversation(self, me: UUID, peer: UUID) -> list[LocalMessage]:
        raw_items = await self._redis.lrange(self._key(me, peer), 0, -1)
        messages: list[LocalMessage] = []
        for raw in raw_items:
            message = _decode(raw)
            if message is not None:
                messages.append(message)
        return messages

    async def save_conversation(
        self, me: UUID, peer: UUID, messages: list[LocalMessage],
    ) -> None:
        key = self._key(me, peer)
        async with self._redis.pipeline(transaction=True) as pipe:
            pipe.delete(key)
            if messages:
                pipe.rpush(key, *(_encode(m) for m in messages))
            await pipe.execute()

    async def add_message(self, me: UUID, peer: UUID, message: LocalMessage) -> None:
        await self._redis.rpush(self._key(me, peer), _encode(message))

    async def update_message(self, me: UUID, peer: UUID, message: LocalMessage) -> None:
        key = self._key(me, peer)
        raw_items = await self._redis.lrange(key, 0, -1)
        for index, raw in enumerate(raw_items):
            entry = _decode(raw)
            if entry is not None and entry.id == message.id:
                await self._redis.lset(key, index, _encode(message))
                return

    async def clear_conversation(self, me: UUID, peer: UUID) -> None:
        await self._redis.delete(self._key(me, peer))

    def _key(self, me: UUID, peer: UUID) -> str:
        return conversation_key(self._prefix, me, peer)


def _encode(message: LocalMessage) -> str:
    return json.dumps(message.to_wire())


def _decode(raw: str | bytes) -> LocalMessage | None:
    try:
        return LocalMessage.from_wire(json.loads(raw))
    except (ValueError, PydanticValidationError):
        logger.warning("Skipping unreadable cache entry")
        return None
