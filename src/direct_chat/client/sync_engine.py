"""Per-conversation client state: cache, authoritative fetch and optimistic sends.

Message lifecycle on this side::

    sending --ack--> sent
    sending --error/timeout--> failed --retry--> sending

Messages pushed live by the server start as ``received``.
"""
from __future__ import annotations

import logging
import uuid
from typing import Any, Awaitable, Callable, Mapping

from pydantic import ValidationError as PydanticValidationError

from direct_chat.application.ports.clock import Clock, system_clock
from direct_chat.client.api import ChatApi, ChatApiError
from direct_chat.client.cache import MessageCache
from direct_chat.client.models import LocalMessage
from direct_chat.domain.value_objects.enums import ClientStatus

logger = logging.getLogger(__name__)

SYNC_WARNING = "Failed to sync with server"
SEND_WARNING = "Message failed to send. Will retry when connection is restored."

_UNCONFIRMED = (ClientStatus.SENDING, ClientStatus.FAILED)


class ChatSyncEngine:
    """Keeps one visible message list for the conversation between ``me`` and ``peer``.

    The server is the source of truth; the cache is a best-effort mirror
    used for instant display. A failed server call never drops local data.
    All mutations of the visible list happen between awaits, so handlers
    running on one event loop see consistent state.
    """

    def __init__(
        self,
        me: uuid.UUID,
        peer: uuid.UUID,
        api: ChatApi,
        cache: MessageCache,
        *,
        clock: Clock = system_clock,
        id_factory: Callable[[], uuid.UUID] = uuid.uuid4,
    ) -> None:
        self.me = me
        self.peer = peer
        self._api = api
        self._cache = cache
        self._clock = clock
        self._id_factory = id_factory
        self._messages: list[LocalMessage] = []
        self._in_flight: set[uuid.UUID] = set()
        self.connection_warning: str | None = None

    @property
    def messages(self) -> list[LocalMessage]:
        return list(self._messages)

    @property
    def failed_messages(self) -> list[LocalMessage]:
        return [m for m in self._messages if m.status == ClientStatus.FAILED]

    def get(self, message_id: uuid.UUID) -> LocalMessage | None:
        for message in self._messages:
            if message.id == message_id:
                return message
        return None

    async def load(self) -> list[LocalMessage]:
        """Show the cache at once, then replace it with the server's history.

        On fetch failure the cache-rendered list stays and a warning is set.
        Own messages the server has not confirmed yet (sending or failed)
        are kept after the server history so they can still be retried.
        A cached ``sending`` entry with no request in flight (left over from
        an earlier run) is marked ``failed`` so a retry can pick it up.
        """
        cached = await self._cached("read", self._cache.get_conversation(self.me, self.peer))
        if cached:
            self._messages = [self._settle_stranded(m) for m in cached]
            for original, message in zip(cached, self._messages):
                if message is not original:
                    await self._cached(
                        "update", self._cache.update_message(self.me, self.peer, message),
                    )
            logger.info("Loaded %d messages from cache", len(cached))

        try:
            server_messages = await self._api.get_conversation(self.me, self.peer)
        except ChatApiError as exc:
            logger.warning("Failed to load messages from server: %s", exc)
            self.connection_warning = SYNC_WARNING
            return self.messages

        server_ids = {m.id for m in server_messages}
        pending = [
            m for m in self._messages
            if m.sender == self.me and m.status in _UNCONFIRMED and m.id not in server_ids
        ]
        self._messages = [*server_messages, *pending]
        await self._cached(
            "save", self._cache.save_conversation(self.me, self.peer, self._messages),
        )
        self.connection_warning = SEND_WARNING if self.failed_messages else None
        logger.info("Loaded %d messages from server", len(server_messages))
        return self.messages

    async def send(self, text: str) -> LocalMessage:
        message = LocalMessage(
            id=self._id_factory(),
            sender=self.me,
            recipient=self.peer,
            text=text,
            timestamp=self._clock.now(),
            status=ClientStatus.SENDING,
        )
        self._messages.append(message)
        await self._cached("add", self._cache.add_message(self.me, self.peer, message))
        return await self._submit(message)

    async def retry(self, message_id: uuid.UUID) -> LocalMessage | None:
        """Re-send a failed message under its original id.

        Anything not currently ``failed`` is left alone, which also keeps a
        manual retry and a bulk retry from submitting the same message twice.
        """
        current = self.get(message_id)
        if current is None or current.status != ClientStatus.FAILED:
            logger.debug("Skipping retry of %s (status=%s)", message_id, current and current.status)
            return current

        sending = current.with_status(ClientStatus.SENDING)
        self._replace(sending)
        return await self._submit(sending)

    async def retry_failed(self) -> list[LocalMessage]:
        """Retry every failed message, one at a time, in list order."""
        results: list[LocalMessage] = []
        for message_id in [m.id for m in self.failed_messages]:
            outcome = await self.retry(message_id)
            if outcome is not None:
                results.append(outcome)
        return results

    async def handle_incoming(self, payload: Mapping[str, Any]) -> LocalMessage | None:
        """Apply a live ``private_message`` push.

        The message is shown and cached before the server is told about it;
        a failed acknowledgement is only logged because the sender's request
        already stored the message.
        """
        try:
            message = LocalMessage(
                id=payload.get("id") or self._id_factory(),
                sender=payload["from"],
                recipient=self.me,
                text=payload["message"],
                timestamp=payload.get("timestamp") or self._clock.now(),
                status=ClientStatus.RECEIVED,
            )
        except (KeyError, PydanticValidationError):
            logger.warning("Ignoring malformed incoming message: %r", dict(payload))
            return None

        if message.sender != self.peer:
            logger.debug("Ignoring message from %s outside this conversation", message.sender)
            return None

        existing = self.get(message.id)
        if existing is not None:
            return existing

        self._messages.append(message)
        await self._cached("add", self._cache.add_message(self.me, self.peer, message))

        try:
            await self._api.save_incoming(message)
        except ChatApiError as exc:
            logger.error("Failed to save incoming message %s to server: %s", message.id, exc)
        return message

    async def clear(self, confirm: Callable[[], bool]) -> bool:
        """Clear the conversation after ``confirm()`` agrees.

        Local state is emptied first; a server failure is logged and the
        local view stays cleared until the next load.
        """
        if not confirm():
            return False

        self._messages.clear()
        await self._cached("clear", self._cache.clear_conversation(self.me, self.peer))

        try:
            await self._api.clear_conversation(self.me, self.peer)
        except ChatApiError as exc:
            logger.error("Failed to clear chat on server: %s", exc)
        return True

    async def _submit(self, message: LocalMessage) -> LocalMessage:
        self._in_flight.add(message.id)
        try:
            saved = await self._api.send_message(message)
        except ChatApiError as exc:
            logger.warning("Failed to send message %s: %s", message.id, exc)
            failed = message.with_status(ClientStatus.FAILED)
            self._replace(failed)
            await self._cached("update", self._cache.update_message(self.me, self.peer, failed))
            self.connection_warning = SEND_WARNING
            return failed
        finally:
            self._in_flight.discard(message.id)

        sent = saved.model_copy(update={"id": message.id, "status": ClientStatus.SENT})
        self._replace(sent)
        await self._cached("update", self._cache.update_message(self.me, self.peer, sent))
        if self.connection_warning == SEND_WARNING and not self.failed_messages:
            self.connection_warning = None
        return sent

    def _settle_stranded(self, message: LocalMessage) -> LocalMessage:
        if (
            message.sender == self.me
            and message.status == ClientStatus.SENDING
            and message.id not in self._in_flight
        ):
            logger.info("Message %s was left sending, marking failed", message.id)
            return message.with_status(ClientStatus.FAILED)
        return message

    def _replace(self, message: LocalMessage) -> None:
        for i, entry in enumerate(self._messages):
            if entry.id == message.id:
                self._messages[i] = message
                return

    async def _cached(self, op: str, call: Awaitable[Any]) -> Any:
        try:
            return await call
        except Exception:
            logger.warning("Message cache %s failed", op, exc_info=True)
            return None
