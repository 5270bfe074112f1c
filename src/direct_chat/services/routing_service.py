from __future__ import annotations

import asyncio
import logging
import uuid

from direct_chat.application.dto.message import MessageRecordDTO
from direct_chat.application.ports.presence import PresenceRegistry
from direct_chat.domain.value_objects.enums import DeliveryResult
from direct_chat.infrastructure.ws.protocol import PrivateMessageEnvelope

logger = logging.getLogger(__name__)

PRIVATE_MESSAGE_EVENT = "private_message"


class RealtimeRouter:
    """One-shot live delivery of stored messages.

    At most one push per call, no acknowledgement, no retry and no queue.
    Recipients that miss the push pick the message up from history.
    """

    def __init__(self, presence: PresenceRegistry, *, push_timeout: float) -> None:
        self._presence = presence
        self._push_timeout = push_timeout

    async def route(self, recipient: uuid.UUID, record: MessageRecordDTO) -> DeliveryResult:
        connection = self._presence.lookup(recipient)
        if connection is None:
            return DeliveryResult.NOT_PRESENT

        payload = PrivateMessageEnvelope.from_record(record).to_payload()
        try:
            async with asyncio.timeout(self._push_timeout):
                await connection.send_event(PRIVATE_MESSAGE_EVENT, payload)
        except Exception:
            logger.warning(
                "Live push of %s to %s failed, dropping connection",
                record.message.id,
                recipient,
                exc_info=True,
            )
            self._presence.unregister(connection)
            return DeliveryResult.PUSH_FAILED

        return DeliveryResult.DELIVERED_LIVE
