from __future__ import annotations

from enum import StrEnum


class ConversationType(StrEnum):
    DIRECT = "direct"


class DeliveryStatus(StrEnum):
    """Status persisted with a message. Advances monotonically."""

    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    FAILED = "failed"


class ClientStatus(StrEnum):
    """Client-local view of a message; a superset of DeliveryStatus."""

    SENDING = "sending"
    SENT = "sent"
    DELIVERED = "delivered"
    READ = "read"
    FAILED = "failed"
    RECEIVED = "received"


class DeliveryResult(StrEnum):
    """Outcome of a single live push attempt."""

    DELIVERED_LIVE = "delivered_live"
    NOT_PRESENT = "not_present"
    PUSH_FAILED = "push_failed"


def parse_delivery_status(value: str) -> DeliveryStatus:
    """Read a stored status; unknown values collapse to ``sent``."""
    try:
        return DeliveryStatus(value)
    except ValueError:
        return DeliveryStatus.SENT


def to_client_status(status: DeliveryStatus | str) -> ClientStatus:
    """Map a persisted status onto the client-local enum."""
    return ClientStatus(parse_delivery_status(status).value)


def to_delivery_status(status: ClientStatus) -> DeliveryStatus | None:
    """Map a client-local status onto the persisted enum.

    ``sending`` and ``received`` only exist on the client and have no
    persisted counterpart.
    """
    if status in (ClientStatus.SENDING, ClientStatus.RECEIVED):
        return None
    return DeliveryStatus(status.value)
