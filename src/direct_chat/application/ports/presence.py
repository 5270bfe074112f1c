from __future__ import annotations

from typing import Any, Protocol
from uuid import UUID


class Connection(Protocol):
    """One live realtime connection. Implementations must be hashable."""

    async def send_event(self, event_type: str, data: dict[str, Any]) -> None: ...


class PresenceRegistry(Protocol):
    def register(self, identity: UUID, connection: Connection) -> None: ...

    def lookup(self, identity: UUID) -> Connection | None: ...

    def unregister(self, connection: Connection) -> UUID | None:
        """Drop whichever identity ``connection`` currently represents."""
        ...
