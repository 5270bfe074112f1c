"""In-process presence registry: identity ↔ live connection."""
from __future__ import annotations

import logging
from uuid import UUID

from direct_chat.application.ports.presence import Connection

logger = logging.getLogger(__name__)


class InMemoryPresenceRegistry:
    """Bidirectional map with at most one connection per identity.

    Methods never await, so on a single event loop each call runs to
    completion without interleaving. Sharing an instance across threads
    needs an external lock.
    """

    def __init__(self) -> None:
        self._by_identity: dict[UUID, Connection] = {}
        self._by_connection: dict[Connection, UUID] = {}

    def __len__(self) -> int:
        return len(self._by_identity)

    def register(self, identity: UUID, connection: Connection) -> None:
        # last registration wins; the superseded socket is left open
        previous = self._by_identity.get(identity)
        if previous is not None and previous != connection:
            self._by_connection.pop(previous, None)

        # a connection represents a single identity
        stale_identity = self._by_connection.get(connection)
        if stale_identity is not None and stale_identity != identity:
            self._by_identity.pop(stale_identity, None)

        self._by_identity[identity] = connection
        self._by_connection[connection] = identity
        logger.debug("Presence registered: %s (total=%d)", identity, len(self._by_identity))

    def lookup(self, identity: UUID) -> Connection | None:
        return self._by_identity.get(identity)

    def unregister(self, connection: Connection) -> UUID | None:
        identity = self._by_connection.pop(connection, None)
        if identity is None:
            return None
        if self._by_identity.get(identity) == connection:
            del self._by_identity[identity]
        logger.debug("Presence unregistered: %s", identity)
        return identity

    def clear(self) -> None:
        self._by_identity.clear()
        self._by_connection.clear()
