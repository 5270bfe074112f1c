from __future__ import annotations

from datetime import datetime
from typing import Protocol
from uuid import UUID

from direct_chat.domain.entities.conversation import Conversation


class ConversationReader(Protocol):
    async def find_direct(self, a: UUID, b: UUID) -> Conversation | None:
        """Find the direct conversation for the unordered pair {a, b}."""
        ...


class ConversationWriter(Protocol):
    async def get_or_create_direct(
        self, a: UUID, b: UUID, now: datetime,
    ) -> tuple[Conversation, bool]:
        """Atomically return the pair's conversation, creating it if absent.

        Returns (conversation, created). Must hold at most one conversation
        per unordered pair even when called concurrently.
        """
        ...
