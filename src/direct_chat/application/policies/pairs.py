from __future__ import annotations

from uuid import UUID

from direct_chat.application.exceptions import ValidationError


def assert_direct_pair(a: UUID, b: UUID) -> None:
    """A direct conversation needs two distinct identities."""
    if a == b:
        raise ValidationError("A direct conversation needs two distinct users")


def counterpart(sender_id: UUID, a: UUID, b: UUID) -> UUID:
    """The other member of {a, b} from the sender's point of view."""
    return b if sender_id == a else a
