from __future__ import annotations

import uuid
from datetime import datetime

from direct_chat.application.policies.pairs import assert_direct_pair
from direct_chat.application.ports.clock import Clock, system_clock
from direct_chat.application.uow import UnitOfWork
from direct_chat.domain.entities.conversation import Conversation
from direct_chat.domain.entities.participant import Participant


async def resolve_conversation(
    a: uuid.UUID,
    b: uuid.UUID,
    uow: UnitOfWork,
    *,
    clock: Clock = system_clock,
) -> Conversation:
    """Return the direct conversation for {a, b}, creating it on first contact.

    Symmetric and idempotent. Creation goes through the writer's atomic
    get-or-create, so two first contacts racing for the same pair end up
    with a single conversation. The conversation row and both participant
    rows are committed together.
    """
    assert_direct_pair(a, b)

    existing = await uow.conversations.find_direct(a, b)
    if existing is not None:
        return existing

    now = clock.now()
    conversation, created = await uow.conversations_w.get_or_create_direct(a, b, now)
    if not created:
        return conversation

    await _add_participants(conversation, (a, b), now, uow)
    await uow.commit()
    return conversation


async def find_conversation(
    a: uuid.UUID,
    b: uuid.UUID,
    uow: UnitOfWork,
) -> Conversation | None:
    """Lookup only; never creates."""
    assert_direct_pair(a, b)
    return await uow.conversations.find_direct(a, b)


async def _add_participants(
    conversation: Conversation,
    identities: tuple[uuid.UUID, uuid.UUID],
    now: datetime,
    uow: UnitOfWork,
) -> None:
    for identity in identities:
        await uow.participants_w.add(
            Participant(
                conversation_id=conversation.id,
                identity=identity,
                joined_at=now,
            )
        )
