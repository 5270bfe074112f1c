"""Create the schema and seed two demo users with a short conversation."""
from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone

from direct_chat.application.dto.message import SendMessageDTO
from direct_chat.domain.entities.user import User
from direct_chat.infrastructure.db.base import Base
from direct_chat.infrastructure.db.models import UserModel  # noqa: F401  registers tables
from direct_chat.infrastructure.db.session import AsyncSessionLocal, engine
from direct_chat.infrastructure.db.uow import SqlAlchemyUoW
from direct_chat.logging_config import configure_logging
from direct_chat.services import message_service

logger = logging.getLogger(__name__)

JOHN = uuid.UUID("550e8400-e29b-41d4-a716-446655440000")
ALICE = uuid.UUID("550e8400-e29b-41d4-a716-446655440001")


async def seed() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        uow = SqlAlchemyUoW(session)
        for user_id, name, email, faculty, year in (
            (JOHN, "John Doe", "john.doe.2024@student.example.edu", "SCIS", 2024),
            (ALICE, "Alice", "alice.2023@student.example.edu", "SOE", 2023),
        ):
            if await uow.users.get_by_id(user_id) is None:
                await uow.users_w.add(
                    User(
                        id=user_id,
                        display_name=name,
                        email=email,
                        faculty=faculty,
                        year_of_enrollment=year,
                        is_online=False,
                        last_seen=None,
                    )
                )
        await uow.commit()

        start = datetime.now(timezone.utc) - timedelta(minutes=5)
        messages_data = [
            (JOHN, ALICE, "Hi Alice, are you in the lab today?"),
            (ALICE, JOHN, "Yes, until four."),
            (JOHN, ALICE, "Great, see you there."),
        ]
        for i, (sender, recipient, text) in enumerate(messages_data):
            await message_service.persist_message(
                SendMessageDTO(
                    message_id=uuid.uuid5(JOHN, f"seed-{i}"),
                    sender_id=sender,
                    recipient_id=recipient,
                    text=text,
                    sent_at=start + timedelta(minutes=i),
                ),
                uow,
            )

    logger.info("Seeded users %s, %s and %d messages", JOHN, ALICE, len(messages_data))


def main() -> None:
    configure_logging("INFO")
    asyncio.run(seed())


if __name__ == "__main__":
    main()
