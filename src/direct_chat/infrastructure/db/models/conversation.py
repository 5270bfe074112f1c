from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from direct_chat.infrastructure.db.base import Base


class ConversationModel(Base):
    __tablename__ = "conversations"

    conversation_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
        server_default=text("gen_random_uuid()"),
    )
    conversation_type: Mapped[str] = mapped_column(String(20), nullable=False, default="direct")
    # canonical (sorted) pair; the unique key that makes resolution race-free
    user_low: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    user_high: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )

    participants = relationship("ParticipantModel", back_populates="conversation", lazy="selectin")
    messages = relationship("MessageModel", back_populates="conversation", lazy="noload")

    __table_args__ = (
        UniqueConstraint(
            "conversation_type",
            "user_low",
            "user_high",
            name="uq_conversation_direct_pair",
        ),
        CheckConstraint("user_low < user_high", name="direct_pair_ordered"),
    )
