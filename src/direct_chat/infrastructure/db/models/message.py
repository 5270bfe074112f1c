from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, ForeignKey, Index, String, Text, text
from sqlalchemy.dialects.postgresql import TIMESTAMP, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from direct_chat.infrastructure.db.base import Base


class MessageModel(Base):
    __tablename__ = "messages"

    # supplied by the sending client; doubles as the idempotency key
    message_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), primary_key=True)
    conversation_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("conversations.conversation_id", ondelete="CASCADE"),
        nullable=False,
    )
    sender_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), nullable=False)
    message_text: Mapped[str] = mapped_column(Text, nullable=False)
    sent_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        server_default=text("now()"),
    )
    delivery_status: Mapped[str] = mapped_column(
        String(20),
        nullable=False,
        default="sent",
        server_default=text("'sent'"),
    )
    deleted_at: Mapped[datetime | None] = mapped_column(TIMESTAMP(timezone=True), nullable=True)
    deleted_by: Mapped[uuid.UUID | None] = mapped_column(UUID(as_uuid=True), nullable=True)

    conversation = relationship("ConversationModel", back_populates="messages")

    __table_args__ = (
        CheckConstraint(
            "delivery_status IN ('sent', 'delivered', 'read', 'failed')",
            name="delivery_status_known",
        ),
        Index("ix_messages_conversation_timeline", "conversation_id", "sent_at", "message_id"),
    )
