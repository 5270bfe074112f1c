from __future__ import annotations

from typing import Any

from direct_chat.domain.entities.message import Message
from direct_chat.infrastructure.db.models.message import MessageModel


def model_to_entity(model: MessageModel) -> Message:
    return Message(
        id=model.message_id,
        conversation_id=model.conversation_id,
        sender_id=model.sender_id,
        text=model.message_text,
        sent_at=model.sent_at,
        delivery_status=model.delivery_status,
        deleted_at=model.deleted_at,
        deleted_by=model.deleted_by,
    )


def entity_to_values(entity: Message) -> dict[str, Any]:
    """Column values for a Core INSERT."""
    return {
        "message_id": entity.id,
        "conversation_id": entity.conversation_id,
        "sender_id": entity.sender_id,
        "message_text": entity.text,
        "sent_at": entity.sent_at,
        "delivery_status": entity.delivery_status,
    }
