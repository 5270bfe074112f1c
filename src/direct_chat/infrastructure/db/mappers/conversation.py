from __future__ import annotations

from direct_chat.domain.entities.conversation import Conversation
from direct_chat.infrastructure.db.models.conversation import ConversationModel


def model_to_entity(model: ConversationModel) -> Conversation:
    return Conversation(
        id=model.conversation_id,
        type=model.conversation_type,
        created_at=model.created_at,
    )
