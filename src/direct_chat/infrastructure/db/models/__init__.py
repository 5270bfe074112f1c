"""Import all models so Base.metadata sees every table."""
from direct_chat.infrastructure.db.models.conversation import ConversationModel
from direct_chat.infrastructure.db.models.message import MessageModel
from direct_chat.infrastructure.db.models.participant import ParticipantModel
from direct_chat.infrastructure.db.models.user import UserModel

__all__ = [
    "ConversationModel",
    "MessageModel",
    "ParticipantModel",
    "UserModel",
]
