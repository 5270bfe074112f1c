from __future__ import annotations

from direct_chat.domain.entities.user import User
from direct_chat.infrastructure.db.models.user import UserModel


def model_to_entity(model: UserModel) -> User:
    return User(
        id=model.user_id,
        display_name=model.display_name,
        email=model.email,
        faculty=model.faculty,
        year_of_enrollment=model.year_of_enrollment,
        is_online=model.is_online,
        last_seen=model.last_seen,
    )


def entity_to_model(entity: User) -> UserModel:
    return UserModel(
        user_id=entity.id,
        display_name=entity.display_name,
        email=entity.email,
        faculty=entity.faculty,
        year_of_enrollment=entity.year_of_enrollment,
        is_online=entity.is_online,
        last_seen=entity.last_seen,
    )
