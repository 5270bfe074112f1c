from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from direct_chat.domain.entities.user import User


class UserResponse(BaseModel):
    uid: UUID
    name: str
    email: str | None
    faculty: str | None
    year_of_enrollment: int | None

    @classmethod
    def from_entity(cls, user: User) -> UserResponse:
        return cls(
            uid=user.id,
            name=user.display_name,
            email=user.email,
            faculty=user.faculty,
            year_of_enrollment=user.year_of_enrollment,
        )


class UserStatusRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_online: bool = Field(alias="isOnline")
