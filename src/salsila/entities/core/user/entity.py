"""User domain entity and its API-facing shapes."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.salsila.entities.core._base import Entity


class User(Entity):
    """Identity and credential record.

    ``password`` holds the plaintext only between construction and
    ``UserService.create_user``; once persisted it is an argon2 hash. It is
    excluded from every dump and from ``repr`` so it can never leak into a
    response body or a log line.
    """

    role_id: int = Field(default=0, description="Reference to the user's role")
    person_uid: str | None = Field(
        default=None, description="Reference to the attached person, if any"
    )
    email: str = Field(default="", description="User's email address")
    password: str = Field(default="", exclude=True, repr=False)

    def __eq__(self, other: Any) -> bool:
        """Compare users by business attributes, ignoring timestamps."""
        if not isinstance(other, User):
            return False

        return (
            self.uid == other.uid
            and self.role_id == other.role_id
            and self.person_uid == other.person_uid
            and self.email == other.email
            and self.state == other.state
        )

    def __hash__(self) -> int:
        return hash((self.uid, self.role_id, self.person_uid, self.email, self.state))


class UserRead(BaseModel):
    """Public projection of a user: no credential, no lifecycle columns."""

    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    uid: str
    role_id: int
    person_uid: str | None = None
    email: str


class UserCreate(BaseModel):
    """Payload for registering a new user."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    role_id: int = 0
    email: str = ""
    password: str = Field(default="", repr=False)
    person_uid: str | None = None

    def to_entity(self) -> User:
        return User(
            role_id=self.role_id,
            email=self.email,
            password=self.password,
            person_uid=self.person_uid,
        )


class AttachPersonRequest(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    person_uid: str = Field(min_length=1)
