"""User database table model."""

import sqlalchemy as sa
from sqlmodel import Field

from src.salsila.entities.core._base import EntityTable


class UserTable(EntityTable, table=True):
    """Database persistence model for users.

    Email uniqueness only applies to rows that are not soft-deleted, so a
    deleted account never blocks re-registration of its address.
    """

    __tablename__ = "users"
    __table_args__ = (
        sa.Index(
            "uq_users_email_active",
            "email",
            unique=True,
            postgresql_where=sa.text("deleted_at IS NULL"),
            sqlite_where=sa.text("deleted_at IS NULL"),
        ),
    )

    role_id: int = Field(nullable=False)
    person_uid: str | None = Field(default=None, index=True)
    email: str = Field(nullable=False, index=True)
    password: str = Field(nullable=False)
