import enum
import uuid
from datetime import UTC, datetime

import sqlalchemy as sa
from pydantic import BaseModel
from pydantic import Field as PydanticField
from sqlmodel import Field, SQLModel


def utcnow() -> datetime:
    return datetime.now(UTC)


class RecordState(enum.StrEnum):
    """Lifecycle state of a persisted record."""

    ACTIVE = "active"
    DELETED = "deleted"


class Entity(BaseModel):
    """Base entity class with auto-generated UUID identifier."""

    uid: str = PydanticField(
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique identifier for the entity",
    )

    state: RecordState = PydanticField(default=RecordState.ACTIVE)
    created_at: datetime = PydanticField(default_factory=utcnow)
    updated_at: datetime | None = PydanticField(default=None)
    deleted_at: datetime | None = PydanticField(default=None)

    @property
    def is_deleted(self) -> bool:
        return self.state is RecordState.DELETED


class EntityTable(SQLModel, table=False):
    """Base table with UUID primary key, timestamps and soft-delete state."""

    uid: str = Field(
        primary_key=True,
        default_factory=lambda: str(uuid.uuid4()),
        description="Unique identifier for the entity",
    )

    state: RecordState = Field(
        default=RecordState.ACTIVE,
        sa_type=sa.Enum(
            RecordState,
            name="record_state",
            native_enum=False,
            length=16,
            values_callable=lambda states: [s.value for s in states],
        ),
        nullable=False,
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_type=sa.DateTime(timezone=True),
        nullable=False,
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_type=sa.DateTime(timezone=True),
        sa_column_kwargs={"onupdate": utcnow},
    )
    deleted_at: datetime | None = Field(
        default=None,
        sa_type=sa.DateTime(timezone=True),
    )
