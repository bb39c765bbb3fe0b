"""User data access: the gateway protocol and its SQLModel implementation."""

from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from typing import Any, Protocol

from loguru import logger
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from src.salsila.core.errors import EmailNotUniqueError, PersistenceError
from src.salsila.entities.core._base import RecordState, utcnow

from .entity import User
from .table import UserTable

_MUTABLE_FIELDS = frozenset({"role_id", "person_uid", "email", "password"})


def _violates_active_email(error: IntegrityError) -> bool:
    # sqlite names the column, postgres names the index
    message = str(error.orig)
    return "uq_users_email_active" in message or "users.email" in message


class UserGateway(Protocol):
    """Capabilities the user service needs from storage.

    Lookups return ``None`` when nothing matches; infrastructure failures are
    raised as ``PersistenceError``. ``insert`` raises ``EmailNotUniqueError``
    when another active user already holds the email.
    """

    def find_one(
        self,
        *,
        uid: str | None = None,
        email: str | None = None,
        include_deleted: bool = False,
    ) -> User | None: ...

    def find_many(self, *, include_deleted: bool = False) -> list[User]: ...

    def insert(self, user: User) -> User: ...

    def update(self, uid: str, **changes: Any) -> int: ...

    def soft_delete(self, uid: str) -> int: ...

    def transaction(self) -> AbstractContextManager["UserGateway"]: ...


class UserRepository:
    """Data-access layer for users."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @contextmanager
    def _storage_errors(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as e:
            logger.error(
                "User storage operation failed",
                operation=operation,
                error_type=type(e).__name__,
            )
            raise PersistenceError() from e

    @staticmethod
    def _to_entity(row: UserTable) -> User:
        return User.model_validate(row, from_attributes=True)

    def _active_row(self, uid: str) -> UserTable | None:
        statement = select(UserTable).where(
            UserTable.uid == uid, UserTable.state == RecordState.ACTIVE
        )
        return self._session.exec(statement).first()

    def find_one(
        self,
        *,
        uid: str | None = None,
        email: str | None = None,
        include_deleted: bool = False,
    ) -> User | None:
        if uid is None and email is None:
            raise ValueError("find_one requires uid or email")

        statement = select(UserTable)
        if uid is not None:
            statement = statement.where(UserTable.uid == uid)
        if email is not None:
            statement = statement.where(UserTable.email == email)
        if not include_deleted:
            statement = statement.where(UserTable.state == RecordState.ACTIVE)
        statement = statement.order_by(UserTable.created_at)

        with self._storage_errors("find_one"):
            row = self._session.exec(statement).first()
        if row is None:
            return None
        return self._to_entity(row)

    def find_many(self, *, include_deleted: bool = False) -> list[User]:
        statement = select(UserTable).order_by(UserTable.created_at)
        if not include_deleted:
            statement = statement.where(UserTable.state == RecordState.ACTIVE)

        with self._storage_errors("find_many"):
            rows = self._session.exec(statement).all()
        return [self._to_entity(row) for row in rows]

    def insert(self, user: User) -> User:
        row = UserTable.model_validate(user, from_attributes=True)
        with self._storage_errors("insert"):
            self._session.add(row)
            try:
                self._session.flush()
            except IntegrityError as e:
                if not _violates_active_email(e):
                    raise
                logger.info("Insert rejected by active email index", user_uid=user.uid)
                raise EmailNotUniqueError() from e
            self._session.refresh(row)
        return self._to_entity(row)

    def update(self, uid: str, **changes: Any) -> int:
        """Apply ``changes`` to the active user ``uid``; returns rows affected."""
        unknown = set(changes) - _MUTABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update user fields: {sorted(unknown)}")

        with self._storage_errors("update"):
            row = self._active_row(uid)
            if row is None:
                return 0
            for field, value in changes.items():
                setattr(row, field, value)
            row.updated_at = utcnow()
            self._session.add(row)
            self._session.flush()
        return 1

    def soft_delete(self, uid: str) -> int:
        with self._storage_errors("soft_delete"):
            row = self._active_row(uid)
            if row is None:
                return 0
            now = utcnow()
            row.state = RecordState.DELETED
            row.deleted_at = now
            row.updated_at = now
            self._session.add(row)
            self._session.flush()
        return 1

    @contextmanager
    def transaction(self) -> Iterator["UserRepository"]:
        """Commit on success, roll back on any failure."""
        try:
            yield self
            self._session.commit()
        except SQLAlchemyError as e:
            self._session.rollback()
            logger.error(
                "User transaction failed", error_type=type(e).__name__
            )
            raise PersistenceError() from e
        except Exception:
            self._session.rollback()
            raise
