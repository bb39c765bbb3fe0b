"""Data layer tests.

Exercises the user table and repository against in-memory SQLite:
- entity and table conversion
- soft deletion and the include-deleted lookup
- the partial unique index on active emails
- transaction commit and rollback
- the user service running on the real repository
"""

from datetime import UTC, datetime, timedelta

import pytest
from sqlmodel import select

from src.salsila.core.errors import (
    EmailNotUniqueError,
    NotFoundError,
)
from src.salsila.core.services import DbManageService
from src.salsila.entities.core._base import RecordState
from src.salsila.entities.core.user import User, UserRepository, UserTable


def _insert(repo: UserRepository, **fields) -> User:
    fields.setdefault("role_id", 1)
    fields.setdefault("email", "ana@example.com")
    fields.setdefault("password", "hash")
    with repo.transaction() as tx:
        return tx.insert(User(**fields))


class TestUserTable:
    """Test User table persistence."""

    def test_insert_persists_all_columns(self, session, user_repository):
        user = _insert(user_repository, person_uid="p-1")

        row = session.exec(select(UserTable).where(UserTable.uid == user.uid)).one()

        assert row.email == "ana@example.com"
        assert row.role_id == 1
        assert row.person_uid == "p-1"
        assert row.password == "hash"
        assert row.state is RecordState.ACTIVE
        assert row.deleted_at is None

    def test_entity_round_trip(self, user_repository):
        user = _insert(user_repository)

        loaded = user_repository.find_one(uid=user.uid)

        assert loaded == user
        assert loaded.password == "hash"


class TestUserRepository:
    """Test UserRepository against SQLite."""

    def test_find_one_requires_a_key(self, user_repository):
        with pytest.raises(ValueError):
            user_repository.find_one()

    def test_find_one_by_email(self, user_repository):
        user = _insert(user_repository)

        assert user_repository.find_one(email="ana@example.com").uid == user.uid
        assert user_repository.find_one(email="other@example.com") is None

    def test_find_many_orders_by_creation(self, user_repository):
        base = datetime(2024, 1, 1, tzinfo=UTC)
        _insert(user_repository, email="late@example.com", created_at=base + timedelta(hours=1))
        _insert(user_repository, email="early@example.com", created_at=base)

        emails = [u.email for u in user_repository.find_many()]

        assert emails == ["early@example.com", "late@example.com"]

    def test_soft_delete_hides_but_keeps_row(self, user_repository):
        user = _insert(user_repository)

        with user_repository.transaction() as tx:
            assert tx.soft_delete(user.uid) == 1

        assert user_repository.find_one(uid=user.uid) is None
        assert user_repository.find_many() == []

        retained = user_repository.find_one(uid=user.uid, include_deleted=True)
        assert retained.state is RecordState.DELETED
        assert retained.deleted_at is not None
        assert len(user_repository.find_many(include_deleted=True)) == 1

    def test_soft_delete_missing_row(self, user_repository):
        with user_repository.transaction() as tx:
            assert tx.soft_delete("missing") == 0

    def test_update_only_touches_active_rows(self, user_repository):
        user = _insert(user_repository)
        with user_repository.transaction() as tx:
            tx.soft_delete(user.uid)

        with user_repository.transaction() as tx:
            assert tx.update(user.uid, person_uid="p-1") == 0

    def test_update_rejects_unknown_fields(self, user_repository):
        user = _insert(user_repository)

        with pytest.raises(ValueError, match="state"):
            user_repository.update(user.uid, state="deleted")

        assert user_repository.find_one(uid=user.uid) is not None

    def test_update_sets_updated_at(self, user_repository):
        user = _insert(user_repository)

        with user_repository.transaction() as tx:
            assert tx.update(user.uid, person_uid="p-1") == 1

        loaded = user_repository.find_one(uid=user.uid)
        assert loaded.person_uid == "p-1"
        assert loaded.updated_at is not None

    def test_duplicate_active_email_rejected(self, user_repository):
        _insert(user_repository)

        with pytest.raises(EmailNotUniqueError):
            _insert(user_repository)

        assert len(user_repository.find_many()) == 1

    def test_deleted_email_can_be_registered_again(self, user_repository):
        first = _insert(user_repository)
        with user_repository.transaction() as tx:
            tx.soft_delete(first.uid)

        second = _insert(user_repository)

        assert second.uid != first.uid
        assert user_repository.find_one(email="ana@example.com").uid == second.uid

    def test_transaction_rolls_back_on_error(self, user_repository):
        user = _insert(user_repository)

        with pytest.raises(RuntimeError):
            with user_repository.transaction() as tx:
                tx.update(user.uid, person_uid="p-1")
                raise RuntimeError("boom")

        assert user_repository.find_one(uid=user.uid).person_uid is None


class TestUserServiceOnDatabase:
    """The service behaves the same on the real repository."""

    def test_full_lifecycle(self, sql_user_service):
        candidate = User(role_id=1, email="ana@example.com", password="secret1")
        sql_user_service.validate_user(candidate)
        stored = sql_user_service.create_user(candidate)

        sql_user_service.attach_person("person-1", stored.uid)
        assert sql_user_service.get_user_by_uid(stored.uid).person_uid == "person-1"

        sql_user_service.delete_user_by_uid(stored.uid)
        with pytest.raises(NotFoundError):
            sql_user_service.get_user_by_uid(stored.uid)

    def test_duplicate_email_detected(self, sql_user_service):
        first = User(role_id=1, email="ana@example.com", password="secret1")
        sql_user_service.create_user(first)

        with pytest.raises(EmailNotUniqueError):
            sql_user_service.validate_user(
                User(role_id=1, email="ana@example.com", password="secret1")
            )

    def test_concurrent_registration_reports_duplicate(self, sql_user_service):
        first = User(role_id=1, email="ana@example.com", password="secret1")
        second = User(role_id=2, email="ana@example.com", password="secret2")
        # both pass validation before either is stored
        sql_user_service.validate_user(first)
        sql_user_service.validate_user(second)
        sql_user_service.create_user(first)

        with pytest.raises(EmailNotUniqueError):
            sql_user_service.create_user(second)

        assert [u.uid for u in sql_user_service.get_all_users()] == [first.uid]

    def test_attach_missing_user(self, sql_user_service):
        with pytest.raises(NotFoundError):
            sql_user_service.attach_person("person-1", "missing")


class TestDbManageService:
    def test_create_all_creates_users_table(self, session):
        service = DbManageService(session.get_bind())

        service.create_all()

        assert "users" in service.table_names()
