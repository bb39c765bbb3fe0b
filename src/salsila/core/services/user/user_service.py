from loguru import logger

from src.salsila.core.errors import (
    EmailNotUniqueError,
    EmailRequiredError,
    NotFoundError,
    PasswordRequiredError,
    PasswordTooShortError,
    RoleRequiredError,
)
from src.salsila.core.security import PasswordHasher
from src.salsila.entities.core.user import User, UserGateway, UserRead
from src.salsila.runtime.context import get_config


class UserService:
    """Business rules for user accounts.

    The service holds no state of its own; storage goes through the injected
    gateway and credential hashing through the injected hasher.
    """

    def __init__(
        self,
        gateway: UserGateway,
        hasher: PasswordHasher,
        min_password_length: int | None = None,
    ):
        self._gateway = gateway
        self._hasher = hasher
        self._min_password_length = (
            min_password_length
            if min_password_length is not None
            else get_config().security.password_min_length
        )

    def validate_user(self, candidate: User) -> None:
        """Check a candidate record against the registration policy.

        Rules are applied in order and the first violation is raised:
        role, email presence, email uniqueness among active users, password
        presence, password length.

        Raises:
            RoleRequiredError, EmailRequiredError, EmailNotUniqueError,
            PasswordRequiredError, PasswordTooShortError: On a rule violation
            PersistenceError: If the uniqueness lookup itself fails
        """
        if not candidate.role_id:
            raise RoleRequiredError()

        if candidate.email.strip() == "":
            raise EmailRequiredError()

        if self._gateway.find_one(email=candidate.email) is not None:
            raise EmailNotUniqueError()

        password = candidate.password.strip()
        if password == "":
            raise PasswordRequiredError()

        if len(password) < self._min_password_length:
            raise PasswordTooShortError(
                f"Password must be at least {self._min_password_length} characters"
            )

    def create_user(self, user: User) -> User:
        """Hash the plaintext password and persist the user.

        The record is not re-validated; callers run ``validate_user`` first.
        """
        user.password = self._hasher.hash(user.password)

        with self._gateway.transaction() as tx:
            stored = tx.insert(user)

        logger.info("User created", user_uid=stored.uid, role_id=stored.role_id)
        return stored

    def get_all_users(self) -> list[UserRead]:
        return [
            UserRead.model_validate(user, from_attributes=True)
            for user in self._gateway.find_many()
        ]

    def get_user_by_uid(self, uid: str) -> UserRead:
        user = self._gateway.find_one(uid=uid)
        if user is None:
            raise NotFoundError(f"User {uid} not found")
        return UserRead.model_validate(user, from_attributes=True)

    def get_user_by_email(self, email: str) -> User:
        """Full record including the password hash, for authentication only."""
        user = self._gateway.find_one(email=email)
        if user is None:
            raise NotFoundError("User not found")
        return user

    def attach_person(self, person_uid: str, user_uid: str) -> None:
        """Link a person to a user in one atomic step.

        Raises:
            NotFoundError: If no active user has ``user_uid``
            PersistenceError: If storage fails; nothing is changed
        """
        with self._gateway.transaction() as tx:
            if tx.update(user_uid, person_uid=person_uid) == 0:
                raise NotFoundError(f"User {user_uid} not found")

        logger.info("Person attached", user_uid=user_uid, person_uid=person_uid)

    def delete_user_by_uid(self, uid: str) -> None:
        """Soft-delete a user. Deleting an unknown or deleted uid is a no-op."""
        with self._gateway.transaction() as tx:
            affected = tx.soft_delete(uid)

        if affected:
            logger.info("User deleted", user_uid=uid)
        else:
            logger.debug("Delete matched no active user", user_uid=uid)

    def update_password_hash(self, uid: str, password_hash: str) -> None:
        with self._gateway.transaction() as tx:
            if tx.update(uid, password=password_hash) == 0:
                raise NotFoundError(f"User {uid} not found")
