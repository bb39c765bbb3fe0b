"""Password hashing for stored credentials.

Argon2id with a random per-hash salt. The hasher is configured from
``config.security`` and injected into the services that need it.
"""

from functools import cached_property

from argon2 import PasswordHasher as Argon2Hasher
from argon2.exceptions import HashingError as Argon2HashingError
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError

from src.salsila.core.errors import HashingError
from src.salsila.runtime.config.config_data import SecurityConfig
from src.salsila.runtime.context import get_config


class PasswordHasher:
    """Salted, deliberately slow one-way hash for credentials."""

    def __init__(self, security_config: SecurityConfig | None = None) -> None:
        cfg = security_config or get_config().security
        self._hasher = Argon2Hasher(
            time_cost=cfg.argon2_time_cost,
            memory_cost=cfg.argon2_memory_cost,
            parallelism=cfg.argon2_parallelism,
            hash_len=32,
            salt_len=16,
        )

    @cached_property
    def placeholder_hash(self) -> str:
        """Hash of a fixed string, verified against when an account is unknown."""
        return self.hash("salsila-placeholder")

    def hash(self, password: str) -> str:
        """Hash a plaintext password.

        Raises:
            HashingError: If the hash could not be computed
        """
        try:
            return self._hasher.hash(password)
        except Argon2HashingError as e:
            raise HashingError() from e

    def verify(self, password: str, hashed: str) -> bool:
        """Check a plaintext password against a stored hash."""
        try:
            return self._hasher.verify(hashed, password)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            return False

    def needs_rehash(self, hashed: str) -> bool:
        """Whether the hash was produced with outdated parameters."""
        try:
            return self._hasher.check_needs_rehash(hashed)
        except InvalidHashError:
            return True
