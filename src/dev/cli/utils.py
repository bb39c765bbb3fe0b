"""Shared utilities for CLI commands."""

from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache

from rich.console import Console

from src.salsila.core.security import PasswordHasher
from src.salsila.core.services import DbSessionService, UserService
from src.salsila.entities.core.user import UserRepository

# Initialize Rich console for colored output
console = Console()


@lru_cache(maxsize=1)
def get_db_service() -> DbSessionService:
    """Database service for the configured database, built once per process."""
    return DbSessionService()


@lru_cache(maxsize=1)
def get_password_hasher() -> PasswordHasher:
    return PasswordHasher()


@contextmanager
def user_service_scope() -> Iterator[UserService]:
    """Yield a UserService bound to a fresh session, closed on exit."""
    session = get_db_service().get_session()
    try:
        yield UserService(UserRepository(session), get_password_hasher())
    finally:
        session.close()
