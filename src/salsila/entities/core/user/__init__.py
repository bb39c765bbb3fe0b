"""User entity module.

This module contains all User-related classes organized by responsibility:
- User: Domain entity
- UserRead / UserCreate / AttachPersonRequest: API-facing shapes
- UserTable: Database persistence model
- UserGateway / UserRepository: Data access layer
"""

from .entity import AttachPersonRequest, User, UserCreate, UserRead
from .repository import UserGateway, UserRepository
from .table import UserTable

__all__ = [
    "AttachPersonRequest",
    "User",
    "UserCreate",
    "UserGateway",
    "UserRead",
    "UserRepository",
    "UserTable",
]
