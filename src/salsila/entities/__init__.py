"""Entities organized by business concept.

Each entity has its own package containing:
- entity.py: Domain model and API-facing shapes
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .core.user import User, UserGateway, UserRepository, UserTable

__all__ = [
    "User",
    "UserGateway",
    "UserRepository",
    "UserTable",
]
