"""Schema management for the application database."""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel, create_engine

from src.salsila.runtime.context import get_config


class DbManageService:
    def __init__(self, engine: Engine | None = None):
        self._engine = engine or create_engine(
            get_config().database.connection_string, echo=False
        )

    def create_all(self) -> None:
        """Create all database tables."""
        from src.salsila.entities.core.user import UserTable  # noqa: F401

        SQLModel.metadata.create_all(self._engine)
        logger.info("Database initialized with tables.")

    def table_names(self) -> list[str]:
        from sqlalchemy import inspect

        return sorted(inspect(self._engine).get_table_names())
