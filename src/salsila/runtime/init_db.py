"""Database initialization script."""

from sqlalchemy.engine import Engine

from src.salsila.core.services.database.db_manage import DbManageService


def init_db(engine: Engine | None = None) -> list[str]:
    """Create all database tables and return the table names present."""
    service = DbManageService(engine)
    service.create_all()
    return service.table_names()


if __name__ == "__main__":
    init_db()
