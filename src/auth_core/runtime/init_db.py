"""Database initialization script."""

from loguru import logger
from sqlalchemy.engine import Engine
from sqlmodel import SQLModel

from src.auth_core.core.services.database.db_session import DbSessionService


def create_all(engine: Engine) -> None:
    """Create every table registered by the entity packages."""
    import src.auth_core.entities  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database initialized with tables.")


def init_db() -> None:
    """Create all database tables."""
    create_all(DbSessionService().engine)


if __name__ == "__main__":
    init_db()
