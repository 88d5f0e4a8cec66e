from collections.abc import Generator

import pytest
from sqlalchemy import StaticPool, event
from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine

from src.auth_core.core.services.database.db_session import (
    DbSessionService,
    enable_sqlite_foreign_keys,
)
from src.auth_core.runtime.init_db import create_all


@pytest.fixture
def engine() -> Generator[Engine]:
    """In-memory SQLite engine with every table and foreign keys enforced."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    event.listen(engine, "connect", enable_sqlite_foreign_keys)
    create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_service(engine: Engine) -> DbSessionService:
    return DbSessionService(engine=engine)


@pytest.fixture
def db_session(db_service: DbSessionService) -> Generator[Session]:
    session = db_service.get_session()
    yield session
    session.close()


@pytest.fixture
def other_session(db_service: DbSessionService) -> Generator[Session]:
    """A second session on the same database, for concurrent-writer scenarios."""
    session = db_service.get_session()
    yield session
    session.close()
