"""Database engine and session factory used across the identity core."""

from collections.abc import Iterator
from contextlib import contextmanager

from loguru import logger
from sqlalchemy import event, text
from sqlalchemy.engine import Engine
from sqlmodel import Session, create_engine

from src.auth_core.runtime.config.config_data import ConfigData
from src.auth_core.runtime.context import get_config


def enable_sqlite_foreign_keys(dbapi_connection, _connection_record) -> None:
    # Cascading profile and identity deletes rely on this
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_engine(config: ConfigData) -> Engine:
    """Create an engine for ``config.database`` with backend-specific settings."""
    db_config = config.database
    is_sqlite = db_config.url.startswith("sqlite")

    engine_kwargs: dict = {
        "echo": db_config.echo,
        "pool_pre_ping": True,
        "connect_args": _get_connect_args(config),
    }
    if not is_sqlite:
        engine_kwargs.update(
            {
                "pool_size": db_config.pool_size,
                "max_overflow": db_config.max_overflow,
                "pool_timeout": db_config.pool_timeout,
                "pool_recycle": db_config.pool_recycle,
            }
        )

    logger.info("Initializing database engine for {}", db_config.url.split("@")[-1])
    engine = create_engine(db_config.url, **engine_kwargs)

    if is_sqlite:
        event.listen(engine, "connect", enable_sqlite_foreign_keys)
    return engine


def _get_connect_args(config: ConfigData) -> dict:
    connect_args: dict = {}

    if config.database.url.startswith("postgresql"):
        connect_args.update(
            {
                "application_name": f"{config.app.environment}_identity_core",
                "connect_timeout": 30,
            }
        )
    elif config.database.url.startswith("sqlite"):
        connect_args.update({"check_same_thread": False, "timeout": 20})

        if config.app.environment == "production":
            logger.warning(
                "SQLite is not recommended for production use. "
                "Consider PostgreSQL for better performance and reliability."
            )

    return connect_args


class DbSessionService:
    """Owns the shared engine and hands out sessions bound to it."""

    def __init__(self, engine: Engine | None = None):
        self._engine = engine or build_engine(get_config())

    @property
    def engine(self) -> Engine:
        return self._engine

    def get_session(self) -> Session:
        """Return a new SQLModel session bound to the shared engine."""
        return Session(self._engine, expire_on_commit=False, autoflush=True)

    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """Yield a session that commits on success and rolls back on error."""
        db = self.get_session()
        try:
            yield db
            db.commit()
        except Exception as e:
            db.rollback()
            logger.error(
                "Database transaction failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            raise
        finally:
            db.close()

    def health_check(self) -> bool:
        """Return whether a trivial query succeeds on the engine."""
        try:
            with self._engine.connect() as connection:
                connection.execute(text("SELECT 1"))
                return True
        except Exception as e:
            logger.error(
                "Database health check failed",
                error_type=type(e).__name__,
                error_message=str(e),
            )
            return False
