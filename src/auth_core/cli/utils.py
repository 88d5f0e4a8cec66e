from rich.console import Console

from src.auth_core.core.services.database.db_session import DbSessionService

console = Console()

_db_service: DbSessionService | None = None


def get_db_service() -> DbSessionService:
    """Return the process-wide database service, creating it on first use."""
    global _db_service
    if _db_service is None:
        _db_service = DbSessionService()
    return _db_service


def set_db_service(service: DbSessionService | None) -> None:
    global _db_service
    _db_service = service
