"""User entity package."""

from .entity import User, UserType
from .repository import UserRepository, normalize_email
from .table import UserTable

__all__ = ["User", "UserType", "UserTable", "UserRepository", "normalize_email"]
