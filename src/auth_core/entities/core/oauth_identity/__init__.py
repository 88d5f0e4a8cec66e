"""OAuth identity entity package."""

from .entity import OAuthIdentity, OAuthProvider
from .repository import OAuthIdentityRepository
from .table import OAuthIdentityTable

__all__ = ["OAuthIdentity", "OAuthProvider", "OAuthIdentityTable", "OAuthIdentityRepository"]
