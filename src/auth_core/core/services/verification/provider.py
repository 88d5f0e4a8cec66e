"""Capability interface shared by identity verification backends."""

from abc import ABC, abstractmethod
from typing import Any

from pydantic import BaseModel, Field


class VerificationResult(BaseModel):
    """Uniform outcome of one verification lookup."""

    is_valid: bool
    data: dict[str, Any] = Field(default_factory=dict)
    error: str | None = None


class VerificationProvider(ABC):
    """A backend able to look up national IDs and company registrations.

    Lookups return the backend's raw response; ``normalize`` turns it into a
    ``VerificationResult``. Transport failures never escape a lookup.
    """

    name: str

    @abstractmethod
    async def verify_national_id(self, id_number: str) -> dict[str, Any]:
        """Look up a national identity number."""

    @abstractmethod
    async def verify_registration_number(self, rc_number: str) -> dict[str, Any]:
        """Look up a company registration number."""

    @abstractmethod
    def normalize(self, raw: dict[str, Any]) -> VerificationResult:
        """Convert a raw lookup response into a ``VerificationResult``."""
