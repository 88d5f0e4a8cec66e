"""Deterministic verification backend for tests and offline use."""

import asyncio
from typing import Any

from loguru import logger

from src.auth_core.core.services.verification.provider import (
    VerificationProvider,
    VerificationResult,
)


class StubVerificationProvider(VerificationProvider):
    """Accepts every number after a fixed delay.

    ``records`` maps a number to the normalized fields the stub reports for
    it, which lets company cross-checks pass against known profiles.
    """

    name = "stub"

    def __init__(
        self,
        latency_seconds: float = 0.5,
        records: dict[str, dict[str, Any]] | None = None,
    ):
        self._latency_seconds = latency_seconds
        self._records = dict(records or {})

    def add_record(self, number: str, data: dict[str, Any]) -> None:
        self._records[number] = dict(data)

    async def _lookup(self, kind: str, number: str) -> dict[str, Any]:
        if self._latency_seconds:
            await asyncio.sleep(self._latency_seconds)
        logger.debug("Stub {} lookup for {}", kind, number)
        return {"is_valid": True, "data": dict(self._records.get(number, {}))}

    async def verify_national_id(self, id_number: str) -> dict[str, Any]:
        return await self._lookup("national ID", id_number)

    async def verify_registration_number(self, rc_number: str) -> dict[str, Any]:
        return await self._lookup("registration", rc_number)

    def normalize(self, raw: dict[str, Any]) -> VerificationResult:
        return VerificationResult(
            is_valid=bool(raw.get("is_valid", True)),
            data=dict(raw.get("data") or {}),
            error=raw.get("error"),
        )
