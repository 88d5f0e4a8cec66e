"""Prembly identity-pass backend."""

from typing import Any

from loguru import logger

from src.auth_core.core.services.http.request_client import (
    RequestClient,
    RequestError,
)
from src.auth_core.core.services.verification.provider import (
    VerificationProvider,
    VerificationResult,
)
from src.auth_core.entities.core.profile.repository import normalize_rc_number
from src.auth_core.runtime.config.config_data import PremblyConfig

SUCCESS_RESPONSE_CODE = "00"


class PremblyVerificationProvider(VerificationProvider):
    """Calls the Prembly NIN and CAC lookups through a retrying ``RequestClient``.

    A lookup is successful only when ``status`` is true *and*
    ``response_code`` is ``"00"``.
    """

    name = "prembly"

    def __init__(
        self,
        config: PremblyConfig,
        request_client: RequestClient | None = None,
    ):
        if not config.api_key:
            raise ValueError("Prembly API key is not configured")

        self._config = config
        self._client = request_client or RequestClient(
            config.base_url, retry=config.retry
        )
        self._client.set_base_url(config.base_url)
        self._client.set_default_headers(
            {
                "accept": "application/json",
                "content-type": "application/json",
                "X-API-Key": config.api_key,
            }
        )

    @staticmethod
    def strip_rc_prefix(rc_number: str) -> str:
        return normalize_rc_number(rc_number)

    async def _lookup(self, path: str, number: str) -> dict[str, Any]:
        try:
            response = await self._client.post(
                path, json={"number": number}, retry=self._config.retry
            )
        except RequestError as error:
            logger.warning(
                "Prembly lookup {} failed: {}", path, error.message, status=error.status
            )
            return {
                "status": False,
                "response_code": "ERROR",
                "message": error.message,
                "error": error.message,
            }
        if not isinstance(response, dict):
            return {
                "status": False,
                "response_code": "ERROR",
                "message": "Unexpected response from verification service",
            }
        return response

    async def verify_national_id(self, id_number: str) -> dict[str, Any]:
        return await self._lookup(self._config.national_id_path, id_number.strip())

    async def verify_registration_number(self, rc_number: str) -> dict[str, Any]:
        return await self._lookup(
            self._config.rc_number_path, self.strip_rc_prefix(rc_number)
        )

    def normalize(self, raw: dict[str, Any]) -> VerificationResult:
        error = raw.get("error")
        if error:
            return VerificationResult(
                is_valid=False,
                error=error if isinstance(error, str) else "Verification failed",
            )

        if not raw.get("status") or raw.get("response_code") != SUCCESS_RESPONSE_CODE:
            return VerificationResult(
                is_valid=False,
                error=raw.get("detail") or raw.get("message") or "Verification failed",
            )

        if raw.get("nin_data"):
            nin = raw["nin_data"]
            data = {
                "first_name": nin.get("firstname"),
                "middle_name": nin.get("middlename"),
                "last_name": nin.get("surname"),
                "birth_date": nin.get("birthdate"),
                "address": nin.get("residence_address"),
            }
        else:
            company = raw.get("data") or {}
            data = {
                "company_name": company.get("company_name"),
                "address": company.get("company_address") or company.get("branchAddress"),
                "rc_number": company.get("rc_number"),
            }

        return VerificationResult(
            is_valid=True, data={k: v for k, v in data.items() if v is not None}
        )
