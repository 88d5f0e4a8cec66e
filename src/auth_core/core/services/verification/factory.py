from src.auth_core.core.services.http.request_client import RequestClient
from src.auth_core.core.services.verification.prembly import (
    PremblyVerificationProvider,
)
from src.auth_core.core.services.verification.provider import VerificationProvider
from src.auth_core.core.services.verification.stub import StubVerificationProvider
from src.auth_core.runtime.config.config_data import ConfigData


def create_verification_provider(
    config: ConfigData, request_client: RequestClient | None = None
) -> VerificationProvider:
    """Build the backend selected by ``config.verification.provider``."""
    verification = config.verification
    if verification.provider == "prembly":
        client = request_client or RequestClient(
            verification.prembly.base_url,
            retry=verification.prembly.retry,
            config=config.request_client,
        )
        return PremblyVerificationProvider(verification.prembly, client)
    if verification.provider == "stub":
        return StubVerificationProvider(verification.stub_latency_seconds)
    raise ValueError(f"Unknown verification provider: {verification.provider}")
