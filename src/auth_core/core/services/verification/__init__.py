from .factory import create_verification_provider
from .prembly import PremblyVerificationProvider
from .provider import VerificationProvider, VerificationResult
from .stub import StubVerificationProvider

__all__ = [
    "PremblyVerificationProvider",
    "StubVerificationProvider",
    "VerificationProvider",
    "VerificationResult",
    "create_verification_provider",
]
