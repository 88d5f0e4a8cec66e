from .jwt_gen import JwtGeneratorService, JwtTokenIssuer, TokenIssuer, TokenSigningError

__all__ = ["JwtGeneratorService", "JwtTokenIssuer", "TokenIssuer", "TokenSigningError"]
