"""Token signing and verification."""

from authgate.infrastructure.auth.jwt_service import (
    InvalidTokenError,
    JWTError,
    JWTService,
    TokenExpiredError,
)

__all__ = ["InvalidTokenError", "JWTError", "JWTService", "TokenExpiredError"]
