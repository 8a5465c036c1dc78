"""Application services."""

from authgate.application.services.admin_key_service import (
    AdminKeyService,
    InvalidAccountTypeError,
    InvalidOperationTypeError,
)
from authgate.application.services.otp_service import (
    OTPRequestResult,
    OTPService,
    SessionStarted,
    SudoConfirmation,
)
from authgate.application.services.session_service import RenewedTokens, SessionService
from authgate.application.services.token_service import (
    RefreshTokenVerification,
    TokenPair,
    TokenService,
)

__all__ = [
    "AdminKeyService",
    "InvalidAccountTypeError",
    "InvalidOperationTypeError",
    "OTPRequestResult",
    "OTPService",
    "RefreshTokenVerification",
    "RenewedTokens",
    "SessionService",
    "SessionStarted",
    "SudoConfirmation",
    "TokenPair",
    "TokenService",
]
