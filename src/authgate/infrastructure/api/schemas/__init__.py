"""Pydantic schemas for API requests and responses."""

from authgate.infrastructure.api.schemas.auth_schemas import (
    EnterOTPCodeRequest,
    ErrorResponse,
    InitiateOTPRequest,
    InitiateOTPResponse,
    OTPVerifyResponse,
    RenewTokenRequest,
    ServerLoginResponse,
    SignedInResponse,
    SudoVerificationResponse,
)

__all__ = [
    "EnterOTPCodeRequest",
    "ErrorResponse",
    "InitiateOTPRequest",
    "InitiateOTPResponse",
    "OTPVerifyResponse",
    "RenewTokenRequest",
    "ServerLoginResponse",
    "SignedInResponse",
    "SudoVerificationResponse",
]
