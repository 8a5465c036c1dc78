"""Pydantic schemas for authentication endpoints.

Request bodies reject unknown fields; JSON keys are camelCase.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, StrictBool, StrictStr

from authgate.domain.entities.otp_request import OTPPurpose


class InitiateOTPRequest(BaseModel):
    """Request body for POST /auth/request."""

    model_config = ConfigDict(extra="forbid")

    email: EmailStr = Field(..., description="Email address to send the passcode to")
    purpose: OTPPurpose = Field(..., description="signup, signin or sudo")


class EnterOTPCodeRequest(BaseModel):
    """Request body for POST /auth/request/{request_id}/code."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    email: EmailStr = Field(..., description="Email address the passcode was sent to")
    passcode: StrictStr = Field(..., description="Six-digit passcode from the email")
    # Non-optional so that an explicit null fails validation
    stay_signed_in: StrictBool = Field(
        False,
        alias="staySignedIn",
        description="Issue a 30-day refresh token (mobile applications only)",
    )


class RenewTokenRequest(BaseModel):
    """Optional request body for GET /auth/renew."""

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    renew_refresh_token: StrictBool = Field(False, alias="renewRefreshToken")


class _CamelResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class InitiateOTPResponse(_CamelResponse):
    request_id: str = Field(..., alias="requestId")
    code_expire_at: str = Field(..., alias="codeExpireAt")
    should_renew_token: bool | None = Field(None, alias="shouldRenewToken")


class SudoVerificationResponse(_CamelResponse):
    verification_expires_at: str = Field(..., alias="verificationExpiresAt")
    should_renew_token: bool | None = Field(None, alias="shouldRenewToken")


class SignedInResponse(_CamelResponse):
    # Key spelling is part of the public contract
    need_new_tnc_accept: bool | None = Field(None, alias="needNewTNCAccpet")


class OTPVerifyResponse(_CamelResponse):
    email: str
    purpose: OTPPurpose
    verified: bool
    expire_at: str | None = Field(None, alias="expireAt")


class ServerLoginResponse(_CamelResponse):
    server_admin_token: str = Field(..., alias="serverAdminToken")
    expires_at: str = Field(..., alias="expiresAt")


class ErrorResponse(BaseModel):
    """Body of every error response."""

    error: str = Field(..., description="Generic error message")
