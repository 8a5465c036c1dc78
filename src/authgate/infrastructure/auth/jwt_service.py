"""JWT token service.

Issues and decodes the three token kinds the gateway deals with:

- access tokens for users (10 minutes, access key),
- refresh tokens for users (caller-chosen lifetime, refresh key),
- server-admin tokens for internal callers (60 minutes, access key).

User and server-admin access tokens share a signing key and are told apart
by the ``tokenType`` claim.
"""

import uuid
from datetime import datetime, timedelta
from typing import Any

import jwt

from authgate.core.timestamps import utc_now
from authgate.domain.entities.server_admin_key import AccountType
from authgate.infrastructure.auth.token_types import (
    IssuedRefreshToken,
    IssuedServerAdminToken,
    RefreshTokenPayload,
    ServerAdminIdentity,
    TokenClass,
    TokenType,
)

ACCESS_TOKEN_LIFETIME = timedelta(minutes=10)
SERVER_ADMIN_TOKEN_LIFETIME = timedelta(minutes=60)
# Advertised to callers so they renew before the signed expiry
SERVER_ADMIN_TOKEN_ADVERTISED_LIFETIME = timedelta(minutes=59)


class JWTError(Exception):
    """Base exception for JWT-related errors."""

    pass


class TokenExpiredError(JWTError):
    """Raised when a token has expired."""

    pass


class InvalidTokenError(JWTError):
    """Raised when a token is invalid."""

    pass


class JWTService:
    """Service for creating and validating the gateway's JWTs."""

    ALGORITHM = "HS512"

    def __init__(self, access_key: str, refresh_key: str) -> None:
        """Initialize the JWT service.

        Args:
            access_key: Secret for access and server-admin tokens.
            refresh_key: Secret for refresh tokens.
        """
        self._access_key = access_key
        self._refresh_key = refresh_key

    def _encode(self, claims: dict[str, Any], key: str, now: datetime, expire: datetime) -> str:
        payload = {**claims, "iat": now, "exp": expire}
        return jwt.encode(payload, key, algorithm=self.ALGORITHM)

    def _decode(self, token: str, key: str) -> dict[str, Any]:
        try:
            return jwt.decode(
                token,
                key,
                algorithms=[self.ALGORITHM],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpiredError("Token has expired") from e
        except jwt.InvalidTokenError as e:
            raise InvalidTokenError("Invalid token") from e

    def issue_access(self, email: str, now: datetime | None = None) -> str:
        """Create a 10-minute user access token."""
        now = now or utc_now()
        claims = {
            "id": email,
            "type": TokenClass.ACCESS.value,
            "tokenType": TokenType.USER.value,
        }
        return self._encode(claims, self._access_key, now, now + ACCESS_TOKEN_LIFETIME)

    def issue_refresh(
        self, email: str, minutes_valid: int, now: datetime | None = None
    ) -> IssuedRefreshToken:
        """Create a user refresh token.

        A random ``jti`` keeps two tokens issued for the same user in the
        same instant distinct. The caller persists the returned expiry.
        """
        now = now or utc_now()
        expire_at = now + timedelta(minutes=minutes_valid)
        claims = {
            "id": email,
            "type": TokenClass.REFRESH.value,
            "tokenType": TokenType.USER.value,
            "jti": uuid.uuid4().hex,
        }
        token = self._encode(claims, self._refresh_key, now, expire_at)
        return IssuedRefreshToken(token=token, expire_at=expire_at)

    def issue_server_admin(
        self, nickname: str, account_type: AccountType, now: datetime | None = None
    ) -> IssuedServerAdminToken:
        """Create a server-admin token.

        The returned ``expire_at`` is one minute before the signed expiry.
        """
        now = now or utc_now()
        claims = {
            "id": nickname,
            "type": TokenClass.ACCESS.value,
            "tokenType": TokenType.SERVER_ADMIN.value,
            "accountType": account_type.value,
        }
        token = self._encode(claims, self._access_key, now, now + SERVER_ADMIN_TOKEN_LIFETIME)
        return IssuedServerAdminToken(
            token=token, expire_at=now + SERVER_ADMIN_TOKEN_ADVERTISED_LIFETIME
        )

    def decode_refresh(self, token: str) -> RefreshTokenPayload:
        """Validate a refresh token's signature and type.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: If the token is invalid or not a refresh token.
        """
        payload = self._decode(token, self._refresh_key)
        if payload.get("type") != TokenClass.REFRESH.value or not payload.get("id"):
            raise InvalidTokenError("Not a refresh token")
        try:
            token_type = TokenType(payload.get("tokenType"))
        except ValueError as e:
            raise InvalidTokenError("Unknown token type") from e
        return RefreshTokenPayload(
            id=payload["id"], type=TokenClass.REFRESH, token_type=token_type
        )

    def decode_access(self, token: str) -> dict[str, Any]:
        """Decode a user access token, checking its type."""
        payload = self._decode(token, self._access_key)
        if payload.get("type") != TokenClass.ACCESS.value:
            raise InvalidTokenError("Not an access token")
        if payload.get("tokenType") != TokenType.USER.value:
            raise InvalidTokenError("Not a user token")
        return payload

    def verify_server_admin(self, token: str) -> ServerAdminIdentity:
        """Validate a server-admin token.

        Raises:
            TokenExpiredError: If the token has expired.
            InvalidTokenError: On any claim mismatch.
        """
        payload = self._decode(token, self._access_key)
        if (
            payload.get("type") != TokenClass.ACCESS.value
            or payload.get("tokenType") != TokenType.SERVER_ADMIN.value
            or not payload.get("id")
            or "accountType" not in payload
        ):
            raise InvalidTokenError("Not a server-admin token")
        try:
            account_type = AccountType(payload["accountType"])
        except ValueError as e:
            raise InvalidTokenError("Unknown account type") from e
        return ServerAdminIdentity(nickname=payload["id"], account_type=account_type)
