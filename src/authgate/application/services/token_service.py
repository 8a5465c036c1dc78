"""Token lifecycle use cases.

Refresh tokens are only accepted when the signature checks out AND a
matching, unexpired record is still stored; deleting the record is how a
refresh token is revoked before its signed expiry.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.ext.asyncio import AsyncSession

from authgate.core.errors import AuthError, ErrorKind, NotFoundError
from authgate.core.logging import get_logger
from authgate.core.timestamps import utc_now
from authgate.infrastructure.auth.jwt_service import JWTError, JWTService
from authgate.infrastructure.auth.token_types import (
    IssuedRefreshToken,
    IssuedServerAdminToken,
    ServerAdminIdentity,
    TokenType,
)
from authgate.infrastructure.persistence.repositories import (
    RefreshTokenRepository,
    ServerAdminKeyRepository,
)

logger = get_logger(__name__)

# A refresh token expiring within this window should be renewed by the client
ABOUT_TO_EXPIRE_WINDOW = timedelta(minutes=20)


@dataclass(frozen=True)
class RefreshTokenVerification:
    """Outcome of a successful refresh token check."""

    email: str
    token_type: TokenType
    expire_at: datetime
    about_to_expire: bool


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh: IssuedRefreshToken
    refresh_minutes: int


class TokenService:
    """Issues, verifies and revokes tokens."""

    def __init__(self, session: AsyncSession, jwt_service: JWTService) -> None:
        self._session = session
        self._jwt = jwt_service
        self._refresh_tokens = RefreshTokenRepository(session)
        self._admin_keys = ServerAdminKeyRepository(session)

    def issue_access_token(self, email: str, now: datetime | None = None) -> str:
        return self._jwt.issue_access(email, now=now)

    async def issue_refresh_token(
        self, email: str, minutes: int, now: datetime | None = None
    ) -> IssuedRefreshToken:
        """Sign a refresh token and persist its record with the same expiry."""
        issued = self._jwt.issue_refresh(email, minutes, now=now)
        await self._refresh_tokens.create(email, issued.token, issued.expire_at)
        return issued

    async def issue_token_pair(
        self, email: str, refresh_minutes: int, now: datetime | None = None
    ) -> TokenPair:
        now = now or utc_now()
        return TokenPair(
            access_token=self.issue_access_token(email, now=now),
            refresh=await self.issue_refresh_token(email, refresh_minutes, now=now),
            refresh_minutes=refresh_minutes,
        )

    async def verify_refresh_token(
        self, token: str | None, now: datetime | None = None
    ) -> RefreshTokenVerification:
        """Check a presented refresh token.

        Args:
            token: Value of the refresh token cookie, if any.
            now: Current time.

        Raises:
            AuthError: UNAUTHENTICATED if no token was presented, FORBIDDEN if
                it is invalid, of the wrong type, revoked or expired.
        """
        if not token:
            raise AuthError(ErrorKind.UNAUTHENTICATED)
        now = now or utc_now()

        try:
            payload = self._jwt.decode_refresh(token)
        except JWTError as e:
            logger.info("Refresh token rejected", reason=str(e))
            raise AuthError(ErrorKind.FORBIDDEN) from e

        try:
            record = await self._refresh_tokens.get_by_token(token)
        except NotFoundError as e:
            logger.info("Refresh token not in store")
            raise AuthError(ErrorKind.FORBIDDEN) from e
        if record.is_expired(now):
            raise AuthError(ErrorKind.FORBIDDEN)

        return RefreshTokenVerification(
            email=payload.id,
            token_type=payload.token_type,
            expire_at=record.expire_at,
            about_to_expire=record.expire_at < now + ABOUT_TO_EXPIRE_WINDOW,
        )

    async def revoke_refresh_token(self, token: str, missing_ok: bool = False) -> None:
        """Delete a refresh token's record.

        Args:
            token: The signed refresh token.
            missing_ok: Treat an already deleted record as revoked.

        Raises:
            AuthError: FORBIDDEN if the record is already gone and
                ``missing_ok`` is not set.
        """
        try:
            await self._refresh_tokens.delete(token)
        except NotFoundError as e:
            if missing_ok:
                logger.info("Refresh token already revoked")
                return
            raise AuthError(ErrorKind.FORBIDDEN) from e

    async def login_server(self, key: str | None) -> IssuedServerAdminToken:
        """Exchange an admin key for a server-admin token.

        Raises:
            AuthError: UNAUTHENTICATED if no key was presented, FORBIDDEN if
                the key is unknown.
        """
        if not key:
            raise AuthError(ErrorKind.UNAUTHENTICATED)
        try:
            admin_key = await self._admin_keys.get(key)
        except NotFoundError as e:
            logger.info("Server login with unknown key")
            raise AuthError(ErrorKind.FORBIDDEN) from e

        logger.info(
            "Server logged in",
            nickname=admin_key.nickname,
            account_type=admin_key.account_type.value,
        )
        return self._jwt.issue_server_admin(admin_key.nickname, admin_key.account_type)

    def verify_server_admin(self, token: str | None) -> ServerAdminIdentity:
        """Check a presented server-admin token.

        Raises:
            AuthError: UNAUTHENTICATED if missing, FORBIDDEN if invalid or expired.
        """
        if not token:
            raise AuthError(ErrorKind.UNAUTHENTICATED)
        try:
            return self._jwt.verify_server_admin(token)
        except JWTError as e:
            logger.info("Server admin token rejected", reason=str(e))
            raise AuthError(ErrorKind.FORBIDDEN) from e
