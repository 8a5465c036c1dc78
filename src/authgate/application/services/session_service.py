"""Logout and token renewal."""

from dataclasses import dataclass
from datetime import datetime

from authgate.application.services.token_service import RefreshTokenVerification, TokenService
from authgate.core.errors import AuthError, ErrorKind
from authgate.core.logging import get_logger
from authgate.core.timestamps import utc_now
from authgate.infrastructure.auth.token_types import IssuedRefreshToken
from authgate.infrastructure.services.user_api_client import UserAPIClient, UserNotFoundError

logger = get_logger(__name__)

RENEWED_REFRESH_MINUTES = 180


@dataclass(frozen=True)
class RenewedTokens:
    access_token: str
    refresh: IssuedRefreshToken | None = None
    refresh_minutes: int = RENEWED_REFRESH_MINUTES


class SessionService:
    def __init__(self, token_service: TokenService, user_api: UserAPIClient) -> None:
        self._tokens = token_service
        self._user_api = user_api

    async def logout(self, refresh_token: str | None) -> RefreshTokenVerification:
        """Revoke the presented refresh token.

        Raises:
            AuthError: UNAUTHENTICATED without a token, FORBIDDEN if invalid.
        """
        verification = await self._tokens.verify_refresh_token(refresh_token)
        # A concurrent logout may have deleted the record after verification
        await self._tokens.revoke_refresh_token(refresh_token, missing_ok=True)
        logger.info("User logged out")
        return verification

    async def renew(
        self,
        refresh_token: str | None,
        renew_refresh_token: bool = False,
        now: datetime | None = None,
    ) -> RenewedTokens:
        """Issue a new access token, and a new refresh token when asked and due.

        The refresh token is only replaced when ``renew_refresh_token`` is set
        and the current one is about to expire; the user must then still
        exist and be neither deleted nor locked.

        Raises:
            AuthError: UNAUTHENTICATED without a token, FORBIDDEN if the token
                is invalid or the user cannot renew.
        """
        now = now or utc_now()
        verification = await self._tokens.verify_refresh_token(refresh_token, now=now)

        refresh = None
        if renew_refresh_token:
            try:
                profile = await self._user_api.get_profile(verification.email)
            except UserNotFoundError as e:
                # Token minted by a signup that never created a profile
                raise AuthError(ErrorKind.FORBIDDEN) from e
            if profile.deleted or profile.locked:
                raise AuthError(ErrorKind.FORBIDDEN)

            if verification.about_to_expire:
                refresh = await self._tokens.issue_refresh_token(
                    verification.email, RENEWED_REFRESH_MINUTES, now=now
                )
                logger.info("Refresh token renewed")

        return RenewedTokens(
            access_token=self._tokens.issue_access_token(verification.email, now=now),
            refresh=refresh,
        )
