"""Client for the external User Profile API.

Requests are authenticated with this server's server-admin token. When the
API answers 401 or 403 the token is renewed and the request is retried
exactly once.
"""

import base64
from datetime import datetime
from typing import Any

import httpx
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.core.errors import ExternalServiceError
from authgate.core.logging import get_logger
from authgate.core.timestamps import parse_iso, to_iso_string, utc_now
from authgate.domain.entities.user_profile import UserProfile
from authgate.infrastructure.services.server_token_provider import ServerAdminTokenProvider

logger = get_logger(__name__)

SERVICE_NAME = "user-api"


class UserNotFoundError(Exception):
    """Raised when the User API has no profile for the email."""

    pass


def encode_email(email: str) -> str:
    """URL-safe base64 of the email without padding."""
    return base64.urlsafe_b64encode(email.encode("utf-8")).decode("ascii").rstrip("=")


def profile_from_json(email: str, data: dict[str, Any]) -> UserProfile:
    deleted = bool(data.get("deleted", False))
    locked = bool(data.get("locked", False))
    return UserProfile(
        email=email,
        nickname=data.get("nickname", ""),
        last_login=parse_iso(data.get("lastLogin")),
        sign_up_date=parse_iso(data.get("signUpDate")),
        nickname_changed=parse_iso(data.get("nicknameChanged")),
        deleted=deleted,
        deleted_at=parse_iso(data.get("deletedAt")) if deleted else None,
        locked=locked,
        locked_at=parse_iso(data.get("lockedAt")) if locked else None,
        locked_description=data.get("lockedDescription") if locked else None,
        major=data.get("major"),
        graduation_year=data.get("graduationYear"),
        tnc_version=data.get("tncVersion"),
    )


class UserAPIClient:
    """Reads profiles from and reports logins to the User API."""

    def __init__(
        self,
        base_url: str,
        token_provider: ServerAdminTokenProvider,
        session: AsyncSession,
        timeout: float = 10.0,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self._session = session
        self._timeout = timeout

    async def _send(self, method: str, path: str, json: dict[str, Any] | None = None) -> httpx.Response:
        token = await self._token_provider.get_token(self._session)
        try:
            async with httpx.AsyncClient(base_url=self._base_url, timeout=self._timeout) as client:
                response = await client.request(
                    method, path, headers={"X-SERVER-TOKEN": token}, json=json
                )
                if response.status_code in (401, 403):
                    logger.info(
                        "User API rejected server token, renewing",
                        status_code=response.status_code,
                    )
                    token = await self._token_provider.renew(self._session)
                    response = await client.request(
                        method, path, headers={"X-SERVER-TOKEN": token}, json=json
                    )
        except httpx.HTTPError as e:
            logger.error("User API request failed", path=path, error=str(e))
            raise ExternalServiceError(SERVICE_NAME, str(e)) from e
        return response

    async def get_profile(self, email: str) -> UserProfile:
        """Fetch a user's profile.

        Raises:
            UserNotFoundError: If the API answers 404.
            ExternalServiceError: On any other non-200 answer.
        """
        response = await self._send("GET", f"/user/{encode_email(email)}")
        if response.status_code == 404:
            raise UserNotFoundError(email)
        if response.status_code != 200:
            raise ExternalServiceError(
                SERVICE_NAME, f"Fail on retrieving User Profile: HTTP {response.status_code}"
            )
        return profile_from_json(email, response.json())

    async def update_last_login(self, email: str, when: datetime | None = None) -> None:
        """Report a successful sign-in.

        Raises:
            ExternalServiceError: If the API does not answer 200.
        """
        body = {"lastLogin": to_iso_string(when or utc_now())}
        response = await self._send("POST", f"/user/profile/{encode_email(email)}/lastLogin", json=body)
        if response.status_code != 200:
            raise ExternalServiceError(
                SERVICE_NAME, f"Fail on updating User lastLogin: HTTP {response.status_code}"
            )
