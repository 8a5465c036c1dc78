"""This server's own server-admin token.

The gateway authenticates to the User API with a server-admin token minted
from the admin key configured as ``server_admin_key``. The token is cached
for the lifetime of the application and re-minted when the User API rejects
it.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from authgate.core.errors import ExternalServiceError, NotFoundError
from authgate.core.logging import get_logger
from authgate.infrastructure.auth.jwt_service import JWTService
from authgate.infrastructure.persistence.repositories import ServerAdminKeyRepository

logger = get_logger(__name__)


class ServerAdminTokenProvider:
    """Caches and renews the server-admin token used for outbound calls."""

    def __init__(self, jwt_service: JWTService, key_id: str) -> None:
        self._jwt_service = jwt_service
        self._key_id = key_id
        self._token: str | None = None

    @property
    def token(self) -> str | None:
        return self._token

    async def get_token(self, session: AsyncSession) -> str:
        if self._token is None:
            return await self.renew(session)
        return self._token

    async def renew(self, session: AsyncSession) -> str:
        """Re-read the admin key record and mint a fresh token.

        Raises:
            ExternalServiceError: If the configured key no longer exists.
        """
        try:
            key = await ServerAdminKeyRepository(session).get(self._key_id)
        except NotFoundError as e:
            logger.error("Server admin key for outbound calls not found")
            raise ExternalServiceError("server-admin-token", "serverAdminToken renewal fail") from e

        self._token = self._jwt_service.issue_server_admin(key.nickname, key.account_type).token
        logger.info("Server admin token renewed", nickname=key.nickname)
        return self._token
