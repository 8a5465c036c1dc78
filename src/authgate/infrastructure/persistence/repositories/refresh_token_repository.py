"""Repository for refresh token operations.

Tokens are looked up by the SHA-256 hash of the signed token string.
"""

from datetime import datetime

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.core.errors import NotFoundError
from authgate.core.timestamps import ensure_utc
from authgate.domain.entities.refresh_token import RefreshTokenRecord, hash_refresh_token
from authgate.infrastructure.persistence.models import RefreshTokenModel


class RefreshTokenRepository:
    """Repository for refresh token database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    @staticmethod
    def _to_entity(model: RefreshTokenModel) -> RefreshTokenRecord:
        return RefreshTokenRecord(
            id=model.id,
            email=model.email,
            token_hash=model.token_hash,
            expire_at=ensure_utc(model.expires_at),
        )

    async def create(self, email: str, token: str, expire_at: datetime) -> RefreshTokenRecord:
        """Store a new refresh token.

        Args:
            email: Subject of the token.
            token: The signed token string.
            expire_at: When the record stops being accepted.

        Returns:
            The stored record.
        """
        record = RefreshTokenRecord(
            email=email, token_hash=hash_refresh_token(token), expire_at=expire_at
        )
        self._session.add(
            RefreshTokenModel(
                id=record.id,
                token_hash=record.token_hash,
                email=record.email,
                expires_at=record.expire_at,
            )
        )
        await self._session.flush()
        return record

    async def _get_model(self, token: str) -> RefreshTokenModel:
        result = await self._session.execute(
            select(RefreshTokenModel).where(
                RefreshTokenModel.token_hash == hash_refresh_token(token)
            )
        )
        model = result.scalar_one_or_none()
        if model is None:
            raise NotFoundError()
        return model

    async def get_by_token(self, token: str) -> RefreshTokenRecord:
        """Look up a refresh token.

        Raises:
            NotFoundError: If the token is not stored.
        """
        return self._to_entity(await self._get_model(token))

    async def delete(self, token: str) -> None:
        """Delete a refresh token.

        Raises:
            NotFoundError: If the token is not stored.
        """
        model = await self._get_model(token)
        await self._session.delete(model)
        await self._session.flush()

    async def delete_expired(self, now: datetime) -> int:
        """Delete records whose expiry has passed.

        Returns:
            Number of deleted rows.
        """
        result = await self._session.execute(
            delete(RefreshTokenModel)
            .where(RefreshTokenModel.expires_at < now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
