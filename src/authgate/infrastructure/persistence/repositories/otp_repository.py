"""Repository for OTP request operations."""

from datetime import datetime

from sqlalchemy import delete, select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.core.errors import AuthError, ErrorKind, NotFoundError
from authgate.core.timestamps import ensure_utc
from authgate.domain.entities.otp_request import OTPPurpose, OTPRequest
from authgate.infrastructure.persistence.models import OTPRequestModel


class OTPRepository:
    """Repository for OTP request database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    @staticmethod
    def _to_entity(model: OTPRequestModel) -> OTPRequest:
        return OTPRequest(
            id=model.id,
            email=model.email,
            purpose=OTPPurpose(model.purpose),
            expire_at=ensure_utc(model.expire_at),
            passcode=model.passcode,
            verified=model.verified,
        )

    async def create(self, otp: OTPRequest) -> OTPRequest:
        """Persist a new OTP request.

        Args:
            otp: The unverified request to store.

        Returns:
            The stored request.

        Raises:
            AuthError: CONFLICT if a request with the same id exists.
        """
        model = OTPRequestModel(
            id=otp.id,
            email=otp.email,
            purpose=otp.purpose.value,
            expire_at=otp.expire_at,
            passcode=otp.passcode,
            verified=otp.verified,
        )
        self._session.add(model)
        try:
            await self._session.flush()
        except IntegrityError as e:
            # Same email and purpose requested within the same millisecond
            raise AuthError(ErrorKind.CONFLICT) from e
        return otp

    async def get(self, request_id: str) -> OTPRequest:
        """Read an OTP request.

        Raises:
            NotFoundError: If no request has this id.
        """
        result = await self._session.execute(
            select(OTPRequestModel).where(OTPRequestModel.id == request_id)
        )
        model = result.scalar_one_or_none()
        if model is None:
            raise NotFoundError()
        return self._to_entity(model)

    async def mark_verified(self, request_id: str, expire_at: datetime) -> bool:
        """Mark a request verified and move its expiry.

        Only rows that are still unverified match, so of two concurrent
        callers at most one gets ``True``.

        Returns:
            True if this call verified the request.
        """
        result = await self._session.execute(
            update(OTPRequestModel)
            .where(
                OTPRequestModel.id == request_id,
                OTPRequestModel.verified.is_(False),
            )
            .values(verified=True, expire_at=expire_at)
        )
        return result.rowcount > 0

    async def delete_expired(self, now: datetime) -> int:
        """Delete requests whose expiry has passed.

        Returns:
            Number of deleted rows.
        """
        result = await self._session.execute(
            delete(OTPRequestModel)
            .where(OTPRequestModel.expire_at < now)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount
