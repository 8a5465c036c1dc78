"""Repository for server/admin key operations."""

from sqlalchemy import delete, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.core.errors import DuplicatedKeyError, NotFoundError
from authgate.core.timestamps import ensure_utc
from authgate.domain.entities.server_admin_key import (
    AccountType,
    ServerAdminKey,
    ServerAdminKeyMetadata,
)
from authgate.infrastructure.persistence.models import ServerAdminKeyModel


class ServerAdminKeyRepository:
    """Repository for server/admin key database operations."""

    def __init__(self, session: AsyncSession) -> None:
        """Initialize the repository.

        Args:
            session: SQLAlchemy async session.
        """
        self._session = session

    @staticmethod
    def _to_entity(model: ServerAdminKeyModel) -> ServerAdminKey:
        return ServerAdminKey(
            id=model.id,
            nickname=model.nickname,
            generated_at=ensure_utc(model.generated_at),
            account_type=AccountType(model.account_type),
        )

    async def create(self, key: ServerAdminKey) -> ServerAdminKey:
        """Store a new key.

        Raises:
            DuplicatedKeyError: If the id or the nickname is already taken.
        """
        existing = await self._session.execute(
            select(ServerAdminKeyModel.id).where(
                or_(
                    ServerAdminKeyModel.id == key.id,
                    ServerAdminKeyModel.nickname == key.nickname,
                )
            )
        )
        if existing.first() is not None:
            raise DuplicatedKeyError()

        self._session.add(
            ServerAdminKeyModel(
                id=key.id,
                nickname=key.nickname,
                generated_at=key.generated_at,
                account_type=key.account_type.value,
            )
        )
        try:
            await self._session.flush()
        except IntegrityError as e:
            raise DuplicatedKeyError() from e
        return key

    async def _get_one(self, *criteria) -> ServerAdminKey:
        result = await self._session.execute(select(ServerAdminKeyModel).where(*criteria))
        model = result.scalar_one_or_none()
        if model is None:
            raise NotFoundError()
        return self._to_entity(model)

    async def get(self, key_id: str) -> ServerAdminKey:
        """Read a key by id.

        Raises:
            NotFoundError: If no key has this id.
        """
        return await self._get_one(ServerAdminKeyModel.id == key_id)

    async def get_by_nickname(self, nickname: str) -> ServerAdminKey:
        """Read a key by nickname.

        Raises:
            NotFoundError: If no key has this nickname.
        """
        return await self._get_one(ServerAdminKeyModel.nickname == nickname)

    async def _delete_where(self, *criteria) -> None:
        result = await self._session.execute(delete(ServerAdminKeyModel).where(*criteria))
        if result.rowcount == 0:
            raise NotFoundError()

    async def delete_by_key(self, key_id: str) -> None:
        await self._delete_where(ServerAdminKeyModel.id == key_id)

    async def delete_by_nickname(self, nickname: str) -> None:
        await self._delete_where(ServerAdminKeyModel.nickname == nickname)

    async def list_metadata(self) -> list[ServerAdminKeyMetadata]:
        """Every key's nickname, generation time and account type, oldest first."""
        result = await self._session.execute(
            select(ServerAdminKeyModel).order_by(
                ServerAdminKeyModel.generated_at, ServerAdminKeyModel.nickname
            )
        )
        return [self._to_entity(model).metadata() for model in result.scalars().all()]
