"""Server/admin key management used by the CLI."""

from sqlalchemy.ext.asyncio import AsyncSession

from authgate.core.timestamps import to_iso_string, utc_now
from authgate.domain.entities.server_admin_key import (
    AccountType,
    ServerAdminKey,
    ServerAdminKeyMetadata,
)
from authgate.domain.services.credential_hasher import hash_credential
from authgate.infrastructure.persistence.repositories import ServerAdminKeyRepository


class InvalidAccountTypeError(ValueError):
    def __init__(self) -> None:
        super().__init__("Invalid Account Type")


class InvalidOperationTypeError(ValueError):
    def __init__(self) -> None:
        super().__init__("Invalid Operation Type - either nickname or key accepted")


class AdminKeyService:
    """Creates, lists and deletes server/admin keys."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session
        self._keys = ServerAdminKeyRepository(session)

    async def new_key(self, nickname: str, account_type: str) -> str:
        """Create a key and return its id.

        The generation time is truncated to whole seconds before the id is
        derived from it.

        Raises:
            InvalidAccountTypeError: If ``account_type`` is not a known role.
            DuplicatedKeyError: If the nickname is taken.
        """
        try:
            role = AccountType(account_type)
        except ValueError as e:
            raise InvalidAccountTypeError() from e

        generated_at = utc_now().replace(microsecond=0)
        key = ServerAdminKey(
            id=hash_credential(nickname, to_iso_string(generated_at), role.value),
            nickname=nickname,
            generated_at=generated_at,
            account_type=role,
        )
        await self._keys.create(key)
        await self._session.commit()
        return key.id

    async def list_keys(self) -> list[ServerAdminKeyMetadata]:
        return await self._keys.list_metadata()

    async def delete_key(self, operation_type: str, value: str) -> None:
        """Delete a key by nickname or by key id.

        Raises:
            InvalidOperationTypeError: If ``operation_type`` is neither
                ``nickname`` nor ``key``.
            NotFoundError: If no key matches.
        """
        if operation_type == "nickname":
            await self._keys.delete_by_nickname(value)
        elif operation_type == "key":
            await self._keys.delete_by_key(value)
        else:
            raise InvalidOperationTypeError()
        await self._session.commit()
