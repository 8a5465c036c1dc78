"""Tests for ServerAdminKeyRepository."""

from datetime import datetime, timezone

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from authgate.core.errors import DuplicatedKeyError, NotFoundError
from authgate.domain.entities import AccountType, ServerAdminKey
from authgate.infrastructure.persistence.repositories import ServerAdminKeyRepository


def make_key(key_id: str, nickname: str, second: int = 0) -> ServerAdminKey:
    return ServerAdminKey(
        id=key_id,
        nickname=nickname,
        generated_at=datetime(2026, 10, 19, 12, 0, second, tzinfo=timezone.utc),
        account_type=AccountType.SERVER_USER,
    )


@pytest.mark.asyncio
async def test_create_and_read(db_session: AsyncSession):
    repo = ServerAdminKeyRepository(db_session)
    await repo.create(make_key("key-1", "user-server"))

    by_id = await repo.get("key-1")
    by_nickname = await repo.get_by_nickname("user-server")
    assert by_id == by_nickname
    assert by_id.account_type is AccountType.SERVER_USER


@pytest.mark.asyncio
@pytest.mark.parametrize("key_id, nickname", [("key-2", "user-server"), ("key-1", "other")])
async def test_duplicate_id_or_nickname(db_session: AsyncSession, key_id, nickname):
    repo = ServerAdminKeyRepository(db_session)
    await repo.create(make_key("key-1", "user-server"))
    with pytest.raises(DuplicatedKeyError):
        await repo.create(make_key(key_id, nickname))


@pytest.mark.asyncio
async def test_missing_key(db_session: AsyncSession):
    repo = ServerAdminKeyRepository(db_session)
    with pytest.raises(NotFoundError):
        await repo.get("nope")
    with pytest.raises(NotFoundError):
        await repo.get_by_nickname("nope")
    with pytest.raises(NotFoundError):
        await repo.delete_by_key("nope")
    with pytest.raises(NotFoundError):
        await repo.delete_by_nickname("nope")


@pytest.mark.asyncio
async def test_delete_by_key_and_nickname(db_session: AsyncSession):
    repo = ServerAdminKeyRepository(db_session)
    await repo.create(make_key("key-1", "first"))
    await repo.create(make_key("key-2", "second"))

    await repo.delete_by_key("key-1")
    await repo.delete_by_nickname("second")

    assert await repo.list_metadata() == []


@pytest.mark.asyncio
async def test_list_metadata_oldest_first_without_ids(db_session: AsyncSession):
    repo = ServerAdminKeyRepository(db_session)
    await repo.create(make_key("key-b", "newer", second=30))
    await repo.create(make_key("key-a", "older", second=5))

    entries = await repo.list_metadata()

    assert [entry.nickname for entry in entries] == ["older", "newer"]
    assert not hasattr(entries[0], "id")
