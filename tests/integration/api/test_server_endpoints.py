"""Server-to-server endpoints: login and OTP verification."""

from datetime import datetime, timedelta, timezone

import jwt
import pytest
from httpx import AsyncClient

from authgate.application.services import AdminKeyService
from authgate.domain.entities import AccountType
from conftest import ACCESS_KEY, WEB_HEADERS

USER = "user@wisc.edu"


async def create_key(db_session, nickname="user-server", account_type="server - user") -> str:
    return await AdminKeyService(db_session).new_key(nickname, account_type)


async def login(client: AsyncClient, key: str) -> str:
    response = await client.post("/auth/login", headers={"X-SERVER-KEY": key})
    assert response.status_code == 200, response.text
    return response.json()["serverAdminToken"]


@pytest.mark.asyncio
async def test_login_with_stored_key(client: AsyncClient, db_session):
    key = await create_key(db_session)
    now = datetime.now(timezone.utc)

    response = await client.post("/auth/login", headers={"X-SERVER-KEY": key})

    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"serverAdminToken", "expiresAt"}
    payload = jwt.decode(body["serverAdminToken"], ACCESS_KEY, algorithms=["HS512"])
    assert payload["tokenType"] == "serverAdmin"
    assert payload["accountType"] == AccountType.SERVER_USER.value
    assert payload["id"] == "user-server"
    assert payload["exp"] <= (now + timedelta(minutes=60, seconds=5)).timestamp()
    assert body["expiresAt"].endswith("Z")


@pytest.mark.asyncio
async def test_login_without_key(client: AsyncClient):
    response = await client.post("/auth/login")
    assert response.status_code == 401
    assert response.json() == {"error": "Unauthenticated"}


@pytest.mark.asyncio
async def test_login_with_deleted_key(client: AsyncClient, db_session):
    key = await create_key(db_session)
    await AdminKeyService(db_session).delete_key("key", key)

    response = await client.post("/auth/login", headers={"X-SERVER-KEY": key})
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_verify_reports_signin_and_updates_last_login(
    client: AsyncClient, db_session, user_api, mail_provider
):
    user_api.add(USER, tnc_version="v1.0.0")
    server_token = await login(client, await create_key(db_session))

    response = await client.post(
        "/auth/request", json={"email": USER, "purpose": "signin"}, headers=WEB_HEADERS
    )
    request_id = response.json()["requestId"]

    response = await client.get(
        f"/auth/request/{request_id}/verify", headers={"X-SERVER-TOKEN": server_token}
    )
    assert response.status_code == 200
    assert response.json() == {"email": USER, "purpose": "signin", "verified": False}

    await client.post(
        f"/auth/request/{request_id}/code",
        json={"email": USER, "passcode": mail_provider.last_code(USER)},
        headers=WEB_HEADERS,
    )

    response = await client.get(
        f"/auth/request/{request_id}/verify", headers={"X-SERVER-TOKEN": server_token}
    )
    body = response.json()
    assert body["verified"] is True
    assert body["expireAt"].endswith("Z")
    assert user_api.last_logins == [USER, USER]


@pytest.mark.asyncio
async def test_verify_without_token(client: AsyncClient):
    response = await client.get(f"/auth/request/{'0' * 128}/verify")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_verify_with_user_access_token(client: AsyncClient, jwt_service):
    response = await client.get(
        f"/auth/request/{'0' * 128}/verify",
        headers={"X-SERVER-TOKEN": jwt_service.issue_access(USER)},
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_verify_with_expired_token(client: AsyncClient, jwt_service):
    issued = jwt_service.issue_server_admin(
        "user-server",
        AccountType.SERVER_USER,
        now=datetime.now(timezone.utc) - timedelta(hours=2),
    )
    response = await client.get(
        f"/auth/request/{'0' * 128}/verify", headers={"X-SERVER-TOKEN": issued.token}
    )
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_verify_unknown_request(client: AsyncClient, db_session):
    server_token = await login(client, await create_key(db_session))
    response = await client.get(
        f"/auth/request/{'0' * 128}/verify", headers={"X-SERVER-TOKEN": server_token}
    )
    assert response.status_code == 404
