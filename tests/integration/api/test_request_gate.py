"""Request gate, body validation and HTTP surface errors."""

import pytest
from httpx import AsyncClient

from conftest import APP_KEY, MOBILE_HEADERS, WEB_HEADERS

SIGNUP = {"email": "new@wisc.edu", "purpose": "signup"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "headers",
    [
        {},
        {"Origin": "https://evil.example.org"},
        {"X-APPLICATION-KEY": "unknown-key"},
        {"Origin": "https://collegemate.app.evil.org", "X-APPLICATION-KEY": APP_KEY[:-1]},
    ],
)
async def test_unrecognised_callers_are_forbidden(client: AsyncClient, mail_provider, headers):
    response = await client.post("/auth/request", json=SIGNUP, headers=headers)

    assert response.status_code == 403
    assert response.json() == {"error": "Forbidden"}
    assert mail_provider.sent == []


@pytest.mark.asyncio
async def test_gate_is_checked_before_body(client: AsyncClient):
    response = await client.post("/auth/request", json={"nonsense": True})
    assert response.status_code == 403


@pytest.mark.asyncio
@pytest.mark.parametrize("headers", [WEB_HEADERS, MOBILE_HEADERS])
async def test_both_channels_pass(client: AsyncClient, headers):
    response = await client.post("/auth/request", json=SIGNUP, headers=headers)
    assert response.status_code == 201


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"email": "new@wisc.edu"},
        {"purpose": "signup"},
        {"email": "new@wisc.edu", "purpose": "signout"},
        {"email": "not-an-email", "purpose": "signup"},
        {"email": "new@wisc.edu", "purpose": "signup", "extra": "field"},
    ],
)
async def test_invalid_request_body(client: AsyncClient, body):
    response = await client.post("/auth/request", json=body, headers=WEB_HEADERS)
    assert response.status_code == 400
    assert response.json() == {"error": "Bad Request"}


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "body",
    [
        {"email": "new@wisc.edu"},
        {"email": "new@wisc.edu", "passcode": 123456},
        {"email": "new@wisc.edu", "passcode": "123456", "staySignedIn": "yes"},
        {"email": "new@wisc.edu", "passcode": "123456", "purpose": "signup"},
    ],
)
async def test_invalid_code_body(client: AsyncClient, body):
    response = await client.post(
        f"/auth/request/{'0' * 128}/code", json=body, headers=MOBILE_HEADERS
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_unknown_path(client: AsyncClient):
    response = await client.get("/auth/nothing-here", headers=WEB_HEADERS)
    assert response.status_code == 404
    assert response.json() == {"error": "Not Found"}


@pytest.mark.asyncio
async def test_wrong_method_on_known_path(client: AsyncClient):
    response = await client.put("/auth/request", json=SIGNUP, headers=WEB_HEADERS)
    assert response.status_code == 405
    assert response.json() == {"error": "Method Not Allowed"}


@pytest.mark.asyncio
@pytest.mark.parametrize("method", ["OPTIONS", "TRACE"])
async def test_unserved_methods(client: AsyncClient, method):
    response = await client.request(method, "/auth/request")
    assert response.status_code == 405
    assert response.json() == {"error": "Method Not Allowed"}


@pytest.mark.asyncio
async def test_correlation_id_is_echoed(client: AsyncClient):
    response = await client.get("/health", headers={"X-Correlation-ID": "cid_test123"})
    assert response.headers["X-Correlation-ID"] == "cid_test123"
