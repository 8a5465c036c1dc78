"""Pytest configuration for all tests."""

import re
from datetime import datetime
from typing import AsyncGenerator

import pytest
import pytest_asyncio
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from authgate.core.config import Settings
from authgate.domain.entities import TermsAndConditions, UserProfile
from authgate.infrastructure.auth.jwt_service import JWTService
from authgate.infrastructure.persistence import models  # noqa: F401
from authgate.infrastructure.persistence.database import Base
from authgate.infrastructure.services.email import EmailProvider
from authgate.infrastructure.services.otp_mailer import OTPMailer
from authgate.infrastructure.services.user_api_client import UserNotFoundError

WEB_ORIGIN = "https://collegemate.app"
APP_KEY = "mobile-application-key-0001"
SERVER_DOMAIN = "api.collegemate.app"
ACCESS_KEY = "access-" + "a1b2c3d4" * 8
REFRESH_KEY = "refresh-" + "e5f6a7b8" * 8

WEB_HEADERS = {"Origin": WEB_ORIGIN}
MOBILE_HEADERS = {"X-APPLICATION-KEY": APP_KEY}


def make_settings(**overrides) -> Settings:
    """Settings for tests; nothing is read from the environment that matters."""
    values = {
        "environment": "testing",
        "log_format": "console",
        "database_url": "sqlite+aiosqlite:///:memory:",
        "jwt_access_key": ACCESS_KEY,
        "jwt_refresh_key": REFRESH_KEY,
        "server_domain": SERVER_DOMAIN,
        "webpage_origin": WEB_ORIGIN,
        "application_keys": [APP_KEY],
        "user_api_base_url": "https://users.test.collegemate.app",
        "tnc_api_url": "https://tnc.test.collegemate.app/tnc",
        "server_application_key": "tnc-application-key",
    }
    values.update(overrides)
    return Settings(**values)


class FakeUserAPI:
    """In-memory stand-in for the User API client."""

    def __init__(self) -> None:
        self.profiles: dict[str, UserProfile] = {}
        self.last_logins: list[str] = []

    def add(self, email: str, **fields) -> UserProfile:
        profile = UserProfile(email=email, nickname=email.split("@")[0], **fields)
        self.profiles[email] = profile
        return profile

    async def get_profile(self, email: str) -> UserProfile:
        if email not in self.profiles:
            raise UserNotFoundError(email)
        return self.profiles[email]

    async def update_last_login(self, email: str, when: datetime | None = None) -> None:
        self.last_logins.append(email)


class FakeTnCAPI:
    def __init__(self, version: str = "v1.0.0") -> None:
        self.latest = TermsAndConditions(version=version)
        self.calls = 0

    async def get_latest(self) -> TermsAndConditions:
        self.calls += 1
        return self.latest


class CapturingEmailProvider(EmailProvider):
    """Email provider that keeps sent messages in memory."""

    def __init__(self) -> None:
        self.sent: list[dict] = []
        self.fail_with: Exception | None = None

    async def send_email(
        self,
        to: str,
        subject: str,
        html_body: str,
        text_body: str,
        from_email: str,
        from_name: str,
        reply_to: str | None = None,
    ) -> bool:
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(
            {
                "to": to,
                "subject": subject,
                "html_body": html_body,
                "text_body": text_body,
                "from_email": from_email,
                "from_name": from_name,
                "reply_to": reply_to,
            }
        )
        return True

    def last_code(self, email: str) -> str:
        """Passcode from the most recent mail sent to ``email``."""
        for message in reversed(self.sent):
            if message["to"] == email:
                return re.search(r"\b(\d{6})\b", message["text_body"]).group(1)
        raise AssertionError(f"no mail sent to {email}")


def cookie_header(response, name: str) -> str | None:
    """The raw Set-Cookie header for cookie ``name``, if set."""
    for header in response.headers.get_list("set-cookie"):
        if header.startswith(f"{name}="):
            return header
    return None


def cookie_value(response, name: str) -> str | None:
    header = cookie_header(response, name)
    if header is None:
        return None
    return header.split(";", 1)[0].split("=", 1)[1]


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def jwt_service(settings: Settings) -> JWTService:
    return JWTService(settings.jwt_access_key, settings.jwt_refresh_key)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session.

    Uses an in-memory SQLite database for testing.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async_session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
    )

    async with async_session_maker() as session:
        yield session
        await session.rollback()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest.fixture
def user_api() -> FakeUserAPI:
    return FakeUserAPI()


@pytest.fixture
def tnc_api() -> FakeTnCAPI:
    return FakeTnCAPI()


@pytest.fixture
def mail_provider() -> CapturingEmailProvider:
    return CapturingEmailProvider()


@pytest.fixture
def mailer(mail_provider: CapturingEmailProvider) -> OTPMailer:
    return OTPMailer(
        mail_provider,
        from_email="no-reply@collegemate.app",
        from_name="CollegeMate",
    )


@pytest.fixture
def app(
    settings: Settings,
    db_session: AsyncSession,
    user_api: FakeUserAPI,
    tnc_api: FakeTnCAPI,
    mailer: OTPMailer,
) -> FastAPI:
    """Application with the database session and outbound services replaced."""
    from authgate.infrastructure.api.app import create_app
    from authgate.infrastructure.api.dependencies import get_tnc_api, get_user_api
    from authgate.infrastructure.persistence.database import get_db_session

    application = create_app(settings)
    application.state.otp_mailer = mailer

    async def override_get_db_session():
        try:
            yield db_session
        except Exception:
            await db_session.rollback()
            raise

    application.dependency_overrides[get_db_session] = override_get_db_session
    application.dependency_overrides[get_user_api] = lambda: user_api
    application.dependency_overrides[get_tnc_api] = lambda: tnc_api
    return application


@pytest_asyncio.fixture
async def client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client for the application."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test"
    ) as ac:
        yield ac

    app.dependency_overrides = {}
    await app.state.db.disconnect()
