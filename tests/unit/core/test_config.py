"""Unit tests for Settings."""

import pytest
from pydantic import ValidationError

from authgate.core.config import Settings
from conftest import make_settings


def test_application_keys_from_comma_separated_env(monkeypatch):
    monkeypatch.setenv("AUTHGATE_APPLICATION_KEYS", "ios-key, android-key ,")
    settings = Settings(jwt_access_key="access", jwt_refresh_key="refresh")
    assert settings.application_keys == ["ios-key", "android-key"]


def test_signing_keys_must_differ():
    with pytest.raises(ValidationError):
        make_settings(jwt_refresh_key=make_settings().jwt_access_key)


def test_sqlite_rejects_multiple_workers():
    with pytest.raises(ValidationError):
        make_settings(workers=4, database_url="sqlite+aiosqlite:///./data/authgate.db")


def test_settings_are_frozen():
    settings = make_settings()
    with pytest.raises(ValidationError):
        settings.server_domain = "evil.example.org"


def test_environment_flags():
    settings = make_settings(environment="production")
    assert settings.is_production
    assert not settings.is_development
    assert make_settings().is_testing
