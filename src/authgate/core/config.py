"""Configuration management for AuthGate.

This module uses Pydantic Settings to load and validate configuration from
environment variables and .env files. Configuration is loaded once at
application startup and is immutable during runtime: the settings instance
is frozen, stored on ``app.state.settings`` and handed to request handlers
through a dependency.
"""

from functools import lru_cache
from typing import Annotated, Literal

from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application configuration settings.

    Settings are loaded from environment variables and .env files.
    All configuration values are validated at startup.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="AUTHGATE_",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Application Settings
    app_name: str = "AuthGate"
    app_version: str = "0.1.0"
    environment: Literal["development", "production", "testing"] = "development"
    debug: bool = False

    # Server Settings
    host: str = "0.0.0.0"
    port: int = 3000
    workers: int = 1

    # Database Settings
    database_url: str = "sqlite+aiosqlite:///./data/authgate.db"
    db_pool_size: int = 5
    db_max_overflow: int = 10
    db_pool_timeout: int = 30
    db_pool_recycle: int = 3600
    db_echo: bool = False

    # Token Signing Keys
    jwt_access_key: str = Field(
        default="change-me-access-key-use-openssl-rand-hex-64",
        description="Secret used to sign access tokens and server-admin tokens",
    )
    jwt_refresh_key: str = Field(
        default="change-me-refresh-key-use-openssl-rand-hex-64",
        description="Secret used to sign refresh tokens",
    )

    # Cookie Settings
    server_domain: str = "api.collegemate.app"

    # Trust Gate
    webpage_origin: str = "https://collegemate.app"
    application_keys: Annotated[list[str], NoDecode] = Field(default_factory=list)

    # Outbound credentials
    server_application_key: str = ""
    server_admin_key: str = Field(
        default="",
        description="Admin key id used to mint this server's own server-admin token",
    )

    # External APIs
    user_api_base_url: str = "https://api.collegemate.app"
    tnc_api_url: str = "https://api.collegemate.app/tnc"
    external_api_timeout: float = 10.0

    # Mail Settings
    email_provider: Literal["smtp", "resend"] = "smtp"
    smtp_host: str = "localhost"
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    smtp_use_ssl: bool = False
    resend_api_key: str = ""
    mail_from_email: str = "no-reply@collegemate.app"
    mail_from_name: str = "CollegeMate"
    mail_reply_to: str | None = None

    # Logging Settings
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    @field_validator("application_keys", mode="before")
    @classmethod
    def parse_application_keys(cls, v: str | list[str]) -> list[str]:
        """Parse application keys from comma-separated string or list."""
        if isinstance(v, str):
            return [key.strip() for key in v.split(",") if key.strip()]
        return v

    @model_validator(mode="after")
    def validate_jwt_keys(self) -> "Settings":
        """Validate that both signing keys are set and distinct."""
        if not self.jwt_access_key or not self.jwt_refresh_key:
            raise ValueError("Both jwt_access_key and jwt_refresh_key must be set")
        if self.jwt_access_key == self.jwt_refresh_key:
            raise ValueError("jwt_access_key and jwt_refresh_key must differ")
        return self

    @model_validator(mode="after")
    def validate_sqlite_workers(self) -> "Settings":
        """Validate that SQLite is not used with multiple workers."""
        if self.workers > 1 and self.database_url.startswith("sqlite"):
            raise ValueError(
                "SQLite does not support multiple worker processes. "
                f"Requested {self.workers} workers, but SQLite requires workers=1. "
                "Either use --workers 1 or switch to PostgreSQL."
            )
        return self

    @property
    def is_production(self) -> bool:
        """Check if running in production environment."""
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        """Check if running in development environment."""
        return self.environment == "development"

    @property
    def is_testing(self) -> bool:
        """Check if running in testing environment."""
        return self.environment == "testing"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance.

    Only process entry points (CLI, default application) call this;
    request handlers receive the settings bound to their application.

    Returns:
        Settings: Cached application settings instance.
    """
    return Settings()
