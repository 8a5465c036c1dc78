"""Command-line interface for AuthGate.

This module provides the CLI commands for running the gateway and
managing server/admin keys.
"""

import asyncio
import sys
from typing import NoReturn

import click

from authgate.core.config import get_settings
from authgate.core.logging import configure_logging, get_logger


@click.group()
@click.version_option(version="0.1.0", prog_name="AuthGate")
def cli() -> None:
    """AuthGate - one-time-passcode authentication gateway.

    Settings are read from AUTHGATE_* environment variables and .env.
    """


@cli.command()
@click.option(
    "--host",
    type=str,
    default=None,
    help="Host to bind to (overrides config)",
)
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to bind to (overrides config)",
)
@click.option(
    "--workers",
    type=int,
    default=None,
    help="Number of worker processes (overrides config)",
)
@click.option(
    "--reload",
    is_flag=True,
    default=False,
    help="Enable auto-reload for development",
)
def serve(host: str | None, port: int | None, workers: int | None, reload: bool) -> None:
    """Start the AuthGate server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting AuthGate server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "authgate.infrastructure.api.main:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command()
@click.option(
    "--force",
    is_flag=True,
    help="Run even in production",
)
def init_db(force: bool) -> None:
    """Create all database tables.

    Use this in development. In production, use migrations instead.
    """
    from authgate.infrastructure.persistence.database import DatabaseManager

    settings = get_settings()
    configure_logging(settings)

    if settings.is_production and not force:
        click.echo(
            "ERROR: Running in production mode. Use migrations instead of init-db.",
            err=True,
        )
        raise SystemExit(1)

    async def initialize() -> None:
        db = DatabaseManager(settings)
        try:
            await db.create_tables()
            click.echo("Database initialized successfully.")
        finally:
            await db.disconnect()

    asyncio.run(initialize())


@cli.command()
def cleanup() -> None:
    """Delete expired OTP requests and refresh tokens."""
    from authgate.core.timestamps import utc_now
    from authgate.infrastructure.persistence.database import DatabaseManager
    from authgate.infrastructure.persistence.repositories import (
        OTPRepository,
        RefreshTokenRepository,
    )

    settings = get_settings()
    configure_logging(settings)
    logger = get_logger(__name__)

    async def run() -> tuple[int, int]:
        db = DatabaseManager(settings)
        try:
            now = utc_now()
            async with db.session() as session:
                otps = await OTPRepository(session).delete_expired(now)
                tokens = await RefreshTokenRepository(session).delete_expired(now)
                await session.commit()
            return otps, tokens
        finally:
            await db.disconnect()

    otps, tokens = asyncio.run(run())
    logger.info("Expired records deleted", otp_requests=otps, refresh_tokens=tokens)
    click.echo(f"Deleted {otps} OTP request(s) and {tokens} refresh token(s).")


@cli.group()
def keys() -> None:
    """Manage server/admin keys."""


def _run_key_operation(operation):
    """Run ``operation(service)`` against a fresh database session."""
    from authgate.application.services import AdminKeyService
    from authgate.infrastructure.persistence.database import DatabaseManager

    settings = get_settings()

    async def run():
        db = DatabaseManager(settings)
        try:
            async with db.session() as session:
                return await operation(AdminKeyService(session))
        finally:
            await db.disconnect()

    return asyncio.run(run())


@keys.command("create")
@click.argument("nickname")
@click.argument("account_type")
def create_key(nickname: str, account_type: str) -> None:
    """Create a key for NICKNAME with role ACCOUNT_TYPE and print it.

    ACCOUNT_TYPE is one of: admin, "server - authentication", "server - user",
    "server - friend", "server - schedule", "server - notification",
    "server - miscellaneous".
    """
    from authgate.application.services import InvalidAccountTypeError
    from authgate.core.errors import AuthError

    try:
        key = _run_key_operation(lambda service: service.new_key(nickname, account_type))
    except InvalidAccountTypeError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1)
    except AuthError as e:
        click.echo(e.message, err=True)
        raise SystemExit(1)

    click.echo(f"New Key for {nickname} ({account_type}):")
    click.echo(key)


@keys.command("list")
def list_keys() -> None:
    """List every key's nickname, account type and generation time."""
    from authgate.core.timestamps import to_iso_string

    entries = _run_key_operation(lambda service: service.list_keys())
    if not entries:
        click.echo("No keys found.")
        return

    width = max(len("nickname"), *(len(entry.nickname) for entry in entries))
    click.echo(f"{'nickname'.ljust(width)}  {'accountType'.ljust(24)}  generatedAt")
    for entry in entries:
        click.echo(
            f"{entry.nickname.ljust(width)}  {entry.account_type.value.ljust(24)}  "
            f"{to_iso_string(entry.generated_at)}"
        )


@keys.command("delete")
@click.argument("operation_type")
@click.argument("value")
def delete_key(operation_type: str, value: str) -> None:
    """Delete a key by OPERATION_TYPE ("nickname" or "key") and VALUE."""
    from authgate.application.services import InvalidOperationTypeError
    from authgate.core.errors import AuthError

    try:
        _run_key_operation(lambda service: service.delete_key(operation_type, value))
    except InvalidOperationTypeError as e:
        click.echo(str(e), err=True)
        raise SystemExit(1)
    except AuthError as e:
        click.echo(e.message, err=True)
        raise SystemExit(1)

    click.echo(f"{operation_type} - {value} Deleted")


@cli.command()
def info() -> None:
    """Display AuthGate configuration and system information."""
    settings = get_settings()

    click.echo(f"""
AuthGate v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}
  Domain:       {settings.server_domain}

Database:
  URL:          {settings.database_url}
  Echo:         {settings.db_echo}

Request Gate:
  Web Origin:   {settings.webpage_origin}
  App Keys:     {len(settings.application_keys)} configured

External APIs:
  User API:     {settings.user_api_base_url}
  TNC API:      {settings.tnc_api_url}
  Mail:         {settings.email_provider}

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `authgate` command is run
    or when using `python -m authgate`.
    """
    cli()


def serve_main() -> NoReturn:
    """Entry point that defaults to ``serve`` when no command is given."""
    sys.argv[0] = "authgate"
    if len(sys.argv) == 1:
        sys.argv.append("serve")
    main()


if __name__ == "__main__":
    main()
