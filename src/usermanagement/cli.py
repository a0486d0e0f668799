"""Command-line interface for the User Management API.

This module provides the CLI commands for running the API server and for
issuing development bearer tokens.
"""

import os
from datetime import timedelta
from typing import NoReturn

import click

from usermanagement.core.config import get_settings
from usermanagement.core.logging import configure_logging, get_logger

MIN_SECRET_LENGTH = 16


@click.group()
@click.version_option(version="0.1.0", prog_name="User Management API")
def cli() -> None:
    """User Management API - CRUD over user records behind bearer tokens."""


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
    """Start the API server."""
    import uvicorn

    settings = get_settings()

    bind_host = host or settings.host
    bind_port = port or settings.port
    bind_workers = workers or settings.workers

    if bind_workers > 1 and settings.database_url.startswith("sqlite"):
        click.echo(
            "Error: SQLite does not support multiple worker processes. "
            "Use --workers 1 or switch to PostgreSQL.",
            err=True,
        )
        raise SystemExit(1)

    configure_logging(settings)

    logger = get_logger(__name__)
    logger.info(
        "Starting User Management API server",
        host=bind_host,
        port=bind_port,
        workers=bind_workers,
        reload=reload,
        environment=settings.environment,
    )

    uvicorn.run(
        "usermanagement.infrastructure.api.app:app",
        host=bind_host,
        port=bind_port,
        workers=1 if reload else bind_workers,
        reload=reload,
        log_level=settings.log_level.lower(),
        access_log=True,
    )


@cli.command("generate-token")
@click.argument("secret", required=False)
@click.argument("kid", required=False)
@click.pass_context
def generate_token(ctx: click.Context, secret: str | None, kid: str | None) -> None:
    """Print a signed development bearer token.

    SECRET falls back to JWT_SECRET, then USERMGMT_JWT__KEY. KID falls back
    to JWT_KID and is written to the token header when set. The token carries
    sub "1" and name "testuser" and expires in one hour.
    """
    from usermanagement.infrastructure.auth import TokenIssuer
    from usermanagement.infrastructure.auth.token_settings import (
        PRIMARY_SECRET_ENV,
        SECONDARY_SECRET_ENV,
    )

    secret = secret or os.environ.get(PRIMARY_SECRET_ENV) or os.environ.get(SECONDARY_SECRET_ENV)
    kid = kid or os.environ.get("JWT_KID") or None

    if not secret:
        click.echo(ctx.get_usage(), err=True)
        click.echo(
            f"Provide the signing secret as an argument or set {PRIMARY_SECRET_ENV}.",
            err=True,
        )
        raise SystemExit(1)

    if not secret.strip():
        click.echo("Error: secret must not be blank.", err=True)
        raise SystemExit(2)

    if len(secret) < MIN_SECRET_LENGTH:
        click.echo(
            f"Error: secret must be at least {MIN_SECRET_LENGTH} characters long.",
            err=True,
        )
        raise SystemExit(2)

    token = TokenIssuer(secret).create_access_token(
        subject="1",
        name="testuser",
        expires_delta=timedelta(hours=1),
        key_id=kid,
    )
    click.echo(token)


@cli.command()
def info() -> None:
    """Display configuration and system information."""
    settings = get_settings()

    click.echo(f"""
{settings.app_name} v{settings.app_version}
{'=' * 40}

Configuration:
  Environment:  {settings.environment}
  Debug:        {settings.debug}
  API Prefix:   {settings.api_prefix}
  Config Dir:   {settings.config_dir}
  Secrets Dir:  {settings.secrets_dir or '-'}

Server:
  Host:         {settings.host}
  Port:         {settings.port}
  Workers:      {settings.workers}

Database:
  URL:          {settings.database_url}
  Seed:         {settings.seed_database}

Security:
  Clock Skew:   {settings.token_clock_skew_seconds} seconds

Logging:
  Level:        {settings.log_level}
  Format:       {settings.log_format}
""")


def main() -> NoReturn:
    """Main entry point for the CLI.

    This function is called when the `usermanagement` command is run
    or when using `python -m usermanagement`.
    """
    cli()


if __name__ == "__main__":
    main()
