"""CLI entry point for scolarite.

Commands:
- init-db: create the database schema
- create-admin: create an ADMIN account
- serve: run the JSON API with uvicorn
"""

from __future__ import annotations

import sys
from pathlib import Path

import click

from scolarite.config import ConfigError, Settings, load_settings
from scolarite.logging import get_logger, setup_logging
from scolarite.records import Database, Role
from scolarite.services import ScolariteError, UserService

logger = get_logger("cli")


def _load(config_path: Path | None) -> Settings:
    try:
        return load_settings(config_path)
    except ConfigError as e:
        click.echo(f"Configuration error: {e}", err=True)
        sys.exit(1)


@click.group()
@click.version_option(package_name="scolarite")
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    help="Path to scolarite.yaml (default: ./scolarite.yaml if present)",
)
@click.pass_context
def main(ctx: click.Context, config_path: Path | None) -> None:
    """scolarite - school administration core."""
    settings = _load(config_path)
    setup_logging(
        log_dir=settings.log_dir,
        level=settings.log_level,
        console=settings.log_console,
    )
    ctx.obj = settings


@main.command("init-db")
@click.pass_obj
def init_db(settings: Settings) -> None:
    """Create the database tables if they don't exist."""
    db = Database(settings.database_path)
    try:
        db.create_tables()
    finally:
        db.close()
    logger.info("Schema ready in %s", settings.database_path)
    click.echo(f"Database ready at {settings.database_path}")


@main.command("create-admin")
@click.argument("email")
@click.option(
    "-u",
    "--username",
    default=None,
    help="Account name (default: default_admin_username from the configuration)",
)
@click.password_option(help="Password of the new account (prompted if omitted)")
@click.pass_obj
def create_admin(settings: Settings, email: str, username: str | None, password: str) -> None:
    """Create an ADMIN account with the given EMAIL."""
    db = Database(settings.database_path)
    try:
        db.create_tables()
        user = UserService(db).create(
            username=username or settings.default_admin_username,
            email=email,
            password=password,
            role=Role.ADMIN,
        )
    except ScolariteError as e:
        logger.warning("create-admin failed: %s", e)
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)
    finally:
        db.close()
    logger.info("Created administrator %s from the command line", user.username)
    click.echo(f"Created administrator {user.username} (id={user.id})")


@main.command()
@click.option("--host", default="127.0.0.1", show_default=True, help="Bind address")
@click.option("--port", default=8000, show_default=True, type=int, help="Bind port")
@click.pass_obj
def serve(settings: Settings, host: str, port: int) -> None:
    """Run the JSON API."""
    import uvicorn  # noqa: PLC0415

    from scolarite.api import create_app  # noqa: PLC0415

    uvicorn.run(create_app(settings), host=host, port=port, log_config=None)


if __name__ == "__main__":
    main()
