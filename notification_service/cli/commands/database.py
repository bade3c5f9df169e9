"""Database management commands."""

from __future__ import annotations

import sys

from alembic import command
from alembic.config import Config
import click

from notification_service.cli.utils import coro, error, info, success
from notification_service.core.settings import get_db_settings
from notification_service.infra.database import create_database


@click.group(name="db")
def db() -> None:
    """Database management commands."""


@db.command()
@coro
async def init() -> None:
    """Create every table (development; use `db upgrade` for deployments)."""
    settings = get_db_settings()
    info(f"Creating tables on {'SQLite' if settings.is_sqlite else settings.host}")
    database = create_database(settings)
    try:
        await database.create_all()
    except Exception as e:
        error(f"Failed to create tables: {e}")
        sys.exit(1)
    finally:
        await database.dispose()
    success("Database schema ready")


@db.command()
@click.option("--revision", default="head", help="Target revision")
@click.option("--config", "config_path", default="alembic.ini", help="Path to alembic.ini")
def upgrade(revision: str, config_path: str) -> None:
    """Apply Alembic migrations."""
    info(f"Upgrading database to: {revision}")
    try:
        command.upgrade(Config(config_path), revision)
    except Exception as e:
        error(f"Failed to upgrade database: {e}")
        sys.exit(1)
    success("Database upgraded successfully!")
