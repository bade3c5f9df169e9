"""Main CLI entry point for notification-service."""

from __future__ import annotations

import click

from notification_service.cli.commands.database import db
from notification_service.cli.commands.server import serve
from notification_service.cli.commands.worker import worker


@click.group()
@click.version_option(package_name="notification-service", prog_name="notification-service")
def cli() -> None:
    """Notification service: ingestion API, dispatch worker and database tools.

    \b
    Quick Start:
      notification-service db init     # Create tables (development)
      notification-service serve       # Run the ingestion API
      notification-service worker      # Run the dispatch worker
    """


cli.add_command(serve)
cli.add_command(worker)
cli.add_command(db)


if __name__ == "__main__":
    cli()
