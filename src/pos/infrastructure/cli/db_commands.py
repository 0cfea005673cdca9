"""CLI commands for database setup."""

from __future__ import annotations

import click

from pos.infrastructure import bootstrap
from pos.infrastructure.persistence.database import create_schema


@click.command("init")
def db_init() -> None:
    """Create the tables if they do not exist yet."""
    create_schema(bootstrap.engine())
    click.echo("Database initialised.")
