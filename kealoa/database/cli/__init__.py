#!/usr/bin/env python3
"""
KEALOA Reference Database CLI
-----------------------------

Modular command-line interface for the KEALOA reference database.

This module provides the main CLI group and shared context setup
for all commands.

Command Structure:
    - Setup & Initialization (init)
    - Import (import csv, import zip)
    - Export (export csv, export zip)
    - Statistics (stats person, stats round, stats overview, stats leaders,
      stats table)
    - Maintenance (check, fill-editors)
    - Pages (show person, show constructor, show editor, show puzzle,
      show round)

Usage:
    # Get general help
    kealoa --help

    # Get help for a specific command group
    kealoa import --help

    # Get help for a specific command
    kealoa stats person --help
"""
import click
import logging
from pathlib import Path

from kealoa.core.paths import DB_PATH, ALEMBIC_DIR, LOG_DIR
from kealoa.database import KealoaDB


@click.group()
@click.option(
    "--db-path",
    type=click.Path(),
    default=str(DB_PATH),
    help="Path to database file",
)
@click.option(
    "--alembic-dir",
    type=click.Path(),
    default=str(ALEMBIC_DIR),
    help="Path to Alembic directory",
)
@click.option(
    "--log-dir",
    type=click.Path(),
    default=str(LOG_DIR),
    help="Path to log directory",
)
@click.option(
    "--verbose",
    is_flag=True,
    help="Show detailed errors and tracebacks",
)
@click.pass_context
def cli(ctx, db_path, alembic_dir, log_dir, verbose):
    """KEALOA Reference Database CLI"""

    # Suppress Alembic INFO logging by default
    logging.getLogger("alembic").setLevel(logging.WARNING)

    ctx.ensure_object(dict)
    ctx.obj["db_path"] = Path(db_path)
    ctx.obj["alembic_dir"] = Path(alembic_dir)
    ctx.obj["log_dir"] = Path(log_dir)
    ctx.obj["verbose"] = verbose


def get_db(ctx) -> KealoaDB:
    """Get or create database instance from context."""
    if "db" not in ctx.obj:
        ctx.obj["db"] = KealoaDB(
            db_path=ctx.obj["db_path"],
            alembic_dir=ctx.obj["alembic_dir"],
            log_dir=ctx.obj["log_dir"],
        )
        ctx.obj["logger"] = ctx.obj["db"].logger
    return ctx.obj["db"]


# Import and register command modules
# These imports must come after CLI group definition
from .setup import init  # noqa: E402
from .imports import import_group  # noqa: E402
from .export import export  # noqa: E402
from .stats import stats  # noqa: E402
from .maintenance import check, fill_editors  # noqa: E402
from .show import show  # noqa: E402

# Register top-level commands
cli.add_command(init)
cli.add_command(check)
cli.add_command(fill_editors)

# Register command groups
cli.add_command(import_group)
cli.add_command(export)
cli.add_command(stats)
cli.add_command(show)


if __name__ == "__main__":
    cli(obj={})
