"""
Setup & Initialization Commands
--------------------------------

Database and schema initialization.

Commands:
    - init: Create the database and bring its schema to the latest revision
"""
import click

from kealoa.core.logging_manager import handle_cli_error
from kealoa.core.exceptions import DatabaseError
from . import get_db


@click.command()
@click.pass_context
def init(ctx):
    """Initialize the database schema (safe to run again)."""
    try:
        click.echo("🚀 Initializing KEALOA database...")
        db = get_db(ctx)
        click.echo("🗄️  Checking database schema...")
        db.initialize_schema()

        history = db.get_migration_history()
        click.echo(f"✅ Database ready: {db.db_path}")
        if history.get("current_revision"):
            click.echo(f"  Schema revision: {history['current_revision']}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "init", additional_context={"db_path": str(ctx.obj["db_path"])})
