"""
Export Commands
---------------

Database export to the CSV layout the importer reads.

Commands:
    - csv: Export one kind to a CSV file
    - zip: Export every kind into one ZIP bundle
"""
import click

from kealoa.core.logging_manager import handle_cli_error
from kealoa.core.exceptions import DatabaseError, ExportError
from kealoa.database.export_manager import EXPORT_KINDS
from . import get_db


@click.group()
@click.pass_context
def export(ctx: click.Context) -> None:
    """Export database to CSV files or a ZIP bundle."""
    pass


@export.command("csv")
@click.argument("kind", type=click.Choice(EXPORT_KINDS))
@click.argument("output", type=click.Path(dir_okay=False))
@click.pass_context
def export_csv(ctx, kind, output):
    """Export one KIND to a CSV file."""
    try:
        db = get_db(ctx)
        click.echo(f"📤 Exporting {kind} to CSV: {output}")

        with db.session_scope() as session:
            rows = db.export_manager.export_csv_file(session, kind, output)

        click.echo(f"✅ Export complete: {rows} rows")

    except (ExportError, DatabaseError) as e:
        handle_cli_error(
            ctx,
            e,
            "export_csv",
            additional_context={"kind": kind, "output": output},
        )


@export.command("zip")
@click.argument("output", type=click.Path(dir_okay=False))
@click.pass_context
def export_zip(ctx, output):
    """Export every kind into one ZIP bundle."""
    try:
        db = get_db(ctx)
        click.echo(f"📤 Exporting bundle: {output}")

        with db.session_scope() as session:
            exported = db.export_manager.export_zip(session, output)

        click.echo(f"\n✅ Export Complete ({len(exported['files'])} files):")
        for kind, rows in exported["files"].items():
            click.echo(f"  • {kind}.csv: {rows} rows")
        click.echo(f"  Duration: {exported['duration']:.2f}s")

    except (ExportError, DatabaseError) as e:
        handle_cli_error(
            ctx,
            e,
            "export_zip",
            additional_context={"output": output},
        )
