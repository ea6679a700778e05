"""
Import Commands
---------------

Load KEALOA reference data from CSV files and ZIP bundles.

Commands:
    - csv: Import one CSV file of a given kind
    - zip: Import every CSV file found in a ZIP bundle

Row problems never stop an import; they are listed after the summary.
"""
import click

from kealoa.core.logging_manager import handle_cli_error
from kealoa.core.exceptions import CsvImportError, DatabaseError
from kealoa.pipeline.csv_importer import IMPORT_ORDER
from . import get_db

# Errors listed before "... and N more" unless --verbose is set
MAX_LISTED_ERRORS = 20

IMPORT_KINDS = [kind for kind, _ in IMPORT_ORDER]


def _echo_errors(ctx, errors):
    if not errors:
        return
    limit = len(errors) if ctx.obj.get("verbose") else MAX_LISTED_ERRORS
    click.echo(f"\n⚠️  {len(errors)} row(s) skipped with errors:")
    for error in errors[:limit]:
        click.echo(f"  • {error}")
    if len(errors) > limit:
        click.echo(f"  ... and {len(errors) - limit} more (use --verbose to list all)")


@click.group("import")
@click.pass_context
def import_group(ctx: click.Context) -> None:
    """Import data from CSV files or ZIP bundles."""
    pass


@import_group.command("csv")
@click.argument("kind", type=click.Choice(IMPORT_KINDS))
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--overwrite", is_flag=True, help="Update rows that already exist")
@click.pass_context
def import_csv(ctx, kind, file, overwrite):
    """Import one CSV file of KIND."""
    try:
        db = get_db(ctx)
        click.echo(f"📥 Importing {kind} from {file}...")

        with db.session_scope():
            result = db.importer.import_file(kind, file, overwrite=overwrite)

        click.echo(f"\n✅ Import Complete ({kind}):")
        click.echo(f"  Imported: {result.imported}")
        click.echo(f"  Skipped:  {result.skipped}")
        _echo_errors(ctx, result.errors)

    except (CsvImportError, DatabaseError) as e:
        handle_cli_error(
            ctx,
            e,
            "import_csv",
            additional_context={"kind": kind, "file": file},
        )


@import_group.command("zip")
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--overwrite", is_flag=True, help="Update rows that already exist")
@click.pass_context
def import_zip(ctx, file, overwrite):
    """Import persons, puzzles, rounds, clues and guesses from a ZIP bundle."""
    try:
        db = get_db(ctx)
        click.echo(f"📦 Importing bundle {file}...")

        with db.session_scope():
            result = db.importer.import_zip(file, overwrite=overwrite)

        status = "✅ Import Complete" if result.success else "❌ Import Failed"
        click.echo(f"\n{status}:")
        for kind, detail in result.details.items():
            line = f"  • {detail['label']}: {detail['imported']} imported, {detail['skipped']} skipped"
            if detail.get("message"):
                line += f" ({detail['message']})"
            click.echo(line)
        click.echo(f"\nTotal: {result.imported} imported, {result.skipped} skipped")
        _echo_errors(ctx, result.errors)

        if not result.success:
            ctx.exit(1)

    except (CsvImportError, DatabaseError) as e:
        handle_cli_error(ctx, e, "import_zip", additional_context={"file": file})
