"""
Maintenance Commands
--------------------

Database consistency checks, repairs and data fill-ins.

Commands:
    - check: Report orphaned rows, incomplete rounds and stale guess flags
    - fill-editors: Set puzzle editors from the NYT editor tenure table
"""
import click

from kealoa.core.logging_manager import handle_cli_error
from kealoa.core.exceptions import DatabaseError, HealthCheckError
from . import get_db


@click.command()
@click.option("--fix", is_flag=True, help="Delete fixable orphans and recompute stale flags")
@click.pass_context
def check(ctx, fix):
    """Run consistency checks on the database."""
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            issues = db.health_monitor.run_consistency_checks(session)

            click.echo("\n🔍 Database Check")
            click.echo("=" * 50)

            if not issues:
                click.echo("\n✅ No issues found")
                return

            total = sum(len(rows) for rows in issues.values())
            click.echo(f"\n⚠️  Found {total} issue(s):")
            for name, rows in issues.items():
                click.echo(f"  • {name}: {len(rows)}")
                if ctx.obj.get("verbose"):
                    for row in rows:
                        click.echo(f"      {row}")

            if fix:
                click.echo("\n🧹 Repairing...")
                fixed = db.health_monitor.repair(session, issues)
                if fixed:
                    for table, count in fixed.items():
                        click.echo(f"  • {table}: {count} fixed")
                else:
                    click.echo("  Nothing could be fixed automatically")
            else:
                click.echo("\n💡 Tip: Use --fix to remove orphaned rows and fix guess flags")

    except (HealthCheckError, DatabaseError) as e:
        handle_cli_error(ctx, e, "check", additional_context={"fix": fix})


@click.command("fill-editors")
@click.option("--overwrite", is_flag=True, help="Also replace editors that are already set")
@click.pass_context
def fill_editors(ctx, overwrite):
    """Set puzzle editors from their publication dates."""
    try:
        db = get_db(ctx)
        with db.session_scope():
            updated = db.puzzles.fill_editors_by_date(overwrite=overwrite)
        click.echo(f"✅ Updated the editor of {updated} puzzle(s)")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "fill_editors", additional_context={"overwrite": overwrite})
