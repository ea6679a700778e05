"""
Page Commands
-------------

Plain-text pages for persons, constructors, editors, puzzles and rounds.

Commands:
    - person: Profile, roles, record and breakdowns of a person
    - constructor: Puzzles, totals and guesser results of a constructor
    - editor: Edited puzzles, totals and guesser results of an editor
    - puzzle: Byline and the clues taken from a puzzle
    - round: Episode, solution, clues and results of a round
"""
import click

from kealoa.core.logging_manager import handle_cli_error
from kealoa.core.exceptions import DatabaseError, ValidationError, ViewNotFoundError
from kealoa.views import (
    render_text,
    resolve_constructor_view,
    resolve_editor_view,
    resolve_person_view,
    resolve_puzzle_view,
    resolve_round_view,
)
from . import get_db


@click.group()
@click.pass_context
def show(ctx: click.Context) -> None:
    """Show a person, constructor, editor, puzzle or round page."""
    pass


@show.command("person")
@click.argument("name")
@click.pass_context
def show_person(ctx, name):
    """Show the page of the person NAME."""
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            context = resolve_person_view(session, name, db.statistics)
        click.echo(render_text(context))

    except (ViewNotFoundError, DatabaseError) as e:
        handle_cli_error(ctx, e, "show_person", additional_context={"name": name})


@show.command("constructor")
@click.argument("name")
@click.pass_context
def show_constructor(ctx, name):
    """Show the constructor page of NAME."""
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            context = resolve_constructor_view(session, name, db.statistics)
        click.echo(render_text(context))

    except (ViewNotFoundError, DatabaseError) as e:
        handle_cli_error(ctx, e, "show_constructor", additional_context={"name": name})


@show.command("editor")
@click.argument("name")
@click.pass_context
def show_editor(ctx, name):
    """Show the editor page of NAME."""
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            context = resolve_editor_view(session, name, db.statistics)
        click.echo(render_text(context))

    except (ViewNotFoundError, DatabaseError) as e:
        handle_cli_error(ctx, e, "show_editor", additional_context={"name": name})


@show.command("puzzle")
@click.argument("date")
@click.pass_context
def show_puzzle(ctx, date):
    """Show the page of the puzzle published on DATE."""
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            context = resolve_puzzle_view(session, date, db.statistics)
        click.echo(render_text(context))

    except (ViewNotFoundError, ValidationError, DatabaseError) as e:
        handle_cli_error(ctx, e, "show_puzzle", additional_context={"date": date})


@show.command("round")
@click.argument("date")
@click.option("--round-number", type=int, default=1, show_default=True, help="Round of that date")
@click.pass_context
def show_round(ctx, date, round_number):
    """Show the page of the round played on DATE."""
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            context = resolve_round_view(session, date, round_number, db.statistics)
        click.echo(render_text(context))

    except (ViewNotFoundError, ValidationError, DatabaseError) as e:
        handle_cli_error(
            ctx,
            e,
            "show_round",
            additional_context={"date": date, "round_number": round_number},
        )
