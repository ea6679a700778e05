"""
Statistics Commands
-------------------

Guessing records of persons and rounds.

Commands:
    - person: Record and breakdowns of one person (text, json or yaml)
    - round: Guesser results of one round
    - overview: Totals across all rounds, per year and per guesser
    - leaders: Best round score and longest streak of every guesser
    - table: Constructor, editor or clue giver totals
"""
import json

import click
import yaml

from kealoa.core.logging_manager import handle_cli_error
from kealoa.core.exceptions import DatabaseError, ValidationError, ViewNotFoundError
from kealoa.utils.formatters import format_guesser_results, format_percentage
from kealoa.views import resolve_person_view, resolve_round_view
from kealoa.views.renderer import BREAKDOWN_TITLES
from . import get_db


def _person_payload(context):
    data = context.data
    return {
        "full_name": context.title,
        "roles": data["roles"],
        "stats": data["stats"],
        "breakdowns": data["breakdowns"],
    }


@click.group()
@click.pass_context
def stats(ctx: click.Context) -> None:
    """Guessing statistics."""
    pass


@stats.command("person")
@click.argument("name")
@click.option(
    "--format",
    "output_format",
    type=click.Choice(["text", "json", "yaml"]),
    default="text",
    show_default=True,
    help="Output format",
)
@click.pass_context
def person_stats(ctx, name, output_format):
    """Show the guessing record of the person NAME."""
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            context = resolve_person_view(session, name, db.statistics)
        payload = _person_payload(context)

        if output_format == "json":
            click.echo(json.dumps(payload, indent=2, default=str))
            return
        if output_format == "yaml":
            click.echo(
                yaml.dump(
                    payload,
                    default_flow_style=False,
                    allow_unicode=True,
                    sort_keys=False,
                ).strip()
            )
            return

        record = payload["stats"]
        click.echo(f"\n📊 {payload['full_name']}")
        click.echo("=" * 50)
        click.echo(f"Rounds played:   {record['rounds_played']}")
        click.echo(f"Clues answered:  {record['total_clues_answered']}")
        click.echo(
            f"Correct:         {record['total_correct']}"
            f" ({format_percentage(record['overall_percentage'])})"
        )
        click.echo(
            f"Correct/round:   min {record['min_correct']}  max {record['max_correct']}"
            f"  mean {record['mean_correct']}  median {record['median_correct']}"
        )
        click.echo(
            f"Percent/round:   min {format_percentage(record['min_percentage'])}"
            f"  max {format_percentage(record['max_percentage'])}"
            f"  mean {format_percentage(record['mean_percentage'])}"
            f"  median {format_percentage(record['median_percentage'])}"
        )
        click.echo(f"Best streak:     {record['best_streak']}")

        for key, title in BREAKDOWN_TITLES:
            rows = payload["breakdowns"].get(key) or []
            if not rows:
                continue
            click.echo(f"\n{title}:")
            for row in rows:
                click.echo(
                    f"  • {row['key']}: {row['correct_count']}/{row['total_answered']}"
                    f" ({format_percentage(row['percentage'])})"
                )

    except (ViewNotFoundError, DatabaseError) as e:
        handle_cli_error(ctx, e, "stats_person", additional_context={"name": name})


@stats.command("round")
@click.argument("date")
@click.option("--round-number", type=int, default=1, show_default=True, help="Round of that date")
@click.pass_context
def round_stats(ctx, date, round_number):
    """Show the guesser results of the round played on DATE."""
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            context = resolve_round_view(session, date, round_number, db.statistics)

        data = context.data
        click.echo(f"\n📊 Round {context.title}")
        click.echo("=" * 50)
        click.echo(f"Clues: {data['total_clues']}")
        if data["guesser_results"]:
            click.echo(format_guesser_results(data["guesser_results"], data["total_clues"]))
        else:
            click.echo("No guessers assigned")

    except (ViewNotFoundError, ValidationError, DatabaseError) as e:
        handle_cli_error(
            ctx,
            e,
            "stats_round",
            additional_context={"date": date, "round_number": round_number},
        )


@stats.command("overview")
@click.pass_context
def overview(ctx):
    """Show totals across all rounds."""
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            totals = db.statistics.rounds_overview(session)
            by_year = db.statistics.rounds_stats_by_year(session)
            guessers = db.statistics.persons_with_stats(session)

        click.echo("\n📊 KEALOA Overview")
        click.echo("=" * 50)
        click.echo(f"Rounds:   {totals['total_rounds']}")
        click.echo(f"Clues:    {totals['total_clues']}")
        click.echo(f"Guesses:  {totals['total_guesses']}")
        click.echo(
            f"Correct:  {totals['total_correct']} ({format_percentage(totals['accuracy'])})"
        )

        if by_year:
            click.echo("\nBy year:")
            for row in by_year:
                click.echo(
                    f"  • {row['year']}: {row['total_rounds']} rounds,"
                    f" {row['total_correct']}/{row['total_guesses']} correct"
                )

        if guessers:
            click.echo("\nGuessers:")
            for row in guessers:
                click.echo(
                    f"  • {row['full_name']}: {row['rounds_played']} rounds,"
                    f" {row['correct_guesses']}/{row['clues_guessed']} correct"
                )

    except DatabaseError as e:
        handle_cli_error(ctx, e, "stats_overview")


@stats.command("leaders")
@click.pass_context
def leaders(ctx):
    """Show each guesser's best round score and longest streak."""
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            guessers = db.statistics.persons_with_stats(session)
            scores = db.statistics.highest_round_scores(session)
            streaks = db.statistics.longest_streaks(session)

        click.echo("\n🏆 Leaders")
        click.echo("=" * 50)
        if not guessers:
            click.echo("No guessers yet")
            return

        ranked = sorted(
            guessers,
            key=lambda row: (
                -scores.get(row["person_id"], {}).get("value", 0),
                -streaks.get(row["person_id"], {}).get("value", 0),
                row["full_name"],
            ),
        )
        for row in ranked:
            best = scores.get(row["person_id"], {}).get("value", 0)
            streak = streaks.get(row["person_id"], {}).get("value", 0)
            click.echo(f"  • {row['full_name']}: best round {best}, longest streak {streak}")

    except DatabaseError as e:
        handle_cli_error(ctx, e, "stats_leaders")


TABLES = {
    "constructors": ("constructors_with_stats", "puzzle_count", "puzzles"),
    "editors": ("editors_with_stats", "puzzle_count", "puzzles"),
    "clue-givers": ("clue_givers_with_stats", "rounds_given", "rounds"),
}


@stats.command("table")
@click.argument("kind", type=click.Choice(list(TABLES)))
@click.pass_context
def table(ctx, kind):
    """Show totals for every constructor, editor or clue giver."""
    method, count_key, count_label = TABLES[kind]
    try:
        db = get_db(ctx)
        with db.session_scope() as session:
            rows = getattr(db.statistics, method)(session)

        click.echo(f"\n📊 {kind.replace('-', ' ').title()}")
        click.echo("=" * 50)
        if not rows:
            click.echo("Nothing recorded yet")
            return
        for row in rows:
            correct = row["correct_guesses"]
            total = row.get("total_guesses", row.get("clues_guessed"))
            click.echo(
                f"  • {row['full_name']}: {row[count_key]} {count_label},"
                f" {correct}/{total} correct ({format_percentage(row['percentage'])})"
            )

    except DatabaseError as e:
        handle_cli_error(ctx, e, "stats_table", additional_context={"kind": kind})
