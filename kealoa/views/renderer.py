"""
Plain-text Page Renderer
------------------------

Turns a ViewContext into the text shown by ``kealoa show``.

Functions:
    - render_text: Render any resolved view
    - render_person: Person page (profile, record, breakdowns)
    - render_constructor: Constructor page (puzzles, totals, guessers)
    - render_editor: Editor page (edited puzzles, totals, guessers)
    - render_puzzle: Puzzle page (byline, clues used, guessers)
    - render_round: Round page (episode, solution, clues, results)
"""
from __future__ import annotations

from typing import Any, Callable, Dict, List

from kealoa.utils.formatters import (
    EMPTY_MARK,
    format_date,
    format_guess_display,
    format_guesser_results,
    format_list_with_and,
    format_percentage,
    format_solution_words,
)
from .context import (
    CONSTRUCTOR_VIEW,
    EDITOR_VIEW,
    PERSON_VIEW,
    PUZZLE_VIEW,
    ROUND_VIEW,
    ViewContext,
)

BREAKDOWN_TITLES = [
    ("clue_number", "By clue number"),
    ("direction", "By direction"),
    ("day_of_week", "By day of week"),
    ("decade", "By puzzle decade"),
    ("answer_length", "By answer length"),
    ("constructor", "By constructor"),
    ("editor", "By editor"),
    ("year", "By year"),
]


def _heading(title: str, underline: str = "=") -> List[str]:
    return [title, underline * len(title)]


def _breakdown_lines(title: str, rows: List[Dict[str, Any]]) -> List[str]:
    if not rows:
        return []
    lines = ["", *_heading(title, "-")]
    width = max(len(str(row["key"])) for row in rows)
    for row in rows:
        lines.append(
            f"  {str(row['key']):<{width}}  "
            f"{row['correct_count']:>3}/{row['total_answered']:<3}  "
            f"{format_percentage(row['percentage'])}"
        )
    return lines


def render_person(context: ViewContext) -> str:
    """Person page."""
    data = context.data
    person = data["person"]
    stats = data["stats"]

    lines = _heading(context.title)
    if person.get("nicknames"):
        lines.append(f"Also known as: {person['nicknames']}")
    lines.append(f"Roles: {', '.join(data['roles']) or EMPTY_MARK}")
    if person.get("home_page_url"):
        lines.append(f"Home page: {person['home_page_url']}")
    if person.get("xwordinfo_profile_name"):
        lines.append(f"XWord Info: {person['xwordinfo_profile_name']}")

    if data["rounds_given"]:
        lines.append(f"Rounds given as clue giver: {len(data['rounds_given'])}")
    if data["puzzles_constructed"]:
        lines.append(f"Puzzles constructed: {len(data['puzzles_constructed'])}")
    if data["puzzles_edited"]:
        lines.append(f"Puzzles edited: {len(data['puzzles_edited'])}")

    if stats["rounds_played"]:
        lines.extend(["", *_heading("Record", "-")])
        lines.append(f"  Rounds played:   {stats['rounds_played']}")
        lines.append(
            f"  Correct answers: {stats['total_correct']}/{stats['total_clues_answered']}"
            f" ({format_percentage(stats['overall_percentage'])})"
        )
        lines.append(
            f"  Per round:       min {stats['min_correct']}, max {stats['max_correct']},"
            f" mean {stats['mean_correct']}, median {stats['median_correct']}"
        )
        lines.append(f"  Best streak:     {stats['best_streak']}")

        for key, title in BREAKDOWN_TITLES:
            lines.extend(_breakdown_lines(title, data["breakdowns"].get(key, [])))

        if data["round_history"]:
            lines.extend(["", *_heading("Rounds", "-")])
            for row in data["round_history"]:
                lines.append(
                    f"  {format_date(row['round_date'])} #{row['round_number']}"
                    f"  episode {row['episode_number']}"
                    f"  {row['correct_count']}/{row['total_clues']}"
                )

    return "\n".join(lines)


def _round_label(ref: Dict[str, Any]) -> str:
    return f"{format_date(ref['round_date'])} #{ref['round_number']}"


def _totals_lines(stats: Dict[str, Any]) -> List[str]:
    return [
        f"Puzzles: {stats['puzzle_count']}",
        f"Clues used: {stats['clue_count']}",
        f"Correct guesses: {stats['correct_guesses']}/{stats['total_guesses']}"
        f" ({format_percentage(stats['percentage'])})",
    ]


def _player_lines(rows: List[Dict[str, Any]]) -> List[str]:
    if not rows:
        return []
    lines = ["", *_heading("Guessers", "-")]
    for row in rows:
        lines.append(
            f"  {row['full_name']}: {row['correct_count']}/{row['total_answered']}"
            f" ({format_percentage(row['percentage'])})"
        )
    return lines


def _puzzle_line(row: Dict[str, Any], byline: str) -> str:
    line = f"  {format_date(row['publication_date'])}{byline}"
    if row["rounds"]:
        line += f"  (rounds: {', '.join(_round_label(r) for r in row['rounds'])})"
    return line


def render_constructor(context: ViewContext) -> str:
    """Constructor page."""
    data = context.data
    lines = _heading(context.title)
    if data["person"].get("xwordinfo_profile_name"):
        lines.append(f"XWord Info: {data['person']['xwordinfo_profile_name']}")
    lines.extend(_totals_lines(data["stats"]))

    lines.extend(["", *_heading("Puzzles", "-")])
    for row in data["puzzles"]:
        byline = f", edited by {row['editor'] or EMPTY_MARK}"
        if row["constructors"]:
            byline = f" with {format_list_with_and(row['constructors'])}" + byline
        lines.append(_puzzle_line(row, byline))

    lines.extend(_player_lines(data["player_results"]))
    return "\n".join(lines)


def render_editor(context: ViewContext) -> str:
    """Editor page."""
    data = context.data
    lines = _heading(context.title)
    lines.extend(_totals_lines(data["stats"]))

    lines.extend(["", *_heading("Puzzles", "-")])
    for row in data["puzzles"]:
        byline = f" by {format_list_with_and(row['constructors'])}" if row["constructors"] else ""
        lines.append(_puzzle_line(row, byline))

    lines.extend(_player_lines(data["player_results"]))
    return "\n".join(lines)


def render_puzzle(context: ViewContext) -> str:
    """Puzzle page."""
    data = context.data
    puzzle = data["puzzle"]

    lines = _heading(context.title)
    lines.append(f"Date: {puzzle['day_name']} {format_date(puzzle['publication_date'])}")
    lines.append(f"Constructors: {format_list_with_and(data['constructors']) or EMPTY_MARK}")
    lines.append(f"Editor: {puzzle['editor'] or EMPTY_MARK}")

    lines.extend(["", *_heading("Clues", "-")])
    if not data["clues"]:
        lines.append("  (no clues used)")
    for clue in data["clues"]:
        where = _round_label(clue["round"]) if clue["round"] else EMPTY_MARK
        lines.append(
            f"  [{where}, clue {clue['clue_number']}, {clue['reference']}] "
            f"{clue['clue_text'] or ''} ({clue['correct_answer'].upper()})"
        )
        for guess in clue["guesses"]:
            lines.append(
                f"       {guess['guesser'] or EMPTY_MARK}: "
                f"{format_guess_display(guess['guessed_word'], guess['is_correct'])}"
            )

    lines.extend(_player_lines(data["player_results"]))
    return "\n".join(lines)


def render_round(context: ViewContext) -> str:
    """Round page."""
    data = context.data
    rnd = data["round"]

    lines = _heading(context.title)
    lines.append(f"Date: {format_date(rnd['round_date'])}")
    lines.append(f"Episode: {rnd['episode_number']} (starts at {rnd['start_time']})")
    if rnd.get("episode_url"):
        lines.append(f"Listen: {rnd['episode_url']}")
    lines.append(f"Clue giver: {rnd['clue_giver'] or EMPTY_MARK}")
    lines.append(
        f"Guessers: {format_list_with_and(r['full_name'] for r in data['guesser_results']) or EMPTY_MARK}"
    )
    lines.append(f"Solution: {format_solution_words(data['solution_words']) or EMPTY_MARK}")
    for note in (rnd.get("description"), rnd.get("description2")):
        if note:
            lines.append(note)
    if data["other_rounds_same_date"]:
        others = ", ".join(f"#{n}" for n in data["other_rounds_same_date"])
        lines.append(f"Other rounds that day: {others}")
    if data.get("previous_round"):
        lines.append(f"Previous round: {_round_label(data['previous_round'])}")
    if data.get("next_round"):
        lines.append(f"Next round: {_round_label(data['next_round'])}")

    lines.extend(["", *_heading("Clues", "-")])
    if not data["clues"]:
        lines.append("  (no clues recorded)")
    for clue in data["clues"]:
        source = format_date(clue["puzzle_date"])
        if clue["constructors"]:
            source += f" by {format_list_with_and(clue['constructors'])}"
        lines.append(
            f"  {clue['clue_number']}. [{source}, {clue['reference']}] "
            f"{clue['clue_text'] or ''} ({clue['correct_answer'].upper()})"
        )
        for guess in clue["guesses"]:
            lines.append(
                f"       {guess['guesser'] or EMPTY_MARK}: "
                f"{format_guess_display(guess['guessed_word'], guess['is_correct'])}"
            )

    if data["guesser_results"]:
        lines.extend(["", *_heading("Results", "-")])
        lines.append(format_guesser_results(data["guesser_results"], data["total_clues"]))

    return "\n".join(lines)


RENDERERS: Dict[str, Callable[[ViewContext], str]] = {
    PERSON_VIEW: render_person,
    CONSTRUCTOR_VIEW: render_constructor,
    EDITOR_VIEW: render_editor,
    PUZZLE_VIEW: render_puzzle,
    ROUND_VIEW: render_round,
}


def render_text(context: ViewContext) -> str:
    """
    Render a resolved view as plain text.

    Raises:
        ValueError: If the context kind has no renderer
    """
    renderer = RENDERERS.get(context.kind)
    if renderer is None:
        raise ValueError(f"No renderer for view kind '{context.kind}'")
    return renderer(context)
