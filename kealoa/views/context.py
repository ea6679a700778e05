#!/usr/bin/env python3
"""
context.py
----------
Resolve person, constructor, editor, puzzle and round "pages" into plain
data.

A ViewContext carries everything a page needs (kind, title and a dict of
plain values) and is handed explicitly to a renderer. Nothing about the
page being rendered is kept in module or global state, so several views
can be resolved in one session and rendered in any order.

Usage:
    with db.session_scope() as session:
        ctx = resolve_round_view(session, "2024-01-15")
        print(render_text(ctx))
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Union

# --- Third party imports ---
from sqlalchemy.orm import Session

# --- Local imports ---
from kealoa.core.exceptions import ViewNotFoundError
from kealoa.core.validators import DataValidator
from kealoa.database.managers import (
    ClueManager,
    PersonManager,
    PuzzleManager,
    RoundManager,
)
from kealoa.database.managers.round_manager import normalize_round_number
from kealoa.database.models import Clue, Person, Puzzle, PuzzleConstructor, Round
from kealoa.database.statistics import StatisticsAggregator
from kealoa.utils.formatters import (
    day_of_week,
    format_clue_direction,
    get_day_name,
    seconds_to_time,
)

PERSON_VIEW = "person"
CONSTRUCTOR_VIEW = "constructor"
EDITOR_VIEW = "editor"
PUZZLE_VIEW = "puzzle"
ROUND_VIEW = "round"


@dataclass
class ViewContext:
    """
    Everything needed to render one page.

    Attributes:
        kind: 'person', 'constructor', 'editor', 'puzzle' or 'round'
        title: Page heading
        data: Plain values (no ORM objects)
    """

    kind: str
    title: str
    data: Dict[str, Any] = field(default_factory=dict)


def _aggregator(statistics: Optional[StatisticsAggregator]) -> StatisticsAggregator:
    return statistics if statistics is not None else StatisticsAggregator()


def _find_person(session: Session, person_ref: Union[str, int]) -> Optional[Person]:
    people = PersonManager(session)
    if isinstance(person_ref, int):
        return people.get(person_id=person_ref)
    return people.get(full_name=person_ref)


def _profile(person: Person) -> Dict[str, Any]:
    return {
        "id": person.id,
        "full_name": person.full_name,
        "nicknames": person.nicknames,
        "home_page_url": person.home_page_url,
        "image_url": person.image_url,
        "xwordinfo_profile_name": (
            None if person.hide_xwordinfo else person.xwordinfo_profile_name
        ),
    }


def _round_ref(rnd: Optional[Round]) -> Optional[Dict[str, Any]]:
    if rnd is None:
        return None
    return {
        "round_id": rnd.id,
        "round_date": rnd.round_date,
        "round_number": rnd.round_number,
    }


def _guesser_name(guess) -> Optional[str]:
    return guess.guesser.full_name if guess.guesser else None


def _guess_rows(clue: Clue) -> List[Dict[str, Any]]:
    return [
        {
            "guesser": _guesser_name(guess),
            "guessed_word": guess.guessed_word,
            "is_correct": guess.is_correct,
        }
        for guess in sorted(clue.guesses, key=lambda g: _guesser_name(g) or "")
    ]


def _puzzle_rows(
    session: Session, puzzles: List[Puzzle], exclude: Optional[Person] = None
) -> List[Dict[str, Any]]:
    """Puzzles with their editor, constructors and the rounds that used them."""
    clues = ClueManager(session)
    rows = []
    for puzzle in puzzles:
        rounds: List[Round] = []
        for clue in clues.get_for_puzzle(puzzle):
            if clue.round is not None and clue.round not in rounds:
                rounds.append(clue.round)
        rows.append(
            {
                "publication_date": puzzle.publication_date,
                "editor": puzzle.editor.full_name if puzzle.editor else None,
                "constructors": [
                    p.full_name for p in puzzle.constructors if p is not exclude
                ],
                "rounds": [_round_ref(r) for r in rounds],
            }
        )
    return rows


# ----- Person -----
def resolve_person_view(
    session: Session,
    person_ref: Union[str, int],
    statistics: Optional[StatisticsAggregator] = None,
) -> ViewContext:
    """
    Build the view of a person: profile, roles and guessing record.

    Args:
        session: Open session
        person_ref: Full name (case-insensitive) or person id
        statistics: Aggregator to use (a plain one when None)

    Returns:
        ViewContext of kind 'person'

    Raises:
        ViewNotFoundError: If no such person exists
    """
    person = _find_person(session, person_ref)
    if person is None:
        raise ViewNotFoundError(f"No person found with name '{person_ref}'")

    stats = _aggregator(statistics)
    roles = PersonManager(session).get_roles(person)

    data: Dict[str, Any] = {
        "person": _profile(person),
        "roles": roles,
        "rounds_given": [
            {"round_date": r.round_date, "round_number": r.round_number}
            for r in session.query(Round)
            .filter(Round.clue_giver_id == person.id)
            .order_by(Round.round_date.desc(), Round.round_number)
        ],
        "puzzles_constructed": [
            p.publication_date
            for p in session.query(Puzzle)
            .join(PuzzleConstructor, PuzzleConstructor.puzzle_id == Puzzle.id)
            .filter(PuzzleConstructor.person_id == person.id)
            .order_by(Puzzle.publication_date)
        ],
        "puzzles_edited": [
            p.publication_date
            for p in session.query(Puzzle)
            .filter(Puzzle.editor_id == person.id)
            .order_by(Puzzle.publication_date)
        ],
    }

    data["stats"] = stats.person_stats(session, person.id).to_dict()
    data["round_history"] = stats.person_round_history(session, person.id)
    data["breakdowns"] = {
        "clue_number": stats.results_by_clue_number(session, person.id),
        "direction": stats.results_by_direction(session, person.id),
        "day_of_week": stats.results_by_day_of_week(session, person.id),
        "decade": stats.results_by_decade(session, person.id),
        "answer_length": stats.results_by_answer_length(session, person.id),
        "constructor": stats.results_by_constructor(session, person.id),
        "editor": stats.results_by_editor(session, person.id),
        "year": stats.results_by_year(session, person.id),
    }

    return ViewContext(kind=PERSON_VIEW, title=person.full_name, data=data)


# ----- Constructor -----
def resolve_constructor_view(
    session: Session,
    person_ref: Union[str, int],
    statistics: Optional[StatisticsAggregator] = None,
) -> ViewContext:
    """
    Build the view of a constructor: puzzles, totals and guesser results.

    Raises:
        ViewNotFoundError: If the person does not exist or constructed no puzzle
    """
    person = _find_person(session, person_ref)
    puzzles = []
    if person is not None:
        puzzles = (
            session.query(Puzzle)
            .join(PuzzleConstructor, PuzzleConstructor.puzzle_id == Puzzle.id)
            .filter(PuzzleConstructor.person_id == person.id)
            .order_by(Puzzle.publication_date.desc())
            .all()
        )
    if not puzzles:
        raise ViewNotFoundError(f"No constructor found with name '{person_ref}'")

    stats = _aggregator(statistics)
    data = {
        "person": _profile(person),
        "stats": stats.constructor_stats(session, person.id),
        "player_results": stats.constructor_player_results(session, person.id),
        "puzzles": _puzzle_rows(session, puzzles, exclude=person),
    }
    return ViewContext(kind=CONSTRUCTOR_VIEW, title=person.full_name, data=data)


# ----- Editor -----
def resolve_editor_view(
    session: Session,
    person_ref: Union[str, int],
    statistics: Optional[StatisticsAggregator] = None,
) -> ViewContext:
    """
    Build the view of an editor: edited puzzles, totals and guesser results.

    Raises:
        ViewNotFoundError: If the person does not exist or edited no puzzle
    """
    person = _find_person(session, person_ref)
    puzzles = []
    if person is not None:
        puzzles = (
            session.query(Puzzle)
            .filter(Puzzle.editor_id == person.id)
            .order_by(Puzzle.publication_date.desc())
            .all()
        )
    if not puzzles:
        raise ViewNotFoundError(f"No editor found with name '{person_ref}'")

    stats = _aggregator(statistics)
    data = {
        "person": _profile(person),
        "stats": stats.editor_stats(session, person.id),
        "player_results": stats.editor_player_results(session, person.id),
        "puzzles": _puzzle_rows(session, puzzles),
    }
    return ViewContext(kind=EDITOR_VIEW, title=person.full_name, data=data)


# ----- Puzzle -----
def resolve_puzzle_view(
    session: Session,
    publication_date: Union[date, str],
    statistics: Optional[StatisticsAggregator] = None,
) -> ViewContext:
    """
    Build the view of a puzzle: byline, clues used on the show and results.

    Raises:
        ViewNotFoundError: If no puzzle ran on that date
        ValidationError: If the date cannot be parsed
    """
    pub_date = DataValidator.normalize_date(publication_date)
    puzzle = PuzzleManager(session).get(publication_date=pub_date)
    if puzzle is None:
        raise ViewNotFoundError(f"No puzzle found for {pub_date}")

    clues = []
    for clue in ClueManager(session).get_for_puzzle(puzzle):
        clues.append(
            {
                "round": _round_ref(clue.round),
                "clue_number": clue.clue_number,
                "reference": format_clue_direction(
                    clue.puzzle_clue_number, clue.puzzle_clue_direction
                ),
                "clue_text": clue.clue_text,
                "correct_answer": clue.correct_answer,
                "guesses": _guess_rows(clue),
            }
        )

    data = {
        "puzzle": {
            "id": puzzle.id,
            "publication_date": puzzle.publication_date,
            "day_name": get_day_name(day_of_week(puzzle.publication_date)),
            "editor": puzzle.editor.full_name if puzzle.editor else None,
        },
        "constructors": [p.full_name for p in puzzle.constructors],
        "clues": clues,
        "player_results": _aggregator(statistics).puzzle_player_results(session, puzzle.id),
    }
    return ViewContext(
        kind=PUZZLE_VIEW, title=f"Puzzle of {puzzle.publication_date.isoformat()}", data=data
    )


# ----- Round -----
def _clue_rows(rnd: Round) -> List[Dict[str, Any]]:
    rows = []
    for clue in sorted(rnd.clues, key=lambda c: c.clue_number):
        puzzle: Optional[Puzzle] = clue.puzzle
        rows.append(
            {
                "clue_number": clue.clue_number,
                "puzzle_date": puzzle.publication_date if puzzle else None,
                "constructors": [p.full_name for p in puzzle.constructors] if puzzle else [],
                "editor": puzzle.editor.full_name if puzzle and puzzle.editor else None,
                "reference": format_clue_direction(
                    clue.puzzle_clue_number, clue.puzzle_clue_direction
                ),
                "clue_text": clue.clue_text,
                "correct_answer": clue.correct_answer,
                "guesses": _guess_rows(clue),
            }
        )
    return rows


def resolve_round_view(
    session: Session,
    round_date: Union[date, str],
    round_number: Any = 1,
    statistics: Optional[StatisticsAggregator] = None,
) -> ViewContext:
    """
    Build the view of a round: episode, solution, clues and results.

    Args:
        session: Open session
        round_date: Date of the round (any accepted date format)
        round_number: Round of that date (default 1)
        statistics: Aggregator to use (a plain one when None)

    Returns:
        ViewContext of kind 'round'

    Raises:
        ViewNotFoundError: If no such round exists
        ValidationError: If the date cannot be parsed
    """
    rounds = RoundManager(session)
    played_on = DataValidator.normalize_date(round_date)
    rnd = rounds.get(round_date=played_on, round_number=round_number)
    if rnd is None:
        raise ViewNotFoundError(
            f"No round found for {played_on} round #{normalize_round_number(round_number)}"
        )

    clues = _clue_rows(rnd)
    siblings = [
        r.round_number for r in rounds.get_by_date(rnd.round_date) if r.id != rnd.id
    ]

    data = {
        "round": {
            "id": rnd.id,
            "round_date": rnd.round_date,
            "round_number": rnd.round_number,
            "episode_number": rnd.episode_number,
            "episode_id": rnd.episode_id,
            "episode_url": rnd.episode_url,
            "start_time": seconds_to_time(rnd.episode_start_seconds or 0),
            "clue_giver": rnd.clue_giver.full_name if rnd.clue_giver else None,
            "description": rnd.description,
            "description2": rnd.description2,
        },
        "solution_words": list(rnd.solution_words),
        "guesser_results": _aggregator(statistics).round_guesser_results(session, rnd.id),
        "total_clues": len(clues),
        "clues": clues,
        "other_rounds_same_date": siblings,
        "previous_round": _round_ref(rounds.get_previous(rnd)),
        "next_round": _round_ref(rounds.get_next(rnd)),
    }

    title = f"{rnd.round_date.isoformat()} round #{rnd.round_number}"
    return ViewContext(kind=ROUND_VIEW, title=title, data=data)
