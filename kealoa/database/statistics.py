#!/usr/bin/env python3
"""
statistics.py
-------------
Derived metrics for KEALOA guessers and rounds.

All operations are pure reads over an open session. A guess only counts
toward a person's numbers when that person is an assigned guesser of the
clue's round; guesses recorded for anyone else are ignored.

Key Features:
    - Round guesser summary (zero-guess guessers included)
    - Person stats with per-round distribution and best streak
    - Breakdowns by clue number, direction, puzzle weekday, decade,
      constructor, answer length, editor and round year
    - Round history per person, guesser table, rounds overview
    - Constructor, editor, clue giver and puzzle totals with per-guesser
      results
    - Leaderboards: best round score and longest streak per guesser

Usage:
    stats = StatisticsAggregator(logger)
    with db.session_scope() as session:
        summary = stats.person_stats(session, person_id)
        print(format_percentage(summary.overall_percentage))

Breakdown rows share one shape:
    {"key": ..., "total_answered": int, "correct_count": int, "percentage": float}
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import re
from collections import OrderedDict
from dataclasses import asdict, dataclass, field
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

# --- Third party imports ---
from sqlalchemy import Integer, and_, cast, func
from sqlalchemy.orm import Session

# --- Local imports ---
from kealoa.core.logging_manager import KealoaLogger
from kealoa.utils.formatters import day_of_week
from .decorators import handle_db_errors, log_database_operation
from .models import (
    Clue,
    Guess,
    Person,
    Puzzle,
    PuzzleConstructor,
    Round,
    RoundGuesser,
)

UNKNOWN_EDITOR = "Unknown"
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


# ----- Numeric helpers -----
def calculate_median(values: Sequence[float]) -> float:
    """
    Median of a list of numbers.

    Examples:
        >>> calculate_median([])
        0
        >>> calculate_median([2, 8])
        5.0
        >>> calculate_median([3, 1, 2])
        2
    """
    if not values:
        return 0
    ordered = sorted(values)
    middle = len(ordered) // 2
    if len(ordered) % 2 == 0:
        return (ordered[middle - 1] + ordered[middle]) / 2
    return ordered[middle]


def calculate_mean(values: Sequence[float]) -> float:
    """Arithmetic mean rounded to one decimal; 0 for an empty list."""
    if not values:
        return 0
    return round(sum(values) / len(values), 1)


def percentage(correct: int, total: int) -> float:
    """100 * correct / total rounded to one decimal; 0 when total is 0."""
    if not total:
        return 0
    return round(correct / total * 100, 1)


def answer_length(answer: Optional[str]) -> int:
    """Number of alphanumeric characters in an answer."""
    return len(_NON_ALNUM.sub("", answer or ""))


def _correct_sum():
    """SUM of is_correct as an integer (0 when there are no rows)."""
    return func.coalesce(func.sum(cast(Guess.is_correct, Integer)), 0)


def _decade(row: "_GuessRow") -> int:
    return (row.publication_date.year // 10) * 10


def _answer_length(row: "_GuessRow") -> int:
    return answer_length(row.correct_answer)


def longest_streak(flags: Iterable[bool]) -> int:
    """Longest run of consecutive True values."""
    best = current = 0
    for flag in flags:
        if flag:
            current += 1
            best = max(best, current)
        else:
            current = 0
    return best


# ----- Result types -----
@dataclass
class PersonStats:
    """Aggregate guessing record of one person."""

    person_id: int
    rounds_played: int = 0
    total_clues_answered: int = 0
    total_correct: int = 0
    overall_percentage: float = 0
    min_correct: int = 0
    max_correct: int = 0
    mean_correct: float = 0
    median_correct: float = 0
    min_percentage: float = 0
    max_percentage: float = 0
    mean_percentage: float = 0
    median_percentage: float = 0
    best_streak: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class _Counter:
    total_answered: int = 0
    correct_count: int = 0
    extra: Dict[str, Any] = field(default_factory=dict)

    def add(self, is_correct: bool) -> None:
        self.total_answered += 1
        if is_correct:
            self.correct_count += 1


@dataclass
class _GuessRow:
    """One counted guess with the context the breakdowns group on."""

    round_id: int
    round_date: date
    clue_id: int
    clue_number: int
    direction: Optional[str]
    correct_answer: str
    puzzle_id: Optional[int]
    publication_date: Optional[date]
    is_correct: bool


# ----- Aggregator -----
class StatisticsAggregator:
    """
    Computes per-person and per-round metrics.

    Stateless apart from the optional logger; every method takes the
    session to read from.
    """

    def __init__(self, logger: Optional[KealoaLogger] = None) -> None:
        """
        Initialize the aggregator.

        Args:
            logger: Optional logger for statistics operations
        """
        self.logger = logger

    # ---- Base queries ----
    @staticmethod
    def _counted_guesses(session: Session, person_id: int) -> List[_GuessRow]:
        """Guesses of a person on clues of rounds they were assigned to."""
        rows = (
            session.query(
                Clue.round_id,
                Round.round_date,
                Clue.id,
                Clue.clue_number,
                Clue.puzzle_clue_direction,
                Clue.correct_answer,
                Clue.puzzle_id,
                Puzzle.publication_date,
                Guess.is_correct,
            )
            .select_from(Guess)
            .join(Clue, Guess.clue_id == Clue.id)
            .join(Round, Clue.round_id == Round.id)
            .join(
                RoundGuesser,
                and_(
                    RoundGuesser.round_id == Clue.round_id,
                    RoundGuesser.person_id == Guess.person_id,
                ),
            )
            .outerjoin(Puzzle, Clue.puzzle_id == Puzzle.id)
            .filter(Guess.person_id == person_id)
            .order_by(Clue.round_id, Clue.clue_number)
            .all()
        )
        return [_GuessRow(*row) for row in rows]

    @staticmethod
    def _group(
        rows: Iterable[_GuessRow], key: Callable[[_GuessRow], Any]
    ) -> "OrderedDict[Any, _Counter]":
        groups: "OrderedDict[Any, _Counter]" = OrderedDict()
        for row in rows:
            groups.setdefault(key(row), _Counter()).add(row.is_correct)
        return groups

    @staticmethod
    def _as_rows(groups: Dict[Any, _Counter], key_name: str = "key") -> List[Dict[str, Any]]:
        return [
            {
                key_name: key,
                "total_answered": counter.total_answered,
                "correct_count": counter.correct_count,
                "percentage": percentage(counter.correct_count, counter.total_answered),
                **counter.extra,
            }
            for key, counter in groups.items()
        ]

    # ---- Rounds ----
    @handle_db_errors
    @log_database_operation("round_guesser_results")
    def round_guesser_results(self, session: Session, round_id: int) -> List[Dict[str, Any]]:
        """
        Results of every assigned guesser of a round, ordered by name.

        Guessers who answered nothing appear with zero counts.

        Args:
            session: SQLAlchemy session
            round_id: Round to summarize

        Returns:
            List of dicts: person_id, full_name, total_guesses, correct_guesses
        """
        rows = (
            session.query(
                Person.id,
                Person.full_name,
                func.count(Guess.id),
                _correct_sum(),
            )
            .join(RoundGuesser, RoundGuesser.person_id == Person.id)
            .outerjoin(Clue, Clue.round_id == RoundGuesser.round_id)
            .outerjoin(
                Guess,
                and_(Guess.clue_id == Clue.id, Guess.person_id == Person.id),
            )
            .filter(RoundGuesser.round_id == round_id)
            .group_by(Person.id, Person.full_name)
            .order_by(Person.full_name)
            .all()
        )
        return [
            {
                "person_id": person_id,
                "full_name": name,
                "total_guesses": int(total),
                "correct_guesses": int(correct),
            }
            for person_id, name, total, correct in rows
        ]

    @handle_db_errors
    @log_database_operation("rounds_overview")
    def rounds_overview(self, session: Session) -> Dict[str, Any]:
        """
        Totals across every round.

        Returns:
            Dict with total_rounds, total_clues, total_guesses,
            total_correct and accuracy (percentage)
        """
        total_guesses, total_correct = session.query(
            func.count(Guess.id), _correct_sum()
        ).one()
        total_guesses = int(total_guesses)
        total_correct = int(total_correct)
        return {
            "total_rounds": session.query(Round).count(),
            "total_clues": session.query(Clue).count(),
            "total_guesses": total_guesses,
            "total_correct": total_correct,
            "accuracy": percentage(total_correct, total_guesses),
        }

    @handle_db_errors
    @log_database_operation("rounds_stats_by_year")
    def rounds_stats_by_year(self, session: Session) -> List[Dict[str, Any]]:
        """Rounds, clues, guesses and correct guesses per calendar year."""
        years: "OrderedDict[int, Dict[str, Any]]" = OrderedDict()
        for rnd in session.query(Round).order_by(Round.round_date, Round.round_number):
            year = years.setdefault(
                rnd.round_date.year,
                {
                    "year": rnd.round_date.year,
                    "total_rounds": 0,
                    "total_clues": 0,
                    "total_guesses": 0,
                    "total_correct": 0,
                },
            )
            year["total_rounds"] += 1
            year["total_clues"] += len(rnd.clues)
            for clue in rnd.clues:
                year["total_guesses"] += len(clue.guesses)
                year["total_correct"] += sum(1 for g in clue.guesses if g.is_correct)
        return list(years.values())

    # ---- People ----
    @handle_db_errors
    @log_database_operation("person_stats")
    def person_stats(self, session: Session, person_id: int) -> PersonStats:
        """
        Aggregate guessing record of a person.

        Args:
            session: SQLAlchemy session
            person_id: Person to summarize

        Returns:
            PersonStats (all zeros for a person with no history)
        """
        stats = PersonStats(person_id=person_id)
        stats.rounds_played = (
            session.query(func.count(func.distinct(RoundGuesser.round_id)))
            .filter(RoundGuesser.person_id == person_id)
            .scalar()
            or 0
        )

        rows = self._counted_guesses(session, person_id)
        if not rows:
            return stats

        stats.total_clues_answered = len(rows)
        stats.total_correct = sum(1 for r in rows if r.is_correct)
        stats.overall_percentage = percentage(stats.total_correct, stats.total_clues_answered)

        per_round = self._group(rows, lambda r: r.round_id)
        correct_counts = [c.correct_count for c in per_round.values()]
        percentages = [
            c.correct_count / c.total_answered * 100 for c in per_round.values()
        ]

        stats.min_correct = min(correct_counts)
        stats.max_correct = max(correct_counts)
        stats.mean_correct = calculate_mean(correct_counts)
        stats.median_correct = calculate_median(correct_counts)
        stats.min_percentage = round(min(percentages), 1)
        stats.max_percentage = round(max(percentages), 1)
        stats.mean_percentage = calculate_mean(percentages)
        stats.median_percentage = round(calculate_median(percentages), 1)
        stats.best_streak = max(self.person_streak_per_round(session, person_id).values())
        return stats

    def person_streak_per_round(self, session: Session, person_id: int) -> Dict[int, int]:
        """Longest correct streak of a person in each round, keyed by round id."""
        streaks: Dict[int, List[bool]] = OrderedDict()
        for row in self._counted_guesses(session, person_id):
            streaks.setdefault(row.round_id, []).append(row.is_correct)
        return {round_id: longest_streak(flags) for round_id, flags in streaks.items()}

    @handle_db_errors
    @log_database_operation("results_by_clue_number")
    def results_by_clue_number(self, session: Session, person_id: int) -> List[Dict[str, Any]]:
        """Answers grouped by clue position in the round."""
        rows = self._counted_guesses(session, person_id)
        groups = self._group(sorted(rows, key=lambda r: r.clue_number), lambda r: r.clue_number)
        return self._as_rows(groups)

    @handle_db_errors
    @log_database_operation("results_by_direction")
    def results_by_direction(self, session: Session, person_id: int) -> List[Dict[str, Any]]:
        """Answers grouped by puzzle clue direction (None for unknown)."""
        rows = self._counted_guesses(session, person_id)
        groups = self._group(
            sorted(rows, key=lambda r: r.direction or ""), lambda r: r.direction
        )
        return self._as_rows(groups)

    @handle_db_errors
    @log_database_operation("results_by_day_of_week")
    def results_by_day_of_week(self, session: Session, person_id: int) -> List[Dict[str, Any]]:
        """
        Answers grouped by the weekday the source puzzle ran.

        Keys are 1=Sunday..7=Saturday; rows are ordered Monday first, the
        way crossword difficulty climbs through the week.
        """
        rows = [
            r for r in self._counted_guesses(session, person_id) if r.publication_date
        ]
        keyed = sorted(rows, key=lambda r: (day_of_week(r.publication_date) + 5) % 7)
        groups = self._group(keyed, lambda r: day_of_week(r.publication_date))
        return self._as_rows(groups)

    @handle_db_errors
    @log_database_operation("results_by_decade")
    def results_by_decade(self, session: Session, person_id: int) -> List[Dict[str, Any]]:
        """Answers grouped by the decade the source puzzle was published."""
        rows = [
            r for r in self._counted_guesses(session, person_id) if r.publication_date
        ]
        groups = self._group(sorted(rows, key=_decade), _decade)
        return self._as_rows(groups)

    @handle_db_errors
    @log_database_operation("results_by_answer_length")
    def results_by_answer_length(self, session: Session, person_id: int) -> List[Dict[str, Any]]:
        """Answers grouped by alphanumeric length of the correct answer."""
        rows = self._counted_guesses(session, person_id)
        groups = self._group(sorted(rows, key=_answer_length), _answer_length)
        return self._as_rows(groups)

    @handle_db_errors
    @log_database_operation("results_by_constructor")
    def results_by_constructor(self, session: Session, person_id: int) -> List[Dict[str, Any]]:
        """
        Answers grouped by the constructors of the source puzzle.

        A clue from a co-constructed puzzle counts once for each
        constructor. Best percentage first, then most answered.

        Returns:
            Breakdown rows keyed by constructor name, with person_id and
            xwordinfo_profile_name added
        """
        rows = [r for r in self._counted_guesses(session, person_id) if r.puzzle_id]
        if not rows:
            return []

        links = (
            session.query(PuzzleConstructor.puzzle_id, Person)
            .join(Person, PuzzleConstructor.person_id == Person.id)
            .filter(PuzzleConstructor.puzzle_id.in_({r.puzzle_id for r in rows}))
            .order_by(PuzzleConstructor.puzzle_id, PuzzleConstructor.constructor_order)
            .all()
        )
        constructors: Dict[int, List[Person]] = {}
        for puzzle_id, person in links:
            constructors.setdefault(puzzle_id, []).append(person)

        groups: "OrderedDict[Person, _Counter]" = OrderedDict()
        for row in rows:
            for person in constructors.get(row.puzzle_id, []):
                groups.setdefault(person, _Counter()).add(row.is_correct)

        result = [
            {
                "key": person.full_name,
                "person_id": person.id,
                "xwordinfo_profile_name": person.xwordinfo_profile_name,
                "total_answered": counter.total_answered,
                "correct_count": counter.correct_count,
                "percentage": percentage(counter.correct_count, counter.total_answered),
            }
            for person, counter in groups.items()
        ]
        return self._by_accuracy(result)

    @handle_db_errors
    @log_database_operation("results_by_editor")
    def results_by_editor(self, session: Session, person_id: int) -> List[Dict[str, Any]]:
        """Answers grouped by puzzle editor ('Unknown' when unset)."""
        rows = [r for r in self._counted_guesses(session, person_id) if r.puzzle_id]
        if not rows:
            return []

        editors = dict(
            session.query(Puzzle.id, Person.full_name)
            .outerjoin(Person, Puzzle.editor_id == Person.id)
            .filter(Puzzle.id.in_({r.puzzle_id for r in rows}))
            .all()
        )
        groups = self._group(rows, lambda r: editors.get(r.puzzle_id) or UNKNOWN_EDITOR)
        return self._by_accuracy(self._as_rows(groups))

    @handle_db_errors
    @log_database_operation("results_by_year")
    def results_by_year(self, session: Session, person_id: int) -> List[Dict[str, Any]]:
        """
        Answers grouped by the year the round was played.

        Each row adds rounds_played, best_score (most correct answers in
        one round) and best_streak for that year.
        """
        rows = self._counted_guesses(session, person_id)
        groups = self._group(
            sorted(rows, key=lambda r: r.round_date), lambda r: r.round_date.year
        )

        for year, counter in groups.items():
            in_year = [r for r in rows if r.round_date.year == year]
            per_round = self._group(in_year, lambda r: r.round_id)
            counter.extra = {
                "rounds_played": len(per_round),
                "best_score": max(c.correct_count for c in per_round.values()),
                "best_streak": max(
                    longest_streak(r.is_correct for r in in_year if r.round_id == rid)
                    for rid in per_round
                ),
            }
        return self._as_rows(groups)

    @handle_db_errors
    @log_database_operation("person_round_history")
    def person_round_history(self, session: Session, person_id: int) -> List[Dict[str, Any]]:
        """
        Rounds a person was assigned to, newest first.

        Returns:
            List of dicts: round_id, round_date, round_number,
            episode_number, total_clues, correct_count
        """
        rows = (
            session.query(
                Round.id,
                Round.round_date,
                Round.round_number,
                Round.episode_number,
                func.count(Clue.id),
                _correct_sum(),
            )
            .join(RoundGuesser, RoundGuesser.round_id == Round.id)
            .join(Clue, Clue.round_id == Round.id)
            .outerjoin(
                Guess,
                and_(Guess.clue_id == Clue.id, Guess.person_id == RoundGuesser.person_id),
            )
            .filter(RoundGuesser.person_id == person_id)
            .group_by(Round.id)
            .order_by(Round.round_date.desc(), Round.round_number.desc())
            .all()
        )
        return [
            {
                "round_id": round_id,
                "round_date": played_on,
                "round_number": number,
                "episode_number": episode,
                "total_clues": int(total),
                "correct_count": int(correct),
            }
            for round_id, played_on, number, episode, total, correct in rows
        ]

    @handle_db_errors
    @log_database_operation("persons_with_stats")
    def persons_with_stats(self, session: Session) -> List[Dict[str, Any]]:
        """
        Every person assigned as a guesser, with totals, ordered by name.

        Returns:
            List of dicts: person_id, full_name, rounds_played,
            clues_guessed, correct_guesses
        """
        rows = (
            session.query(
                Person.id,
                Person.full_name,
                func.count(func.distinct(RoundGuesser.round_id)),
                func.count(Guess.id),
                _correct_sum(),
            )
            .join(RoundGuesser, RoundGuesser.person_id == Person.id)
            .outerjoin(Clue, Clue.round_id == RoundGuesser.round_id)
            .outerjoin(
                Guess,
                and_(Guess.clue_id == Clue.id, Guess.person_id == Person.id),
            )
            .group_by(Person.id, Person.full_name)
            .order_by(Person.full_name)
            .all()
        )
        return [
            {
                "person_id": person_id,
                "full_name": name,
                "rounds_played": int(rounds),
                "clues_guessed": int(guessed),
                "correct_guesses": int(correct),
            }
            for person_id, name, rounds, guessed, correct in rows
        ]

    # ---- Constructors, editors and clue givers ----
    def _player_results(
        self, session: Session, *criteria: Any, joins: Sequence[tuple] = ()
    ) -> List[Dict[str, Any]]:
        """Counted guesses on a filtered set of clues, grouped by guesser."""
        query = (
            session.query(Person.id, Person.full_name, func.count(Guess.id), _correct_sum())
            .select_from(Guess)
            .join(Clue, Guess.clue_id == Clue.id)
            .join(
                RoundGuesser,
                and_(
                    RoundGuesser.round_id == Clue.round_id,
                    RoundGuesser.person_id == Guess.person_id,
                ),
            )
            .join(Person, Guess.person_id == Person.id)
        )
        for target, onclause in joins:
            query = query.join(target, onclause)
        rows = (
            query.filter(*criteria)
            .group_by(Person.id, Person.full_name)
            .order_by(Person.full_name)
            .all()
        )
        return self._by_accuracy(
            [
                {
                    "person_id": person_id,
                    "full_name": name,
                    "total_answered": int(total),
                    "correct_count": int(correct),
                    "percentage": percentage(int(correct), int(total)),
                }
                for person_id, name, total, correct in rows
            ]
        )

    @staticmethod
    def _totals(puzzles: int, clues: int, total: int, correct: int) -> Dict[str, Any]:
        return {
            "puzzle_count": int(puzzles),
            "clue_count": int(clues),
            "total_guesses": int(total),
            "correct_guesses": int(correct),
            "percentage": percentage(int(correct), int(total)),
        }

    @handle_db_errors
    @log_database_operation("constructors_with_stats")
    def constructors_with_stats(self, session: Session) -> List[Dict[str, Any]]:
        """
        Every credited constructor with puzzle, clue and guess totals.

        Totals count every recorded guess on clues from the constructor's
        puzzles. Ordered by name.

        Returns:
            List of dicts: person_id, full_name, xwordinfo_profile_name,
            puzzle_count, clue_count, total_guesses, correct_guesses,
            percentage
        """
        rows = (
            session.query(
                Person.id,
                Person.full_name,
                Person.xwordinfo_profile_name,
                func.count(func.distinct(PuzzleConstructor.puzzle_id)),
                func.count(func.distinct(Clue.id)),
                func.count(Guess.id),
                _correct_sum(),
            )
            .join(PuzzleConstructor, PuzzleConstructor.person_id == Person.id)
            .outerjoin(Clue, Clue.puzzle_id == PuzzleConstructor.puzzle_id)
            .outerjoin(Guess, Guess.clue_id == Clue.id)
            .group_by(Person.id, Person.full_name, Person.xwordinfo_profile_name)
            .order_by(Person.full_name)
            .all()
        )
        return [
            {
                "person_id": person_id,
                "full_name": name,
                "xwordinfo_profile_name": profile,
                **self._totals(puzzles, clues, total, correct),
            }
            for person_id, name, profile, puzzles, clues, total, correct in rows
        ]

    @handle_db_errors
    @log_database_operation("constructor_stats")
    def constructor_stats(self, session: Session, person_id: int) -> Dict[str, Any]:
        """Puzzle, clue and guess totals of one constructor."""
        puzzles, clues, total, correct = (
            session.query(
                func.count(func.distinct(PuzzleConstructor.puzzle_id)),
                func.count(func.distinct(Clue.id)),
                func.count(Guess.id),
                _correct_sum(),
            )
            .select_from(PuzzleConstructor)
            .outerjoin(Clue, Clue.puzzle_id == PuzzleConstructor.puzzle_id)
            .outerjoin(Guess, Guess.clue_id == Clue.id)
            .filter(PuzzleConstructor.person_id == person_id)
            .one()
        )
        return self._totals(puzzles, clues, total, correct)

    @handle_db_errors
    @log_database_operation("constructor_player_results")
    def constructor_player_results(self, session: Session, person_id: int) -> List[Dict[str, Any]]:
        """
        How each guesser did on clues from a constructor's puzzles.

        Only assigned guessers count. Best percentage first, then most
        answered.

        Returns:
            List of dicts: person_id, full_name, total_answered,
            correct_count, percentage
        """
        return self._player_results(
            session,
            PuzzleConstructor.person_id == person_id,
            joins=[(PuzzleConstructor, PuzzleConstructor.puzzle_id == Clue.puzzle_id)],
        )

    @handle_db_errors
    @log_database_operation("editors_with_stats")
    def editors_with_stats(self, session: Session) -> List[Dict[str, Any]]:
        """
        Every editor whose puzzles have guessed clues, ordered by name.

        Returns:
            List of dicts: person_id, full_name, puzzle_count,
            clues_guessed, correct_guesses, percentage
        """
        rows = (
            session.query(
                Person.id,
                Person.full_name,
                func.count(func.distinct(Puzzle.id)),
                func.count(Guess.id),
                _correct_sum(),
            )
            .select_from(Puzzle)
            .join(Person, Puzzle.editor_id == Person.id)
            .join(Clue, Clue.puzzle_id == Puzzle.id)
            .join(Guess, Guess.clue_id == Clue.id)
            .group_by(Person.id, Person.full_name)
            .order_by(Person.full_name)
            .all()
        )
        return [
            {
                "person_id": person_id,
                "full_name": name,
                "puzzle_count": int(puzzles),
                "clues_guessed": int(guessed),
                "correct_guesses": int(correct),
                "percentage": percentage(int(correct), int(guessed)),
            }
            for person_id, name, puzzles, guessed, correct in rows
        ]

    @handle_db_errors
    @log_database_operation("editor_stats")
    def editor_stats(self, session: Session, person_id: int) -> Dict[str, Any]:
        """Totals over the edited puzzles that clues were taken from."""
        puzzles, clues, total, correct = (
            session.query(
                func.count(func.distinct(Puzzle.id)),
                func.count(func.distinct(Clue.id)),
                func.count(Guess.id),
                _correct_sum(),
            )
            .select_from(Puzzle)
            .join(Clue, Clue.puzzle_id == Puzzle.id)
            .outerjoin(Guess, Guess.clue_id == Clue.id)
            .filter(Puzzle.editor_id == person_id)
            .one()
        )
        return self._totals(puzzles, clues, total, correct)

    @handle_db_errors
    @log_database_operation("editor_player_results")
    def editor_player_results(self, session: Session, person_id: int) -> List[Dict[str, Any]]:
        """How each guesser did on clues from puzzles an editor edited."""
        return self._player_results(
            session,
            Puzzle.editor_id == person_id,
            joins=[(Puzzle, Clue.puzzle_id == Puzzle.id)],
        )

    @handle_db_errors
    @log_database_operation("puzzle_player_results")
    def puzzle_player_results(self, session: Session, puzzle_id: int) -> List[Dict[str, Any]]:
        """How each guesser did on clues taken from one puzzle."""
        return self._player_results(session, Clue.puzzle_id == puzzle_id)

    @handle_db_errors
    @log_database_operation("clue_givers_with_stats")
    def clue_givers_with_stats(self, session: Session) -> List[Dict[str, Any]]:
        """
        Every clue giver with the rounds they ran, ordered by name.

        Returns:
            List of dicts: person_id, full_name, rounds_given, clue_count,
            total_guesses, correct_guesses, percentage
        """
        rows = (
            session.query(
                Person.id,
                Person.full_name,
                func.count(func.distinct(Round.id)),
                func.count(func.distinct(Clue.id)),
                func.count(Guess.id),
                _correct_sum(),
            )
            .join(Round, Round.clue_giver_id == Person.id)
            .outerjoin(Clue, Clue.round_id == Round.id)
            .outerjoin(Guess, Guess.clue_id == Clue.id)
            .group_by(Person.id, Person.full_name)
            .order_by(Person.full_name)
            .all()
        )
        return [
            {
                "person_id": person_id,
                "full_name": name,
                "rounds_given": int(rounds),
                "clue_count": int(clues),
                "total_guesses": int(total),
                "correct_guesses": int(correct),
                "percentage": percentage(int(correct), int(total)),
            }
            for person_id, name, rounds, clues, total, correct in rows
        ]

    # ---- Leaderboards ----
    @staticmethod
    def _round_flags(session: Session) -> "OrderedDict[tuple, List[bool]]":
        """Correctness flags in clue order per (person id, round id)."""
        rows = (
            session.query(Guess.person_id, Clue.round_id, Guess.is_correct)
            .select_from(Guess)
            .join(Clue, Guess.clue_id == Clue.id)
            .join(
                RoundGuesser,
                and_(
                    RoundGuesser.round_id == Clue.round_id,
                    RoundGuesser.person_id == Guess.person_id,
                ),
            )
            .order_by(Guess.person_id, Clue.round_id, Clue.clue_number)
            .all()
        )
        flags: "OrderedDict[tuple, List[bool]]" = OrderedDict()
        for person_id, round_id, is_correct in rows:
            flags.setdefault((person_id, round_id), []).append(bool(is_correct))
        return flags

    def _leaders(
        self, session: Session, score: Callable[[List[bool]], int]
    ) -> Dict[int, Dict[str, Any]]:
        leaders: Dict[int, Dict[str, Any]] = {}
        for (person_id, round_id), flags in self._round_flags(session).items():
            value = score(flags)
            best = leaders.get(person_id)
            if best is None or value > best["value"]:
                leaders[person_id] = {"value": value, "round_ids": [round_id]}
            elif value == best["value"]:
                best["round_ids"].append(round_id)
        return leaders

    @handle_db_errors
    @log_database_operation("highest_round_scores")
    def highest_round_scores(self, session: Session) -> Dict[int, Dict[str, Any]]:
        """
        Best single-round score of every guesser.

        Returns:
            {person_id: {"value": correct answers, "round_ids": [...]}},
            listing every round that reached the best score
        """
        return self._leaders(session, sum)

    @handle_db_errors
    @log_database_operation("longest_streaks")
    def longest_streaks(self, session: Session) -> Dict[int, Dict[str, Any]]:
        """
        Longest in-round run of correct answers of every guesser.

        Guessers who never answered correctly are left out.

        Returns:
            {person_id: {"value": streak, "round_ids": [...]}}
        """
        leaders = self._leaders(session, longest_streak)
        return {pid: best for pid, best in leaders.items() if best["value"] > 0}

    @staticmethod
    def _by_accuracy(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        return sorted(
            rows,
            key=lambda r: (-(r["correct_count"] / r["total_answered"]), -r["total_answered"]),
        )
