#!/usr/bin/env python3
"""
health_monitor.py
-----------------
Consistency checks and repairs for the KEALOA database.

SQLite foreign keys are not enforced on the connection, so rows written by
other tools (or left behind by a deleted puzzle) can point at records that
no longer exist. This module finds them and removes the ones that carry no
information of their own.

Checks Performed:
    1. **Unused records**: puzzles no clue cites
    2. **Incomplete rounds**: rounds without clues, solution words or guessers
    3. **Dangling references**: constructor links, clues, guesses, guesser
       links, solution words and clue givers pointing at missing rows
    4. **Stale flags**: guesses whose is_correct no longer matches the
       clue's answer

Usage:
    monitor = HealthMonitor(logger=db.logger)

    with db.session_scope() as session:
        issues = monitor.run_consistency_checks(session)
        for name, rows in issues.items():
            print(name, len(rows))

        # Remove everything that can be removed safely
        monitor.repair(session, issues)

CLI Integration:
    kealoa check           # Report issues
    kealoa check --fix     # Report, then delete orphans and fix flags

Notes:
    - Only checks with at least one issue appear in the report
    - Each issue row is a plain dict including the offending row's id
    - Clues citing a missing puzzle are reported but never deleted
    - Deleting orphan clues also deletes their guesses, so one repair
      leaves nothing fixable behind
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Any, Dict, Iterable, List, Optional

# --- Third party imports ---
from sqlalchemy import delete
from sqlalchemy.orm import Session, aliased

# --- Local imports ---
from kealoa.core.exceptions import HealthCheckError
from kealoa.core.logging_manager import KealoaLogger
from .decorators import handle_db_errors, log_database_operation
from .managers.guess_manager import is_correct_guess
from .models import (
    Clue,
    Guess,
    Person,
    Puzzle,
    PuzzleConstructor,
    Round,
    RoundGuesser,
    RoundSolution,
)

# Tables whose rows may be deleted by id from a consistency report
DELETABLE_TABLES = {
    "puzzle_constructors": PuzzleConstructor,
    "clues": Clue,
    "guesses": Guess,
    "round_guessers": RoundGuesser,
    "round_solutions": RoundSolution,
}

# check name -> table its rows are deleted from by repair()
FIXABLE_CHECKS = {
    "orphan_puzzle_constructor_puzzles": "puzzle_constructors",
    "orphan_puzzle_constructor_persons": "puzzle_constructors",
    "orphan_clue_rounds": "clues",
    "orphan_guess_clues": "guesses",
    "orphan_guess_persons": "guesses",
    "orphan_round_guesser_rounds": "round_guessers",
    "orphan_round_guesser_persons": "round_guessers",
    "orphan_round_solution_rounds": "round_solutions",
}


class HealthMonitor:
    """
    Database consistency checks and repair operations.

    Stateless apart from the optional logger; every method takes the
    session to work in.
    """

    # Dangling reference config: (check name, child model, fk attr, parent model, columns)
    _ORPHAN_CHECKS = [
        (
            "orphan_puzzle_constructor_puzzles",
            PuzzleConstructor,
            "puzzle_id",
            Puzzle,
            ("id", "puzzle_id", "person_id"),
        ),
        (
            "orphan_puzzle_constructor_persons",
            PuzzleConstructor,
            "person_id",
            Person,
            ("id", "puzzle_id", "person_id"),
        ),
        (
            "orphan_clue_rounds",
            Clue,
            "round_id",
            Round,
            ("id", "round_id", "clue_number", "clue_text"),
        ),
        (
            "orphan_clue_puzzles",
            Clue,
            "puzzle_id",
            Puzzle,
            ("id", "round_id", "clue_number", "puzzle_id"),
        ),
        (
            "orphan_guess_clues",
            Guess,
            "clue_id",
            Clue,
            ("id", "clue_id", "person_id", "guessed_word"),
        ),
        (
            "orphan_guess_persons",
            Guess,
            "person_id",
            Person,
            ("id", "clue_id", "person_id", "guessed_word"),
        ),
        (
            "orphan_round_guesser_rounds",
            RoundGuesser,
            "round_id",
            Round,
            ("id", "round_id", "person_id"),
        ),
        (
            "orphan_round_guesser_persons",
            RoundGuesser,
            "person_id",
            Person,
            ("id", "round_id", "person_id"),
        ),
        (
            "orphan_round_solution_rounds",
            RoundSolution,
            "round_id",
            Round,
            ("id", "round_id", "word"),
        ),
        (
            "orphan_round_clue_givers",
            Round,
            "clue_giver_id",
            Person,
            ("id", "round_date", "round_number", "clue_giver_id"),
        ),
    ]

    # Incomplete round config: (check name, child model)
    _EMPTY_ROUND_CHECKS = [
        ("rounds_no_clues", Clue),
        ("rounds_no_solutions", RoundSolution),
        ("rounds_no_guessers", RoundGuesser),
    ]

    def __init__(self, logger: Optional[KealoaLogger] = None) -> None:
        """
        Initialize health monitor.

        Args:
            logger: Optional logger for health operations
        """
        self.logger = logger

    # ---- Checks ----
    @handle_db_errors
    @log_database_operation("run_consistency_checks")
    def run_consistency_checks(self, session: Session) -> Dict[str, List[Dict[str, Any]]]:
        """
        Run every consistency check.

        Args:
            session: SQLAlchemy session

        Returns:
            Mapping of check name to issue rows; checks without issues
            are left out

        Raises:
            HealthCheckError: If a check cannot be executed
        """
        issues: Dict[str, List[Dict[str, Any]]] = {}

        try:
            checks = [("orphan_puzzles", self._orphan_puzzles(session))]
            checks += [
                (name, self._rounds_without(session, child))
                for name, child in self._EMPTY_ROUND_CHECKS
            ]
            checks += [
                (name, self._dangling(session, model, fk_attr, parent, columns))
                for name, model, fk_attr, parent, columns in self._ORPHAN_CHECKS
            ]
            checks.append(("stale_guess_flags", self.find_stale_guess_flags(session)))
        except Exception as e:
            if self.logger:
                self.logger.log_error(e, {"operation": "run_consistency_checks"})
            raise HealthCheckError(f"Consistency check failed: {e}") from e

        for name, rows in checks:
            if rows:
                issues[name] = rows

        if self.logger:
            self.logger.log_operation(
                "consistency_report",
                {name: len(rows) for name, rows in issues.items()},
            )
        return issues

    @staticmethod
    def _rows(query, columns: Iterable[str]) -> List[Dict[str, Any]]:
        return [dict(zip(columns, row)) for row in query.all()]

    def _orphan_puzzles(self, session: Session) -> List[Dict[str, Any]]:
        """Puzzles not cited by any clue."""
        query = (
            session.query(Puzzle.id, Puzzle.publication_date, Puzzle.editor_id)
            .outerjoin(Clue, Clue.puzzle_id == Puzzle.id)
            .filter(Clue.id.is_(None))
            .order_by(Puzzle.publication_date)
        )
        return self._rows(query, ("id", "publication_date", "editor_id"))

    def _rounds_without(self, session: Session, child) -> List[Dict[str, Any]]:
        """Rounds with no row in the given child table."""
        query = (
            session.query(Round.id, Round.round_date, Round.round_number, Round.description)
            .outerjoin(child, child.round_id == Round.id)
            .filter(child.id.is_(None))
            .order_by(Round.round_date, Round.round_number)
        )
        return self._rows(query, ("id", "round_date", "round_number", "description"))

    def _dangling(
        self, session: Session, model, fk_attr: str, parent_model, columns
    ) -> List[Dict[str, Any]]:
        """Rows whose non-null foreign key matches no parent row."""
        parent = aliased(parent_model)
        fk_column = getattr(model, fk_attr)
        query = (
            session.query(*[getattr(model, c) for c in columns])
            .outerjoin(parent, parent.id == fk_column)
            .filter(fk_column.isnot(None), parent.id.is_(None))
            .order_by(model.id)
        )
        return self._rows(query, columns)

    def find_stale_guess_flags(self, session: Session) -> List[Dict[str, Any]]:
        """
        Guesses whose stored is_correct disagrees with the clue's answer.

        Returns:
            Issue rows: id, clue_id, guessed_word, correct_answer, is_correct
        """
        stale = []
        rows = (
            session.query(
                Guess.id, Guess.clue_id, Guess.guessed_word, Clue.correct_answer, Guess.is_correct
            )
            .join(Clue, Guess.clue_id == Clue.id)
            .order_by(Guess.id)
            .all()
        )
        for guess_id, clue_id, word, answer, flag in rows:
            if bool(flag) != is_correct_guess(word, answer):
                stale.append(
                    {
                        "id": guess_id,
                        "clue_id": clue_id,
                        "guessed_word": word,
                        "correct_answer": answer,
                        "is_correct": bool(flag),
                    }
                )
        return stale

    # ---- Repairs ----
    @handle_db_errors
    @log_database_operation("delete_orphan_records")
    def delete_orphan_records(self, session: Session, table_key: str, ids: Iterable[int]) -> int:
        """
        Delete rows by id from one of the repairable tables.

        Args:
            session: SQLAlchemy session
            table_key: One of DELETABLE_TABLES
            ids: Row ids to delete

        Returns:
            Number of rows deleted (0 for an unknown table or no ids)
        """
        model = DELETABLE_TABLES.get(table_key)
        id_list = sorted({int(i) for i in ids})
        if model is None or not id_list:
            return 0

        result = session.execute(
            delete(model).where(model.id.in_(id_list)).execution_options(
                synchronize_session=False
            )
        )
        session.expire_all()

        if self.logger:
            self.logger.log_operation(
                "orphan_records_deleted",
                {"table": table_key, "requested": len(id_list), "deleted": result.rowcount},
            )
        return result.rowcount

    @handle_db_errors
    @log_database_operation("recompute_guess_flags")
    def recompute_guess_flags(self, session: Session) -> int:
        """
        Recompute is_correct for every stale guess.

        Returns:
            Number of guesses updated
        """
        stale = self.find_stale_guess_flags(session)
        for row in stale:
            guess = session.get(Guess, row["id"])
            guess.is_correct = not row["is_correct"]
        session.flush()
        return len(stale)

    def repair(
        self,
        session: Session,
        issues: Optional[Dict[str, List[Dict[str, Any]]]] = None,
    ) -> Dict[str, int]:
        """
        Delete every fixable orphan and recompute stale guess flags.

        Args:
            session: SQLAlchemy session
            issues: Report from run_consistency_checks (run fresh when None)

        Returns:
            Mapping of table key (or 'stale_guess_flags') to rows fixed
        """
        if issues is None:
            issues = self.run_consistency_checks(session)

        to_delete: Dict[str, set] = {}
        for check, table_key in FIXABLE_CHECKS.items():
            for row in issues.get(check, []):
                to_delete.setdefault(table_key, set()).add(row["id"])

        # Bulk deletes skip ORM cascades, so guesses of removed clues go too
        clue_ids = to_delete.get("clues")
        if clue_ids:
            guess_ids = {
                guess_id
                for (guess_id,) in session.query(Guess.id).filter(Guess.clue_id.in_(clue_ids))
            }
            if guess_ids:
                to_delete.setdefault("guesses", set()).update(guess_ids)

        fixed = {
            table_key: self.delete_orphan_records(session, table_key, ids)
            for table_key, ids in to_delete.items()
        }
        if issues.get("stale_guess_flags"):
            fixed["stale_guess_flags"] = self.recompute_guess_flags(session)
        return fixed
