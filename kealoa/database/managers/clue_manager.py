#!/usr/bin/env python3
"""
clue_manager.py
--------------------
Manages Clue entities.

A clue belongs to one round and is keyed by (round, clue_number). It may
cite a source puzzle, given either as a Puzzle or as a publication date
(a missing puzzle is created). Answers are stored upper-cased.

Changing a clue's correct_answer re-evaluates every guess on it in the
same flush, so Guess.is_correct never goes stale through this manager.

Usage:
    clue_mgr = ClueManager(session, logger)

    clue = clue_mgr.create({
        "round": rnd,
        "clue_number": 1,
        "puzzle": "2024-01-05",
        "puzzle_clue_number": 42,
        "puzzle_clue_direction": "Down",
        "clue_text": "Hawaiian honeycreeper",
        "correct_answer": "loa",
    })
    clue.correct_answer          # 'LOA'
    clue.puzzle_clue_direction   # 'D'
"""
from datetime import date
from typing import Any, Dict, List, Optional, Union

from sqlalchemy.orm import Session

from kealoa.core.exceptions import DatabaseError, ValidationError
from kealoa.core.logging_manager import KealoaLogger
from kealoa.core.validators import DataValidator
from kealoa.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from kealoa.database.models import Clue, Puzzle, Round
from .base_manager import BaseManager
from .guess_manager import is_correct_guess
from .puzzle_manager import PuzzleManager

CLUE_FIELDS = [
    ("puzzle_clue_number", DataValidator.normalize_int, True),
    ("puzzle_clue_direction", DataValidator.normalize_direction, True),
    ("clue_text", DataValidator.normalize_string),
    ("correct_answer", DataValidator.normalize_word),
]


class ClueManager(BaseManager):
    """Manages Clue table operations."""

    def __init__(self, session: Session, logger: Optional[KealoaLogger] = None):
        super().__init__(session, logger)
        self.puzzles = PuzzleManager(session, logger)

    @handle_db_errors
    @log_database_operation("get_clue")
    def get(
        self,
        rnd: Optional[Round] = None,
        clue_number: Any = None,
        clue_id: Optional[int] = None,
    ) -> Optional[Clue]:
        """
        Retrieve a clue by ID or by (round, clue number).

        Args:
            rnd: Owning round
            clue_number: Position within the round
            clue_id: The clue ID (takes precedence)

        Returns:
            Clue if found, None otherwise
        """
        if clue_id is not None:
            return self._get_by_id(Clue, clue_id)
        number = DataValidator.normalize_int(clue_number)
        if rnd is None or number is None:
            return None
        return self.session.query(Clue).filter_by(round_id=rnd.id, clue_number=number).first()

    @handle_db_errors
    @log_database_operation("get_round_clues")
    def get_for_round(self, rnd: Round) -> List[Clue]:
        """Clues of a round in clue order."""
        return self._get_all(Clue, order_by="clue_number", round_id=rnd.id)

    @handle_db_errors
    @log_database_operation("get_puzzle_clues")
    def get_for_puzzle(self, puzzle: Puzzle) -> List[Clue]:
        """Clues taken from a puzzle, in round order."""
        return (
            self.session.query(Clue)
            .join(Round, Clue.round_id == Round.id)
            .filter(Clue.puzzle_id == puzzle.id)
            .order_by(Round.round_date, Round.round_number, Clue.clue_number)
            .all()
        )

    @handle_db_errors
    @log_database_operation("create_clue")
    @validate_metadata(["round", "clue_number", "clue_text", "correct_answer"])
    def create(self, metadata: Dict[str, Any]) -> Clue:
        """
        Create a new clue.

        Args:
            metadata: Dictionary with required keys:
                - round: Round or round id
                - clue_number: Position within the round
                - clue_text: The clue as read
                - correct_answer: Answer (upper-cased on save)
                Optional keys:
                - puzzle: Puzzle, puzzle id or publication date
                - puzzle_clue_number, puzzle_clue_direction ('A'/'D', or
                  any word starting with A or D)

        Returns:
            Created Clue object

        Raises:
            ValidationError: If the direction or a number is invalid
            DatabaseError: If the round already has that clue number
        """
        rnd = self._resolve_object(metadata["round"], Round)
        number = DataValidator.normalize_int(metadata["clue_number"])
        if self.get(rnd=rnd, clue_number=number):
            raise DatabaseError(f"Clue #{number} already exists for round {rnd.id}")

        clue = Clue(clue_number=number)
        self._update_scalar_fields(clue, metadata, CLUE_FIELDS)
        if "puzzle" in metadata:
            clue.puzzle = self._puzzle(metadata["puzzle"])
        clue.round = rnd
        self.session.add(clue)
        self._execute_with_retry(self.session.flush)
        return clue

    @handle_db_errors
    @log_database_operation("update_clue")
    def update(self, clue: Clue, metadata: Dict[str, Any]) -> Clue:
        """
        Update an existing clue.

        A changed correct_answer re-evaluates the clue's guesses.

        Args:
            clue: Clue to update
            metadata: Same keys as create() except round, all optional;
                an empty puzzle value detaches the puzzle

        Returns:
            Updated Clue object
        """
        db_clue = self.session.get(Clue, clue.id)
        if db_clue is None:
            raise DatabaseError(f"Clue with id={clue.id} not found")

        previous_answer = db_clue.correct_answer
        if "clue_number" in metadata:
            number = DataValidator.normalize_int(metadata["clue_number"])
            if number is not None:
                db_clue.clue_number = number
        self._update_scalar_fields(db_clue, metadata, CLUE_FIELDS)
        if "puzzle" in metadata:
            db_clue.puzzle = self._puzzle(metadata["puzzle"])
        self.session.flush()

        if db_clue.correct_answer != previous_answer:
            self.recompute_guesses(db_clue)
        return db_clue

    @handle_db_errors
    @log_database_operation("recompute_clue_guesses")
    def recompute_guesses(self, clue: Clue) -> int:
        """
        Re-evaluate is_correct for every guess on a clue.

        Returns:
            Number of guesses whose flag changed
        """
        changed = 0
        for guess in clue.guesses:
            is_correct = is_correct_guess(guess.guessed_word, clue.correct_answer)
            if guess.is_correct != is_correct:
                guess.is_correct = is_correct
                changed += 1
        self.session.flush()
        return changed

    @handle_db_errors
    @log_database_operation("delete_clue")
    def delete(self, clue: Clue) -> None:
        """Delete a clue and its guesses."""
        self.session.delete(clue)
        self.session.flush()

    def _puzzle(self, ref: Union[Puzzle, int, date, str, None]) -> Optional[Puzzle]:
        if ref is None or isinstance(ref, Puzzle):
            return ref
        if isinstance(ref, int):
            return self._resolve_object(ref, Puzzle)
        if not str(ref).strip():
            return None
        try:
            return self.puzzles.get_or_create(ref)
        except ValidationError:
            raise ValidationError(f"Invalid puzzle date '{ref}'")
