#!/usr/bin/env python3
"""
round_manager.py
--------------------
Manages Round entities with their guessers and solution words.

A round is keyed by (round_date, round_number); round_number defaults to 1.
The clue giver and the guessers are Persons resolved by name (created on
first sight). Guessers and solution words are ordered collections that are
always rewritten in full.

Key Features:
    - CRUD operations for rounds
    - Guesser and solution word replacement
    - Episode offsets accepted as seconds or HH:MM:SS / MM:SS text
    - Previous/next navigation in (date, round number) order
    - Cascading delete of clues, guesses, guessers and solution words

Usage:
    round_mgr = RoundManager(session, logger)

    rnd = round_mgr.create({
        "round_date": "2024-01-15",
        "episode_number": 42,
        "clue_giver": "Pat Lee",
        "guessers": "Pat Lee, Sam Kim",
        "solution_words": "kea, loa",
    })
    rnd.solution_words        # ['KEA', 'LOA']
"""
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Union

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from kealoa.core.exceptions import DatabaseError, ValidationError
from kealoa.core.logging_manager import KealoaLogger
from kealoa.core.validators import DataValidator
from kealoa.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from kealoa.database.models import Clue, Person, Round, RoundGuesser, RoundSolution
from kealoa.utils.formatters import time_to_seconds
from .base_manager import BaseManager
from .person_manager import PersonManager


def normalize_round_number(value: Any) -> int:
    """Round number from input; missing or below 1 becomes 1."""
    number = DataValidator.normalize_int(value)
    return number if number and number > 0 else 1


def normalize_start_seconds(value: Any) -> int:
    """Episode offset from seconds or a clock string."""
    return time_to_seconds(value)


ROUND_FIELDS = [
    ("episode_id", DataValidator.normalize_int, True),
    ("episode_url", DataValidator.normalize_string, True),
    ("episode_start_seconds", normalize_start_seconds),
    ("description", DataValidator.normalize_string, True),
    ("description2", DataValidator.normalize_string, True),
]


class RoundManager(BaseManager):
    """Manages Round, RoundGuesser and RoundSolution table operations."""

    def __init__(self, session: Session, logger: Optional[KealoaLogger] = None):
        super().__init__(session, logger)
        self.people = PersonManager(session, logger)

    @handle_db_errors
    @log_database_operation("get_round")
    def get(
        self,
        round_date: Optional[Union[date, str]] = None,
        round_number: Any = 1,
        round_id: Optional[int] = None,
    ) -> Optional[Round]:
        """
        Retrieve a round by ID or by (date, round number).

        Args:
            round_date: Date object or any accepted date string
            round_number: Round of that date (default 1)
            round_id: The round ID (takes precedence)

        Returns:
            Round if found, None otherwise
        """
        if round_id is not None:
            return self._get_by_id(Round, round_id)
        played_on = DataValidator.normalize_date(round_date)
        if played_on is None:
            return None
        return (
            self.session.query(Round)
            .filter_by(round_date=played_on, round_number=normalize_round_number(round_number))
            .first()
        )

    @handle_db_errors
    @log_database_operation("get_all_rounds")
    def get_all(self) -> List[Round]:
        """Retrieve all rounds, newest first."""
        return (
            self.session.query(Round)
            .order_by(Round.round_date.desc(), Round.round_number)
            .all()
        )

    @handle_db_errors
    @log_database_operation("get_rounds_by_date")
    def get_by_date(self, round_date: Union[date, str]) -> List[Round]:
        """All rounds played on a date, in round order."""
        played_on = DataValidator.normalize_date(round_date)
        return (
            self.session.query(Round)
            .filter_by(round_date=played_on)
            .order_by(Round.round_number)
            .all()
        )

    @handle_db_errors
    @log_database_operation("get_previous_round")
    def get_previous(self, rnd: Round) -> Optional[Round]:
        """The round played just before this one, or None for the first."""
        return (
            self.session.query(Round)
            .filter(
                or_(
                    Round.round_date < rnd.round_date,
                    and_(
                        Round.round_date == rnd.round_date,
                        Round.round_number < rnd.round_number,
                    ),
                )
            )
            .order_by(Round.round_date.desc(), Round.round_number.desc())
            .first()
        )

    @handle_db_errors
    @log_database_operation("get_next_round")
    def get_next(self, rnd: Round) -> Optional[Round]:
        """The round played just after this one, or None for the latest."""
        return (
            self.session.query(Round)
            .filter(
                or_(
                    Round.round_date > rnd.round_date,
                    and_(
                        Round.round_date == rnd.round_date,
                        Round.round_number > rnd.round_number,
                    ),
                )
            )
            .order_by(Round.round_date, Round.round_number)
            .first()
        )

    @handle_db_errors
    @log_database_operation("create_round")
    @validate_metadata(["round_date", "episode_number", "clue_giver"])
    def create(self, metadata: Dict[str, Any]) -> Round:
        """
        Create a new round.

        Args:
            metadata: Dictionary with required keys:
                - round_date: date or date string
                - episode_number: int or numeric text
                - clue_giver: name or Person
                Optional keys:
                - round_number (default 1), episode_id, episode_url,
                  episode_start_seconds (seconds or HH:MM:SS),
                  description, description2
                - guessers: names/Persons (list or comma-separated text)
                - solution_words: words (list or comma-separated text)

        Returns:
            Created Round object

        Raises:
            ValidationError: If a required value is invalid
            DatabaseError: If a round already exists for (date, number)
        """
        played_on = DataValidator.normalize_date(metadata["round_date"])
        number = normalize_round_number(metadata.get("round_number"))
        if self.get(round_date=played_on, round_number=number):
            raise DatabaseError(
                f"Round already exists for {played_on.isoformat()} round #{number}"
            )

        rnd = Round(
            round_date=played_on,
            round_number=number,
            episode_number=self._episode_number(metadata["episode_number"]),
            clue_giver=self._person(metadata["clue_giver"]),
            episode_start_seconds=0,
        )
        self._update_scalar_fields(rnd, metadata, ROUND_FIELDS)
        self.session.add(rnd)
        self._execute_with_retry(self.session.flush)

        if metadata.get("guessers"):
            self.set_guessers(rnd, metadata["guessers"])
        if metadata.get("solution_words"):
            self.set_solution_words(rnd, metadata["solution_words"])

        if self.logger:
            self.logger.log_debug(
                f"Created round: {played_on.isoformat()} #{number}",
                {"round_id": rnd.id, "episode_number": rnd.episode_number},
            )
        return rnd

    @handle_db_errors
    @log_database_operation("update_round")
    def update(self, rnd: Round, metadata: Dict[str, Any]) -> Round:
        """
        Update an existing round.

        Args:
            rnd: Round to update
            metadata: Same keys as create(), all optional. guessers and
                solution_words replace the current lists when present.

        Returns:
            Updated Round object
        """
        db_round = self.session.get(Round, rnd.id)
        if db_round is None:
            raise DatabaseError(f"Round with id={rnd.id} not found")

        if DataValidator.normalize_string(metadata.get("episode_number")) is not None:
            db_round.episode_number = self._episode_number(metadata["episode_number"])
        if metadata.get("clue_giver"):
            db_round.clue_giver = self._person(metadata["clue_giver"])
        self._update_scalar_fields(db_round, metadata, ROUND_FIELDS)

        if "guessers" in metadata:
            self.set_guessers(db_round, metadata["guessers"] or [])
        if "solution_words" in metadata:
            self.set_solution_words(db_round, metadata["solution_words"] or [])

        self.session.flush()
        return db_round

    @handle_db_errors
    @log_database_operation("set_round_guessers")
    def set_guessers(
        self, rnd: Round, guessers: Union[str, Sequence[Union[Person, str]]]
    ) -> List[Person]:
        """
        Replace the guessers of a round.

        Args:
            rnd: Round to update
            guessers: Names/Persons, or comma-separated text

        Returns:
            The assigned guessers, duplicates removed
        """
        if isinstance(guessers, str):
            guessers = DataValidator.split_list(guessers)

        people: List[Person] = []
        for ref in guessers:
            if not isinstance(ref, Person) and not str(ref).strip():
                continue
            person = self._person(ref)
            if person not in people:
                people.append(person)

        rnd.guesser_links.clear()
        self.session.flush()
        for person in people:
            rnd.guesser_links.append(RoundGuesser(person=person))
        self.session.flush()
        return people

    @handle_db_errors
    @log_database_operation("set_round_solutions")
    def set_solution_words(
        self, rnd: Round, words: Union[str, Sequence[str]]
    ) -> List[str]:
        """
        Replace the solution words of a round.

        Words are trimmed and upper-cased; empty items are dropped.

        Returns:
            The stored words in order
        """
        cleaned = [
            DataValidator.normalize_word(word)
            for word in DataValidator.split_list(words)
        ]

        rnd.solutions.clear()
        self.session.flush()
        for order, word in enumerate(cleaned, start=1):
            rnd.solutions.append(RoundSolution(word=word, word_order=order))
        self.session.flush()
        return cleaned

    @handle_db_errors
    @log_database_operation("delete_round")
    def delete(self, rnd: Round) -> None:
        """Delete a round with its clues, guesses, guessers and solution words."""
        self.session.delete(rnd)
        self.session.flush()

    @handle_db_errors
    @log_database_operation("count_round_clues")
    def clue_count(self, rnd: Round) -> int:
        """Number of clues in a round."""
        return self._count(Clue, round_id=rnd.id)

    def is_guesser(self, rnd: Round, person: Person) -> bool:
        """Whether a person is an assigned guesser of the round."""
        return (
            self.session.query(RoundGuesser)
            .filter_by(round_id=rnd.id, person_id=person.id)
            .first()
            is not None
        )

    def _person(self, ref: Union[Person, str]) -> Person:
        if isinstance(ref, Person):
            return ref
        return self.people.get_or_create(ref)

    @staticmethod
    def _episode_number(value: Any) -> int:
        number = DataValidator.normalize_int(value)
        if number is None:
            raise ValidationError("Required field 'episode_number' missing or empty")
        return number
