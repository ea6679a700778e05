#!/usr/bin/env python3
"""
guess_manager.py
--------------------
Manages Guess entities.

One guess per (clue, guesser). The guessed word is stored upper-cased and
is_correct is evaluated at write time against the clue's answer.

Usage:
    guess_mgr = GuessManager(session, logger)
    guess = guess_mgr.set_guess(clue, pat, "foo")
    guess.guessed_word, guess.is_correct      # ('FOO', True) when the answer is FOO
"""
from typing import List, Optional

from kealoa.core.exceptions import ValidationError
from kealoa.core.validators import DataValidator
from kealoa.database.decorators import handle_db_errors, log_database_operation
from kealoa.database.models import Clue, Guess, Person
from .base_manager import BaseManager


def is_correct_guess(guessed_word: str, correct_answer: str) -> bool:
    """Case-insensitive comparison of a guess with the answer."""
    return (guessed_word or "").strip().upper() == (correct_answer or "").strip().upper()


class GuessManager(BaseManager):
    """Manages Guess table operations."""

    @handle_db_errors
    @log_database_operation("get_guess")
    def get(
        self,
        clue: Optional[Clue] = None,
        person: Optional[Person] = None,
        guess_id: Optional[int] = None,
    ) -> Optional[Guess]:
        """Retrieve a guess by ID or by (clue, guesser)."""
        if guess_id is not None:
            return self._get_by_id(Guess, guess_id)
        if clue is None or person is None:
            return None
        return (
            self.session.query(Guess)
            .filter_by(clue_id=clue.id, person_id=person.id)
            .first()
        )

    @handle_db_errors
    @log_database_operation("get_clue_guesses")
    def get_for_clue(self, clue: Clue) -> List[Guess]:
        """Guesses on a clue."""
        return self._get_all(Guess, order_by="id", clue_id=clue.id)

    @handle_db_errors
    @log_database_operation("set_guess")
    def set_guess(self, clue: Clue, person: Person, guessed_word: str) -> Guess:
        """
        Record a guesser's answer to a clue, creating or replacing it.

        Args:
            clue: Answered clue
            person: Guesser
            guessed_word: Guess as given (stored upper-cased)

        Returns:
            The created or updated Guess

        Raises:
            ValidationError: If the guessed word is empty
        """
        word = DataValidator.normalize_word(guessed_word)
        if not word:
            raise ValidationError("Required field 'guessed_word' missing or empty")
        correct = is_correct_guess(word, clue.correct_answer)

        guess = self.get(clue=clue, person=person)
        if guess is None:
            guess = Guess(clue=clue, guesser=person, guessed_word=word, is_correct=correct)
            self.session.add(guess)
        else:
            guess.guessed_word = word
            guess.is_correct = correct
        self._execute_with_retry(self.session.flush)
        return guess

    @handle_db_errors
    @log_database_operation("delete_guess")
    def delete(self, guess: Guess) -> None:
        """Delete a guess."""
        self.session.delete(guess)
        self.session.flush()
