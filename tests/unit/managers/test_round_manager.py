"""
test_round_manager.py
---------------------
Unit tests for RoundManager: rounds, guessers and solution words.
"""
import pytest
from datetime import date

from kealoa.core.exceptions import DatabaseError, ValidationError
from kealoa.database.managers.round_manager import normalize_round_number
from kealoa.database.models import Clue, Guess, Person, RoundGuesser, RoundSolution


def _round(**overrides):
    metadata = {
        "round_date": "2024-01-15",
        "episode_number": "101",
        "clue_giver": "Ben Zimmer",
    }
    metadata.update(overrides)
    return metadata


class TestNormalizeRoundNumber:
    """Test normalize_round_number()."""

    @pytest.mark.parametrize("value, expected", [(None, 1), ("", 1), ("0", 1), ("2", 2), (3, 3)])
    def test_defaults_to_one(self, value, expected):
        """Test missing or non-positive numbers become 1."""
        assert normalize_round_number(value) == expected


class TestRoundManagerCreate:
    """Test RoundManager.create()."""

    def test_create_minimal_round(self, round_manager):
        """Test required fields, defaults and clue giver resolution."""
        rnd = round_manager.create(_round())

        assert rnd.round_date == date(2024, 1, 15)
        assert rnd.round_number == 1
        assert rnd.episode_number == 101
        assert rnd.episode_start_seconds == 0
        assert rnd.clue_giver.full_name == "Ben Zimmer"

    def test_create_with_lists(self, round_manager, db_session):
        """Test guessers and solution words are stored in order."""
        rnd = round_manager.create(
            _round(guessers="Pat Lee, Sam Kim", solution_words="kea, loa", episode_start_seconds="1:02:03")
        )

        assert [p.full_name for p in rnd.guessers] == ["Pat Lee", "Sam Kim"]
        assert rnd.solution_words == ["KEA", "LOA"]
        assert [s.word_order for s in rnd.solutions] == [1, 2]
        assert rnd.episode_start_seconds == 3723
        assert db_session.query(Person).count() == 3

    def test_second_round_same_date(self, round_manager):
        """Test several rounds can share a date with distinct numbers."""
        round_manager.create(_round())
        second = round_manager.create(_round(round_number="2"))

        assert second.round_number == 2
        assert [r.round_number for r in round_manager.get_by_date("1/15/2024")] == [1, 2]

    def test_duplicate_round_refused(self, round_manager):
        """Test (date, number) is unique."""
        round_manager.create(_round())
        with pytest.raises(DatabaseError, match="already exists"):
            round_manager.create(_round())

    def test_missing_episode_number(self, round_manager):
        """Test episode_number is required."""
        with pytest.raises(ValidationError):
            round_manager.create(_round(episode_number=""))


class TestRoundManagerGet:
    """Test RoundManager.get() and get_all()."""

    def test_get_by_date_and_number(self, round_manager):
        """Test lookup defaults to round 1."""
        created = round_manager.create(_round())

        assert round_manager.get(round_date="2024-01-15") is created
        assert round_manager.get(round_date="2024-01-15", round_number=2) is None
        assert round_manager.get(round_id=created.id) is created

    def test_get_all_newest_first(self, round_manager):
        """Test rounds are listed newest first."""
        round_manager.create(_round(round_date="2023-05-01"))
        round_manager.create(_round(round_date="2024-01-15"))

        assert [r.round_date.year for r in round_manager.get_all()] == [2024, 2023]

    def test_previous_and_next(self, round_manager):
        """Test navigation follows date, then round number."""
        december = round_manager.create(_round(round_date="2023-12-01"))
        first = round_manager.create(_round())
        second = round_manager.create(_round(round_number=2))
        february = round_manager.create(_round(round_date="2024-02-01"))

        assert round_manager.get_previous(december) is None
        assert round_manager.get_previous(first) is december
        assert round_manager.get_previous(second) is first
        assert round_manager.get_next(first) is second
        assert round_manager.get_next(second) is february
        assert round_manager.get_next(february) is None


class TestRoundManagerUpdate:
    """Test RoundManager.update() and the set-replace helpers."""

    def test_solution_words_replaced(self, round_manager, db_session):
        """Test solution words are cleared and rewritten."""
        rnd = round_manager.create(_round(solution_words="kea, loa"))
        round_manager.update(rnd, {"solution_words": "moa"})

        assert rnd.solution_words == ["MOA"]
        assert db_session.query(RoundSolution).count() == 1

    def test_guessers_replaced_without_duplicates(self, round_manager):
        """Test a guesser named twice is assigned once."""
        rnd = round_manager.create(_round(guessers="Pat Lee"))
        round_manager.set_guessers(rnd, "Sam Kim, sam kim, Pat Lee")

        assert [p.full_name for p in rnd.guessers] == ["Sam Kim", "Pat Lee"]

    def test_update_scalars(self, round_manager):
        """Test episode fields and clue giver can be changed."""
        rnd = round_manager.create(_round())
        round_manager.update(
            rnd, {"episode_number": "102", "clue_giver": "Pat Lee", "description": "Live show"}
        )

        assert rnd.episode_number == 102
        assert rnd.clue_giver.full_name == "Pat Lee"
        assert rnd.description == "Live show"


class TestRoundManagerDelete:
    """Test RoundManager.delete() cascade."""

    def test_delete_cascades(self, played_round, round_manager, db_session):
        """Test clues, guesses, guessers and solutions go with the round."""
        round_manager.delete(played_round["round"])

        assert db_session.query(Clue).count() == 0
        assert db_session.query(Guess).count() == 0
        assert db_session.query(RoundGuesser).count() == 0
        assert db_session.query(RoundSolution).count() == 0

    def test_clue_count_and_is_guesser(self, played_round, round_manager):
        """Test the small helpers."""
        rnd = played_round["round"]

        assert round_manager.clue_count(rnd) == 3
        assert round_manager.is_guesser(rnd, played_round["pat"]) is True
        assert round_manager.is_guesser(rnd, played_round["ben"]) is False
