"""
test_clue_manager.py
--------------------
Unit tests for ClueManager, including guess re-evaluation when an
answer changes.
"""
import pytest

from kealoa.core.exceptions import DatabaseError, ValidationError
from kealoa.database.models import Guess


@pytest.fixture
def rnd(round_manager):
    """A round with two guessers and no clues."""
    return round_manager.create(
        {
            "round_date": "2024-02-01",
            "episode_number": 110,
            "clue_giver": "Ben Zimmer",
            "guessers": "Pat Lee, Sam Kim",
        }
    )


class TestClueManagerCreate:
    """Test ClueManager.create()."""

    def test_create_clue(self, clue_manager, rnd):
        """Test the answer is upper-cased and the puzzle resolved by date."""
        clue = clue_manager.create(
            {
                "round": rnd,
                "clue_number": "1",
                "puzzle": "2023-01-01",
                "puzzle_clue_number": "17",
                "puzzle_clue_direction": "across",
                "clue_text": "Great Lake",
                "correct_answer": " erie ",
            }
        )

        assert clue.correct_answer == "ERIE"
        assert clue.puzzle_clue_direction == "A"
        assert clue.puzzle_clue_number == 17
        assert str(clue.puzzle.publication_date) == "2023-01-01"
        assert clue in rnd.clues

    def test_create_without_puzzle(self, clue_manager, rnd):
        """Test a clue may have no puzzle."""
        clue = clue_manager.create(
            {"round": rnd.id, "clue_number": 1, "clue_text": "Bird", "correct_answer": "kea"}
        )
        assert clue.puzzle is None

    def test_invalid_direction(self, clue_manager, rnd):
        """Test directions other than A/D are rejected."""
        with pytest.raises(ValidationError):
            clue_manager.create(
                {
                    "round": rnd,
                    "clue_number": 1,
                    "puzzle_clue_direction": "X",
                    "clue_text": "Bird",
                    "correct_answer": "kea",
                }
            )

    def test_duplicate_clue_number(self, clue_manager, rnd):
        """Test clue numbers are unique within a round."""
        clue_manager.create({"round": rnd, "clue_number": 1, "clue_text": "Bird", "correct_answer": "kea"})
        with pytest.raises(DatabaseError, match="already exists"):
            clue_manager.create({"round": rnd, "clue_number": 1, "clue_text": "Bird", "correct_answer": "loa"})


class TestClueManagerQueries:
    """Test get(), get_for_round() and get_for_puzzle()."""

    def test_get_for_round_in_order(self, clue_manager, rnd):
        """Test clues come back by clue number."""
        for number in (3, 1, 2):
            clue_manager.create(
                {"round": rnd, "clue_number": number, "clue_text": f"Clue {number}", "correct_answer": "X"}
            )

        assert [c.clue_number for c in clue_manager.get_for_round(rnd)] == [1, 2, 3]
        assert clue_manager.get(rnd=rnd, clue_number="2").clue_text == "Clue 2"
        assert clue_manager.get(rnd=rnd, clue_number=None) is None

    def test_get_for_puzzle(self, played_round, clue_manager):
        """Test clues taken from one puzzle."""
        sunday = played_round["puzzles"][0]
        assert [c.correct_answer for c in clue_manager.get_for_puzzle(sunday)] == ["ERIE", "OREO"]


class TestClueManagerUpdate:
    """Test ClueManager.update() re-evaluating guesses."""

    def test_answer_change_recomputes_guesses(self, played_round, clue_manager, db_session):
        """Test every guess flag follows a changed answer."""
        erie = played_round["clues"][0]

        clue_manager.update(erie, {"correct_answer": "ontario"})

        flags = {g.guesser.full_name: g.is_correct for g in erie.guesses}
        assert flags == {"Pat Lee": False, "Sam Kim": True}

    def test_other_changes_leave_guesses(self, played_round, clue_manager):
        """Test editing the clue text keeps the flags."""
        erie = played_round["clues"][0]
        clue_manager.update(erie, {"clue_text": "Lake near Buffalo"})

        assert erie.clue_text == "Lake near Buffalo"
        assert [g.is_correct for g in erie.guesses] == [True, False]

    def test_recompute_guesses_counts_changes(self, played_round, clue_manager, db_session):
        """Test stale flags written behind the manager's back are fixed."""
        erie = played_round["clues"][0]
        for guess in erie.guesses:
            guess.is_correct = not guess.is_correct
        db_session.flush()

        assert clue_manager.recompute_guesses(erie) == 2
        assert [g.is_correct for g in erie.guesses] == [True, False]

    def test_detach_puzzle(self, played_round, clue_manager):
        """Test an empty puzzle value detaches the puzzle."""
        erie = played_round["clues"][0]
        clue_manager.update(erie, {"puzzle": ""})
        assert erie.puzzle is None


class TestClueManagerDelete:
    """Test ClueManager.delete()."""

    def test_delete_cascades_to_guesses(self, played_round, clue_manager, db_session):
        """Test deleting a clue removes its guesses only."""
        clue_manager.delete(played_round["clues"][0])
        assert db_session.query(Guess).count() == 3
