"""Tests for view resolution and text rendering."""
from datetime import date

import pytest
from sqlalchemy import delete

from kealoa.core.exceptions import ViewNotFoundError
from kealoa.database.models import Person
from kealoa.views import (
    ViewContext,
    render_text,
    resolve_constructor_view,
    resolve_editor_view,
    resolve_person_view,
    resolve_puzzle_view,
    resolve_round_view,
)


class TestPersonView:
    """Tests for resolve_person_view()."""

    def test_by_name(self, played_round, db_session):
        """Names match case-insensitively."""
        ctx = resolve_person_view(db_session, "pat lee")

        assert ctx.kind == "person"
        assert ctx.title == "Pat Lee"
        assert ctx.data["roles"] == ["player", "constructor"]
        assert ctx.data["puzzles_constructed"] == [date(1999, 6, 2)]
        assert ctx.data["stats"]["total_correct"] == 2
        assert [r["key"] for r in ctx.data["breakdowns"]["direction"]] == ["A", "D"]
        assert ctx.data["round_history"][0]["correct_count"] == 2

    def test_by_id(self, played_round, db_session):
        ctx = resolve_person_view(db_session, played_round["ben"].id)

        assert ctx.title == "Ben Zimmer"
        assert ctx.data["roles"] == ["clue_giver"]
        assert ctx.data["rounds_given"] == [{"round_date": date(2024, 1, 15), "round_number": 1}]
        assert ctx.data["stats"]["rounds_played"] == 0

    def test_hidden_xwordinfo_profile(self, played_round, person_manager, db_session):
        person_manager.update(
            played_round["pat"], {"xwordinfo_profile_name": "PatLee", "hide_xwordinfo": "1"}
        )
        ctx = resolve_person_view(db_session, "Pat Lee")
        assert ctx.data["person"]["xwordinfo_profile_name"] is None

    def test_unknown_person(self, db_session):
        with pytest.raises(ViewNotFoundError, match="No person found with name 'Nobody'"):
            resolve_person_view(db_session, "Nobody")


class TestRoundView:
    """Tests for resolve_round_view()."""

    def test_round(self, played_round, db_session):
        ctx = resolve_round_view(db_session, "1/15/2024")

        assert ctx.kind == "round"
        assert ctx.title == "2024-01-15 round #1"
        assert ctx.data["round"]["start_time"] == "00:12:30"
        assert ctx.data["round"]["clue_giver"] == "Ben Zimmer"
        assert ctx.data["solution_words"] == ["KEA", "LOA"]
        assert ctx.data["total_clues"] == 3
        assert ctx.data["other_rounds_same_date"] == []

    def test_clue_rows(self, played_round, db_session):
        clues = resolve_round_view(db_session, "2024-01-15").data["clues"]

        assert [c["reference"] for c in clues] == ["17A", "3D", "42A"]
        assert clues[0]["constructors"] == ["Joel Fagliano"]
        assert clues[0]["editor"] == "Will Shortz"
        assert clues[2]["editor"] is None
        assert [(g["guesser"], g["is_correct"]) for g in clues[0]["guesses"]] == [
            ("Pat Lee", True),
            ("Sam Kim", False),
        ]

    def test_other_rounds_same_date(self, played_round, round_manager, db_session):
        round_manager.create(
            {"round_date": "2024-01-15", "round_number": 2, "episode_number": 101, "clue_giver": "Ben Zimmer"}
        )

        first = resolve_round_view(db_session, "2024-01-15")
        second = resolve_round_view(db_session, "2024-01-15", round_number=2)

        assert first.data["other_rounds_same_date"] == [2]
        assert second.data["other_rounds_same_date"] == [1]
        assert second.data["clues"] == []

    def test_previous_and_next(self, played_round, round_manager, db_session):
        """Neighbouring rounds are linked by date and number."""
        assert resolve_round_view(db_session, "2024-01-15").data["previous_round"] is None

        later = round_manager.create(
            {"round_date": "2024-02-01", "episode_number": 102, "clue_giver": "Ben Zimmer"}
        )
        first = resolve_round_view(db_session, "2024-01-15").data
        second = resolve_round_view(db_session, "2024-02-01").data

        assert first["next_round"] == {
            "round_id": later.id,
            "round_date": date(2024, 2, 1),
            "round_number": 1,
        }
        assert second["previous_round"]["round_id"] == played_round["round"].id
        assert second["next_round"] is None
        assert "Next round: 2/1/2024 #1" in render_text(resolve_round_view(db_session, "2024-01-15"))

    def test_guess_of_missing_person(self, played_round, db_session):
        """A guess whose person row is gone still renders."""
        db_session.execute(
            delete(Person)
            .where(Person.id == played_round["sam"].id)
            .execution_options(synchronize_session=False)
        )
        db_session.expire_all()

        ctx = resolve_round_view(db_session, "2024-01-15")

        assert [(g["guesser"], g["guessed_word"]) for g in ctx.data["clues"][0]["guesses"]] == [
            (None, "ONTARIO"),
            ("Pat Lee", "ERIE"),
        ]
        assert "—: ✗ ONTARIO" in render_text(ctx)

    def test_unknown_round(self, played_round, db_session):
        with pytest.raises(ViewNotFoundError, match=r"No round found for 2024-01-15 round #2"):
            resolve_round_view(db_session, "2024-01-15", round_number=2)

    def test_views_are_independent(self, played_round, db_session):
        """Resolving a second view leaves the first untouched."""
        round_ctx = resolve_round_view(db_session, "2024-01-15")
        person_ctx = resolve_person_view(db_session, "Sam Kim")

        assert round_ctx.title == "2024-01-15 round #1"
        assert person_ctx.title == "Sam Kim"
        assert "Great Lake" in render_text(round_ctx)


class TestRenderText:
    """Tests for render_text()."""

    def test_person_page(self, played_round, db_session):
        text = render_text(resolve_person_view(db_session, "Pat Lee"))

        assert text.startswith("Pat Lee\n=======")
        assert "Roles: player, constructor" in text
        assert "Correct answers: 2/3 (66.7%)" in text
        assert "By constructor" in text
        assert "1/15/2024 #1  episode 101  2/3" in text

    def test_person_without_record(self, played_round, db_session):
        """No record section for someone who never guessed."""
        text = render_text(resolve_person_view(db_session, "Will Shortz"))

        assert "Roles: editor" in text
        assert "Record" not in text

    def test_round_page(self, played_round, db_session):
        text = render_text(resolve_round_view(db_session, "2024-01-15"))

        assert "Date: 1/15/2024" in text
        assert "Episode: 101 (starts at 00:12:30)" in text
        assert "Guessers: Pat Lee and Sam Kim" in text
        assert "Solution: KEA and LOA" in text
        assert "1. [1/1/2023 by Joel Fagliano, 17A] Great Lake (ERIE)" in text
        assert "Sam Kim: ✗ ONTARIO" in text
        assert "Pat Lee (2/3)\nSam Kim (1/3)" in text

    def test_unknown_kind(self):
        with pytest.raises(ValueError, match="No renderer"):
            render_text(ViewContext(kind="episode", title="101"))


class TestConstructorView:
    """Tests for resolve_constructor_view()."""

    def test_constructor(self, played_round, db_session):
        ctx = resolve_constructor_view(db_session, "joel fagliano")

        assert ctx.kind == "constructor"
        assert ctx.title == "Joel Fagliano"
        assert ctx.data["stats"]["clue_count"] == 2
        assert ctx.data["puzzles"] == [
            {
                "publication_date": date(2023, 1, 1),
                "editor": "Will Shortz",
                "constructors": [],
                "rounds": [
                    {
                        "round_id": played_round["round"].id,
                        "round_date": date(2024, 1, 15),
                        "round_number": 1,
                    }
                ],
            }
        ]
        assert [r["full_name"] for r in ctx.data["player_results"]] == ["Pat Lee", "Sam Kim"]

    def test_not_a_constructor(self, played_round, db_session):
        """A person with no credited puzzle has no constructor page."""
        with pytest.raises(ViewNotFoundError, match="No constructor found with name 'Ben Zimmer'"):
            resolve_constructor_view(db_session, "Ben Zimmer")

    def test_page(self, played_round, db_session):
        text = render_text(resolve_constructor_view(db_session, "Joel Fagliano"))

        assert "Correct guesses: 3/4 (75.0%)" in text
        assert "1/1/2023, edited by Will Shortz  (rounds: 1/15/2024 #1)" in text
        assert "Pat Lee: 2/2 (100.0%)" in text


class TestEditorView:
    """Tests for resolve_editor_view()."""

    def test_editor(self, played_round, db_session):
        ctx = resolve_editor_view(db_session, "Will Shortz")

        assert ctx.kind == "editor"
        assert ctx.data["stats"]["puzzle_count"] == 1
        assert ctx.data["puzzles"][0]["constructors"] == ["Joel Fagliano"]

    def test_not_an_editor(self, played_round, db_session):
        with pytest.raises(ViewNotFoundError, match="No editor found with name 'Pat Lee'"):
            resolve_editor_view(db_session, "Pat Lee")

    def test_page(self, played_round, db_session):
        text = render_text(resolve_editor_view(db_session, "Will Shortz"))

        assert "1/1/2023 by Joel Fagliano  (rounds: 1/15/2024 #1)" in text
        assert "Sam Kim: 1/2 (50.0%)" in text


class TestPuzzleView:
    """Tests for resolve_puzzle_view()."""

    def test_puzzle(self, played_round, db_session):
        ctx = resolve_puzzle_view(db_session, "1/1/2023")

        assert ctx.kind == "puzzle"
        assert ctx.title == "Puzzle of 2023-01-01"
        assert ctx.data["puzzle"]["day_name"] == "Sunday"
        assert ctx.data["constructors"] == ["Joel Fagliano"]
        assert [c["reference"] for c in ctx.data["clues"]] == ["17A", "3D"]
        assert ctx.data["clues"][0]["round"]["round_number"] == 1

    def test_unknown_puzzle(self, played_round, db_session):
        with pytest.raises(ViewNotFoundError, match="No puzzle found for 2020-02-02"):
            resolve_puzzle_view(db_session, "2020-02-02")

    def test_page(self, played_round, db_session):
        text = render_text(resolve_puzzle_view(db_session, "1999-06-02"))

        assert "Date: Wednesday 6/2/1999" in text
        assert "Constructors: Pat Lee" in text
        assert "Editor: —" in text
        assert "[1/15/2024 #1, clue 3, 42A] Sailing (ASEA)" in text
        assert "Pat Lee: ✗ ALOE" in text
        assert "Pat Lee: 0/1 (0.0%)" in text
