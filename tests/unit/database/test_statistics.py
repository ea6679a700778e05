"""
test_statistics.py
------------------
Tests for StatisticsAggregator and its numeric helpers, computed over the
played_round fixture (see conftest.py for the data).
"""
import pytest

from kealoa.database.statistics import (
    PersonStats,
    answer_length,
    calculate_mean,
    calculate_median,
    longest_streak,
    percentage,
)


class TestHelpers:
    """Tests for the numeric helpers."""

    @pytest.mark.parametrize(
        "values, expected", [([], 0), ([5], 5), ([2, 8], 5), ([1, 2, 3], 2), ([3, 1, 2], 2)]
    )
    def test_median(self, values, expected):
        """Median of empty, odd and even lists."""
        assert calculate_median(values) == expected

    def test_mean(self):
        """Mean is rounded to one decimal."""
        assert calculate_mean([]) == 0
        assert calculate_mean([1, 2, 2]) == 1.7

    def test_percentage(self):
        """Percentage is 0 for an empty total."""
        assert percentage(0, 0) == 0
        assert percentage(2, 3) == 66.7

    def test_answer_length_ignores_punctuation(self):
        """Only letters and digits count."""
        assert answer_length("A-TEAM") == 5
        assert answer_length("R2 D2") == 4
        assert answer_length(None) == 0

    def test_longest_streak(self):
        """Longest run of True values."""
        assert longest_streak([]) == 0
        assert longest_streak([True, True, False, True]) == 2
        assert longest_streak([False, False]) == 0


class TestPersonStats:
    """Tests for person_stats()."""

    def test_guesser_record(self, played_round, statistics, db_session):
        """Pat answered 3 clues and got 2 right in one round."""
        stats = statistics.person_stats(db_session, played_round["pat"].id)

        assert stats.rounds_played == 1
        assert stats.total_clues_answered == 3
        assert stats.total_correct == 2
        assert stats.overall_percentage == 66.7
        assert (stats.min_correct, stats.max_correct) == (2, 2)
        assert stats.mean_correct == 2.0
        assert stats.median_correct == 2
        assert stats.mean_percentage == 66.7
        assert stats.best_streak == 2

    def test_second_guesser(self, played_round, statistics, db_session):
        """Sam answered 2 clues and got 1 right."""
        stats = statistics.person_stats(db_session, played_round["sam"].id)

        assert stats.total_clues_answered == 2
        assert stats.total_correct == 1
        assert stats.overall_percentage == 50.0
        assert stats.best_streak == 1

    def test_person_without_history(self, played_round, statistics, db_session):
        """The clue giver has an all-zero record."""
        stats = statistics.person_stats(db_session, played_round["ben"].id)
        assert stats == PersonStats(person_id=played_round["ben"].id)

    def test_unassigned_guesses_ignored(self, played_round, statistics, guess_manager, db_session):
        """A guess by someone who is not a guesser of the round does not count."""
        ben = played_round["ben"]
        guess_manager.set_guess(played_round["clues"][0], ben, "ERIE")

        stats = statistics.person_stats(db_session, ben.id)
        assert stats.total_clues_answered == 0
        assert stats.rounds_played == 0


class TestBreakdowns:
    """Tests for the per-person breakdowns."""

    @staticmethod
    def _counts(rows):
        return [(r["key"], r["correct_count"], r["total_answered"]) for r in rows]

    def test_by_clue_number(self, played_round, statistics, db_session):
        rows = statistics.results_by_clue_number(db_session, played_round["pat"].id)
        assert self._counts(rows) == [(1, 1, 1), (2, 1, 1), (3, 0, 1)]

    def test_by_direction(self, played_round, statistics, db_session):
        rows = statistics.results_by_direction(db_session, played_round["pat"].id)
        assert self._counts(rows) == [("A", 1, 2), ("D", 1, 1)]
        assert rows[0]["percentage"] == 50.0

    def test_by_day_of_week_monday_first(self, played_round, statistics, db_session):
        """Wednesday (4) comes before Sunday (1)."""
        rows = statistics.results_by_day_of_week(db_session, played_round["pat"].id)
        assert self._counts(rows) == [(4, 0, 1), (1, 2, 2)]

    def test_by_decade(self, played_round, statistics, db_session):
        rows = statistics.results_by_decade(db_session, played_round["pat"].id)
        assert self._counts(rows) == [(1990, 0, 1), (2020, 2, 2)]

    def test_by_answer_length(self, played_round, statistics, db_session):
        rows = statistics.results_by_answer_length(db_session, played_round["pat"].id)
        assert self._counts(rows) == [(4, 2, 3)]

    def test_by_constructor_best_first(self, played_round, statistics, db_session):
        """Constructors are ordered by accuracy and carry their person id."""
        rows = statistics.results_by_constructor(db_session, played_round["pat"].id)

        assert self._counts(rows) == [("Joel Fagliano", 2, 2), ("Pat Lee", 0, 1)]
        assert rows[1]["person_id"] == played_round["pat"].id

    def test_co_constructors_each_counted(self, played_round, statistics, puzzle_manager, db_session):
        """A co-constructed puzzle counts once per constructor."""
        puzzle_manager.set_constructors(played_round["puzzles"][0], "Joel Fagliano, Sam Kim")

        rows = statistics.results_by_constructor(db_session, played_round["pat"].id)
        assert ("Sam Kim", 2, 2) in self._counts(rows)

    def test_by_editor(self, played_round, statistics, db_session):
        """Puzzles without an editor group under 'Unknown'."""
        rows = statistics.results_by_editor(db_session, played_round["pat"].id)
        assert self._counts(rows) == [("Will Shortz", 2, 2), ("Unknown", 0, 1)]

    def test_by_year(self, played_round, statistics, db_session):
        rows = statistics.results_by_year(db_session, played_round["pat"].id)

        assert self._counts(rows) == [(2024, 2, 3)]
        assert rows[0]["rounds_played"] == 1
        assert rows[0]["best_score"] == 2
        assert rows[0]["best_streak"] == 2

    def test_empty_breakdowns(self, played_round, statistics, db_session):
        """A person with no counted guesses gets empty lists."""
        ben_id = played_round["ben"].id
        assert statistics.results_by_direction(db_session, ben_id) == []
        assert statistics.results_by_constructor(db_session, ben_id) == []
        assert statistics.results_by_editor(db_session, ben_id) == []


class TestRoundsAndTables:
    """Tests for round summaries and the guesser table."""

    def test_round_guesser_results(self, played_round, statistics, db_session):
        """Guessers are listed by name with their counts."""
        results = statistics.round_guesser_results(db_session, played_round["round"].id)

        assert [(r["full_name"], r["total_guesses"], r["correct_guesses"]) for r in results] == [
            ("Pat Lee", 3, 2),
            ("Sam Kim", 2, 1),
        ]

    def test_guesser_without_guesses_listed(self, played_round, statistics, round_manager, db_session):
        """An assigned guesser who answered nothing shows zeros."""
        rnd = played_round["round"]
        round_manager.set_guessers(rnd, "Pat Lee, Sam Kim, Lee Ann")

        results = statistics.round_guesser_results(db_session, rnd.id)
        assert results[0]["full_name"] == "Lee Ann"
        assert (results[0]["total_guesses"], results[0]["correct_guesses"]) == (0, 0)

    def test_rounds_overview(self, played_round, statistics, db_session):
        assert statistics.rounds_overview(db_session) == {
            "total_rounds": 1,
            "total_clues": 3,
            "total_guesses": 5,
            "total_correct": 3,
            "accuracy": 60.0,
        }

    def test_rounds_overview_empty(self, statistics, db_session):
        """An empty database has zero accuracy."""
        overview = statistics.rounds_overview(db_session)
        assert overview["total_rounds"] == 0
        assert overview["accuracy"] == 0

    def test_rounds_stats_by_year(self, played_round, statistics, db_session):
        assert statistics.rounds_stats_by_year(db_session) == [
            {"year": 2024, "total_rounds": 1, "total_clues": 3, "total_guesses": 5, "total_correct": 3}
        ]

    def test_person_round_history(self, played_round, statistics, db_session):
        history = statistics.person_round_history(db_session, played_round["sam"].id)

        assert len(history) == 1
        assert history[0]["total_clues"] == 3
        assert history[0]["correct_count"] == 1
        assert history[0]["episode_number"] == 101

    def test_persons_with_stats(self, played_round, statistics, db_session):
        """Only assigned guessers appear."""
        rows = statistics.persons_with_stats(db_session)
        assert [
            (r["full_name"], r["rounds_played"], r["clues_guessed"], r["correct_guesses"])
            for r in rows
        ] == [("Pat Lee", 1, 3, 2), ("Sam Kim", 1, 2, 1)]


class TestConstructorsAndEditors:
    """Tests for constructor, editor, clue giver and puzzle aggregates."""

    def test_constructors_with_stats(self, played_round, statistics, db_session):
        """Every credited constructor appears, ordered by name."""
        rows = statistics.constructors_with_stats(db_session)

        assert [
            (r["full_name"], r["puzzle_count"], r["clue_count"], r["total_guesses"], r["correct_guesses"])
            for r in rows
        ] == [("Joel Fagliano", 1, 2, 4, 3), ("Pat Lee", 1, 1, 1, 0)]
        assert rows[0]["percentage"] == 75.0

    def test_constructor_stats(self, played_round, statistics, person_manager, db_session):
        joel = person_manager.get(full_name="Joel Fagliano")

        assert statistics.constructor_stats(db_session, joel.id) == {
            "puzzle_count": 1,
            "clue_count": 2,
            "total_guesses": 4,
            "correct_guesses": 3,
            "percentage": 75.0,
        }

    def test_constructor_stats_without_puzzles(self, played_round, statistics, db_session):
        """Someone who never constructed gets zeros."""
        stats = statistics.constructor_stats(db_session, played_round["ben"].id)
        assert stats["puzzle_count"] == 0
        assert stats["percentage"] == 0

    def test_constructor_player_results(self, played_round, statistics, person_manager, db_session):
        """Best percentage first."""
        joel = person_manager.get(full_name="Joel Fagliano")

        rows = statistics.constructor_player_results(db_session, joel.id)

        assert [(r["full_name"], r["correct_count"], r["total_answered"]) for r in rows] == [
            ("Pat Lee", 2, 2),
            ("Sam Kim", 1, 2),
        ]
        assert rows[1]["percentage"] == 50.0

    def test_constructor_player_results_skip_unassigned(
        self, played_round, statistics, guess_manager, person_manager, db_session
    ):
        """Guesses from people outside the round do not count."""
        guess_manager.set_guess(played_round["clues"][0], played_round["ben"], "ERIE")
        joel = person_manager.get(full_name="Joel Fagliano")

        names = [r["full_name"] for r in statistics.constructor_player_results(db_session, joel.id)]
        assert names == ["Pat Lee", "Sam Kim"]

    def test_editors_with_stats(self, played_round, statistics, db_session):
        """Puzzles without an editor are left out."""
        rows = statistics.editors_with_stats(db_session)

        assert len(rows) == 1
        assert rows[0]["full_name"] == "Will Shortz"
        assert (rows[0]["puzzle_count"], rows[0]["clues_guessed"], rows[0]["correct_guesses"]) == (1, 4, 3)

    def test_editor_stats_and_results(self, played_round, statistics, person_manager, db_session):
        will = person_manager.get(full_name="Will Shortz")

        assert statistics.editor_stats(db_session, will.id)["clue_count"] == 2
        rows = statistics.editor_player_results(db_session, will.id)
        assert [r["full_name"] for r in rows] == ["Pat Lee", "Sam Kim"]

    def test_puzzle_player_results(self, played_round, statistics, db_session):
        wednesday = played_round["puzzles"][1]

        assert statistics.puzzle_player_results(db_session, wednesday.id) == [
            {
                "person_id": played_round["pat"].id,
                "full_name": "Pat Lee",
                "total_answered": 1,
                "correct_count": 0,
                "percentage": 0,
            }
        ]

    def test_clue_givers_with_stats(self, played_round, statistics, db_session):
        rows = statistics.clue_givers_with_stats(db_session)

        assert [(r["full_name"], r["rounds_given"], r["clue_count"], r["total_guesses"]) for r in rows] == [
            ("Ben Zimmer", 1, 3, 5)
        ]
        assert rows[0]["percentage"] == 60.0


class TestLeaderboards:
    """Tests for highest_round_scores() and longest_streaks()."""

    @pytest.fixture
    def second_round(self, played_round, round_manager, clue_manager, guess_manager):
        """Pat answers both clues of a February round; Lee Ann misses hers."""
        rnd = round_manager.create(
            {
                "round_date": "2024-02-01",
                "episode_number": 102,
                "clue_giver": "Ben Zimmer",
                "guessers": "Pat Lee, Lee Ann",
            }
        )
        first = clue_manager.create(
            {"round": rnd, "clue_number": 1, "clue_text": "Pitcher", "correct_answer": "EWER"}
        )
        second = clue_manager.create(
            {"round": rnd, "clue_number": 2, "clue_text": "Sheltered side", "correct_answer": "LEE"}
        )
        lee_ann = round_manager.people.get(full_name="Lee Ann")
        guess_manager.set_guess(first, played_round["pat"], "ewer")
        guess_manager.set_guess(second, played_round["pat"], "lee")
        guess_manager.set_guess(first, lee_ann, "urn")
        return {"round": rnd, "lee_ann": lee_ann}

    def test_highest_round_scores(self, played_round, statistics, db_session):
        scores = statistics.highest_round_scores(db_session)
        round_id = played_round["round"].id

        assert scores == {
            played_round["pat"].id: {"value": 2, "round_ids": [round_id]},
            played_round["sam"].id: {"value": 1, "round_ids": [round_id]},
        }

    def test_longest_streaks(self, played_round, statistics, db_session):
        streaks = statistics.longest_streaks(db_session)

        assert streaks[played_round["pat"].id]["value"] == 2
        assert streaks[played_round["sam"].id]["value"] == 1

    def test_ties_list_every_round(self, played_round, second_round, statistics, db_session):
        """Rounds that equal the best are all listed."""
        pat_id = played_round["pat"].id
        expected = [played_round["round"].id, second_round["round"].id]

        assert statistics.highest_round_scores(db_session)[pat_id]["round_ids"] == expected
        assert statistics.longest_streaks(db_session)[pat_id]["round_ids"] == expected

    def test_never_correct(self, played_round, second_round, statistics, db_session):
        """A zero score is listed; a zero streak is not."""
        lee_id = second_round["lee_ann"].id

        assert statistics.highest_round_scores(db_session)[lee_id]["value"] == 0
        assert lee_id not in statistics.longest_streaks(db_session)

    def test_streak_matches_person_stats(self, played_round, statistics, db_session):
        pat_id = played_round["pat"].id
        assert (
            statistics.longest_streaks(db_session)[pat_id]["value"]
            == statistics.person_stats(db_session, pat_id).best_streak
        )
