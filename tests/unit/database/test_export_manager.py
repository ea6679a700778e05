"""Tests for ExportManager CSV and ZIP exports."""
import csv
import io
import zipfile

import pytest

from kealoa.core.exceptions import ExportError
from kealoa.database.export_manager import EXPORT_COLUMNS, EXPORT_KINDS, UTF8_BOM
from kealoa.database.manager import KealoaDB


def _export(export_manager, session, kind):
    buffer = io.StringIO(newline="")
    count = export_manager.export_csv(session, kind, buffer)
    return count, buffer.getvalue()


def _rows(text):
    return list(csv.DictReader(io.StringIO(text.lstrip(UTF8_BOM))))


class TestExportCsv:
    """Tests for export_csv()."""

    def test_bom_and_header(self, played_round, export_manager, db_session):
        """Output starts with a BOM and the importer's column names."""
        count, text = _export(export_manager, db_session, "persons")

        assert text.startswith(UTF8_BOM)
        assert text.lstrip(UTF8_BOM).splitlines()[0] == ",".join(EXPORT_COLUMNS["persons"])
        assert count == 5

    def test_no_bom(self, export_manager, db_session):
        buffer = io.StringIO(newline="")
        export_manager.export_csv(db_session, "rounds", buffer, bom=False)
        assert buffer.getvalue().startswith("round_date,")

    def test_round_row(self, played_round, export_manager, db_session):
        """Lists are joined with ', ' and the offset is in seconds."""
        _, text = _export(export_manager, db_session, "rounds")
        (row,) = _rows(text)

        assert row["round_date"] == "2024-01-15"
        assert row["round_number"] == "1"
        assert row["clue_giver"] == "Ben Zimmer"
        assert row["guessers"] == "Pat Lee, Sam Kim"
        assert row["solution_words"] == "KEA, LOA"
        assert row["episode_start_seconds"] == "750"
        assert row["episode_url"] == ""

    def test_clue_and_guess_rows(self, played_round, export_manager, db_session):
        _, clues = _export(export_manager, db_session, "clues")
        _, guesses = _export(export_manager, db_session, "guesses")

        clue_rows = _rows(clues)
        assert [r["correct_answer"] for r in clue_rows] == ["ERIE", "OREO", "ASEA"]
        assert clue_rows[0]["puzzle_date"] == "2023-01-01"
        assert clue_rows[0]["constructors"] == "Joel Fagliano"
        assert clue_rows[0]["puzzle_clue_direction"] == "A"

        guess_rows = _rows(guesses)
        assert len(guess_rows) == 5
        assert (guess_rows[1]["guesser"], guess_rows[1]["guessed_word"], guess_rows[1]["is_correct"]) == (
            "Sam Kim",
            "ONTARIO",
            "0",
        )

    def test_puzzle_without_editor(self, played_round, export_manager, db_session):
        _, text = _export(export_manager, db_session, "puzzles")
        rows = _rows(text)
        assert [(r["publication_date"], r["editor_name"]) for r in rows] == [
            ("1999-06-02", ""),
            ("2023-01-01", "Will Shortz"),
        ]

    def test_unknown_kind(self, export_manager, db_session):
        with pytest.raises(ExportError, match="Unknown export kind"):
            _export(export_manager, db_session, "episodes")

    def test_export_csv_file(self, played_round, export_manager, db_session, tmp_dir):
        """The file helper creates parent directories."""
        path = tmp_dir / "out" / "clues.csv"
        assert export_manager.export_csv_file(db_session, "clues", path) == 3
        assert path.read_bytes().startswith(UTF8_BOM.encode("utf-8"))


class TestExportZip:
    """Tests for export_zip()."""

    def test_zip_contents(self, played_round, export_manager, db_session, tmp_dir):
        stats = export_manager.export_zip(db_session, tmp_dir / "kealoa.zip")

        assert stats["files"] == {"persons": 5, "puzzles": 2, "rounds": 1, "clues": 3, "guesses": 5}
        with zipfile.ZipFile(stats["output_path"]) as archive:
            assert sorted(archive.namelist()) == sorted(f"{kind}.csv" for kind in EXPORT_KINDS)

    def test_zip_reimports_into_empty_database(
        self, played_round, export_manager, statistics, db_session, tmp_dir, test_alembic_dir
    ):
        """An exported bundle rebuilds the same data in a new database."""
        bundle = tmp_dir / "kealoa.zip"
        export_manager.export_zip(db_session, bundle)
        expected = statistics.person_stats(db_session, played_round["pat"].id).to_dict()

        with KealoaDB(tmp_dir / "copy.db", test_alembic_dir) as copy:
            with copy.session_scope() as session:
                result = copy.importer.import_zip(bundle)

                assert result.success is True
                assert result.errors == []
                assert result.imported == 16

                pat = copy.people.get(full_name="Pat Lee")
                copied = statistics.person_stats(session, pat.id).to_dict()
                expected["person_id"] = pat.id
                assert copied == expected
                assert copy.rounds.get(round_date="2024-01-15").solution_words == ["KEA", "LOA"]
