#!/usr/bin/env python3
"""
export_manager.py
-----------------
CSV and ZIP export of the KEALOA database.

Every export writes exactly the columns the importer reads back, so an
exported bundle re-imports into an empty database unchanged.

Export Formats:
    1. **CSV**: one file per kind (persons, puzzles, rounds, clues, guesses)
       - Multi-valued fields (constructors, guessers, solution words)
         joined with ", "
       - UTF-8 with a leading BOM for spreadsheet applications
    2. **ZIP**: all five CSV files, named ``<kind>.csv``

Usage:
    exporter = ExportManager(logger=db.logger)

    with db.session_scope() as session:
        with open("rounds.csv", "w", newline="", encoding="utf-8") as fh:
            exporter.export_csv(session, "rounds", fh)

        stats = exporter.export_zip(session, Path("exports/kealoa.zip"))

Export Statistics:
    export_zip returns:
    {
        "output_path": "/path/to/kealoa.zip",
        "files": {"persons": 12, "rounds": 40, ...},   # rows per file
        "duration": 0.3,                                # seconds
    }
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import csv
import io
import zipfile
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, TextIO, Union

# --- Third party imports ---
from sqlalchemy.orm import Session

# --- Local imports ---
from kealoa.core.exceptions import ExportError
from kealoa.core.logging_manager import KealoaLogger
from .decorators import handle_db_errors, log_database_operation
from .models import Guess, Person, Puzzle, Round

UTF8_BOM = "\ufeff"

# Kinds in dependency order (the order the importer reads a bundle)
EXPORT_KINDS = ("persons", "puzzles", "rounds", "clues", "guesses")

EXPORT_COLUMNS: Dict[str, List[str]] = {
    "persons": [
        "full_name",
        "nicknames",
        "home_page_url",
        "image_url",
        "hide_xwordinfo",
        "xwordinfo_profile_name",
        "xwordinfo_image_url",
        "media_id",
    ],
    "puzzles": ["publication_date", "editor_name", "constructors"],
    "rounds": [
        "round_date",
        "round_number",
        "episode_number",
        "episode_id",
        "episode_url",
        "episode_start_seconds",
        "clue_giver",
        "guessers",
        "solution_words",
        "description",
        "description2",
    ],
    "clues": [
        "round_date",
        "round_number",
        "clue_number",
        "puzzle_date",
        "constructors",
        "puzzle_clue_number",
        "puzzle_clue_direction",
        "clue_text",
        "correct_answer",
    ],
    "guesses": [
        "round_date",
        "round_number",
        "clue_number",
        "guesser",
        "guessed_word",
        "is_correct",
    ],
}


def _cell(value: Any) -> Any:
    """CSV representation of a column value."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return int(value)
    if hasattr(value, "isoformat"):
        return value.isoformat()
    return value


def _names(people) -> str:
    return ", ".join(p.full_name for p in people)


class ExportManager:
    """
    Handles data export operations for the database.

    Stateless apart from the optional logger; every method takes the
    session to read from.
    """

    def __init__(self, logger: Optional[KealoaLogger] = None) -> None:
        """
        Initialize export manager.

        Args:
            logger: Optional logger for export operations
        """
        self.logger = logger

    # ---- Row builders ----
    def _rows(self, session: Session, kind: str) -> Iterator[List[Any]]:
        builders = {
            "persons": self._person_rows,
            "puzzles": self._puzzle_rows,
            "rounds": self._round_rows,
            "clues": self._clue_rows,
            "guesses": self._guess_rows,
        }
        if kind not in builders:
            raise ExportError(
                f"Unknown export kind '{kind}' (expected one of: {', '.join(EXPORT_KINDS)})"
            )
        return builders[kind](session)

    @staticmethod
    def _rounds(session: Session) -> List[Round]:
        return session.query(Round).order_by(Round.round_date, Round.round_number).all()

    @staticmethod
    def _person_rows(session: Session) -> Iterator[List[Any]]:
        for person in session.query(Person).order_by(Person.full_name):
            yield [
                person.full_name,
                person.nicknames,
                person.home_page_url,
                person.image_url,
                person.hide_xwordinfo,
                person.xwordinfo_profile_name,
                person.xwordinfo_image_url,
                person.media_id,
            ]

    @staticmethod
    def _puzzle_rows(session: Session) -> Iterator[List[Any]]:
        for puzzle in session.query(Puzzle).order_by(Puzzle.publication_date):
            yield [
                puzzle.publication_date,
                puzzle.editor.full_name if puzzle.editor else None,
                _names(puzzle.constructors),
            ]

    def _round_rows(self, session: Session) -> Iterator[List[Any]]:
        for rnd in self._rounds(session):
            yield [
                rnd.round_date,
                rnd.round_number,
                rnd.episode_number,
                rnd.episode_id,
                rnd.episode_url,
                rnd.episode_start_seconds or 0,
                rnd.clue_giver.full_name if rnd.clue_giver else None,
                _names(rnd.guessers),
                ", ".join(rnd.solution_words),
                rnd.description,
                rnd.description2,
            ]

    def _clue_rows(self, session: Session) -> Iterator[List[Any]]:
        for rnd in self._rounds(session):
            for clue in sorted(rnd.clues, key=lambda c: c.clue_number):
                puzzle = clue.puzzle
                yield [
                    rnd.round_date,
                    rnd.round_number,
                    clue.clue_number,
                    puzzle.publication_date if puzzle else None,
                    _names(puzzle.constructors) if puzzle else "",
                    clue.puzzle_clue_number,
                    clue.puzzle_clue_direction,
                    clue.clue_text,
                    clue.correct_answer,
                ]

    def _guess_rows(self, session: Session) -> Iterator[List[Any]]:
        for rnd in self._rounds(session):
            for clue in sorted(rnd.clues, key=lambda c: c.clue_number):
                guesses: List[Guess] = sorted(clue.guesses, key=lambda g: g.id)
                for guess in guesses:
                    yield [
                        rnd.round_date,
                        rnd.round_number,
                        clue.clue_number,
                        guess.guesser.full_name if guess.guesser else None,
                        guess.guessed_word,
                        guess.is_correct,
                    ]

    # ---- Exports ----
    @handle_db_errors
    @log_database_operation("export_csv")
    def export_csv(
        self, session: Session, kind: str, stream: TextIO, bom: bool = True
    ) -> int:
        """
        Write one kind as CSV to an open text stream.

        Args:
            session: SQLAlchemy session
            kind: persons, puzzles, rounds, clues or guesses
            stream: Text stream opened with newline=""
            bom: Write a UTF-8 BOM first (default: True)

        Returns:
            Number of data rows written

        Raises:
            ExportError: If the kind is unknown
        """
        rows = self._rows(session, kind)
        if bom:
            stream.write(UTF8_BOM)

        writer = csv.writer(stream)
        writer.writerow(EXPORT_COLUMNS[kind])
        count = 0
        for row in rows:
            writer.writerow([_cell(v) for v in row])
            count += 1

        if self.logger:
            self.logger.log_operation("csv_exported", {"kind": kind, "rows": count})
        return count

    def export_csv_file(
        self, session: Session, kind: str, output_path: Union[str, Path]
    ) -> int:
        """
        Write one kind as a CSV file.

        Returns:
            Number of data rows written

        Raises:
            ExportError: If the file cannot be written
        """
        path = Path(output_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", newline="", encoding="utf-8") as fh:
                return self.export_csv(session, kind, fh)
        except OSError as e:
            raise ExportError(f"Cannot write {path}: {e}") from e

    @handle_db_errors
    @log_database_operation("export_zip")
    def export_zip(self, session: Session, output_path: Union[str, Path]) -> Dict[str, Any]:
        """
        Write every kind into one ZIP archive.

        Args:
            session: SQLAlchemy session
            output_path: Target ZIP file

        Returns:
            Dictionary with output_path, rows per file and duration

        Raises:
            ExportError: If the archive cannot be written
        """
        start = datetime.now()
        path = Path(output_path)
        files: Dict[str, int] = {}

        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED) as archive:
                for kind in EXPORT_KINDS:
                    buffer = io.StringIO(newline="")
                    files[kind] = self.export_csv(session, kind, buffer)
                    archive.writestr(f"{kind}.csv", buffer.getvalue().encode("utf-8"))
        except OSError as e:
            raise ExportError(f"Cannot write {path}: {e}") from e

        stats = {
            "output_path": str(path),
            "files": files,
            "duration": (datetime.now() - start).total_seconds(),
        }
        if self.logger:
            self.logger.log_operation("zip_exported", stats)
        return stats
