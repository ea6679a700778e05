#!/usr/bin/env python3
"""
csv_importer.py
---------------
Import KEALOA reference data from CSV files and ZIP bundles.

Each data row is reconciled against the database: a row whose natural key
is already present is skipped (or updated with ``overwrite``), a new key is
created, and any Person or Puzzle the row names but the database lacks is
created on the spot. Rounds are the exception: clue and guess rows must
point at an existing round.

Row problems never abort a file. Every row runs inside its own savepoint;
a failing row is rolled back, reported as ``"Line N: reason"`` and skipped,
and the next row continues. Line numbers count the header as line 1.

Supported files (columns beyond these are ignored):
    persons.csv   full_name, home_page_url [, nicknames, image_url,
                  hide_xwordinfo, xwordinfo_profile_name,
                  xwordinfo_image_url, media_id]
    puzzles.csv   publication_date, constructors [, editor_name]
    rounds.csv    round_date, episode_number, clue_giver, episode_url,
                  episode_start_seconds, guessers, solution_words,
                  description [, round_number, episode_id,
                  episode_start_time, description2]
    clues.csv     round_date, clue_number, puzzle_date, puzzle_clue_number,
                  puzzle_clue_direction, clue_text, correct_answer
                  [, round_number, constructors, guesser, guess]
    guesses.csv   round_date, clue_number, guesser, guessed_word
                  [, round_number]

A ZIP bundle may hold any of these files; they are imported in the order
above so that every reference resolves.

Usage:
    with db.session_scope() as session:
        importer = CsvImporter(session, logger)
        result = importer.import_rounds("data/rounds.csv")
        print(result.imported, result.skipped, result.errors)

        bundle = importer.import_zip("kealoa-export.zip", overwrite=True)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import csv
import io
import zipfile
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

# --- Third party imports ---
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

# --- Local imports ---
from kealoa.core.exceptions import CsvImportError, DatabaseError, ValidationError
from kealoa.core.logging_manager import KealoaLogger, safe_logger
from kealoa.core.validators import DataValidator
from kealoa.database.managers import (
    ClueManager,
    GuessManager,
    PersonManager,
    PuzzleManager,
    RoundManager,
)
from kealoa.database.managers.round_manager import normalize_round_number

Row = Dict[str, str]
Source = Union[str, Path]

# Import kinds in dependency order, with their display labels
IMPORT_ORDER = [
    ("persons", "Persons"),
    ("puzzles", "Puzzles"),
    ("rounds", "Rounds"),
    ("clues", "Clues"),
    ("guesses", "Guesses"),
]

PERSON_COLUMNS = [
    "full_name",
    "nicknames",
    "home_page_url",
    "image_url",
    "hide_xwordinfo",
    "xwordinfo_profile_name",
    "xwordinfo_image_url",
    "media_id",
]

ROUND_COLUMNS = ["episode_id", "episode_url", "description", "description2"]

STATUS_IMPORTED = "imported"
STATUS_SKIPPED = "skipped"


class RowError(Exception):
    """A row that is skipped with an error message."""


@dataclass
class ImportResult:
    """Outcome of importing one CSV file."""

    imported: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ZipImportResult:
    """
    Outcome of importing a ZIP bundle.

    Attributes:
        success: True when anything was imported or no errors occurred
        imported: Rows imported across all files
        skipped: Rows skipped across all files
        errors: Row errors prefixed with the file label ("Rounds: Line 3: ...")
        details: Per kind: label, imported, skipped, status and, for files
            missing from the bundle, a message
    """

    success: bool = True
    imported: int = 0
    skipped: int = 0
    errors: List[str] = field(default_factory=list)
    details: Dict[str, Dict[str, Any]] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ----- CSV reading -----
def decode_csv_bytes(raw: bytes) -> str:
    """
    Decode CSV bytes, dropping a UTF-8 BOM.

    Text that is not valid UTF-8 is read as Windows-1252, the encoding
    spreadsheet applications usually fall back to.
    """
    try:
        return raw.decode("utf-8-sig")
    except UnicodeDecodeError:
        return raw.decode("cp1252", errors="replace")


def parse_csv_text(text: str, source: str = "<text>") -> List[Row]:
    """
    Parse CSV text into trimmed row dictionaries keyed by header.

    Blank lines are dropped, short rows are padded with empty strings and
    long rows are cut to the header width.

    Args:
        text: CSV content (a leading BOM is ignored)
        source: Name used in error messages

    Returns:
        List of rows in file order

    Raises:
        CsvImportError: If there is no header row
    """
    reader = csv.reader(io.StringIO(text.lstrip("\ufeff"), newline=""))
    headers = next(reader, None)
    if not headers or not any(h.strip() for h in headers):
        raise CsvImportError(f"CSV file has no header row: {source}")

    headers = [h.strip() for h in headers]
    width = len(headers)
    rows: List[Row] = []

    for values in reader:
        if not values or all(not v.strip() for v in values):
            continue
        values = (values + [""] * width)[:width]
        rows.append(dict(zip(headers, (v.strip() for v in values))))
    return rows


def read_csv_rows(file_path: Source) -> List[Row]:
    """
    Read a CSV file into row dictionaries.

    Raises:
        CsvImportError: If the file is missing, unreadable or has no header
    """
    path = Path(file_path)
    if not path.is_file():
        raise CsvImportError(f"File not found: {path}")
    try:
        raw = path.read_bytes()
    except OSError as e:
        raise CsvImportError(f"Cannot read {path}: {e}") from e
    return parse_csv_text(decode_csv_bytes(raw), source=str(path))


def _has(row: Row, column: str) -> bool:
    return bool(row.get(column, "").strip())


# ----- Importer -----
class CsvImporter:
    """
    Reconciles CSV rows with the database within one session.

    All lookups and inserts share the session, so a person first seen
    halfway through a file resolves to that same record on later rows.

    Attributes:
        session: SQLAlchemy session all rows are written to
        logger: Optional logger (start/complete operations, row warnings)
    """

    def __init__(self, session: Session, logger: Optional[KealoaLogger] = None) -> None:
        self.session = session
        self.logger = logger

        self.people = PersonManager(session, logger)
        self.puzzles = PuzzleManager(session, logger)
        self.rounds = RoundManager(session, logger)
        self.clues = ClueManager(session, logger)
        self.guesses = GuessManager(session, logger)

        self._handlers: Dict[str, Callable[[Row, int, bool], str]] = {
            "persons": self._import_person_row,
            "puzzles": self._import_puzzle_row,
            "rounds": self._import_round_row,
            "clues": self._import_clue_row,
            "guesses": self._import_guess_row,
        }

    # ---- Public file-level API ----
    def import_persons(self, source: Source, overwrite: bool = False) -> ImportResult:
        """Import persons.csv."""
        return self.import_file("persons", source, overwrite)

    def import_puzzles(self, source: Source, overwrite: bool = False) -> ImportResult:
        """Import puzzles.csv."""
        return self.import_file("puzzles", source, overwrite)

    def import_rounds(self, source: Source, overwrite: bool = False) -> ImportResult:
        """Import rounds.csv."""
        return self.import_file("rounds", source, overwrite)

    def import_clues(self, source: Source, overwrite: bool = False) -> ImportResult:
        """Import clues.csv."""
        return self.import_file("clues", source, overwrite)

    def import_guesses(self, source: Source, overwrite: bool = False) -> ImportResult:
        """Import guesses.csv."""
        return self.import_file("guesses", source, overwrite)

    def import_file(self, kind: str, source: Source, overwrite: bool = False) -> ImportResult:
        """
        Import one CSV file of the given kind.

        Args:
            kind: persons, puzzles, rounds, clues or guesses
            source: Path of the CSV file
            overwrite: Update rows whose natural key already exists

        Returns:
            ImportResult with imported/skipped counts and row errors

        Raises:
            CsvImportError: If the kind is unknown or the file cannot be read
        """
        self._check_kind(kind)
        self._log_start(kind, str(source))
        rows = read_csv_rows(source)
        return self.import_rows(kind, rows, overwrite)

    def import_rows(self, kind: str, rows: List[Row], overwrite: bool = False) -> ImportResult:
        """
        Reconcile already-parsed rows of the given kind.

        Args:
            kind: persons, puzzles, rounds, clues or guesses
            rows: Trimmed row dictionaries, in file order
            overwrite: Update rows whose natural key already exists

        Returns:
            ImportResult for these rows
        """
        handler = self._handlers[self._check_kind(kind)]
        result = ImportResult()
        log = safe_logger(self.logger)

        for index, row in enumerate(rows):
            line = index + 2
            try:
                with self.session.begin_nested():
                    status = handler(row, index, overwrite)
            except (RowError, ValidationError) as e:
                self._record_error(result, line, str(e))
                continue
            except (DatabaseError, SQLAlchemyError) as e:
                log.log_error(e, {"operation": f"import_{kind}", "line": line})
                self._record_error(result, line, f"Failed to insert {kind[:-1]}")
                continue

            if status == STATUS_IMPORTED:
                result.imported += 1
            else:
                result.skipped += 1

        self._log_completion(kind, result)
        return result

    def import_zip(self, zip_path: Source, overwrite: bool = False) -> ZipImportResult:
        """
        Import every known CSV file found in a ZIP bundle.

        Files are read by base name, so a bundle whose CSVs sit in a
        sub-folder imports the same way.

        Args:
            zip_path: Path of the ZIP file
            overwrite: Passed to each file import

        Returns:
            ZipImportResult

        Raises:
            CsvImportError: If the ZIP cannot be opened
        """
        path = Path(zip_path)
        if not path.is_file():
            raise CsvImportError(f"File not found: {path}")

        bundle = ZipImportResult()
        self._log_start("zip", str(path))

        try:
            with zipfile.ZipFile(path) as archive:
                members = {
                    Path(name).name: name
                    for name in archive.namelist()
                    if not name.endswith("/")
                }
                contents = {
                    kind: archive.read(members[f"{kind}.csv"])
                    for kind, _ in IMPORT_ORDER
                    if f"{kind}.csv" in members
                }
        except (zipfile.BadZipFile, OSError) as e:
            raise CsvImportError(f"Could not open ZIP file {path}: {e}") from e

        for kind, label in IMPORT_ORDER:
            if kind not in contents:
                bundle.details[kind] = {
                    "label": label,
                    "imported": 0,
                    "skipped": 0,
                    "status": "skipped",
                    "message": f"{kind}.csv not found in ZIP file",
                }
                continue

            try:
                rows = parse_csv_text(decode_csv_bytes(contents[kind]), f"{kind}.csv")
            except CsvImportError as e:
                result = ImportResult(errors=[str(e)])
            else:
                result = self.import_rows(kind, rows, overwrite)

            bundle.imported += result.imported
            bundle.skipped += result.skipped
            bundle.errors.extend(f"{label}: {error}" for error in result.errors)
            bundle.details[kind] = {
                "label": label,
                "imported": result.imported,
                "skipped": result.skipped,
                "status": "success" if result.imported > 0 or not result.errors else "error",
            }

        bundle.success = bundle.imported > 0 or not bundle.errors
        if self.logger:
            self.logger.log_operation(
                "import_zip_complete",
                {
                    "file": str(path),
                    "imported": bundle.imported,
                    "skipped": bundle.skipped,
                    "errors": len(bundle.errors),
                },
            )
        return bundle

    # ---- Row handlers ----
    def _import_person_row(self, row: Row, index: int, overwrite: bool) -> str:
        if not _has(row, "full_name"):
            raise RowError("Missing full_name")

        metadata = {column: row[column] for column in PERSON_COLUMNS if column in row}
        existing = self.people.get(full_name=row["full_name"])
        if existing:
            if not overwrite:
                return STATUS_SKIPPED
            self.people.update(existing, metadata)
        else:
            self.people.create(metadata)
        return STATUS_IMPORTED

    def _import_puzzle_row(self, row: Row, index: int, overwrite: bool) -> str:
        if not _has(row, "publication_date"):
            raise RowError("Missing publication_date")

        pub_date = DataValidator.normalize_date(row["publication_date"])
        metadata: Dict[str, Any] = {}
        if "editor_name" in row:
            metadata["editor"] = row["editor_name"]
        if _has(row, "constructors"):
            metadata["constructors"] = row["constructors"]

        existing = self.puzzles.get(publication_date=pub_date)
        if existing:
            if not overwrite:
                return STATUS_SKIPPED
            self.puzzles.update(existing, metadata)
        else:
            self.puzzles.create({"publication_date": pub_date, **metadata})
        return STATUS_IMPORTED

    def _import_round_row(self, row: Row, index: int, overwrite: bool) -> str:
        if not all(_has(row, c) for c in ("round_date", "episode_number", "clue_giver")):
            raise RowError("Missing required field (round_date, episode_number, or clue_giver)")

        round_date = DataValidator.normalize_date(row["round_date"])
        round_number = normalize_round_number(row.get("round_number"))

        metadata: Dict[str, Any] = {
            "round_date": round_date,
            "round_number": round_number,
            "episode_number": row["episode_number"],
            "clue_giver": row["clue_giver"],
        }
        metadata.update({c: row[c] for c in ROUND_COLUMNS if c in row})
        if _has(row, "episode_start_time"):
            metadata["episode_start_seconds"] = row["episode_start_time"]
        elif "episode_start_seconds" in row:
            metadata["episode_start_seconds"] = row["episode_start_seconds"]
        if _has(row, "guessers"):
            metadata["guessers"] = row["guessers"]
        if _has(row, "solution_words"):
            metadata["solution_words"] = row["solution_words"]

        existing = self.rounds.get(round_date=round_date, round_number=round_number)
        if existing:
            if not overwrite:
                return STATUS_SKIPPED
            self.rounds.update(existing, metadata)
        else:
            self.rounds.create(metadata)
        return STATUS_IMPORTED

    def _import_clue_row(self, row: Row, index: int, overwrite: bool) -> str:
        missing = DataValidator.missing_fields(row, ["round_date", "clue_text", "correct_answer"])
        if missing:
            raise RowError(f"Missing required fields: {', '.join(missing)}")

        rnd = self._find_round(row)
        clue_number = DataValidator.normalize_int(row.get("clue_number")) or index + 1

        metadata: Dict[str, Any] = {
            "round": rnd,
            "clue_number": clue_number,
            "puzzle": None,
            "puzzle_clue_number": row.get("puzzle_clue_number"),
            "puzzle_clue_direction": row.get("puzzle_clue_direction"),
            "clue_text": row["clue_text"],
            "correct_answer": row["correct_answer"],
        }
        if _has(row, "puzzle_date"):
            puzzle_date = DataValidator.normalize_date(row["puzzle_date"])
            puzzle = self.puzzles.get_or_create(puzzle_date)
            constructors = row.get("constructors") or row.get("constructor")
            if constructors:
                self.puzzles.set_constructors(puzzle, constructors)
            metadata["puzzle"] = puzzle

        existing = self.clues.get(rnd=rnd, clue_number=clue_number)
        if existing:
            if not overwrite:
                return STATUS_SKIPPED
            clue = self.clues.update(existing, metadata)
        else:
            clue = self.clues.create(metadata)

        if _has(row, "guesser") and _has(row, "guess"):
            guesser = self.people.get_or_create(row["guesser"])
            self.guesses.set_guess(clue, guesser, row["guess"])
        return STATUS_IMPORTED

    def _import_guess_row(self, row: Row, index: int, overwrite: bool) -> str:
        missing = DataValidator.missing_fields(
            row, ["round_date", "clue_number", "guesser", "guessed_word"]
        )
        if missing:
            raise RowError(f"Missing required fields: {', '.join(missing)}")

        rnd = self._find_round(row)
        clue = self.clues.get(rnd=rnd, clue_number=row["clue_number"])
        if clue is None:
            raise RowError(
                f"Clue #{row['clue_number']} not found for round {row['round_date']}"
            )

        guesser = self.people.get(full_name=row["guesser"])
        if guesser is None:
            raise RowError(f"Player '{row['guesser']}' not found")

        if not overwrite and self.guesses.get(clue=clue, person=guesser):
            return STATUS_SKIPPED
        self.guesses.set_guess(clue, guesser, row["guessed_word"])
        return STATUS_IMPORTED

    def _find_round(self, row: Row):
        round_date = DataValidator.normalize_date(row["round_date"])
        round_number = normalize_round_number(row.get("round_number"))
        rnd = self.rounds.get(round_date=round_date, round_number=round_number)
        if rnd is None:
            raise RowError(
                f"Round not found for date {round_date.isoformat()} round #{round_number}"
            )
        return rnd

    # ---- Helpers ----
    def _check_kind(self, kind: str) -> str:
        if kind not in self._handlers:
            known = ", ".join(k for k, _ in IMPORT_ORDER)
            raise CsvImportError(f"Unknown import kind '{kind}' (expected one of: {known})")
        return kind

    def _record_error(self, result: ImportResult, line: int, reason: str) -> None:
        message = f"Line {line}: {reason}"
        result.errors.append(message)
        result.skipped += 1
        safe_logger(self.logger).log_warning(message)

    def _log_start(self, kind: str, source: str) -> None:
        """Log import operation start."""
        if self.logger:
            self.logger.log_operation(f"import_{kind}_start", {"file": source})

    def _log_completion(self, kind: str, result: ImportResult) -> None:
        """Log import operation completion."""
        if self.logger:
            self.logger.log_operation(
                f"import_{kind}_complete",
                {
                    "imported": result.imported,
                    "skipped": result.skipped,
                    "errors": len(result.errors),
                },
            )
