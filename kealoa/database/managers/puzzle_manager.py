#!/usr/bin/env python3
"""
puzzle_manager.py
--------------------
Manages Puzzle entities and their ordered constructor credits.

A puzzle is keyed by publication date. Constructors and the editor are
Persons, resolved by name through PersonManager.get_or_create, so a name
seen for the first time becomes a new person.

Usage:
    puzzle_mgr = PuzzleManager(session, logger)

    puzzle = puzzle_mgr.create({
        "publication_date": "2024-01-05",
        "constructors": "Pat Lee, Sam Kim",
        "editor": "Will Shortz",
    })
    puzzle_mgr.set_constructors(puzzle, ["Sam Kim"])   # full rewrite
    puzzle_mgr.get(publication_date="1/5/2024")
    puzzle_mgr.fill_editors_by_date()                 # editors from EDITOR_DATE_RANGES
"""
from datetime import date
from typing import Any, Dict, List, Optional, Sequence, Union

from sqlalchemy.orm import Session

from kealoa.core.logging_manager import KealoaLogger
from kealoa.core.validators import DataValidator
from kealoa.core.exceptions import DatabaseError, ValidationError
from kealoa.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from kealoa.database.models import Person, Puzzle, PuzzleConstructor
from .base_manager import BaseManager
from .person_manager import PersonManager

PersonRef = Union[Person, str]

# NYT crossword editors by tenure; later entries win where ranges overlap
EDITOR_DATE_RANGES = [
    ("Margaret P. Farrar", date(1942, 2, 15), date(1969, 1, 5)),
    ("Will Weng", date(1969, 1, 6), date(1977, 2, 27)),
    ("Eugene T. Maleska", date(1977, 2, 28), date(1993, 9, 5)),
    ("Mel Taub", date(1993, 9, 6), date(1993, 11, 20)),
    ("Will Shortz", date(1993, 11, 21), date(2099, 12, 31)),
    ("Joel Fagliano", date(2024, 3, 14), date(2024, 12, 29)),
]


def editor_for_date(publication_date: Union[date, str]) -> Optional[str]:
    """
    Name of the editor in charge on a publication date.

    Examples:
        >>> editor_for_date("1985-06-01")
        'Eugene T. Maleska'
        >>> editor_for_date("2024-05-01")
        'Joel Fagliano'
        >>> editor_for_date("1930-01-01") is None
        True
    """
    pub_date = DataValidator.normalize_date(publication_date)
    if pub_date is None:
        return None
    name = None
    for editor, start, end in EDITOR_DATE_RANGES:
        if start <= pub_date <= end:
            name = editor
    return name


class PuzzleManager(BaseManager):
    """Manages Puzzle and PuzzleConstructor table operations."""

    def __init__(self, session: Session, logger: Optional[KealoaLogger] = None):
        super().__init__(session, logger)
        self.people = PersonManager(session, logger)

    @handle_db_errors
    @log_database_operation("get_puzzle")
    def get(
        self,
        publication_date: Optional[Union[date, str]] = None,
        puzzle_id: Optional[int] = None,
    ) -> Optional[Puzzle]:
        """
        Retrieve a puzzle by ID or publication date.

        Args:
            publication_date: Date object or any accepted date string
            puzzle_id: The puzzle ID (takes precedence)

        Returns:
            Puzzle if found, None otherwise

        Raises:
            ValidationError: If publication_date is not a valid date
        """
        if puzzle_id is not None:
            return self._get_by_id(Puzzle, puzzle_id)
        pub_date = DataValidator.normalize_date(publication_date)
        if pub_date is None:
            return None
        return self._get_by_field(Puzzle, "publication_date", pub_date)

    @handle_db_errors
    @log_database_operation("get_all_puzzles")
    def get_all(self) -> List[Puzzle]:
        """Retrieve all puzzles, oldest first."""
        return self._get_all(Puzzle, order_by="publication_date")

    @handle_db_errors
    @log_database_operation("create_puzzle")
    @validate_metadata(["publication_date"])
    def create(self, metadata: Dict[str, Any]) -> Puzzle:
        """
        Create a new puzzle.

        Args:
            metadata: Dictionary with required key:
                - publication_date: date or date string
                Optional keys:
                - constructors: names/Persons (list or comma-separated text)
                - editor: editor name or Person

        Returns:
            Created Puzzle object

        Raises:
            ValidationError: If the date is invalid
            DatabaseError: If a puzzle already exists for that date
        """
        pub_date = DataValidator.normalize_date(metadata["publication_date"])
        if self._exists(Puzzle, "publication_date", pub_date):
            raise DatabaseError(f"Puzzle already exists for {pub_date.isoformat()}")

        puzzle = Puzzle(publication_date=pub_date)
        self.session.add(puzzle)
        self.session.flush()

        if "editor" in metadata:
            self.set_editor(puzzle, metadata["editor"])
        if metadata.get("constructors"):
            self.set_constructors(puzzle, metadata["constructors"])
        return puzzle

    @handle_db_errors
    @log_database_operation("get_or_create_puzzle")
    def get_or_create(self, publication_date: Union[date, str]) -> Puzzle:
        """
        Resolve a publication date to a puzzle, creating an empty one if needed.

        Raises:
            ValidationError: If the date is missing or invalid
        """
        pub_date = DataValidator.normalize_date(publication_date)
        if pub_date is None:
            raise ValidationError("Puzzle publication date cannot be empty")
        return self._get_or_create(Puzzle, {"publication_date": pub_date})

    @handle_db_errors
    @log_database_operation("update_puzzle")
    def update(self, puzzle: Puzzle, metadata: Dict[str, Any]) -> Puzzle:
        """
        Update an existing puzzle.

        Args:
            puzzle: Puzzle to update
            metadata: Optional keys:
                - publication_date: new date
                - editor: name/Person; empty clears the editor
                - constructors: replaces the whole list (empty clears it)

        Returns:
            Updated Puzzle object
        """
        db_puzzle = self.session.get(Puzzle, puzzle.id)
        if db_puzzle is None:
            raise DatabaseError(f"Puzzle with id={puzzle.id} not found")

        if "publication_date" in metadata:
            new_date = DataValidator.normalize_date(metadata["publication_date"])
            if new_date and new_date != db_puzzle.publication_date:
                db_puzzle.publication_date = new_date
        if "editor" in metadata:
            self.set_editor(db_puzzle, metadata["editor"])
        if "constructors" in metadata:
            self.set_constructors(db_puzzle, metadata["constructors"] or [])

        self.session.flush()
        return db_puzzle

    def set_editor(self, puzzle: Puzzle, editor: Optional[PersonRef]) -> None:
        """Set the editor from a name or Person; an empty value clears it."""
        if isinstance(editor, Person):
            puzzle.editor = editor
        else:
            name = DataValidator.normalize_string(editor)
            puzzle.editor = self.people.get_or_create(name) if name else None
        self.session.flush()

    @handle_db_errors
    @log_database_operation("set_puzzle_constructors")
    def set_constructors(
        self, puzzle: Puzzle, constructors: Union[str, Sequence[PersonRef]]
    ) -> List[Person]:
        """
        Replace the constructor list of a puzzle.

        Names are resolved (or created) in order, repeated people are
        dropped, and credits are numbered from 1.

        Args:
            puzzle: Puzzle to update
            constructors: Names/Persons, or comma-separated text

        Returns:
            The constructors now credited, in order
        """
        people = self._resolve_people(constructors)

        puzzle.constructor_links.clear()
        self.session.flush()

        for order, person in enumerate(people, start=1):
            puzzle.constructor_links.append(
                PuzzleConstructor(person=person, constructor_order=order)
            )
        self.session.flush()
        return people

    @handle_db_errors
    @log_database_operation("fill_editors_by_date")
    def fill_editors_by_date(self, overwrite: bool = False) -> int:
        """
        Set puzzle editors from EDITOR_DATE_RANGES.

        Args:
            overwrite: Also replace editors that are already set

        Returns:
            Number of puzzles whose editor changed
        """
        updated = 0
        for puzzle in self.get_all():
            if puzzle.editor is not None and not overwrite:
                continue
            name = editor_for_date(puzzle.publication_date)
            if name is None:
                continue
            editor = self.people.get_or_create(name)
            if puzzle.editor is not editor:
                puzzle.editor = editor
                updated += 1
        self.session.flush()
        return updated

    @handle_db_errors
    @log_database_operation("delete_puzzle")
    def delete(self, puzzle: Puzzle) -> None:
        """
        Delete a puzzle and its constructor credits.

        Clues referencing the puzzle are left in place.
        """
        self.session.delete(puzzle)
        self.session.flush()

    def _resolve_people(self, refs: Union[str, Sequence[PersonRef]]) -> List[Person]:
        if isinstance(refs, str):
            items: List[PersonRef] = DataValidator.split_list(refs)
        else:
            items = [r for r in refs if isinstance(r, Person) or str(r).strip()]
        people: List[Person] = []
        for item in items:
            person = item if isinstance(item, Person) else self.people.get_or_create(item)
            if person not in people:
                people.append(person)
        return people
