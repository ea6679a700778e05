#!/usr/bin/env python3
"""
person_manager.py
--------------------
Manages Person entities.

A person is identified for lookup purposes by full_name, compared
case-insensitively after trimming. Roles are never stored on the row:
get_roles() answers them from the tables that reference the person.

Key Features:
    - CRUD operations for persons
    - Case-insensitive name resolution with get_or_create
    - Role derivation (player, clue giver, constructor, editor)
    - Delete guard while the person is still referenced

Usage:
    person_mgr = PersonManager(session, logger)

    pat = person_mgr.create({"full_name": "Pat Lee", "home_page_url": "https://pat.example"})
    same = person_mgr.get(full_name="pat lee")      # case-insensitive
    sam = person_mgr.get_or_create("Sam Kim")        # created on first sight

    person_mgr.get_roles(pat)                        # ['player', 'clue_giver']
"""
from typing import Any, Dict, List, Optional

from kealoa.core.validators import DataValidator
from kealoa.core.exceptions import DatabaseError, ValidationError
from kealoa.database.decorators import (
    handle_db_errors,
    log_database_operation,
    validate_metadata,
)
from kealoa.database.models import (
    Guess,
    Person,
    Puzzle,
    PuzzleConstructor,
    Round,
    RoundGuesser,
)
from .base_manager import BaseManager

PERSON_FIELDS = [
    ("full_name", DataValidator.normalize_string),
    ("nicknames", DataValidator.normalize_string, True),
    ("home_page_url", DataValidator.normalize_string, True),
    ("image_url", DataValidator.normalize_string, True),
    ("media_id", DataValidator.normalize_int, True),
    ("hide_xwordinfo", DataValidator.normalize_bool),
    ("xwordinfo_profile_name", DataValidator.normalize_string, True),
    ("xwordinfo_image_url", DataValidator.normalize_string, True),
]

ROLE_PLAYER = "player"
ROLE_CLUE_GIVER = "clue_giver"
ROLE_CONSTRUCTOR = "constructor"
ROLE_EDITOR = "editor"


class PersonManager(BaseManager):
    """Manages Person table operations."""

    @handle_db_errors
    @log_database_operation("person_exists")
    def exists(
        self, full_name: Optional[str] = None, person_id: Optional[int] = None
    ) -> bool:
        """
        Check if a person exists.

        Args:
            full_name: Name to match case-insensitively
            person_id: The person ID

        Returns:
            True if person exists, False otherwise
        """
        return self.get(full_name=full_name, person_id=person_id) is not None

    @handle_db_errors
    @log_database_operation("get_person")
    def get(
        self, full_name: Optional[str] = None, person_id: Optional[int] = None
    ) -> Optional[Person]:
        """
        Retrieve a person by ID or by full name.

        Args:
            full_name: Name to match case-insensitively after trimming
            person_id: The person ID (takes precedence)

        Returns:
            Person object if found, None otherwise
        """
        if person_id is not None:
            return self._get_by_id(Person, person_id)
        if full_name is not None:
            return self._get_by_text_ci(Person, "full_name", full_name)
        return None

    @handle_db_errors
    @log_database_operation("get_all_persons")
    def get_all(self) -> List[Person]:
        """Retrieve all persons, ordered by name."""
        return self._get_all(Person, order_by="full_name")

    @handle_db_errors
    @log_database_operation("search_persons")
    def search(self, term: str) -> List[Person]:
        """
        Find persons whose name contains a term (case-insensitive).

        Args:
            term: Substring to look for

        Returns:
            Matching persons ordered by name
        """
        text = DataValidator.normalize_string(term)
        if not text:
            return self.get_all()
        return (
            self.session.query(Person)
            .filter(Person.full_name.ilike(f"%{text}%"))
            .order_by(Person.full_name)
            .all()
        )

    @handle_db_errors
    @log_database_operation("create_person")
    @validate_metadata(["full_name"])
    def create(self, metadata: Dict[str, Any]) -> Person:
        """
        Create a new person.

        Args:
            metadata: Dictionary with required key:
                - full_name: Display name
                Optional keys:
                - nicknames, home_page_url, image_url, media_id,
                  hide_xwordinfo, xwordinfo_profile_name, xwordinfo_image_url

        Returns:
            Created Person object

        Notes:
            - No uniqueness check is made here; importers go through
              get_or_create so that one name maps to one person
        """
        full_name = DataValidator.normalize_string(metadata.get("full_name"))
        if not full_name:
            raise ValidationError(f"Invalid person name: {metadata.get('full_name')}")

        person = Person(full_name=full_name)
        self._update_scalar_fields(person, metadata, PERSON_FIELDS)
        self.session.add(person)
        self._execute_with_retry(self.session.flush)

        if self.logger:
            self.logger.log_debug(
                f"Created person: {full_name}", {"person_id": person.id}
            )
        return person

    @handle_db_errors
    @log_database_operation("get_or_create_person")
    def get_or_create(self, full_name: str) -> Person:
        """
        Resolve a name to a person, creating a bare person if none matches.

        Args:
            full_name: Name as written in the source data

        Returns:
            Existing or newly created Person object

        Raises:
            ValidationError: If the name is empty
        """
        normalized = DataValidator.normalize_string(full_name)
        if not normalized:
            raise ValidationError("Person name cannot be empty")

        person = self.get(full_name=normalized)
        if person:
            return person
        return self.create({"full_name": normalized})

    @handle_db_errors
    @log_database_operation("update_person")
    def update(self, person: Person, metadata: Dict[str, Any]) -> Person:
        """
        Update an existing person.

        Only keys present in metadata are touched. Optional text fields
        present but empty are cleared.

        Args:
            person: Person object to update
            metadata: Same keys as create()

        Returns:
            Updated Person object

        Raises:
            DatabaseError: If person not found
        """
        db_person = self.session.get(Person, person.id)
        if db_person is None:
            raise DatabaseError(f"Person with id={person.id} not found")

        self._update_scalar_fields(db_person, metadata, PERSON_FIELDS)
        self.session.flush()
        return db_person

    @handle_db_errors
    @log_database_operation("delete_person")
    def delete(self, person: Person) -> None:
        """
        Delete a person who is not referenced anywhere.

        Args:
            person: Person to delete

        Raises:
            DatabaseError: If the person is still a guesser, clue giver,
                constructor, editor or has guesses on record
        """
        roles = self.get_roles(person)
        if roles or self._count(Guess, person_id=person.id):
            raise DatabaseError(
                f"Cannot delete person '{person.full_name}': still referenced "
                f"({', '.join(roles) or 'guesses'})"
            )
        self.session.delete(person)
        self.session.flush()

    @handle_db_errors
    @log_database_operation("get_person_roles")
    def get_roles(self, person: Person) -> List[str]:
        """
        Derive the roles a person holds from the game tables.

        Args:
            person: Person to inspect

        Returns:
            Subset of ['player', 'clue_giver', 'constructor', 'editor'],
            in that order
        """
        checks = [
            (ROLE_PLAYER, self.session.query(RoundGuesser).filter_by(person_id=person.id)),
            (ROLE_CLUE_GIVER, self.session.query(Round).filter_by(clue_giver_id=person.id)),
            (
                ROLE_CONSTRUCTOR,
                self.session.query(PuzzleConstructor).filter_by(person_id=person.id),
            ),
            (ROLE_EDITOR, self.session.query(Puzzle).filter_by(editor_id=person.id)),
        ]
        return [role for role, query in checks if query.first() is not None]
