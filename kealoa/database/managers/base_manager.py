#!/usr/bin/env python3
"""
base_manager.py
--------------------
Base manager providing common CRUD operations and utilities.
All entity managers inherit from this class.

Key Features:
    - Retry logic for SQLite lock handling
    - Generic get-or-create inside a savepoint
    - Object resolution helpers (instance or id)
    - Case-insensitive text lookups
    - Scalar field updates driven by normalizer tables

Usage:
    Subclass BaseManager for each entity type and implement:
    - exists(): Check if entity exists without exceptions
    - get(): Retrieve single entity with entity-specific logic
    - create(): Create new entity with validation and relationships
    - update(): Update entity with validation and relationships
    - delete(): Delete entity

Example:
    class PuzzleManager(BaseManager):
        @handle_db_errors
        @log_database_operation("create_puzzle")
        @validate_metadata(["publication_date"])
        def create(self, metadata: Dict[str, Any]) -> Puzzle:
            ...
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
import time
from abc import ABC
from typing import Any, Callable, Dict, List, Optional, Protocol, Type, TypeVar, Union

# --- Third party imports ---
from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Mapped, Session

# --- Local imports ---
from kealoa.core.exceptions import DatabaseError
from kealoa.core.logging_manager import KealoaLogger, safe_logger
from kealoa.core.validators import DataValidator


class HasId(Protocol):
    """Protocol for objects that have an id attribute."""

    id: Mapped[int]


T = TypeVar("T", bound=HasId)


class BaseManager(ABC):
    """
    Abstract base manager providing common CRUD operations and utilities.

    Attributes:
        session: SQLAlchemy session for database operations
        logger: Optional logger for operation tracking
    """

    def __init__(self, session: Session, logger: Optional[KealoaLogger] = None):
        """
        Initialize the base manager.

        Args:
            session: SQLAlchemy session
            logger: Optional logger for operation tracking
        """
        self.session = session
        self.logger = logger

    # -------------------------------------------------------------------------
    # Core Helper Methods
    # -------------------------------------------------------------------------

    def _execute_with_retry(
        self,
        operation: Callable,
        max_retries: int = 3,
        retry_delay: float = 0.1,
    ) -> Any:
        """
        Execute database operation with retry on lock.

        Args:
            operation: Callable that performs the operation
            max_retries: Maximum number of retry attempts
            retry_delay: Base delay between retries (exponential backoff)

        Returns:
            Result of the operation

        Raises:
            OperationalError: If all retries exhausted
        """
        for attempt in range(max_retries):
            try:
                return operation()
            except OperationalError as e:
                error_msg = str(e).lower()

                if (
                    "locked" in error_msg or "busy" in error_msg
                ) and attempt < max_retries - 1:
                    wait_time = retry_delay * (2**attempt)

                    safe_logger(self.logger).log_debug(
                        f"Database locked, retrying in {wait_time}s",
                        {"attempt": attempt + 1, "max_retries": max_retries},
                    )

                    time.sleep(wait_time)
                    continue

                raise

        raise DatabaseError("Retry loop completed without success")

    def _get_or_create(
        self,
        model_class: Type[T],
        lookup_fields: Dict[str, Any],
        extra_fields: Optional[Dict[str, Any]] = None,
    ) -> T:
        """
        Get an existing row or create it if it doesn't exist.

        The insert runs inside a savepoint, so a concurrent insert of the same
        key only rolls back this attempt before the row is re-read.

        Args:
            model_class: ORM model class to query or create
            lookup_fields: Dictionary of field_name: value to filter/create
            extra_fields: Additional fields for new object creation only

        Returns:
            ORM instance of the model class

        Raises:
            DatabaseError: If creation fails and the row still cannot be found
        """
        obj = self.session.query(model_class).filter_by(**lookup_fields).first()
        if obj:
            return obj

        fields = lookup_fields.copy()
        if extra_fields:
            fields.update(extra_fields)

        try:
            with self.session.begin_nested():
                obj = model_class(**fields)
                self.session.add(obj)
            return obj
        except IntegrityError:
            obj = self.session.query(model_class).filter_by(**lookup_fields).first()
            if obj:
                return obj
            raise DatabaseError(
                f"Failed to create {model_class.__name__} even after handling race condition"
            )

    def _resolve_object(self, item: Union[T, int], model_class: Type[T]) -> T:
        """
        Resolve an item to an ORM object.

        Args:
            item: Object instance or ID
            model_class: Target model class

        Returns:
            Resolved ORM object

        Raises:
            ValueError: If object not found or not persisted
            TypeError: If item type is invalid
        """
        if isinstance(item, model_class):
            if item.id is None:
                raise ValueError(f"{model_class.__name__} instance must be persisted")
            return item
        elif isinstance(item, int):
            obj = self.session.get(model_class, item)
            if obj is None:
                raise ValueError(f"No {model_class.__name__} found with id: {item}")
            return obj
        else:
            raise TypeError(
                f"Expected {model_class.__name__} instance or int, got {type(item)}"
            )

    # -------------------------------------------------------------------------
    # Generic CRUD Helpers
    # -------------------------------------------------------------------------

    def _exists(self, model_class: Type[T], field_name: str, value: Any) -> bool:
        """
        Generic existence check for any entity.

        Args:
            model_class: ORM model class to query
            field_name: Field name to filter by
            value: Value to check for (strings are trimmed)

        Returns:
            True if entity exists, False otherwise
        """
        return self._get_by_field(model_class, field_name, value) is not None

    def _get_by_id(self, model_class: Type[T], entity_id: int) -> Optional[T]:
        """Get entity by primary key, or None."""
        return self.session.get(model_class, entity_id)

    def _get_by_field(
        self,
        model_class: Type[T],
        field_name: str,
        value: Any,
        normalize: bool = True,
    ) -> Optional[T]:
        """
        Get entity by a specific field value.

        Args:
            model_class: ORM model class
            field_name: Field name to filter by
            value: Value to look up
            normalize: Whether to trim string values first

        Returns:
            Entity if found, None otherwise
        """
        if value is None:
            return None

        if normalize and isinstance(value, str):
            value = DataValidator.normalize_string(value)
            if not value:
                return None

        return self.session.query(model_class).filter_by(**{field_name: value}).first()

    def _get_by_text_ci(
        self, model_class: Type[T], field_name: str, value: Optional[str]
    ) -> Optional[T]:
        """
        Case-insensitive exact match on a text column, after trimming.

        Args:
            model_class: ORM model class
            field_name: Text column name
            value: Text to match

        Returns:
            First matching entity (lowest id), or None
        """
        text = DataValidator.normalize_string(value)
        if not text:
            return None
        column = getattr(model_class, field_name)
        return (
            self.session.query(model_class)
            .filter(func.lower(column) == text.lower())
            .order_by(model_class.id)
            .first()
        )

    def _get_all(
        self,
        model_class: Type[T],
        order_by: Optional[str] = None,
        **filters: Any,
    ) -> List[T]:
        """
        Get all entities of a type with optional filtering and ordering.

        Args:
            model_class: ORM model class
            order_by: Field name to order by (optional)
            **filters: Additional filter conditions

        Returns:
            List of entities
        """
        query = self.session.query(model_class)

        if filters:
            query = query.filter_by(**filters)

        if order_by and hasattr(model_class, order_by):
            query = query.order_by(getattr(model_class, order_by))

        return query.all()

    def _count(self, model_class: Type[T], **filters: Any) -> int:
        """Count entities with optional filtering."""
        query = self.session.query(model_class)
        if filters:
            query = query.filter_by(**filters)
        return query.count()

    # -------------------------------------------------------------------------
    # Scalar Field Update Helpers
    # -------------------------------------------------------------------------

    def _update_scalar_fields(
        self,
        entity: Any,
        metadata: Dict[str, Any],
        field_configs: List[tuple],
    ) -> None:
        """
        Update multiple scalar fields from metadata using normalizers.

        Args:
            entity: Entity to update
            metadata: Dictionary containing field values
            field_configs: List of tuples:
                - (field_name, normalizer) for required fields
                - (field_name, normalizer, allow_none) for optional fields

        Example:
            self._update_scalar_fields(person, metadata, [
                ("full_name", DataValidator.normalize_string),
                ("home_page_url", DataValidator.normalize_string, True),
            ])
        """
        for config in field_configs:
            field_name = config[0]
            normalizer = config[1]
            allow_none = config[2] if len(config) > 2 else False

            if field_name not in metadata:
                continue

            value = normalizer(metadata[field_name])
            if value is not None or allow_none:
                setattr(entity, field_name, value)
