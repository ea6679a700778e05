#!/usr/bin/env python3
"""
validators.py
--------------------
Data validation and normalization utilities for KEALOA operations.

Provides type-safe conversion, validation, and normalization functions
used by the entity managers and the CSV importer. CSV input arrives as
text, so every normalizer accepts strings as well as native values.
"""
from __future__ import annotations

import re
from datetime import date, datetime
from typing import Any, Dict, List, Optional

from .exceptions import ValidationError

_ISO_DATE = re.compile(r"^(\d{4})-(\d{2})-(\d{2})$")
_US_SLASH_DATE = re.compile(r"^(\d{1,2})/(\d{1,2})/(\d{4})$")
_US_DASH_DATE = re.compile(r"^(\d{1,2})-(\d{1,2})-(\d{4})$")

VALID_DIRECTIONS = ("A", "D")


class DataValidator:
    """Centralized data validation for database and import operations."""

    @staticmethod
    def validate_required_fields(
        data: Dict[str, Any], required_fields: List[str]
    ) -> None:
        """
        Validate that required fields are present and non-empty.

        Args:
            data: Data dictionary to validate
            required_fields: List of required field names

        Raises:
            ValidationError: If validation fails
        """
        for field in required_fields:
            value = data.get(field)
            if value is None or (isinstance(value, str) and not value.strip()):
                raise ValidationError(f"Required field '{field}' missing or empty")

    @staticmethod
    def missing_fields(data: Dict[str, Any], fields: List[str]) -> List[str]:
        """
        List the fields that are absent or blank, in the order given.

        Args:
            data: Row or metadata dictionary
            fields: Field names to check

        Returns:
            Names of the missing fields (empty list when all are present)
        """
        return [
            field
            for field in fields
            if data.get(field) is None or str(data.get(field)).strip() == ""
        ]

    @staticmethod
    def normalize_date(date_value: Any) -> Optional[date]:
        """
        Normalize various date inputs to a date object.

        Accepted string formats: ``YYYY-MM-DD``, ``M/D/YYYY`` and ``M-D-YYYY``
        (one or two digit month and day).

        Args:
            date_value: Date string, date object, or datetime

        Returns:
            Normalized date object, or None for empty input

        Raises:
            ValidationError: If the value is not a valid date in a known format
        """
        if date_value is None:
            return None
        if isinstance(date_value, datetime):
            return date_value.date()
        if isinstance(date_value, date):
            return date_value

        text = str(date_value).strip()
        if not text:
            return None

        parts = None
        match = _ISO_DATE.match(text)
        if match:
            parts = (int(match[1]), int(match[2]), int(match[3]))
        else:
            match = _US_SLASH_DATE.match(text) or _US_DASH_DATE.match(text)
            if match:
                parts = (int(match[3]), int(match[1]), int(match[2]))

        if parts:
            try:
                return date(*parts)
            except ValueError:
                pass

        raise ValidationError(
            f"Invalid date format '{text}' - use YYYY-MM-DD or M/D/YYYY"
        )

    @staticmethod
    def normalize_string(value: Any) -> Optional[str]:
        """
        Normalize string value.

        Args:
            value: Value to normalize

        Returns:
            Trimmed string, or None when empty
        """
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @staticmethod
    def normalize_word(value: Any) -> Optional[str]:
        """Trim and upper-case an answer, guess or solution word."""
        text = DataValidator.normalize_string(value)
        return text.upper() if text else None

    @staticmethod
    def normalize_bool(value: Any) -> Optional[bool]:
        """
        Convert various inputs to boolean.

        Args:
            value: Value to convert

        Returns:
            Boolean value or None

        Raises:
            ValidationError: If conversion fails
        """
        if isinstance(value, bool):
            return value
        elif isinstance(value, (int, float)):
            if value == 0:
                return False
            elif value == 1:
                return True
            raise ValidationError(f"Cannot convert numeric '{value}' to boolean")
        elif isinstance(value, str):
            lowered = value.strip().lower()
            if not lowered:
                return None
            if lowered in ("true", "1", "yes", "on"):
                return True
            elif lowered in ("false", "0", "no", "off"):
                return False
            raise ValidationError(f"Cannot convert '{value}' to boolean")
        elif value is not None:
            return bool(value)
        return None

    @staticmethod
    def normalize_int(value: Any) -> Optional[int]:
        """
        Convert value to integer.

        Args:
            value: Value to convert

        Returns:
            Integer value, or None for empty input

        Raises:
            ValidationError: If the value is not an integer
        """
        if value is None:
            return None
        if isinstance(value, int):
            return value
        text = str(value).strip()
        if not text:
            return None
        try:
            return int(text)
        except ValueError:
            try:
                as_float = float(text)
            except ValueError:
                raise ValidationError(f"Cannot convert '{value}' to integer")
            if not as_float.is_integer():
                raise ValidationError(f"Cannot convert '{value}' to integer")
            return int(as_float)

    @staticmethod
    def normalize_direction(value: Any) -> Optional[str]:
        """
        Normalize a puzzle clue direction to ``A`` or ``D``.

        Only the first character counts, so ``Across``/``down`` are accepted.

        Raises:
            ValidationError: If the direction is neither across nor down
        """
        text = DataValidator.normalize_string(value)
        if not text:
            return None
        direction = text[0].upper()
        if direction not in VALID_DIRECTIONS:
            raise ValidationError(f"Invalid direction '{text}', must be A or D")
        return direction

    @staticmethod
    def split_list(value: Any) -> List[str]:
        """
        Split a comma-separated cell into trimmed, non-empty items.

        Args:
            value: Cell text such as ``"Pat Lee, Sam Kim"`` (or a list)

        Returns:
            Items in their original order
        """
        if value is None:
            return []
        items = value if isinstance(value, (list, tuple)) else str(value).split(",")
        return [str(item).strip() for item in items if str(item).strip()]
