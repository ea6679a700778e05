#!/usr/bin/env python3
"""
exceptions.py
--------------------
Custom exception classes for the KEALOA reference project.

This module defines a hierarchy of exceptions used throughout the project
to handle specific error conditions in different subsystems.

Exception Hierarchy:
    Exception (built-in)
    ├── DatabaseError - Base for all database-related errors
    │   ├── HealthCheckError - Data consistency check failures
    │   └── ExportError - CSV/ZIP export failures
    ├── ValidationError - Data validation failures
    ├── CsvImportError - Unreadable import files (whole-file failures)
    └── ViewNotFoundError - Requested person or round does not exist

Usage:
    from kealoa.core.exceptions import DatabaseError, ValidationError

    try:
        db.people.create({"full_name": ""})
    except ValidationError as e:
        logger.error(f"Invalid data: {e}")
    except DatabaseError as e:
        logger.error(f"Database operation failed: {e}")
"""


class DatabaseError(Exception):
    """
    Base exception for database-related errors.

    Raised when database operations fail due to connection issues,
    query errors, integrity violations, or other database problems.

    This is the parent class for all database-specific exceptions.
    Catch this to handle any database error, or catch specific
    subclasses for more granular error handling.

    Examples:
        >>> raise DatabaseError("Connection to database failed")
        >>> raise DatabaseError("Data integrity violation: UNIQUE constraint failed")
        >>> raise DatabaseError("Cannot delete person 'Pat Lee': still referenced")

    See Also:
        HealthCheckError, ExportError
    """

    pass


class HealthCheckError(DatabaseError):
    """
    Exception for data consistency check failures.

    Raised when the consistency checks or the orphan repair cannot run:
    - Unknown orphan table key passed to a repair
    - Query failures while scanning for orphaned rows

    Examples:
        >>> raise HealthCheckError("Unknown orphan table: 'episodes'")
    """

    pass


class ExportError(DatabaseError):
    """
    Exception for data export operation failures.

    Raised when exporting database data to CSV files or ZIP bundles fails:
    - Unknown export kind
    - File writing errors

    Examples:
        >>> raise ExportError("Unknown export kind: 'episodes'")
        >>> raise ExportError("Cannot write ZIP file: permission denied")
    """

    pass


class ValidationError(Exception):
    """
    Exception for data validation failures.

    Raised when input data fails validation checks:
    - Invalid date formats
    - Missing required fields
    - Type mismatches
    - Invalid clue directions

    Examples:
        >>> raise ValidationError("Invalid date format '2024-13-45' - use YYYY-MM-DD or M/D/YYYY")
        >>> raise ValidationError("Required field 'full_name' missing or empty")
        >>> raise ValidationError("Invalid direction 'X', must be A or D")
    """

    pass


class CsvImportError(Exception):
    """
    Exception for import files that cannot be processed at all.

    Row-level problems are never raised; they are collected into the
    import result. This exception covers the whole-file failures:
    - File not found or unreadable
    - CSV without a header row
    - ZIP archive that cannot be opened

    Examples:
        >>> raise CsvImportError("File not found: rounds.csv")
        >>> raise CsvImportError("Could not open ZIP file: bundle.zip")
    """

    pass


class ViewNotFoundError(Exception):
    """
    Exception for views requested on entities that do not exist.

    Examples:
        >>> raise ViewNotFoundError("No person found with name 'Nobody'")
        >>> raise ViewNotFoundError("No round found for 2024-01-15 round #2")
    """

    pass
