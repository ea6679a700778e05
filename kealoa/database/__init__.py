#!/usr/bin/env python3
"""
KEALOA Database Package
-----------------------
Entity store, consistency checks, exports and statistics for the KEALOA
trivia reference database.

This package provides:
- Core database operations (KealoaDB, session scope, migrations)
- Entity managers (persons, puzzles, rounds, clues, guesses)
- Health monitoring
- Data export
- Statistics aggregation
"""

from .manager import KealoaDB
from kealoa.core.exceptions import (
    DatabaseError,
    ValidationError,
    HealthCheckError,
    ExportError,
)
from .health_monitor import HealthMonitor
from .export_manager import ExportManager
from .statistics import PersonStats, StatisticsAggregator
from .decorators import (
    log_database_operation,
    handle_db_errors,
    validate_metadata,
)

__version__ = "2.0.0"

__all__ = [
    # Main manager
    "KealoaDB",
    # Exceptions
    "DatabaseError",
    "ValidationError",
    "HealthCheckError",
    "ExportError",
    # Core modules
    "HealthMonitor",
    "ExportManager",
    "StatisticsAggregator",
    "PersonStats",
    # Decorators
    "log_database_operation",
    "handle_db_errors",
    "validate_metadata",
]
