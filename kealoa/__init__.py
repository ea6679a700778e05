"""
KEALOA Reference Package
========================

Reference data library for the KEALOA trivia game.

This package keeps the canonical record of every KEALOA round played on the
podcast: who gave the clues, who guessed, which crossword puzzles the clues
came from, and what every guesser answered. On top of that store it provides
bulk CSV/ZIP import, CSV/ZIP export and per-person and per-round statistics.

Main Components:
    - database: SQLAlchemy ORM, entity managers, statistics, data checks
    - pipeline: CSV and ZIP import reconciliation
    - views: Person and round views resolved into plain data
    - core: Logging, validation, paths, exceptions
    - utils: Display formatters

Primary Interfaces:
    - kealoa.database.cli: Command line interface (``kealoa``)
    - kealoa.database.manager.KealoaDB: Main database interface
    - kealoa.pipeline.csv_importer.CsvImporter: CSV/ZIP import

Example Usage:
    >>> from kealoa import KealoaDB
    >>> from kealoa.core.paths import DB_PATH, ALEMBIC_DIR, LOG_DIR
    >>> db = KealoaDB(db_path=DB_PATH, alembic_dir=ALEMBIC_DIR, log_dir=LOG_DIR)
    >>> with db.session_scope() as session:
    ...     pat = db.people.get(full_name="Pat Lee")
"""

__version__ = "2.0.0"
__author__ = "KEALOA Reference Project"

from kealoa.database.manager import KealoaDB
from kealoa.core.paths import DATA_DIR, DB_PATH, LOG_DIR

__all__ = [
    "KealoaDB",
    "DATA_DIR",
    "DB_PATH",
    "LOG_DIR",
]
