#!/usr/bin/env python3
"""
manager.py
--------------------
Database manager for the KEALOA reference database.

Provides the KealoaDB class for interacting with the SQLite database.
Handles:
    - Initialization of the database engine and sessionmaker
    - Transactional session scopes exposing the entity managers
    - Schema creation and versioning via Alembic
    - Access to the statistics, data check and export services

Key Features:
    - Transaction management with automatic rollback
    - Savepoint-safe SQLite connections (per-row import savepoints)
    - Comprehensive error handling and logging

Core Operations:
    Entity Management (inside session_scope):
        - db.people: PersonManager
        - db.puzzles: PuzzleManager
        - db.rounds: RoundManager
        - db.clues: ClueManager
        - db.guesses: GuessManager
        - db.importer: CsvImporter bound to the session

    Services (take a session argument):
        - db.statistics: StatisticsAggregator
        - db.health_monitor: HealthMonitor
        - db.export_manager: ExportManager

Usage:
    db = KealoaDB(db_path, alembic_dir, log_dir=LOG_DIR)
    with db.session_scope() as session:
        pat = db.people.get_or_create("Pat Lee")
        stats = db.statistics.person_stats(session, pat.id)
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Dict, Iterator, Optional, Union

# --- Third party ---
from sqlalchemy import Engine, create_engine, event, inspect
from sqlalchemy.orm import Session, sessionmaker

from alembic import command
from alembic.config import Config
from alembic.runtime.migration import MigrationContext

# --- Local imports ---
from kealoa.core.exceptions import DatabaseError
from kealoa.core.logging_manager import KealoaLogger
from kealoa.pipeline.csv_importer import CsvImporter
from .decorators import handle_db_errors, log_database_operation
from .export_manager import ExportManager
from .health_monitor import HealthMonitor
from .managers import (
    ClueManager,
    GuessManager,
    PersonManager,
    PuzzleManager,
    RoundManager,
)
from .models import Base
from .statistics import StatisticsAggregator


def _enable_sqlite_savepoints(engine: Engine) -> None:
    """
    Let SQLAlchemy own BEGIN on pysqlite connections.

    The sqlite3 module's implicit transaction handling turns the release of
    an outer SAVEPOINT into a COMMIT; emitting BEGIN ourselves keeps
    savepoints nested inside the session transaction.
    """

    @event.listens_for(engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


# ----- Main Database Manager -----
class KealoaDB:
    """
    Main database manager for the KEALOA reference database.

    Attributes:
        - db_path (Path): Filesystem path to the SQLite database file.
        - alembic_dir (Path): Filesystem path to the Alembic directory.
        - engine (Engine): SQLAlchemy engine instance.
        - SessionLocal (sessionmaker): SQLAlchemy session factory.

    Usage:
        db = KealoaDB("~/data/kealoa.db", ALEMBIC_DIR)
        with db.session_scope() as session:
            rnd = db.rounds.get(round_date="2024-01-15")
    """

    # ---- Initialization ----
    def __init__(
        self,
        db_path: Union[str, Path],
        alembic_dir: Union[str, Path],
        log_dir: Optional[Union[str, Path]] = None,
    ) -> None:
        """
        Initialize database engine and session factory.

        Args:
            db_path (str | Path): Path to the SQLite file.
            alembic_dir (str | Path): Path to the Alembic directory.
            log_dir (str | Path): Directory for log files (optional)
        """
        self.db_path = Path(db_path).expanduser().resolve()
        self.alembic_dir = Path(alembic_dir).expanduser().resolve()

        # --- Logging ---
        if log_dir:
            self.log_dir = Path(log_dir).expanduser().resolve()
            self.logger: Optional[KealoaLogger] = KealoaLogger(
                self.log_dir, component_name="database"
            )
        else:
            self.logger = None

        # Service components (stateless; take a session per call)
        self.health_monitor = HealthMonitor(self.logger)
        self.export_manager = ExportManager(self.logger)
        self.statistics = StatisticsAggregator(self.logger)

        # Entity managers (bound in session_scope)
        self._person_manager: Optional[PersonManager] = None
        self._puzzle_manager: Optional[PuzzleManager] = None
        self._round_manager: Optional[RoundManager] = None
        self._clue_manager: Optional[ClueManager] = None
        self._guess_manager: Optional[GuessManager] = None
        self._importer: Optional[CsvImporter] = None

        self._setup_engine()

    def _setup_engine(self) -> None:
        """Initialize database engine and session factory."""
        try:
            if self.logger:
                self.logger.log_operation(
                    "database_init_start",
                    {
                        "db_path": str(self.db_path),
                        "alembic_dir": str(self.alembic_dir),
                    },
                )

            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            is_new_file = not self.db_path.exists()

            self.engine: Engine = create_engine(
                f"sqlite:///{self.db_path}",
                echo=False,
                pool_pre_ping=True,
            )
            _enable_sqlite_savepoints(self.engine)

            self.SessionLocal: sessionmaker = sessionmaker(
                bind=self.engine,
                autoflush=True,
                expire_on_commit=False,
            )

            self.alembic_cfg: Config = self._setup_alembic()

            if is_new_file:
                self.initialize_schema()

            if self.logger:
                self.logger.log_operation("database_init_complete", {"success": True})

        except Exception as e:
            if self.logger:
                self.logger.log_error(e, {"operation": "database_init"})
            raise DatabaseError(f"Database initialization failed: {e}") from e

    # ---- Session Management ----
    @contextmanager
    def session_scope(self) -> Iterator[Session]:
        """
        Provide a transactional scope around operations with logging.

        Also binds the entity managers and the importer to the session;
        they are available via properties (db.people, db.rounds, ...)
        until the scope ends.

        Usage:
            with db.session_scope() as session:
                person = db.people.create({"full_name": "Pat Lee"})
                result = db.importer.import_rounds("rounds.csv")
        """
        session = self.SessionLocal()
        session_id = datetime.now().strftime("%Y%m%d_%H%M%S_%f")

        self._person_manager = PersonManager(session, self.logger)
        self._puzzle_manager = PuzzleManager(session, self.logger)
        self._round_manager = RoundManager(session, self.logger)
        self._clue_manager = ClueManager(session, self.logger)
        self._guess_manager = GuessManager(session, self.logger)
        self._importer = CsvImporter(session, self.logger)

        if self.logger:
            self.logger.log_debug("session_start", {"session_id": session_id})

        try:
            yield session
            session.commit()
            if self.logger:
                self.logger.log_debug("session_commit", {"session_id": session_id})

        except Exception as e:
            session.rollback()
            if self.logger:
                self.logger.log_error(
                    e, {"operation": "session_rollback", "session_id": session_id}
                )
            raise
        finally:
            self._person_manager = None
            self._puzzle_manager = None
            self._round_manager = None
            self._clue_manager = None
            self._guess_manager = None
            self._importer = None

            session.close()
            if self.logger:
                self.logger.log_debug("session_close", {"session_id": session_id})

    # -------------------------------------------------------------------------
    # Entity Manager Properties
    # -------------------------------------------------------------------------

    @staticmethod
    def _require(manager, name: str):
        if manager is None:
            raise DatabaseError(
                f"{name} requires active session. "
                "Use within session_scope: "
                "with db.session_scope() as session: ..."
            )
        return manager

    @property
    def people(self) -> PersonManager:
        """
        Access PersonManager for person operations.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        return self._require(self._person_manager, "PersonManager")

    @property
    def puzzles(self) -> PuzzleManager:
        """
        Access PuzzleManager for puzzle operations.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        return self._require(self._puzzle_manager, "PuzzleManager")

    @property
    def rounds(self) -> RoundManager:
        """
        Access RoundManager for round operations.

        Raises:
            DatabaseError: If accessed outside of session_scope context
        """
        return self._require(self._round_manager, "RoundManager")

    @property
    def clues(self) -> ClueManager:
        """Access ClueManager (inside session_scope only)."""
        return self._require(self._clue_manager, "ClueManager")

    @property
    def guesses(self) -> GuessManager:
        """Access GuessManager (inside session_scope only)."""
        return self._require(self._guess_manager, "GuessManager")

    @property
    def importer(self) -> CsvImporter:
        """Access the CSV/ZIP importer bound to the current session."""
        return self._require(self._importer, "CsvImporter")

    # ---- Alembic setup ----
    def _setup_alembic(self) -> Config:
        """Setup Alembic configuration."""
        try:
            if self.logger:
                self.logger.log_debug("Setting up Alembic configuration...")

            alembic_cfg = Config()
            alembic_cfg.set_main_option("script_location", str(self.alembic_dir))
            alembic_cfg.set_main_option("sqlalchemy.url", f"sqlite:///{self.db_path}")
            alembic_cfg.set_main_option(
                "file_template",
                "%%(year)d%%(month).2d%%(day).2d_%%(hour).2d%%(minute).2d_%%(slug)s",
            )
            return alembic_cfg
        except Exception as e:
            if self.logger:
                self.logger.log_error(e, {"operation": "setup_alembic"})
            raise DatabaseError(f"Alembic configuration failed: {e}") from e

    @handle_db_errors
    @log_database_operation("initialize_schema")
    def initialize_schema(self) -> None:
        """
        Create tables if needed and bring the schema to the latest revision.

        Actions:
            Fresh database (no tables): create all tables from the ORM
                models and stamp the Alembic revision to head
            Tables but no Alembic revision: stamp head
            Otherwise: run pending migrations
        """
        try:
            table_names = inspect(self.engine).get_table_names()
            application_tables = [t for t in table_names if t != "alembic_version"]

            if not application_tables:
                Base.metadata.create_all(bind=self.engine)
                self._stamp_head()
                if self.logger:
                    self.logger.log_operation(
                        "fresh_database_created",
                        {"tables_created": len(Base.metadata.tables)},
                    )
            elif self.get_migration_history().get("current_revision") is None:
                self._stamp_head()
            else:
                self.upgrade_database()
                if self.logger:
                    self.logger.log_operation(
                        "existing_database_migrated",
                        {"table_count": len(application_tables)},
                    )
        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError(f"Could not initialize database: {e}") from e

    def _stamp_head(self) -> None:
        try:
            command.stamp(self.alembic_cfg, "head")
        except Exception as e:
            # An uninitialized Alembic directory leaves the schema unversioned
            if self.logger:
                self.logger.log_error(e, {"operation": "stamp_database"})

    @handle_db_errors
    @log_database_operation("upgrade_database")
    def upgrade_database(self, revision: str = "head") -> None:
        """
        Upgrade the database schema to the specified Alembic revision.

        Args:
            revision: Target revision (default: 'head')
        """
        try:
            command.upgrade(self.alembic_cfg, revision)
        except Exception as e:
            raise DatabaseError(f"Database upgrade failed: {e}") from e

    def get_migration_history(self) -> Dict[str, Optional[str]]:
        """
        Get the current migration status of the database.

        Returns:
            Dictionary with keys:
                - 'current_revision': Current Alembic revision (or None)
                - 'status': 'up_to_date' or 'needs_migration'
                - 'error': Present if an exception occurred
        """
        try:
            with self.engine.connect() as conn:
                current_rev = MigrationContext.configure(conn).get_current_revision()

            return {
                "current_revision": current_rev,
                "status": "up_to_date" if current_rev else "needs_migration",
            }
        except Exception as e:
            if self.logger:
                self.logger.log_error(e, {"operation": "get_migration_history"})
            return {"error": str(e)}

    def dispose(self) -> None:
        """Release pooled connections."""
        self.engine.dispose()

    def __enter__(self) -> "KealoaDB":
        """Support for context manager usage."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Release connections on context manager exit."""
        del exc_type, exc_val, exc_tb
        self.dispose()
