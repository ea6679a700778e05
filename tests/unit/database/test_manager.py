"""Tests for KealoaDB: schema setup, session scope and manager access."""
import pytest

from kealoa.core.exceptions import DatabaseError
from kealoa.database.manager import KealoaDB
from kealoa.database.models import Person


class TestKealoaDBInitialization:
    """Tests for engine and schema setup."""

    def test_fresh_database_created_and_stamped(self, tmp_dir, test_alembic_dir):
        """A new file gets every table and the head revision."""
        db = KealoaDB(db_path=tmp_dir / "fresh.db", alembic_dir=test_alembic_dir)
        try:
            history = db.get_migration_history()
            assert history["current_revision"] == "3f1a9c7e2b40"
            assert history["status"] == "up_to_date"

            with db.session_scope() as session:
                assert session.query(Person).count() == 0
        finally:
            db.dispose()

    def test_log_dir_enables_logger(self, tmp_dir, test_alembic_dir):
        """Passing a log directory creates a logger and log files."""
        log_dir = tmp_dir / "logs"
        db = KealoaDB(tmp_dir / "logged.db", test_alembic_dir, log_dir=log_dir)
        try:
            assert db.logger is not None
            assert db.health_monitor.logger is db.logger
            assert log_dir.is_dir()
        finally:
            db.dispose()

    def test_context_manager(self, tmp_dir, test_alembic_dir):
        """KealoaDB can be used in a with statement."""
        with KealoaDB(tmp_dir / "ctx.db", test_alembic_dir) as db:
            with db.session_scope() as session:
                db.people.create({"full_name": "Pat Lee"})
                assert session.query(Person).count() == 1


class TestSessionScope:
    """Tests for session_scope commit, rollback and manager binding."""

    def test_commit_on_success(self, test_db):
        """Changes are committed when the block completes."""
        with test_db.session_scope():
            test_db.people.create({"full_name": "Pat Lee"})

        with test_db.session_scope():
            assert test_db.people.get(full_name="pat lee") is not None

    def test_rollback_on_error(self, test_db):
        """An exception rolls back the whole scope."""
        with pytest.raises(RuntimeError):
            with test_db.session_scope():
                test_db.people.create({"full_name": "Pat Lee"})
                raise RuntimeError("boom")

        with test_db.session_scope():
            assert test_db.people.get(full_name="Pat Lee") is None

    @pytest.mark.parametrize(
        "name", ["people", "puzzles", "rounds", "clues", "guesses", "importer"]
    )
    def test_managers_require_session(self, test_db, name):
        """Manager properties raise outside a session scope."""
        with pytest.raises(DatabaseError, match="requires active session"):
            getattr(test_db, name)

    def test_managers_share_session(self, test_db):
        """All bound managers use the scope's session."""
        with test_db.session_scope() as session:
            assert test_db.people.session is session
            assert test_db.rounds.session is session
            assert test_db.importer.session is session
