"""
conftest.py
-----------
Shared pytest fixtures for KEALOA tests.

Provides fixtures for:
- Database setup and teardown
- One fixture per entity manager and service
- A small played round to compute statistics on
- CSV file writing
"""
import pytest
from pathlib import Path
from tempfile import TemporaryDirectory


# ----- Path Fixtures -----

@pytest.fixture
def tmp_dir():
    """Create a temporary directory for test file operations."""
    with TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def write_csv(tmp_dir):
    """
    Write CSV text to a file in the temporary directory.

    Usage:
        path = write_csv("persons.csv", "full_name\\nPat Lee\\n")
    """
    def _write(name: str, text: str, encoding: str = "utf-8") -> Path:
        path = tmp_dir / name
        path.write_bytes(text.encode(encoding))
        return path

    return _write


# ----- Database Fixtures -----

@pytest.fixture
def test_db_path(tmp_dir):
    """Create temporary test database path."""
    return tmp_dir / "test.db"


@pytest.fixture
def test_alembic_dir():
    """Path to the bundled Alembic directory."""
    return Path(__file__).parent.parent / "kealoa" / "migrations"


@pytest.fixture
def test_db(test_db_path, test_alembic_dir):
    """
    Create test database instance with schema.

    Returns a KealoaDB instance with an initialized schema.
    Database is torn down after the test.
    """
    from kealoa.database.manager import KealoaDB
    from kealoa.database.models import Base
    from sqlalchemy import create_engine

    # Create engine and initialize schema
    engine = create_engine(f"sqlite:///{test_db_path}")
    Base.metadata.create_all(engine)

    db = KealoaDB(db_path=test_db_path, alembic_dir=test_alembic_dir)

    yield db

    # Cleanup
    db.dispose()
    engine.dispose()
    if test_db_path.exists():
        test_db_path.unlink()


@pytest.fixture
def db_session(test_db):
    """
    Create a database session for tests.

    Provides a session with automatic rollback after test.
    """
    with test_db.session_scope() as session:
        yield session
        session.rollback()


# ----- Manager Fixtures -----

@pytest.fixture
def person_manager(db_session):
    """Create PersonManager instance for testing."""
    from kealoa.database.managers.person_manager import PersonManager
    return PersonManager(db_session)


@pytest.fixture
def puzzle_manager(db_session):
    """Create PuzzleManager instance for testing."""
    from kealoa.database.managers.puzzle_manager import PuzzleManager
    return PuzzleManager(db_session)


@pytest.fixture
def round_manager(db_session):
    """Create RoundManager instance for testing."""
    from kealoa.database.managers.round_manager import RoundManager
    return RoundManager(db_session)


@pytest.fixture
def clue_manager(db_session):
    """Create ClueManager instance for testing."""
    from kealoa.database.managers.clue_manager import ClueManager
    return ClueManager(db_session)


@pytest.fixture
def guess_manager(db_session):
    """Create GuessManager instance for testing."""
    from kealoa.database.managers.guess_manager import GuessManager
    return GuessManager(db_session)


@pytest.fixture
def importer(db_session):
    """Create CsvImporter bound to the test session."""
    from kealoa.pipeline.csv_importer import CsvImporter
    return CsvImporter(db_session)


@pytest.fixture
def statistics():
    """Create StatisticsAggregator instance for testing."""
    from kealoa.database.statistics import StatisticsAggregator
    return StatisticsAggregator()


@pytest.fixture
def health_monitor():
    """Create HealthMonitor instance for testing."""
    from kealoa.database.health_monitor import HealthMonitor
    return HealthMonitor()


@pytest.fixture
def export_manager():
    """Create ExportManager instance for testing."""
    from kealoa.database.export_manager import ExportManager
    return ExportManager()


# ----- Game Data Fixtures -----

@pytest.fixture
def played_round(round_manager, clue_manager, guess_manager, puzzle_manager):
    """
    One round of three clues with two guessers.

    Round 2024-01-15 #1, clue giver Ben Zimmer, guessers Pat Lee and
    Sam Kim, solution KEA / LOA. Clues come from two puzzles:
    Sunday 2023-01-01 (Joel Fagliano, editor Will Shortz) and
    Wednesday 1999-06-02 (Pat Lee).

        clue 1  ERIE  Pat: ERIE (right)   Sam: ONTARIO (wrong)
        clue 2  OREO  Pat: OREO (right)   Sam: OREO (right)
        clue 3  ASEA  Pat: ALOE (wrong)   Sam: (no guess)

    Returns:
        Dict with the round, clues, puzzles and people
    """
    sunday = puzzle_manager.create(
        {
            "publication_date": "2023-01-01",
            "constructors": "Joel Fagliano",
            "editor": "Will Shortz",
        }
    )
    wednesday = puzzle_manager.create(
        {"publication_date": "1999-06-02", "constructors": ["Pat Lee"]}
    )
    rnd = round_manager.create(
        {
            "round_date": "2024-01-15",
            "episode_number": 101,
            "clue_giver": "Ben Zimmer",
            "guessers": "Pat Lee, Sam Kim",
            "solution_words": "kea, loa",
            "episode_start_seconds": "00:12:30",
        }
    )
    erie = clue_manager.create(
        {
            "round": rnd,
            "clue_number": 1,
            "puzzle": sunday,
            "puzzle_clue_number": 17,
            "puzzle_clue_direction": "A",
            "clue_text": "Great Lake",
            "correct_answer": "erie",
        }
    )
    oreo = clue_manager.create(
        {
            "round": rnd,
            "clue_number": 2,
            "puzzle": sunday,
            "puzzle_clue_number": 3,
            "puzzle_clue_direction": "D",
            "clue_text": "Twistable cookie",
            "correct_answer": "OREO",
        }
    )
    asea = clue_manager.create(
        {
            "round": rnd,
            "clue_number": 3,
            "puzzle": wednesday,
            "puzzle_clue_number": 42,
            "puzzle_clue_direction": "A",
            "clue_text": "Sailing",
            "correct_answer": "ASEA",
        }
    )

    pat = round_manager.people.get(full_name="Pat Lee")
    sam = round_manager.people.get(full_name="Sam Kim")
    guess_manager.set_guess(erie, pat, "erie")
    guess_manager.set_guess(erie, sam, "ontario")
    guess_manager.set_guess(oreo, pat, "OREO")
    guess_manager.set_guess(oreo, sam, "oreo")
    guess_manager.set_guess(asea, pat, "aloe")

    return {
        "round": rnd,
        "clues": [erie, oreo, asea],
        "puzzles": [sunday, wednesday],
        "pat": pat,
        "sam": sam,
        "ben": rnd.clue_giver,
    }
