"""
Database Models Package
------------------------

SQLAlchemy ORM models for the KEALOA reference database.

This package provides a modular organization of database models:
- base: Base class and timestamp mixin
- entities: Person
- associations: PuzzleConstructor, RoundGuesser, RoundSolution
- game: Puzzle, Round, Clue, Guess

Usage:
    from kealoa.database.models import Person, Round, Clue, Guess
"""
# Base classes
from .base import Base, TimestampMixin

# Entity models
from .entities import Person

# Ordered link rows
from .associations import PuzzleConstructor, RoundGuesser, RoundSolution

# Game record
from .game import Clue, Guess, Puzzle, Round

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Entities
    "Person",
    # Associations
    "PuzzleConstructor",
    "RoundGuesser",
    "RoundSolution",
    # Game
    "Puzzle",
    "Round",
    "Clue",
    "Guess",
]
