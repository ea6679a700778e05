#!/usr/bin/env python3
"""
managers package
--------------------
Modular entity managers for the KEALOA database.

Each manager handles CRUD operations for a specific entity type and
inherits from BaseManager.

Available Managers:
    BaseManager: Abstract base class with common utilities
    PersonManager: Persons and role derivation
    PuzzleManager: Puzzles and constructor credits
    RoundManager: Rounds, guessers and solution words
    ClueManager: Clues (re-evaluates guesses on answer change)
    GuessManager: Guesses with write-time correctness

Usage:
    from kealoa.database.managers import PersonManager, RoundManager

    person_mgr = PersonManager(session, logger)
    round_mgr = RoundManager(session, logger)
"""
from .base_manager import BaseManager
from .person_manager import PersonManager
from .puzzle_manager import PuzzleManager
from .round_manager import RoundManager
from .clue_manager import ClueManager
from .guess_manager import GuessManager

__all__ = [
    "BaseManager",
    "PersonManager",
    "PuzzleManager",
    "RoundManager",
    "ClueManager",
    "GuessManager",
]
