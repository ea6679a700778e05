"""
Association Models
-------------------

Ordered link rows between the game entities and Person.

Models:
    - PuzzleConstructor: Puzzle → constructor Person, with constructor_order
    - RoundGuesser: Round → guesser Person
    - RoundSolution: Round → solution word, with word_order

These carry an id and an ordering column, so they are mapped classes rather
than bare association tables. Collections built from them are always
rewritten in full: clear, then insert in order.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import TYPE_CHECKING

# --- Third party imports ---
from sqlalchemy import ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

# --- Local imports ---
from .base import Base

if TYPE_CHECKING:
    from .entities import Person
    from .game import Puzzle, Round


class PuzzleConstructor(Base):
    """
    A constructor credit on a puzzle.

    Attributes:
        puzzle_id: Credited puzzle
        person_id: Constructor
        constructor_order: 1-based position in the byline
    """

    __tablename__ = "puzzle_constructors"
    __table_args__ = (
        UniqueConstraint("puzzle_id", "person_id", name="uq_puzzle_constructor"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    puzzle_id: Mapped[int] = mapped_column(
        ForeignKey("puzzles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    person_id: Mapped[int] = mapped_column(
        ForeignKey("persons.id"), nullable=False, index=True
    )
    constructor_order: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    puzzle: Mapped["Puzzle"] = relationship("Puzzle", back_populates="constructor_links")
    person: Mapped["Person"] = relationship("Person")


class RoundGuesser(Base):
    """A person assigned as guesser in a round."""

    __tablename__ = "round_guessers"
    __table_args__ = (
        UniqueConstraint("round_id", "person_id", name="uq_round_guesser"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    round_id: Mapped[int] = mapped_column(
        ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False, index=True
    )
    person_id: Mapped[int] = mapped_column(
        ForeignKey("persons.id"), nullable=False, index=True
    )

    round: Mapped["Round"] = relationship("Round", back_populates="guesser_links")
    person: Mapped["Person"] = relationship("Person")


class RoundSolution(Base):
    """One solution word of a round, upper-cased."""

    __tablename__ = "round_solutions"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    round_id: Mapped[int] = mapped_column(
        ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False, index=True
    )
    word: Mapped[str] = mapped_column(String(100), nullable=False)
    word_order: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    round: Mapped["Round"] = relationship("Round", back_populates="solutions")
