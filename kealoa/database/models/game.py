"""
Game Models
------------

Models for the KEALOA game record.

Models:
    - Puzzle: A published crossword, keyed by publication date
    - Round: One KEALOA round on a podcast episode
    - Clue: A crossword clue read during a round
    - Guess: One guesser's answer to one clue

Cascade rules:
    - Deleting a Round removes its clues, solution words and guesser links,
      and through the clues every guess.
    - Deleting a Clue removes its guesses.
    - Deleting a Puzzle removes its constructor credits only. Clues that
      pointed at it keep their puzzle_id and show up in the data check.
"""
# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from datetime import date
from typing import TYPE_CHECKING, List, Optional

# --- Third party imports ---
from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Date,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

# --- Local imports ---
from kealoa.utils.formatters import day_of_week, seconds_to_time
from .associations import PuzzleConstructor, RoundGuesser, RoundSolution
from .base import Base, TimestampMixin

if TYPE_CHECKING:
    from .entities import Person


class Puzzle(Base, TimestampMixin):
    """
    A crossword puzzle, identified by its publication date.

    Attributes:
        id: Primary key
        publication_date: Date the puzzle ran (unique)
        editor_id: Person who edited the puzzle (optional)

    Relationships:
        editor: Many-to-one with Person
        constructor_links: Ordered PuzzleConstructor rows

    Computed Properties:
        constructors: Constructor persons in byline order
        day_of_week: 1 = Sunday ... 7 = Saturday
    """

    __tablename__ = "puzzles"

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    publication_date: Mapped[date] = mapped_column(
        Date, unique=True, nullable=False, index=True
    )
    editor_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("persons.id"), nullable=True, index=True
    )

    editor: Mapped[Optional["Person"]] = relationship("Person")
    constructor_links: Mapped[List[PuzzleConstructor]] = relationship(
        "PuzzleConstructor",
        back_populates="puzzle",
        cascade="all, delete-orphan",
        order_by="PuzzleConstructor.constructor_order",
    )

    @property
    def constructors(self) -> List["Person"]:
        """Constructors in byline order."""
        return [link.person for link in self.constructor_links]

    @property
    def day_of_week(self) -> int:
        """Publication weekday, 1 = Sunday ... 7 = Saturday."""
        return day_of_week(self.publication_date)

    def __repr__(self) -> str:
        return f"<Puzzle(id={self.id}, publication_date={self.publication_date})>"


class Round(Base, TimestampMixin):
    """
    One KEALOA round.

    Attributes:
        id: Primary key
        round_date: Date the round was played
        round_number: Position among the rounds of that date (default 1)
        episode_number: Podcast episode number
        episode_id: Podcast host's episode id (optional)
        episode_url: Link to the episode (optional)
        episode_start_seconds: Offset of the round within the episode
        clue_giver_id: Person presenting the clues
        description: Free text
        description2: Second free-text field

    Relationships:
        clue_giver: Many-to-one with Person
        solutions: Ordered RoundSolution rows
        guesser_links: RoundGuesser rows
        clues: Clues ordered by clue_number
    """

    __tablename__ = "rounds"
    __table_args__ = (
        UniqueConstraint("round_date", "round_number", name="uq_round_date_number"),
        CheckConstraint("round_number >= 1", name="ck_round_number_positive"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    round_date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    round_number: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    episode_number: Mapped[int] = mapped_column(Integer, nullable=False)
    episode_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    episode_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    episode_start_seconds: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    clue_giver_id: Mapped[int] = mapped_column(
        ForeignKey("persons.id"), nullable=False, index=True
    )
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    description2: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    clue_giver: Mapped["Person"] = relationship("Person")
    solutions: Mapped[List[RoundSolution]] = relationship(
        "RoundSolution",
        back_populates="round",
        cascade="all, delete-orphan",
        order_by="RoundSolution.word_order",
    )
    guesser_links: Mapped[List[RoundGuesser]] = relationship(
        "RoundGuesser",
        back_populates="round",
        cascade="all, delete-orphan",
        order_by="RoundGuesser.id",
    )
    clues: Mapped[List["Clue"]] = relationship(
        "Clue",
        back_populates="round",
        cascade="all, delete-orphan",
        order_by="Clue.clue_number",
    )

    @property
    def solution_words(self) -> List[str]:
        """Solution words in order."""
        return [solution.word for solution in self.solutions]

    @property
    def guessers(self) -> List["Person"]:
        """Assigned guessers."""
        return [link.person for link in self.guesser_links]

    @property
    def start_time(self) -> str:
        """Episode offset as HH:MM:SS."""
        return seconds_to_time(self.episode_start_seconds)

    def __repr__(self) -> str:
        return (
            f"<Round(id={self.id}, round_date={self.round_date}, "
            f"round_number={self.round_number})>"
        )


class Clue(Base, TimestampMixin):
    """
    A crossword clue read during a round.

    Attributes:
        id: Primary key
        round_id: Owning round
        clue_number: Position within the round (unique per round)
        puzzle_id: Source puzzle (optional)
        puzzle_clue_number: Number of the clue in the puzzle
        puzzle_clue_direction: 'A' (across) or 'D' (down)
        clue_text: The clue as read
        correct_answer: Upper-cased answer
    """

    __tablename__ = "clues"
    __table_args__ = (
        UniqueConstraint("round_id", "clue_number", name="uq_clue_round_number"),
        CheckConstraint(
            "puzzle_clue_direction IS NULL OR puzzle_clue_direction IN ('A', 'D')",
            name="ck_clue_direction",
        ),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    round_id: Mapped[int] = mapped_column(
        ForeignKey("rounds.id", ondelete="CASCADE"), nullable=False, index=True
    )
    clue_number: Mapped[int] = mapped_column(Integer, nullable=False)
    puzzle_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("puzzles.id"), nullable=True, index=True
    )
    puzzle_clue_number: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    puzzle_clue_direction: Mapped[Optional[str]] = mapped_column(
        String(1), nullable=True
    )
    clue_text: Mapped[str] = mapped_column(Text, nullable=False)
    correct_answer: Mapped[str] = mapped_column(String(100), nullable=False)

    round: Mapped[Round] = relationship("Round", back_populates="clues")
    # No back-reference: puzzle deletion must leave clues untouched
    puzzle: Mapped[Optional[Puzzle]] = relationship("Puzzle")
    guesses: Mapped[List["Guess"]] = relationship(
        "Guess",
        back_populates="clue",
        cascade="all, delete-orphan",
        order_by="Guess.id",
    )

    def __repr__(self) -> str:
        return f"<Clue(id={self.id}, round_id={self.round_id}, clue_number={self.clue_number})>"


class Guess(Base, TimestampMixin):
    """
    One guesser's answer to one clue.

    Attributes:
        id: Primary key
        clue_id: Answered clue
        person_id: Guesser
        guessed_word: Upper-cased guess
        is_correct: Guess equals the clue's answer (case-insensitive),
            evaluated whenever either side is written
    """

    __tablename__ = "guesses"
    __table_args__ = (
        UniqueConstraint("clue_id", "person_id", name="uq_guess_clue_person"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    clue_id: Mapped[int] = mapped_column(
        ForeignKey("clues.id", ondelete="CASCADE"), nullable=False, index=True
    )
    person_id: Mapped[int] = mapped_column(
        ForeignKey("persons.id"), nullable=False, index=True
    )
    guessed_word: Mapped[str] = mapped_column(String(100), nullable=False)
    is_correct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    clue: Mapped[Clue] = relationship("Clue", back_populates="guesses")
    guesser: Mapped["Person"] = relationship("Person")

    def __repr__(self) -> str:
        return (
            f"<Guess(id={self.id}, clue_id={self.clue_id}, person_id={self.person_id}, "
            f"is_correct={self.is_correct})>"
        )
