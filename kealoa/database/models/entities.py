"""
Entity Models
--------------

The Person model.

Models:
    - Person: Anyone who appears in the reference data

A person has no stored role. Whether someone is a player, a constructor,
an editor or a clue giver is answered by the tables that point at them
(see PersonManager.get_roles).
"""

# --- Annotations ---
from __future__ import annotations

# --- Standard library imports ---
from typing import Optional

# --- Third party imports ---
from sqlalchemy import Boolean, CheckConstraint, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

# --- Local imports ---
from .base import Base, TimestampMixin


class Person(Base, TimestampMixin):
    """
    Represents a person: guesser, clue giver, constructor or editor.

    Attributes:
        id: Primary key
        full_name: Display name, matched case-insensitively on import
        nicknames: Free-text nicknames
        home_page_url: Personal web page
        image_url: Portrait image URL
        media_id: Media library id of a locally stored portrait
        hide_xwordinfo: Suppress the XWord Info profile link
        xwordinfo_profile_name: XWord Info profile name, if different
        xwordinfo_image_url: XWord Info portrait URL
    """

    __tablename__ = "persons"
    __table_args__ = (
        CheckConstraint("full_name != ''", name="ck_person_non_empty_name"),
    )

    # ---- Primary fields ----
    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    nicknames: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    home_page_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    image_url: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    media_id: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    hide_xwordinfo: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    xwordinfo_profile_name: Mapped[Optional[str]] = mapped_column(
        String(255), nullable=True
    )
    xwordinfo_image_url: Mapped[Optional[str]] = mapped_column(
        String(500), nullable=True
    )

    def __repr__(self) -> str:
        return f"<Person(id={self.id}, full_name='{self.full_name}')>"

    def __str__(self) -> str:
        return self.full_name
