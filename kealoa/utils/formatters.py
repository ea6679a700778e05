#!/usr/bin/env python3
"""
formatters.py
-------------
Plain-text formatting helpers shared by the CLI, the views and the importer.

Day-of-week numbers follow the 1 = Sunday ... 7 = Saturday convention used
throughout the statistics module.
"""
from __future__ import annotations

from datetime import date
from typing import Any, Dict, Iterable, List, Optional

DAY_NAMES = {
    1: "Sunday",
    2: "Monday",
    3: "Tuesday",
    4: "Wednesday",
    5: "Thursday",
    6: "Friday",
    7: "Saturday",
}

EMPTY_MARK = "—"


def _leading_int(text: str) -> int:
    """Integer value of a time component; non-numeric parts count as 0."""
    text = text.strip()
    try:
        return int(float(text))
    except ValueError:
        return 0


def time_to_seconds(value: Any) -> int:
    """
    Convert ``HH:MM:SS``, ``MM:SS`` or a plain number of seconds to seconds.

    Args:
        value: Time text (or int)

    Returns:
        Total seconds; 0 for empty or unrecognized input

    Examples:
        >>> time_to_seconds("1:02:03")
        3723
        >>> time_to_seconds("02:03")
        123
        >>> time_to_seconds("95")
        95
    """
    if value is None:
        return 0
    if isinstance(value, int):
        return value
    text = str(value).strip()
    if not text:
        return 0

    if ":" not in text:
        return _leading_int(text)

    parts = text.split(":")
    if len(parts) == 3:
        hours, minutes, seconds = (_leading_int(p) for p in parts)
        return hours * 3600 + minutes * 60 + seconds
    if len(parts) == 2:
        minutes, seconds = (_leading_int(p) for p in parts)
        return minutes * 60 + seconds
    return 0


def seconds_to_time(seconds: int) -> str:
    """Render seconds as zero-padded ``HH:MM:SS``."""
    seconds = int(seconds or 0)
    hours, remainder = divmod(seconds, 3600)
    minutes, secs = divmod(remainder, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


def format_percentage(value: float, decimals: int = 1) -> str:
    """
    Format a percentage with a fixed number of decimals.

    Examples:
        >>> format_percentage(66.666)
        '66.7%'
        >>> format_percentage(0)
        '0.0%'
    """
    return f"{float(value):,.{decimals}f}%"


def format_list_with_and(items: Iterable[Any]) -> str:
    """
    Join items as English prose, dropping empty ones.

    Examples:
        >>> format_list_with_and(["KEA"])
        'KEA'
        >>> format_list_with_and(["KEA", "LOA"])
        'KEA and LOA'
        >>> format_list_with_and(["A", "B", "C"])
        'A, B, and C'
    """
    values = [str(item) for item in items if item]
    if not values:
        return ""
    if len(values) == 1:
        return values[0]
    if len(values) == 2:
        return " and ".join(values)
    return ", ".join(values[:-1]) + ", and " + values[-1]


def format_solution_words(words: Iterable[str]) -> str:
    """Upper-case solution words joined as prose ("KEA and LOA")."""
    return format_list_with_and(word.upper() for word in words if word)


def format_clue_direction(number: Optional[int], direction: Optional[str]) -> str:
    """Render a puzzle clue reference like ``42D``, or a dash if unknown."""
    if not number or not direction:
        return EMPTY_MARK
    return f"{number}{direction.upper()}"


def day_of_week(value: date) -> int:
    """Day number of a date, 1 = Sunday through 7 = Saturday."""
    return value.isoweekday() % 7 + 1


def get_day_name(day_number: int) -> str:
    """Name of a 1 = Sunday ... 7 = Saturday day number ('' if out of range)."""
    return DAY_NAMES.get(day_number, "")


def format_date(value: Optional[date]) -> str:
    """US display date without padding (``1/5/2024``)."""
    if value is None:
        return EMPTY_MARK
    return f"{value.month}/{value.day}/{value.year}"


def format_guess_display(guessed_word: str, is_correct: bool) -> str:
    """Upper-case guess prefixed with a check or cross mark."""
    mark = "✓" if is_correct else "✗"
    return f"{mark} {guessed_word.upper()}"


def format_guesser_results(results: List[Dict[str, Any]], total_clues: int) -> str:
    """
    One ``Name (correct/total)`` line per guesser, best score first.

    Args:
        results: Rows with ``full_name`` and ``correct_guesses``
        total_clues: Number of clues in the round
    """
    ordered = sorted(results, key=lambda row: -int(row["correct_guesses"]))
    return "\n".join(
        f"{row['full_name']} ({int(row['correct_guesses'])}/{total_clues})"
        for row in ordered
    )
