"""
Utilities package for the KEALOA reference project.

- formatters: Plain-text display helpers (percentages, times, names, dates)

Import commonly-used utilities directly from this package:
    from kealoa.utils import format_percentage, time_to_seconds
"""

from .formatters import (
    day_of_week,
    format_clue_direction,
    format_date,
    format_guess_display,
    format_guesser_results,
    format_list_with_and,
    format_percentage,
    format_solution_words,
    get_day_name,
    seconds_to_time,
    time_to_seconds,
)

__all__ = [
    "day_of_week",
    "format_clue_direction",
    "format_date",
    "format_guess_display",
    "format_guesser_results",
    "format_list_with_and",
    "format_percentage",
    "format_solution_words",
    "get_day_name",
    "seconds_to_time",
    "time_to_seconds",
]
