"""
Views package for the KEALOA reference project.

- context: Resolve person, constructor, editor, puzzle and round pages
  into a ViewContext
- renderer: Render a ViewContext as plain text
"""

from .context import (
    ViewContext,
    resolve_constructor_view,
    resolve_editor_view,
    resolve_person_view,
    resolve_puzzle_view,
    resolve_round_view,
)
from .renderer import render_text

__all__ = [
    "ViewContext",
    "render_text",
    "resolve_constructor_view",
    "resolve_editor_view",
    "resolve_person_view",
    "resolve_puzzle_view",
    "resolve_round_view",
]
