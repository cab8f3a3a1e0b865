"""
Shared utilities for Vellum.

Common functionality used across contexts:
- Escaping user text into HTML and LaTeX
- Format-agnostic display labels (names, dates, skills)
- Logger configuration
"""

from vellum.utils.escaping import escape_markup_text, escape_typesetting_text
from vellum.utils.text_processing import date_range_label, format_date, full_name, skill_label

__all__ = [
    "escape_markup_text",
    "escape_typesetting_text",
    "date_range_label",
    "format_date",
    "full_name",
    "skill_label",
]
