"""
Escaping utilities for user-supplied text.

Two independent escapers, one per output language. They are never
interchanged: HTML templates only see escape_markup_text() and LaTeX
templates only see escape_typesetting_text().

Both are pure and total. None becomes "", non-string scalars (numbers,
dates) are converted with str() first.
"""

import re
from typing import Any, Dict

from markupsafe import escape

# LaTeX control characters and the sequences that typeset them literally
TYPESETTING_ESCAPES: Dict[str, str] = {
    "\\": r"\textbackslash{}",
    "{": r"\{",
    "}": r"\}",
    "$": r"\$",
    "&": r"\&",
    "%": r"\%",
    "#": r"\#",
    "_": r"\_",
    "^": r"\textasciicircum{}",
    "~": r"\textasciitilde{}",
}

TYPESETTING_SPECIAL_CHARS = frozenset(TYPESETTING_ESCAPES)

_TYPESETTING_PATTERN = re.compile("[" + re.escape("".join(TYPESETTING_ESCAPES)) + "]")

# Longest sequences first so \textbackslash{} wins over \{
_TYPESETTING_UNESCAPE_PATTERN = re.compile(
    "|".join(
        re.escape(seq)
        for seq in sorted(TYPESETTING_ESCAPES.values(), key=len, reverse=True)
    )
)
_TYPESETTING_UNESCAPES = {seq: char for char, seq in TYPESETTING_ESCAPES.items()}


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def escape_markup_text(text: Any) -> str:
    """
    Escape text for insertion into HTML.

    Replaces &, <, >, " and ' with entities in a single pass, so an input
    that already contains "&amp;" comes out as "&amp;amp;" (it is user text,
    not markup).

    Args:
        text: User-supplied value (None allowed)

    Returns:
        HTML-safe string

    Example:
        >>> escape_markup_text("<script>")
        '&lt;script&gt;'
    """
    return str(escape(_as_text(text)))


def escape_typesetting_text(text: Any) -> str:
    """
    Escape text for insertion into LaTeX source.

    Every LaTeX control character is mapped to the sequence that typesets it
    literally. The mapping is applied in one regex pass, so the braces
    emitted for a backslash (\\textbackslash{}) are never escaped again.

    Args:
        text: User-supplied value (None allowed)

    Returns:
        LaTeX-safe string

    Example:
        >>> escape_typesetting_text("50% & up_front")
        '50\\\\% \\\\& up\\\\_front'
    """
    return _TYPESETTING_PATTERN.sub(
        lambda match: TYPESETTING_ESCAPES[match.group(0)], _as_text(text)
    )


def unescape_typesetting_text(text: Any) -> str:
    """Inverse of escape_typesetting_text() for the sequences it produces."""
    return _TYPESETTING_UNESCAPE_PATTERN.sub(
        lambda match: _TYPESETTING_UNESCAPES[match.group(0)], _as_text(text)
    )
