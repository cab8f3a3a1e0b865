"""
Text processing utilities for display labels.

Everything here returns plain text, never markup. HTML and LaTeX section
templates both consume these labels, so date and name formatting cannot
drift between the two output formats.
"""

import re
from datetime import date, datetime
from typing import Any, Iterable, List, Optional

from dateutil import parser as date_parser

PRESENT_LABEL = "Present"
DATE_RANGE_SEPARATOR = " - "
DISPLAY_DATE_FORMAT = "%b %Y"

# Fields missing from the input (day, time) come from here, never from today
_DEFAULT_DATE = datetime(2000, 1, 1)

_YEAR_ONLY = re.compile(r"^\d{4}$")
_HAS_YEAR = re.compile(r"\d{4}")


def full_name(first_name: Optional[str], last_name: Optional[str]) -> str:
    """
    Join first and last name into a display name.

    Example:
        >>> full_name("Ada", "Lovelace")
        'Ada Lovelace'
        >>> full_name("Ada", None)
        'Ada'
    """
    return f"{first_name or ''} {last_name or ''}".strip()


def _parse_date_string(value: str) -> Optional[datetime]:
    # A month name alone ("May") would otherwise pick up the default year
    if not _HAS_YEAR.search(value):
        return None
    try:
        return date_parser.parse(value, default=_DEFAULT_DATE)
    except (ValueError, OverflowError):
        return None


def format_date(value: Any) -> str:
    """
    Format a date value as a short month/year label.

    Accepts date/datetime objects and any string dateutil can read that
    carries a four-digit year. A bare year is kept as-is. Strings that cannot be parsed (e.g. "Summer 2021") are returned
    unchanged, since dates are opaque to the data model.

    Args:
        value: date, datetime, string or None

    Returns:
        Label such as "Jan 2023", or "" for empty input

    Example:
        >>> format_date("2023-01-15")
        'Jan 2023'
        >>> format_date("Summer 2021")
        'Summer 2021'
    """
    if value is None:
        return ""
    if isinstance(value, (date, datetime)):
        return value.strftime(DISPLAY_DATE_FORMAT)

    text = str(value).strip()
    if not text:
        return ""
    if _YEAR_ONLY.match(text):
        return text

    parsed = _parse_date_string(text)
    if parsed is None:
        return text
    return parsed.strftime(DISPLAY_DATE_FORMAT)


def date_range_label(start: Any, end: Any = None, current: bool = False) -> str:
    """
    Build a "start - end" label for experience and project entries.

    An entry that is current, or has a start but no end, ends in "Present".
    With neither start nor end the label is empty.

    Example:
        >>> date_range_label("2020-03", None, current=True)
        'Mar 2020 - Present'
        >>> date_range_label(None, None)
        ''
    """
    start_label = format_date(start)
    end_label = PRESENT_LABEL if current else format_date(end)

    if not start_label and not end_label:
        return ""
    if not end_label:
        end_label = PRESENT_LABEL
    if not start_label:
        return end_label
    return f"{start_label}{DATE_RANGE_SEPARATOR}{end_label}"


def optional_range_label(start: Any, end: Any = None) -> str:
    """Like date_range_label() but never implies "Present" (used for projects)."""
    start_label = format_date(start)
    end_label = format_date(end)
    if start_label and end_label:
        return f"{start_label}{DATE_RANGE_SEPARATOR}{end_label}"
    return start_label or end_label


def skill_label(skill: Any) -> str:
    """
    Display label for a skill given as a plain string or a {name, proficiency} object.

    Proficiency is appended in parentheses when present.

    Example:
        >>> skill_label("Python")
        'Python'
        >>> skill_label({"name": "Go", "proficiency": "Advanced"})
        'Go (Advanced)'
    """
    if skill is None:
        return ""
    if isinstance(skill, str):
        return skill.strip()

    if isinstance(skill, dict):
        name = skill.get("name")
        proficiency = skill.get("proficiency")
    else:
        name = getattr(skill, "name", None)
        proficiency = getattr(skill, "proficiency", None)

    name = str(name).strip() if name is not None else ""
    if name and proficiency:
        return f"{name} ({proficiency})"
    return name


def skill_labels(skills: Iterable[Any]) -> List[str]:
    """Labels for all skills, dropping empty ones, order preserved."""
    return [label for label in (skill_label(skill) for skill in skills or []) if label]


def gpa_label(gpa: Any) -> str:
    """
    Example:
        >>> gpa_label(3.9)
        'GPA: 3.9'
    """
    if gpa is None or str(gpa).strip() == "":
        return ""
    return f"GPA: {str(gpa).strip()}"


def ensure_url_scheme(url: Optional[str], scheme: str = "https://") -> str:
    """
    Prefix a bare link ("github.com/ada") with a scheme for use as an href.

    Example:
        >>> ensure_url_scheme("linkedin.com/in/ada")
        'https://linkedin.com/in/ada'
        >>> ensure_url_scheme("mailto:ada@example.com")
        'mailto:ada@example.com'
    """
    if not url:
        return ""
    url = url.strip()
    if re.match(r"^[a-zA-Z][a-zA-Z0-9+.-]*:", url):
        return url
    return scheme + url.lstrip("/")


SAFE_LINK_SCHEMES = ("http", "https", "mailto")


def safe_link(url: Optional[str]) -> str:
    """
    Link target for user-supplied URLs, or "" if the scheme is not allowed.

    Bare links get https:// prepended; javascript:, data: and other schemes
    are refused.

    Example:
        >>> safe_link("github.com/ada")
        'https://github.com/ada'
        >>> safe_link("javascript:alert(1)")
        ''
    """
    link = ensure_url_scheme(url)
    scheme = link.split(":", 1)[0].lower() if ":" in link else ""
    return link if scheme in SAFE_LINK_SCHEMES else ""


def set_max_consecutive_blank_lines(content: str, max_consecutive: int = 1) -> str:
    """
    Normalize consecutive blank lines to a maximum number.

    Args:
        content: The text content to normalize
        max_consecutive: Maximum number of consecutive blank lines to allow.
                        Use 0 to remove all blank lines (default: 1)

    Returns:
        Content with normalized blank lines

    Example:
        >>> set_max_consecutive_blank_lines("text\\n\\n\\n\\nmore", max_consecutive=1)
        'text\\n\\nmore'
    """
    # max_consecutive=0 removes single blank lines too
    if max_consecutive == 0:
        pattern = r"\n[ \t]*\n([ \t]*\n)*"
    else:
        pattern = r"\n[ \t]*\n([ \t]*\n)+"

    replacement = "\n" * (max_consecutive + 1)
    return re.sub(pattern, replacement, content)
