"""
LaTeX Pattern Constants

Centralized LaTeX pattern strings used for validating and previewing
generated sources. Organized into frozen dataclasses by category for
immutability and clear grouping.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class DocumentPatterns:
    """
    Document-level LaTeX patterns.

    Used for structure validation and preamble stripping.
    """
    DOCUMENTCLASS: str = r'\documentclass'
    BEGIN_DOCUMENT: str = r'\begin{document}'
    END_DOCUMENT: str = r'\end{document}'


@dataclass(frozen=True)
class SecurityPatterns:
    """
    Primitives that reach the filesystem or the shell, or change how TeX
    reads its input. Sources containing any of these are never compiled.
    """
    FORBIDDEN_COMMANDS: Tuple[str, ...] = (
        r'\write18',
        r'\immediate\write18',
        r'\input',
        r'\include',
        r'\includeonly',
        r'\openin',
        r'\openout',
        r'\read',
        r'\catcode',
    )
    # Unescaped special characters above this count trigger a warning
    SPECIAL_CHAR_WARNING_THRESHOLD: int = 20

