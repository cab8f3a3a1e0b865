"""
LaTeX source validation.

Safety and structure checks run before compiling a source that did not come
from the renderer (e.g. a user-edited document). The renderer's own output
always passes: it escapes every user value and uses none of the forbidden
primitives.
"""

import re
from dataclasses import dataclass, field
from typing import List

from vellum.contexts.rendering.latex_patterns import DocumentPatterns, SecurityPatterns
from vellum.contexts.rendering.logger import log_validation_result

# A forbidden command must not run into further letters (\input vs \inputencoding)
_FORBIDDEN_REGEXES = [
    (command, re.compile(re.escape(command) + r"(?![A-Za-z])"))
    for command in SecurityPatterns.FORBIDDEN_COMMANDS
]

# Special characters not preceded by a backslash
_UNESCAPED_SPECIAL = re.compile(r"(?<!\\)[#$%&_^~]")

_ESCAPED_BACKSLASH = re.compile(r"\\\\")


@dataclass
class ValidationResult:
    """
    Result of LaTeX source validation.

    Attributes:
        is_valid: False if any issue was found (warnings do not count)
        issues: Blocking problems (missing structure, forbidden commands, unbalanced braces)
        warnings: Non-blocking observations
    """

    is_valid: bool
    issues: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)


def _brace_balance_issue(source: str) -> str:
    """Return a description of the first brace imbalance, or "" if balanced."""
    # \\ is a line break; drop it first so "\\{" is not read as an escaped brace
    text = _ESCAPED_BACKSLASH.sub("", source)
    depth = 0
    for index, char in enumerate(text):
        if char in "{}" and index > 0 and text[index - 1] == "\\":
            continue
        if char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth < 0:
                return "Unbalanced braces: '}' without matching '{'"
    if depth > 0:
        return f"Unbalanced braces: {depth} unclosed '{{'"
    return ""


def validate_latex_source(source: str) -> ValidationResult:
    """
    Check a LaTeX document for required structure and forbidden primitives.

    Args:
        source: Complete LaTeX document

    Returns:
        ValidationResult; is_valid is False when any issue was found

    Example:
        >>> validate_latex_source(r"\\input{/etc/passwd}").is_valid
        False
    """
    issues = []
    warnings = []

    for required in (
        DocumentPatterns.DOCUMENTCLASS,
        DocumentPatterns.BEGIN_DOCUMENT,
        DocumentPatterns.END_DOCUMENT,
    ):
        if required not in source:
            issues.append(f"Missing required command: {required}")

    for command, regex in _FORBIDDEN_REGEXES:
        if regex.search(source):
            issues.append(f"Forbidden command: {command}")

    brace_issue = _brace_balance_issue(source)
    if brace_issue:
        issues.append(brace_issue)

    special_count = len(_UNESCAPED_SPECIAL.findall(source))
    if special_count > SecurityPatterns.SPECIAL_CHAR_WARNING_THRESHOLD:
        warnings.append(
            f"{special_count} unescaped special characters; user text may not be escaped"
        )

    result = ValidationResult(is_valid=not issues, issues=issues, warnings=warnings)
    log_validation_result(result.is_valid, result.issues, result.warnings)
    return result
