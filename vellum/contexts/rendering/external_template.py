"""
External LaTeX templates.

Fills a caller-supplied LaTeX document that marks its variable slots as
\\VAR{key}. The document is validated before anything is substituted, and
every value is escaped, so user data cannot add commands to an otherwise
safe template.
"""

import re
from typing import Any, Mapping

from vellum.contexts.rendering.exceptions import ExternalTemplateError
from vellum.contexts.rendering.logger import log_external_template_filled
from vellum.contexts.rendering.validator import validate_latex_source
from vellum.utils.escaping import escape_typesetting_text

PLACEHOLDER = re.compile(r"\\VAR\{(\w+)\}")


def find_placeholders(source: str) -> list:
    """Placeholder keys in order of first appearance, without duplicates."""
    return list(dict.fromkeys(PLACEHOLDER.findall(source)))


def fill_external_template(source: str, values: Mapping[str, Any]) -> str:
    """
    Validate an external LaTeX template, then substitute its \\VAR{key} slots.

    A key with no entry in values (or a None value) becomes an empty string.
    Values are escaped with escape_typesetting_text().

    Args:
        source: Complete LaTeX document containing \\VAR{key} placeholders
        values: Placeholder values by key

    Returns:
        The filled LaTeX document

    Raises:
        ExternalTemplateError: If the template fails validate_latex_source()

    Example:
        >>> doc = "\\\\documentclass{article}\\\\begin{document}\\\\VAR{name}\\\\end{document}"
        >>> fill_external_template(doc, {"name": "R&D"})
        '\\\\documentclass{article}\\\\begin{document}R\\\\&D\\\\end{document}'
    """
    validation = validate_latex_source(source)
    if not validation.is_valid:
        raise ExternalTemplateError(validation.issues)

    keys = find_placeholders(source)
    filled = [key for key in keys if values.get(key) is not None]
    missing = [key for key in keys if values.get(key) is None]
    log_external_template_filled(filled, missing)

    return PLACEHOLDER.sub(lambda match: escape_typesetting_text(values.get(match.group(1))), source)
