"""Custom exceptions for templating context with template references."""

from pathlib import Path
from typing import Optional


class TemplateRenderError(Exception):
    """
    Exception raised when a section template fails to render.

    Raised inside section rendering and caught by render_sections(), which
    logs it and substitutes an empty fragment for that section.

    Attributes:
        message: Error description
        section_name: Name of the section being rendered (e.g., 'experience')
        template_path: Path to the template file
        original_error: The original Jinja2 or data error
    """

    def __init__(
        self,
        message: str,
        section_name: Optional[str] = None,
        template_path: Optional[Path] = None,
        original_error: Optional[Exception] = None,
    ):
        self.message = message
        self.section_name = section_name
        self.template_path = template_path
        self.original_error = original_error

        parts = [message]

        if section_name and template_path:
            parts.append(f"\nTemplate: {template_path}")
            parts.append(f"Section: {section_name}")

        if original_error:
            parts.append(f"\nOriginal error: {str(original_error)}")

        super().__init__("\n".join(parts))


class InvalidResumeStructureError(ValueError):
    """
    Exception raised when a resume record is not a mapping at all.

    Malformed individual sections never raise; they are coerced to empty.
    """

    pass
