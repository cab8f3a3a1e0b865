"""Custom exceptions for rendering context."""

from typing import List, Optional


class CompilationError(Exception):
    """
    Exception raised when LaTeX compilation does not produce a PDF.

    Raised for a missing compiler, a timeout, a non-zero exit without a PDF,
    or a source rejected by validation. Never retried by the compiler.

    Attributes:
        reason: Human-readable summary
        errors: Parsed LaTeX errors (first one is the most useful)
        log: Raw compiler log or output, if any
    """

    def __init__(
        self,
        reason: str,
        errors: Optional[List[str]] = None,
        log: str = "",
    ):
        self.reason = reason
        self.errors = list(errors or [])
        self.log = log

        parts = [reason]
        if self.errors:
            parts.append(f"\nFirst error: {self.errors[0]}")
            if len(self.errors) > 1:
                parts.append(f"({len(self.errors) - 1} more)")

        super().__init__("\n".join(parts))


class ExternalTemplateError(Exception):
    """
    Exception raised when a caller-supplied LaTeX template fails validation.

    Attributes:
        issues: Blocking problems reported by validate_latex_source()
    """

    def __init__(self, issues: List[str]):
        self.issues = list(issues)
        super().__init__(f"External template failed validation: {'; '.join(self.issues)}")
