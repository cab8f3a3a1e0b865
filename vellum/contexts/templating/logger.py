"""
Templating context logger.

Provides logging interface for templating context with automatic [template] prefix.
All templating modules should import from this module, not from loguru directly.
"""

from typing import Optional

from loguru import logger

CONTEXT_PREFIX = "[template]"


# Wrapper functions with automatic [template] prefix


def _log_info(message: str) -> None:
    """Log info message with [template] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [template] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [template] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [template] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level templating-specific logging helpers


def log_section_skipped(section_name: str, error: Exception) -> None:
    """Log a section that failed to render and was replaced by an empty fragment."""
    _log_warning(f"Section '{section_name}' rendered empty after error")
    _log_debug(f"  {type(error).__name__}: {error}")


def log_section_coercion_failed(section_name: str, error: Exception) -> None:
    """Log a record section whose data had an unexpected shape."""
    _log_warning(f"Ignoring malformed '{section_name}' data in resume record")
    _log_debug(f"  {type(error).__name__}: {error}")


def log_template_fallback(requested: Optional[str], default: str) -> None:
    """Log an unknown template id resolved to the default strategy."""
    _log_debug(f"Unknown template '{requested}', falling back to '{default}'")
