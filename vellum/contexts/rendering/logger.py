"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from loguru directly.
"""

import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from loguru import logger

from vellum.utils.logger import setup_logger as _setup_logger

load_dotenv()

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Optional[Path] = None, console_level: str = "INFO") -> Optional[Path]:
    """
    Setup logger for rendering context.

    Configures loguru with provenance tracking and rendering-specific context.

    Args:
        log_dir: Directory for this rendering session (console only if None)
        console_level: Minimum level shown on the console

    Returns:
        Path to log file, or None

    Example:
        from vellum.contexts.rendering.logger import setup_rendering_logger

        log_file = setup_rendering_logger(log_dir)
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"LaTeX compiler": os.getenv("VELLUM_LATEX_COMPILER", "pdflatex")},
        console_level=console_level,
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_warning(message: str) -> None:
    """Log warning message with [render] prefix."""
    logger.warning(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_render_start(template_id: str, output_format: str, mode: Optional[str]) -> None:
    """Log start of a document render."""
    mode_label = f", mode={mode}" if mode else ""
    _log_debug(f"Rendering {output_format} document: template={template_id}{mode_label}")


def log_render_result(template_id: str, output_format: str, length: int, elapsed_time: float) -> None:
    """Log a finished document render."""
    _log_debug(
        f"Rendered {output_format} document '{template_id}': {length} chars ({elapsed_time * 1000:.1f}ms)"
    )


def log_compilation_start(compiler: str, work_dir: Path, num_passes: int) -> None:
    _log_info(f"Compiling with {compiler} ({num_passes} passes)")
    _log_debug(f"  Compile directory: {work_dir}")


def _log_capped(log_fn, label: str, messages: list, cap: int) -> None:
    for number, message in enumerate(messages[:cap], 1):
        log_fn(f"  {label} {number}: {message}")
    if len(messages) > cap:
        log_fn(f"  ... {len(messages) - cap} more {label.lower()}s not shown")


def log_compilation_result(result, verbose: bool = False) -> None:
    """
    Summarize a finished compilation: outcome, first errors, first warnings.

    Args:
        result: CompilationResult from LatexCompiler
        verbose: Raise the caps on listed errors and warnings, and always dump compiler stdout
    """
    summary = f"{len(result.errors)} errors, {len(result.warnings)} warnings ({result.elapsed_s:.2f}s)"
    if result.success:
        _log_success(f"PDF compiled: {summary}")
    else:
        _log_error(f"No PDF: {result.reason or summary}")
        _log_capped(_log_error, "Error", result.errors, 10 if verbose else 5)
    _log_capped(_log_debug, "Warning", result.warnings, 10 if verbose else 3)

    # opt(raw=True) keeps multi-line compiler output free of per-line prefixes
    if (verbose or not result.success) and result.stdout:
        logger.opt(raw=True).debug(
            f"\n{'=' * 80}\nCOMPILER STDOUT:\n{'=' * 80}\n{result.stdout}\n"
        )


def log_validation_result(is_valid: bool, issues: list, warnings: list) -> None:
    """Log the outcome of a LaTeX source safety check."""
    if is_valid:
        _log_debug(f"LaTeX source passed validation ({len(warnings)} warnings)")
    else:
        _log_warning(f"LaTeX source rejected: {len(issues)} issues")
        for issue in issues:
            _log_debug(f"  {issue}")


def log_external_template_filled(filled: list, missing: list) -> None:
    """Log which \\VAR placeholders were filled and which had no value."""
    _log_debug(f"External template: {len(filled)} placeholders filled")
    if missing:
        _log_warning(f"External template: no value for {', '.join(sorted(missing))}")
