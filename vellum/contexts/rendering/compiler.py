"""
LaTeX Compilation Module

Compiles LaTeX sources to PDF bytes with an external pdflatex-compatible
compiler. Each compilation runs in its own temporary directory, is bounded
by a timeout, and is never retried.
"""

import asyncio
import os
import re
import shutil
import subprocess
import tempfile
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator, List, Optional, Tuple

from dotenv import load_dotenv

from vellum.contexts.rendering.exceptions import CompilationError
from vellum.contexts.rendering.logger import (
    _log_debug,
    log_compilation_result,
    log_compilation_start,
)
from vellum.contexts.rendering.validator import validate_latex_source

load_dotenv()

LATEX_COMPILER = os.getenv("VELLUM_LATEX_COMPILER", "pdflatex")
COMPILE_TIMEOUT_S = float(os.getenv("VELLUM_COMPILE_TIMEOUT_S", "60"))
KEEP_LATEX_ARTIFACTS = os.getenv("VELLUM_KEEP_LATEX_ARTIFACTS", "false").lower() == "true"

SOURCE_STEM = "resume"
UNKNOWN_ERROR = "Unknown LaTeX compilation error"


@dataclass
class CompilationResult:
    """
    Result of LaTeX compilation.

    Attributes:
        success: Whether a PDF was produced without LaTeX errors
        pdf_bytes: Generated PDF (None if failed)
        errors: Parsed LaTeX errors
        warnings: Parsed LaTeX warnings
        stdout: Combined compiler output from all passes
        log: Content of the .log file
        elapsed_s: Wall time of all passes
        reason: Human-readable failure summary ("" on success)
    """

    success: bool
    pdf_bytes: Optional[bytes] = None
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    stdout: str = ""
    log: str = ""
    elapsed_s: float = 0.0
    reason: str = ""

    def raise_for_failure(self) -> bytes:
        """Return the PDF bytes, or raise CompilationError if compilation failed."""
        if not self.success or self.pdf_bytes is None:
            raise CompilationError(self.reason or UNKNOWN_ERROR, self.errors, self.log or self.stdout)
        return self.pdf_bytes


def parse_latex_log(log_content: str) -> Tuple[List[str], List[str]]:
    """
    Parse LaTeX log file for errors and warnings.

    Args:
        log_content: Content of the .log file

    Returns:
        Tuple of (errors, warnings)
    """
    errors = []
    warnings = []

    # LaTeX error pattern: "! Error message"
    error_pattern = re.compile(r"^! (.+)$", re.MULTILINE)
    for match in error_pattern.finditer(log_content):
        errors.append(match.group(1).strip())

    # -file-line-error style: "./resume.tex:12: Undefined control sequence."
    file_line_pattern = re.compile(r"^[^\s:]+\.tex:(\d+): (.+)$", re.MULTILINE)
    for match in file_line_pattern.finditer(log_content):
        message = f"line {match.group(1)}: {match.group(2).strip()}"
        if match.group(2).strip() not in errors and message not in errors:
            errors.append(message)

    # Additional error patterns that don't start with "!"
    additional_error_patterns = [
        r"Undefined control sequence",
        r"File ended while scanning use of",
        r"Emergency stop",
        r"Fatal error",
    ]
    for pattern in additional_error_patterns:
        if not any(pattern in err for err in errors):
            match = re.search(rf"({pattern}.*?)$", log_content, re.MULTILINE)
            if match:
                errors.append(match.group(1).strip())

    # Common warning patterns
    warning_patterns = [
        r"LaTeX Warning: (.+)",
        r"Package \w+ Warning: (.+)",
        r"Overfull \\hbox \((.+)\)",
        r"Underfull \\hbox \((.+)\)",
    ]
    for pattern in warning_patterns:
        compiled = re.compile(pattern, re.MULTILINE)
        for match in compiled.finditer(log_content):
            warnings.append(match.group(1).strip())

    return errors, warnings


def failure_reason(errors: List[str]) -> str:
    """Human-readable summary of a failed compilation: the first LaTeX error."""
    return errors[0] if errors else UNKNOWN_ERROR


class LatexCompiler:
    """
    Adapter around an external LaTeX compiler.

    Defaults come from the environment (VELLUM_LATEX_COMPILER,
    VELLUM_COMPILE_TIMEOUT_S, VELLUM_KEEP_LATEX_ARTIFACTS). Instances hold
    configuration only, so one compiler can serve concurrent compilations.
    """

    def __init__(
        self,
        compiler: Optional[str] = None,
        num_passes: int = 2,
        timeout_s: Optional[float] = None,
        work_dir: Optional[Path] = None,
        keep_artifacts: Optional[bool] = None,
    ):
        """
        Args:
            compiler: Compiler executable (default: VELLUM_LATEX_COMPILER or pdflatex)
            num_passes: Compiler passes (default: 2 for cross-references)
            timeout_s: Total time budget for all passes
            work_dir: Parent directory for per-compilation temp dirs (system temp if None)
            keep_artifacts: Keep the temp dir after compiling (for debugging)
        """
        if num_passes < 1:
            raise ValueError(f"num_passes must be at least 1, got {num_passes}")
        self.compiler = compiler or LATEX_COMPILER
        self.num_passes = num_passes
        self.timeout_s = COMPILE_TIMEOUT_S if timeout_s is None else float(timeout_s)
        self.work_dir = Path(work_dir) if work_dir is not None else None
        self.keep_artifacts = KEEP_LATEX_ARTIFACTS if keep_artifacts is None else keep_artifacts

    def is_available(self) -> bool:
        """Whether the compiler executable is on PATH."""
        return shutil.which(self.compiler) is not None

    def _command(self, tex_name: str) -> List[str]:
        return [
            self.compiler,
            "-interaction=nonstopmode",
            "-halt-on-error",
            "-file-line-error",
            tex_name,
        ]

    @contextmanager
    def _compile_dir(self, source: str) -> Iterator[Path]:
        """Fresh directory holding the source; removed afterwards unless keep_artifacts."""
        if self.work_dir is not None:
            self.work_dir.mkdir(parents=True, exist_ok=True)
        compile_dir = Path(tempfile.mkdtemp(prefix="vellum_", dir=self.work_dir))
        try:
            (compile_dir / f"{SOURCE_STEM}.tex").write_text(source, encoding="utf-8")
            yield compile_dir
        finally:
            if self.keep_artifacts:
                _log_debug(f"Keeping LaTeX artifacts in {compile_dir}")
            else:
                shutil.rmtree(compile_dir, ignore_errors=True)

    def _check_source(self, source: str, validate: bool) -> None:
        if not validate:
            return
        validation = validate_latex_source(source)
        if not validation.is_valid:
            raise CompilationError(
                "LaTeX source failed validation", errors=validation.issues
            )

    def _unavailable_result(self) -> CompilationResult:
        reason = f"LaTeX compiler '{self.compiler}' not found on PATH"
        return CompilationResult(success=False, errors=[reason], reason=reason)

    def _timeout_result(self, outputs: List[str], elapsed_s: float) -> CompilationResult:
        reason = f"Compilation timed out after {self.timeout_s:g}s"
        return CompilationResult(
            success=False,
            errors=[reason],
            stdout="\n".join(outputs),
            elapsed_s=elapsed_s,
            reason=reason,
        )

    def _collect_result(
        self, compile_dir: Path, outputs: List[str], elapsed_s: float
    ) -> CompilationResult:
        """Build the result from the compile directory after the passes ran."""
        log_file = compile_dir / f"{SOURCE_STEM}.log"
        log_content = ""
        errors: List[str] = []
        warnings: List[str] = []

        if log_file.exists():
            # pdflatex writes log files in latin-1 encoding (font metadata contains non-UTF-8)
            log_content = log_file.read_text(encoding="latin-1")
            errors, warnings = parse_latex_log(log_content)

        pdf_path = compile_dir / f"{SOURCE_STEM}.pdf"
        pdf_bytes = pdf_path.read_bytes() if pdf_path.exists() else None

        if pdf_bytes is None and not errors:
            errors.append("PDF file was not generated")
        # A PDF with no parsed errors is a success even after a non-zero exit
        success = pdf_bytes is not None and not errors

        return CompilationResult(
            success=success,
            pdf_bytes=pdf_bytes if success else None,
            errors=errors,
            warnings=warnings,
            stdout="\n".join(outputs),
            log=log_content,
            elapsed_s=elapsed_s,
            reason="" if success else failure_reason(errors),
        )

    def compile_with_diagnostics(self, source: str) -> CompilationResult:
        """
        Compile a LaTeX source and report diagnostics instead of raising.

        Args:
            source: Complete LaTeX document

        Returns:
            CompilationResult with PDF bytes on success, parsed errors otherwise
        """
        if not self.is_available():
            result = self._unavailable_result()
            log_compilation_result(result)
            return result

        with self._compile_dir(source) as compile_dir:
            log_compilation_start(self.compiler, compile_dir, self.num_passes)
            start_time = time.time()
            outputs: List[str] = []

            # Multiple passes needed for cross-references and page numbers
            for _ in range(self.num_passes):
                remaining = self.timeout_s - (time.time() - start_time)
                try:
                    completed = subprocess.run(
                        self._command(f"{SOURCE_STEM}.tex"),
                        cwd=compile_dir,
                        capture_output=True,
                        text=True,
                        encoding="utf-8",
                        errors="replace",  # Replace invalid UTF-8 bytes instead of crashing
                        timeout=max(remaining, 0.001),
                    )
                except subprocess.TimeoutExpired:
                    result = self._timeout_result(outputs, time.time() - start_time)
                    log_compilation_result(result)
                    return result

                outputs.append(completed.stdout)
                # Stop on fatal errors; log parsing below separates errors from warnings
                if completed.returncode != 0:
                    break

            result = self._collect_result(compile_dir, outputs, time.time() - start_time)

        log_compilation_result(result)
        return result

    def compile(self, source: str, validate: bool = False) -> bytes:
        """
        Compile a LaTeX source to PDF bytes.

        Args:
            source: Complete LaTeX document
            validate: Run validate_latex_source() first (for untrusted sources)

        Returns:
            PDF bytes

        Raises:
            CompilationError: Validation failure, missing compiler, timeout, or
                              no PDF produced
        """
        self._check_source(source, validate)
        return self.compile_with_diagnostics(source).raise_for_failure()

    async def compile_async(self, source: str, validate: bool = False) -> bytes:
        """
        Compile a LaTeX source to PDF bytes without blocking the event loop.

        Cancelling the awaiting task kills the running compiler process and
        removes the temporary directory.

        Raises:
            CompilationError: As compile()
            asyncio.CancelledError: If the awaiting task is cancelled
        """
        self._check_source(source, validate)
        if not self.is_available():
            return self._unavailable_result().raise_for_failure()

        with self._compile_dir(source) as compile_dir:
            log_compilation_start(self.compiler, compile_dir, self.num_passes)
            start_time = time.time()
            outputs: List[str] = []

            for _ in range(self.num_passes):
                remaining = self.timeout_s - (time.time() - start_time)
                process = await asyncio.create_subprocess_exec(
                    *self._command(f"{SOURCE_STEM}.tex"),
                    cwd=str(compile_dir),
                    stdout=asyncio.subprocess.PIPE,
                    stderr=asyncio.subprocess.STDOUT,
                )
                try:
                    stdout, _ = await asyncio.wait_for(
                        process.communicate(), timeout=max(remaining, 0.001)
                    )
                except asyncio.TimeoutError:
                    await _kill(process)
                    result = self._timeout_result(outputs, time.time() - start_time)
                    log_compilation_result(result)
                    return result.raise_for_failure()
                except asyncio.CancelledError:
                    await _kill(process)
                    _log_debug("Compilation cancelled; compiler process killed")
                    raise

                outputs.append(stdout.decode("utf-8", errors="replace"))
                if process.returncode != 0:
                    break

            result = self._collect_result(compile_dir, outputs, time.time() - start_time)

        log_compilation_result(result)
        return result.raise_for_failure()


async def _kill(process: asyncio.subprocess.Process) -> None:
    if process.returncode is None:
        try:
            process.kill()
        except ProcessLookupError:
            pass
        await process.wait()


def compile_latex(source: str, **kwargs) -> bytes:
    """
    Compile a LaTeX source with a compiler configured from the environment.

    Args:
        source: Complete LaTeX document
        **kwargs: Passed to LatexCompiler

    Raises:
        CompilationError: If no PDF could be produced
    """
    return LatexCompiler(**kwargs).compile(source)
