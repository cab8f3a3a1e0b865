#!/usr/bin/env python3
"""
Resume Rendering CLI

Renders structured resume records (YAML/JSON) to HTML previews or LaTeX
sources, previews LaTeX as HTML, and compiles LaTeX to PDF.

Commands:
    render    - Render a resume record to HTML or LaTeX
    templates - List available templates
    preview   - Convert a LaTeX source to an approximate HTML preview
    validate  - Check a LaTeX source for required structure and forbidden commands
    fill      - Fill an external LaTeX template's \\VAR{key} placeholders
    compile   - Compile a LaTeX source (or a resume record) to PDF

Examples:\n

    render_resume.py render data/ada.yaml                          # HTML to stdout

    render_resume.py render data/ada.yaml -f latex -t minimal -o ada.tex

    render_resume.py preview ada.tex -o ada_preview.html

    render_resume.py compile ada.tex -o ada.pdf
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Optional

import typer
from dotenv import load_dotenv
from omegaconf import OmegaConf
from typing_extensions import Annotated

from vellum.contexts.rendering import (
    CompilationError,
    DocumentRenderer,
    ExternalTemplateError,
    LatexCompiler,
    fill_external_template,
    latex_to_preview_html,
    validate_latex_source,
)
from vellum.contexts.rendering.logger import setup_rendering_logger
from vellum.contexts.templating import InvalidResumeStructureError, ResumeRecord
from vellum.contexts.templating.formats import RESPONSIVE_MODES

load_dotenv()
LOGS_PATH = os.getenv("VELLUM_LOGS_PATH")

RECORD_SUFFIXES = {".yaml", ".yml", ".json"}


def start_logging(verbose: bool) -> None:
    """Console logging (DEBUG when verbose), plus a session log file if VELLUM_LOGS_PATH is set."""
    log_dir = None
    if LOGS_PATH:
        log_dir = Path(LOGS_PATH) / f"render_{datetime.now().strftime('%Y%m%d_%H%M%S')}"
    setup_rendering_logger(log_dir, console_level="DEBUG" if verbose else "WARNING")


def load_record(record_path: Path) -> ResumeRecord:
    try:
        return ResumeRecord.from_yaml(record_path)
    except (FileNotFoundError, InvalidResumeStructureError) as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


def write_output(content: str, output: Optional[Path]) -> None:
    """Write to a file, or to stdout if output is None."""
    if output is None:
        typer.echo(content, nl=False)
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(content, encoding="utf-8")
    typer.secho(f"✓ Wrote {output}", fg=typer.colors.GREEN, err=True)


app = typer.Typer(
    help="Render resume records to HTML previews, LaTeX sources and PDFs",
    add_completion=False,
    invoke_without_command=True,
)


@app.callback()
def main(ctx: typer.Context):
    """Show help by default when no command is provided."""
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()


@app.command("render")
def render_command(
    record_path: Annotated[
        Path,
        typer.Argument(help="Resume record (YAML or JSON)", exists=True, dir_okay=False),
    ],
    template_id: Annotated[
        Optional[str],
        typer.Option(
            "--template",
            "-t",
            help="Template id (default: the record's templateType, then 'modern')",
        ),
    ] = None,
    output_format: Annotated[
        str,
        typer.Option("--format", "-f", help="Output format: html or latex"),
    ] = "html",
    mode: Annotated[
        str,
        typer.Option("--mode", "-m", help=f"Responsive mode for HTML: {', '.join(RESPONSIVE_MODES)}"),
    ] = "desktop",
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output file (default: stdout)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
):
    """
    Render a resume record to HTML or LaTeX.

    Examples:\n

        $ render_resume.py render ada.yaml                        # HTML preview to stdout

        $ render_resume.py render ada.yaml -f latex -o ada.tex    # LaTeX source to file

        $ render_resume.py render ada.yaml -t creative -m mobile  # Mobile creative preview
    """
    start_logging(verbose)

    try:
        renderer = DocumentRenderer(output_format)
    except ValueError as e:
        typer.secho(f"Error: {e}\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    if template_id is not None and not renderer.is_valid_template(template_id):
        typer.secho(
            f"Unknown template '{template_id}', using the default template",
            fg=typer.colors.YELLOW,
            err=True,
        )

    record = load_record(record_path)
    write_output(renderer.render(record, template_id, mode), output)


@app.command("templates")
def templates_command():
    """List available templates."""
    typer.secho("\nAvailable templates:", fg=typer.colors.BLUE, bold=True)
    for template in DocumentRenderer().list_templates():
        typer.echo(f"  {template['id']:<10} {template['displayName']:<10} {template['description']}")
    typer.echo("")


@app.command("preview")
def preview_command(
    tex_path: Annotated[
        Path,
        typer.Argument(help="LaTeX source file", exists=True, dir_okay=False),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output HTML file (default: stdout)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
):
    """
    Convert a LaTeX source to an approximate HTML preview.

    The preview is rule-based and lossy; the compiled PDF is authoritative.
    """
    start_logging(verbose)
    write_output(latex_to_preview_html(tex_path.read_text(encoding="utf-8")), output)


@app.command("validate")
def validate_command(
    tex_path: Annotated[
        Path,
        typer.Argument(help="LaTeX source file", exists=True, dir_okay=False),
    ],
):
    """Check a LaTeX source for required structure and forbidden commands."""
    result = validate_latex_source(tex_path.read_text(encoding="utf-8"))

    if result.is_valid:
        typer.secho("\n✓ Validation passed", fg=typer.colors.GREEN, bold=True)
    else:
        typer.secho(
            f"\n✗ Validation failed with {len(result.issues)} issues", fg=typer.colors.RED, bold=True
        )
        for issue in result.issues:
            typer.secho(f"  - {issue}", fg=typer.colors.RED)
    for warning in result.warnings:
        typer.secho(f"  ! {warning}", fg=typer.colors.YELLOW)
    typer.echo("")

    raise typer.Exit(code=0 if result.is_valid else 1)


@app.command("fill")
def fill_command(
    tex_path: Annotated[
        Path,
        typer.Argument(help="LaTeX template with \\VAR{key} placeholders", exists=True, dir_okay=False),
    ],
    values_path: Annotated[
        Path,
        typer.Argument(help="Placeholder values (YAML or JSON mapping)", exists=True, dir_okay=False),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output LaTeX file (default: stdout)"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show debug logging"),
    ] = False,
):
    """
    Validate an external LaTeX template and fill its \\VAR{key} placeholders.

    Examples:\n

        $ render_resume.py fill letter.tex ada.yaml -o ada_letter.tex
    """
    start_logging(verbose)

    values = OmegaConf.to_container(OmegaConf.load(values_path), resolve=True)
    if not isinstance(values, dict):
        typer.secho(f"Error: {values_path} must contain a mapping\n", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    try:
        filled = fill_external_template(tex_path.read_text(encoding="utf-8"), values)
    except ExternalTemplateError as e:
        typer.secho("\n✗ Template rejected", fg=typer.colors.RED, bold=True, err=True)
        for issue in e.issues:
            typer.secho(f"  - {issue}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)

    write_output(filled, output)


@app.command("compile")
def compile_command(
    source_path: Annotated[
        Path,
        typer.Argument(
            help="LaTeX source, or a resume record (YAML/JSON) to render first",
            exists=True,
            dir_okay=False,
        ),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option("--output", "-o", help="Output PDF (default: source path with .pdf)"),
    ] = None,
    template_id: Annotated[
        Optional[str],
        typer.Option("--template", "-t", help="Template id when compiling a resume record"),
    ] = None,
    num_passes: Annotated[
        int,
        typer.Option(
            "--passes",
            "-p",
            help="Number of compiler passes (default: 2 for cross-references)",
            min=1,
            max=5,
        ),
    ] = 2,
    timeout_s: Annotated[
        Optional[float],
        typer.Option("--timeout", help="Time budget in seconds (default: VELLUM_COMPILE_TIMEOUT_S)"),
    ] = None,
    validate: Annotated[
        bool,
        typer.Option("--validate/--no-validate", help="Reject unsafe sources before compiling"),
    ] = True,
    keep_artifacts: Annotated[
        bool,
        typer.Option(
            "--keep-artifacts",
            "-k",
            help="Keep the compilation directory (.aux, .log, etc.) for debugging",
        ),
    ] = False,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Show detailed compilation output (compiler stdout)",
        ),
    ] = False,
):
    """
    Compile a LaTeX source to PDF.

    Examples:\n

        $ render_resume.py compile ada.tex                       # Writes ada.pdf

        $ render_resume.py compile ada.yaml -t classic           # Render, then compile

        $ render_resume.py compile ada.tex --passes 3 --verbose  # Three passes, debug output
    """
    start_logging(verbose)

    if source_path.suffix.lower() in RECORD_SUFFIXES:
        source = DocumentRenderer("latex").render(load_record(source_path), template_id)
    else:
        source = source_path.read_text(encoding="utf-8")

    compiler = LatexCompiler(
        num_passes=num_passes, timeout_s=timeout_s, keep_artifacts=keep_artifacts or None
    )
    if not compiler.is_available():
        typer.secho(
            f"Error: LaTeX compiler '{compiler.compiler}' not found. "
            "Install TeX Live or set VELLUM_LATEX_COMPILER.\n",
            fg=typer.colors.RED,
            err=True,
        )
        raise typer.Exit(code=1)

    typer.secho(f"\nCompiling: {source_path}", fg=typer.colors.BLUE, bold=True, err=True)
    typer.echo(f"Passes: {num_passes}", err=True)

    try:
        pdf_bytes = compiler.compile(source, validate=validate)
    except CompilationError as e:
        typer.secho(f"\n✗ Compilation failed: {e.reason}", fg=typer.colors.RED, bold=True, err=True)
        for error in e.errors[:10]:  # Limit to first 10
            typer.secho(f"  - {error}", fg=typer.colors.RED, err=True)
        if len(e.errors) > 10:
            typer.echo(f"  ... and {len(e.errors) - 10} more", err=True)
        raise typer.Exit(code=1)

    pdf_path = output or source_path.with_suffix(".pdf")
    pdf_path.parent.mkdir(parents=True, exist_ok=True)
    pdf_path.write_bytes(pdf_bytes)
    typer.secho(f"✓ Compilation succeeded: {pdf_path}", fg=typer.colors.GREEN, bold=True, err=True)


if __name__ == "__main__":
    app()
