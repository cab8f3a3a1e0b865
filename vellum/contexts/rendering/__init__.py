"""
Rendering Context

Responsibilities:
- Renders resume records into complete HTML previews and LaTeX documents
- Converts LaTeX sources into approximate HTML previews
- Compiles LaTeX to PDF with an external compiler and reports its errors
- Validates untrusted LaTeX sources before compilation
- Fills caller-supplied LaTeX templates that mark their slots as \\VAR{key}
- Helps interactive callers debounce renders and keep only the latest result

Owns: Document assembly, LaTeX compilation, preview conversion
Never: Decides how individual sections are formatted (templating context)
"""

from vellum.contexts.rendering.compiler import CompilationResult, LatexCompiler, compile_latex
from vellum.contexts.rendering.document_renderer import (
    DocumentRenderer,
    render_html,
    render_latex,
)
from vellum.contexts.rendering.exceptions import CompilationError, ExternalTemplateError
from vellum.contexts.rendering.external_template import fill_external_template
from vellum.contexts.rendering.preview_converter import (
    PreviewConverter,
    PreviewRule,
    latex_to_preview_html,
)
from vellum.contexts.rendering.scheduling import DebouncedRenderer, RenderTokenGate
from vellum.contexts.rendering.validator import ValidationResult, validate_latex_source

__all__ = [
    # Document rendering
    "DocumentRenderer",
    "render_html",
    "render_latex",
    # Preview
    "PreviewConverter",
    "PreviewRule",
    "latex_to_preview_html",
    # Compilation
    "LatexCompiler",
    "CompilationResult",
    "CompilationError",
    "compile_latex",
    "ValidationResult",
    "validate_latex_source",
    # External templates
    "fill_external_template",
    "ExternalTemplateError",
    # Scheduling
    "RenderTokenGate",
    "DebouncedRenderer",
]
