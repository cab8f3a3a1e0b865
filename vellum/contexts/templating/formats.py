"""
Output Formats

An output format bundles everything that differs between the HTML preview
and the LaTeX source: the template directory, the escaper handed to
templates, how responsive modes are interpreted, and the document
boilerplate wrapped around a strategy's body.

Section data transformations are NOT format specific; they live in
section_renderers.py and feed both formats the same plain-text labels.
"""

from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from vellum.contexts.templating.registries import (
    LATEX_DELIMITERS,
    TEMPLATE_ROOT,
    StyleConfigRegistry,
    TemplateRegistry,
)
from vellum.contexts.templating.resume_data_structure import ResumeRecord
from vellum.utils.escaping import escape_markup_text, escape_typesetting_text
from vellum.utils.text_processing import set_max_consecutive_blank_lines

RESPONSIVE_MODES = ("desktop", "tablet", "mobile")
DEFAULT_MODE = "desktop"


class OutputFormat(ABC):
    """
    Base class for output formats.

    Attributes:
        name: Format identifier ("html" or "latex")
        registry: Jinja2 template registry for this format's templates
        styles: Style config registry shared by the strategies using this format
    """

    name: str = ""
    suffix: str = ""
    template_subdir: str = ""
    delimiters: Optional[Dict[str, str]] = None

    def __init__(
        self,
        template_dir: Optional[Path] = None,
        styles: Optional[StyleConfigRegistry] = None,
    ):
        """
        Args:
            template_dir: Override directory for this format's templates
            styles: Style config registry (a fresh one is created if None)
        """
        if template_dir is None:
            template_dir = TEMPLATE_ROOT / self.template_subdir
        self.styles = styles or StyleConfigRegistry()
        self.registry = TemplateRegistry(
            base_path=template_dir,
            suffix=self.suffix,
            escape=self.escape,
            delimiters=self.delimiters,
        )

    @property
    @abstractmethod
    def escape(self) -> Callable[[Any], str]:
        """Escaper for user-supplied text in this format."""

    @abstractmethod
    def resolve_mode(self, mode: Optional[str]) -> Optional[str]:
        """Map a requested responsive mode to the one this format uses."""

    @abstractmethod
    def wrap(
        self,
        body: str,
        template_id: str,
        style: Dict[str, Any],
        mode: Optional[str],
        record: ResumeRecord,
    ) -> str:
        """Wrap a strategy body with document-level boilerplate."""


class HtmlFormat(OutputFormat):
    """Live HTML preview: a self-contained fragment with inline <style> blocks."""

    name = "html"
    suffix = "html"
    template_subdir = "html"

    @property
    def escape(self) -> Callable[[Any], str]:
        return escape_markup_text

    def resolve_mode(self, mode: Optional[str]) -> Optional[str]:
        return mode if mode in RESPONSIVE_MODES else DEFAULT_MODE

    def wrap(
        self,
        body: str,
        template_id: str,
        style: Dict[str, Any],
        mode: Optional[str],
        record: ResumeRecord,
    ) -> str:
        template = self.registry.get_template("document")
        html = template.render(
            template_id=template_id,
            mode=mode,
            style=style,
            base_css=self.registry.read_asset("base.css"),
            body=body,
        )
        return set_max_consecutive_blank_lines(html, max_consecutive=0) + "\n"


class TypesettingFormat(OutputFormat):
    """LaTeX source for compilation by an external pdflatex-compatible compiler."""

    name = "latex"
    suffix = "tex"
    template_subdir = "latex"
    delimiters = LATEX_DELIMITERS

    @property
    def escape(self) -> Callable[[Any], str]:
        return escape_typesetting_text

    def resolve_mode(self, mode: Optional[str]) -> Optional[str]:
        # Responsive modes have no meaning for a paged document
        return None

    def wrap(
        self,
        body: str,
        template_id: str,
        style: Dict[str, Any],
        mode: Optional[str],
        record: ResumeRecord,
    ) -> str:
        template = self.registry.get_template("document")
        latex = template.render(
            template_id=template_id,
            style=style,
            author=record.personal_info.full_name,
            body=body,
        )
        return set_max_consecutive_blank_lines(latex, max_consecutive=1) + "\n"


OUTPUT_FORMATS = {
    HtmlFormat.name: HtmlFormat,
    TypesettingFormat.name: TypesettingFormat,
}

# Accepted aliases for the LaTeX format
FORMAT_ALIASES = {"tex": "latex", "typesetting": "latex", "preview": "html"}


def get_output_format(name: str, **kwargs) -> OutputFormat:
    """
    Construct an output format by name.

    Args:
        name: "html" or "latex" (aliases: "tex", "typesetting", "preview")
        **kwargs: Passed to the format constructor

    Raises:
        ValueError: If name is not a known format
    """
    key = FORMAT_ALIASES.get(name, name)
    if key not in OUTPUT_FORMATS:
        raise ValueError(
            f"Unknown output format '{name}'. Valid formats: {sorted(OUTPUT_FORMATS)}"
        )
    return OUTPUT_FORMATS[key](**kwargs)
