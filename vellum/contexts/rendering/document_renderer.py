"""
Document Renderer

Entry point of the engine: record + template id (+ mode) -> complete HTML
preview fragment or LaTeX document. Stateless apart from its template
caches; identical inputs always produce identical output.
"""

import time
from typing import Any, Dict, List, Mapping, Optional, Union

from vellum.contexts.rendering.logger import _log_debug, log_render_result, log_render_start
from vellum.contexts.templating.formats import DEFAULT_MODE, OutputFormat, get_output_format
from vellum.contexts.templating.registries import StyleConfigRegistry
from vellum.contexts.templating.resume_data_structure import ResumeRecord
from vellum.contexts.templating.strategies import StrategyRegistry, default_strategy_registry

RecordInput = Union[ResumeRecord, Mapping[str, Any], None]


class DocumentRenderer:
    """
    Renders resume records in one output format.

    Each instance owns its output format, template registry and strategy
    registry; two renderers never share state.

    Attributes:
        output_format: HtmlFormat or TypesettingFormat instance
        strategies: Template id -> strategy registry

    Example:
        renderer = DocumentRenderer("latex")
        source = renderer.render({"personalInfo": {"firstName": "Ada"}}, "minimal")
    """

    def __init__(
        self,
        output_format: Union[str, OutputFormat] = "html",
        strategies: Optional[StrategyRegistry] = None,
        styles: Optional[StyleConfigRegistry] = None,
    ):
        """
        Args:
            output_format: "html", "latex" (or an alias), or an OutputFormat instance
            strategies: Strategy registry (the four built-in templates if None)
            styles: Style config registry used when building the format and strategies
        """
        if isinstance(output_format, OutputFormat):
            self.output_format = output_format
        else:
            self.output_format = get_output_format(output_format, styles=styles)
        self.strategies = strategies or default_strategy_registry(self.output_format.styles)

    @staticmethod
    def _as_record(record: RecordInput) -> ResumeRecord:
        if isinstance(record, ResumeRecord):
            return record
        return ResumeRecord.from_dict(record)

    def render(
        self,
        record: RecordInput,
        template_id: Optional[str] = None,
        mode: Optional[str] = DEFAULT_MODE,
    ) -> str:
        """
        Render a record into a complete document.

        Args:
            record: ResumeRecord or its dict form (camelCase or snake_case keys)
            template_id: Template to use; the record's templateType if None.
                         Unknown ids fall back to the default template.
            mode: Responsive mode for HTML ("desktop", "tablet", "mobile");
                  unknown modes fall back to desktop, ignored for LaTeX

        Returns:
            HTML fragment or LaTeX document

        Raises:
            InvalidResumeStructureError: If record is neither a ResumeRecord nor a mapping
        """
        record = self._as_record(record)
        requested_id = template_id if template_id is not None else record.template_type
        strategy = self.strategies.get(requested_id)

        resolved_mode = self.output_format.resolve_mode(mode)
        if mode is not None and resolved_mode is not None and resolved_mode != mode:
            _log_debug(f"Unknown mode '{mode}', falling back to '{resolved_mode}'")

        log_render_start(strategy.style_id, self.output_format.name, resolved_mode)
        start_time = time.time()

        body = strategy.render(record, self.output_format, resolved_mode)
        document = self.output_format.wrap(
            body=body,
            template_id=strategy.style_id,
            style=strategy.style_for(resolved_mode),
            mode=resolved_mode,
            record=record,
        )

        log_render_result(
            strategy.style_id, self.output_format.name, len(document), time.time() - start_time
        )
        return document

    def list_templates(self) -> List[Dict[str, str]]:
        """[{"id", "displayName", "description"}] for every available template."""
        return self.strategies.list_templates()

    def is_valid_template(self, template_id: Optional[str]) -> bool:
        return self.strategies.is_valid_template(template_id)


def render_html(record: RecordInput, template_id: Optional[str] = None, mode: str = DEFAULT_MODE) -> str:
    """Render a record as an HTML preview fragment with a fresh renderer."""
    return DocumentRenderer("html").render(record, template_id, mode)


def render_latex(record: RecordInput, template_id: Optional[str] = None) -> str:
    """Render a record as a LaTeX document with a fresh renderer."""
    return DocumentRenderer("latex").render(record, template_id)
