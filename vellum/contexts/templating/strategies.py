"""
Template Strategies

A strategy is one visual template (modern, classic, creative, minimal). It
decides which sections appear in which order and column, and which style
metadata (colors, fonts, margins) the output format receives. What a strategy
never does is format data: every strategy consumes the same fragments from
render_sections(), so a record reads the same in every template and in both
output formats.

Style metadata lives in template/styles.yaml; a strategy is little more than
a style id plus the layout logic that consumes it.
"""

from abc import ABC
from typing import Any, Dict, List, Optional

from jinja2 import TemplateError

from vellum.contexts.templating.exceptions import TemplateRenderError
from vellum.contexts.templating.formats import OutputFormat
from vellum.contexts.templating.logger import _log_debug, log_template_fallback
from vellum.contexts.templating.registries import StyleConfigRegistry
from vellum.contexts.templating.resume_data_structure import ResumeRecord
from vellum.contexts.templating.section_renderers import render_sections

DEFAULT_TEMPLATE_ID = "modern"

# Sections placed above the columns by every layout
_HEADER_SECTIONS = ("header", "summary")


class TemplateStrategy(ABC):
    """
    Base class for resume templates.

    Subclasses set `style_id`; everything else is read from styles.yaml.

    Attributes:
        style_id: Template identifier and key into styles.yaml
        styles: Style config registry
    """

    style_id: str = ""

    def __init__(self, styles: Optional[StyleConfigRegistry] = None):
        self.styles = styles or StyleConfigRegistry()

    @property
    def display_name(self) -> str:
        return self.styles.get_style(self.style_id)["display_name"]

    @property
    def description(self) -> str:
        return self.styles.get_style(self.style_id)["description"]

    def style_for(self, mode: Optional[str] = None) -> Dict[str, Any]:
        """
        Style metadata for this template, with responsive constraints for mode.

        Args:
            mode: Responsive mode already resolved by the output format, or
                  None for formats without modes (LaTeX)

        Returns:
            Style dict; style["mode"] holds the mode's constraints or None
        """
        style = self.styles.get_style(self.style_id)
        style["mode"] = self.styles.get_modes().get(mode) if mode else None
        return style

    def section_layout(self, style: Dict[str, Any]) -> Dict[str, List[str]]:
        """
        Split the style's section order into main and side columns.

        Returns:
            {"main": [...], "side": [...]} of section names, header and summary excluded
        """
        side = [name for name in style.get("side_sections") or [] if name not in _HEADER_SECTIONS]
        main = [
            name
            for name in style["section_order"]
            if name not in _HEADER_SECTIONS and name not in side
        ]
        if style["layout"] != "two_column":
            return {"main": main + side, "side": []}
        return {"main": main, "side": side}

    def compose(
        self,
        sections: Dict[str, str],
        output_format: OutputFormat,
        style: Optional[Dict[str, Any]] = None,
    ) -> str:
        """
        Place rendered section fragments into this template's layout.

        Empty fragments are dropped here, so layouts never see them.

        Args:
            sections: Section name -> fragment, as returned by render_sections()
            output_format: Output format whose layout template is used
            style: Style from style_for() (computed without a mode if None)

        Returns:
            Document body (without format boilerplate)

        Raises:
            TemplateRenderError: If the layout template fails to render
        """
        if style is None:
            style = self.style_for(output_format.resolve_mode(None))

        columns = self.section_layout(style)
        layout_name = f"layouts/{style['layout']}"
        try:
            template = output_format.registry.get_template(layout_name)
            return template.render(
                style=style,
                header=sections.get("header", ""),
                summary=sections.get("summary", ""),
                sections=[sections[name] for name in columns["main"] if sections.get(name)],
                side_sections=[sections[name] for name in columns["side"] if sections.get(name)],
            ).strip()
        except TemplateError as e:
            raise TemplateRenderError(
                f"Failed to compose '{self.style_id}' layout",
                section_name="layout",
                template_path=output_format.registry.get_template_path(layout_name),
                original_error=e,
            ) from e

    def render(
        self, record: ResumeRecord, output_format: OutputFormat, mode: Optional[str] = None
    ) -> str:
        """Render a record's sections and compose them into this template's body."""
        style = self.style_for(output_format.resolve_mode(mode))
        return self.compose(render_sections(record, output_format), output_format, style)

    def to_listing(self) -> Dict[str, str]:
        """Entry for template pickers."""
        return {
            "id": self.style_id,
            "displayName": self.display_name,
            "description": self.description,
        }


class ModernStrategy(TemplateStrategy):
    """Single column, indigo accents, gradient skill tags."""

    style_id = "modern"


class ClassicStrategy(TemplateStrategy):
    """Single column, serif, education listed before experience."""

    style_id = "classic"


class CreativeStrategy(TemplateStrategy):
    """
    Two columns: experience and projects in the main column, education,
    skills, certifications and achievements beside them. Columns stack on
    tablet and mobile.
    """

    style_id = "creative"


class MinimalStrategy(TemplateStrategy):
    """Single column, black on white, light name weight, no section rules."""

    style_id = "minimal"


BUILTIN_STRATEGIES = [ModernStrategy, ClassicStrategy, CreativeStrategy, MinimalStrategy]


class StrategyRegistry:
    """
    Template id -> strategy lookup with a default.

    Unknown ids never raise: get() falls back to the default strategy.
    """

    def __init__(self, default_id: str = DEFAULT_TEMPLATE_ID):
        self.default_id = default_id
        self._strategies: Dict[str, TemplateStrategy] = {}

    def register(self, strategy: TemplateStrategy) -> TemplateStrategy:
        """Register a strategy under its style_id (replacing any previous one)."""
        if not strategy.style_id:
            raise ValueError(f"{type(strategy).__name__} has no style_id")
        self._strategies[strategy.style_id] = strategy
        _log_debug(f"Registered template '{strategy.style_id}'")
        return strategy

    def get(self, template_id: Optional[str]) -> TemplateStrategy:
        """
        Get a strategy by id, falling back to the default for unknown ids.

        Raises:
            KeyError: Only if the default itself was never registered
        """
        if template_id in self._strategies:
            return self._strategies[template_id]
        if self.default_id not in self._strategies:
            raise KeyError(f"Default template '{self.default_id}' is not registered")
        log_template_fallback(template_id, self.default_id)
        return self._strategies[self.default_id]

    def ids(self) -> List[str]:
        """Registered template ids in registration order."""
        return list(self._strategies)

    def list_templates(self) -> List[Dict[str, str]]:
        """[{"id", "displayName", "description"}] for every registered template."""
        return [strategy.to_listing() for strategy in self._strategies.values()]

    def is_valid_template(self, template_id: Optional[str]) -> bool:
        return template_id in self._strategies

    def __contains__(self, template_id) -> bool:
        return self.is_valid_template(template_id)

    def __len__(self) -> int:
        return len(self._strategies)


def default_strategy_registry(styles: Optional[StyleConfigRegistry] = None) -> StrategyRegistry:
    """
    Build a fresh registry holding the four built-in templates.

    Args:
        styles: Style config registry shared by the strategies (new one if None)
    """
    styles = styles or StyleConfigRegistry()
    registry = StrategyRegistry()
    for strategy_cls in BUILTIN_STRATEGIES:
        registry.register(strategy_cls(styles))
    return registry
