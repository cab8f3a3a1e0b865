"""
Templating Context

Responsibilities:
- Manages the resume record data model (template-independent schema)
- Renders each resume section into HTML or LaTeX fragments
- Owns the Jinja2 template system for both output formats (template/html, template/latex)
- Owns the visual templates (strategies) and their style metadata (template/styles.yaml)

Owns: Resume data model, section rendering, template strategies, style config
Never: Compiles LaTeX or decides which render result the caller keeps
"""

from vellum.contexts.templating.exceptions import (
    InvalidResumeStructureError,
    TemplateRenderError,
)
from vellum.contexts.templating.formats import (
    HtmlFormat,
    OutputFormat,
    TypesettingFormat,
    get_output_format,
)
from vellum.contexts.templating.resume_data_structure import (
    CertificationItem,
    EducationItem,
    ExperienceItem,
    PersonalInfo,
    ProjectItem,
    ResumeRecord,
    Skill,
)
from vellum.contexts.templating.section_renderers import render_sections
from vellum.contexts.templating.strategies import (
    ClassicStrategy,
    CreativeStrategy,
    MinimalStrategy,
    ModernStrategy,
    StrategyRegistry,
    TemplateStrategy,
    default_strategy_registry,
)

__all__ = [
    # Data model
    "ResumeRecord",
    "PersonalInfo",
    "ExperienceItem",
    "EducationItem",
    "Skill",
    "ProjectItem",
    "CertificationItem",
    # Output formats
    "OutputFormat",
    "HtmlFormat",
    "TypesettingFormat",
    "get_output_format",
    # Rendering
    "render_sections",
    "TemplateStrategy",
    "ModernStrategy",
    "ClassicStrategy",
    "CreativeStrategy",
    "MinimalStrategy",
    "StrategyRegistry",
    "default_strategy_registry",
    # Errors
    "TemplateRenderError",
    "InvalidResumeStructureError",
]
