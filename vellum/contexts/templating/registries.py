"""
Templating Registries

Loading and caching of Jinja2 section/layout templates and of the style
configuration. Each output format owns its own TemplateRegistry instance;
there are no module-level singletons.
"""

import copy
import os
from pathlib import Path
from typing import Any, Callable, Dict, Optional

from dotenv import load_dotenv
from jinja2 import Environment, FileSystemLoader, StrictUndefined, Template, TemplateNotFound
from omegaconf import OmegaConf

load_dotenv()

TEMPLATE_ROOT = Path(__file__).parent / "template"
STYLES_PATH = Path(os.getenv("VELLUM_STYLES_PATH", str(TEMPLATE_ROOT / "styles.yaml")))

# LaTeX-safe delimiters: braces in LaTeX never collide with Jinja2 syntax
LATEX_DELIMITERS = {
    "variable_start_string": "<<<",
    "variable_end_string": ">>>",
    "block_start_string": "<%%",
    "block_end_string": "%%>",
    "comment_start_string": "<#",
    "comment_end_string": "#>",
}


class TemplateRegistry:
    """
    Registry for loading and caching Jinja2 templates for one output format.

    Templates live under template/{format}/ as {name}.{suffix}.jinja, e.g.
    template/latex/sections/experience.tex.jinja. The format's escaper is
    installed as the `esc` filter so templates escape user text explicitly;
    autoescape stays off because engine markup must pass through untouched.
    """

    def __init__(
        self,
        base_path: Path,
        suffix: str,
        escape: Callable[[Any], str],
        delimiters: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the template registry.

        Args:
            base_path: Directory holding this format's templates
            suffix: File suffix before .jinja ("html" or "tex")
            escape: Escaper exposed to templates as the `esc` filter
            delimiters: Optional custom Jinja2 delimiters
        """
        self.base_path = Path(base_path)
        self.suffix = suffix
        self._cache: Dict[str, Template] = {}

        self.env = Environment(
            loader=FileSystemLoader(str(self.base_path)),
            # Catches silent failures
            undefined=StrictUndefined,
            autoescape=False,
            # Preserve whitespace
            trim_blocks=True,
            lstrip_blocks=True,
            keep_trailing_newline=False,
            **(delimiters or {}),
        )
        self.env.filters["esc"] = escape

    def get_template(self, name: str) -> Template:
        """
        Get a template by name, loading and caching it if necessary.

        Args:
            name: Template name relative to base_path without suffix
                  (e.g., 'sections/experience')

        Returns:
            Jinja2 Template object

        Raises:
            TemplateNotFound: If template file doesn't exist
            TemplateSyntaxError: If template has Jinja2 syntax errors
        """
        if name in self._cache:
            return self._cache[name]

        template_path = f"{name}.{self.suffix}.jinja"

        try:
            template = self.env.get_template(template_path)
        except TemplateNotFound as e:
            raise TemplateNotFound(
                f"Template not found for '{name}' at {self.base_path / template_path}"
            ) from e

        self._cache[name] = template
        return template

    def get_template_path(self, name: str) -> Path:
        """Get the file path for a template name."""
        return self.base_path / f"{name}.{self.suffix}.jinja"

    def read_asset(self, filename: str) -> str:
        """Read a non-template asset (e.g. a stylesheet) from base_path."""
        return (self.base_path / filename).read_text(encoding="utf-8")

    def clear_cache(self):
        """Clear the template cache."""
        self._cache.clear()

    def is_cached(self, name: str) -> bool:
        """Check if a template is in the cache."""
        return name in self._cache


class StyleConfigRegistry:
    """
    Registry for visual style metadata loaded from styles.yaml.

    Every style entry is merged over the `base` entry, so styles.yaml only
    lists what a style changes.
    """

    def __init__(self, config_path: Optional[Path] = None):
        """
        Args:
            config_path: Path to styles.yaml (defaults to VELLUM_STYLES_PATH or the bundled file)
        """
        self.config_path = Path(config_path) if config_path is not None else STYLES_PATH
        self._raw = None
        self._cache: Dict[str, Dict[str, Any]] = {}

    def _load(self):
        if self._raw is None:
            if not self.config_path.exists():
                raise FileNotFoundError(f"Style config not found at {self.config_path}")
            self._raw = OmegaConf.load(self.config_path)
        return self._raw

    def style_names(self) -> list:
        """Style ids defined in the config (excluding base)."""
        return [name for name in self._load().styles.keys() if name != "base"]

    def get_style(self, style_id: str) -> Dict[str, Any]:
        """
        Get the merged style config for a style id.

        Args:
            style_id: Style name (e.g., 'modern')

        Returns:
            Plain dict with base values overridden by the style's values

        Raises:
            KeyError: If the style is not defined
        """
        if style_id in self._cache:
            return copy.deepcopy(self._cache[style_id])

        styles = self._load().styles
        if style_id not in styles:
            raise KeyError(f"Style '{style_id}' not defined in {self.config_path}")

        merged = OmegaConf.merge(styles.base, styles[style_id])
        style = OmegaConf.to_container(merged, resolve=True)
        self._cache[style_id] = style
        return copy.deepcopy(style)

    def get_modes(self) -> Dict[str, Dict[str, Any]]:
        """Responsive mode constraints for the HTML preview."""
        return OmegaConf.to_container(self._load().modes, resolve=True)

    def clear_cache(self):
        """Clear the style cache (forces re-reading styles.yaml)."""
        self._raw = None
        self._cache.clear()
