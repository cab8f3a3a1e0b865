"""
LaTeX to HTML Preview Converter

Best-effort conversion of a LaTeX resume into an HTML approximation of what
the compiler will produce. It is rule-based and lossy: known commands map to
HTML elements, layout-only commands are dropped, anything left over is
stripped. It never raises on arbitrary input and never lets an unconverted
command through.

Pipeline:
1. Protect escaped literals (\\%, \\&, \\textbackslash{}, ...) as placeholders
2. Drop comments and the preamble
3. HTML-escape what is left
4. Apply PREVIEW_RULES in order, repeated until nothing changes
5. Strip leftover commands, options, braces and math shifts
6. Restore placeholders as HTML-escaped characters and wrap the result
"""

import re
from dataclasses import dataclass
from functools import cached_property
from typing import Callable, List, Union

from markupsafe import escape

from vellum.contexts.rendering.latex_patterns import DocumentPatterns
from vellum.contexts.rendering.logger import _log_debug
from vellum.utils.escaping import TYPESETTING_ESCAPES, unescape_typesetting_text
from vellum.utils.text_processing import safe_link, set_max_consecutive_blank_lines

PREVIEW_NOTICE = "<!-- Approximate preview: the compiled PDF is authoritative -->"

# Placeholder delimiters: private-use code points never produced by rules
_PLACEHOLDER_OPEN = "\ue000"
_PLACEHOLDER_CLOSE = "\ue001"

# Bounds the rule loop; nesting deeper than this is left to the defensive strip
MAX_RULE_PASSES = 8

# Literal sequences written by hand rather than by escape_typesetting_text()
_EXTRA_LITERALS = {r"\textasciicircum": "^", r"\textasciitilde": "~", r"\textbar{}": "|"}

# Escaped literals, longest first; \\ (line break) is matched but kept
_LITERAL_PATTERN = re.compile(
    r"\\\\|"
    + "|".join(
        re.escape(latex)
        for latex in sorted(
            list(TYPESETTING_ESCAPES.values()) + list(_EXTRA_LITERALS), key=len, reverse=True
        )
    )
)

# Output text for a restored character; backslash as an entity so no "\word" survives
_RESTORED = {"\\": "&#92;"}

_COMMENT = re.compile(r"%[^\n]*")
_PREAMBLE_LINE = re.compile(r"^[ \t]*\\(?:documentclass|usepackage)\b[^\n]*\n?", re.MULTILINE)

ARG = r"\{([^{}]*)\}"
OPTIONS = r"(?:\[[^\]]*\])?"
LENGTH = r"([\d.]+(?:pt|em|ex|mm|cm|in|px))"


@dataclass(frozen=True)
class PreviewRule:
    """
    One LaTeX -> HTML substitution.

    Attributes:
        name: Short label (for debugging)
        pattern: Regex matched against the HTML-escaped source
        replacement: re.sub replacement string or callable
    """

    name: str
    pattern: str
    replacement: Union[str, Callable[[re.Match], str]]

    @cached_property
    def regex(self) -> "re.Pattern":
        return re.compile(self.pattern)


def _link(match: re.Match) -> str:
    # Text is already HTML-escaped, so it is safe inside the attribute
    href = safe_link(match.group(1))
    text = match.group(2) if match.lastindex and match.lastindex >= 2 else match.group(1)
    if not href:
        return text
    return f'<a href="{href}">{text}</a>'


PREVIEW_RULES: List[PreviewRule] = [
    # Document boundaries and environments
    PreviewRule("begin_document", r"\\begin\{document\}", '<div class="latex-document">'),
    PreviewRule("end_document", r"\\end\{document\}", "</div>"),
    PreviewRule("begin_center", r"\\begin\{center\}", '<div class="latex-center">'),
    PreviewRule("end_center", r"\\end\{center\}", "</div>"),
    # Two-column paracol layout
    PreviewRule("columnratio", r"\\columnratio" + ARG, ""),
    PreviewRule(
        "begin_paracol",
        r"\\begin\{paracol\}\{\d+\}",
        '<div class="latex-columns"><div class="latex-column">',
    ),
    PreviewRule("switchcolumn", r"\\switchcolumn\*?" + OPTIONS, '</div><div class="latex-column">'),
    PreviewRule("end_paracol", r"\\end\{paracol\}", "</div></div>"),
    # Name line produced by the resume header
    PreviewRule(
        "name_line",
        r"\{\\resumenamesize(?:\\bfseries)?(?:\\color\{[^{}]*\})?\s*([^{}]*)\}",
        r'<h1 class="resume-name">\1</h1>',
    ),
    # Sections
    PreviewRule("section", r"\\section\*?" + ARG, r'<h2 class="section-title">\1</h2>'),
    PreviewRule("subsection", r"\\subsection\*?" + ARG, r'<h3 class="subsection-title">\1</h3>'),
    # moderncv entries
    PreviewRule(
        "cventry",
        r"\\cventry" + ARG * 6,
        r'<div class="cv-entry"><div class="cv-title">\2</div><div class="cv-period">\1</div>'
        r'<div class="cv-place">\3</div><div class="cv-desc">\6</div></div>',
    ),
    PreviewRule("cvitem", r"\\cvitem" + ARG * 2, r'<div class="cv-item"><strong>\1</strong> \2</div>'),
    PreviewRule("makecvtitle", r"\\makecvtitle\b", ""),
    # Links
    PreviewRule("href", r"\\href" + ARG + ARG, _link),
    PreviewRule("url", r"\\url" + ARG, _link),
    # Inline formatting
    PreviewRule("textbf", r"\\textbf" + ARG, r"<strong>\1</strong>"),
    PreviewRule("textit", r"\\textit" + ARG, r"<em>\1</em>"),
    PreviewRule("emph", r"\\emph" + ARG, r"<em>\1</em>"),
    PreviewRule("underline", r"\\underline" + ARG, r"<u>\1</u>"),
    PreviewRule("texttt", r"\\texttt" + ARG, r"<code>\1</code>"),
    PreviewRule("textsc", r"\\textsc" + ARG, r'<span class="small-caps">\1</span>'),
    # Lists
    PreviewRule("begin_itemize", r"\\begin\{itemize\}" + OPTIONS, "<ul>"),
    PreviewRule("end_itemize", r"\\end\{itemize\}", "</ul>"),
    PreviewRule("begin_enumerate", r"\\begin\{enumerate\}" + OPTIONS, "<ol>"),
    PreviewRule("end_enumerate", r"\\end\{enumerate\}", "</ol>"),
    PreviewRule("item", r"\\item\b" + OPTIONS + r"[ \t]*([^\n]*)", r"<li>\1</li>"),
    # Spacing and breaks
    PreviewRule("linebreak", r"\\\\" + OPTIONS, "<br>"),
    PreviewRule(
        "vspace",
        r"\\vspace\*?\{" + LENGTH + r"\}",
        r'<div class="latex-vspace" style="margin-top: \1"></div>',
    ),
    PreviewRule("vspace_other", r"\\vspace\*?" + ARG, ""),
    PreviewRule("hfill", r"[ \t]*\\hfill[ \t]*", " "),
    # Symbols
    PreviewRule("bullet", r"\$\\bullet\$", "\u2022"),
    PreviewRule("textbullet", r"\\textbullet(?:\{\})?", "\u2022"),
    PreviewRule("textbar", r"\\textbar\b", "|"),
    PreviewRule("dots", r"\\(?:ldots|dots)(?:\{\})?", "\u2026"),
    PreviewRule("endash", r"(?<!-)--(?!-)", "\u2013"),
    PreviewRule("nbsp", r"~", "&nbsp;"),
    # Layout no-ops
    PreviewRule("color", r"\\color" + ARG, ""),
    PreviewRule(
        "size",
        r"\\(?:tiny|scriptsize|footnotesize|small|normalsize|large|Large|LARGE|huge|Huge|resumenamesize)\b",
        "",
    ),
    PreviewRule("shape", r"\\(?:bfseries|itshape|scshape|mdseries|upshape|centering|noindent)\b", ""),
    PreviewRule("setlength", r"\\setlength" + ARG + ARG, ""),
    PreviewRule("pagestyle", r"\\(?:pagestyle|thispagestyle)" + ARG, ""),
    PreviewRule("pagebreak", r"\\(?:newpage|clearpage|pagebreak)\b", ""),
    # Plain groups not attached to a command: {text} -> text
    PreviewRule("group", r"(?<![A-Za-z*\]}])\{([^{}]*)\}", r"\1"),
]

# Defensive strip of whatever the rules did not convert
_STRIP_RULES = [
    (re.compile(r"\\[A-Za-z]+\*?" + OPTIONS), ""),
    (re.compile(r"\\."), ""),
    (re.compile(r"[{}$\\]"), ""),
]

_PLACEHOLDER = re.compile(_PLACEHOLDER_OPEN + r"(\d+)" + _PLACEHOLDER_CLOSE)


class PreviewConverter:
    """
    Converts LaTeX sources to an approximate HTML preview.

    Attributes:
        rules: Ordered substitution table (PREVIEW_RULES by default)
    """

    def __init__(self, rules: List[PreviewRule] = None):
        self.rules = list(PREVIEW_RULES if rules is None else rules)

    def _protect(self, source: str, literals: List[str]) -> str:
        def placeholder(match: re.Match) -> str:
            token = match.group(0)
            if token == "\\\\":
                return token
            literals.append(_EXTRA_LITERALS.get(token) or unescape_typesetting_text(token))
            return f"{_PLACEHOLDER_OPEN}{len(literals) - 1}{_PLACEHOLDER_CLOSE}"

        return _LITERAL_PATTERN.sub(placeholder, source)

    @staticmethod
    def _strip_preamble(source: str) -> str:
        start = source.find(DocumentPatterns.BEGIN_DOCUMENT)
        if start == -1:
            return _PREAMBLE_LINE.sub("", source)
        end = source.find(DocumentPatterns.END_DOCUMENT, start)
        if end == -1:
            return source[start:]
        return source[start : end + len(DocumentPatterns.END_DOCUMENT)]

    def _apply_rules(self, text: str) -> str:
        for _ in range(MAX_RULE_PASSES):
            previous = text
            for rule in self.rules:
                text = rule.regex.sub(rule.replacement, text)
            if text == previous:
                break
        return text

    @staticmethod
    def _restore(text: str, literals: List[str]) -> str:
        def restore(match: re.Match) -> str:
            index = int(match.group(1))
            if index >= len(literals):
                return ""
            char = literals[index]
            return _RESTORED.get(char, str(escape(char)))

        return _PLACEHOLDER.sub(restore, text)

    @staticmethod
    def _tidy(html: str) -> str:
        lines = [line.strip() for line in html.splitlines()]
        return set_max_consecutive_blank_lines("\n".join(lines), max_consecutive=0).strip()

    def convert(self, latex_source: str) -> str:
        """
        Convert a LaTeX source to an HTML preview fragment.

        Args:
            latex_source: LaTeX document or fragment (None is treated as "")

        Returns:
            HTML wrapped in a `resume-preview latex-preview` container

        Example:
            >>> "<strong>Ada</strong>" in PreviewConverter().convert(r"\\textbf{Ada}")
            True
        """
        source = "" if latex_source is None else str(latex_source)
        # Placeholder delimiters in the input would be confused with ours
        source = source.replace(_PLACEHOLDER_OPEN, "").replace(_PLACEHOLDER_CLOSE, "")

        literals: List[str] = []
        text = self._protect(source, literals)
        text = _COMMENT.sub("", text)
        text = self._strip_preamble(text)
        text = str(escape(text))
        text = self._apply_rules(text)
        for regex, replacement in _STRIP_RULES:
            text = regex.sub(replacement, text)
        text = self._restore(text, literals)

        _log_debug(f"Preview converted: {len(source)} chars LaTeX -> {len(text)} chars HTML")
        return (
            '<div class="resume-preview latex-preview">\n'
            f"{PREVIEW_NOTICE}\n"
            f"{self._tidy(text)}\n"
            "</div>\n"
        )


def latex_to_preview_html(latex_source: str) -> str:
    """Convert a LaTeX source to an HTML preview with the default rule table."""
    return PreviewConverter().convert(latex_source)
