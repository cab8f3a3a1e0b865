"""
Unit tests for filling external LaTeX templates.
"""

import pytest

from vellum.contexts.rendering import ExternalTemplateError, fill_external_template
from vellum.contexts.rendering.external_template import find_placeholders
from vellum.contexts.rendering.validator import validate_latex_source

LETTER = (
    "\\documentclass{article}\n"
    "\\begin{document}\n"
    "\\textbf{\\VAR{name}} \\hfill \\VAR{email}\\\\{}\n"
    "Dear \\VAR{recipient},\n"
    "\\end{document}\n"
)


class TestFill:
    """Tests for placeholder substitution."""

    @pytest.mark.unit
    def test_fills_every_placeholder(self):
        filled = fill_external_template(
            LETTER, {"name": "Ada Lovelace", "email": "ada@example.com", "recipient": "Charles"}
        )

        assert "\\textbf{Ada Lovelace} \\hfill ada@example.com\\\\{}" in filled
        assert "Dear Charles," in filled
        assert "\\VAR" not in filled

    @pytest.mark.unit
    def test_values_are_escaped(self):
        filled = fill_external_template(LETTER, {"name": "R&D_Lab 100%", "email": "a#b"})
        assert r"\textbf{R\&D\_Lab 100\%}" in filled
        assert r"a\#b" in filled

    @pytest.mark.unit
    def test_value_cannot_inject_commands(self):
        filled = fill_external_template(LETTER, {"name": r"\input{/etc/passwd}"})

        assert r"\textbackslash{}input\{/etc/passwd\}" in filled
        assert validate_latex_source(filled).is_valid

    @pytest.mark.unit
    def test_value_is_not_expanded_again(self):
        filled = fill_external_template(LETTER, {"name": r"\VAR{email}", "email": "secret"})
        assert r"\textbf{\textbackslash{}VAR\{email\}}" in filled

    @pytest.mark.unit
    def test_repeated_placeholder(self):
        source = "\\documentclass{article}\n\\begin{document}\n\\VAR{x} and \\VAR{x}\n\\end{document}"
        assert "7 and 7" in fill_external_template(source, {"x": 7})

    @pytest.mark.unit
    def test_missing_and_none_values_become_empty(self):
        filled = fill_external_template(LETTER, {"name": None})
        assert "\\textbf{} \\hfill \\\\{}" in filled
        assert "Dear ," in filled

    @pytest.mark.unit
    def test_extra_values_ignored(self):
        filled = fill_external_template(
            LETTER, {"name": "Ada", "email": "", "recipient": "Charles", "unused": "x"}
        )
        assert "unused" not in filled
        assert filled.count("Ada") == 1

    @pytest.mark.unit
    def test_template_without_placeholders_unchanged(self):
        source = "\\documentclass{article}\n\\begin{document}\nHello\n\\end{document}\n"
        assert fill_external_template(source, {"name": "Ada"}) == source


class TestValidation:
    """The template is checked before any value is substituted."""

    @pytest.mark.unit
    def test_forbidden_command_rejected(self):
        source = LETTER.replace("Dear", "\\input{/etc/passwd} Dear")

        with pytest.raises(ExternalTemplateError) as exc_info:
            fill_external_template(source, {"name": "Ada"})

        assert "Forbidden command: \\input" in exc_info.value.issues
        assert "failed validation" in str(exc_info.value)

    @pytest.mark.unit
    def test_missing_structure_rejected(self):
        with pytest.raises(ExternalTemplateError) as exc_info:
            fill_external_template("Dear \\VAR{recipient}", {"recipient": "Charles"})

        assert "Missing required command: \\documentclass" in exc_info.value.issues

    @pytest.mark.unit
    def test_unbalanced_template_rejected(self):
        with pytest.raises(ExternalTemplateError):
            fill_external_template(LETTER.replace("\\textbf{", "\\textbf{{"), {})


@pytest.mark.unit
def test_find_placeholders_in_order_without_duplicates():
    assert find_placeholders(LETTER + "\\VAR{name}") == ["name", "email", "recipient"]
    assert find_placeholders("\\VAR{} \\VAR{two words}") == []
