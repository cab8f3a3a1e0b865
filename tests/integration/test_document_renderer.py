"""
End-to-end rendering tests: record in, complete HTML preview or LaTeX document out.
"""

import re
from pathlib import Path

import pytest

from vellum.contexts.rendering import (
    DocumentRenderer,
    latex_to_preview_html,
    render_html,
    render_latex,
    validate_latex_source,
)
from vellum.contexts.templating import ResumeRecord
from vellum.contexts.templating.formats import RESPONSIVE_MODES

FIXTURE_PATH = Path(__file__).parent.parent / "fixtures" / "sample_resume.yaml"

TEMPLATE_IDS = ["modern", "classic", "creative", "minimal"]

HTML_HEADING = '<h2 class="section-title">'

ADA = {
    "personalInfo": {"firstName": "Ada", "lastName": "Lovelace", "email": "ada@example.com"},
}


@pytest.fixture(scope="module")
def html_renderer():
    return DocumentRenderer("html")


@pytest.fixture(scope="module")
def latex_renderer():
    return DocumentRenderer("latex")


@pytest.fixture(scope="module")
def sample_record():
    return ResumeRecord.from_yaml(FIXTURE_PATH)


class TestSparseRecords:
    """Records with only some sections filled in."""

    @pytest.mark.integration
    def test_name_and_email_only_html(self, html_renderer):
        html = html_renderer.render(ADA, "minimal")

        assert "Ada Lovelace" in html
        assert "ada@example.com" in html
        assert HTML_HEADING not in html

    @pytest.mark.integration
    def test_name_and_email_only_latex(self, latex_renderer):
        latex = latex_renderer.render(ADA, "minimal")

        assert "Ada Lovelace" in latex
        assert "ada@example.com" in latex
        assert r"\section*{" not in latex

    @pytest.mark.integration
    def test_empty_experience_has_no_heading(self, html_renderer, latex_renderer):
        record = dict(ADA, experience=[], skills=["Analysis"])

        html = html_renderer.render(record, "modern")
        latex = latex_renderer.render(record, "modern")

        assert ">Experience<" not in html
        assert ">Skills<" in html
        assert r"\section*{Experience}" not in latex
        assert r"\section*{Skills}" in latex

    @pytest.mark.integration
    @pytest.mark.parametrize("record", [None, {}])
    def test_empty_record_renders(self, html_renderer, latex_renderer, record):
        assert "Your Name" not in html_renderer.render(record)
        assert r"\begin{document}" in latex_renderer.render(record)


class TestEscaping:
    """User text reaches both formats escaped."""

    @pytest.mark.integration
    @pytest.mark.parametrize("template_id", TEMPLATE_IDS)
    def test_markup_in_skill_is_escaped(self, html_renderer, template_id):
        html = html_renderer.render(dict(ADA, skills=["<script>alert(1)</script>"]), template_id)

        assert "&lt;script&gt;" in html
        assert "<script>" not in html

    @pytest.mark.integration
    def test_special_characters_in_summary(self, latex_renderer):
        latex = latex_renderer.render(dict(ADA, summary="50% & up_front"), "modern")

        assert r"50\% \& up\_front" in latex

    @pytest.mark.integration
    def test_preview_of_rendered_latex(self, latex_renderer):
        latex = latex_renderer.render(dict(ADA, summary="50% & up_front"), "modern")
        preview = latex_to_preview_html(latex)

        assert "50% &amp; up_front" in preview
        assert '<h1 class="resume-name">Ada Lovelace</h1>' in preview
        assert not re.search(r"\\[A-Za-z]+", preview)

    @pytest.mark.integration
    def test_leading_bracket_stays_text(self, latex_renderer):
        record = dict(
            ADA,
            experience=[
                {"company": "Acme", "description": "[2020] led the team", "achievements": ["[Lead] shipped v2"]}
            ],
        )
        latex = latex_renderer.render(record, "modern")

        assert "\\\\\n[2020]" not in latex
        assert r"\item [Lead]" not in latex
        assert "\\\\{}\n[2020] led the team" in latex
        assert r"\item{} [Lead] shipped v2" in latex

        preview = latex_to_preview_html(latex)
        assert "[2020] led the team" in preview
        assert "[Lead] shipped v2" in preview

    @pytest.mark.integration
    def test_backslash_in_name(self, latex_renderer):
        latex = latex_renderer.render({"personalInfo": {"firstName": r"A\B"}}, "classic")
        assert r"A\textbackslash{}B" in latex
        assert validate_latex_source(latex).is_valid


class TestTemplateSelection:
    """Template ids, record preferences and responsive modes."""

    @pytest.mark.integration
    def test_unknown_template_falls_back_to_modern(self, html_renderer, latex_renderer):
        assert html_renderer.render(ADA, "no-such-template") == html_renderer.render(ADA, "modern")
        assert latex_renderer.render(ADA, "no-such-template") == latex_renderer.render(
            ADA, "modern"
        )

    @pytest.mark.integration
    def test_record_template_type_used(self, html_renderer):
        html = html_renderer.render(dict(ADA, templateType="classic"))
        assert "classic-template" in html

    @pytest.mark.integration
    def test_explicit_template_overrides_record(self, html_renderer):
        html = html_renderer.render(dict(ADA, templateType="classic"), "creative")
        assert "creative-template" in html
        assert "classic-template" not in html

    @pytest.mark.integration
    def test_unknown_mode_falls_back_to_desktop(self, html_renderer):
        assert "desktop-mode" in html_renderer.render(ADA, "modern", "smartwatch")

    @pytest.mark.integration
    @pytest.mark.parametrize("template_id", TEMPLATE_IDS)
    @pytest.mark.parametrize("mode", RESPONSIVE_MODES)
    def test_every_template_and_mode(self, html_renderer, sample_record, template_id, mode):
        html = html_renderer.render(sample_record, template_id, mode)

        assert f"{template_id}-template" in html
        assert f"{mode}-mode" in html
        assert "Grace Hopper" in html

    @pytest.mark.integration
    @pytest.mark.parametrize("template_id", TEMPLATE_IDS)
    def test_every_template_latex_is_valid(self, latex_renderer, sample_record, template_id):
        latex = latex_renderer.render(sample_record, template_id)
        result = validate_latex_source(latex)

        assert result.is_valid, result.issues
        assert f"pdfcreator={{vellum {template_id}}}" in latex

    @pytest.mark.integration
    def test_creative_uses_columns(self, html_renderer, latex_renderer, sample_record):
        assert "resume-column-side" in html_renderer.render(sample_record, "creative")
        assert r"\begin{paracol}{2}" in latex_renderer.render(sample_record, "creative")
        assert r"\begin{paracol}" not in latex_renderer.render(sample_record, "modern")

    @pytest.mark.integration
    def test_creative_stacks_on_mobile(self, html_renderer, sample_record):
        assert "resume-columns stacked" in html_renderer.render(sample_record, "creative", "mobile")
        assert "resume-columns stacked" not in html_renderer.render(
            sample_record, "creative", "desktop"
        )

    @pytest.mark.integration
    def test_list_templates(self, html_renderer):
        templates = html_renderer.list_templates()

        assert [t["id"] for t in templates] == TEMPLATE_IDS
        assert all(t["displayName"] and t["description"] for t in templates)
        assert html_renderer.is_valid_template("creative")
        assert not html_renderer.is_valid_template("baroque")


class TestSampleRecord:
    """The fixture record rendered in full."""

    @pytest.mark.integration
    def test_html_content(self, html_renderer, sample_record):
        html = html_renderer.render(sample_record)

        assert "classic-template" in html
        assert "Eckert-Mauchly Computer Corporation" in html
        assert "Jun 1949 - Dec 1952" in html
        assert "Jan 1953 - Present" in html
        assert "FLOW-MATIC (Expert)" in html
        assert "GPA: 4.0" in html
        assert "Compiler pioneer &amp; rear admiral" in html
        assert 'href="mailto:grace@navy.example"' in html

    @pytest.mark.integration
    def test_latex_content(self, latex_renderer, sample_record):
        latex = latex_renderer.render(sample_record)

        assert latex.lstrip().startswith(r"\documentclass")
        assert latex.rstrip().endswith(r"\end{document}")
        assert r"100\% committed to readable\_code" in latex
        assert r"C\#" in latex
        assert r"\textasciitilde{}50\%" in latex

    @pytest.mark.integration
    def test_section_order_classic(self, html_renderer, sample_record):
        html = html_renderer.render(sample_record, "classic")
        assert html.index(">Education<") < html.index(">Experience<")

    @pytest.mark.integration
    def test_section_order_modern(self, html_renderer, sample_record):
        html = html_renderer.render(sample_record, "modern")
        assert html.index(">Experience<") < html.index(">Education<")

    @pytest.mark.integration
    def test_deterministic(self, sample_record):
        assert render_html(sample_record) == render_html(sample_record)
        assert render_latex(sample_record) == render_latex(sample_record)

    @pytest.mark.integration
    def test_dict_and_record_render_identically(self, html_renderer, sample_record):
        assert html_renderer.render(sample_record.to_dict()) == html_renderer.render(sample_record)
