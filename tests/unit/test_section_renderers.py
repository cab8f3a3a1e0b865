"""
Unit tests for section renderers in both output formats.
"""

import random
import re

import pytest

from vellum.contexts.rendering.validator import validate_latex_source
from vellum.contexts.templating.formats import HtmlFormat, TypesettingFormat
from vellum.contexts.templating.resume_data_structure import (
    CertificationItem,
    EducationItem,
    ExperienceItem,
    PersonalInfo,
    ProjectItem,
    ResumeRecord,
    Skill,
)
from vellum.contexts.templating.section_renderers import (
    SECTION_RENDERERS,
    header_view,
    render_achievements,
    render_certifications,
    render_education,
    render_experience,
    render_header,
    render_projects,
    render_section,
    render_sections,
    render_skills,
    render_summary,
)


@pytest.fixture(scope="module")
def html():
    return HtmlFormat()


@pytest.fixture(scope="module")
def latex():
    return TypesettingFormat()


class TestEmptySections:
    """Empty or absent input renders nothing, not an empty heading."""

    @pytest.mark.unit
    @pytest.mark.parametrize("fmt", ["html", "latex"])
    def test_all_renderers_return_empty(self, fmt, request):
        output_format = request.getfixturevalue(fmt)
        assert render_header(PersonalInfo(), output_format) == ""
        assert render_summary("   ", output_format) == ""
        assert render_experience((), output_format) == ""
        assert render_education((), output_format) == ""
        assert render_skills(["", None], output_format) == ""
        assert render_projects((), output_format) == ""
        assert render_certifications([CertificationItem()], output_format) == ""
        assert render_achievements(["  "], output_format) == ""

    @pytest.mark.unit
    def test_render_sections_for_empty_record(self, html):
        sections = render_sections(ResumeRecord(), html)
        assert set(sections) == set(SECTION_RENDERERS)
        assert all(fragment == "" for fragment in sections.values())


class TestHeader:
    """Tests for the header section."""

    @pytest.mark.unit
    def test_header_view_placeholder_name(self):
        view = header_view(PersonalInfo(email="a@x.com"))
        assert view["name"] == "Your Name"
        assert view["contacts"] == [{"kind": "email", "value": "a@x.com", "href": "mailto:a@x.com"}]

    @pytest.mark.unit
    def test_html_header(self, html):
        info = PersonalInfo(first_name="Ada", last_name="Lovelace", email="a@x.com", linkedin="linkedin.com/in/ada")
        fragment = render_header(info, html)

        assert '<h1 class="resume-name">Ada Lovelace</h1>' in fragment
        assert 'href="mailto:a@x.com"' in fragment
        assert 'href="https://linkedin.com/in/ada"' in fragment

    @pytest.mark.unit
    def test_html_header_refuses_unsafe_link(self, html):
        fragment = render_header(PersonalInfo(first_name="X", website="javascript:alert(1)"), html)
        assert "href" not in fragment
        assert "javascript:alert(1)" in fragment

    @pytest.mark.unit
    def test_latex_header(self, latex):
        info = PersonalInfo(first_name="Ada", last_name="Lovelace", email="a_l@x.com", phone="555")
        fragment = render_header(info, latex)

        assert "Ada Lovelace" in fragment
        assert r"a\_l@x.com $\bullet$ 555" in fragment
        assert r"\begin{center}" in fragment


class TestExperience:
    """Tests for the experience section."""

    @pytest.mark.unit
    def test_html_experience(self, html):
        items = (
            ExperienceItem(position="Engineer", company="Acme", start_date="2020-01", current=True,
                           achievements=("Shipped <v2>",)),
            ExperienceItem(),
        )
        fragment = render_experience(items, html)

        assert '<h2 class="section-title">Experience</h2>' in fragment
        assert "Jan 2020 - Present" in fragment
        assert "Shipped &lt;v2&gt;" in fragment
        # Placeholders for the empty entry
        assert ">Position<" in fragment
        assert ">Company<" in fragment
        assert fragment.index("Engineer") < fragment.index(">Position<")

    @pytest.mark.unit
    def test_latex_experience(self, latex):
        items = (ExperienceItem(position="R&D Lead", company="50% Co", start_date="2019-05",
                                end_date="2021-02", achievements=("Cut costs by 30%",)),)
        fragment = render_experience(items, latex)

        assert r"\section*{Experience}" in fragment
        assert r"\textbf{R\&D Lead} \hfill May 2019 - Feb 2021\\" in fragment
        assert r"\textit{50\% Co}\\" in fragment
        assert r"\item{} Cut costs by 30\%" in fragment


# A line break or \item directly followed by [ or * would read user text as an argument
ARGUMENT_AFTER_BREAK = re.compile(r"\\\\\s*[\[*]")
ARGUMENT_AFTER_ITEM = re.compile(r"\\item\s*\[")

LEADING_TEXT = ["[2020] led the team", "*starred", "[", "]", "[a]{b}", "* [x]"]


def _as_document(fragment: str) -> str:
    return "\\documentclass{article}\n\\begin{document}\n" + fragment + "\n\\end{document}\n"


class TestLatexLeadingBrackets:
    """User text that starts with [ or * right after a line break or bullet."""

    @pytest.mark.unit
    @pytest.mark.parametrize("text", LEADING_TEXT)
    def test_experience(self, latex, text):
        items = (ExperienceItem(position="Lead", company="Acme", description=text, achievements=(text,)),)
        fragment = render_experience(items, latex)

        assert not ARGUMENT_AFTER_BREAK.search(fragment)
        assert not ARGUMENT_AFTER_ITEM.search(fragment)
        assert validate_latex_source(_as_document(fragment)).is_valid

    @pytest.mark.unit
    @pytest.mark.parametrize("text", LEADING_TEXT)
    def test_other_sections(self, latex, text):
        fragments = [
            render_projects((ProjectItem(name="P", link=text, description=text, technologies=(text,)),), latex),
            render_education((EducationItem(degree="BSc", institution=text),), latex),
            render_certifications((CertificationItem(name=text, credential_id=text),), latex),
            render_achievements((text,), latex),
        ]

        for fragment in fragments:
            assert not ARGUMENT_AFTER_BREAK.search(fragment)
            assert not ARGUMENT_AFTER_ITEM.search(fragment)

    @pytest.mark.unit
    def test_fuzzed_leading_characters(self, latex):
        rng = random.Random(20240601)
        alphabet = "[]*{}\\%&_#~^$ ab"
        for _ in range(200):
            text = rng.choice("[*") + "".join(rng.choice(alphabet) for _ in range(rng.randint(0, 12)))
            fragment = render_experience(
                (ExperienceItem(description=text, achievements=(text,)),), latex
            ) + render_achievements((text,), latex)

            assert not ARGUMENT_AFTER_BREAK.search(fragment), text
            assert not ARGUMENT_AFTER_ITEM.search(fragment), text
            assert validate_latex_source(_as_document(fragment)).is_valid, text


class TestOtherSections:
    """Tests for education, skills, projects, certifications and achievements."""

    @pytest.mark.unit
    def test_education_placeholders_and_gpa(self, html):
        fragment = render_education((EducationItem(gpa="3.9"),), html)
        assert ">Degree<" in fragment
        assert ">Institution<" in fragment
        assert ">Expected<" in fragment
        assert "GPA: 3.9" in fragment

    @pytest.mark.unit
    def test_skills_both_shapes(self, html, latex):
        skills = ["C++", Skill("Go", "Advanced"), {"name": "SQL", "proficiency": None}]

        html_fragment = render_skills(skills, html)
        assert '<span class="skill-tag">C++</span>' in html_fragment
        assert '<span class="skill-tag">Go (Advanced)</span>' in html_fragment

        latex_fragment = render_skills(skills, latex)
        assert r"C++ $\bullet$ Go (Advanced) $\bullet$ SQL" in latex_fragment

    @pytest.mark.unit
    def test_skills_escaped(self, html):
        fragment = render_skills(["<script>"], html)
        assert "&lt;script&gt;" in fragment
        assert "<script>" not in fragment

    @pytest.mark.unit
    def test_projects(self, html, latex):
        items = (
            ProjectItem(name="Engine", technologies=("Brass", "Steam"), link="github.com/ada/engine"),
            ProjectItem(description="no name", link="javascript:alert(1)"),
        )
        fragment = render_projects(items, html)
        assert 'href="https://github.com/ada/engine"' in fragment
        assert "View Project" in fragment
        assert "Technologies:</strong> Brass, Steam" in fragment
        assert ">Project Name<" in fragment
        assert 'href="javascript' not in fragment

        latex_fragment = render_projects(items[:1], latex)
        assert r"\textit{Technologies: Brass, Steam}" in latex_fragment

    @pytest.mark.unit
    def test_certifications(self, latex):
        items = (CertificationItem(name="AWS SA", issuer="Amazon", date="2022-03", credential_id="ABC_1"),)
        fragment = render_certifications(items, latex)
        assert r"\textbf{AWS SA}, Amazon \hfill Mar 2022\\" in fragment
        assert r"ID: ABC\_1" in fragment

    @pytest.mark.unit
    def test_achievements(self, html):
        fragment = render_achievements(["Won & kept", ""], html)
        assert fragment.count("<li") == 1
        assert "Won &amp; kept" in fragment

    @pytest.mark.unit
    def test_summary_title(self, html, latex):
        assert "Professional Summary" in render_summary("Hello", html)
        assert r"\section*{Professional Summary}" in render_summary("Hello", latex)


class TestFailureIsolation:
    """A section that fails to render is logged and replaced by an empty fragment."""

    @pytest.mark.unit
    def test_failing_section_is_empty(self, html, monkeypatch):
        def broken_renderer(data, output_format):
            raise TypeError("unexpected shape")

        accessor, _ = SECTION_RENDERERS["skills"]
        monkeypatch.setitem(SECTION_RENDERERS, "skills", (accessor, broken_renderer))

        record = ResumeRecord(summary="Still here", skills=("Python",))
        sections = render_sections(record, html)

        assert sections["skills"] == ""
        assert "Still here" in sections["summary"]

    @pytest.mark.unit
    def test_render_section_single(self, latex):
        record = ResumeRecord(achievements=("First",))
        assert r"\item{} First" in render_section("achievements", record, latex)
