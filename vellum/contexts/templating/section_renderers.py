"""
Section Renderers

One pure renderer per resume section. Each renderer:
- builds a plain-text view of its section with the shared label helpers
  (names, dates, skills), identical for every output format;
- renders that view through the output format's section template, where the
  format's escaper is applied to every user value via the `esc` filter;
- returns "" when the section is absent or empty, so no stray headings.

render_sections() renders all sections of a record and isolates failures:
a section that raises is logged and replaced by an empty fragment.
"""

from typing import Any, Dict, List, Sequence

from jinja2 import TemplateError

from vellum.contexts.templating.exceptions import TemplateRenderError
from vellum.contexts.templating.formats import OutputFormat
from vellum.contexts.templating.logger import log_section_skipped
from vellum.contexts.templating.resume_data_structure import (
    CertificationItem,
    EducationItem,
    ExperienceItem,
    PersonalInfo,
    ProjectItem,
    ResumeRecord,
)
from vellum.utils.text_processing import (
    date_range_label,
    format_date,
    gpa_label,
    optional_range_label,
    safe_link,
    skill_labels,
)

SECTION_TITLES = {
    "summary": "Professional Summary",
    "experience": "Experience",
    "education": "Education",
    "skills": "Skills",
    "projects": "Projects",
    "certifications": "Certifications",
    "achievements": "Achievements",
}

# Header fallbacks and per-item placeholders shown while the user is still typing
PLACEHOLDER_NAME = "Your Name"
PLACEHOLDERS = {
    "position": "Position",
    "company": "Company",
    "degree": "Degree",
    "institution": "Institution",
    "project": "Project Name",
    "graduation": "Expected",
}

# (field, link prefix) in display order; None means the value is not a link
CONTACT_FIELDS = [
    ("email", "mailto:"),
    ("phone", None),
    ("location", None),
    ("linkedin", ""),
    ("website", ""),
    ("portfolio", ""),
]


def _render(section_name: str, output_format: OutputFormat, **context) -> str:
    template_name = f"sections/{section_name}"
    try:
        template = output_format.registry.get_template(template_name)
        return template.render(title=SECTION_TITLES.get(section_name, ""), **context).strip()
    except TemplateError as e:
        raise TemplateRenderError(
            f"Failed to render {output_format.name} section",
            section_name=section_name,
            template_path=output_format.registry.get_template_path(template_name),
            original_error=e,
        ) from e


def _non_empty(values: Sequence[Any]) -> List[str]:
    return [str(v).strip() for v in values if v is not None and str(v).strip()]


# Views: plain text only, shared by all output formats


def header_view(info: PersonalInfo) -> Dict[str, Any]:
    contacts = []
    for field_name, prefix in CONTACT_FIELDS:
        value = getattr(info, field_name).strip()
        if not value:
            continue
        href = ""
        if prefix is not None:
            href = safe_link(prefix + value if prefix and not value.startswith(prefix) else value)
        contacts.append({"kind": field_name, "value": value, "href": href})
    return {"name": info.full_name or PLACEHOLDER_NAME, "contacts": contacts}


def experience_view(item: ExperienceItem) -> Dict[str, Any]:
    return {
        "position": item.position.strip() or PLACEHOLDERS["position"],
        "company": item.company.strip() or PLACEHOLDERS["company"],
        "dates": date_range_label(item.start_date, item.end_date, item.current),
        "description": item.description.strip(),
        "achievements": _non_empty(item.achievements),
    }


def education_view(item: EducationItem) -> Dict[str, Any]:
    return {
        "degree": item.degree.strip() or PLACEHOLDERS["degree"],
        "institution": item.institution.strip() or PLACEHOLDERS["institution"],
        "field": item.field.strip(),
        "date": format_date(item.graduation_date) or PLACEHOLDERS["graduation"],
        "gpa": gpa_label(item.gpa),
    }


def project_view(item: ProjectItem) -> Dict[str, Any]:
    technologies = _non_empty(item.technologies)
    return {
        "name": item.name.strip() or PLACEHOLDERS["project"],
        "description": item.description.strip(),
        "technologies": technologies,
        "technologies_label": ", ".join(technologies),
        "link": (item.link or "").strip(),
        "href": safe_link(item.link),
        "dates": optional_range_label(item.start_date, item.end_date),
    }


def certification_view(item: CertificationItem) -> Dict[str, Any]:
    return {
        "name": item.name.strip(),
        "issuer": item.issuer.strip(),
        "date": format_date(item.date),
        "credential": f"ID: {item.credential_id}" if item.credential_id else "",
    }


# Renderers: (section data, output format) -> fragment


def render_header(personal_info: PersonalInfo, output_format: OutputFormat) -> str:
    if personal_info is None or personal_info.is_empty:
        return ""
    return _render("header", output_format, header=header_view(personal_info))


def render_summary(summary: str, output_format: OutputFormat) -> str:
    if not summary or not summary.strip():
        return ""
    return _render("summary", output_format, summary=summary.strip())


def render_experience(experience: Sequence[ExperienceItem], output_format: OutputFormat) -> str:
    if not experience:
        return ""
    return _render(
        "experience", output_format, items=[experience_view(item) for item in experience]
    )


def render_education(education: Sequence[EducationItem], output_format: OutputFormat) -> str:
    if not education:
        return ""
    return _render("education", output_format, items=[education_view(item) for item in education])


def render_skills(skills: Sequence[Any], output_format: OutputFormat) -> str:
    labels = skill_labels(skills)
    if not labels:
        return ""
    return _render("skills", output_format, skills=labels)


def render_projects(projects: Sequence[ProjectItem], output_format: OutputFormat) -> str:
    if not projects:
        return ""
    return _render("projects", output_format, items=[project_view(item) for item in projects])


def render_certifications(
    certifications: Sequence[CertificationItem], output_format: OutputFormat
) -> str:
    items = [certification_view(item) for item in certifications or []]
    items = [item for item in items if item["name"] or item["issuer"]]
    if not items:
        return ""
    return _render("certifications", output_format, items=items)


def render_achievements(achievements: Sequence[str], output_format: OutputFormat) -> str:
    items = _non_empty(achievements or [])
    if not items:
        return ""
    return _render("achievements", output_format, items=items)


# Section name -> (record accessor, renderer)
SECTION_RENDERERS: Dict[str, tuple] = {
    "header": (lambda r: r.personal_info, render_header),
    "summary": (lambda r: r.summary, render_summary),
    "experience": (lambda r: r.experience, render_experience),
    "education": (lambda r: r.education, render_education),
    "skills": (lambda r: r.skills, render_skills),
    "projects": (lambda r: r.projects, render_projects),
    "certifications": (lambda r: r.certifications, render_certifications),
    "achievements": (lambda r: r.achievements, render_achievements),
}


def render_section(
    section_name: str, record: ResumeRecord, output_format: OutputFormat
) -> str:
    """
    Render one section of a record, isolating failures.

    Args:
        section_name: Key of SECTION_RENDERERS
        record: Resume record
        output_format: Target output format

    Returns:
        Fragment, or "" if the section is empty or failed to render
    """
    accessor, renderer = SECTION_RENDERERS[section_name]
    try:
        return renderer(accessor(record), output_format)
    except (TemplateRenderError, TypeError, ValueError, AttributeError, KeyError) as e:
        log_section_skipped(section_name, e)
        return ""


def render_sections(record: ResumeRecord, output_format: OutputFormat) -> Dict[str, str]:
    """
    Render every section of a record.

    Args:
        record: Resume record
        output_format: Target output format

    Returns:
        Dict mapping section name to fragment ("" for empty/failed sections)
    """
    return {name: render_section(name, record, output_format) for name in SECTION_RENDERERS}

