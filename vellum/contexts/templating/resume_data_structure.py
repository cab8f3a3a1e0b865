"""
Resume Data Structure

Canonical, template-independent schema consumed by every renderer.

Records arrive from the UI as camelCase JSON (personalInfo, startDate, ...).
ResumeRecord.from_dict() also accepts snake_case keys. All dataclasses are
frozen and sequences are tuples: the engine never mutates a record.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Optional, Tuple, Union

from omegaconf import OmegaConf

from vellum.contexts.templating.exceptions import InvalidResumeStructureError
from vellum.contexts.templating.logger import log_section_coercion_failed
from vellum.utils.text_processing import full_name

DateValue = Union[str, date, None]


def _get(data: Mapping, camel_key: str, default: Any = None) -> Any:
    """Look up a camelCase key, falling back to its snake_case spelling."""
    if camel_key in data:
        value = data[camel_key]
    else:
        snake_key = "".join(f"_{c.lower()}" if c.isupper() else c for c in camel_key)
        value = data.get(snake_key, default)
    return default if value is None else value


def _text(data: Mapping, key: str) -> str:
    value = _get(data, key, "")
    return value if isinstance(value, str) else str(value)


def _date(data: Mapping, key: str) -> DateValue:
    value = _get(data, key)
    if value is None or isinstance(value, (str, date)):
        return value
    return str(value)


_TRUE_STRINGS = ("true", "1", "yes")


def _flag(data: Mapping, key: str) -> bool:
    value = _get(data, key, False)
    if isinstance(value, str):
        return value.strip().lower() in _TRUE_STRINGS
    return bool(value)


def _require_mapping(value: Any, what: str) -> Mapping:
    if not isinstance(value, Mapping):
        raise TypeError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


def _as_tuple(value: Any, what: str) -> tuple:
    if value is None:
        return ()
    if isinstance(value, (str, bytes, Mapping)) or not hasattr(value, "__iter__"):
        raise TypeError(f"{what} must be a sequence, got {type(value).__name__}")
    return tuple(value)


def _text_items(value: Any, what: str) -> Tuple[str, ...]:
    items = _as_tuple(value, what)
    for item in items:
        if isinstance(item, (Mapping, list, tuple)):
            raise TypeError(f"{what} entries must be text, got {type(item).__name__}")
    return tuple(str(item) for item in items if item is not None)


@dataclass(frozen=True)
class PersonalInfo:
    first_name: str = ""
    last_name: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    website: str = ""
    linkedin: str = ""
    portfolio: str = ""

    @property
    def full_name(self) -> str:
        return full_name(self.first_name, self.last_name)

    @property
    def is_empty(self) -> bool:
        return not any(
            (self.full_name, self.email, self.phone, self.location,
             self.website, self.linkedin, self.portfolio)
        )

    @classmethod
    def from_dict(cls, data: Mapping) -> "PersonalInfo":
        data = _require_mapping(data, "personalInfo")
        return cls(
            first_name=_text(data, "firstName"),
            last_name=_text(data, "lastName"),
            email=_text(data, "email"),
            phone=_text(data, "phone"),
            location=_text(data, "location"),
            website=_text(data, "website"),
            linkedin=_text(data, "linkedin"),
            portfolio=_text(data, "portfolio"),
        )


@dataclass(frozen=True)
class ExperienceItem:
    position: str = ""
    company: str = ""
    start_date: DateValue = None
    end_date: DateValue = None
    current: bool = False
    description: str = ""
    achievements: Tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: Mapping) -> "ExperienceItem":
        data = _require_mapping(data, "experience entry")
        return cls(
            position=_text(data, "position"),
            company=_text(data, "company"),
            start_date=_date(data, "startDate"),
            end_date=_date(data, "endDate"),
            current=_flag(data, "current"),
            description=_text(data, "description"),
            achievements=_text_items(_get(data, "achievements"), "achievements"),
        )


@dataclass(frozen=True)
class EducationItem:
    degree: str = ""
    institution: str = ""
    field: str = ""
    graduation_date: DateValue = None
    gpa: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "EducationItem":
        data = _require_mapping(data, "education entry")
        gpa = _get(data, "gpa")
        return cls(
            degree=_text(data, "degree"),
            institution=_text(data, "institution"),
            field=_text(data, "field"),
            graduation_date=_date(data, "graduationDate"),
            gpa=None if gpa in (None, "") else str(gpa),
        )


@dataclass(frozen=True)
class Skill:
    name: str
    proficiency: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "Skill":
        proficiency = _get(data, "proficiency")
        return cls(
            name=_text(data, "name"),
            proficiency=None if proficiency in (None, "") else str(proficiency),
        )


SkillEntry = Union[str, Skill]


def _coerce_skill(value: Any) -> SkillEntry:
    if isinstance(value, (str, Skill)):
        return value
    if isinstance(value, Mapping):
        return Skill.from_dict(value)
    raise TypeError(f"skill must be text or a mapping, got {type(value).__name__}")


@dataclass(frozen=True)
class ProjectItem:
    name: str = ""
    description: str = ""
    technologies: Tuple[str, ...] = ()
    link: Optional[str] = None
    start_date: DateValue = None
    end_date: DateValue = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "ProjectItem":
        data = _require_mapping(data, "project entry")
        link = _get(data, "link")
        return cls(
            name=_text(data, "name"),
            description=_text(data, "description"),
            technologies=_text_items(_get(data, "technologies"), "technologies"),
            link=str(link) if link else None,
            start_date=_date(data, "startDate"),
            end_date=_date(data, "endDate"),
        )


@dataclass(frozen=True)
class CertificationItem:
    name: str = ""
    issuer: str = ""
    date: DateValue = None
    credential_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping) -> "CertificationItem":
        data = _require_mapping(data, "certification entry")
        credential_id = _get(data, "credentialId")
        return cls(
            name=_text(data, "name"),
            issuer=_text(data, "issuer"),
            date=_date(data, "date"),
            credential_id=str(credential_id) if credential_id else None,
        )


def _coerce_section(name: str, factory: Callable[[], Any], default: Any) -> Any:
    """Build one section, degrading to its empty value when the data is malformed."""
    try:
        return factory()
    except (TypeError, ValueError, AttributeError, KeyError) as e:
        log_section_coercion_failed(name, e)
        return default


@dataclass(frozen=True)
class ResumeRecord:
    """
    Root resume entity.

    Attributes:
        personal_info: Contact details and name
        summary: Free-text professional summary
        experience: Work history, caller-defined order
        education: Degrees, caller-defined order
        skills: Plain strings and/or Skill objects, kept as supplied
        projects: Projects, caller-defined order
        certifications: Certifications, caller-defined order
        achievements: Free-text achievements
        template_type: Stored template preference (may be stale or unknown)
    """

    personal_info: PersonalInfo = field(default_factory=PersonalInfo)
    summary: str = ""
    experience: Tuple[ExperienceItem, ...] = ()
    education: Tuple[EducationItem, ...] = ()
    skills: Tuple[SkillEntry, ...] = ()
    projects: Tuple[ProjectItem, ...] = ()
    certifications: Tuple[CertificationItem, ...] = ()
    achievements: Tuple[str, ...] = ()
    template_type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Optional[Mapping]) -> "ResumeRecord":
        """
        Build a record from its camelCase (or snake_case) dict form.

        Each section is coerced independently: a section with an unexpected
        shape is logged and left empty, the rest of the record is kept.

        Args:
            data: Resume dict as sent by the UI (None gives an empty record)

        Returns:
            ResumeRecord instance

        Raises:
            InvalidResumeStructureError: If data is not a mapping
        """
        if data is None:
            return cls()
        if not isinstance(data, Mapping):
            raise InvalidResumeStructureError(
                f"Resume record must be a mapping, got {type(data).__name__}"
            )

        def items(key: str, item_cls):
            return tuple(item_cls.from_dict(item) for item in _as_tuple(_get(data, key), key))

        template_type = _get(data, "templateType")

        return cls(
            personal_info=_coerce_section(
                "personalInfo",
                lambda: PersonalInfo.from_dict(_get(data, "personalInfo", {})),
                PersonalInfo(),
            ),
            summary=_coerce_section("summary", lambda: _text(data, "summary"), ""),
            experience=_coerce_section(
                "experience", lambda: items("experience", ExperienceItem), ()
            ),
            education=_coerce_section("education", lambda: items("education", EducationItem), ()),
            skills=_coerce_section(
                "skills",
                lambda: tuple(_coerce_skill(s) for s in _as_tuple(_get(data, "skills"), "skills")),
                (),
            ),
            projects=_coerce_section("projects", lambda: items("projects", ProjectItem), ()),
            certifications=_coerce_section(
                "certifications", lambda: items("certifications", CertificationItem), ()
            ),
            achievements=_coerce_section(
                "achievements",
                lambda: _text_items(_get(data, "achievements"), "achievements"),
                (),
            ),
            template_type=str(template_type) if template_type else None,
        )

    @classmethod
    def from_yaml(cls, path: Path) -> "ResumeRecord":
        """
        Load a record from a YAML or JSON file.

        Args:
            path: Path to the record file

        Raises:
            FileNotFoundError: If path does not exist
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Resume record not found: {path}")
        data = OmegaConf.to_container(OmegaConf.load(path), resolve=True)
        # Records are sometimes stored wrapped as {"resume": {...}}
        if isinstance(data, Mapping) and set(data) == {"resume"}:
            data = data["resume"]
        return cls.from_dict(data)

    def to_dict(self) -> Dict[str, Any]:
        """Return the camelCase dict form (dates left as supplied)."""

        def dump_date(value: DateValue) -> Any:
            return value.isoformat() if isinstance(value, date) else value

        info = self.personal_info
        return {
            "personalInfo": {
                "firstName": info.first_name,
                "lastName": info.last_name,
                "email": info.email,
                "phone": info.phone,
                "location": info.location,
                "website": info.website,
                "linkedin": info.linkedin,
                "portfolio": info.portfolio,
            },
            "summary": self.summary,
            "experience": [
                {
                    "position": e.position,
                    "company": e.company,
                    "startDate": dump_date(e.start_date),
                    "endDate": dump_date(e.end_date),
                    "current": e.current,
                    "description": e.description,
                    "achievements": list(e.achievements),
                }
                for e in self.experience
            ],
            "education": [
                {
                    "degree": e.degree,
                    "institution": e.institution,
                    "field": e.field,
                    "graduationDate": dump_date(e.graduation_date),
                    "gpa": e.gpa,
                }
                for e in self.education
            ],
            "skills": [
                s if isinstance(s, str) else {"name": s.name, "proficiency": s.proficiency}
                for s in self.skills
            ],
            "projects": [
                {
                    "name": p.name,
                    "description": p.description,
                    "technologies": list(p.technologies),
                    "link": p.link,
                    "startDate": dump_date(p.start_date),
                    "endDate": dump_date(p.end_date),
                }
                for p in self.projects
            ],
            "certifications": [
                {
                    "name": c.name,
                    "issuer": c.issuer,
                    "date": dump_date(c.date),
                    "credentialId": c.credential_id,
                }
                for c in self.certifications
            ],
            "achievements": list(self.achievements),
            "templateType": self.template_type,
        }
