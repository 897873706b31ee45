# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Data models for resumectl.

Field names follow Python conventions; the YAML file uses camelCase keys,
declared per field through the ``key`` metadata entry.
"""

from dataclasses import dataclass, field, fields
from typing import Any, Dict, List

PHOTO_SHAPES = ("round", "square")

ONGOING_LABELS = {
    "en": "Present",
    "fr": "Présent",
}
_ONGOING_TOKENS = {"present", "présent"}


def _key(name: str):
    return {"key": name}


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _text_list(value: Any) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [_text(v) for v in value if v is not None]


class _Record:
    """Mixin mapping flat string records to and from YAML dictionaries."""

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None):
        data = data or {}
        values = {}
        for f in fields(cls):
            raw = data.get(f.metadata.get("key", f.name))
            if f.type in ("List[str]", List[str]):
                values[f.name] = _text_list(raw)
            elif f.type in ("bool", bool):
                values[f.name] = bool(raw)
            else:
                values[f.name] = _text(raw)
        return cls(**values)

    def to_dict(self) -> Dict[str, Any]:
        return {f.metadata.get("key", f.name): getattr(self, f.name) for f in fields(self)}


@dataclass
class Personal(_Record):
    """Contact block at the top of the resume."""
    first_name: str = field(default="", metadata=_key("firstName"))
    last_name: str = field(default="", metadata=_key("lastName"))
    title: str = ""
    email: str = ""
    phone: str = ""
    location: str = ""
    linkedin: str = ""
    github: str = ""
    website: str = ""
    photo: str = ""
    photo_grayscale: bool = field(default=False, metadata=_key("photoGrayscale"))
    photo_shape: str = field(default="round", metadata=_key("photoShape"))

    def __post_init__(self):
        if self.photo_shape not in PHOTO_SHAPES:
            self.photo_shape = "round"

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()


@dataclass
class Experience(_Record):
    company: str = ""
    position: str = ""
    location: str = ""
    start_date: str = field(default="", metadata=_key("startDate"))
    end_date: str = field(default="", metadata=_key("endDate"))
    description: str = ""
    highlights: List[str] = field(default_factory=list)


@dataclass
class Education(_Record):
    institution: str = ""
    degree: str = ""
    field_of_study: str = field(default="", metadata=_key("field"))
    location: str = ""
    start_date: str = field(default="", metadata=_key("startDate"))
    end_date: str = field(default="", metadata=_key("endDate"))
    description: str = ""


@dataclass
class SkillCategory(_Record):
    category: str = ""
    items: List[str] = field(default_factory=list)


@dataclass
class Language(_Record):
    name: str = ""
    level: str = ""


@dataclass
class Certification(_Record):
    name: str = ""
    issuer: str = ""
    date: str = ""


@dataclass
class Project(_Record):
    name: str = ""
    description: str = ""
    url: str = ""
    technologies: List[str] = field(default_factory=list)


@dataclass
class Resume:
    """
    Structured data representing a complete resume.
    This is the object rendered to HTML, PDF and Markdown.
    """
    personal: Personal = field(default_factory=Personal)
    summary: str = ""
    experience: List[Experience] = field(default_factory=list)
    education: List[Education] = field(default_factory=list)
    skills: List[SkillCategory] = field(default_factory=list)
    languages: List[Language] = field(default_factory=list)
    certifications: List[Certification] = field(default_factory=list)
    projects: List[Project] = field(default_factory=list)
    interests: List[str] = field(default_factory=list)

    _SECTIONS = {
        "experience": Experience,
        "education": Education,
        "skills": SkillCategory,
        "languages": Language,
        "certifications": Certification,
        "projects": Project,
    }

    @classmethod
    def from_dict(cls, data: Dict[str, Any] | None) -> "Resume":
        data = data or {}
        resume = cls(
            personal=Personal.from_dict(data.get("personal")),
            summary=_text(data.get("summary")),
            interests=_text_list(data.get("interests")),
        )
        for name, record in cls._SECTIONS.items():
            entries = data.get(name) or []
            setattr(resume, name, [record.from_dict(e) for e in entries if isinstance(e, dict)])
        return resume

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "personal": self.personal.to_dict(),
            "summary": self.summary,
        }
        for name in self._SECTIONS:
            data[name] = [entry.to_dict() for entry in getattr(self, name)]
        data["interests"] = list(self.interests)
        return data


def is_ongoing(date: str) -> bool:
    return (date or "").strip().casefold() in _ONGOING_TOKENS


def format_date(date: str, lang: str = "en") -> str:
    """Formats a date for display; the 'present' sentinel is localized."""
    if is_ongoing(date):
        return ONGOING_LABELS.get(lang, ONGOING_LABELS["en"])
    return date


def empty_resume() -> Resume:
    """Starter resume written by `init` when nothing could be imported."""
    return Resume(
        personal=Personal(
            first_name="John",
            last_name="Doe",
            title="Your Professional Title",
            email="your.email@example.com",
            phone="+1 000 000 0000",
            location="City, Country",
            linkedin="linkedin.com/in/yourprofile",
            github="github.com/yourusername",
            website="yourwebsite.com",
            photo_shape="round",
        ),
        summary=(
            "Write a brief professional summary highlighting your key skills, experience, "
            "and career objectives. This section should give employers a quick overview "
            "of who you are and what you bring to the table."
        ),
        experience=[
            Experience(
                company="Company Name",
                position="Senior Position",
                location="City, Country",
                start_date="2022-01",
                end_date="present",
                description="Brief description of your role and main responsibilities in this position.",
                highlights=[
                    "Key achievement or responsibility 1",
                    "Key achievement or responsibility 2",
                    "Key achievement or responsibility 3",
                ],
            ),
            Experience(
                company="Previous Company",
                position="Position Title",
                location="City, Country",
                start_date="2019-06",
                end_date="2021-12",
                description="Brief description of your role and main responsibilities in this position.",
                highlights=[
                    "Key achievement or responsibility 1",
                    "Key achievement or responsibility 2",
                ],
            ),
        ],
        education=[
            Education(
                institution="University Name",
                degree="Master's Degree",
                field_of_study="Field of Study",
                location="City, Country",
                start_date="2015",
                end_date="2019",
                description="Relevant coursework, honors, or achievements",
            ),
        ],
        skills=[
            SkillCategory("Programming Languages", ["Language 1", "Language 2", "Language 3"]),
            SkillCategory("Frameworks & Tools", ["Framework 1", "Framework 2", "Tool 1"]),
            SkillCategory("Soft Skills", ["Communication", "Leadership", "Problem Solving"]),
        ],
        languages=[
            Language("English", "Native"),
            Language("French", "Fluent (C1)"),
        ],
        certifications=[
            Certification("Certification Name", "Issuing Organization", "2023"),
        ],
        projects=[
            Project(
                name="Project Name",
                description="Brief description of the project and your role",
                url="github.com/username/project",
                technologies=["Tech 1", "Tech 2", "Tech 3"],
            ),
        ],
        interests=["Interest 1", "Interest 2", "Interest 3"],
    )
