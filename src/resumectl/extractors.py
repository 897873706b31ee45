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
Best-effort extraction of profile data from LinkedIn pages and API payloads.

Every strategy is a pure function from raw input (HTML or decoded JSON) to a
fresh ExtractedProfile. The caller folds the partial results together with
ExtractedProfile.merge, where the first strategy to fill a field wins.
"""

import json
import logging
import re
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Optional

from bs4 import BeautifulSoup, Comment

from resumectl.models import (
    Certification,
    Education,
    Experience,
    Language,
    Personal,
    Resume,
    SkillCategory,
)
from resumectl.normalize import (
    clean_html_entities,
    decode_unicode_escapes,
    format_profile_url,
    format_time_period,
    is_masked,
    map_proficiency_level,
)

logger = logging.getLogger(__name__)


@dataclass
class ExtractedExperience:
    title: str = ""
    company: str = ""
    location: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""

    def key(self):
        return (self.company, self.title, self.location, self.start_date, self.end_date)

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))


@dataclass
class ExtractedEducation:
    school: str = ""
    degree: str = ""
    field_of_study: str = ""
    start_date: str = ""
    end_date: str = ""
    description: str = ""

    def key(self):
        return (self.school, self.degree, self.start_date, self.end_date)

    def is_empty(self) -> bool:
        return not any(getattr(self, f.name) for f in fields(self))


@dataclass
class ExtractedLanguage:
    name: str = ""
    proficiency: str = ""


@dataclass
class ExtractedCertification:
    name: str = ""
    organization: str = ""
    issue_date: str = ""


@dataclass
class ExtractedProfile:
    """
    Scratch record filled by the extraction strategies.

    Every field starts empty; a field counts as set once it holds a
    non-empty value.
    """
    first_name: str = ""
    last_name: str = ""
    headline: str = ""
    location: str = ""
    summary: str = ""
    experience: List[ExtractedExperience] = field(default_factory=list)
    education: List[ExtractedEducation] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)
    languages: List[ExtractedLanguage] = field(default_factory=list)
    certifications: List[ExtractedCertification] = field(default_factory=list)

    def merge(self, other: "ExtractedProfile") -> "ExtractedProfile":
        """Copies every field of other that is still empty here."""
        for f in fields(self):
            mine = getattr(self, f.name)
            theirs = getattr(other, f.name)
            if mine or not theirs:
                continue
            setattr(self, f.name, list(theirs) if isinstance(theirs, list) else theirs)
        return self

    @property
    def has_name(self) -> bool:
        return bool(self.first_name or self.last_name)

    def to_resume(self, profile_url: str) -> Resume:
        resume = Resume(
            personal=Personal(
                first_name=self.first_name,
                last_name=self.last_name,
                title=self.headline,
                email="your.email@example.com",
                phone="+1 000 000 0000",
                location=self.location,
                linkedin=format_profile_url(profile_url),
            ),
            summary=self.summary,
        )
        resume.experience = [
            Experience(
                company=exp.company,
                position=exp.title,
                location=exp.location,
                start_date=exp.start_date,
                end_date=exp.end_date,
                description=exp.description,
            )
            for exp in self.experience
        ]
        resume.education = [
            Education(
                institution=edu.school,
                degree=edu.degree,
                field_of_study=edu.field_of_study,
                start_date=edu.start_date,
                end_date=edu.end_date,
                description=edu.description,
            )
            for edu in self.education
        ]
        if self.skills:
            resume.skills = [SkillCategory("Skills", list(self.skills))]
        resume.languages = [
            Language(lang.name, map_proficiency_level(lang.proficiency)) for lang in self.languages
        ]
        resume.certifications = [
            Certification(cert.name, cert.organization, cert.issue_date) for cert in self.certifications
        ]
        resume.projects = []
        return resume


def _append_unique(items: list, item) -> None:
    if item not in items:
        items.append(item)


def _str(data: Dict[str, Any], key: str) -> str:
    value = data.get(key)
    return value if isinstance(value, str) else ""


def _dict(data: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _list(data: Dict[str, Any], key: str) -> List[Any]:
    """A list value as-is, a lone string or object as a one-item list, anything else as empty."""
    value = data.get(key)
    if isinstance(value, list):
        return value
    if isinstance(value, (str, dict)) and value:
        return [value]
    return []


# --- Authenticated API payloads ------------------------------------------------

class EntityKind(Enum):
    PROFILE = "profile"
    POSITION = "position"
    EDUCATION = "education"
    SKILL = "skill"
    LANGUAGE = "language"
    CERTIFICATION = "certification"
    UNKNOWN = "unknown"


def classify_entity(entity: Dict[str, Any]) -> EntityKind:
    """
    Classifies one normalized API entity by its $type and entityUrn.

    Matching is substring based and case-insensitive because the
    discriminators are namespaced, e.g.
    com.linkedin.voyager.dash.identity.profile.Position.
    """
    kind = _str(entity, "$type").lower()
    urn = _str(entity, "entityUrn").lower()

    if "profile" in kind and "position" not in kind and "education" not in kind:
        return EntityKind.PROFILE
    if "position" in kind or "profileposition" in urn or "fs_position" in urn:
        return EntityKind.POSITION
    if "education" in kind or "profileeducation" in urn or "fs_education" in urn:
        return EntityKind.EDUCATION
    if "skill" in kind or "fs_skill" in urn:
        return EntityKind.SKILL
    if "language" in kind or "fs_language" in urn:
        return EntityKind.LANGUAGE
    if "certification" in kind or "fs_certification" in urn:
        return EntityKind.CERTIFICATION
    return EntityKind.UNKNOWN


def _entity_name(data: Dict[str, Any], key: str, nested: str) -> str:
    """companyName / schoolName: plain string, then {"text": ...}, then company.name."""
    value = data.get(key)
    if isinstance(value, str) and value:
        return value
    if isinstance(value, dict) and isinstance(value.get("text"), str) and value["text"]:
        return value["text"]
    return _str(_dict(data, nested), "name")


def _date_range(data: Dict[str, Any]):
    date_range = _dict(data, "dateRange")
    start = format_time_period(date_range.get("start"))
    end = format_time_period(date_range.get("end"))
    period = _dict(data, "timePeriod")
    return (
        start or format_time_period(period.get("startDate")),
        end or format_time_period(period.get("endDate")),
    )


def _apply_profile_entity(data: Dict[str, Any], profile: ExtractedProfile) -> None:
    for attr, key in (("first_name", "firstName"), ("last_name", "lastName"),
                      ("headline", "headline"), ("summary", "summary")):
        if not getattr(profile, attr) and _str(data, key):
            setattr(profile, attr, _str(data, key))

    if not profile.location:
        profile.location = (
            _str(data, "locationName")
            or _str(data, "geoLocationName")
            or _str(_dict(data, "geoLocation"), "geoLocationName")
        )


def parse_position(data: Dict[str, Any]) -> Optional[ExtractedExperience]:
    start, end = _date_range(data)
    exp = ExtractedExperience(
        title=_str(data, "title"),
        company=_entity_name(data, "companyName", "company"),
        location=_str(data, "locationName"),
        start_date=start,
        end_date=end,
        description=_str(data, "description"),
    )
    if not exp.company and not exp.title:
        return None
    return exp


def parse_education(data: Dict[str, Any]) -> Optional[ExtractedEducation]:
    start, end = _date_range(data)
    edu = ExtractedEducation(
        school=_entity_name(data, "schoolName", "school"),
        degree=_str(data, "degreeName"),
        field_of_study=_str(data, "fieldOfStudy"),
        start_date=start,
        end_date=end,
        description=_str(data, "description"),
    )
    return edu if edu.school else None


def parse_language(data: Dict[str, Any]) -> Optional[ExtractedLanguage]:
    name = _str(data, "name")
    if not name:
        return None
    return ExtractedLanguage(name=name, proficiency=_str(data, "proficiency"))


def parse_certification(data: Dict[str, Any]) -> Optional[ExtractedCertification]:
    name = _str(data, "name")
    if not name:
        return None
    issued, _ = _date_range(data)
    return ExtractedCertification(name=name, organization=_str(data, "authority"), issue_date=issued)


_LIST_PARSERS: Dict[EntityKind, tuple] = {
    EntityKind.POSITION: ("experience", parse_position),
    EntityKind.EDUCATION: ("education", parse_education),
    EntityKind.SKILL: ("skills", lambda data: _str(data, "name") or None),
    EntityKind.LANGUAGE: ("languages", parse_language),
    EntityKind.CERTIFICATION: ("certifications", parse_certification),
}


def extract_from_entities(entities: Iterable[Any], log: Optional[logging.Logger] = None) -> ExtractedProfile:
    """Dispatches each classified entity to its parser; unknown kinds are skipped."""
    log = log or logger
    profile = ExtractedProfile()
    for entity in entities:
        if not isinstance(entity, dict):
            continue
        kind = classify_entity(entity)
        if kind is EntityKind.UNKNOWN:
            continue
        log.debug(f"Entity {kind.value}: {_str(entity, '$type')} {_str(entity, 'entityUrn')}")
        if kind is EntityKind.PROFILE:
            _apply_profile_entity(entity, profile)
            continue
        attr, parse = _LIST_PARSERS[kind]
        record = parse(entity)
        if record:
            _append_unique(getattr(profile, attr), record)
    return profile


def extract_from_api_payload(payload: Any, log: Optional[logging.Logger] = None) -> ExtractedProfile:
    """Handles the normalized JSON of the identity/dash/profiles endpoint."""
    log = log or logger
    if not isinstance(payload, dict):
        return ExtractedProfile()

    entities: List[Any] = []
    included = payload.get("included")
    if isinstance(included, list):
        log.debug(f"Found {len(included)} items in 'included'")
        entities.extend(included)

    elements = _dict(payload, "data").get("elements")
    if isinstance(elements, list) and elements:
        entities.append(elements[0])

    return extract_from_entities(entities, log)


_CODE_ID_RE = re.compile(r"^bpr-guid-\d+$")
_INCLUDED_ARRAY_RE = re.compile(r'"included":\s*\[([\s\S]*?)\],"meta"')


def extract_from_embedded_payloads(html: str, log: Optional[logging.Logger] = None) -> ExtractedProfile:
    """
    Authenticated pages ship the same entities inside <code id="bpr-guid-N">
    comments, and sometimes as bare "included" arrays in inline scripts.
    """
    log = log or logger
    entities: List[Any] = []

    soup = BeautifulSoup(html, "html.parser")
    for code in soup.find_all("code", id=_CODE_ID_RE):
        comment = code.find(string=lambda s: isinstance(s, Comment))
        if not comment:
            continue
        try:
            data = json.loads(clean_html_entities(str(comment)))
        except ValueError:
            continue
        if isinstance(data, dict) and isinstance(data.get("included"), list):
            entities.extend(data["included"])

    for match in _INCLUDED_ARRAY_RE.finditer(html):
        try:
            items = json.loads(f"[{match.group(1)}]")
        except ValueError:
            continue
        entities.extend(items)

    log.debug(f"Embedded payloads yielded {len(entities)} entities")
    return extract_from_entities(entities, log)


# --- JSON-LD -------------------------------------------------------------------

_BR_RE = re.compile(r"<br\s*/?>|\\u003Cbr\\u003E", re.IGNORECASE)


def _ld_date(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, dict):
        return format_time_period(value)
    return str(value)


def _unmasked(value: Any) -> str:
    if isinstance(value, str) and not is_masked(value):
        return value
    return ""


def _apply_person(data: Dict[str, Any], profile: ExtractedProfile) -> None:
    schema_type = data.get("@type", "")
    if schema_type not in ("Person", "", None):
        return

    name = _str(data, "name")
    if name and not profile.first_name:
        first, _, last = name.partition(" ")
        profile.first_name = first
        profile.last_name = last

    description = _str(data, "description")
    if description and not profile.summary:
        profile.summary = _BR_RE.sub("\n", description)

    locality = _str(_dict(data, "address"), "addressLocality")
    if locality and not profile.location:
        profile.location = locality

    seen = {exp.key() for exp in profile.experience}
    for work in _list(data, "worksFor"):
        if not isinstance(work, dict):
            continue
        member = _dict(work, "member")
        exp = ExtractedExperience(
            company=_unmasked(work.get("name")),
            location=_str(work, "location"),
            description=_unmasked(member.get("description")),
            start_date=_ld_date(member.get("startDate")),
            end_date=_ld_date(member.get("endDate")),
        )
        if exp.is_empty() or exp.key() in seen:
            continue
        seen.add(exp.key())
        profile.experience.append(exp)

    seen = {edu.key() for edu in profile.education}
    for school in _list(data, "alumniOf"):
        if not isinstance(school, dict):
            continue
        member = _dict(school, "member")
        edu = ExtractedEducation(
            school=_unmasked(school.get("name")),
            degree=_unmasked(member.get("description")),
            start_date=_ld_date(member.get("startDate")),
            end_date=_ld_date(member.get("endDate")),
        )
        if edu.is_empty() or edu.key() in seen:
            continue
        seen.add(edu.key())
        profile.education.append(edu)

    for language in _list(data, "knowsLanguage"):
        name = _str(language, "name") if isinstance(language, dict) else language
        if isinstance(name, str) and name:
            _append_unique(profile.languages, ExtractedLanguage(name=name))

    for skill in _list(data, "knowsAbout"):
        # Thing objects carry their label in name
        if isinstance(skill, dict):
            skill = _str(skill, "name")
        if isinstance(skill, str) and skill:
            _append_unique(profile.skills, skill)

    # A list holding only masked titles leaves the headline for later strategies
    job_title = data.get("jobTitle")
    if not profile.headline:
        if isinstance(job_title, list):
            profile.headline = next((t for t in job_title if _unmasked(t)), "")
        else:
            profile.headline = _unmasked(job_title)


def extract_from_json_ld(html: str, log: Optional[logging.Logger] = None) -> ExtractedProfile:
    log = log or logger
    profile = ExtractedProfile()
    soup = BeautifulSoup(html, "html.parser")

    for script in soup.find_all("script", type="application/ld+json"):
        raw = script.string or script.get_text()
        try:
            data = json.loads(raw)
        except ValueError as e:
            log.debug(f"Skipping unparsable JSON-LD block: {e}")
            continue
        if not isinstance(data, dict):
            continue

        graph = data.get("@graph")
        records = graph if isinstance(graph, list) and graph else [data]
        for record in records:
            if isinstance(record, dict):
                _apply_person(record, profile)

    return profile


# --- Header meta tags ----------------------------------------------------------

def _meta_content(soup: BeautifulSoup, **attrs) -> str:
    tag = soup.find("meta", attrs=attrs)
    if tag is None:
        return ""
    return tag.get("content") or ""


def extract_from_meta_tags(html: str, log: Optional[logging.Logger] = None) -> ExtractedProfile:
    """og:title is "First Last - Headline | LinkedIn"."""
    profile = ExtractedProfile()
    soup = BeautifulSoup(html, "html.parser")

    title = _meta_content(soup, property="og:title")
    idx = title.find(" - ")
    if idx > 0:
        first, _, last = title[:idx].partition(" ")
        profile.first_name = first
        profile.last_name = last
        rest = title[idx + 3:]
        pipe = rest.find(" | ")
        if pipe > 0:
            profile.headline = rest[:pipe].strip()

    description = _meta_content(soup, property="og:description")
    if description:
        profile.summary = clean_html_entities(description)

    profile.location = _meta_content(soup, name="geo.placename")
    return profile


# --- Visible content -----------------------------------------------------------

_LOCATION_CLASS_PREFIXES = ("top-card-subline-item", "profile-info-subheader")


def _class_prefix(prefix: str) -> Callable[[Optional[str]], bool]:
    return lambda css_class: bool(css_class) and css_class.startswith(prefix)


def extract_from_visible_content(html: str, log: Optional[logging.Logger] = None) -> ExtractedProfile:
    profile = ExtractedProfile()
    soup = BeautifulSoup(html, "html.parser")

    for prefix in _LOCATION_CLASS_PREFIXES:
        element = soup.find(class_=_class_prefix(prefix))
        if element is None:
            continue
        text = element.get_text(" ", strip=True)
        # Subline items also carry the contact email
        if text and "@" not in text:
            profile.location = text
            break

    return profile


# --- Inline script key scan ----------------------------------------------------

_SCRIPT_SCALARS = {
    "first_name": [re.compile(r'"firstName"\s*:\s*"([^"]+)"')],
    "last_name": [re.compile(r'"lastName"\s*:\s*"([^"]+)"')],
    "headline": [re.compile(r'"headline"\s*:\s*"([^"]+)"')],
    "location": [
        re.compile(r'"locationName"\s*:\s*"([^"]+)"'),
        re.compile(r'"geoLocationName"\s*:\s*"([^"]+)"'),
        re.compile(r'"location"\s*:\s*\{[^}]*"name"\s*:\s*"([^"]+)"'),
    ],
}
_SCRIPT_SUMMARY = [
    re.compile(r'"summary"\s*:\s*"([^"]{20,})"'),
    re.compile(r'"about"\s*:\s*"([^"]{20,})"'),
]
_COMPANY_TITLE_RE = re.compile(r'"companyName"\s*:\s*"([^"]+)"[^}]*"title"\s*:\s*"([^"]+)"')
_TITLE_COMPANY_RE = re.compile(r'"title"\s*:\s*"([^"]+)"[^}]*"companyName"\s*:\s*"([^"]+)"')
_SCHOOL_RE = re.compile(r'"schoolName"\s*:\s*"([^"]+)"')
_SKILL_RE = re.compile(r'"skillName"\s*:\s*"([^"]+)"')


def extract_from_script_data(html: str, log: Optional[logging.Logger] = None) -> ExtractedProfile:
    """Last resort: scrape well-known keys out of inline script JSON."""
    profile = ExtractedProfile()

    for attr, patterns in _SCRIPT_SCALARS.items():
        for pattern in patterns:
            match = pattern.search(html)
            if match:
                setattr(profile, attr, clean_html_entities(match.group(1)))
                break

    for pattern in _SCRIPT_SUMMARY:
        match = pattern.search(html)
        if match:
            profile.summary = decode_unicode_escapes(clean_html_entities(match.group(1)))
            break

    for match in _COMPANY_TITLE_RE.finditer(html):
        _append_unique(profile.experience, ExtractedExperience(
            company=clean_html_entities(match.group(1)),
            title=clean_html_entities(match.group(2)),
        ))
    if not profile.experience:
        for match in _TITLE_COMPANY_RE.finditer(html):
            _append_unique(profile.experience, ExtractedExperience(
                company=clean_html_entities(match.group(2)),
                title=clean_html_entities(match.group(1)),
            ))

    for match in _SCHOOL_RE.finditer(html):
        _append_unique(profile.education, ExtractedEducation(school=clean_html_entities(match.group(1))))

    for match in _SKILL_RE.finditer(html):
        _append_unique(profile.skills, clean_html_entities(match.group(1)))

    return profile


def extract_from_html(html: str, authenticated: bool = False,
                      log: Optional[logging.Logger] = None) -> ExtractedProfile:
    """
    Runs the HTML strategies in priority order and folds their results.

    Embedded API payloads are only present on pages fetched with a session.
    The inline key scan is limited to those pages as well; on public pages
    it picks up keys from unrelated embedded JSON.
    """
    log = log or logger
    strategies = []
    if authenticated:
        strategies.append(extract_from_embedded_payloads)
    strategies += [
        extract_from_json_ld,
        extract_from_meta_tags,
        extract_from_visible_content,
    ]
    if authenticated:
        strategies.append(extract_from_script_data)

    profile = ExtractedProfile()
    for strategy in strategies:
        partial = strategy(html, log)
        log.debug(
            f"{strategy.__name__}: name={partial.has_name} experience={len(partial.experience)} "
            f"education={len(partial.education)} skills={len(partial.skills)}"
        )
        profile.merge(partial)
    return profile
