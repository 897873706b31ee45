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
Small text helpers shared by the profile extractors.
"""

import re
from typing import Any, Mapping

MASK_MARKER = "***"

_ENTITIES = {
    "&amp;": "&",
    "&lt;": "<",
    "&gt;": ">",
    "&quot;": '"',
    "&#39;": "'",
    "&apos;": "'",
    "&nbsp;": " ",
}
_ENTITY_RE = re.compile("|".join(re.escape(e) for e in _ENTITIES))
_UNICODE_ESCAPE_RE = re.compile(r"\\u([0-9a-fA-F]{4})")

# Ordered: first match wins
_PROFICIENCY_BANDS = [
    (("native", "bilingual"), "Native"),
    (("full professional", "fluent"), "Fluent (C1-C2)"),
    (("professional working",), "Professional (B2)"),
    (("limited working",), "Intermediate (B1)"),
    (("elementary",), "Elementary (A2)"),
]


def clean_html_entities(text: str) -> str:
    """Decodes the handful of entities the profile pages emit, in one pass."""
    if not text:
        return text
    return _ENTITY_RE.sub(lambda m: _ENTITIES[m.group(0)], text)


def decode_unicode_escapes(text: str) -> str:
    """Replaces literal \\uXXXX sequences with the character they name."""
    if not text:
        return text
    return _UNICODE_ESCAPE_RE.sub(lambda m: chr(int(m.group(1), 16)), text)


def map_proficiency_level(proficiency: str) -> str:
    """Maps LinkedIn proficiency wording (e.g. NATIVE_OR_BILINGUAL) to a display band."""
    lowered = (proficiency or "").lower().replace("_", " ")
    for markers, band in _PROFICIENCY_BANDS:
        if any(m in lowered for m in markers):
            return band
    return proficiency or ""


def capitalize_first(word: str) -> str:
    if not word:
        return word
    return word[0].upper() + word[1:].lower()


def is_masked(text: Any) -> bool:
    return isinstance(text, str) and MASK_MARKER in text


def _as_number(value: Any) -> int:
    if isinstance(value, bool):
        return 0
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0


def format_time_period(date: Mapping[str, Any] | None) -> str:
    """
    Formats a {year, month} pair as MM/YYYY, or YYYY when the month is
    missing. Returns an empty string when there is no year.
    """
    if not isinstance(date, Mapping):
        return ""
    year = _as_number(date.get("year"))
    month = _as_number(date.get("month"))
    if year > 0:
        if month > 0:
            return f"{month:02d}/{year}"
        return str(year)
    return ""


def format_profile_url(url: str) -> str:
    """linkedin.com/in/handle form used in the resume contact line."""
    url = (url or "").strip()
    for prefix in ("https://", "http://", "www."):
        if url.startswith(prefix):
            url = url[len(prefix):]
    return url.rstrip("/")
