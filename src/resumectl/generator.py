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
Renders a Resume to HTML with the bundled Jinja2 template, and to PDF
through one of the external converters in resumectl.pdf.
"""

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader, select_autoescape

from resumectl import pdf
from resumectl.config import DEFAULT_LANG
from resumectl.errors import InvalidColor
from resumectl.models import Resume, format_date
from resumectl.store import load_resume
from resumectl.themes import DEFAULT_THEME, TEMPLATES_DIR, get_theme_css, validate_hex_color, validate_theme

logger = logging.getLogger(__name__)

TEMPLATE_NAME = "base.html"

SECTION_LABELS = {
    "en": {
        "summary": "Profile",
        "experience": "Experience",
        "education": "Education",
        "skills": "Skills",
        "projects": "Projects",
        "languages": "Languages",
        "certifications": "Certifications",
        "interests": "Interests",
    },
    "fr": {
        "summary": "Profil",
        "experience": "Expérience professionnelle",
        "education": "Formation",
        "skills": "Compétences",
        "projects": "Projets",
        "languages": "Langues",
        "certifications": "Certifications",
        "interests": "Centres d'intérêt",
    },
}


def _link(url: str) -> str:
    """Turns the scheme-less URLs stored in the YAML file into hrefs."""
    if not url or "://" in url or url.startswith("mailto:"):
        return url
    return f"https://{url}"


def write_atomic(path: Path, content: str) -> Path:
    """Writes through a temporary file in the same directory, then renames."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        os.replace(tmp_name, path)
    except BaseException:
        if os.path.exists(tmp_name):
            os.unlink(tmp_name)
        raise
    return path


class ResumeGenerator:
    """
    Binds a resume to a theme, an optional primary color and a language.

    Theme and color are checked here so that a bad value fails before
    anything is written.
    """

    def __init__(self, resume: Resume, theme: str = DEFAULT_THEME, color: Optional[str] = None,
                 lang: str = DEFAULT_LANG):
        validate_theme(theme)
        if not validate_hex_color(color):
            raise InvalidColor(color)

        self.resume = resume
        self.theme = theme
        self.color = color or None
        self.lang = lang if lang in SECTION_LABELS else DEFAULT_LANG

        self.env = Environment(
            loader=FileSystemLoader(str(TEMPLATES_DIR)),
            autoescape=select_autoescape(["html", "xml"]),
        )
        self.env.filters["format_date"] = lambda date: format_date(date, self.lang)
        self.env.filters["link"] = _link

    @classmethod
    def from_file(cls, path, theme: str = DEFAULT_THEME, color: Optional[str] = None,
                  lang: str = DEFAULT_LANG) -> "ResumeGenerator":
        return cls(load_resume(path), theme=theme, color=color, lang=lang)

    def render_html(self) -> str:
        template = self.env.get_template(TEMPLATE_NAME)
        return template.render(
            cv=self.resume,
            lang=self.lang,
            labels=SECTION_LABELS[self.lang],
            theme_css=get_theme_css(self.theme, self.color),
        )

    def generate_html(self, output_path) -> Path:
        html = self.render_html()
        path = write_atomic(Path(output_path), html)
        logger.info(f"    > HTML generated: {path}")
        return path

    def generate_pdf(self, html_path, pdf_path) -> Path:
        """
        Converts an already generated HTML file.

        Raises:
            NoConverterAvailable: every backend failed
        """
        path = pdf.convert_html_to_pdf(html_path, pdf_path)
        logger.info(f"    > PDF generated: {path}")
        return path
