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
Terminal preview of a resume as Markdown.

glow is used when installed (it brings its own pager), rich renders the
Markdown otherwise.
"""

import logging
import os
import shutil
import subprocess
import tempfile
from typing import List, Optional

from rich.console import Console
from rich.markdown import Markdown

from resumectl.generator import SECTION_LABELS
from resumectl.models import Resume, format_date

logger = logging.getLogger(__name__)

STYLES = ("auto", "dark", "light", "dracula", "tokyo-night", "notty")
WORD_WRAP = 100


def resume_to_markdown(resume: Resume, lang: str = "en") -> str:
    labels = SECTION_LABELS.get(lang, SECTION_LABELS["en"])
    personal = resume.personal
    out: List[str] = [f"# {personal.full_name}", ""]
    if personal.title:
        out += [f"### {personal.title}", ""]
    out += ["---", ""]

    contacts = [c for c in (personal.email, personal.phone, personal.location,
                            personal.linkedin, personal.github, personal.website) if c]
    if contacts:
        out += [" | ".join(contacts), ""]

    if resume.summary:
        out += [f"## {labels['summary']}", "", resume.summary.strip(), ""]

    if resume.experience:
        out += [f"## {labels['experience']}", ""]
        for exp in resume.experience:
            out.append(f"### {exp.position} - *{exp.company}*")
            dates = f"{format_date(exp.start_date, lang)} - {format_date(exp.end_date, lang)}"
            out += [f"{dates} | {exp.location}" if exp.location else dates, ""]
            if exp.description:
                out += [exp.description.strip(), ""]
            if exp.highlights:
                out += [f"- {h}" for h in exp.highlights] + [""]

    if resume.education:
        out += [f"## {labels['education']}", ""]
        for edu in resume.education:
            heading = f"### {edu.degree} - {edu.field_of_study}" if edu.field_of_study else f"### {edu.degree}"
            out.append(heading)
            out += [f"{edu.institution} | {format_date(edu.start_date, lang)} - {format_date(edu.end_date, lang)}", ""]
            if edu.description:
                out += [edu.description.strip(), ""]

    if resume.skills:
        out += [f"## {labels['skills']}", ""]
        for skill in resume.skills:
            out += [f"**{skill.category}:** {' | '.join(skill.items)}", ""]

    if resume.languages:
        out += [f"## {labels['languages']}", ""]
        out += [f"- **{lang_.name}:** {lang_.level}" for lang_ in resume.languages] + [""]

    if resume.certifications:
        out += [f"## {labels['certifications']}", ""]
        for cert in resume.certifications:
            out.append(f"- **{cert.name}** - {cert.issuer} ({cert.date})")
        out.append("")

    if resume.projects:
        out += [f"## {labels['projects']}", ""]
        for project in resume.projects:
            out += [f"### {project.name}", project.description, ""]
            if project.technologies:
                out += [f"*Technologies:* {', '.join(project.technologies)}", ""]

    if resume.interests:
        out += [f"## {labels['interests']}", "", " | ".join(resume.interests), ""]

    return "\n".join(out)


def glow_available() -> bool:
    return shutil.which("glow") is not None


def render_with_glow(markdown: str, style: str = "auto", pager: bool = False) -> None:
    """
    Raises:
        subprocess.CalledProcessError: glow exited with an error
    """
    fd, path = tempfile.mkstemp(prefix="cv-", suffix=".md")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(markdown)
        cmd = ["glow"]
        if pager:
            cmd.append("--pager")
        cmd += ["--style", style if style in STYLES else "auto", path]
        subprocess.run(cmd, check=True)
    finally:
        os.unlink(path)


def render_with_rich(markdown: str, style: str = "auto", pager: bool = False,
                     console: Optional[Console] = None) -> None:
    if console is None:
        console = Console(width=WORD_WRAP, no_color=(style == "notty"))
    renderable = Markdown(markdown)
    if pager:
        with console.pager(styles=style != "notty"):
            console.print(renderable)
    else:
        console.print(renderable)


def show(markdown: str, style: str = "auto", pager: bool = False, inline: bool = False) -> None:
    if glow_available() and not inline:
        logger.debug("Using glow for rendering")
        try:
            render_with_glow(markdown, style=style, pager=pager)
            return
        except (OSError, subprocess.CalledProcessError) as e:
            logger.warning(f"Error with glow, falling back to rich: {e}")
    else:
        logger.debug("Using rich for rendering")
    render_with_rich(markdown, style=style, pager=pager)
