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
Reads and writes the YAML resume file.
"""

import logging
import os
from pathlib import Path

import yaml

from resumectl.errors import FileNotFound, InvalidResumeFile
from resumectl.models import Resume

logger = logging.getLogger(__name__)

FILE_HEADER = """\
# CV Configuration File
# Generated by resumectl
#
# Edit this file with your personal information, then run:
#   resumectl generate          # Generate HTML and PDF
#   resumectl serve             # Preview in browser with live reload
#   resumectl themes            # List available themes

"""

SECTION_COMMENTS = [
    ("personal:", "# Personal Information"),
    ("summary:", "# Professional Summary"),
    ("experience:", "# Work Experience"),
    ("education:", "# Education"),
    ("skills:", "# Skills (grouped by category)"),
    ("languages:", "# Languages"),
    ("certifications:", "# Certifications"),
    ("projects:", "# Personal Projects"),
    ("interests:", "# Interests (optional)"),
]


def load_resume(path: str | os.PathLike) -> Resume:
    """
    Loads a resume from a YAML file.

    Raises:
        FileNotFound: the file does not exist
        InvalidResumeFile: the file is not valid YAML or not a mapping
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFound(path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise InvalidResumeFile(f"{path}: {e}") from e

    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidResumeFile(f"{path}: top level must be a mapping, got {type(data).__name__}")

    logger.debug(f"Loaded resume from {path}")
    return Resume.from_dict(data)


def _add_section_comments(content: str) -> str:
    lines = content.splitlines()
    pending = dict(SECTION_COMMENTS)
    out = []
    for line in lines:
        for key, comment in list(pending.items()):
            # Only top-level keys, never nested ones with the same name
            if line.startswith(key):
                if out:
                    out.append("")
                out.append(comment)
                del pending[key]
                break
        out.append(line)
    return "\n".join(out) + "\n"


def dump_resume(resume: Resume) -> str:
    body = yaml.safe_dump(
        resume.to_dict(),
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
        width=100,
    )
    return FILE_HEADER + _add_section_comments(body)


def save_resume(resume: Resume, path: str | os.PathLike) -> Path:
    """Writes the resume as commented YAML, creating parent directories."""
    path = Path(path)
    if path.parent and not path.parent.exists():
        path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dump_resume(resume), encoding="utf-8")
    logger.debug(f"Wrote resume to {path}")
    return path
