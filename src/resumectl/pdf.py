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
HTML to PDF conversion through external programs.

Backends are tried in order (wkhtmltopdf, headless Chrome/Chromium,
WeasyPrint); the first one that exits cleanly wins.
"""

import logging
import shutil
import subprocess
import sys
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from resumectl.errors import NoConverterAvailable, ResumectlError

logger = logging.getLogger(__name__)

CHROME_BINARIES = [
    "chromium",
    "chromium-browser",
    "google-chrome",
    "google-chrome-stable",
]
MACOS_CHROME_PATHS = [
    "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "/Applications/Chromium.app/Contents/MacOS/Chromium",
]

INSTALL_HINTS = [
    "Tip: Install Google Chrome or WeasyPrint",
    "  - macOS/Linux: Chrome is often already installed",
    "  - pip install weasyprint",
]


class ConverterFailed(ResumectlError):
    """A single backend is missing or exited with an error."""


def _run(name: str, cmd: List[str]) -> None:
    logger.debug(f"    > Running {name}: {' '.join(cmd)}")
    try:
        result = subprocess.run(cmd, capture_output=True, text=True)
    except OSError as e:
        raise ConverterFailed(f"{name}: {e}") from e
    if result.returncode != 0:
        output = (result.stdout or "") + (result.stderr or "")
        raise ConverterFailed(f"{name}: exit status {result.returncode} - {output.strip()}")


def with_wkhtmltopdf(html_path: Path, pdf_path: Path) -> None:
    _run("wkhtmltopdf", [
        "wkhtmltopdf",
        "--enable-local-file-access",
        "--page-size", "A4",
        "--margin-top", "0",
        "--margin-right", "0",
        "--margin-bottom", "0",
        "--margin-left", "0",
        "--encoding", "UTF-8",
        str(html_path), str(pdf_path),
    ])


def find_chrome() -> Optional[str]:
    candidates = list(CHROME_BINARIES)
    if sys.platform == "darwin":
        candidates += MACOS_CHROME_PATHS
    for candidate in candidates:
        found = shutil.which(candidate)
        if found:
            return found
    return None


def with_chromium(html_path: Path, pdf_path: Path) -> None:
    chrome = find_chrome()
    if not chrome:
        raise ConverterFailed("chrome/chromium not found")

    html_abs = Path(html_path).resolve()
    pdf_abs = Path(pdf_path).resolve()
    _run("chromium", [
        chrome,
        "--headless",
        "--disable-gpu",
        "--no-sandbox",
        f"--print-to-pdf={pdf_abs}",
        "--print-to-pdf-no-header",
        f"file://{html_abs}",
    ])


def with_weasyprint(html_path: Path, pdf_path: Path) -> None:
    _run("weasyprint", ["weasyprint", str(html_path), str(pdf_path)])


Converter = Callable[[Path, Path], None]

DEFAULT_CONVERTERS: List[Tuple[str, Converter]] = [
    ("wkhtmltopdf", with_wkhtmltopdf),
    ("chromium", with_chromium),
    ("weasyprint", with_weasyprint),
]


def convert_html_to_pdf(html_path, pdf_path, converters: Optional[List[Tuple[str, Converter]]] = None) -> Path:
    """
    Converts html_path to pdf_path with the first backend that succeeds.

    Raises:
        NoConverterAvailable: every backend failed; carries the last failure
    """
    html_path = Path(html_path)
    pdf_path = Path(pdf_path)
    pdf_path.parent.mkdir(parents=True, exist_ok=True)

    last_error = None
    for name, convert in (converters if converters is not None else DEFAULT_CONVERTERS):
        try:
            convert(html_path, pdf_path)
        except ConverterFailed as e:
            logger.debug(f"    > {name} failed: {e}")
            last_error = e
            continue
        logger.debug(f"    > PDF written with {name}")
        return pdf_path

    raise NoConverterAvailable(last_error)
