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
Exceptions raised by resumectl.

Extraction failures are usually caught by the caller and degraded to
reduced data; theme, color and missing-file errors are reported to the
user before any output is produced.
"""

from typing import Optional


class ResumectlError(Exception):
    """Base class for all resumectl errors."""


class InvalidIdentifier(ResumectlError, ValueError):
    """A profile reference from which no handle could be isolated."""

    def __init__(self, identifier: str):
        self.identifier = identifier
        super().__init__(f"could not extract username from LinkedIn URL: {identifier}")


class FetchFailed(ResumectlError):
    """
    A remote page or API could not be fetched.

    Attributes:
        url: The URL that was requested
        status_code: HTTP status, or None for network-level failures
    """

    def __init__(self, message: str, url: Optional[str] = None, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        super().__init__(message)


class AuthTokenMissing(ResumectlError):
    """No anti-forgery token could be harvested on the authenticated path."""


class UserNotFound(ResumectlError):
    """The remote account does not exist."""

    def __init__(self, username: str, service: str = "GitHub"):
        self.username = username
        self.service = service
        super().__init__(f"{service} user '{username}' not found")


class InvalidTheme(ResumectlError, ValueError):
    def __init__(self, theme: str, available: str):
        self.theme = theme
        super().__init__(f"theme '{theme}' not found. Available themes: {available}")


class InvalidColor(ResumectlError, ValueError):
    def __init__(self, color: str):
        self.color = color
        super().__init__(f"invalid hex color: {color} (use format #RRGGBB or #RGB)")


class NoConverterAvailable(ResumectlError):
    """
    Every HTML to PDF backend failed or is absent.

    Attributes:
        last_error: The failure reported by the last backend tried
    """

    def __init__(self, last_error: Optional[Exception] = None):
        self.last_error = last_error
        message = "no PDF generator available. Install wkhtmltopdf, chromium or weasyprint."
        if last_error is not None:
            message += f" Last error: {last_error}"
        super().__init__(message)


class FileNotFound(ResumectlError, FileNotFoundError):
    def __init__(self, path):
        self.path = path
        super().__init__(f"data file does not exist: {path}")


class InvalidResumeFile(ResumectlError, ValueError):
    """The data file exists but is not a YAML mapping."""
