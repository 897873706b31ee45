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
Runtime settings for resumectl.

Values come from the environment and are overridden by command line flags.

CA bundle resolution for outbound HTTPS (priority order):
  1. Explicit override via --ca-bundle
  2. REQUESTS_CA_BUNDLE environment variable
  3. CURL_CA_BUNDLE environment variable
  4. SSL_CERT_FILE environment variable
  5. System defaults (True)
"""

import os
import logging
from dataclasses import dataclass
from typing import Optional

logger = logging.getLogger(__name__)

# Library use stays silent until the CLI configures the root logger
logging.getLogger("resumectl").addHandler(logging.NullHandler())

DEFAULT_DATA_PATH = "cv.yaml"
DEFAULT_OUTPUT_DIR = "output"
DEFAULT_THEME = "modern"
DEFAULT_LANG = "en"
SUPPORTED_LANGS = ("en", "fr")

# Highest priority first
CA_BUNDLE_VARS = ("REQUESTS_CA_BUNDLE", "CURL_CA_BUNDLE", "SSL_CERT_FILE")

# Set by the CLI --ca-bundle flag
_ca_bundle_override: str | None = None


def ca_bundle_from_env(environ=None) -> Optional[str]:
    env = os.environ if environ is None else environ
    return next((env[var] for var in CA_BUNDLE_VARS if env.get(var)), None)


@dataclass
class Settings:
    """Resolved configuration for one CLI invocation."""
    data_path: str = DEFAULT_DATA_PATH
    output_dir: str = DEFAULT_OUTPUT_DIR
    theme: str = DEFAULT_THEME
    color: str = ""
    lang: str = DEFAULT_LANG
    log_file: Optional[str] = None
    linkedin_cookie: Optional[str] = None
    ca_bundle: Optional[str] = None

    @classmethod
    def from_env(cls, environ=None) -> "Settings":
        env = os.environ if environ is None else environ
        lang = env.get("RESUMECTL_LANG", DEFAULT_LANG).lower()
        if lang not in SUPPORTED_LANGS:
            logger.warning(f"Unsupported RESUMECTL_LANG '{lang}', using '{DEFAULT_LANG}'")
            lang = DEFAULT_LANG
        return cls(
            data_path=env.get("RESUMECTL_DATA") or DEFAULT_DATA_PATH,
            output_dir=env.get("RESUMECTL_OUTPUT") or DEFAULT_OUTPUT_DIR,
            theme=env.get("RESUMECTL_THEME") or DEFAULT_THEME,
            color=env.get("RESUMECTL_COLOR", ""),
            lang=lang,
            log_file=env.get("RESUMECTL_LOG_FILE") or None,
            linkedin_cookie=env.get("LINKEDIN_COOKIE") or None,
            ca_bundle=ca_bundle_from_env(env),
        )

    def override(self, **values) -> "Settings":
        """Apply CLI flags; None means the flag was not given."""
        for key, value in values.items():
            if value is not None:
                setattr(self, key, value)
        return self


def set_ca_bundle_override(path: str) -> None:
    global _ca_bundle_override
    _ca_bundle_override = path
    logger.info(f"CA bundle override set to: {path}")


def get_ca_bundle() -> str | bool:
    """
    Value for the ``verify`` argument of every outbound request: the
    --ca-bundle override, else the first CA_BUNDLE_VARS entry set in the
    environment, else True for the system trust store.
    """
    bundle = _ca_bundle_override or ca_bundle_from_env()
    if bundle:
        logger.debug(f"Using CA bundle: {bundle}")
        return bundle
    return True
