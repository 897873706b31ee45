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
Fetches a LinkedIn profile and runs the extraction cascade over it.

With a session cookie (li_at) the Voyager API is tried first; its failures
are never fatal and fall through to the public HTML page.
"""

import json
import logging
import re
from typing import Optional
from urllib.parse import urlparse

import requests
import urllib3

from resumectl.config import get_ca_bundle
from resumectl.errors import AuthTokenMissing, FetchFailed, InvalidIdentifier
from resumectl.extractors import ExtractedProfile, extract_from_api_payload, extract_from_html
from resumectl.normalize import capitalize_first

logger = logging.getLogger(__name__)

PROFILE_URL = "https://www.linkedin.com/in/{username}/"
VOYAGER_PROFILE_URL = (
    "https://www.linkedin.com/voyager/api/identity/dash/profiles"
    "?q=memberIdentity&memberIdentity={username}"
    "&decorationId=com.linkedin.voyager.dash.deco.identity.profile.FullProfileWithEntities-93"
)

USER_AGENT = (
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36"
)
BROWSER_HEADERS = {
    "User-Agent": USER_AGENT,
    "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,image/avif,image/webp,*/*;q=0.8",
    "Accept-Language": "en-US,en;q=0.5",
}

# Client fingerprint the Voyager API expects from the web app
VOYAGER_LANG = "fr_FR"
VOYAGER_TRACK = {
    "clientVersion": "1.13.8677",
    "mpVersion": "1.13.8677",
    "osName": "web",
    "timezoneOffset": 1,
    "timezone": "Europe/Paris",
    "deviceFormFactor": "DESKTOP",
    "mpName": "voyager-web",
    "displayDensity": 1,
    "displayWidth": 1920,
    "displayHeight": 1080,
}

DEFAULT_TIMEOUT = 30

_JSESSIONID_PATTERNS = [
    re.compile(r'"JSESSIONID":"([^"]+)"'),
    re.compile(r"JSESSIONID=([^;]+)"),
]


def extract_username(identifier: str) -> str:
    """
    Returns the profile handle from a URL or a bare handle.

    Raises:
        InvalidIdentifier: a linkedin.com URL without an /in/<handle> path
    """
    identifier = (identifier or "").strip()
    if "linkedin.com" not in identifier:
        return identifier.rstrip("/")

    url = identifier if "://" in identifier else f"https://{identifier}"
    parts = urlparse(url).path.strip("/").split("/")

    for i, part in enumerate(parts):
        if part == "in" and i + 1 < len(parts) and parts[i + 1]:
            return parts[i + 1]

    if len(parts) == 1 and parts[0] and parts[0] != "in":
        return parts[0]

    raise InvalidIdentifier(identifier)


def synthesize_name(username: str, profile: ExtractedProfile) -> None:
    """Fills the name from the handle, e.g. john-doe-1a2b3c -> John Doe."""
    parts = username.split("-")
    if len(parts) >= 2:
        profile.first_name = capitalize_first(parts[0])
        profile.last_name = capitalize_first(parts[1])
    else:
        profile.first_name = capitalize_first(username)


class LinkedInScraper:
    """
    One profile import.

    Args:
        session_cookie: value of the li_at cookie, enables the API path
        session: requests.Session to use, a new one by default
        timeout: per request timeout in seconds
        log: logger receiving the extraction traces
    """

    def __init__(self, session_cookie: Optional[str] = None, session: Optional[requests.Session] = None,
                 timeout: int = DEFAULT_TIMEOUT, log: Optional[logging.Logger] = None):
        self.session_cookie = session_cookie or None
        self.session = session or requests.Session()
        self.timeout = timeout
        self.log = log or logger

    def fetch(self, username: str) -> ExtractedProfile:
        if self.session_cookie:
            try:
                profile = self.fetch_via_api(username)
            except (requests.exceptions.RequestException, ValueError, FetchFailed, AuthTokenMissing) as e:
                self.log.debug(f"Voyager API path failed, falling back to HTML: {e}")
            else:
                if profile.first_name:
                    return profile
                self.log.debug("Voyager API returned no name, falling back to HTML")

        html = self.fetch_public_page(username)
        profile = extract_from_html(html, authenticated=bool(self.session_cookie), log=self.log)
        if not profile.has_name:
            synthesize_name(username, profile)
        return profile

    def harvest_csrf_token(self, username: str) -> str:
        """
        Loads the profile page with the session cookie and returns the
        JSESSIONID value, which doubles as the csrf-token header.

        Raises:
            AuthTokenMissing: neither the cookies nor the body carry it
        """
        resp = self.session.get(
            PROFILE_URL.format(username=username),
            headers={"User-Agent": USER_AGENT, "Cookie": f"li_at={self.session_cookie}"},
            timeout=self.timeout,
            verify=get_ca_bundle(),
        )

        token = resp.cookies.get("JSESSIONID") if resp.cookies is not None else None
        if token:
            return token.strip('"')

        body = resp.text or ""
        for pattern in _JSESSIONID_PATTERNS:
            match = pattern.search(body)
            if match:
                return match.group(1).strip('"')

        raise AuthTokenMissing("could not find CSRF token")

    def fetch_via_api(self, username: str) -> ExtractedProfile:
        token = self.harvest_csrf_token(username)
        self.log.debug(f"JSESSIONID found: {token}")

        url = VOYAGER_PROFILE_URL.format(username=username)
        headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.linkedin.normalized+json+2.1",
            "Cookie": f'li_at={self.session_cookie}; JSESSIONID="{token}"',
            "csrf-token": token,
            "x-li-lang": VOYAGER_LANG,
            "x-restli-protocol-version": "2.0.0",
            "x-li-track": json.dumps(VOYAGER_TRACK, separators=(",", ":")),
        }
        resp = self.session.get(url, headers=headers, timeout=self.timeout, verify=get_ca_bundle())
        self.log.debug(f"API response status: {resp.status_code}")

        if resp.status_code != 200:
            self.log.debug(f"API error response: {(resp.text or '')[:500]}")
            raise FetchFailed(f"API returned status {resp.status_code}", url=url, status_code=resp.status_code)

        self.log.debug(f"API response size: {len(resp.content or b'')} bytes")
        return extract_from_api_payload(resp.json(), self.log)

    def fetch_public_page(self, username: str) -> str:
        """
        Raises:
            FetchFailed: network error or non-200 status
        """
        url = PROFILE_URL.format(username=username)
        headers = dict(BROWSER_HEADERS)
        if self.session_cookie:
            headers["Cookie"] = f"li_at={self.session_cookie}"

        try:
            try:
                resp = self.session.get(url, headers=headers, timeout=self.timeout, verify=get_ca_bundle())
            except requests.exceptions.SSLError:
                self.log.warning(f"SSL verification failed for {url}. Retrying without verification (Unsafe)...")
                urllib3.disable_warnings(urllib3.exceptions.InsecureRequestWarning)
                resp = self.session.get(url, headers=headers, timeout=self.timeout, verify=False)
        except requests.exceptions.RequestException as e:
            raise FetchFailed(f"error fetching profile: {e}", url=url) from e

        if resp.status_code != 200:
            raise FetchFailed(
                f"LinkedIn returned status {resp.status_code} - the profile may be private or not exist",
                url=url,
                status_code=resp.status_code,
            )
        return resp.text


def fetch_profile(identifier: str, session_cookie: Optional[str] = None,
                  session: Optional[requests.Session] = None, timeout: int = DEFAULT_TIMEOUT,
                  log: Optional[logging.Logger] = None) -> ExtractedProfile:
    """
    Imports a profile from a URL or handle.

    Raises:
        InvalidIdentifier: the identifier names no profile
        FetchFailed: the public page could not be retrieved
    """
    username = extract_username(identifier)
    (log or logger).info(f"Fetching LinkedIn profile for: {username}")
    scraper = LinkedInScraper(session_cookie=session_cookie, session=session, timeout=timeout, log=log)
    return scraper.fetch(username)
