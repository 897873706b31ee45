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
Imports public repositories from the GitHub REST API as resume projects.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import requests

from resumectl.config import get_ca_bundle
from resumectl.errors import FetchFailed, UserNotFound
from resumectl.models import Project

logger = logging.getLogger(__name__)

API_URL = "https://api.github.com"
HEADERS = {
    "Accept": "application/vnd.github.v3+json",
    "User-Agent": "resumectl/1.0",
}
PER_PAGE = 100
MAX_PAGES = 10
DEFAULT_PROJECT_COUNT = 5
TIMEOUT = 10


@dataclass
class RankedProject:
    """A project plus the star count it was ranked by."""
    project: Project
    stars: int = 0


@dataclass
class GitHubProfile:
    login: str = ""
    name: str = ""
    bio: str = ""
    html_url: str = ""
    avatar_url: str = ""
    location: str = ""
    email: str = ""
    blog: str = ""


def extract_username(identifier: str) -> str:
    """github.com/octocat/ -> octocat; anything else is returned as-is."""
    identifier = (identifier or "").strip()
    if identifier.endswith("/"):
        identifier = identifier[:-1]
    if "github.com/" in identifier:
        return identifier.split("github.com/", 1)[1].split("/")[0]
    return identifier


def _get(url: str, username: str, log: logging.Logger) -> Any:
    try:
        response = requests.get(url, headers=HEADERS, timeout=TIMEOUT, verify=get_ca_bundle())
    except requests.exceptions.RequestException as e:
        raise FetchFailed(f"GitHub request failed: {e}", url=url) from e

    if response.status_code == 404:
        raise UserNotFound(username)
    if response.status_code != 200:
        log.debug(f"GitHub API error body: {response.text[:200] if response.text else ''}")
        raise FetchFailed(f"GitHub API returned status {response.status_code}", url=url,
                          status_code=response.status_code)

    try:
        return response.json()
    except ValueError as e:
        raise FetchFailed(f"GitHub API returned invalid JSON: {e}", url=url) from e


def fetch_repositories(username: str, log: Optional[logging.Logger] = None) -> List[Dict[str, Any]]:
    """
    Pages through /users/<username>/repos, most recently pushed first.

    Stops on an empty or short page, and after MAX_PAGES pages at most.

    Raises:
        UserNotFound: the account does not exist
        FetchFailed: network error, any other status, or a malformed body
    """
    log = log or logger
    repos: List[Dict[str, Any]] = []
    for page in range(1, MAX_PAGES + 1):
        url = f"{API_URL}/users/{username}/repos?per_page={PER_PAGE}&page={page}&sort=pushed"
        batch = _get(url, username, log)
        if not isinstance(batch, list):
            raise FetchFailed("GitHub API returned an unexpected payload", url=url)
        if not batch:
            break
        repos.extend(batch)
        if len(batch) < PER_PAGE:
            break
    log.debug(f"Found {len(repos)} repositories for user {username}")
    return repos


def _technologies(repo: Dict[str, Any]) -> List[str]:
    technologies: List[str] = []
    seen = set()
    for tech in [repo.get("language")] + list(repo.get("topics") or []):
        if not tech or tech.lower() in seen:
            continue
        seen.add(tech.lower())
        technologies.append(tech)
    return technologies


def rank_repositories(repos: List[Dict[str, Any]], count: int = DEFAULT_PROJECT_COUNT) -> List[RankedProject]:
    """Drops forks and archived repos, keeps the `count` most starred."""
    if count <= 0:
        count = DEFAULT_PROJECT_COUNT

    own = [r for r in repos if not r.get("fork") and not r.get("archived")]
    # sorted() is stable, ties keep API order
    own = sorted(own, key=lambda r: r.get("stargazers_count") or 0, reverse=True)[:count]

    return [
        RankedProject(
            project=Project(
                name=repo.get("name") or "",
                description=repo.get("description") or "",
                url=repo.get("html_url") or "",
                technologies=_technologies(repo),
            ),
            stars=repo.get("stargazers_count") or 0,
        )
        for repo in own
    ]


def fetch_top_projects(username: str, count: int = DEFAULT_PROJECT_COUNT,
                       log: Optional[logging.Logger] = None) -> List[RankedProject]:
    log = log or logger
    log.info(f"Fetching GitHub projects for: {username}")
    ranked = rank_repositories(fetch_repositories(username, log), count)
    for item in ranked:
        log.debug(f"Adding project: {item.project.name} ({item.stars} stars)")
    return ranked


def fetch_profile(username: str, log: Optional[logging.Logger] = None) -> GitHubProfile:
    """
    Raises:
        UserNotFound: the account does not exist
        FetchFailed: any other failure
    """
    log = log or logger
    data = _get(f"{API_URL}/users/{username}", username, log)
    if not isinstance(data, dict):
        raise FetchFailed("GitHub API returned an unexpected payload")
    return GitHubProfile(**{key: data.get(key) or "" for key in GitHubProfile.__dataclass_fields__})
