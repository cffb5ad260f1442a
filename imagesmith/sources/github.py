"""GitHub change source — reads default-branch tips over the REST API.

One request per watched repository per poll:
``GET /repos/{owner}/{name}/commits?per_page=1`` returns the newest commit on
the default branch.
"""

from __future__ import annotations

import logging
from typing import Any

import requests

from imagesmith.models.candidates import WatchCandidate
from imagesmith.sources import ChangeSourceError, render_tag

logger = logging.getLogger(__name__)


class GitHubChangeSource:
    """Lists watched GitHub repositories with their current tip commit.

    Parameters
    ----------
    repositories:
        Watch entries as ``owner/name``.
    tag_template:
        Publish tag template, see ``render_tag``.
    api_url:
        GitHub API root.
    token:
        Optional token; raises the rate limit from 60 to 5000 requests/hour.
    registry:
        Value for the ``{registry}`` template field.
    """

    def __init__(
        self,
        repositories: list[str],
        tag_template: str,
        *,
        api_url: str = "https://api.github.com",
        token: str = "",
        registry: str = "",
        timeout: float = 30.0,
        session: requests.Session | None = None,
    ) -> None:
        self._repositories = list(repositories)
        self._tag_template = tag_template
        self._api = api_url.rstrip("/")
        self._token = token
        self._registry = registry
        self._timeout = timeout
        self._session = session or requests.Session()

    def _headers(self) -> dict[str, str]:
        headers = {"Accept": "application/vnd.github+json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    def _get(self, url: str, params: dict[str, Any] | None = None) -> requests.Response:
        try:
            return self._session.get(
                url, headers=self._headers(), params=params, timeout=self._timeout
            )
        except requests.RequestException as exc:
            raise ChangeSourceError(f"GitHub GET {url} failed: {exc}") from exc

    @staticmethod
    def _is_rate_limited(resp: requests.Response) -> bool:
        if resp.status_code == 429:
            return True
        return resp.status_code == 403 and resp.headers.get("X-RateLimit-Remaining") == "0"

    # ------------------------------------------------------------------
    # Startup check
    # ------------------------------------------------------------------

    def ensure_config(self) -> int:
        """Check the API answers and return the remaining request budget."""
        if not self._repositories:
            logger.warning("No repositories are being watched")
        url = f"{self._api}/rate_limit"
        resp = self._get(url)
        if resp.status_code >= 400:
            raise ChangeSourceError(f"GitHub GET {url} -> {resp.status_code} {resp.text[:200]}")
        core = resp.json().get("resources", {}).get("core", {})
        remaining = int(core.get("remaining", 0))
        logger.info(
            "GitHub API reachable: %d/%s requests left (%s)",
            remaining,
            core.get("limit", "?"),
            "authenticated" if self._token else "unauthenticated",
        )
        return remaining

    # ------------------------------------------------------------------
    # Polling
    # ------------------------------------------------------------------

    def latest_commit(self, owner: str, name: str) -> str | None:
        """Return the default-branch tip of ``owner/name``.

        Returns None for repositories that are missing or empty so one bad
        watch entry does not hide the others.
        """
        url = f"{self._api}/repos/{owner}/{name}/commits"
        resp = self._get(url, params={"per_page": 1})
        if self._is_rate_limited(resp):
            raise ChangeSourceError(
                f"GitHub rate limit reached (resets at {resp.headers.get('X-RateLimit-Reset', '?')})"
            )
        if resp.status_code in (404, 409):
            logger.warning(
                "Skipping %s/%s: GitHub answered %d (missing or empty repository)",
                owner,
                name,
                resp.status_code,
            )
            return None
        if resp.status_code >= 400:
            raise ChangeSourceError(f"GitHub GET {url} -> {resp.status_code} {resp.text[:200]}")

        try:
            commits = resp.json()
            return commits[0]["sha"] if commits else None
        except (ValueError, LookupError, TypeError) as exc:
            raise ChangeSourceError(f"Unexpected GitHub response for {owner}/{name}: {exc}") from exc

    def list_watched(self) -> list[WatchCandidate]:
        candidates: list[WatchCandidate] = []
        for entry in self._repositories:
            owner, _, name = entry.partition("/")
            sha = self.latest_commit(owner, name)
            if sha is None:
                continue
            candidates.append(
                WatchCandidate(
                    owner=owner,
                    name=name,
                    commit_id=sha,
                    publish_tag=render_tag(
                        self._tag_template, owner, name, sha, registry=self._registry
                    ),
                )
            )
        logger.debug("GitHub reports %d watched repositories", len(candidates))
        return candidates
