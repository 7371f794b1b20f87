"""Read-only GitHub REST API client for pull request metadata.

Requests are unauthenticated single GETs with no retry: a failed fetch is
fatal to whatever asked for it.
"""

import http.client
import json
import logging
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Any, Callable, Optional

from git_pr.config import Settings
from git_pr.errors import MetadataError, PullInfoMissing
from git_pr.git_ops import RepositoryRef

_log = logging.getLogger("git_pr.api")

JsonFetcher = Callable[[str], Any]

PULL_STATES = ("open", "closed", "all")


@dataclass(frozen=True)
class PullRequest:
    """Metadata needed to pull one PR into a local branch."""

    number: int
    title: Optional[str]
    base_branch: str
    head_clone_url: str
    head_branch: str


@dataclass(frozen=True)
class PullSummary:
    """One entry of a PR listing."""

    number: int
    title: str
    head_repo_full_name: Optional[str]
    head_ref: Optional[str]


class JsonList(list):
    """A decoded JSON array, remembering whether the API has a next page."""

    def __init__(self, items=(), has_next: bool = False):
        super().__init__(items)
        self.has_next = has_next


class PullList(list):
    """PR summaries from one page; has_next is set when more pages exist."""

    def __init__(self, items=(), has_next: bool = False):
        super().__init__(items)
        self.has_next = has_next


def _has_next_page(link_header: Optional[str]) -> bool:
    return 'rel="next"' in (link_header or "")


def make_fetcher(settings: Settings) -> JsonFetcher:
    """Return a fetch-JSON-by-URL callable using the configured client identifier.

    JSON arrays come back as JsonList so callers can tell from the Link
    header whether the page was the last one.
    """

    def fetch_json(url: str) -> Any:
        _log.info("GET %s", url)
        req = urllib.request.Request(url, headers={
            "User-Agent": settings.user_agent,
            "Accept": "application/vnd.github+json",
        })
        try:
            with urllib.request.urlopen(req) as resp:
                raw = resp.read()
                link = resp.headers.get("Link")
        except urllib.error.HTTPError as exc:
            raise MetadataError(f"GitHub API returned HTTP {exc.code} for {url}") from exc
        except urllib.error.URLError as exc:
            raise MetadataError(f"Could not read info from {url}: {exc.reason}") from exc
        except (http.client.HTTPException, OSError) as exc:
            raise MetadataError(f"Connection dropped while reading {url}: {exc!r}") from exc
        try:
            data = json.loads(raw.decode("utf-8"))
        except UnicodeDecodeError as exc:
            raise MetadataError(f"Response from {url} is not valid UTF-8: {exc}") from exc
        except json.JSONDecodeError as exc:
            raise MetadataError(f"Malformed JSON from {url}: {exc}") from exc
        if isinstance(data, list):
            return JsonList(data, has_next=_has_next_page(link))
        return data

    return fetch_json


def _dig(data: Any, *keys: str) -> Any:
    """Walk nested dicts, returning None as soon as a level is missing."""
    for key in keys:
        if not isinstance(data, dict):
            return None
        data = data.get(key)
    return data


class GitHubClient:
    """Fetches single-PR and PR-list data for one repository."""

    def __init__(self, repo: RepositoryRef, settings: Optional[Settings] = None,
                 fetch_json: Optional[JsonFetcher] = None):
        self.repo = repo
        self.settings = settings or Settings()
        self._fetch = fetch_json or make_fetcher(self.settings)

    def _repo_url(self) -> str:
        return f"{self.settings.api_base}/repos/{self.repo.owner}/{self.repo.name}"

    def fetch_pull(self, number: int) -> PullRequest:
        """Fetch one PR.

        Raises:
            PullInfoMissing: head clone URL, head ref or base ref is absent,
                usually because the source fork was deleted.
            MetadataError: the API could not be read.
        """
        data = self._fetch(f"{self._repo_url()}/pulls/{number}")
        clone_url = _dig(data, "head", "repo", "clone_url")
        head_ref = _dig(data, "head", "ref")
        base_ref = _dig(data, "base", "ref")
        if not clone_url or not head_ref or not base_ref:
            _log.warning("PR #%d is missing head/base info", number)
            raise PullInfoMissing(number)

        title = data.get("title")
        return PullRequest(
            number=number,
            title=title if isinstance(title, str) else None,
            base_branch=base_ref,
            head_clone_url=clone_url,
            head_branch=head_ref,
        )

    def fetch_pulls(self, state: str = "open", per_page: Optional[int] = None) -> PullList:
        """Fetch one page of PRs in the given state.

        Returns an empty list when there are none. has_next on the result
        tells whether the API reported further pages. A response that is not
        a JSON list is a MetadataError, never an empty result.
        """
        if state not in PULL_STATES:
            raise ValueError(f"Invalid PR state: '{state}'. Must be one of: {', '.join(PULL_STATES)}")
        if per_page is None:
            per_page = self.settings.per_page

        url = f"{self._repo_url()}/pulls?state={state}&per_page={per_page}"
        data = self._fetch(url)
        if not isinstance(data, list):
            raise MetadataError(f"Unexpected response from {url}: expected a list of PRs")

        pulls = []
        for pr in data:
            if not isinstance(pr, dict) or "number" not in pr:
                raise MetadataError(f"Unexpected PR entry in response from {url}")
            try:
                number = int(pr["number"])
            except (TypeError, ValueError) as exc:
                raise MetadataError(f"Bad PR number {pr['number']!r} in response from {url}") from exc
            pulls.append(PullSummary(
                number=number,
                title=pr.get("title") or "",
                head_repo_full_name=_dig(pr, "head", "repo", "full_name"),
                head_ref=_dig(pr, "head", "ref"),
            ))
        return PullList(pulls, has_next=getattr(data, "has_next", False))

    def fetch_open_pulls(self, per_page: Optional[int] = None) -> PullList:
        return self.fetch_pulls("open", per_page=per_page)
