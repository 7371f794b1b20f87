"""Shared fixtures for git_pr tests: fake git working tree and fake GitHub API."""

import logging
from logging.handlers import RotatingFileHandler

import pytest

from git_pr.config import Settings
from git_pr.errors import MetadataError
from git_pr.paths import LOGGER_NAME
from git_pr.gh_api import GitHubClient
from git_pr.git_ops import CommandResult, Git, RepositoryRef

API = "https://api.github.com/repos/owner/repo"


class FakeGitRepo:
    """Command runner that simulates the remotes and branches of one clone.

    Replies with git's own wording, so the 'fatal'/'error' output check
    behaves as it would against a real git.
    """

    def __init__(self, origin="https://github.com/owner/repo.git", remotes=None,
                 branches=("main",), pull_output=("Already up to date.",)):
        self.remotes = {"origin": origin} if origin else {}
        self.remotes.update(remotes or {})
        self.branches = set(branches)
        self.current = "main"
        self.pull_output = list(pull_output)
        self.overrides = {}
        self.calls = []

    def __call__(self, cmd, cwd=None):
        self.calls.append(list(cmd))
        args = tuple(cmd[1:])
        for prefix, (status, lines) in self.overrides.items():
            if args[:len(prefix)] == prefix:
                return CommandResult(tuple(cmd), status, tuple(lines))
        status, lines = self._handle(args)
        return CommandResult(tuple(cmd), status, tuple(lines))

    def _handle(self, args):
        if args == ("remote",):
            return 0, list(self.remotes)
        if args[:2] == ("remote", "get-url"):
            name = args[2]
            if name not in self.remotes:
                return 2, [f"error: No such remote '{name}'"]
            return 0, [self.remotes[name]]
        if args[:2] == ("remote", "add"):
            name, url = args[2], args[3]
            if name in self.remotes:
                return 3, [f"error: remote {name} already exists."]
            self.remotes[name] = url
            return 0, []
        if args[:2] == ("remote", "set-url"):
            name, url = args[2], args[3]
            if name not in self.remotes:
                return 2, [f"error: No such remote '{name}'"]
            self.remotes[name] = url
            return 0, []
        if args[:2] == ("remote", "remove"):
            name = args[2]
            if name not in self.remotes:
                return 2, [f"error: No such remote: '{name}'"]
            del self.remotes[name]
            return 0, []
        if args[:2] == ("checkout", "-b"):
            branch, base = args[2], args[3]
            if branch in self.branches:
                return 128, [f"fatal: a branch named '{branch}' already exists"]
            if base not in self.branches:
                return 128, [f"fatal: '{base}' is not a commit and a branch '{branch}' cannot be created from it"]
            self.branches.add(branch)
            self.current = branch
            return 0, [f"Switched to a new branch '{branch}'"]
        if args[:1] == ("pull",):
            return 0, self.pull_output
        return 1, [f"fatal: unsupported fake command: {' '.join(args)}"]

    def commands(self, *prefix):
        """Recorded git argument lists starting with prefix."""
        return [c[1:] for c in self.calls if tuple(c[1:1 + len(prefix)]) == prefix]


class FakeApi:
    """JSON fetcher serving canned payloads by URL and recording requests."""

    def __init__(self, responses=None):
        self.responses = dict(responses or {})
        self.urls = []

    def __call__(self, url):
        self.urls.append(url)
        if url not in self.responses:
            raise MetadataError(f"GitHub API returned HTTP 404 for {url}")
        payload = self.responses[url]
        if isinstance(payload, Exception):
            raise payload
        return payload


def pull_payload(number=42, title="Fix the bug in the login flow", base="main",
                 clone_url="https://github.com/someone/repo.git", head_ref="fix-login"):
    """Single-PR API payload with only the fields git-pr reads."""
    return {
        "number": number,
        "title": title,
        "base": {"ref": base},
        "head": {"ref": head_ref, "repo": {"clone_url": clone_url}},
    }


def list_entry(number, title="A PR", full_name="someone/repo", ref="feature"):
    return {
        "number": number,
        "title": title,
        "head": {"ref": ref, "repo": {"full_name": full_name}},
    }


@pytest.fixture(autouse=True)
def git_pr_home(tmp_path, monkeypatch):
    """Keep config and logs out of the real home directory."""
    home = tmp_path / "git-pr-home"
    monkeypatch.setenv("GIT_PR_HOME", str(home))
    monkeypatch.delenv("GIT_PR_DEBUG", raising=False)
    yield home
    # configure_logger() caches its handler; drop it so the next test's
    # home gets its own log file.
    logger = logging.getLogger(LOGGER_NAME)
    for handler in list(logger.handlers):
        if isinstance(handler, RotatingFileHandler):
            logger.removeHandler(handler)
            handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def fake_repo():
    return FakeGitRepo()


@pytest.fixture
def make_repo():
    return FakeGitRepo


@pytest.fixture
def echoed():
    """List collecting everything a Git wrapper echoes."""
    return []


@pytest.fixture
def git(fake_repo, echoed):
    return Git(runner=fake_repo, echo=echoed.append)


@pytest.fixture
def fake_api():
    return FakeApi()


@pytest.fixture
def client(fake_api):
    return GitHubClient(RepositoryRef("owner", "repo"), Settings(), fetch_json=fake_api)


@pytest.fixture
def payloads():
    """Builders for API payloads: (pull_payload, list_entry, API base URL)."""
    return pull_payload, list_entry, API
