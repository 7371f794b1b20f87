"""Tests for cleanup — reconciling pr-<number> remotes with open PRs."""

import pytest

from git_pr.cleanup import cleanup_pr_remotes
from git_pr.config import Settings
from git_pr.errors import MetadataError
from git_pr.gh_api import GitHubClient, JsonList
from git_pr.git_ops import Git, RepositoryRef

OPEN_URL = "https://api.github.com/repos/owner/repo/pulls?state=open&per_page=100"


@pytest.fixture
def three_remotes(make_repo):
    return make_repo(remotes={
        "pr-1": "https://github.com/a/repo.git",
        "pr-2": "https://github.com/b/repo.git",
        "pr-99": "https://github.com/c/repo.git",
        "upstream": "https://github.com/up/repo.git",
    })


class TestCleanupPrRemotes:
    def test_removes_only_closed(self, three_remotes, client, fake_api, payloads):
        _, list_entry, _ = payloads
        fake_api.responses[OPEN_URL] = [list_entry(1), list_entry(99)]
        out = []
        report = cleanup_pr_remotes(Git(runner=three_remotes, echo=out.append), client, echo=out.append)

        assert report.kept == ["pr-1", "pr-99"]
        assert report.removed == ["pr-2"]
        assert report.removed_count == 1
        assert set(three_remotes.remotes) == {"origin", "pr-1", "pr-99", "upstream"}
        assert three_remotes.commands("remote", "remove") == [["remote", "remove", "pr-2"]]
        assert "Keeping remote 'pr-1' (PR #1 is still open)" in out
        assert "Removing remote 'pr-2' (PR #2 is not open)" in out
        assert out[-1] == "\n1 remote(s) removed."

    def test_no_pr_remotes_is_noop(self, fake_repo, client, fake_api):
        out = []
        report = cleanup_pr_remotes(Git(runner=fake_repo, echo=out.append), client, echo=out.append)
        assert report.kept == [] and report.removed == []
        assert out == ["No PR remotes found to clean up."]
        assert fake_api.urls == []
        assert fake_repo.commands("remote", "remove") == []

    def test_lookalike_remotes_ignored(self, make_repo, client, fake_api):
        repo = make_repo(remotes={"pr-": "u", "pr-x1": "u", "my-pr-3": "u"})
        report = cleanup_pr_remotes(Git(runner=repo, echo=lambda s: None), client, echo=lambda s: None)
        assert report.removed == []
        assert fake_api.urls == []

    def test_zero_open_prs_removes_all(self, three_remotes, client, fake_api):
        fake_api.responses[OPEN_URL] = []
        report = cleanup_pr_remotes(Git(runner=three_remotes, echo=lambda s: None), client,
                                    echo=lambda s: None)
        assert report.removed == ["pr-1", "pr-2", "pr-99"]
        assert "upstream" in three_remotes.remotes

    def test_fetch_failure_removes_nothing(self, three_remotes, client):
        with pytest.raises(MetadataError):
            cleanup_pr_remotes(Git(runner=three_remotes, echo=lambda s: None), client,
                               echo=lambda s: None)
        assert three_remotes.commands("remote", "remove") == []

    def test_next_page_treated_as_truncated(self, three_remotes, fake_api, payloads):
        _, list_entry, _ = payloads
        client = GitHubClient(RepositoryRef("owner", "repo"), Settings(per_page=2), fetch_json=fake_api)
        fake_api.responses["https://api.github.com/repos/owner/repo/pulls?state=open&per_page=2"] = JsonList(
            [list_entry(1), list_entry(5)], has_next=True)
        with pytest.raises(MetadataError, match="truncated"):
            cleanup_pr_remotes(Git(runner=three_remotes, echo=lambda s: None), client,
                               echo=lambda s: None)
        assert three_remotes.commands("remote", "remove") == []

    def test_exactly_full_last_page_still_cleans(self, three_remotes, fake_api, payloads):
        _, list_entry, _ = payloads
        client = GitHubClient(RepositoryRef("owner", "repo"), Settings(per_page=2), fetch_json=fake_api)
        fake_api.responses["https://api.github.com/repos/owner/repo/pulls?state=open&per_page=2"] = JsonList(
            [list_entry(1), list_entry(99)], has_next=False)
        report = cleanup_pr_remotes(Git(runner=three_remotes, echo=lambda s: None), client,
                                    echo=lambda s: None)
        assert report.kept == ["pr-1", "pr-99"]
        assert report.removed == ["pr-2"]

    def test_single_api_call(self, three_remotes, client, fake_api, payloads):
        _, list_entry, _ = payloads
        fake_api.responses[OPEN_URL] = [list_entry(1)]
        cleanup_pr_remotes(Git(runner=three_remotes, echo=lambda s: None), client, echo=lambda s: None)
        assert fake_api.urls == [OPEN_URL]
