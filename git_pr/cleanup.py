"""Remove pr-<number> remotes whose PRs are no longer open."""

import logging
from dataclasses import dataclass, field
from typing import Callable

import click

from git_pr.errors import MetadataError
from git_pr.gh_api import GitHubClient
from git_pr.git_ops import Git, list_remotes, pr_number_from_remote, remove_remote

_log = logging.getLogger("git_pr.cleanup")


@dataclass
class CleanupReport:
    kept: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    @property
    def removed_count(self) -> int:
        return len(self.removed)


def cleanup_pr_remotes(git: Git, client: GitHubClient,
                       echo: Callable[[str], None] = click.echo) -> CleanupReport:
    """Diff local pr-<number> remotes against the open PR set.

    Remotes of open PRs are kept; every other pr-<number> remote (closed,
    merged or unknown PR) is removed. With no pr-<number> remotes, no API
    call is made.

    Raises:
        MetadataError: the open PR list could not be fetched, or is
            truncated. Nothing is removed in that case.
    """
    report = CleanupReport()
    candidates = []
    for name in list_remotes(git):
        number = pr_number_from_remote(name)
        if number is not None:
            candidates.append((name, number))
    if not candidates:
        echo("No PR remotes found to clean up.")
        return report

    per_page = client.settings.per_page
    open_pulls = client.fetch_open_pulls(per_page=per_page)
    if open_pulls.has_next:
        raise MetadataError(
            f"More than {per_page} open PRs, the list is truncated; "
            "refusing to remove remotes"
        )
    open_numbers = {pr.number for pr in open_pulls}
    _log.info("%d open PRs, %d PR remotes", len(open_numbers), len(candidates))

    for name, number in candidates:
        if number in open_numbers:
            echo(f"Keeping remote '{name}' (PR #{number} is still open)")
            report.kept.append(name)
        else:
            echo(f"Removing remote '{name}' (PR #{number} is not open)")
            remove_remote(git, name)
            report.removed.append(name)

    echo(f"\n{report.removed_count} remote(s) removed.")
    return report
