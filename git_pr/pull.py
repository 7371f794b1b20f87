"""Pull a PR into a new local branch.

The workflow is linear: fetch metadata, pick a branch name, point the
pr-<number> remote at the PR's fork, create the branch from the PR's base,
then pull the head branch into it. Any failure stops the sequence. Nothing
already done is rolled back; a stale pr-<number> remote left behind is
what ``git pr --cleanup`` is for.
"""

import logging
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from git_pr.branch_names import suggest_branch_name
from git_pr.errors import ConfigurationError
from git_pr.gh_api import GitHubClient, PullRequest
from git_pr.git_ops import (
    Git,
    RepositoryRef,
    TrackingRemote,
    checkout_new_branch,
    ensure_pr_remote,
    pr_remote_name,
    pull_branch,
)

_log = logging.getLogger("git_pr.pull")

# Receives the suggested name, returns the operator's answer ("" accepts it).
NameProvider = Callable[[str], str]


@dataclass(frozen=True)
class PullOptions:
    number: int
    commit: bool = True
    branch: Optional[str] = None
    suggest: bool = False


@dataclass(frozen=True)
class PullContext:
    """Everything the track/branch/pull steps need, fixed once resolved."""

    repo: RepositoryRef
    pull: PullRequest
    branch: str
    commit: bool = True

    @property
    def remote_name(self) -> str:
        return pr_remote_name(self.pull.number)


def validate_options(branch: Optional[str], suggest: bool) -> None:
    """Reject contradictory naming options before any git or network call."""
    if branch and suggest:
        raise ConfigurationError("Options --branch and --suggest are mutually exclusive.")


def parse_pr_number(args: Sequence[str]) -> Optional[int]:
    """Return the PR number if args is exactly one positive integer, else None."""
    if len(args) != 1:
        return None
    arg = args[0]
    if not arg.isascii() or not arg.isdigit():
        return None
    number = int(arg)
    return number if number > 0 else None


def default_branch_name(number: int) -> str:
    return f"pr-{number}"


def resolve_branch_name(pull: PullRequest, options: PullOptions,
                        ask: Optional[NameProvider] = None) -> str:
    """Pick the local branch name: explicit > confirmed suggestion > pr-<number>."""
    if options.branch and options.branch.strip():
        return options.branch.strip()
    if options.suggest:
        suggestion = suggest_branch_name(pull.title)
        answer = ask(suggestion).strip() if ask else ""
        return answer or suggestion
    return default_branch_name(pull.number)


def track_remote(ctx: PullContext, git: Git) -> TrackingRemote:
    return ensure_pr_remote(git, ctx.pull.number, ctx.pull.head_clone_url)


def create_branch(ctx: PullContext, git: Git) -> None:
    checkout_new_branch(git, ctx.branch, ctx.pull.base_branch)


def pull_changes(ctx: PullContext, git: Git) -> None:
    pull_branch(git, ctx.remote_name, ctx.pull.head_branch, commit=ctx.commit)


def pull_request(repo: RepositoryRef, options: PullOptions, client: GitHubClient,
                 git: Git, ask: Optional[NameProvider] = None) -> PullContext:
    """Fetch PR metadata and pull the PR into a new local branch.

    Raises whatever the failing step raised (ConfigurationError,
    MetadataError, ExecutionError); later steps are not attempted.
    """
    validate_options(options.branch, options.suggest)

    pull = client.fetch_pull(options.number)
    ctx = PullContext(
        repo=repo,
        pull=pull,
        branch=resolve_branch_name(pull, options, ask),
        commit=options.commit,
    )
    _log.info("pulling %s#%d (%s) into %s from base %s",
              repo.full_name, pull.number, pull.head_branch, ctx.branch, pull.base_branch)

    track_remote(ctx, git)
    create_branch(ctx, git)
    pull_changes(ctx, git)
    _log.info("pulled PR #%d into %s", pull.number, ctx.branch)
    return ctx
