"""Click CLI for git-pr.

Installed as the ``git-pr`` console script, so git picks it up as
``git pr``. Shared helpers (output, prompting, formatting) are in
``cli.helpers``.
"""

import logging
from pathlib import Path

import click

from git_pr import __version__
from git_pr.cleanup import cleanup_pr_remotes
from git_pr.config import Settings, load_settings
from git_pr.errors import GitPrError, MetadataError
from git_pr.gh_api import GitHubClient
from git_pr.git_ops import Git, locate_repository
from git_pr.paths import configure_logger
from git_pr.pull import PullOptions, parse_pr_number, pull_request, validate_options
from git_pr.cli.helpers import (
    CONTEXT_SETTINGS,
    display_msg_and_die,
    format_pull_summary,
    prompt_branch_name,
)

_log = logging.getLogger("git_pr.cli")


def _client_for_cwd(git: Git, settings: Settings) -> GitHubClient:
    repo = locate_repository(git, host=settings.host)
    return GitHubClient(repo, settings)


def _list_open_pulls(git: Git, settings: Settings) -> None:
    client = _client_for_cwd(git, settings)
    try:
        pulls = client.fetch_open_pulls()
    except MetadataError as exc:
        _log.warning("listing PRs failed: %s", exc)
        display_msg_and_die(f"Error: Could not fetch PR list from GitHub API\n{exc}", exit_code=0)
        return
    if not pulls:
        display_msg_and_die("No pull requests found", exit_code=0)
        return
    display_msg_and_die("\n".join(format_pull_summary(pr) for pr in pulls), exit_code=0)


def _cleanup_remotes(git: Git, settings: Settings) -> None:
    client = _client_for_cwd(git, settings)
    try:
        cleanup_pr_remotes(git, client)
    except MetadataError as exc:
        _log.warning("cleanup aborted: %s", exc)
        click.echo(f"Error: Could not fetch PR list from GitHub API\n{exc}")


@click.command(context_settings=CONTEXT_SETTINGS)
@click.argument("args", metavar="[PR_NUM]", nargs=-1)
@click.option("-l", "--list", "list_prs", is_flag=True,
              help="List all open pull requests of the current repo")
@click.option("-c", "--cleanup", is_flag=True,
              help="Remove remotes of PRs that are no longer open")
@click.option("-v", "--version", "show_version", is_flag=True,
              help="Display the version number")
@click.option("-n", "--nocommit", "--no-commit", "no_commit", is_flag=True,
              help="Pull the PR but don't commit the merge")
@click.option("-b", "--branch", default=None,
              help='Custom local branch name (defaults to "pr-PR_NUM")')
@click.option("-s", "--suggest", is_flag=True,
              help="Suggest a local branch name based on the PR title")
@click.pass_context
def cli(ctx, args: tuple[str, ...], list_prs: bool, cleanup: bool, show_version: bool,
        no_commit: bool, branch: str | None, suggest: bool):
    """Easily pull the content of pull request PR_NUM in a new branch.

    The PR is fetched from the GitHub repository the 'origin' remote points
    at, into a new local branch created from the PR's base branch. A remote
    named pr-PR_NUM is added for the PR's fork.

    \b
    Examples:
      git pr 1337
      git pr --nocommit 1337
      git pr -b "feature-fix" 1337
      git pr -s 1337
      git pr -l
      git pr -c
    """
    configure_logger()
    _log.info("git pr %s", " ".join(args))

    try:
        validate_options(branch, suggest)

        if show_version:
            display_msg_and_die(f"git_pr version {__version__}", exit_code=0)

        settings = load_settings()
        git = Git(cwd=Path.cwd())

        if cleanup:
            _cleanup_remotes(git, settings)
            return

        if list_prs:
            _list_open_pulls(git, settings)
            return

        number = parse_pr_number(args)
        if number is None:
            display_msg_and_die(ctx.get_help(), exit_code=0)

        client = _client_for_cwd(git, settings)
        options = PullOptions(number=number, commit=not no_commit,
                              branch=branch, suggest=suggest)
        pull_request(client.repo, options, client, git, ask=prompt_branch_name)
    except GitPrError as exc:
        _log.error("%s: %s", type(exc).__name__, exc)
        display_msg_and_die(str(exc))


def main():
    cli()
