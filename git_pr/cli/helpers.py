"""Shared helpers for the git-pr CLI: output, prompting and list formatting."""

import click

from git_pr.gh_api import PullSummary

# Shared Click settings: make -h and --help both work
CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])


def display_msg_and_die(msg: str, exit_code: int = 1) -> None:
    """Print a trimmed message followed by a blank line, then exit."""
    err = exit_code != 0
    click.echo(msg.strip(), err=err)
    click.echo(err=err)
    raise SystemExit(exit_code)


def prompt_branch_name(suggestion: str) -> str:
    """Show the suggested branch name and read the operator's answer.

    Returns "" when the operator just presses enter.
    """
    click.echo(f"Suggested branch name: {suggestion}")
    return click.prompt(
        "Press enter to use this name, or type a new one",
        default="",
        show_default=False,
    )


def format_pull_summary(pr: PullSummary) -> str:
    """Format one PR as '<number> - <title> (<fork>:<branch>)'."""
    fork = pr.head_repo_full_name or "deleted fork"
    return f"{pr.number} - {pr.title} ({fork}:{pr.head_ref or '?'})"
