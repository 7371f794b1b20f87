"""Git invocation, origin discovery, and PR tracking remotes."""

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional

import click

from git_pr.config import DEFAULT_HOST
from git_pr.errors import DiscoveryError, ExecutionError
from git_pr.paths import log_shell_command

_log = logging.getLogger("git_pr.git")

# Output lines matching this mark a command as failed, whatever its exit status.
_FAILURE_RE = re.compile(r"fatal|error", re.IGNORECASE)

PR_REMOTE_RE = re.compile(r"^pr-(\d+)$")


# ---------------------------------------------------------------------------
# Command execution
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class CommandResult:
    """Exit status and combined stdout/stderr lines of one external command."""

    args: tuple[str, ...]
    exit_status: int
    lines: tuple[str, ...] = ()

    @property
    def matched_lines(self) -> list[str]:
        """Output lines containing 'fatal' or 'error' (any case)."""
        return [line for line in self.lines if _FAILURE_RE.search(line)]

    @property
    def failed(self) -> bool:
        return bool(self.matched_lines)

    @property
    def heuristic_only(self) -> bool:
        """True when output matched but the tool itself reported success.

        These are the aborts most likely to be false positives, e.g. a
        pulled file called error.txt showing up in the merge summary.
        """
        return self.failed and self.exit_status == 0


CommandRunner = Callable[[list[str], Optional[Path]], CommandResult]


def run_command(cmd: list[str], cwd: Optional[Path] = None) -> CommandResult:
    """Run cmd and capture stdout and stderr interleaved as a list of lines."""
    try:
        proc = subprocess.run(
            cmd,
            cwd=cwd,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            errors="replace",
        )
    except OSError as exc:
        raise ExecutionError(f"Could not run {cmd[0]}: {exc}") from exc
    return CommandResult(tuple(cmd), proc.returncode, tuple(proc.stdout.splitlines()))


class Git:
    """Runs git commands in one working tree.

    The runner and echo callables are injectable so callers can be tested
    without a git binary or a terminal.
    """

    def __init__(self, cwd: Optional[Path] = None, runner: CommandRunner = run_command,
                 echo: Callable[[str], None] = click.echo):
        self.cwd = cwd
        self._runner = runner
        self._echo = echo

    def run(self, *args: str, display: bool = True, check: bool = True) -> CommandResult:
        """Run a git command, optionally echo its output, abort on error output.

        With check=True, any output line containing 'fatal' or 'error'
        raises ExecutionError carrying the result.
        """
        cmd = ["git", *args]
        log_shell_command(cmd, prefix="git")
        result = self._runner(cmd, self.cwd)
        log_shell_command(cmd, prefix="git", returncode=result.exit_status)

        if display and result.lines:
            self._echo("\n".join(result.lines))

        if check and result.failed:
            for line in result.matched_lines:
                _log.warning("error output from %s: %s", " ".join(cmd), line)
            if result.heuristic_only:
                _log.warning("%s exited 0; aborting on output text only", " ".join(cmd))
            raise ExecutionError("Script aborted !", result)
        if result.exit_status != 0 and not result.failed:
            _log.warning("%s exited %d without error output", " ".join(cmd), result.exit_status)
        return result


# ---------------------------------------------------------------------------
# Repository discovery
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RepositoryRef:
    owner: str
    name: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.name}"


def parse_github_url(url: str, host: str = DEFAULT_HOST) -> RepositoryRef:
    """Extract owner and repo from a GitHub remote URL.

    Handles:
        https://github.com/owner/repo.git
        https://github.com/owner/repo
        git@github.com:owner/repo.git

    Exactly two non-empty path segments must follow the host.
    """
    pattern = re.compile(
        r"(?:^|[/@.])" + re.escape(host) + r"[/:]([^/:]+)/([^/]+)$",
        re.IGNORECASE,
    )
    match = pattern.search(url.strip().rstrip("/"))
    if not match:
        raise DiscoveryError(f"Could not find Github owner and repo in '{url.strip()}'")

    owner, repo = match.group(1), match.group(2)
    if repo.endswith(".git"):
        repo = repo[:-4]
    if not owner or not repo:
        raise DiscoveryError(f"Could not find Github owner and repo in '{url.strip()}'")
    return RepositoryRef(owner, repo)


def locate_repository(git: Git, host: str = DEFAULT_HOST) -> RepositoryRef:
    """Derive the (owner, repo) this workspace tracks from the origin remote."""
    result = git.run("remote", "get-url", "origin", display=False, check=False)
    if result.exit_status != 0 or result.failed or not result.lines:
        raise DiscoveryError("Could not find Github owner and repo (no 'origin' remote?)")
    repo = parse_github_url(result.lines[0], host=host)
    _log.info("origin is %s", repo.full_name)
    return repo


# ---------------------------------------------------------------------------
# PR tracking remotes
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class TrackingRemote:
    name: str
    url: str


def pr_remote_name(number: int) -> str:
    return f"pr-{number}"


def pr_number_from_remote(name: str) -> Optional[int]:
    """Return the PR number encoded in a 'pr-<digits>' remote name, else None."""
    match = PR_REMOTE_RE.match(name)
    return int(match.group(1)) if match else None


def list_remotes(git: Git) -> list[str]:
    """List the names of all configured remotes."""
    result = git.run("remote", display=False)
    return [line.strip() for line in result.lines if line.strip()]


def ensure_pr_remote(git: Git, number: int, url: str) -> TrackingRemote:
    """Point remote pr-<number> at url, adding it or updating it in place."""
    name = pr_remote_name(number)
    if name in list_remotes(git):
        # Fork may have moved since the last pull
        git.run("remote", "set-url", name, url)
        _log.info("updated remote %s -> %s", name, url)
    else:
        git.run("remote", "add", name, url)
        _log.info("added remote %s -> %s", name, url)
    return TrackingRemote(name, url)


def remove_remote(git: Git, name: str) -> None:
    git.run("remote", "remove", name)


# ---------------------------------------------------------------------------
# Branch and pull
# ---------------------------------------------------------------------------

def checkout_new_branch(git: Git, branch: str, base: str) -> None:
    """Create branch from base and switch to it. Fails if branch exists."""
    git.run("checkout", "-b", branch, base)


def pull_branch(git: Git, remote: str, branch: str, commit: bool = True) -> CommandResult:
    """Pull remote/branch into the current branch and set it as upstream."""
    args = ["pull"]
    if not commit:
        args.append("--no-commit")
    args.extend(["--set-upstream", remote, branch])
    return git.run(*args)
