"""Centralized path management and logging for git-pr.

Everything git-pr writes lives under ~/.git-pr/ (or $GIT_PR_HOME):
- config.yaml      - Optional user settings (see git_pr.config)
- debug/git-pr.log - Rotating command log
- debug-enabled    - If present, log at DEBUG level
"""

import logging
import os
import shlex
from pathlib import Path

LOGGER_NAME = "git_pr"

_TRUE_VALUES = {"1", "true", "yes", "on"}


def git_pr_home() -> Path:
    """Return the git-pr home directory (~/.git-pr/ unless GIT_PR_HOME is set)."""
    override = os.environ.get("GIT_PR_HOME")
    d = Path(override) if override else Path.home() / ".git-pr"
    d.mkdir(parents=True, exist_ok=True)
    return d


def config_file() -> Path:
    """Return the path of the optional YAML config file."""
    return git_pr_home() / "config.yaml"


def debug_dir() -> Path:
    """Return the debug/logs directory (~/.git-pr/debug/)."""
    d = git_pr_home() / "debug"
    d.mkdir(parents=True, exist_ok=True)
    return d


def command_log_file() -> Path:
    """Get the path to the command log file.

    All git-pr runs log their git invocations and API fetches here.
    """
    return debug_dir() / "git-pr.log"


def debug_enabled() -> bool:
    """Check if debug logging is enabled.

    Enabled by GIT_PR_DEBUG set to a true value, or by a
    ~/.git-pr/debug-enabled marker file (just needs to exist).
    """
    if os.environ.get("GIT_PR_DEBUG", "").strip().lower() in _TRUE_VALUES:
        return True
    return (git_pr_home() / "debug-enabled").exists()


def configure_logger(name: str = LOGGER_NAME, max_bytes: int = 10_000_000) -> logging.Logger:
    """Configure a logger that always writes to file with rotation.

    Args:
        name: Logger name. Module loggers are children of "git_pr" and
              reach this handler through propagation.
        max_bytes: Maximum log file size before rotation (default 10MB)

    Returns:
        Configured logger instance
    """
    from logging.handlers import RotatingFileHandler

    logger = logging.getLogger(name)

    # Only our own file handler counts; other tools may attach theirs
    if any(isinstance(h, RotatingFileHandler) for h in logger.handlers):
        return logger

    handler = RotatingFileHandler(
        command_log_file(),
        maxBytes=max_bytes,
        backupCount=1,  # Keep one backup file
    )
    handler.setFormatter(logging.Formatter(
        "%(asctime)s %(levelname)s %(message)s", datefmt="%H:%M:%S"
    ))
    logger.addHandler(handler)
    logger.propagate = False

    if debug_enabled():
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

    return logger


def log_shell_command(cmd: list[str] | str, prefix: str = "shell", returncode: int | None = None) -> None:
    """Log a shell command to the command log.

    Args:
        cmd: Command list or string to log
        prefix: Prefix for the log entry (e.g., "git")
        returncode: If provided, logs as completion with return code
    """
    log = logging.getLogger(f"{LOGGER_NAME}.{prefix}")
    cmd_str = shlex.join(cmd) if isinstance(cmd, list) else cmd

    if returncode is None:
        log.info("%s: %s", prefix, cmd_str)
    elif returncode == 0:
        log.info("%s done: %s", prefix, cmd_str)
    else:
        log.warning("%s failed (rc=%d): %s", prefix, returncode, cmd_str)
