"""YAML settings for git-pr (~/.git-pr/config.yaml).

Every key is optional; a missing file means defaults. Example::

    api_base: https://github.example.com/api/v3
    host: github.example.com
    per_page: 50
"""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import yaml

from git_pr import __version__
from git_pr.errors import ConfigurationError

_log = logging.getLogger("git_pr.config")

DEFAULT_API_BASE = "https://api.github.com"
DEFAULT_HOST = "github.com"
DEFAULT_PER_PAGE = 100
MAX_PER_PAGE = 100


@dataclass(frozen=True)
class Settings:
    api_base: str = DEFAULT_API_BASE
    host: str = DEFAULT_HOST
    per_page: int = DEFAULT_PER_PAGE
    user_agent: str = f"git_pr {__version__}"


def _validate(key: str, value):
    if key in ("api_base", "host", "user_agent"):
        if not isinstance(value, str) or not value.strip():
            raise ConfigurationError(f"Config key '{key}' must be a non-empty string")
        value = value.strip()
        return value.rstrip("/") if key == "api_base" else value
    if key == "per_page":
        # bool is an int subclass; reject it explicitly
        if isinstance(value, bool) or not isinstance(value, int):
            raise ConfigurationError("Config key 'per_page' must be an integer")
        if not 1 <= value <= MAX_PER_PAGE:
            raise ConfigurationError(
                f"Config key 'per_page' must be between 1 and {MAX_PER_PAGE}, got {value}"
            )
        return value
    return value


def parse_settings(data: Optional[dict]) -> Settings:
    """Build Settings from a loaded YAML mapping, validating each known key."""
    if data is None:
        return Settings()
    if not isinstance(data, dict):
        raise ConfigurationError("Config file must contain a mapping of settings")

    known = {"api_base", "host", "per_page", "user_agent"}
    values = {}
    for key, value in data.items():
        if key not in known:
            _log.warning("ignoring unknown config key %r", key)
            continue
        values[key] = _validate(key, value)
    return replace(Settings(), **values)


def load_settings(path: Optional[Path] = None) -> Settings:
    """Load settings from path (default ~/.git-pr/config.yaml)."""
    if path is None:
        from git_pr.paths import config_file
        path = config_file()
    if not path.exists():
        return Settings()
    try:
        with open(path) as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as exc:
        raise ConfigurationError(f"Could not parse {path}: {exc}") from exc
    except OSError as exc:
        raise ConfigurationError(f"Could not read {path}: {exc}") from exc
    _log.debug("loaded settings from %s", path)
    return parse_settings(data)
