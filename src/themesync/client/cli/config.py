"""Configuration utilities for the themesync CLI.

Resolves the authorization and API URL once at startup. Precedence:
command-line option > explicit config file (--config) > environment
variable > implicit per-user config file.
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import click
import yaml

from themesync.core.config import DEFAULT_API_URL

AUTHORIZATION_ENV = "THEME_AUTHORIZATION"
API_URL_ENV = "THEME_API_URL"


def get_config_dir() -> Path:
    """Get the per-user configuration directory.

    Returns:
        Path to ~/.config/themesync.
    """
    return Path.home() / ".config" / "themesync"


def get_config_file() -> Path:
    """Get the path to the implicit config file."""
    return get_config_dir() / "config.yml"


def load_yaml_config(path: Path) -> dict[str, Any]:
    """Load a YAML config file.

    Args:
        path: File to read.

    Returns:
        Top-level mapping, empty for an empty file.

    Raises:
        click.UsageError: If the file is unreadable or not a mapping.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise click.UsageError(f"Could not read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise click.UsageError(f"Invalid YAML in config file {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise click.UsageError(f"Config file {path} must contain a mapping")
    return data


def load_implicit_config() -> dict[str, Any]:
    """Load the per-user config file if it exists."""
    config_file = get_config_file()
    if config_file.is_file():
        return load_yaml_config(config_file)
    return {}


def _first(*values: object) -> str | None:
    for value in values:
        if value:
            return str(value)
    return None


class ResolvedSettings:
    """Lazily resolved CLI settings.

    Each source is read at most once, and only when an earlier source
    did not provide the value.
    """

    def __init__(
        self,
        authorization: str | None = None,
        config_path: Path | None = None,
        api_url: str | None = None,
        environ: Mapping[str, str] | None = None,
    ) -> None:
        self._authorization = authorization
        self._config_path = config_path
        self._api_url = api_url
        self._environ = os.environ if environ is None else environ
        self._explicit: dict[str, Any] | None = None
        self._implicit: dict[str, Any] | None = None

    @property
    def explicit_config(self) -> dict[str, Any]:
        """Config file given with --config, empty if none."""
        if self._explicit is None:
            self._explicit = load_yaml_config(self._config_path) if self._config_path else {}
        return self._explicit

    @property
    def implicit_config(self) -> dict[str, Any]:
        """Per-user config file, empty if absent."""
        if self._implicit is None:
            self._implicit = load_implicit_config()
        return self._implicit

    def _resolve(self, option: str | None, key: str, env: str) -> str | None:
        return (
            _first(option)
            or _first(self.explicit_config.get(key))
            or _first(self._environ.get(env))
            or _first(self.implicit_config.get(key))
        )

    @property
    def authorization(self) -> str | None:
        """Resolved authorization, None if no source provides one."""
        return self._resolve(self._authorization, "authorization", AUTHORIZATION_ENV)

    @property
    def api_url(self) -> str:
        """Resolved API URL, falling back to the default."""
        return self._resolve(self._api_url, "api_url", API_URL_ENV) or DEFAULT_API_URL
