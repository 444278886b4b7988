"""Shared state and helpers for CLI commands."""

from __future__ import annotations

import sys
from dataclasses import dataclass

import click

from themesync.client.cli.config import ResolvedSettings
from themesync.core.config import ThemeAPIConfig


@dataclass
class CLIState:
    """Options given to the command group, passed to every command."""

    settings: ResolvedSettings
    verbose: bool = False


def require_api_config(state: CLIState) -> ThemeAPIConfig:
    """Build the API configuration or exit if no authorization is found."""
    authorization = state.settings.authorization
    if not authorization:
        click.echo("Could not find authorization.", err=True)
        sys.exit(1)
    return ThemeAPIConfig(api_url=state.settings.api_url, authorization=authorization)
