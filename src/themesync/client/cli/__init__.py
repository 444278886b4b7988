"""Command-line interface for themesync.

This module provides the main CLI entry point and assembles all commands.

Commands:
- download: Download the complete theme into a local directory
- watch: Push local changes to the Theme API continuously
"""

from __future__ import annotations

from pathlib import Path

import click

from themesync import __version__
from themesync.client.cli.common import CLIState
from themesync.client.cli.config import (
    ResolvedSettings,
    get_config_dir,
    get_config_file,
    load_yaml_config,
)
from themesync.client.cli.download import download
from themesync.client.cli.output import setup_logging
from themesync.client.cli.watch import watch


@click.group()
@click.version_option(version=__version__)
@click.option("--authorization", help="Theme API authorization.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    help="YAML file with an 'authorization' (and optional 'api_url') key.",
)
@click.option("--api-url", help="Base URL of the Theme API.")
@click.option("--verbose", "-v", is_flag=True, help="Show debug output.")
@click.pass_context
def cli(
    ctx: click.Context,
    authorization: str | None,
    config_path: Path | None,
    api_url: str | None,
    verbose: bool,
) -> None:
    """themesync - Sync a local theme directory with the Theme API."""
    setup_logging(verbose)
    ctx.obj = CLIState(
        settings=ResolvedSettings(
            authorization=authorization,
            config_path=config_path,
            api_url=api_url,
        ),
        verbose=verbose,
    )


cli.add_command(download)
cli.add_command(watch)


def main() -> None:
    """Entry point for the CLI."""
    cli()


__all__ = [
    "cli",
    "main",
    "get_config_dir",
    "get_config_file",
    "load_yaml_config",
]
