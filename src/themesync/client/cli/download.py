"""Download command for the themesync CLI.

Commands:
- download: Download the complete theme from the Theme API
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from themesync.client.api import APIError, AuthenticationError, ThemeAPIClient
from themesync.client.cli.common import CLIState, require_api_config
from themesync.client.sync import DownloadError, ThemeDownloader
from themesync.core.config import SyncConfig

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--path",
    type=click.Path(file_okay=False, path_type=Path),
    default=lambda: Path.cwd() / "theme",
    show_default="./theme",
    help="Directory to download the theme into.",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=SyncConfig.max_workers,
    show_default=True,
    help="Files downloaded concurrently.",
)
@click.pass_obj
def download(state: CLIState, path: Path, workers: int) -> None:
    """Download a complete theme from the Theme API.

    Existing files are overwritten. Local files that do not exist
    remotely are kept.
    """
    api_config = require_api_config(state)

    with ThemeAPIClient(api_config) as client:
        try:
            ThemeDownloader(client, max_workers=workers).download(path)
        except DownloadError as e:
            logger.error("Downloaded %d file(s), %d failed", e.downloaded, len(e.failures))
            sys.exit(1)
        except AuthenticationError:
            logger.error("Authorization was rejected by %s", api_config.api_url)
            sys.exit(1)
        except APIError as e:
            logger.error("Could not list theme files: %s", e)
            sys.exit(1)
