"""Watch command for the themesync CLI.

Commands:
- watch: Push local file changes to the Theme API as they happen
"""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from themesync.client.api import ThemeAPIClient
from themesync.client.cli.common import CLIState, require_api_config
from themesync.client.sync import ChangeAggregator, Reconciler, WatchError
from themesync.core.config import SyncConfig

logger = logging.getLogger(__name__)


@click.command()
@click.option(
    "--path",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=lambda: Path.cwd(),
    show_default=".",
    help="Directory to watch.",
)
@click.option(
    "--debounce-ms",
    type=click.IntRange(min=1),
    default=SyncConfig.debounce_ms,
    show_default=True,
    help="Quiet period that closes a batch of changes.",
)
@click.option(
    "--workers",
    type=click.IntRange(min=1),
    default=SyncConfig.max_workers,
    show_default=True,
    help="Remote operations run concurrently within a batch.",
)
@click.pass_obj
def watch(state: CLIState, path: Path, debounce_ms: int, workers: int) -> None:
    """Watch a directory and push file changes to the Theme API.

    Runs until interrupted with Ctrl+C.
    """
    api_config = require_api_config(state)
    sync_config = SyncConfig(debounce_ms=debounce_ms, max_workers=workers)
    root = path.expanduser().resolve()

    with ThemeAPIClient(api_config, max_file_size=sync_config.max_file_size) as client:
        reconciler = Reconciler(client, root, max_workers=sync_config.max_workers)
        logger.info("Watching %s", root)

        try:
            with ChangeAggregator(root, sync_config) as aggregator:
                for change_set in aggregator:
                    outcomes = reconciler.apply(change_set)
                    failed = sum(1 for outcome in outcomes if not outcome.ok)
                    if failed:
                        logger.warning("%d of %d change(s) failed", failed, len(outcomes))
        except KeyboardInterrupt:
            logger.info("Stopped watching")
        except WatchError as e:
            logger.error("Watching %s failed: %s", root, e)
            sys.exit(1)
