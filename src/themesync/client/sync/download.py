"""Bulk download of the remote tree into a local directory.

This module provides:
- ThemeDownloader: Lists every remote file and writes it under a root

Each file costs a listing entry plus a content fetch. Files are written
to a temporary sibling first and then moved over the target, so an
interrupted download never leaves a half-written file behind. Local
files absent remotely are left alone.
"""

from __future__ import annotations

import contextlib
import logging
import os
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import TYPE_CHECKING

from themesync.client.sync.paths import to_local_path
from themesync.client.sync.types import DownloadError
from themesync.core.log import log_success

if TYPE_CHECKING:
    from themesync.client.store import RemoteFile, RemoteStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


class ThemeDownloader:
    """Downloads the complete remote tree.

    Usage:
        downloader = ThemeDownloader(store)
        count = downloader.download(Path("theme"))
    """

    def __init__(self, store: RemoteStore, max_workers: int = DEFAULT_MAX_WORKERS) -> None:
        """Initialize the downloader.

        Args:
            store: Remote store to read from.
            max_workers: Concurrent fetch/write operations.
        """
        self._store = store
        self._max_workers = max(1, max_workers)

    def download(self, root: Path) -> int:
        """Download every remote file into root.

        Args:
            root: Destination directory, created if missing.

        Returns:
            Number of files written.

        Raises:
            APIError: If the remote listing fails.
            DownloadError: If any single file failed; the others are
                still written.
        """
        root = Path(root).expanduser().resolve()
        logger.info("Downloading theme to %s", root)

        files = self._store.list_files(recursive=True)
        root.mkdir(parents=True, exist_ok=True)

        downloaded = 0
        failures: dict[str, str] = {}

        with ThreadPoolExecutor(
            max_workers=self._max_workers,
            thread_name_prefix="themesync-download",
        ) as executor:
            futures = {
                executor.submit(self._download_file, root, remote_file): remote_file.path
                for remote_file in files
            }
            for future in as_completed(futures):
                path = futures[future]
                try:
                    future.result()
                except Exception as e:
                    failures[path] = str(e) or type(e).__name__
                    logger.error("Could not download %s: %s", path, failures[path])
                else:
                    downloaded += 1

        if failures:
            raise DownloadError(failures, downloaded=downloaded)

        log_success(logger, "Finished downloading theme (%d files)", downloaded)
        return downloaded

    def _download_file(self, root: Path, remote_file: RemoteFile) -> Path:
        """Fetch one file and write it to its place under root."""
        logger.debug("Downloading %s", remote_file.path)

        local_path = to_local_path(root, remote_file.path)
        content = self._store.fetch_content(remote_file)

        local_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = local_path.with_name(f".{local_path.name}.themesync-tmp")
        try:
            tmp_path.write_bytes(content)
            os.replace(tmp_path, local_path)
        except OSError:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
            raise

        return local_path
