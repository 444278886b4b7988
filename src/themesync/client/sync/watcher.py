"""File system watcher feeding raw events into a queue.

This module provides:
- FileWatcher: Watches a directory recursively using watchdog
- RawEventHandler: Translates watchdog events into RawEvent objects

Coalescing happens downstream in the aggregator; this layer only
filters and translates.
"""

from __future__ import annotations

import logging
import os
import queue
from collections.abc import Iterator
from pathlib import Path
from typing import TYPE_CHECKING

from watchdog.events import (
    DirCreatedEvent,
    DirDeletedEvent,
    DirMovedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from themesync.client.sync.ignore import IgnorePatterns
from themesync.client.sync.types import RawEvent, RawEventKind, WatchError

if TYPE_CHECKING:
    from watchdog.observers.api import BaseObserver

logger = logging.getLogger(__name__)


def _decode(path: str | bytes) -> str:
    if isinstance(path, bytes):
        return path.decode("utf-8", errors="replace")
    return path


class RawEventHandler(FileSystemEventHandler):
    """Event handler that forwards file events to a queue.

    The handler remembers every file seen under the root. A directory
    that disappears (deleted, or moved out of the root) becomes one
    DELETED event per remembered file below it; inotify reports such a
    directory without its contents.
    """

    def __init__(
        self,
        base_path: Path,
        events: queue.Queue[RawEvent],
        ignore_patterns: IgnorePatterns | None = None,
    ) -> None:
        """Initialize the handler.

        Args:
            base_path: Watch root.
            events: Queue receiving RawEvent objects.
            ignore_patterns: Patterns for files to ignore.
        """
        super().__init__()
        self._base_path = base_path
        self._events = events
        self._ignore = ignore_patterns or IgnorePatterns()
        self._known: set[Path] = set()

    def seed(self) -> None:
        """Remember every file currently under the root."""
        self._known = set(self._walk(self._base_path))

    def _walk(self, directory: Path) -> Iterator[Path]:
        """Yield non-ignored files below directory."""
        for dirpath, dirnames, filenames in os.walk(directory):
            parent = Path(dirpath)
            dirnames[:] = [
                name
                for name in dirnames
                if not self._ignore.should_ignore(parent / name, self._base_path)
            ]
            for name in filenames:
                path = parent / name
                if not self._ignore.should_ignore(path, self._base_path):
                    yield path

    def _inside_root(self, path: Path) -> bool:
        return path == self._base_path or self._base_path in path.parents

    def _emit(self, path: Path, kind: RawEventKind) -> None:
        if self._ignore.should_ignore(path, self._base_path):
            return

        if not self._inside_root(path):
            logger.warning("Path %s is not relative to %s", path, self._base_path)
            return

        if kind is RawEventKind.DELETED:
            self._known.discard(path)
        else:
            self._known.add(path)

        self._events.put(RawEvent(path=path, kind=kind))
        logger.debug("Watcher saw %s %s", kind.value, path)

    def _directory_removed(self, directory: Path) -> None:
        for path in sorted(p for p in self._known if directory in p.parents):
            self._emit(path, RawEventKind.DELETED)

    def _directory_added(self, directory: Path) -> None:
        if not self._inside_root(directory):
            return
        for path in self._walk(directory):
            if path not in self._known:
                self._emit(path, RawEventKind.CREATED)

    def on_created(self, event: FileSystemEvent) -> None:
        """Handle created event."""
        path = Path(_decode(event.src_path))
        if isinstance(event, FileCreatedEvent):
            self._emit(path, RawEventKind.CREATED)
        elif isinstance(event, DirCreatedEvent):
            self._directory_added(path)

    def on_modified(self, event: FileSystemEvent) -> None:
        """Handle modified event."""
        if isinstance(event, FileModifiedEvent):
            self._emit(Path(_decode(event.src_path)), RawEventKind.MODIFIED)

    def on_deleted(self, event: FileSystemEvent) -> None:
        """Handle deleted event."""
        path = Path(_decode(event.src_path))
        if isinstance(event, FileDeletedEvent):
            self._emit(path, RawEventKind.DELETED)
        elif isinstance(event, DirDeletedEvent):
            self._directory_removed(path)

    def on_moved(self, event: FileSystemEvent) -> None:
        """Handle moved event as a delete of the source and a create of the target."""
        src_path = Path(_decode(event.src_path))
        dest_path = Path(_decode(event.dest_path))
        if isinstance(event, FileMovedEvent):
            self._emit(src_path, RawEventKind.DELETED)
            if self._inside_root(dest_path):
                self._emit(dest_path, RawEventKind.CREATED)
        elif isinstance(event, DirMovedEvent):
            self._directory_removed(src_path)
            self._directory_added(dest_path)


class FileWatcher:
    """Watches a directory tree and queues raw file events.

    A watcher runs at most once: after ``stop`` the underlying observer
    thread is gone and cannot be restarted.
    """

    def __init__(
        self,
        watch_path: Path,
        events: queue.Queue[RawEvent],
        ignore_patterns: list[str] | None = None,
    ) -> None:
        """Initialize the file watcher.

        Args:
            watch_path: Directory to watch.
            events: Queue receiving RawEvent objects.
            ignore_patterns: Additional patterns to ignore.

        Raises:
            ValueError: If watch_path is not a directory.
        """
        self._watch_path = Path(watch_path).resolve()
        if not self._watch_path.is_dir():
            raise ValueError(f"Watch path must be a directory: {watch_path}")

        self._events = events

        self._ignore = IgnorePatterns.for_root(self._watch_path, ignore_patterns or ())

        self._handler = RawEventHandler(
            base_path=self._watch_path,
            events=events,
            ignore_patterns=self._ignore,
        )

        self._observer: BaseObserver = Observer()
        self._running = False
        self._stopped = False

    @property
    def watch_path(self) -> Path:
        """Get the watched directory path."""
        return self._watch_path

    @property
    def events(self) -> queue.Queue[RawEvent]:
        """Get the raw event queue."""
        return self._events

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._running

    @property
    def is_alive(self) -> bool:
        """Check if the observer thread is still delivering events."""
        return self._running and self._observer.is_alive()

    def start(self) -> None:
        """Start watching for changes.

        Raises:
            WatchError: If the watch cannot be established or was stopped before.
        """
        if self._running:
            return
        if self._stopped:
            raise WatchError("A stopped watcher cannot be restarted")

        self._handler.seed()
        try:
            self._observer.schedule(self._handler, str(self._watch_path), recursive=True)
            self._observer.start()
        except OSError as e:
            raise WatchError(f"Could not watch {self._watch_path}: {e}") from e
        self._running = True
        logger.debug("Watching %s", self._watch_path)

    def stop(self) -> None:
        """Stop watching and release the OS watch handle."""
        if not self._running:
            return

        self._observer.stop()
        self._observer.join(timeout=5.0)
        self._running = False
        self._stopped = True
        logger.debug("Stopped watching %s", self._watch_path)

    def __enter__(self) -> FileWatcher:
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.stop()
