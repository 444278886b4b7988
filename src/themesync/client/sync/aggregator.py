"""Coalescing of raw filesystem events into change sets.

This module provides:
- build_change_set: Classify one batch of raw events (last state wins)
- coalesce: Split a timed event sequence into batches, pure function
- ChangeAggregator: Live watch yielding one ChangeSet per debounce window

Batching rule: an event joins the open batch when it arrives within the
debounce window of the previous event and within ``max_wait_s`` of the
first event of the batch. Otherwise the batch closes and a new one opens.
"""

from __future__ import annotations

import logging
import queue
import threading
import time
from collections.abc import Iterable, Iterator
from pathlib import Path

from themesync.client.sync.paths import to_remote_path
from themesync.client.sync.types import (
    ChangeSet,
    RawEvent,
    RawEventKind,
    WatchError,
)
from themesync.client.sync.watcher import FileWatcher
from themesync.core.config import SyncConfig

logger = logging.getLogger(__name__)

# How often the live loop checks for a stop request while idle
POLL_INTERVAL_S = 0.2


def build_change_set(root: Path, events: Iterable[RawEvent]) -> ChangeSet:
    """Classify a batch of raw events into a ChangeSet.

    For each path only the sequence of its own events matters:
    - last event DELETED: removed
    - created or deleted at any point before a later event: added
    - otherwise: modified

    Paths are reported relative to root, in first-seen order.
    """
    history: dict[str, list[RawEventKind]] = {}
    for event in events:
        try:
            path = to_remote_path(root, event.path)
        except ValueError:
            logger.warning("Ignoring event outside %s: %s", root, event.path)
            continue
        history.setdefault(path, []).append(event.kind)

    change_set = ChangeSet()
    for path, kinds in history.items():
        if kinds[-1] is RawEventKind.DELETED:
            change_set.removed.append(path)
        elif RawEventKind.CREATED in kinds or RawEventKind.DELETED in kinds:
            change_set.added.append(path)
        else:
            change_set.modified.append(path)
    return change_set


def coalesce(
    root: Path,
    events: Iterable[RawEvent],
    window_s: float,
    max_wait_s: float | None = None,
) -> list[ChangeSet]:
    """Group timed raw events into change sets.

    Args:
        root: Watch root the events belong to.
        events: Raw events ordered by timestamp.
        window_s: Debounce window in seconds.
        max_wait_s: Longest a batch may stay open, None for no limit.

    Returns:
        One ChangeSet per batch, in order.
    """
    batches: list[list[RawEvent]] = []
    batch: list[RawEvent] = []

    for event in events:
        if batch:
            quiet_for = event.timestamp - batch[-1].timestamp
            open_for = event.timestamp - batch[0].timestamp
            if quiet_for >= window_s or (max_wait_s is not None and open_for >= max_wait_s):
                batches.append(batch)
                batch = []
        batch.append(event)

    if batch:
        batches.append(batch)

    return [build_change_set(root, b) for b in batches]


class ChangeAggregator:
    """Watches a root directory and yields coalesced change sets.

    Usage:
        with ChangeAggregator(root, config) as aggregator:
            for change_set in aggregator:
                reconciler.apply(change_set)

    Iteration blocks until a batch closes and ends after ``stop``. The
    caller finishes handling one change set before the next is built,
    which keeps remote operations in local event order.
    """

    def __init__(
        self,
        root: Path,
        config: SyncConfig | None = None,
        ignore_patterns: list[str] | None = None,
    ) -> None:
        """Initialize the aggregator.

        Args:
            root: Directory to watch.
            config: Debounce settings.
            ignore_patterns: Additional patterns to ignore.
        """
        self._config = config or SyncConfig()
        self._events: queue.Queue[RawEvent] = queue.Queue()
        self._watcher = FileWatcher(root, self._events, ignore_patterns)
        self._stop_requested = threading.Event()

    @property
    def root(self) -> Path:
        """Get the watched root."""
        return self._watcher.watch_path

    @property
    def is_running(self) -> bool:
        """Check if the underlying watcher is running."""
        return self._watcher.is_running

    def start(self) -> None:
        """Start the underlying watch.

        Raises:
            WatchError: If the watch cannot be established.
        """
        if self._stop_requested.is_set():
            raise WatchError("A stopped aggregator cannot be restarted")
        self._watcher.start()

    def stop(self) -> None:
        """Stop yielding change sets and release the watch."""
        self._stop_requested.set()
        self._watcher.stop()

    def __enter__(self) -> ChangeAggregator:
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.stop()

    def __iter__(self) -> Iterator[ChangeSet]:
        while True:
            batch = self._collect_batch()
            if batch is None:
                return
            change_set = build_change_set(self.root, batch)
            if change_set:
                logger.debug(
                    "Change set: %d modified, %d added, %d removed",
                    len(change_set.modified),
                    len(change_set.added),
                    len(change_set.removed),
                )
                yield change_set

    def _next_event(self, timeout: float) -> RawEvent | None:
        try:
            return self._events.get(timeout=timeout)
        except queue.Empty:
            return None

    def _check_alive(self) -> None:
        if not self._stop_requested.is_set() and not self._watcher.is_alive:
            raise WatchError(f"Watch on {self.root} terminated unexpectedly")

    def _collect_batch(self) -> list[RawEvent] | None:
        """Block until a batch closes; None once stop was requested."""
        first: RawEvent | None = None
        while first is None:
            if self._stop_requested.is_set():
                return None
            self._check_alive()
            first = self._next_event(POLL_INTERVAL_S)

        batch = [first]
        opened_at = time.monotonic()
        window_s = self._config.debounce_s

        while not self._stop_requested.is_set():
            remaining = self._config.max_wait_s - (time.monotonic() - opened_at)
            if remaining <= 0:
                break
            event = self._next_event(min(window_s, remaining))
            if event is None:
                break
            batch.append(event)

        return batch
