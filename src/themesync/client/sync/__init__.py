"""Sync engine: bulk download and continuous watch-and-reconcile.

Architecture:
    FileWatcher → queue → ChangeAggregator → ChangeSet → Reconciler → RemoteStore
    ThemeDownloader → RemoteStore → local disk

Components:
- **FileWatcher**: watchdog observer translating OS events into RawEvents
- **ChangeAggregator**: Debounces raw events into one ChangeSet per window
- **Reconciler**: Applies a ChangeSet as remote deletes and replacements
- **ThemeDownloader**: Seeds a local tree from the remote store
"""

from themesync.client.sync.aggregator import (
    ChangeAggregator,
    build_change_set,
    coalesce,
)
from themesync.client.sync.download import ThemeDownloader
from themesync.client.sync.ignore import DEFAULT_IGNORE_PATTERNS, IgnorePatterns
from themesync.client.sync.paths import to_local_path, to_remote_path
from themesync.client.sync.reconciler import Reconciler
from themesync.client.sync.types import (
    ChangeSet,
    DownloadError,
    RawEvent,
    RawEventKind,
    SyncError,
    SyncOutcome,
    WatchError,
)
from themesync.client.sync.watcher import FileWatcher, RawEventHandler

__all__ = [
    # Aggregation
    "ChangeAggregator",
    "build_change_set",
    "coalesce",
    # Download
    "ThemeDownloader",
    # Ignore
    "DEFAULT_IGNORE_PATTERNS",
    "IgnorePatterns",
    # Paths
    "to_local_path",
    "to_remote_path",
    # Reconciliation
    "Reconciler",
    # Types
    "ChangeSet",
    "DownloadError",
    "RawEvent",
    "RawEventKind",
    "SyncError",
    "SyncOutcome",
    "WatchError",
    # Watcher
    "FileWatcher",
    "RawEventHandler",
]
