"""Shared types and dataclasses for sync operations.

This module provides:
- SyncError, DownloadError, WatchError: Exception classes
- RawEventKind, RawEvent: Filesystem notifications before coalescing
- ChangeSet: One coalesced batch of local changes
- SyncOutcome: Per-path result of reconciliation
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from themesync.core.types import OutcomeKind


class SyncError(Exception):
    """Base exception for sync errors."""


class DownloadError(SyncError):
    """One or more files could not be downloaded.

    Attributes:
        failures: Error message keyed by remote path.
        downloaded: Number of files written successfully.
    """

    def __init__(self, failures: dict[str, str], downloaded: int = 0) -> None:
        self.failures = dict(failures)
        self.downloaded = downloaded
        paths = ", ".join(sorted(self.failures))
        super().__init__(f"Failed to download {len(self.failures)} file(s): {paths}")


class WatchError(SyncError):
    """The filesystem watch could not be established or died."""


class RawEventKind(Enum):
    """Kind of raw filesystem notification."""

    CREATED = "created"
    MODIFIED = "modified"
    DELETED = "deleted"


@dataclass(frozen=True)
class RawEvent:
    """A single filesystem notification for a file under the watch root."""

    path: Path
    kind: RawEventKind
    timestamp: float = field(default_factory=time.monotonic)


@dataclass
class ChangeSet:
    """Coalesced local changes for one debounce window.

    Paths are relative to the watch root with forward slashes.
    """

    modified: list[str] = field(default_factory=list)
    added: list[str] = field(default_factory=list)
    removed: list[str] = field(default_factory=list)

    def __bool__(self) -> bool:
        return bool(self.modified or self.added or self.removed)

    def __len__(self) -> int:
        return len(self.modified) + len(self.added) + len(self.removed)


@dataclass(frozen=True)
class SyncOutcome:
    """Result of reconciling one path."""

    path: str
    kind: OutcomeKind
    messages: tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        """Whether the remote store ended up in the intended state."""
        return self.kind.ok

    def __str__(self) -> str:
        if self.messages:
            return f"{self.path}: {self.kind.value} ({'; '.join(self.messages)})"
        return f"{self.path}: {self.kind.value}"
