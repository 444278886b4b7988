"""Reconciliation of local change sets against the remote store.

This module provides:
- Reconciler: Applies a ChangeSet as remote deletes and replacements

Per change set, every removed path is deleted first; only then are the
modified and added paths replaced. A replace is always delete-then-create.
Within each phase paths run concurrently on a bounded thread pool, and
outcomes come back in input order.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import TYPE_CHECKING

from themesync.client.store import APIError, DeleteStatus
from themesync.client.sync.paths import to_local_path, to_remote_path
from themesync.client.sync.types import ChangeSet, SyncOutcome
from themesync.core.log import log_messages, log_success
from themesync.core.types import OutcomeKind

if TYPE_CHECKING:
    from themesync.client.store import RemoteStore

logger = logging.getLogger(__name__)

DEFAULT_MAX_WORKERS = 4


class Reconciler:
    """Applies change sets for one watch root to a remote store.

    Usage:
        reconciler = Reconciler(store, root)
        outcomes = reconciler.apply(change_set)

    ``apply`` is serialized: a second call waits until the first has
    reported every outcome.
    """

    def __init__(
        self,
        store: RemoteStore,
        root: Path,
        max_workers: int = DEFAULT_MAX_WORKERS,
    ) -> None:
        """Initialize the reconciler.

        Args:
            store: Remote store to write to.
            root: Watch root; change set paths are relative to it.
            max_workers: Concurrent remote operations per phase.
        """
        self._store = store
        self._root = Path(root).resolve()
        self._max_workers = max(1, max_workers)
        self._lock = threading.Lock()

    def apply(self, change_set: ChangeSet) -> list[SyncOutcome]:
        """Apply one change set.

        Args:
            change_set: Coalesced local changes. Paths may be absolute
                (under root) or root-relative.

        Returns:
            One outcome per removed path, then one per distinct
            modified/added path, in input order.
        """
        with self._lock:
            removed = self._normalize(change_set.removed)
            upserts = list(dict.fromkeys(self._normalize(change_set.modified + change_set.added)))

            outcomes = self._run_phase(self._remove, removed)
            outcomes += self._run_phase(self._replace, upserts)
            return outcomes

    def _normalize(self, paths: list[str]) -> list[str]:
        return [to_remote_path(self._root, path) for path in paths]

    def _run_phase(
        self,
        operation: Callable[[str], SyncOutcome],
        paths: list[str],
    ) -> list[SyncOutcome]:
        """Run an operation for each path and wait for all of them.

        Each outcome is logged as soon as its path finishes.
        """
        if not paths:
            return []

        def isolated(path: str) -> SyncOutcome:
            try:
                outcome = operation(path)
            except Exception as e:
                logger.exception("Unexpected error while syncing %s", path)
                message = str(e) or type(e).__name__
                outcome = SyncOutcome(path, OutcomeKind.REMOTE_ERROR, (message,))
            _log_outcome(outcome)
            return outcome

        if self._max_workers == 1 or len(paths) == 1:
            outcomes = [isolated(path) for path in paths]
        else:
            with ThreadPoolExecutor(
                max_workers=min(self._max_workers, len(paths)),
                thread_name_prefix="themesync-reconcile",
            ) as executor:
                outcomes = list(executor.map(isolated, paths))

        return outcomes

    def _delete(self, path: str) -> SyncOutcome:
        """Delete a remote path, treating an absent file as success."""
        try:
            status = self._store.delete(path)
        except APIError as e:
            return SyncOutcome(path, OutcomeKind.REMOTE_ERROR, (str(e),))

        if status is DeleteStatus.NOT_FOUND:
            return SyncOutcome(path, OutcomeKind.NOT_FOUND_IGNORED)
        return SyncOutcome(path, OutcomeKind.DELETED)

    def _remove(self, path: str) -> SyncOutcome:
        logger.debug("Trying to delete %s", path)
        return self._delete(path)

    def _replace(self, path: str) -> SyncOutcome:
        """Delete the remote path, then create it from the local file."""
        logger.debug("Trying to add %s", path)

        deleted = self._delete(path)
        if not deleted.ok:
            return deleted

        try:
            content = to_local_path(self._root, path).read_bytes()
        except (OSError, ValueError) as e:
            return SyncOutcome(path, OutcomeKind.READ_FAILED, (str(e),))

        candidate = self._store.build(path, content)

        messages = self._store.validate(candidate)
        if messages:
            return SyncOutcome(path, OutcomeKind.VALIDATION_FAILED, tuple(messages))

        try:
            messages = self._store.save(candidate)
        except APIError as e:
            messages = [str(e)]
        if messages:
            return SyncOutcome(path, OutcomeKind.REMOTE_ERROR, tuple(messages))

        return SyncOutcome(path, OutcomeKind.CREATED)


def _log_outcome(outcome: SyncOutcome) -> None:
    """Log one outcome with every message attached to it."""
    kind = outcome.kind
    if kind is OutcomeKind.CREATED:
        log_success(logger, "Added %s", outcome.path)
    elif kind is OutcomeKind.DELETED:
        log_success(logger, "Deleted %s", outcome.path)
    elif kind is OutcomeKind.NOT_FOUND_IGNORED:
        logger.debug("Already absent remotely: %s", outcome.path)
    elif kind is OutcomeKind.READ_FAILED:
        logger.error("Could not read %s:", outcome.path)
        log_messages(logger, logging.ERROR, list(outcome.messages))
    else:
        logger.error("Could not sync %s:", outcome.path)
        log_messages(logger, logging.ERROR, list(outcome.messages))
