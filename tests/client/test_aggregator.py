"""Tests for coalescing raw events into change sets."""

from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from themesync.client.sync.aggregator import ChangeAggregator, build_change_set, coalesce
from themesync.client.sync.types import ChangeSet, RawEvent, RawEventKind, WatchError
from themesync.core.config import SyncConfig

CREATED = RawEventKind.CREATED
MODIFIED = RawEventKind.MODIFIED
DELETED = RawEventKind.DELETED


def ev(root: Path, name: str, kind: RawEventKind, at: float = 0.0) -> RawEvent:
    """Create a raw event for a file under root."""
    return RawEvent(path=root / name, kind=kind, timestamp=at)


class TestBuildChangeSet:
    """Tests for per-path classification within one batch."""

    def test_single_kinds(self, root: Path) -> None:
        """Should classify plain created/modified/deleted events."""
        change_set = build_change_set(
            root,
            [ev(root, "new.txt", CREATED), ev(root, "old.txt", MODIFIED), ev(root, "gone.txt", DELETED)],
        )

        assert change_set == ChangeSet(modified=["old.txt"], added=["new.txt"], removed=["gone.txt"])

    def test_repeated_modifications_collapse(self, root: Path) -> None:
        """Should report a path once however many times it was written."""
        change_set = build_change_set(root, [ev(root, "a.txt", MODIFIED)] * 5)

        assert change_set.modified == ["a.txt"]
        assert len(change_set) == 1

    def test_deleted_then_recreated_is_added(self, root: Path) -> None:
        """Should treat a path re-created after deletion as added."""
        change_set = build_change_set(
            root, [ev(root, "a.txt", DELETED), ev(root, "a.txt", CREATED), ev(root, "a.txt", MODIFIED)]
        )

        assert change_set == ChangeSet(added=["a.txt"])

    def test_created_then_deleted_is_removed(self, root: Path) -> None:
        """Should let the last state win when a file disappears."""
        change_set = build_change_set(root, [ev(root, "a.txt", CREATED), ev(root, "a.txt", DELETED)])

        assert change_set == ChangeSet(removed=["a.txt"])

    def test_created_then_modified_is_added(self, root: Path) -> None:
        """Should keep a new file in added even after writes."""
        change_set = build_change_set(root, [ev(root, "a.txt", CREATED), ev(root, "a.txt", MODIFIED)])

        assert change_set == ChangeSet(added=["a.txt"])

    def test_lists_are_disjoint(self, root: Path) -> None:
        """Should never put one path in two lists."""
        change_set = build_change_set(
            root,
            [ev(root, "a.txt", MODIFIED), ev(root, "a.txt", DELETED), ev(root, "b.txt", DELETED), ev(root, "b.txt", CREATED)],
        )

        assert change_set.removed == ["a.txt"]
        assert change_set.added == ["b.txt"]
        assert change_set.modified == []

    def test_relative_forward_slash_paths(self, root: Path) -> None:
        """Should report nested paths relative to root with forward slashes."""
        change_set = build_change_set(root, [ev(root, "templates/index.liquid", MODIFIED)])

        assert change_set.modified == ["templates/index.liquid"]

    def test_first_seen_order(self, root: Path) -> None:
        """Should keep paths in the order they were first seen."""
        change_set = build_change_set(
            root, [ev(root, "b.txt", MODIFIED), ev(root, "a.txt", MODIFIED), ev(root, "b.txt", MODIFIED)]
        )

        assert change_set.modified == ["b.txt", "a.txt"]

    def test_skips_paths_outside_root(self, tmp_path: Path, root: Path) -> None:
        """Should drop events that are not under root."""
        stray = RawEvent(path=tmp_path / "stray.txt", kind=MODIFIED)

        assert not build_change_set(root, [stray])


class TestCoalesce:
    """Tests for splitting a timed event stream into batches."""

    def test_burst_within_window_is_one_change_set(self, root: Path) -> None:
        """Should merge events closer together than the window."""
        events = [ev(root, "a.txt", MODIFIED, at=t) for t in (0.0, 0.1, 0.2, 0.3)]

        change_sets = coalesce(root, events, window_s=0.25)

        assert change_sets == [ChangeSet(modified=["a.txt"])]

    def test_gap_closes_batch(self, root: Path) -> None:
        """Should start a new batch after a quiet period."""
        events = [
            ev(root, "a.txt", MODIFIED, at=0.0),
            ev(root, "a.txt", MODIFIED, at=0.1),
            ev(root, "b.txt", MODIFIED, at=1.0),
        ]

        change_sets = coalesce(root, events, window_s=0.25)

        assert change_sets == [ChangeSet(modified=["a.txt"]), ChangeSet(modified=["b.txt"])]

    def test_max_wait_bounds_a_storm(self, root: Path) -> None:
        """Should close a batch that stays busy longer than max_wait_s."""
        events = [ev(root, "log.txt", MODIFIED, at=i * 0.1) for i in range(30)]

        change_sets = coalesce(root, events, window_s=0.25, max_wait_s=1.0)

        assert len(change_sets) == 3
        assert all(cs.modified == ["log.txt"] for cs in change_sets)

    def test_delete_and_recreate_in_window(self, root: Path) -> None:
        """Should classify an editor save-by-rename as added."""
        events = [
            ev(root, "index.liquid", DELETED, at=0.0),
            ev(root, "index.liquid", CREATED, at=0.01),
            ev(root, "index.liquid", MODIFIED, at=0.02),
        ]

        assert coalesce(root, events, window_s=0.25) == [ChangeSet(added=["index.liquid"])]

    def test_empty_stream(self, root: Path) -> None:
        """Should produce no change sets without events."""
        assert coalesce(root, [], window_s=0.25) == []


class TestChangeAggregator:
    """Tests for the live aggregator with a real watcher."""

    @pytest.fixture
    def config(self) -> SyncConfig:
        return SyncConfig(debounce_ms=200, max_wait_s=3.0)

    def test_rapid_writes_yield_one_entry(self, root: Path, config: SyncConfig) -> None:
        """Should coalesce many writes to one file into one change set entry."""
        target = root / "rapid.txt"
        target.write_text("v0")

        with ChangeAggregator(root, config) as aggregator:
            time.sleep(0.1)
            for i in range(5):
                target.write_text(f"version {i}")
                time.sleep(0.02)
            change_set = next(iter(aggregator))

        assert change_set.modified + change_set.added == ["rapid.txt"]
        assert change_set.removed == []

    def test_stop_ends_iteration(self, root: Path, config: SyncConfig) -> None:
        """Should end iteration and release the watch after stop."""
        aggregator = ChangeAggregator(root, config)
        aggregator.start()
        threading.Timer(0.3, aggregator.stop).start()

        assert list(aggregator) == []
        assert aggregator.is_running is False

    def test_cannot_restart(self, root: Path, config: SyncConfig) -> None:
        """Should not be restartable once stopped."""
        aggregator = ChangeAggregator(root, config)
        aggregator.start()
        aggregator.stop()

        with pytest.raises(WatchError):
            aggregator.start()

    def test_dead_observer_raises(self, root: Path, config: SyncConfig) -> None:
        """Should surface a watch that died without a stop request."""
        aggregator = ChangeAggregator(root, config)
        aggregator.start()
        observer = aggregator._watcher._observer
        observer.stop()
        observer.join(timeout=5.0)

        try:
            with pytest.raises(WatchError, match="terminated unexpectedly"):
                next(iter(aggregator))
        finally:
            aggregator.stop()
