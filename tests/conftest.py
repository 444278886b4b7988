"""Shared pytest fixtures."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path

import pytest

from themesync.client.memory import MemoryThemeStore


@pytest.fixture(autouse=True)
def package_logger() -> Iterator[logging.Logger]:
    """Restore the themesync logger after CLI runs reconfigure it."""
    logger = logging.getLogger("themesync")
    handlers, level, propagate = logger.handlers[:], logger.level, logger.propagate
    yield logger
    logger.handlers[:] = handlers
    logger.setLevel(level)
    logger.propagate = propagate


@pytest.fixture
def root(tmp_path: Path) -> Path:
    """Create a theme root directory."""
    theme = tmp_path / "theme"
    theme.mkdir()
    return theme.resolve()


@pytest.fixture
def store() -> MemoryThemeStore:
    """Create an empty in-memory remote store."""
    return MemoryThemeStore()
