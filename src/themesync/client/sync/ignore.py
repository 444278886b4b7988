"""Rules for local paths that never reach the remote store.

This module provides:
- IgnorePatterns: Matches root-relative paths against ignore rules
- read_ignore_file: Reads the per-theme .themesyncignore file

Pattern forms:
- ``name`` (no slash) matches any single path segment, so ``.git``
  also covers everything inside a ``.git`` directory
- ``dir/sub`` or ``dir/*.css`` matches the root-relative path and
  everything below it
- ``name/`` matches directory segments only, never the file itself
"""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable
from pathlib import Path

IGNORE_FILE_NAME = ".themesyncignore"

# vim writes "4913" and swap files around a save, emacs writes lock and backup files
EDITOR_ARTIFACT_PATTERNS = (
    "*.swp",
    "*.swo",
    "*.swx",
    "4913",
    "*~",
    ".#*",
    "#*#",
    "*.tmp",
    "*.temp",
)

SYSTEM_PATTERNS = (".git", ".DS_Store", "Thumbs.db", IGNORE_FILE_NAME)

DEFAULT_IGNORE_PATTERNS = SYSTEM_PATTERNS + EDITOR_ARTIFACT_PATTERNS


def read_ignore_file(path: Path) -> list[str]:
    """Read patterns from an ignore file.

    Blank lines and lines starting with ``#`` are skipped. A missing
    file yields no patterns.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return []
    patterns = []
    for line in text.splitlines():
        line = line.strip()
        if line and not line.startswith("#"):
            patterns.append(line)
    return patterns


def _matches_prefix(segments: list[str], pattern: str) -> bool:
    """Match an anchored pattern against the path or any of its parents."""
    return any(
        fnmatch.fnmatch("/".join(segments[:depth]), pattern)
        for depth in range(1, len(segments) + 1)
    )


def _matches_segment(segments: Iterable[str], pattern: str) -> bool:
    return any(fnmatch.fnmatch(segment, pattern) for segment in segments)


class IgnorePatterns:
    """Ignore rules for one watch root.

    Usage:
        ignore = IgnorePatterns.for_root(root)
        if not ignore.matches("assets/app.css"):
            ...
    """

    def __init__(self, patterns: Iterable[str] = ()) -> None:
        """Initialize with the built-in rules plus extra patterns.

        Args:
            patterns: Additional patterns, appended after the defaults.
        """
        self._patterns = [*DEFAULT_IGNORE_PATTERNS, *patterns]

    @classmethod
    def for_root(cls, root: Path, patterns: Iterable[str] = ()) -> IgnorePatterns:
        """Build the rules for root, including its .themesyncignore."""
        return cls([*patterns, *read_ignore_file(root / IGNORE_FILE_NAME)])

    @property
    def patterns(self) -> list[str]:
        """Active patterns, defaults first."""
        return list(self._patterns)

    def matches(self, rel_path: str) -> bool:
        """Check a root-relative, forward-slash path against every rule."""
        segments = rel_path.strip("/").split("/")
        for pattern in self._patterns:
            if pattern.endswith("/"):
                directory = pattern.rstrip("/")
                parents = segments[:-1]
                if "/" in directory:
                    hit = _matches_prefix(parents, directory.lstrip("/"))
                else:
                    hit = _matches_segment(parents, directory)
            elif "/" in pattern:
                hit = _matches_prefix(segments, pattern.lstrip("/"))
            else:
                hit = _matches_segment(segments, pattern)
            if hit:
                return True
        return False

    def should_ignore(self, path: Path, base_path: Path) -> bool:
        """Check an absolute path under base_path.

        Symlinks are always ignored. Paths outside base_path are not
        ignored here; the caller decides what to do with them.
        """
        if path.is_symlink():
            return True
        try:
            rel_path = path.relative_to(base_path)
        except ValueError:
            return False
        return self.matches(rel_path.as_posix())
