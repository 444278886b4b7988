"""In-memory remote store.

MemoryThemeStore implements the RemoteStore protocol against a dict.
It applies the same validation rules as the HTTP client and records
every call, which makes operation order observable.
"""

from __future__ import annotations

import threading

from themesync.client.store import (
    DEFAULT_MAX_FILE_SIZE,
    Candidate,
    DeleteStatus,
    NotFoundError,
    RemoteFile,
    validate_candidate,
)


class MemoryThemeStore:
    """RemoteStore backed by a dictionary of path -> content."""

    def __init__(
        self,
        files: dict[str, bytes] | None = None,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        lazy_listing: bool = True,
    ) -> None:
        """Initialize the store.

        Args:
            files: Initial content keyed by relative path.
            max_file_size: Largest content accepted by ``validate``.
            lazy_listing: Omit content from listings, like the HTTP API.
        """
        self._files: dict[str, bytes] = dict(files or {})
        self._max_file_size = max_file_size
        self._lazy_listing = lazy_listing
        self._lock = threading.Lock()
        self.calls: list[tuple[str, str]] = []

    @property
    def files(self) -> dict[str, bytes]:
        """Snapshot of the stored files."""
        with self._lock:
            return dict(self._files)

    def _record(self, operation: str, path: str) -> None:
        self.calls.append((operation, path))

    def list_files(self, recursive: bool = True) -> list[RemoteFile]:
        with self._lock:
            self._record("list", "")
            entries = []
            for path in sorted(self._files):
                if not recursive and "/" in path:
                    continue
                content = self._files[path]
                entries.append(
                    RemoteFile(
                        path=path,
                        size=len(content),
                        content=None if self._lazy_listing else content,
                    )
                )
            return entries

    def fetch_content(self, file: RemoteFile) -> bytes:
        with self._lock:
            self._record("fetch", file.path)
            if file.path not in self._files:
                raise NotFoundError(f"{file.path} not found", 404)
            file.content = self._files[file.path]
            return file.content

    def build(self, path: str, content: bytes) -> Candidate:
        return Candidate(path=path, content=content)

    def validate(self, candidate: Candidate) -> list[str]:
        self._record("validate", candidate.path)
        return validate_candidate(candidate, self._max_file_size)

    def save(self, candidate: Candidate) -> list[str]:
        with self._lock:
            self._record("save", candidate.path)
            if candidate.path in self._files:
                return ["Path has already been taken"]
            self._files[candidate.path] = candidate.content
            return []

    def delete(self, path: str) -> DeleteStatus:
        with self._lock:
            self._record("delete", path)
            if self._files.pop(path, None) is None:
                return DeleteStatus.NOT_FOUND
            return DeleteStatus.DELETED
