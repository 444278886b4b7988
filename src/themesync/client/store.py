"""Remote store contract shared by every Theme API backend.

This module provides:
- RemoteFile: A file entry as listed by the remote store
- Candidate: A file built locally and not yet saved
- DeleteStatus: Typed result of a remote delete
- RemoteStore: Protocol the sync engine talks to
- APIError, AuthenticationError, NotFoundError: Failures a store raises
- validate_candidate: Validation rules applied before any save
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Protocol

DEFAULT_MAX_FILE_SIZE = 10 * 1024 * 1024


class APIError(Exception):
    """Base exception for remote store failures."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class AuthenticationError(APIError):
    """Authorization missing, invalid or expired."""


class NotFoundError(APIError):
    """Resource not found."""


@dataclass
class RemoteFile:
    """File entry from the remote store.

    Listings may omit the content; in that case ``content`` is None and
    must be pulled with ``RemoteStore.fetch_content``.
    """

    path: str
    size: int | None = None
    content: bytes | None = None

    @property
    def has_content(self) -> bool:
        """Check whether the listing already carried the content."""
        return self.content is not None


@dataclass(frozen=True)
class Candidate:
    """A file about to be created on the remote store."""

    path: str
    content: bytes

    @property
    def size(self) -> int:
        """Content size in bytes."""
        return len(self.content)


class DeleteStatus(Enum):
    """Result of a remote delete."""

    DELETED = "deleted"
    NOT_FOUND = "not_found"


class RemoteStore(Protocol):
    """Operations the sync engine needs from a remote store.

    ``validate`` and ``save`` return an ordered list of human-readable
    messages; an empty list means success. Failures that are not about
    the candidate itself (network, authorization, server errors) are
    raised as ``APIError``.
    """

    def list_files(self, recursive: bool = True) -> list[RemoteFile]: ...

    def fetch_content(self, file: RemoteFile) -> bytes: ...

    def build(self, path: str, content: bytes) -> Candidate: ...

    def validate(self, candidate: Candidate) -> list[str]: ...

    def save(self, candidate: Candidate) -> list[str]: ...

    def delete(self, path: str) -> DeleteStatus: ...


def validate_candidate(
    candidate: Candidate,
    max_file_size: int = DEFAULT_MAX_FILE_SIZE,
) -> list[str]:
    """Check a candidate against the remote store's rules.

    Args:
        candidate: The file to check.
        max_file_size: Largest accepted content size in bytes.

    Returns:
        Validation messages, empty if the candidate is valid.
    """
    messages: list[str] = []
    path = candidate.path

    if not path:
        messages.append("Path can't be blank")
    else:
        if path.startswith("/"):
            messages.append("Path must be relative")
        if "\\" in path:
            messages.append("Path must use forward slashes")
        segments = path.strip("/").split("/")
        if any(segment in ("", ".", "..") for segment in segments):
            messages.append("Path contains an empty, '.' or '..' segment")

    if candidate.size > max_file_size:
        messages.append(
            f"Content is too large ({candidate.size} bytes, "
            f"maximum is {max_file_size} bytes)"
        )

    return messages
