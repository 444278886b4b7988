"""Shared types for themesync."""

from __future__ import annotations

from enum import Enum


class OutcomeKind(str, Enum):
    """Result of reconciling a single path against the remote store."""

    CREATED = "created"
    DELETED = "deleted"
    NOT_FOUND_IGNORED = "not_found_ignored"
    VALIDATION_FAILED = "validation_failed"
    REMOTE_ERROR = "remote_error"
    READ_FAILED = "read_failed"

    @property
    def ok(self) -> bool:
        """Whether the remote store ended up in the intended state."""
        return self in (
            OutcomeKind.CREATED,
            OutcomeKind.DELETED,
            OutcomeKind.NOT_FOUND_IGNORED,
        )
