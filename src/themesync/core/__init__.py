"""Core module - Shared configuration, types and logging helpers."""

from themesync.core.config import DEFAULT_API_URL, SyncConfig, ThemeAPIConfig
from themesync.core.log import SUCCESS, log_messages, log_success
from themesync.core.types import OutcomeKind

__all__ = [
    # Config
    "DEFAULT_API_URL",
    "SyncConfig",
    "ThemeAPIConfig",
    # Logging
    "SUCCESS",
    "log_messages",
    "log_success",
    # Types
    "OutcomeKind",
]
