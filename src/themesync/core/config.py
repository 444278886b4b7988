"""Shared configuration classes for themesync.

This module defines the connection settings for the Theme API and the
tunables of the sync engine. Neither class reads the environment or any
file: resolution happens in the CLI layer.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_API_URL = "https://theme-api.versacommerce.de"


@dataclass
class ThemeAPIConfig:
    """Configuration for connecting to the Theme API.

    Attributes:
        api_url: Base URL of the API (e.g., "https://theme-api.example.com").
        authorization: Opaque credential sent in the Authorization header.
        timeout: Request timeout in seconds.
        verify_ssl: Whether to verify SSL certificates (default True).
        max_retries: Retries on transport errors (connection, timeout).
    """

    api_url: str
    authorization: str
    timeout: float = 30.0
    verify_ssl: bool = True
    max_retries: int = 3

    def __post_init__(self) -> None:
        """Normalize API URL."""
        self.api_url = self.api_url.rstrip("/")


@dataclass
class SyncConfig:
    """Tunables for watching, reconciling and downloading.

    Attributes:
        debounce_ms: Quiet period that closes a batch of raw events.
        max_wait_s: Upper bound on how long a batch may stay open while
            events keep arriving.
        max_workers: Concurrent remote operations per batch or download.
        max_file_size: Largest file content accepted for upload, in bytes.
    """

    debounce_ms: int = 250
    max_wait_s: float = 5.0
    max_workers: int = 4
    max_file_size: int = 10 * 1024 * 1024

    def __post_init__(self) -> None:
        if self.debounce_ms <= 0:
            raise ValueError("debounce_ms must be positive")
        if self.max_workers < 1:
            raise ValueError("max_workers must be at least 1")

    @property
    def debounce_s(self) -> float:
        """Debounce window in seconds."""
        return self.debounce_ms / 1000
