"""HTTP client for the Theme API.

This module provides:
- ThemeAPIClient: RemoteStore implementation over HTTP
- APIError, AuthenticationError, NotFoundError: Re-exported from store

The client owns every network concern: auth header, timeouts and
transport retries. Callers only see RemoteStore operations.
"""

from __future__ import annotations

import base64
import logging
from typing import Any
from urllib.parse import quote

import httpx

from themesync.client.retry import retry_with_backoff
from themesync.client.store import (
    DEFAULT_MAX_FILE_SIZE,
    APIError,
    AuthenticationError,
    Candidate,
    DeleteStatus,
    NotFoundError,
    RemoteFile,
    validate_candidate,
)
from themesync.core.config import ThemeAPIConfig

logger = logging.getLogger(__name__)

# Status codes whose body lists validation messages for the candidate
VALIDATION_STATUS_CODES = (400, 422)


def _error_messages(response: httpx.Response) -> list[str]:
    """Extract full error messages from an error response body.

    Accepts ``{"errors": [...]}``, ``{"errors": {"field": [...]}}`` and
    ``{"detail": "..."}``; anything else yields the status line.
    """
    try:
        data = response.json()
    except ValueError:
        data = None

    if isinstance(data, dict):
        errors = data.get("errors")
        if isinstance(errors, list):
            return [str(message) for message in errors]
        if isinstance(errors, dict):
            messages = []
            for field, field_messages in errors.items():
                if isinstance(field_messages, str):
                    field_messages = [field_messages]
                for message in field_messages:
                    messages.append(f"{field.replace('_', ' ').capitalize()} {message}")
            return messages
        if data.get("detail"):
            return [str(data["detail"])]

    return [f"HTTP {response.status_code} {response.reason_phrase}".strip()]


class ThemeAPIClient:
    """HTTP client for the Theme API."""

    def __init__(
        self,
        config: ThemeAPIConfig,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: API connection configuration.
            max_file_size: Largest content accepted by ``validate``.
            transport: Optional httpx transport (for testing).
        """
        self._config = config
        self._max_file_size = max_file_size
        self._client = httpx.Client(
            base_url=config.api_url,
            timeout=config.timeout,
            verify=config.verify_ssl,
            headers={
                "Authorization": config.authorization,
                "Accept": "application/json",
            },
            transport=transport,
        )

    @property
    def config(self) -> ThemeAPIConfig:
        """Get the connection configuration."""
        return self._config

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> ThemeAPIClient:
        """Context manager entry."""
        return self

    def __exit__(self, *args: object) -> None:
        """Context manager exit."""
        self.close()

    def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """Send a request, retrying transport errors.

        Raises:
            APIError: If the API stays unreachable after every retry.
        """
        try:
            return retry_with_backoff(
                lambda: self._client.request(method, url, **kwargs),
                max_retries=self._config.max_retries,
            )
        except httpx.TransportError as e:
            raise APIError(f"Could not reach {self._config.api_url}: {e}") from e

    def _handle_response(self, response: httpx.Response) -> httpx.Response:
        """Handle API response and raise appropriate exceptions."""
        if response.status_code in (401, 403):
            raise AuthenticationError("Invalid or expired authorization", response.status_code)
        if response.status_code == 404:
            raise NotFoundError("Resource not found", 404)
        if response.status_code >= 400:
            raise APIError("; ".join(_error_messages(response)), response.status_code)
        return response

    @staticmethod
    def _file_url(path: str) -> str:
        return f"/files/{quote(path, safe='/')}"

    # === Health check ===

    def health_check(self) -> bool:
        """Check if the API is reachable.

        Returns:
            True if the API answered with 200.
        """
        try:
            response = self._client.get("/health")
            return response.status_code == 200
        except httpx.RequestError:
            return False

    # === File operations ===

    def list_files(self, recursive: bool = True) -> list[RemoteFile]:
        """List files on the remote store.

        Args:
            recursive: Include files in subdirectories.

        Returns:
            File entries. Content is filled only when the listing carries it.
        """
        response = self._handle_response(
            self._request(
                "GET",
                "/files",
                params={"recursive": "true" if recursive else "false"},
            )
        )
        files = []
        for entry in response.json():
            content = entry.get("content")
            files.append(
                RemoteFile(
                    path=entry["path"],
                    size=entry.get("size"),
                    content=base64.b64decode(content) if content is not None else None,
                )
            )
        return files

    def fetch_content(self, file: RemoteFile) -> bytes:
        """Download the content of a listed file.

        Args:
            file: Entry from ``list_files``.

        Returns:
            Raw file content.

        Raises:
            NotFoundError: If the file disappeared since the listing.
        """
        response = self._handle_response(self._request("GET", self._file_url(file.path)))
        file.content = response.content
        return response.content

    def build(self, path: str, content: bytes) -> Candidate:
        """Build a candidate file without contacting the API."""
        return Candidate(path=path, content=content)

    def validate(self, candidate: Candidate) -> list[str]:
        """Validate a candidate before saving it.

        Returns:
            Validation messages, empty if valid.
        """
        return validate_candidate(candidate, self._max_file_size)

    def save(self, candidate: Candidate) -> list[str]:
        """Create a file on the remote store.

        Args:
            candidate: File to create.

        Returns:
            Messages reported by the API, empty on success.

        Raises:
            AuthenticationError: If the authorization is rejected.
            APIError: On server errors.
        """
        response = self._request(
            "POST",
            "/files",
            json={
                "path": candidate.path,
                "content": base64.b64encode(candidate.content).decode("ascii"),
            },
        )
        if response.status_code in VALIDATION_STATUS_CODES:
            return _error_messages(response)
        self._handle_response(response)
        return []

    def delete(self, path: str) -> DeleteStatus:
        """Delete a file on the remote store.

        Args:
            path: Relative file path.

        Returns:
            DELETED, or NOT_FOUND if the file was already absent.
        """
        try:
            self._handle_response(self._request("DELETE", self._file_url(path)))
        except NotFoundError:
            return DeleteStatus.NOT_FOUND
        return DeleteStatus.DELETED
