"""Path normalization between the local tree and the remote store.

Remote paths are relative to the watch root and always use forward
slashes, whatever the host path syntax.
"""

from __future__ import annotations

from pathlib import Path, PurePosixPath


def to_remote_path(root: Path, path: Path | str) -> str:
    """Convert a local path to a remote path.

    Args:
        root: Watch root (absolute).
        path: Absolute local path, or a path already relative to root.

    Returns:
        Root-relative path with forward slashes.

    Raises:
        ValueError: If an absolute path lies outside root.
    """
    local = Path(path)
    if local.is_absolute():
        local = local.relative_to(root)
    return str(local).replace("\\", "/")


def to_local_path(root: Path, remote_path: str) -> Path:
    """Resolve a remote path to a destination under root.

    Raises:
        ValueError: If the remote path would escape root.
    """
    relative = PurePosixPath(remote_path.replace("\\", "/"))
    if relative.is_absolute() or ".." in relative.parts:
        raise ValueError(f"Remote path escapes the target directory: {remote_path}")
    return root.joinpath(*relative.parts)
