"""Filesystem sandbox utilities for safe path resolution."""

from pathlib import Path


class ForbiddenPath(Exception):
    """Raised when a requested path escapes the configured sandbox."""


def resolve_sandbox_path(directory: str, user_path: str) -> Path:
    """Resolve a client-supplied file name inside the base directory.

    Rejects NUL bytes, empty names and ``..`` segments outright, then checks the
    fully resolved target (symlinks included) still sits below the base.
    """
    if "\x00" in user_path:
        raise ForbiddenPath("NUL byte in file name")

    relative_part = user_path.lstrip("/")
    if not relative_part:
        raise ForbiddenPath("empty file name")
    if ".." in Path(relative_part).parts:
        raise ForbiddenPath("parent segment in file name")

    directory_root = Path(directory).resolve()
    target = (directory_root / relative_part).resolve()
    if directory_root not in target.parents:
        raise ForbiddenPath("file name resolves outside the base directory")
    return target
