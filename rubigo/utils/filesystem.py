"""
Filesystem utilities for rubigo.

This module provides safe helpers for reading and atomically writing the
manifest and lock documents, and for removing package directories from the
vendor tree. All filesystem errors are normalized to ``FileOperationError``.
"""

from __future__ import annotations

import os
import shutil
import tempfile
from pathlib import Path
from typing import List, Optional, Union

from rubigo.utils.logger import get_logger
from rubigo.exceptions import FileOperationError
from rubigo.constants import MAX_FILE_SIZE


logger = get_logger("filesystem")

PathLike = Union[str, Path]


def _validated_file(path: Path, *, must_exist: bool = True) -> Path:
    """Validate and resolve a file path."""
    if must_exist:
        if not path.exists():
            raise FileOperationError(
                f"File not found: {path}",
                file_path=str(path),
                operation="read",
            )
        if not path.is_file():
            raise FileOperationError(
                f"Not a file: {path}",
                file_path=str(path),
                operation="read",
            )
    return path.resolve()


def _atomic_write(target: Path, content: str) -> None:
    """Atomically write text to a file using a temporary file + replace."""
    target.parent.mkdir(parents=True, exist_ok=True)
    temp_path: Optional[Path] = None

    try:
        with tempfile.NamedTemporaryFile(
            mode="w",
            encoding="utf-8",
            dir=str(target.parent),
            delete=False,
            prefix=f".{target.name}.",
            suffix=".tmp",
        ) as tmp:
            temp_path = Path(tmp.name)
            tmp.write(content)
            tmp.flush()
            os.fsync(tmp.fileno())

        temp_path.replace(target)

    except OSError as exc:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
                logger.debug("Cleaned up temporary file: %s", temp_path)
            except OSError as cleanup_exc:
                logger.warning(
                    "Failed to clean up temporary file %s: %s",
                    temp_path,
                    cleanup_exc,
                )

        raise FileOperationError(
            f"Atomic write failed: {exc}",
            file_path=str(target),
            operation="write",
            original_error=exc,
        ) from exc


def safe_read_file(
    file_path: PathLike,
    *,
    max_size: Optional[int] = MAX_FILE_SIZE,
    encoding: str = "utf-8",
) -> str:
    """Safely read a text file with optional size limits.

    Args:
        file_path: Path to the file.
        max_size: Maximum allowed file size in bytes (None disables limit).
        encoding: Text encoding.

    Returns:
        File contents as a string.
    """
    path = _validated_file(Path(file_path))
    size = path.stat().st_size

    if max_size is not None and size > max_size:
        raise FileOperationError(
            f"File too large: {size} bytes (max {max_size})",
            file_path=str(path),
            operation="read",
        )

    try:
        return path.read_text(encoding=encoding)
    except (OSError, UnicodeDecodeError) as exc:
        raise FileOperationError(
            f"Failed to read file: {exc}",
            file_path=str(path),
            operation="read",
            original_error=exc,
        ) from exc


def safe_write_file(file_path: PathLike, content: str) -> None:
    """Write text to a file using atomic replacement.

    Readers observe either the previous content or the new one, never a
    partially written document.
    """
    _atomic_write(Path(file_path), content)


def remove_tree(path: PathLike) -> None:
    """Recursively delete a directory.

    Raises:
        FileOperationError: The directory is missing or could not be removed.
    """
    target = Path(path)
    try:
        shutil.rmtree(target)
    except OSError as exc:
        raise FileOperationError(
            f"Unable to delete directory: {exc.strerror or exc}",
            file_path=str(target),
            operation="delete",
            original_error=exc,
        ) from exc


def prune_empty_parents(path: PathLike, *, stop_at: PathLike) -> List[Path]:
    """Remove now-empty ancestors of ``path``, walking upwards.

    Pruning stops at the first ancestor that cannot be removed (because it
    still has entries or is not writable) and never touches ``stop_at`` or
    anything above it. ``path`` itself is not removed.

    Args:
        path: Path whose parents should be pruned.
        stop_at: Directory bounding the walk, normally the vendor root.

    Returns:
        The directories that were removed, innermost first.
    """
    boundary = Path(stop_at).resolve()
    current = Path(path).resolve().parent
    removed: List[Path] = []

    while current != boundary and boundary in current.parents:
        try:
            current.rmdir()
        except OSError:
            break
        removed.append(current)
        current = current.parent

    return removed

