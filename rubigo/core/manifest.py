"""Reading and writing ``rubigo.json`` and ``rubigo.lock``.

Both documents are JSON objects written atomically. A missing manifest is
an error; a missing lock simply means the project was never synchronized
and is returned as ``None``.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Optional, Union

from rubigo.exceptions import FileOperationError, ManifestError
from rubigo.models.lock import LockSnapshot
from rubigo.models.manifest import Manifest
from rubigo.utils.logger import get_logger
from rubigo.utils.filesystem import safe_read_file, safe_write_file

logger = get_logger("core.manifest")

__all__ = ["load_lock", "load_manifest", "save_lock", "save_manifest"]

PathLike = Union[str, Path]


def _read_document(path: Path) -> Dict[str, Any]:
    try:
        text = safe_read_file(path)
    except FileOperationError as exc:
        raise ManifestError(f"Cannot read {path.name}: {exc.message}", file_path=str(path)) from exc

    try:
        data = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ManifestError(f"Invalid JSON in {path.name}: {exc}", file_path=str(path)) from exc

    if not isinstance(data, dict):
        raise ManifestError(f"{path.name} must contain a JSON object", file_path=str(path))
    return data


def _write_document(path: Path, data: Dict[str, Any]) -> None:
    safe_write_file(path, json.dumps(data, indent=2) + "\n")


def load_manifest(path: PathLike) -> Manifest:
    """Load the project manifest.

    Raises:
        ManifestError: The file is missing, unreadable or malformed.
    """
    manifest_path = Path(path)
    data = _read_document(manifest_path)
    try:
        return Manifest.from_dict(data)
    except ValueError as exc:
        raise ManifestError(str(exc), file_path=str(manifest_path)) from exc


def save_manifest(path: PathLike, manifest: Manifest) -> None:
    _write_document(Path(path), manifest.to_dict())
    logger.debug("Wrote manifest %s", path)


def load_lock(path: PathLike) -> Optional[LockSnapshot]:
    """Load the previous lock snapshot, or ``None`` if there is none.

    Raises:
        ManifestError: The lock exists but cannot be parsed.
    """
    lock_path = Path(path)
    if not lock_path.exists():
        return None
    return LockSnapshot.from_dict(_read_document(lock_path))


def save_lock(path: PathLike, snapshot: LockSnapshot) -> None:
    _write_document(Path(path), snapshot.to_dict())
    logger.debug("Wrote lock %s", path)
