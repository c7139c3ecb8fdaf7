"""
Unified data model exports for rubigo.

Example:
    >>> from rubigo.models import LockSnapshot, VersionConstraint
"""

from __future__ import annotations

from rubigo.models.lock import GitEntry, LockSnapshot
from rubigo.models.manifest import Manifest, ManifestEntry
from rubigo.models.constraint import ConstraintKind, VersionChoice, VersionConstraint

__all__ = [
    "ConstraintKind",
    "GitEntry",
    "LockSnapshot",
    "Manifest",
    "ManifestEntry",
    "VersionChoice",
    "VersionConstraint",
]
