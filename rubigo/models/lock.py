"""
Lock snapshot model for rubigo.

A :class:`LockSnapshot` is the fully-resolved state of the vendor tree at a
point in time. It has two partitions: git-backed entries keyed by import
identifier, and local (filesystem-only) entries keyed by their path.
Identifiers are unique within each partition.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional, Set

from rubigo.constants import (
    COMMIT_KEY,
    GIT_KEY,
    IMPORT_KEY,
    LOCAL_KEY,
    REF_KEY,
    REPO_KEY,
    VERSION_KEY,
)
from rubigo.utils.logger import get_logger

logger = get_logger("models.lock")


@dataclass(frozen=True)
class GitEntry:
    """One git-backed package recorded in the lock.

    Attributes:
        import_path: Normalized import identifier, also the vendor subpath.
        repo: URL the package was fetched from.
        version: Display constraint (``~1.2.0``, ``master``, a commit...).
        ref: Concrete reference that was checked out.
        commit: Commit hash the checkout resolved to.
    """

    import_path: str
    repo: Optional[str] = None
    version: Optional[str] = None
    ref: Optional[str] = None
    commit: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        data = {IMPORT_KEY: self.import_path}
        for key, value in (
            (REPO_KEY, self.repo),
            (VERSION_KEY, self.version),
            (REF_KEY, self.ref),
            (COMMIT_KEY, self.commit),
        ):
            if value is not None:
                data[key] = value
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Optional["GitEntry"]:
        """Build an entry, or return ``None`` if it has no usable import field."""
        import_path = data.get(IMPORT_KEY)
        if not isinstance(import_path, str) or not import_path:
            return None

        def _text(key: str) -> Optional[str]:
            value = data.get(key)
            return value if isinstance(value, str) else None

        return cls(
            import_path=import_path,
            repo=_text(REPO_KEY),
            version=_text(VERSION_KEY),
            ref=_text(REF_KEY),
            commit=_text(COMMIT_KEY),
        )


@dataclass
class LockSnapshot:
    """Resolved git and local entries of a project.

    Raises:
        ValueError: An identifier appears twice within one partition.
    """

    git: List[GitEntry] = field(default_factory=list)
    local: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        _ensure_unique((entry.import_path for entry in self.git), "git")
        _ensure_unique(self.local, "local")

    def git_identifiers(self) -> Set[str]:
        return {entry.import_path for entry in self.git}

    def local_paths(self) -> Set[str]:
        return set(self.local)

    def find(self, import_path: str) -> Optional[GitEntry]:
        """Return the git entry for ``import_path`` if present."""
        for entry in self.git:
            if entry.import_path == import_path:
                return entry
        return None

    def __iter__(self) -> Iterator[GitEntry]:
        return iter(self.git)

    def __len__(self) -> int:
        return len(self.git) + len(self.local)

    def to_dict(self) -> Dict[str, Any]:
        return {
            GIT_KEY: [entry.to_dict() for entry in self.git],
            LOCAL_KEY: list(self.local),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LockSnapshot":
        """Build a snapshot from a parsed lock document.

        Entries without an import identifier (git) or that are not strings
        (local) are skipped. Later duplicates are dropped.
        """
        git: List[GitEntry] = []
        seen: Set[str] = set()
        for raw in data.get(GIT_KEY) or []:
            entry = GitEntry.from_dict(raw) if isinstance(raw, Mapping) else None
            if entry is None:
                logger.debug("Skipping lock entry without import path: %r", raw)
                continue
            if entry.import_path in seen:
                logger.debug("Skipping duplicate lock entry: %s", entry.import_path)
                continue
            seen.add(entry.import_path)
            git.append(entry)

        local: List[str] = []
        for raw in data.get(LOCAL_KEY) or []:
            if isinstance(raw, str) and raw and raw not in local:
                local.append(raw)

        return cls(git=git, local=local)


def _ensure_unique(values: Any, partition: str) -> None:
    seen: Set[str] = set()
    for value in values:
        if value in seen:
            raise ValueError(f"Duplicate {partition} entry in lock snapshot: {value}")
        seen.add(value)
