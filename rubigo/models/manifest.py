"""
Project manifest model for rubigo.

The manifest lists the direct dependencies a user declared, each with an
optional version constraint and an optional explicit repository URL, plus
local packages that live only on disk under the vendor root.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional

from rubigo.constants import GIT_KEY, IMPORT_KEY, LOCAL_KEY, REPO_KEY, VERSION_KEY


@dataclass(frozen=True)
class ManifestEntry:
    """A declared git dependency.

    Attributes:
        import_path: Import path as declared (scheme prefix allowed).
        version: Constraint string, or ``None`` to choose interactively.
        repo: Explicit fetch URL overriding vanity resolution.
    """

    import_path: str
    version: Optional[str] = None
    repo: Optional[str] = None

    def to_dict(self) -> Dict[str, str]:
        data = {IMPORT_KEY: self.import_path}
        if self.version is not None:
            data[VERSION_KEY] = self.version
        if self.repo is not None:
            data[REPO_KEY] = self.repo
        return data


@dataclass
class Manifest:
    """User-declared dependencies of a project."""

    name: str
    git: List[ManifestEntry] = field(default_factory=list)
    local: List[str] = field(default_factory=list)

    def find(self, import_path: str) -> Optional[ManifestEntry]:
        for entry in self.git:
            if entry.import_path == import_path:
                return entry
        return None

    def add(self, entry: ManifestEntry) -> None:
        """Append a git dependency.

        Raises:
            ValueError: The import path is already declared.
        """
        if self.find(entry.import_path) is not None:
            raise ValueError(f"Package already declared: {entry.import_path}")
        self.git.append(entry)

    def remove(self, import_path: str) -> bool:
        """Drop a git or local dependency. Returns False if it was not declared."""
        for index, entry in enumerate(self.git):
            if entry.import_path == import_path:
                del self.git[index]
                return True
        if import_path in self.local:
            self.local.remove(import_path)
            return True
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            GIT_KEY: [entry.to_dict() for entry in self.git],
            LOCAL_KEY: list(self.local),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Manifest":
        """Build a manifest from a parsed document.

        Raises:
            ValueError: A git entry lacks an import path or a field has the
                wrong type.
        """
        name = data.get("name") or ""
        if not isinstance(name, str):
            raise ValueError("'name' must be a string")

        git: List[ManifestEntry] = []
        for raw in data.get(GIT_KEY) or []:
            if not isinstance(raw, Mapping):
                raise ValueError(f"git entries must be objects, got {type(raw).__name__}")
            import_path = raw.get(IMPORT_KEY)
            if not isinstance(import_path, str) or not import_path:
                raise ValueError(f"git entry is missing '{IMPORT_KEY}'")
            version = raw.get(VERSION_KEY)
            repo = raw.get(REPO_KEY)
            if version is not None and not isinstance(version, str):
                raise ValueError(f"'{VERSION_KEY}' of {import_path} must be a string")
            if repo is not None and not isinstance(repo, str):
                raise ValueError(f"'{REPO_KEY}' of {import_path} must be a string")
            git.append(ManifestEntry(import_path, version or None, repo or None))

        local = data.get(LOCAL_KEY) or []
        if not all(isinstance(item, str) for item in local):
            raise ValueError("local entries must be strings")

        return cls(name=name, git=git, local=list(local))
