"""
Version constraint model for rubigo.

A constraint records how far a dependency may move when it is resolved
again: within a patch series (tilde), within a major series (caret), not at
all (exact), along a branch, or pinned to a single commit.

Constraint strings::

    ~1.2.3    tilde   >=1.2.3,<1.3.0
    ^1.2.3    caret   >=1.2.3,<2.0.0   (^0.2.3 -> <0.3.0, ^0.0.3 -> <0.0.4)
    =1.2.3    exact   ==1.2.3
    3f2a9c1   commit  7-40 lowercase hex digits
    master    branch  anything else
"""

from __future__ import annotations

import re
from enum import Enum
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from packaging.version import Version
from packaging.specifiers import SpecifierSet

from rubigo.utils.version_utils import normalize_release, parse_tag_version

_COMMIT_RE = re.compile(r"^[0-9a-f]{7,40}$")


class ConstraintKind(str, Enum):
    """Flexibility policy of a recorded dependency."""

    TILDE = "tilde"
    CARET = "caret"
    EXACT = "exact"
    BRANCH = "branch"
    COMMIT = "commit"


_PREFIXES = {
    ConstraintKind.TILDE: "~",
    ConstraintKind.CARET: "^",
    ConstraintKind.EXACT: "=",
}

_VERSION_KINDS = frozenset(_PREFIXES)


@dataclass(frozen=True)
class VersionConstraint:
    """A parsed version constraint.

    Attributes:
        kind: The constraint kind.
        value: The version (without prefix), branch name or commit hash.
    """

    kind: ConstraintKind
    value: str

    def __post_init__(self) -> None:
        if not self.value:
            raise ValueError("Constraint value must not be empty")
        if self.kind in _VERSION_KINDS and parse_tag_version(self.value) is None:
            raise ValueError(f"Invalid version in constraint: {self.value!r}")

    @classmethod
    def parse(cls, text: str) -> "VersionConstraint":
        """Parse a constraint string.

        Raises:
            ValueError: The string is empty or a prefixed version is invalid.
        """
        raw = text.strip()
        if not raw:
            raise ValueError("Constraint must not be empty")

        for kind, prefix in _PREFIXES.items():
            if raw.startswith(prefix):
                return cls(kind, raw[len(prefix):].strip())

        if _COMMIT_RE.match(raw):
            return cls(ConstraintKind.COMMIT, raw)
        return cls(ConstraintKind.BRANCH, raw)

    def __str__(self) -> str:
        return f"{_PREFIXES.get(self.kind, '')}{self.value}"

    @property
    def is_version(self) -> bool:
        """True for tilde, caret and exact constraints."""
        return self.kind in _VERSION_KINDS

    @property
    def version(self) -> Optional[Version]:
        """The constraint's base version, or ``None`` for branches/commits."""
        if not self.is_version:
            return None
        return parse_tag_version(self.value)

    def specifier(self) -> SpecifierSet:
        """Return the accepted version range as a :class:`SpecifierSet`.

        Raises:
            ValueError: The constraint is a branch or commit.
        """
        base = self.version
        if base is None:
            raise ValueError(f"{self.kind.value} constraints have no version range")

        if self.kind is ConstraintKind.EXACT:
            return SpecifierSet(f"=={base}")

        major, minor, patch = normalize_release(base)
        if self.kind is ConstraintKind.TILDE:
            upper = f"{major}.{minor + 1}.0"
        elif major > 0:
            upper = f"{major + 1}.0.0"
        elif minor > 0:
            upper = f"0.{minor + 1}.0"
        else:
            upper = f"0.0.{patch + 1}"
        return SpecifierSet(f">={base},<{upper}")

    def allows(self, version: str) -> bool:
        """Return True if ``version`` (a tag or version string) satisfies this constraint."""
        parsed = parse_tag_version(version)
        if parsed is None or not self.is_version:
            return False
        return self.specifier().contains(parsed, prereleases=parsed.is_prerelease)

    def select_tag(self, tags: Iterable[str]) -> Optional[Tuple[str, str]]:
        """Pick the highest tag satisfying this constraint.

        Returns:
            ``(tag, version)`` or ``None`` when nothing matches.
        """
        best: Optional[Tuple[Version, str]] = None
        for tag in tags:
            if not self.allows(tag):
                continue
            parsed = parse_tag_version(tag)
            if parsed is not None and (best is None or parsed > best[0]):
                best = (parsed, tag)

        if best is None:
            return None
        return best[1], str(best[0])


@dataclass(frozen=True)
class VersionChoice:
    """A resolved selection: what to check out and what to record.

    Attributes:
        ref: Concrete git reference (tag, branch or commit hash).
        constraint: Display constraint string stored in the lock.
    """

    ref: str
    constraint: str
