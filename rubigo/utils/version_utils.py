"""
Version helpers for rubigo.

Git tags such as ``v1.4.2`` are interpreted as versions with
:mod:`packaging`; this module parses them, picks the newest one and
classifies the change between two versions.
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

from packaging.version import InvalidVersion, Version, parse


def parse_tag_version(tag: str) -> Optional[Version]:
    """Parse a git tag into a version, tolerating a leading ``v``.

    Returns ``None`` when the tag is not a version at all.

    Examples:
        >>> parse_tag_version("v1.2.3")
        <Version('1.2.3')>
        >>> parse_tag_version("release-candidate") is None
        True
    """
    text = tag.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]
    try:
        return _parse_version(text)
    except InvalidVersion:
        return None


def latest_tag(tags: Iterable[str]) -> Optional[Tuple[str, str]]:
    """Return ``(tag, version)`` for the highest versioned tag.

    Tags that do not parse as versions are ignored. Pre-releases only win
    when no final release exists.
    """
    best: Optional[Tuple[Version, str]] = None
    best_final: Optional[Tuple[Version, str]] = None

    for tag in tags:
        version = parse_tag_version(tag)
        if version is None:
            continue
        if best is None or version > best[0]:
            best = (version, tag)
        if not version.is_prerelease and (best_final is None or version > best_final[0]):
            best_final = (version, tag)

    chosen = best_final or best
    if chosen is None:
        return None
    return chosen[1], str(chosen[0])


def get_update_type(
    current_version: Optional[str],
    target_version: Optional[str],
) -> str:
    """Determine the semantic change between two versions.

    Args:
        current_version: Locked version, or ``None`` if nothing was locked.
        target_version: Newly selected version.

    Returns:
        One of ``"new"``, ``"same"``, ``"downgrade"``, ``"major"``,
        ``"minor"``, ``"patch"``, ``"update"`` or ``"unknown"`` (for
        branches, commits or anything else that is not a version).

    Examples:
        >>> get_update_type("1.0.0", "2.0.0")
        'major'
        >>> get_update_type(None, "1.0.0")
        'new'
    """
    if current_version is None and target_version is None:
        return "unknown"

    if current_version is None:
        return "new"

    if target_version is None:
        return "unknown"

    if current_version == target_version:
        return "same"

    try:
        current = _parse_version(current_version)
        target = _parse_version(target_version)
    except InvalidVersion:
        return "unknown"

    if target == current:
        return "same"

    if target < current:
        return "downgrade"

    return _classify_upgrade(current, target)


def _parse_version(value: str) -> Version:
    """Parse a version string into a PEP 440 Version object."""
    parsed = parse(value)
    if not isinstance(parsed, Version):
        raise InvalidVersion(value)
    return parsed


def _classify_upgrade(current: Version, target: Version) -> str:
    """Classify an upgrade between two valid versions."""
    current_major, current_minor, current_patch = normalize_release(current)
    target_major, target_minor, target_patch = normalize_release(target)

    if current_major != target_major:
        return "major"

    if current_minor != target_minor:
        return "minor"

    if current_patch != target_patch:
        return "patch"

    # Pre-release to release, or metadata only
    return "update"


def normalize_release(version: Version) -> Tuple[int, int, int]:
    """Normalize a version's release segment to (major, minor, patch)."""
    release = version.release
    major = release[0] if len(release) > 0 else 0
    minor = release[1] if len(release) > 1 else 0
    patch = release[2] if len(release) > 2 else 0
    return major, minor, patch
