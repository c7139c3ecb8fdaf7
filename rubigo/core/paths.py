"""Mapping of import identifiers to vendor paths.

Both helpers are pure: they never touch the filesystem.

Example::

    >>> normalize("https://github.com/a/b")
    'github.com/a/b'
    >>> vendor_path("github.com/a/b").parts
    ('vendor', 'github.com', 'a', 'b')
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Union

from rubigo.constants import URL_SCHEME_PATTERN, VENDOR_DIR

__all__ = ["normalize", "vendor_path"]

_SCHEME_RE = re.compile(URL_SCHEME_PATTERN)


def normalize(import_path: str) -> str:
    """Strip ``http://`` and ``https://`` from an import path."""
    return _SCHEME_RE.sub("", import_path)


def vendor_path(import_path: str, vendor_root: Union[str, Path] = VENDOR_DIR) -> Path:
    """Return the directory of ``import_path`` under ``vendor_root``.

    The scheme is stripped first; every ``/``-separated segment then
    becomes one path component, in order.

    Raises:
        ValueError: A segment is empty, ``.`` or ``..``, which would drop a
            segment or escape the vendor root.
    """
    segments = normalize(import_path).split("/")
    for segment in segments:
        if segment in ("", ".", "..") or "\\" in segment:
            raise ValueError(f"Invalid import path: {import_path!r}")
    return Path(vendor_root).joinpath(*segments)
