"""Vanity import resolution for rubigo.

Some import paths (``golang.org/x/net``) do not name a source-control host.
Their servers publish the real repository in a meta tag::

    <meta name="go-import" content="golang.org/x/net git https://go.googlesource.com/net">

:class:`VanityResolver` fetches that page and returns the repository URL
together with the canonical identifier ``<namespace>/<repository path>``.

Resolution is best effort. Every failure, whether a network error, a
page without the meta tag or a URL that cannot be split, yields the same
fallback ``("http://<import path>", None)``. Nothing is raised and nothing
is retried here.
"""

from __future__ import annotations

import re
import logging
from typing import Iterable, Optional, Tuple

import httpx

from rubigo.exceptions import NetworkError
from rubigo.utils.http import HTTPClient
from rubigo.utils.logger import get_logger
from rubigo.constants import (
    DEFAULT_VANITY_NAMESPACES,
    GO_IMPORT_PATTERN,
    URL_PATH_PATTERN,
)

__all__ = ["VanityResolver", "Resolution"]

#: ``(fetch URL, canonical identifier or None)``
Resolution = Tuple[str, Optional[str]]

_GO_IMPORT_RE = re.compile(GO_IMPORT_PATTERN)
_URL_PATH_RE = re.compile(URL_PATH_PATTERN)


class VanityResolver:
    """Resolve import paths to fetchable repository URLs.

    Args:
        http_client: Client used to fetch ``go-import`` pages.
        namespaces: Import prefixes whose hosts speak the protocol.
        logger: Logger for debug output; defaults to the module logger.
    """

    def __init__(
        self,
        http_client: HTTPClient,
        namespaces: Iterable[str] = DEFAULT_VANITY_NAMESPACES,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.http_client = http_client
        self.namespaces = tuple(ns.rstrip("/") for ns in namespaces)
        self.logger = logger or get_logger("core.vanity")

    def namespace_for(self, import_path: str) -> Optional[str]:
        """Return the redirect-capable namespace ``import_path`` belongs to."""
        for namespace in self.namespaces:
            if import_path.startswith(namespace):
                return namespace
        return None

    def resolve(self, import_path: str) -> Resolution:
        """Resolve ``import_path`` (without scheme).

        Returns:
            ``(url, canonical)`` where ``canonical`` is ``None`` unless the
            meta tag named a URL with a path.
        """
        fallback: Resolution = (f"http://{import_path}", None)

        namespace = self.namespace_for(import_path)
        if namespace is None:
            return fallback

        body = self._fetch(import_path)
        if body is None:
            return fallback

        match = _GO_IMPORT_RE.search(body)
        if match is None or not match.group(1):
            self.logger.debug("No go-import meta tag for %s", import_path)
            return fallback

        url = match.group(1)
        path_match = _URL_PATH_RE.search(url)
        if path_match is None or not path_match.group(1):
            return url, None

        return url, f"{namespace}/{path_match.group(1)}"

    def _fetch(self, import_path: str) -> Optional[str]:
        """Return the page body, or ``None`` on any failure."""
        url = f"https://{import_path}"
        try:
            return self.http_client.get_text(url, params={"go-get": "1"})
        except (NetworkError, httpx.HTTPError, httpx.InvalidURL) as exc:
            self.logger.debug("Vanity lookup failed for %s: %s", import_path, exc)
            return None
