"""
HTTP client utilities for rubigo.

This module provides a thread-safe HTTP client used from fetch workers.
Requests wait indefinitely and are attempted once unless a timeout and a
retry count are configured explicitly.
"""

from __future__ import annotations

import time
import httpx
import random
from typing import Any, Optional

from rubigo.utils.logger import get_logger
from rubigo.__version__ import __version__
from rubigo.exceptions import NetworkError
from rubigo.constants import (
    DEFAULT_TIMEOUT,
    DEFAULT_MAX_RETRIES,
    USER_AGENT_TEMPLATE,
)

logger = get_logger("http")


class HTTPClient:
    """Synchronous HTTP client with opt-in retries.

    One instance may be shared by every worker thread; the underlying
    :class:`httpx.Client` connection pool is thread-safe.

    Args:
        timeout: Request timeout in seconds, or ``None`` for no timeout.
        max_retries: Retry attempts after the first failure.
        verify_ssl: Whether to verify SSL certificates.
        user_agent: Custom User-Agent header value.

    Example:
        >>> with HTTPClient() as client:
        ...     page = client.get_text("https://golang.org/x/net?go-get=1")
    """

    def __init__(
        self,
        *,
        timeout: Optional[float] = DEFAULT_TIMEOUT,
        max_retries: int = DEFAULT_MAX_RETRIES,
        verify_ssl: bool = True,
        user_agent: Optional[str] = None,
    ) -> None:
        self.timeout = timeout
        self.max_retries = max_retries
        self.verify_ssl = verify_ssl
        self.user_agent = user_agent or USER_AGENT_TEMPLATE.format(version=__version__)

        self._client: Optional[httpx.Client] = None

    def __enter__(self) -> "HTTPClient":
        self._ensure_client()
        return self

    def __exit__(self, exc_type: Any, exc: Any, tb: Any) -> None:
        self.close()

    def _ensure_client(self) -> httpx.Client:
        """Initialize the underlying httpx client if needed."""
        if self._client is None:
            self._client = httpx.Client(
                timeout=httpx.Timeout(self.timeout),
                http2=True,
                verify=self.verify_ssl,
                follow_redirects=True,
                headers={"User-Agent": self.user_agent},
            )
        return self._client

    def close(self) -> None:
        """Close the underlying HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _request_with_retry(
        self,
        method: str,
        url: str,
        **kwargs: Any,
    ) -> httpx.Response:
        """Execute an HTTP request, retrying with backoff if configured."""
        client = self._ensure_client()
        last_exc: Optional[Exception] = None

        for attempt in range(self.max_retries + 1):
            try:
                response = client.request(method, url, **kwargs)

                if response.status_code >= 400:
                    response.raise_for_status()

                return response

            except httpx.TimeoutException as exc:
                last_exc = exc
                logger.warning(
                    "Request timeout (%d/%d): %s",
                    attempt + 1,
                    self.max_retries + 1,
                    url,
                )

            except httpx.TransportError as exc:
                last_exc = exc
                logger.warning(
                    "Network error (%d/%d): %s",
                    attempt + 1,
                    self.max_retries + 1,
                    exc,
                )

            except httpx.HTTPStatusError as exc:
                if 400 <= exc.response.status_code < 500:
                    raise NetworkError(
                        f"HTTP {exc.response.status_code} error for {url}",
                        url=url,
                        status_code=exc.response.status_code,
                        response_body=exc.response.text,
                    ) from exc
                last_exc = exc
                logger.warning(
                    "HTTP %d error (%d/%d): %s",
                    exc.response.status_code,
                    attempt + 1,
                    self.max_retries + 1,
                    url,
                )

            if attempt < self.max_retries:
                delay = (2**attempt) + random.uniform(0.0, 0.3)
                logger.debug("Retrying in %.2fs", delay)
                time.sleep(delay)

        raise NetworkError(
            f"Request failed after {self.max_retries + 1} attempt(s): {url}",
            url=url,
        ) from last_exc

    def get(self, url: str, **kwargs: Any) -> httpx.Response:
        """Perform a GET request."""
        return self._request_with_retry("GET", url, **kwargs)

    def get_text(self, url: str, **kwargs: Any) -> str:
        """Perform a GET request and return the whole body as text."""
        return self.get(url, **kwargs).text
