"""
Centralized constants for rubigo.

This module defines immutable configuration values used across rubigo,
including project file names, network settings, vanity import namespaces
and logging formats. All values are intended to be treated as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Project metadata
# ---------------------------------------------------------------------------

#: HTTP User-Agent template used for outbound requests.
USER_AGENT_TEMPLATE: Final[str] = "rubigo/{version}"

# ---------------------------------------------------------------------------
# Project files
# ---------------------------------------------------------------------------

#: Manifest declaring the direct dependencies of a project.
MANIFEST_FILE: Final[str] = "rubigo.json"

#: Lock file recording exactly which reference was fetched per package.
LOCK_FILE: Final[str] = "rubigo.lock"

#: Default vendor root, relative to the project directory.
VENDOR_DIR: Final[str] = "vendor"

#: Name of the git collection inside manifest and lock documents.
GIT_KEY: Final[str] = "git"

#: Name of the local collection inside manifest and lock documents.
LOCAL_KEY: Final[str] = "local"

#: Field carrying the import identifier of a git entry.
IMPORT_KEY: Final[str] = "import"

#: Field carrying the version constraint of a git entry.
VERSION_KEY: Final[str] = "version"

#: Field carrying the fetch URL of a git entry.
REPO_KEY: Final[str] = "repo"

#: Field carrying the concrete reference checked out for a git entry.
REF_KEY: Final[str] = "ref"

#: Field carrying the commit hash resolved at checkout.
COMMIT_KEY: Final[str] = "commit"

# ---------------------------------------------------------------------------
# Vanity imports
# ---------------------------------------------------------------------------

#: Import namespaces whose hosts answer with a ``go-import`` meta tag.
DEFAULT_VANITY_NAMESPACES: Final[Sequence[str]] = ("golang.org/x",)

#: Matches ``<meta name="go-import" content="prefix git URL">``.
GO_IMPORT_PATTERN: Final[str] = r""".*go-import.* git ([^'"]*)"?'?>"""

#: Captures the path that follows ``scheme://host/``.
URL_PATH_PATTERN: Final[str] = r"[^/]*//[^/]*/(.*)"

#: Matches an ``http://`` or ``https://`` scheme prefix.
URL_SCHEME_PATTERN: Final[str] = r"https?://"

# ---------------------------------------------------------------------------
# HTTP configuration
# ---------------------------------------------------------------------------

#: Default network timeout in seconds (``None`` waits indefinitely).
DEFAULT_TIMEOUT: Final[None] = None

#: Retries for failed HTTP requests. Retrying is opt-in.
DEFAULT_MAX_RETRIES: Final[int] = 0

# ---------------------------------------------------------------------------
# Concurrency
# ---------------------------------------------------------------------------

#: Lower bound on the number of fetch workers, even on single-core hosts.
MIN_WORKERS: Final[int] = 2

# ---------------------------------------------------------------------------
# Security constraints
# ---------------------------------------------------------------------------

#: Maximum allowed file size (in bytes) when reading manifest or lock files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
