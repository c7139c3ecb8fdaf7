"""
Utility helpers for rubigo.

This package provides reusable utilities used across rubigo, including:

- Console output and interactive prompts (Rich-based)
- Logging configuration and retrieval
- Filesystem safety helpers
- HTTP client utilities
- Version parsing and comparison helpers

Only symbols listed in ``__all__`` are considered part of the public API.
"""

from __future__ import annotations

# ---------------------------------------------------------------------------
# Filesystem utilities
# ---------------------------------------------------------------------------

from rubigo.utils.filesystem import (
    prune_empty_parents,
    remove_tree,
    safe_read_file,
    safe_write_file,
)

# ---------------------------------------------------------------------------
# Logging utilities
# ---------------------------------------------------------------------------

from rubigo.utils.logger import (
    disable_logging,
    get_logger,
    is_logging_configured,
    setup_logging,
    verbosity_to_level,
)

# ---------------------------------------------------------------------------
# Console utilities
# ---------------------------------------------------------------------------

from rubigo.utils.console import (
    Interaction,
    colorize_update_type,
    print_error,
    print_success,
    print_table,
    print_warning,
    reconfigure_console,
)

# ---------------------------------------------------------------------------
# HTTP utilities
# ---------------------------------------------------------------------------

from rubigo.utils.http import HTTPClient

# ---------------------------------------------------------------------------
# Version utilities
# ---------------------------------------------------------------------------

from rubigo.utils.version_utils import get_update_type, latest_tag, parse_tag_version

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    # Console
    "Interaction",
    "print_error",
    "print_table",
    "print_success",
    "print_warning",
    "reconfigure_console",
    "colorize_update_type",
    # Logging
    "get_logger",
    "setup_logging",
    "disable_logging",
    "is_logging_configured",
    "verbosity_to_level",
    # Filesystem
    "safe_read_file",
    "safe_write_file",
    "remove_tree",
    "prune_empty_parents",
    # HTTP
    "HTTPClient",
    # Version utilities
    "get_update_type",
    "latest_tag",
    "parse_tag_version",
]
