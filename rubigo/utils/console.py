"""
Console output and interactive input for rubigo using Rich.

This module provides user-facing output helpers for CLI commands and the
:class:`Interaction` handle through which core components ask the user
questions. For diagnostic or debug output, use :mod:`rubigo.utils.logger`.

Guidelines:
- print_* functions: user-facing status messages
- print_table: structured CLI output
- Interaction: every read from standard input goes through one of these
"""

from __future__ import annotations

import os
import sys
import threading
from typing import Any, Callable, Dict, List, Optional

from rich.table import Table
from rich.theme import Theme
from rich.console import Console

from rubigo.exceptions import InteractionError

# ---------------------------------------------------------------------------
# Theme configuration
# ---------------------------------------------------------------------------

RUBIGO_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "bold yellow",
        "info": "bold cyan",
        "dim": "dim",
        "highlight": "bold magenta",
    }
)

# ---------------------------------------------------------------------------
# Console lifecycle management
# ---------------------------------------------------------------------------

_console: Optional[Console] = None
_console_lock = threading.Lock()


def _should_use_color() -> bool:
    """Return True if colored output should be enabled."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("CI"):
        return False
    try:
        return sys.stdout.isatty()
    except (AttributeError, OSError):
        return False


def _get_console() -> Console:
    """Return a singleton Rich Console instance."""
    global _console

    if _console is None:
        with _console_lock:
            if _console is None:
                use_color = _should_use_color()
                _console = Console(
                    theme=RUBIGO_THEME,
                    no_color=not use_color,
                    highlight=use_color,
                )
    return _console


def reconfigure_console() -> None:
    """Reset the global console instance.

    Useful if environment variables (e.g. NO_COLOR) change at runtime.
    """
    global _console
    with _console_lock:
        _console = None


# ---------------------------------------------------------------------------
# Status message helpers
# ---------------------------------------------------------------------------


def print_success(message: str, *, prefix: str = "[OK]") -> None:
    """Print a success message."""
    _get_console().print(f"{prefix} {message}", style="success", markup=False)


def print_error(message: str, *, prefix: str = "[ERROR]") -> None:
    """Print an error message."""
    _get_console().print(f"{prefix} {message}", style="error", markup=False)


def print_warning(message: str, *, prefix: str = "[WARNING]") -> None:
    """Print a warning message."""
    _get_console().print(f"{prefix} {message}", style="warning", markup=False)


# ---------------------------------------------------------------------------
# Structured output
# ---------------------------------------------------------------------------


def print_table(
    data: List[Dict[str, Any]],
    *,
    headers: Optional[List[str]] = None,
    title: Optional[str] = None,
    column_styles: Optional[Dict[str, Dict[str, Any]]] = None,
    row_styler: Optional[Callable[[Dict[str, Any]], Optional[str]]] = None,
) -> None:
    """Render structured data as a Rich table.

    Args:
        data: List of row dictionaries.
        headers: Column order. Defaults to keys of the first row.
        title: Optional table title.
        column_styles: Per-column style configuration.
        row_styler: Optional callback returning a row style.
    """
    if not data:
        return

    if headers is None:
        headers = list(data[0].keys())

    table = Table(title=title, show_header=True, header_style="bold")

    column_styles = column_styles or {}
    for header in headers:
        config = column_styles.get(header, {})
        table.add_column(
            header,
            style=config.get("style"),
            justify=config.get("justify", "default"),
            no_wrap=config.get("no_wrap", False),
            overflow=config.get("overflow", "fold"),
        )

    for row in data:
        values = [str(row.get(h, "")) for h in headers]
        style = row_styler(row) if row_styler else None
        table.add_row(*values, style=style)

    _get_console().print(table)


def colorize_update_type(update_type: str) -> str:
    """Return a Rich-markup colored change label.

    Args:
        update_type: Change classification string.

    Returns:
        Rich markup string.
    """
    color_map = {
        "major": "red",
        "minor": "yellow",
        "patch": "green",
        "new": "cyan",
        "downgrade": "red",
        "update": "yellow",
    }

    color = color_map.get(update_type.lower())
    return f"[{color}]{update_type}[/{color}]" if color else update_type


# ---------------------------------------------------------------------------
# User interaction
# ---------------------------------------------------------------------------


class Interaction:
    """Handle for printing prompts and reading answers from the user.

    All reads are serialized through a lock so two callers can never
    interleave on the same input stream.

    Args:
        console: Console used to render prompts. Defaults to the shared one.
        input_func: Callable that reads one line. Defaults to :func:`input`.
    """

    def __init__(
        self,
        console: Optional[Console] = None,
        input_func: Optional[Callable[[], str]] = None,
    ) -> None:
        self._console = console
        self._input = input_func or input
        self._lock = threading.Lock()

    @property
    def console(self) -> Console:
        return self._console or _get_console()

    def ask(self, message: str) -> str:
        """Print ``message`` and return one raw line of input.

        Raises:
            InteractionError: Standard input is closed or unreadable.
        """
        with self._lock:
            self.console.print(f"{message} ", end="", markup=False, highlight=False)
            try:
                return self._input()
            except (EOFError, OSError) as exc:
                self.console.print()
                raise InteractionError(f"Unable to read input: {str(exc) or 'end of input'}") from exc

    def confirm(self, message: str, *, default: bool = False) -> bool:
        """Ask a yes/no question.

        - "y", "yes", "yea", "yeah", "yep", "yup" → True
        - "n", "no" → False
        - empty or unrecognized input → ``default``
        """
        suffix = "[Y/n]:" if default else "[y/N]:"
        response = self.ask(f"{message} {suffix}").strip().lower()

        if response in ("y", "yes", "yea", "yeah", "yep", "yup"):
            return True
        if response in ("n", "no"):
            return False
        return default
