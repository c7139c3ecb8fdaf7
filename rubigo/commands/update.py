"""Update command implementation for rubigo.

Resolves packages again while ignoring their lock entries, so packages
without a declared constraint are offered the version menu anew, and
prints a table of what changed.

Typical usage::

    # Choose new versions for everything
    $ rubigo update

    # Only for some packages
    $ rubigo update github.com/pkg/errors golang.org/x/net
"""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

import click

from rubigo.core.manifest import load_lock
from rubigo.core.sync import SyncReport
from rubigo.exceptions import RubigoError
from rubigo.context import pass_context, RubigoContext
from rubigo.models.lock import LockSnapshot
from rubigo.commands.common import build_synchronizer, finish, render_report, version_of
from rubigo.utils import (
    colorize_update_type,
    get_logger,
    get_update_type,
    print_error,
    print_success,
    print_table,
)

logger = get_logger("commands.update")


@click.command()
@click.argument("imports", nargs=-1)
@pass_context
def update(ctx: RubigoContext, imports: Tuple[str, ...]) -> None:
    """Re-resolve IMPORTS (or every package) ignoring rubigo.lock."""
    synchronizer = build_synchronizer(ctx)
    try:
        previous = load_lock(synchronizer.lock_path)
        report = synchronizer.run(refresh=imports, refresh_all=not imports)
    except RubigoError as exc:
        print_error(str(exc))
        logger.debug("Update failed", exc_info=True)
        finish(1)

    render_report(report)
    _display_changes(previous, report)
    finish(0 if report.ok else 1)


def _change_rows(
    previous: Optional[LockSnapshot],
    report: SyncReport,
) -> List[Dict[str, str]]:
    """Build one table row per fetched package whose lock entry changed."""
    rows: List[Dict[str, str]] = []
    for entry in report.fetched:
        old = previous.find(entry.import_path) if previous is not None else None
        if old is not None and old.version == entry.version and old.commit == entry.commit:
            continue

        old_version = version_of(old.version) if old is not None else None
        change = get_update_type(old_version, version_of(entry.version))
        rows.append(
            {
                "Package": entry.import_path,
                "Previous": old.version if old is not None and old.version else "-",
                "Current": entry.version or "-",
                "Change": colorize_update_type(change),
            }
        )
    return rows


def _display_changes(previous: Optional[LockSnapshot], report: SyncReport) -> None:
    rows = _change_rows(previous, report)
    if not rows:
        print_success("All packages are up to date!")
        return

    print_table(
        rows,
        title="Updated Packages",
        column_styles={
            "Package": {"style": "bold cyan", "no_wrap": True},
            "Previous": {"justify": "center", "style": "dim"},
            "Current": {"justify": "center"},
            "Change": {"justify": "center"},
        },
    )
