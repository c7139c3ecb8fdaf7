"""List command implementation for rubigo.

Prints the packages recorded in ``rubigo.lock`` without touching the
network or the vendor tree.

Typical usage::

    $ rubigo list
"""

from __future__ import annotations

from typing import Dict, List

import click

from rubigo.core.manifest import load_lock
from rubigo.constants import LOCK_FILE
from rubigo.exceptions import RubigoError
from rubigo.context import pass_context, RubigoContext
from rubigo.models.lock import LockSnapshot
from rubigo.commands.common import finish
from rubigo.utils import get_logger, print_error, print_table, print_warning

logger = get_logger("commands.list")

SHORT_COMMIT = 7


def _lock_rows(snapshot: LockSnapshot) -> List[Dict[str, str]]:
    rows: List[Dict[str, str]] = []
    for entry in snapshot.git:
        rows.append(
            {
                "Package": entry.import_path,
                "Version": entry.version or "-",
                "Ref": entry.ref or "-",
                "Commit": entry.commit[:SHORT_COMMIT] if entry.commit else "-",
            }
        )
    for path in snapshot.local:
        rows.append({"Package": path, "Version": "local", "Ref": "-", "Commit": "-"})
    return rows


@click.command(name="list")
@pass_context
def list_packages(ctx: RubigoContext) -> None:
    """Show the packages recorded in rubigo.lock."""
    try:
        snapshot = load_lock(ctx.project_dir / LOCK_FILE)
    except RubigoError as exc:
        print_error(str(exc))
        logger.debug("List failed", exc_info=True)
        finish(1)

    if snapshot is None:
        print_warning(f"No {LOCK_FILE} found, run `rubigo sync` first")
        finish(0)

    rows = _lock_rows(snapshot)
    if not rows:
        print_warning("No packages locked")
        finish(0)

    print_table(
        rows,
        title="Locked Packages",
        column_styles={
            "Package": {"style": "bold cyan", "no_wrap": True},
            "Version": {"justify": "center"},
            "Ref": {"justify": "center", "style": "dim"},
            "Commit": {"justify": "center", "style": "dim"},
        },
    )
    finish(0)
