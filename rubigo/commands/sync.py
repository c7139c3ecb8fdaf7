"""Sync command implementation for rubigo.

Installs every package declared in ``rubigo.json`` into the vendor tree.
Packages already in ``rubigo.lock`` are checked out at their locked
commit; new packages are resolved from their declared constraint or, when
they have none, interactively. Packages that dropped out of the manifest
are removed from ``vendor``.

Typical usage::

    $ rubigo sync
    $ rubigo -C path/to/project -v sync
"""

from __future__ import annotations

import click

from rubigo.exceptions import RubigoError
from rubigo.context import pass_context, RubigoContext
from rubigo.commands.common import build_synchronizer, finish, render_report
from rubigo.utils import get_logger, print_error, print_success

logger = get_logger("commands.sync")


@click.command()
@pass_context
def sync(ctx: RubigoContext) -> None:
    """Install the packages declared in rubigo.json.

    Exits with 1 if any package could not be fetched or removed.
    """
    try:
        report = build_synchronizer(ctx).run()
    except RubigoError as exc:
        print_error(str(exc))
        logger.debug("Sync failed", exc_info=True)
        finish(1)

    render_report(report)
    if report.ok:
        print_success(f"{len(report.snapshot)} package(s) in sync")
    finish(0 if report.ok else 1)
