"""Helpers shared by rubigo commands."""

from __future__ import annotations

from typing import NoReturn, Optional

import click

from rubigo.context import RubigoContext
from rubigo.core.sync import SyncReport, Synchronizer
from rubigo.models.constraint import VersionConstraint
from rubigo.utils.console import Interaction, print_error, print_success, print_warning


def build_synchronizer(
    ctx: RubigoContext,
    interaction: Optional[Interaction] = None,
) -> Synchronizer:
    """Create a :class:`Synchronizer` for the project in ``ctx``."""
    return Synchronizer(
        ctx.project_dir,
        config=ctx.config,
        interaction=interaction,
    )


def version_of(constraint: Optional[str]) -> Optional[str]:
    """Return the bare version of a lock ``version`` field, if it has one."""
    if not constraint:
        return None
    try:
        parsed = VersionConstraint.parse(constraint)
    except ValueError:
        return constraint
    return parsed.value


def render_report(report: SyncReport) -> None:
    """Print a summary of a synchronization run."""
    for entry in report.fetched:
        print_success(f"{entry.import_path} {entry.version}")
    for identifier in report.cancelled:
        print_warning(f"{identifier}: version selection cancelled")
    for identifier, message in report.failed.items():
        print_error(f"{identifier}: {message}")
    for identifier in report.reconcile.removed:
        print_success(f"removed {identifier}")
    for identifier, message in report.reconcile.failed.items():
        print_error(message)
    for identifier in report.reconcile.kept:
        print_warning(f"kept {identifier}: it contains locked packages")


def finish(code: int) -> NoReturn:
    """Leave the current command with ``code``."""
    click.get_current_context().exit(code)
