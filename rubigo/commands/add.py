"""Add command implementation for rubigo.

Declares a new git dependency in ``rubigo.json`` and synchronizes. If the
package cannot be fetched, or its version selection is cancelled, the
manifest is restored.

Typical usage::

    $ rubigo add github.com/pkg/errors
    $ rubigo add github.com/pkg/errors --version "^0.9.1"
    $ rubigo add example.com/lib --repo https://git.example.com/lib.git
"""

from __future__ import annotations

from typing import Optional

import click

from rubigo.core.paths import normalize
from rubigo.exceptions import ManifestError, RubigoError
from rubigo.context import pass_context, RubigoContext
from rubigo.models.constraint import VersionConstraint
from rubigo.core.sync import SyncReport
from rubigo.models.lock import GitEntry
from rubigo.models.manifest import ManifestEntry
from rubigo.core.manifest import load_manifest, save_manifest
from rubigo.commands.common import build_synchronizer, finish, render_report
from rubigo.utils import get_logger, print_error, print_success


logger = get_logger("commands.add")


def _validate_constraint(
    ctx: click.Context, param: click.Parameter, value: Optional[str]
) -> Optional[str]:
    if value is None:
        return None
    try:
        VersionConstraint.parse(value)
    except ValueError as exc:
        raise click.BadParameter(str(exc)) from exc
    return value.strip()


@click.command()
@click.argument("import_path", metavar="IMPORT")
@click.option(
    "--version",
    "version",
    callback=_validate_constraint,
    help="Version constraint (~1.2.0, ^1.2.0, =1.2.0, a branch or a commit).",
)
@click.option("--repo", help="Repository URL, skipping vanity resolution.")
@pass_context
def add(
    ctx: RubigoContext,
    import_path: str,
    version: Optional[str],
    repo: Optional[str],
) -> None:
    """Declare IMPORT in rubigo.json and fetch it."""
    import_path = normalize(import_path).rstrip("/")
    synchronizer = build_synchronizer(ctx)
    report: Optional[SyncReport] = None
    added: Optional[GitEntry] = None

    try:
        manifest = load_manifest(synchronizer.manifest_path)
        try:
            manifest.add(ManifestEntry(import_path, version, repo))
        except ValueError as exc:
            raise ManifestError(str(exc), file_path=str(synchronizer.manifest_path)) from exc
        save_manifest(synchronizer.manifest_path, manifest)

        try:
            report = synchronizer.run()
            added = report.fetched_entry(import_path)
        finally:
            if added is None:
                manifest.remove(import_path)
                save_manifest(synchronizer.manifest_path, manifest)
                logger.info("Reverted manifest entry for %s", import_path)
    except RubigoError as exc:
        print_error(str(exc))
        logger.debug("Add failed", exc_info=True)
        finish(1)

    render_report(report)
    if added is None:
        print_error(f"{import_path} was not added")
        finish(1)

    print_success(f"Added {added.import_path} {added.version}")
    finish(0 if report.ok else 1)
