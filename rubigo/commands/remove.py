"""Remove command implementation for rubigo.

Drops a git or local package from ``rubigo.json`` and synchronizes, which
deletes its directory from ``vendor`` and its entry from ``rubigo.lock``.

Typical usage::

    $ rubigo remove github.com/pkg/errors
    $ rubigo remove github.com/pkg/errors -y
"""

from __future__ import annotations

from typing import Optional

import click

from rubigo.core.paths import normalize
from rubigo.exceptions import ManifestError, RubigoError
from rubigo.context import pass_context, RubigoContext
from rubigo.models.manifest import Manifest
from rubigo.core.manifest import load_manifest, save_manifest
from rubigo.commands.common import build_synchronizer, finish, render_report
from rubigo.utils import Interaction, get_logger, print_error, print_warning


logger = get_logger("commands.remove")


def _declared_name(manifest: Manifest, import_path: str) -> Optional[str]:
    """Return the manifest spelling of ``import_path``, ignoring URL schemes."""
    wanted = normalize(import_path).rstrip("/")
    for entry in manifest.git:
        if normalize(entry.import_path).rstrip("/") == wanted:
            return entry.import_path
    for path in manifest.local:
        if path.rstrip("/") == wanted:
            return path
    return None


@click.command()
@click.argument("import_path", metavar="IMPORT")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation.")
@pass_context
def remove(ctx: RubigoContext, import_path: str, yes: bool) -> None:
    """Remove IMPORT from rubigo.json and from the vendor tree."""
    interaction = Interaction()
    synchronizer = build_synchronizer(ctx, interaction)

    try:
        manifest = load_manifest(synchronizer.manifest_path)
        declared = _declared_name(manifest, import_path)
        if declared is None:
            raise ManifestError(
                f"Package is not declared: {import_path}",
                file_path=str(synchronizer.manifest_path),
            )

        if not yes and not interaction.confirm(f"Remove {declared}?"):
            print_warning("Nothing removed")
            finish(0)

        manifest.remove(declared)
        save_manifest(synchronizer.manifest_path, manifest)
        logger.info("Removed %s from %s", declared, synchronizer.manifest_path.name)

        report = synchronizer.run()
    except RubigoError as exc:
        print_error(str(exc))
        logger.debug("Remove failed", exc_info=True)
        finish(1)

    render_report(report)
    finish(0 if report.ok else 1)
