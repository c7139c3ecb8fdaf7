"""Lock reconciliation for rubigo.

After a synchronization run produces a new :class:`LockSnapshot`,
:class:`LockReconciler` compares it with the previous one and deletes from
the vendor tree every package that only the previous snapshot knows about.

Git entries are matched by import identifier and local entries by path;
the two partitions are diffed independently. Removing a package deletes its
directory and then prunes each ancestor that became empty, stopping at the
first one that cannot be removed and never going above the vendor root.

A failure to delete one package is logged and recorded in the returned
:class:`ReconcileResult`; the remaining packages are still processed. The
final state of the vendor tree does not depend on processing order.
"""

from __future__ import annotations

import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Set, Union

from rubigo.constants import VENDOR_DIR
from rubigo.core.paths import vendor_path
from rubigo.exceptions import FileOperationError
from rubigo.models.lock import LockSnapshot
from rubigo.utils.logger import get_logger
from rubigo.utils.filesystem import prune_empty_parents, remove_tree

__all__ = ["LockReconciler", "ReconcileResult", "stale_packages"]


@dataclass
class ReconcileResult:
    """What a reconciliation pass did.

    Attributes:
        removed: Identifiers whose directories were deleted.
        failed: Identifier to error message for deletions that failed.
        kept: Identifiers not deleted because a locked package lives inside.
    """

    removed: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    kept: List[str] = field(default_factory=list)


def stale_packages(old: Optional[LockSnapshot], new: LockSnapshot) -> List[str]:
    """Return identifiers present in ``old`` but absent from ``new``.

    Git entries are compared by import identifier and local entries by path.
    An absent ``old`` snapshot yields nothing. The result is sorted.
    """
    if old is None:
        return []

    stale = old.git_identifiers() - new.git_identifiers()
    stale |= old.local_paths() - new.local_paths()
    return sorted(stale)


def _is_within(child: str, parent: str) -> bool:
    return child.startswith(parent + "/")


class LockReconciler:
    """Remove vendor directories of packages dropped from the lock.

    Args:
        vendor_root: Root of the vendor tree.
        logger: Logger for progress and error output; defaults to the
            module logger.
    """

    def __init__(
        self,
        vendor_root: Union[str, Path] = VENDOR_DIR,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.vendor_root = Path(vendor_root)
        self.logger = logger or get_logger("core.reconciler")

    def reconcile(
        self,
        old: Optional[LockSnapshot],
        new: LockSnapshot,
    ) -> ReconcileResult:
        """Delete every package of ``old`` that ``new`` no longer contains."""
        result = ReconcileResult()
        stale = stale_packages(old, new)
        if not stale:
            return result

        retained: Set[str] = new.git_identifiers() | new.local_paths()

        # Sorted order puts ancestors before their descendants
        for identifier in stale:
            if any(_is_within(kept, identifier) for kept in retained):
                self.logger.warning(
                    "Keeping `%s` directory: it contains locked packages", identifier
                )
                result.kept.append(identifier)
                continue

            if any(_is_within(identifier, done) for done in result.removed):
                self.logger.debug("`%s` was removed with its parent", identifier)
                result.removed.append(identifier)
                continue

            error = self._remove(identifier)
            if error is None:
                result.removed.append(identifier)
            else:
                result.failed[identifier] = error

        return result

    def _remove(self, identifier: str) -> Optional[str]:
        """Remove ``identifier``; return an error message on failure."""
        try:
            package_dir = vendor_path(identifier, self.vendor_root)
            remove_tree(package_dir)
        except (ValueError, FileOperationError) as exc:
            message = f"unable to delete `{identifier}` directory: {exc}"
            self.logger.error(message)
            return message

        self.logger.info("Remove package %s", identifier)
        for pruned in prune_empty_parents(package_dir, stop_at=self.vendor_root):
            self.logger.debug("Remove empty directory %s", pruned)
        return None
