"""
rubigo: vendoring dependency manager for Go projects

rubigo resolves version constraints for remote packages, fetches them into
a project-local ``vendor`` directory and keeps ``rubigo.lock`` synchronized
with the set of packages the project actually requires.

Features include:
    • Interactive version selection (tilde, caret, exact, branch, commit)
    • Vanity import resolution through the ``go-import`` meta protocol
    • Concurrent clone and checkout of independent packages
    • Lock reconciliation that prunes removed packages from ``vendor``
"""

from __future__ import annotations

from rubigo.__version__ import __version__

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "rubigo Contributors"
__license__ = "MIT"
__description__ = "Dependency vendoring and lock synchronization for Go projects."

__all__ = [
    "__version__",
]
