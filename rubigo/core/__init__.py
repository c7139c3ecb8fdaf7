"""
Core functionality exports for rubigo.

This module provides convenient access to the core subsystems of rubigo.
Importing from here keeps user-facing imports clean and stable:

    from rubigo.core import Synchronizer
"""

from __future__ import annotations

from rubigo.core.paths import normalize, vendor_path
from rubigo.core.vanity import VanityResolver
from rubigo.core.scheduler import FetchScheduler, TaskOutcome, worker_count
from rubigo.core.version_resolver import VersionResolver, VersionSignals
from rubigo.core.reconciler import LockReconciler, ReconcileResult, stale_packages
from rubigo.core.git import GitRepository
from rubigo.core.sync import SyncReport, Synchronizer

__all__ = [
    "FetchScheduler",
    "GitRepository",
    "LockReconciler",
    "ReconcileResult",
    "SyncReport",
    "Synchronizer",
    "TaskOutcome",
    "VanityResolver",
    "VersionResolver",
    "VersionSignals",
    "normalize",
    "stale_packages",
    "vendor_path",
    "worker_count",
]
