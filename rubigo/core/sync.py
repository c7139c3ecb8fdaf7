"""Vendor synchronization for rubigo.

:class:`Synchronizer` brings the vendor tree in line with the manifest and
produces the new lock snapshot. A run has these steps:

1. **Locate** (worker pool): resolve vanity imports to a fetch URL and a
   vendor identifier.
2. **Claim** (calling thread): give each vendor directory to exactly one
   package. A package whose identifier equals or nests inside (or around)
   an identifier already claimed fails before anything is cloned.
3. **Prepare** (worker pool): clone or update each repository and work out
   which version to use. Packages recorded in the previous lock reuse
   their locked commit unless the manifest constraint changed; packages
   declaring a constraint are matched against the repository's tags.
   Everything else collects the version signals the interactive menu
   needs.
4. **Select** (calling thread): prompt for every package that still needs
   a decision, one at a time, so prompts never interleave on stdin.
5. **Checkout** (worker pool): check out each selected reference.
6. **Reconcile** (calling thread, after the join): delete packages that
   dropped out of the lock.

A failing package is logged and reported. If it was locked before, its
previous entry is carried over so its directory is left in place;
otherwise it is simply absent from the new snapshot. Only an unreadable
input stream aborts the run.
"""

from __future__ import annotations

import logging
from pathlib import Path
from dataclasses import dataclass, field
from typing import Callable, Collection, Dict, List, Optional, Union

from rubigo.config import RubigoConfig
from rubigo.constants import LOCK_FILE, MANIFEST_FILE
from rubigo.core.git import GitRepository
from rubigo.core.paths import normalize, vendor_path
from rubigo.core.vanity import VanityResolver
from rubigo.core.scheduler import FetchScheduler, TaskOutcome
from rubigo.core.reconciler import LockReconciler, ReconcileResult
from rubigo.core.manifest import load_lock, load_manifest, save_lock
from rubigo.core.version_resolver import VersionResolver, VersionSignals
from rubigo.exceptions import RubigoError, SourceControlError
from rubigo.models.constraint import VersionChoice, VersionConstraint
from rubigo.models.lock import GitEntry, LockSnapshot
from rubigo.models.manifest import Manifest, ManifestEntry
from rubigo.utils.console import Interaction
from rubigo.utils.http import HTTPClient
from rubigo.utils.logger import get_logger

__all__ = ["PackagePlan", "PackageTarget", "SyncReport", "Synchronizer"]

RepositoryFactory = Callable[..., GitRepository]


@dataclass
class PackageTarget:
    """Where a declared package is fetched from and vendored to."""

    entry: ManifestEntry
    declared: str
    identifier: str
    url: str

    def overlaps(self, other: "PackageTarget") -> bool:
        """Return ``True`` if both targets would write to the same tree."""
        mine, theirs = self.identifier, other.identifier
        return mine == theirs or mine.startswith(theirs + "/") or theirs.startswith(mine + "/")


@dataclass
class PackagePlan:
    """Everything known about one package between prepare and checkout."""

    declared: str
    identifier: str
    url: str
    repository: GitRepository
    choice: Optional[VersionChoice] = None
    pin: Optional[str] = None
    signals: Optional[VersionSignals] = None

    @property
    def checkout_ref(self) -> str:
        assert self.choice is not None
        return self.pin or self.choice.ref


@dataclass
class SyncReport:
    """Outcome of a synchronization run."""

    snapshot: LockSnapshot
    previous: Optional[LockSnapshot] = None
    fetched: List[GitEntry] = field(default_factory=list)
    cancelled: List[str] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    reconcile: ReconcileResult = field(default_factory=ReconcileResult)
    identifiers: Dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failed and not self.reconcile.failed

    def fetched_entry(self, import_path: str) -> Optional[GitEntry]:
        """Return the entry fetched for a declared import path, if any."""
        identifier = self.identifiers.get(normalize(import_path), normalize(import_path))
        for entry in self.fetched:
            if entry.import_path == identifier:
                return entry
        return None


class Synchronizer:
    """Synchronize a project's vendor tree with its manifest.

    Args:
        project_dir: Directory holding the manifest, lock and vendor root.
        config: Loaded configuration; defaults are used when omitted.
        http_client: Client for vanity lookups; built from ``config`` if
            omitted.
        interaction: Prompt handle for version selection.
        repository_factory: ``(url, dest, logger) -> GitRepository``;
            defaults to :meth:`GitRepository.clone_or_update`.
        logger: Logger for progress and error output.
    """

    def __init__(
        self,
        project_dir: Union[str, Path] = ".",
        *,
        config: Optional[RubigoConfig] = None,
        http_client: Optional[HTTPClient] = None,
        interaction: Optional[Interaction] = None,
        repository_factory: Optional[RepositoryFactory] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.project_dir = Path(project_dir)
        self.config = config or RubigoConfig()
        self.logger = logger or get_logger("core.sync")
        self.vendor_root = self.project_dir / self.config.vendor_dir
        self.http_client = http_client or HTTPClient(
            timeout=self.config.http_timeout,
            max_retries=self.config.http_retries,
        )
        self.vanity = VanityResolver(
            self.http_client,
            self.config.vanity_namespaces,
            logger=self.logger,
        )
        self.resolver = VersionResolver(interaction or Interaction(), logger=self.logger)
        self.reconciler = LockReconciler(self.vendor_root, logger=self.logger)
        self.repository_factory = repository_factory or GitRepository.clone_or_update

    @property
    def manifest_path(self) -> Path:
        return self.project_dir / MANIFEST_FILE

    @property
    def lock_path(self) -> Path:
        return self.project_dir / LOCK_FILE

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def run(
        self,
        *,
        refresh: Optional[Collection[str]] = None,
        refresh_all: bool = False,
    ) -> SyncReport:
        """Load the manifest and lock, synchronize, and write the new lock."""
        manifest = load_manifest(self.manifest_path)
        previous = load_lock(self.lock_path)

        try:
            report = self.sync(manifest, previous, refresh=refresh, refresh_all=refresh_all)
        finally:
            self.http_client.close()

        save_lock(self.lock_path, report.snapshot)
        self.logger.info("Write lock file %s", self.lock_path.name)
        return report

    def sync(
        self,
        manifest: Manifest,
        previous: Optional[LockSnapshot],
        *,
        refresh: Optional[Collection[str]] = None,
        refresh_all: bool = False,
    ) -> SyncReport:
        """Synchronize the vendor tree and return the resulting report.

        Args:
            manifest: Declared dependencies.
            previous: Last persisted snapshot, ``None`` on a first run.
            refresh: Identifiers to resolve again, ignoring their lock entry.
            refresh_all: Resolve every package again.

        Raises:
            InteractionError: A version prompt could not read its answer.
        """
        refreshed = {normalize(item) for item in refresh or ()}
        failed: Dict[str, str] = {}
        cancelled: List[str] = []

        entries = self._unique_entries(manifest, failed)

        with FetchScheduler(self.config.max_workers, logger=self.logger) as scheduler:
            for entry in entries:
                scheduler.submit(normalize(entry.import_path), self._locate, entry)
            targets = self._claim(self._collect(scheduler.join(), failed), failed)
            identifiers = {target.declared: target.identifier for target in targets}

            for target in targets:
                scheduler.submit(
                    target.identifier,
                    self._prepare,
                    target,
                    previous,
                    refresh_all or bool({target.declared, target.identifier} & refreshed),
                )
            plans = self._collect(scheduler.join(), failed)

            plans = self._select(plans, failed, cancelled)

            for plan in plans:
                scheduler.submit(plan.identifier, self._checkout, plan)
            fetched: List[GitEntry] = self._collect(scheduler.join(), failed)

        snapshot = self._build_snapshot(manifest, previous, fetched, failed, cancelled)
        reconcile = self.reconciler.reconcile(previous, snapshot)

        return SyncReport(
            snapshot=snapshot,
            previous=previous,
            fetched=fetched,
            cancelled=cancelled,
            failed=failed,
            reconcile=reconcile,
            identifiers=identifiers,
        )

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def _unique_entries(
        self,
        manifest: Manifest,
        failed: Dict[str, str],
    ) -> List[ManifestEntry]:
        entries: List[ManifestEntry] = []
        seen = set()
        for entry in manifest.git:
            key = normalize(entry.import_path)
            if key in seen:
                failed[key] = "declared more than once"
                self.logger.error("%s: declared more than once", key)
                continue
            seen.add(key)
            entries.append(entry)
        return entries

    def _locate(self, entry: ManifestEntry) -> PackageTarget:
        import_path = normalize(entry.import_path)

        if entry.repo:
            url, identifier = entry.repo, import_path
        else:
            url, canonical = self.vanity.resolve(import_path)
            identifier = canonical or import_path

        vendor_path(identifier, self.vendor_root)
        return PackageTarget(entry=entry, declared=import_path, identifier=identifier, url=url)

    def _claim(
        self,
        targets: List[PackageTarget],
        failed: Dict[str, str],
    ) -> List[PackageTarget]:
        claimed: List[PackageTarget] = []
        for target in targets:
            owner = next((other for other in claimed if target.overlaps(other)), None)
            if owner is not None:
                message = f"resolves to {target.identifier}, which overlaps {owner.identifier}"
                failed[target.declared] = message
                self.logger.error("%s: %s", target.declared, message)
                continue
            claimed.append(target)
        return claimed

    def _prepare(
        self,
        target: PackageTarget,
        previous: Optional[LockSnapshot],
        refresh: bool,
    ) -> PackagePlan:
        entry, identifier, url = target.entry, target.identifier, target.url

        dest = vendor_path(identifier, self.vendor_root)
        self.logger.info("Fetch package %s", identifier)
        repository = self.repository_factory(url, dest, self.logger)
        plan = PackagePlan(
            declared=target.declared,
            identifier=identifier,
            url=url,
            repository=repository,
        )

        locked = previous.find(identifier) if previous is not None else None
        if locked is not None and locked.ref and not refresh and self._lock_matches(entry, locked):
            plan.choice = VersionChoice(locked.ref, locked.version or locked.ref)
            plan.pin = locked.commit
        elif entry.version:
            try:
                constraint = VersionConstraint.parse(entry.version)
            except ValueError as exc:
                raise RubigoError(f"Invalid version constraint: {exc}") from exc
            plan.choice = self.resolver.from_constraint(constraint, repository.tags())
            if plan.choice is None:
                raise SourceControlError(
                    f"No version satisfies {constraint}",
                    repository=url,
                    command="tag",
                )
        else:
            plan.signals = repository.signals()

        return plan

    def _lock_matches(self, entry: ManifestEntry, locked: GitEntry) -> bool:
        """Return ``False`` once the manifest constraint differs from the locked one."""
        if not entry.version:
            return True
        try:
            declared = str(VersionConstraint.parse(entry.version))
        except ValueError:
            return False
        if declared == locked.version:
            return True
        self.logger.info(
            "Constraint for %s changed from %s to %s", entry.import_path, locked.version, declared
        )
        return False

    def _select(
        self,
        plans: List[PackagePlan],
        failed: Dict[str, str],
        cancelled: List[str],
    ) -> List[PackagePlan]:
        selected: List[PackagePlan] = []
        for plan in plans:
            if plan.choice is None and plan.signals is not None:
                if plan.signals.latest_commit is None:
                    failed[plan.identifier] = "repository has no commits"
                    self.logger.error("%s: repository has no commits", plan.identifier)
                    continue
                plan.choice = self.resolver.prompt(plan.signals, plan.identifier)
                if plan.choice is None:
                    cancelled.append(plan.identifier)
                    continue
            selected.append(plan)
        return selected

    def _checkout(self, plan: PackagePlan) -> GitEntry:
        assert plan.choice is not None
        commit = plan.repository.checkout(plan.checkout_ref)
        self.logger.info("Checkout %s %s", plan.identifier, plan.choice.constraint)
        return GitEntry(
            import_path=plan.identifier,
            repo=plan.url,
            version=plan.choice.constraint,
            ref=plan.choice.ref,
            commit=commit,
        )

    def _collect(self, outcomes: List[TaskOutcome], failed: Dict[str, str]) -> list:
        results = []
        for outcome in outcomes:
            if outcome.ok:
                results.append(outcome.result)
                continue
            error = outcome.error
            if not isinstance(error, (RubigoError, OSError, ValueError)):
                raise error
            failed[outcome.key] = str(error)
            self.logger.error("%s: %s", outcome.key, error)
        return results

    def _build_snapshot(
        self,
        manifest: Manifest,
        previous: Optional[LockSnapshot],
        fetched: List[GitEntry],
        failed: Dict[str, str],
        cancelled: List[str],
    ) -> LockSnapshot:
        git: List[GitEntry] = list(fetched)
        seen = {entry.import_path for entry in fetched}

        if previous is not None:
            for identifier in [*failed, *cancelled]:
                stale = previous.find(identifier)
                if stale is not None and identifier not in seen:
                    self.logger.warning("Keeping previous lock entry for %s", identifier)
                    seen.add(identifier)
                    git.append(stale)

        local: List[str] = []
        for path in manifest.local:
            if path in local:
                continue
            try:
                present = vendor_path(path, self.vendor_root).is_dir()
            except ValueError as exc:
                failed[path] = str(exc)
                self.logger.error("%s: %s", path, exc)
                continue
            local.append(path)
            if not present:
                self.logger.warning("Local package %s is missing from %s", path, self.vendor_root)

        return LockSnapshot(git=git, local=local)
