"""Git operations used by rubigo.

A thin wrapper around the ``git`` executable: clone or update a package
repository in its vendor directory, report the version signals the
resolver needs and check out the selected reference.

Every failing command raises :class:`~rubigo.exceptions.SourceControlError`
with the sub-command and its stderr attached. Queries that only report
"nothing there" (no tags, detached HEAD) return ``None`` instead.
"""

from __future__ import annotations

import os
import logging
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from rubigo.exceptions import SourceControlError
from rubigo.utils.logger import get_logger
from rubigo.utils.version_utils import latest_tag
from rubigo.core.version_resolver import VersionSignals

__all__ = ["GitRepository"]

# Credential prompts would compete with version prompts for the terminal
_GIT_ENV = {"GIT_TERMINAL_PROMPT": "0"}


def _run_git(
    args: Sequence[str],
    *,
    cwd: Optional[Path] = None,
    repository: Optional[str] = None,
) -> str:
    """Run ``git *args`` and return stripped stdout."""
    cmd = ["git", *args]
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd) if cwd else None,
            capture_output=True,
            text=True,
            check=False,
            env={**os.environ, **_GIT_ENV},
        )
    except OSError as exc:
        raise SourceControlError(
            f"Unable to run git: {exc}",
            repository=repository,
            command=args[0],
        ) from exc

    if proc.returncode != 0:
        raise SourceControlError(
            f"git {args[0]} failed (exit {proc.returncode})",
            repository=repository,
            command=args[0],
            stderr=proc.stderr,
        )
    return proc.stdout.strip()


class GitRepository:
    """A local clone living in a package's vendor directory.

    Args:
        path: Working tree of the clone.
        logger: Logger for progress output; defaults to the module logger.
    """

    def __init__(
        self,
        path: Union[str, Path],
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.path = Path(path)
        self.logger = logger or get_logger("core.git")

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def clone(
        cls,
        url: str,
        dest: Union[str, Path],
        logger: Optional[logging.Logger] = None,
    ) -> "GitRepository":
        """Clone ``url`` into ``dest`` (parents are created)."""
        target = Path(dest)
        target.parent.mkdir(parents=True, exist_ok=True)
        _run_git(["clone", "--quiet", "--", url, str(target)], repository=url)
        return cls(target, logger)

    @classmethod
    def open(
        cls,
        path: Union[str, Path],
        logger: Optional[logging.Logger] = None,
    ) -> "GitRepository":
        """Open an existing clone.

        Raises:
            SourceControlError: ``path`` is not a git working tree.
        """
        target = Path(path)
        if not (target / ".git").exists():
            raise SourceControlError(
                "Not a git repository",
                repository=str(target),
                command="open",
            )
        return cls(target, logger)

    @classmethod
    def clone_or_update(
        cls,
        url: str,
        dest: Union[str, Path],
        logger: Optional[logging.Logger] = None,
    ) -> "GitRepository":
        """Open and fetch ``dest`` if it is already a clone, else clone ``url``."""
        if (Path(dest) / ".git").exists():
            repo = cls.open(dest, logger)
            repo.fetch()
            return repo
        return cls.clone(url, dest, logger)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def _git(self, *args: str) -> str:
        return _run_git(args, cwd=self.path, repository=str(self.path))

    def _try_git(self, *args: str) -> Optional[str]:
        try:
            return self._git(*args) or None
        except SourceControlError:
            return None

    def tags(self) -> List[str]:
        output = self._git("tag", "--list")
        return [line.strip() for line in output.splitlines() if line.strip()]

    def latest_version(self) -> Optional[Tuple[str, str]]:
        """Return ``(tag, version)`` of the highest version tag."""
        return latest_tag(self.tags())

    def latest_commit(self) -> Optional[str]:
        """Return the commit hash of HEAD, or ``None`` for an empty repository."""
        return self._try_git("rev-parse", "--verify", "--quiet", "HEAD")

    def current_branch(self) -> Optional[str]:
        """Return the checked out branch, or ``None`` when HEAD is detached."""
        return self._try_git("symbolic-ref", "--short", "--quiet", "HEAD")

    def signals(self) -> VersionSignals:
        """Collect everything the version menu is built from."""
        return VersionSignals(
            latest_commit=self.latest_commit(),
            latest_tag=self.latest_version(),
            current_branch=self.current_branch(),
        )

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def fetch(self) -> None:
        """Fetch new commits and tags from ``origin``."""
        self._git("fetch", "--quiet", "--tags", "--prune", "origin")

    def checkout(self, ref: str) -> str:
        """Check out ``ref`` and return the resulting commit hash.

        A branch that exists on ``origin`` is reset to the remote head so a
        re-run picks up new commits.
        """
        if self._try_git("rev-parse", "--verify", "--quiet", f"refs/remotes/origin/{ref}"):
            self._git("checkout", "--quiet", "-B", ref, f"origin/{ref}")
        else:
            self._git("checkout", "--quiet", ref)

        commit = self.latest_commit()
        if commit is None:
            raise SourceControlError(
                f"No commit after checking out {ref}",
                repository=str(self.path),
                command="checkout",
            )
        self.logger.debug("Checked out %s at %s in %s", ref, commit, self.path)
        return commit
