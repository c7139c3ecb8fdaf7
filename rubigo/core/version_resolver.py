"""Interactive version selection for rubigo.

Given what a repository offers (its newest version tag, the branch checked
out after cloning and its newest commit), :class:`VersionResolver` asks the
user which constraint to record and turns the answer into a
:class:`~rubigo.models.constraint.VersionChoice`.

The menu always ends with the latest commit, which doubles as the default:

    [1] Tilde (Patch): ~1.4.2
    [2] Caret (Minor): ^1.4.2
    [3] Exact (Fixed): =1.4.2
    [4] Branch (HEAD): master
    [5] Latest commit: 9f3c2e1... (Default)

Only ``q``/``quit`` cancels. Any other answer that is not a number in range
(empty input, ``0``, ``-1``, ``abc``) selects the default.
"""

from __future__ import annotations

import re
import logging
from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Optional, Tuple

from rubigo.utils.console import Interaction
from rubigo.utils.logger import get_logger
from rubigo.models.constraint import ConstraintKind, VersionChoice, VersionConstraint

__all__ = [
    "MenuEntry",
    "VersionResolver",
    "VersionSignals",
    "build_menu",
    "parse_selection",
    "render_menu",
]

_CANCEL_TOKENS = frozenset({"q", "quit"})
_INDEX_RE = re.compile(r"^\+?[0-9]+$")


class MenuEntry(NamedTuple):
    label: str
    constraint: str
    ref: str


@dataclass(frozen=True)
class VersionSignals:
    """Version information queried from a repository.

    Attributes:
        latest_commit: Newest commit hash; ``None`` means the repository is
            unusable.
        latest_tag: ``(tag, version)`` of the newest version tag.
        current_branch: Branch checked out by the clone.
    """

    latest_commit: Optional[str]
    latest_tag: Optional[Tuple[str, str]] = None
    current_branch: Optional[str] = None


def build_menu(signals: VersionSignals) -> List[MenuEntry]:
    """Build the ordered selection menu.

    Tilde, caret and exact entries (when a tag exists), then the branch
    (when one is checked out), then the latest commit.

    Raises:
        ValueError: ``signals`` has no latest commit.
    """
    if signals.latest_commit is None:
        raise ValueError("Cannot build a version menu without a commit")

    menu: List[MenuEntry] = []

    if signals.latest_tag is not None:
        tag, version = signals.latest_tag
        menu.append(MenuEntry("Tilde (Patch)", f"~{version}", tag))
        menu.append(MenuEntry("Caret (Minor)", f"^{version}", tag))
        menu.append(MenuEntry("Exact (Fixed)", f"={version}", tag))

    if signals.current_branch is not None:
        branch = signals.current_branch
        menu.append(MenuEntry("Branch (HEAD)", branch, branch))

    commit = signals.latest_commit
    menu.append(MenuEntry("Latest commit", commit, commit))
    return menu


def render_menu(menu: List[MenuEntry], package: Optional[str] = None) -> str:
    """Render ``menu`` as 1-based numbered text ending with the question."""
    header = f"\nVersions of {package}:" if package else "\nVersions:"
    lines = [header]
    lines.extend(
        f"[{index}] {entry.label}: {entry.constraint}"
        for index, entry in enumerate(menu, start=1)
    )
    lines[-1] += " (Default)"
    lines.append("Type `q` to cancel.")
    lines.append("")
    lines.append(f"Please choose one of the following versions: [1-{len(menu)}]")
    return "\n".join(lines)


def parse_selection(answer: str, menu: List[MenuEntry]) -> Optional[MenuEntry]:
    """Interpret a raw answer against ``menu``.

    Returns:
        ``None`` for ``q``/``quit`` (any case, surrounding whitespace
        ignored), the chosen entry for an index in ``[1, len(menu)]`` and
        the last entry for anything else.
    """
    text = answer.strip().lower()
    if text in _CANCEL_TOKENS:
        return None

    if _INDEX_RE.match(text):
        index = int(text)
        if 1 <= index <= len(menu):
            return menu[index - 1]

    return menu[-1]


class VersionResolver:
    """Turn repository signals or declared constraints into a choice.

    Args:
        interaction: Prompt handle used when the user must decide.
        logger: Logger for progress output; defaults to the module logger.
    """

    def __init__(
        self,
        interaction: Interaction,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self.interaction = interaction
        self.logger = logger or get_logger("core.version_resolver")

    def prompt(
        self,
        signals: VersionSignals,
        package: Optional[str] = None,
    ) -> Optional[VersionChoice]:
        """Ask the user to pick a version.

        Returns ``None`` if the repository has no commit or the user
        cancelled. A repository offering neither tag nor branch resolves to
        its latest commit without asking.

        Raises:
            InteractionError: Standard input could not be read.
        """
        commit = signals.latest_commit
        if commit is None:
            return None

        if signals.latest_tag is None and signals.current_branch is None:
            return VersionChoice(commit, commit)

        menu = build_menu(signals)
        answer = self.interaction.ask(render_menu(menu, package))
        entry = parse_selection(answer, menu)

        if entry is None:
            self.logger.info("Version selection cancelled%s", f" for {package}" if package else "")
            return None

        return VersionChoice(entry.ref, entry.constraint)

    def from_constraint(
        self,
        constraint: VersionConstraint,
        tags: Iterable[str],
    ) -> Optional[VersionChoice]:
        """Resolve a declared constraint without asking.

        Version constraints pick the highest matching tag; branches and
        commits are used as they are.

        Returns:
            ``None`` when no tag satisfies a version constraint.
        """
        if constraint.kind in (ConstraintKind.BRANCH, ConstraintKind.COMMIT):
            return VersionChoice(constraint.value, str(constraint))

        selected = constraint.select_tag(tags)
        if selected is None:
            self.logger.debug("No tag satisfies %s", constraint)
            return None

        tag, _version = selected
        return VersionChoice(tag, str(constraint))
