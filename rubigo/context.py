"""
Shared context object for rubigo CLI commands.

This module defines the Click context object used to share configuration
and runtime options across CLI subcommands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from rubigo.config import RubigoConfig


class RubigoContext:
    """Global context object for rubigo CLI commands.

    An instance of this class is created once per CLI invocation and
    passed to commands using Click's context mechanism.

    Attributes:
        project_dir: Directory holding ``rubigo.json`` and the vendor root.
        config_path: Path to the rubigo configuration file, if any.
        config: Loaded configuration (defaults until the group callback runs).
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
    """

    __slots__ = ("project_dir", "config_path", "config", "verbose", "color")

    def __init__(self) -> None:
        self.project_dir: Path = Path(".")
        self.config_path: Optional[Path] = None
        self.config: RubigoConfig = RubigoConfig()
        self.verbose: int = 0
        self.color: bool = True


#: Click decorator for injecting :class:`RubigoContext` into commands.
pass_context = click.make_pass_decorator(RubigoContext, ensure=True)
