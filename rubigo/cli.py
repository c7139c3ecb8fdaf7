"""
Command-line interface for rubigo.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path
from typing import Optional

import click

from rubigo.config import load_config
from rubigo.__version__ import __version__
from rubigo.context import RubigoContext
from rubigo.exceptions import ConfigError, RubigoError
from rubigo.utils.logger import get_logger, setup_logging, verbosity_to_level
from rubigo.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="RUBIGO_CONFIG",
)
@click.option(
    "--project-dir",
    "-C",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=Path("."),
    help="Project directory containing rubigo.json.",
)
@click.option(
    "--verbose",
    "-v",
    count=True,
    help="Increase verbosity (can be repeated: -v, -vv).",
)
@click.option(
    "--color/--no-color",
    default=True,
    help="Enable or disable colored output.",
    envvar="RUBIGO_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="rubigo",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    project_dir: Path,
    verbose: int,
    color: bool,
) -> None:
    """rubigo: vendor Go dependencies and keep rubigo.lock in sync.

    \b
    Available commands:
      rubigo sync                  Install everything in rubigo.json
      rubigo update [IMPORT...]    Choose new versions
      rubigo add IMPORT            Declare and fetch a package
      rubigo remove IMPORT         Drop a package from vendor
      rubigo list                  Show the lock file

    Use ``rubigo COMMAND --help`` for command-specific options.
    """
    # Respect NO_COLOR for downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    level = verbosity_to_level(verbose)
    setup_logging(level=level, verbose=verbose > 1)

    try:
        loaded_config = load_config(config, project_dir)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    rubigo_ctx = RubigoContext()
    rubigo_ctx.project_dir = project_dir
    rubigo_ctx.config_path = loaded_config.source_path
    rubigo_ctx.config = loaded_config
    rubigo_ctx.color = color
    rubigo_ctx.verbose = verbose
    ctx.obj = rubigo_ctx

    logger.debug("rubigo v%s", __version__)
    logger.debug("Project directory: %s", project_dir.resolve())
    if loaded_config.source_path:
        logger.debug("Loaded configuration: %s", loaded_config.to_log_dict())


# Register CLI subcommands
try:
    from rubigo.commands.add import add
    from rubigo.commands.sync import sync
    from rubigo.commands.remove import remove
    from rubigo.commands.update import update
    from rubigo.commands.listing import list_packages

    cli.add_command(sync)
    cli.add_command(update)
    cli.add_command(add)
    cli.add_command(remove)
    cli.add_command(list_packages)

except ImportError as exc:
    sys.stderr.write(f"FATAL: Failed to import CLI commands: {exc}\n")
    sys.exit(1)


def main() -> int:
    """Main entry point for the rubigo CLI.

    Returns:
        Exit code:
            0   Success
            1   Application error or a package failed
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        result = cli(standalone_mode=False)
        return result if isinstance(result, int) else 0

    except click.exceptions.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except RubigoError as exc:
        print_error(str(exc))
        logger.debug(
            "RubigoError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
