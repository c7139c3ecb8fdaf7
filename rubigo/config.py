"""Configuration file loader for rubigo.

Handles discovery, loading, parsing, and validation of configuration files.
Supports two formats:

- ``rubigo.toml``: settings under ``[rubigo]`` table
- ``pyproject.toml``: settings under ``[tool.rubigo]`` table

Discovery order:

1. Explicit path from ``--config`` or ``RUBIGO_CONFIG``
2. ``rubigo.toml`` in the project directory
3. ``pyproject.toml`` with ``[tool.rubigo]`` section

Example (``rubigo.toml``)::

    [rubigo]
    vendor_dir = "vendor"
    max_workers = 8
    http_timeout = 30
    http_retries = 2
    vanity_namespaces = ["golang.org/x", "go.uber.org"]
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from rubigo.exceptions import ConfigError
from rubigo.utils.logger import get_logger
from rubigo.constants import (
    DEFAULT_MAX_RETRIES,
    DEFAULT_TIMEOUT,
    DEFAULT_VANITY_NAMESPACES,
    VENDOR_DIR,
)

logger = get_logger("config")


@dataclass
class RubigoConfig:
    """Parsed and validated rubigo configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        vendor_dir: Vendor root, relative to the project directory.
        max_workers: Fetch pool size; ``None`` uses the CPU count. The pool
            never has fewer than two workers.
        http_timeout: Seconds before an HTTP request is abandoned; ``None``
            waits indefinitely.
        http_retries: Extra attempts for failed HTTP requests.
        vanity_namespaces: Import prefixes resolved through ``go-import``
            meta tags.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    vendor_dir: str = VENDOR_DIR
    max_workers: Optional[int] = None
    http_timeout: Optional[float] = DEFAULT_TIMEOUT
    http_retries: int = DEFAULT_MAX_RETRIES
    vanity_namespaces: List[str] = field(
        default_factory=lambda: list(DEFAULT_VANITY_NAMESPACES)
    )

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging."""
        return {
            "vendor_dir": self.vendor_dir,
            "max_workers": self.max_workers,
            "http_timeout": self.http_timeout,
            "http_retries": self.http_retries,
            "vanity_namespaces": list(self.vanity_namespaces),
        }


def discover_config_file(
    explicit_path: Optional[Path] = None,
    project_dir: Optional[Path] = None,
) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.
        project_dir: Directory to search; defaults to the current directory.

    Returns:
        Resolved path to config file, or ``None`` if not found.

    Raises:
        ConfigError: Explicit path provided but does not exist.
    """
    if explicit_path is not None:
        resolved = explicit_path.resolve()
        if not resolved.is_file():
            raise ConfigError(
                f"Configuration file not found: {explicit_path}",
                config_path=str(explicit_path),
            )
        logger.debug("Using explicit config: %s", resolved)
        return resolved

    root = project_dir or Path.cwd()

    rubigo_toml = root / "rubigo.toml"
    if rubigo_toml.is_file():
        logger.debug("Found rubigo.toml: %s", rubigo_toml)
        return rubigo_toml

    pyproject_toml = root / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_rubigo_section(pyproject_toml):
        logger.debug("Found [tool.rubigo] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_rubigo_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.rubigo] section.

    Parse errors count as "no section" so a broken unrelated pyproject.toml
    does not stop rubigo.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    tool = raw.get("tool", {})
    return isinstance(tool, dict) and "rubigo" in tool


def load_config(
    config_path: Optional[Path] = None,
    project_dir: Optional[Path] = None,
) -> RubigoConfig:
    """Load and validate rubigo configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).
        project_dir: Directory searched during auto-discovery.

    Returns:
        Validated :class:`RubigoConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path, project_dir)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return RubigoConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        section = raw.get("tool", {}).get("rubigo", {})
    else:
        section = raw.get("rubigo", {})

    if not section:
        logger.debug("Config file found but no rubigo section, using defaults")
        return RubigoConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved))
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is invalid TOML.
    """
    try:
        with open(path, "rb") as fh:
            return tomllib.load(fh)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(
            f"Invalid TOML in {path.name}: {exc}",
            config_path=str(path),
        ) from exc
    except OSError as exc:
        raise ConfigError(
            f"Cannot read configuration file {path}: {exc}",
            config_path=str(path),
        ) from exc


def _is_int(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
) -> RubigoConfig:
    """Parse and validate the ``[rubigo]`` or ``[tool.rubigo]`` table.

    Raises:
        ConfigError: Unknown keys or values of the wrong type or range.
    """
    config = RubigoConfig()

    known = {
        "vendor_dir",
        "max_workers",
        "http_timeout",
        "http_retries",
        "vanity_namespaces",
    }

    unknown = set(section.keys()) - known
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    if "vendor_dir" in section:
        val = section["vendor_dir"]
        if not isinstance(val, str) or not val.strip():
            raise ConfigError(
                "vendor_dir must be a non-empty string",
                config_path=config_path,
                option="vendor_dir",
            )
        # Reconciliation deletes below this directory
        if Path(val).is_absolute() or ".." in Path(val).parts:
            raise ConfigError(
                f"vendor_dir must be a path inside the project, got {val!r}",
                config_path=config_path,
                option="vendor_dir",
            )
        config.vendor_dir = val

    if "max_workers" in section:
        val = section["max_workers"]
        if not _is_int(val) or val < 1:
            raise ConfigError(
                f"max_workers must be a positive integer, got {val!r}",
                config_path=config_path,
                option="max_workers",
            )
        config.max_workers = val

    if "http_timeout" in section:
        val = section["http_timeout"]
        if isinstance(val, bool) or not isinstance(val, (int, float)) or val <= 0:
            raise ConfigError(
                f"http_timeout must be a positive number, got {val!r}",
                config_path=config_path,
                option="http_timeout",
            )
        config.http_timeout = float(val)

    if "http_retries" in section:
        val = section["http_retries"]
        if not _is_int(val) or val < 0:
            raise ConfigError(
                f"http_retries must be a non-negative integer, got {val!r}",
                config_path=config_path,
                option="http_retries",
            )
        config.http_retries = val

    if "vanity_namespaces" in section:
        val = section["vanity_namespaces"]
        if not isinstance(val, list) or not all(
            isinstance(item, str) and item for item in val
        ):
            raise ConfigError(
                "vanity_namespaces must be a list of non-empty strings",
                config_path=config_path,
                option="vanity_namespaces",
            )
        config.vanity_namespaces = list(val)

    return config
