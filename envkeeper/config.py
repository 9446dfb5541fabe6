"""Configuration file loader for envkeeper.

Supports two formats:

- ``envkeeper.toml``: settings under ``[envkeeper]`` table
- ``pyproject.toml``: settings under ``[tool.envkeeper]`` table

Discovery order:

1. Explicit path from ``--config`` or ``ENVKEEPER_CONFIG``
2. ``envkeeper.toml`` in current directory
3. ``pyproject.toml`` with ``[tool.envkeeper]`` section

Configuration precedence: defaults < config file < CLI args.

Relative paths in a config file are interpreted relative to the directory
containing that file.

Example (``envkeeper.toml``)::

    [envkeeper]
    base_path = "environments"
    registry_path = "registry.json"
    upgrade_pip = true
"""

from __future__ import annotations

import tomli as tomllib
from pathlib import Path
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from envkeeper.exceptions import ConfigError
from envkeeper.utils.logger import get_logger
from envkeeper.constants import (
    DEFAULT_BASE_PATH,
    DEFAULT_REGISTRY_PATH,
    DEFAULT_UPGRADE_PIP,
    DEFAULT_WRITE_REQUIREMENTS,
)

logger = get_logger("config")

_PATH_OPTIONS = ("base_path", "registry_path")
_BOOL_OPTIONS = ("upgrade_pip", "write_requirements")
_STR_OPTIONS = ("python",)


@dataclass
class EnvKeeperConfig:
    """Parsed and validated envkeeper configuration.

    All fields have defaults, so empty config files are valid.

    Attributes:
        base_path: Directory under which project environments are created.
        registry_path: JSON registry file used by ``resolve``, ``add`` and
            ``setup --resolve``.
        python: Interpreter used to create environments; ``None`` means the
            interpreter running envkeeper.
        upgrade_pip: Upgrade pip in new environments before installing.
        write_requirements: Write ``requirements.txt`` after ``setup``.
        source_path: Path to loaded config file, or ``None`` if using defaults.
    """

    base_path: Path = field(default_factory=lambda: Path(DEFAULT_BASE_PATH))
    registry_path: Path = field(default_factory=lambda: Path(DEFAULT_REGISTRY_PATH))
    python: Optional[str] = None
    upgrade_pip: bool = DEFAULT_UPGRADE_PIP
    write_requirements: bool = DEFAULT_WRITE_REQUIREMENTS

    # Metadata (not a user-facing option)
    source_path: Optional[Path] = field(default=None, repr=False)

    def to_log_dict(self) -> Dict[str, Any]:
        """Return configuration as dictionary for debug logging."""
        return {
            "base_path": str(self.base_path),
            "registry_path": str(self.registry_path),
            "python": self.python,
            "upgrade_pip": self.upgrade_pip,
            "write_requirements": self.write_requirements,
        }


def discover_config_file(explicit_path: Optional[Path] = None) -> Optional[Path]:
    """Find the configuration file to load.

    Args:
        explicit_path: Explicit config path. If provided, must exist.

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

    cwd = Path.cwd()

    envkeeper_toml = cwd / "envkeeper.toml"
    if envkeeper_toml.is_file():
        logger.debug("Found envkeeper.toml: %s", envkeeper_toml)
        return envkeeper_toml

    pyproject_toml = cwd / "pyproject.toml"
    if pyproject_toml.is_file() and _pyproject_has_envkeeper_section(pyproject_toml):
        logger.debug("Found [tool.envkeeper] in pyproject.toml: %s", pyproject_toml)
        return pyproject_toml

    logger.debug("No configuration file found")
    return None


def _pyproject_has_envkeeper_section(path: Path) -> bool:
    """Check if pyproject.toml contains a [tool.envkeeper] section.

    A broken pyproject.toml is treated as having no section, so discovery
    falls back to defaults instead of failing on an unrelated file.
    """
    try:
        raw = _read_toml(path)
    except ConfigError:
        return False
    tool = raw.get("tool", {})
    return isinstance(tool, dict) and "envkeeper" in tool


def load_config(config_path: Optional[Path] = None) -> EnvKeeperConfig:
    """Load and validate envkeeper configuration.

    Args:
        config_path: Explicit path to config file. If ``None``, uses
            auto-discovery (see :func:`discover_config_file`).

    Returns:
        Validated :class:`EnvKeeperConfig` with values from file or defaults.

    Raises:
        ConfigError: File cannot be parsed, has unknown keys, or invalid values.
    """
    resolved = discover_config_file(config_path)

    if resolved is None:
        logger.debug("No config file found, using defaults")
        return EnvKeeperConfig()

    logger.info("Loading configuration from %s", resolved)
    raw = _read_toml(resolved)

    if resolved.name == "pyproject.toml":
        tool = raw.get("tool", {})
        if not isinstance(tool, dict):
            raise ConfigError(
                f"[tool] must be a table, got {type(tool).__name__}",
                config_path=str(resolved),
                option="tool",
            )
        section = tool.get("envkeeper", {})
        table = "tool.envkeeper"
    else:
        section = raw.get("envkeeper", {})
        table = "envkeeper"

    if not isinstance(section, dict):
        raise ConfigError(
            f"[{table}] must be a table, got {type(section).__name__}",
            config_path=str(resolved),
            option=table,
        )

    if not section:
        logger.debug("Config file found but no envkeeper section, using defaults")
        return EnvKeeperConfig(source_path=resolved)

    config = _parse_section(section, config_path=str(resolved), base_dir=resolved.parent)
    config.source_path = resolved

    logger.debug("Loaded configuration: %s", config.to_log_dict())
    return config


def _read_toml(path: Path) -> Dict[str, Any]:
    """Read and parse a TOML file.

    Raises:
        ConfigError: File cannot be read or is not valid TOML.
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


def _parse_section(
    section: Dict[str, Any],
    *,
    config_path: str,
    base_dir: Optional[Path] = None,
) -> EnvKeeperConfig:
    """Validate an ``[envkeeper]`` / ``[tool.envkeeper]`` table.

    Args:
        section: Raw config dictionary from TOML file.
        config_path: Path string for error messages.
        base_dir: Directory relative paths are resolved against. ``None``
            leaves them as written.

    Raises:
        ConfigError: Unknown keys or incorrect types.
    """
    config = EnvKeeperConfig()

    known = set(_PATH_OPTIONS) | set(_BOOL_OPTIONS) | set(_STR_OPTIONS)
    unknown = set(section.keys()) - known
    if unknown:
        raise ConfigError(
            f"Unknown configuration keys: {', '.join(sorted(unknown))}",
            config_path=config_path,
        )

    for option in _BOOL_OPTIONS:
        if option in section:
            val = section[option]
            if not isinstance(val, bool):
                raise ConfigError(
                    f"{option} must be a boolean, got {type(val).__name__}",
                    config_path=config_path,
                    option=option,
                )
            setattr(config, option, val)

    for option in _PATH_OPTIONS + _STR_OPTIONS:
        if option not in section:
            continue
        val = section[option]
        if not isinstance(val, str) or not val.strip():
            raise ConfigError(
                f"{option} must be a non-empty string, got {type(val).__name__}",
                config_path=config_path,
                option=option,
            )
        if option in _PATH_OPTIONS:
            path = Path(val).expanduser()
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            setattr(config, option, path)
        else:
            setattr(config, option, val)

    return config
