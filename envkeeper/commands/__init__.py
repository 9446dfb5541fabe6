"""
CLI subcommands for envkeeper.

Helpers shared by the commands that read or write the registry file live
here; each command sits in its own module.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from envkeeper.context import EnvKeeperContext
from envkeeper.core.registry import DependencyRegistry
from envkeeper.utils.logger import get_logger

logger = get_logger("commands")

#: ``--registry`` option shared by registry-aware commands.
registry_option = click.option(
    "--registry",
    "-r",
    "registry_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Registry JSON file (defaults to the configured registry_path).",
)


def registry_path_for(ctx: EnvKeeperContext, registry_path: Optional[Path]) -> Path:
    """Return the registry file to use: CLI option first, then configuration."""
    return registry_path or ctx.config.registry_path


def open_registry(path: Path, *, must_exist: bool = True) -> DependencyRegistry:
    """Load the registry at ``path``.

    With ``must_exist=False`` a missing file yields an empty registry, which
    lets ``add`` create the file on first use.

    Raises:
        RegistryLoadError: The file is missing (when required) or malformed.
    """
    registry = DependencyRegistry()
    if not must_exist and not path.exists():
        logger.info("Registry %s does not exist yet, starting empty", path)
        return registry

    registry.load(path)
    logger.info("Loaded %d package(s) from %s", len(registry), path)
    return registry
