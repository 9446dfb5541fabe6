"""Add command implementation for envkeeper.

Inserts a package record into the registry file, replacing any existing
record with the same name, and writes the file back. The registry file is
created on first use.

Typical usage::

    $ envkeeper add flask --version 3.0.0 -d werkzeug -d jinja2
    $ envkeeper add markupsafe --version 2.1.3
    $ envkeeper add flask --version 3.1.0 --backup
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Optional, Tuple

import click

from envkeeper.models import Package
from envkeeper.exceptions import EnvKeeperError
from envkeeper.context import EnvKeeperContext, pass_context
from envkeeper.commands import open_registry, registry_option, registry_path_for
from envkeeper.utils import (
    get_logger,
    print_error,
    print_info,
    print_success,
    print_warning,
)

logger = get_logger("commands.add")


@click.command()
@click.argument("name")
@click.option(
    "--version",
    "version",
    default="",
    help="Version label to pin when installing (default: latest).",
)
@click.option(
    "--depends-on",
    "-d",
    "dependencies",
    multiple=True,
    help="Direct dependency name (repeatable, order is kept).",
)
@registry_option
@click.option(
    "--backup/--no-backup",
    default=False,
    help="Copy the existing registry file aside before rewriting it.",
)
@pass_context
def add(
    ctx: EnvKeeperContext,
    name: str,
    version: str,
    dependencies: Tuple[str, ...],
    registry_path: Optional[Path],
    backup: bool,
) -> None:
    """Add NAME to the registry, replacing any existing entry."""
    if not name.strip():
        raise click.BadParameter("package name must not be empty", param_hint="NAME")

    path = registry_path_for(ctx, registry_path)

    try:
        registry = open_registry(path, must_exist=False)
        replaced = name in registry
        registry.insert(Package(name=name, version=version, dependencies=list(dependencies)))

        missing = [dep for dep in dependencies if dep not in registry]
        backup_path = registry.save(path, create_backup=backup)
    except EnvKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    action = "Replaced" if replaced else "Added"
    print_success(f"{action} {name} in {path}")
    if backup_path is not None:
        print_info(f"Previous registry saved to {backup_path}")

    # Forward references are allowed; resolution will fail until they exist
    if missing:
        print_warning(f"Not yet in registry: {', '.join(missing)}")
    logger.debug("Registry now holds %d package(s)", len(registry))
