"""Resolve command implementation for envkeeper.

Prints the install order for one or more root packages, computed from the
registry file. Every package appears once and after all of its
dependencies.

Typical usage::

    $ envkeeper resolve flask
    $ envkeeper resolve flask requests --format json
    $ envkeeper resolve flask --registry team-registry.json --format simple
"""

from __future__ import annotations

import sys
import json
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import click

from envkeeper.models import Package
from envkeeper.core import DependencyRegistry, DependencyResolver
from envkeeper.exceptions import EnvKeeperError
from envkeeper.constants import LATEST_LABEL
from envkeeper.context import EnvKeeperContext, pass_context
from envkeeper.commands import open_registry, registry_option, registry_path_for
from envkeeper.utils import get_logger, print_error, print_table

logger = get_logger("commands.resolve")


@click.command()
@click.argument("roots", nargs=-1, required=True)
@registry_option
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "simple", "json"], case_sensitive=False),
    default="table",
    help="Output format.",
)
@pass_context
def resolve(
    ctx: EnvKeeperContext,
    roots: Tuple[str, ...],
    registry_path: Optional[Path],
    output_format: str,
) -> None:
    """Show the dependency-first install order for ROOTS.

    \b
    Exits:
        0 on success, 1 if a package is missing, a cycle exists or the
        registry cannot be read.
    """
    path = registry_path_for(ctx, registry_path)

    try:
        registry = open_registry(path)
        order = DependencyResolver(registry).resolve_many(roots)
    except EnvKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    logger.info("Resolved %d package(s) for %s", len(order), ", ".join(roots))
    _display_order(registry, order, output_format.lower())


def _display_order(
    registry: DependencyRegistry,
    order: List[str],
    output_format: str,
) -> None:
    """Print the install order in the requested format."""
    packages: List[Package] = [registry.lookup(name) for name in order]

    if output_format == "json":
        click.echo(json.dumps([pkg.to_dict() for pkg in packages], indent=2))
        return

    if output_format == "simple":
        for pkg in packages:
            click.echo(pkg.pin())
        return

    data: List[Dict[str, Any]] = [
        {
            "#": index,
            "Package": pkg.name,
            "Version": pkg.version or LATEST_LABEL,
            "Dependencies": ", ".join(pkg.dependencies) or "-",
        }
        for index, pkg in enumerate(packages, start=1)
    ]
    print_table(
        data,
        title="Install Order",
        column_styles={
            "#": {"justify": "right", "style": "dim"},
            "Package": {"style": "bold cyan", "no_wrap": True},
            "Version": {"justify": "center"},
        },
    )
