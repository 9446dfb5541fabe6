"""Freeze command implementation for envkeeper.

Shows what ``pip freeze`` reports for a project environment. The JSON
output uses the registry record shape, so it can seed a registry file.

Typical usage::

    $ envkeeper freeze my_first_project
    $ envkeeper freeze my_first_project --format json > installed.json
"""

from __future__ import annotations

import sys
import json
from pathlib import Path
from typing import Optional

import click

from envkeeper.constants import LATEST_LABEL
from envkeeper.core import EnvironmentManager
from envkeeper.exceptions import EnvKeeperError, EnvPathError
from envkeeper.context import EnvKeeperContext, pass_context
from envkeeper.utils import get_logger, print_error, print_table, print_warning

logger = get_logger("commands.freeze")


@click.command()
@click.argument("project")
@click.option(
    "--base-path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding project environments (default from config).",
)
@click.option(
    "--format",
    "-f",
    "output_format",
    type=click.Choice(["table", "json"], case_sensitive=False),
    default="table",
    help="Output format. JSON output is a valid registry file.",
)
@pass_context
def freeze(
    ctx: EnvKeeperContext,
    project: str,
    base_path: Optional[Path],
    output_format: str,
) -> None:
    """Show packages installed in PROJECT's environment."""
    try:
        manager = EnvironmentManager(
            base_path or ctx.config.base_path, python=ctx.config.python
        )
        venv_path = manager.venv_path(project)
        if not venv_path.is_dir():
            raise EnvPathError(f"No environment found for {project} at {venv_path}")
        installed = manager.snapshot_installed(venv_path)
    except EnvKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    if output_format.lower() == "json":
        click.echo(json.dumps([pkg.to_dict() for pkg in installed], indent=2))
        return

    if not installed:
        print_warning(f"No packages installed in {venv_path}")
        return

    print_table(
        [
            {"Package": pkg.name, "Version": pkg.version or LATEST_LABEL}
            for pkg in installed
        ],
        title=f"Installed in {project}",
        column_styles={"Package": {"style": "bold cyan", "no_wrap": True}},
    )
