"""Setup command implementation for envkeeper.

Creates ``<base_path>/<PROJECT>/.venv``, installs the requested packages
into it and writes ``requirements.txt`` from ``pip freeze``.

With ``--resolve`` the requested names are first expanded through the
registry into a dependency-first install order, and every package is
pinned to its registry version. A version given on the command line
(``flask==3.0.0``) overrides the registry version for that package.

Typical usage::

    $ envkeeper setup my_first_project requests flask
    $ envkeeper setup api flask==3.0.0 --resolve --upgrade-pip
    $ envkeeper setup scratch httpx --base-path /tmp/envs --no-requirements
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Dict, List, Optional, Tuple

import click
from packaging.requirements import InvalidRequirement, Requirement

from envkeeper.constants import LATEST_LABEL
from envkeeper.exceptions import EnvKeeperError
from envkeeper.core import (
    DependencyRegistry,
    DependencyResolver,
    EnvironmentManager,
    PackageSpec,
)
from envkeeper.context import EnvKeeperContext, pass_context
from envkeeper.commands import open_registry, registry_option, registry_path_for
from envkeeper.utils import (
    get_logger,
    print_error,
    print_info,
    print_success,
    print_table,
)

logger = get_logger("commands.setup")


def parse_package_spec(text: str) -> PackageSpec:
    """Parse ``name`` or ``name==version`` into a ``(name, version)`` pair.

    Raises:
        click.BadParameter: The text is not a requirement, it carries
            extras, an environment marker or a URL, or it uses a specifier
            other than a single exact pin.
    """
    try:
        requirement = Requirement(text)
    except InvalidRequirement as exc:
        raise click.BadParameter(f"invalid package {text!r}: {exc}") from exc

    if requirement.extras:
        raise click.BadParameter(f"extras are not supported, got {text!r}")
    if requirement.marker is not None:
        raise click.BadParameter(f"environment markers are not supported, got {text!r}")
    if requirement.url:
        raise click.BadParameter(f"URL requirements are not supported, got {text!r}")

    specs = list(requirement.specifier)
    if not specs:
        return requirement.name, None
    if len(specs) == 1 and specs[0].operator == "==":
        return requirement.name, specs[0].version

    raise click.BadParameter(
        f"only exact pins (name==version) are supported, got {text!r}"
    )


@click.command()
@click.argument("project")
@click.argument("packages", nargs=-1, required=True)
@click.option(
    "--base-path",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding project environments (default from config).",
)
@click.option(
    "--resolve/--no-resolve",
    "use_registry",
    default=False,
    help="Expand PACKAGES through the registry into install order.",
)
@registry_option
@click.option(
    "--upgrade-pip/--no-upgrade-pip",
    default=None,
    help="Upgrade pip before installing (default from config).",
)
@click.option(
    "--requirements/--no-requirements",
    "write_requirements",
    default=None,
    help="Write requirements.txt after installing (default from config).",
)
@pass_context
def setup(
    ctx: EnvKeeperContext,
    project: str,
    packages: Tuple[str, ...],
    base_path: Optional[Path],
    use_registry: bool,
    registry_path: Optional[Path],
    upgrade_pip: Optional[bool],
    write_requirements: Optional[bool],
) -> None:
    """Create PROJECT's environment and install PACKAGES into it.

    PACKAGES are names, optionally pinned as ``name==version``.
    """
    config = ctx.config
    specs = [parse_package_spec(text) for text in packages]

    try:
        if use_registry:
            specs = _expand_with_registry(
                specs, open_registry(registry_path_for(ctx, registry_path))
            )

        _display_plan(project, specs)

        manager = EnvironmentManager(base_path or config.base_path, python=config.python)
        venv_path = manager.setup_project(
            project,
            specs,
            upgrade_pip=config.upgrade_pip if upgrade_pip is None else upgrade_pip,
            write_requirements=(
                config.write_requirements
                if write_requirements is None
                else write_requirements
            ),
        )
    except EnvKeeperError as e:
        print_error(f"{e}")
        sys.exit(1)

    print_success(f"Project setup successfully at {venv_path}")


def _expand_with_registry(
    specs: List[PackageSpec],
    registry: DependencyRegistry,
) -> List[PackageSpec]:
    """Replace requested specs by the full install order from ``registry``."""
    overrides: Dict[str, Optional[str]] = {name: version for name, version in specs}
    order = DependencyResolver(registry).resolve_many(name for name, _ in specs)

    expanded: List[PackageSpec] = []
    for name in order:
        version = overrides.get(name) or registry.lookup(name).version or None
        expanded.append((name, version))

    logger.debug("Expanded %d requested package(s) to %d", len(specs), len(expanded))
    return expanded


def _display_plan(project: str, specs: List[PackageSpec]) -> None:
    print_info(f"Setting up {project} with {len(specs)} package(s)")
    print_table(
        [
            {"#": index, "Package": name, "Version": version or LATEST_LABEL}
            for index, (name, version) in enumerate(specs, start=1)
        ],
        title="Install Plan",
        column_styles={
            "#": {"justify": "right", "style": "dim"},
            "Package": {"style": "bold cyan", "no_wrap": True},
        },
    )
