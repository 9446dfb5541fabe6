"""
Command-line interface for envkeeper.

This module provides the main CLI entry point and handles global options,
configuration loading, and command registration.
"""

from __future__ import annotations

import os
import sys
import logging
from pathlib import Path
from typing import Optional

import click

from envkeeper.config import load_config
from envkeeper.__version__ import __version__
from envkeeper.context import EnvKeeperContext
from envkeeper.exceptions import ConfigError, EnvKeeperError
from envkeeper.utils.logger import get_logger, setup_logging, verbosity_to_level
from envkeeper.utils.console import print_error, print_warning, reconfigure_console

logger = get_logger("cli")


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Path to configuration file.",
    envvar="ENVKEEPER_CONFIG",
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
    envvar="ENVKEEPER_COLOR",
)
@click.version_option(
    version=__version__,
    prog_name="envkeeper",
    message="%(prog)s %(version)s",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config: Optional[Path],
    verbose: int,
    color: bool,
) -> None:
    """envkeeper: virtual environments with dependency-ordered installs.

    \b
    Available commands:
      envkeeper resolve ROOT       Show the install order for a package
      envkeeper add NAME           Add or replace a registry entry
      envkeeper setup PROJECT PKG  Create an environment and install packages
      envkeeper freeze PROJECT     Show packages installed in an environment

    \b
    Examples:
      envkeeper add flask --version 3.0.0 -d werkzeug -d jinja2
      envkeeper resolve flask
      envkeeper setup my_first_project requests flask --resolve

    Use ``envkeeper COMMAND --help`` for command-specific options.
    """
    level = verbosity_to_level(verbose)
    setup_logging(level=level, verbose=verbose >= 2)
    logger.debug("Logging initialized at %s level", logging.getLevelName(level))

    try:
        loaded_config = load_config(config)
    except ConfigError as exc:
        print_error(str(exc))
        raise SystemExit(1) from exc

    envkeeper_ctx = EnvKeeperContext()
    envkeeper_ctx.config_path = config or loaded_config.source_path
    envkeeper_ctx.color = color
    envkeeper_ctx.verbose = verbose
    envkeeper_ctx.config = loaded_config
    ctx.obj = envkeeper_ctx

    # Respect NO_COLOR for downstream libraries
    if color:
        os.environ.pop("NO_COLOR", None)
    else:
        os.environ["NO_COLOR"] = "1"
    reconfigure_console()

    logger.debug("envkeeper v%s", __version__)
    logger.debug("Config path: %s", envkeeper_ctx.config_path)
    logger.debug("Configuration: %s", loaded_config.to_log_dict())


# Register CLI subcommands
try:
    from envkeeper.commands.add import add
    from envkeeper.commands.freeze import freeze
    from envkeeper.commands.resolve import resolve
    from envkeeper.commands.setup import setup

    cli.add_command(resolve)
    cli.add_command(add)
    cli.add_command(setup)
    cli.add_command(freeze)

except ImportError as exc:
    sys.stderr.write(f"FATAL: Failed to import CLI commands: {exc}\n")
    sys.exit(1)


def main() -> int:
    """Main entry point for the envkeeper CLI.

    Returns:
        Exit code:
            0   Success
            1   Unhandled or application error
            2   Usage error (Click)
            130 Interrupted by user (Ctrl+C)
    """
    try:
        cli(standalone_mode=False)
        return 0

    except click.exceptions.Abort:
        print_warning("\nOperation cancelled by user")
        return 130

    except click.ClickException as exc:
        exc.show()
        return exc.exit_code

    except EnvKeeperError as exc:
        print_error(str(exc))
        logger.debug(
            "EnvKeeperError details: %s",
            exc.details or "<none>",
            exc_info=True,
        )
        return 1

    except KeyboardInterrupt:
        print_warning("\nOperation cancelled by user")
        return 130

    except Exception as exc:
        print_error(f"Unexpected error: {exc}")
        logger.exception("Unhandled exception in CLI")
        return 1


if __name__ == "__main__":
    sys.exit(main())
