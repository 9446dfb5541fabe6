"""
Shared context object for envkeeper CLI commands.

The root Click group stores one :class:`EnvKeeperContext` per invocation;
subcommands receive it through :data:`pass_context`.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import click

from envkeeper.config import EnvKeeperConfig


class EnvKeeperContext:
    """Global context object for envkeeper CLI commands.

    Attributes:
        config_path: Path to the envkeeper configuration file, if any.
        verbose: Verbosity level (0=WARNING, 1=INFO, 2+=DEBUG).
        color: Whether colored terminal output is enabled.
        config: Loaded configuration (defaults until the group callback runs).
    """

    __slots__ = ("config_path", "verbose", "color", "config")

    def __init__(self) -> None:
        self.config_path: Optional[Path] = None
        self.verbose: int = 0
        self.color: bool = True
        self.config: EnvKeeperConfig = EnvKeeperConfig()


#: Click decorator for injecting :class:`EnvKeeperContext` into commands.
pass_context = click.make_pass_decorator(EnvKeeperContext, ensure=True)
