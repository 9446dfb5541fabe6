"""
Core functionality exports for envkeeper.

Importing from here keeps user-facing imports clean and stable:

    from envkeeper.core import DependencyRegistry, DependencyResolver
"""

from __future__ import annotations

from envkeeper.core.registry import DependencyRegistry
from envkeeper.core.resolver import DependencyResolver, NodeState
from envkeeper.core.environment import (
    EnvironmentManager,
    PackageSpec,
    parse_freeze_output,
)

__all__ = [
    "DependencyRegistry",
    "DependencyResolver",
    "NodeState",
    "EnvironmentManager",
    "PackageSpec",
    "parse_freeze_output",
]
