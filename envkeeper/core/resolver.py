"""Transitive dependency resolution for envkeeper.

:class:`DependencyResolver` walks the dependency edges of a
:class:`~envkeeper.core.registry.DependencyRegistry` from a root package
and returns every reachable package exactly once, in *install order*:
each package appears after all of its dependencies.

The walk is a depth-first traversal with three-colour marking. Every name
is ``UNVISITED`` until first reached, ``IN_PROGRESS`` while its children
are being explored, and ``RESOLVED`` once all of them are. A package is
appended to the result only when it becomes ``RESOLVED`` (post-order),
which is what makes the result a valid install order. Reaching a name that
is still ``IN_PROGRESS`` means the current path loops back on itself and
resolution fails with :class:`~envkeeper.exceptions.CyclicDependencyError`.

The traversal keeps its own stack instead of recursing, so long dependency
chains are not limited by the interpreter recursion limit.

Typical usage::

    resolver = DependencyResolver(registry)
    order = resolver.resolve("flask")
    # ['werkzeug', 'markupsafe', 'jinja2', 'flask']
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from envkeeper.models.package import Package
from envkeeper.utils.logger import get_logger
from envkeeper.core.registry import DependencyRegistry
from envkeeper.exceptions import CyclicDependencyError, PackageNotFoundError

logger = get_logger("core.resolver")

__all__ = [
    "DependencyResolver",
    "NodeState",
]


class NodeState(Enum):
    """Traversal state of a package name during one resolution."""

    UNVISITED = "unvisited"
    IN_PROGRESS = "in_progress"
    RESOLVED = "resolved"


# (package, iterator over its remaining dependency names)
_Frame = Tuple[Package, Iterator[str]]


class DependencyResolver:
    """Computes dependency-first install orders from a registry.

    The resolver only reads the registry; it never inserts or removes
    entries. Each call starts from fresh traversal state, so one resolver
    can be reused for any number of resolutions.

    Args:
        registry: Registry providing package lookups.
    """

    def __init__(self, registry: DependencyRegistry) -> None:
        self.registry = registry

    def resolve(self, root_name: str) -> List[str]:
        """Return all packages reachable from ``root_name`` in install order.

        Args:
            root_name: Name of the package to resolve.

        Returns:
            Package names, each exactly once, dependencies before dependents.
            The root is always last.

        Raises:
            PackageNotFoundError: ``root_name`` is empty or absent, or some
                reachable dependency is not registered.
            CyclicDependencyError: A dependency path returns to a package
                that is still being resolved.
        """
        return self.resolve_many([root_name])

    def resolve_many(self, root_names: Iterable[str]) -> List[str]:
        """Return the merged install order for several roots.

        State is shared across roots, so a package needed by more than one
        root appears once, at its first valid position.
        """
        states: Dict[str, NodeState] = {}
        order: List[str] = []

        for root_name in root_names:
            if states.get(root_name) is NodeState.RESOLVED:
                continue
            self._visit(root_name, states, order)

        return order

    def install_plan(self, root_name: str) -> List[Package]:
        """Return the registry records for :meth:`resolve`, in the same order."""
        plan: List[Package] = []
        for name in self.resolve(root_name):
            # The registry may have changed since resolve() returned
            package = self.registry.lookup(name)
            if package is None:
                raise PackageNotFoundError(name)
            plan.append(package)
        return plan

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _lookup(self, name: str, required_by: Optional[str]) -> Package:
        package = self.registry.lookup(name) if name else None
        if package is None:
            raise PackageNotFoundError(name, required_by=required_by)
        return package

    def _visit(
        self,
        root_name: str,
        states: Dict[str, NodeState],
        order: List[str],
    ) -> None:
        root = self._lookup(root_name, None)
        logger.debug("Resolving dependencies of %s", root_name)

        states[root.name] = NodeState.IN_PROGRESS
        stack: List[_Frame] = [(root, iter(root.dependencies))]

        while stack:
            package, remaining = stack[-1]
            dep_name = next(remaining, None)

            if dep_name is None:
                # Every child is resolved; emit in post-order
                stack.pop()
                states[package.name] = NodeState.RESOLVED
                order.append(package.name)
                continue

            state = states.get(dep_name, NodeState.UNVISITED)

            if state is NodeState.RESOLVED:
                continue

            if state is NodeState.IN_PROGRESS:
                path = [frame[0].name for frame in stack]
                cycle = path[path.index(dep_name):] + [dep_name]
                logger.debug("Cycle found: %s", " -> ".join(cycle))
                raise CyclicDependencyError(cycle)

            dependency = self._lookup(dep_name, package.name)
            states[dep_name] = NodeState.IN_PROGRESS
            stack.append((dependency, iter(dependency.dependencies)))

        logger.debug("Resolved %s: %d package(s) so far", root_name, len(order))
