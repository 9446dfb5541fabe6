"""
Package data model for envkeeper.

A :class:`Package` is the unit stored in the dependency registry: a name,
an opaque version label and the names of its direct dependencies. The
version label is never parsed or compared; it is only passed through to
the installer as an exact pin.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping


@dataclass
class Package:
    """
    Represents a package entry in the dependency registry.

    Attributes:
        name: Registry key. Stored verbatim, lookups are exact.
        version: Opaque version label. Empty means "latest" when installing.
        dependencies: Direct dependency names, in declared order. They may
            reference packages not present in the registry.
    """

    name: str
    version: str = ""
    dependencies: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        # Copy so callers cannot mutate the stored list through their own reference
        self.dependencies = list(self.dependencies)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        """Return the record shape used by registry files."""
        return {
            "name": self.name,
            "version": self.version,
            "dependencies": list(self.dependencies),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Package":
        """
        Build a package from a registry record.

        ``version`` and ``dependencies`` may be omitted; ``name`` may not.

        Args:
            data: Mapping with ``name``, ``version`` and ``dependencies``.

        Returns:
            The parsed package.

        Raises:
            ValueError: The record is not a mapping or a field has the
                wrong type.
        """
        if not isinstance(data, Mapping):
            raise ValueError(
                f"package record must be an object, got {type(data).__name__}"
            )

        name = data.get("name")
        if not isinstance(name, str) or not name:
            raise ValueError("package record requires a non-empty string 'name'")

        version = data.get("version", "")
        if version is None:
            version = ""
        if not isinstance(version, str):
            raise ValueError(
                f"'version' of {name!r} must be a string, got {type(version).__name__}"
            )

        dependencies = data.get("dependencies", [])
        if dependencies is None:
            dependencies = []
        if not isinstance(dependencies, list) or not all(
            isinstance(dep, str) for dep in dependencies
        ):
            raise ValueError(f"'dependencies' of {name!r} must be a list of strings")

        return cls(name=name, version=version, dependencies=dependencies)

    # ------------------------------------------------------------------
    # Installer helpers
    # ------------------------------------------------------------------

    def pin(self) -> str:
        """
        Return the installer argument for this package.

        Returns:
            ``name==version`` when a version is set, otherwise ``name``.
        """
        if self.version:
            return f"{self.name}=={self.version}"
        return self.name

    def __str__(self) -> str:
        return self.pin()
