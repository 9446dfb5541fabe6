"""Dependency registry for envkeeper.

The :class:`DependencyRegistry` is an in-memory catalog mapping package
name to :class:`~envkeeper.models.package.Package`. It is a plain value:
create one, fill it, hand it to a resolver. Nothing in envkeeper keeps a
process-wide registry.

On disk the registry is a JSON array of records::

    [
      {"name": "flask", "version": "3.0.0", "dependencies": ["werkzeug", "jinja2"]},
      {"name": "jinja2", "version": "3.1.2", "dependencies": ["markupsafe"]}
    ]

Loading is not transactional. Records are inserted one by one as they are
parsed, so when record *n* is malformed, records ``0 .. n-1`` stay in the
registry and the raised :class:`RegistryLoadError` reports index *n*.

Typical usage::

    registry = DependencyRegistry()
    registry.load("envkeeper-registry.json")
    registry.insert(Package("requests", "2.31.0", ["urllib3", "idna"]))
    registry.save("envkeeper-registry.json")
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import IO, Dict, Iterable, Iterator, List, Optional, Union

from envkeeper.models.package import Package
from envkeeper.utils.logger import get_logger
from envkeeper.constants import REGISTRY_JSON_INDENT
from envkeeper.utils.filesystem import safe_read_file, safe_write_file
from envkeeper.exceptions import (
    FileOperationError,
    RegistryLoadError,
    RegistrySaveError,
)

logger = get_logger("core.registry")

__all__ = ["DependencyRegistry"]

Source = Union[str, Path, IO[str], IO[bytes]]
Destination = Union[str, Path, IO[str]]


def _describe(stream_or_path: object) -> str:
    if isinstance(stream_or_path, (str, Path)):
        return str(stream_or_path)
    name = getattr(stream_or_path, "name", None)
    return str(name) if name else "<stream>"


class DependencyRegistry:
    """Catalog of known packages keyed by name.

    Inserting a package whose name already exists replaces the previous
    entry (last write wins).
    """

    def __init__(self) -> None:
        self._packages: Dict[str, Package] = {}

    @classmethod
    def from_packages(cls, packages: Iterable[Package]) -> "DependencyRegistry":
        """Build a registry from packages, later duplicates winning."""
        registry = cls()
        for package in packages:
            registry.insert(package)
        return registry

    # ------------------------------------------------------------------
    # Entry management
    # ------------------------------------------------------------------

    def insert(self, package: Package) -> None:
        """Store ``package`` under its name, overwriting any previous entry."""
        previous = self._packages.get(package.name)
        if previous is not None:
            logger.debug(
                "Overwriting %s %s with %s",
                package.name,
                previous.version or "<unversioned>",
                package.version or "<unversioned>",
            )
        self._packages[package.name] = package

    def lookup(self, name: str) -> Optional[Package]:
        """Return the package registered as ``name``, or ``None``."""
        return self._packages.get(name)

    def remove(self, name: str) -> Optional[Package]:
        """Remove and return the package registered as ``name``, if any."""
        return self._packages.pop(name, None)

    def clear(self) -> None:
        self._packages.clear()

    def names(self) -> List[str]:
        """Return registered names in insertion order."""
        return list(self._packages)

    def __len__(self) -> int:
        return len(self._packages)

    def __contains__(self, name: object) -> bool:
        return name in self._packages

    def __iter__(self) -> Iterator[Package]:
        return iter(list(self._packages.values()))

    def __repr__(self) -> str:
        return f"DependencyRegistry(packages={len(self._packages)})"

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    def load(self, source: Source) -> None:
        """Read package records from a file path or an open stream.

        Args:
            source: Path to a JSON registry file, or a readable text or
                binary stream.

        Raises:
            RegistryLoadError: The source cannot be read, is not valid JSON,
                is not an array, or contains a malformed record.
        """
        description = _describe(source)

        if isinstance(source, (str, Path)):
            try:
                text = safe_read_file(source)
            except FileOperationError as exc:
                raise RegistryLoadError(
                    f"Cannot read registry: {exc.message}",
                    source=description,
                    original_error=exc,
                ) from exc
        else:
            try:
                raw = source.read()
            except (OSError, ValueError) as exc:
                raise RegistryLoadError(
                    f"Cannot read registry: {exc}",
                    source=description,
                    original_error=exc,
                ) from exc
            if isinstance(raw, bytes):
                try:
                    text = raw.decode("utf-8")
                except UnicodeDecodeError as exc:
                    raise RegistryLoadError(
                        "Registry is not valid UTF-8",
                        source=description,
                        original_error=exc,
                    ) from exc
            else:
                text = raw

        self._load_text(text, description)

    def loads(self, text: str) -> None:
        """Read package records from a JSON string."""
        self._load_text(text, "<string>")

    def _load_text(self, text: str, description: str) -> None:
        try:
            records = json.loads(text)
        except json.JSONDecodeError as exc:
            raise RegistryLoadError(
                f"Invalid JSON in registry: {exc.msg} "
                f"(line {exc.lineno}, column {exc.colno})",
                source=description,
                original_error=exc,
            ) from exc
        except (ValueError, RecursionError) as exc:
            # Nesting too deep or an oversized integer literal
            raise RegistryLoadError(
                f"Invalid JSON in registry: {exc}",
                source=description,
                original_error=exc,
            ) from exc

        if not isinstance(records, list):
            raise RegistryLoadError(
                f"Registry must be a JSON array, got {type(records).__name__}",
                source=description,
            )

        for index, record in enumerate(records):
            try:
                package = Package.from_dict(record)
            except ValueError as exc:
                raise RegistryLoadError(
                    f"Malformed package record: {exc}",
                    source=description,
                    record_index=index,
                    original_error=exc,
                ) from exc
            self.insert(package)

        logger.debug("Loaded %d package record(s) from %s", len(records), description)

    # ------------------------------------------------------------------
    # Saving
    # ------------------------------------------------------------------

    def dumps(self) -> str:
        """Serialize all entries as a JSON array, sorted by name."""
        records = [
            self._packages[name].to_dict() for name in sorted(self._packages)
        ]
        return json.dumps(records, indent=REGISTRY_JSON_INDENT) + "\n"

    def save(
        self,
        destination: Destination,
        *,
        create_backup: bool = False,
    ) -> Optional[Path]:
        """Write all entries to a file path or a writable text stream.

        Paths are written atomically; the previous file is replaced only
        once the new content is fully on disk. Streams must accept ``str``.

        Args:
            destination: Registry file path or open text stream.
            create_backup: For paths, copy an existing file to
                ``<name>.<timestamp>.backup`` before replacing it.

        Returns:
            Path of the backup copy, or ``None`` if none was made.

        Raises:
            RegistrySaveError: The destination cannot be written.
        """
        description = _describe(destination)
        content = self.dumps()
        backup: Optional[Path] = None

        if isinstance(destination, (str, Path)):
            try:
                backup = safe_write_file(
                    destination, content, create_backup=create_backup
                )
            except FileOperationError as exc:
                raise RegistrySaveError(
                    f"Cannot write registry: {exc.message}",
                    destination=description,
                    original_error=exc,
                ) from exc
        else:
            try:
                destination.write(content)
            except (OSError, ValueError, TypeError) as exc:
                raise RegistrySaveError(
                    f"Cannot write registry: {exc}",
                    destination=description,
                    original_error=exc,
                ) from exc

        logger.debug("Saved %d package record(s) to %s", len(self), description)
        return backup
