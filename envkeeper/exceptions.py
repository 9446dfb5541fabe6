"""
Custom exception hierarchy for envkeeper.

This module defines structured exception types used across envkeeper.
All exceptions inherit from :class:`EnvKeeperError` and support optional
structured metadata via the ``details`` attribute to improve diagnostics
and logging.

Hierarchy::

    EnvKeeperError
    ├── ResolutionError
    │   ├── PackageNotFoundError
    │   └── CyclicDependencyError
    ├── RegistryError
    │   ├── RegistryLoadError
    │   └── RegistrySaveError
    ├── EnvironmentProvisionError
    │   ├── VenvCreationError
    │   ├── PipInstallError
    │   └── EnvPathError
    ├── FileOperationError
    └── ConfigError
"""

from __future__ import annotations

from typing import Any, Mapping, MutableMapping, Optional, Sequence


class EnvKeeperError(Exception):
    """Base exception for all envkeeper errors.

    Args:
        message: Human-readable error message.
        details: Optional structured metadata describing the error.
    """

    __slots__ = ("message", "details")

    def __init__(
        self,
        message: str,
        details: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self.message: str = message
        # Internally normalize to a mutable dict
        self.details: MutableMapping[str, Any] = dict(details) if details else {}
        super().__init__(message)

    def __str__(self) -> str:
        if not self.details:
            return self.message
        formatted = ", ".join(f"{k}={v}" for k, v in self.details.items())
        return f"{self.message} ({formatted})"

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"message={self.message!r}, details={dict(self.details)!r})"
        )


def _add_if(details: MutableMapping[str, Any], key: str, value: Any) -> None:
    """Add a key to ``details`` only if ``value`` is not ``None``."""
    if value is not None:
        details[key] = value


def _truncate(text: str, max_length: int = 200) -> str:
    """Truncate long text for safe logging or error reporting."""
    if len(text) <= max_length:
        return text
    return text[:max_length] + "..."


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


class ResolutionError(EnvKeeperError):
    """Base class for failures while computing an install order."""


class PackageNotFoundError(ResolutionError):
    """Raised when resolution reaches a name absent from the registry.

    Args:
        package_name: The missing package name.
        required_by: Name of the package whose dependency list referenced
            it, or ``None`` when the missing name is the resolution root.
    """

    __slots__ = ("package_name", "required_by")

    def __init__(
        self,
        package_name: str,
        *,
        required_by: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "required_by", required_by)

        super().__init__(f"Package not found in registry: {package_name!r}", details)

        self.package_name = package_name
        self.required_by = required_by


class CyclicDependencyError(ResolutionError):
    """Raised when traversal revisits a package still being resolved.

    Args:
        path: The cycle, starting and ending with the repeated package,
            e.g. ``["a", "b", "a"]``.
    """

    __slots__ = ("path",)

    def __init__(self, path: Sequence[str]) -> None:
        self.path = list(path)
        super().__init__(f"Cyclic dependency detected: {' -> '.join(self.path)}")


# ---------------------------------------------------------------------------
# Registry persistence
# ---------------------------------------------------------------------------


class RegistryError(EnvKeeperError):
    """Base class for registry persistence failures."""


class RegistryLoadError(RegistryError):
    """Raised when a registry source is unreadable or malformed.

    Args:
        message: Error description.
        source: Description of the source being read (usually a path).
        record_index: Index of the offending record, if one was identified.
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("source", "record_index", "original_error")

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        record_index: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "source", source)
        _add_if(details, "record", record_index)
        _add_if(
            details,
            "original_error",
            _truncate(str(original_error)) if original_error else None,
        )

        super().__init__(message, details)

        self.source = source
        self.record_index = record_index
        self.original_error = original_error


class RegistrySaveError(RegistryError):
    """Raised when the registry cannot be written to its destination.

    Args:
        message: Error description.
        destination: Description of the sink being written.
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("destination", "original_error")

    def __init__(
        self,
        message: str,
        *,
        destination: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "destination", destination)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.destination = destination
        self.original_error = original_error


# ---------------------------------------------------------------------------
# Environment provisioning
# ---------------------------------------------------------------------------


class EnvironmentProvisionError(EnvKeeperError):
    """Base class for virtual environment and installer failures.

    Args:
        message: Error description.
        command: Command line that failed, if any.
        stderr: Captured error output of the command, truncated for safety.
    """

    __slots__ = ("command", "stderr")

    def __init__(
        self,
        message: str,
        *,
        command: Optional[Sequence[str]] = None,
        stderr: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "command", " ".join(command) if command else None)

        if stderr:
            details["stderr"] = _truncate(stderr.strip())

        super().__init__(message, details)

        self.command = list(command) if command else None
        self.stderr = stderr


class VenvCreationError(EnvironmentProvisionError):
    """Raised when a virtual environment cannot be created."""


class PipInstallError(EnvironmentProvisionError):
    """Raised when pip fails to install, upgrade or list packages.

    Args:
        message: Error description.
        package_name: Package being installed, if any.
        **kwargs: Additional arguments forwarded to
            ``EnvironmentProvisionError``.
    """

    __slots__ = ("package_name",)

    def __init__(
        self,
        message: str,
        *,
        package_name: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(message, **kwargs)

        self.package_name = package_name
        if package_name is not None:
            self.details["package"] = package_name


class EnvPathError(EnvironmentProvisionError):
    """Raised when an environment path is unusable."""


# ---------------------------------------------------------------------------
# Files and configuration
# ---------------------------------------------------------------------------


class FileOperationError(EnvKeeperError):
    """Raised when file system operations fail.

    Args:
        message: Error description.
        file_path: Path to the file involved.
        operation: Operation being performed (read/write/backup).
        original_error: Original exception that triggered this error.
    """

    __slots__ = ("file_path", "operation", "original_error")

    def __init__(
        self,
        message: str,
        *,
        file_path: Optional[str] = None,
        operation: Optional[str] = None,
        original_error: Optional[Exception] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", file_path)
        _add_if(details, "operation", operation)
        _add_if(
            details,
            "original_error",
            str(original_error) if original_error else None,
        )

        super().__init__(message, details)

        self.file_path = file_path
        self.operation = operation
        self.original_error = original_error


class ConfigError(EnvKeeperError):
    """Raised when the configuration file is missing, unreadable or invalid.

    Args:
        message: Error description.
        config_path: Path to the configuration file.
        option: Name of the offending option, if any.
    """

    __slots__ = ("config_path", "option")

    def __init__(
        self,
        message: str,
        *,
        config_path: Optional[str] = None,
        option: Optional[str] = None,
    ) -> None:
        details: MutableMapping[str, Any] = {}
        _add_if(details, "path", config_path)
        _add_if(details, "option", option)

        super().__init__(message, details)

        self.config_path = config_path
        self.option = option
