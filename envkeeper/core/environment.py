"""Virtual environment provisioning for envkeeper.

:class:`EnvironmentManager` creates per-project virtual environments under
a base directory and drives ``pip`` inside them:

- ``<base>/<project>/.venv`` is created with ``python -m venv``
- packages are installed one at a time with ``pip install --quiet``
- ``pip freeze`` output is captured as :class:`Package` records or written
  to ``<base>/<project>/requirements.txt``

Every subprocess failure is reported as an
:class:`~envkeeper.exceptions.EnvironmentProvisionError` subclass carrying
the command line and the captured stderr.

Typical usage::

    manager = EnvironmentManager("./python_project")
    venv = manager.create_virtual_env("demo")
    manager.install_resolved(venv, DependencyResolver(registry), "flask")
    manager.create_requirements_file(venv)
"""

from __future__ import annotations

import os
import sys
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Tuple, Union

from packaging.requirements import InvalidRequirement, Requirement

from envkeeper.models.package import Package
from envkeeper.utils.logger import get_logger
from envkeeper.core.resolver import DependencyResolver
from envkeeper.utils.filesystem import safe_write_file, validate_path
from envkeeper.exceptions import (
    EnvPathError,
    FileOperationError,
    PipInstallError,
    VenvCreationError,
)
from envkeeper.constants import (
    LATEST_LABEL,
    PIP_FREEZE_ARGS,
    PIP_INSTALL_ARGS,
    PIP_UPGRADE_ARGS,
    REQUIREMENTS_FILE_NAME,
    VENV_DIR_NAME,
)

logger = get_logger("core.environment")

__all__ = [
    "EnvironmentManager",
    "PackageSpec",
    "parse_freeze_output",
]

#: ``(name, version)`` pair; ``None`` installs the latest release.
PackageSpec = Tuple[str, Optional[str]]


def parse_freeze_output(output: str) -> List[Package]:
    """Convert ``pip freeze`` output into package records.

    Exact pins (``name==version``) keep their version. Other requirement
    lines (``name @ url``, ranges) are recorded with an empty version.
    Blank lines, comments and option lines such as ``-e`` are skipped.
    Freeze output carries no dependency information, so every record has
    an empty dependency list.
    """
    packages: List[Package] = []

    for raw_line in output.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#") or line.startswith("-"):
            continue

        try:
            requirement = Requirement(line)
        except InvalidRequirement:
            logger.debug("Skipping unparseable freeze line: %s", line)
            continue

        version = ""
        specs = list(requirement.specifier)
        if len(specs) == 1 and specs[0].operator in ("==", "==="):
            version = specs[0].version

        packages.append(Package(name=requirement.name, version=version))

    return packages


class EnvironmentManager:
    """Creates project environments and installs packages into them.

    Args:
        base_path: Directory holding one sub-directory per project. It is
            created (with parents) if missing.
        python: Interpreter used to create environments. Defaults to the
            interpreter running envkeeper.

    Raises:
        EnvPathError: ``base_path`` cannot be created.
    """

    def __init__(
        self,
        base_path: Union[str, Path],
        *,
        python: Optional[str] = None,
    ) -> None:
        self.base_path = Path(base_path)
        self.python = python or sys.executable

        try:
            self.base_path.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise EnvPathError(
                f"Cannot create base directory {self.base_path}: {exc}"
            ) from exc

    # ------------------------------------------------------------------
    # Paths
    # ------------------------------------------------------------------

    def venv_path(self, project_name: str) -> Path:
        """Return ``<base>/<project>/.venv``.

        Raises:
            EnvPathError: The project name is empty or escapes ``base_path``.
        """
        if not project_name or not project_name.strip():
            raise EnvPathError("Project name must not be empty")

        candidate = self.base_path / project_name / VENV_DIR_NAME
        try:
            validate_path(candidate, base_dir=self.base_path)
        except FileOperationError as exc:
            raise EnvPathError(
                f"Project name {project_name!r} points outside {self.base_path}"
            ) from exc
        return candidate

    @staticmethod
    def get_pip_path(venv_path: Path) -> Path:
        """Return the pip executable inside ``venv_path``."""
        if os.name == "nt":
            return venv_path / "Scripts" / "pip.exe"
        return venv_path / "bin" / "pip"

    # ------------------------------------------------------------------
    # Subprocess plumbing
    # ------------------------------------------------------------------

    def _run(
        self,
        command: Sequence[str],
        error_cls: type,
        message: str,
        **error_kwargs: object,
    ) -> subprocess.CompletedProcess:
        logger.debug("Running: %s", " ".join(command))
        try:
            result = subprocess.run(
                list(command),
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:
            raise error_cls(
                f"{message}: {exc}",
                command=command,
                **error_kwargs,
            ) from exc

        if result.returncode != 0:
            raise error_cls(
                f"{message} (exit code {result.returncode})",
                command=command,
                stderr=result.stderr,
                **error_kwargs,
            )
        return result

    # ------------------------------------------------------------------
    # Environment operations
    # ------------------------------------------------------------------

    def create_virtual_env(self, project_name: str) -> Path:
        """Create the project's virtual environment and return its path.

        Raises:
            VenvCreationError: ``python -m venv`` could not run or failed.
        """
        venv_path = self.venv_path(project_name)
        self._run(
            [self.python, "-m", "venv", str(venv_path)],
            VenvCreationError,
            f"Error creating virtual environment at {venv_path}",
        )
        logger.info("Created virtual environment at %s", venv_path)
        return venv_path

    def install_package(
        self,
        venv_path: Path,
        package: str,
        version: Optional[str] = None,
    ) -> None:
        """Install one package, pinned to ``version`` when given.

        Raises:
            PipInstallError: pip could not run or reported a failure.
        """
        spec = f"{package}=={version}" if version else package
        logger.info("Installing %s==%s", package, version or LATEST_LABEL)
        self._run(
            [str(self.get_pip_path(venv_path)), *PIP_INSTALL_ARGS, spec],
            PipInstallError,
            f"Error installing package {spec}",
            package_name=package,
        )

    def upgrade_pip(self, venv_path: Path) -> None:
        """Upgrade pip inside the environment."""
        self._run(
            [str(self.get_pip_path(venv_path)), *PIP_UPGRADE_ARGS],
            PipInstallError,
            "Error upgrading pip",
            package_name="pip",
        )
        logger.info("Upgraded pip in %s", venv_path)

    def freeze(self, venv_path: Path) -> str:
        """Return raw ``pip freeze`` output for the environment."""
        result = self._run(
            [str(self.get_pip_path(venv_path)), *PIP_FREEZE_ARGS],
            PipInstallError,
            "Error listing installed packages",
        )
        return result.stdout

    def snapshot_installed(self, venv_path: Path) -> List[Package]:
        """Return the packages currently installed in the environment."""
        return parse_freeze_output(self.freeze(venv_path))

    def create_requirements_file(self, venv_path: Path) -> Path:
        """Write ``pip freeze`` output next to the environment.

        Returns:
            Path of the written ``requirements.txt``.

        Raises:
            EnvPathError: The environment has no parent directory or the
                file cannot be written.
            PipInstallError: ``pip freeze`` failed.
        """
        venv_path = Path(venv_path)
        if venv_path.parent == venv_path:
            raise EnvPathError(f"Error getting the parent path of {venv_path}")

        req_path = venv_path.parent / REQUIREMENTS_FILE_NAME
        content = self.freeze(venv_path)

        try:
            safe_write_file(req_path, content)
        except FileOperationError as exc:
            raise EnvPathError(f"Cannot write {req_path}: {exc.message}") from exc

        logger.info("Created requirements file at %s", req_path)
        return req_path

    # ------------------------------------------------------------------
    # Orchestration
    # ------------------------------------------------------------------

    def install_resolved(
        self,
        venv_path: Path,
        resolver: DependencyResolver,
        root_name: str,
    ) -> List[Package]:
        """Install ``root_name`` and everything it needs, dependencies first.

        Each package is pinned to its registry version; unversioned
        entries install the latest release. Installation stops at the
        first failure.

        Returns:
            The packages installed, in installation order.

        Raises:
            ResolutionError: The install order cannot be computed. Nothing
                is installed in that case.
            PipInstallError: An install failed.
        """
        plan = resolver.install_plan(root_name)
        logger.info(
            "Install order for %s: %s",
            root_name,
            ", ".join(package.name for package in plan),
        )

        for package in plan:
            self.install_package(venv_path, package.name, package.version or None)

        return plan

    def setup_project(
        self,
        project_name: str,
        packages: Sequence[PackageSpec],
        *,
        upgrade_pip: bool = False,
        write_requirements: bool = True,
    ) -> Path:
        """Create a project environment and install ``packages`` in order.

        Args:
            project_name: Sub-directory of ``base_path`` for the project.
            packages: ``(name, version)`` pairs, installed in the given
                order. ``version`` may be ``None`` for the latest release.
            upgrade_pip: Upgrade pip before installing anything.
            write_requirements: Write ``requirements.txt`` afterwards.

        Returns:
            Path of the created virtual environment.
        """
        venv_path = self.create_virtual_env(project_name)

        if upgrade_pip:
            self.upgrade_pip(venv_path)

        for name, version in packages:
            self.install_package(venv_path, name, version)

        if write_requirements:
            self.create_requirements_file(venv_path)

        return venv_path
