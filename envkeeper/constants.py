"""
Centralized constants for envkeeper.

This module defines immutable configuration values used across envkeeper,
including default locations, subprocess arguments, and logging formats.
All values are intended to be treated as read-only.
"""

from typing import Final, Sequence

# ---------------------------------------------------------------------------
# Default locations
# ---------------------------------------------------------------------------

#: Directory under which project environments are created.
DEFAULT_BASE_PATH: Final[str] = "./python_project"

#: Registry file used when none is configured.
DEFAULT_REGISTRY_PATH: Final[str] = "envkeeper-registry.json"

#: Name of the virtual environment directory inside a project.
VENV_DIR_NAME: Final[str] = ".venv"

#: File written next to the environment with the ``pip freeze`` output.
REQUIREMENTS_FILE_NAME: Final[str] = "requirements.txt"

# ---------------------------------------------------------------------------
# Provisioning behaviour
# ---------------------------------------------------------------------------

#: Upgrade pip right after creating an environment.
DEFAULT_UPGRADE_PIP: Final[bool] = False

#: Write ``requirements.txt`` after provisioning a project.
DEFAULT_WRITE_REQUIREMENTS: Final[bool] = True

#: Arguments passed to ``pip install`` for a single package.
PIP_INSTALL_ARGS: Final[Sequence[str]] = ("install", "--quiet")

#: Arguments used to upgrade pip itself.
PIP_UPGRADE_ARGS: Final[Sequence[str]] = ("install", "--upgrade", "pip")

#: Arguments used to snapshot installed packages.
PIP_FREEZE_ARGS: Final[Sequence[str]] = ("freeze",)

#: Label shown for packages installed without a pinned version.
LATEST_LABEL: Final[str] = "latest"

# ---------------------------------------------------------------------------
# Registry serialization
# ---------------------------------------------------------------------------

#: Indentation used when writing the registry JSON file.
REGISTRY_JSON_INDENT: Final[int] = 2

#: Maximum allowed file size (in bytes) when reading registry files.
MAX_FILE_SIZE: Final[int] = 10 * 1024 * 1024  # 10 MB

# ---------------------------------------------------------------------------
# Logging configuration
# ---------------------------------------------------------------------------

#: Timestamp format for verbose logging.
LOG_DATE_FORMAT: Final[str] = "%Y-%m-%d %H:%M:%S"

#: Default log format (non-verbose).
LOG_DEFAULT_FORMAT: Final[str] = "%(levelname)s: %(message)s"

#: Verbose log format including timestamp and logger name.
LOG_VERBOSE_FORMAT: Final[str] = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
