"""
envkeeper: Python environment provisioning with dependency-ordered installs

envkeeper creates isolated virtual environments for projects and installs
packages into them in a safe order. The install order comes from a local
package registry: every package is installed only after all of its
declared dependencies.

Features include:
    • Package registry persisted as a plain JSON file
    • Transitive dependency resolution with cycle detection
    • Virtual environment creation and pip-driven installs
    • requirements.txt snapshots via ``pip freeze``
"""

from __future__ import annotations

from envkeeper.__version__ import __version__
from envkeeper.models import Package
from envkeeper.core import DependencyRegistry, DependencyResolver, EnvironmentManager

# ---------------------------------------------------------------------------
# Package Metadata
# ---------------------------------------------------------------------------

__author__ = "envkeeper Contributors"
__license__ = "Apache-2.0"
__description__ = "Virtual environment provisioning with dependency-ordered installs."

# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

__all__ = [
    "__version__",
    "Package",
    "DependencyRegistry",
    "DependencyResolver",
    "EnvironmentManager",
]
