"""
Unified data model exports for envkeeper.

Example:
    >>> from envkeeper.models import Package
"""

from __future__ import annotations

from envkeeper.models.package import Package

__all__ = [
    "Package",
]
