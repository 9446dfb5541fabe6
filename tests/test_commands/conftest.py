from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from envkeeper.core import DependencyRegistry


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def workdir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Run commands from an empty directory so no config is discovered."""
    monkeypatch.chdir(tmp_path)
    return tmp_path


@pytest.fixture
def registry_file(workdir: Path, flask_registry: DependencyRegistry) -> Path:
    path = workdir / "registry.json"
    flask_registry.save(path)
    return path

