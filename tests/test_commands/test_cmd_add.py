from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from envkeeper.cli import cli
from envkeeper.models import Package
from envkeeper.core import DependencyRegistry


def _load(path: Path) -> DependencyRegistry:
    registry = DependencyRegistry()
    registry.load(path)
    return registry


@pytest.mark.unit
class TestAddCommand:
    def test_creates_registry_file(self, runner: CliRunner, workdir: Path) -> None:
        path = workdir / "new.json"

        result = runner.invoke(
            cli,
            ["--no-color", "add", "flask", "--version", "3.0.0", "-d", "werkzeug", "-d", "jinja2", "-r", str(path)],
        )

        assert result.exit_code == 0, result.output
        assert "Added flask" in result.output
        assert "Not yet in registry: werkzeug, jinja2" in result.output
        assert _load(path).lookup("flask") == Package("flask", "3.0.0", ["werkzeug", "jinja2"])

    def test_replaces_existing_entry(self, runner: CliRunner, registry_file: Path) -> None:
        result = runner.invoke(
            cli, ["--no-color", "add", "werkzeug", "--version", "3.1.0", "-r", str(registry_file)]
        )

        assert result.exit_code == 0, result.output
        assert "Replaced werkzeug" in result.output
        registry = _load(registry_file)
        assert registry.lookup("werkzeug") == Package("werkzeug", "3.1.0")
        assert len(registry) == 4

    def test_default_registry_path(self, runner: CliRunner, workdir: Path) -> None:
        result = runner.invoke(cli, ["--no-color", "add", "requests"])

        assert result.exit_code == 0, result.output
        assert _load(workdir / "envkeeper-registry.json").lookup("requests") == Package("requests")

    def test_malformed_registry_fails(self, runner: CliRunner, workdir: Path) -> None:
        path = workdir / "bad.json"
        path.write_text("{", encoding="utf-8")

        result = runner.invoke(cli, ["--no-color", "add", "x", "-r", str(path)])

        assert result.exit_code == 1
        assert path.read_text(encoding="utf-8") == "{"

    def test_empty_name_rejected(self, runner: CliRunner, workdir: Path) -> None:
        result = runner.invoke(cli, ["--no-color", "add", " "])

        assert result.exit_code == 2

    def test_backup_keeps_previous_registry(
        self, runner: CliRunner, registry_file: Path
    ) -> None:
        before = registry_file.read_text(encoding="utf-8")

        result = runner.invoke(
            cli,
            ["--no-color", "add", "flask", "--version", "3.1.0", "--backup", "-r", str(registry_file)],
        )

        assert result.exit_code == 0, result.output
        backups = list(registry_file.parent.glob("registry.json.*.backup"))
        assert len(backups) == 1
        assert backups[0].read_text(encoding="utf-8") == before
        assert "Previous registry saved to" in result.output
        assert _load(registry_file).lookup("flask") == Package(
            "flask", "3.1.0"
        )

    def test_no_backup_by_default(self, runner: CliRunner, registry_file: Path) -> None:
        result = runner.invoke(
            cli, ["--no-color", "add", "click", "-r", str(registry_file)]
        )

        assert result.exit_code == 0, result.output
        assert list(registry_file.parent.glob("*.backup")) == []
