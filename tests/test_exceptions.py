from __future__ import annotations

import pytest

from envkeeper.exceptions import (
    ConfigError,
    CyclicDependencyError,
    EnvironmentProvisionError,
    EnvKeeperError,
    FileOperationError,
    PackageNotFoundError,
    PipInstallError,
    RegistryError,
    RegistryLoadError,
    RegistrySaveError,
    ResolutionError,
    VenvCreationError,
)


@pytest.mark.unit
class TestEnvKeeperError:
    def test_message_only(self) -> None:
        exc = EnvKeeperError("boom")

        assert str(exc) == "boom"
        assert exc.details == {}

    def test_details_rendered(self) -> None:
        exc = EnvKeeperError("boom", {"a": 1, "b": "x"})

        assert str(exc) == "boom (a=1, b=x)"

    def test_repr(self) -> None:
        assert repr(EnvKeeperError("boom", {"a": 1})) == (
            "EnvKeeperError(message='boom', details={'a': 1})"
        )


@pytest.mark.unit
class TestResolutionErrors:
    def test_package_not_found(self) -> None:
        exc = PackageNotFoundError("ghost")

        assert isinstance(exc, ResolutionError)
        assert exc.package_name == "ghost"
        assert str(exc) == "Package not found in registry: 'ghost'"

    def test_package_not_found_required_by(self) -> None:
        exc = PackageNotFoundError("gone", required_by="b")

        assert exc.details == {"required_by": "b"}
        assert "required_by=b" in str(exc)

    def test_cyclic_dependency(self) -> None:
        exc = CyclicDependencyError(("a", "b", "a"))

        assert isinstance(exc, ResolutionError)
        assert exc.path == ["a", "b", "a"]
        assert str(exc) == "Cyclic dependency detected: a -> b -> a"


@pytest.mark.unit
class TestRegistryErrors:
    def test_load_error_details(self) -> None:
        cause = ValueError("x" * 500)
        exc = RegistryLoadError("bad", source="r.json", record_index=3, original_error=cause)

        assert isinstance(exc, RegistryError)
        assert exc.details["source"] == "r.json"
        assert exc.details["record"] == 3
        assert exc.details["original_error"].endswith("...")

    def test_save_error(self) -> None:
        exc = RegistrySaveError("bad", destination="r.json")

        assert isinstance(exc, RegistryError)
        assert exc.details == {"destination": "r.json"}


@pytest.mark.unit
class TestProvisionErrors:
    def test_command_and_stderr(self) -> None:
        exc = VenvCreationError("failed", command=["python", "-m", "venv"], stderr=" oops \n")

        assert isinstance(exc, EnvironmentProvisionError)
        assert exc.command == ["python", "-m", "venv"]
        assert exc.details == {"command": "python -m venv", "stderr": "oops"}

    def test_pip_install_error_package(self) -> None:
        exc = PipInstallError("failed", package_name="flask", command=["pip"])

        assert exc.package_name == "flask"
        assert exc.details["package"] == "flask"
        assert exc.details["command"] == "pip"


@pytest.mark.unit
@pytest.mark.parametrize(
    "exc",
    [
        FileOperationError("x", file_path="p", operation="read"),
        ConfigError("x", config_path="c", option="o"),
        ResolutionError("x"),
    ],
)
def test_all_errors_share_base(exc: Exception) -> None:
    assert isinstance(exc, EnvKeeperError)
