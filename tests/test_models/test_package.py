"""Unit tests for envkeeper.models.package."""

from __future__ import annotations

import pytest

from envkeeper.models.package import Package


@pytest.mark.unit
class TestPackageInit:
    """Tests for Package construction."""

    def test_defaults(self) -> None:
        """Version defaults to empty and dependencies to an empty list."""
        pkg = Package("requests")

        assert pkg.name == "requests"
        assert pkg.version == ""
        assert pkg.dependencies == []

    def test_name_is_kept_verbatim(self) -> None:
        """Names are registry keys and are not normalized."""
        pkg = Package("My_Package", "1.0")

        assert pkg.name == "My_Package"

    def test_dependencies_are_copied(self) -> None:
        """Mutating the caller's list does not change the package."""
        deps = ["a", "b"]
        pkg = Package("x", "1", deps)
        deps.append("c")

        assert pkg.dependencies == ["a", "b"]

    def test_dependencies_from_tuple(self) -> None:
        """Any iterable of names is stored as a list."""
        pkg = Package("x", "1", ("a", "b"))  # type: ignore[arg-type]

        assert pkg.dependencies == ["a", "b"]

    def test_equality(self) -> None:
        assert Package("a", "1", ["b"]) == Package("a", "1", ["b"])
        assert Package("a", "1", ["b"]) != Package("a", "2", ["b"])


@pytest.mark.unit
class TestPackageSerialization:
    """Tests for to_dict / from_dict."""

    def test_to_dict(self) -> None:
        pkg = Package("jinja2", "3.1.2", ["markupsafe"])

        assert pkg.to_dict() == {
            "name": "jinja2",
            "version": "3.1.2",
            "dependencies": ["markupsafe"],
        }

    def test_to_dict_returns_independent_list(self) -> None:
        pkg = Package("jinja2", "3.1.2", ["markupsafe"])
        data = pkg.to_dict()
        data["dependencies"].append("other")

        assert pkg.dependencies == ["markupsafe"]

    def test_from_dict_full_record(self) -> None:
        pkg = Package.from_dict(
            {"name": "flask", "version": "3.0.0", "dependencies": ["werkzeug"]}
        )

        assert pkg == Package("flask", "3.0.0", ["werkzeug"])

    def test_from_dict_optional_fields(self) -> None:
        """Missing or null version/dependencies fall back to defaults."""
        assert Package.from_dict({"name": "a"}) == Package("a")
        assert Package.from_dict(
            {"name": "a", "version": None, "dependencies": None}
        ) == Package("a")

    @pytest.mark.parametrize(
        "record",
        [
            ["not", "a", "mapping"],
            {},
            {"name": ""},
            {"name": 42},
            {"name": "a", "version": 1.0},
            {"name": "a", "dependencies": "b"},
            {"name": "a", "dependencies": ["b", 3]},
        ],
        ids=[
            "list",
            "missing-name",
            "empty-name",
            "int-name",
            "float-version",
            "string-deps",
            "mixed-deps",
        ],
    )
    def test_from_dict_rejects_malformed(self, record: object) -> None:
        with pytest.raises(ValueError):
            Package.from_dict(record)  # type: ignore[arg-type]


@pytest.mark.unit
class TestPackagePin:
    """Tests for the installer argument."""

    def test_pin_with_version(self) -> None:
        assert Package("flask", "3.0.0").pin() == "flask==3.0.0"

    def test_pin_without_version(self) -> None:
        assert Package("flask").pin() == "flask"

    def test_str_is_pin(self) -> None:
        assert str(Package("flask", "3.0.0")) == "flask==3.0.0"
