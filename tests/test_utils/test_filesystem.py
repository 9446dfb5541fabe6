from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from envkeeper.exceptions import FileOperationError
from envkeeper.utils.filesystem import (
    _atomic_write,
    create_backup_file,
    safe_read_file,
    safe_write_file,
    validate_path,
)


@pytest.mark.unit
class TestSafeReadFile:
    def test_reads_content(self, tmp_path: Path) -> None:
        path = tmp_path / "f.txt"
        path.write_text("hello", encoding="utf-8")

        assert safe_read_file(path) == "hello"

    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="File not found"):
            safe_read_file(tmp_path / "missing")

    def test_directory(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="Not a file"):
            safe_read_file(tmp_path)

    def test_size_limit(self, tmp_path: Path) -> None:
        path = tmp_path / "big.txt"
        path.write_text("x" * 100, encoding="utf-8")

        with pytest.raises(FileOperationError, match="too large"):
            safe_read_file(path, max_size=10)

        assert safe_read_file(path, max_size=None) == "x" * 100

    def test_decode_error(self, tmp_path: Path) -> None:
        path = tmp_path / "bin"
        path.write_bytes(b"\xff\xfe\xfa")

        with pytest.raises(FileOperationError) as exc_info:
            safe_read_file(path)

        assert exc_info.value.operation == "read"


@pytest.mark.unit
class TestSafeWriteFile:
    def test_writes_and_creates_parents(self, tmp_path: Path) -> None:
        path = tmp_path / "a" / "b" / "out.txt"

        backup = safe_write_file(path, "data")

        assert path.read_text(encoding="utf-8") == "data"
        assert backup is None

    def test_backup_of_existing_file(self, tmp_path: Path) -> None:
        path = tmp_path / "out.txt"
        path.write_text("old", encoding="utf-8")

        backup = safe_write_file(path, "new", create_backup=True)

        assert backup is not None
        assert backup.read_text(encoding="utf-8") == "old"
        assert backup.name.startswith("out.txt.")
        assert backup.name.endswith(".backup")
        assert path.read_text(encoding="utf-8") == "new"

    def test_no_temp_files_left_behind(self, tmp_path: Path) -> None:
        safe_write_file(tmp_path / "out.txt", "data")

        assert [p.name for p in tmp_path.iterdir()] == ["out.txt"]

    def test_failed_replace_cleans_up(self, tmp_path: Path) -> None:
        target = tmp_path / "out.txt"

        with patch.object(Path, "replace", side_effect=OSError("denied")):
            with pytest.raises(FileOperationError, match="Atomic write failed"):
                _atomic_write(target, "data")

        assert list(tmp_path.iterdir()) == []


@pytest.mark.unit
class TestCreateBackupFile:
    def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError):
            create_backup_file(tmp_path / "missing")

    def test_copy_failure(self, tmp_path: Path) -> None:
        path = tmp_path / "f"
        path.write_text("x", encoding="utf-8")

        with patch("envkeeper.utils.filesystem.shutil.copy2", side_effect=OSError("no")):
            with pytest.raises(FileOperationError) as exc_info:
                create_backup_file(path)

        assert exc_info.value.operation == "backup"


@pytest.mark.unit
class TestValidatePath:
    def test_resolves(self, tmp_path: Path) -> None:
        assert validate_path(tmp_path / "x" / ".." / "y") == (tmp_path / "y").resolve()

    def test_inside_base(self, tmp_path: Path) -> None:
        assert validate_path(tmp_path / "a", base_dir=tmp_path) == (tmp_path / "a").resolve()

    def test_outside_base(self, tmp_path: Path) -> None:
        with pytest.raises(FileOperationError, match="outside"):
            validate_path(tmp_path / ".." / "other", base_dir=tmp_path)
