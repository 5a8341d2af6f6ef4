"""
Comprehensive tests for the file_io module using pytest.

Tests cover:
- FilesystemFileReader: reading text and JSON files, I/O errors
- ensure_dir: creation, existing directories, failures
- FilesystemFileWriter: factory methods, text/JSON/line/byte writes, modes
- MockFileReader: call tracking and configurable return values
"""

import json
import os
import stat
from pathlib import Path
import pytest

from core.file_io import (
    FilesystemFileReader,
    FilesystemFileWriter,
    MockFileReader,
    ensure_dir,
)
from core.exceptions import (
    FileReadError,
    FileWriteError,
    InvalidFilePathError,
)


# ============================================================================
# Tests for FilesystemFileReader
# ============================================================================


@pytest.mark.unit
def test_read_file_success(tmp_path):
    """Should successfully read a text file."""
    file_path = tmp_path / "test.txt"
    content = "Hello, world!\nThis is a test file."
    file_path.write_text(content, encoding="utf-8")

    reader = FilesystemFileReader()
    result = reader.read_file(file_path)

    assert result == content


@pytest.mark.unit
def test_read_file_nonexistent(tmp_path):
    """Should return empty string for non-existent file."""
    reader = FilesystemFileReader()

    assert reader.read_file(tmp_path / "nonexistent.txt") == ""


@pytest.mark.unit
def test_read_file_directory(tmp_path):
    """Should return empty string for a directory."""
    assert FilesystemFileReader().read_file(tmp_path) == ""


@pytest.mark.unit
def test_read_file_invalid_utf8_ignored(tmp_path):
    """Should read file with invalid UTF-8, ignoring invalid bytes."""
    file_path = tmp_path / "invalid.txt"
    file_path.write_bytes(b"ok\xff\xfe")

    assert FilesystemFileReader().read_file(file_path) == "ok"


@pytest.mark.mock
def test_read_file_os_error(tmp_path, mocker):
    """Should wrap OSError in FileReadError."""
    file_path = tmp_path / "locked.txt"
    file_path.write_text("secret", encoding="utf-8")
    mocker.patch.object(Path, "open", side_effect=PermissionError("denied"))

    with pytest.raises(FileReadError) as exc_info:
        FilesystemFileReader().read_file(file_path)

    assert exc_info.value.file_path == str(file_path)
    assert isinstance(exc_info.value.original_exception, PermissionError)
    assert isinstance(exc_info.value.__cause__, PermissionError)


@pytest.mark.unit
def test_read_json(tmp_path):
    """Should decode JSON content."""
    file_path = tmp_path / "a.json"
    file_path.write_text('{"a": [1, 2]}', encoding="utf-8")

    assert FilesystemFileReader().read_json(file_path) == {"a": [1, 2]}


@pytest.mark.unit
def test_read_json_missing_file_is_invalid(tmp_path):
    """A missing file reads as empty, which is not valid JSON."""
    with pytest.raises(json.JSONDecodeError):
        FilesystemFileReader().read_json(tmp_path / "missing.json")


# ============================================================================
# Tests for ensure_dir
# ============================================================================


@pytest.mark.unit
def test_ensure_dir_creates_parents(tmp_path):
    target = tmp_path / "a" / "b" / "c"

    ensure_dir(target)

    assert target.is_dir()


@pytest.mark.unit
def test_ensure_dir_existing_is_untouched(tmp_path):
    (tmp_path / "keep.txt").write_text("x", encoding="utf-8")

    ensure_dir(tmp_path)

    assert (tmp_path / "keep.txt").read_text() == "x"


@pytest.mark.mock
def test_ensure_dir_failure(tmp_path, mocker):
    """Should wrap mkdir failures in FileWriteError."""
    mocker.patch.object(Path, "mkdir", side_effect=OSError("read-only"))

    with pytest.raises(FileWriteError) as exc_info:
        ensure_dir(tmp_path / "new")

    assert exc_info.value.file_path == str(tmp_path / "new")
    assert exc_info.value.diagnostic_info["details"] == "read-only"


# ============================================================================
# Tests for FilesystemFileWriter factories
# ============================================================================


@pytest.mark.unit
def test_from_path_success(tmp_path):
    writer = FilesystemFileWriter.from_path(tmp_path / "out.txt")

    assert writer.file_path == tmp_path / "out.txt"


@pytest.mark.unit
def test_from_path_missing_parent(tmp_path):
    with pytest.raises(InvalidFilePathError) as exc_info:
        FilesystemFileWriter.from_path(tmp_path / "missing" / "out.txt")

    assert "Parent directory does not exist" in exc_info.value.message


@pytest.mark.mock
def test_from_path_unwritable_parent(tmp_path, mocker):
    mocker.patch("core.file_io.os.access", return_value=False)

    with pytest.raises(InvalidFilePathError) as exc_info:
        FilesystemFileWriter.from_path(tmp_path / "out.txt")

    assert "not writable" in exc_info.value.message


@pytest.mark.unit
def test_in_dir_creates_directory(tmp_path):
    writer = FilesystemFileWriter.in_dir(tmp_path / ".vscode", "settings.json")

    assert (tmp_path / ".vscode").is_dir()
    assert writer.file_path == tmp_path / ".vscode" / "settings.json"


# ============================================================================
# Tests for FilesystemFileWriter writes
# ============================================================================


@pytest.mark.unit
def test_write_file_and_append(tmp_path):
    writer = FilesystemFileWriter.from_path(tmp_path / "out.txt")

    writer.write_file("one\n")
    writer.write_file("two\n", mode="a")

    assert (tmp_path / "out.txt").read_text() == "one\ntwo\n"


@pytest.mark.unit
def test_write_file_truncates(tmp_path):
    writer = FilesystemFileWriter.from_path(tmp_path / "out.txt")
    writer.write_file("a long first version")

    writer.write_file("short")

    assert (tmp_path / "out.txt").read_text() == "short"


@pytest.mark.unit
def test_write_file_without_path():
    with pytest.raises(InvalidFilePathError):
        FilesystemFileWriter().write_file("data")


@pytest.mark.unit
def test_write_file_failure(tmp_path):
    """Writing to a directory path fails with FileWriteError."""
    (tmp_path / "dir").mkdir()
    writer = FilesystemFileWriter(tmp_path / "dir")

    with pytest.raises(FileWriteError) as exc_info:
        writer.write_file("data")

    assert exc_info.value.file_path == str(tmp_path / "dir")


@pytest.mark.unit
def test_write_json(tmp_path):
    writer = FilesystemFileWriter.from_path(tmp_path / "a.json")

    writer.write_json({"b": [1]})

    assert (tmp_path / "a.json").read_text() == '{\n  "b": [\n    1\n  ]\n}'


@pytest.mark.unit
def test_write_lines(tmp_path):
    writer = FilesystemFileWriter.from_path(tmp_path / ".eslintignore")

    writer.write_lines(["node_modules", "dist"])

    assert (tmp_path / ".eslintignore").read_text() == "node_modules\ndist\n"


@pytest.mark.unit
def test_write_bytes_and_chmod(tmp_path):
    writer = FilesystemFileWriter.from_path(tmp_path / "blob")

    writer.write_bytes(b"\x00\x01")
    writer.chmod(0o600)

    assert (tmp_path / "blob").read_bytes() == b"\x00\x01"
    assert stat.S_IMODE((tmp_path / "blob").stat().st_mode) == 0o600


@pytest.mark.unit
def test_make_executable_adds_execute_bits(tmp_path):
    writer = FilesystemFileWriter.from_path(tmp_path / "hook")
    writer.write_file("#!/bin/sh\n")
    writer.chmod(0o644)

    writer.make_executable()

    assert stat.S_IMODE((tmp_path / "hook").stat().st_mode) == 0o755
    assert os.access(tmp_path / "hook", os.X_OK)


@pytest.mark.unit
def test_make_executable_missing_file(tmp_path):
    writer = FilesystemFileWriter(tmp_path / "missing")

    with pytest.raises(FileWriteError):
        writer.make_executable()


@pytest.mark.unit
@pytest.mark.parametrize("method,args", [("write_bytes", (b"x",)), ("chmod", (0o644,)), ("make_executable", ())])
def test_writes_without_path(method, args):
    with pytest.raises(InvalidFilePathError):
        getattr(FilesystemFileWriter(), method)(*args)


# ============================================================================
# Tests for MockFileReader
# ============================================================================


@pytest.mark.unit
def test_mock_file_reader_return_value():
    reader = MockFileReader(return_value='{"a": 1}')

    assert reader.read_json(Path("x.json")) == {"a": 1}
    assert reader.read_file_calls == [Path("x.json")]


@pytest.mark.unit
def test_mock_file_reader_function():
    reader = MockFileReader(read_file_fn=lambda p: p.name)

    assert reader.read_file(Path("/a/b.txt")) == "b.txt"


@pytest.mark.unit
def test_mock_file_reader_default():
    assert MockFileReader().read_file(Path("x")) == ""

