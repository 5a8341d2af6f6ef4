import json
import os
from pathlib import Path
from typing import Any, Callable, Protocol

from core.exceptions import (
    FileReadError,
    FileWriteError,
    InvalidFilePathError,
)


class FileReader(Protocol):
    """
    Protocol defining the interface for file reading operations.

    This protocol specifies methods for reading files, allowing different
    implementations for production (filesystem) and testing (mocks).
    """

    def read_file(self, file_path: Path) -> str:
        """
        Read the text content of a file as UTF-8.

        Args:
            file_path: The path to the file to read.

        Returns:
            The file content as a string, or an empty string if the file doesn't exist.
        """

    def read_json(self, file_path: Path) -> Any:
        """
        Read and decode a JSON file.

        Raises:
            ValueError: If the content is not valid JSON.
        """


class FilesystemFileReader:

    def read_file(self, file_path: Path) -> str:
        """
        Read the text content of a file as UTF-8.

        Non-existent files are skipped. Invalid UTF-8 characters are silently
        ignored (errors="ignore"). I/O errors raise FileReadError.

        Args:
            file_path: The path to the file to read.

        Returns:
            The file content as a string, or an empty string if the file doesn't exist.

        Raises:
            FileReadError: If an I/O error occurs while reading the file.
        """

        if not file_path.is_file():
            return ""

        try:
            with file_path.open("r", encoding="utf-8", errors="ignore") as f:
                return f.read()
        except OSError as e:
            raise FileReadError(
                message=f"Failed to read file: {file_path}",
                file_path=str(file_path),
                original_exception=e,
            ) from e

    def read_json(self, file_path: Path) -> Any:
        """
        Read and decode a JSON file.

        Raises:
            FileReadError: If an I/O error occurs while reading the file.
            json.JSONDecodeError: If the content is not valid JSON (an empty or
                missing file is not valid JSON either).
        """
        return json.loads(self.read_file(file_path))


def ensure_dir(dir_path: Path) -> None:
    """
    Create `dir_path` (and parents) unless it already exists.

    Existence is re-checked right before creation so that a directory created
    concurrently, or an existing symlink to a directory, is left untouched.

    Raises:
        FileWriteError: If the directory cannot be created.
    """
    if dir_path.exists():
        return
    try:
        dir_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise FileWriteError(
            message=f"Failed to create directory: {dir_path}",
            file_path=str(dir_path),
            original_exception=e,
        ) from e


class FilesystemFileWriter:
    def __init__(self, file_path: Path | None = None):
        self.file_path = file_path

    @classmethod
    def from_path(cls, file_path: Path) -> "FilesystemFileWriter":
        """
        Create a writer instance with an explicit file path.

        Args:
            file_path: The path to the file to manage.

        Returns:
            FilesystemFileWriter instance configured for the given path.

        Raises:
            InvalidFilePathError: If file_path is invalid (e.g., parent directory
                doesn't exist or is not writable).
        """
        parent = file_path.parent
        if not parent.exists():
            raise InvalidFilePathError(
                message=f"Parent directory does not exist: {parent}",
                file_path=str(file_path),
            )
        if not os.access(parent, os.W_OK):
            raise InvalidFilePathError(
                message=f"Parent directory is not writable: {parent}",
                file_path=str(file_path),
            )

        return cls(file_path)

    @classmethod
    def in_dir(cls, dir_path: Path, file_name: str) -> "FilesystemFileWriter":
        """
        Create a writer for `dir_path / file_name`, creating `dir_path` first if needed.

        Raises:
            FileWriteError: If the directory cannot be created.
            InvalidFilePathError: If the directory exists but is not writable.
        """
        ensure_dir(dir_path)
        return cls.from_path(dir_path / file_name)

    def write_file(self, data: str, mode: str = "w") -> None:
        """
        Writes data to the output file.

        Args:
            data: String data to write
            mode: File mode ("w" for write/truncate, "a" for append)

        Raises:
            InvalidFilePathError: If file path is not set.
            FileWriteError: If writing to the file fails.
        """
        if self.file_path is None:
            raise InvalidFilePathError("No file path set. Use a factory method first.")

        try:
            with open(self.file_path, mode, encoding="utf-8") as f:
                f.write(data)
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to write to file: {self.file_path}",
                file_path=str(self.file_path),
                original_exception=e,
            ) from e

    def write_json(self, data: Any) -> None:
        """
        Replaces the output file with `data` as JSON indented by two spaces.

        Raises:
            InvalidFilePathError: If file path is not set.
            FileWriteError: If writing to the file fails.
        """
        self.write_file(json.dumps(data, indent=2), mode="w")

    def write_lines(self, lines: list[str]) -> None:
        """
        Replaces the output file with one entry per line, each newline-terminated.

        Raises:
            InvalidFilePathError: If file path is not set.
            FileWriteError: If writing to the file fails.
        """
        self.write_file("".join(f"{line}\n" for line in lines), mode="w")

    def write_bytes(self, data: bytes) -> None:
        """
        Replaces the output file with raw bytes (used for downloads).

        Raises:
            InvalidFilePathError: If file path is not set.
            FileWriteError: If writing to the file fails.
        """
        if self.file_path is None:
            raise InvalidFilePathError("No file path set. Use a factory method first.")

        try:
            self.file_path.write_bytes(data)
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to write to file: {self.file_path}",
                file_path=str(self.file_path),
                original_exception=e,
            ) from e

    def chmod(self, mode: int) -> None:
        """
        Sets the permission bits of the output file.

        Raises:
            InvalidFilePathError: If file path is not set.
            FileWriteError: If the mode cannot be changed.
        """
        if self.file_path is None:
            raise InvalidFilePathError("No file path set. Use a factory method first.")

        try:
            self.file_path.chmod(mode)
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to change mode of file: {self.file_path}",
                file_path=str(self.file_path),
                original_exception=e,
            ) from e

    def make_executable(self) -> None:
        """
        Adds the executable bits to the output file (used for git hooks).

        Raises:
            InvalidFilePathError: If file path is not set.
            FileWriteError: If the mode cannot be changed.
        """
        if self.file_path is None:
            raise InvalidFilePathError("No file path set. Use a factory method first.")

        try:
            mode = self.file_path.stat().st_mode
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to make file executable: {self.file_path}",
                file_path=str(self.file_path),
                original_exception=e,
            ) from e
        self.chmod(mode | 0o111)


class MockFileReader:
    """
    Mock implementation of FileReader for testing.

    Returns configurable file contents, allowing tests to control file reading
    behavior without requiring filesystem operations or actual file I/O.
    """

    def __init__(
        self,
        return_value: str | None = None,
        read_file_fn: Callable[[Path], str] | None = None,
    ):
        """
        Initialize MockFileReader with configurable reading behavior.

        Args:
            return_value: If provided, always returns this value regardless of input.
                Takes precedence over read_file_fn if both are provided.
            read_file_fn: Optional callable that takes a file path and returns file content.
                If return_value is None, this will be used. If both are None,
                defaults to returning empty string.

        Attributes (for test inspection):
            read_file_calls: List of file paths passed to read_file()
        """
        self.return_value = return_value
        self.read_file_fn = read_file_fn

        self.read_file_calls: list[Path] = []

    def read_file(self, file_path: Path) -> str:
        self.read_file_calls.append(file_path)
        if self.return_value is not None:
            return self.return_value
        if self.read_file_fn is not None:
            return self.read_file_fn(file_path)
        return ""

    def read_json(self, file_path: Path) -> Any:
        return json.loads(self.read_file(file_path))
