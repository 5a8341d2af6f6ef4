"""
Custom exception classes for the vscode-team controllers.

This module defines application-specific exceptions raised while reading and
writing project configuration artifacts, parsing workspace files, downloading
remote settings and launching external commands. These exceptions provide
structured error information and diagnostic data to help with debugging and
error reporting.
"""

import os
from typing import Optional


class FileIOError(Exception):
    """
    Base exception for file read/write errors.

    Attributes:
        message: A human-readable error message describing what went wrong.
        file_path: The path of the file involved, if known.
        original_exception: The underlying exception that caused this error, if any.
        diagnostic_info: A dictionary containing diagnostic information including
            exception type, details, and OS name.
    """

    def __init__(
        self,
        message: Optional[str] = None,
        file_path: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message or "A file operation failed"
        super().__init__(self.message)
        self.file_path = file_path
        self.original_exception = original_exception
        self.diagnostic_info = {
            "type": (
                type(original_exception).__name__ if original_exception else "Unknown"
            ),
            "details": str(original_exception) if original_exception else "No details",
            "os_name": os.name,
        }


class FileReadError(FileIOError):
    """Raised when an existing file cannot be read (permissions, I/O failure)."""


class FileWriteError(FileIOError):
    """
    Raised when a configuration artifact cannot be written.

    This covers both the creation of the artifact's directory (e.g. `.vscode/`)
    and the write of the file itself.
    """


class InvalidFilePathError(FileIOError):
    """Raised when a writer is used without a usable target path."""


class WorkspaceParseError(Exception):
    """
    Raised when a `*.code-workspace` file is not a valid workspace document.

    Attributes:
        message: A human-readable error message.
        ws_file_name: The workspace file that failed to parse.
        original_exception: The JSON decoding error, if any.
    """

    def __init__(
        self,
        ws_file_name: str,
        message: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message or f"Unable to parse {ws_file_name}"
        super().__init__(self.message)
        self.ws_file_name = ws_file_name
        self.original_exception = original_exception


class DownloadError(Exception):
    """
    Raised when a remote file cannot be fetched.

    Attributes:
        url: The final URL that was requested (after redirects).
        status_code: The HTTP status returned, or None for transport failures.
    """

    def __init__(
        self,
        url: str,
        status_code: Optional[int] = None,
        message: Optional[str] = None,
    ):
        self.url = url
        self.status_code = status_code
        self.message = message or f"{url}: status {status_code}"
        super().__init__(self.message)


class ShellCommandError(Exception):
    """
    Raised when an external command cannot be started or exits non-zero.

    Attributes:
        cmd: The program followed by its arguments.
        returncode: The exit status, or None when the program never started.
        original_exception: The OSError raised while starting the program.
    """

    def __init__(
        self,
        cmd: list[str],
        original_exception: Optional[Exception] = None,
        returncode: Optional[int] = None,
    ):
        self.cmd = cmd
        self.original_exception = original_exception
        self.returncode = returncode
        if returncode is not None:
            self.message = f"'{' '.join(cmd)}' exited with status {returncode}"
        else:
            self.message = f"Unable to run '{' '.join(cmd)}'"
            if original_exception:
                self.message += f": {original_exception}"
        super().__init__(self.message)
