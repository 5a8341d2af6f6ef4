"""
Error and status messages shared by the controllers.

Every printer in this module ends the command: it raises `typer.Exit(code=1)`
after telling the user what went wrong and, where possible, what to do about
it. `error_boundary()` wraps a command body and routes each known error type
to its printer.
"""

from contextlib import contextmanager
from typing import Iterator, NoReturn

import typer
from rich import print as pr
from rich.markup import escape

from core.exceptions import (
    DownloadError,
    FileIOError,
    ShellCommandError,
    WorkspaceParseError,
)


def fail(message: str) -> NoReturn:
    """
    Report an unmet precondition (missing path, wrong project type) and exit.

    Raises:
        typer.Exit: Always raises with exit code 1.
    """
    pr(f"[red]Error:[/red] {escape(message)}")
    raise typer.Exit(code=1)


def print_file_io_err(e: FileIOError) -> None:
    """
    Display a user-friendly error message for file I/O errors and exit the application.

    Args:
        e: The FileIOError exception containing error details.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]File I/O Error[/bold red]")
    pr(f"The app encountered an error while working with files: {escape(e.message)}")
    if e.file_path:
        pr(f"File path: [yellow]{escape(e.file_path)}[/yellow]")

    pr("\n[yellow]Quick Fix:[/yellow] Check file permissions and available disk space.")
    if e.original_exception:
        pr(f"\nTechnical details: {escape(str(e.original_exception))}")

    raise typer.Exit(code=1) from e


def print_download_err(e: DownloadError) -> None:
    """
    Display an error for a settings file that could not be fetched and exit.

    Raises:
        typer.Exit: Always raises with exit code 1.
    """
    pr("❌ [bold red]Download Error[/bold red]")
    pr(f"Could not fetch [yellow]{escape(e.url)}[/yellow]")
    if e.status_code is not None:
        pr(f"HTTP status: {e.status_code}")
    pr(
        "\n[yellow]Quick Fix:[/yellow] Check your network connection and that "
        "the requested tag exists (--tag)."
    )
    raise typer.Exit(code=1) from e


def print_shell_cmd_err(e: ShellCommandError) -> None:
    """Display an error for an external tool that failed or could not be started, and exit."""
    pr("❌ [bold red]Command Error[/bold red]")
    pr(escape(e.message))
    if e.returncode is None:
        pr(
            f"\n[yellow]Quick Fix:[/yellow] Make sure [green]{escape(e.cmd[0])}[/green] "
            "is installed and on your PATH."
        )
    raise typer.Exit(code=1) from e


def print_workspace_parse_err(e: WorkspaceParseError) -> None:
    pr("❌ [bold red]Workspace Error[/bold red]")
    pr(escape(e.message))
    raise typer.Exit(code=1) from e


def print_unexpected_err(e: Exception) -> None:
    """
    Display a user-friendly error message for unexpected errors and exit the application.

    Args:
        e: The unexpected exception that was raised.

    Raises:
        typer.Exit: Always raises with exit code 1 to terminate the application.
    """
    pr("❌ [bold red]Unexpected Error[/bold red]")
    pr("An unexpected error occurred while processing your request.")
    pr(f"\n[yellow]Error Type:[/yellow] {type(e).__name__}")
    pr(f"[yellow]Error Message:[/yellow] {escape(str(e))}")

    pr("\n[yellow]What to do:[/yellow]")
    pr("1. Check that the project path and workspace files are valid and accessible")
    pr("2. Ensure you have sufficient disk space and permissions")
    pr("3. Try running the command again with --dry-run to see what would happen")
    pr("4. If the problem persists, please report this issue")

    pr("\n--- PLEASE REPORT THIS ---")
    pr(f"Error Type: {type(e).__name__}")
    pr(f"Error Message: {escape(str(e))}")
    if e.__cause__:
        pr(f"Caused by: {escape(str(e.__cause__))}")

    raise typer.Exit(code=1) from e


@contextmanager
def error_boundary() -> Iterator[None]:
    """
    Turn any error escaping a command into a friendly message and exit code 1.

    `typer.Exit` passes through untouched.
    """
    try:
        yield
    except typer.Exit:
        raise
    except FileIOError as e:
        print_file_io_err(e)
    except DownloadError as e:
        print_download_err(e)
    except ShellCommandError as e:
        print_shell_cmd_err(e)
    except WorkspaceParseError as e:
        print_workspace_parse_err(e)
    except Exception as e:  # noqa: BLE001
        # Catch-all so users see a friendly message instead of a raw stack trace
        print_unexpected_err(e)
