"""
General utility functions for the CLI applications.
"""

from importlib.metadata import PackageNotFoundError, version

from rich.console import Console

console: Console = Console()
err_console: Console = Console(stderr=True)

DIST_NAME = "vscode-team"


def debug(
    *values: object,
    sep: str = " ",
    end: str = "\n",
) -> None:
    """
    Print debug message with orange bold formatting.

    Used for `--verbose` runs of the controllers to narrate what is about to
    happen (paths being created, files being copied, repos being skipped).

    Args:
        *values: Variable number of objects to print. All values are converted to strings.
        sep: Separator string between values. Defaults to a single space.
        end: String appended after the last value. Defaults to newline.

    Returns:
        None: This function only prints to console and returns nothing.
    """
    if not values:
        print(end=end)
        return

    # Convert all values to strings
    str_values = [str(v) for v in values]

    # Join with separator
    message = sep.join(str_values)

    # Print with formatting
    console.print(f"DEBUG: {message}", end=end, style="orange1", markup=False)


def determine_version() -> str:
    """
    The installed version of the controllers, prefixed with "v".

    Falls back to "v0.0.0-local" when running from a source checkout that was
    never installed.
    """
    try:
        return f"v{version(DIST_NAME)}"
    except PackageNotFoundError:
        return "v0.0.0-local"
