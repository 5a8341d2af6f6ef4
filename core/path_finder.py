"""Locate a named file by scanning an ordered list of candidate directories."""

import os
from pathlib import Path
from typing import Iterable, Literal


def find_in_path(
    target: str | Path, search: Iterable[str | Path]
) -> Path | Literal[False]:
    """
    Return the first `search_dir / target` that exists, or False.

    The scan is linear in the order given and nothing is cached, so repeated
    calls always reflect the current state of the filesystem.

    Args:
        target: A file name or relative path (e.g. "bin/npm").
        search: Candidate directories, highest priority first.

    Returns:
        Path | False: The first existing candidate path, or False when no
            candidate directory contains `target`.
    """
    for search_path in search:
        try_path = Path(search_path) / target
        if try_path.exists():
            return try_path
    return False


def executable_search_path() -> list[str]:
    """The directories of the `PATH` environment variable, in order."""
    return [p for p in os.environ.get("PATH", "").split(os.pathsep) if p]
