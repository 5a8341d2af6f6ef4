"""
Polyglot file catalog.

Classifies filesystem entries by extension. Every entry exposes existence,
extension and relative-path metadata; `.json` entries additionally expose
their parsed content, which is read lazily on each access. Detection code
uses these wrappers instead of touching the filesystem directly so that a
file's content is only ever parsed when a probe actually needs it.
"""

import glob
import os
from pathlib import Path
from typing import Any

from core.file_io import FileReader, FilesystemFileReader


class PolyglotFile:
    """
    A file of any type, identified by its absolute path.

    Attributes:
        file_name: Absolute path of the file.
    """

    is_json_file = False

    def __init__(self, file_name: str | Path):
        self.file_name = Path(file_name)

    @property
    def file_exists(self) -> bool:
        return self.file_name.exists()

    @property
    def file_extn(self) -> str:
        """Extension including the leading dot (e.g. ".ts"), or "" when there is none."""
        return self.file_name.suffix

    def relative_to(self, to: str | Path) -> str:
        """Path of this file relative to the directory `to` (may contain "..")."""
        return os.path.relpath(self.file_name, to)

    def __eq__(self, other: object) -> bool:
        return type(other) is type(self) and other.file_name == self.file_name

    def __hash__(self) -> int:
        return hash((type(self).__name__, self.file_name))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({str(self.file_name)!r})"


class JsonFile(PolyglotFile):
    """
    A JSON file whose content is parsed on demand.

    `content()` re-reads the file on every call; nothing is cached, so a file
    rewritten between calls is seen fresh.
    """

    is_json_file = True

    def __init__(self, file_name: str | Path, reader: FileReader | None = None):
        super().__init__(file_name)
        self.reader = reader if reader is not None else FilesystemFileReader()

    def content(self) -> Any:
        """
        Parse and return the file content, or None when the file does not exist.

        Raises:
            json.JSONDecodeError: If the file exists but is not valid JSON.
            FileReadError: If the file exists but cannot be read.
        """
        if not self.file_exists:
            return None
        return self.reader.read_json(self.file_name)

    def content_dict(self) -> dict[str, Any] | None:
        """The parsed content when it is a non-empty JSON object, otherwise None."""
        content = self.content()
        if content and isinstance(content, dict):
            return content
        return None


class NpmPackageConfig(JsonFile):
    """A project's `package.json`."""

    @property
    def is_valid(self) -> bool:
        return self.file_exists

    @property
    def is_publishable(self) -> bool:
        """
        True when `scripts.prepublishOnly` is set to a truthy value.

        A malformed `package.json`, or one without a `scripts` object, is
        simply not publishable.
        """
        try:
            package_dict = self.content_dict()
        except ValueError:
            return False
        if not package_dict:
            return False
        scripts = package_dict.get("scripts")
        if not isinstance(scripts, dict):
            return False
        return bool(scripts.get("prepublishOnly"))


def guess_polyglot_file(file_name: str | Path) -> PolyglotFile:
    """
    Classify a single path by its extension.

    Args:
        file_name: Absolute path of the file. The file need not exist.

    Returns:
        PolyglotFile: A `JsonFile` for `.json` paths, a plain `PolyglotFile`
            for everything else.
    """
    match Path(file_name).suffix:
        case ".json":
            return JsonFile(file_name)
        case _:
            return PolyglotFile(file_name)


def guess_polyglot_files(glob_pattern: str | Path) -> list[PolyglotFile]:
    """
    Expand `glob_pattern` eagerly and classify every matching regular file.

    `**` matches any number of directories, including none, so
    "<root>/**/mod.ts" also matches "<root>/mod.ts". Directories are skipped.
    Results follow filesystem traversal order and are not sorted.
    """
    return [
        guess_polyglot_file(match)
        for match in glob.iglob(str(glob_pattern), recursive=True)
        if os.path.isfile(match)
    ]
