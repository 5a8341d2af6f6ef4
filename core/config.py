import json
from pathlib import Path
from typing import Optional

from core.exceptions import FileReadError
from core.file_io import FilesystemFileReader, FilesystemFileWriter
from core.path_finder import executable_search_path, find_in_path
from models import ToolConfig

CONFIG_DIR = Path.home() / ".vscode-team"
CONFIG_FILE = CONFIG_DIR / "settings.json"

CONFIG_KEYS = ("node_home", "repos_home", "settings_repo_tag")


def get_config_file(config_file: Optional[Path] = None) -> ToolConfig:
    """
    Load the user configuration, or an empty one when the file does not exist.

    Unknown keys are dropped.

    Raises:
        FileReadError: If the file cannot be read or is not a JSON object.
    """
    config_file = config_file or CONFIG_FILE
    if not config_file.exists():
        return {}
    try:
        data = FilesystemFileReader().read_json(config_file)
    except json.JSONDecodeError as e:
        raise FileReadError(
            message=f"Configuration file is not valid JSON: {config_file}",
            file_path=str(config_file),
            original_exception=e,
        ) from e
    if not isinstance(data, dict):
        raise FileReadError(
            message=f"Configuration file is not a JSON object: {config_file}",
            file_path=str(config_file),
        )
    return {k: str(v) for k, v in data.items() if k in CONFIG_KEYS and v}  # type: ignore[return-value]


def save_config(values: ToolConfig, config_file: Optional[Path] = None) -> None:
    """Replace the user configuration with `values`; empty values are not stored."""
    config_file = config_file or CONFIG_FILE
    fw = FilesystemFileWriter.in_dir(config_file.parent, config_file.name)
    fw.write_json({k: v for k, v in values.items() if v})


def default_node_home() -> Optional[Path]:
    """
    The NodeJS home that owns the first `npm` on `PATH`.

    `<node_home>/bin/npm` is the expected layout, so this is the grandparent
    of the resolved `npm`. None when `npm` is not on `PATH`.
    """
    npm = find_in_path("npm", executable_search_path())
    if npm is False:
        return None
    return npm.parent.parent


def resolve_node_home(
    option: Optional[Path], config: Optional[ToolConfig] = None
) -> Optional[Path]:
    """Command line option first, then the configured `node_home`, then `PATH`."""
    if option is not None:
        return option
    configured = (config or {}).get("node_home")
    if configured:
        return Path(configured).expanduser()
    return default_node_home()
