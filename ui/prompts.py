"""
Interactive user prompts for the vscode-team controllers.

This module provides the interactive terminal prompts used by the
controllers. It handles two flows:

1. Configuration editing: prompts for the persistent settings (NodeJS home,
   repos home, settings repo tag) with the current values prefilled, then
   saves them.

2. Path creation: asks whether a missing repos home should be created before
   cloning or linking workspaces into it.

The module uses the `inquirer` library for interactive prompts and `rich` for
formatted terminal output.

Dependencies:
    - inquirer: Interactive terminal prompts
    - rich: Terminal formatting and colors
    - typer: CLI framework integration
"""

from pathlib import Path

import inquirer  # type: ignore
import typer
from inquirer.themes import GreenPassion  # type: ignore
from rich import print as pr
from rich.markup import escape

from constants import DEFAULT_SETTINGS_REPO_TAG
from core.config import default_node_home, get_config_file, save_config
from core.exceptions import FileIOError
from models import ToolConfig
from ui.messages import print_file_io_err


def confirm_create_path(path: Path) -> bool:
    """
    Ask whether the missing directory `path` should be created.

    Returns:
        bool: True when the user confirmed; False when they declined or
            cancelled the prompt.
    """
    questions = [
        inquirer.Confirm(
            "create",
            message=f"{path} does not exist. Create it",
            default=True,
        ),
    ]
    answers = inquirer.prompt(questions, theme=GreenPassion())
    if not answers:
        return False
    return bool(answers["create"])


def edit_tool_config() -> ToolConfig:
    """
    Interactively prompts for every configuration value with the current
    configuration prepopulated, so the user can edit and save.

    Blank answers remove the value. On cancel, exits.

    Returns:
        ToolConfig: The configuration that was saved.

    Raises:
        typer.Exit: If the prompt is cancelled or the configuration cannot be saved.
    """
    config = get_config_file()
    detected_node_home = default_node_home()
    current_node_home = config.get("node_home") or (
        str(detected_node_home) if detected_node_home else ""
    )

    pr("\n[bold green]Edit vscode-team configuration.[/bold green]\n")

    questions = [
        inquirer.Text(
            "node_home",
            message="NodeJS home (contains bin/npm)",
            default=current_node_home,
        ),
        inquirer.Text(
            "repos_home",
            message="Repos home (where workspace folders are cloned)",
            default=config.get("repos_home") or "",
        ),
        inquirer.Text(
            "settings_repo_tag",
            message="Settings repo tag",
            default=config.get("settings_repo_tag") or DEFAULT_SETTINGS_REPO_TAG,
        ),
    ]

    answers = inquirer.prompt(questions, theme=GreenPassion())

    if not answers:
        raise typer.Exit(code=1)

    new_config: ToolConfig = {}
    for key in ("node_home", "repos_home", "settings_repo_tag"):
        value = (answers.get(key) or "").strip()
        if value:
            new_config[key] = value  # type: ignore[literal-required]

    node_home = new_config.get("node_home")
    if node_home and not (Path(node_home).expanduser() / "bin" / "npm").exists():
        pr(
            f"[yellow]Warning:[/yellow] {escape(node_home)} has no bin/npm; "
            "npm commands will refuse to run until it does."
        )

    try:
        save_config(new_config)
    except FileIOError as e:
        print_file_io_err(e)

    pr("[green]Config saved.[/green]\n")
    return new_config
