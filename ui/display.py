"""
Rich renderings of detected projects and workspace folders.
"""

import json
from typing import Any

from rich.markup import escape
from rich.table import Table
from rich.tree import Tree

from constants import MARKER_LABELS
from core.models import ProjectPath
from core.workspace import VsCodeWorkspaceFolderContext
from utils import console


def project_table(pp: ProjectPath) -> Table:
    """A two-column table of the project root and every detected capability."""
    table = Table(title=escape(str(pp.abs_project_path)), show_header=True)
    table.add_column("Capability", style="cyan")
    table.add_column("Details", style="green")

    table.add_row("exists", str(pp.abs_project_path_exists))
    for marker in pp.ordered_markers():
        table.add_row(MARKER_LABELS[marker], _marker_details(pp, marker.value))
    return table


def _marker_details(pp: ProjectPath, marker: str) -> str:
    match marker:
        case "is_vscode_project_work_tree" if pp.vscode_config:
            return escape(str(pp.vscode_config.abs_config_path))
        case "is_git_work_tree" if pp.git_config:
            return escape(str(pp.git_config.git_dir))
        case "is_typescript_project" if pp.ts_config_file_name:
            return escape(str(pp.ts_config_file_name))
        case "is_npm_project" if pp.npm_package_config:
            return escape(str(pp.npm_package_config.file_name))
        case _:
            return ""


def workspace_tree(folders: list[VsCodeWorkspaceFolderContext]) -> Tree:
    """Workspace files as branches, their folders as leaves listing capabilities."""
    root = Tree("[bold]Workspace folders[/bold]")
    branches: dict[str, Tree] = {}
    for ctx in folders:
        branch = branches.get(ctx.ws_file_name)
        if branch is None:
            branch = root.add(f"[bold cyan]{escape(ctx.ws_file_name)}[/bold cyan]")
            branches[ctx.ws_file_name] = branch

        project = ctx.folder.project
        label = escape(ctx.folder.name or ctx.folder.path)
        if not project.abs_project_path_exists:
            label += " [red](missing)[/red]"
        leaf = branch.add(label)
        leaf.add(f"[dim]{escape(str(project.abs_project_path))}[/dim]")
        for marker in project.ordered_markers():
            leaf.add(f"[green]{MARKER_LABELS[marker]}[/green]")
    return root


def print_json(data: Any) -> None:
    """Pretty-print a JSON document with syntax highlighting."""
    console.print_json(json.dumps(data), indent=2)


def print_project(pp: ProjectPath, as_json: bool = False) -> None:
    if as_json:
        print_json(pp.describe())
    else:
        console.print(project_table(pp))


def print_workspace_folders(
    folders: list[VsCodeWorkspaceFolderContext], as_json: bool = False
) -> None:
    if as_json:
        print_json(
            [
                {
                    "ws_file_name": ctx.ws_file_name,
                    "path": ctx.folder.path,
                    **ctx.folder.project.describe(),
                }
                for ctx in folders
            ]
        )
    else:
        console.print(workspace_tree(folders))
