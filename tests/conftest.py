"""
Shared fixtures for the controller tests.

This module provides reusable pytest fixtures that build throwaway project
trees and `*.code-workspace` files under `tmp_path`, so that detection and
batch commands run against a real filesystem.
"""

import json
from pathlib import Path
from typing import Any

import pytest


def write_tree_file(path: Path, content: Any) -> None:
    """Write `content` to `path`, serializing dicts and lists as JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, (dict, list)):
        path.write_text(json.dumps(content), encoding="utf-8")
    else:
        path.write_text(content, encoding="utf-8")


@pytest.fixture
def project_factory(tmp_path):
    """Factory for creating project directories populated with files."""

    def _factory(
        name: str = "project",
        files: dict[str, Any] | None = None,
        dirs: tuple[str, ...] = (),
    ) -> Path:
        """
        Create `tmp_path / name` with the given files and directories.

        Args:
            name: Directory name, may contain slashes.
            files: Mapping of relative file names to content. Dicts and lists
                are written as JSON, strings as is.
            dirs: Relative directories to create (e.g. ".git").

        Returns:
            The project root.
        """
        root = tmp_path / name
        root.mkdir(parents=True, exist_ok=True)
        for d in dirs:
            (root / d).mkdir(parents=True, exist_ok=True)
        for rel, content in (files or {}).items():
            write_tree_file(root / rel, content)
        return root

    return _factory


@pytest.fixture
def deno_project(project_factory):
    """A Git work tree with the VS Code Deno plugin enabled and a `mod.ts`."""
    return project_factory(
        "deno-proj",
        files={
            ".vscode/settings.json": {"deno.enable": True},
            "mod.ts": "export const x = 1;\n",
        },
        dirs=(".git",),
    )


@pytest.fixture
def npm_project(project_factory):
    """A publishable npm package that is also a Git work tree."""
    return project_factory(
        "npm-proj",
        files={
            "package.json": {
                "name": "npm-proj",
                "scripts": {"prepublishOnly": "npm run build"},
            },
        },
        dirs=(".git",),
    )


@pytest.fixture
def workspace_factory(tmp_path):
    """Factory for creating `*.code-workspace` files next to the projects."""

    def _factory(
        file_name: str,
        folders: list[dict[str, str]],
        ws_dir: Path | None = None,
    ) -> Path:
        path = (ws_dir or tmp_path / "workspaces") / file_name
        write_tree_file(path, {"folders": folders, "settings": {}})
        return path

    return _factory


@pytest.fixture
def node_home(tmp_path):
    """A NodeJS home with an (empty) bin/npm."""
    home = tmp_path / "node"
    (home / "bin").mkdir(parents=True)
    (home / "bin" / "npm").write_text("", encoding="utf-8")
    return home
