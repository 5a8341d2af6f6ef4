"""
Type definitions and data models used across the vscode-team controllers.

This module contains shared type definitions including enums and TypedDict
structures that are used throughout the codebase for type safety and consistency.
"""

from enum import Enum, StrEnum
from typing import NotRequired, TypedDict


class ProjectMarker(StrEnum):
    """
    Enumeration of the capability markers a project path can carry.

    Each value is the name of the boolean flag reported when a project is
    inspected. Markers are additive: a single project can be a Git work tree,
    a VS Code work tree, a Deno project and a TypeScript project at once.
    """

    VSCODE_PROJECT_WORK_TREE = "is_vscode_project_work_tree"
    GIT_WORK_TREE = "is_git_work_tree"
    DENO_PROJECT = "is_deno_project"
    DENO_PROJECT_BY_VSCODE_PLUGIN = "is_deno_project_by_vscode_plugin"
    DENO_PROJECT_BY_CONVENTION = "is_deno_project_by_convention"
    TYPESCRIPT_PROJECT = "is_typescript_project"
    NPM_PROJECT = "is_npm_project"
    NPM_PUBLISHABLE_PROJECT = "is_npm_publishable_project"
    HUGO_PROJECT = "is_hugo_project"
    REACT_PROJECT = "is_react_project"
    NODE_PROJECT = "is_node_project"
    PYTHON_PROJECT = "is_python_project"


class RecoverableErrorHandlerResult(Enum):
    RECOVERED = "recovered"
    UNRECOVERABLE = "unrecoverable"


class SettingsProjectType(StrEnum):
    """Project kinds for which VS Code settings can be synced from the settings repo."""

    DENO = "deno"


class SettingsSyncMode(StrEnum):
    """Which workspace folders `settings sync` targets: Deno ones, or every kind with shared settings."""

    DENO = "deno"
    AUTO = "auto"


class TemplateKind(StrEnum):
    """Project kinds that have a VS Code settings and extensions template."""

    DENO = "deno"
    NODE = "node"
    PYTHON = "python"
    REACT = "react"
    HUGO = "hugo"


class CiProvider(StrEnum):
    GITHUB = "github"
    GITLAB = "gitlab"


class VersionBump(StrEnum):
    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


class Extension(TypedDict):
    """A VS Code extension identified by its marketplace ID (e.g. "ms-python.python")."""

    marketplace_id: str


class ExtensionRecommendations(TypedDict):
    """Shape of `.vscode/extensions.json`."""

    recommendations: list[str]


class VsCodeWorkspaceFolderData(TypedDict):
    """
    One raw entry of the `folders` array of a `*.code-workspace` file.

    Attributes:
        path: A directory relative to the workspace file (e.g. "../proj1") or a
            domain-shaped clone target (e.g. "github.com/org/repo").
        name: Optional display name VS Code shows for the folder.
    """

    path: str
    name: NotRequired[str]


class ToolConfig(TypedDict, total=False):
    """
    Persistent user configuration stored in `~/.vscode-team/settings.json`.

    Attributes:
        node_home: NodeJS installation root containing `bin/npm`.
        repos_home: Directory into which workspace folders are cloned.
        settings_repo_tag: Tag or branch of the settings repository used when
            syncing VS Code settings.
    """

    node_home: str
    repos_home: str
    settings_repo_tag: str
