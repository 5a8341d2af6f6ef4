"""
Core data models for the project detection pipeline.

`ProjectPath` is the immutable value threaded through the enricher chain. Each
detected capability adds a marker to `ProjectPath.markers` and, for most
capabilities, fills a typed configuration bundle: the resolved artifact paths
of that capability plus the operations that write them.

Bundles only make sense while the project directory exists. Their write
operations create the artifact's directory when missing and always replace
the whole file; they never merge with existing content.
"""

from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

from adapters.shell import write_git_pre_commit_script
from constants import (
    DENO_DEPS_CANDIDATES,
    ESLINT_IGNORE_FILE,
    ESLINT_SETTINGS_FILE,
    GIT_DIR,
    GIT_PRE_COMMIT_HOOK,
    GITHUB_WORKFLOWS_DIR,
    GITLAB_CI_FILE,
    PACKAGE_JSON_FILE,
    TSCONFIG_FILE,
    VSCODE_CONFIG_DIR,
    VSCODE_EXTENSIONS_FILE,
    VSCODE_SETTINGS_FILE,
)
from core.file_io import FilesystemFileWriter
from core.polyglot import NpmPackageConfig, PolyglotFile, guess_polyglot_files
from core.templates import ext_recommendations
from models import Extension, ProjectMarker


def _write_yaml(dir_path: Path, file_name: str, document: Mapping[str, Any]) -> None:
    FilesystemFileWriter.in_dir(dir_path, file_name).write_file(
        yaml.safe_dump(dict(document), default_flow_style=False, sort_keys=False)
    )


@dataclass(frozen=True)
class VsCodeSettingsFiles:
    """
    The `.vscode/settings.json` and `.vscode/extensions.json` pair of a project.

    Attributes:
        abs_config_path: The `.vscode` directory.
        settings_file_name: Absolute path of `settings.json`.
        extensions_file_name: Absolute path of `extensions.json`.
    """

    abs_config_path: Path
    settings_file_name: Path
    extensions_file_name: Path

    @staticmethod
    def locate(project_path: Path) -> dict[str, Path]:
        config_path = project_path / VSCODE_CONFIG_DIR
        return {
            "abs_config_path": config_path,
            "settings_file_name": config_path / VSCODE_SETTINGS_FILE,
            "extensions_file_name": config_path / VSCODE_EXTENSIONS_FILE,
        }

    def settings_exists(self) -> bool:
        return self.settings_file_name.exists()

    def extensions_exists(self) -> bool:
        return self.extensions_file_name.exists()

    def write_vscode_settings(self, settings: Mapping[str, Any]) -> None:
        """
        Replace `settings.json` with `settings`.

        Raises:
            FileWriteError: If `.vscode` cannot be created or the file cannot be written.
        """
        FilesystemFileWriter.in_dir(
            self.abs_config_path, self.settings_file_name.name
        ).write_json(dict(settings))

    def write_vscode_extensions(self, extensions: list[Extension]) -> None:
        """
        Replace `extensions.json` with the recommendations for `extensions`.

        Raises:
            FileWriteError: If `.vscode` cannot be created or the file cannot be written.
        """
        FilesystemFileWriter.in_dir(
            self.abs_config_path, self.extensions_file_name.name
        ).write_json(ext_recommendations(extensions))


@dataclass(frozen=True)
class VsCodeConfig(VsCodeSettingsFiles):
    @classmethod
    def for_project(cls, project_path: Path) -> "VsCodeConfig":
        return cls(**cls.locate(project_path))

    def config_path_exists(self) -> bool:
        return self.abs_config_path.exists()

    def write_settings(self, settings: Mapping[str, Any]) -> None:
        self.write_vscode_settings(settings)

    def write_extensions(self, extensions: list[Extension]) -> None:
        self.write_vscode_extensions(extensions)


@dataclass(frozen=True)
class GitConfig:
    """
    Artifacts of a Git work tree.

    Attributes:
        git_work_tree: The checked-out project directory.
        git_dir: The `.git` directory.
        pre_commit_hook_file_name: `.git/hooks/pre-commit`.
        gitlab_ci_file_name: `.gitlab-ci.yml` at the work tree root.
        github_workflows_path: `.github/workflows` at the work tree root.
    """

    git_work_tree: Path
    git_dir: Path
    pre_commit_hook_file_name: Path
    gitlab_ci_file_name: Path
    github_workflows_path: Path

    @classmethod
    def for_project(cls, project_path: Path) -> "GitConfig":
        git_dir = project_path / GIT_DIR
        return cls(
            git_work_tree=project_path,
            git_dir=git_dir,
            pre_commit_hook_file_name=git_dir / GIT_PRE_COMMIT_HOOK,
            gitlab_ci_file_name=project_path / GITLAB_CI_FILE,
            github_workflows_path=project_path / GITHUB_WORKFLOWS_DIR,
        )

    def write_git_pre_commit_script(self, script: str) -> None:
        write_git_pre_commit_script(self.pre_commit_hook_file_name, script)

    def write_gitlab_ci_config(self, config: Mapping[str, Any]) -> None:
        _write_yaml(self.git_work_tree, self.gitlab_ci_file_name.name, config)

    def write_github_actions_config(
        self, config: Mapping[str, Any], workflow_file_name: str = "ci.yml"
    ) -> None:
        _write_yaml(self.github_workflows_path, workflow_file_name, config)

    def github_workflow_files(self) -> list[PolyglotFile]:
        return guess_polyglot_files(self.github_workflows_path / "*.yml")


@dataclass(frozen=True)
class DenoConfig:
    """
    Deno-specific view of a project.

    Attributes:
        project_path: The project root.
        ts_config_file_name: `tsconfig.json` when present; Deno does not need one.
    """

    project_path: Path
    ts_config_file_name: Optional[Path] = None

    def update_deps_candidates(self) -> list[PolyglotFile]:
        """Every `mod.ts`, `deps.ts` and `deps-test.ts` anywhere under the project."""
        candidates: list[PolyglotFile] = []
        for name in DENO_DEPS_CANDIDATES:
            candidates += guess_polyglot_files(self.project_path / "**" / name)
        return candidates


@dataclass(frozen=True)
class ReactConfig(VsCodeSettingsFiles):
    ts_config_path: Path

    @classmethod
    def for_project(cls, project_path: Path) -> "ReactConfig":
        return cls(
            **cls.locate(project_path),
            ts_config_path=project_path / TSCONFIG_FILE,
        )

    def config_path_exists(self) -> bool:
        return self.ts_config_path.exists()


@dataclass(frozen=True)
class NodeConfig(VsCodeSettingsFiles):
    """
    Artifacts of a Node project: VS Code settings, `package.json`,
    `tsconfig.json`, ESLint settings and the git pre-commit hook.
    """

    ts_config_path: Path
    pkg_config_path: Path
    eslint_settings: Path
    eslint_ignore: Path
    git_pre_commit_hook: Path

    @classmethod
    def for_project(cls, project_path: Path) -> "NodeConfig":
        return cls(
            **cls.locate(project_path),
            ts_config_path=project_path / TSCONFIG_FILE,
            pkg_config_path=project_path / PACKAGE_JSON_FILE,
            eslint_settings=project_path / ESLINT_SETTINGS_FILE,
            eslint_ignore=project_path / ESLINT_IGNORE_FILE,
            git_pre_commit_hook=project_path / GIT_DIR / GIT_PRE_COMMIT_HOOK,
        )

    def config_path_exists(self) -> bool:
        return self.ts_config_path.exists()

    def write_package_config(self, settings: Mapping[str, Any]) -> None:
        FilesystemFileWriter.in_dir(
            self.pkg_config_path.parent, self.pkg_config_path.name
        ).write_json(dict(settings))

    def write_typescript_config(self, settings: Mapping[str, Any]) -> None:
        FilesystemFileWriter.in_dir(
            self.ts_config_path.parent, self.ts_config_path.name
        ).write_json(dict(settings))

    def write_lint_settings(
        self, settings: Mapping[str, Any], ignore_dirs: list[str]
    ) -> None:
        """Replace `.eslintrc` with `settings` and `.eslintignore` with one entry per line."""
        FilesystemFileWriter.in_dir(
            self.eslint_settings.parent, self.eslint_settings.name
        ).write_json(dict(settings))
        FilesystemFileWriter.in_dir(
            self.eslint_ignore.parent, self.eslint_ignore.name
        ).write_lines(list(ignore_dirs))

    def write_git_pre_commit_script(self, script: str) -> None:
        write_git_pre_commit_script(self.git_pre_commit_hook, script)


@dataclass(frozen=True)
class PythonConfig(VsCodeSettingsFiles):
    git_pre_commit_hook: Path

    @classmethod
    def for_project(cls, project_path: Path) -> "PythonConfig":
        return cls(
            **cls.locate(project_path),
            git_pre_commit_hook=project_path / GIT_DIR / GIT_PRE_COMMIT_HOOK,
        )

    def write_git_pre_commit_script(self, script: str) -> None:
        write_git_pre_commit_script(self.git_pre_commit_hook, script)


@dataclass(frozen=True)
class ProjectPath:
    """
    An absolute filesystem path plus every capability detected for it.

    Attributes:
        abs_project_path: Absolute, normalized project root.
        abs_project_path_exists: Whether the root existed when this value was
            first constructed. It is carried unchanged through enrichment and
            never refreshed.
        markers: Capability markers detected so far.
        vscode_config / git_config / deno_config / npm_package_config /
        react_config / node_config / python_config: Capability bundles, set
            together with the matching marker.
        ts_config_file_name: `tsconfig.json` of a TypeScript project.
        is_project_path: Always True; identifies the value as a project path.
    """

    abs_project_path: Path
    abs_project_path_exists: bool
    markers: frozenset[ProjectMarker] = frozenset()
    vscode_config: Optional[VsCodeConfig] = None
    git_config: Optional[GitConfig] = None
    deno_config: Optional[DenoConfig] = None
    ts_config_file_name: Optional[Path] = None
    npm_package_config: Optional[NpmPackageConfig] = None
    react_config: Optional[ReactConfig] = None
    node_config: Optional[NodeConfig] = None
    python_config: Optional[PythonConfig] = None
    is_project_path: bool = field(default=True, init=False)

    def has(self, marker: ProjectMarker) -> bool:
        return marker in self.markers

    def with_capability(self, *markers: ProjectMarker, **bundles: Any) -> "ProjectPath":
        """Return a copy carrying the additional `markers` and bundle fields."""
        return replace(self, markers=self.markers.union(markers), **bundles)

    def ordered_markers(self) -> list[ProjectMarker]:
        """Markers in declaration order, for stable display."""
        return [m for m in ProjectMarker if m in self.markers]

    def describe(self) -> dict[str, Any]:
        """A flat, JSON-friendly summary: the root fields plus one `True` flag per marker."""
        summary: dict[str, Any] = {
            "is_project_path": self.is_project_path,
            "abs_project_path": str(self.abs_project_path),
            "abs_project_path_exists": self.abs_project_path_exists,
        }
        for marker in self.ordered_markers():
            summary[marker.value] = True
        return summary
