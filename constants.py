"""
Application-wide constants and configuration mappings.

This module defines the file-system conventions used by the project detection
pipeline (which files and directories signal which kind of project), the
locations of configuration artifacts inside a project, and the remote
settings repository used when syncing VS Code settings.
"""

import re
from typing import Final, Mapping

from models import ProjectMarker


# Artifacts written or read inside a project root.
VSCODE_CONFIG_DIR: Final = ".vscode"
VSCODE_SETTINGS_FILE: Final = "settings.json"
VSCODE_EXTENSIONS_FILE: Final = "extensions.json"

GIT_DIR: Final = ".git"
GIT_PRE_COMMIT_HOOK: Final = "hooks/pre-commit"
GITLAB_CI_FILE: Final = ".gitlab-ci.yml"
GITHUB_WORKFLOWS_DIR: Final = ".github/workflows"

TSCONFIG_FILE: Final = "tsconfig.json"
PACKAGE_JSON_FILE: Final = "package.json"
ESLINT_SETTINGS_FILE: Final = ".eslintrc"
ESLINT_IGNORE_FILE: Final = ".eslintignore"

PYTHON_MANIFESTS: Final = frozenset({"setup.py", "requirements.txt"})
HUGO_DIRS: Final = frozenset({"themes", "layouts"})

# Files `udd` is pointed at when updating Deno dependencies.
DENO_DEPS_CANDIDATES: Final = ("mod.ts", "deps.ts", "deps-test.ts")

# The VS Code setting whose truthiness marks a folder as a Deno project.
DENO_ENABLE_SETTING: Final = "deno.enable"

# A workspace named `abc.deno.code-workspace` treats all of its folders as Deno projects.
DENO_WORKSPACE_FILE_PATTERN: Final = re.compile(r"\.deno\.code-workspace$")
CODE_WORKSPACE_SUFFIX: Final = ".code-workspace"

# Remote repository holding the canonical VS Code settings per project type.
SETTINGS_REPO_NAME: Final = "vscode-team"
SETTINGS_REPO_RAW_URL: Final = "https://raw.githubusercontent.com/shah/vscode-team"
DEFAULT_SETTINGS_REPO_TAG: Final = "master"

# Human-readable labels for each capability, in default detection order.
MARKER_LABELS: Final[Mapping[ProjectMarker, str]] = {
    ProjectMarker.VSCODE_PROJECT_WORK_TREE: "VS Code work tree",
    ProjectMarker.GIT_WORK_TREE: "Git work tree",
    ProjectMarker.DENO_PROJECT: "Deno project",
    ProjectMarker.DENO_PROJECT_BY_VSCODE_PLUGIN: "Deno (VS Code plugin)",
    ProjectMarker.DENO_PROJECT_BY_CONVENTION: "Deno (workspace convention)",
    ProjectMarker.NPM_PROJECT: "npm project",
    ProjectMarker.NPM_PUBLISHABLE_PROJECT: "npm publishable",
    ProjectMarker.TYPESCRIPT_PROJECT: "TypeScript project",
    ProjectMarker.HUGO_PROJECT: "Hugo project",
    ProjectMarker.REACT_PROJECT: "React project",
    ProjectMarker.NODE_PROJECT: "Node project",
    ProjectMarker.PYTHON_PROJECT: "Python project",
}
