"""
Polyglot project detection.

A project is detected by folding an ordered chain of enrichers over a
`ProjectPath`. Every enricher is a pure function with the signature
`(ctx, project) -> project` that follows the same rules:

1.  If `project` already carries the enricher's marker it is returned as is,
    which makes every enricher idempotent.
2.  If the project root did not exist at construction, `project` is returned
    as is.
3.  Otherwise the enricher probes the filesystem (and possibly a JSON config
    file). A config file that cannot be parsed counts as "not detected".
4.  On detection a new value is returned with the marker and the capability
    bundle layered on top; otherwise `project` is returned unchanged.

Order matters: the Deno enricher reads the VS Code bundle attached by the
VS Code work tree enricher, so it only detects anything when that enricher
ran first. Permission errors raised by the filesystem are not caught.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Optional

from constants import (
    DENO_ENABLE_SETTING,
    GIT_DIR,
    HUGO_DIRS,
    PACKAGE_JSON_FILE,
    PYTHON_MANIFESTS,
    TSCONFIG_FILE,
)
from core.models import (
    DenoConfig,
    GitConfig,
    NodeConfig,
    ProjectPath,
    PythonConfig,
    ReactConfig,
    VsCodeConfig,
)
from core.polyglot import JsonFile, NpmPackageConfig
from models import ProjectMarker


@dataclass(frozen=True)
class EnrichmentContext:
    """The path a detection run was started for, as given by the caller."""

    abs_project_path: str | Path


ProjectPathEnricher = Callable[[EnrichmentContext, ProjectPath], ProjectPath]
EnricherChainTransform = Callable[[list[ProjectPathEnricher]], list[ProjectPathEnricher]]


def _marker_guard(marker: ProjectMarker) -> Callable[[Any], bool]:
    def guard(o: Any) -> bool:
        return isinstance(o, ProjectPath) and marker in o.markers

    guard.__name__ = marker.value
    guard.__doc__ = f"True when `o` is a ProjectPath carrying `{marker.value}`."
    return guard


def is_project_path(o: Any) -> bool:
    return isinstance(o, ProjectPath)


is_vscode_project_work_tree = _marker_guard(ProjectMarker.VSCODE_PROJECT_WORK_TREE)
is_git_work_tree = _marker_guard(ProjectMarker.GIT_WORK_TREE)
is_deno_project = _marker_guard(ProjectMarker.DENO_PROJECT)
is_deno_project_by_vscode_plugin = _marker_guard(
    ProjectMarker.DENO_PROJECT_BY_VSCODE_PLUGIN
)
is_deno_project_by_convention = _marker_guard(ProjectMarker.DENO_PROJECT_BY_CONVENTION)
is_typescript_project = _marker_guard(ProjectMarker.TYPESCRIPT_PROJECT)
is_npm_project = _marker_guard(ProjectMarker.NPM_PROJECT)
is_npm_publishable_project = _marker_guard(ProjectMarker.NPM_PUBLISHABLE_PROJECT)
is_hugo_project = _marker_guard(ProjectMarker.HUGO_PROJECT)
is_react_project = _marker_guard(ProjectMarker.REACT_PROJECT)
is_node_project = _marker_guard(ProjectMarker.NODE_PROJECT)
is_python_project = _marker_guard(ProjectMarker.PYTHON_PROJECT)


def prepare_project_path(ctx: EnrichmentContext) -> ProjectPath:
    """
    Build the un-enriched ProjectPath for `ctx.abs_project_path`.

    Relative paths are resolved against the current working directory and
    the result is normalized ("a/../b" becomes "b"); symlinks are kept.
    A missing path is not an error: `abs_project_path_exists` is simply False.
    """
    abs_path = Path(os.path.abspath(ctx.abs_project_path))
    return ProjectPath(
        abs_project_path=abs_path,
        abs_project_path_exists=abs_path.exists(),
    )


def enrich_vscode_work_tree(ctx: EnrichmentContext, pp: ProjectPath) -> ProjectPath:
    """Any existing directory is a VS Code work tree; `.vscode/` need not exist yet."""
    if is_vscode_project_work_tree(pp):
        return pp
    if not pp.abs_project_path_exists:
        return pp

    return pp.with_capability(
        ProjectMarker.VSCODE_PROJECT_WORK_TREE,
        vscode_config=VsCodeConfig.for_project(pp.abs_project_path),
    )


def enrich_git_work_tree(ctx: EnrichmentContext, pp: ProjectPath) -> ProjectPath:
    if is_git_work_tree(pp):
        return pp
    if not pp.abs_project_path_exists:
        return pp

    if not (pp.abs_project_path / GIT_DIR).exists():
        return pp
    return pp.with_capability(
        ProjectMarker.GIT_WORK_TREE,
        git_config=GitConfig.for_project(pp.abs_project_path),
    )


def force_deno_project(pp: ProjectPath) -> ProjectPath:
    """
    Mark `pp` as a Deno (and therefore TypeScript) project without probing.

    `tsconfig.json` is recorded only when it exists, since Deno projects do
    not require one.
    """
    ts_config_file = pp.abs_project_path / TSCONFIG_FILE
    ts_config_file_name = ts_config_file if ts_config_file.exists() else None
    return pp.with_capability(
        ProjectMarker.TYPESCRIPT_PROJECT,
        ProjectMarker.DENO_PROJECT,
        ts_config_file_name=ts_config_file_name,
        deno_config=DenoConfig(
            project_path=pp.abs_project_path,
            ts_config_file_name=ts_config_file_name,
        ),
    )


def _is_deno_enabled(settings_file: JsonFile) -> bool:
    try:
        settings = settings_file.content_dict()
    except ValueError:
        return False
    return bool(settings and settings.get(DENO_ENABLE_SETTING))


def enrich_deno_project_by_vscode_plugin(
    ctx: EnrichmentContext, pp: ProjectPath
) -> ProjectPath:
    """
    Detect Deno via the VS Code Deno plugin being enabled in `.vscode/settings.json`.

    Requires the VS Code work tree bundle; without it nothing is detected.
    """
    if is_deno_project_by_vscode_plugin(pp):
        return pp
    if not pp.abs_project_path_exists:
        return pp

    if not is_vscode_project_work_tree(pp) or pp.vscode_config is None:
        return pp
    if not pp.vscode_config.config_path_exists():
        return pp
    if not _is_deno_enabled(JsonFile(pp.vscode_config.settings_file_name)):
        return pp
    return force_deno_project(pp).with_capability(
        ProjectMarker.DENO_PROJECT_BY_VSCODE_PLUGIN
    )


def enrich_npm_project(ctx: EnrichmentContext, pp: ProjectPath) -> ProjectPath:
    """`package.json` makes an npm project; `scripts.prepublishOnly` makes it publishable."""
    if is_npm_project(pp):
        return pp
    if not pp.abs_project_path_exists:
        return pp

    npm_pkg_config = NpmPackageConfig(pp.abs_project_path / PACKAGE_JSON_FILE)
    if not npm_pkg_config.is_valid:
        return pp
    regular = pp.with_capability(
        ProjectMarker.NPM_PROJECT, npm_package_config=npm_pkg_config
    )
    if npm_pkg_config.is_publishable:
        return regular.with_capability(ProjectMarker.NPM_PUBLISHABLE_PROJECT)
    return regular


def enrich_typescript_project(ctx: EnrichmentContext, pp: ProjectPath) -> ProjectPath:
    if is_typescript_project(pp):
        return pp
    if not pp.abs_project_path_exists:
        return pp

    ts_config_path = pp.abs_project_path / TSCONFIG_FILE
    if not ts_config_path.exists():
        return pp
    return pp.with_capability(
        ProjectMarker.TYPESCRIPT_PROJECT, ts_config_file_name=ts_config_path
    )


def enrich_hugo_project(ctx: EnrichmentContext, pp: ProjectPath) -> ProjectPath:
    if is_hugo_project(pp):
        return pp
    if not pp.abs_project_path_exists:
        return pp

    if not any((pp.abs_project_path / d).exists() for d in HUGO_DIRS):
        return pp
    return pp.with_capability(ProjectMarker.HUGO_PROJECT)


def is_ts_config_jsx_react_set(ts_config_path: Path) -> bool:
    """True when `compilerOptions.jsx` is exactly "react"; malformed files count as False."""
    ts_config_json = JsonFile(ts_config_path)
    if not ts_config_json.file_exists:
        return False
    try:
        ts_config_content = ts_config_json.content_dict()
    except ValueError:
        return False
    if not ts_config_content:
        return False
    compiler_opts = ts_config_content.get("compilerOptions")
    return isinstance(compiler_opts, dict) and compiler_opts.get("jsx") == "react"


def enrich_react_project(ctx: EnrichmentContext, pp: ProjectPath) -> ProjectPath:
    if is_react_project(pp):
        return pp
    if not pp.abs_project_path_exists:
        return pp

    ts_config_path = pp.abs_project_path / TSCONFIG_FILE
    if not ts_config_path.exists() or not is_ts_config_jsx_react_set(ts_config_path):
        return pp
    return pp.with_capability(
        ProjectMarker.REACT_PROJECT,
        react_config=ReactConfig.for_project(pp.abs_project_path),
    )


def enrich_node_project(ctx: EnrichmentContext, pp: ProjectPath) -> ProjectPath:
    """
    A `tsconfig.json` marks a Node project.

    This is the same trigger as the TypeScript enricher, so every TypeScript
    project is also reported as a Node project, Deno ones included.
    """
    if is_node_project(pp):
        return pp
    if not pp.abs_project_path_exists:
        return pp

    if not (pp.abs_project_path / TSCONFIG_FILE).exists():
        return pp
    return pp.with_capability(
        ProjectMarker.NODE_PROJECT,
        node_config=NodeConfig.for_project(pp.abs_project_path),
    )


def enrich_python_project(ctx: EnrichmentContext, pp: ProjectPath) -> ProjectPath:
    if is_python_project(pp):
        return pp
    if not pp.abs_project_path_exists:
        return pp

    if not any((pp.abs_project_path / m).exists() for m in sorted(PYTHON_MANIFESTS)):
        return pp
    return pp.with_capability(
        ProjectMarker.PYTHON_PROJECT,
        python_config=PythonConfig.for_project(pp.abs_project_path),
    )


DEFAULT_ENRICHERS: tuple[ProjectPathEnricher, ...] = (
    enrich_vscode_work_tree,
    enrich_git_work_tree,
    enrich_deno_project_by_vscode_plugin,
    enrich_npm_project,
    enrich_typescript_project,
    enrich_hugo_project,
    enrich_react_project,
    enrich_node_project,
    enrich_python_project,
)


def enrich_project_path(
    ctx: EnrichmentContext,
    pp: Optional[ProjectPath] = None,
    enrichers: Optional[EnricherChainTransform] = None,
) -> ProjectPath:
    """
    Run the enricher chain over a project path.

    Args:
        ctx: The detection context; `ctx.abs_project_path` seeds `pp` when no
            starting value is given.
        pp: Starting value. Defaults to `prepare_project_path(ctx)`.
        enrichers: Optional transform that receives a copy of the default
            chain and returns the chain to run (filtered, reordered or
            extended). Completeness of the result is not checked.

    Returns:
        ProjectPath: The output of the last enricher; each enricher's output
            is the next one's input.

    Example:
        >>> ctx = EnrichmentContext("/tmp/p1")
        >>> only_git = enrich_project_path(
        ...     ctx, enrichers=lambda chain: [enrich_git_work_tree]
        ... )
    """
    chain = list(DEFAULT_ENRICHERS)
    transformers = enrichers(chain) if enrichers else chain

    result = pp if pp is not None else prepare_project_path(ctx)
    for tr in transformers:
        result = tr(ctx, result)
    return result


def detect_project(project_path: str | Path) -> ProjectPath:
    """Shorthand for running the default chain over `project_path`."""
    return enrich_project_path(EnrichmentContext(abs_project_path=project_path))
