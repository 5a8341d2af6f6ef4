"""
Visual Studio Team Projects Controller.

Detects what kind of project lives at a path and acts on it: prints the
detected capabilities, tags and publishes releases with `git-semtag`, syncs
the shared Deno VS Code settings, updates Deno dependencies with `udd` and
writes per-capability configuration (VS Code settings, git hooks, ESLint,
CI pipelines).

Usage:
    $ projectctl inspect [PROJECT_HOME]
    $ projectctl version [PROJECT_HOME]
    $ projectctl publish [PROJECT_HOME] [--semtag VERSION] [--dry-run]
    $ projectctl deno setup|upgrade [PROJECT_HOME] [--tag TAG] [--dry-run] [--verbose]
    $ projectctl deno update [PROJECT_HOME] [--dry-run]
    $ projectctl setup [PROJECT_HOME] [--ci github|gitlab] [--overwrite] [--dry-run]

Dependencies:
    - Typer: CLI argument parsing and app structure.
    - Rich: Terminal output.
    - External tools: git, git-semtag, udd.
"""

import asyncio
from pathlib import Path
from typing import Annotated, Callable, Optional

import typer
from rich import print as pr
from rich.markup import escape

from adapters.git import GitClient
from adapters.shell import (
    ShellCommand,
    ShellContext,
    command_components,
    run_shell_command,
    shell_cmd_stderr_handler,
    shell_cmd_stdout_handler,
)
from core.config import get_config_file
from core.enrichers import (
    EnrichmentContext,
    enrich_project_path,
    is_deno_project,
    is_git_work_tree,
    is_hugo_project,
    is_node_project,
    is_python_project,
    is_react_project,
    is_vscode_project_work_tree,
)
from core.models import ProjectPath
from core.templates import (
    COMMON_EXTENSIONS,
    COMMON_SETTINGS,
    DENO_EXTENSIONS,
    DENO_GIT_PRE_COMMIT_SCRIPT,
    DENO_SETTINGS,
    HUGO_EXTENSIONS,
    NODE_ESLINT_IGNORE_DIRS,
    NODE_EXTENSIONS,
    NODE_GIT_PRE_COMMIT_SCRIPT,
    NODE_SETTINGS,
    PYTHON_EXTENSIONS,
    PYTHON_GIT_PRE_COMMIT_SCRIPT,
    PYTHON_SETTINGS,
    REACT_EXTENSIONS,
    REACT_SETTINGS,
    github_actions_config,
    gitlab_ci_config,
    node_eslint_settings,
    node_package_config,
    ts_config,
)
from core.workspace import copy_vscode_settings_from_github, udd_command
from models import CiProvider, SettingsProjectType
from ui.display import print_project
from ui.messages import error_boundary, fail
from utils import debug, determine_version

app = typer.Typer(help="Visual Studio Team Projects Controller.", no_args_is_help=True)
deno_app = typer.Typer(help="Deno project settings and dependencies.", no_args_is_help=True)
app.add_typer(deno_app, name="deno")

ProjectHome = Annotated[
    Path,
    typer.Argument(help="The root of the project folder."),
]
DryRun = Annotated[
    bool, typer.Option("--dry-run", help="Show what will happen instead of executing.")
]
Verbose = Annotated[
    bool, typer.Option("--verbose", help="Be descriptive about what's going on.")
]


def version_callback(value: bool) -> None:
    if value:
        pr(determine_version())
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            callback=version_callback,
            is_eager=True,
            help="Show version.",
        ),
    ] = None,
) -> None:
    """Visual Studio Team Projects Controller."""


def acquire_project_path(project_home: Path) -> ProjectPath:
    return enrich_project_path(EnrichmentContext(abs_project_path=project_home))


def require_existing_project(project_home: Path) -> ProjectPath:
    pp = acquire_project_path(project_home)
    if not pp.abs_project_path_exists:
        fail(f"Path {pp.abs_project_path} does not exist.")
    return pp


async def run_in_project(cmd: str | ShellCommand, pp: ProjectPath) -> None:
    if isinstance(cmd, str):
        cmd = ShellCommand(cmd=command_components(cmd), cwd=pp.abs_project_path)
    await run_shell_command(
        ShellContext(dry_run=False),
        cmd,
        shell_cmd_stdout_handler,
        shell_cmd_stderr_handler,
    )


@app.command()
def inspect(
    project_home: ProjectHome = Path("."),
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the detected capabilities as JSON.")
    ] = False,
) -> None:
    """Show what kind of project lives at PROJECT_HOME."""
    with error_boundary():
        pp = require_existing_project(project_home)
        print_project(pp, as_json=as_json)


@app.command()
def version(project_home: ProjectHome = Path(".")) -> None:
    """Show the latest final semantic version tag of the project."""
    with error_boundary():
        pp = acquire_project_path(project_home)
        if not is_git_work_tree(pp):
            fail(f"{pp.abs_project_path} is not a Git Work Tree")
        asyncio.run(run_in_project("git-semtag getfinal", pp))


@app.command()
def publish(
    project_home: ProjectHome = Path("."),
    semtag: Annotated[
        Optional[str],
        typer.Option("--semtag", help="A specific semantic version to apply as a tag."),
    ] = None,
    dry_run: DryRun = False,
) -> None:
    """Tag a final release with git-semtag and push it."""
    with error_boundary():
        pp = acquire_project_path(project_home)
        if not is_git_work_tree(pp):
            fail(f"{pp.abs_project_path} is not a Git Work Tree")

        semtag_cmd = "git-semtag final"
        if semtag:
            semtag_cmd += f" -v {semtag}"
        if dry_run:
            semtag_cmd += " -o"

        async def release() -> None:
            await run_in_project(semtag_cmd, pp)
            push = ["push", "--dry-run"] if dry_run else ["push"]
            await run_in_project(GitClient(pp.abs_project_path).in_work_tree(push), pp)

        asyncio.run(release())


def _deno_setup(project_home: Path, tag: Optional[str], dry_run: bool, verbose: bool) -> None:
    start_pp = acquire_project_path(project_home)
    if not start_pp.abs_project_path_exists:
        fail(f"{start_pp.abs_project_path} does not exist.")

    tag = tag or get_config_file().get("settings_repo_tag")
    asyncio.run(
        copy_vscode_settings_from_github(
            SettingsProjectType.DENO,
            src_repo_tag=tag,
            project_home_path=start_pp.abs_project_path,
            dry_run=dry_run,
            verbose=verbose,
        )
    )
    upgraded = acquire_project_path(project_home)
    if verbose:
        print_project(upgraded)
    if not dry_run and not is_deno_project(upgraded):
        fail("Copied VS Code settings but Deno detection failed.")


TagOption = Annotated[
    Optional[str],
    typer.Option("--tag", help="A specific version of the settings to use (default: master)."),
]


@deno_app.command("setup")
def deno_setup(
    project_home: ProjectHome = Path("."),
    tag: TagOption = None,
    dry_run: DryRun = False,
    verbose: Verbose = False,
) -> None:
    """Copy the shared Deno VS Code settings into the project."""
    with error_boundary():
        _deno_setup(project_home, tag, dry_run, verbose)


@deno_app.command("upgrade")
def deno_upgrade(
    project_home: ProjectHome = Path("."),
    tag: TagOption = None,
    dry_run: DryRun = False,
    verbose: Verbose = False,
) -> None:
    """Replace the project's Deno VS Code settings with the shared ones."""
    with error_boundary():
        _deno_setup(project_home, tag, dry_run, verbose)


@deno_app.command("update")
def deno_update(
    project_home: ProjectHome = Path("."),
    dry_run: DryRun = False,
) -> None:
    """Update Deno dependencies in mod.ts, deps.ts and deps-test.ts with udd."""
    with error_boundary():
        dp = require_existing_project(project_home)
        if not is_deno_project(dp):
            fail(f"Not a Deno project: {dp.abs_project_path}")
        # udd has its own --dry-run
        asyncio.run(run_in_project(udd_command(dp, dry_run=dry_run), dp))


def _vscode_template(pp: ProjectPath):
    if is_deno_project(pp):
        return DENO_SETTINGS, DENO_EXTENSIONS
    if is_react_project(pp):
        return REACT_SETTINGS, REACT_EXTENSIONS
    if is_node_project(pp):
        return NODE_SETTINGS, NODE_EXTENSIONS
    if is_python_project(pp):
        return PYTHON_SETTINGS, PYTHON_EXTENSIONS
    if is_hugo_project(pp):
        return COMMON_SETTINGS, HUGO_EXTENSIONS
    return COMMON_SETTINGS, COMMON_EXTENSIONS


def setup_actions(
    pp: ProjectPath, ci: Optional[CiProvider] = None, overwrite: bool = False
) -> list[tuple[Path, Callable[[], None]]]:
    """
    The configuration artifacts `setup` writes for `pp`, in write order.

    VS Code settings follow the most specific project kind detected. Git
    pre-commit hooks follow the project kind too; a project of no known kind
    gets none. `package.json` and `tsconfig.json` are only written when
    absent, unless `overwrite` is set.
    """
    actions: list[tuple[Path, Callable[[], None]]] = []

    if is_vscode_project_work_tree(pp) and pp.vscode_config:
        vscode = pp.vscode_config
        settings, extensions = _vscode_template(pp)
        actions.append((vscode.settings_file_name, lambda: vscode.write_settings(settings)))
        actions.append(
            (vscode.extensions_file_name, lambda: vscode.write_extensions(extensions))
        )

    if is_node_project(pp) and pp.node_config:
        node = pp.node_config
        actions.append(
            (
                node.eslint_settings,
                lambda: node.write_lint_settings(
                    node_eslint_settings(), list(NODE_ESLINT_IGNORE_DIRS)
                ),
            )
        )
        if overwrite or not node.pkg_config_path.exists():
            name = pp.abs_project_path.name
            actions.append(
                (node.pkg_config_path, lambda: node.write_package_config(node_package_config(name)))
            )
        if overwrite or not node.ts_config_path.exists():
            actions.append((node.ts_config_path, lambda: node.write_typescript_config(ts_config())))

    if is_git_work_tree(pp) and pp.git_config:
        git = pp.git_config
        if is_deno_project(pp):
            actions.append(
                (
                    git.pre_commit_hook_file_name,
                    lambda: git.write_git_pre_commit_script(DENO_GIT_PRE_COMMIT_SCRIPT),
                )
            )
        elif is_node_project(pp) and pp.node_config:
            node_hook = pp.node_config
            actions.append(
                (
                    node_hook.git_pre_commit_hook,
                    lambda: node_hook.write_git_pre_commit_script(NODE_GIT_PRE_COMMIT_SCRIPT),
                )
            )
        elif is_python_project(pp) and pp.python_config:
            python = pp.python_config
            actions.append(
                (
                    python.git_pre_commit_hook,
                    lambda: python.write_git_pre_commit_script(PYTHON_GIT_PRE_COMMIT_SCRIPT),
                )
            )

        match ci:
            case CiProvider.GITHUB:
                actions.append(
                    (
                        git.github_workflows_path / "ci.yml",
                        lambda: git.write_github_actions_config(github_actions_config()),
                    )
                )
            case CiProvider.GITLAB:
                actions.append(
                    (
                        git.gitlab_ci_file_name,
                        lambda: git.write_gitlab_ci_config(gitlab_ci_config()),
                    )
                )

    return actions


@app.command()
def setup(
    project_home: ProjectHome = Path("."),
    ci: Annotated[
        Optional[CiProvider],
        typer.Option("--ci", help="Also write a CI pipeline for this provider."),
    ] = None,
    overwrite: Annotated[
        bool,
        typer.Option("--overwrite", help="Replace existing package.json and tsconfig.json."),
    ] = False,
    dry_run: DryRun = False,
    verbose: Verbose = False,
) -> None:
    """Write the configuration artifacts for every detected capability."""
    with error_boundary():
        pp = require_existing_project(project_home)
        if ci is not None and not is_git_work_tree(pp):
            fail(f"{pp.abs_project_path} is not a Git Work Tree; cannot add CI for {ci}")

        for artifact, write in setup_actions(pp, ci=ci, overwrite=overwrite):
            if dry_run:
                pr(escape(f"write {artifact}"))
                continue
            if verbose:
                debug(f"Writing {artifact}")
            write()
            pr(f"[green]Wrote[/green] {escape(str(artifact))}")


if __name__ == "__main__":
    app()
