"""
Visual Studio Team Workspaces Controller.

Drives every folder of one or more VS Code `*.code-workspace` files at once:
clones them, runs git, npm and deno across them, and syncs shared VS Code
settings into them. Each folder is detected independently, so a git command
only reaches Git work trees, an npm command only npm projects, and so on.

Usage:
    $ wsctl setup WORKSPACES_HOME [REPOS_HOME] [--no-pull] [--create-repos-path]
    $ wsctl vscws inspect folders FILE.code-workspace...
    $ wsctl vscws git clone FILE.code-workspace... --repos-home PATH
    $ wsctl vscws git pull FILE.code-workspace... [--recurse-submodules]
    $ wsctl vscws npm install FILE.code-workspace... [--node-home PATH]
    $ wsctl vscws deno update FILE.code-workspace... [--dry-run]

Dependencies:
    - Typer: CLI argument parsing and app structure.
    - Rich: Terminal output.
    - Inquirer: Confirmation prompts.
    - External tools: git, npm, deno, udd.
"""

import asyncio
import sys
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich import print as pr
from rich.markup import escape

from adapters.shell import post_shell_cmd_block_status_reporter
from core.config import get_config_file, resolve_node_home
from core.enrichers import is_npm_publishable_project
from core.file_io import ensure_dir
from core.workspace import (
    DenoProjectHandlerOptions,
    GitReposContext,
    NpmCommandHandlerOptions,
    VsCodeWorkspaceFolderContext,
    VsCodeWorkspacesContext,
    git_clone_vscode_folders,
    setup_workspaces,
    udd_command,
    vscode_workspace_folders,
    workspace_folders_deno_project_handler,
    workspace_folders_git_command_handler,
    workspace_folders_npm_command_handler,
    workspace_folders_settings_sync_handler,
)
from models import (
    RecoverableErrorHandlerResult,
    SettingsProjectType,
    SettingsSyncMode,
    VersionBump,
)
from ui.display import print_workspace_folders
from ui.messages import error_boundary, fail
from ui.prompts import confirm_create_path
from utils import determine_version

app = typer.Typer(help="Visual Studio Team Workspaces Controller.", no_args_is_help=True)
vscws_app = typer.Typer(help="Act on the folders of VS Code workspace files.", no_args_is_help=True)
inspect_app = typer.Typer(help="Show workspace folders.", no_args_is_help=True)
settings_app = typer.Typer(help="VS Code settings of workspace folders.", no_args_is_help=True)
git_app = typer.Typer(help="Run git in every Git work tree folder.", no_args_is_help=True)
npm_app = typer.Typer(help="Run npm in every npm project folder.", no_args_is_help=True)
npm_version_app = typer.Typer(help="Version npm packages.", no_args_is_help=True)
deno_app = typer.Typer(help="Run deno in every Deno project folder.", no_args_is_help=True)

app.add_typer(vscws_app, name="vscws")
vscws_app.add_typer(inspect_app, name="inspect")
vscws_app.add_typer(settings_app, name="settings")
vscws_app.add_typer(git_app, name="git")
vscws_app.add_typer(npm_app, name="npm")
vscws_app.add_typer(deno_app, name="deno")
npm_app.add_typer(npm_version_app, name="version")

WsFiles = Annotated[
    list[Path],
    typer.Argument(help="Visual Studio Code workspace files."),
]
DryRun = Annotated[
    bool, typer.Option("--dry-run", help="Show what will happen instead of executing.")
]
Verbose = Annotated[
    bool, typer.Option("--verbose", help="Be descriptive about what's going on.")
]
CreateReposPath = Annotated[
    bool,
    typer.Option("--create-repos-path", help="Create the repos home if it does not exist."),
]
NodeHome = Annotated[
    Optional[Path],
    typer.Option(
        "--node-home",
        help="NodeJS home path (e.g. $HOME/.nvm/versions/node/v14.5.0).",
    ),
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
    """Visual Studio Team Workspaces Controller."""


def _names(ws_files: list[Path]) -> list[str]:
    return [str(f) for f in ws_files]


def _finish(ok: bool) -> None:
    if not ok:
        raise typer.Exit(code=1)


def repos_home_path_handler(create_repos_path: bool, dry_run: bool):
    """
    Build the handler that decides what to do about a missing repos home.

    The path is created when `--create-repos-path` was given, or when the
    user confirms interactively; without a terminal nobody is asked.
    """

    def handler(ctx: GitReposContext) -> RecoverableErrorHandlerResult:
        path = ctx.repos_home_path
        if create_repos_path or (sys.stdin.isatty() and confirm_create_path(path)):
            if dry_run:
                pr(escape(f"mkdir -p {path}"))
            else:
                ensure_dir(path)
            return RecoverableErrorHandlerResult.RECOVERED
        pr(f"[red]Error:[/red] {escape(str(path))} does not exist")
        return RecoverableErrorHandlerResult.UNRECOVERABLE

    return handler


def _repos_home(repos_home: Optional[Path]) -> Path:
    if repos_home is not None:
        return repos_home
    configured = get_config_file().get("repos_home")
    if not configured:
        fail("No repos home given; pass one or run `configctl configure`.")
    return Path(configured).expanduser()


@app.command()
def setup(
    workspaces_home: Annotated[
        Path, typer.Argument(help="Checkout of the master workspaces repository.")
    ],
    repos_home: Annotated[
        Optional[Path], typer.Argument(help="Usually $HOME/workspaces.")
    ] = None,
    no_pull: Annotated[
        bool, typer.Option("--no-pull", help="Do not pull the workspaces repository first.")
    ] = False,
    create_repos_path: CreateReposPath = False,
    dry_run: DryRun = False,
    verbose: Verbose = False,
) -> None:
    """Link every *.code-workspace file of WORKSPACES_HOME into REPOS_HOME."""
    with error_boundary():
        home = _repos_home(repos_home)
        ctx = GitReposContext(
            repos_home_path=home,
            repos_home_path_does_not_exist_handler=repos_home_path_handler(
                create_repos_path, dry_run
            ),
            dry_run=dry_run,
            verbose=verbose,
        )
        _finish(
            asyncio.run(
                setup_workspaces(
                    ctx, workspaces_home, pull_master_ws_repo_first=not no_pull
                )
            )
        )


@inspect_app.command("folders")
def inspect_folders(
    ws_files: WsFiles,
    as_json: Annotated[
        bool, typer.Option("--json", help="Print the folders as JSON.")
    ] = False,
) -> None:
    """Show every folder of the workspace files and what kind of project it is."""
    with error_boundary():
        folders = vscode_workspace_folders(
            VsCodeWorkspacesContext(ws_file_names=_names(ws_files))
        )
        print_workspace_folders(folders, as_json=as_json)


@settings_app.command("sync")
def settings_sync(
    mode: Annotated[SettingsSyncMode, typer.Argument(help="Which folders to sync.")],
    ws_files: WsFiles,
    tag: Annotated[
        Optional[str],
        typer.Option("--tag", help="A specific version of the settings repo to use."),
    ] = None,
    dry_run: DryRun = False,
    verbose: Verbose = False,
) -> None:
    """Copy the shared VS Code settings into every matching folder."""
    with error_boundary():
        project_type = SettingsProjectType.DENO if mode == SettingsSyncMode.DENO else None
        _finish(
            asyncio.run(
                workspace_folders_settings_sync_handler(
                    _names(ws_files),
                    project_type=project_type,
                    src_repo_tag=tag or get_config_file().get("settings_repo_tag"),
                    dry_run=dry_run,
                    verbose=verbose,
                )
            )
        )


# ==========================================
# git
# ==========================================


@git_app.command("clone")
def git_clone(
    ws_files: WsFiles,
    repos_home: Annotated[
        Optional[Path],
        typer.Option("--repos-home", help="Where to clone; usually $HOME/workspaces."),
    ] = None,
    recurse_submodules: Annotated[
        bool, typer.Option("--recurse-submodules", help="Also clone submodules.")
    ] = False,
    create_repos_path: CreateReposPath = False,
    dry_run: DryRun = False,
    verbose: Verbose = False,
) -> None:
    """Clone every folder from https://<folder path> into the repos home."""
    with error_boundary():
        repos_ctx = GitReposContext(
            repos_home_path=_repos_home(repos_home),
            repos_home_path_does_not_exist_handler=repos_home_path_handler(
                create_repos_path, dry_run
            ),
            dry_run=dry_run,
            verbose=verbose,
        )
        _finish(
            asyncio.run(
                git_clone_vscode_folders(
                    VsCodeWorkspacesContext(ws_file_names=_names(ws_files)),
                    repos_ctx,
                    recurse_submodules=recurse_submodules,
                )
            )
        )


@git_app.command("fetch")
def git_fetch(ws_files: WsFiles, dry_run: DryRun = False) -> None:
    with error_boundary():
        # git fetch has its own --dry-run
        cmd = ["fetch", *(["--dry-run"] if dry_run else [])]
        _finish(
            asyncio.run(workspace_folders_git_command_handler(False, _names(ws_files), cmd))
        )


@git_app.command("pull")
def git_pull(
    ws_files: WsFiles,
    recurse_submodules: Annotated[
        bool,
        typer.Option("--recurse-submodules", help="Also update submodules recursively."),
    ] = False,
    dry_run: DryRun = False,
) -> None:
    with error_boundary():
        names = _names(ws_files)
        cmd = ["pull"]
        if recurse_submodules:
            cmd.append("--recurse-submodules")
        if dry_run:
            cmd.append("--dry-run")

        async def pull() -> bool:
            ok = await workspace_folders_git_command_handler(False, names, cmd)
            if recurse_submodules:
                # git submodule update has no dry-run of its own
                ok = await workspace_folders_git_command_handler(
                    dry_run, names, ["submodule", "update", "--recursive"]
                ) and ok
            return ok

        _finish(asyncio.run(pull()))


def _status_reporter(ctx: VsCodeWorkspaceFolderContext):
    return post_shell_cmd_block_status_reporter(f"[{ctx.folder.path}]")


@git_app.command("status")
def git_status(ws_files: WsFiles, dry_run: DryRun = False) -> None:
    with error_boundary():
        _finish(
            asyncio.run(
                workspace_folders_git_command_handler(
                    dry_run, _names(ws_files), ["status", "-s"], _status_reporter
                )
            )
        )


async def _commit(
    names: list[str], message: str, dry_run: bool, add: bool, push: bool
) -> bool:
    # git's own --dry-run is used for every step
    git_dry_run = ["--dry-run"] if dry_run else []
    ok = True
    if add:
        ok = await workspace_folders_git_command_handler(
            False, names, ["add", *git_dry_run, "."]
        )
    ok = await workspace_folders_git_command_handler(
        False, names, ["commit", *git_dry_run, "-am", message]
    ) and ok
    if push:
        ok = await workspace_folders_git_command_handler(
            False, names, ["push", *git_dry_run]
        ) and ok
    return ok


Message = Annotated[str, typer.Argument(help="The commit message.")]


@git_app.command("commit")
def git_commit(message: Message, ws_files: WsFiles, dry_run: DryRun = False) -> None:
    with error_boundary():
        _finish(asyncio.run(_commit(_names(ws_files), message, dry_run, False, False)))


@git_app.command("add-commit")
def git_add_commit(message: Message, ws_files: WsFiles, dry_run: DryRun = False) -> None:
    with error_boundary():
        _finish(asyncio.run(_commit(_names(ws_files), message, dry_run, True, False)))


@git_app.command("add-commit-push")
def git_add_commit_push(
    message: Message, ws_files: WsFiles, dry_run: DryRun = False
) -> None:
    with error_boundary():
        _finish(asyncio.run(_commit(_names(ws_files), message, dry_run, True, True)))


# ==========================================
# npm
# ==========================================


def _node_home(node_home: Optional[Path]) -> Path:
    resolved = resolve_node_home(node_home, get_config_file())
    if resolved is None:
        fail("NodeJS home not found; pass --node-home or run `configctl configure`.")
    return resolved


def _npm(
    npm_cmd_params: str,
    ws_files: list[Path],
    node_home: Optional[Path],
    dry_run: bool,
    filter=None,
) -> None:
    with error_boundary():
        opts = NpmCommandHandlerOptions(
            dry_run=dry_run,
            ws_file_names=_names(ws_files),
            node_home_path=_node_home(node_home),
            npm_cmd_params=npm_cmd_params,
            filter=filter,
        )
        _finish(asyncio.run(workspace_folders_npm_command_handler(opts)))


@npm_app.command("install")
def npm_install(ws_files: WsFiles, node_home: NodeHome = None, dry_run: DryRun = False) -> None:
    _npm("install", ws_files, node_home, dry_run)


@npm_app.command("publish")
def npm_publish(ws_files: WsFiles, node_home: NodeHome = None, dry_run: DryRun = False) -> None:
    """Publish every folder whose package.json has a prepublishOnly script."""
    _npm(
        "publish",
        ws_files,
        node_home,
        dry_run,
        filter=lambda ctx: is_npm_publishable_project(ctx.folder.project),
    )


@npm_app.command("update")
def npm_update(ws_files: WsFiles, node_home: NodeHome = None, dry_run: DryRun = False) -> None:
    _npm("update", ws_files, node_home, dry_run)


@npm_app.command("test")
def npm_test(ws_files: WsFiles, node_home: NodeHome = None, dry_run: DryRun = False) -> None:
    _npm("test", ws_files, node_home, dry_run)


@npm_version_app.command("bump")
def npm_version_bump(
    bump: Annotated[VersionBump, typer.Argument(help="Which part of the version to bump.")],
    ws_files: WsFiles,
    no_git_tag_version: Annotated[
        bool,
        typer.Option("--no-git-tag-version", help="Do not commit and tag the new version."),
    ] = False,
    node_home: NodeHome = None,
    dry_run: DryRun = False,
) -> None:
    params = f"version {bump.value}"
    if no_git_tag_version:
        params = f"--no-git-tag-version {params}"
    _npm(params, ws_files, node_home, dry_run)


# ==========================================
# deno
# ==========================================


def _deno(command: str, ws_files: list[Path], dry_run: bool) -> None:
    with error_boundary():
        opts = DenoProjectHandlerOptions(
            dry_run=dry_run,
            ws_file_names=_names(ws_files),
            command=lambda _dp: command,
        )
        _finish(asyncio.run(workspace_folders_deno_project_handler(opts)))


@deno_app.command("lint")
def deno_lint(ws_files: WsFiles, dry_run: DryRun = False) -> None:
    _deno("deno lint --unstable", ws_files, dry_run)


@deno_app.command("fmt")
def deno_fmt(ws_files: WsFiles, dry_run: DryRun = False) -> None:
    _deno("deno fmt --unstable", ws_files, dry_run)


@deno_app.command("test")
def deno_test(ws_files: WsFiles, dry_run: DryRun = False) -> None:
    _deno("deno test --unstable -A", ws_files, dry_run)


def _has_deps_candidates(ctx: VsCodeWorkspaceFolderContext) -> bool:
    deno_config = ctx.folder.project.deno_config
    return deno_config is not None and len(deno_config.update_deps_candidates()) > 0


@deno_app.command("update")
def deno_update(ws_files: WsFiles, dry_run: DryRun = False) -> None:
    """Update dependencies of every Deno folder that has mod.ts, deps.ts or deps-test.ts."""
    with error_boundary():
        opts = DenoProjectHandlerOptions(
            # udd has its own --dry-run
            dry_run=False,
            ws_file_names=_names(ws_files),
            command=lambda dp: udd_command(dp, dry_run=dry_run),
            filter=_has_deps_candidates,
        )
        _finish(asyncio.run(workspace_folders_deno_project_handler(opts)))


if __name__ == "__main__":
    app()
