"""
VS Code multi-root workspace support.

A `*.code-workspace` file lists project folders relative to the workspace
file itself. This module resolves those folders, runs each one through the
project detection chain, and drives git, npm and deno across all of them.

Folder paths double as clone targets: a folder listed as
"github.com/shah/uniform-resource" is cloned from
`https://github.com/shah/uniform-resource` into
`<repos-home>/github.com/shah/uniform-resource`.

Batch operations launch one task per matching folder and wait for all of
them. A folder that fails is reported and never stops the others; every
batch operation returns False when anything failed.
"""

import asyncio
import os
from dataclasses import dataclass, field, replace
from functools import partial
from pathlib import Path
from typing import Awaitable, Callable, Optional

from rich.markup import escape

from adapters.download import copy_source_to_dest
from adapters.git import GitClient
from adapters.shell import (
    ShellCmdStatusReporter,
    ShellCommand,
    ShellContext,
    command_components,
    post_shell_cmd_block_status_reporter,
    prep_shell_cmd_stdout_reporter,
    run_shell_command,
    shell_cmd_stderr_handler,
    shell_cmd_stdout_handler,
)
from constants import (
    CODE_WORKSPACE_SUFFIX,
    DEFAULT_SETTINGS_REPO_TAG,
    DENO_WORKSPACE_FILE_PATTERN,
    SETTINGS_REPO_NAME,
    SETTINGS_REPO_RAW_URL,
    VSCODE_CONFIG_DIR,
    VSCODE_EXTENSIONS_FILE,
    VSCODE_SETTINGS_FILE,
)
from core.enrichers import (
    EnrichmentContext,
    enrich_deno_project_by_vscode_plugin,
    enrich_project_path,
    force_deno_project,
    is_deno_project,
    is_git_work_tree,
    is_npm_project,
)
from core.exceptions import FileWriteError, WorkspaceParseError
from core.file_io import FileReader, FilesystemFileReader
from core.models import ProjectPath
from models import (
    ProjectMarker,
    RecoverableErrorHandlerResult,
    SettingsProjectType,
    VsCodeWorkspaceFolderData,
)
from utils import console, debug, err_console


# ==========================================
# Workspace documents and folders
# ==========================================


@dataclass(frozen=True)
class VsCodeWorkspaceFolder:
    """
    A workspace folder after detection.

    Attributes:
        path: The folder path exactly as written in the workspace file.
        project: The detected project at the resolved absolute path.
        name: The optional display name from the workspace file.
    """

    path: str
    project: ProjectPath
    name: Optional[str] = None


@dataclass(frozen=True)
class VsCodeWorkspace:
    folders: list[VsCodeWorkspaceFolderData]
    settings: dict = field(default_factory=dict)


@dataclass(frozen=True)
class VsCodeWorkspaceFolderContext:
    """One folder of one workspace file, kept together for batch execution."""

    ws_file_name: str
    workspace: VsCodeWorkspace
    folder: VsCodeWorkspaceFolder


VsCodeWorkspaceFolderEnricher = Callable[
    [str, "VsCodeWorkspaceFolderData | VsCodeWorkspaceFolder"], VsCodeWorkspaceFolder
]


@dataclass(frozen=True)
class VsCodeWorkspacesContext:
    """
    The workspace files to read and how to react when one is unusable.

    Attributes:
        ws_file_names: Workspace files, absolute or relative to the cwd.
        ws_file_does_not_exist_handler: Called for a missing file, which is
            then skipped. Defaults to printing an error.
        ws_file_parse_error_handler: Called for a file that is not a valid
            workspace document. It may return a replacement workspace;
            returning None skips the file after printing an error.
    """

    ws_file_names: list[str]
    ws_file_does_not_exist_handler: Optional[
        Callable[["VsCodeWorkspacesContext", str], None]
    ] = None
    ws_file_parse_error_handler: Optional[
        Callable[
            ["VsCodeWorkspacesContext", str, WorkspaceParseError],
            Optional[VsCodeWorkspace],
        ]
    ] = None


def resolve_workspace_folder_path(ws_file_name: str | Path, folder_path: str) -> Path:
    """
    Resolve a folder entry against the directory of its workspace file.

    >>> resolve_workspace_folder_path("/home/u/ws/sample.code-workspace", "../proj1")
    PosixPath('/home/u/proj1')
    """
    ws_dir = os.path.dirname(os.path.abspath(ws_file_name))
    return Path(os.path.normpath(os.path.join(ws_dir, folder_path)))


def read_vscode_workspace(
    ws_file_name: str | Path, reader: Optional[FileReader] = None
) -> VsCodeWorkspace:
    """
    Parse a `*.code-workspace` file.

    Raises:
        WorkspaceParseError: If the file is not JSON, is not an object, or
            has no `folders` list of objects with a string `path`.
        FileReadError: If the file exists but cannot be read.
    """
    reader = reader or FilesystemFileReader()
    try:
        document = reader.read_json(Path(ws_file_name))
    except ValueError as e:
        raise WorkspaceParseError(
            str(ws_file_name),
            message=f"Unable to parse {ws_file_name}: {e}",
            original_exception=e,
        ) from e

    if not isinstance(document, dict):
        raise WorkspaceParseError(
            str(ws_file_name), message=f"{ws_file_name} is not a JSON object"
        )
    folders = document.get("folders")
    if not isinstance(folders, list) or not all(
        isinstance(f, dict) and isinstance(f.get("path"), str) for f in folders
    ):
        raise WorkspaceParseError(
            str(ws_file_name),
            message=f"{ws_file_name} has no valid 'folders' list",
        )
    settings = document.get("settings")
    return VsCodeWorkspace(
        folders=folders, settings=settings if isinstance(settings, dict) else {}
    )


def enrich_project_folder(
    ws_file_name: str, folder: VsCodeWorkspaceFolderData | VsCodeWorkspaceFolder
) -> VsCodeWorkspaceFolder:
    """Detect the project behind a raw folder entry; detected folders pass through."""
    if isinstance(folder, VsCodeWorkspaceFolder):
        return folder
    project_path = resolve_workspace_folder_path(ws_file_name, folder["path"])
    project = enrich_project_path(EnrichmentContext(abs_project_path=project_path))
    return VsCodeWorkspaceFolder(
        path=folder["path"], project=project, name=folder.get("name")
    )


def enrich_deno_project_folder(
    ws_file_name: str, f: VsCodeWorkspaceFolderData | VsCodeWorkspaceFolder
) -> VsCodeWorkspaceFolder:
    """
    Detect a Deno folder either through the VS Code Deno plugin or through
    the workspace naming convention (`abc.deno.code-workspace`).

    The convention only applies to folders that exist.
    """
    folder = enrich_project_folder(ws_file_name, f)
    project = folder.project
    pp = enrich_deno_project_by_vscode_plugin(
        EnrichmentContext(abs_project_path=project.abs_project_path), project
    )
    if is_deno_project(pp):
        return replace(folder, project=pp)

    if project.abs_project_path_exists and DENO_WORKSPACE_FILE_PATTERN.search(
        str(ws_file_name)
    ):
        by_convention = force_deno_project(project).with_capability(
            ProjectMarker.DENO_PROJECT_BY_CONVENTION
        )
        return replace(folder, project=by_convention)
    return folder


def enrich_vscode_workspace_folder_types(
    ws_file_name: str, folder: VsCodeWorkspaceFolderData | VsCodeWorkspaceFolder
) -> VsCodeWorkspaceFolder:
    transformers: list[VsCodeWorkspaceFolderEnricher] = [enrich_deno_project_folder]
    result = enrich_project_folder(ws_file_name, folder)
    for tr in transformers:
        result = tr(ws_file_name, result)
    return result


def _print_missing_ws_file(ctx: VsCodeWorkspacesContext, ws_file_name: str) -> None:
    err_console.print(f"[red]Workspace file {escape(ws_file_name)} does not exist.[/red]")


def vscode_workspace_folders(
    workspaces_ctx: VsCodeWorkspacesContext,
    transform_folders: VsCodeWorkspaceFolderEnricher = enrich_vscode_workspace_folder_types,
) -> list[VsCodeWorkspaceFolderContext]:
    """
    Read every workspace file and detect every folder it lists.

    Unusable workspace files contribute no folders; see
    `VsCodeWorkspacesContext` for how they are reported.

    Returns:
        list[VsCodeWorkspaceFolderContext]: One record per folder, in file
            order and then folder order.
    """
    result: list[VsCodeWorkspaceFolderContext] = []
    for wsfn in workspaces_ctx.ws_file_names:
        wsfn = str(wsfn)
        if not Path(wsfn).exists():
            handler = workspaces_ctx.ws_file_does_not_exist_handler or _print_missing_ws_file
            handler(workspaces_ctx, wsfn)
            continue

        try:
            workspace = read_vscode_workspace(wsfn)
        except WorkspaceParseError as e:
            replacement = (
                workspaces_ctx.ws_file_parse_error_handler(workspaces_ctx, wsfn, e)
                if workspaces_ctx.ws_file_parse_error_handler
                else None
            )
            if replacement is None:
                err_console.print(f"[red]{escape(e.message)}[/red]")
                continue
            workspace = replacement

        for folder in workspace.folders:
            result.append(
                VsCodeWorkspaceFolderContext(
                    ws_file_name=wsfn,
                    workspace=workspace,
                    folder=transform_folders(wsfn, folder),
                )
            )
    return result


# ==========================================
# Batch execution
# ==========================================


async def _await_all(runs: list[tuple[str, Callable[[], Awaitable[None]]]]) -> bool:
    """Await every run; report each failure under its label."""
    results = await asyncio.gather(*(run() for _, run in runs), return_exceptions=True)
    ok = True
    for (label, _), outcome in zip(runs, results):
        if isinstance(outcome, BaseException):
            ok = False
            err_console.print(f"[red]{escape(label)}: {escape(str(outcome))}[/red]")
    return ok


def _ws_folders(ws_file_names: list[str] | str) -> list[VsCodeWorkspaceFolderContext]:
    names = ws_file_names if isinstance(ws_file_names, list) else [ws_file_names]
    return vscode_workspace_folders(VsCodeWorkspacesContext(ws_file_names=names))


def _stdout_handler(
    reporter: Optional[Callable[[VsCodeWorkspaceFolderContext], ShellCmdStatusReporter]],
    ctx: VsCodeWorkspaceFolderContext,
):
    return prep_shell_cmd_stdout_reporter(reporter(ctx)) if reporter else shell_cmd_stdout_handler


@dataclass(frozen=True)
class GitReposContext:
    """
    The directory workspace folders are cloned into.

    Attributes:
        repos_home_path: The repos home, usually `$HOME/workspaces`.
        repos_home_path_does_not_exist_handler: Called when the repos home
            is missing; it may create it and return RECOVERED. When it returns
            UNRECOVERABLE it is responsible for reporting the problem.
        dry_run: Print commands instead of running them.
        verbose: Narrate what is going on.
    """

    repos_home_path: Path
    repos_home_path_does_not_exist_handler: Optional[
        Callable[["GitReposContext"], RecoverableErrorHandlerResult]
    ] = None
    dry_run: bool = False
    verbose: bool = False


def is_valid_git_repos_context(ctx: GitReposContext) -> bool:
    if ctx.repos_home_path.exists():
        return True
    if ctx.repos_home_path_does_not_exist_handler:
        match ctx.repos_home_path_does_not_exist_handler(ctx):
            case RecoverableErrorHandlerResult.RECOVERED:
                return True
            case RecoverableErrorHandlerResult.UNRECOVERABLE:
                return False
    if ctx.verbose:
        err_console.print(
            f"[red]Repositories home path '{escape(str(ctx.repos_home_path))}' does not exist.[/red]"
        )
    return False


async def setup_workspaces(
    ctx: GitReposContext,
    workspaces_master_repo: Path,
    pull_master_ws_repo_first: bool = True,
) -> bool:
    """
    Symlink the top-level `*.code-workspace` files of the master workspaces
    repo into the repos home, replacing whatever is there.

    When `pull_master_ws_repo_first` is set and the master repo is a Git work
    tree, it is pulled before linking.
    """
    if not is_valid_git_repos_context(ctx):
        return False

    master_repo = Path(os.path.abspath(workspaces_master_repo))
    if ctx.verbose:
        debug(f"Setting up {master_repo} *.code-workspace files into {ctx.repos_home_path}")

    if pull_master_ws_repo_first:
        master = enrich_project_path(EnrichmentContext(abs_project_path=master_repo))
        if is_git_work_tree(master):
            await run_shell_command(
                ShellContext(dry_run=ctx.dry_run),
                GitClient(master.abs_project_path).command(["pull"]),
                shell_cmd_stdout_handler,
                shell_cmd_stderr_handler,
            )

    for src_path in sorted(master_repo.glob(f"*{CODE_WORKSPACE_SUFFIX}")):
        if not src_path.is_file():
            continue
        dest_path = ctx.repos_home_path / src_path.name
        if ctx.dry_run:
            console.print(escape(f"rm -f {dest_path}"))
            console.print(escape(f"ln -s {src_path} {dest_path}"))
            continue
        try:
            if dest_path.is_symlink() or dest_path.exists():
                dest_path.unlink()
                if ctx.verbose:
                    debug(f"Removed {dest_path}")
            dest_path.symlink_to(src_path)
        except OSError as e:
            raise FileWriteError(
                message=f"Failed to link {dest_path} to {src_path}",
                file_path=str(dest_path),
                original_exception=e,
            ) from e
        if ctx.verbose:
            debug(f"Created symlink {dest_path} -> {src_path}")
    return True


async def git_clone_vscode_folders(
    workspaces_ctx: VsCodeWorkspacesContext,
    repos_ctx: GitReposContext,
    recurse_submodules: bool = False,
) -> bool:
    """Clone every workspace folder that is not yet present in the repos home."""
    if not is_valid_git_repos_context(repos_ctx):
        return False

    shell_ctx = ShellContext(dry_run=repos_ctx.dry_run)
    runs: list[tuple[str, Callable[[], Awaitable[None]]]] = []
    for folder_ctx in vscode_workspace_folders(workspaces_ctx):
        folder_path = folder_ctx.folder.path
        repo_path = Path(os.path.normpath(repos_ctx.repos_home_path / folder_path))
        if repo_path.exists():
            if repos_ctx.verbose:
                debug(
                    f"Repo {os.path.relpath(repo_path, repos_ctx.repos_home_path)} "
                    f"already exists in {repos_ctx.repos_home_path}"
                )
            continue

        if not repo_path.parent.exists():
            if repos_ctx.dry_run:
                console.print(escape(f"mkdir -p {repo_path.parent}"))
            else:
                try:
                    repo_path.parent.mkdir(parents=True, exist_ok=True)
                except OSError as e:
                    raise FileWriteError(
                        message=f"Failed to create directory: {repo_path.parent}",
                        file_path=str(repo_path.parent),
                        original_exception=e,
                    ) from e

        source_url = f"https://{folder_path}"
        runs.append(
            (
                folder_path,
                partial(
                    run_shell_command,
                    shell_ctx,
                    GitClient.clone_command(source_url, repo_path, recurse_submodules),
                    prep_shell_cmd_stdout_reporter(
                        post_shell_cmd_block_status_reporter(
                            f"Cloned {source_url} into {repo_path}"
                        )
                    ),
                    shell_cmd_stderr_handler,
                ),
            )
        )
    return await _await_all(runs)


async def workspace_folders_git_command_handler(
    dry_run: bool,
    ws_file_names: list[str] | str,
    git_cmd: str | list[str],
    reporter: Optional[
        Callable[[VsCodeWorkspaceFolderContext], ShellCmdStatusReporter]
    ] = None,
) -> bool:
    """Run `git <git_cmd>` against every folder that is a Git work tree."""
    shell_ctx = ShellContext(dry_run=dry_run)
    runs: list[tuple[str, Callable[[], Awaitable[None]]]] = []
    for ctx in _ws_folders(ws_file_names):
        git_config = ctx.folder.project.git_config
        if not is_git_work_tree(ctx.folder.project) or git_config is None:
            continue
        client = GitClient(git_config.git_work_tree, git_config.git_dir)
        runs.append(
            (
                ctx.folder.path,
                partial(
                    run_shell_command,
                    shell_ctx,
                    client.command(git_cmd),
                    _stdout_handler(reporter, ctx),
                    shell_cmd_stderr_handler,
                ),
            )
        )
    return await _await_all(runs)


def is_valid_node_home(node_home_path: Path) -> bool:
    return node_home_path.exists() and (node_home_path / "bin" / "npm").exists()


@dataclass(frozen=True)
class NpmCommandHandlerOptions:
    """
    Attributes:
        dry_run: Print commands instead of running them.
        ws_file_names: Workspace files whose npm folders are targeted.
        node_home_path: NodeJS installation root; `<node_home>/bin` is put
            first on `PATH` for every npm run.
        npm_cmd_params: Everything after `npm`, e.g. "version patch".
        reporter: Builds the stdout reporter for a folder.
        filter: Further restricts the npm folders that are targeted.
    """

    dry_run: bool
    ws_file_names: list[str] | str
    node_home_path: Path
    npm_cmd_params: str
    reporter: Optional[
        Callable[[VsCodeWorkspaceFolderContext], ShellCmdStatusReporter]
    ] = None
    filter: Optional[Callable[[VsCodeWorkspaceFolderContext], bool]] = None


async def workspace_folders_npm_command_handler(opts: NpmCommandHandlerOptions) -> bool:
    if not is_valid_node_home(opts.node_home_path):
        err_console.print(
            f"[red]{escape(str(opts.node_home_path))} is not a valid NodeJS Path (missing bin/npm)[/red]"
        )
        return False

    shell_ctx = ShellContext(dry_run=opts.dry_run)
    path_env = f"{opts.node_home_path / 'bin'}{os.pathsep}{os.environ.get('PATH', '')}"
    runs: list[tuple[str, Callable[[], Awaitable[None]]]] = []
    for ctx in _ws_folders(opts.ws_file_names):
        if not is_npm_project(ctx.folder.project):
            continue
        if opts.filter and not opts.filter(ctx):
            continue
        runs.append(
            (
                ctx.folder.path,
                partial(
                    run_shell_command,
                    shell_ctx,
                    ShellCommand(
                        cmd=command_components(f"npm {opts.npm_cmd_params}"),
                        cwd=ctx.folder.project.abs_project_path,
                        env={"PATH": path_env},
                    ),
                    _stdout_handler(opts.reporter, ctx),
                    shell_cmd_stderr_handler,
                ),
            )
        )
    return await _await_all(runs)


@dataclass(frozen=True)
class DenoProjectHandlerOptions:
    """
    Attributes:
        dry_run: Print commands instead of running them.
        ws_file_names: Workspace files whose Deno folders are targeted.
        command: Builds the command line to run inside a Deno project.
        reporter: Builds the stdout reporter for a folder.
        filter: Further restricts the Deno folders that are targeted.
    """

    dry_run: bool
    ws_file_names: list[str] | str
    command: Callable[[ProjectPath], str]
    reporter: Optional[
        Callable[[VsCodeWorkspaceFolderContext], ShellCmdStatusReporter]
    ] = None
    filter: Optional[Callable[[VsCodeWorkspaceFolderContext], bool]] = None


async def workspace_folders_deno_project_handler(opts: DenoProjectHandlerOptions) -> bool:
    shell_ctx = ShellContext(dry_run=opts.dry_run)
    runs: list[tuple[str, Callable[[], Awaitable[None]]]] = []
    for ctx in _ws_folders(opts.ws_file_names):
        project = ctx.folder.project
        if not is_deno_project(project):
            continue
        if opts.filter and not opts.filter(ctx):
            continue
        runs.append(
            (
                ctx.folder.path,
                partial(
                    run_shell_command,
                    shell_ctx,
                    ShellCommand(
                        cmd=command_components(opts.command(project)),
                        cwd=project.abs_project_path,
                    ),
                    _stdout_handler(opts.reporter, ctx),
                    shell_cmd_stderr_handler,
                ),
            )
        )
    return await _await_all(runs)


def udd_command(project: ProjectPath, dry_run: bool = False) -> str:
    """
    Build the `udd` invocation that updates a Deno project's dependencies.

    Candidate files are passed relative to the project root. Returns a bare
    `udd` when the project has no candidates.
    """
    check_files: list[str] = []
    if project.deno_config is not None:
        for candidate in project.deno_config.update_deps_candidates():
            if candidate.file_exists:
                check_files.append(candidate.relative_to(project.abs_project_path))
    return " ".join(["udd", *(["--dry-run"] if dry_run else []), *check_files])


def settings_repo_urls(
    project_type: SettingsProjectType, src_repo_tag: Optional[str] = None
) -> list[str]:
    tag = src_repo_tag or DEFAULT_SETTINGS_REPO_TAG
    base = f"{SETTINGS_REPO_RAW_URL}/{tag}/{project_type.value}{VSCODE_CONFIG_DIR}"
    return [f"{base}/{VSCODE_SETTINGS_FILE}", f"{base}/{VSCODE_EXTENSIONS_FILE}"]


async def copy_vscode_settings_from_github(
    project_type: SettingsProjectType,
    src_repo_tag: Optional[str] = None,
    project_home_path: Optional[Path] = None,
    dry_run: bool = False,
    verbose: bool = False,
) -> None:
    """
    Fetch the shared `settings.json` and `extensions.json` for `project_type`
    into `<project_home_path>/.vscode`.

    Nothing is overwritten when the cwd is a checkout of the settings repo
    itself; the copy is forced into dry-run mode instead.

    Raises:
        DownloadError: If either file cannot be fetched.
        FileWriteError: If `.vscode` or the files cannot be written.
    """
    running_in_settings_repo = Path.cwd().name == SETTINGS_REPO_NAME
    dest = (
        project_home_path / VSCODE_CONFIG_DIR
        if project_home_path is not None
        else Path(VSCODE_CONFIG_DIR)
    )
    await copy_source_to_dest(
        settings_repo_urls(project_type, src_repo_tag),
        dest,
        dry_run=dry_run or running_in_settings_repo,
        verbose=verbose,
    )


async def workspace_folders_settings_sync_handler(
    ws_file_names: list[str] | str,
    project_type: Optional[SettingsProjectType] = None,
    src_repo_tag: Optional[str] = None,
    dry_run: bool = False,
    verbose: bool = False,
) -> bool:
    """
    Sync VS Code settings into every folder whose project type has shared
    settings. `project_type=None` picks the type per folder; only Deno has
    shared settings, so both modes currently target Deno folders.
    """
    runs: list[tuple[str, Callable[[], Awaitable[None]]]] = []
    for ctx in _ws_folders(ws_file_names):
        project = ctx.folder.project
        if project_type in (None, SettingsProjectType.DENO) and is_deno_project(project):
            runs.append(
                (
                    ctx.folder.path,
                    partial(
                        copy_vscode_settings_from_github,
                        SettingsProjectType.DENO,
                        src_repo_tag=src_repo_tag,
                        project_home_path=project.abs_project_path,
                        dry_run=dry_run,
                        verbose=verbose,
                    ),
                )
            )
    return await _await_all(runs)
