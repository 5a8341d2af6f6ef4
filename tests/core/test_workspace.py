"""
Tests for VS Code workspace support in core.workspace.

Tests cover:
- resolve_workspace_folder_path / read_vscode_workspace
- vscode_workspace_folders: detection, missing and unparsable files,
  the `*.deno.code-workspace` convention
- GitReposContext validation and setup_workspaces symlinking
- Batch handlers for git, npm, deno and settings sync (commands mocked)
- udd_command and settings_repo_urls
"""

import asyncio
import os
import shlex
import sys
from pathlib import Path

import pytest

from core.exceptions import ShellCommandError, WorkspaceParseError
from core.file_io import MockFileReader
from core.workspace import (
    DenoProjectHandlerOptions,
    GitReposContext,
    NpmCommandHandlerOptions,
    VsCodeWorkspace,
    VsCodeWorkspacesContext,
    copy_vscode_settings_from_github,
    git_clone_vscode_folders,
    is_valid_git_repos_context,
    is_valid_node_home,
    read_vscode_workspace,
    resolve_workspace_folder_path,
    settings_repo_urls,
    setup_workspaces,
    udd_command,
    vscode_workspace_folders,
    workspace_folders_deno_project_handler,
    workspace_folders_git_command_handler,
    workspace_folders_npm_command_handler,
    workspace_folders_settings_sync_handler,
)
from core.enrichers import detect_project
from models import ProjectMarker, RecoverableErrorHandlerResult, SettingsProjectType


@pytest.fixture
def run_shell_command_mock(mocker):
    return mocker.patch("core.workspace.run_shell_command", new_callable=mocker.AsyncMock)


def _commands(run_mock) -> list:
    """The ShellCommand of every call made to a mocked run_shell_command."""
    return [call.args[1] for call in run_mock.call_args_list]


# ============================================================================
# Reading workspace files
# ============================================================================


@pytest.mark.unit
def test_resolve_folder_relative_to_workspace_file(tmp_path):
    ws_file = tmp_path / "workspaces" / "sample.code-workspace"

    assert resolve_workspace_folder_path(ws_file, "../proj1") == tmp_path / "proj1"
    assert resolve_workspace_folder_path(ws_file, "lib") == tmp_path / "workspaces" / "lib"


@pytest.mark.unit
def test_resolve_relative_workspace_file_against_cwd(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)

    assert resolve_workspace_folder_path("team.code-workspace", "a/b") == tmp_path / "a" / "b"


@pytest.mark.unit
def test_read_vscode_workspace(workspace_factory):
    ws_file = workspace_factory("a.code-workspace", [{"path": "../p1", "name": "P1"}])

    workspace = read_vscode_workspace(ws_file)

    assert workspace.folders == [{"path": "../p1", "name": "P1"}]
    assert workspace.settings == {}


@pytest.mark.unit
@pytest.mark.parametrize(
    "raw",
    [
        "{not json",
        "[]",
        '{"settings": {}}',
        '{"folders": {"path": "x"}}',
        '{"folders": [{"name": "no path"}]}',
        '{"folders": [{"path": 3}]}',
    ],
)
def test_read_vscode_workspace_rejects_invalid_documents(raw):
    reader = MockFileReader(return_value=raw)

    with pytest.raises(WorkspaceParseError) as exc_info:
        read_vscode_workspace("bad.code-workspace", reader=reader)

    assert exc_info.value.ws_file_name == "bad.code-workspace"


@pytest.mark.unit
def test_read_vscode_workspace_keeps_settings():
    reader = MockFileReader(return_value='{"folders": [], "settings": {"a": 1}}')

    assert read_vscode_workspace("x.code-workspace", reader=reader).settings == {"a": 1}


# ============================================================================
# vscode_workspace_folders
# ============================================================================


@pytest.mark.unit
def test_folders_are_detected(project_factory, workspace_factory, deno_project):
    project_factory("plain")
    ws_file = workspace_factory(
        "team.code-workspace",
        [{"path": "../deno-proj"}, {"path": "../plain", "name": "Plain"}, {"path": "../gone"}],
    )

    folders = vscode_workspace_folders(VsCodeWorkspacesContext([str(ws_file)]))

    assert [f.folder.path for f in folders] == ["../deno-proj", "../plain", "../gone"]
    assert folders[0].folder.project.has(ProjectMarker.DENO_PROJECT_BY_VSCODE_PLUGIN)
    assert folders[0].folder.project.abs_project_path == deno_project
    assert folders[1].folder.name == "Plain"
    assert not folders[1].folder.project.has(ProjectMarker.DENO_PROJECT)
    assert folders[2].folder.project.abs_project_path_exists is False
    assert all(f.ws_file_name == str(ws_file) for f in folders)


@pytest.mark.unit
def test_deno_workspace_naming_convention(project_factory, workspace_factory):
    project_factory("plain")
    ws_file = workspace_factory(
        "abc.deno.code-workspace", [{"path": "../plain"}, {"path": "../gone"}]
    )

    plain, gone = vscode_workspace_folders(VsCodeWorkspacesContext([str(ws_file)]))

    assert plain.folder.project.has(ProjectMarker.DENO_PROJECT)
    assert plain.folder.project.has(ProjectMarker.DENO_PROJECT_BY_CONVENTION)
    assert plain.folder.project.has(ProjectMarker.TYPESCRIPT_PROJECT)
    assert not gone.folder.project.has(ProjectMarker.DENO_PROJECT)


@pytest.mark.unit
def test_plugin_detection_wins_over_convention(deno_project, workspace_factory):
    ws_file = workspace_factory("abc.deno.code-workspace", [{"path": "../deno-proj"}])

    (ctx,) = vscode_workspace_folders(VsCodeWorkspacesContext([str(ws_file)]))

    assert ctx.folder.project.has(ProjectMarker.DENO_PROJECT_BY_VSCODE_PLUGIN)
    assert not ctx.folder.project.has(ProjectMarker.DENO_PROJECT_BY_CONVENTION)


@pytest.mark.unit
def test_missing_workspace_file_uses_handler(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    seen = []
    ctx = VsCodeWorkspacesContext(
        ["missing.code-workspace"],
        ws_file_does_not_exist_handler=lambda c, name: seen.append(name),
    )

    assert vscode_workspace_folders(ctx) == []
    assert seen == ["missing.code-workspace"]


@pytest.mark.unit
def test_missing_workspace_file_is_reported(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)

    folders = vscode_workspace_folders(VsCodeWorkspacesContext(["missing.code-workspace"]))

    assert folders == []
    assert "does not exist" in capsys.readouterr().err


@pytest.mark.unit
def test_unparsable_workspace_file_is_skipped(tmp_path, monkeypatch, capsys, workspace_factory):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "bad.code-workspace").write_text("{", encoding="utf-8")
    good = workspace_factory("good.code-workspace", [{"path": "../x"}], ws_dir=tmp_path)

    folders = vscode_workspace_folders(
        VsCodeWorkspacesContext(["bad.code-workspace", "good.code-workspace"])
    )

    assert [f.ws_file_name for f in folders] == ["good.code-workspace"]
    assert good.exists()
    assert "Unable to parse" in capsys.readouterr().err


@pytest.mark.unit
def test_parse_error_handler_can_supply_a_workspace(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "bad.code-workspace").write_text("{", encoding="utf-8")
    errors = []

    def recover(ctx, name, error):
        errors.append(error)
        return VsCodeWorkspace(folders=[{"path": "fallback"}])

    folders = vscode_workspace_folders(
        VsCodeWorkspacesContext(["bad.code-workspace"], ws_file_parse_error_handler=recover)
    )

    assert [f.folder.path for f in folders] == ["fallback"]
    assert isinstance(errors[0], WorkspaceParseError)


# ============================================================================
# Repos home and setup
# ============================================================================


@pytest.mark.unit
def test_existing_repos_home_is_valid(tmp_path):
    assert is_valid_git_repos_context(GitReposContext(repos_home_path=tmp_path)) is True


@pytest.mark.unit
@pytest.mark.parametrize(
    "result,expected",
    [
        (RecoverableErrorHandlerResult.RECOVERED, True),
        (RecoverableErrorHandlerResult.UNRECOVERABLE, False),
    ],
)
def test_missing_repos_home_defers_to_handler(tmp_path, result, expected):
    calls = []

    def handler(ctx):
        calls.append(ctx.repos_home_path)
        return result

    ctx = GitReposContext(
        repos_home_path=tmp_path / "missing", repos_home_path_does_not_exist_handler=handler
    )

    assert is_valid_git_repos_context(ctx) is expected
    assert calls == [tmp_path / "missing"]


@pytest.mark.unit
def test_missing_repos_home_without_handler(tmp_path):
    assert is_valid_git_repos_context(GitReposContext(repos_home_path=tmp_path / "x")) is False


@pytest.mark.unit
def test_setup_workspaces_links_workspace_files(project_factory):
    master = project_factory(
        "master",
        files={
            "a.code-workspace": {"folders": []},
            "b.deno.code-workspace": {"folders": []},
            "README.md": "",
        },
    )
    repos = project_factory("repos", files={"a.code-workspace": "stale"})

    ok = asyncio.run(setup_workspaces(GitReposContext(repos_home_path=repos), master))

    assert ok is True
    assert sorted(p.name for p in repos.iterdir()) == ["a.code-workspace", "b.deno.code-workspace"]
    assert (repos / "a.code-workspace").is_symlink()
    assert os.readlink(repos / "a.code-workspace") == str(master / "a.code-workspace")


@pytest.mark.unit
def test_setup_workspaces_dry_run_changes_nothing(project_factory, capsys):
    master = project_factory("master", files={"a.code-workspace": {"folders": []}})
    repos = project_factory("repos")

    ok = asyncio.run(
        setup_workspaces(GitReposContext(repos_home_path=repos, dry_run=True), master)
    )

    assert ok is True
    assert list(repos.iterdir()) == []
    out = capsys.readouterr().out
    assert "rm -f" in out
    assert "ln -s" in out


@pytest.mark.mock
def test_setup_workspaces_pulls_git_master_first(project_factory, run_shell_command_mock):
    master = project_factory("master", dirs=(".git",))
    repos = project_factory("repos")

    asyncio.run(setup_workspaces(GitReposContext(repos_home_path=repos), master))

    (cmd,) = _commands(run_shell_command_mock)
    assert cmd.cmd[-1] == "pull"
    assert f"--work-tree={master}" in cmd.cmd


@pytest.mark.unit
def test_setup_workspaces_invalid_repos_home(project_factory, tmp_path):
    master = project_factory("master")

    ok = asyncio.run(
        setup_workspaces(GitReposContext(repos_home_path=tmp_path / "none"), master)
    )

    assert ok is False


# ============================================================================
# git
# ============================================================================


@pytest.mark.mock
def test_git_clone_clones_missing_folders(project_factory, workspace_factory, run_shell_command_mock):
    repos = project_factory("repos", dirs=("github.com/shah/present",))
    ws_file = workspace_factory(
        "team.code-workspace",
        [{"path": "github.com/shah/uniform-resource"}, {"path": "github.com/shah/present"}],
    )

    ok = asyncio.run(
        git_clone_vscode_folders(
            VsCodeWorkspacesContext([str(ws_file)]),
            GitReposContext(repos_home_path=repos),
            recurse_submodules=True,
        )
    )

    assert ok is True
    (cmd,) = _commands(run_shell_command_mock)
    assert cmd.cmd == [
        "git",
        "clone",
        "--quiet",
        "--recurse-submodules",
        "https://github.com/shah/uniform-resource",
        str(repos / "github.com" / "shah" / "uniform-resource"),
    ]
    assert (repos / "github.com" / "shah").is_dir()


@pytest.mark.mock
def test_git_command_targets_only_git_work_trees(
    project_factory, workspace_factory, run_shell_command_mock
):
    git_proj = project_factory("git-proj", dirs=(".git",))
    project_factory("plain")
    ws_file = workspace_factory("t.code-workspace", [{"path": "../git-proj"}, {"path": "../plain"}])

    ok = asyncio.run(workspace_folders_git_command_handler(False, [str(ws_file)], "status -s"))

    assert ok is True
    (cmd,) = _commands(run_shell_command_mock)
    assert cmd.cmd == [
        "git",
        f"--git-dir={git_proj / '.git'}",
        f"--work-tree={git_proj}",
        "status",
        "-s",
    ]


@pytest.mark.mock
def test_failing_folder_does_not_stop_the_others(
    project_factory, workspace_factory, mocker, capsys
):
    project_factory("a", dirs=(".git",))
    project_factory("b", dirs=(".git",))
    ws_file = workspace_factory("t.code-workspace", [{"path": "../a"}, {"path": "../b"}])
    seen = []

    async def run(ctx, command, *_handlers):
        seen.append(command.cmd[2])
        if command.cmd[2].endswith("/a"):
            raise ShellCommandError(["git", "fetch"], returncode=128)

    mocker.patch("core.workspace.run_shell_command", side_effect=run)

    ok = asyncio.run(workspace_folders_git_command_handler(False, str(ws_file), ["fetch"]))

    assert ok is False
    assert len(seen) == 2
    err = capsys.readouterr().err
    assert "../a" in err
    assert "status 128" in err


@pytest.mark.unit
def test_non_zero_exit_in_one_folder_fails_the_batch(
    tmp_path, project_factory, workspace_factory
):
    project_factory("a")
    project_factory("b")
    ws_file = workspace_factory(
        "t.deno.code-workspace", [{"path": "../a"}, {"path": "../b"}]
    )
    # every folder records that it ran; only folder "a" exits non-zero
    script = (
        "import os, sys; open('ran', 'w').close(); "
        "sys.exit(os.path.basename(os.getcwd()) == 'a')"
    )
    opts = DenoProjectHandlerOptions(
        dry_run=False,
        ws_file_names=[str(ws_file)],
        command=lambda _pp: shlex.join([sys.executable, "-c", script]),
    )

    ok = asyncio.run(workspace_folders_deno_project_handler(opts))

    assert ok is False
    assert (tmp_path / "a" / "ran").exists()
    assert (tmp_path / "b" / "ran").exists()


@pytest.mark.unit
def test_zero_exit_in_every_folder_succeeds(tmp_path, project_factory, workspace_factory):
    project_factory("a")
    ws_file = workspace_factory("t.deno.code-workspace", [{"path": "../a"}])
    opts = DenoProjectHandlerOptions(
        dry_run=False,
        ws_file_names=[str(ws_file)],
        command=lambda _pp: shlex.join([sys.executable, "-c", "pass"]),
    )

    assert asyncio.run(workspace_folders_deno_project_handler(opts)) is True


@pytest.mark.unit
def test_git_command_dry_run_prints(project_factory, workspace_factory, capsys):
    project_factory("g", dirs=(".git",))
    ws_file = workspace_factory("t.code-workspace", [{"path": "../g"}])

    ok = asyncio.run(workspace_folders_git_command_handler(True, [str(ws_file)], ["pull"]))

    assert ok is True
    assert "pull" in capsys.readouterr().out


# ============================================================================
# npm
# ============================================================================


@pytest.mark.unit
def test_is_valid_node_home(tmp_path, node_home):
    assert is_valid_node_home(node_home) is True
    assert is_valid_node_home(tmp_path) is False
    assert is_valid_node_home(tmp_path / "missing") is False


@pytest.mark.unit
def test_npm_handler_rejects_invalid_node_home(tmp_path, capsys):
    opts = NpmCommandHandlerOptions(
        dry_run=True,
        ws_file_names=[],
        node_home_path=tmp_path / "nodeless",
        npm_cmd_params="install",
    )

    assert asyncio.run(workspace_folders_npm_command_handler(opts)) is False
    assert "not a valid NodeJS Path" in capsys.readouterr().err


@pytest.mark.mock
def test_npm_handler_runs_in_npm_folders(
    project_factory, workspace_factory, node_home, npm_project, run_shell_command_mock
):
    project_factory("plain")
    ws_file = workspace_factory("t.code-workspace", [{"path": "../npm-proj"}, {"path": "../plain"}])
    opts = NpmCommandHandlerOptions(
        dry_run=False,
        ws_file_names=[str(ws_file)],
        node_home_path=node_home,
        npm_cmd_params="--no-git-tag-version version patch",
    )

    ok = asyncio.run(workspace_folders_npm_command_handler(opts))

    assert ok is True
    (cmd,) = _commands(run_shell_command_mock)
    assert cmd.cmd == ["npm", "--no-git-tag-version", "version", "patch"]
    assert cmd.cwd == npm_project
    assert cmd.env["PATH"].startswith(f"{node_home / 'bin'}{os.pathsep}")


@pytest.mark.mock
def test_npm_handler_applies_filter(
    project_factory, workspace_factory, node_home, npm_project, run_shell_command_mock
):
    project_factory("private", files={"package.json": {"name": "private"}})
    ws_file = workspace_factory(
        "t.code-workspace", [{"path": "../npm-proj"}, {"path": "../private"}]
    )
    opts = NpmCommandHandlerOptions(
        dry_run=False,
        ws_file_names=[str(ws_file)],
        node_home_path=node_home,
        npm_cmd_params="publish",
        filter=lambda ctx: ctx.folder.project.has(ProjectMarker.NPM_PUBLISHABLE_PROJECT),
    )

    asyncio.run(workspace_folders_npm_command_handler(opts))

    assert [c.cwd for c in _commands(run_shell_command_mock)] == [npm_project]


# ============================================================================
# deno
# ============================================================================


@pytest.mark.mock
def test_deno_handler_runs_in_deno_folders(
    project_factory, workspace_factory, deno_project, run_shell_command_mock
):
    project_factory("plain")
    ws_file = workspace_factory("t.code-workspace", [{"path": "../deno-proj"}, {"path": "../plain"}])
    opts = DenoProjectHandlerOptions(
        dry_run=False,
        ws_file_names=[str(ws_file)],
        command=lambda dp: "deno fmt --unstable",
    )

    ok = asyncio.run(workspace_folders_deno_project_handler(opts))

    assert ok is True
    (cmd,) = _commands(run_shell_command_mock)
    assert cmd.cmd == ["deno", "fmt", "--unstable"]
    assert cmd.cwd == deno_project


@pytest.mark.unit
def test_udd_command_lists_candidates(deno_project):
    (deno_project / "deps.ts").write_text("", encoding="utf-8")

    pp = detect_project(deno_project)

    assert udd_command(pp) == "udd mod.ts deps.ts"
    assert udd_command(pp, dry_run=True) == "udd --dry-run mod.ts deps.ts"


@pytest.mark.unit
def test_udd_command_without_deno_config(tmp_path):
    assert udd_command(detect_project(tmp_path)) == "udd"


# ============================================================================
# settings sync
# ============================================================================


@pytest.mark.unit
def test_settings_repo_urls():
    urls = settings_repo_urls(SettingsProjectType.DENO, "v1.0.0")

    assert urls == [
        "https://raw.githubusercontent.com/shah/vscode-team/v1.0.0/deno.vscode/settings.json",
        "https://raw.githubusercontent.com/shah/vscode-team/v1.0.0/deno.vscode/extensions.json",
    ]
    assert settings_repo_urls(SettingsProjectType.DENO)[0].split("/")[5] == "master"


@pytest.mark.mock
def test_copy_settings_into_project(tmp_path, monkeypatch, mocker):
    monkeypatch.chdir(tmp_path)
    copy = mocker.patch("core.workspace.copy_source_to_dest", new_callable=mocker.AsyncMock)

    asyncio.run(
        copy_vscode_settings_from_github(
            SettingsProjectType.DENO, "v2", project_home_path=tmp_path
        )
    )

    sources, dest = copy.call_args.args
    assert dest == tmp_path / ".vscode"
    assert sources == settings_repo_urls(SettingsProjectType.DENO, "v2")
    assert copy.call_args.kwargs["dry_run"] is False


@pytest.mark.mock
def test_copy_settings_is_dry_run_inside_settings_repo(tmp_path, monkeypatch, mocker):
    (tmp_path / "vscode-team").mkdir()
    monkeypatch.chdir(tmp_path / "vscode-team")
    copy = mocker.patch("core.workspace.copy_source_to_dest", new_callable=mocker.AsyncMock)

    asyncio.run(copy_vscode_settings_from_github(SettingsProjectType.DENO))

    assert copy.call_args.args[1] == Path(".vscode")
    assert copy.call_args.kwargs["dry_run"] is True


@pytest.mark.mock
@pytest.mark.parametrize("project_type", [SettingsProjectType.DENO, None])
def test_settings_sync_targets_deno_folders(
    tmp_path, monkeypatch, project_factory, workspace_factory, deno_project, mocker, project_type
):
    monkeypatch.chdir(tmp_path)
    project_factory("plain")
    ws_file = workspace_factory("t.code-workspace", [{"path": "../deno-proj"}, {"path": "../plain"}])
    copy = mocker.patch("core.workspace.copy_source_to_dest", new_callable=mocker.AsyncMock)

    ok = asyncio.run(
        workspace_folders_settings_sync_handler(
            [str(ws_file)], project_type=project_type, src_repo_tag="v3", dry_run=True
        )
    )

    assert ok is True
    (call,) = copy.call_args_list
    assert call.args[1] == deno_project / ".vscode"
    assert call.kwargs["dry_run"] is True
