"""
Shell command adapter.

This module runs external tools (git, npm, deno, udd, git-semtag) on behalf of
the command handlers. Commands are executed with `asyncio` subprocesses so
that a batch of commands, one per workspace folder, can run concurrently.
Output is not interpreted: it is handed to status handlers which usually copy
it verbatim to the terminal, optionally framed by a reporter's heading.

A dry-run context prints what would be executed instead of executing it.
"""

import asyncio
import os
import shlex
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, TextIO

from rich import print as pr
from rich.markup import escape

from core.exceptions import ShellCommandError
from core.file_io import FilesystemFileWriter


@dataclass(frozen=True)
class ShellContext:
    dry_run: bool = False


@dataclass(frozen=True)
class ShellCommand:
    """
    A fully specified command invocation.

    Attributes:
        cmd: The program followed by its arguments.
        cwd: Working directory, or None for the current one.
        env: Variables layered on top of the inherited environment.
    """

    cmd: list[str]
    cwd: Optional[Path] = None
    env: dict[str, str] = field(default_factory=dict)

    @property
    def command_line(self) -> str:
        return shlex.join(self.cmd)


ShellCommandStatusHandler = Callable[[bytes, int, ShellCommand], None]
ShellWriterHook = Callable[[TextIO, bytes, int, ShellCommand], None]


@dataclass(frozen=True)
class ShellCmdStatusReporter:
    """Hooks written around a command's output, e.g. a heading and a trailing blank line."""

    before: Optional[ShellWriterHook] = None
    after: Optional[ShellWriterHook] = None


def command_components(command: str) -> list[str]:
    """
    Split a command line into program and arguments, honouring quotes.

    >>> command_components('git commit -am "first draft"')
    ['git', 'commit', '-am', 'first draft']
    """
    return shlex.split(command)


def _decode(raw_output: bytes) -> str:
    return raw_output.decode("utf-8", errors="replace")


def post_shell_cmd_block_status_reporter(heading: str) -> ShellCmdStatusReporter:
    """
    Reporter that prints `heading` before the command output and a blank line
    after it when the command produced any output.
    """

    def before(writer: TextIO, _raw: bytes, _code: int, _cmd: ShellCommand) -> None:
        writer.write(heading + "\n")

    def after(writer: TextIO, raw: bytes, _code: int, _cmd: ShellCommand) -> None:
        if _decode(raw).strip():
            writer.write("\n")

    return ShellCmdStatusReporter(before=before, after=after)


def _prep_reporter(
    reporter: ShellCmdStatusReporter, stream: Callable[[], TextIO]
) -> ShellCommandStatusHandler:
    def handler(raw_output: bytes, code: int, run_opts: ShellCommand) -> None:
        writer = stream()
        if reporter.before:
            reporter.before(writer, raw_output, code, run_opts)
        writer.write(_decode(raw_output))
        if reporter.after:
            reporter.after(writer, raw_output, code, run_opts)
        writer.flush()

    return handler


def prep_shell_cmd_stdout_reporter(
    reporter: ShellCmdStatusReporter,
) -> ShellCommandStatusHandler:
    return _prep_reporter(reporter, lambda: sys.stdout)


def prep_shell_cmd_stderr_reporter(
    reporter: ShellCmdStatusReporter,
) -> ShellCommandStatusHandler:
    return _prep_reporter(reporter, lambda: sys.stderr)


def shell_cmd_stdout_handler(raw_output: bytes, *_args) -> None:
    sys.stdout.write(_decode(raw_output))
    sys.stdout.flush()


def shell_cmd_stderr_handler(raw_output: bytes, *_args) -> None:
    sys.stderr.write(_decode(raw_output))
    sys.stderr.flush()


def _print_dry_run(run_opts: ShellCommand) -> None:
    if run_opts.cwd:
        pr(escape(f"cd {run_opts.cwd}"))
    if run_opts.env:
        pr(run_opts.env)
    pr(escape(run_opts.command_line))


async def run_shell_command(
    ctx: ShellContext,
    command: ShellCommand | str,
    on_success: Optional[ShellCommandStatusHandler] = None,
    on_failure: Optional[ShellCommandStatusHandler] = None,
) -> None:
    """
    Run a single command to completion.

    When `on_success` is given, stdout is captured and passed to it if the
    command exits with status 0; otherwise stdout is inherited from this
    process. `on_failure` likewise captures stderr for non-zero exits, which
    then raise once the handler has run. There is no timeout.

    Args:
        ctx: Execution context; in dry-run mode the command is only printed.
        command: A `ShellCommand`, or a command line string split with
            `command_components`.
        on_success: Handler for the captured stdout of a successful run.
        on_failure: Handler for the captured stderr of a failed run.

    Raises:
        ShellCommandError: If the program cannot be started (e.g. not
            installed) or exits with a non-zero status.
    """
    run_opts = (
        ShellCommand(cmd=command_components(command))
        if isinstance(command, str)
        else command
    )

    if ctx.dry_run:
        _print_dry_run(run_opts)
        return

    env = {**os.environ, **run_opts.env} if run_opts.env else None
    try:
        proc = await asyncio.create_subprocess_exec(
            *run_opts.cmd,
            cwd=run_opts.cwd,
            env=env,
            stdout=asyncio.subprocess.PIPE if on_success else None,
            stderr=asyncio.subprocess.PIPE if on_failure else None,
        )
    except OSError as e:
        raise ShellCommandError(run_opts.cmd, original_exception=e) from e

    stdout, stderr = await proc.communicate()
    code = proc.returncode or 0
    if code == 0:
        if on_success:
            on_success(stdout or b"", code, run_opts)
    else:
        if on_failure:
            on_failure(stderr or b"", code, run_opts)
        raise ShellCommandError(run_opts.cmd, returncode=code)


def write_git_pre_commit_script(hook_file_name: Path, script: str) -> None:
    """
    Write an executable git pre-commit hook, replacing any existing hook.

    A `#!/bin/sh` interpreter line is prepended when `script` has none. The
    hooks directory is created if missing.

    Raises:
        FileWriteError: If the hook cannot be written or made executable.
    """
    body = script if script.startswith("#!") else f"#!/bin/sh\n{script}"
    if not body.endswith("\n"):
        body += "\n"
    writer = FilesystemFileWriter.in_dir(hook_file_name.parent, hook_file_name.name)
    writer.write_file(body)
    writer.make_executable()
