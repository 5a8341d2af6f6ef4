"""
Git command adapter.

This module builds the git command lines the controllers run against a work
tree. Commands always pass `--git-dir` and `--work-tree` explicitly so they
can be launched from any directory, which lets a single process drive every
repository of a workspace concurrently.
"""

from pathlib import Path
from typing import Optional

from adapters.shell import ShellCommand, command_components


class GitClient:
    """
    Client for building git invocations against a single work tree.

    Attributes:
        work_tree: The root of the checked-out files.
        git_dir: The repository directory, usually `<work_tree>/.git`.
    """

    def __init__(self, work_tree: Path, git_dir: Optional[Path] = None):
        """
        Initialize a GitClient for the specified work tree.

        Args:
            work_tree: The root directory of the Git work tree.
            git_dir: The git directory; defaults to `<work_tree>/.git`.
        """
        self.work_tree = work_tree
        self.git_dir = git_dir if git_dir is not None else work_tree / ".git"

    def command(self, git_args: list[str] | str) -> ShellCommand:
        """
        Build `git --git-dir=<dir> --work-tree=<tree> <git_args>`.

        Args:
            git_args: Subcommand and arguments, either pre-split or as a
                command line string (quoted arguments are kept together).

        Returns:
            ShellCommand: The invocation; it carries no cwd.
        """
        args = command_components(git_args) if isinstance(git_args, str) else git_args
        return ShellCommand(
            cmd=[
                "git",
                f"--git-dir={self.git_dir}",
                f"--work-tree={self.work_tree}",
                *args,
            ]
        )

    def in_work_tree(self, git_args: list[str] | str) -> ShellCommand:
        """Build a plain `git <git_args>` that runs with the work tree as cwd."""
        args = command_components(git_args) if isinstance(git_args, str) else git_args
        return ShellCommand(cmd=["git", *args], cwd=self.work_tree)

    @staticmethod
    def clone_command(
        source_url: str, dest: Path, recurse_submodules: bool = False
    ) -> ShellCommand:
        """Build a quiet `git clone` of `source_url` into `dest`."""
        cmd = ["git", "clone", "--quiet"]
        if recurse_submodules:
            cmd.append("--recurse-submodules")
        cmd += [source_url, str(dest)]
        return ShellCommand(cmd=cmd)
