"""Git operations used by the board, behind an interface that can be substituted."""

from __future__ import annotations

import os
import subprocess
from abc import ABC, abstractmethod
from collections.abc import Iterable

from agtx import worktree as _worktree
from agtx.gitrepo import GitError

__all__ = ["GitOperations", "RealGitOps"]

PathLike = "str | os.PathLike[str]"


class GitOperations(ABC):
    """Operations for managing task worktrees and their changes."""

    @abstractmethod
    def create_worktree(self, project_path: str | os.PathLike[str], task_slug: str) -> str:
        """Create a worktree for a task and return its path."""

    @abstractmethod
    def remove_worktree(
        self, project_path: str | os.PathLike[str], worktree_path: str
    ) -> None:
        """Remove a worktree."""

    @abstractmethod
    def worktree_exists(self, project_path: str | os.PathLike[str], task_slug: str) -> bool:
        """Return True if the task's worktree exists."""

    @abstractmethod
    def delete_branch(self, project_path: str | os.PathLike[str], branch_name: str) -> None:
        """Delete a branch."""

    @abstractmethod
    def diff(self, worktree_path: str | os.PathLike[str]) -> str:
        """Return the unstaged diff."""

    @abstractmethod
    def diff_cached(self, worktree_path: str | os.PathLike[str]) -> str:
        """Return the staged diff."""

    @abstractmethod
    def list_untracked_files(self, worktree_path: str | os.PathLike[str]) -> str:
        """Return untracked files, one per line."""

    @abstractmethod
    def diff_untracked_file(self, worktree_path: str | os.PathLike[str], file: str) -> str:
        """Return a diff of an untracked file against /dev/null."""

    @abstractmethod
    def diff_stat_from_main(self, worktree_path: str | os.PathLike[str]) -> str:
        """Return diff statistics relative to the main branch."""

    @abstractmethod
    def add_all(self, worktree_path: str | os.PathLike[str]) -> None:
        """Stage all changes."""

    @abstractmethod
    def has_changes(self, worktree_path: str | os.PathLike[str]) -> bool:
        """Return True if there are uncommitted changes."""

    @abstractmethod
    def commit(self, worktree_path: str | os.PathLike[str], message: str) -> None:
        """Commit staged changes with ``message``."""

    @abstractmethod
    def push(
        self, worktree_path: str | os.PathLike[str], branch: str, set_upstream: bool
    ) -> None:
        """Push ``branch`` to origin."""

    @abstractmethod
    def fetch_and_check_conflicts(self, worktree_path: str | os.PathLike[str]) -> bool:
        """Fetch origin and return True if HEAD conflicts with the remote default branch."""

    @abstractmethod
    def list_files(self, project_path: str | os.PathLike[str]) -> list[str]:
        """List tracked and untracked files, honouring ignore rules."""

    @abstractmethod
    def initialize_worktree(
        self,
        project_path: str | os.PathLike[str],
        worktree_path: str | os.PathLike[str],
        copy_files: str | None = None,
        init_script: str | None = None,
        copy_dirs: Iterable[str] = (),
    ) -> list[str]:
        """Copy files into a worktree and run an init script; return warnings."""


def _run(
    cwd: str | os.PathLike[str], *args: str, context: str = "Failed to run git"
) -> subprocess.CompletedProcess[bytes]:
    try:
        return subprocess.run(["git", *args], cwd=cwd, capture_output=True, check=False)
    except OSError as exc:
        raise GitError(f"{context}: {exc}") from exc


def _stdout_or_empty(cwd: str | os.PathLike[str], *args: str) -> str:
    try:
        result = subprocess.run(["git", *args], cwd=cwd, capture_output=True, check=False)
    except OSError:
        return ""
    return result.stdout.decode("utf-8", errors="replace")


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


class RealGitOps(GitOperations):
    """Implementation that runs the ``git`` command."""

    def create_worktree(self, project_path, task_slug):
        return str(_worktree.create_worktree(project_path, task_slug))

    def remove_worktree(self, project_path, worktree_path):
        _run(project_path, "worktree", "remove", "--force", os.fspath(worktree_path))

    def worktree_exists(self, project_path, task_slug):
        return _worktree.worktree_exists(project_path, task_slug)

    def delete_branch(self, project_path, branch_name):
        _run(project_path, "branch", "-D", branch_name)

    def diff(self, worktree_path):
        return _stdout_or_empty(worktree_path, "diff")

    def diff_cached(self, worktree_path):
        return _stdout_or_empty(worktree_path, "diff", "--cached")

    def list_untracked_files(self, worktree_path):
        return _stdout_or_empty(worktree_path, "ls-files", "--others", "--exclude-standard")

    def diff_untracked_file(self, worktree_path, file):
        return _stdout_or_empty(worktree_path, "diff", "--no-index", "/dev/null", file)

    def diff_stat_from_main(self, worktree_path):
        return _stdout_or_empty(worktree_path, "diff", "main", "--stat")

    def add_all(self, worktree_path):
        _run(worktree_path, "add", "-A")

    def has_changes(self, worktree_path):
        try:
            result = subprocess.run(
                ["git", "status", "--porcelain"],
                cwd=worktree_path,
                capture_output=True,
                check=False,
            )
        except OSError:
            return False
        return bool(result.stdout)

    def commit(self, worktree_path, message):
        result = _run(worktree_path, "commit", "-m", message)
        if result.returncode != 0:
            stderr = _decode(result.stderr)
            if "nothing to commit" not in stderr:
                raise GitError(f"Failed to commit changes: {stderr}")

    def push(self, worktree_path, branch, set_upstream):
        args = ["push", *(["-u"] if set_upstream else []), "origin", branch]
        result = _run(worktree_path, *args)
        if result.returncode != 0:
            raise GitError(f"Failed to push branch: {_decode(result.stderr)}")

    def fetch_and_check_conflicts(self, worktree_path):
        fetch = _run(worktree_path, "fetch", "origin")
        if fetch.returncode != 0:
            raise GitError(f"git fetch failed: {_decode(fetch.stderr)}")

        try:
            has_main = (
                subprocess.run(
                    ["git", "rev-parse", "--verify", "origin/main"],
                    cwd=worktree_path,
                    capture_output=True,
                    check=False,
                ).returncode
                == 0
            )
        except OSError:
            has_main = False
        main_ref = "origin/main" if has_main else "origin/master"

        merge_tree = _run(worktree_path, "merge-tree", "--write-tree", "HEAD", main_ref)
        return merge_tree.returncode != 0

    def list_files(self, project_path):
        output = _stdout_or_empty(
            project_path, "ls-files", "--cached", "--others", "--exclude-standard"
        )
        return output.splitlines()

    def initialize_worktree(
        self,
        project_path,
        worktree_path,
        copy_files=None,
        init_script=None,
        copy_dirs=(),
    ):
        return _worktree.initialize_worktree(
            project_path, worktree_path, copy_files, init_script, list(copy_dirs)
        )