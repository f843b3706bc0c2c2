"""Basic git repository queries and branch operations."""

from __future__ import annotations

import os
import re
import subprocess
from pathlib import Path

__all__ = [
    "GitError",
    "is_git_repo",
    "repo_root",
    "current_branch",
    "diff_stat",
    "diff_full",
    "merge_branch",
    "parse_conflicting_files",
    "check_merge_conflicts",
    "delete_branch",
]

_WHITESPACE = re.compile(r"\s")


class GitError(RuntimeError):
    """Raised when a git command cannot be run or reports a failure."""


def _run_git(
    path: str | os.PathLike[str], *args: str, context: str
) -> subprocess.CompletedProcess[bytes]:
    try:
        return subprocess.run(
            ["git", *args], cwd=path, capture_output=True, check=False
        )
    except OSError as exc:
        raise GitError(f"{context}: {exc}") from exc


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def is_git_repo(path: str | os.PathLike[str]) -> bool:
    """Return True if ``path`` lies inside a git repository."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "--git-dir"],
            cwd=path,
            capture_output=True,
            check=False,
        )
    except OSError:
        return False
    return result.returncode == 0


def repo_root(path: str | os.PathLike[str]) -> Path:
    """Return the top-level directory of the repository containing ``path``."""
    result = _run_git(
        path, "rev-parse", "--show-toplevel", context="Failed to get git root"
    )
    return Path(_decode(result.stdout).strip())


def current_branch(path: str | os.PathLike[str]) -> str:
    """Return the name of the currently checked-out branch."""
    result = _run_git(
        path,
        "rev-parse",
        "--abbrev-ref",
        "HEAD",
        context="Failed to get current branch",
    )
    return _decode(result.stdout).strip()


def diff_stat(path: str | os.PathLike[str], base: str, target: str) -> str:
    """Return ``git diff --stat`` output between two revisions."""
    result = _run_git(path, "diff", base, target, "--stat", context="Failed to get diff")
    return _decode(result.stdout)


def diff_full(path: str | os.PathLike[str], base: str, target: str) -> str:
    """Return the full diff between two revisions."""
    result = _run_git(path, "diff", base, target, context="Failed to get diff")
    return _decode(result.stdout)


def merge_branch(path: str | os.PathLike[str], branch: str, message: str) -> None:
    """Merge ``branch`` into the current branch with a merge commit."""
    result = _run_git(
        path,
        "merge",
        branch,
        "--no-ff",
        "-m",
        message,
        context="Failed to merge branch",
    )
    if result.returncode != 0:
        raise GitError(f"Merge failed: {_decode(result.stderr)}")


def parse_conflicting_files(output: str) -> list[str]:
    """Extract conflicting file names from ``git merge-tree --write-tree`` output.

    Lines of the form ``<mode> <hash> <stage>\\t<path>`` with stage 1, 2 or 3
    mark conflicts; each path is reported once, in first-seen order.
    """
    seen: dict[str, None] = {}
    for line in output.splitlines():
        parts = _WHITESPACE.split(line, maxsplit=3)
        if len(parts) != 4 or parts[2] not in ("1", "2", "3"):
            continue
        filename = parts[3].strip()
        if filename:
            seen.setdefault(filename, None)
    return list(seen)


def check_merge_conflicts(
    path: str | os.PathLike[str], base: str, branch: str
) -> tuple[bool, list[str]]:
    """Check without touching the working tree whether merging would conflict.

    Returns ``(has_conflicts, conflicting_files)``.
    """
    result = _run_git(
        path,
        "merge-tree",
        "--write-tree",
        base,
        branch,
        context="Failed to run git merge-tree",
    )
    if result.returncode == 0:
        return False, []
    return True, parse_conflicting_files(_decode(result.stdout))


def delete_branch(path: str | os.PathLike[str], branch: str, force: bool) -> None:
    """Delete a local branch; ``force`` uses ``-D`` instead of ``-d``."""
    flag = "-D" if force else "-d"
    _run_git(path, "branch", flag, branch, context="Failed to delete branch")