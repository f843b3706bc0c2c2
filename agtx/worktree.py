"""Management of per-task git worktrees."""

from __future__ import annotations

import os
import shutil
import subprocess
from collections.abc import Iterable
from pathlib import Path

from agtx.gitrepo import GitError

__all__ = [
    "AGENT_CONFIG_DIRS",
    "create_worktree",
    "initialize_worktree",
    "copy_dir_recursive",
    "detect_main_branch",
    "remove_worktree",
    "worktree_path",
    "worktree_exists",
]

AGTX_DIR = ".agtx"
WORKTREES_DIR = "worktrees"

#: Agent configuration directories always copied from the project into worktrees.
AGENT_CONFIG_DIRS: tuple[str, ...] = (
    ".claude",
    ".gemini",
    ".codex",
    ".github/agents",
    ".config/opencode",
)


def _git(
    cwd: str | os.PathLike[str], *args: str | os.PathLike[str], context: str
) -> subprocess.CompletedProcess[bytes]:
    try:
        return subprocess.run(
            ["git", *map(os.fspath, args)], cwd=cwd, capture_output=True, check=False
        )
    except OSError as exc:
        raise GitError(f"{context}: {exc}") from exc


def _decode(data: bytes) -> str:
    return data.decode("utf-8", errors="replace")


def worktree_path(project_path: str | os.PathLike[str], task_id: str) -> Path:
    """Return the worktree location for a task."""
    return Path(project_path) / AGTX_DIR / WORKTREES_DIR / task_id


def worktree_exists(project_path: str | os.PathLike[str], task_id: str) -> bool:
    """Return True if the task's worktree directory exists."""
    return worktree_path(project_path, task_id).exists()


def detect_main_branch(project_path: str | os.PathLike[str]) -> str:
    """Return ``main`` or ``master`` if present, else the current branch."""
    for name in ("main", "master"):
        result = _git(
            project_path,
            "rev-parse",
            "--verify",
            name,
            context=f"Failed to check for {name} branch",
        )
        if result.returncode == 0:
            return name
    result = _git(
        project_path,
        "rev-parse",
        "--abbrev-ref",
        "HEAD",
        context="Failed to get current branch",
    )
    return _decode(result.stdout).strip()


def create_worktree(project_path: str | os.PathLike[str], task_slug: str) -> Path:
    """Create (or reuse) a worktree on branch ``task/<slug>`` from the main branch."""
    path = worktree_path(project_path, task_slug)

    if path.exists() and (path / ".git").exists():
        return path

    if path.exists():
        shutil.rmtree(path, ignore_errors=True)

    path.parent.mkdir(parents=True, exist_ok=True)

    main_branch = detect_main_branch(project_path)
    branch_name = f"task/{task_slug}"

    # A leftover branch from an earlier failed attempt would block creation.
    try:
        subprocess.run(
            ["git", "branch", "-D", branch_name],
            cwd=project_path,
            capture_output=True,
            check=False,
        )
    except OSError:
        pass

    result = _git(
        project_path,
        "worktree",
        "add",
        path,
        "-b",
        branch_name,
        main_branch,
        context="Failed to create git worktree",
    )
    if result.returncode != 0:
        raise GitError(f"Failed to create worktree: {_decode(result.stderr)}")
    return path


def _copy_file(src: Path, dst: Path) -> None:
    shutil.copyfile(src, dst)
    shutil.copymode(src, dst)


def copy_dir_recursive(
    src: str | os.PathLike[str], dst: str | os.PathLike[str]
) -> None:
    """Copy a directory tree into ``dst``, creating it and overwriting files."""
    src, dst = Path(src), Path(dst)
    dst.mkdir(parents=True, exist_ok=True)
    for entry in src.iterdir():
        target = dst / entry.name
        if entry.is_dir():
            copy_dir_recursive(entry, target)
        else:
            _copy_file(entry, target)


def _exit_description(returncode: int) -> str:
    if returncode < 0:
        return f"signal: {-returncode}"
    return f"exit status: {returncode}"


def initialize_worktree(
    project_path: str | os.PathLike[str],
    worktree_path: str | os.PathLike[str],
    copy_files: str | None = None,
    init_script: str | None = None,
    copy_dirs: Iterable[str] = (),
) -> list[str]:
    """Prepare a worktree: copy agent config, extra dirs and files, run a script.

    Problems never abort the process; they are returned as warning messages.
    """
    project = Path(project_path)
    worktree = Path(worktree_path)
    warnings: list[str] = []

    for dir_name in (*AGENT_CONFIG_DIRS, *copy_dirs):
        src = project / dir_name
        if src.is_dir():
            try:
                copy_dir_recursive(src, worktree / dir_name)
            except OSError as exc:
                warnings.append(f"Failed to copy '{dir_name}' to worktree: {exc}")

    if copy_files is not None:
        for entry in copy_files.split(","):
            file_name = entry.strip()
            if not file_name:
                continue
            src = project / file_name
            dst = worktree / file_name

            if not src.exists():
                warnings.append(
                    f"copy_files: '{file_name}' not found in project root, skipping"
                )
                continue

            if src.is_dir():
                try:
                    copy_dir_recursive(src, dst)
                except OSError as exc:
                    warnings.append(
                        f"Failed to copy directory '{file_name}' to worktree: {exc}"
                    )
                continue

            if not dst.parent.exists():
                try:
                    dst.parent.mkdir(parents=True, exist_ok=True)
                except OSError as exc:
                    warnings.append(
                        f"Failed to create directory for '{file_name}': {exc}"
                    )
                    continue
            try:
                _copy_file(src, dst)
            except OSError as exc:
                warnings.append(f"Failed to copy '{file_name}' to worktree: {exc}")

    if init_script is not None:
        script = init_script.strip()
        if script:
            try:
                result = subprocess.run(
                    ["sh", "-c", script],
                    cwd=worktree,
                    capture_output=True,
                    check=False,
                )
            except OSError as exc:
                warnings.append(f"Failed to run init_script: {exc}")
            else:
                if result.returncode != 0:
                    stderr = _decode(result.stderr).strip()
                    warnings.append(
                        f"init_script exited with "
                        f"{_exit_description(result.returncode)}: {stderr}"
                    )

    return warnings


def remove_worktree(project_path: str | os.PathLike[str], task_id: str) -> None:
    """Force-remove a task's worktree, pruning stale entries if removal fails."""
    path = worktree_path(project_path, task_id)
    result = _git(
        project_path,
        "worktree",
        "remove",
        path,
        "--force",
        context="Failed to remove git worktree",
    )
    if result.returncode != 0:
        _git(project_path, "worktree", "prune", context="Failed to prune worktrees")