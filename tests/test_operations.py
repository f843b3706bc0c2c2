import subprocess
from pathlib import Path

import pytest

from agtx.gitrepo import GitError
from agtx.operations import GitOperations, RealGitOps


def _git(cwd, *args):
    subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True)


@pytest.fixture
def repo(tmp_path):
    path = tmp_path / "repo"
    path.mkdir()
    _git(path, "init")
    _git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    _git(path, "config", "user.email", "tester@example.com")
    _git(path, "config", "user.name", "Tester")
    _git(path, "config", "commit.gpgsign", "false")
    (path / "readme.txt").write_text("hello\n")
    _git(path, "add", "-A")
    _git(path, "commit", "-m", "initial")
    return path


@pytest.fixture
def ops():
    return RealGitOps()


def test_interface_is_abstract():
    with pytest.raises(TypeError):
        GitOperations()


def test_has_changes_clean_and_dirty(repo, ops):
    assert ops.has_changes(repo) is False
    (repo / "new.txt").write_text("x\n")
    assert ops.has_changes(repo) is True


def test_untracked_listing_and_diff(repo, ops):
    (repo / "new.txt").write_text("content\n")
    assert ops.list_untracked_files(repo).splitlines() == ["new.txt"]
    assert "+content" in ops.diff_untracked_file(repo, "new.txt")


def test_add_all_moves_changes_to_index(repo, ops):
    (repo / "readme.txt").write_text("changed\n")
    assert "+changed" in ops.diff(repo)
    ops.add_all(repo)
    assert ops.diff(repo) == ""
    assert "+changed" in ops.diff_cached(repo)


def test_commit_clears_changes(repo, ops):
    (repo / "readme.txt").write_text("changed\n")
    ops.add_all(repo)
    ops.commit(repo, "update readme")
    assert ops.has_changes(repo) is False
    log = subprocess.run(
        ["git", "log", "-1", "--format=%s"], cwd=repo, capture_output=True, text=True
    ).stdout.strip()
    assert log == "update readme"


def test_list_files_includes_tracked_and_untracked(repo, ops):
    (repo / "extra.txt").write_text("x\n")
    assert sorted(ops.list_files(repo)) == ["extra.txt", "readme.txt"]


def test_diff_stat_from_main(repo, ops):
    (repo / "readme.txt").write_text("different\n")
    assert "readme.txt" in ops.diff_stat_from_main(repo)


def test_worktree_lifecycle(repo, ops):
    path = ops.create_worktree(repo, "my-task")
    assert Path(path) == repo / ".agtx" / "worktrees" / "my-task"
    assert ops.worktree_exists(repo, "my-task") is True
    assert (Path(path) / "readme.txt").read_text() == "hello\n"
    ops.remove_worktree(repo, path)
    assert ops.worktree_exists(repo, "my-task") is False


def test_delete_branch(repo, ops):
    _git(repo, "branch", "feature")
    ops.delete_branch(repo, "feature")
    branches = subprocess.run(
        ["git", "branch", "--list", "feature"], cwd=repo, capture_output=True, text=True
    ).stdout
    assert branches.strip() == ""


def test_push_without_origin_fails(repo, ops):
    with pytest.raises(GitError, match="Failed to push branch"):
        ops.push(repo, "main", True)


def test_fetch_without_origin_fails(repo, ops):
    with pytest.raises(GitError, match="git fetch failed"):
        ops.fetch_and_check_conflicts(repo)


def test_missing_directory_gives_empty_results(tmp_path, ops):
    missing = tmp_path / "absent"
    assert ops.diff(missing) == ""
    assert ops.has_changes(missing) is False
    assert ops.list_files(missing) == []


def test_initialize_worktree_copies_files(tmp_path, ops):
    project = tmp_path / "project"
    worktree = tmp_path / "wt"
    project.mkdir()
    worktree.mkdir()
    (project / ".env").write_text("KEY=1\n")
    warnings = ops.initialize_worktree(project, worktree, ".env, missing.txt", None, [])
    assert (worktree / ".env").read_text() == "KEY=1\n"
    assert warnings == [
        "copy_files: 'missing.txt' not found in project root, skipping"
    ]