# agtx

Helpers for running coding agents in isolated git worktrees: creating and
initialising per-task worktrees, checking branches for merge conflicts,
committing and pushing work, opening pull requests through the `gh` CLI, and
naming, converting and discovering agent-native skill commands.

The package runs the `git` executable (and `gh` for pull requests, `sh` for
worktree init scripts), so these must be on `PATH` where those features are
used. It is a library only; it installs no commands.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Modules

### `agtx.gitrepo`

Repository queries and branch operations: `is_git_repo`, `repo_root`,
`current_branch`, `diff_stat`, `diff_full`, `merge_branch` (a `--no-ff`
merge), `check_merge_conflicts` (a read-only `git merge-tree --write-tree`
check returning `(has_conflicts, conflicting_files)`),
`parse_conflicting_files` and `delete_branch`. When git cannot be started,
or a merge fails, `GitError` is raised.

### `agtx.worktree`

Per-task worktrees under `<project>/.agtx/worktrees/<slug>`, each on a branch
`task/<slug>` made from the main branch:

- `create_worktree(project_path, task_slug)` reuses a valid worktree, or
  clears a partial one and creates it afresh; raises `GitError` on failure.
- `initialize_worktree(project_path, worktree_path, copy_files, init_script,
  copy_dirs)` copies the agent configuration directories in
  `AGENT_CONFIG_DIRS`, the extra `copy_dirs`, and the comma-separated
  `copy_files`, then runs `init_script` with `sh -c` inside the worktree.
  Problems are returned as a list of warning strings rather than raised.
- `copy_dir_recursive`, `detect_main_branch` (`main`, else `master`, else the
  current branch), `remove_worktree` (force-removes, pruning if that fails),
  `worktree_path` and `worktree_exists`.

### `agtx.operations`

`GitOperations`, an abstract interface for worktree management, diffs,
staging, committing, pushing, conflict checks against the remote default
branch and file listing, and `RealGitOps`, its implementation that runs
`git`. Code can depend on the interface and substitute its own
implementation in tests. Diff and listing methods return empty output if git
cannot be run; `commit` ignores "nothing to commit", while other commit and
push failures raise `GitError`.

### `agtx.provider`

Pull requests: the `PullRequestState` enum (`OPEN`, `MERGED`, `CLOSED`,
`UNKNOWN`), the abstract `GitProviderOperations`, and `RealGitHubOps`, which
uses `gh pr view` and `gh pr create`. `parse_pr_state` and `parse_pr_number`
interpret `gh` output; a URL without a trailing number gives `0`.

### `agtx.skills`

Skill naming and discovery for the `claude`, `gemini`, `opencode`, `codex`
and `copilot` agents: `agent_native_skill_dir`, `skill_name_to_command`,
`skill_dir_to_filename`, `transform_plugin_command`, `strip_frontmatter`,
`extract_description`, `skill_to_gemini_toml` (renders a skill as a Gemini
TOML command) and `scan_agent_skills`, which lists `(command, description)`
pairs found in a project's agent command directories, sorted by command.

## Example

```python
from pathlib import Path

from agtx.gitrepo import check_merge_conflicts
from agtx.worktree import create_worktree, detect_main_branch, initialize_worktree

project = Path(".").resolve()
path = create_worktree(project, "fix-login")
for warning in initialize_worktree(project, path, ".env", "npm install", []):
    print(warning)

has_conflicts, files = check_merge_conflicts(
    project, detect_main_branch(project), "task/fix-login"
)
```

Plugin commands are rewritten for each agent's syntax:

```python
from agtx.skills import transform_plugin_command

transform_plugin_command("/gsd:plan-phase 1", "codex")     # "$gsd-plan-phase 1"
transform_plugin_command("/gsd:plan-phase 1", "opencode")  # "/gsd-plan-phase 1"
```

## What this package does not do

It has no interactive board or terminal interface, no task or project
storage, no server for agents to call, and no command-line program. It ships
no skill or workflow plugin files of its own and does not write skill files
into projects; it provides the naming, conversion and discovery helpers such
tooling would use.