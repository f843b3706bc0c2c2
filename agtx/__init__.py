"""Git worktree, pull request and agent skill helpers for coding agents."""

__version__ = "0.1.0"
__all__ = ["gitrepo", "worktree", "operations", "provider", "skills"]