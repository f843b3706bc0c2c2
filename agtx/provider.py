"""Access to git hosting providers for pull requests."""

from __future__ import annotations

import enum
import os
import re
import subprocess
from abc import ABC, abstractmethod

from agtx.gitrepo import GitError

__all__ = [
    "PullRequestState",
    "GitProviderOperations",
    "RealGitHubOps",
    "parse_pr_state",
    "parse_pr_number",
]

_INTEGER = re.compile(r"[+-]?[0-9]+")
_I32_MIN, _I32_MAX = -(2**31), 2**31 - 1


class PullRequestState(enum.Enum):
    """State of a pull or merge request."""

    OPEN = "open"
    MERGED = "merged"
    CLOSED = "closed"
    UNKNOWN = "unknown"


def parse_pr_state(output: str) -> PullRequestState:
    """Derive the pull request state from ``gh pr view --json state`` output."""
    if "MERGED" in output:
        return PullRequestState.MERGED
    if "CLOSED" in output:
        return PullRequestState.CLOSED
    if "OPEN" in output:
        return PullRequestState.OPEN
    return PullRequestState.UNKNOWN


def parse_pr_number(pr_url: str) -> int:
    """Return the number at the end of a pull request URL, or 0 if there is none."""
    last = pr_url.split("/")[-1]
    if not _INTEGER.fullmatch(last):
        return 0
    number = int(last)
    return number if _I32_MIN <= number <= _I32_MAX else 0


class GitProviderOperations(ABC):
    """Operations on a git hosting provider."""

    @abstractmethod
    def get_pr_state(
        self, project_path: str | os.PathLike[str], pr_number: int
    ) -> PullRequestState:
        """Return the state of a pull request."""

    @abstractmethod
    def create_pr(
        self,
        project_path: str | os.PathLike[str],
        title: str,
        body: str,
        head_branch: str,
    ) -> tuple[int, str]:
        """Create a pull request and return ``(number, url)``."""


def _gh(cwd: str | os.PathLike[str], *args: str) -> subprocess.CompletedProcess[bytes]:
    try:
        return subprocess.run(["gh", *args], cwd=cwd, capture_output=True, check=False)
    except OSError as exc:
        raise GitError(f"Failed to run gh: {exc}") from exc


class RealGitHubOps(GitProviderOperations):
    """GitHub implementation that runs the ``gh`` command."""

    def get_pr_state(self, project_path, pr_number):
        result = _gh(project_path, "pr", "view", str(pr_number), "--json", "state")
        if result.returncode != 0:
            return PullRequestState.UNKNOWN
        return parse_pr_state(result.stdout.decode("utf-8", errors="replace"))

    def create_pr(self, project_path, title, body, head_branch):
        result = _gh(
            project_path,
            "pr",
            "create",
            "--title",
            title,
            "--body",
            body,
            "--head",
            head_branch,
        )
        if result.returncode != 0:
            stderr = result.stderr.decode("utf-8", errors="replace")
            raise GitError(f"Failed to create PR: {stderr}")
        pr_url = result.stdout.decode("utf-8", errors="replace").strip()
        return parse_pr_number(pr_url), pr_url