import subprocess
from unittest import mock

import pytest

from agtx.gitrepo import GitError
from agtx.provider import (
    GitProviderOperations,
    PullRequestState,
    RealGitHubOps,
    parse_pr_number,
    parse_pr_state,
)


def _completed(returncode=0, stdout=b"", stderr=b""):
    return subprocess.CompletedProcess(["gh"], returncode, stdout, stderr)


@pytest.mark.parametrize(
    "output, expected",
    [
        ('{"state":"MERGED"}', PullRequestState.MERGED),
        ('{"state":"CLOSED"}', PullRequestState.CLOSED),
        ('{"state":"OPEN"}', PullRequestState.OPEN),
        ("{}", PullRequestState.UNKNOWN),
    ],
)
def test_parse_pr_state(output, expected):
    assert parse_pr_state(output) is expected


def test_parse_pr_number_from_url():
    assert parse_pr_number("https://github.com/owner/repo/pull/123") == 123


@pytest.mark.parametrize("url", ["", "https://github.com/owner/repo/pull/", "abc", "x/12a"])
def test_parse_pr_number_invalid_is_zero(url):
    assert parse_pr_number(url) == 0


def test_interface_is_abstract():
    with pytest.raises(TypeError):
        GitProviderOperations()


def test_get_pr_state_success(tmp_path):
    with mock.patch("subprocess.run", return_value=_completed(stdout=b'{"state":"MERGED"}')) as run:
        assert RealGitHubOps().get_pr_state(tmp_path, 7) is PullRequestState.MERGED
    assert run.call_args.args[0] == ["gh", "pr", "view", "7", "--json", "state"]


def test_get_pr_state_failure_is_unknown(tmp_path):
    with mock.patch("subprocess.run", return_value=_completed(returncode=1, stdout=b"OPEN")):
        assert RealGitHubOps().get_pr_state(tmp_path, 7) is PullRequestState.UNKNOWN


def test_create_pr_returns_number_and_url(tmp_path):
    url = "https://github.com/owner/repo/pull/123"
    with mock.patch("subprocess.run", return_value=_completed(stdout=(url + "\n").encode())) as run:
        assert RealGitHubOps().create_pr(tmp_path, "Title", "Body", "task/x") == (123, url)
    args = run.call_args.args[0]
    assert args[:3] == ["gh", "pr", "create"]
    assert args[args.index("--head") + 1] == "task/x"


def test_create_pr_failure_raises(tmp_path):
    with mock.patch("subprocess.run", return_value=_completed(returncode=1, stderr=b"boom")):
        with pytest.raises(GitError, match="Failed to create PR: boom"):
            RealGitHubOps().create_pr(tmp_path, "Title", "Body", "task/x")


def test_missing_gh_raises(tmp_path):
    with mock.patch("subprocess.run", side_effect=FileNotFoundError("gh")):
        with pytest.raises(GitError):
            RealGitHubOps().get_pr_state(tmp_path, 1)