from __future__ import annotations

import json
import subprocess
from unittest.mock import MagicMock, patch

import pytest

from prsup.github import (
    FetchError,
    SearchScope,
    build_search_query,
    checkout_pull_request,
    fetch_pull_requests,
    open_in_browser,
)


def _completed(stdout: str) -> MagicMock:
    result = MagicMock()
    result.stdout = stdout
    return result


def _payload(*nodes) -> str:
    return json.dumps({"data": {"search": {"nodes": list(nodes)}}})


class TestBuildSearchQuery:
    def test_mine(self):
        assert build_search_query(SearchScope(mine=True)) == "involves:@me is:pr is:open"

    def test_orgs(self):
        scope = SearchScope(orgs=("acme", "globex"))
        assert build_search_query(scope) == "org:acme org:globex is:pr is:open"

    def test_mine_wins_over_orgs(self):
        scope = SearchScope(mine=True, orgs=("acme",))
        assert build_search_query(scope) == "involves:@me is:pr is:open"


class TestFetchPullRequests:
    @patch("prsup.github.subprocess.run")
    def test_parses_nodes(self, mock_run):
        mock_run.return_value = _completed(
            _payload(
                {"number": 7, "title": "A", "repository": {"name": "r", "owner": {"login": "o"}}},
                {},  # an issue hit: empty object
                {"number": 3, "title": "B", "repository": {"name": "r", "owner": {"login": "o"}}},
            )
        )
        prs = fetch_pull_requests(SearchScope(mine=True))
        assert [pr.number for pr in prs] == [7, 3]

        args = mock_run.call_args[0][0]
        assert args[:4] == ["gh", "api", "graphql", "-f"]
        assert "involves:@me is:pr is:open" in args[4]
        assert mock_run.call_args.kwargs["check"] is True

    @patch("prsup.github.subprocess.run")
    def test_command_failure(self, mock_run):
        mock_run.side_effect = subprocess.CalledProcessError(
            1, ["gh"], stderr="HTTP 401: Bad credentials\n"
        )
        with pytest.raises(FetchError, match="Bad credentials"):
            fetch_pull_requests(SearchScope(mine=True))

    @patch("prsup.github.subprocess.run", side_effect=FileNotFoundError)
    def test_missing_gh(self, _mock_run):
        with pytest.raises(FetchError, match="gh CLI not found"):
            fetch_pull_requests(SearchScope(mine=True))

    @patch("prsup.github.subprocess.run")
    def test_timeout(self, mock_run):
        mock_run.side_effect = subprocess.TimeoutExpired(["gh"], 60)
        with pytest.raises(FetchError, match="timed out"):
            fetch_pull_requests(SearchScope(mine=True))

    @patch("prsup.github.subprocess.run")
    def test_garbage_output(self, mock_run):
        mock_run.return_value = _completed("<html>")
        with pytest.raises(FetchError, match="could not parse"):
            fetch_pull_requests(SearchScope(mine=True))

    @patch("prsup.github.subprocess.run")
    def test_graphql_error_payload(self, mock_run):
        mock_run.return_value = _completed(json.dumps({"errors": [{"message": "nope"}]}))
        with pytest.raises(FetchError):
            fetch_pull_requests(SearchScope(orgs=("acme",)))

    @patch("prsup.github.subprocess.run")
    def test_gh_not_executable(self, mock_run):
        mock_run.side_effect = PermissionError(13, "Permission denied", "gh")
        with pytest.raises(FetchError, match="could not run gh"):
            fetch_pull_requests(SearchScope(mine=True))

    @patch("prsup.github.subprocess.run")
    def test_malformed_node(self, mock_run):
        mock_run.return_value = _completed(_payload("not a pull request"))
        with pytest.raises(FetchError, match="could not parse"):
            fetch_pull_requests(SearchScope(mine=True))


@patch("prsup.github.click.launch")
def test_open_in_browser(mock_launch, make_pr):
    open_in_browser(make_pr(number=9, repo_owner="o", repo_name="r"))
    mock_launch.assert_called_once_with("https://github.com/o/r/pull/9")


@patch("prsup.github.subprocess.run")
def test_checkout_runs_in_repo(mock_run, make_pr):
    checkout_pull_request(make_pr(number=12), "/tmp/backend-api")
    mock_run.assert_called_once_with(
        ["gh", "pr", "checkout", "12", "--force"],
        cwd="/tmp/backend-api",
        check=True,
    )
