"""GitHub PR operations via the `gh` CLI."""

from __future__ import annotations

import json
import logging
import subprocess
from dataclasses import dataclass

import click

from prsup.models import PullRequest

logger = logging.getLogger(__name__)

FETCH_TIMEOUT = 60

PR_SEARCH_QUERY = """{
  search(query: "%s", type: ISSUE, first: 100) {
    nodes {
      ... on PullRequest {
        number
        title
        headRefName
        isDraft
        additions
        deletions
        author { login }
        repository { name owner { login } }
        reviewDecision
        reviewRequests(first: 1) { totalCount nodes { requestedReviewer { ... on User { login } ... on Team { name } } } }
        reviews(last: 1) { nodes { author { login } state } }
      }
    }
  }
}"""


class FetchError(Exception):
    """Raised when the PR search via `gh` fails or returns garbage."""

    def __init__(self, reason: str) -> None:
        self.reason = reason
        super().__init__(f"failed to fetch PRs: {reason}")


@dataclass(frozen=True)
class SearchScope:
    """Which open PRs to list: those involving me, or those in some orgs."""

    mine: bool = False
    orgs: tuple[str, ...] = ()


def build_search_query(scope: SearchScope) -> str:
    if scope.mine:
        return "involves:@me is:pr is:open"
    orgs = " ".join(f"org:{org}" for org in scope.orgs)
    return f"{orgs} is:pr is:open".strip()


def fetch_pull_requests(scope: SearchScope) -> list[PullRequest]:
    """Run the search through `gh api graphql` and parse the result.

    Blocking; the TUI calls this from a worker thread.
    """
    search = build_search_query(scope)
    logger.info("Fetching PRs: %s", search)
    try:
        result = subprocess.run(
            ["gh", "api", "graphql", "-f", f"query={PR_SEARCH_QUERY % search}"],
            capture_output=True,
            text=True,
            check=True,
            timeout=FETCH_TIMEOUT,
        )
    except FileNotFoundError:
        raise FetchError("gh CLI not found; install it from https://cli.github.com") from None
    except subprocess.TimeoutExpired:
        raise FetchError(f"gh timed out after {FETCH_TIMEOUT}s") from None
    except subprocess.CalledProcessError as e:
        reason = (e.stderr or "").strip() or f"gh exited with status {e.returncode}"
        raise FetchError(reason) from e
    except OSError as e:
        raise FetchError(f"could not run gh ({e})") from e

    try:
        payload = json.loads(result.stdout)
        nodes = payload["data"]["search"]["nodes"]
        # Non-PR search hits come back as empty objects
        prs = [PullRequest.from_api(node) for node in nodes if node]
    except (json.JSONDecodeError, KeyError, TypeError, ValueError, AttributeError) as e:
        raise FetchError(f"could not parse gh output ({e})") from e

    logger.info("Fetched %d PRs", len(prs))
    return prs


def open_in_browser(pr: PullRequest) -> None:
    """Open the PR page with the system URL handler. Does not wait."""
    logger.info("Opening %s", pr.url)
    click.launch(pr.url)


def checkout_pull_request(pr: PullRequest, repo_path: str) -> None:
    """Run `gh pr checkout` inside ``repo_path``, streaming its output.

    Raises subprocess.CalledProcessError when gh fails.
    """
    logger.info("Checking out %s#%d in %s", pr.repo_name, pr.number, repo_path)
    subprocess.run(
        ["gh", "pr", "checkout", str(pr.number), "--force"],
        cwd=repo_path,
        check=True,
    )


_DEMO_NODES = [
    {"number": 142, "title": "Add user authentication flow", "headRefName": "feature/auth-flow", "isDraft": False, "additions": 847, "deletions": 123, "author": {"login": "sarah"}, "repository": {"name": "backend-api", "owner": {"login": "acme-corp"}}, "reviewDecision": "APPROVED", "reviews": {"nodes": [{"author": {"login": "mike"}, "state": "APPROVED"}]}},
    {"number": 287, "title": "Fix memory leak in worker pool", "headRefName": "fix/worker-memory", "isDraft": False, "additions": 34, "deletions": 89, "author": {"login": "alex"}, "repository": {"name": "job-runner", "owner": {"login": "acme-corp"}}, "reviewDecision": "CHANGES_REQUESTED", "reviews": {"nodes": [{"author": {"login": "sarah"}, "state": "CHANGES_REQUESTED"}]}},
    {"number": 91, "title": "Update dashboard metrics components", "headRefName": "feature/metrics-v2", "isDraft": False, "additions": 456, "deletions": 201, "author": {"login": "mike"}, "repository": {"name": "web-app", "owner": {"login": "acme-corp"}}, "reviewDecision": "REVIEW_REQUIRED", "reviewRequests": {"totalCount": 1, "nodes": [{"requestedReviewer": {"login": "alex"}}]}},
    {"number": 445, "title": "Implement rate limiting middleware", "headRefName": "feature/rate-limit", "isDraft": True, "additions": 234, "deletions": 12, "author": {"login": "jordan"}, "repository": {"name": "backend-api", "owner": {"login": "acme-corp"}}},
    {"number": 156, "title": "Add PostgreSQL connection pooling", "headRefName": "feature/pg-pool", "isDraft": False, "additions": 178, "deletions": 45, "author": {"login": "chris"}, "repository": {"name": "data-service", "owner": {"login": "acme-corp"}}, "reviewDecision": "REVIEW_REQUIRED", "reviewRequests": {"totalCount": 1, "nodes": [{"requestedReviewer": {"login": "jordan"}}]}, "reviews": {"nodes": [{"author": {"login": "alex"}, "state": "COMMENTED"}]}},
    {"number": 312, "title": "Refactor notification service", "headRefName": "refactor/notifications", "isDraft": False, "additions": 623, "deletions": 891, "author": {"login": "taylor"}, "repository": {"name": "backend-api", "owner": {"login": "acme-corp"}}, "reviewDecision": "APPROVED", "reviews": {"nodes": [{"author": {"login": "chris"}, "state": "APPROVED"}]}},
    {"number": 78, "title": "Add dark mode support", "headRefName": "feature/dark-mode", "isDraft": False, "additions": 567, "deletions": 234, "author": {"login": "sam"}, "repository": {"name": "web-app", "owner": {"login": "acme-corp"}}, "reviewDecision": "REVIEW_REQUIRED", "reviewRequests": {"totalCount": 1, "nodes": [{"requestedReviewer": {"login": "taylor"}}]}},
    {"number": 203, "title": "Upgrade to Go 1.22", "headRefName": "chore/go-upgrade", "isDraft": True, "additions": 23, "deletions": 19, "author": {"login": "alex"}, "repository": {"name": "cli-tools", "owner": {"login": "acme-corp"}}},
]


def demo_pull_requests() -> list[PullRequest]:
    """Fixed offline data set for screenshots."""
    return [PullRequest.from_api(node) for node in _DEMO_NODES]
