from __future__ import annotations

from collections.abc import Sequence

from prsup.models import PullRequest


def filter_pull_requests(
    prs: Sequence[PullRequest], query: str
) -> list[PullRequest]:
    """Return the PRs whose repo, title, author or branch contain ``query``.

    Matching is a case-insensitive substring test; order is preserved and an
    empty query matches everything.
    """
    if not query:
        return list(prs)
    needle = query.casefold()
    return [pr for pr in prs if needle in pr.search_text]
