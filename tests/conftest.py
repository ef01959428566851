from __future__ import annotations

import logging

import pytest

from prsup.models import PullRequest, Review, ReviewDecision, ReviewState


@pytest.fixture(autouse=True)
def _isolate_user_dirs(tmp_path, monkeypatch):
    """Keep cache, config and log files out of the real home directory."""
    monkeypatch.setenv("XDG_CACHE_HOME", str(tmp_path / "cache"))
    monkeypatch.setattr("prsup.config.CONFIG_DIR", tmp_path / "config")
    monkeypatch.setattr("prsup.config.CONFIG_FILE", tmp_path / "config" / "config.toml")
    monkeypatch.delenv("SUP_ORG", raising=False)
    monkeypatch.delenv("SUP_DEV_DIR", raising=False)
    yield
    # configure_logging() detaches the package logger from root; undo that
    logger = logging.getLogger("prsup")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
    logger.setLevel(logging.NOTSET)


@pytest.fixture
def make_pr():
    def _make_pr(
        number: int = 1,
        repo_name: str = "backend-api",
        repo_owner: str = "acme-corp",
        title: str = "Fix bug",
        branch: str = "fix/bug",
        author: str = "sarah",
        is_draft: bool = False,
        additions: int = 10,
        deletions: int = 2,
        decision: ReviewDecision = ReviewDecision.NONE,
        review_requests: tuple[str, ...] = (),
        reviews: tuple[tuple[str, ReviewState], ...] = (),
    ) -> PullRequest:
        return PullRequest(
            number=number,
            repo_name=repo_name,
            repo_owner=repo_owner,
            title=title,
            branch=branch,
            author=author,
            is_draft=is_draft,
            additions=additions,
            deletions=deletions,
            review_decision=decision,
            raw_review_decision=decision.value,
            review_requests=review_requests,
            reviews=tuple(
                Review(author=a, state=s, raw_state=s.value) for a, s in reviews
            ),
        )

    return _make_pr
