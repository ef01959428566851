from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class ReviewDecision(str, Enum):
    NONE = ""
    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    REVIEW_REQUIRED = "REVIEW_REQUIRED"
    UNRESOLVED = "UNRESOLVED"  # a value GitHub sent that we don't know

    @classmethod
    def parse(cls, value: str | None) -> ReviewDecision:
        if not value:
            return cls.NONE
        try:
            return cls(value)
        except ValueError:
            return cls.UNRESOLVED


class ReviewState(str, Enum):
    APPROVED = "APPROVED"
    CHANGES_REQUESTED = "CHANGES_REQUESTED"
    COMMENTED = "COMMENTED"
    OTHER = "OTHER"

    @classmethod
    def parse(cls, value: str | None) -> ReviewState:
        try:
            return cls(value or "")
        except ValueError:
            return cls.OTHER


class Badge(str, Enum):
    """Semantic status category shown in the first column."""

    DRAFT = "Draft"
    APPROVED = "Approved"
    DENIED = "Denied"
    COMMENTED = "Commented"
    REVIEW = "Review"
    OPEN = "Open"

    @property
    def label(self) -> str:
        return f"[{self.value}]"


@dataclass(frozen=True)
class Review:
    author: str
    state: ReviewState
    raw_state: str = ""  # preserved so cache files round-trip


@dataclass(frozen=True)
class PullRequest:
    number: int
    repo_name: str
    repo_owner: str
    title: str
    branch: str
    author: str
    is_draft: bool = False
    additions: int = 0
    deletions: int = 0
    review_decision: ReviewDecision = ReviewDecision.NONE
    raw_review_decision: str = ""
    review_requests: tuple[str, ...] = ()  # first is primary
    reviews: tuple[Review, ...] = field(default_factory=tuple)  # most recent last

    @property
    def key(self) -> tuple[str, str, int]:
        """Identity of the PR across fetches (numbers repeat between repos)."""
        return (self.repo_owner, self.repo_name, self.number)

    @property
    def url(self) -> str:
        return f"https://github.com/{self.repo_owner}/{self.repo_name}/pull/{self.number}"

    @property
    def search_text(self) -> str:
        return f"{self.repo_name} {self.title} {self.author} {self.branch}".casefold()

    @property
    def reviewer(self) -> str:
        """The most relevant reviewer: pending request first, then last reviewer."""
        if self.review_requests:
            return self.review_requests[0]
        if self.reviews:
            return self.reviews[-1].author
        return ""

    @property
    def badge(self) -> Badge:
        if self.is_draft:
            return Badge.DRAFT
        if self.review_decision is ReviewDecision.APPROVED:
            return Badge.APPROVED
        if self.review_decision is ReviewDecision.CHANGES_REQUESTED:
            return Badge.DENIED
        if self.review_decision is ReviewDecision.REVIEW_REQUIRED:
            if self.reviews and self.reviews[-1].state is ReviewState.COMMENTED:
                return Badge.COMMENTED
            return Badge.REVIEW
        return Badge.OPEN

    @classmethod
    def from_api(cls, node: dict[str, Any]) -> PullRequest:
        """Build a PullRequest from a GraphQL search node.

        Missing nested objects are tolerated: GitHub returns ``null`` for
        deleted authors and the demo data omits optional connections.
        """
        repository = node.get("repository") or {}
        requests: list[str] = []
        for req in (node.get("reviewRequests") or {}).get("nodes") or []:
            reviewer = (req or {}).get("requestedReviewer") or {}
            name = reviewer.get("login") or reviewer.get("name")
            if name:
                requests.append(name)
        reviews: list[Review] = []
        for rev in (node.get("reviews") or {}).get("nodes") or []:
            rev = rev or {}
            state = rev.get("state") or ""
            reviews.append(
                Review(
                    author=(rev.get("author") or {}).get("login", ""),
                    state=ReviewState.parse(state),
                    raw_state=state,
                )
            )
        decision = node.get("reviewDecision") or ""
        return cls(
            number=int(node["number"]),
            repo_name=repository.get("name", ""),
            repo_owner=(repository.get("owner") or {}).get("login", ""),
            title=node.get("title", ""),
            branch=node.get("headRefName", ""),
            author=(node.get("author") or {}).get("login", ""),
            is_draft=bool(node.get("isDraft", False)),
            additions=int(node.get("additions") or 0),
            deletions=int(node.get("deletions") or 0),
            review_decision=ReviewDecision.parse(decision),
            raw_review_decision=decision,
            review_requests=tuple(requests),
            reviews=tuple(reviews),
        )

    def to_api(self) -> dict[str, Any]:
        """Inverse of :meth:`from_api`, used for the on-disk cache."""
        return {
            "number": self.number,
            "title": self.title,
            "headRefName": self.branch,
            "isDraft": self.is_draft,
            "additions": self.additions,
            "deletions": self.deletions,
            "author": {"login": self.author},
            "repository": {"name": self.repo_name, "owner": {"login": self.repo_owner}},
            "reviewDecision": self.raw_review_decision or self.review_decision.value,
            "reviewRequests": {
                "totalCount": len(self.review_requests),
                "nodes": [
                    {"requestedReviewer": {"login": name}}
                    for name in self.review_requests
                ],
            },
            "reviews": {
                "nodes": [
                    {"author": {"login": r.author}, "state": r.raw_state or r.state.value}
                    for r in self.reviews
                ]
            },
        }


def sort_oldest_first(prs: list[PullRequest]) -> list[PullRequest]:
    """Return a new list ordered by PR number, ascending (stable)."""
    return sorted(prs, key=lambda pr: pr.number)
