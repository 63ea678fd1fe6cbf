"""Core data models for ghinbox."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone

OPEN = "open"
CLOSED = "closed"

PR = "pr"
ISSUE = "issue"


@dataclass(frozen=True)
class Filter:
    name: str  # e.g. "Review requested"
    query: str  # GitHub search syntax


@dataclass(frozen=True)
class Tab:
    name: str  # e.g. "PRs"
    kind: str  # "pr" | "issue"


@dataclass(frozen=True)
class ItemSummary:
    """A search hit. Identity is (repo, number)."""

    title: str
    repo: str  # "owner/name"
    number: int
    url: str  # html permalink
    kind: str  # "pr" | "issue"

    @property
    def key(self) -> tuple[str, int]:
        return (self.repo, self.number)


@dataclass(frozen=True)
class Comment:
    author: str
    body: str
    updated: datetime | None = None


@dataclass(frozen=True)
class CommentPage:
    comments: list[Comment] = field(default_factory=list)
    page: int = 1  # 1-based
    has_next: bool = False
    has_prev: bool = False


@dataclass(frozen=True)
class Review:
    user: str
    state: str  # "APPROVED" | "CHANGES_REQUESTED" | "COMMENTED" | ...
    submitted_at: datetime | None = None


@dataclass(frozen=True)
class ReviewTally:
    approvals: int = 0
    changes_requested: int = 0
    commented: int = 0


@dataclass(frozen=True)
class PullRequestMeta:
    draft: bool = False
    mergeable: bool | None = None  # None while GitHub is still computing it
    additions: int = 0
    deletions: int = 0
    changed_files: int = 0
    commits: int = 0
    reviews: ReviewTally = field(default_factory=ReviewTally)


@dataclass(frozen=True)
class ItemDetail:
    """Full record for one item, including one page of its comments."""

    title: str
    repo: str
    number: int
    url: str
    kind: str  # "pr" | "issue"
    body: str = ""
    state: str = OPEN  # "open" | "closed"
    author: str = ""
    updated: datetime | None = None
    comment_count: int = 0
    labels: list[str] = field(default_factory=list)
    assignees: list[str] = field(default_factory=list)
    pull: PullRequestMeta | None = None  # set only when kind == "pr"
    comments: CommentPage = field(default_factory=CommentPage)

    @property
    def key(self) -> tuple[str, int]:
        return (self.repo, self.number)

    def summary(self) -> ItemSummary:
        return ItemSummary(
            title=self.title,
            repo=self.repo,
            number=self.number,
            url=self.url,
            kind=self.kind,
        )


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _submitted(review: Review) -> datetime:
    if review.submitted_at is None:
        return _EPOCH
    if review.submitted_at.tzinfo is None:
        return review.submitted_at.replace(tzinfo=timezone.utc)
    return review.submitted_at


def tally_reviews(reviews: list[Review]) -> ReviewTally:
    """Count each reviewer once, by the state of their latest submitted review.

    Reviews without a user are ignored. When two reviews by the same user share
    a timestamp (or have none), the one listed later wins.
    """
    latest: dict[str, Review] = {}
    for review in reviews:
        if not review.user:
            continue
        current = latest.get(review.user)
        if current is None or _submitted(review) >= _submitted(current):
            latest[review.user] = review

    approvals = changes = commented = 0
    for review in latest.values():
        state = review.state.upper()
        if state == "APPROVED":
            approvals += 1
        elif state == "CHANGES_REQUESTED":
            changes += 1
        elif state == "COMMENTED":
            commented += 1
    return ReviewTally(approvals=approvals, changes_requested=changes, commented=commented)


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse GitHub's ISO-8601 timestamps ("2024-06-01T10:00:00Z")."""
    if not value:
        return None
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
