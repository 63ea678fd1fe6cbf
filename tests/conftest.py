"""Shared test fixtures for ghinbox."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

import pytest

from ghinbox.events import SearchDone, Startup
from ghinbox.github.fetcher import Fetcher
from ghinbox.models import (
    CLOSED,
    Comment,
    CommentPage,
    ItemDetail,
    ItemSummary,
    PullRequestMeta,
    ReviewTally,
)
from ghinbox.state import InboxState

NOW = datetime(2024, 6, 15, 12, 0, 0, tzinfo=timezone.utc)


class FakeClient:
    """Stands in for GitHubClient: records requests and replays canned responses.

    Responses are keyed by (verb, path) and, for searches, by the ``q`` parameter.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, dict | None, dict | None]] = []
        self._responses: dict[tuple[str, str, str | None], Any] = {}

    def add(
        self,
        verb: str,
        path: str,
        data: Any = None,
        headers: dict[str, str] | None = None,
        query: str | None = None,
        error: Exception | None = None,
    ) -> None:
        self._responses[(verb, path, query)] = error or (headers or {}, data)

    def request(self, verb, path, parameters=None, body=None):
        self.calls.append((verb, path, parameters, body))
        query = (parameters or {}).get("q")
        key = (verb, path, query)
        if key not in self._responses:
            key = (verb, path, None)
        response = self._responses[key]
        if isinstance(response, Exception):
            raise response
        return response

    def paths(self) -> list[str]:
        return [path for _, path, _, _ in self.calls]


def search_hit(number: int, repo: str = "acme/webapp", pr: bool = False, title: str = "") -> dict:
    kind = "pull" if pr else "issues"
    hit = {
        "title": title or f"Item {number}",
        "number": number,
        "html_url": f"https://github.com/{repo}/{kind}/{number}",
        "repository_url": f"https://api.github.com/repos/{repo}",
    }
    if pr:
        hit["pull_request"] = {"url": f"https://api.github.com/repos/{repo}/pulls/{number}"}
    return hit


@pytest.fixture
def fake_client() -> FakeClient:
    return FakeClient()


@pytest.fixture
def fetcher(fake_client: FakeClient) -> Fetcher:
    return Fetcher(fake_client)


@pytest.fixture
def issue_item() -> ItemSummary:
    return ItemSummary(
        title="Login page crashes on Safari",
        repo="acme/webapp",
        number=42,
        url="https://github.com/acme/webapp/issues/42",
        kind="issue",
    )


@pytest.fixture
def pr_item() -> ItemSummary:
    return ItemSummary(
        title="Migrate to FastAPI",
        repo="acme/api",
        number=7,
        url="https://github.com/acme/api/pull/7",
        kind="pr",
    )


@pytest.fixture
def closed_issue_detail(issue_item: ItemSummary) -> ItemDetail:
    return ItemDetail(
        title=issue_item.title,
        repo=issue_item.repo,
        number=issue_item.number,
        url=issue_item.url,
        kind="issue",
        body="Steps to reproduce:\n1. Open /login in Safari",
        state=CLOSED,
        author="octocat",
        updated=datetime(2024, 6, 15, 9, 0, 0, tzinfo=timezone.utc),
        comment_count=2,
        labels=["bug", "P1"],
        assignees=[],
        comments=CommentPage(
            comments=[
                Comment(author="hubot", body="Confirmed on 17.2", updated=datetime(2024, 6, 15, 11, 30, tzinfo=timezone.utc)),
                Comment(author="octocat", body="", updated=datetime(2024, 6, 14, 12, 0, tzinfo=timezone.utc)),
            ],
            page=1,
            has_next=True,
            has_prev=False,
        ),
    )


@pytest.fixture
def pr_detail(pr_item: ItemSummary) -> ItemDetail:
    return ItemDetail(
        title=pr_item.title,
        repo=pr_item.repo,
        number=pr_item.number,
        url=pr_item.url,
        kind="pr",
        body="Replaces Flask with FastAPI.",
        state="open",
        author="octocat",
        updated=datetime(2024, 6, 15, 10, 0, 0, tzinfo=timezone.utc),
        comment_count=0,
        pull=PullRequestMeta(
            draft=False,
            mergeable=True,
            additions=120,
            deletions=45,
            changed_files=6,
            commits=3,
            reviews=ReviewTally(approvals=1, changes_requested=0, commented=2),
        ),
    )


@pytest.fixture
def state() -> InboxState:
    return InboxState(clock=lambda: NOW)


@pytest.fixture
def loaded_state(state: InboxState, issue_item: ItemSummary, pr_item: ItemSummary) -> InboxState:
    """List mode with two items loaded from the first search."""
    (command,) = state.dispatch(Startup())
    state.dispatch(SearchDone(generation=command.generation, items=[issue_item, pr_item]))
    return state


@pytest.fixture
def hit():
    """Factory for raw search hits as GitHub returns them."""
    return search_hit
