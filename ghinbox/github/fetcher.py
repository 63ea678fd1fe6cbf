"""Issue and pull request operations on top of GitHubClient."""

from __future__ import annotations

import logging
from typing import Any
from urllib.parse import urlparse

from ghinbox.config import MAX_COMMENTS, MAX_ITEMS
from ghinbox.errors import PreconditionError, TransportError
from ghinbox.github.client import GitHubClient, has_link_rel, header_value
from ghinbox.models import (
    CLOSED,
    ISSUE,
    OPEN,
    PR,
    Comment,
    CommentPage,
    ItemDetail,
    ItemSummary,
    PullRequestMeta,
    Review,
    parse_timestamp,
    tally_reviews,
)

logger = logging.getLogger(__name__)

UNKNOWN_REPO = "unknown/repo"

# Search qualifiers that already pin the item type
TYPE_QUALIFIERS = {"is:issue", "is:pr", "is:pull-request", "is:pullrequest"}


def apply_tab_query(query: str, kind: str) -> str:
    """Replace any type qualifier in ``query`` with the one for ``kind``.

    Unknown kinds leave the query untouched.
    """
    kind = kind.lower()
    if kind not in (PR, ISSUE):
        return query
    tokens = [t for t in query.split() if t.lower() not in TYPE_QUALIFIERS]
    tokens.append("is:pr" if kind == PR else "is:issue")
    return " ".join(tokens)


def has_type_qualifier(query: str) -> bool:
    return any(t.lower() in TYPE_QUALIFIERS for t in query.split())


def repo_name_from_api_url(api_url: str) -> str:
    """``https://api.github.com/repos/acme/webapp`` -> ``acme/webapp``."""
    if not api_url:
        return UNKNOWN_REPO
    parts = [p for p in urlparse(api_url).path.split("/") if p]
    if len(parts) < 2:
        return UNKNOWN_REPO
    return f"{parts[-2]}/{parts[-1]}"


class Fetcher:
    """Searches, loads and mutates issues and pull requests."""

    def __init__(self, client: GitHubClient) -> None:
        self._client = client

    def search_items(self, query: str, kind: str | None = None) -> list[ItemSummary]:
        """Search issues and PRs.

        GitHub's search endpoint needs an explicit type qualifier. If the query
        (after applying ``kind``) has none, search twice, issues first then PRs,
        and merge the passes by URL so each item appears once.
        """
        if kind:
            query = apply_tab_query(query, kind)
        if has_type_qualifier(query):
            return self._search(query)

        issues = self._search(f"{query} is:issue")
        prs = self._search(f"{query} is:pr")
        seen = {item.url for item in issues}
        combined = list(issues)
        for item in prs:
            if item.url in seen:
                continue
            seen.add(item.url)
            combined.append(item)
        return combined

    def fetch_detail(self, repo: str, number: int, comment_page: int = 1) -> ItemDetail:
        """Load one item with a single page of its comments.

        For pull requests the PR metadata and its reviews are loaded too; a
        failure in either aborts the whole fetch.
        """
        _require_target(repo, number)
        comment_page = max(1, comment_page)

        _, payload = self._client.request("GET", f"/repos/{repo}/issues/{number}")
        payload = _expect(payload, dict)

        kind = PR if payload.get("pull_request") else ISSUE
        pull = self._fetch_pull_meta(repo, number) if kind == PR else None
        comments = self._fetch_comments(repo, number, comment_page)

        return ItemDetail(
            title=payload.get("title") or "",
            repo=repo,
            number=number,
            url=payload.get("html_url") or "",
            kind=kind,
            body=payload.get("body") or "",
            state=payload.get("state") or OPEN,
            author=_login(payload.get("user")),
            updated=parse_timestamp(payload.get("updated_at")),
            comment_count=int(payload.get("comments") or 0),
            labels=[l["name"] for l in payload.get("labels") or [] if l.get("name")],
            assignees=[a["login"] for a in payload.get("assignees") or [] if a.get("login")],
            pull=pull,
            comments=comments,
        )

    def post_comment(self, repo: str, number: int, body: str) -> None:
        _require_target(repo, number)
        self._client.request(
            "POST", f"/repos/{repo}/issues/{number}/comments", body={"body": body}
        )

    def set_state(self, repo: str, number: int, state: str) -> None:
        _require_target(repo, number)
        if state not in (OPEN, CLOSED):
            raise PreconditionError(f"unsupported state {state!r}")
        self._client.request("PATCH", f"/repos/{repo}/issues/{number}", body={"state": state})

    def _search(self, query: str) -> list[ItemSummary]:
        _, payload = self._client.request(
            "GET", "/search/issues", {"q": query, "per_page": MAX_ITEMS}
        )
        payload = _expect(payload, dict)

        items: list[ItemSummary] = []
        for raw in payload.get("items") or []:
            items.append(
                ItemSummary(
                    title=raw.get("title") or "",
                    repo=repo_name_from_api_url(raw.get("repository_url") or ""),
                    number=int(raw.get("number") or 0),
                    url=raw.get("html_url") or "",
                    kind=PR if raw.get("pull_request") else ISSUE,
                )
            )
        return items

    def _fetch_pull_meta(self, repo: str, number: int) -> PullRequestMeta:
        _, payload = self._client.request("GET", f"/repos/{repo}/pulls/{number}")
        payload = _expect(payload, dict)
        _, raw_reviews = self._client.request(
            "GET", f"/repos/{repo}/pulls/{number}/reviews", {"per_page": 100}
        )
        reviews = [
            Review(
                user=_login(r.get("user")),
                state=r.get("state") or "",
                submitted_at=parse_timestamp(r.get("submitted_at")),
            )
            for r in _expect(raw_reviews, list)
        ]
        return PullRequestMeta(
            draft=bool(payload.get("draft")),
            mergeable=payload.get("mergeable"),
            additions=int(payload.get("additions") or 0),
            deletions=int(payload.get("deletions") or 0),
            changed_files=int(payload.get("changed_files") or 0),
            commits=int(payload.get("commits") or 0),
            reviews=tally_reviews(reviews),
        )

    def _fetch_comments(self, repo: str, number: int, page: int) -> CommentPage:
        headers, payload = self._client.request(
            "GET",
            f"/repos/{repo}/issues/{number}/comments",
            {"per_page": MAX_COMMENTS, "page": page},
        )
        link = header_value(headers, "Link")
        return CommentPage(
            comments=[
                Comment(
                    author=_login(c.get("user")),
                    body=c.get("body") or "",
                    updated=parse_timestamp(c.get("updated_at")),
                )
                for c in _expect(payload, list)
            ],
            page=page,
            has_next=has_link_rel(link, "next"),
            has_prev=has_link_rel(link, "prev"),
        )


def _require_target(repo: str, number: int) -> None:
    if not repo or not number:
        raise PreconditionError("missing repo or number")


def _login(user: dict[str, Any] | None) -> str:
    return (user or {}).get("login") or ""


def _expect(payload: Any, kind: type) -> Any:
    if not isinstance(payload, kind):
        raise TransportError(f"unexpected response payload: {type(payload).__name__}")
    return payload
