"""Text building blocks for the inbox screen.

Everything here is pure: it maps view state and domain objects to plain
strings. Colours and layout are applied by the Textual app.
"""

from __future__ import annotations

from datetime import datetime, timezone

from ghinbox.models import CLOSED, PR, CommentPage, ItemDetail, ItemSummary, Tab
from ghinbox.state import ComposeMode, ConfirmMode, DetailMode, InboxState, Mode

APP_TITLE = "GitHub Inbox"
SPINNER_FRAMES = ("|", "/", "-", "\\")

KIND_LABELS = {
    "pr": "PR",
    "issue": "Issue",
}

LIST_HELP = [
    ("↑/↓ j/k", "navigate"),
    ("enter", "details"),
    ("o", "open"),
    ("r", "refresh"),
    ("f", "filter"),
    ("tab", "switch"),
    ("c", "comment"),
    ("x", "close/reopen"),
    ("q", "quit"),
]

DETAIL_HELP = [
    ("esc", "back"),
    ("o", "open"),
    ("r", "refresh"),
    ("c", "comment"),
    ("x", "close/reopen"),
    ("n/p", "comments"),
    ("q", "quit"),
]

COMPOSE_HELP = [("ctrl+g", "send"), ("esc", "cancel")]
CONFIRM_HELP = [("y", "confirm"), ("n/esc", "cancel")]


def humanize_since(ts: datetime | None, now: datetime) -> str:
    """Coarse relative time: just now, 5m ago, 3h ago, 2d ago."""
    if ts is None:
        return "just now"
    seconds = (_aware(now) - _aware(ts)).total_seconds()
    if seconds < 60:
        return "just now"
    if seconds < 3600:
        return f"{int(seconds // 60)}m ago"
    if seconds < 86400:
        return f"{int(seconds // 3600)}h ago"
    return f"{int(seconds // 86400)}d ago"


def _aware(ts: datetime) -> datetime:
    return ts if ts.tzinfo is not None else ts.replace(tzinfo=timezone.utc)


def kind_label(kind: str) -> str:
    return KIND_LABELS.get(kind, kind.capitalize())


def format_list(values: list[str]) -> str:
    if not values:
        return "none"
    return ", ".join(values)


def format_mergeable(value: bool | None) -> str:
    if value is None:
        return "unknown"
    return "yes" if value else "no"


def item_description(item: ItemSummary) -> str:
    return f"{item.repo} • #{item.number} • {kind_label(item.kind)}"


def title_line(state: InboxState) -> str:
    return f"{APP_TITLE}  ·  {state.current_filter.name}"


def tab_labels(tabs: tuple[Tab, ...], active: int) -> list[tuple[str, bool]]:
    """(label, is_active) per tab, for the app to style."""
    return [(f" {tab.name} ", i == active) for i, tab in enumerate(tabs)]


def render_tabs(tabs: tuple[Tab, ...], active: int) -> str:
    return " ".join(
        f"[{label.strip()}]" if is_active else label for label, is_active in tab_labels(tabs, active)
    )


def help_pairs(mode: Mode) -> list[tuple[str, str]]:
    if isinstance(mode, ComposeMode):
        return COMPOSE_HELP
    if isinstance(mode, ConfirmMode):
        return CONFIRM_HELP
    if isinstance(mode, DetailMode):
        return DETAIL_HELP
    return LIST_HELP


def help_line(mode: Mode) -> str:
    return "  ".join(f"{key} {text}" for key, text in help_pairs(mode))


def loaded_summary(state: InboxState, now: datetime) -> str:
    return f"Loaded {len(state.items)} items • updated {humanize_since(state.last_updated, now)}"


def status_line(state: InboxState, now: datetime) -> str:
    """Pick the status text.

    Precedence: error, then an explicit status message, then the computed
    "Loaded N items" summary once a list has arrived, then the default text.
    """
    if state.error is not None:
        return f"Error: {state.error}"
    if state.status_override:
        return state.status
    if state.last_updated is not None and not state.loading:
        return loaded_summary(state, now)
    return state.status


def status_is_error(state: InboxState) -> bool:
    return state.error is not None


def is_busy(state: InboxState) -> bool:
    return state.loading or state.detail_loading or state.action_loading


def status_with_spinner(state: InboxState, now: datetime, tick: int = 0) -> str:
    line = status_line(state, now)
    if is_busy(state):
        return f"{SPINNER_FRAMES[tick % len(SPINNER_FRAMES)]} {line}"
    return line


def list_placeholder(state: InboxState) -> str | None:
    """Text shown instead of the item list, or None to show the list."""
    if state.loading:
        return "Loading list..."
    if not state.items:
        return "No items."
    return None


def detail_meta_line(detail: ItemDetail, now: datetime) -> str:
    return (
        f"{detail.repo} • {kind_label(detail.kind)} • #{detail.number} • {detail.state} • "
        f"{detail.comment_count} comments • updated {humanize_since(detail.updated, now)}"
    )


def detail_extra_line(detail: ItemDetail) -> str:
    """PR metadata for pull requests, labels and assignees for issues."""
    if detail.kind == PR and detail.pull is not None:
        pull = detail.pull
        reviews = pull.reviews
        return (
            f"state: {'draft' if pull.draft else 'ready'} • "
            f"mergeable: {format_mergeable(pull.mergeable)} • "
            f"reviews: +{reviews.approvals} / -{reviews.changes_requested} / {reviews.commented} • "
            f"+{pull.additions}/-{pull.deletions} • "
            f"files {pull.changed_files} • commits {pull.commits}"
        )
    if detail.kind == PR:
        return ""
    return f"labels: {format_list(detail.labels)} • assignees: {format_list(detail.assignees)}"


def render_comments(page: CommentPage, now: datetime) -> str:
    if not page.comments:
        return "Comments\n  (no comments)"
    lines = [f"Comments (page {page.page})"]
    for comment in page.comments:
        lines.append(f"|- {comment.author} • {humanize_since(comment.updated, now)}")
        body = comment.body.strip() or "(empty)"
        lines.extend(f"|  {line}" for line in body.splitlines())
    hints = []
    if page.has_prev:
        hints.append("prev: p")
    if page.has_next:
        hints.append("next: n")
    if hints:
        lines.append("|  " + "  ".join(hints))
    return "\n".join(lines)


def detail_placeholder(state: InboxState) -> str | None:
    """Text shown instead of the detail sections, or None when a detail is ready."""
    if state.detail_loading:
        return "Loading details..."
    if state.detail_error is not None:
        return f"Error loading details: {state.detail_error}"
    if state.detail is None:
        return "No details loaded."
    return None


def render_detail(detail: ItemDetail, now: datetime) -> str:
    header = f"{detail.title}\n{detail_meta_line(detail, now)}"
    extra = detail_extra_line(detail)
    if extra:
        header += "\n" + extra
    sections = [header, detail.body.strip(), render_comments(detail.comments, now)]
    return "\n\n".join(s for s in sections if s)


def compose_header(mode: ComposeMode) -> tuple[str, str]:
    return "New Comment", f"{mode.target.repo} • #{mode.target.number}"


def confirm_prompt(mode: ConfirmMode) -> str:
    action = "Close" if mode.target_state == CLOSED else "Reopen"
    target = f"{mode.target.repo} • #{mode.target.number}"
    return f"{action} this {kind_label(mode.target.kind).lower()}?\n{target}"
