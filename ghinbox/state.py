"""View state for the inbox: the single owner of what is on screen.

Exactly one mode is active at a time:

- ``ListMode``: browsing search results for the selected filter and tab
- ``DetailMode``: reading one item and paging through its comments
- ``ComposeMode``: writing a comment for a captured target item
- ``ConfirmMode``: confirming a close or reopen of a captured target item

Compose and confirm remember the list or detail mode they were opened from and
return to it when they finish. Background requests never touch the state
directly; their outcome comes back as a completion event through ``dispatch``.

List searches and detail fetches are tagged with a generation number. A
completion whose generation is older than the latest request for that slot is
dropped, so a slow response cannot overwrite newer data.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Callable

from ghinbox.config import COMMENT_CHAR_LIMIT, FILTERS, TABS
from ghinbox.events import (
    Back,
    BeginComment,
    BeginToggleState,
    CancelCompose,
    Command,
    CommentDone,
    ComposeChanged,
    Confirm,
    CycleFilter,
    CycleTab,
    Decline,
    DetailDone,
    Event,
    FetchDetailCommand,
    NextCommentPage,
    OpenDetail,
    OpenExternal,
    OpenURLCommand,
    PostCommentCommand,
    PrevCommentPage,
    Quit,
    QuitCommand,
    Refresh,
    SearchCommand,
    SearchDone,
    SelectNext,
    SelectPrev,
    SetStateCommand,
    Startup,
    StateDone,
    SubmitComment,
)
from ghinbox.models import CLOSED, OPEN, Filter, ItemDetail, ItemSummary, Tab

logger = logging.getLogger(__name__)

INITIAL_STATUS = "Loading…"


@dataclass(frozen=True)
class ListMode:
    pass


@dataclass(frozen=True)
class DetailMode:
    item: ItemSummary


@dataclass(frozen=True)
class ComposeMode:
    target: ItemSummary
    previous: ListMode | DetailMode
    buffer: str = ""


@dataclass(frozen=True)
class ConfirmMode:
    target: ItemSummary
    target_state: str  # "open" | "closed"
    previous: ListMode | DetailMode


type Mode = ListMode | DetailMode | ComposeMode | ConfirmMode


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class InboxState:
    filters: tuple[Filter, ...] = FILTERS
    tabs: tuple[Tab, ...] = TABS
    filter_index: int = 0
    tab_index: int = 0
    mode: Mode = field(default_factory=ListMode)

    items: list[ItemSummary] = field(default_factory=list)
    cursor: int = 0
    last_updated: datetime | None = None

    detail: ItemDetail | None = None
    detail_error: str | None = None
    comment_page: int = 1

    loading: bool = False  # list search in flight
    detail_loading: bool = False
    action_loading: bool = False  # comment post or state change in flight

    status: str = INITIAL_STATUS
    status_override: bool = False
    error: str | None = None
    quitting: bool = False

    search_generation: int = 0
    detail_generation: int = 0
    clock: Callable[[], datetime] = field(default=_utcnow, repr=False)

    @property
    def current_filter(self) -> Filter:
        return self.filters[self.filter_index]

    @property
    def current_tab(self) -> Tab:
        return self.tabs[self.tab_index]

    @property
    def selected_item(self) -> ItemSummary | None:
        if not self.items:
            return None
        return self.items[self.cursor]

    @property
    def base_mode(self) -> ListMode | DetailMode:
        """The list or detail mode underneath any compose/confirm prompt."""
        if isinstance(self.mode, (ComposeMode, ConfirmMode)):
            return self.mode.previous
        return self.mode

    def dispatch(self, event: Event) -> list[Command]:
        """Apply one event and return the commands it triggers."""
        mode = self.mode
        match event:
            case SearchDone():
                return self._on_search_done(event)
            case DetailDone():
                return self._on_detail_done(event)
            case CommentDone():
                return self._on_comment_done(event)
            case StateDone():
                return self._on_state_done(event)
            case Startup():
                self.status = INITIAL_STATUS
                return [self._search()]
            case Quit():
                self.quitting = True
                return [QuitCommand()]
            case OpenExternal():
                return self._open_external()

        if isinstance(mode, ComposeMode):
            return self._on_compose_event(mode, event)
        if isinstance(mode, ConfirmMode):
            return self._on_confirm_event(mode, event)
        if isinstance(mode, DetailMode):
            return self._on_detail_event(mode, event)
        return self._on_list_event(event)

    # --- input handling per mode ---

    def _on_list_event(self, event: Event) -> list[Command]:
        match event:
            case SelectNext():
                if self.items:
                    self.cursor = min(self.cursor + 1, len(self.items) - 1)
            case SelectPrev():
                self.cursor = max(self.cursor - 1, 0)
            case Refresh():
                self._notify("Refreshing...")
                return [self._search()]
            case CycleFilter():
                self.filter_index = (self.filter_index + 1) % len(self.filters)
                return self._reload_list()
            case CycleTab():
                self.tab_index = (self.tab_index + 1) % len(self.tabs)
                return self._reload_list()
            case OpenDetail():
                item = self.selected_item
                if item is None:
                    return []
                self.mode = DetailMode(item)
                self.detail = None
                self.comment_page = 1
                return [self._fetch_detail(item)]
            case BeginComment():
                return self._begin_comment()
            case BeginToggleState():
                return self._begin_toggle_state()
        return []

    def _on_detail_event(self, mode: DetailMode, event: Event) -> list[Command]:
        match event:
            case Back():
                self.mode = ListMode()
                self.detail_error = None
                self.detail_loading = False
                self.detail_generation += 1  # drop any fetch still in flight
            case Refresh():
                return [self._fetch_detail(mode.item)]
            case NextCommentPage():
                detail = self._loaded_detail(mode)
                if detail is not None and detail.comments.has_next:
                    self.comment_page = detail.comments.page + 1
                    return [self._fetch_detail(mode.item)]
            case PrevCommentPage():
                detail = self._loaded_detail(mode)
                if detail is not None and detail.comments.has_prev:
                    self.comment_page = max(1, detail.comments.page - 1)
                    return [self._fetch_detail(mode.item)]
            case BeginComment():
                return self._begin_comment()
            case BeginToggleState():
                return self._begin_toggle_state()
        return []

    def _on_compose_event(self, mode: ComposeMode, event: Event) -> list[Command]:
        match event:
            case ComposeChanged(text=text):
                if len(text) > COMMENT_CHAR_LIMIT:
                    text = text[:COMMENT_CHAR_LIMIT]
                    self._notify(f"Comment limited to {COMMENT_CHAR_LIMIT} characters")
                self.mode = replace(mode, buffer=text)
            case CancelCompose():
                self.mode = mode.previous
            case SubmitComment():
                body = mode.buffer.strip()
                if not body:
                    self._notify("Comment is empty")
                    return []
                self.mode = mode.previous
                self.action_loading = True
                self._notify(f"Sending comment to {_ref(mode.target)}...")
                return [PostCommentCommand(item=mode.target, body=body)]
        return []

    def _on_confirm_event(self, mode: ConfirmMode, event: Event) -> list[Command]:
        match event:
            case Confirm():
                self.mode = mode.previous
                self.action_loading = True
                self._notify("Closing..." if mode.target_state == CLOSED else "Reopening...")
                return [SetStateCommand(item=mode.target, state=mode.target_state)]
            case Decline():
                self.mode = mode.previous
        return []

    # --- completions ---

    def _on_search_done(self, event: SearchDone) -> list[Command]:
        if event.generation != self.search_generation:
            logger.debug(f"Dropping stale search result (generation {event.generation})")
            return []
        self.loading = False
        if event.error is not None:
            self._fail(event.error)
            return []
        self.items = list(event.items)
        self.cursor = min(self.cursor, max(len(self.items) - 1, 0))
        self.last_updated = self.clock()
        self.error = None
        self.status_override = False
        self.status = f"Loaded {len(self.items)} items • updated just now"
        return []

    def _on_detail_done(self, event: DetailDone) -> list[Command]:
        if event.generation != self.detail_generation:
            logger.debug(f"Dropping stale detail result (generation {event.generation})")
            return []
        self.detail_loading = False
        if event.error is not None or event.detail is None:
            self.detail_error = event.error or "no detail returned"
            self._fail(self.detail_error)
            return []
        self.detail = event.detail
        self.detail_error = None
        self.comment_page = event.detail.comments.page
        return []

    def _on_comment_done(self, event: CommentDone) -> list[Command]:
        self.action_loading = False
        if event.error is not None:
            self._fail(event.error)
            return []
        self._notify(f"Comment posted to {_ref(event.target)}")
        base = self.base_mode
        if isinstance(base, DetailMode) and base.item.key == event.target.key:
            return [self._fetch_detail(base.item)]
        return []

    def _on_state_done(self, event: StateDone) -> list[Command]:
        self.action_loading = False
        if event.error is not None:
            self._fail(event.error)
            return []
        self._notify("Closed" if event.state == CLOSED else "Reopened")
        commands: list[Command] = [self._search()]
        base = self.base_mode
        if isinstance(base, DetailMode):
            commands.append(self._fetch_detail(base.item))
        return commands

    # --- actions on a target item ---

    def _resolve_target(self) -> tuple[ItemSummary | None, ItemDetail | None]:
        """Prefer the displayed detail, else the selected list item."""
        base = self.base_mode
        if isinstance(base, DetailMode):
            detail = self._loaded_detail(base)
            if detail is not None:
                return detail.summary(), detail
        return self.selected_item, None

    def _begin_comment(self) -> list[Command]:
        target, _ = self._resolve_target()
        if target is None:
            return []
        if self.action_loading:
            self._notify("Another action is still running")
            return []
        self.mode = ComposeMode(target=target, previous=self.base_mode)
        return []

    def _begin_toggle_state(self) -> list[Command]:
        target, detail = self._resolve_target()
        if target is None:
            return []
        if self.action_loading:
            self._notify("Another action is still running")
            return []
        target_state = OPEN if detail is not None and detail.state == CLOSED else CLOSED
        self.mode = ConfirmMode(target=target, target_state=target_state, previous=self.base_mode)
        return []

    def _open_external(self) -> list[Command]:
        target, _ = self._resolve_target()
        if target is None or not target.url:
            return []
        return [OpenURLCommand(target.url)]

    # --- helpers ---

    def _loaded_detail(self, mode: DetailMode) -> ItemDetail | None:
        if self.detail is not None and self.detail.key == mode.item.key:
            return self.detail
        return None

    def _reload_list(self) -> list[Command]:
        self.items = []
        self.cursor = 0
        self._notify("Loading...")
        return [self._search()]

    def _search(self) -> SearchCommand:
        self.search_generation += 1
        self.loading = True
        return SearchCommand(
            generation=self.search_generation,
            filter=self.current_filter,
            kind=self.current_tab.kind,
        )

    def _fetch_detail(self, item: ItemSummary) -> FetchDetailCommand:
        self.detail_generation += 1
        self.detail_loading = True
        self.detail_error = None
        return FetchDetailCommand(
            generation=self.detail_generation, item=item, page=self.comment_page
        )

    def _notify(self, text: str) -> None:
        self.status = text
        self.status_override = True
        self.error = None

    def _fail(self, message: str) -> None:
        self.error = message
        self.status = f"Error: {message}"
        self.status_override = True


def _ref(item: ItemSummary) -> str:
    return f"{item.repo}#{item.number}"
