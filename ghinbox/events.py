"""Events consumed by the view state and commands it emits.

Input events come from key presses, completion events from finished
background requests. Both are handled one at a time by ``InboxState.dispatch``,
which answers with zero or more commands for the app to execute.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from ghinbox.models import Filter, ItemDetail, ItemSummary

# === Input events (keys -> state) ===


@dataclass(frozen=True)
class Startup:
    pass


@dataclass(frozen=True)
class SelectNext:
    pass


@dataclass(frozen=True)
class SelectPrev:
    pass


@dataclass(frozen=True)
class Refresh:
    pass


@dataclass(frozen=True)
class CycleFilter:
    pass


@dataclass(frozen=True)
class CycleTab:
    pass


@dataclass(frozen=True)
class OpenDetail:
    pass


@dataclass(frozen=True)
class Back:
    pass


@dataclass(frozen=True)
class NextCommentPage:
    pass


@dataclass(frozen=True)
class PrevCommentPage:
    pass


@dataclass(frozen=True)
class BeginComment:
    pass


@dataclass(frozen=True)
class ComposeChanged:
    """The comment editor's text changed."""

    text: str


@dataclass(frozen=True)
class CancelCompose:
    pass


@dataclass(frozen=True)
class SubmitComment:
    pass


@dataclass(frozen=True)
class BeginToggleState:
    """Ask to close (or reopen) the target item."""


@dataclass(frozen=True)
class Confirm:
    pass


@dataclass(frozen=True)
class Decline:
    pass


@dataclass(frozen=True)
class OpenExternal:
    pass


@dataclass(frozen=True)
class Quit:
    pass


# === Completion events (background request -> state) ===


@dataclass(frozen=True)
class SearchDone:
    generation: int
    items: list[ItemSummary] = field(default_factory=list)
    error: str | None = None


@dataclass(frozen=True)
class DetailDone:
    generation: int
    detail: ItemDetail | None = None
    error: str | None = None


@dataclass(frozen=True)
class CommentDone:
    target: ItemSummary
    error: str | None = None


@dataclass(frozen=True)
class StateDone:
    target: ItemSummary
    state: str  # state that was requested
    error: str | None = None


# === Commands (state -> app) ===


@dataclass(frozen=True)
class SearchCommand:
    generation: int
    filter: Filter
    kind: str


@dataclass(frozen=True)
class FetchDetailCommand:
    generation: int
    item: ItemSummary
    page: int


@dataclass(frozen=True)
class PostCommentCommand:
    item: ItemSummary
    body: str


@dataclass(frozen=True)
class SetStateCommand:
    item: ItemSummary
    state: str  # "open" | "closed"


@dataclass(frozen=True)
class OpenURLCommand:
    url: str


@dataclass(frozen=True)
class QuitCommand:
    pass


type InputEvent = (
    Startup
    | SelectNext
    | SelectPrev
    | Refresh
    | CycleFilter
    | CycleTab
    | OpenDetail
    | Back
    | NextCommentPage
    | PrevCommentPage
    | BeginComment
    | ComposeChanged
    | CancelCompose
    | SubmitComment
    | BeginToggleState
    | Confirm
    | Decline
    | OpenExternal
    | Quit
)

type Completion = SearchDone | DetailDone | CommentDone | StateDone

type Event = InputEvent | Completion

type Command = (
    SearchCommand
    | FetchDetailCommand
    | PostCommentCommand
    | SetStateCommand
    | OpenURLCommand
    | QuitCommand
)

# Commands that run a GitHub request in the background
REQUEST_COMMANDS = (SearchCommand, FetchDetailCommand, PostCommentCommand, SetStateCommand)
