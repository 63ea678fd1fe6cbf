"""Textual UI for ghinbox.

The app is a thin shell around ``InboxState``: key bindings become events,
every event goes through ``InboxState.dispatch`` on the UI thread, and the
commands it returns are executed on worker threads. A finished request is
handed back with ``call_from_thread`` so only one event is ever applied at a
time. The screen is redrawn from the state after each event.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from functools import partial
from typing import ClassVar

from rich.text import Text
from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Vertical, VerticalScroll
from textual.widgets import OptionList, Static, TextArea
from textual.widgets.option_list import Option

from ghinbox.commands import open_url, run_command
from ghinbox.events import (
    REQUEST_COMMANDS,
    Back,
    BeginComment,
    BeginToggleState,
    CancelCompose,
    Command,
    ComposeChanged,
    Confirm,
    CycleFilter,
    CycleTab,
    Decline,
    Event,
    NextCommentPage,
    OpenDetail,
    OpenExternal,
    OpenURLCommand,
    PrevCommentPage,
    Quit,
    QuitCommand,
    Refresh,
    SelectNext,
    SelectPrev,
    Startup,
    SubmitComment,
)
from ghinbox.github.fetcher import Fetcher
from ghinbox.models import ItemSummary
from ghinbox.state import ComposeMode, ConfirmMode, DetailMode, InboxState, ListMode
from ghinbox.ui import components

logger = logging.getLogger(__name__)

# Actions that stay live while the comment editor has focus
COMPOSE_ACTIONS = {"send", "escape", "force_quit"}


class InboxApp(App):
    """Interactive inbox of GitHub issues and pull requests."""

    CSS = """
    #title { text-style: bold; color: $accent; }
    #tabs { margin-bottom: 1; }
    #items { height: 1fr; border: none; }
    #list-placeholder { height: 1fr; color: $text-muted; }
    #detail { height: 1fr; }
    #compose { height: 1fr; }
    #compose-title { text-style: bold; color: $accent; }
    #compose-input { height: 1fr; }
    #confirm { height: auto; border: double $warning; padding: 1 2; }
    #help { color: $text-muted; }
    #status.error { color: $error; text-style: bold; }
    """

    # Nothing takes focus until the comment editor opens
    AUTO_FOCUS = None

    BINDINGS: ClassVar[list[Binding]] = [
        Binding("j,down", "down", "Down", show=False),
        Binding("k,up", "up", "Up", show=False),
        Binding("enter", "enter", "Details", show=False),
        Binding("o", "open", "Open", show=False),
        Binding("r", "refresh", "Refresh", show=False),
        Binding("f", "filter", "Filter", show=False),
        Binding("tab", "tab", "Switch", show=False, priority=True),
        Binding("c", "comment", "Comment", show=False),
        Binding("x", "toggle_state", "Close/Reopen", show=False),
        Binding("n", "next_page", "Next", show=False),
        Binding("p", "prev_page", "Prev", show=False),
        Binding("y", "confirm", "Confirm", show=False),
        Binding("q", "quit", "Quit", show=False),
        Binding("escape", "escape", "Back", show=False, priority=True),
        Binding("ctrl+g", "send", "Send", show=False, priority=True),
        Binding("ctrl+c", "force_quit", "Quit", show=False, priority=True),
    ]

    def __init__(self, fetcher: Fetcher, state: InboxState | None = None) -> None:
        super().__init__()
        self.fetcher = fetcher
        self.state = state or InboxState()
        self._tick = 0
        self._shown_items: list[ItemSummary] | None = None

    def compose(self) -> ComposeResult:
        yield Static(id="title")
        yield Static(id="tabs")
        yield OptionList(id="items")
        yield Static(id="list-placeholder")
        with VerticalScroll(id="detail"):
            yield Static(id="detail-body")
        with Vertical(id="compose"):
            yield Static(id="compose-title")
            yield Static(id="compose-target")
            yield TextArea(id="compose-input")
        yield Static(id="confirm")
        yield Static(id="help")
        yield Static(id="status")

    def on_mount(self) -> None:
        # Cursor movement belongs to the view state, not to the widget
        self.query_one("#items", OptionList).can_focus = False
        self.set_interval(0.1, self._on_tick)
        self.apply_event(Startup())

    # --- event loop ---

    def apply_event(self, event: Event) -> None:
        for command in self.state.dispatch(event):
            self._execute(command)
        self._render()

    def _execute(self, command: Command) -> None:
        if isinstance(command, QuitCommand):
            self.exit()
        elif isinstance(command, OpenURLCommand):
            self.run_worker(partial(open_url, command.url), thread=True, group="browser")
        elif isinstance(command, REQUEST_COMMANDS):
            self.run_worker(partial(self._run_request, command), thread=True, group="requests")

    def _run_request(self, command: Command) -> None:
        """Worker thread body: run the request, then rejoin the UI thread."""
        completion = run_command(self.fetcher, command)
        if completion is None:
            return
        try:
            self.call_from_thread(self.apply_event, completion)
        except RuntimeError:
            logger.debug(f"App closed before {type(completion).__name__} was delivered")

    def _on_tick(self) -> None:
        self._tick += 1
        self._render_status()

    # --- key actions ---

    def check_action(self, action: str, parameters: tuple[object, ...]) -> bool | None:
        if isinstance(self.state.mode, ComposeMode):
            return action in COMPOSE_ACTIONS
        return True

    def action_down(self) -> None:
        self.apply_event(SelectNext())

    def action_up(self) -> None:
        self.apply_event(SelectPrev())

    def action_enter(self) -> None:
        self.apply_event(OpenDetail())

    def action_open(self) -> None:
        self.apply_event(OpenExternal())

    def action_refresh(self) -> None:
        self.apply_event(Refresh())

    def action_filter(self) -> None:
        self.apply_event(CycleFilter())

    def action_tab(self) -> None:
        self.apply_event(CycleTab())

    def action_comment(self) -> None:
        self.apply_event(BeginComment())
        if isinstance(self.state.mode, ComposeMode):
            editor = self.query_one("#compose-input", TextArea)
            editor.text = ""
            editor.focus()

    def action_toggle_state(self) -> None:
        self.apply_event(BeginToggleState())

    def action_next_page(self) -> None:
        if isinstance(self.state.mode, ConfirmMode):
            self.apply_event(Decline())
        else:
            self.apply_event(NextCommentPage())

    def action_prev_page(self) -> None:
        self.apply_event(PrevCommentPage())

    def action_confirm(self) -> None:
        self.apply_event(Confirm())

    def action_escape(self) -> None:
        mode = self.state.mode
        if isinstance(mode, ComposeMode):
            self.apply_event(CancelCompose())
        elif isinstance(mode, ConfirmMode):
            self.apply_event(Decline())
        elif isinstance(mode, DetailMode):
            self.apply_event(Back())

    def action_send(self) -> None:
        if isinstance(self.state.mode, ComposeMode):
            # Changed messages may still be queued behind this binding
            self._sync_compose_buffer(self.query_one("#compose-input", TextArea))
        self.apply_event(SubmitComment())

    async def action_quit(self) -> None:
        self.apply_event(Quit())

    def action_force_quit(self) -> None:
        self.apply_event(Quit())

    def on_text_area_changed(self, event: TextArea.Changed) -> None:
        self._sync_compose_buffer(event.text_area)

    def _sync_compose_buffer(self, editor: TextArea) -> None:
        """Mirror the editor into the state and show any cut the state applied."""
        self.apply_event(ComposeChanged(editor.text))
        mode = self.state.mode
        if isinstance(mode, ComposeMode) and editor.text != mode.buffer:
            editor.text = mode.buffer
            editor.move_cursor(editor.document.end)

    # --- rendering ---

    def _render(self) -> None:
        state = self.state
        mode = state.mode
        now = datetime.now(timezone.utc)

        self.query_one("#title", Static).update(components.title_line(state))
        self.query_one("#tabs", Static).update(self._tabs_text())
        self.query_one("#help", Static).update(components.help_line(mode))

        showing_list = isinstance(mode, ListMode)
        showing_detail = isinstance(mode, DetailMode)
        placeholder = components.list_placeholder(state) if showing_list else None

        items = self.query_one("#items", OptionList)
        items.display = showing_list and placeholder is None
        self.query_one("#list-placeholder", Static).display = placeholder is not None
        if placeholder is not None:
            self.query_one("#list-placeholder", Static).update(placeholder)
        self._sync_items(items)

        self.query_one("#detail").display = showing_detail
        if showing_detail:
            body = components.detail_placeholder(state)
            if body is None:
                body = components.render_detail(state.detail, now)
            self.query_one("#detail-body", Static).update(body)

        compose = self.query_one("#compose")
        compose.display = isinstance(mode, ComposeMode)
        if isinstance(mode, ComposeMode):
            title, target = components.compose_header(mode)
            self.query_one("#compose-title", Static).update(title)
            self.query_one("#compose-target", Static).update(target)
        elif self.focused is not None:
            self.set_focus(None)

        confirm = self.query_one("#confirm", Static)
        confirm.display = isinstance(mode, ConfirmMode)
        if isinstance(mode, ConfirmMode):
            confirm.update(components.confirm_prompt(mode))

        self._render_status()

    def _render_status(self) -> None:
        state = self.state
        status = self.query_one("#status", Static)
        now = datetime.now(timezone.utc)
        status.update(components.status_with_spinner(state, now, self._tick))
        status.set_class(components.status_is_error(state), "error")
        placeholder = self.query_one("#list-placeholder", Static)
        if placeholder.display and state.loading:
            frame = components.SPINNER_FRAMES[self._tick % len(components.SPINNER_FRAMES)]
            placeholder.update(f"{frame} {components.list_placeholder(state)}")

    def _tabs_text(self) -> Text:
        text = Text()
        for i, (label, active) in enumerate(
            components.tab_labels(self.state.tabs, self.state.tab_index)
        ):
            if i:
                text.append(" ")
            text.append(label, style="bold reverse" if active else "dim")
        return text

    def _sync_items(self, items: OptionList) -> None:
        if self._shown_items is not self.state.items:
            items.clear_options()
            items.add_options(
                Option(Text.assemble((item.title, "bold"), "\n", (components.item_description(item), "dim")))
                for item in self.state.items
            )
            self._shown_items = self.state.items
        if self.state.items:
            items.highlighted = self.state.cursor
