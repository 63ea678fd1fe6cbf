"""Runs state commands against GitHub and reports back as completion events.

``run_command`` is called on a worker thread. It never raises for GitHub
failures: every ``InboxError`` becomes the ``error`` field of the completion
event, so the view state always hears back exactly once per request.
"""

from __future__ import annotations

import logging
import webbrowser

from ghinbox.errors import InboxError
from ghinbox.events import (
    Command,
    CommentDone,
    Completion,
    DetailDone,
    FetchDetailCommand,
    OpenURLCommand,
    PostCommentCommand,
    SearchCommand,
    SearchDone,
    SetStateCommand,
    StateDone,
)
from ghinbox.github.fetcher import Fetcher

logger = logging.getLogger(__name__)


def run_command(fetcher: Fetcher, command: Command) -> Completion | None:
    """Execute one request command and return its completion event."""
    if isinstance(command, SearchCommand):
        try:
            items = fetcher.search_items(command.filter.query, command.kind)
        except InboxError as e:
            return SearchDone(generation=command.generation, error=str(e))
        return SearchDone(generation=command.generation, items=items)

    if isinstance(command, FetchDetailCommand):
        item = command.item
        try:
            detail = fetcher.fetch_detail(item.repo, item.number, command.page)
        except InboxError as e:
            return DetailDone(generation=command.generation, error=str(e))
        return DetailDone(generation=command.generation, detail=detail)

    if isinstance(command, PostCommentCommand):
        item = command.item
        try:
            fetcher.post_comment(item.repo, item.number, command.body)
        except InboxError as e:
            return CommentDone(target=item, error=str(e))
        logger.info(f"Posted comment to {item.repo}#{item.number}")
        return CommentDone(target=item)

    if isinstance(command, SetStateCommand):
        item = command.item
        try:
            fetcher.set_state(item.repo, item.number, command.state)
        except InboxError as e:
            return StateDone(target=item, state=command.state, error=str(e))
        logger.info(f"Set {item.repo}#{item.number} to {command.state}")
        return StateDone(target=item, state=command.state)

    if isinstance(command, OpenURLCommand):
        open_url(command.url)
        return None

    raise TypeError(f"not a request command: {command!r}")


def open_url(url: str) -> None:
    """Open ``url`` in the default browser; failures are only logged."""
    if not url:
        return
    try:
        webbrowser.open(url, new=2)
    except webbrowser.Error as e:
        logger.warning(f"Could not open {url}: {e}")
