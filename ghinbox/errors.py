"""Error types raised by the GitHub layer.

All of them are local to the operation that raised them: the view state turns
them into status text and stays interactive.
"""

from __future__ import annotations

import json
from http import HTTPStatus
from typing import Any


class InboxError(Exception):
    """Base class for every error the inbox reports to the user."""


class PreconditionError(InboxError):
    """Missing token, repo or number. Raised before any request is sent."""


class TransportError(InboxError):
    """Connection, timeout or response decoding failure."""


class APIError(InboxError):
    """GitHub answered with a non-2xx status."""

    def __init__(self, status: int, body: Any = None) -> None:
        self.status = status
        self.body = _body_text(body)
        super().__init__(self._message())

    @property
    def reason(self) -> str:
        try:
            return HTTPStatus(self.status).phrase
        except ValueError:
            return ""

    def _message(self) -> str:
        status = f"{self.status} {self.reason}".strip()
        if self.body:
            return f"github api error: {status}: {self.body}"
        return f"github api error: {status}"


def _body_text(body: Any) -> str:
    if body is None:
        return ""
    if isinstance(body, (dict, list)):
        return json.dumps(body, separators=(",", ":"))
    return str(body).strip()
