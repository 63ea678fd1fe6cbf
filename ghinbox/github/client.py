"""Thin wrapper around PyGithub's requester for authenticated REST calls."""

from __future__ import annotations

import logging
from typing import Any

import requests
from github import Auth, Github
from github.GithubException import GithubException

from ghinbox.config import DEFAULT_API_URL, DEFAULT_TIMEOUT
from ghinbox.errors import APIError, PreconditionError, TransportError

logger = logging.getLogger(__name__)


class GitHubClient:
    """Authenticated GitHub REST client.

    Every call returns the response headers together with the decoded JSON so
    callers can read pagination from the ``Link`` header. Retries are disabled:
    a failed request is reported once and the user decides whether to re-run it.

    Usage:
        client = GitHubClient(token="ghp_...")
        headers, data = client.request("GET", "/search/issues", {"q": "is:pr"})
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_API_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self._token = token.strip()
        self._gh: Github | None = None
        if self._token:
            self._gh = Github(
                auth=Auth.Token(self._token),
                base_url=base_url,
                timeout=timeout,
                retry=None,
            )

    def request(
        self,
        verb: str,
        path: str,
        parameters: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> tuple[dict[str, str], Any]:
        if self._gh is None:
            raise PreconditionError("GITHUB_TOKEN is required")
        try:
            headers, data = self._gh.requester.requestJsonAndCheck(
                verb, path, parameters=parameters, input=body
            )
        except GithubException as e:
            logger.warning(f"{verb} {path} failed with status {e.status}")
            raise APIError(e.status, e.data) from e
        except requests.exceptions.RequestException as e:
            logger.warning(f"{verb} {path} transport failure: {e}")
            raise TransportError(str(e)) from e
        except ValueError as e:
            logger.warning(f"{verb} {path} returned an undecodable body: {e}")
            raise TransportError(str(e)) from e
        return headers or {}, data

    def close(self) -> None:
        if self._gh is not None:
            self._gh.close()


def header_value(headers: dict[str, str], name: str) -> str:
    """Case-insensitive header lookup; missing headers read as empty."""
    wanted = name.lower()
    for key, value in headers.items():
        if key.lower() == wanted:
            return value or ""
    return ""


def has_link_rel(link_header: str, rel: str) -> bool:
    """Whether a ``Link`` header advertises the given relation (next, prev, ...)."""
    if not link_header:
        return False
    marker = f'rel="{rel}"'
    return any(marker in part for part in link_header.split(","))
