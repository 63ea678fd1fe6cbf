"""Tests for ghinbox.github.client (PyGithub is patched out)."""

from __future__ import annotations

from unittest.mock import patch

import pytest
import requests
from github.GithubException import GithubException

from ghinbox.errors import APIError, PreconditionError, TransportError
from ghinbox.github.client import GitHubClient, has_link_rel, header_value


@pytest.fixture
def gh():
    with patch("ghinbox.github.client.Github") as github_cls:
        yield github_cls


class TestGitHubClient:
    def test_empty_token_never_builds_client(self, gh):
        client = GitHubClient(token="   ")
        with pytest.raises(PreconditionError):
            client.request("GET", "/search/issues")
        gh.assert_not_called()

    def test_builds_client_without_retries(self, gh):
        GitHubClient(token="ghp_x", base_url="https://ghe.example/api/v3", timeout=5.0)
        kwargs = gh.call_args.kwargs
        assert kwargs["base_url"] == "https://ghe.example/api/v3"
        assert kwargs["timeout"] == 5.0
        assert kwargs["retry"] is None

    def test_returns_headers_and_data(self, gh):
        requester = gh.return_value.requester
        requester.requestJsonAndCheck.return_value = ({"link": ""}, {"items": []})
        client = GitHubClient(token="ghp_x")

        headers, data = client.request("GET", "/search/issues", {"q": "is:pr"})

        assert headers == {"link": ""}
        assert data == {"items": []}
        requester.requestJsonAndCheck.assert_called_once_with(
            "GET", "/search/issues", parameters={"q": "is:pr"}, input=None
        )

    def test_passes_body_as_input(self, gh):
        requester = gh.return_value.requester
        requester.requestJsonAndCheck.return_value = ({}, {})
        client = GitHubClient(token="ghp_x")

        client.request("PATCH", "/repos/acme/webapp/issues/1", body={"state": "closed"})

        requester.requestJsonAndCheck.assert_called_once_with(
            "PATCH", "/repos/acme/webapp/issues/1", parameters=None, input={"state": "closed"}
        )

    def test_missing_headers_read_as_empty(self, gh):
        gh.return_value.requester.requestJsonAndCheck.return_value = (None, [])
        headers, _ = GitHubClient(token="ghp_x").request("GET", "/x")
        assert headers == {}

    def test_non_2xx_becomes_api_error(self, gh):
        gh.return_value.requester.requestJsonAndCheck.side_effect = GithubException(
            404, {"message": "Not Found"}, None
        )
        client = GitHubClient(token="ghp_x")

        with pytest.raises(APIError) as exc_info:
            client.request("GET", "/repos/acme/gone/issues/1")

        assert exc_info.value.status == 404
        assert "404 Not Found" in str(exc_info.value)
        assert '"message":"Not Found"' in str(exc_info.value)

    def test_connection_failure_becomes_transport_error(self, gh):
        gh.return_value.requester.requestJsonAndCheck.side_effect = requests.exceptions.ConnectionError(
            "connection refused"
        )
        with pytest.raises(TransportError, match="connection refused"):
            GitHubClient(token="ghp_x").request("GET", "/search/issues")

    def test_timeout_becomes_transport_error(self, gh):
        gh.return_value.requester.requestJsonAndCheck.side_effect = requests.exceptions.Timeout("timed out")
        with pytest.raises(TransportError):
            GitHubClient(token="ghp_x").request("GET", "/search/issues")

    def test_undecodable_body_becomes_transport_error(self, gh):
        gh.return_value.requester.requestJsonAndCheck.side_effect = ValueError("Expecting value")
        with pytest.raises(TransportError):
            GitHubClient(token="ghp_x").request("GET", "/search/issues")

    def test_close(self, gh):
        GitHubClient(token="ghp_x").close()
        gh.return_value.close.assert_called_once()

    def test_close_without_token(self, gh):
        GitHubClient(token="").close()
        gh.return_value.close.assert_not_called()


class TestHeaderValue:
    def test_case_insensitive(self):
        assert header_value({"link": "<u>; rel=\"next\""}, "Link") == "<u>; rel=\"next\""

    def test_missing(self):
        assert header_value({}, "Link") == ""


class TestHasLinkRel:
    LINK = (
        '<https://api.github.com/repositories/1/issues/42/comments?page=3>; rel="next", '
        '<https://api.github.com/repositories/1/issues/42/comments?page=1>; rel="prev"'
    )

    def test_next_and_prev(self):
        assert has_link_rel(self.LINK, "next")
        assert has_link_rel(self.LINK, "prev")
        assert not has_link_rel(self.LINK, "last")

    def test_empty_header(self):
        assert not has_link_rel("", "next")

    def test_unquoted_rel_not_matched(self):
        assert not has_link_rel("<u>; rel=next", "next")
