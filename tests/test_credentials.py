"""Tests for ghinbox.credentials (keychain calls and prompts are patched)."""

from __future__ import annotations

import stat
import subprocess
from unittest.mock import MagicMock, patch

import pytest
import typer

from ghinbox.credentials import (
    KEYCHAIN_ACCOUNT,
    KEYCHAIN_SERVICE,
    CredentialError,
    load_token,
    load_token_from_file,
    load_token_from_keychain,
    prompt_token,
    save_token,
    save_token_to_file,
)


class TestTokenFile:
    def test_round_trip_and_permissions(self, tmp_path):
        path = tmp_path / "cfg" / "token"
        save_token_to_file("ghp_abc", path)
        assert load_token_from_file(path) == "ghp_abc"
        assert stat.S_IMODE(path.stat().st_mode) == 0o600
        assert stat.S_IMODE(path.parent.stat().st_mode) == 0o700

    def test_missing_file(self, tmp_path):
        assert load_token_from_file(tmp_path / "nope") == ""


class TestKeychain:
    def test_load(self):
        result = MagicMock(stdout="ghp_key\n")
        with patch("ghinbox.credentials.subprocess.run", return_value=result) as run:
            assert load_token_from_keychain() == "ghp_key"
        args = run.call_args.args[0]
        assert args[:2] == ["security", "find-generic-password"]
        assert KEYCHAIN_SERVICE in args
        assert KEYCHAIN_ACCOUNT in args

    def test_load_missing_entry(self):
        error = subprocess.CalledProcessError(44, ["security"])
        with patch("ghinbox.credentials.subprocess.run", side_effect=error):
            assert load_token_from_keychain() == ""

    def test_load_without_security_binary(self):
        with patch("ghinbox.credentials.subprocess.run", side_effect=FileNotFoundError("security")):
            assert load_token_from_keychain() == ""


class TestLoadToken:
    def test_prefers_keychain_on_macos(self):
        with (
            patch("ghinbox.credentials.sys.platform", "darwin"),
            patch("ghinbox.credentials.load_token_from_keychain", return_value="ghp_key"),
            patch("ghinbox.credentials.load_token_from_file") as from_file,
        ):
            assert load_token() == "ghp_key"
        from_file.assert_not_called()

    def test_falls_back_to_file(self):
        with (
            patch("ghinbox.credentials.sys.platform", "darwin"),
            patch("ghinbox.credentials.load_token_from_keychain", return_value=""),
            patch("ghinbox.credentials.load_token_from_file", return_value="ghp_file"),
        ):
            assert load_token() == "ghp_file"

    def test_file_only_elsewhere(self):
        with (
            patch("ghinbox.credentials.sys.platform", "linux"),
            patch("ghinbox.credentials.load_token_from_keychain") as keychain,
            patch("ghinbox.credentials.load_token_from_file", return_value=""),
        ):
            assert load_token() == ""
        keychain.assert_not_called()


class TestSaveToken:
    def test_empty_token_rejected(self):
        with pytest.raises(CredentialError):
            save_token("")

    def test_keychain_failure_falls_back_to_file(self):
        with (
            patch("ghinbox.credentials.sys.platform", "darwin"),
            patch(
                "ghinbox.credentials.save_token_to_keychain",
                side_effect=subprocess.CalledProcessError(1, ["security"]),
            ),
            patch("ghinbox.credentials.save_token_to_file") as to_file,
        ):
            save_token("ghp_abc")
        to_file.assert_called_once_with("ghp_abc")

    def test_linux_writes_file(self):
        with (
            patch("ghinbox.credentials.sys.platform", "linux"),
            patch("ghinbox.credentials.save_token_to_file") as to_file,
        ):
            save_token("ghp_abc")
        to_file.assert_called_once_with("ghp_abc")


class TestPromptToken:
    def test_returns_stripped_token(self):
        with patch("ghinbox.credentials.typer.prompt", return_value="  ghp_typed \n"):
            assert prompt_token() == "ghp_typed"

    def test_empty_entry(self):
        with patch("ghinbox.credentials.typer.prompt", return_value="   "):
            with pytest.raises(CredentialError, match="GITHUB_TOKEN is required"):
                prompt_token()

    def test_aborted(self):
        with patch("ghinbox.credentials.typer.prompt", side_effect=typer.Abort()):
            with pytest.raises(CredentialError):
                prompt_token()
