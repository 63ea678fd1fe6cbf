"""Where the GitHub token comes from and where an entered token is kept.

Lookup order: GITHUB_TOKEN (environment or .env), the macOS keychain, the
token file in the app config directory, and finally an interactive prompt.
"""

from __future__ import annotations

import logging
import subprocess
import sys
from pathlib import Path

import typer

from ghinbox.config import app_dir
from ghinbox.errors import PreconditionError

logger = logging.getLogger(__name__)

KEYCHAIN_SERVICE = "github_inbox_tui"
KEYCHAIN_ACCOUNT = "github"
TOKEN_FILE_NAME = "token"


class CredentialError(PreconditionError):
    """No usable token could be obtained."""


def token_file_path() -> Path:
    return app_dir() / TOKEN_FILE_NAME


def _use_keychain() -> bool:
    return sys.platform == "darwin"


def load_token() -> str:
    """Stored token from the keychain or the token file, or "" if none."""
    if _use_keychain():
        token = load_token_from_keychain()
        if token:
            logger.info("Using token from keychain")
            return token
    token = load_token_from_file()
    if token:
        logger.info("Using token from token file")
    return token


def save_token(token: str) -> None:
    """Persist a token, preferring the keychain on macOS.

    Raises OSError or CalledProcessError when the token file cannot be written.
    """
    if not token:
        raise CredentialError("empty token")
    if _use_keychain():
        try:
            save_token_to_keychain(token)
            return
        except (OSError, subprocess.CalledProcessError) as e:
            logger.warning(f"Keychain save failed, falling back to token file: {e}")
    save_token_to_file(token)


def prompt_token() -> str:
    try:
        entered = typer.prompt("Enter GITHUB_TOKEN", hide_input=True, default="", show_default=False, err=True)
    except typer.Abort as e:
        raise CredentialError("GITHUB_TOKEN is required") from e
    token = entered.strip()
    if not token:
        raise CredentialError("GITHUB_TOKEN is required")
    return token


def load_token_from_keychain() -> str:
    try:
        result = subprocess.run(
            ["security", "find-generic-password", "-s", KEYCHAIN_SERVICE, "-a", KEYCHAIN_ACCOUNT, "-w"],
            capture_output=True,
            text=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError):
        return ""
    return result.stdout.strip()


def save_token_to_keychain(token: str) -> None:
    subprocess.run(
        ["security", "add-generic-password", "-s", KEYCHAIN_SERVICE, "-a", KEYCHAIN_ACCOUNT, "-w", token, "-U"],
        capture_output=True,
        check=True,
    )


def load_token_from_file(path: Path | None = None) -> str:
    path = path or token_file_path()
    try:
        return path.read_text().strip()
    except OSError:
        return ""


def save_token_to_file(token: str, path: Path | None = None) -> Path:
    path = path or token_file_path()
    path.parent.mkdir(mode=0o700, parents=True, exist_ok=True)
    path.write_text(token + "\n")
    path.chmod(0o600)
    return path
