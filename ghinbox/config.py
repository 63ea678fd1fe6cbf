"""Configuration loading for ghinbox.

Config sources (in priority order):
1. Environment variables (GITHUB_TOKEN, GHINBOX_*)
2. .env file in current directory

Saved searches and tabs are fixed at startup and selected by index.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path

import typer
from dotenv import load_dotenv

from ghinbox.models import Filter, Tab

load_dotenv()

APP_NAME = "ghinbox"
DEFAULT_API_URL = "https://api.github.com"
DEFAULT_TIMEOUT = 15.0  # seconds, applied to every request
DEFAULT_LOG_LEVEL = "WARNING"

MAX_ITEMS = 50  # search page size
MAX_COMMENTS = 10  # comment page size
COMMENT_CHAR_LIMIT = 4000

FILTERS: tuple[Filter, ...] = (
    Filter(name="Open", query="is:open archived:false involves:@me"),
    Filter(name="Review requested", query="review-requested:@me"),
    Filter(name="Assigned", query="assignee:@me"),
    Filter(name="Mentions", query="mentions:@me"),
    Filter(name="Authored", query="author:@me"),
)

TABS: tuple[Tab, ...] = (
    Tab(name="PRs", kind="pr"),
    Tab(name="Issues", kind="issue"),
)


def app_dir() -> Path:
    """Per-user config directory (token file and default log live here)."""
    return Path(typer.get_app_dir(APP_NAME))


def default_log_path() -> Path:
    return app_dir() / f"{APP_NAME}.log"


@dataclass
class Config:
    github_token: str = ""
    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    log_path: Path | None = None  # None means default_log_path()
    log_level: str = DEFAULT_LOG_LEVEL
    _timeout_raw: str = field(default="", init=False, repr=False)  # GHINBOX_TIMEOUT as given

    @classmethod
    def load(cls) -> Config:
        timeout_raw = os.getenv("GHINBOX_TIMEOUT", "")
        log_path = os.getenv("GHINBOX_LOG_PATH", "")
        config = cls(
            github_token=os.getenv("GITHUB_TOKEN", "").strip(),
            api_url=os.getenv("GHINBOX_API_URL", DEFAULT_API_URL).rstrip("/"),
            timeout=_parse_timeout(timeout_raw),
            log_path=Path(log_path) if log_path else None,
            log_level=os.getenv("GHINBOX_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        )
        config._timeout_raw = timeout_raw
        return config

    def resolved_log_path(self) -> Path:
        return self.log_path or default_log_path()

    def validate(self) -> list[str]:
        """Return a list of config problems."""
        issues = []
        if not self.github_token:
            issues.append("GitHub token not set (GITHUB_TOKEN)")
        if self._timeout_raw and _parse_timeout(self._timeout_raw, default=-1.0) <= 0:
            issues.append(f"Invalid timeout (GHINBOX_TIMEOUT={self._timeout_raw!r})")
        elif self.timeout <= 0:
            issues.append(f"Timeout must be positive, got {self.timeout}")
        return issues


def _parse_timeout(raw: str, default: float = DEFAULT_TIMEOUT) -> float:
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        return default
