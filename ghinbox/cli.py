"""CLI entry point for ghinbox."""

from __future__ import annotations

import logging
import subprocess

import typer
from rich import print as rprint

from ghinbox.config import Config
from ghinbox.credentials import CredentialError, load_token, prompt_token, save_token
from ghinbox.github.client import GitHubClient
from ghinbox.github.fetcher import Fetcher
from ghinbox.ui.app import InboxApp

app = typer.Typer(
    help="Browse and act on your GitHub issues and pull requests.",
    add_completion=False,
)

logger = logging.getLogger(__name__)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _setup_logging(config: Config) -> None:
    """Send log records to a file; the terminal belongs to the UI."""
    log_path = config.resolved_log_path()
    try:
        log_path.parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        rprint(f"[yellow]Warning: logging disabled, cannot create {log_path.parent}: {e}[/yellow]")
        return
    logging.basicConfig(
        filename=str(log_path),
        level=getattr(logging, config.log_level, logging.WARNING),
        format=LOG_FORMAT,
    )


def _resolve_token(config: Config) -> str:
    token = config.github_token or load_token()
    if token:
        return token

    token = prompt_token()
    try:
        save_token(token)
    except (OSError, subprocess.CalledProcessError) as e:
        logger.warning(f"Could not save token: {e}")
        rprint(f"[yellow]Warning: could not save token: {e}[/yellow]")
    return token


@app.command()
def main() -> None:
    """Open the interactive inbox."""
    config = Config.load()
    _setup_logging(config)

    try:
        token = _resolve_token(config)
    except CredentialError as e:
        rprint(f"[red]{e}[/red]")
        raise typer.Exit(1)

    config.github_token = token
    issues = config.validate()
    if issues:
        for issue in issues:
            rprint(f"[red]Config error: {issue}[/red]")
        raise typer.Exit(1)

    client = GitHubClient(token=config.github_token, base_url=config.api_url, timeout=config.timeout)
    try:
        InboxApp(Fetcher(client)).run()
    finally:
        client.close()


if __name__ == "__main__":
    app()
