"""ghinbox: a terminal inbox for GitHub issues and pull requests."""

__version__ = "0.1.0"
