"""Exceptions raised by redmine-cli.

Helpers raise these; only the command dispatcher in ``redmine_cli.cli``
turns them into a message and an exit code.
"""

from __future__ import annotations


class RedmineCliError(Exception):
    """Base class for all redmine-cli errors."""

    exit_code: int = 1

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class ConfigError(RedmineCliError):
    """A required setting is missing or a config file is unusable."""


class ResolutionError(RedmineCliError):
    """A tracker, status, release or user name is unknown to the server."""

    def __init__(self, kind: str, value: str) -> None:
        super().__init__(f'Invalid {kind} "{value}"')
        self.kind = kind
        self.value = value


class RedmineAPIError(RedmineCliError):
    """The server answered with an error status."""

    def __init__(self, status_code: int, body: str, url: str | None = None) -> None:
        super().__init__(f"FetchError: {status_code} - {body}")
        self.status_code = status_code
        self.body = body
        self.url = url


class RedmineConnectionError(RedmineCliError):
    """The request never got an answer from the server."""


__all__ = [
    "RedmineCliError",
    "ConfigError",
    "ResolutionError",
    "RedmineAPIError",
    "RedmineConnectionError",
]
