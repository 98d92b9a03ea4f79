"""Resolve names given on the command line to server resources."""

from __future__ import annotations

from collections.abc import Iterable
from typing import TYPE_CHECKING

from redmine_cli.errors import ConfigError, ResolutionError
from redmine_cli.models import NamedResource

if TYPE_CHECKING:
    from redmine_cli.client import RedmineClient
    from redmine_cli.config import Settings

ME = "me"


def find_by_name(resources: Iterable[NamedResource], name: str) -> NamedResource | None:
    """Return the first resource whose name equals ``name``, ignoring case."""
    wanted = name.strip().lower()
    for resource in resources:
        if resource.name is not None and resource.name.lower() == wanted:
            return resource
    return None


def resolve_tracker(client: RedmineClient, name: str) -> NamedResource:
    tracker = find_by_name(client.list_trackers(), name)
    if tracker is None:
        raise ResolutionError("tracker", name)
    return tracker


def resolve_status(client: RedmineClient, name: str) -> NamedResource:
    status = find_by_name(client.list_statuses(), name)
    if status is None:
        raise ResolutionError("status", name)
    return status


def resolve_release(client: RedmineClient, name: str) -> NamedResource:
    release = find_by_name(client.list_versions(), name)
    if release is None:
        raise ResolutionError("release", name)
    return release


def resolve_user(client: RedmineClient, name: str) -> NamedResource:
    """Find a project member by display name.

    Group memberships are skipped.
    """
    users = [m.user for m in client.list_memberships() if m.user is not None]
    user = find_by_name(users, name)
    if user is None:
        raise ResolutionError("user", name)
    return user


def whois(settings: Settings) -> str:
    """Return the configured display name of the current user."""
    if not settings.me:
        raise ConfigError("Please specify me")
    return settings.me


def expand_me(settings: Settings, user: str | None) -> str | None:
    """Replace the ``me`` placeholder with the configured user name."""
    if user != ME:
        return user
    return whois(settings)


def select_user(settings: Settings, user: str | None, me: bool) -> str | None:
    """Combine ``--user`` and ``--me`` into one user name (``--me`` wins)."""
    if me:
        return whois(settings)
    return expand_me(settings, user)


def web_url(settings: Settings) -> str:
    """Return the server URL used for browser links."""
    if not settings.server:
        raise ConfigError("Please specify server")
    return settings.server


__all__ = [
    "ME",
    "find_by_name",
    "resolve_tracker",
    "resolve_status",
    "resolve_release",
    "resolve_user",
    "whois",
    "expand_me",
    "select_user",
    "web_url",
]
