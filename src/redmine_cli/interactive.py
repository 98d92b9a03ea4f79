"""Interactive helpers: editing descriptions and picking a parent issue."""

from __future__ import annotations

import re
from typing import TYPE_CHECKING

import click
from rich.console import Console
from rich.prompt import IntPrompt
from rich.text import Text

from redmine_cli.errors import RedmineCliError
from redmine_cli.logging import get_logger

if TYPE_CHECKING:
    from redmine_cli.client import RedmineClient
    from redmine_cli.config import Settings

logger = get_logger(__name__)

COMMENT_PREFIX = ";"
COMMENT_HINT = "Lines starting with ; are comments and are ignored"

_COMMENT_LINE = re.compile(r"^;.*(?:\r?\n|\r|\Z)", re.MULTILINE)


def build_editor_text(header: str, content: str) -> str:
    """Prefix the header lines with ``; `` and append the content below them."""
    lines = [f"{COMMENT_PREFIX} {line}" for line in header.splitlines()]
    lines.append(f"{COMMENT_PREFIX} {COMMENT_HINT}")
    lines.append(COMMENT_PREFIX)
    return "\n".join(lines) + "\n" + content


def strip_comments(text: str) -> str:
    """Remove every line that starts with ``;``."""
    return _COMMENT_LINE.sub("", text)


def open_in_editor(settings: Settings, header: str, content: str = "") -> str:
    """Let the user write text in their editor.

    The editor is ``settings.editor``, else ``$VISUAL``/``$EDITOR``.

    Args:
        settings: Loaded settings.
        header: Explanation shown as comment lines on top of the file.
        content: Initial text below the header.

    Returns:
        The saved text without comment lines.
    """
    logger.debug("Opening editor", editor=settings.editor)
    edited = click.edit(
        build_editor_text(header, content),
        editor=settings.editor,
        extension=".txt",
        require_save=False,
    )
    return strip_comments(edited or "")


def select_parent_issue(client: RedmineClient, console: Console) -> int:
    """Ask the user to pick one of the top-level issues of the project.

    Returns:
        The id of the chosen issue.
    """
    candidates = [issue for issue in client.list_issues() if issue.parent is None]
    if not candidates:
        raise RedmineCliError("No top-level issues to choose a parent from")

    for issue in candidates:
        console.print(Text(f"#{issue.id} {issue.subject}"))

    return IntPrompt.ask(
        "Select parent task",
        console=console,
        choices=[str(issue.id) for issue in candidates],
        show_choices=False,
    )


__all__ = [
    "build_editor_text",
    "strip_comments",
    "open_in_editor",
    "select_parent_issue",
]
