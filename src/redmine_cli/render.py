"""Rich rendering of issues for the terminal."""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from redmine_cli.models import Issue

STATUS_WIDTH = 12


def priority_style(priority_id: int) -> str | None:
    """Return the row style for a priority id: low is dim, high is yellow/red."""
    if priority_id <= 3:
        return "dim"
    if priority_id == 5:
        return "yellow"
    if priority_id >= 6:
        return "red"
    return None


def issue_row(issue: Issue, indent: str = "") -> Text:
    """Format one issue as ``<status> #<id> <subject>``."""
    status = (issue.status.name if issue.status and issue.status.name else "").ljust(STATUS_WIDTH)
    row = f"{indent}{status} #{issue.id} {issue.subject}"
    return Text(row, style=priority_style(issue.priority_id) or "")


def print_issues(console: Console, issues: list[Issue]) -> None:
    for issue in issues:
        console.print(issue_row(issue))


def print_groups(console: Console, groups: list[tuple[Issue | None, list[Issue]]]) -> None:
    """Print each group as a blank line, the parent subject and indented rows."""
    for parent, children in groups:
        console.print()
        if parent is not None:
            console.print(Text(parent.subject))
        else:
            console.print(Text(f"#{children[0].parent.id}", style="dim"))
        for issue in children:
            console.print(issue_row(issue, indent="  "))


def print_issue(console: Console, issue: Issue) -> None:
    """Print the detail view of an issue."""
    tracker = issue.tracker.name if issue.tracker and issue.tracker.name else "Issue"
    console.print(Text(f"{tracker} #{issue.id}", style="bold"))
    console.print(Text(issue.subject))
    console.print()
    console.print(Text(f"Status: {issue.status or '-'}"))
    console.print(Text(f"Priority: {issue.priority or '-'}"))
    console.print(Text(f"Assignee: {issue.assigned_to.name if issue.assigned_to else '-'}"))
    console.print()
    console.print(Text(issue.description or ""))


__all__ = [
    "priority_style",
    "issue_row",
    "print_issues",
    "print_groups",
    "print_issue",
]
