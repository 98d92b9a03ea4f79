"""Filtering, sorting and grouping of fetched issue lists."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum

from redmine_cli.logging import get_logger
from redmine_cli.matcher import FilterEvaluator
from redmine_cli.models import Issue

logger = get_logger(__name__)


class SortOrder(str, Enum):
    """Orderings offered by ``list --sort``."""

    STATUS = "status"
    ID = "id"
    NONE = "none"


@dataclass(frozen=True)
class IssueFilter:
    """Filter expressions for the four filterable issue fields.

    ``None`` leaves a field unrestricted.
    """

    parent: str | None = None
    status: str | None = None
    release: str | None = None
    assignee: str | None = None

    def evaluators(self) -> tuple[FilterEvaluator, ...]:
        return (
            FilterEvaluator.from_string(self.parent),
            FilterEvaluator.from_string(self.status),
            FilterEvaluator.from_string(self.release),
            FilterEvaluator.from_string(self.assignee),
        )


def filter_issues(issues: Iterable[Issue], issue_filter: IssueFilter) -> list[Issue]:
    """Keep the issues whose parent, status, release and assignee all match."""
    parent, status, release, assignee = issue_filter.evaluators()
    logger.debug(
        "Filtering issues",
        parent=repr(parent.expression),
        status=repr(status.expression),
        release=repr(release.expression),
        assignee=repr(assignee.expression),
    )
    return [
        issue
        for issue in issues
        if parent.matches(issue.parent)
        and status.matches(issue.status)
        and release.matches(issue.fixed_version)
        and assignee.matches(issue.assigned_to)
    ]


def sort_issues(issues: list[Issue], order: SortOrder) -> list[Issue]:
    """Return the issues in the requested order.

    ``status`` sorts by status id, then by priority id with the highest first.
    """
    if order == SortOrder.STATUS:
        return sorted(issues, key=lambda i: (i.status_id, -i.priority_id))
    if order == SortOrder.ID:
        return sorted(issues, key=lambda i: i.id)
    return list(issues)


def group_by_parent(issues: Iterable[Issue], all_issues: Iterable[Issue]) -> list[tuple[Issue | None, list[Issue]]]:
    """Group issues under their parent issue, in order of first appearance.

    Issues without a parent are left out. ``all_issues`` is used to look up
    the parents; a parent outside of it is returned as None.
    """
    issues_by_id = {issue.id: issue for issue in all_issues}
    groups: dict[int, list[Issue]] = {}
    for issue in issues:
        if issue.parent is None or issue.parent.id is None:
            continue
        groups.setdefault(issue.parent.id, []).append(issue)
    return [(issues_by_id.get(parent_id), children) for parent_id, children in groups.items()]


__all__ = [
    "SortOrder",
    "IssueFilter",
    "filter_issues",
    "sort_issues",
    "group_by_parent",
]
