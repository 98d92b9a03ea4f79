"""Evaluator for matching resources against filter expressions."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from redmine_cli.matcher.parser import Clause, FilterExpression, parse_filter


def _field(resource: Any, name: str) -> Any:
    """Read ``id``/``name`` from a model, an object or a decoded JSON mapping."""
    if isinstance(resource, Mapping):
        return resource.get(name)
    return getattr(resource, name, None)


class FilterEvaluator:
    """Evaluator for a parsed filter expression against named resources."""

    def __init__(self, expression: FilterExpression):
        """Initialize with a parsed expression.

        Args:
            expression: Parsed expression from FilterParser.
        """
        self.expression = expression

    @classmethod
    def from_string(cls, expression_str: str | None) -> "FilterEvaluator":
        """Create an evaluator from an expression string.

        Args:
            expression_str: Expression string to parse, or None for no filter.

        Returns:
            FilterEvaluator instance.
        """
        return cls(parse_filter(expression_str))

    def matches(self, resource: Any | None) -> bool:
        """Check if a resource matches the expression.

        Args:
            resource: The resource to check (anything with ``id`` and
                      ``name``), or None when the value is unset.

        Returns:
            True if any clause matches, or if the expression is empty.
        """
        if self.expression.is_empty:
            return True
        return any(self._evaluate_clause(clause, resource) for clause in self.expression.clauses)

    def _evaluate_clause(self, clause: Clause, resource: Any | None) -> bool:
        if clause.is_none_keyword:
            result = resource is None
        else:
            result = resource is not None and (
                self._name_contains(clause, resource) or self._id_equals(clause, resource)
            )
        return not result if clause.negated else result

    def _name_contains(self, clause: Clause, resource: Any) -> bool:
        """Case-insensitive substring test; a missing name reads as ``""``."""
        name = _field(resource, "name") or ""
        return clause.term in str(name).lower()

    def _id_equals(self, clause: Clause, resource: Any) -> bool:
        """Exact numeric comparison against the resource id."""
        if clause.number is None:
            return False
        resource_id = _field(resource, "id")
        if isinstance(resource_id, bool) or not isinstance(resource_id, int):
            return False
        return resource_id == clause.number


def matches(filter_expression: str | None, resource: Any | None) -> bool:
    """Check whether a resource matches a filter expression.

    The expression is parsed on every call. An absent or blank expression
    always matches, without looking at the resource.

    Args:
        filter_expression: The filter string, e.g. ``"inprogress|resolved"``.
        resource: The resource to check, or None when it is unset.

    Returns:
        True if the resource matches.
    """
    if not filter_expression:
        return True
    return FilterEvaluator.from_string(filter_expression).matches(resource)
