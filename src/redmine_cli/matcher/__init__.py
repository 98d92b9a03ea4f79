"""Matcher module for redmine-cli.

Provides filter expression parsing and resource matching functionality.
"""

from redmine_cli.matcher.evaluator import FilterEvaluator, matches
from redmine_cli.matcher.parser import Clause, FilterExpression, FilterParser, parse_filter

__all__ = [
    "Clause",
    "FilterExpression",
    "FilterParser",
    "FilterEvaluator",
    "parse_filter",
    "matches",
]
