"""Parser for issue filter expressions.

A filter expression is a list of clauses separated by ``|`` and OR-ed
together:

- ``inprogress|resolved``  (status name contains either word)
- ``!none``                (any value is set)
- ``none|1.2``             (unset, or the release named "1.2...")
- ``42``                   (the resource with id 42, or a name containing "42")

Each clause is trimmed and lower-cased. A leading ``!`` negates that clause
only. The keyword ``none`` matches a missing resource; any other term is
compared against the resource's name (substring) and id (exact number).
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from pyparsing import Literal, Opt, ParseException, ParserElement, Regex, pyparsing_common

SEPARATOR = "|"
NEGATION = "!"
NONE_KEYWORD = "none"


@dataclass(frozen=True)
class Clause:
    """A single ``|``-separated clause of a filter expression."""

    term: str
    negated: bool = False
    number: int | None = None

    @property
    def is_none_keyword(self) -> bool:
        return self.term == NONE_KEYWORD

    def __repr__(self) -> str:
        return f"{NEGATION if self.negated else ''}{self.term}"


@dataclass(frozen=True)
class FilterExpression:
    """A parsed filter expression: clauses combined with OR."""

    clauses: tuple[Clause, ...] = ()

    @property
    def is_empty(self) -> bool:
        """An empty expression places no restriction and matches everything."""
        return not self.clauses

    def __repr__(self) -> str:
        return f" {SEPARATOR} ".join(repr(c) for c in self.clauses) or "<any>"


class FilterParser:
    """Parser for filter expressions."""

    def __init__(self):
        """Initialize the clause and number grammars."""
        self._clause = self._build_clause()
        self._number = pyparsing_common.signed_integer.copy()

    def _build_clause(self) -> ParserElement:
        """Build the pyparsing grammar for one clause: ``[!]term``.

        The term may be empty; ``""`` is a substring of every name.
        """
        negation = Literal(NEGATION)("negated")
        term = Regex(r".*", flags=re.DOTALL)("term")

        # Whitespace after "!" belongs to the term
        return (Opt(negation) + term).leave_whitespace()

    def _parse_number(self, term: str) -> int | None:
        """Return the term as an integer, or None when it is not one.

        Only decimal integers count: ``"12.0"``, ``"1e2"`` and ``"0x10"`` are
        compared by name alone.
        """
        try:
            return self._number.parse_string(term, parse_all=True)[0]
        except ParseException:
            return None

    def parse_clause(self, text: str) -> Clause:
        """Parse a single clause.

        Args:
            text: The raw clause text, before trimming.

        Returns:
            The Clause. ``""`` and ``"!"`` give a clause with an empty term.
        """
        result = self._clause.parse_string(text.strip().lower(), parse_all=True)
        term = result.get("term", "")
        return Clause(
            term=term,
            negated="negated" in result,
            number=self._parse_number(term),
        )

    def parse(self, expression: str | None) -> FilterExpression:
        """Parse an expression string.

        Never raises. A missing, blank or separators-only expression is
        empty; otherwise every clause is kept, empty ones included.

        Args:
            expression: The expression to parse, or None.

        Returns:
            Parsed FilterExpression.
        """
        if not expression or not expression.replace(SEPARATOR, "").strip():
            return FilterExpression()

        clauses = tuple(self.parse_clause(raw) for raw in expression.split(SEPARATOR))
        return FilterExpression(clauses=clauses)


# Global parser instance
_parser: FilterParser | None = None


def get_parser() -> FilterParser:
    """Get or create the global parser instance."""
    global _parser
    if _parser is None:
        _parser = FilterParser()
    return _parser


def parse_filter(expression: str | None) -> FilterExpression:
    """Parse a filter expression using the global parser.

    Args:
        expression: The expression to parse.

    Returns:
        Parsed FilterExpression.
    """
    return get_parser().parse(expression)
