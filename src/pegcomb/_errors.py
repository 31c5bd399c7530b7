"""Grammar-construction errors.

A failed match is never an exception (it is None). These errors signal a
mistake in assembling the grammar and are not meant to be recovered from
mid-match.
"""

from __future__ import annotations

from typing import Any


class GrammarError(Exception):
    """Base class for grammar-construction misuse."""


class DuplicateRuleError(GrammarError):
    """A registry key was bound twice."""

    def __init__(self, key: Any):
        self.key = key
        super().__init__(f"Rule {key!r} is already bound")


class UnboundRuleError(GrammarError, LookupError):
    """A registry key was used before being bound."""

    def __init__(self, key: Any, *more: Any):
        self.keys = (key, *more)
        names = ", ".join(repr(k) for k in self.keys)
        super().__init__(f"Rule(s) referenced but never bound: {names}")

    @property
    def key(self) -> Any:
        return self.keys[0]
