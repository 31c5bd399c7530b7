"""Repetition combinators: ZeroOrMore, OneOrMore, Until, and derived sugar."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from pegcomb._core import Combinator, _coerce, _step
from pegcomb._primitives import Eps
from pegcomb._types import Cursor


def _repeat(inner: Combinator, cursor: Cursor) -> Cursor:
    """Apply `inner` greedily until it fails or stops advancing."""
    while True:
        result = _step(inner, cursor)
        if result is None:
            return cursor
        if result.pos == cursor.pos:
            return result
        cursor = result


@dataclass(frozen=True)
class ZeroOrMore(Combinator):
    """
    Greedy repetition. Never fails.

    Repetitions are never given back: `star("ab") & "ab"` cannot match
    "ababab" because the star consumes every "ab".
    """

    inner: Combinator

    leaf = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "inner", _coerce(self.inner))

    def _execute(self, cursor: Cursor) -> Cursor | None:
        return _repeat(self.inner, cursor)

    def _trace_name(self) -> str:
        return "STAR"


@dataclass(frozen=True)
class OneOrMore(Combinator):
    """One mandatory match of `inner` followed by ZeroOrMore(inner)."""

    inner: Combinator

    leaf = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "inner", _coerce(self.inner))

    def _execute(self, cursor: Cursor) -> Cursor | None:
        first = _step(self.inner, cursor)
        if first is None:
            return None
        if first.pos == cursor.pos:
            return first
        return _repeat(self.inner, first)

    def _trace_name(self) -> str:
        return "PLUS"


@dataclass(frozen=True)
class Until(Combinator):
    """
    Scan forward one byte at a time until `inner` would match.

    Returns the position where `inner` first matches, without consuming it.
    Fails if the terminator is reached first. The scan has no bound: the
    cost is linear in the remaining input when the target is absent.
    """

    inner: Combinator

    leaf = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "inner", _coerce(self.inner))

    def _execute(self, cursor: Cursor) -> Cursor | None:
        while not cursor.at_end:
            if _step(self.inner, cursor) is not None:
                return cursor
            cursor = cursor.advance()
        return None

    def _trace_name(self) -> str:
        return "UNTIL"


def star(pattern: Any) -> ZeroOrMore:
    return ZeroOrMore(pattern)


def plus(pattern: Any) -> OneOrMore:
    return OneOrMore(pattern)


def until(pattern: Any) -> Until:
    return Until(pattern)


def maybe(pattern: Any) -> Combinator:
    """Optional match: `pattern | Eps()`. Eps must come last."""
    return _coerce(pattern) | Eps()
