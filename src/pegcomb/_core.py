"""Core pattern base class, structural and lookahead combinators."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar

from pegcomb._tracing import _traced_step
from pegcomb._types import Cursor, _trace_hook

# =============================================================================
# Pattern Base
# =============================================================================


class Combinator(ABC):
    """
    Base class for all patterns.

    A pattern takes a cursor and returns either an advanced cursor (success)
    or None (failure). Patterns are immutable once built and can be matched
    any number of times against any input.

    Patterns compose with operators:
        &  = sequence (short-circuits on failure)
        |  = ordered choice (short-circuits on success)
        ~  = negative lookahead (never consumes)

    Plain values are coerced on either side of an operator: an int or a
    one-byte str/bytes becomes Char, a longer str/bytes becomes Str, and any
    other callable becomes Fn.

    Tracing:
        Use `with use_tracing(hook):` to trace every match() in scope.
        Or use `run_traced(pattern, src, hook)` for explicit tracing.
    """

    leaf: ClassVar[bool] = True

    @abstractmethod
    def _execute(self, cursor: Cursor) -> Cursor | None:
        """Internal matching - subclasses implement this."""
        ...

    def match(self, src: Any) -> Cursor | None:
        """
        Match this pattern at the start of `src`.

        `src` may be a Cursor, bytes-like, or str. A str is encoded as UTF-8,
        like str literals; pass bytes to match input in any other encoding.
        Returns the cursor after the matched input, or None on failure.
        """
        return _step(self, Cursor.of(src))

    def _trace_name(self) -> str:
        return repr(self)

    def __and__(self, other: Any) -> Combinator:
        """a & b = match b from where a ended, only if a matched."""
        return _And((self, _coerce(other)))

    def __rand__(self, other: Any) -> Combinator:
        return _And((_coerce(other), self))

    def __or__(self, other: Any) -> Combinator:
        """a | b = try a; if it fails, try b from the same cursor."""
        return _Or((self, _coerce(other)))

    def __ror__(self, other: Any) -> Combinator:
        return _Or((_coerce(other), self))

    def __invert__(self) -> Combinator:
        """~a = succeed without consuming iff a fails."""
        return _Not(self)

    def __call__(self, src: Any) -> Cursor | None:
        """Shorthand for match()."""
        return self.match(src)


def _step(pattern: Combinator, cursor: Cursor) -> Cursor | None:
    """Run one node, routing through the active trace hook if any."""
    hook = _trace_hook.get()
    if hook is None:
        return pattern._execute(cursor)
    return _traced_step(pattern, cursor, hook)


def _coerce(value: Any) -> Combinator:
    """Turn an operand into a pattern."""
    from pegcomb._hooks import Fn
    from pegcomb._primitives import Char, Str

    if isinstance(value, Combinator):
        return value
    if isinstance(value, bool):
        raise TypeError("Cannot use a bool as a pattern")
    if isinstance(value, int):
        return Char(value)
    if isinstance(value, (str, bytes, bytearray)):
        return Char(value) if len(value) == 1 and _single_byte(value) else Str(value)
    if callable(value):
        return Fn(value)
    raise TypeError(f"Cannot use {type(value).__name__!r} as a pattern")


def _single_byte(value: str | bytes | bytearray) -> bool:
    return not isinstance(value, str) or ord(value) < 0x80


def _flatten(items: tuple[Combinator, ...], kind: type) -> tuple[Combinator, ...]:
    """Splice the items of nested `kind` nodes (already flat) into one tuple."""
    flat: list[Combinator] = []
    for item in items:
        if isinstance(item, kind):
            flat.extend(item.items)
        else:
            flat.append(item)
    return tuple(flat)


# =============================================================================
# Structural Combinators
# =============================================================================


@dataclass(frozen=True)
class _And(Combinator):
    """Sequence. Nested sequences are spliced into one flat `items` tuple."""

    items: tuple[Combinator, ...]

    leaf = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _flatten(self.items, _And))

    def _execute(self, cursor: Cursor) -> Cursor | None:
        current: Cursor | None = cursor
        for item in self.items:
            current = _step(item, current)
            if current is None:
                return None
        return current

    def _trace_name(self) -> str:
        return "AND"


@dataclass(frozen=True)
class _Or(Combinator):
    """Ordered choice. Nested choices are spliced into one flat `items` tuple."""

    items: tuple[Combinator, ...]

    leaf = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "items", _flatten(self.items, _Or))

    def _execute(self, cursor: Cursor) -> Cursor | None:
        for item in self.items:
            result = _step(item, cursor)
            if result is not None:
                return result
        return None

    def _trace_name(self) -> str:
        return "OR"


# =============================================================================
# Lookahead Combinators
# =============================================================================


@dataclass(frozen=True)
class _Not(Combinator):
    inner: Combinator

    leaf = False

    def _execute(self, cursor: Cursor) -> Cursor | None:
        if _step(self.inner, cursor) is None:
            return cursor
        return None

    def _trace_name(self) -> str:
        return "NOT"


@dataclass(frozen=True)
class Check(Combinator):
    """
    Positive lookahead: succeeds iff `inner` matches, without consuming.

    Hooks inside `inner` still fire.

    Example:
        delim = Check(whitespace() | eof())
    """

    inner: Combinator

    leaf = False

    def __post_init__(self) -> None:
        object.__setattr__(self, "inner", _coerce(self.inner))

    def _execute(self, cursor: Cursor) -> Cursor | None:
        if _step(self.inner, cursor) is not None:
            return cursor
        return None

    def _trace_name(self) -> str:
        return "CHECK"


def check(pattern: Any) -> Check:
    """Positive lookahead over `pattern` (which may be a plain str/int)."""
    return Check(pattern)


def not_(pattern: Any) -> Combinator:
    """Negative lookahead, same as `~pattern` but accepts plain values."""
    return _Not(_coerce(pattern))


def sequence(*patterns: Any) -> Combinator:
    """
    Sequence any number of patterns, left to right.

    An empty sequence always matches without consuming.
    """
    from pegcomb._primitives import Eps

    if not patterns:
        return Eps()
    if len(patterns) == 1:
        return _coerce(patterns[0])
    return _And(tuple(_coerce(p) for p in patterns))


def choice(*patterns: Any) -> Combinator:
    """
    Ordered choice over any number of patterns, first match wins.

    An empty choice never matches.
    """
    from pegcomb._primitives import Never

    if not patterns:
        return Never()
    if len(patterns) == 1:
        return _coerce(patterns[0])
    return _Or(tuple(_coerce(p) for p in patterns))
