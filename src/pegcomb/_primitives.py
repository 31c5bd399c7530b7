"""Primitive matchers: Eps, Any, Char, Range, Str, and Never."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any as _AnyType

from pegcomb._core import Combinator
from pegcomb._types import DEFAULT_ENCODING, TERMINATOR, Cursor


def _byte(value: _AnyType) -> int:
    """Normalize an int, one-byte bytes, or ASCII character to a byte value."""
    if isinstance(value, bool):
        raise TypeError("Expected a byte value, got bool")
    if isinstance(value, int):
        if not 0 <= value <= 0xFF:
            raise ValueError(f"Byte value out of range: {value}")
        return value
    if isinstance(value, (bytes, bytearray)):
        if len(value) != 1:
            raise ValueError(f"Expected a single byte, got {bytes(value)!r}")
        return value[0]
    if isinstance(value, str):
        if len(value) != 1 or ord(value) > 0x7F:
            raise ValueError(f"Expected a single ASCII character, got {value!r}")
        return ord(value)
    raise TypeError(f"Expected a byte value, got {type(value).__name__!r}")


def _show(byte: int) -> str:
    return repr(chr(byte))


class Eps(Combinator):
    """Always matches without consuming."""

    def _execute(self, cursor: Cursor) -> Cursor | None:
        return cursor

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Eps)

    def __hash__(self) -> int:
        return hash(Eps)

    def __repr__(self) -> str:
        return "Eps()"


class Never(Combinator):
    """Never matches."""

    def _execute(self, cursor: Cursor) -> Cursor | None:
        return None

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Never)

    def __hash__(self) -> int:
        return hash(Never)

    def __repr__(self) -> str:
        return "Never()"


class Any(Combinator):
    """Matches any single byte; at the terminator, matches without consuming."""

    def _execute(self, cursor: Cursor) -> Cursor | None:
        if cursor.at_end:
            return cursor
        return cursor.advance()

    def __eq__(self, other: object) -> bool:
        return isinstance(other, Any)

    def __hash__(self) -> int:
        return hash(Any)

    def __repr__(self) -> str:
        return "Any()"


@dataclass(frozen=True, repr=False)
class Char(Combinator):
    """
    Matches exactly one byte.

    Char(0) is an end-of-input assertion: it matches at the terminator
    without consuming.

    Example:
        Char("a").match("ab")   # Cursor(pos=1, ...)
        Char(0).match("")       # Cursor(pos=0, ...)
    """

    c: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "c", _byte(self.c))

    def _execute(self, cursor: Cursor) -> Cursor | None:
        if cursor.current != self.c:
            return None
        if self.c == TERMINATOR:
            return cursor
        return cursor.advance()

    def __repr__(self) -> str:
        return f"Char({_show(self.c)})"


@dataclass(frozen=True, repr=False)
class Range(Combinator):
    """Matches one byte in [lo, hi] inclusive."""

    lo: int
    hi: int

    def __post_init__(self) -> None:
        object.__setattr__(self, "lo", _byte(self.lo))
        object.__setattr__(self, "hi", _byte(self.hi))
        if self.lo > self.hi:
            raise ValueError(f"Empty range: {_show(self.lo)} > {_show(self.hi)}")

    def _execute(self, cursor: Cursor) -> Cursor | None:
        current = cursor.current
        if not self.lo <= current <= self.hi:
            return None
        if current == TERMINATOR:
            return cursor
        return cursor.advance()

    def __repr__(self) -> str:
        return f"Range({_show(self.lo)}, {_show(self.hi)})"


@dataclass(frozen=True, repr=False)
class Str(Combinator):
    """
    Matches an exact byte sequence.

    A str literal is encoded as UTF-8. The empty literal always matches
    without consuming.
    """

    seq: bytes

    def __post_init__(self) -> None:
        seq = self.seq
        if isinstance(seq, str):
            seq = seq.encode(DEFAULT_ENCODING)
        elif isinstance(seq, (bytearray, memoryview)):
            seq = bytes(seq)
        elif not isinstance(seq, bytes):
            raise TypeError(f"Expected str or bytes, got {type(seq).__name__!r}")
        if TERMINATOR in seq:
            raise ValueError(f"Literal may not contain the terminator: {seq!r}")
        object.__setattr__(self, "seq", seq)

    def _execute(self, cursor: Cursor) -> Cursor | None:
        end = cursor.pos + len(self.seq)
        if cursor.data[cursor.pos : end] != self.seq:
            return None
        return Cursor(cursor.data, end)

    def __repr__(self) -> str:
        return f"Str({self.seq!r})"


def eps() -> Eps:
    return Eps()


def any_byte() -> Any:
    return Any()
