"""Shared types: the input cursor, type variables, and context variables."""

from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, ClassVar, TypeVar

if TYPE_CHECKING:
    from pegcomb._tracing import TraceConfig, TraceHook

K = TypeVar("K")

DEFAULT_ENCODING = "utf-8"

TERMINATOR = 0
"""Byte value read at end of input. Matchable, never consumed."""


@dataclass(frozen=True, order=True)
class Cursor:
    """
    An immutable position within one input buffer.

    Advancing never mutates a cursor; it produces a new one. Reading past the
    end of the buffer, or at an embedded NUL byte, yields the terminator.

    Example:
        c = Cursor.of("ab")
        c.current          # 97
        c.advance().pos    # 1
        c.advance(2).at_end  # True
    """

    data: bytes = field(repr=False)
    pos: int = 0

    TERMINATOR: ClassVar[int] = TERMINATOR

    @classmethod
    def of(cls, src: Any) -> Cursor:
        """
        Build a cursor at position 0, or return `src` if already a Cursor.

        A str is encoded with DEFAULT_ENCODING, the encoding of str literals.
        """
        if isinstance(src, Cursor):
            return src
        if isinstance(src, str):
            return cls(src.encode(DEFAULT_ENCODING))
        if isinstance(src, (bytes, bytearray, memoryview)):
            return cls(bytes(src))
        raise TypeError(f"Cannot match against {type(src).__name__!r}")

    @property
    def current(self) -> int:
        """The byte under the cursor, or the terminator."""
        if self.pos < len(self.data):
            return self.data[self.pos]
        return TERMINATOR

    @property
    def at_end(self) -> bool:
        return self.current == TERMINATOR

    def advance(self, n: int = 1) -> Cursor:
        return Cursor(self.data, self.pos + n)

    def span(self, end: Cursor) -> bytes:
        """Bytes between this cursor and `end` (half-open)."""
        return self.data[self.pos : end.pos]

    def rest(self) -> bytes:
        """Remaining input up to (not including) the terminator."""
        tail = self.data[self.pos :]
        nul = tail.find(TERMINATOR)
        return tail if nul == -1 else tail[:nul]

    def __repr__(self) -> str:
        preview = self.data[self.pos : self.pos + 12]
        return f"Cursor(pos={self.pos}, at={preview!r})"


# Context variables for tracing scopes
_trace_hook: ContextVar[TraceHook | None] = ContextVar("trace_hook", default=None)
_trace_config: ContextVar[TraceConfig | None] = ContextVar(
    "trace_config", default=None
)
_trace_depth: ContextVar[int] = ContextVar("trace_depth", default=0)
