"""User-function matchers and side-effecting callback wrappers."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from typing import Any, ClassVar, overload

from pegcomb._core import Combinator, _coerce, _step
from pegcomb._types import DEFAULT_ENCODING, Cursor

MatchFn = Callable[[Cursor], "Cursor | None"]
"""Signature of a user matcher: cursor -> advanced cursor or None."""

ExistFn = Callable[[], None]
SpanFn = Callable[[Cursor, Cursor], None]
TextFn = Callable[[str], None]
MissingFn = Callable[[], None]


def _noop() -> None:
    pass


# =============================================================================
# Function Matcher
# =============================================================================


@dataclass(frozen=True, repr=False)
class Fn(Combinator):
    """
    A pattern backed by an arbitrary `cursor -> cursor | None` function.

    This is the escape hatch for hand-written matching and the building
    block for recursion (see Registry.ref).

    Example:
        def bc(cursor):
            return Str("bc").match(cursor)

        ("a" & Fn(bc) & "d").match("abcdef")
    """

    fn: MatchFn
    name: str = ""

    def __post_init__(self) -> None:
        if not self.name:
            object.__setattr__(self, "name", getattr(self.fn, "__name__", "fn"))

    def _execute(self, cursor: Cursor) -> Cursor | None:
        return self.fn(cursor)

    def __repr__(self) -> str:
        return f"Fn({self.name})"


def matcher(fn: MatchFn) -> Fn:
    """
    Decorator to turn a cursor function into a pattern.

    Example:
        @matcher
        def identifier(cursor):
            return (alpha() & star(alphanum())).match(cursor)

        ok = (identifier & "=").match("x1=")
    """
    return Fn(fn, fn.__name__)


# =============================================================================
# Callback Wrappers
# =============================================================================


@dataclass(frozen=True, repr=False)
class Hook(Combinator):
    """
    Calls `on_exist()` when `inner` matches, `on_missing()` when it fails.

    The outcome of `inner` is returned unchanged. Callbacks run on every
    evaluation, including inside choice branches that are later abandoned
    and inside lookaheads; they are never retracted.
    """

    inner: Combinator
    on_exist: ExistFn
    on_missing: MissingFn = _noop

    leaf = False
    _label: ClassVar[str] = "ON_MATCH"

    def __post_init__(self) -> None:
        object.__setattr__(self, "inner", _coerce(self.inner))

    def _execute(self, cursor: Cursor) -> Cursor | None:
        result = _step(self.inner, cursor)
        if result is None:
            self.on_missing()
            return None
        self._fire(cursor, result)
        return result

    def _fire(self, start: Cursor, end: Cursor) -> None:
        self.on_exist()

    def _callback_name(self) -> str:
        return getattr(self.on_exist, "__name__", "callback")

    def _trace_name(self) -> str:
        return f"{self._label}({self._callback_name()})"

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.inner!r}, {self._callback_name()})"


@dataclass(frozen=True, repr=False)
class SpanHook(Hook):
    """Like Hook, but `on_exist(start, end)` receives the matched span's cursors."""

    on_exist: SpanFn

    _label: ClassVar[str] = "ON_SPAN"

    def _fire(self, start: Cursor, end: Cursor) -> None:
        self.on_exist(start, end)


@dataclass(frozen=True, repr=False)
class TextHook(Hook):
    """
    Like Hook, but `on_exist(text)` receives a decoded copy of the match.

    Bytes that are not valid in `encoding` decode to lone surrogates, so
    `text.encode(encoding, "surrogateescape")` gives back the exact bytes.
    """

    on_exist: TextFn
    encoding: str = DEFAULT_ENCODING

    _label: ClassVar[str] = "ON_TEXT"

    def _fire(self, start: Cursor, end: Cursor) -> None:
        self.on_exist(start.span(end).decode(self.encoding, "surrogateescape"))


@overload
def on_match(
    pattern: Any, fn: ExistFn, *, missing: MissingFn | None = None
) -> Hook: ...


@overload
def on_match(
    pattern: Any, fn: None = None, *, missing: MissingFn | None = None
) -> Callable[[ExistFn], Hook]: ...


def on_match(
    pattern: Any, fn: ExistFn | None = None, *, missing: MissingFn | None = None
) -> Hook | Callable[[ExistFn], Hook]:
    """
    Attach zero-argument callbacks to a pattern.

    Example:
        depth = 0

        def enter():
            nonlocal depth
            depth += 1

        opener = on_match("(", enter)

        # Or as a decorator; the name is bound to the wrapped pattern
        @on_match(")")
        def closer():
            nonlocal depth
            depth -= 1
    """

    def decorator(f: ExistFn) -> Hook:
        return Hook(pattern, f, missing or _noop)

    if fn is not None:
        return decorator(fn)
    return decorator


@overload
def on_span(
    pattern: Any, fn: SpanFn, *, missing: MissingFn | None = None
) -> SpanHook: ...


@overload
def on_span(
    pattern: Any, fn: None = None, *, missing: MissingFn | None = None
) -> Callable[[SpanFn], SpanHook]: ...


def on_span(
    pattern: Any, fn: SpanFn | None = None, *, missing: MissingFn | None = None
) -> SpanHook | Callable[[SpanFn], SpanHook]:
    """
    Attach a callback receiving the (start, end) cursors of each match.

    No copy of the input is made; slice with `start.span(end)` if needed.
    """

    def decorator(f: SpanFn) -> SpanHook:
        return SpanHook(pattern, f, missing or _noop)

    if fn is not None:
        return decorator(fn)
    return decorator


@overload
def on_text(
    pattern: Any,
    fn: TextFn,
    *,
    missing: MissingFn | None = None,
    encoding: str = DEFAULT_ENCODING,
) -> TextHook: ...


@overload
def on_text(
    pattern: Any,
    fn: None = None,
    *,
    missing: MissingFn | None = None,
    encoding: str = DEFAULT_ENCODING,
) -> Callable[[TextFn], TextHook]: ...


def on_text(
    pattern: Any,
    fn: TextFn | None = None,
    *,
    missing: MissingFn | None = None,
    encoding: str = DEFAULT_ENCODING,
) -> TextHook | Callable[[TextFn], TextHook]:
    """
    Attach a callback receiving the matched text as a str.

    Example:
        numbers = []
        number = on_text(digits(), lambda s: numbers.append(int(s)))
        star(number & maybe(",")).match("1,22,333")
        # numbers == [1, 22, 333]
    """

    def decorator(f: TextFn) -> TextHook:
        return TextHook(pattern, f, missing or _noop, encoding)

    if fn is not None:
        return decorator(fn)
    return decorator
