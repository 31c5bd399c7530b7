"""Tracing hooks: observe every pattern evaluation during a match."""

from __future__ import annotations

import logging
import time
from contextlib import contextmanager
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

from pegcomb._types import Cursor, _trace_config, _trace_depth, _trace_hook

if TYPE_CHECKING:
    from pegcomb._core import Combinator

# Optional OpenTelemetry imports - only needed if using OpenTelemetryHook
try:
    from opentelemetry.trace import (
        Link as _Link,
    )
    from opentelemetry.trace import (
        Status as _Status,
    )
    from opentelemetry.trace import (
        StatusCode as _StatusCode,
    )
    from opentelemetry.trace import (
        set_span_in_context as _set_span_in_context,
    )

    _HAS_OPENTELEMETRY = True
except ImportError:
    _HAS_OPENTELEMETRY = False
    _Link = None
    _Status = None
    _StatusCode = None
    _set_span_in_context = None


@runtime_checkable
class TraceHook(Protocol):
    """
    Protocol for trace hooks.

    Implement this to integrate with logging, OpenTelemetry, or other
    tracing systems. Hooks observe; they cannot change a match outcome.

    Example:
        class MyHook:
            def on_enter(self, name, cursor, depth):
                print(f"{'  ' * depth}-> {name} @ {cursor.pos}")
                return None  # span token

            def on_exit(self, span, name, ok, duration_ms, depth):
                status = "✔" if ok else "✗"
                print(f"{'  ' * depth}<- {name} {status}")

            def on_error(self, span, name, error, duration_ms, depth):
                print(f"{'  ' * depth}<- {name} ERROR: {error}")
    """

    def on_enter(self, name: str, cursor: Cursor, depth: int) -> Any:
        """
        Called before evaluating a pattern.

        Args:
            name: Name/description of the pattern
            cursor: Cursor the pattern is evaluated at
            depth: Nesting depth (0 = root)

        Returns:
            Span token to pass to on_exit (can be None)
        """
        ...

    def on_exit(
        self, span: Any, name: str, ok: bool, duration_ms: float, depth: int
    ) -> None:
        """
        Called after a pattern completes.

        Args:
            span: Token returned from on_enter
            name: Name/description of the pattern
            ok: Whether the pattern matched
            duration_ms: Evaluation time in milliseconds
            depth: Nesting depth
        """
        ...

    def on_error(
        self, span: Any, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        """
        Called if a pattern raises (a user callback, or an unbound rule).

        The exception is re-raised after this returns.
        """
        ...


@dataclass
class TraceConfig:
    """
    Configuration for tracing behavior.

    Attributes:
        nested: If True, trace child patterns; otherwise only the root
        max_depth: Maximum depth to trace (None = unlimited)
        include_leaf_only: If True, only trace leaf patterns (Char, Str, Fn, ...)
    """

    nested: bool = True
    max_depth: int | None = None
    include_leaf_only: bool = False


_DEFAULT_CONFIG = TraceConfig()


@contextmanager
def use_tracing(hook: TraceHook, config: TraceConfig | None = None):
    """
    Context manager to enable tracing for all matches in scope.

    Args:
        hook: TraceHook implementation to receive trace events
        config: Optional TraceConfig to customize tracing behavior

    Example:
        with use_tracing(LoggingHook()):
            grammar.match(src)  # This will be traced

        with use_tracing(PrintHook(), TraceConfig(max_depth=2)):
            grammar.match(src)
    """
    hook_token = _trace_hook.set(hook)
    config_token = _trace_config.set(config or TraceConfig())
    depth_token = _trace_depth.set(0)
    try:
        yield
    finally:
        _trace_depth.reset(depth_token)
        _trace_config.reset(config_token)
        _trace_hook.reset(hook_token)


def _traced_step(pattern: Combinator, cursor: Cursor, hook: TraceHook) -> Cursor | None:
    """Evaluate one pattern, reporting to `hook` as configured."""
    config = _trace_config.get() or _DEFAULT_CONFIG
    depth = _trace_depth.get()

    # Untraced nodes keep the current depth, so their children stay untraced
    if config.max_depth is not None and depth > config.max_depth:
        return pattern._execute(cursor)
    if not config.nested and depth > 0:
        return pattern._execute(cursor)

    if config.include_leaf_only and not pattern.leaf:
        token = _trace_depth.set(depth + 1)
        try:
            return pattern._execute(cursor)
        finally:
            _trace_depth.reset(token)

    name = pattern._trace_name()
    span = hook.on_enter(name, cursor, depth)
    start = time.perf_counter()
    token = _trace_depth.set(depth + 1)
    try:
        result = pattern._execute(cursor)
    except Exception as e:
        duration_ms = (time.perf_counter() - start) * 1000
        hook.on_error(span, name, e, duration_ms, depth)
        raise
    finally:
        _trace_depth.reset(token)

    duration_ms = (time.perf_counter() - start) * 1000
    hook.on_exit(span, name, result is not None, duration_ms, depth)
    return result


def run_traced(
    pattern: Combinator,
    src: Any,
    hook: TraceHook,
    config: TraceConfig | None = None,
) -> Cursor | None:
    """
    Match a pattern with explicit tracing.

    Args:
        pattern: The pattern to match
        src: Input (Cursor, bytes-like, or str)
        hook: TraceHook to receive events
        config: Optional TraceConfig

    Returns:
        The cursor after the match, or None

    Example:
        end = run_traced(grammar, "(a)(a)", PrintHook())
    """
    with use_tracing(hook, config):
        return pattern.match(src)


# =============================================================================
# Built-in Trace Hooks
# =============================================================================


class PrintHook:
    """
    Simple trace hook that prints to stdout.

    Example:
        with use_tracing(PrintHook()):
            (Char("a") | Char("b")).match("b")

        # Output:
        # -> OR @0
        #   -> Char('a') @0
        #   <- Char('a') ✗ (0.00ms)
        #   -> Char('b') @0
        #   <- Char('b') ✔ (0.00ms)
        # <- OR ✔ (0.02ms)
    """

    def __init__(self, indent: str = "  ", show_input: bool = False):
        self.indent = indent
        self.show_input = show_input

    def on_enter(self, name: str, cursor: Cursor, depth: int) -> float:
        prefix = self.indent * depth
        if self.show_input:
            print(f"{prefix}-> {name} @{cursor.pos} | {cursor.rest()[:16]!r}")
        else:
            print(f"{prefix}-> {name} @{cursor.pos}")
        return time.perf_counter()

    def on_exit(
        self, span: float, name: str, ok: bool, duration_ms: float, depth: int
    ) -> None:
        prefix = self.indent * depth
        status = "✔" if ok else "✗"
        print(f"{prefix}<- {name} {status} ({duration_ms:.2f}ms)")

    def on_error(
        self, span: float, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        prefix = self.indent * depth
        print(f"{prefix}<- {name} ERROR: {error} ({duration_ms:.2f}ms)")


class LoggingHook:
    """
    Trace hook that logs to a Python logger.

    Example:
        import logging
        logger = logging.getLogger("myparser")

        with use_tracing(LoggingHook(logger)):
            grammar.match(src)
    """

    def __init__(self, logger: logging.Logger | None = None, level: int = logging.DEBUG):
        self.logger = logger or logging.getLogger("pegcomb")
        self.level = level

    def on_enter(self, name: str, cursor: Cursor, depth: int) -> dict:
        span = {"name": name, "depth": depth, "pos": cursor.pos}
        self.logger.log(
            self.level, "[ENTER] %s at %d (depth=%d)", name, cursor.pos, depth
        )
        return span

    def on_exit(
        self, span: dict, name: str, ok: bool, duration_ms: float, depth: int
    ) -> None:
        status = "OK" if ok else "FAIL"
        self.logger.log(
            self.level, "[EXIT] %s -> %s (%.2fms)", name, status, duration_ms
        )

    def on_error(
        self, span: dict, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        self.logger.error("[ERROR] %s -> %s (%.2fms)", name, error, duration_ms)


class OpenTelemetryHook:
    """
    OpenTelemetry trace hook with:

    - Correct parent/child span hierarchy
    - Depth-based span suppression
    - Primitive-as-event optimization (Char/Str/Range/Any/Eps)
    - Operator tagging for AND / OR / NOT / CHECK
    - Optional sibling span linking

    Requires: pip install opentelemetry-api
    """

    _OPERATORS = frozenset({"AND", "OR", "NOT", "CHECK", "STAR", "PLUS", "UNTIL"})
    _PRIMITIVES = ("Char(", "Str(", "Range(", "Any(", "Eps(", "Never(")

    def __init__(
        self,
        tracer,
        *,
        max_span_depth: int | None = None,
        link_sibling_spans: bool = False,
        primitives_as_events: bool = True,
    ):
        if not _HAS_OPENTELEMETRY:
            raise ImportError(
                "OpenTelemetry is not installed. "
                "Install it with: pip install opentelemetry-api"
            )
        self.tracer = tracer
        self.max_span_depth = max_span_depth
        self.link_sibling_spans = link_sibling_spans
        self.primitives_as_events = primitives_as_events

        self._span_stack: list[Any] = []
        self._last_span_at_depth: dict[int, Any] = {}

    def on_enter(self, name: str, cursor: Cursor, depth: int) -> Any:
        # These are guaranteed non-None because __init__ checks _HAS_OPENTELEMETRY
        assert _set_span_in_context is not None
        assert _Link is not None

        if self.max_span_depth is not None and depth > self.max_span_depth:
            return None

        parent = self._span_stack[-1] if self._span_stack else None

        if self.primitives_as_events and parent and name.startswith(self._PRIMITIVES):
            parent.add_event(
                "pegcomb.primitive",
                {"pegcomb.pattern": name, "pegcomb.pos": cursor.pos},
            )
            return None

        links = []
        if self.link_sibling_spans and depth in self._last_span_at_depth:
            links.append(_Link(self._last_span_at_depth[depth].get_span_context()))

        span = self.tracer.start_span(
            name,
            context=_set_span_in_context(parent) if parent else None,
            links=links or None,
        )
        if name in self._OPERATORS:
            span.set_attribute("pegcomb.operator", name)
            span.set_attribute("pegcomb.node_type", "combinator")
        else:
            span.set_attribute("pegcomb.node_type", "pattern")
        span.set_attribute("pegcomb.name", name)
        span.set_attribute("pegcomb.pos", cursor.pos)
        span.set_attribute("pegcomb.depth", depth)

        self._span_stack.append(span)
        self._last_span_at_depth[depth] = span
        return span

    def on_exit(
        self, span: Any, name: str, ok: bool, duration_ms: float, depth: int
    ) -> None:
        if span is None:
            return

        # These are guaranteed non-None because __init__ checks _HAS_OPENTELEMETRY
        assert _Status is not None
        assert _StatusCode is not None

        span.set_attribute("pegcomb.matched", ok)
        span.set_attribute("pegcomb.duration_ms", duration_ms)
        # Failed matches keep an OK status; only exceptions are errors
        span.set_status(_Status(_StatusCode.OK))
        span.end()
        self._span_stack.pop()

    def on_error(
        self, span: Any, name: str, error: Exception, duration_ms: float, depth: int
    ) -> None:
        if span is None:
            return

        assert _Status is not None
        assert _StatusCode is not None

        span.set_attribute("pegcomb.matched", False)
        span.set_attribute("pegcomb.duration_ms", duration_ms)
        span.record_exception(error)
        span.set_status(_Status(_StatusCode.ERROR, str(error)))
        span.end()
        self._span_stack.pop()
