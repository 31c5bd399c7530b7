"""Tests for tracing: use_tracing, run_traced, TraceConfig and the built-in hooks."""

from __future__ import annotations

import logging
from unittest.mock import MagicMock

import pytest

import pegcomb._tracing as tracing
from pegcomb import (
    Char,
    LoggingHook,
    OpenTelemetryHook,
    PrintHook,
    Registry,
    TraceConfig,
    TraceHook,
    matcher,
    on_match,
    on_text,
    run_traced,
    sequence,
    use_tracing,
)


class RecordingHook:
    def __init__(self):
        self.events = []

    def on_enter(self, name, cursor, depth):
        self.events.append(("enter", name, depth))
        return name

    def on_exit(self, span, name, ok, duration_ms, depth):
        assert span == name
        assert duration_ms >= 0
        self.events.append(("exit", name, ok, depth))

    def on_error(self, span, name, error, duration_ms, depth):
        self.events.append(("error", name, type(error).__name__, depth))


@pytest.fixture
def hook():
    return RecordingHook()


class TestUseTracing:
    def test_protocol(self, hook):
        assert isinstance(hook, TraceHook)
        assert isinstance(PrintHook(), TraceHook)

    def test_nested_events(self, hook):
        with use_tracing(hook):
            end = (Char("a") | Char("b")).match("b")

        assert end.pos == 1
        assert hook.events == [
            ("enter", "OR", 0),
            ("enter", "Char('a')", 1),
            ("exit", "Char('a')", False, 1),
            ("enter", "Char('b')", 1),
            ("exit", "Char('b')", True, 1),
            ("exit", "OR", True, 0),
        ]

    def test_scope_ends(self, hook):
        with use_tracing(hook):
            Char("a").match("a")
        Char("a").match("a")
        assert len(hook.events) == 2

    def test_not_nested(self, hook):
        with use_tracing(hook, TraceConfig(nested=False)):
            (Char("a") | Char("b")).match("b")
        assert hook.events == [("enter", "OR", 0), ("exit", "OR", True, 0)]

    def test_max_depth(self, hook):
        grammar = (Char("a") & Char("b")) | Char("c")
        with use_tracing(hook, TraceConfig(max_depth=1)):
            grammar.match("ab")
        names = [event[1] for event in hook.events if event[0] == "enter"]
        assert names == ["OR", "AND"]

    def test_leaf_only(self, hook):
        with use_tracing(hook, TraceConfig(include_leaf_only=True)):
            (Char("a") | Char("b")).match("b")
        assert hook.events == [
            ("enter", "Char('a')", 1),
            ("exit", "Char('a')", False, 1),
            ("enter", "Char('b')", 1),
            ("exit", "Char('b')", True, 1),
        ]

    def test_error_is_reported_and_reraised(self, hook):
        @matcher
        def broken(cursor):
            raise RuntimeError("boom")

        with use_tracing(hook), pytest.raises(RuntimeError):
            (Char("a") & broken).match("ab")

        assert hook.events[-2:] == [
            ("error", "Fn(broken)", "RuntimeError", 1),
            ("error", "AND", "RuntimeError", 0),
        ]

    def test_unbound_rule_is_reported(self, hook):
        rules: Registry[str] = Registry()
        with use_tracing(hook), pytest.raises(LookupError):
            rules.ref("missing").match("x")
        assert hook.events[-1] == ("error", "Ref('missing')", "UnboundRuleError", 0)

    def test_tracing_does_not_change_hook_order(self, hook):
        fired = []
        grammar = (on_match("a", lambda: fired.append(1)) & "x") | "ab"
        with use_tracing(hook):
            end = grammar.match("ab")
        assert end.pos == 2
        assert fired == [1]

    def test_hooks_trace_by_callback_name(self, hook):
        def opened():
            pass

        def word(text):
            pass

        grammar = on_match("<", opened) & on_text(sequence(*["a"] * 500), word)
        with use_tracing(hook, TraceConfig(max_depth=1)):
            grammar.match("<" + "a" * 500)

        names = [event[1] for event in hook.events if event[0] == "enter"]
        assert names == ["AND", "ON_MATCH(opened)", "ON_TEXT(word)"]

    def test_run_traced(self, hook):
        end = run_traced(Char("a") & "b", "ab", hook)
        assert end.pos == 2
        assert hook.events[0] == ("enter", "AND", 0)
        assert hook.events[-1] == ("exit", "AND", True, 0)


class TestPrintHook:
    def test_output(self, capsys):
        with use_tracing(PrintHook()):
            (Char("a") | Char("b")).match("b")
        out = capsys.readouterr().out
        assert "-> OR @0" in out
        assert "  -> Char('a') @0" in out
        assert "<- Char('b') ✔" in out
        assert "<- Char('a') ✗" in out

    def test_show_input(self, capsys):
        with use_tracing(PrintHook(show_input=True)):
            Char("a").match("abc")
        assert "b'abc'" in capsys.readouterr().out


class TestLoggingHook:
    def test_logs_at_debug(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="pegcomb"):
            with use_tracing(LoggingHook()):
                Char("a").match("a")
        assert "[ENTER] Char('a') at 0 (depth=0)" in caplog.text
        assert "[EXIT] Char('a') -> OK" in caplog.text

    def test_custom_logger_and_level(self, caplog):
        logger = logging.getLogger("myparser")
        with caplog.at_level(logging.INFO, logger="myparser"):
            with use_tracing(LoggingHook(logger, level=logging.INFO)):
                Char("a").match("b")
        assert "[EXIT] Char('a') -> FAIL" in caplog.text

    def test_logs_errors(self, caplog):
        @matcher
        def broken(cursor):
            raise ValueError("bad input")

        with use_tracing(LoggingHook()), pytest.raises(ValueError):
            broken.match("x")
        assert "[ERROR] Fn(broken) -> bad input" in caplog.text


class TestOpenTelemetryHook:
    def test_requires_opentelemetry(self, monkeypatch):
        monkeypatch.setattr(tracing, "_HAS_OPENTELEMETRY", False)
        with pytest.raises(ImportError, match="opentelemetry-api"):
            OpenTelemetryHook(MagicMock())

    def test_spans(self):
        pytest.importorskip("opentelemetry.trace")
        tracer = MagicMock()
        hook = OpenTelemetryHook(tracer, primitives_as_events=False)

        with use_tracing(hook):
            (Char("a") & Char("b")).match("ab")

        names = [c.args[0] for c in tracer.start_span.call_args_list]
        assert names == ["AND", "Char('a')", "Char('b')"]
        assert tracer.start_span.return_value.end.call_count == 3
        assert hook._span_stack == []

    def test_primitives_as_events(self):
        pytest.importorskip("opentelemetry.trace")
        tracer = MagicMock()
        hook = OpenTelemetryHook(tracer)

        with use_tracing(hook):
            (Char("a") & Char("b")).match("ab")

        assert tracer.start_span.call_count == 1
        span = tracer.start_span.return_value
        assert span.add_event.call_count == 2
        span.set_attribute.assert_any_call("pegcomb.operator", "AND")

    def test_error_status(self):
        pytest.importorskip("opentelemetry.trace")
        tracer = MagicMock()
        hook = OpenTelemetryHook(tracer)

        @matcher
        def broken(cursor):
            raise RuntimeError("boom")

        with use_tracing(hook), pytest.raises(RuntimeError):
            broken.match("x")

        span = tracer.start_span.return_value
        span.record_exception.assert_called_once()
        assert hook._span_stack == []
