"""
pegcomb - Composable PEG Matchers

A Python library for building backtracking parsing-expression-grammar
parsers out of small composable matchers over a byte sequence, using
operator overloading. No grammar compilation step: a grammar is an ordinary
tree of values, matched top-down.

Operators:
    &  = sequence (match right from where left ended; short-circuits)
    |  = ordered choice (first alternative that matches wins)
    ~  = negative lookahead (never consumes)

Example:
    from pegcomb import Char, Registry, on_text, plus

    rules: Registry[str] = Registry()

    # A term is an 'a' or a parenthesized expression
    paren = "(" & rules.ref("expr") & ")"
    term = Char("a") | paren
    expr = plus(term)
    rules.bind("expr", expr)

    end = expr.match("(a)((a))a b")   # Cursor(pos=9, ...)

Callbacks fire as their pattern matches and are never rolled back, even if
an enclosing choice later abandons the branch.
"""

from __future__ import annotations

__version__ = "0.1.0"
__all__ = [
    # Input
    "Cursor",
    "TERMINATOR",
    "DEFAULT_ENCODING",
    # Core
    "Combinator",
    "Check",
    "check",
    "not_",
    "sequence",
    "choice",
    # Primitives
    "Eps",
    "Never",
    "Any",
    "Char",
    "Range",
    "Str",
    "eps",
    "any_byte",
    # Repetition
    "ZeroOrMore",
    "OneOrMore",
    "Until",
    "star",
    "plus",
    "until",
    "maybe",
    # Functions & callbacks
    "Fn",
    "matcher",
    "Hook",
    "SpanHook",
    "TextHook",
    "on_match",
    "on_span",
    "on_text",
    # Recursion
    "Registry",
    "Ref",
    # Errors
    "GrammarError",
    "DuplicateRuleError",
    "UnboundRuleError",
    # Tracing
    "TraceHook",
    "TraceConfig",
    "use_tracing",
    "run_traced",
    "PrintHook",
    "LoggingHook",
    "OpenTelemetryHook",
    # Explanation
    "explain",
    # Character classes
    "eof",
    "space",
    "tab",
    "carriage_return",
    "newline",
    "whitespace",
    "digit",
    "hexdigit",
    "lower",
    "upper",
    "alpha",
    "alphanum",
    "digits",
    "sign",
    "integer",
    "real",
]

from pegcomb._classes import (
    alpha,
    alphanum,
    carriage_return,
    digit,
    digits,
    eof,
    hexdigit,
    integer,
    lower,
    newline,
    real,
    sign,
    space,
    tab,
    upper,
    whitespace,
)
from pegcomb._core import Check, Combinator, check, choice, not_, sequence
from pegcomb._errors import DuplicateRuleError, GrammarError, UnboundRuleError
from pegcomb._explain import explain
from pegcomb._hooks import (
    Fn,
    Hook,
    SpanHook,
    TextHook,
    matcher,
    on_match,
    on_span,
    on_text,
)
from pegcomb._primitives import Any, Char, Eps, Never, Range, Str, any_byte, eps
from pegcomb._registry import Ref, Registry
from pegcomb._repetition import (
    OneOrMore,
    Until,
    ZeroOrMore,
    maybe,
    plus,
    star,
    until,
)
from pegcomb._tracing import (
    LoggingHook,
    OpenTelemetryHook,
    PrintHook,
    TraceConfig,
    TraceHook,
    run_traced,
    use_tracing,
)
from pegcomb._types import DEFAULT_ENCODING, TERMINATOR, Cursor
