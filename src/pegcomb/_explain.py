"""Plain-text rendering of a grammar tree."""

from __future__ import annotations

from pegcomb._core import Check, Combinator, _And, _Not, _Or
from pegcomb._hooks import Fn, Hook, SpanHook, TextHook
from pegcomb._primitives import Any, Char, Eps, Never, Range, Str
from pegcomb._registry import Ref
from pegcomb._repetition import OneOrMore, Until, ZeroOrMore
from pegcomb._types import TERMINATOR


def explain(pattern: Combinator) -> str:
    """
    Generate a readable outline of what a pattern matches.

    Rule references are shown by key and not expanded, so recursive
    grammars render finitely.

    Example:
        print(explain(Char("a") | (Str("bc") & ~Char("d"))))

        # Output:
        # FIRST of:
        #   • 'a'
        #   • ALL of:
        #     • "bc"
        #     • NOT: 'd'
    """
    lines: list[str] = []
    stack: list[tuple[Combinator, int]] = [(pattern, 0)]

    while stack:
        node, depth = stack.pop()
        label, children = _parts(node)
        prefix = "  " * depth + ("• " if depth else "")

        if len(children) == 1 and not _parts(children[0])[1]:
            lines.append(f"{prefix}{label}: {_parts(children[0])[0]}")
            continue

        lines.append(f"{prefix}{label}:" if children else f"{prefix}{label}")
        for child in reversed(children):
            stack.append((child, depth + 1))

    return "\n".join(lines)


def _parts(node: Combinator) -> tuple[str, tuple[Combinator, ...]]:
    """Return (label, children) for one node."""
    if isinstance(node, _And):
        return "ALL of", node.items
    if isinstance(node, _Or):
        return "FIRST of", node.items
    if isinstance(node, _Not):
        return "NOT", (node.inner,)
    if isinstance(node, Check):
        return "CHECK", (node.inner,)
    if isinstance(node, ZeroOrMore):
        return "ZERO OR MORE of", (node.inner,)
    if isinstance(node, OneOrMore):
        return "ONE OR MORE of", (node.inner,)
    if isinstance(node, Until):
        return "SCAN UNTIL", (node.inner,)
    # Hook subclasses before Hook
    if isinstance(node, TextHook):
        return f"ON TEXT -> {node._callback_name()}", (node.inner,)
    if isinstance(node, SpanHook):
        return f"ON SPAN -> {node._callback_name()}", (node.inner,)
    if isinstance(node, Hook):
        return f"ON MATCH -> {node._callback_name()}", (node.inner,)
    if isinstance(node, Ref):
        return f"rule {node.key!r}", ()
    if isinstance(node, Fn):
        return f"call {node.name}", ()
    if isinstance(node, Char):
        if node.c == TERMINATOR:
            return "end of input", ()
        return repr(chr(node.c)), ()
    if isinstance(node, Range):
        return f"{chr(node.lo)!r}..{chr(node.hi)!r}", ()
    if isinstance(node, Str):
        return f'"{node.seq.decode("utf-8", errors="replace")}"', ()
    if isinstance(node, Eps):
        return "nothing", ()
    if isinstance(node, Any):
        return "any byte", ()
    if isinstance(node, Never):
        return "never", ()
    return repr(node), ()
