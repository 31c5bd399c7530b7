"""Recursion registry: late-bound rules for self-referential grammars."""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import Any, Generic

from pegcomb._core import Combinator, _coerce, _step
from pegcomb._errors import DuplicateRuleError, UnboundRuleError
from pegcomb._hooks import Fn, MatchFn
from pegcomb._types import Cursor, K

logger = logging.getLogger(__name__)


@dataclass(frozen=True, repr=False)
class Ref(Combinator):
    """
    Indirection matcher: dispatches to whatever the registry holds for `key`.

    The lookup happens at match time, so a Ref can be placed in a grammar
    before its target exists. Refs are shared, not owned: every Ref to the
    same key reaches the same bound pattern. Refs compare by key.
    """

    registry: Registry[Any] = field(compare=False)
    key: Hashable

    leaf = False

    def _execute(self, cursor: Cursor) -> Cursor | None:
        return _step(self.registry.resolve(self.key), cursor)

    def __repr__(self) -> str:
        return f"Ref({self.key!r})"


class Registry(Generic[K]):
    """
    Key -> pattern table used to close recursive rules.

    Each key is bound exactly once, after the rule it names is fully built,
    and must be bound before any match can reach a Ref to it. Binding twice
    raises DuplicateRuleError; matching through an unbound key raises
    UnboundRuleError. There is no rebinding or scoping, and binding must not
    race with matching.

    Example:
        rules: Registry[str] = Registry()

        paren = "(" & rules.ref("expr") & ")"
        term = Char("a") | paren
        expr = plus(term)
        rules.bind("expr", expr)

        expr.match("(a)((a))a")
    """

    def __init__(self) -> None:
        self._rules: dict[K, Combinator] = {}
        self._referenced: dict[K, None] = {}

    def ref(self, key: K) -> Ref:
        """Return an indirection matcher for `key` (bound now or later)."""
        self._referenced.setdefault(key, None)
        return Ref(self, key)

    def bind(self, key: K, pattern: Combinator | MatchFn) -> Combinator:
        """
        Bind `key` to `pattern`. Plain functions are wrapped in Fn.

        Returns the bound pattern so binding can be used inline.
        """
        if key in self._rules:
            raise DuplicateRuleError(key)
        bound = _coerce(pattern)
        self._rules[key] = bound
        logger.debug("Bound rule %r -> %r", key, bound)
        return bound

    def resolve(self, key: K) -> Combinator:
        """Return the pattern bound to `key`."""
        try:
            return self._rules[key]
        except KeyError:
            raise UnboundRuleError(key) from None

    def rule(self, key: K | None = None) -> Callable[[MatchFn], Fn]:
        """
        Decorator to bind a cursor function as a rule.

        The key defaults to the function's name.

        Example:
            reg: Registry[str] = Registry()

            @reg.rule()
            def number(cursor):
                return digits().match(cursor)

            reg.match("number", "42")
        """

        def decorator(fn: MatchFn) -> Fn:
            matcher = Fn(fn, fn.__name__)
            self.bind(fn.__name__ if key is None else key, matcher)  # type: ignore[arg-type]
            return matcher

        return decorator

    def match(self, key: K, src: Any) -> Cursor | None:
        """Match the rule bound to `key` at the start of `src`."""
        return self.resolve(key).match(src)

    def unbound(self) -> list[K]:
        """Keys handed out by ref() that have not been bound yet."""
        return [key for key in self._referenced if key not in self._rules]

    def validate(self) -> None:
        """Raise UnboundRuleError if any referenced key is still unbound."""
        missing = self.unbound()
        if missing:
            raise UnboundRuleError(*missing)

    def __contains__(self, key: object) -> bool:
        return key in self._rules

    def __len__(self) -> int:
        return len(self._rules)

    def __repr__(self) -> str:
        return f"Registry({list(self._rules)!r})"
