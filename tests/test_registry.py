"""Tests for Registry and Ref: late-bound rules and recursive grammars."""

from __future__ import annotations

import logging

import pytest

from pegcomb import (
    Char,
    DuplicateRuleError,
    Fn,
    GrammarError,
    Ref,
    Registry,
    UnboundRuleError,
    digits,
    plus,
    sequence,
    star,
)


class TestRecursion:
    @pytest.fixture
    def expr(self):
        rules: Registry[int] = Registry()

        # A term is an 'a' or a parenthesized expression
        paren = "(" & rules.ref(0) & ")"
        term = Char("a") | paren
        # An expression is a non-empty sequence of terms
        expr = plus(term)
        rules.bind(0, expr)
        return expr

    def test_nested_parens(self, expr):
        end = expr.match("(a)((a))a(a)(((a))(a))b")
        assert chr(end.current) == "b"

    def test_unbalanced_stops_early(self, expr):
        end = expr.match("a(a")
        assert end.pos == 1

    def test_no_match(self, expr):
        assert expr.match("b") is None

    def test_mutual_recursion(self):
        rules: Registry[str] = Registry()

        # list  = '[' items? ']' ; items = value (',' value)* ; value = digits | list
        value = digits() | rules.ref("list")
        items = value & star("," & value)
        rules.bind("list", "[" & (items | "") & "]")

        end = rules.match("list", "[1,[2,3],[],[[4]]]")
        assert end is not None
        assert end.at_end

    def test_string_keys_and_tuples(self):
        rules: Registry[tuple] = Registry()
        ref = rules.ref(("expr", 1))
        rules.bind(("expr", 1), Char("x"))
        assert ref.match("x").pos == 1


class TestRegistryErrors:
    def test_duplicate_bind_raises(self):
        rules: Registry[str] = Registry()
        rules.bind("a", Char("a"))
        with pytest.raises(DuplicateRuleError, match="already bound"):
            rules.bind("a", Char("b"))

    def test_duplicate_keeps_first_binding(self):
        rules: Registry[str] = Registry()
        rules.bind("a", Char("a"))
        with pytest.raises(DuplicateRuleError):
            rules.bind("a", Char("b"))
        assert rules.match("a", "a").pos == 1

    def test_resolve_unbound_raises(self):
        rules: Registry[str] = Registry()
        with pytest.raises(UnboundRuleError) as exc_info:
            rules.resolve("missing")
        assert exc_info.value.key == "missing"

    def test_match_through_unbound_ref_raises(self):
        rules: Registry[str] = Registry()
        grammar = Char("a") & rules.ref("later")
        with pytest.raises(UnboundRuleError):
            grammar.match("ab")

    def test_unbound_ref_not_reached_is_fine(self):
        rules: Registry[str] = Registry()
        grammar = Char("x") & rules.ref("later")
        assert grammar.match("ab") is None

    def test_error_hierarchy(self):
        assert issubclass(DuplicateRuleError, GrammarError)
        assert issubclass(UnboundRuleError, GrammarError)
        assert issubclass(UnboundRuleError, LookupError)


class TestRegistryApi:
    def test_bind_returns_pattern(self):
        rules: Registry[str] = Registry()
        p = Char("a")
        assert rules.bind("a", p) is p

    def test_bind_plain_function(self):
        rules: Registry[str] = Registry()
        bound = rules.bind("skip", lambda cursor: cursor.advance())
        assert isinstance(bound, Fn)
        assert rules.match("skip", "xy").pos == 1

    def test_rule_decorator_uses_function_name(self):
        rules: Registry[str] = Registry()

        @rules.rule()
        def number(cursor):
            return digits().match(cursor)

        assert "number" in rules
        assert rules.match("number", "42x").pos == 2
        assert isinstance(number, Fn)

    def test_rule_decorator_explicit_key(self):
        rules: Registry[int] = Registry()

        @rules.rule(7)
        def anything(cursor):
            return cursor

        assert 7 in rules
        assert "anything" not in rules

    def test_len_and_contains(self):
        rules: Registry[str] = Registry()
        assert len(rules) == 0
        rules.bind("a", Char("a"))
        assert len(rules) == 1
        assert "a" in rules
        assert "b" not in rules

    def test_unbound_and_validate(self):
        rules: Registry[str] = Registry()
        rules.ref("x")
        rules.ref("y")
        assert rules.unbound() == ["x", "y"]
        with pytest.raises(UnboundRuleError) as exc_info:
            rules.validate()
        assert exc_info.value.keys == ("x", "y")

        rules.bind("x", Char("x"))
        rules.bind("y", Char("y"))
        assert rules.unbound() == []
        rules.validate()

    def test_ref_repr(self):
        rules: Registry[str] = Registry()
        assert repr(rules.ref("expr")) == "Ref('expr')"
        assert isinstance(rules.ref("expr"), Ref)

    def test_refs_compare_by_key(self):
        rules: Registry[str] = Registry()
        assert rules.ref("x") == rules.ref("x")
        assert hash(rules.ref("x")) == hash(rules.ref("x"))
        assert rules.ref("x") != rules.ref("y")

    def test_grammars_with_refs_are_equal(self):
        rules: Registry[str] = Registry()

        def build():
            return plus(Char("a") | ("(" & rules.ref("expr") & ")"))

        assert build() == build()
        assert len({build(), build()}) == 1

    def test_bind_logs_at_debug(self, caplog):
        rules: Registry[str] = Registry()
        with caplog.at_level(logging.DEBUG, logger="pegcomb._registry"):
            rules.bind("a", Char("a"))
        assert "Bound rule 'a'" in caplog.text

    def test_bind_logs_long_chain(self, caplog):
        rules: Registry[str] = Registry()
        with caplog.at_level(logging.DEBUG, logger="pegcomb._registry"):
            rules.bind("long", sequence(*["a"] * 3000))
        assert "Bound rule 'long'" in caplog.text
        assert rules.match("long", "a" * 3000).pos == 3000
