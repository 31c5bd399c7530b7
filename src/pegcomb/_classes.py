"""ASCII character classes and common lexical patterns."""

from __future__ import annotations

from pegcomb._core import Combinator
from pegcomb._primitives import Char, Range
from pegcomb._repetition import maybe, plus
from pegcomb._types import TERMINATOR


def eof() -> Char:
    """End-of-input assertion (matches the terminator without consuming)."""
    return Char(TERMINATOR)


def space() -> Char:
    return Char(" ")


def tab() -> Char:
    return Char("\t")


def carriage_return() -> Char:
    return Char("\r")


def newline() -> Char:
    return Char("\n")


def whitespace() -> Combinator:
    return space() | tab() | carriage_return() | newline()


def digit() -> Range:
    return Range("0", "9")


def hexdigit() -> Combinator:
    return Range("0", "9") | Range("a", "f") | Range("A", "F")


def lower() -> Range:
    return Range("a", "z")


def upper() -> Range:
    return Range("A", "Z")


def alpha() -> Combinator:
    return lower() | upper()


def alphanum() -> Combinator:
    return alpha() | digit()


def digits() -> Combinator:
    return plus(digit())


def sign() -> Combinator:
    return Char("+") | Char("-")


def integer() -> Combinator:
    """Optionally signed decimal integer: `[+-]?[0-9]+`."""
    return maybe(sign()) & digits()


def real() -> Combinator:
    """
    Decimal real with a mandatory point: `[+-]?[0-9]+\\.[0-9]*([eE][+-]?[0-9]+)?`.
    """
    exponent = (Char("e") | Char("E")) & maybe(sign()) & digits()
    return maybe(sign()) & digits() & "." & maybe(digits()) & maybe(exponent)
