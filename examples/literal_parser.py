"""
Example: classifying literal tokens with ordered choice and lookahead

Shows how grammar order decides between overlapping alternatives, how a
non-consuming delimiter check keeps the integer rule from claiming the "0"
of "0x1F", and how text hooks carry results out of the grammar.
"""

from pegcomb import (
    check,
    eof,
    hexdigit,
    integer,
    on_text,
    plus,
    real,
    until,
    whitespace,
)


def literal_parser():
    """Return a function src -> (rest or None, description)."""

    def parse(src):
        result = "Not Found."

        def found(kind):
            def record(text):
                nonlocal result
                result = f"{kind}: {text}"

            return record

        # A delimiter is required, but Check leaves it in the input
        delim = check(whitespace() | eof())

        # '|' keeps the first alternative that matches:
        #  - integers would match the 0 in hex numbers
        #  - the integral part of a real would match as an integer
        literal = (
            on_text("0x" & plus(hexdigit() & hexdigit()) & delim, found("Hex"))
            | on_text(real() & delim, found("Real"))
            | on_text(integer() & delim, found("Int"))
            | ('"' & on_text(until('"'), found("Str")) & '"')
        )

        end = literal.match(src)
        if end is None:
            return None, result
        return end.rest().decode(), result

    return parse


if __name__ == "__main__":
    parser = literal_parser()
    for sample in ['"What\'s up?" and some more stuff', "0x1F rest", "3.5e2", "42 x", "?"]:
        rest, token = parser(sample)
        print(f"Result: {token}")
        print(f"Remaining: {rest if rest is not None else 'invalid'}")
