"""
Example: tag balancing with external state

The grammar only recognizes tags; hooks push and pop names on a stack kept
outside the grammar. A document can match completely and still be invalid,
so validity is read from the stack after matching.
"""

from dataclasses import dataclass, field

from pegcomb import Char, Str, alphanum, check, on_text, plus


@dataclass
class TagStack:
    tags: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def open(self, tag: str) -> None:
        self.tags.append(tag)

    def close(self, tag: str) -> None:
        if not self.tags:
            self.errors.append(f"</{tag}> closes nothing")
        elif self.tags[-1] != tag:
            self.errors.append(f"</{tag}> closes <{self.tags[-1]}>")
        else:
            self.tags.pop()

    @property
    def valid(self) -> bool:
        return not self.errors and not self.tags


def check_tags(document: str) -> TagStack:
    stack = TagStack()
    name = plus(alphanum())
    # The '>' lookahead runs before the hook fires, so a self-closing tag
    # never reaches the push
    parser = plus(
        (Char("<") & name & "/>")
        | (Char("<") & on_text(name & check(">"), stack.open) & ">")
        | (Str("</") & on_text(name & check(">"), stack.close) & ">")
    )
    end = parser.match(document)
    if end is None or not end.at_end:
        stack.errors.append("unrecognized input")
    return stack


if __name__ == "__main__":
    for doc in [
        "<tag1><tag2><tag3/><tag4/></tag2></tag1>",
        "<tag1><tag2><tag3/><tag4/></tag1></tag2>",
        "<tag1><tag2></tag2>",
    ]:
        result = check_tags(doc)
        print(f"{doc}: {'valid' if result.valid else result.errors or result.tags}")
