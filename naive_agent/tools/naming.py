"""Identifier canonicalization and documentation rewriting."""

import re


def to_snake_case(name: str) -> str:
    """Convert an identifier to lower snake_case.

    A separator goes before an uppercase letter that follows a lowercase
    letter or digit, and before a digit that follows a letter:
    ``HelloWorld -> hello_world``, ``helloWorld123 -> hello_world_123``.
    The result contains neither uppercase letters nor letter-digit
    adjacency, so converting it again is a no-op.
    """

    chars = []
    prev = ""
    for ch in name:
        if prev and (
            (ch.isupper() and (prev.islower() or prev.isdigit()))
            or (ch.isdigit() and prev.isalpha())
        ):
            chars.append("_")
        chars.append(ch.lower())
        prev = ch
    return "".join(chars)


def replace_whole_word(text: str, old: str, new: str) -> str:
    """Replace every occurrence of ``old`` not inside a longer identifier."""

    if not old:
        return text
    pattern = re.compile(r"(?<!\w)" + re.escape(old) + r"(?!\w)")
    return pattern.sub(lambda _: new, text)
