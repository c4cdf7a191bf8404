from __future__ import annotations

# Characters allowed to follow a name token for it to count as a match.
NAME_TERMINATORS = frozenset(" \t\n\r\x0b\x0c\xa0>")


def as_text(buffer: bytes | bytearray | memoryview) -> str:
    """Decode one byte to one character so text offsets are byte offsets."""
    return bytes(buffer).decode("latin-1")


def find_token(text: str, literal: str, bounded: bool = True, start: int = 0) -> int:
    """Return the offset of the first ``literal`` at or after ``start``, or -1.

    When ``bounded`` the literal must be followed by whitespace, ``>`` or the
    end of the text, so ``/JS`` does not match inside ``/JSFoo`` or ``/JS)``.
    """
    position = text.find(literal, start)
    while position != -1:
        if not bounded:
            return position
        after = position + len(literal)
        if after == len(text) or text[after] in NAME_TERMINATORS:
            return position
        position = text.find(literal, position + 1)
    return -1


def count_token(text: str, literal: str) -> int:
    count = 0
    position = find_token(text, literal)
    while position != -1:
        count += 1
        position = find_token(text, literal, start=position + len(literal))
    return count
