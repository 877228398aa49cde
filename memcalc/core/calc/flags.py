from __future__ import annotations

from typing import List


_QUOTES = ("'", '"')


def parse_flags(text: str) -> List[str]:
    """Split a JVM options string into tokens.

    - whitespace outside quotes separates tokens (runs collapse)
    - ' or " opens a span closed only by the same character; closing the
      span ends the token, so "" yields an empty token
    - a backslash takes the next character literally, in or out of quotes
    - an unterminated quote is flushed at end of input, never an error
    """
    if not text:
        return []

    tokens: List[str] = []
    current: List[str] = []
    quote = ""
    escaped = False

    for ch in text:
        if escaped:
            current.append(ch)
            escaped = False
        elif ch == "\\":
            escaped = True
        elif not quote and ch in _QUOTES:
            quote = ch
        elif quote and ch == quote:
            tokens.append("".join(current))
            current = []
            quote = ""
        elif not quote and ch.isspace():
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(ch)

    if current:
        tokens.append("".join(current))

    return tokens
