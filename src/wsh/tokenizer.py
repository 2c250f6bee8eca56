"""Shell-like tokenizer honoring quotes and backslash escapes.

Unterminated quotes and a trailing backslash are not errors: the open quote
simply runs to the end of the line and a dangling escape is dropped.
"""

from __future__ import annotations

QUOTE_CHARS = frozenset({'"', "'"})
WHITESPACE = frozenset({" ", "\t"})


def tokenize(line: str) -> list[str]:
    """Split *line* into tokens.

    Rules, in priority order:

    * A character preceded by ``\\`` is taken literally.
    * Outside quotes, ``"`` or ``'`` opens a quoted run closed only by the
      same character. The quote characters themselves are not kept.
    * Outside quotes, space and tab end the current token.
    """
    tokens: list[str] = []
    current: list[str] = []
    quote: str | None = None
    escape_next = False

    for ch in line:
        if escape_next:
            current.append(ch)
            escape_next = False
            continue

        if ch == "\\":
            escape_next = True
        elif quote is None and ch in QUOTE_CHARS:
            quote = ch
        elif quote is not None and ch == quote:
            quote = None
        elif quote is None and ch in WHITESPACE:
            if current:
                tokens.append("".join(current))
                current = []
        else:
            current.append(ch)

    if current:
        tokens.append("".join(current))

    return tokens


def first_token(line: str) -> str | None:
    """Return the first token of *line*, or None for a blank line."""
    tokens = tokenize(line)
    return tokens[0] if tokens else None
