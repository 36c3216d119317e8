"""
Join and split command line arguments using shell-like quoting.

Arguments containing whitespace are quoted, and quote literals are escaped
with a backslash. This is the syntax used by IDE "raw command line" editors:
it is enough to round-trip an argument vector through a single text field,
but it is *not* a shell grammar (no pipes, globs, or variable expansion).

Note that this does not work for `--flag=value` style options; use
`--flag value` instead, where `value` is quoted if it contains spaces.
"""

from __future__ import annotations

from typing import Iterable

_WHITESPACE = frozenset(" \t\n\r")
_QUOTE = '"'
_ESCAPE = "\\"


class ParseError(ValueError):
    """Raised by a strict split() when a quoted span is never closed."""

    def __init__(self, command: str, position: int) -> None:
        super().__init__(f"Unterminated quote at position {position}: {command!r}")
        self.command = command
        self.position = position


def quote(arg: str) -> str:
    escaped = arg.replace(_QUOTE, _ESCAPE + _QUOTE)
    if not arg or any(c in _WHITESPACE for c in arg):
        return _QUOTE + escaped + _QUOTE
    return escaped


def join(args: Iterable[str]) -> str:
    """
    Join arguments into a single command line string.

    Empty arguments are rendered as `""` so that they survive split().
    """
    return " ".join(quote(str(a)) for a in args)


def split(command: str, *, strict: bool = False) -> list[str]:
    """
    Split a command line string into arguments.

    Arguments are split on runs of whitespace. Quoted whitespace is
    preserved, and `\\"` is a literal quote both inside and outside of a
    quoted span. Any other backslash is taken literally.

    An unterminated quote makes the rest of the string part of the last
    argument, unless `strict` is set, in which case ParseError is raised.
    """
    args: list[str] = []
    token: list[str] = []
    in_token = False  # a quoted empty span still produces an argument
    in_quotes = False
    quote_pos = -1
    i = 0
    n = len(command)
    while i < n:
        c = command[i]
        if c == _ESCAPE and i + 1 < n and command[i + 1] == _QUOTE:
            token.append(_QUOTE)
            in_token = True
            i += 2
            continue
        if c == _QUOTE:
            in_quotes = not in_quotes
            quote_pos = i
            in_token = True
        elif c in _WHITESPACE and not in_quotes:
            if in_token:
                args.append("".join(token))
                token = []
                in_token = False
        else:
            token.append(c)
            in_token = True
        i += 1

    if in_quotes and strict:
        raise ParseError(command, quote_pos)
    if in_token:
        args.append("".join(token))
    return args
