"""Parse errors raised by the scanner and the grammar layer.

Only two things can go wrong while scanning a line: a specific token was
required and something else turned up, or the input ran out.
"""
from __future__ import annotations


class ParseError(ValueError):
    """Base class for every failure while decoding a single line."""


class UnexpectedTokenError(ParseError):
    """A specific token was required but a different one (or EOF) was found.

    ``hint`` is a short window around the cursor, rendered as
    ``before>current<after``.
    """

    def __init__(self, expected: str, got: str, hint: str) -> None:
        # Keep every field in args so the error survives pickling into
        # and out of worker processes.
        super().__init__(expected, got, hint)
        self.expected = expected
        self.got = got
        self.hint = hint

    def __str__(self) -> str:
        return f"unexpected {self.got}, expecting {self.expected} (hint: `{self.hint}`)"


class EmptyInputError(ParseError):
    """Input exhausted where more was required."""

    def __str__(self) -> str:
        return "got empty string to parse"
