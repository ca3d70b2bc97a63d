"""Grammar-agnostic cursor over one line of log text.

The scanner knows nothing about the log format: it only offers the
lexical primitives (peek, consume, skip, quoted and unquoted strings,
bracketed sub-parsing) the grammar layer in ``artifacts`` is built from.

A scanner is owned by exactly one parse call and must not be shared.
"""
from __future__ import annotations

from typing import Callable, TypeVar

from .errors import EmptyInputError, UnexpectedTokenError

T = TypeVar("T")
CharPredicate = Callable[[str], bool]

# Width of the diagnostic window around the cursor.
_HINT_BEFORE = 5
_HINT_AFTER = 10


def char_needs_quote(ch: str) -> bool:
    """Characters that terminate an unquoted token in bracketed records."""
    return ch <= "\x20" or ch in '="[]'


def char_needs_quote_in_object(ch: str) -> bool:
    """Stop characters for brace-delimited objects: also ``,``, ``{`` and ``}``."""
    return char_needs_quote(ch) or ch in ",{}"


class Scanner:
    """A mutable cursor over an immutable string.

    Usage::

        scanner = Scanner("[INFO] rest")
        level = scanner.in_bracket(lambda s: s.till_next_bracket())
        scanner.skip_space()
        assert scanner.remain == "rest"
    """

    __slots__ = ("_target", "_offset")

    def __init__(self, target: str) -> None:
        self._target = target
        self._offset = 0

    def __repr__(self) -> str:
        return f"Scanner(offset={self._offset}, remain={self.remain!r})"

    # ------------------------------------------------------------------
    # Cursor state
    # ------------------------------------------------------------------

    @property
    def target(self) -> str:
        return self._target

    @property
    def offset(self) -> int:
        return self._offset

    @property
    def remain(self) -> str:
        return self._target[self._offset:]

    def is_done(self) -> bool:
        return self._offset >= len(self._target)

    def peek_char(self) -> str | None:
        if self.is_done():
            return None
        return self._target[self._offset]

    def current_char(self) -> str:
        """Next character, or ``$`` at end of input."""
        ch = self.peek_char()
        return "$" if ch is None else ch

    # ------------------------------------------------------------------
    # Consuming
    # ------------------------------------------------------------------

    def consume(self, n: int) -> str:
        """Remove and return the next ``n`` characters."""
        end = self._offset + n
        if end > len(self._target):
            raise EmptyInputError()
        consumed = self._target[self._offset:end]
        self._offset = end
        return consumed

    def drain(self) -> str:
        return self.consume(len(self._target) - self._offset)

    def assert_current_is(self, expected: str) -> None:
        ch = self.peek_char()
        if ch is None:
            raise EmptyInputError()
        if ch != expected:
            raise self.unexpected(expected, ch)

    def consume_exact(self, expected: str) -> None:
        self.assert_current_is(expected)
        self._offset += 1

    def skip_until(self, pred: CharPredicate) -> None:
        """Advance to the first character matching ``pred`` (or to the end)."""
        target = self._target
        i = self._offset
        while i < len(target) and not pred(target[i]):
            i += 1
        self._offset = i

    def skip_while(self, pred: CharPredicate) -> None:
        self.skip_until(lambda ch: not pred(ch))

    def skip_space(self) -> None:
        self.skip_while(str.isspace)

    # ------------------------------------------------------------------
    # Tokens
    # ------------------------------------------------------------------

    def unquoted_string(self, stop: CharPredicate = char_needs_quote) -> str:
        """Consume up to the first stop character; the result may be empty."""
        start = self._offset
        self.skip_until(stop)
        return self._target[start:self._offset]

    def quoted_string(self) -> str:
        """Consume a ``"``-delimited string, delimiters included.

        A character right after a backslash is escaped and can never close
        the string. The opening quote is skipped the same way, since the
        scan starts in the escaping state.
        """
        target = self._target
        escaping = True
        for i in range(self._offset, len(target)):
            if escaping:
                escaping = False
                continue
            ch = target[i]
            if ch == '"':
                return self.consume(i + 1 - self._offset)
            if ch == "\\":
                escaping = True
        raise self.unexpected('"', "EOF")

    def till_next_bracket(self) -> str:
        """Consume up to, but not including, the next ``]``."""
        end = self._target.find("]", self._offset)
        if end < 0:
            raise EmptyInputError()
        return self.consume(end - self._offset)

    def in_bracket(self, inner: Callable[["Scanner"], T]) -> T:
        """Run ``inner`` between a ``[`` and a ``]``."""
        self.consume_exact("[")
        result = inner(self)
        self.consume_exact("]")
        return result

    # ------------------------------------------------------------------
    # Diagnostics
    # ------------------------------------------------------------------

    def context_before(self) -> str:
        if self._offset == 0:
            return "^"
        return self._target[max(0, self._offset - _HINT_BEFORE):self._offset]

    def context_after(self) -> str:
        return self._target[self._offset:self._offset + _HINT_AFTER]

    def hint(self) -> str:
        return f"{self.context_before()}>{self.current_char()}<{self.context_after()}"

    def unexpected(self, expected: str, got: str) -> UnexpectedTokenError:
        return UnexpectedTokenError(expected=expected, got=got, hint=self.hint())
