"""Grammar layer: the value model and the two top-level line formats.

Uniformed log (one record per line)::

    [time] [LEVEL] [file:line] [message] [key=value] ["quoted key"="value"] ...

Zap object (a flat list of pairs)::

    {key=value, "quoted key"="quoted value"}

Every textual value is a slice of the line being decoded. Records are
built once per parse call and handed to a callback (``with_log_record``,
``with_zap_object``); nothing is shared across lines.
"""
from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, ClassVar, TypeVar

from .errors import EmptyInputError, ParseError
from .scanner import CharPredicate, Scanner, char_needs_quote, char_needs_quote_in_object

logger = logging.getLogger(__name__)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Value model
# ---------------------------------------------------------------------------

class LogLevel(Enum):
    """Closed set of log levels; the value is the serialized form."""

    DEBUG = "debug"
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"
    UNKNOWN = "<unknown>"

    @classmethod
    def from_str(cls, text: str) -> "LogLevel":
        """Exact-match lookup; anything unrecognised is UNKNOWN, never an error."""
        return _LEVELS_BY_NAME.get(text, cls.UNKNOWN)

    @classmethod
    def scan(cls, scanner: Scanner) -> "LogLevel":
        return cls.from_str(scanner.in_bracket(Scanner.till_next_bracket))


_LEVELS_BY_NAME = {
    "DEBUG": LogLevel.DEBUG,
    "INFO": LogLevel.INFO,
    "WARN": LogLevel.WARN,
    "ERROR": LogLevel.ERROR,
    "FATAL": LogLevel.FATAL,
}


@dataclass(frozen=True)
class LogStr(ABC):
    """A string token that remembers whether it was quoted in the log.

    Use the ``Quoted`` and ``Unquoted`` subclasses; ``span`` is the exact
    slice of the input (a quoted span keeps its ``"`` delimiters).
    """

    span: str

    @staticmethod
    def from_str(text: str) -> "LogStr":
        if text.startswith('"'):
            return Quoted(text)
        return Unquoted(text)

    @staticmethod
    def scan(scanner: Scanner, stop: CharPredicate = char_needs_quote) -> "LogStr":
        ch = scanner.peek_char()
        if ch is None:
            raise EmptyInputError()
        if ch == '"':
            return LogStr.from_str(scanner.quoted_string())
        return LogStr.from_str(scanner.unquoted_string(stop))

    @property
    @abstractmethod
    def text(self) -> str:
        """The logical value of the token."""


@dataclass(frozen=True)
class Quoted(LogStr):
    """A token that carried its own quotes; ``span`` includes them."""

    @property
    def text(self) -> str:
        """Unescaped contents. Falls back to the raw inner text when the
        log used an escape JSON does not know (e.g. ``\\x00``).
        """
        try:
            return json.loads(self.span, strict=False)
        except ValueError:
            return self.span[1:-1]


@dataclass(frozen=True)
class Unquoted(LogStr):
    """A bare token. The empty token is always Unquoted("")."""

    @property
    def text(self) -> str:
        return self.span


@dataclass(frozen=True)
class FileLineRef:
    """Source location, split at the last colon of ``file:line``."""

    UNKNOWN: ClassVar[str] = "<unknown>"

    file: str
    line: str

    @classmethod
    def from_str(cls, text: str) -> "FileLineRef | None":
        """Return None for ``<unknown>`` and for text without any colon."""
        if text == cls.UNKNOWN:
            return None
        file, sep, line = text.rpartition(":")
        if not sep:
            return None
        return cls(file=file, line=line)

    @classmethod
    def scan(cls, scanner: Scanner) -> "FileLineRef | None":
        return cls.from_str(scanner.in_bracket(Scanner.till_next_bracket))


@dataclass(frozen=True)
class LogFieldRef:
    """One ``key=value`` pair. No whitespace is allowed around ``=``."""

    key: LogStr
    value: LogStr

    @classmethod
    def scan(cls, scanner: Scanner, stop: CharPredicate = char_needs_quote) -> "LogFieldRef":
        key = LogStr.scan(scanner, stop)
        scanner.consume_exact("=")
        value = LogStr.scan(scanner, stop)
        return cls(key=key, value=value)

    @classmethod
    def scan_bracketed(cls, scanner: Scanner) -> "LogFieldRef":
        return scanner.in_bracket(cls.scan)


# ---------------------------------------------------------------------------
# Top-level structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class LogRecord:
    """One line of the uniformed log format.

    Attributes:
        level:    Parsed level; unrecognised names become UNKNOWN.
        time:     Raw contents of the first bracket, not interpreted.
        message:  The fourth bracket, quoted or bare.
        source:   None for ``<unknown>`` or a location without a colon.
        fields:   Trailing pairs in input order. Duplicate keys are kept.
    """

    level: LogLevel
    time: str
    message: LogStr
    source: FileLineRef | None
    fields: list[LogFieldRef] = field(default_factory=list)

    @classmethod
    def scan(cls, scanner: Scanner) -> "LogRecord":
        # Any failure in the fixed header is fatal for the line.
        time = scanner.in_bracket(Scanner.till_next_bracket)
        scanner.skip_space()
        level = LogLevel.scan(scanner)
        scanner.skip_space()
        source = FileLineRef.scan(scanner)
        scanner.skip_space()
        message = scanner.in_bracket(LogStr.scan)
        scanner.skip_space()

        fields: list[LogFieldRef] = []
        while not scanner.is_done():
            try:
                fields.append(LogFieldRef.scan_bracketed(scanner))
            except ParseError as exc:
                logger.warning(
                    "Skipping malformed field: %s (log = %s)", exc, scanner.target
                )
                scanner.skip_until(lambda ch: ch == "]")
                if scanner.is_done():
                    break
                scanner.consume_exact("]")
            scanner.skip_space()
        return cls(level=level, time=time, message=message, source=source, fields=fields)


@dataclass(frozen=True)
class ZapObject:
    """A brace-delimited, comma-separated list of pairs."""

    fields: list[LogFieldRef] = field(default_factory=list)

    @classmethod
    def scan(cls, scanner: Scanner) -> "ZapObject":
        scanner.consume_exact("{")
        scanner.skip_space()
        if scanner.peek_char() == "}":
            scanner.consume(1)
            return cls()

        fields: list[LogFieldRef] = []
        first = True
        while True:
            if not first:
                scanner.skip_space()
                ch = scanner.peek_char()
                if ch is None:
                    raise scanner.unexpected("`,` or `}`", "EOF")
                if ch == "}":
                    scanner.consume(1)
                    return cls(fields=fields)
                if ch != ",":
                    raise scanner.unexpected("`,` or `}`", ch)
                scanner.consume(1)
                scanner.skip_space()
            first = False
            fields.append(LogFieldRef.scan(scanner, char_needs_quote_in_object))


# ---------------------------------------------------------------------------
# Orchestration
# ---------------------------------------------------------------------------

def with_log_record(line: str, callback: Callable[[LogRecord], T]) -> T:
    """Parse ``line`` as a uniformed log record and pass it to ``callback``.

    Raises ParseError when the fixed header (time, level, source, message)
    cannot be parsed.
    """
    return callback(LogRecord.scan(Scanner(line)))


def with_zap_object(line: str, callback: Callable[[ZapObject], T]) -> T:
    """Parse ``line`` as a zap object and pass it to ``callback``."""
    return callback(ZapObject.scan(Scanner(line)))
