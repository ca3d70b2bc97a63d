"""Stream the value model out as JSON text.

Values are written straight to the sink; no intermediate tree is built.

Rendering rules:
    str                 JSON string with standard escaping
    Quoted              written verbatim, quotes included
    Unquoted            ``"`` + raw token + ``"``
    LogLevel            "debug" | "info" | "warn" | "error" | "fatal" | "<unknown>"
    FileLineRef         {"file": ..., "line": ...}
    None                null
    LogRecord           {"message", "level", "source", "time", "fields"}
    list[LogFieldRef]   object keyed by each field key (later duplicates win
                        once the text is loaded back)
    ZapObject           same as its list of fields
"""
from __future__ import annotations

import io
import json
import re
from typing import Any, Protocol

from .parser.artifacts import (
    FileLineRef,
    LogFieldRef,
    LogLevel,
    LogRecord,
    Quoted,
    Unquoted,
    ZapObject,
)

# Characters that cannot appear raw inside a JSON string.
_NEEDS_ESCAPE_RE = re.compile(r'["\\\x00-\x1f]')


class Sink(Protocol):
    def write(self, text: str, /) -> Any: ...


class JsonObjectBuilder:
    """Write one JSON object, key by key.

    Exactly one ``{`` and one ``}`` are written, whatever the number of
    fields::

        with JsonObjectBuilder(sink) as obj:
            obj.field("file", "main.rs")
            obj.field("line", "10")
    """

    def __init__(self, sink: Sink) -> None:
        self._sink = sink
        self._initial = True

    def __enter__(self) -> "JsonObjectBuilder":
        self._sink.write("{")
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if exc_type is None:
            self._sink.write("}")

    def key(self, key: Any) -> None:
        if not self._initial:
            self._sink.write(",")
        write_json(key, self._sink)
        self._sink.write(":")
        self._initial = False

    def field(self, key: Any, value: Any) -> None:
        self.key(key)
        write_json(value, self._sink)


def _write_unquoted(token: str, sink: Sink) -> None:
    # Backslash is not a stop character.
    if _NEEDS_ESCAPE_RE.search(token):
        sink.write(json.dumps(token, ensure_ascii=False))
        return
    sink.write('"')
    sink.write(token)
    sink.write('"')


def _write_fields(fields: list[LogFieldRef], sink: Sink) -> None:
    with JsonObjectBuilder(sink) as obj:
        for entry in fields:
            obj.field(entry.key, entry.value)


def write_json(value: Any, sink: Sink) -> None:
    """Write ``value`` to ``sink`` as JSON."""
    match value:
        case None:
            sink.write("null")
        case str():
            sink.write(json.dumps(value, ensure_ascii=False))
        case Quoted(span):
            sink.write(span)
        case Unquoted(span):
            _write_unquoted(span, sink)
        case LogLevel():
            write_json(value.value, sink)
        case FileLineRef(file=file, line=line):
            with JsonObjectBuilder(sink) as obj:
                obj.field("file", file)
                obj.field("line", line)
        case LogRecord():
            with JsonObjectBuilder(sink) as obj:
                obj.field("message", value.message)
                obj.field("level", value.level)
                obj.field("source", value.source)
                obj.field("time", value.time)
                obj.key("fields")
                _write_fields(value.fields, sink)
        case ZapObject(fields=fields):
            _write_fields(fields, sink)
        case list():
            _write_fields(value, sink)
        case _:
            raise TypeError(f"cannot render {type(value).__name__} as JSON")


def to_json(value: Any) -> str:
    """Render ``value`` to a string."""
    buf = io.StringIO()
    write_json(value, buf)
    return buf.getvalue()
