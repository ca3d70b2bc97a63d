"""Decoder for the bracketed uniformed log format.

    [2021-01-01T00:00:00] [INFO] [src/main.rs:10] ["hello world"] [a=b]

becomes

    {"message":"hello world","level":"info","source":{"file":"src/main.rs","line":"10"},
     "time":"2021-01-01T00:00:00","fields":{"a":"b"}}
"""
from __future__ import annotations

from typing import Iterable

from ..json_writer import Sink, to_json
from ..parser.artifacts import with_log_record
from .base import DecodeStats, ErrorPolicy, decode_lines


class UniformedLogDecoder:
    """Decode uniformed log lines into JSON records."""

    @property
    def name(self) -> str:
        return "uniformed-log"

    def decode_line(self, line: str) -> str:
        return with_log_record(line, to_json)

    def decode_lines(
        self, lines: Iterable[str], sink: Sink, on_error: ErrorPolicy = "fail"
    ) -> DecodeStats:
        return decode_lines(self, lines, sink, on_error)
