"""Decoder for brace-delimited zap objects: ``{a=1, "b c"="d e"}``."""
from __future__ import annotations

from typing import Iterable

from ..json_writer import Sink, to_json
from ..parser.artifacts import with_zap_object
from .base import DecodeStats, ErrorPolicy, decode_lines


class ZapObjectDecoder:
    """Decode zap object lines into flat JSON objects."""

    @property
    def name(self) -> str:
        return "zap-object"

    def decode_line(self, line: str) -> str:
        return with_zap_object(line, to_json)

    def decode_lines(
        self, lines: Iterable[str], sink: Sink, on_error: ErrorPolicy = "fail"
    ) -> DecodeStats:
        return decode_lines(self, lines, sink, on_error)
