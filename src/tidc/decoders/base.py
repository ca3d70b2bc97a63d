"""Decoder Protocol and the line loop shared by every decoder."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Literal, Protocol, runtime_checkable

from ..parser.errors import ParseError
from ..json_writer import Sink

logger = logging.getLogger(__name__)

ErrorPolicy = Literal["fail", "skip"]


@dataclass
class DecodeStats:
    """How many lines were written out and how many were dropped."""

    decoded: int = 0
    skipped: int = 0


@runtime_checkable
class Decoder(Protocol):
    """Protocol for line decoders; duck-typed, no inheritance required."""

    @property
    def name(self) -> str:
        """Mode name used on the command line (e.g. 'zap-object')."""
        ...

    def decode_line(self, line: str) -> str:
        """Decode one line into one JSON document (no trailing newline).

        Raises ParseError when the line cannot be decoded.
        """
        ...

    def decode_lines(
        self, lines: Iterable[str], sink: Sink, on_error: ErrorPolicy = "fail"
    ) -> DecodeStats:
        """Decode a stream of lines, writing one JSON line per input line."""
        ...


def decode_lines(
    decoder: Decoder,
    lines: Iterable[str],
    sink: Sink,
    on_error: ErrorPolicy = "fail",
) -> DecodeStats:
    """Run ``decoder`` over ``lines`` and write the results to ``sink``.

    With ``on_error="fail"`` the first undecodable line raises its
    ParseError, annotated with the line number. With ``"skip"`` the line
    is logged and dropped.
    """
    stats = DecodeStats()
    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        try:
            out = decoder.decode_line(line)
        except ParseError as exc:
            if on_error == "fail":
                exc.add_note(f"line {lineno}: {line}")
                raise
            logger.warning("Skipping line %d: %s", lineno, exc)
            stats.skipped += 1
            continue
        sink.write(out)
        sink.write("\n")
        stats.decoded += 1
    return stats
