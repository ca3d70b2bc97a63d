"""Multiprocessing-based decoder for large log files.

Lines share no state, so a file can be decoded in pieces:
    1. Split the file into N byte-range chunks (one per worker).
    2. Each worker decodes the whole lines that start inside its chunk
       and returns their JSON text.
    3. Results are concatenated in chunk order, so output order matches
       input order.

Usage::

    from tidc.perf.parallel_decoder import decode_file_parallel

    for out in decode_file_parallel("tikv.log", "uniformed-log", workers=8):
        print(out)
"""
from __future__ import annotations

import io
import os
from multiprocessing import Pool
from typing import Iterable, Iterator

from ..decoders.base import ErrorPolicy
from ..decoders.registry import get_decoder
from ..parser.errors import ParseError

# (path, start_byte, end_byte, decoder name, error policy)
_Chunk = tuple[str, int, int, str, ErrorPolicy]


def _iter_chunk_lines(path: str, start: int, end: int):
    """Yield the decoded text of every line that starts in [start, end)."""
    with open(path, "rb") as fh:
        # Align to the next newline boundary if we're mid-line
        if start > 0:
            fh.seek(start - 1)
            if fh.read(1) != b"\n":
                fh.readline()
        else:
            fh.seek(0)

        while fh.tell() < end:
            raw = fh.readline()
            if not raw:
                break
            yield raw.decode("utf-8", errors="replace")


def _decode_chunk(args: _Chunk) -> tuple[list[str], ParseError | None]:
    """Worker function: decode the lines of one chunk.

    A fatal line error is returned, not raised, together with the lines
    decoded before it.
    """
    path, start, end, decoder_name, on_error = args
    decoder = get_decoder(decoder_name)
    buf = io.StringIO()
    error: ParseError | None = None
    try:
        decoder.decode_lines(_iter_chunk_lines(path, start, end), buf, on_error)
    except ParseError as exc:
        error = exc
    # JSON output never holds a raw newline, so "\n" splits exactly per line.
    return buf.getvalue().split("\n")[:-1], error


def _split_file(path: str, n_chunks: int) -> list[tuple[int, int]]:
    """Divide a file into n_chunks byte ranges."""
    size = os.path.getsize(path)
    if size == 0:
        return []
    chunk_size = max(size // n_chunks, 1)
    chunks: list[tuple[int, int]] = []
    start = 0
    for i in range(n_chunks):
        end = start + chunk_size if i < n_chunks - 1 else size
        chunks.append((start, min(end, size)))
        start = end
        if start >= size:
            break
    return chunks


def decode_file_parallel(
    path: str,
    decoder_name: str,
    workers: int | None = None,
    on_error: ErrorPolicy = "fail",
) -> Iterator[str]:
    """Decode a log file using multiprocessing.

    Args:
        path:          Path to the log file.
        decoder_name:  Registered decoder mode (e.g. 'uniformed-log').
        workers:       Number of worker processes. Defaults to os.cpu_count().
        on_error:      Line error policy, applied inside each worker.

    Returns:
        Iterator over the JSON text of every decoded line, in input order.
        Under the "fail" policy, every line before the first bad one is
        yielded before its ParseError is raised.
    """
    get_decoder(decoder_name)  # fail fast on an unknown mode
    n = workers or os.cpu_count() or 4
    chunks: list[_Chunk] = [
        (path, start, end, decoder_name, on_error) for start, end in _split_file(path, n)
    ]
    return _iter_results(chunks, n)


def _iter_results(chunks: list[_Chunk], n: int) -> Iterator[str]:
    if not chunks:
        return

    if len(chunks) == 1:
        # Single chunk: skip multiprocessing overhead
        yield from _flatten([_decode_chunk(chunks[0])])
        return

    with Pool(processes=min(n, len(chunks))) as pool:
        yield from _flatten(pool.imap(_decode_chunk, chunks))


def _flatten(results: Iterable[tuple[list[str], ParseError | None]]) -> Iterator[str]:
    for outputs, error in results:
        yield from outputs
        if error is not None:
            raise error
