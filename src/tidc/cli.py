"""tidc CLI entry point.

Reads one log line per input line and writes one JSON object per output line::

    tidc < tikv.log
    tidc zap-object --input fields.log
    tidc uniformed-log -i tikv.log --workers 0 --on-error skip
"""
from __future__ import annotations

import io
import logging
import os
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from .config import settings
from .decoders.registry import UnknownDecoderError, get_decoder
from .parser.errors import ParseError

err_console = Console(stderr=True)

# Lines end at "\n" only, and undecodable bytes become U+FFFD, matching the
# byte-level reader used with --workers.
_READ_OPTS = {"encoding": "utf-8", "errors": "replace", "newline": "\n"}

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _setup_logging(level: str) -> None:
    logger = logging.getLogger("tidc")
    logger.setLevel(level.upper())
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        logger.addHandler(RichHandler(console=err_console, show_path=False))


def _stdin_lines() -> io.TextIOWrapper:
    return io.TextIOWrapper(sys.stdin.buffer, **_READ_OPTS)


def _silence_stdout() -> None:
    """Point stdout at devnull so the interpreter's final flush can't fail again."""
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, sys.stdout.fileno())


def _report_parse_error(exc: ParseError) -> None:
    err_console.print(f"[red]Error during parsing log:[/red] {escape(str(exc))}")
    for note in getattr(exc, "__notes__", ()):
        err_console.print(f"[dim]{escape(note)}[/dim]")


@click.command()
@click.version_option(version="0.1.0", prog_name="tidc")
@click.argument("decoder", required=False, default=None)
@click.option(
    "--input", "-i", "input_path", default="-",
    type=click.Path(exists=True, dir_okay=False, allow_dash=True, path_type=Path),
    help="Log file to decode (default: stdin).",
)
@click.option(
    "--on-error", default=None,
    type=click.Choice(["fail", "skip"], case_sensitive=False),
    help="Stop at the first undecodable line, or skip it.  [default: fail]",
)
@click.option(
    "--workers", "-w", default=None, type=click.IntRange(min=0),
    help="Worker processes for file input (0 = all cores).  [default: 1]",
)
@click.option(
    "--log-level", default=None,
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    help="Diagnostics level on stderr.  [default: WARNING]",
)
def main(
    decoder: str | None,
    input_path: Path,
    on_error: str | None,
    workers: int | None,
    log_level: str | None,
) -> None:
    """A minimal decoder for the TiKV uniformed log format.

    DECODER is one of 'uniformed-log' (the default) or 'zap-object'.
    Options not given on the command line fall back to TIDC_* environment
    variables.
    """
    decoder_name = decoder or settings.decoder
    policy = (on_error or settings.on_error).lower()
    n_workers = settings.workers if workers is None else workers
    _setup_logging(log_level or settings.log_level)

    try:
        selected = get_decoder(decoder_name)
    except UnknownDecoderError as exc:
        raise click.BadParameter(str(exc), param_hint="DECODER") from None

    from_stdin = str(input_path) == "-"
    if n_workers != 1 and from_stdin:
        raise click.UsageError("--workers needs a file given with --input")

    try:
        if n_workers != 1:
            from .perf.parallel_decoder import decode_file_parallel

            for out in decode_file_parallel(
                str(input_path), selected.name, workers=n_workers or None, on_error=policy
            ):
                sys.stdout.write(out)
                sys.stdout.write("\n")
        else:
            if from_stdin:
                stats = selected.decode_lines(_stdin_lines(), sys.stdout, policy)
            else:
                with input_path.open(**_READ_OPTS) as fh:
                    stats = selected.decode_lines(fh, sys.stdout, policy)
            if stats.skipped:
                err_console.print(f"[dim]Skipped {stats.skipped} undecodable lines[/dim]")
        sys.stdout.flush()
    except ParseError as exc:
        _report_parse_error(exc)
        sys.exit(1)
    except BrokenPipeError:
        # The reader went away (e.g. `tidc < log | head`); that is not an error.
        _silence_stdout()
        sys.exit(0)


if __name__ == "__main__":
    main()
