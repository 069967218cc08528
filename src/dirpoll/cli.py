"""Command-line interface for dirpoll."""

from __future__ import annotations

import argparse
import json
import signal
import sys
import threading
from collections.abc import Sequence
from dataclasses import replace
from pathlib import Path
from typing import IO, NoReturn

from rich.console import Console
from rich.markup import escape

from dirpoll import __version__
from dirpoll.config import Config, load_config
from dirpoll.logging import get_logger, setup_logging
from dirpoll.watching import ChangeCallback, ChangeEvent, DirectoryPoller, InvalidRoot

log = get_logger("cli")

console = Console(stderr=True, soft_wrap=True)


class _Parser(argparse.ArgumentParser):
    """ArgumentParser that exits with status 1 on bad usage."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(1, f"{self.prog}: error: {message}\n")


def _positive_float(value: str) -> float:
    try:
        number = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"not a number: {value!r}") from None
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be positive: {value!r}")
    return number


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = _Parser(
        prog="dirpoll",
        description="Watch directories and print one line per created, modified or deleted file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        metavar="PATH",
        help="Directory to watch (repeat to watch several)",
    )
    parser.add_argument(
        "-i", "--interval",
        type=_positive_float,
        help="Seconds between polls (default: from config, else 1.0)",
    )
    parser.add_argument(
        "--recursive",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Watch subdirectories too (default: yes)",
    )
    parser.add_argument(
        "--track-directories",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Report directories themselves as entries",
    )
    parser.add_argument(
        "--track-symlinks",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Report symlinks as entries (they are never followed)",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="Extra config file layered over system, user and project config",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Print each change as a JSON object with kind, path and root",
    )
    parser.add_argument(
        "--ignore-stdin",
        action="store_true",
        help="Keep running when stdin reaches EOF (stop with a signal instead)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase log verbosity (can be repeated)",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Only log errors and skip the startup banner",
    )
    return parser


def apply_arguments(config: Config, args: argparse.Namespace) -> Config:
    """Layer command-line flags over the loaded *config*."""
    poller = config.poller
    if args.interval is not None:
        poller = replace(poller, interval=args.interval)
    if args.recursive is not None:
        poller = replace(poller, recursive=args.recursive)
    if args.track_directories is not None:
        poller = replace(poller, track_directories=args.track_directories)
    if args.track_symlinks is not None:
        poller = replace(poller, track_symlinks=args.track_symlinks)

    logging_config = config.logging
    if args.quiet:
        logging_config = replace(logging_config, verbose=0)
    elif args.verbose:
        logging_config = replace(logging_config, verbose=min(4, 2 + args.verbose))

    return replace(config, poller=poller, logging=logging_config)


class _LineWriter:
    """Serializes change lines from several poller threads onto one stream."""

    def __init__(self, output: IO[str], absolute: bool, json_lines: bool = False) -> None:
        self._output = output
        self._absolute = absolute
        self._json_lines = json_lines
        self._lock = threading.Lock()

    def _format(self, poller: DirectoryPoller, event: ChangeEvent) -> str:
        if self._json_lines:
            record = event.to_dict()
            record["root"] = str(poller.root)
            return json.dumps(record)
        path = str(poller.resolve(event)) if self._absolute else event.path
        return f"{event.kind.value} {path}"

    def callback_for(self, poller: DirectoryPoller) -> ChangeCallback:
        def emit(event: ChangeEvent) -> None:
            line = self._format(poller, event)
            with self._lock:
                print(line, file=self._output, flush=True)

        return emit


class _Terminated(Exception):
    """Raised by the SIGTERM handler to unwind the main thread's wait."""


def _raise_terminated(signum: int, frame: object) -> NoReturn:
    raise _Terminated(signum)


def _wait_for_stop(stop: threading.Event) -> None:
    # Short waits keep the main thread responsive to signals
    while not stop.wait(0.2):
        pass


def _watch_stdin(stream: IO[str], stop: threading.Event) -> None:
    """Set *stop* once *stream* reaches EOF."""
    try:
        for _ in stream:
            if stop.is_set():
                return
    except (OSError, ValueError) as e:
        log.debug("stdin closed: %s", e)
    log.info("stdin reached EOF, stopping")
    stop.set()


def run_cli(
    args: Sequence[str],
    *,
    stdin: IO[str] | None = None,
    stdout: IO[str] | None = None,
) -> int:
    """Run the CLI with the given arguments and return the exit status."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    config = apply_arguments(load_config(project_root=Path.cwd(), config_file=parsed.config), parsed)
    setup_logging(config.logging)

    pollers: list[DirectoryPoller] = []
    for path in parsed.paths:
        try:
            pollers.append(DirectoryPoller.from_config(path, config.poller))
        except InvalidRoot as e:
            console.print(f"[red]Error:[/red] {escape(str(e))}", highlight=False)
            return 1

    stop = threading.Event()
    writer = _LineWriter(
        stdout if stdout is not None else sys.stdout,
        absolute=len(pollers) > 1,
        json_lines=parsed.json,
    )

    if not parsed.quiet:
        for poller in pollers:
            mode = "recursive" if poller.spec.recursive else "top level only"
            console.print(
                f"[dim]Watching {escape(str(poller.root))} ({mode}, every {poller.interval:g}s)[/dim]",
                highlight=False,
            )

    threads = [
        threading.Thread(
            target=poller.run,
            args=(writer.callback_for(poller), stop),
            name=f"dirpoll:{poller.root.name or poller.root}",
            daemon=True,
        )
        for poller in pollers
    ]
    for thread in threads:
        thread.start()

    if not parsed.ignore_stdin:
        threading.Thread(
            target=_watch_stdin,
            args=(stdin if stdin is not None else sys.stdin, stop),
            name="dirpoll:stdin",
            daemon=True,
        ).start()

    in_main_thread = threading.current_thread() is threading.main_thread()
    previous_sigterm = None
    try:
        if in_main_thread:
            previous_sigterm = signal.signal(signal.SIGTERM, _raise_terminated)
        _wait_for_stop(stop)
    except KeyboardInterrupt:
        log.info("Interrupted, stopping")
    except _Terminated:
        log.info("Terminated, stopping")
    finally:
        stop.set()
        if in_main_thread:
            signal.signal(signal.SIGTERM, previous_sigterm or signal.SIG_DFL)
        for thread in threads:
            thread.join()

    return 0
