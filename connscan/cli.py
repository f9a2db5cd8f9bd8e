from __future__ import annotations

import argparse
import logging
import sys
import threading

import colorama

from . import hostinfo
from .output import Printer
from .scanner import ScanEngine, ScanError
from .validation import ValidationError

DEFAULT_HOST = "127.0.0.1"
DEFAULT_START_PORT = 1
DEFAULT_END_PORT = 1024
DEFAULT_TIMEOUT_MS = 500
DEFAULT_CONCURRENCY = 20


def setup_logging(debug: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stderr)],
    )


def _non_empty(value: str) -> str:
    # rejects blank values such as `--host=`
    value = value.strip()
    if not value:
        raise argparse.ArgumentTypeError("value must not be empty")
    return value


def build_parser() -> argparse.ArgumentParser:
    # -h is --host; help is --help only
    p = argparse.ArgumentParser(
        prog="connscan",
        description="Concurrent TCP connect port scanner",
        epilog="Run without a host for the interactive prompt.",
        add_help=False,
    )
    p.add_argument("-h", "--host", type=_non_empty, help="Target host/IP")
    p.add_argument("-s", "--start", type=int, default=DEFAULT_START_PORT, help=f"Start port (default: {DEFAULT_START_PORT})")
    p.add_argument("-e", "--end", type=int, default=DEFAULT_END_PORT, help=f"End port (default: {DEFAULT_END_PORT})")
    p.add_argument("-t", "--timeout", type=int, default=DEFAULT_TIMEOUT_MS, help=f"Connect timeout in ms (default: {DEFAULT_TIMEOUT_MS})")
    p.add_argument("-c", "--concurrency", type=int, default=DEFAULT_CONCURRENCY, help=f"Concurrent probes (default: {DEFAULT_CONCURRENCY})")
    p.add_argument("-v", "--verbose", action="store_true", help="Print every port as it is probed")
    p.add_argument("--no-color", action="store_true", help="Disable ANSI colors")
    p.add_argument("--debug", action="store_true", help="Debug logging on stderr")
    p.add_argument("--help", action="help", help="Show this help and exit")
    return p


def _ask(printer: Printer, text: str) -> str:
    try:
        return printer.prompt(text).strip()
    except EOFError:
        return ""


def _ask_int(printer: Printer, text: str, default: int) -> int:
    answer = _ask(printer, text)
    if not answer:
        return default
    try:
        return int(answer)
    except ValueError:
        raise ValueError(f"Not a number: {answer!r}") from None


def prompt_settings(printer: Printer, args: argparse.Namespace) -> argparse.Namespace:
    """Interactive prompts; an empty answer keeps the default shown."""
    args.host = _ask(printer, f"Enter host/IP (default {DEFAULT_HOST}): ") or DEFAULT_HOST
    args.start = _ask_int(printer, f"Enter start port (default {args.start}): ", args.start)
    args.end = _ask_int(printer, f"Enter end port (default {args.end}): ", args.end)
    args.timeout = _ask_int(printer, f"Enter timeout (ms, default {args.timeout}): ", args.timeout)
    args.concurrency = _ask_int(printer, f"Enter concurrency (default {args.concurrency}): ", args.concurrency)
    answer = _ask(printer, "Verbose mode? (y/n, default n): ")
    args.verbose = args.verbose or answer[:1] in ("y", "Y")
    return args


def run_scan(printer: Printer, args: argparse.Namespace) -> int:
    printer.scanning(args.host, args.start, args.end)
    print_lock = threading.Lock()

    def on_result(port: int, is_open: bool) -> None:
        if args.verbose:
            with print_lock:
                printer.port_line(port, is_open)

    try:
        engine = ScanEngine(args.host, args.start, args.end, args.timeout, args.concurrency, args.verbose)
        engine.scan(on_result)
    except (ValidationError, ScanError) as e:
        logging.debug("Scan aborted", exc_info=True)
        printer.error(str(e))
        return 1

    printer.summary(engine.open_ports())
    return 0


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    setup_logging(args.debug)

    color = not args.no_color and hostinfo.supports_ansi(sys.stdout)
    if color:
        colorama.just_fix_windows_console()
    printer = Printer(color=color)

    try:
        printer.banner()
        if args.host is None:
            try:
                prompt_settings(printer, args)
            except ValueError as e:
                printer.error(str(e))
                return 1
            print()
        return run_scan(printer, args)
    except KeyboardInterrupt:
        print()
        printer.error("Interrupted")
        return 130
