"""Command-line entry point: ``vmattach <pid> <cmd> [args...]``."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional

from rich.console import Console

from vmattach.bridge.errors import AttachError, SessionIOError, UsageError
from vmattach.bridge.types import AttachState
from vmattach.core.attach import Attacher
from vmattach.core.events import AttachEvent, AttachEventType
from vmattach.core.types.config import load_config

logger = logging.getLogger(__name__)

USAGE = "Usage: vmattach <pid> <cmd> <args> ..."

# Passed through verbatim; listed for --help only.
KNOWN_COMMANDS = {
    "load": "load agent library",
    "properties": "print system properties",
    "agentProperties": "print agent properties",
    "datadump": "show heap and thread summary",
    "threaddump": "dump all stack traces (like jstack)",
    "dumpheap": "dump heap (like jmap)",
    "inspectheap": "heap histogram (like jmap -histo)",
    "setflag": "modify manageable VM flag",
    "printflag": "print VM flag",
    "jcmd": "execute jcmd command",
}


class _ArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises instead of exiting on bad input."""

    def error(self, message: str) -> None:  # type: ignore[override]
        raise UsageError(message)


def _positive_int(value: str) -> int:
    number = int(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def _positive_float(value: str) -> float:
    number = float(value)
    if number <= 0:
        raise argparse.ArgumentTypeError("must be greater than zero")
    return number


def build_parser() -> argparse.ArgumentParser:
    epilog = "commands:\n" + "\n".join(
        f"  {name:<16}{help_}" for name, help_ in KNOWN_COMMANDS.items()
    )
    parser = _ArgumentParser(
        prog="vmattach",
        description="Send a command to a running JVM through the Dynamic Attach mechanism.",
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--config", default=None, help="Path to vmattach.toml")
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging"
    )
    parser.add_argument(
        "--timeout",
        type=_positive_float,
        default=None,
        help="Give up reading the response after this many seconds of silence",
    )
    parser.add_argument("pid", type=_positive_int, help="Target process ID")
    parser.add_argument("command", help="Attach command, passed through as-is")
    parser.add_argument(
        "args", nargs=argparse.REMAINDER, help="Up to three command arguments"
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    console = Console(highlight=False, emoji=False, soft_wrap=True)

    try:
        args = build_parser().parse_args(argv)
    except UsageError as exc:
        logger.debug("Bad invocation: %s", exc)
        console.print(USAGE, markup=False)
        return 1

    try:
        config = load_config(args.config)
    except (OSError, ValueError) as exc:
        console.print(f"Invalid configuration: {exc}", markup=False)
        return 1

    if args.verbose or config.verbose:
        logging.basicConfig(level=logging.DEBUG)
    if args.timeout is not None:
        config.session.read_timeout = args.timeout

    def on_event(event: AttachEvent) -> None:
        if (
            event.event_type is AttachEventType.STATE_CHANGE
            and event.state is AttachState.CONNECTED
        ):
            console.print("Connected to remote JVM", markup=False)
            console.file.flush()

    attacher = Attacher(config, event_callback=on_event)
    try:
        attacher.attach(args.pid, args.command, args.args, out=sys.stdout.buffer)
    except SessionIOError as exc:
        console.print()
        console.print(str(exc), markup=False)
        return 1
    except AttachError as exc:
        console.print(str(exc), markup=False)
        return 1

    console.print()
    return 0


if __name__ == "__main__":
    sys.exit(main())
