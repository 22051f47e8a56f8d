"""
``ecflow_light_client`` command line tool.

Examples::

    ecflow_light_client --meter progress 42
    ecflow_light_client --label info "step 3 of 5"
    ecflow_light_client --event ready            # set
    ecflow_light_client --event ready clear
    ecflow_light_client --complete
"""

from __future__ import annotations

import argparse
import logging
import os
from typing import List, Optional, Sequence, Tuple

from ecflow_light import api
from ecflow_light.config.settings import LOG_LEVEL_VARIABLE, VERSION
from ecflow_light.logs import configure_logging

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="ecflow_light_client",
        description="Notify the ecFlow server of task attribute and status changes.",
    )
    parser.add_argument("--version", action="store_true", help="Display version information")
    parser.add_argument("--meter", nargs=2, metavar=("NAME", "VALUE"), help="Update meter (integer value)")
    parser.add_argument("--label", nargs=2, metavar=("NAME", "VALUE"), help="Update label")
    parser.add_argument(
        "--event", nargs="+", metavar="ARG", help="Update event: NAME ['set' or 'clear'], default 'set'"
    )
    parser.add_argument("--init", nargs="?", const="", metavar="PID", help="Signal task initialisation")
    parser.add_argument("--complete", action="store_true", help="Signal task completion")
    parser.add_argument("--abort", metavar="REASON", help="Signal task abortion")
    parser.add_argument("--wait", metavar="EXPRESSION", help="Signal task waiting on an expression")
    parser.add_argument("--log-level", default=None, help="Log level (default: WARNING)")
    return parser


def parse_event(arguments: List[str]) -> Tuple[str, bool]:
    """
    Split ``--event`` arguments into name and boolean value.

    Raises
    ------
    ValueError
        If more than two arguments are given or the value is neither 'set' nor 'clear'.
    """
    if len(arguments) > 2:
        raise ValueError("--event expects NAME and an optional 'set' or 'clear'")
    name = arguments[0]
    value = arguments[1] if len(arguments) > 1 else "set"
    if value in ("", "set"):
        return name, True
    if value == "clear":
        return name, False
    raise ValueError(f"Incorrect event value '{value}' found. Expected either 'set' or 'clear'")


def run(args: argparse.Namespace) -> int:
    """Handle every requested update, in a fixed order; fail if any fails."""
    results: List[int] = []

    if args.meter:
        name, raw = args.meter
        results.append(api.update_meter(name, int(raw)))
    if args.label:
        name, value = args.label
        results.append(api.update_label(name, value))
    if args.event:
        name, flag = parse_event(args.event)
        results.append(api.update_event(name, flag))
    if args.init is not None:
        results.append(api.init())
    if args.complete:
        results.append(api.complete())
    if args.abort is not None:
        results.append(api.abort(args.abort))
    if args.wait is not None:
        results.append(api.wait(args.wait))

    return api.EXIT_FAILURE if any(r != api.EXIT_SUCCESS for r in results) else api.EXIT_SUCCESS


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    configure_logging(args.log_level or os.environ.get(LOG_LEVEL_VARIABLE))

    if args.version:
        print(f"Using ecFlow Light ({VERSION})")
        return api.EXIT_SUCCESS

    try:
        return run(args)
    except ValueError as e:
        logger.error("%s", e)
        return api.EXIT_FAILURE


if __name__ == "__main__":
    raise SystemExit(main())
