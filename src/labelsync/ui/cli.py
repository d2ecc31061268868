# ruff: noqa: T201

from __future__ import annotations

import argparse
import logging
import sys
from signal import SIGINT, signal
from typing import TYPE_CHECKING

from dotenv import load_dotenv

from labelsync.app import list_groups, preview_allocation, pull_registry
from labelsync.common import configure_logging

if TYPE_CHECKING:
    from collections.abc import Sequence
    from types import FrameType

log = logging.getLogger(__name__)


def _positive_int(value: str) -> int:
    try:
        parsed = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"Invalid integer: {value}") from exc
    if parsed <= 0:
        raise argparse.ArgumentTypeError(f"Must be a positive integer: {value}")
    return parsed


def _parse_args(argv: Sequence[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Keep local entities in sync with the registry")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    pull = subparsers.add_parser("pull", help="Fetch registry records and store them locally")
    pull.add_argument(
        "--page-size",
        type=_positive_int,
        default=None,
        help="Number of records to request per page (defaults to config)",
    )

    allocate = subparsers.add_parser(
        "allocate", help="Preview the placeholder slots the next import would use"
    )
    allocate.add_argument("count", type=_positive_int, help="Number of slots to allocate")
    allocate.add_argument(
        "--prefer",
        action="append",
        default=[],
        metavar="SLOT",
        help="Slot known to be empty in the registry; may be repeated",
    )

    subparsers.add_parser("groups", help="List groups referenced by stored entities")

    return parser.parse_args(list(argv))


def main(argv: Sequence[str] | None = None) -> None:
    """Main application entry point."""
    args_list = list(argv) if argv is not None else list(sys.argv[1:])
    parsed_args = _parse_args(args_list)
    configure_logging(level=logging.DEBUG if parsed_args.verbose else logging.INFO)

    try:
        if parsed_args.command == "pull":
            result = pull_registry(page_size=parsed_args.page_size)
            for name in result.discovered_groups:
                print(f"new group: {name}")
        elif parsed_args.command == "allocate":
            for slot_id in preview_allocation(parsed_args.count, preferred_ids=parsed_args.prefer):
                print(slot_id)
        elif parsed_args.command == "groups":
            for group in list_groups():
                print(f"{group.display_name}\t{len(group.members)}")
        else:
            raise ValueError(f"Unsupported command: {parsed_args.command}")  # noqa: TRY301

    except Exception:
        log.exception("Fatal error during %s", parsed_args.command)
        sys.exit(1)


def sigint_handler(_signal_received: int, _frame: FrameType | None) -> None:
    """Handle SIGINT (Ctrl+C) gracefully."""
    log.info("Closed by user (Ctrl+C)")
    sys.exit(0)


def run() -> None:
    """Console script entry point."""
    load_dotenv()
    signal(SIGINT, sigint_handler)
    main()


if __name__ == "__main__":
    run()
