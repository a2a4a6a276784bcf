# main.py

"""Entry point for the price_watch command-line tool."""

import argparse
import asyncio
import logging
import sys

from src.config.logging_config import setup_logging

logger = logging.getLogger("price_watch.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="price_watch",
        description="Track product prices across online stores.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Show INFO-level progress on stderr.",
    )
    parser.add_argument(
        "--static",
        action="store_true",
        default=False,
        help="Fetch pages over plain HTTP instead of headless Chromium.",
    )
    commands = parser.add_subparsers(dest="command", required=True)

    commands.add_parser(
        "check", help="Check the price of every tracked product.",
    )

    extract = commands.add_parser(
        "extract", help="Extract price and metadata from one URL.",
    )
    extract.add_argument("url")
    extract.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )

    track = commands.add_parser("track", help="Start tracking a URL.")
    track.add_argument("url")
    track.add_argument(
        "-t",
        "--target",
        type=float,
        default=None,
        help="Alert when the price drops to or below this amount.",
    )
    track.add_argument(
        "-n",
        "--notify",
        default=None,
        dest="recipient",
        help="Recipient passed to the notifier on a price drop.",
    )

    untrack = commands.add_parser("untrack", help="Stop tracking a product.")
    untrack.add_argument("product_id", type=int)

    commands.add_parser("list", help="List tracked products.")

    history = commands.add_parser(
        "history", help="Show the recorded prices of a product.",
    )
    history.add_argument("product_id", type=int)

    commands.add_parser(
        "reset-alerts", help="Re-arm every triggered price alert.",
    )
    return parser


def _dispatch(args: argparse.Namespace) -> int:
    from src.cli import runner

    if args.command == "check":
        return asyncio.run(runner.run_check(static=args.static))
    if args.command == "extract":
        return asyncio.run(
            runner.run_extract(args.url, args.output_format, args.static)
        )
    if args.command == "track":
        return runner.run_track(args.url, args.target, args.recipient)
    if args.command == "untrack":
        return runner.run_untrack(args.product_id)
    if args.command == "list":
        return runner.run_list()
    if args.command == "history":
        return runner.run_history(args.product_id)
    if args.command == "reset-alerts":
        return runner.run_reset_alerts()
    raise ValueError(f"Unknown command: {args.command}")


def main() -> None:
    parser = _build_parser()
    args = parser.parse_args()

    log_file = setup_logging(verbose=args.verbose)
    logger.info("price_watch %s starting, log file: %s", args.command, log_file)

    try:
        exit_code = _dispatch(args)
    except Exception:
        logger.critical("Fatal error in %s", args.command, exc_info=True)
        raise
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
