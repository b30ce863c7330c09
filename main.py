# main.py

"""Entry point for the fitlowprice command-line interface."""

import argparse
import asyncio
import logging
import sys

from fitlowprice.config.logging_config import setup_logging
from fitlowprice.config.settings import Settings

logger = logging.getLogger("fitlowprice.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    valid_ids = ", ".join(s["id"] for s in Settings.AVAILABLE_SOURCES)

    parser = argparse.ArgumentParser(
        prog="fitlowprice",
        description="Korean marketplace price comparison engine.",
        epilog=f"Sources: {valid_ids}",
    )
    parser.add_argument(
        "keyword",
        nargs="?",
        default=None,
        help="Search keyword (at least 2 characters).",
    )
    parser.add_argument(
        "-u",
        "--url",
        default=None,
        help="Scrape a single product URL instead of searching.",
    )
    parser.add_argument(
        "-c",
        "--compute",
        default=None,
        dest="compute_path",
        help="Compute final prices from a JSON request file.",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    return parser


def main() -> None:
    """Route to price computation, URL lookup or keyword search."""
    log_file = setup_logging()
    logger.info("fitlowprice starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()

    from fitlowprice.cli import runner

    if args.compute_path:
        exit_code = runner.cli_compute(args.compute_path, args.output_format)
    elif args.url:
        exit_code = asyncio.run(runner.cli_lookup(args.url))
    elif args.keyword is not None:
        exit_code = asyncio.run(
            runner.cli_search(args.keyword, args.output_format)
        )
    else:
        parser.print_help(sys.stderr)
        exit_code = runner.EXIT_INVALID
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
