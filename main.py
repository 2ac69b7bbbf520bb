# main.py

"""Entry point for the product_tracker headless CLI."""

import argparse
import asyncio
import logging
import sys

from product_tracker.config.logging_config import setup_logging

logger = logging.getLogger("product_tracker.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="product_tracker",
        description=(
            "Find the same product on Amazon, AliExpress and "
            "Shopify storefronts."
        ),
    )
    parser.add_argument(
        "query",
        nargs="?",
        default=None,
        help="Product search query (or productQuery in --input).",
    )
    parser.add_argument(
        "-u",
        "--source-url",
        default=None,
        dest="source_url",
        help="URL of the page the product was seen on (passed through).",
    )
    parser.add_argument(
        "-n",
        "--max-results",
        type=int,
        default=None,
        dest="max_results",
        help="Listings per platform (overrides MAX_RESULTS_PER_PLATFORM).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )
    parser.add_argument(
        "-i",
        "--input",
        default=None,
        dest="input_path",
        help=(
            "JSON file with productQuery, sourceUrl and "
            "maxResultsPerPlatform keys."
        ),
    )
    return parser


def main() -> None:
    """Parse arguments and run one tracker invocation."""
    log_file = setup_logging()
    logger.info("product_tracker starting, log file: %s", log_file)

    parser = _build_parser()
    args = parser.parse_args()
    if args.query is None and args.input_path is None:
        parser.error("a query or --input file is required")

    from product_tracker.cli.runner import cli_track

    exit_code = asyncio.run(
        cli_track(
            query=args.query,
            source_url=args.source_url,
            max_results=args.max_results,
            output_format=args.output_format,
            input_path=args.input_path,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
