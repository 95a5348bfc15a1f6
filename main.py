# main.py

"""Entry point for the baro price lookup CLI."""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

from baro.config.logging_config import setup_logging

logger = logging.getLogger("baro.main")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the CLI."""
    parser = argparse.ArgumentParser(
        prog="baro",
        description="Scanned-product price comparison with a local cache.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Echo INFO logs to stderr.",
    )
    parser.add_argument(
        "--db",
        default=None,
        dest="db_path",
        help="Cache database path (default: data/price_cache.db).",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    lookup = sub.add_parser("lookup", help="Compare prices for a product.")
    lookup.add_argument("identifier", help="Barcode, keywords or image tag.")
    lookup.add_argument(
        "-k",
        "--kind",
        choices=["barcode", "text", "image"],
        default="barcode",
        help="How the identifier was scanned (default: barcode).",
    )
    lookup.add_argument(
        "--offline",
        action="store_true",
        default=False,
        help="Skip the network and use cache or fallback data.",
    )
    lookup.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="table",
        dest="output_format",
        help="Output format (default: table).",
    )

    extract = sub.add_parser(
        "extract", help="Extract product fields from OCR text."
    )
    extract.add_argument("path", help="UTF-8 text file, one line per OCR line.")
    extract.add_argument(
        "-f",
        "--format",
        choices=["json", "table"],
        default="json",
        dest="output_format",
        help="Output format (default: json).",
    )

    cache = sub.add_parser("cache", help="Inspect or maintain the cache.")
    cache.add_argument("action", choices=["stats", "sweep", "clear"])
    return parser


def main(argv: list[str] | None = None) -> int:
    """Parse arguments, dispatch the command and return its exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    db_path = Path(args.db_path) if args.db_path else None
    log_file = setup_logging(verbose=args.verbose, db_path=db_path)
    logger.info("baro %s starting, log file: %s", args.command, log_file)

    from baro.cli.runner import run_cache_command, run_extract, run_lookup

    if args.command == "lookup":
        return asyncio.run(
            run_lookup(
                identifier=args.identifier,
                kind=args.kind,
                offline=args.offline,
                output_format=args.output_format,
                db_path=db_path,
            )
        )
    if args.command == "extract":
        return run_extract(args.path, args.output_format)
    return run_cache_command(args.action, db_path=db_path)


if __name__ == "__main__":
    sys.exit(main())
