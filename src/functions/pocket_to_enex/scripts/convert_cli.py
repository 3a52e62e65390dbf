#!/usr/bin/env python3
"""Convert a Pocket CSV export into an Evernote ENEX archive.

Optionally scrapes each article so the note carries its text, falling back
to a headless browser for pages that need JavaScript. Progress is
checkpointed next to the output file so an interrupted run can resume.

Examples:
    # Link-only notes
    python convert_cli.py -i pocket.csv -o pocket.enex

    # Scrape article text, with browser fallback
    python convert_cli.py -i pocket.csv -o pocket.enex --scrape --fallback-browser

    # Continue an interrupted run
    python convert_cli.py -i pocket.csv -o pocket.enex --scrape --resume
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import Optional

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parents[4]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.shared.utils.logging import setup_logging
from src.shared.utils.env import load_env
from src.shared.utils.config_validator import ConfigurationError
from src.functions.pocket_to_enex.core.config import ConverterDefaults, load_defaults
from src.functions.pocket_to_enex.core.contracts import ConversionOptions, parse_options
from src.functions.pocket_to_enex.core.extractors import BrowserManager, install_shutdown_handlers
from src.functions.pocket_to_enex.core.pipelines import ConversionPipeline, ConversionResult

logger = logging.getLogger(__name__)


def setup_cli_parser() -> argparse.ArgumentParser:
    """Set up command-line argument parser."""
    parser = argparse.ArgumentParser(
        description="Convert a Pocket CSV export to an Evernote ENEX file",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Link-only notes
  python convert_cli.py -i pocket.csv -o pocket.enex

  # Scrape article text with browser fallback
  python convert_cli.py -i pocket.csv -o pocket.enex -s --fallback-browser

  # Resume after an interruption
  python convert_cli.py -i pocket.csv -o pocket.enex -s --resume
        """,
    )

    parser.add_argument("-i", "--input", type=Path, required=True, help="Input CSV file path")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Output ENEX file path")

    parser.add_argument(
        "-l",
        "--limit",
        type=int,
        default=999999,
        help="Maximum number of records to process (default: 999999)",
    )

    parser.add_argument(
        "-s",
        "--scrape",
        action="store_true",
        help="Scrape article content from URLs",
    )

    parser.add_argument(
        "-t",
        "--timeout",
        type=float,
        default=None,
        help="Request timeout per URL in seconds (default: 7, env POCKET2ENEX_TIMEOUT)",
    )

    parser.add_argument(
        "--fallback-browser",
        action="store_true",
        default=None,
        help="Retry failed pages in a headless browser (env POCKET2ENEX_FALLBACK_BROWSER)",
    )

    parser.add_argument(
        "--resume",
        action="store_true",
        help="Resume from the last checkpoint",
    )

    parser.add_argument(
        "--checkpoint-interval",
        type=int,
        default=None,
        help="Save a checkpoint every N records (default: 100)",
    )

    parser.add_argument(
        "--batch-size",
        type=int,
        default=None,
        help="Records processed concurrently per batch (default: 10)",
    )

    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )

    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default=None,
        help="Set logging level explicitly",
    )

    return parser


def build_options(args: argparse.Namespace, defaults: ConverterDefaults) -> ConversionOptions:
    """Merge CLI flags over environment defaults.

    Raises:
        ValueError: If the merged options are invalid
    """
    return parse_options(
        {
            "input_path": args.input,
            "output_path": args.output,
            "limit": args.limit,
            "scrape": args.scrape,
            "fallback_browser": (
                defaults.fallback_browser if args.fallback_browser is None else args.fallback_browser
            ),
            "timeout_seconds": defaults.timeout_seconds if args.timeout is None else args.timeout,
            "resume": args.resume,
            "checkpoint_interval": (
                defaults.checkpoint_interval
                if args.checkpoint_interval is None
                else args.checkpoint_interval
            ),
            "batch_size": defaults.batch_size if args.batch_size is None else args.batch_size,
        }
    )


async def run_conversion(options: ConversionOptions) -> ConversionResult:
    """Run the pipeline with signal handlers that close the browser."""
    manager: Optional[BrowserManager] = None
    if options.scrape and options.fallback_browser:
        manager = BrowserManager(
            max_pages=options.max_pages,
            restart_interval=options.restart_interval,
        )
        install_shutdown_handlers(manager, main_task=asyncio.current_task())

    pipeline = ConversionPipeline(options, browser_manager=manager)
    return await pipeline.run()


def main():
    """Main entry point."""
    parser = setup_cli_parser()
    args = parser.parse_args()

    load_env()

    if args.log_level:
        log_level = args.log_level
    elif args.verbose:
        log_level = "DEBUG"
    else:
        log_level = None

    setup_logging(level=log_level)

    try:
        options = build_options(args, load_defaults())
    except (ConfigurationError, ValueError) as exc:
        logger.error("%s", exc)
        sys.exit(1)

    logger.info("=" * 60)
    logger.info("Pocket to ENEX Converter")
    logger.info("=" * 60)
    logger.info(
        "Input: %s | Output: %s | Scrape: %s | Browser fallback: %s | Batch size: %d",
        options.input_path,
        options.output_path,
        options.scrape,
        options.fallback_browser,
        options.batch_size,
    )

    result = asyncio.run(run_conversion(options))

    print("\n" + "=" * 60)
    print("CONVERSION COMPLETE" if result.success else "CONVERSION FAILED")
    print("=" * 60)
    print(f"Total records:    {result.total}")
    print(f"Processed:        {result.processed}")
    print(f"Failed:           {result.failed}")
    if result.success:
        print(f"Notes written:    {result.notes_written}")
        print(f"Output file:      {result.output_path}")
    elif result.error:
        print(f"Error:            {result.error}")
    print("=" * 60)

    sys.exit(result.exit_code)


if __name__ == "__main__":
    try:
        main()
    except KeyboardInterrupt:
        print("\n\nInterrupted by user")
        sys.exit(130)
