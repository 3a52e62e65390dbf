#!/usr/bin/env python3
"""Split a large ENEX file into smaller archives Evernote can import.

Examples:
    python split_enex_cli.py -i pocket.enex -o ./parts
    python split_enex_cli.py -i pocket.enex -o ./parts -n 500
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
PROJECT_ROOT = Path(__file__).resolve().parents[4]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from src.shared.utils.logging import setup_logging
from src.functions.pocket_to_enex.core.notes import SplitError, split_enex

logger = logging.getLogger(__name__)


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Split large ENEX files into smaller chunks")
    parser.add_argument("-i", "--input", type=Path, required=True, help="Input ENEX file path")
    parser.add_argument("-o", "--output", type=Path, required=True, help="Output directory path")
    parser.add_argument(
        "-n",
        "--notes-per-file",
        type=int,
        default=1000,
        help="Number of notes per file (default: 1000)",
    )
    parser.add_argument("--log-level", default=None, help="Logging level (default: INFO)")
    return parser.parse_args()


def main() -> None:
    args = parse_args()
    setup_logging(level=args.log_level)

    try:
        written = split_enex(args.input, args.output, args.notes_per_file)
    except (SplitError, OSError) as exc:
        logger.error("Error: %s", exc)
        sys.exit(1)

    print(f"\nSuccessfully split into {len(written)} files")
    print(f"Output directory: {args.output.resolve()}")


if __name__ == "__main__":  # pragma: no cover - CLI entry point
    try:
        main()
    except KeyboardInterrupt:  # pragma: no cover - graceful exit for CLI usage
        sys.exit(130)
