#!/usr/bin/env python3
"""
dupsweep - Duplicate File Finder and Cleaner

Features:
- Exact duplicates via full-content cryptographic hashing
- Near-duplicate images via perceptual hashing with a similarity threshold
- Concurrent fingerprinting with a shared work queue
- Keep first/last file by modified time, creation time or name
- Dry run by default, partial-failure tolerant deletion
- Export to CSV/JSON
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from .. import __version__
from ..core.config import EXPORT_FORMATS, HASH_ALGORITHMS, IMAGE_HASHES, Config
from ..core.engine import Deduplicator
from ..core.errors import RunAborted
from ..core.models import KEEP_POLICIES, MODES, ORDERINGS
from ..core.report import render_groups, render_summary

logger = logging.getLogger("dupsweep")

# ---------------------------
# Logging Configuration
# ---------------------------

def setup_logging(quiet: bool = False, verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.INFO,
        format='[%(asctime)s] %(levelname)s: %(message)s',
        datefmt='%H:%M:%S'
    )
    if quiet:
        logger.setLevel(logging.ERROR)
    elif verbose:
        logger.setLevel(logging.DEBUG)
    else:
        logger.setLevel(logging.INFO)

# ---------------------------
# CLI Interface
# ---------------------------

def parse_size(size_str: str) -> int:
    """Parse human-readable size"""
    size_str = size_str.strip().upper()

    # Order matters: longer suffixes first to avoid 'B' matching 'MB'
    multipliers = [
        ('TB', 1024**4),
        ('GB', 1024**3),
        ('MB', 1024**2),
        ('KB', 1024),
        ('B', 1),
    ]

    for suffix, multiplier in multipliers:
        if size_str.endswith(suffix):
            number = size_str[:-len(suffix)].strip()
            return int(float(number) * multiplier)

    return int(size_str)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="dupsweep",
        description="dupsweep - Find and remove duplicate files in a folder",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter
    )

    # Basic options
    parser.add_argument("--path", type=Path, required=True, help="Path towards the folder to scan")
    parser.add_argument("--no-recursive", action="store_true", help="Do not search subfolders")
    parser.add_argument("--mode", choices=MODES, default="hash",
                        help="Criteria for duplicate finding: exact content hash or image similarity")

    # Keep selection
    parser.add_argument("--keep", choices=KEEP_POLICIES, default="first",
                        help="Which file to keep after ordering")
    parser.add_argument("--order", choices=ORDERINGS, default="modified", help="How to order files in a group")
    parser.add_argument("--sort-output", choices=ORDERINGS, help="How to sort the reported duplicate groups")

    # Performance
    parser.add_argument("--threads", type=int, default=8, help="Worker threads for reading files")
    parser.add_argument("--chunk-size", type=parse_size, default="1MB", help="Hash read chunk size")

    # Algorithms
    parser.add_argument("--algorithm", choices=HASH_ALGORITHMS, default="sha256", help="Hash algorithm")
    parser.add_argument("--similarity-score", type=int, default=95,
                        help="Required similarity (0-100, 100 = exact match). Similarity mode only")
    parser.add_argument("--image-hash", choices=IMAGE_HASHES, default="dhash",
                        help="Perceptual hash used in similarity mode")
    parser.add_argument("--image-hash-size", type=int, default=16, help="Perceptual hash grid size")
    parser.add_argument("--skip-unique-sizes", action="store_true",
                        help="Hash mode: don't read files whose size no other file shares")

    # Actions
    parser.add_argument("--delete", action="store_true", help="Delete the duplicate files (default: dry run)")
    parser.add_argument("--no-ignore-errors", action="store_true",
                        help="Abort the run on the first file that can't be listed or read")

    # Export
    parser.add_argument("--export", choices=EXPORT_FORMATS, help="Export format")
    parser.add_argument("--export-path", type=Path, help="Export file path")

    # Output
    parser.add_argument("--no-summary", action="store_true", help="Don't show the summary at the end")
    parser.add_argument("--quiet", "-q", action="store_true", help="Suppress all output")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose output")

    # Advanced
    parser.add_argument("--retry-attempts", type=int, default=3, help="Read retry attempts")
    parser.add_argument("--retry-backoff", type=float, default=0.2, help="Read retry backoff (seconds)")
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    return parser


def config_from_args(args: argparse.Namespace) -> Config:
    return Config(
        path=args.path,
        recursive=not args.no_recursive,
        mode=args.mode,
        similarity_score=args.similarity_score,
        hash_algorithm=args.algorithm,
        image_hash=args.image_hash,
        image_hash_size=args.image_hash_size,
        skip_unique_sizes=args.skip_unique_sizes,
        keep=args.keep,
        order=args.order,
        sort_output=args.sort_output,
        threads=args.threads,
        chunk_size=args.chunk_size,
        ignore_errors=not args.no_ignore_errors,
        retry_attempts=args.retry_attempts,
        retry_backoff=args.retry_backoff,
        delete=args.delete,
        summary=not args.no_summary,
        quiet=args.quiet,
        verbose=args.verbose,
        export_format=args.export,
        export_path=args.export_path,
    )


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point"""
    parser = build_parser()
    args = parser.parse_args(argv)

    config = config_from_args(args)
    setup_logging(config.quiet, config.verbose)

    try:
        deduplicator = Deduplicator(config)
    except ValueError as e:
        parser.error(str(e))

    try:
        result = deduplicator.run()
    except RunAborted as e:
        logger.error(str(e))
        return 1
    except KeyboardInterrupt:
        logger.warning("Scan interrupted by user")
        return 1

    if not config.quiet:
        if result.groups:
            print(render_groups(result.groups, config.path, config.dry_run))
        else:
            print("No duplicates found!")

        if config.summary:
            print(render_summary(
                result.summary,
                result.errors,
                result.deletion_errors,
                result.phase_times,
            ))

    return 0


if __name__ == "__main__":
    sys.exit(main())
