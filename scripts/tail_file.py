#!/usr/bin/env python3
"""
LogTail File Follower Script.

Prints a file's lines and watches for further appends, like ``tail -f``.
Each line is prefixed by the offset right after it, which can be passed
back with --resume to continue on a later call.
Requires Python 3.11+.

Usage:
    python scripts/tail_file.py /var/log/app.log
    python scripts/tail_file.py /var/log/app.log --resume 1024
"""

import argparse
import sys
from pathlib import Path

# Add backend to path
sys.path.insert(0, str(Path(__file__).parent.parent / "backend"))

from follower.follow import follow, read_available
from linereader.scanner import ScannedLine
from utils.errors import LogTailError
from utils.logger import configure_logging, get_logger


logger = get_logger("tail_file")


def format_line(line: ScannedLine) -> str:
    """Render a line the way it is printed: offset, colon, content."""
    return f"{line.next_position:10d}: {line.content.decode('utf-8', errors='replace')}"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Print a file's lines and follow further appends"
    )
    parser.add_argument(
        "path",
        type=Path,
        help="File to follow",
    )
    parser.add_argument(
        "--resume",
        type=int,
        default=0,
        help="Resume from this offset. By default it starts at the beginning.",
    )
    parser.add_argument(
        "--no-follow",
        action="store_true",
        default=False,
        help="Print the lines currently in the file and exit",
    )
    parser.add_argument(
        "--poll-interval-ms",
        type=int,
        default=None,
        help="Milliseconds between two checks of the file",
    )
    parser.add_argument(
        "--refresh-interval-ms",
        type=int,
        default=None,
        help="Milliseconds a pending notification may wait before re-checking",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        help="Log level for diagnostics written to stderr",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        if args.no_follow:
            lines = read_available(args.path, position=args.resume)
        else:
            lines = follow(
                args.path,
                position=args.resume,
                poll_interval_ms=args.poll_interval_ms,
                refresh_interval_ms=args.refresh_interval_ms,
            )
        for line in lines:
            print(format_line(line), flush=True)

    except KeyboardInterrupt:
        print("\nCancelled by user", file=sys.stderr)
        return 1
    except (OSError, LogTailError) as e:
        logger.error("tail_failed", path=str(args.path), error=str(e))
        print(f"Error: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
