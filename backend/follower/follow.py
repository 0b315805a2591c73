"""
LogTail Follow Loop.

Ties a line scanner and a polling watcher together into a "tail -f".
Requires Python 3.11+.
"""

import os
from collections.abc import Iterator
from pathlib import Path

from filesystem.base import FileSystem
from filesystem.os_fs import OsFileSystem
from linereader.scanner import LineScanner, ScannedLine
from utils.errors import WatchTerminatedError
from utils.logger import get_logger
from watcher.polling_watcher import PollingFileWatcher


logger = get_logger("follower")


def follow(
    path: str | Path,
    position: int = 0,
    fs: FileSystem | None = None,
    chunk_size: int | None = None,
    poll_interval_ms: int | None = None,
    refresh_interval_ms: int | None = None,
) -> Iterator[ScannedLine]:
    """
    Yield lines of a file as they get appended, forever.

    Drains every complete line, then waits for the watcher to signal a
    change and drains again. Stops when the generator is closed or the
    watcher is cancelled.

    Args:
        path: File to follow
        position: Offset to start at, e.g. a saved ``next_position``
        fs: Filesystem to use, the OS one by default
        chunk_size: Scanner read size
        poll_interval_ms: Watcher poll interval
        refresh_interval_ms: Watcher refresh interval

    Yields:
        Complete lines with the offset following each of them

    Raises:
        OSError: If the file cannot be opened or read
        PositionError: If the file cannot be positioned at ``position``
        WatchTerminatedError: If the file can no longer be queried
    """
    fs = fs or OsFileSystem()
    watcher = PollingFileWatcher(
        path,
        fs=fs,
        poll_interval_ms=poll_interval_ms,
        refresh_interval_ms=refresh_interval_ms,
    )
    updates, cancel = watcher.start()
    try:
        with fs.open(path) as source:
            scanner = LineScanner.at_position(source, position, chunk_size=chunk_size)
            logger.info("following_file", path=os.fspath(path), position=position)

            while True:
                yield from scanner.lines()
                if updates.receive() is None:
                    break

            if watcher.error is not None:
                # The open stream may still hold bytes appended just before the failure
                yield from scanner.lines()
                raise WatchTerminatedError(os.fspath(path), watcher.error) from watcher.error
    finally:
        cancel()


def read_available(
    path: str | Path,
    position: int = 0,
    fs: FileSystem | None = None,
    chunk_size: int | None = None,
    flush: bool = True,
) -> list[ScannedLine]:
    """
    Read every line currently in a file, without watching it.

    Args:
        path: File to read
        position: Offset to start at
        fs: Filesystem to use, the OS one by default
        chunk_size: Scanner read size
        flush: Also return a trailing unterminated line

    Returns:
        The lines read, in order
    """
    fs = fs or OsFileSystem()
    with fs.open(path) as source:
        scanner = LineScanner.at_position(
            source, position, chunk_size=chunk_size, finalized=flush
        )
        return list(scanner.lines())
