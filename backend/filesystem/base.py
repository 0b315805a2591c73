"""
LogTail Filesystem Capabilities.

The two narrow capabilities the scanner and the watchers consume.
Requires Python 3.11+.
"""

from pathlib import Path
from typing import BinaryIO, NamedTuple, Protocol, runtime_checkable


class FileStat(NamedTuple):
    """Metadata snapshot compared by the watchers."""

    size: int
    mtime_ns: int


@runtime_checkable
class FileSystem(Protocol):
    """Stream-open and metadata-query capabilities."""

    def open(self, path: str | Path) -> BinaryIO:
        """Open a readable, seekable byte stream. Raises OSError."""
        ...

    def stat(self, path: str | Path) -> FileStat:
        """Return size and modification time. Raises OSError."""
        ...
