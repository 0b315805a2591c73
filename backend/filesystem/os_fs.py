"""
LogTail OS Filesystem.

Filesystem capabilities backed by the operating system.
Requires Python 3.11+.
"""

import os
from pathlib import Path
from typing import BinaryIO

from filesystem.base import FileStat


class OsFileSystem:
    """Opens and stats real files."""

    def open(self, path: str | Path) -> BinaryIO:
        return open(path, "rb")

    def stat(self, path: str | Path) -> FileStat:
        st = os.stat(path)
        return FileStat(size=st.st_size, mtime_ns=st.st_mtime_ns)
