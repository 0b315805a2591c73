"""
LogTail Filesystem Package.

Stream-open and metadata-query capabilities, real and in-memory.
Requires Python 3.11+.
"""

from filesystem.base import FileStat, FileSystem
from filesystem.memory_fs import MemoryFileSystem
from filesystem.os_fs import OsFileSystem

__all__ = [
    "FileStat",
    "FileSystem",
    "MemoryFileSystem",
    "OsFileSystem",
]
