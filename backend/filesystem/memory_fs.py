"""
LogTail In-Memory Filesystem.

A thread-safe filesystem living in memory, used to drive the scanner
and the watchers deterministically in tests.
Requires Python 3.11+.
"""

import errno
import io
import os
import threading
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO

from filesystem.base import FileStat


@dataclass
class _MemoryFile:
    """Contents and modification time of a single in-memory file."""

    data: bytearray = field(default_factory=bytearray)
    mtime_ns: int = 0

    def touch(self) -> None:
        # mtime must move forward on every write, even within one clock tick
        self.mtime_ns = max(time.time_ns(), self.mtime_ns + 1)


class _MemoryStream(io.RawIOBase):
    """Raw stream over a shared in-memory file; sees later appends."""

    def __init__(self, file: _MemoryFile, lock: threading.RLock) -> None:
        super().__init__()
        self._file = file
        self._lock = lock
        self._position = 0

    def readable(self) -> bool:
        return True

    def seekable(self) -> bool:
        return True

    def readinto(self, buffer) -> int:
        with self._lock:
            chunk = self._file.data[self._position:self._position + len(buffer)]
        n = len(chunk)
        buffer[:n] = chunk
        self._position += n
        return n

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        if whence == io.SEEK_SET:
            position = offset
        elif whence == io.SEEK_CUR:
            position = self._position + offset
        elif whence == io.SEEK_END:
            with self._lock:
                position = len(self._file.data) + offset
        else:
            raise ValueError(f"invalid whence: {whence}")
        if position < 0:
            raise OSError(errno.EINVAL, "negative seek position")
        self._position = position
        return self._position

    def tell(self) -> int:
        return self._position


class MemoryFileSystem:
    """
    In-memory filesystem with writer helpers.

    Streams returned by ``open`` share the file's bytes, so data appended
    after opening becomes readable. Removing a file only affects later
    ``open``/``stat`` calls.
    """

    def __init__(self) -> None:
        self._files: dict[str, _MemoryFile] = {}
        self._lock = threading.RLock()

    @staticmethod
    def _key(path: str | Path) -> str:
        return os.fspath(path)

    def _get(self, path: str | Path) -> _MemoryFile:
        try:
            return self._files[self._key(path)]
        except KeyError:
            raise FileNotFoundError(
                errno.ENOENT, os.strerror(errno.ENOENT), self._key(path)
            ) from None

    def open(self, path: str | Path) -> BinaryIO:
        with self._lock:
            file = self._get(path)
        return io.BufferedReader(_MemoryStream(file, self._lock))

    def stat(self, path: str | Path) -> FileStat:
        with self._lock:
            file = self._get(path)
            return FileStat(size=len(file.data), mtime_ns=file.mtime_ns)

    def create(self, path: str | Path, data: bytes = b"") -> None:
        """Create (or truncate) a file holding ``data``."""
        with self._lock:
            file = _MemoryFile(bytearray(data))
            file.touch()
            self._files[self._key(path)] = file

    def append(self, path: str | Path, data: bytes | str) -> None:
        """Append to an existing file, advancing its modification time."""
        if isinstance(data, str):
            data = data.encode("utf-8")
        with self._lock:
            file = self._get(path)
            file.data.extend(data)
            file.touch()

    def remove(self, path: str | Path) -> None:
        with self._lock:
            self._get(path)
            del self._files[self._key(path)]

    def exists(self, path: str | Path) -> bool:
        with self._lock:
            return self._key(path) in self._files

    def read_bytes(self, path: str | Path) -> bytes:
        with self._lock:
            return bytes(self._get(path).data)
