"""
LogTail Line Scanner.

Reads complete lines from a byte stream that another process may still
be appending to.
Requires Python 3.11+.
"""

import io
from collections.abc import Iterator
from typing import BinaryIO, NamedTuple

from utils.config import get_settings
from utils.errors import PositionError
from utils.logger import LoggerMixin


class ScannedLine(NamedTuple):
    """A complete line and the offset where the following line starts."""

    content: bytes
    next_position: int


def _drop_cr(line: bytes) -> bytes:
    """Drop a terminal \\r from a newline terminated line."""
    if line.endswith(b"\r"):
        return line[:-1]
    return line


class LineScanner(LoggerMixin):
    """
    Pull-based scanner of newline delimited lines.

    Works like iterating a file in binary mode, except that a line is only
    returned once its terminator has been written. A half written line at
    the end of the stream is ambiguous: it may be the last line of a file
    that will never grow again, or a line still being written. The scanner
    keeps such bytes pending until either the terminator arrives or the
    caller resolves the ambiguity with ``read_last_line`` or ``finalize``.

    Terminators are ``\\n`` and ``\\r\\n``. Lines are returned without
    terminator and may be empty. Lines may be longer than ``chunk_size``;
    they are accumulated across as many reads as needed.
    """

    def __init__(
        self,
        source: BinaryIO,
        chunk_size: int | None = None,
        finalized: bool = False,
        position: int = 0,
    ) -> None:
        """
        Initialize the scanner.

        Args:
            source: Readable byte stream, positioned at ``position``
            chunk_size: Maximum bytes pulled from the stream per read
            finalized: Whether the stream is known not to grow any further
            position: Offset of the stream's current position
        """
        if isinstance(source, io.RawIOBase):
            source = io.BufferedReader(source)
        self._source = source
        self._chunk_size = chunk_size if chunk_size is not None else get_settings().scanner.chunk_size
        if self._chunk_size < 1:
            raise ValueError(f"chunk_size must be positive, got {self._chunk_size}")
        self._finalized = finalized
        self._next_position = position
        self._pending = bytearray()

    @classmethod
    def at_position(
        cls,
        source: BinaryIO,
        position: int,
        chunk_size: int | None = None,
        finalized: bool = False,
    ) -> "LineScanner":
        """
        Make a scanner that starts reading at a given offset of a seekable stream.

        Args:
            source: Readable, seekable byte stream
            position: Offset to start at, typically a ``next_position``
                returned by an earlier scanner
            chunk_size: Maximum bytes pulled from the stream per read
            finalized: Whether the stream is known not to grow any further

        Returns:
            A scanner whose offsets are absolute within the stream

        Raises:
            PositionError: If the stream cannot be positioned at ``position``
        """
        if position < 0:
            raise PositionError(position)
        try:
            offset = source.seek(position, io.SEEK_SET)
        except (OSError, ValueError) as e:
            raise PositionError(position) from e
        if offset != position:
            raise PositionError(position, offset)
        return cls(source, chunk_size=chunk_size, finalized=finalized, position=position)

    def read_line(self) -> ScannedLine | None:
        """
        Read the next complete line.

        Returns:
            The line and the offset right after its terminator, or None when
            no complete line is available yet. Bytes of an unterminated line
            are kept and scanning resumes from them on the next call.

            On a finalized scanner an unterminated trailing line is returned
            as is (a trailing \\r is kept) once the stream is exhausted.

        Errors raised by the underlying stream propagate unchanged.
        """
        while True:
            chunk = self._source.readline(self._chunk_size)
            if not chunk:
                if self._finalized and self._pending:
                    line = bytes(self._pending)
                    self._pending.clear()
                    return ScannedLine(line, self._next_position)
                return None

            self._pending += chunk
            self._next_position += len(chunk)
            if chunk.endswith(b"\n"):
                line = _drop_cr(bytes(self._pending[:-1]))
                self._pending.clear()
                return ScannedLine(line, self._next_position)
            # Either the chunk limit was hit or the stream ran dry mid-line;
            # the next readline tells the two apart.

    def read_last_line(self) -> bytes:
        """
        Force out the pending, unterminated line.

        Meant to be called once ``read_line`` returned None and the caller
        knows the stream will not grow any further. Reading stops at the
        first terminator: if a complete line is still unread it is returned
        like ``read_line`` would, and the next call goes on from there.
        Otherwise every pending byte is returned without stripping a
        trailing \\r, since no terminator was seen.

        Returns:
            The line or the pending bytes, possibly empty
        """
        complete = self.read_line()
        if complete is not None:
            return complete.content

        line = bytes(self._pending)
        self._pending.clear()
        if line:
            self.log.debug("forced_last_line", size=len(line), position=self._next_position)
        return line

    def finalize(self) -> None:
        """Consider the stream finalized: no further appends are expected."""
        self._finalized = True

    def lines(self) -> Iterator[ScannedLine]:
        """Yield every line that is complete right now."""
        while (line := self.read_line()) is not None:
            yield line

    def __iter__(self) -> Iterator[ScannedLine]:
        return self.lines()

    @property
    def finalized(self) -> bool:
        return self._finalized

    @property
    def next_position(self) -> int:
        """Offset after every byte consumed, pending bytes included."""
        return self._next_position

    @property
    def position(self) -> int:
        """Offset where the next line starts; the point to resume from."""
        return self._next_position - len(self._pending)

    @property
    def pending_size(self) -> int:
        """Number of buffered bytes of an unterminated line."""
        return len(self._pending)
