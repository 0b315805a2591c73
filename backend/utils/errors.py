"""
LogTail Error Types.

Exceptions shared by the scanner, the watchers and the follow loop.
Stream read failures are never wrapped; they propagate as raised.
Requires Python 3.11+.
"""


class LogTailError(Exception):
    """Base class for all LogTail errors."""


class PositionError(LogTailError):
    """A scanner could not be positioned at the requested offset."""

    def __init__(self, requested: int, actual: int | None = None) -> None:
        self.requested = requested
        self.actual = actual
        if actual is None:
            message = f"cannot reposition stream at offset {requested}"
        else:
            message = f"cannot reposition stream at offset {requested} (landed at {actual})"
        super().__init__(message)


class WatcherError(LogTailError):
    """A watcher was misused, e.g. started twice."""


class ChannelClosedError(WatcherError):
    """Send or close attempted on an already closed update channel."""


class WatchTerminatedError(LogTailError):
    """The watcher stopped because the watched file could not be queried."""

    def __init__(self, path: str, cause: BaseException) -> None:
        self.path = path
        super().__init__(f"stopped watching {path}: {cause}")
