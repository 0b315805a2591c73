"""
LogTail File Watcher Interface.

What the follow loop expects from a watcher.
Requires Python 3.11+.
"""

from collections.abc import Callable
from typing import Protocol

from watcher.channel import UpdateChannel


class FileWatcher(Protocol):
    """Signals changes of a single file over an update channel."""

    def start(self) -> tuple[UpdateChannel, Callable[[], None]]:
        """
        Start watching the file.

        Returns:
            A channel receiving one signal per change, and a function that
            stops the watcher. The channel is closed when the watcher
            stops, whether cancelled or failed.
        """
        ...

    @property
    def error(self) -> Exception | None:
        """The error that stopped the watcher, if any."""
        ...
