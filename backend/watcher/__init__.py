"""
LogTail File Watcher Package.

Polling based change notification for files being appended to.
Requires Python 3.11+.
"""

from watcher.channel import (
    UPDATE_SIGNAL,
    AsyncUpdateChannel,
    SendResult,
    UpdateChannel,
    UpdateSignal,
)
from watcher.file_watcher import FileWatcher
from watcher.polling_watcher import AsyncPollingFileWatcher, PollingFileWatcher

__all__ = [
    "UPDATE_SIGNAL",
    "UpdateSignal",
    "SendResult",
    "UpdateChannel",
    "AsyncUpdateChannel",
    "FileWatcher",
    "PollingFileWatcher",
    "AsyncPollingFileWatcher",
]
