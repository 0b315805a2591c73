"""
LogTail Utilities Package.

Configuration, logging and error types shared across all backend modules.
Requires Python 3.11+.
"""

from utils.config import Settings, get_settings
from utils.errors import (
    ChannelClosedError,
    LogTailError,
    PositionError,
    WatcherError,
    WatchTerminatedError,
)
from utils.logger import configure_logging, get_logger, logger, LoggerMixin

__all__ = [
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "logger",
    "LoggerMixin",
    "LogTailError",
    "PositionError",
    "WatcherError",
    "ChannelClosedError",
    "WatchTerminatedError",
]
