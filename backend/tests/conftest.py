"""
LogTail Test Configuration.

Pytest fixtures and configuration.
Requires Python 3.11+.
"""

from collections.abc import Generator
from pathlib import Path

import pytest
import structlog

from filesystem.memory_fs import MemoryFileSystem
from utils.config import get_settings


# Watchers under test poll fast so timing assertions stay short
POLL_INTERVAL_MS = 5
REFRESH_INTERVAL_MS = 50

# How long to wait for a signal that must (or must not) arrive
SIGNAL_TIMEOUT = 10 * POLL_INTERVAL_MS / 1000.0


@pytest.fixture
def memory_fs() -> MemoryFileSystem:
    """Create an empty in-memory filesystem."""
    return MemoryFileSystem()


@pytest.fixture
def log_path(memory_fs: MemoryFileSystem) -> str:
    """Create an empty log file in the in-memory filesystem."""
    path = "app.log"
    memory_fs.create(path)
    return path


@pytest.fixture
def disk_log(tmp_path: Path) -> Path:
    """Create an empty log file on disk."""
    path = tmp_path / "app.log"
    path.write_bytes(b"")
    return path


@pytest.fixture(autouse=True)
def reset_logging(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Undo logging configuration made by a test; it may point at captured streams."""
    # Cached loggers would keep a previous test's captured stream past reset_defaults
    configure = structlog.configure

    def configure_uncached(**kwargs):
        kwargs["cache_logger_on_first_use"] = False
        configure(**kwargs)

    monkeypatch.setattr(structlog, "configure", configure_uncached)
    yield
    structlog.reset_defaults()


@pytest.fixture
def clean_settings() -> Generator[None, None, None]:
    """Drop cached settings before and after a test touching the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()
