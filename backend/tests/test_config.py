"""
Tests for configuration and logging setup.

Requires Python 3.11+.
"""

import pytest
from pydantic import ValidationError

from filesystem.memory_fs import MemoryFileSystem
from linereader.scanner import LineScanner
from utils.config import LoggingSettings, Settings, WatcherSettings, get_settings
from utils.logger import LoggerMixin, configure_logging


class TestSettings:
    """Test cases for Settings."""

    def test_defaults(self, clean_settings, monkeypatch: pytest.MonkeyPatch):
        """Test the default tuning values."""
        for name in ("SCANNER_CHUNK_SIZE", "WATCHER_POLL_INTERVAL_MS", "WATCHER_REFRESH_INTERVAL_MS"):
            monkeypatch.delenv(name, raising=False)

        settings = Settings()

        assert settings.scanner.chunk_size == 4096
        assert settings.watcher.poll_interval_ms == 10
        assert settings.watcher.refresh_interval_ms == 1000

    def test_environment_overrides(self, clean_settings, monkeypatch: pytest.MonkeyPatch):
        """Test that prefixed environment variables override defaults."""
        monkeypatch.setenv("WATCHER_POLL_INTERVAL_MS", "25")
        monkeypatch.setenv("SCANNER_CHUNK_SIZE", "5")

        settings = get_settings()

        assert settings.watcher.poll_interval_ms == 25
        assert settings.scanner.chunk_size == 5

    def test_scanner_uses_configured_chunk_size(
        self, clean_settings, monkeypatch: pytest.MonkeyPatch, memory_fs: MemoryFileSystem, log_path: str
    ):
        """Test that scanners pick the chunk size up from settings."""
        monkeypatch.setenv("SCANNER_CHUNK_SIZE", "3")
        memory_fs.append(log_path, "a longer line\n")

        scanner = LineScanner(memory_fs.open(log_path))

        assert scanner.read_line().content == b"a longer line"

    def test_environment_setting(self, clean_settings, monkeypatch: pytest.MonkeyPatch):
        """Test the deployment environment name and its override."""
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        assert Settings().environment == "development"

        monkeypatch.setenv("ENVIRONMENT", "production")
        assert Settings().environment == "production"

    def test_invalid_values_rejected(self, clean_settings, monkeypatch: pytest.MonkeyPatch):
        """Test validation of out of range values."""
        monkeypatch.setenv("WATCHER_POLL_INTERVAL_MS", "0")

        with pytest.raises(ValidationError):
            WatcherSettings()

    def test_invalid_log_format_rejected(self, clean_settings, monkeypatch: pytest.MonkeyPatch):
        """Test that only known renderers are accepted."""
        monkeypatch.setenv("LOG_FORMAT", "xml")

        with pytest.raises(ValidationError):
            LoggingSettings()


class TestLogging:
    """Test cases for logging setup."""

    @pytest.mark.parametrize("log_format", ["json", "console"])
    def test_configure_logging(self, clean_settings, monkeypatch: pytest.MonkeyPatch, capsys, log_format: str):
        """Test that log output goes to stderr, never stdout."""
        monkeypatch.setenv("LOG_FORMAT", log_format)
        monkeypatch.setenv("ENVIRONMENT", "staging")
        configure_logging("DEBUG")

        class Component(LoggerMixin):
            pass

        Component().log.info("component_ready", answer=42)

        captured = capsys.readouterr()
        assert "component_ready" in captured.err
        assert "staging" in captured.err
        assert captured.out == ""
