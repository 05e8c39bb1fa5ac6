"""Unit tests for logging setup."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from discpack.logging_config import PasswordFilter, resolve_level, set_level, setup_logging

pytestmark = pytest.mark.unit


@pytest.fixture(autouse=True)
def _reset_logger():
    yield
    logger = logging.getLogger("discpack")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()


class TestResolveLevel:
    """Tests for resolve_level."""

    def test_explicit(self) -> None:
        """Test that an explicit level wins."""
        assert resolve_level("debug") == logging.DEBUG

    def test_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the environment fallback."""
        monkeypatch.setenv("DISCPACK_LOG_LEVEL", "WARNING")
        assert resolve_level(None) == logging.WARNING

    def test_unknown_falls_back(self) -> None:
        """Test that unknown names fall back to INFO."""
        assert resolve_level("chatty") == logging.INFO


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_file_handler_appends(self, tmp_path: Path) -> None:
        """Test that records are appended to the log file."""
        log_file = tmp_path / "bucket.log"
        log_file.write_text("earlier\n", encoding="utf-8")
        logger = setup_logging("INFO", log_file=log_file)
        logging.getLogger("discpack.pack.fit").info("packed %d files", 3)
        for handler in logger.handlers:
            handler.flush()
        text = log_file.read_text(encoding="utf-8")
        assert text.startswith("earlier\n")
        assert "discpack.pack.fit - INFO - packed 3 files" in text

    def test_repeat_setup_replaces_handlers(self) -> None:
        """Test that calling setup twice does not duplicate handlers."""
        setup_logging("INFO")
        logger = setup_logging("DEBUG")
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG

    def test_set_level_updates_handlers(self) -> None:
        """Test that set_level changes the logger and its handlers."""
        logger = setup_logging("INFO")
        set_level("warning")
        assert logger.level == logging.WARNING
        assert all(h.level == logging.WARNING for h in logger.handlers)


class TestPasswordFilter:
    """Tests for PasswordFilter."""

    def _record(self, msg: str, args: tuple = ()) -> logging.LogRecord:
        return logging.LogRecord("discpack", logging.INFO, __file__, 1, msg, args, None)

    def test_masks_message(self) -> None:
        """Test that -p switches in messages are masked."""
        record = self._record("7z a -tzip -mx0 -ps3cret out.zip a.bin")
        PasswordFilter().filter(record)
        assert "s3cret" not in record.getMessage()
        assert "-p***" in record.getMessage()

    def test_masks_args(self) -> None:
        """Test that -p switches in arguments are masked."""
        record = self._record("Compression command: %s", ("7z a -phunter2 x.zip",))
        PasswordFilter().filter(record)
        assert "hunter2" not in record.getMessage()

    def test_leaves_other_switches(self) -> None:
        """Test that unrelated text is untouched."""
        record = self._record("path/-pfoo is -tzip")
        PasswordFilter().filter(record)
        assert record.getMessage() == "path/-pfoo is -tzip"
