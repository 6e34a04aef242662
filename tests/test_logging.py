"""
Tests for logging configuration.
"""

import logging
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path

from logging_config import setup_logging


def flush_handlers():
    for handler in logging.getLogger().handlers:
        handler.flush()


class TestLoggingSetup:
    """Test logging configuration and setup."""

    def test_setup_creates_log_file(self, tmp_path):
        """Test logging setup creates the directory and log file."""
        log_dir = tmp_path / "logs"

        setup_logging(log_dir=str(log_dir))

        assert (log_dir / "call_recorder.log").exists()
        assert logging.getLogger().level == logging.INFO

    def test_custom_level(self, tmp_path):
        """Test logging setup with custom log level."""
        setup_logging(log_level="DEBUG", log_dir=str(tmp_path))
        assert logging.getLogger().level == logging.DEBUG

    def test_console_disabled(self, tmp_path):
        """Test only the rotating file handler remains when console output is off."""
        setup_logging(log_dir=str(tmp_path), console_output=False)

        handlers = logging.getLogger().handlers
        assert len(handlers) == 1
        assert isinstance(handlers[0], RotatingFileHandler)

    def test_rotation_settings(self, tmp_path):
        """Test rotation parameters reach the file handler."""
        setup_logging(log_dir=str(tmp_path), max_bytes=2048, backup_count=2)

        handler = next(h for h in logging.getLogger().handlers if isinstance(h, RotatingFileHandler))
        assert handler.maxBytes == 2048
        assert handler.backupCount == 2

    def test_repeated_setup_does_not_duplicate_handlers(self, tmp_path):
        """Test calling setup_logging twice replaces the handlers."""
        setup_logging(log_dir=str(tmp_path))
        first = len(logging.getLogger().handlers)
        setup_logging(log_dir=str(tmp_path))
        assert len(logging.getLogger().handlers) == first

    def test_file_output_includes_thread_name(self, tmp_path):
        """Test messages from the monitor thread can be told apart in the log file."""
        setup_logging(log_dir=str(tmp_path), console_output=False)
        logger = logging.getLogger("services.process_monitor")

        worker = threading.Thread(
            target=lambda: logger.warning("[MONITOR] capture stalled"),
            name="RecordingService-monitor"
        )
        worker.start()
        worker.join()
        flush_handlers()

        content = (Path(tmp_path) / "call_recorder.log").read_text()
        assert "RecordingService-monitor" in content
        assert "[MONITOR] capture stalled" in content

    def test_respects_level(self, tmp_path):
        """Test messages below the configured level are dropped."""
        setup_logging(log_level="WARNING", log_dir=str(tmp_path), console_output=False)
        logger = logging.getLogger("test_logger")
        logger.info("Info message")
        logger.error("Error message")
        flush_handlers()

        content = (Path(tmp_path) / "call_recorder.log").read_text()
        assert "Info message" not in content
        assert "Error message" in content

    def test_quiets_web_and_http_loggers(self, tmp_path):
        """Test health polls and webhook connections stay out of an INFO log."""
        setup_logging(log_level="INFO", log_dir=str(tmp_path), console_output=False)
        assert logging.getLogger("werkzeug").level == logging.WARNING
        assert logging.getLogger("urllib3").level == logging.WARNING

        setup_logging(log_level="DEBUG", log_dir=str(tmp_path), console_output=False)
        assert logging.getLogger("werkzeug").level == logging.DEBUG
