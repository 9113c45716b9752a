"""
Tests for the logging configuration module.
"""

import logging
import os
from pathlib import Path
from unittest.mock import patch

from carddav_sync.utils.logging import (
    CONSOLE_FORMAT,
    DATE_FORMAT,
    HTTP_LOGGER_NAMES,
    VERBOSE_FORMAT,
    ColoredFormatter,
    cleanup_old_logs,
    get_log_file_path,
    get_log_level_from_env,
    setup_logging,
)


class TestConstants:
    """Tests for module constants."""

    def test_formats_contain_message(self):
        """Test every format renders the message."""
        for fmt in (CONSOLE_FORMAT, VERBOSE_FORMAT):
            assert "%(message)s" in fmt

    def test_verbose_format_has_location(self):
        """Test VERBOSE_FORMAT includes file and line."""
        assert "%(filename)s" in VERBOSE_FORMAT
        assert "%(lineno)d" in VERBOSE_FORMAT


class TestGetLogLevelFromEnv:
    """Tests for get_log_level_from_env function."""

    @patch.dict(os.environ, {"CARDDAV_SYNC_DEBUG": "1"}, clear=False)
    def test_debug_mode_from_env_1(self):
        """Test debug mode enabled with '1'."""
        assert get_log_level_from_env() == logging.DEBUG

    @patch.dict(os.environ, {"CARDDAV_SYNC_DEBUG": "true"}, clear=False)
    def test_debug_mode_from_env_true(self):
        """Test debug mode enabled with 'true'."""
        assert get_log_level_from_env() == logging.DEBUG

    @patch.dict(
        os.environ,
        {"CARDDAV_SYNC_LOG_LEVEL": "ERROR", "CARDDAV_SYNC_DEBUG": ""},
        clear=False,
    )
    def test_log_level_error(self):
        """Test ERROR log level from env."""
        assert get_log_level_from_env() == logging.ERROR

    @patch.dict(
        os.environ,
        {"CARDDAV_SYNC_LOG_LEVEL": "WARN", "CARDDAV_SYNC_DEBUG": ""},
        clear=False,
    )
    def test_warn_alias_for_warning(self):
        """Test WARN is an alias for WARNING."""
        assert get_log_level_from_env() == logging.WARNING

    @patch.dict(
        os.environ,
        {"CARDDAV_SYNC_LOG_LEVEL": "INVALID", "CARDDAV_SYNC_DEBUG": ""},
        clear=False,
    )
    def test_invalid_level_defaults_to_info(self):
        """Test invalid log level defaults to INFO."""
        assert get_log_level_from_env() == logging.INFO


class TestGetLogFilePath:
    """Tests for get_log_file_path function."""

    @patch.dict(os.environ, {"CARDDAV_SYNC_LOG_FILE": "/custom/path/app.log"})
    def test_custom_log_file_from_env(self):
        """Test custom log file path from environment."""
        assert get_log_file_path() == Path("/custom/path/app.log")

    @patch.dict(os.environ, {"CARDDAV_SYNC_LOG_FILE": "none"})
    def test_log_file_disabled_with_none(self):
        """Test log file disabled with 'none'."""
        assert get_log_file_path() is None

    @patch.dict(os.environ, {"CARDDAV_SYNC_LOG_FILE": "disabled"})
    def test_log_file_disabled_with_disabled(self):
        """Test log file disabled with 'disabled'."""
        assert get_log_file_path() is None

    def test_default_log_dir_under_config_dir(self, tmp_path):
        """Test default log file lives in <config dir>/logs."""
        with patch.dict(
            os.environ, {"CARDDAV_SYNC_CONFIG_DIR": str(tmp_path)}, clear=True
        ):
            path = get_log_file_path()

        assert path is not None
        assert path.parent == tmp_path.resolve() / "logs"
        assert path.name.startswith("carddav_sync_")
        assert path.suffix == ".log"


class TestColoredFormatter:
    """Tests for ColoredFormatter class."""

    def test_formatter_with_colors_disabled(self):
        """Test formatter with colors explicitly disabled."""
        formatter = ColoredFormatter(CONSOLE_FORMAT, DATE_FORMAT, use_colors=False)
        assert formatter.use_colors is False

    @patch("sys.stdout")
    def test_formatter_supports_color_non_tty(self, mock_stdout):
        """Test formatter detects non-TTY and disables colors."""
        mock_stdout.isatty.return_value = False
        formatter = ColoredFormatter(CONSOLE_FORMAT, DATE_FORMAT, use_colors=True)
        assert formatter.use_colors is False

    @patch.dict(os.environ, {"NO_COLOR": "1"})
    @patch("sys.stdout")
    def test_formatter_respects_no_color_env(self, mock_stdout):
        """Test formatter respects NO_COLOR environment variable."""
        mock_stdout.isatty.return_value = True
        formatter = ColoredFormatter(CONSOLE_FORMAT, DATE_FORMAT, use_colors=True)
        assert formatter.use_colors is False

    def test_format_record_without_colors(self):
        """Test formatting a record without colors."""
        formatter = ColoredFormatter(CONSOLE_FORMAT, DATE_FORMAT, use_colors=False)
        record = logging.LogRecord(
            name="test",
            level=logging.INFO,
            pathname="test.py",
            lineno=1,
            msg="Test message",
            args=(),
            exc_info=None,
        )
        result = formatter.format(record)
        assert "Test message" in result
        assert "\033[" not in result

    @patch("sys.stdout")
    def test_colored_format_leaves_record_untouched(self, mock_stdout):
        """Test colors are applied to a copy of the record."""
        mock_stdout.isatty.return_value = True
        with patch.dict(os.environ, {"TERM": "xterm"}, clear=True):
            formatter = ColoredFormatter(CONSOLE_FORMAT, DATE_FORMAT)
        record = logging.makeLogRecord(
            {"levelname": "WARNING", "levelno": logging.WARNING, "msg": "careful"}
        )

        result = formatter.format(record)

        assert result.startswith("\033[33mWARNING")
        assert record.levelname == "WARNING"
        assert record.msg == "careful"


class TestSetupLogging:
    """Tests for setup_logging function."""

    def test_setup_logging_returns_logger(self):
        """Test setup_logging returns the package logger."""
        logger = setup_logging(enable_file_logging=False)
        assert isinstance(logger, logging.Logger)
        assert logger.name == "carddav_sync"

    def test_setup_logging_with_verbose(self):
        """Test setup_logging with verbose mode."""
        logger = setup_logging(verbose=True, enable_file_logging=False)
        assert logger.level == logging.DEBUG

    def test_setup_logging_with_explicit_level(self):
        """Test setup_logging with explicit level."""
        logger = setup_logging(level=logging.WARNING, enable_file_logging=False)
        assert logger.level == logging.WARNING

    def test_setup_logging_clears_handlers(self):
        """Test setup_logging clears existing handlers."""
        setup_logging(enable_file_logging=False)
        logger = setup_logging(enable_file_logging=False)
        assert len(logger.handlers) == 1

    def test_setup_logging_with_file(self, tmp_path):
        """Test setup_logging with file logging."""
        log_file = tmp_path / "test.log"
        logger = setup_logging(
            log_file=log_file, enable_file_logging=True, use_colors=False
        )
        assert len(logger.handlers) == 2
        logger.info("Test message")
        assert log_file.exists()

    def test_setup_logging_with_log_dir(self, tmp_path):
        """Test setup_logging writes a dated file into log_dir."""
        logger = setup_logging(log_dir=tmp_path, use_colors=False)
        logger.info("Test message")

        assert list(tmp_path.glob("carddav_sync_*.log"))

    def test_setup_logging_propagate_disabled(self):
        """Test that propagation to root logger is disabled."""
        logger = setup_logging(enable_file_logging=False)
        assert logger.propagate is False


class TestCleanupOldLogs:
    """Tests for cleanup_old_logs function."""

    def test_keeps_most_recent(self, tmp_path):
        """Test only keep_count newest log files survive."""
        for day in range(5):
            log = tmp_path / f"carddav_sync_2026010{day}.log"
            log.write_text("x")
            os.utime(log, (1_700_000_000 + day, 1_700_000_000 + day))
        (tmp_path / "other.log").write_text("x")

        deleted = cleanup_old_logs(log_dir=tmp_path, keep_count=2)

        assert deleted == 3
        remaining = sorted(p.name for p in tmp_path.glob("carddav_sync_*.log"))
        assert remaining == ["carddav_sync_20260103.log", "carddav_sync_20260104.log"]
        assert (tmp_path / "other.log").exists()

    def test_zero_keep_count_disables_cleanup(self, tmp_path):
        """Test keep_count=0 deletes nothing."""
        (tmp_path / "carddav_sync_20260101.log").write_text("x")
        assert cleanup_old_logs(log_dir=tmp_path, keep_count=0) == 0

    def test_missing_directory(self, tmp_path):
        """Test a missing directory is not an error."""
        assert cleanup_old_logs(log_dir=tmp_path / "nope", keep_count=1) == 0



class TestHttpLoggerRouting:
    """Tests for routing urllib3 output through the package console."""

    def test_verbose_shows_http_traffic(self):
        """Test verbose mode attaches the console handler to urllib3."""
        logger = setup_logging(verbose=True, enable_file_logging=False)

        for name in HTTP_LOGGER_NAMES:
            http_logger = logging.getLogger(name)
            assert http_logger.level == logging.DEBUG
            assert http_logger.handlers == [logger.handlers[0]]
            assert http_logger.propagate is False

    def test_quiet_by_default(self):
        """Test non-verbose mode only lets urllib3 warnings through."""
        setup_logging(verbose=True, enable_file_logging=False)
        setup_logging(enable_file_logging=False)

        for name in HTTP_LOGGER_NAMES:
            http_logger = logging.getLogger(name)
            assert http_logger.level == logging.WARNING
            assert http_logger.handlers == []
            assert http_logger.propagate is True
