"""
Logging configuration module for carddav_sync.

All package loggers live under the "carddav_sync" hierarchy and share the
handlers installed by setup_logging():

- A console handler on stderr, colored when the terminal supports it
- A dated log file under <config dir>/logs, always at DEBUG

Environment overrides:

    CARDDAV_SYNC_DEBUG=1            force DEBUG
    CARDDAV_SYNC_LOG_LEVEL=WARNING  console level
    CARDDAV_SYNC_LOG_FILE=path      log file, or "none" to disable it

In verbose mode the HTTP connection logs of urllib3 (used by requests) are
routed to the same console, so every round trip to the server is visible.
"""

import logging
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from carddav_sync.utils.paths import resolve_config_dir

LOGGER_NAME = "carddav_sync"

# Transport libraries whose output follows --verbose
HTTP_LOGGER_NAMES = ("urllib3",)

CONSOLE_FORMAT = "%(levelname)s: %(message)s"
VERBOSE_FORMAT = (
    "%(asctime)s - %(name)s - %(levelname)s - [%(filename)s:%(lineno)d] - %(message)s"
)
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ENV_LOG_LEVEL = "CARDDAV_SYNC_LOG_LEVEL"
ENV_DEBUG = "CARDDAV_SYNC_DEBUG"
ENV_LOG_FILE = "CARDDAV_SYNC_LOG_FILE"

# carddav_sync_YYYYMMDD.log
LOG_FILE_PREFIX = "carddav_sync_"


def get_default_log_dir() -> Path:
    """Return the logs directory inside the configuration directory."""
    return resolve_config_dir() / "logs"


class ColoredFormatter(logging.Formatter):
    """
    Formatter that colors the level name and message by severity.

    Colors are dropped when stdout is not a terminal, when NO_COLOR is set
    or when TERM is "dumb".
    """

    COLORS = {
        "DEBUG": "\033[36m",
        "INFO": "\033[32m",
        "WARNING": "\033[33m",
        "ERROR": "\033[31m",
        "CRITICAL": "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(
        self,
        fmt: Optional[str] = None,
        datefmt: Optional[str] = None,
        use_colors: bool = True,
    ):
        super().__init__(fmt, datefmt)
        self.use_colors = use_colors and self._supports_color()

    @staticmethod
    def _supports_color() -> bool:
        if not getattr(sys.stdout, "isatty", None) or not sys.stdout.isatty():
            return False
        # https://no-color.org/
        if os.environ.get("NO_COLOR"):
            return False
        return os.environ.get("TERM", "") != "dumb"

    def format(self, record: logging.LogRecord) -> str:
        color = self.COLORS.get(record.levelname) if self.use_colors else None
        if color is None:
            return super().format(record)

        # Color a copy so other handlers see the plain record
        record = logging.makeLogRecord(record.__dict__)
        record.levelname = f"{color}{record.levelname}{self.RESET}"
        record.msg = f"{color}{record.msg}{self.RESET}"
        return super().format(record)


def get_log_level_from_env() -> int:
    """
    Return the level selected by CARDDAV_SYNC_DEBUG / CARDDAV_SYNC_LOG_LEVEL.

    Unknown level names fall back to INFO.
    """
    if os.environ.get(ENV_DEBUG, "").lower() in ("1", "true", "yes"):
        return logging.DEBUG

    # getLevelName maps known names (WARN included) to their number
    level = logging.getLevelName(os.environ.get(ENV_LOG_LEVEL, "INFO").upper())
    return level if isinstance(level, int) else logging.INFO


def _dated_log_name() -> str:
    return f"{LOG_FILE_PREFIX}{datetime.now().strftime('%Y%m%d')}.log"


def get_log_file_path() -> Optional[Path]:
    """
    Get the log file path from CARDDAV_SYNC_LOG_FILE or the default location.

    Returns:
        Path to log file, or None if file logging is disabled
    """
    log_file = os.environ.get(ENV_LOG_FILE)
    if log_file:
        if log_file.lower() in ("none", "disabled"):
            return None
        return Path(log_file)

    return get_default_log_dir() / _dated_log_name()


def _console_handler(level: int, verbose: bool, use_colors: bool) -> logging.Handler:
    fmt = VERBOSE_FORMAT if verbose else CONSOLE_FORMAT
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if use_colors:
        handler.setFormatter(ColoredFormatter(fmt, DATE_FORMAT))
    else:
        handler.setFormatter(logging.Formatter(fmt, DATE_FORMAT))
    return handler


def _file_handler(path: Path) -> logging.Handler:
    path.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(VERBOSE_FORMAT, DATE_FORMAT))
    return handler


def _route_http_loggers(console: logging.Handler, verbose: bool) -> None:
    for name in HTTP_LOGGER_NAMES:
        http_logger = logging.getLogger(name)
        http_logger.handlers.clear()
        if verbose:
            http_logger.setLevel(logging.DEBUG)
            http_logger.addHandler(console)
            http_logger.propagate = False
        else:
            http_logger.setLevel(logging.WARNING)
            http_logger.propagate = True


def setup_logging(
    level: Optional[int] = None,
    verbose: bool = False,
    log_dir: Optional[Path] = None,
    log_file: Optional[Path] = None,
    enable_file_logging: bool = True,
    use_colors: bool = True,
) -> logging.Logger:
    """
    Configure logging for the carddav_sync application.

    Calling it again replaces the handlers installed by the previous call.

    Args:
        level: Console level. If None, determined from environment variables.
        verbose: Force DEBUG, use the detailed format and show HTTP traffic.
        log_dir: Directory for the dated log file, overriding the default.
        log_file: Explicit log file path; takes precedence over log_dir.
        enable_file_logging: If False, log to the console only.
        use_colors: Color console output when the terminal supports it.

    Returns:
        The carddav_sync package logger
    """
    if level is None:
        level = get_log_level_from_env()
    if verbose:
        level = logging.DEBUG

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)
    logger.handlers.clear()
    logger.propagate = False

    console = _console_handler(level, verbose, use_colors)
    logger.addHandler(console)
    _route_http_loggers(console, verbose)

    if not enable_file_logging:
        return logger

    if log_file:
        file_path: Optional[Path] = log_file
    elif log_dir:
        file_path = log_dir / _dated_log_name()
    else:
        file_path = get_log_file_path()

    if file_path:
        try:
            logger.addHandler(_file_handler(file_path))
            logger.debug(f"Log file: {file_path}")
        except OSError as e:
            logger.warning(f"Could not create log file {file_path}: {e}")

    return logger


def cleanup_old_logs(log_dir: Optional[Path] = None, keep_count: int = 10) -> int:
    """
    Delete all but the ``keep_count`` most recent carddav_sync log files.

    Args:
        log_dir: Directory containing log files. If None, uses the default.
        keep_count: Number of log files to keep. 0 disables cleanup.

    Returns:
        Number of files deleted.
    """
    if keep_count <= 0:
        return 0

    logs_dir = log_dir or get_default_log_dir()
    if not logs_dir.exists():
        return 0

    logs = sorted(
        logs_dir.glob(f"{LOG_FILE_PREFIX}*.log"),
        key=lambda p: p.stat().st_mtime,
        reverse=True,
    )

    deleted = 0
    for old_log in logs[keep_count:]:
        try:
            old_log.unlink()
            deleted += 1
        except OSError as e:
            logging.getLogger(__name__).debug(f"Could not delete {old_log}: {e}")

    return deleted


__all__ = [
    "setup_logging",
    "cleanup_old_logs",
    "ColoredFormatter",
    "get_log_level_from_env",
    "get_log_file_path",
    "get_default_log_dir",
    "LOGGER_NAME",
    "HTTP_LOGGER_NAMES",
    "CONSOLE_FORMAT",
    "VERBOSE_FORMAT",
    "DATE_FORMAT",
]
