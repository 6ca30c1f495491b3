"""
Logging configuration for show-sync.

This module sets up the logging system with multiple outputs:
    - Console: Real-time progress with tqdm-compatible formatting
    - log_full_{timestamp}.log: Complete log of all events (DEBUG and above)
    - log_errors_{timestamp}.log: Only ERROR and CRITICAL level messages
    - sync_failures_{timestamp}.log: Shows whose CMS write failed

Everything shown on screen is also saved to file, then filtered into
the specialized files.

Usage:
    from show_sync.core.logger import setup_logging, get_logger

    setup_logging(log_dir)  # Call once at startup
    logger = get_logger(__name__)  # Get logger for each module

    logger.info("Starting sync")
"""

import logging
import sys
import time
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Iterator, TextIO

from tqdm import tqdm


# Log format for file output (detailed with timestamp)
FILE_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(threadName)s | %(name)s | %(message)s"
FILE_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


class Colors:
    """ANSI color codes for terminal output."""
    RESET = "\033[0m"
    RED = "\033[31m"
    GREEN = "\033[32m"
    YELLOW = "\033[33m"
    BLUE = "\033[34m"
    WHITE = "\033[37m"
    BOLD = "\033[1m"


class ColoredConsoleFormatter(logging.Formatter):
    """
    Formatter that colors the level name on console output.

    Colors:
        - DEBUG: Blue
        - INFO: Green
        - WARNING: Yellow
        - ERROR: Red
        - CRITICAL: Bold Red
    """

    LEVEL_COLORS = {
        logging.DEBUG: Colors.BLUE,
        logging.INFO: Colors.GREEN,
        logging.WARNING: Colors.YELLOW,
        logging.ERROR: Colors.RED,
        logging.CRITICAL: Colors.BOLD + Colors.RED,
    }

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, Colors.WHITE)
        return f"{color}{record.levelname}{Colors.RESET}: {record.getMessage()}"


class TqdmLoggingHandler(logging.Handler):
    """
    Logging handler that writes to console without breaking progress bars.

    Uses tqdm.write(), which prints above any active progress bar and
    handles its own synchronization between threads.
    """

    def __init__(self, stream: TextIO = sys.stderr) -> None:
        super().__init__()
        self.stream = stream

    def emit(self, record: logging.LogRecord) -> None:
        try:
            msg = self.format(record)
            tqdm.write(msg, file=self.stream)
        except Exception:
            self.handleError(record)


class SyncFailureHandler(logging.Handler):
    """
    Handler that collects failed CMS writes into a report file.

    Only records carrying the 'sync_failed_external_id' extra field are
    written, in a simple human-readable format:

        12345 - Breaking Bad (update)
        all 8 retry attempts failed: CMS returned status 500

    Use log_sync_failure() to emit records with the right extra fields.

    Attributes:
        report_path: Path to the sync_failures log file.
        report_file: Open file handle, set by open().
    """

    def __init__(self, report_path: Path) -> None:
        super().__init__()
        self.report_path = report_path
        self.report_file: TextIO | None = None

    def open(self) -> None:
        """Open the report file for writing (overwrites existing content)."""
        self.report_file = open(self.report_path, "w", encoding="utf-8")

    def emit(self, record: logging.LogRecord) -> None:
        if not hasattr(record, "sync_failed_external_id"):
            return

        if self.report_file is None:
            return

        try:
            external_id = getattr(record, "sync_failed_external_id")
            title = getattr(record, "sync_failed_title", "Unknown")
            operation = getattr(record, "sync_failed_operation", "write")
            reason = getattr(record, "sync_failed_reason", "")

            # Handlers are called under the handler lock, writes do not interleave
            self.report_file.write(f"{external_id} - {title} ({operation})\n")
            self.report_file.write(f"{reason}\n\n")
            self.report_file.flush()
        except Exception:
            self.handleError(record)

    def close(self) -> None:
        """Close the report file handle. Safe to call multiple times."""
        if self.report_file is not None:
            try:
                self.report_file.close()
            except OSError:
                pass
            self.report_file = None
        super().close()


class ErrorOnlyFilter(logging.Filter):
    """Filter that only allows ERROR and CRITICAL level records."""

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno >= logging.ERROR


def setup_logging(log_dir: Path, verbose: bool = False) -> None:
    """
    Configure the logging system for the application.

    Call ONCE at startup, after the configuration is loaded and before
    any worker thread is started.

    Args:
        log_dir: Directory where log files will be created.
        verbose: If True, the console shows DEBUG messages too.

    Behavior:
        1. Create log_dir if it doesn't exist
        2. Configure root logger level to DEBUG
        3. Add console handler (TqdmLoggingHandler, INFO or DEBUG)
        4. Add full log file handler (DEBUG)
        5. Add error-only log file handler (ERROR+)
        6. Add sync failure report handler
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y-%m-%d_%H-%M-%S")

    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG)
    root_logger.handlers.clear()

    console_handler = TqdmLoggingHandler()
    console_handler.setLevel(logging.DEBUG if verbose else logging.INFO)
    console_handler.setFormatter(ColoredConsoleFormatter())
    root_logger.addHandler(console_handler)

    full_handler = logging.FileHandler(
        log_dir / f"log_full_{timestamp}.log", mode="w", encoding="utf-8"
    )
    full_handler.setLevel(logging.DEBUG)
    full_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    root_logger.addHandler(full_handler)

    error_handler = logging.FileHandler(
        log_dir / f"log_errors_{timestamp}.log", mode="w", encoding="utf-8"
    )
    error_handler.setLevel(logging.DEBUG)  # Filter handles the level restriction
    error_handler.setFormatter(logging.Formatter(FILE_LOG_FORMAT, FILE_DATE_FORMAT))
    error_handler.addFilter(ErrorOnlyFilter())
    root_logger.addHandler(error_handler)

    failure_handler = SyncFailureHandler(log_dir / f"sync_failures_{timestamp}.log")
    failure_handler.open()
    root_logger.addHandler(failure_handler)

    # urllib3 logs every connection at DEBUG
    logging.getLogger("urllib3").setLevel(logging.WARNING)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module.

    Args:
        name: The logger name, typically __name__ of the calling module.

    Returns:
        logging.Logger: A logger configured by setup_logging().

    Note:
        Loggers obtained before setup_logging() is called have no
        handlers of their own and propagate to the root logger.
    """
    return logging.getLogger(name)


@contextmanager
def log_duration(logger: logging.Logger, label: str) -> Iterator[None]:
    """
    Log how long the wrapped block took.

    Example:
        with log_duration(logger, "Download and parse all CMS shows"):
            index = build_destination_index(...)
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        logger.info(f"{label} took {time.perf_counter() - start:.2f}s")


def log_sync_failure(
    logger: logging.Logger,
    external_id: int,
    title: str,
    operation: str,
    reason: str
) -> None:
    """
    Log a show whose CMS write failed after all retries.

    Logs an ERROR and attaches the extra fields SyncFailureHandler uses
    to write to the sync failures report.

    Args:
        logger: The logger to use for the message.
        external_id: Catalog id of the show.
        title: Show title.
        operation: 'create' or 'update'.
        reason: Description of why the write failed.
    """
    logger.error(
        f"Failed to {operation} show {external_id} ({title}): {reason}",
        extra={
            "sync_failed_external_id": external_id,
            "sync_failed_title": title,
            "sync_failed_operation": operation,
            "sync_failed_reason": reason,
        }
    )


def shutdown_logging() -> None:
    """
    Flush and close all handlers of the root logger.

    Typically called in a finally block at application exit.
    """
    root_logger = logging.getLogger()

    for handler in root_logger.handlers[:]:
        try:
            handler.flush()
            handler.close()
        except OSError:
            pass
        root_logger.removeHandler(handler)
