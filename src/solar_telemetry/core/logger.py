"""
Logging configuration for solar telemetry processing.

Console output goes to stderr so that command output on stdout stays
machine readable; the log file keeps DEBUG detail for batch diagnostics.
"""

import logging
import os
import time
from pathlib import Path
from typing import Iterable, Optional

# HTTP retry chatter from the weather and generation clients
QUIET_LOGGERS = ("urllib3",)

# Exceptions that reject a batch rather than signal a fault
REJECTIONS = (ValueError, RuntimeError)


def setup_logger(
    name: str = "solar_telemetry",
    log_file: Optional[str] = None,
    log_level: str = "INFO",
    quiet_loggers: Iterable[str] = QUIET_LOGGERS
) -> logging.Logger:
    """
    Set up the application logger.

    Args:
        name: Logger name
        log_file: Path to log file. If None, uses LOG_FILE env var or
            logs/solar_telemetry.log
        log_level: Level name for the logger; unknown names fall back to INFO
        quiet_loggers: Third-party loggers limited to WARNING

    Returns:
        Configured logger instance
    """
    if log_file is None:
        log_file = os.getenv("LOG_FILE", "logs/solar_telemetry.log")
    Path(log_file).parent.mkdir(parents=True, exist_ok=True)

    level = logging.getLevelName(str(log_level).upper())
    if not isinstance(level, int):
        level = logging.INFO

    logger = logging.getLogger(name)
    logger.setLevel(level)

    # Re-running setup (tests, repeated app construction) must not stack handlers
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler()
    console_handler.setLevel(logging.INFO)
    console_handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    logger.addHandler(console_handler)

    file_handler = logging.FileHandler(log_file, mode="a", encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    ))
    logger.addHandler(file_handler)

    logger.propagate = False

    for quiet in quiet_loggers:
        logging.getLogger(quiet).setLevel(logging.WARNING)

    return logger


class LoggerContext:
    """
    Time a batch operation and log its outcome.

    A batch rejected with ValueError or RuntimeError is logged as a warning
    without a traceback; any other exception is logged as an error with one.
    Exceptions always propagate.

    Example:
        with LoggerContext(logger, "meter batch validation", rows=len(rows)):
            ...
    """

    def __init__(self, logger: logging.Logger, operation: str, rows: Optional[int] = None):
        """
        Initialize logger context.

        Args:
            logger: Logger instance
            operation: Name of the operation being logged
            rows: Number of rows the operation handles, if known
        """
        self.logger = logger
        self.operation = operation
        self.rows = rows
        self.duration: Optional[float] = None
        self._started: Optional[float] = None

    def _describe(self) -> str:
        if self.rows is None:
            return self.operation
        return f"{self.operation} ({self.rows} rows)"

    def __enter__(self):
        self._started = time.perf_counter()
        self.logger.info(f"Starting {self._describe()}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self._started

        if exc_type is None:
            self.logger.info(f"Completed {self._describe()} in {self.duration:.2f}s")
        elif issubclass(exc_type, REJECTIONS):
            self.logger.warning(f"Rejected {self._describe()} after {self.duration:.2f}s: {exc_val}")
        else:
            self.logger.error(
                f"Failed {self._describe()} after {self.duration:.2f}s: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb)
            )
        return False
