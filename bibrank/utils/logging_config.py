"""
Logging configuration module with failure accounting
"""

import sys
import time
import traceback
from pathlib import Path
from typing import Any

from loguru import logger

from .config import Config

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {name}:{function}:{line} - {message}"


class ErrorHandler:
    """
    Count failures of a run while logging them

    Failures are tallied by error type and, when the caller names one, by
    source, so a run summary can tell "dblp was down" from "parsing broke".
    """

    def __init__(self):
        self.error_counts = {}
        self.source_counts = {}
        self.warning_count = 0

    def log_error(self, error: Exception, context: str = "", source: str | None = None) -> None:
        """
        Log a recoverable failure

        Args:
            error: Exception object
            context: Where the failure happened (record title, stage)
            source: Source name the failure belongs to
        """
        error_type = type(error).__name__
        self.error_counts[error_type] = self.error_counts.get(error_type, 0) + 1
        if source:
            self.source_counts[source] = self.source_counts.get(source, 0) + 1

        error_msg = f"[{error_type}] {error!s}"
        if context:
            error_msg = f"{context}: {error_msg}"

        logger.error(error_msg)
        if error.__traceback__ is not None:
            trace = "".join(traceback.format_exception(type(error), error, error.__traceback__))
            logger.debug(f"Stack trace:\n{trace}")

    def log_warning(self, message: str, context: str = "") -> None:
        """Log a warning that does not fail the (record, source) pair"""
        self.warning_count += 1
        logger.warning(f"{context}: {message}" if context else message)

    def get_error_summary(self) -> dict[str, Any]:
        """
        Get failure statistics of the run

        Returns:
            Counts by error type and by source, plus totals
        """
        return {
            "error_counts": dict(self.error_counts),
            "source_counts": dict(self.source_counts),
            "total_errors": sum(self.error_counts.values()),
            "total_warnings": self.warning_count,
        }

    def reset_counts(self) -> None:
        """Start a new run"""
        self.error_counts.clear()
        self.source_counts.clear()
        self.warning_count = 0


# Global error handler instance
error_handler = ErrorHandler()


def setup_logging(
    config: Config,
    log_file: Path | None = None,
    max_file_size: str = "10 MB",
    retention: str = "1 week",
) -> None:
    """
    Route loguru output to stderr and optionally a rotating file

    Args:
        config: Configuration object (verbose selects DEBUG on stderr)
        log_file: Path to log file (optional)
        max_file_size: Rotation size of the log file
        retention: Log retention period
    """
    logger.remove()

    logger.add(
        sys.stderr,
        format=CONSOLE_FORMAT,
        level="DEBUG" if config.verbose else "INFO",
        colorize=True,
        backtrace=True,
        diagnose=config.verbose,
    )

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        logger.add(
            log_file,
            format=FILE_FORMAT,
            level="DEBUG",  # Always debug level for files
            rotation=max_file_size,
            retention=retention,
            encoding="utf-8",
        )


def get_logger(name: str):
    """Get a logger bound to a component name"""
    return logger.bind(name=name)


class OperationTimer:
    """Context manager timing a named operation"""

    def __init__(self, operation_name: str, logger_instance=None):
        self.operation_name = operation_name
        self.logger = logger_instance or logger
        self.start_time = None
        self.duration = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        self.logger.debug(f"Starting operation: {self.operation_name}")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time

        if exc_type is None:
            self.logger.info(f"Operation {self.operation_name} completed in {self.duration:.3f}s")
        else:
            self.logger.error(f"Operation {self.operation_name} failed after {self.duration:.3f}s: {exc_val}")

        return False
