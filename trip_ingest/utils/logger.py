# trip_ingest/utils/logger.py
"""
Centralized logging configuration for the trip record uploader
"""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional
from datetime import datetime, timezone
import json


# Attributes every LogRecord carries; anything else came in through ``extra``
_RESERVED_RECORD_ATTRS = frozenset([
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'taskName',
    'exc_info', 'exc_text', 'stack_info', 'message', 'asctime'
])


class JSONFormatter(logging.Formatter):
    """
    JSON formatter for structured logging

    One JSON object per line, so the uploader's own logs can be
    shipped to the same search store it feeds
    """

    def format(self, record: logging.LogRecord) -> str:
        """
        Format log record as JSON

        Args:
            record: Log record to format

        Returns:
            JSON-formatted log string
        """
        log_entry = {
            'timestamp': datetime.now(timezone.utc).isoformat().replace('+00:00', 'Z'),
            'level': record.levelname,
            'logger': record.name,
            'message': record.getMessage(),
            'module': record.module,
            'function': record.funcName,
            'line': record.lineno,
            'process_id': record.process,
            'thread_id': record.thread
        }

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS:
                log_entry[key] = value

        return json.dumps(log_entry, default=str)


class PipelineLogger:
    """
    Pipeline-specific logger configuration

    Provides:
    - Consistent logging format across all pipeline components
    - Console logging, JSON unless running at DEBUG
    - Rotating file logs when a log directory is given
    """

    def __init__(self, log_level: str = "INFO", log_dir: Optional[Path] = None):
        """
        Initialize pipeline logger

        Args:
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
            log_dir: Directory for log files (optional)
        """
        self.log_level = log_level.upper()
        self.log_dir = log_dir
        self._configure_logging()

    def _configure_logging(self) -> None:
        """Configure logging handlers and formatters"""
        level = getattr(logging, self.log_level, logging.INFO)

        root_logger = logging.getLogger()
        root_logger.setLevel(level)

        # Clear existing handlers to avoid duplication
        root_logger.handlers.clear()

        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(level)

        if self.log_level == "DEBUG":
            console_formatter = logging.Formatter(
                '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
                datefmt='%Y-%m-%d %H:%M:%S'
            )
        else:
            console_formatter = JSONFormatter()

        console_handler.setFormatter(console_formatter)
        root_logger.addHandler(console_handler)

        if self.log_dir:
            self.log_dir = Path(self.log_dir)
            self.log_dir.mkdir(parents=True, exist_ok=True)

            file_handler = logging.handlers.RotatingFileHandler(
                filename=self.log_dir / 'trip_upload.log',
                maxBytes=50 * 1024 * 1024,  # 50MB
                backupCount=10,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.INFO)
            file_handler.setFormatter(JSONFormatter())
            root_logger.addHandler(file_handler)

            error_handler = logging.handlers.RotatingFileHandler(
                filename=self.log_dir / 'errors.log',
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            error_handler.setLevel(logging.ERROR)
            error_handler.setFormatter(JSONFormatter())
            root_logger.addHandler(error_handler)

        # Suppress noisy third-party loggers
        logging.getLogger('urllib3').setLevel(logging.WARNING)
        logging.getLogger('requests').setLevel(logging.WARNING)


class PerformanceLogger:
    """
    Timing and volume metrics for the upload run
    """

    def __init__(self, logger_name: str):
        """
        Initialize performance logger

        Args:
            logger_name: Name for the logger instance
        """
        self.logger = logging.getLogger(f"performance.{logger_name}")
        self.start_times = {}

    def start_operation(self, operation_name: str) -> None:
        """
        Start timing an operation

        Args:
            operation_name: Name of the operation to time
        """
        self.start_times[operation_name] = datetime.now(timezone.utc)
        self.logger.debug(f"Started operation: {operation_name}")

    def end_operation(self, operation_name: str, **extra_metrics) -> float:
        """
        End timing an operation and log metrics

        Args:
            operation_name: Name of the operation
            **extra_metrics: Additional metrics to log

        Returns:
            Duration in seconds
        """
        if operation_name not in self.start_times:
            self.logger.warning(f"Operation {operation_name} was not started")
            return 0.0

        end_time = datetime.now(timezone.utc)
        duration = (end_time - self.start_times[operation_name]).total_seconds()

        metrics = {
            'operation': operation_name,
            'duration_seconds': duration,
            'start_time': self.start_times[operation_name].isoformat(),
            'end_time': end_time.isoformat(),
            **extra_metrics
        }

        self.logger.info(f"Completed operation: {operation_name}", extra=metrics)
        del self.start_times[operation_name]

        return duration

    def log_data_metrics(self, **metrics) -> None:
        """
        Log data processing metrics

        Args:
            **metrics: Data metrics to log
        """
        self.logger.info("Data metrics", extra={'metrics_type': 'data', **metrics})


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance for a module

    Args:
        name: Usually __name__ from the calling module

    Returns:
        Configured logger instance
    """
    return logging.getLogger(name)


def setup_pipeline_logging(log_level: str = "INFO", log_dir: Optional[str] = None) -> None:
    """
    Setup logging for the whole uploader

    Call this once at the start of your application

    Args:
        log_level: Logging level
        log_dir: Directory for log files
    """
    log_dir_path = Path(log_dir) if log_dir else None
    PipelineLogger(log_level=log_level, log_dir=log_dir_path)


class timed_operation:
    """
    Context manager for timing operations

    Usage:
        with timed_operation("upload_batch_3", logger) as timer:
            ...
        print(timer.duration)
    """

    def __init__(self, operation_name: str, logger: logging.Logger):
        self.operation_name = operation_name
        self.logger = logger
        self.duration = 0.0
        self.performance_logger = PerformanceLogger(logger.name)

    def __enter__(self):
        self.performance_logger.start_operation(self.operation_name)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = self.performance_logger.end_operation(
            self.operation_name,
            success=exc_type is None,
            error_type=exc_type.__name__ if exc_type else None
        )
        return False
