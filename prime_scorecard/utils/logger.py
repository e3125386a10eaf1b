"""
Logging infrastructure for the scorecard engine and its CLI.

Provides:
- Aligned, millisecond-precision log lines
- key=value structured suffixes
- Optional file output
- Warning/error tracking for end-of-run summaries
"""

import logging
import sys
from contextlib import contextmanager
from datetime import datetime
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(filename)s:%(lineno)d | %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S,%f"


class MillisecondsFormatter(logging.Formatter):
    """Formatter that includes milliseconds and aligns log levels."""

    def formatTime(self, record, datefmt=None):  # noqa: N802 - must match parent class method name
        ct = datetime.fromtimestamp(record.created)
        if datefmt and "%f" in datefmt:
            s = ct.strftime(datefmt.replace(",%f", ""))
            return s + f",{int(record.msecs):03d}"
        elif datefmt:
            return ct.strftime(datefmt)
        else:
            return ct.strftime("%Y-%m-%d %H:%M:%S") + f",{int(record.msecs):03d}"


def _format_kwargs(message: str, kwargs: dict) -> str:
    if not kwargs:
        return message
    formatted_data = " ".join(f"{k}={v}" for k, v in kwargs.items())
    return f"{message} [{formatted_data}]"


class ScoringLogger:
    """
    Logger for scoring runs with structured output and error tracking.
    """

    def __init__(
        self,
        name: str = "prime_scorecard",
        log_level: str = "INFO",
        log_file: Optional[str] = None,
        log_dir: Optional[Path] = None,
        stream=None,
    ):
        """
        Initialize the scoring logger.

        Args:
            name: Logger name
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
            log_file: Optional log file name
            log_dir: Directory for log files (defaults to ./logs)
            stream: Console stream (defaults to stderr so stdout stays clean for JSON)
        """
        level = getattr(logging, log_level.upper())
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Prevent propagation to root logger to avoid duplicate logs
        self.logger.propagate = False

        if self.logger.handlers:
            self.logger.handlers.clear()

        formatter = MillisecondsFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)

        console_handler = logging.StreamHandler(stream or sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        self.logger.addHandler(console_handler)

        if log_file:
            log_dir = log_dir or Path.cwd() / "logs"
            log_dir.mkdir(parents=True, exist_ok=True)
            log_path = log_dir / log_file

            file_handler = logging.FileHandler(log_path)
            file_handler.setLevel(logging.DEBUG)  # Log everything to file
            file_handler.setFormatter(formatter)
            self.logger.addHandler(file_handler)

            self.info(f"Logging to file: {log_path}")

        self.errors = []
        self.warnings = []

    def debug(self, message: str, **kwargs):
        self.logger.debug(_format_kwargs(message, kwargs), stacklevel=2)

    def info(self, message: str, **kwargs):
        self.logger.info(_format_kwargs(message, kwargs), stacklevel=2)

    def warning(self, message: str, **kwargs):
        """Log warning message and track for reporting."""
        message = _format_kwargs(message, kwargs)
        self.logger.warning(message, stacklevel=2)
        self.warnings.append(
            {
                "message": message,
                "timestamp": datetime.now().isoformat(),
                "data": kwargs,
            }
        )

    def error(self, message: str, exception: Optional[Exception] = None, **kwargs):
        """Log error message and track for reporting."""
        if exception:
            message = f"{message} | Exception: {str(exception)}"
        message = _format_kwargs(message, kwargs)

        self.logger.error(message, exc_info=exception is not None, stacklevel=2)
        self.errors.append(
            {
                "message": message,
                "exception": str(exception) if exception else None,
                "timestamp": datetime.now().isoformat(),
                "data": kwargs,
            }
        )

    def log_scorecard(self, prime_score: Optional[int], prime_confidence: int, evidence_used: int, revision: str):
        """Log a finished scorecard generation."""
        message = (
            f"Scorecard generated [prime_score={prime_score} prime_confidence={prime_confidence} "
            f"evidence_used={evidence_used} revision={revision}]"
        )
        self.logger.info(message, stacklevel=2)

    def log_selection(self, primary: str, secondary: Optional[str], tertiary: Optional[str], hours: float):
        message = f"Domains selected [primary={primary} secondary={secondary} tertiary={tertiary} hours={hours}]"
        self.logger.info(message, stacklevel=2)

    @contextmanager
    def time_operation(self, operation: str, **context):
        """
        Context manager to time and log one operation.

        Args:
            operation: Description of operation (e.g., "scorecard generation")
            **context: Extra key=value fields for the start/finish lines

        Usage:
            with logger.time_operation("scorecard generation", source="inputs.yaml"):
                # ... perform operation ...
        """
        start_time = datetime.now()
        self.info(f"Starting {operation}", **context)

        try:
            yield
            duration = (datetime.now() - start_time).total_seconds()
            self.info(f"Completed {operation}", duration_seconds=round(duration, 3), **context)
        except Exception as e:
            duration = (datetime.now() - start_time).total_seconds()
            self.error(f"Failed {operation}", exception=e, duration_seconds=round(duration, 3), **context)
            raise

    def get_error_summary(self) -> dict:
        """Get summary of errors and warnings for reporting."""
        return {
            "total_errors": len(self.errors),
            "total_warnings": len(self.warnings),
            "errors": self.errors,
            "warnings": self.warnings,
        }

    def clear_tracking(self):
        """Clear tracked errors and warnings."""
        self.errors = []
        self.warnings = []


def configure_global_logging(log_level: str = "INFO", stream=None):
    """
    Configure the root logger with the unified format.

    Call this early in application startup so module loggers
    (logging.getLogger(__name__)) share the same format.

    Args:
        log_level: Logging level to apply globally (DEBUG, INFO, WARNING, ERROR)
        stream: Output stream (defaults to stderr)
    """
    formatter = MillisecondsFormatter(LOG_FORMAT, datefmt=DATE_FORMAT)

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, log_level.upper()))
    root_logger.handlers.clear()

    root_handler = logging.StreamHandler(stream or sys.stderr)
    root_handler.setLevel(getattr(logging, log_level.upper()))
    root_handler.setFormatter(formatter)
    root_logger.addHandler(root_handler)
