import logging
import json
import os
import sys
from pathlib import Path
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

# Extra fields promoted into structured entries (logger.info("msg", extra={...}))
EXTRA_FIELDS = (
    "method", "path", "status", "duration_ms", "client_ip",
    "error", "error_type", "task", "state", "attempt",
    "model", "key_index", "source",
)


class StructuredFormatter(logging.Formatter):
    """JSON structured log formatter with correlation ID injection"""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "message": record.getMessage(),
            "logger": record.name,
        }

        # Set by correlation middleware
        if getattr(record, "correlation_id", None):
            entry["correlation_id"] = record.correlation_id
        if getattr(record, "user_id", None):
            entry["user_id"] = record.user_id

        for key in EXTRA_FIELDS:
            if hasattr(record, key):
                entry[key] = getattr(record, key)

        if record.levelno >= logging.WARNING:
            entry["source_location"] = f"{record.filename}:{record.lineno}"

        if record.exc_info and record.exc_info[1]:
            entry["exception"] = {
                "type": type(record.exc_info[1]).__name__,
                "message": str(record.exc_info[1]),
            }

        return json.dumps(entry, default=str)


class SimpleFormatter(logging.Formatter):
    """Human-readable formatter for local development"""

    def __init__(self):
        super().__init__(
            '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
            datefmt='%H:%M:%S'
        )


def setup_logger(name: str = "skillgap", level: str = None) -> logging.Logger:
    """
    Setup application logger.

    JSON to stdout when LOG_FORMAT=json (log drains), human-readable otherwise.
    LOG_FILE adds a rotating JSON file handler for local debugging.
    """
    logger = logging.getLogger(name)

    # Don't add handlers if they already exist
    if logger.handlers:
        return logger

    level = level or os.getenv("LOG_LEVEL", "INFO")
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    is_structured = os.getenv("LOG_FORMAT") == "json"

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(StructuredFormatter() if is_structured else SimpleFormatter())
    logger.addHandler(console_handler)

    log_file = os.getenv("LOG_FILE")
    if log_file:
        try:
            Path(log_file).parent.mkdir(parents=True, exist_ok=True)
            file_handler = RotatingFileHandler(
                log_file,
                maxBytes=10 * 1024 * 1024,  # 10MB
                backupCount=5,
                encoding='utf-8'
            )
            file_handler.setLevel(logging.DEBUG)
            file_handler.setFormatter(StructuredFormatter())
            logger.addHandler(file_handler)
        except OSError as e:
            logger.warning(f"Could not setup file logging: {e}")

    return logger


# Create default logger instance
logger = setup_logger()


def get_logger(name: str = None) -> logging.Logger:
    """Get a child of the application logger"""
    if name:
        return logger.getChild(name)
    return logger
