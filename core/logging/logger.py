"""
RentFlow logging.
Structured logging with keyword context and an optional JSON formatter.
"""

import logging
import json
import sys
from datetime import datetime, timezone
from typing import Any, Optional

from core.config.settings import settings

# Attributes every LogRecord has; anything else came in through ``extra``
_RESERVED_ATTRS = set(vars(logging.LogRecord("", 0, "", 0, "", (), None))) | {"message", "asctime"}


class JSONFormatter(logging.Formatter):
    """Formats log records as JSON lines."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno
        }

        # Context passed as keyword arguments
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                log_entry[key] = value

        if record.exc_info:
            log_entry['exception'] = self.formatException(record.exc_info)

        return json.dumps(log_entry, ensure_ascii=False, default=str)


class ContextFormatter(logging.Formatter):
    """Plain text formatter that appends keyword context as key=value pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = [
            f"{key}={value}"
            for key, value in record.__dict__.items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        ]
        if context:
            return f"{base} | {' '.join(context)}"
        return base


class StructuredLogger:
    """Logger wrapper that accepts context as keyword arguments."""

    def __init__(self, name: str):
        self.logger = logging.getLogger(name)

    def _log_with_context(self, level: int, message: str, exc_info: bool = False, **kwargs: Any) -> None:
        extra = {}
        for key, value in kwargs.items():
            if value is None:
                continue
            # LogRecord refuses to overwrite its own attributes
            extra[f"ctx_{key}" if key in _RESERVED_ATTRS else key] = value
        self.logger.log(level, message, exc_info=exc_info, extra=extra)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.DEBUG, message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.INFO, message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.WARNING, message, **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.ERROR, message, **kwargs)

    def critical(self, message: str, **kwargs: Any) -> None:
        self._log_with_context(logging.CRITICAL, message, **kwargs)

    def exception(self, message: str, **kwargs: Any) -> None:
        """Logs an error together with the current traceback."""
        self._log_with_context(logging.ERROR, message, exc_info=True, **kwargs)


def setup_logging(level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """Configures the root logger for the application."""
    root_logger = logging.getLogger()
    root_logger.setLevel(level or settings.log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    if (log_format or settings.log_format) == "json":
        formatter: logging.Formatter = JSONFormatter()
    else:
        formatter = ContextFormatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    if settings.log_file:
        file_handler = logging.FileHandler(settings.log_file, encoding="utf-8")
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)


# Main application logger
logger = StructuredLogger("rentflow")
