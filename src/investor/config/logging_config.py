"""
Structured logging configuration for the investor watchlist application.

This module sets up consistent logging across all components with proper
formatting, levels, and structured data support for better debugging.
"""

import json
import logging
import logging.config
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional

# Attributes every LogRecord carries; anything else was passed via ``extra``
_RESERVED_RECORD_ATTRS = frozenset([
    'name', 'msg', 'args', 'levelname', 'levelno', 'pathname', 'filename',
    'module', 'lineno', 'funcName', 'created', 'msecs', 'relativeCreated',
    'thread', 'threadName', 'processName', 'process', 'getMessage',
    'exc_info', 'exc_text', 'stack_info', 'taskName', 'message', 'asctime',
])


def setup_logging(
    level: str = "INFO",
    log_to_file: bool = False,
    log_file_path: str = "logs/investor.log",
    enable_structured_logging: bool = False
) -> None:
    """
    Configure logging for the investor application.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        log_to_file: Whether to write logs to file
        log_file_path: Path to log file
        enable_structured_logging: Whether to also write structured JSON logs
    """

    if log_to_file:
        log_path = Path(log_file_path)
        log_path.parent.mkdir(parents=True, exist_ok=True)

    config = get_logging_config(level, log_to_file, log_file_path, enable_structured_logging)
    logging.config.dictConfig(config)


def setup_logging_from_config(app_config) -> None:
    """Configure logging from the ``logging`` section of an AppConfig."""
    settings = app_config.logging
    setup_logging(
        level=settings.level,
        log_to_file=settings.log_to_file,
        log_file_path=settings.log_file_path,
        enable_structured_logging=settings.structured,
    )


def get_logging_config(
    level: str,
    log_to_file: bool,
    log_file_path: str,
    enable_structured_logging: bool
) -> Dict[str, Any]:
    """Get logging configuration dictionary."""

    formatters = {
        "standard": {
            "format": "%(asctime)s [%(levelname)8s] %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S"
        },
        "detailed": {
            "format": "%(asctime)s [%(levelname)8s] %(name)s:%(lineno)d - %(funcName)s(): %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S"
        }
    }

    if enable_structured_logging:
        formatters["structured"] = {
            "()": StructuredFormatter,
            "datefmt": "%Y-%m-%d %H:%M:%S"
        }

    handlers = {
        "console": {
            "class": "logging.StreamHandler",
            "level": level,
            "formatter": "standard",
            "stream": sys.stdout
        }
    }

    if log_to_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "level": "DEBUG",
            "formatter": "detailed",
            "filename": log_file_path,
            "maxBytes": 1048576,  # 1MB
            "backupCount": 3
        }

        if enable_structured_logging:
            handlers["structured_file"] = {
                "class": "logging.handlers.RotatingFileHandler",
                "level": "DEBUG",
                "formatter": "structured",
                "filename": log_file_path.replace('.log', '_structured.log'),
                "maxBytes": 1048576,  # 1MB
                "backupCount": 3
            }

    app_handlers = ["console"]
    if log_to_file:
        app_handlers.extend(["file", "structured_file"] if enable_structured_logging else ["file"])

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": formatters,
        "handlers": handlers,
        "loggers": {
            "investor": {
                "level": level,
                "handlers": app_handlers,
                "propagate": False
            }
        }
    }


class StructuredFormatter(logging.Formatter):
    """
    Custom formatter that outputs structured JSON logs.

    One JSON object per line, carrying any ``extra`` fields of the call.
    """

    def format(self, record):
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "message": record.getMessage()
        }

        if record.exc_info:
            log_entry["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info)
            }

        extra = {
            key: value for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_ATTRS
        }
        if extra:
            log_entry["extra"] = extra

        return json.dumps(log_entry, default=str)


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger namespaced under ``investor``
    """
    if name == "investor" or name.startswith("investor."):
        return logging.getLogger(name)
    return logging.getLogger(f"investor.{name}")


# Convenience functions for common logging patterns

def log_valuation_result(logger: logging.Logger, ticker: str, intrinsic_value: Optional[float],
                         action: str, **kwargs):
    """Log valuation calculation results."""
    logger.debug(
        f"Valuation computed for {ticker}",
        extra={
            "operation": "valuation",
            "ticker": ticker,
            "intrinsic_value": intrinsic_value,
            "action": action,
            **kwargs
        }
    )


def log_watchlist_change(logger: logging.Logger, operation: str, ticker: Optional[str],
                         size: int, **kwargs):
    """Log a watchlist mutation."""
    logger.info(
        f"Watchlist {operation}{f' {ticker}' if ticker else ''} ({size} entries)",
        extra={
            "operation": f"watchlist_{operation}",
            "ticker": ticker,
            "watchlist_size": size,
            **kwargs
        }
    )
