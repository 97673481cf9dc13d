"""
Centralized error handling for the investor watchlist application.

Failures that must never reach the user (durable storage that cannot be read
or written) are routed through here: they are classified, logged with their
context and kept in a bounded history so the presentation layer can inspect
what went wrong without the running session being interrupted.
"""

import functools
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Dict, List, Optional

from ..config.logging_config import get_logger
from ..exceptions import (
    ConfigurationError,
    StorageError,
    ValidationError,
    WatchlistError,
)

logger = get_logger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels for categorization."""
    CRITICAL = "critical"     # System cannot continue
    HIGH = "high"            # Feature unavailable, but system continues
    MEDIUM = "medium"        # Degraded functionality
    LOW = "low"              # Minor issues, system works normally


class ErrorCategory(Enum):
    """Error categories for better organization."""
    PERSISTENCE = "persistence"        # Durable storage read/write
    VALIDATION = "validation"          # Input validation errors
    WATCHLIST = "watchlist"            # Watchlist state errors
    CONFIGURATION = "configuration"    # Setup/config issues
    SYSTEM = "system"                  # Anything else


@dataclass
class ErrorContext:
    """Context information for errors."""
    operation: Optional[str] = None
    ticker: Optional[str] = None
    storage_key: Optional[str] = None
    function_name: Optional[str] = None
    user_input: Optional[Dict[str, Any]] = None
    timestamp: datetime = field(default_factory=datetime.now)


@dataclass
class ErrorInfo:
    """Comprehensive error information."""
    error_id: str
    exception: Exception
    severity: ErrorSeverity
    category: ErrorCategory
    user_message: str
    technical_message: str
    context: ErrorContext

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for logging/reporting."""
        return {
            "error_id": self.error_id,
            "exception_type": type(self.exception).__name__,
            "exception_message": str(self.exception),
            "severity": self.severity.value,
            "category": self.category.value,
            "user_message": self.user_message,
            "technical_message": self.technical_message,
            "context": {
                "operation": self.context.operation,
                "ticker": self.context.ticker,
                "storage_key": self.context.storage_key,
                "function_name": self.context.function_name,
                "timestamp": self.context.timestamp.isoformat()
            }
        }


class ErrorHandler:
    """Classifies, logs and remembers handled errors."""

    def __init__(self, max_history_size: int = 200):
        self.error_count = 0
        self.error_history: List[ErrorInfo] = []
        self.max_history_size = max_history_size

    def handle_error(
        self,
        exception: Exception,
        context: Optional[ErrorContext] = None,
        custom_message: Optional[str] = None,
    ) -> ErrorInfo:
        """
        Handle an error without raising it.

        Args:
            exception: The exception that occurred
            context: Context information about when/where the error occurred
            custom_message: Custom user-friendly message

        Returns:
            ErrorInfo object with the error details
        """
        self.error_count += 1
        error_id = f"ERR_{self.error_count:06d}_{int(datetime.now().timestamp())}"
        context = context or ErrorContext()

        severity, category = self._analyze_error(exception)
        error_info = ErrorInfo(
            error_id=error_id,
            exception=exception,
            severity=severity,
            category=category,
            user_message=custom_message or self._generate_user_message(exception),
            technical_message=self._generate_technical_message(exception, context),
            context=context,
        )

        self._log_error(error_info)
        self._store_error_history(error_info)
        return error_info

    def _analyze_error(self, exception: Exception) -> tuple:
        """Analyze error to determine severity and category."""

        if isinstance(exception, (SystemError, MemoryError)):
            return ErrorSeverity.CRITICAL, ErrorCategory.SYSTEM
        if isinstance(exception, StorageError):
            return ErrorSeverity.MEDIUM, ErrorCategory.PERSISTENCE
        if isinstance(exception, (OSError, ValueError)):
            # Filesystem or decoding problems surfaced below the backend layer
            return ErrorSeverity.MEDIUM, ErrorCategory.PERSISTENCE
        if isinstance(exception, ValidationError):
            return ErrorSeverity.LOW, ErrorCategory.VALIDATION
        if isinstance(exception, WatchlistError):
            return ErrorSeverity.HIGH, ErrorCategory.WATCHLIST
        if isinstance(exception, ConfigurationError):
            return ErrorSeverity.HIGH, ErrorCategory.CONFIGURATION
        return ErrorSeverity.MEDIUM, ErrorCategory.SYSTEM

    def _generate_user_message(self, exception: Exception) -> str:
        """Generate user-friendly error message."""

        if isinstance(exception, StorageError):
            return "The watchlist could not be synchronised with local storage. Changes stay available for this session."
        if isinstance(exception, ValidationError):
            return f"Invalid input provided: {exception}."
        if isinstance(exception, WatchlistError):
            return f"Watchlist operation failed: {exception}."
        if isinstance(exception, ConfigurationError):
            return f"Configuration problem: {exception}."
        return f"An unexpected error occurred. Error details: {str(exception)[:100]}"

    def _generate_technical_message(self, exception: Exception, context: ErrorContext) -> str:
        """Generate technical error message for logging."""
        msg_parts = []

        if context.operation:
            msg_parts.append(f"Operation: {context.operation}")
        if context.ticker:
            msg_parts.append(f"Ticker: {context.ticker}")
        if context.storage_key:
            msg_parts.append(f"Key: {context.storage_key}")
        if context.function_name:
            msg_parts.append(f"Function: {context.function_name}")

        msg_parts.append(f"Exception: {type(exception).__name__}")
        msg_parts.append(f"Message: {str(exception)}")

        return " | ".join(msg_parts)

    def _log_error(self, error_info: ErrorInfo):
        """Log the error with appropriate level."""
        extra_data = error_info.to_dict()
        message = error_info.technical_message

        if error_info.severity == ErrorSeverity.CRITICAL:
            logger.critical(message, extra=extra_data)
        elif error_info.severity == ErrorSeverity.HIGH:
            logger.error(message, extra=extra_data)
        elif error_info.severity == ErrorSeverity.MEDIUM:
            logger.warning(message, extra=extra_data)
        else:
            logger.info(message, extra=extra_data)

    def _store_error_history(self, error_info: ErrorInfo):
        """Store error in history with size management."""
        self.error_history.append(error_info)

        if len(self.error_history) > self.max_history_size:
            self.error_history = self.error_history[-self.max_history_size:]

    @property
    def last_error(self) -> Optional[ErrorInfo]:
        return self.error_history[-1] if self.error_history else None

    def get_error_summary(self, hours: int = 24) -> Dict[str, Any]:
        """Get error summary for the specified time period."""
        cutoff_time = datetime.now() - timedelta(hours=hours)
        recent_errors = [
            err for err in self.error_history
            if err.context.timestamp > cutoff_time
        ]

        by_severity = {}
        by_category = {}
        for error in recent_errors:
            severity_key = error.severity.value
            by_severity[severity_key] = by_severity.get(severity_key, 0) + 1
            category_key = error.category.value
            by_category[category_key] = by_category.get(category_key, 0) + 1

        return {
            "time_period_hours": hours,
            "total_errors": len(recent_errors),
            "by_severity": by_severity,
            "by_category": by_category,
            "most_recent_errors": [err.to_dict() for err in recent_errors[-5:]]
        }

    def clear_history(self):
        """Clear error history."""
        self.error_history.clear()
        self.error_count = 0


# Global error handler instance
error_handler = ErrorHandler()


def handle_errors(
    custom_message: Optional[str] = None,
    default: Any = None,
    handler: Optional[ErrorHandler] = None,
):
    """
    Decorator that records any exception and returns ``default`` instead.

    Args:
        custom_message: Custom user-friendly error message
        default: Value returned when the wrapped call fails
        handler: Error handler to record with (module-wide one by default)
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as e:
                context = ErrorContext(
                    function_name=func.__name__,
                    user_input={"args": str(args)[:200], "kwargs": str(kwargs)[:200]}
                )
                (handler or error_handler).handle_error(
                    exception=e,
                    context=context,
                    custom_message=custom_message,
                )
                return default

        return wrapper
    return decorator


class ErrorHandlingContext:
    """Context manager for handling errors in code blocks."""

    def __init__(self, context: ErrorContext, reraise: bool = True,
                 handler: Optional[ErrorHandler] = None):
        self.context = context
        self.reraise = reraise
        self.handler = handler or error_handler
        self.error_info: Optional[ErrorInfo] = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is not None and issubclass(exc_type, Exception):
            self.error_info = self.handler.handle_error(
                exception=exc_val,
                context=self.context
            )

            if not self.reraise:
                return True  # Suppress the exception

        return False


# Convenience functions
def handle_error(exception: Exception, **kwargs) -> ErrorInfo:
    """Convenience function to handle a single error."""
    return error_handler.handle_error(exception, **kwargs)


def get_error_summary(hours: int = 24) -> Dict[str, Any]:
    """Convenience function to get error summary."""
    return error_handler.get_error_summary(hours)


def create_error_context(operation: str = None, ticker: str = None, **kwargs) -> ErrorContext:
    """Convenience function to create error context."""
    return ErrorContext(operation=operation, ticker=ticker, **kwargs)
