"""
Custom exception classes for the investor watchlist application.

This module defines specific exceptions that provide better error handling
and debugging information than generic Exception catching.
"""

from typing import Any, Optional


class InvestorAppError(Exception):
    """Base exception for all investor application errors."""
    pass


class ValidationError(InvestorAppError):
    """Input validation failed."""

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Validation failed for {field}='{value}': {reason}")


class ConfigurationError(InvestorAppError):
    """Invalid configuration or setup error."""
    pass


class StorageError(InvestorAppError):
    """Durable storage could not be read or written."""

    def __init__(self, backend: str, key: str, message: str):
        self.backend = backend
        self.key = key
        super().__init__(f"{backend} storage failed for key '{key}': {message}")


class WatchlistError(InvestorAppError):
    """Base exception for watchlist operations."""
    pass


class WatchlistIndexError(WatchlistError, IndexError):
    """A watchlist position does not refer to an existing entry."""

    def __init__(self, index: int, size: int, operation: Optional[str] = None):
        self.index = index
        self.size = size
        self.operation = operation
        prefix = f"Cannot {operation}: " if operation else ""
        super().__init__(f"{prefix}index {index} out of range for watchlist of {size} entries")


# Convenience functions for common error scenarios

def raise_unknown_field(name: str) -> None:
    """Raise a validation error for a field the input record does not have."""
    raise ValidationError("field", name, "unknown input field")
