"""
Error handling for the investor watchlist application.

Usage:
    from investor.error_handling import ErrorHandlingContext, create_error_context

    context = create_error_context(operation="load", storage_key="investor_watchlist")
    with ErrorHandlingContext(context, reraise=False) as error_ctx:
        payload = storage.get("investor_watchlist")
    if error_ctx.error_info:
        print(f"Error handled: {error_ctx.error_info.user_message}")
"""

from .error_manager import (
    ErrorCategory,
    ErrorContext,
    ErrorHandler,
    ErrorHandlingContext,
    ErrorInfo,
    ErrorSeverity,
    create_error_context,
    error_handler,
    get_error_summary,
    handle_error,
    handle_errors,
)

__all__ = [
    # Core classes
    'ErrorHandler', 'ErrorInfo', 'ErrorContext', 'ErrorSeverity', 'ErrorCategory',

    # Global instance
    'error_handler',

    # Core functions
    'handle_error', 'get_error_summary', 'create_error_context',

    # Decorators and context managers
    'handle_errors', 'ErrorHandlingContext',
]
