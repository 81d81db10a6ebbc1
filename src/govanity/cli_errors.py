#!/usr/bin/env python3
"""Centralized error handling for CLI operations"""

from typing import Optional, Callable, Any, TypeVar
from functools import wraps
import sys
import logging

import httpx

from .errors import ConfigError, DNSError, NotFound, ResolutionError

logger = logging.getLogger(__name__)

# Type variable for decorator
F = TypeVar("F", bound=Callable[..., Any])


class CLIError(Exception):
    """Base exception for CLI operations."""

    exit_code = 1

    def __init__(self, message: str, context: Optional[str] = None):
        self.message = message
        self.context = context
        super().__init__(message)


class NetworkError(CLIError):
    """Network operation error."""

    exit_code = 5


def format_error_message(
    error: BaseException, context: Optional[str] = None, include_traceback: bool = False
) -> str:
    """
    Format error message for user display.

    Args:
        error: Exception that occurred
        context: Additional context about operation
        include_traceback: Whether to include full traceback

    Returns:
        Formatted error message string
    """
    error_types = {
        ConfigError: "Invalid configuration",
        DNSError: "DNS lookup failed",
        NotFound: "No go-import records",
        NetworkError: "Network error",
        ValueError: "Invalid value",
        PermissionError: "Permission denied",
        TimeoutError: "Operation timeout",
        ConnectionError: "Connection failed",
        KeyboardInterrupt: "Operation cancelled",
    }

    error_name = error_types.get(type(error), type(error).__name__)

    if context:
        message = f"❌ {context}: {error_name}"
    else:
        message = f"❌ {error_name}"

    if str(error):
        message += f" - {str(error)}"

    if include_traceback:
        import traceback

        message += f"\n{traceback.format_exc()}"

    return message


def handle_cli_errors(
    context: str = "", exit_on_keyboard_interrupt: bool = True
) -> Callable[[F], F]:
    """
    Decorator to handle CLI errors automatically.

    Args:
        context: Context string for error messages
        exit_on_keyboard_interrupt: Exit on Ctrl+C (vs re-raise)

    Returns:
        Decorated function
    """

    def decorator(func: F) -> F:
        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except KeyboardInterrupt:
                if exit_on_keyboard_interrupt:
                    print("\n⚠️  Operation cancelled by user", file=sys.stderr)
                    sys.exit(130)  # Standard SIGINT exit code
                else:
                    raise
            except CLIError as e:
                message = format_error_message(e, context or e.context)
                print(message, file=sys.stderr)
                sys.exit(e.exit_code)
            except ConfigError as e:
                message = format_error_message(e, context or "Configuration")
                print(message, file=sys.stderr)
                sys.exit(3)
            except ResolutionError as e:
                message = format_error_message(e, context or f"Lookup {e.hostname}")
                print(message, file=sys.stderr)
                sys.exit(4)
            except (TimeoutError, ConnectionError, httpx.HTTPError) as e:
                op_context = context or "Network operation"
                message = format_error_message(e, op_context)
                print(message, file=sys.stderr)
                sys.exit(5)
            except (FileNotFoundError, PermissionError) as e:
                op_context = context or "File operation"
                message = format_error_message(e, op_context)
                print(message, file=sys.stderr)
                sys.exit(2)
            except ValueError as e:
                op_context = context or "Validation"
                message = format_error_message(e, op_context)
                print(message, file=sys.stderr)
                sys.exit(4)
            except Exception as e:
                op_context = context or "Operation"
                message = format_error_message(e, op_context, include_traceback=True)
                print(message, file=sys.stderr)
                sys.exit(1)

        return wrapper  # type: ignore

    return decorator
