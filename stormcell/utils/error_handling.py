"""
Error Handling Utilities for the storm animation

Provides consistent error handling across modules with:
1. Detailed error logging with context
2. Error categorization and severity levels
3. Stack trace preservation

USAGE:
    from stormcell.utils.error_handling import (
        handle_error,
        ErrorCategory,
        safe_execute,
    )

    # Context manager usage
    with safe_execute("polling input", ErrorCategory.INPUT):
        ...

    # Direct error handling
    try:
        screen.present()
    except curses.error as e:
        handle_error(e, "present", ErrorCategory.TERMINAL)
"""

import logging
import sys
import threading
import traceback
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


class StormError(Exception):
    """Base class for errors raised by the storm animation."""


class ConfigError(StormError):
    """Invalid animation configuration."""


class TerminalError(StormError):
    """The terminal cannot host the animation (no curses or a failed curses session)."""


class ErrorCategory(Enum):
    """Categories of errors for proper handling and reporting."""
    # Terminal/curses failures
    TERMINAL = "terminal"

    # Keyboard/resize polling
    INPUT = "input"

    # Frame drawing
    RENDER = "render"

    # Configuration errors
    CONFIG = "configuration"

    # Unknown/uncategorized
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """Severity levels for errors."""
    # Something unexpected but not critical
    WARNING = "warning"

    # Operation failed but the loop is stable
    ERROR = "error"

    # The animation must stop
    FATAL = "fatal"


@dataclass
class ErrorContext:
    """Detailed context information for an error."""
    error: Exception
    category: ErrorCategory
    severity: ErrorSeverity
    operation: str
    timestamp: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    thread_name: str = field(default_factory=lambda: threading.current_thread().name)
    stack_trace: str = ""
    additional_context: Dict[str, Any] = field(default_factory=dict)
    platform: str = field(default_factory=lambda: sys.platform)

    def __post_init__(self):
        if not self.stack_trace:
            self.stack_trace = traceback.format_exc()

    def format_log_message(self) -> str:
        """Format a detailed log message."""
        lines = [
            f"ERROR [{self.severity.value.upper()}] in {self.operation}",
            f"  Category: {self.category.value}",
            f"  Type: {type(self.error).__name__}",
            f"  Message: {self.error}",
            f"  Thread: {self.thread_name} ({self.platform})",
            f"  Time: {self.timestamp}",
        ]

        if self.additional_context:
            lines.append("  Context:")
            for key, value in self.additional_context.items():
                lines.append(f"    {key}: {value}")

        # format_exc() yields "NoneType: None" outside an except block
        if self.stack_trace.strip() and not self.stack_trace.startswith('NoneType'):
            lines.append("  Stack Trace:")
            for line in self.stack_trace.split('\n'):
                if line.strip():
                    lines.append(f"    {line}")

        return '\n'.join(lines)


def determine_severity(error: Exception, category: ErrorCategory) -> ErrorSeverity:
    """Determine the severity level for an error based on type and category."""
    if isinstance(error, (SystemExit, KeyboardInterrupt)):
        return ErrorSeverity.FATAL

    if isinstance(error, (ConfigError, TerminalError)):
        return ErrorSeverity.FATAL

    # A single bad poll or cell write should not stop the storm
    if category in (ErrorCategory.INPUT, ErrorCategory.RENDER):
        return ErrorSeverity.WARNING

    return ErrorSeverity.ERROR


_LOG_LEVELS = {
    ErrorSeverity.WARNING: logging.WARNING,
    ErrorSeverity.ERROR: logging.ERROR,
    ErrorSeverity.FATAL: logging.CRITICAL,
}


def handle_error(
    error: Exception,
    operation: str,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    severity: Optional[ErrorSeverity] = None,
    additional_context: Optional[Dict[str, Any]] = None,
    reraise: bool = False,
) -> ErrorContext:
    """
    Handle an error with logging.

    Args:
        error: The exception that occurred
        operation: Name of the operation that failed
        category: Category of the error
        severity: Severity level (auto-determined if not provided)
        additional_context: Additional context information
        reraise: Whether to re-raise the exception after handling

    Returns:
        ErrorContext with full error details
    """
    if severity is None:
        severity = determine_severity(error, category)

    context = ErrorContext(
        error=error,
        category=category,
        severity=severity,
        operation=operation,
        additional_context=additional_context or {},
    )

    logger.log(_LOG_LEVELS.get(severity, logging.ERROR), context.format_log_message())

    if reraise:
        raise error

    return context


@contextmanager
def safe_execute(
    operation: str,
    category: ErrorCategory = ErrorCategory.UNKNOWN,
    reraise: bool = False,
    additional_context: Optional[Dict[str, Any]] = None,
):
    """
    Context manager for safe execution with error handling.

    Usage:
        with safe_execute("polling input", ErrorCategory.INPUT) as result:
            result.value = screen.poll_event(0.05)
        if result.success:
            ...
    """
    class Result:
        def __init__(self):
            self.value = None
            self.error: Optional[ErrorContext] = None
            self.success = True

    result = Result()

    try:
        yield result
    except Exception as e:
        result.success = False
        result.error = handle_error(
            e,
            operation,
            category=category,
            additional_context=additional_context,
            reraise=reraise,
        )
