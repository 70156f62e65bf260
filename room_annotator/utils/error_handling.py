"""
Error Handling Utilities
This module defines the annotation editor's exception taxonomy and a small
system for recording handled, non-fatal conditions.

Programming errors (invariant violations, degenerate viewports) are raised and
propagate to the caller. Conditions the editor resolves by itself (a gesture
whose target vanished, a seed box clamped into the image) are recorded through
ErrorHandlingSystem so they stay observable without surfacing to the user.
"""

import logging
from typing import Dict, List, Optional, Any, Callable
from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime
from itertools import count

logger = logging.getLogger(__name__)


class AnnotationError(Exception):
    """Base class for all annotation editor errors."""


class InvariantViolationError(AnnotationError, ValueError):
    """A rectangle failed the containment invariant when written to the store."""


class DegenerateViewportError(AnnotationError):
    """Coordinate conversion was requested before a usable viewport existed."""


class AnnotationNotFoundError(AnnotationError, KeyError):
    """No annotation with the requested id exists in the store."""

    def __str__(self):
        # KeyError quotes its argument; keep the plain message instead
        return str(self.args[0]) if self.args else ""


class InvalidLabelError(AnnotationError, ValueError):
    """A label assignment was empty or not a string."""


class SessionClosedError(AnnotationError):
    """The editing session was finalized and no longer accepts mutations."""


class SeedFormatError(AnnotationError, ValueError):
    """A seed entry could not be interpreted."""


class ErrorSeverity(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class ErrorCategory(Enum):
    """Categories of handled conditions."""
    GESTURE = "gesture"          # Gesture cancelled or discarded
    STALE_TARGET = "stale_target"  # Gesture target removed mid-flight
    VIEWPORT = "viewport"        # Viewport changed or unusable
    SEED = "seed"                # Seed data adjusted or skipped
    CALLBACK = "callback"        # Listener raised while being notified


@dataclass
class ErrorContext:
    """Context information for a recorded condition."""
    component: str
    operation: str
    additional_data: Optional[Dict[str, Any]] = None


@dataclass
class ErrorRecord:
    """Record of a handled condition."""
    error_id: str
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    context: Optional[ErrorContext]
    timestamp: datetime = field(default_factory=datetime.now)
    original_exception: Optional[BaseException] = None


class ErrorHandlingSystem:
    """
    Records handled conditions with a bounded history and per-category
    statistics. It logs every record and notifies registered handlers, but it
    never re-raises: callers use it only for conditions they already resolved.
    """

    _SEVERITY_LOG_LEVELS = {
        ErrorSeverity.INFO: logging.INFO,
        ErrorSeverity.WARNING: logging.WARNING,
        ErrorSeverity.ERROR: logging.ERROR,
    }

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        """
        Initialize the error handling system.

        Args:
            config: Configuration dictionary, reads ``max_error_history``
        """
        self.config = config or {}
        self.max_history_size = self.config.get('max_error_history', 100)

        self.error_history: List[ErrorRecord] = []
        self.error_statistics: Dict[str, Any] = self._empty_statistics()
        self.error_handlers: Dict[ErrorCategory, List[Callable]] = {
            category: [] for category in ErrorCategory
        }
        self._ids = count(1)

    @staticmethod
    def _empty_statistics() -> Dict[str, Any]:
        return {
            'total_errors': 0,
            'by_category': {},
            'by_severity': {},
            'by_component': {},
        }

    def record(self, category: ErrorCategory, message: str,
               context: Optional[ErrorContext] = None,
               severity: ErrorSeverity = ErrorSeverity.WARNING,
               exception: Optional[BaseException] = None) -> ErrorRecord:
        """
        Record a handled condition.

        Args:
            category: Category of the condition
            message: Human-readable description
            context: Component and operation where it happened
            severity: Severity used for logging and statistics
            exception: Exception that triggered the condition, if any

        Returns:
            The stored ErrorRecord
        """
        error_record = ErrorRecord(
            error_id=f"{category.value.upper()}_{next(self._ids)}",
            category=category,
            severity=severity,
            message=message,
            context=context,
            original_exception=exception,
        )
        self._store_error(error_record)
        self._log_error(error_record)
        self._trigger_error_handlers(error_record)
        return error_record

    def _store_error(self, error_record: ErrorRecord):
        """Store error record in history."""
        self.error_history.append(error_record)
        if len(self.error_history) > self.max_history_size:
            self.error_history.pop(0)

        stats = self.error_statistics
        stats['total_errors'] += 1
        category = error_record.category.value
        stats['by_category'][category] = stats['by_category'].get(category, 0) + 1
        severity = error_record.severity.value
        stats['by_severity'][severity] = stats['by_severity'].get(severity, 0) + 1
        if error_record.context:
            component = error_record.context.component
            stats['by_component'][component] = stats['by_component'].get(component, 0) + 1

    def _log_error(self, error_record: ErrorRecord):
        """Log error with appropriate level."""
        log_message = f"{error_record.error_id} [{error_record.category.value}] {error_record.message}"
        if error_record.context:
            log_message += (f" (Component: {error_record.context.component}, "
                            f"Operation: {error_record.context.operation})")
        logger.log(self._SEVERITY_LOG_LEVELS[error_record.severity], log_message)

    def _trigger_error_handlers(self, error_record: ErrorRecord):
        """Trigger error handlers for the error category."""
        for handler in self.error_handlers.get(error_record.category, []):
            try:
                handler(error_record)
            except Exception as e:
                logger.error(f"Error in error handler: {e}")

    def add_error_handler(self, category: ErrorCategory, handler: Callable):
        """Add an error handler for a specific category."""
        self.error_handlers[category].append(handler)

    def get_error_history(self, limit: Optional[int] = None,
                          category: Optional[ErrorCategory] = None) -> List[ErrorRecord]:
        """
        Get error history with optional filtering.

        Args:
            limit: Maximum number of records to return (most recent last)
            category: Filter by error category

        Returns:
            Filtered list of error records
        """
        errors = list(self.error_history)
        if category:
            errors = [e for e in errors if e.category == category]
        if limit:
            errors = errors[-limit:]
        return errors

    def get_error_statistics(self) -> Dict[str, Any]:
        """Get a copy of the error statistics."""
        return {
            key: dict(value) if isinstance(value, dict) else value
            for key, value in self.error_statistics.items()
        }

    def clear_error_history(self):
        """Clear error history and statistics."""
        self.error_history = []
        self.error_statistics = self._empty_statistics()
        logger.info("Error history cleared")
