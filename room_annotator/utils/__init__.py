"""
Utilities Package for the Annotation Editor
This package provides the exception taxonomy and handled-condition recording.
"""

from .error_handling import (
    AnnotationError,
    InvariantViolationError,
    DegenerateViewportError,
    AnnotationNotFoundError,
    InvalidLabelError,
    SessionClosedError,
    SeedFormatError,
    ErrorHandlingSystem,
    ErrorSeverity,
    ErrorCategory,
    ErrorContext,
    ErrorRecord,
)

__all__ = [
    # Exceptions
    'AnnotationError',
    'InvariantViolationError',
    'DegenerateViewportError',
    'AnnotationNotFoundError',
    'InvalidLabelError',
    'SessionClosedError',
    'SeedFormatError',

    # Error Handling
    'ErrorHandlingSystem',
    'ErrorSeverity',
    'ErrorCategory',
    'ErrorContext',
    'ErrorRecord',
]
