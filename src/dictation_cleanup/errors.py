"""Error types for dictation-cleanup.

Provides a small exception hierarchy with:
- Error categories for handling decisions
- Context dictionaries attached to errors
- Display formatting for the CLI

Nothing in the correction pipeline lets these escape to the caller; they
are raised at the seams (pattern compilation, persistence, index checks)
and recovered locally where the pipeline demands it.
"""

from __future__ import annotations

from enum import Enum


class ErrorCategory(str, Enum):
    """Categories of errors for handling decisions."""

    VALIDATION = "validation"  # Bad input or rule - skip it
    CONFIGURATION = "configuration"  # Bad settings file - don't retry
    STORAGE = "storage"  # Settings store unreadable/unwritable
    INTERNAL = "internal"  # Bug in code


class DictationCleanupError(Exception):
    """Base exception for dictation-cleanup errors.

    Attributes:
        message: Human-readable error message
        category: Error category for handling
        context: Additional context information
        recoverable: Whether the error is recoverable
    """

    category: ErrorCategory = ErrorCategory.INTERNAL

    def __init__(
        self,
        message: str,
        context: dict | None = None,
        recoverable: bool = False,
    ):
        super().__init__(message)
        self.message = message
        self.context = context or {}
        self.recoverable = recoverable

    def __str__(self) -> str:
        if self.context:
            return f"{self.message} (context: {self.context})"
        return self.message


class MalformedRuleError(DictationCleanupError):
    """A correction rule or dictionary entry could not be compiled.

    Recovered by skipping the single rule or entry.
    """

    category = ErrorCategory.VALIDATION

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=True)


class SampleIndexError(DictationCleanupError, IndexError):
    """Dictionary sample index out of range.

    Raised by ``DictionaryStore.remove_sample``; callers must handle it.
    """

    category = ErrorCategory.VALIDATION

    def __init__(self, index: int, size: int):
        super().__init__(
            f"Sample index {index} out of range",
            context={"index": index, "size": size},
            recoverable=False,
        )
        self.index = index
        self.size = size


class PersistenceError(DictationCleanupError):
    """Settings store could not be read or written."""

    category = ErrorCategory.STORAGE

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=True)


class ConfigurationError(DictationCleanupError):
    """Configuration error.

    Examples: unreadable config.json, out-of-range setting.
    """

    category = ErrorCategory.CONFIGURATION

    def __init__(self, message: str, context: dict | None = None):
        super().__init__(message, context, recoverable=False)


def format_error_for_display(error: Exception) -> str:
    """Format an error message for user display.

    Args:
        error: Error to format

    Returns:
        Human-readable error message
    """
    if isinstance(error, DictationCleanupError):
        category = error.category.value
        base_message = error.message

        if error.context:
            context_str = ", ".join(f"{k}={v}" for k, v in error.context.items())
            return f"[{category}] {base_message} ({context_str})"

        return f"[{category}] {base_message}"

    return f"[error] {type(error).__name__}: {error}"
