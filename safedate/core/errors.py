"""Error hierarchy shared by the safedate subsystems.

Only failures detected by safedate itself live here. Exceptions raised by the
native layer (``NativeDateTimeError``, ``OverflowError``) are deliberately not
part of this hierarchy and reach callers untouched.
"""
from __future__ import annotations

from .diagnostics import last_error


class CoreError(Exception):
    """Base class for all custom exceptions in the package."""


class ConfigurationError(CoreError):
    """Raised when configuration files are missing or invalid."""


class DateTimeError(CoreError):
    """Raised when a native date/time operation reports failure via ``False``."""

    def __init__(self, message: str, operation: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.operation = operation

    @classmethod
    def from_last_error(cls) -> "DateTimeError":
        """Build the error from the calling thread's most recent diagnostic."""

        diagnostic = last_error()
        if diagnostic is None:
            return cls("An error occurred")
        return cls(diagnostic.message, diagnostic.operation)
