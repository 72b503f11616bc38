"""Top-level package for safedate.

``SafeInstant`` is the public entry point: an immutable date/time value that
raises :class:`DateTimeError` instead of returning the ``False`` sentinel the
native layer uses for some failures.
"""

from .core.errors import DateTimeError
from .native import Interval, NativeDateTime, NativeDateTimeError, NativeMutableDateTime
from .safe import SafeInstant

__all__ = [
    "DateTimeError",
    "Interval",
    "NativeDateTime",
    "NativeDateTimeError",
    "NativeMutableDateTime",
    "SafeInstant",
]
